"""Shared family fixtures."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from kinship_engine.graph import InMemoryGraphFetcher

FAMILY = {
    "persons": [
        {"id": "p_ali", "name": "Ali", "gender": "male"},
        {"id": "p_omar", "name": "Omar", "gender": "ذكر"},
        {"id": "p_fatima", "name": "Fatima", "gender": "أنثى"},
        {"id": "p_sara", "name": "Sara", "gender": "female"},
        {"id": "p_hassan", "name": "Hassan", "gender": "male"},
        {"id": "p_zainab", "name": "Zainab", "gender": "female"},
        {"id": "p_layla", "name": "Layla", "gender": "female"},
        {"id": "p_ali2", "name": "Ali", "gender": "male"},
        {"id": "p_khaled", "name": "Khaled", "gender": "male"},
        {"id": "p_ali3", "name": "Ali", "gender": "male"},
        {"id": "p_omar2", "name": "Omar", "gender": "male"},
        {"id": "p_huda", "name": "Huda", "gender": "female"},
    ],
    "relationships": [
        {"from": "p_ali", "to": "p_omar", "type": "CHILD_OF"},
        {"from": "p_ali", "to": "p_fatima", "type": "CHILD_OF"},
        {"from": "p_omar", "to": "p_fatima", "type": "MARRIED_TO"},
        {"from": "p_ali", "to": "p_sara", "type": "MARRIED_TO"},
        {"from": "p_hassan", "to": "p_ali", "type": "CHILD_OF"},
        {"from": "p_hassan", "to": "p_sara", "type": "CHILD_OF"},
        {"from": "p_zainab", "to": "p_ali", "type": "CHILD_OF"},
        {"from": "p_zainab", "to": "p_sara", "type": "CHILD_OF"},
        {"from": "p_layla", "to": "p_omar", "type": "CHILD_OF"},
        {"from": "p_ali", "to": "p_layla", "type": "SIBLING_WITH"},
        {"from": "p_ali2", "to": "p_khaled", "type": "CHILD_OF"},
        {"from": "p_ali3", "to": "p_omar2", "type": "CHILD_OF"},
        {"from": "p_ali3", "to": "p_huda", "type": "CHILD_OF"},
    ],
}


@pytest.fixture
def family_data() -> dict:
    return json.loads(json.dumps(FAMILY))


@pytest.fixture
def fetcher(family_data) -> InMemoryGraphFetcher:
    return InMemoryGraphFetcher.from_dict(family_data)


@pytest.fixture
def family_file(tmp_path: Path, family_data) -> Path:
    path = tmp_path / "family.json"
    path.write_text(json.dumps(family_data, ensure_ascii=False), encoding="utf-8")
    return path
