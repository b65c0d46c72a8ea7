"""CLI interface for the kinship engine."""

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import EngineConfig, load_config
from .errors import KinshipEngineError
from .graph import GraphFetcher, InMemoryGraphFetcher, Neo4jGraphFetcher, QueryIdentity
from .logging import configure_logging
from .service import FamilyGraphService, ResolvedNeighborhood

app = typer.Typer(
    name="kinship-engine",
    help="Identity matching and family graph resolution",
    add_completion=False,
)
console = Console()


def get_config() -> EngineConfig:
    """Load configuration from environment."""
    from dotenv import load_dotenv

    load_dotenv()
    config = load_config()
    configure_logging(config.log_level)
    return config


def get_fetcher(config: EngineConfig, fixture: Path | None) -> GraphFetcher:
    """Fixture store when a fixture file is given, Neo4j otherwise."""
    if fixture is not None:
        if not fixture.exists():
            console.print(f"[red]Error: Fixture not found: {fixture}[/red]")
            raise typer.Exit(1)
        return InMemoryGraphFetcher.from_json(fixture)
    return Neo4jGraphFetcher.from_config(config)


def _query(first_name: str, father: str | None, mother: str | None) -> QueryIdentity:
    return QueryIdentity(first_name=first_name, father_name=father, mother_name=mother)


def _run(coro):
    try:
        return asyncio.run(coro)
    except KinshipEngineError as e:
        console.print(f"[red]Error ({e.kind.value}): {e.message}[/red]")
        raise typer.Exit(1) from e


@app.command()
def search(
    first_name: str = typer.Argument(..., help="First name of the person to match"),
    father: str = typer.Option(None, "--father", "-f", help="Father's name"),
    mother: str = typer.Option(None, "--mother", "-m", help="Mother's name"),
    fixture: Path = typer.Option(None, "--fixture", help="Fixture JSON instead of Neo4j"),
    top_k: int = typer.Option(None, "--top-k", "-k", help="Maximum candidates"),
):
    """Rank registry candidates by parent-name concordance."""
    config = get_config()

    async def run():
        async with get_fetcher(config, fixture) as fetcher:
            service = FamilyGraphService.from_config(fetcher, config)
            return await service.search(_query(first_name, father, mother), top_k=top_k)

    ranked = _run(run())

    if not ranked:
        console.print(f"[yellow]No candidates named '{first_name}'[/yellow]")
        return

    table = Table(title=f"Candidates for '{first_name}'")
    table.add_column("#")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Score")
    table.add_column("Father")
    table.add_column("Mother")

    for i, (person, score) in enumerate(ranked, start=1):
        table.add_row(
            str(i),
            person.id or "",
            person.name or "",
            str(score.score),
            "[green]yes[/green]" if score.father_matched else "no",
            "[green]yes[/green]" if score.mother_matched else "no",
        )

    console.print(table)


@app.command()
def tree(
    first_name: str = typer.Argument(..., help="First name of the person to match"),
    father: str = typer.Option(None, "--father", "-f", help="Father's name"),
    mother: str = typer.Option(None, "--mother", "-m", help="Mother's name"),
    pick: int = typer.Option(1, "--pick", "-p", help="Rank of the candidate to expand"),
    fixture: Path = typer.Option(None, "--fixture", help="Fixture JSON instead of Neo4j"),
    json_out: Path = typer.Option(None, "--json", help="Write vis-network JSON here"),
    mermaid_out: Path = typer.Option(None, "--mermaid", help="Write a Mermaid flowchart here"),
):
    """Resolve and show the immediate family of a matched candidate."""
    from .export import export_mermaid, export_vis_json

    config = get_config()

    async def run():
        async with get_fetcher(config, fixture) as fetcher:
            service = FamilyGraphService.from_config(fetcher, config)
            ranked = await service.search(_query(first_name, father, mother), top_k=max(pick, config.top_k))
            if len(ranked) < pick or pick < 1:
                return None
            return await service.resolve(ranked[pick - 1][0])

    resolved = _run(run())

    if resolved is None:
        console.print(f"[yellow]No candidate #{pick} for '{first_name}'[/yellow]")
        raise typer.Exit(1)

    if json_out:
        export_vis_json(resolved.model, json_out)
        console.print(f"[green]vis-network JSON written to {json_out}[/green]")
    if mermaid_out:
        export_mermaid(resolved.graph, mermaid_out)
        console.print(f"[green]Mermaid written to {mermaid_out}[/green]")
    if not json_out and not mermaid_out:
        _display_family(resolved)


def _display_family(resolved: ResolvedNeighborhood):
    """Display a resolved neighborhood."""
    unit = resolved.graph.family_unit()
    if unit is None:
        console.print("[yellow]No family data[/yellow]")
        return

    console.print(Panel(f"[bold]{unit.focal_person.name}[/bold] ({unit.focal_person.id})", title="Family"))

    table = Table()
    table.add_column("Relation")
    table.add_column("Name")
    table.add_column("Id")

    rows = [("Father", unit.father), ("Mother", unit.mother)]
    rows += [("Spouse", p) for p in unit.spouses]
    rows += [("Child", p) for p in unit.children]
    rows += [("Sibling", p) for p in unit.siblings]
    for relation, person in rows:
        if person is not None:
            table.add_row(relation, person.name, person.id)

    console.print(table)
    console.print(f"[dim]{resolved.graph.node_count} people, {resolved.graph.edge_count} relationships[/dim]")


if __name__ == "__main__":
    app()
