"""Interactive view lifecycle for a candidate's family graph.

A view renders once two independent events have both happened: the
canonical data is ready and the display surface is attached. They may
arrive in either order. The view owns at most one live render instance,
releases it before creating the next, and discards fetch results that
arrive after it was closed.
"""
from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

from .errors import FetchFailure, KinshipEngineError
from .logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from .graph.models import NeighborhoodPolicy, Person, RenderModel
    from .service import FamilyGraphService

logger = get_logger(__name__)


class RenderInstance(Protocol):
    """A live drawing created by the external visualizer."""

    def destroy(self) -> None:
        ...


class RenderSurface(Protocol):
    """Display surface the external visualizer draws on."""

    def create(self, model: RenderModel) -> RenderInstance:
        ...


class GateState(str, Enum):
    """Join state of the data-ready and view-attached inputs."""
    WAITING_BOTH = "waiting_both"
    WAITING_VIEW = "waiting_view"
    WAITING_DATA = "waiting_data"
    READY = "ready"


class ReadinessGate:
    """Two-input join that fires at most once per fetch cycle.

    ``reset`` starts a new cycle and forgets the data; an attached surface
    stays attached across cycles.
    """

    def __init__(self, on_ready: Callable[[RenderModel, RenderSurface], None]) -> None:
        self._on_ready = on_ready
        self._surface: RenderSurface | None = None
        self._model: RenderModel | None = None
        self._fired = False
        self._closed = False

    @property
    def state(self) -> GateState:
        if self._model is not None and self._surface is not None:
            return GateState.READY
        if self._model is not None:
            return GateState.WAITING_VIEW
        if self._surface is not None:
            return GateState.WAITING_DATA
        return GateState.WAITING_BOTH

    def view_attached(self, surface: RenderSurface) -> bool:
        self._surface = surface
        return self._maybe_fire()

    def data_ready(self, model: RenderModel) -> bool:
        if self._fired:
            return False
        self._model = model
        return self._maybe_fire()

    def reset(self) -> None:
        self._model = None
        self._fired = False

    def close(self) -> None:
        self._closed = True
        self._model = None
        self._surface = None

    def _maybe_fire(self) -> bool:
        if self._closed or self._fired or self.state is not GateState.READY:
            return False
        self._fired = True
        self._on_ready(self._model, self._surface)
        return True


class ViewStatus(str, Enum):
    """Display state reported to the UI."""
    LOADING = "loading"
    ERROR = "error"
    READY = "ready"
    CLOSED = "closed"


@dataclass
class ViewState:
    status: ViewStatus = ViewStatus.LOADING
    node_count: int = 0
    error: KinshipEngineError | None = None

    @property
    def message(self) -> str | None:
        return self.error.message if self.error else None

    @property
    def is_empty(self) -> bool:
        """Ready with no family data."""
        return self.status is ViewStatus.READY and self.node_count == 0


class FamilyTreeView:
    """One interactive family-graph view.

    Example:
        >>> view = FamilyTreeView(service)
        >>> view.attach(surface)
        >>> await view.open(candidate)
        >>> view.state.status
        <ViewStatus.READY: 'ready'>
        >>> await view.close()
    """

    def __init__(self, service: FamilyGraphService, policy: NeighborhoodPolicy | None = None) -> None:
        self.service = service
        self.policy = policy
        self.state = ViewState()
        self._gate = ReadinessGate(self._render)
        self._task: asyncio.Task[None] | None = None
        self._instance: RenderInstance | None = None
        self._closed = False

    @property
    def gate_state(self) -> GateState:
        return self._gate.state

    @property
    def render_instance(self) -> RenderInstance | None:
        return self._instance

    @property
    def closed(self) -> bool:
        return self._closed

    def attach(self, surface: RenderSurface) -> None:
        """The display surface is ready to draw on."""
        if self._closed:
            return
        self._gate.view_attached(surface)

    def open(self, candidate: Person) -> asyncio.Task[None]:
        """Start loading a candidate's family graph.

        Cancels any fetch still in flight for a previous candidate.
        """
        if self._closed:
            raise RuntimeError("view is closed")
        if self._task is not None and not self._task.done():
            self._task.cancel()

        self._gate.reset()
        self.state = ViewState(ViewStatus.LOADING)
        self._task = asyncio.create_task(self._load(candidate))
        return self._task

    async def _load(self, candidate: Person) -> None:
        try:
            resolved = await self.service.resolve(candidate, self.policy)
        except KinshipEngineError as e:
            self._fail(candidate, e)
            return
        except Exception as e:
            logger.exception("view_load_failed", candidate_id=candidate.id)
            self._fail(candidate, FetchFailure(str(e), cause=e, candidate_id=candidate.id))
            return

        if self._is_stale():
            logger.debug("stale_result_discarded", candidate_id=candidate.id)
            return

        self.state = ViewState(ViewStatus.READY, node_count=resolved.node_count)
        self._gate.data_ready(resolved.model)

    def _fail(self, candidate: Person, error: KinshipEngineError) -> None:
        if self._is_stale():
            return
        logger.info("view_load_error", candidate_id=candidate.id, kind=error.kind.value)
        self._release()
        self.state = ViewState(ViewStatus.ERROR, error=error)

    def _is_stale(self) -> bool:
        return self._closed or asyncio.current_task() is not self._task

    def _render(self, model: RenderModel, surface: RenderSurface) -> None:
        self._release()
        self._instance = surface.create(model)
        logger.debug("view_rendered", nodes=len(model.nodes), edges=len(model.edges))

    def _release(self) -> None:
        if self._instance is not None:
            instance, self._instance = self._instance, None
            instance.destroy()

    async def close(self) -> None:
        """Cancel pending work and release the render instance."""
        if self._closed:
            return
        self._closed = True
        self._gate.close()

        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        self._release()
        self.state = ViewState(ViewStatus.CLOSED)

    async def __aenter__(self) -> FamilyTreeView:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool:
        await self.close()
        return False
