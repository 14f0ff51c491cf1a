"""Protocol definitions for the API client and state listeners."""

from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Callable, Protocol, Sequence

from .models import HistoryPage, Technician, TechnicianUpdate

if TYPE_CHECKING:
    from ..state import StateChange


StateListener = Callable[["StateChange"], Awaitable[None] | None]


class TechnicianApi(Protocol):
    """Minimal contract for components that talk to the Tech Tracker API."""

    async def fetch_technicians(self) -> list[Technician]:
        """Return the current status of every technician, in server order."""
        ...

    async def update_technicians(self, updates: Sequence[TechnicianUpdate]) -> None:
        """Submit a batch of status updates."""
        ...

    async def fetch_history(self, page: int = 1) -> HistoryPage:
        """Return one page of the status change log."""
        ...

    async def aclose(self) -> None:
        """Close any underlying resources."""
        ...
