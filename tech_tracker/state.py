"""Observable client state shared with the presentation layer."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional, Sequence

from .core import PageMetadata, StateListener, Technician, TechnicianHistoryEntry

LOGGER = logging.getLogger(__name__)


class StateSignal(str, Enum):
    TECHNICIANS = "technicians"
    HISTORY = "history"
    PAGINATION = "pagination"


@dataclass(slots=True, frozen=True)
class StateChange:
    """Notification delivered to listeners.

    ``error`` is set when the request behind ``signal`` failed; in that case
    the corresponding data was left untouched.
    """

    signal: StateSignal
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ClientState:
    """Holds the latest successfully fetched data.

    Every field is replaced wholesale; nothing is merged. Mutation happens on
    the event loop only, so listeners always observe a consistent snapshot.
    """

    def __init__(self) -> None:
        self.technicians: list[Technician] = []
        self.history: list[TechnicianHistoryEntry] = []
        self.current_page = 1
        self.total_pages = 1
        self.last_error: Optional[BaseException] = None
        self._listeners: list[StateListener] = []
        self._pending: set[asyncio.Task[None]] = set()

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener and return a callable that removes it."""

        if listener in self._listeners:
            raise ValueError("Listener already registered")
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def replace_technicians(self, technicians: Sequence[Technician]) -> None:
        self.technicians = list(technicians)
        self.last_error = None
        self._publish(StateChange(StateSignal.TECHNICIANS))

    def replace_history(
        self, entries: Sequence[TechnicianHistoryEntry], meta: PageMetadata
    ) -> None:
        # Server metadata is authoritative; clamp only degenerate values (e.g. an
        # empty log reporting zero pages) to keep 1 <= current_page <= total_pages.
        self.history = list(entries)
        self.total_pages = max(meta.total_pages, 1)
        self.current_page = min(max(meta.current_page, 1), self.total_pages)
        self.last_error = None
        self._publish(StateChange(StateSignal.HISTORY))
        self._publish(StateChange(StateSignal.PAGINATION))

    def set_current_page(self, page: int) -> None:
        self.current_page = page
        self._publish(StateChange(StateSignal.PAGINATION))

    def report_failure(self, signal: StateSignal, error: BaseException) -> None:
        self.last_error = error
        self._publish(StateChange(signal, error=error))

    @property
    def has_next_page(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_previous_page(self) -> bool:
        return self.current_page > 1

    async def drain(self) -> None:
        """Wait for asynchronous listeners scheduled so far."""

        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def _publish(self, change: StateChange) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(change)
            except Exception:
                LOGGER.exception("State listener failed for %s", change.signal.value)
                continue
            if asyncio.iscoroutine(result):
                task = asyncio.ensure_future(self._await_listener(result, change))
                self._pending.add(task)
                task.add_done_callback(self._pending.discard)

    @staticmethod
    async def _await_listener(result: Awaitable[None], change: StateChange) -> None:
        try:
            await result
        except Exception:
            LOGGER.exception("State listener failed for %s", change.signal.value)
