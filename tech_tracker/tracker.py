"""Technician list, status update and history pagination operations."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine, Optional

from .core import TechnicianApi, TechnicianUpdate, TechTrackerError
from .state import ClientState, StateSignal

LOGGER = logging.getLogger(__name__)


class TechnicianTracker:
    """Drives the API client and publishes results into :class:`ClientState`.

    The scheduling methods (``fetch_technicians``, ``update_status``,
    ``fetch_history_page``, ``next_page``, ``previous_page``) return
    immediately with the spawned task. Requests are neither queued nor
    deduplicated; overlapping history fetches resolve last-write-wins unless
    ``discard_stale_responses`` is enabled, in which case only the most
    recently issued history request may update the state.

    Must be used from within a running event loop.
    """

    def __init__(
        self,
        client: TechnicianApi,
        state: Optional[ClientState] = None,
        *,
        discard_stale_responses: bool = False,
    ) -> None:
        self.client = client
        self.state = state or ClientState()
        self.discard_stale_responses = discard_stale_responses
        self._tasks: set[asyncio.Task[Any]] = set()
        self._history_sequence = 0

    # ------------------------------------------------------------------
    # Fire-and-forget entry points
    # ------------------------------------------------------------------
    def fetch_technicians(self) -> asyncio.Task[bool]:
        return self._spawn(self.refresh_technicians(), "fetch-technicians")

    def update_status(self, name: str, new_status: str) -> asyncio.Task[bool]:
        return self._spawn(self.submit_status(name, new_status), "update-status")

    def fetch_history_page(self, page: int = 1) -> asyncio.Task[bool]:
        return self._spawn(self.load_history_page(page), f"fetch-history-{page}")

    def next_page(self) -> Optional[asyncio.Task[bool]]:
        if not self.state.has_next_page:
            return None
        self.state.set_current_page(self.state.current_page + 1)
        return self.fetch_history_page(self.state.current_page)

    def previous_page(self) -> Optional[asyncio.Task[bool]]:
        if not self.state.has_previous_page:
            return None
        self.state.set_current_page(self.state.current_page - 1)
        return self.fetch_history_page(self.state.current_page)

    # ------------------------------------------------------------------
    # Awaitable operations
    # ------------------------------------------------------------------
    async def refresh_technicians(self) -> bool:
        """Replace the technician list with a fresh copy from the server."""

        try:
            technicians = await self.client.fetch_technicians()
        except TechTrackerError as exc:
            LOGGER.warning("Fetching technicians failed: %s", exc)
            self.state.report_failure(StateSignal.TECHNICIANS, exc)
            return False

        self.state.replace_technicians(technicians)
        return True

    async def submit_status(self, name: str, new_status: str) -> bool:
        """Send a single-entry update batch, then schedule a list refresh.

        The local technician list is not touched here; the refresh is the only
        way the change becomes visible. The server records the history entry.
        """

        try:
            await self.client.update_technicians([TechnicianUpdate(name, new_status)])
        except TechTrackerError as exc:
            LOGGER.warning("Updating %s failed: %s", name, exc)
            self.state.report_failure(StateSignal.TECHNICIANS, exc)
            return False

        LOGGER.info("Technician %s updated to %r", name, new_status)
        self.fetch_technicians()
        return True

    async def load_history_page(self, page: int = 1) -> bool:
        self._history_sequence += 1
        sequence = self._history_sequence

        try:
            history = await self.client.fetch_history(page)
        except TechTrackerError as exc:
            if self._is_stale(sequence):
                LOGGER.debug("Ignoring failure of superseded history request: %s", exc)
                return False
            LOGGER.warning("Fetching history page %d failed: %s", page, exc)
            self.state.report_failure(StateSignal.HISTORY, exc)
            return False

        if self._is_stale(sequence):
            LOGGER.debug(
                "Discarding stale history page %d (request %d, latest %d)",
                history.meta.current_page,
                sequence,
                self._history_sequence,
            )
            return False

        self.state.replace_history(history.entries, history.meta)
        return True

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def wait_idle(self) -> None:
        """Wait until every spawned request and listener has completed."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        await self.state.drain()

    async def aclose(self) -> None:
        await self.wait_idle()
        await self.client.aclose()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _is_stale(self, sequence: int) -> bool:
        return self.discard_stale_responses and sequence != self._history_sequence

    def _spawn(self, coro: Coroutine[Any, Any, bool], name: str) -> asyncio.Task[bool]:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.error("Task %s failed unexpectedly", task.get_name(), exc_info=exc)
