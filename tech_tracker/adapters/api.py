"""HTTP adapter for the Tech Tracker REST API."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Mapping, Optional, Sequence

import aiohttp

from .. import constants
from ..config import ApiConfig
from ..core import (
    DecodeError,
    HistoryPage,
    ProtocolError,
    Technician,
    TechnicianUpdate,
    TransportError,
    decode_history_page,
    decode_technicians,
    encode_update_batch,
)

LOGGER = logging.getLogger(__name__)


class TechTrackerClient:
    """Thin asynchronous client for the three Tech Tracker endpoints.

    Each call issues exactly one request. Failures are raised as
    :class:`TransportError`, :class:`ProtocolError` or :class:`DecodeError`
    and are never retried.
    """

    def __init__(
        self,
        config: ApiConfig,
        *,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        self.config = config
        self._base_url = self.config.base_url.rstrip("/")
        self._session: Optional[aiohttp.ClientSession] = session
        self._owns_session = session is None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def fetch_technicians(self) -> list[Technician]:
        payload = await self._get_json(constants.TECHNICIANS_PATH)
        technicians = decode_technicians(payload)
        LOGGER.debug("Fetched %d technicians", len(technicians))
        return technicians

    async def update_technicians(self, updates: Sequence[TechnicianUpdate]) -> None:
        """POST a batch of updates; the response body carries no state."""

        url = self._url(constants.UPDATE_TECHNICIANS_PATH)
        body = encode_update_batch(updates)
        session = await self._ensure_session()

        try:
            async with session.post(url, json=body, params=self._params()) as response:
                if not 200 <= response.status < 300:
                    detail = await response.text()
                    raise ProtocolError(
                        f"Update rejected with status {response.status}: {detail.strip()}",
                        status=response.status,
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            LOGGER.warning("Technician update failed (url=%s): %s", url, exc)
            raise TransportError(f"Update request failed: {exc}") from exc

        LOGGER.info("Submitted %d technician update(s)", len(body["technicians"]))

    async def fetch_history(self, page: int = 1) -> HistoryPage:
        payload = await self._get_json(constants.HISTORY_PATH, {"page": str(page)})
        history = decode_history_page(payload)
        LOGGER.debug(
            "Fetched history page %d/%d (%d entries)",
            history.meta.current_page,
            history.meta.total_pages,
            len(history.entries),
        )
        return history

    async def aclose(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "TechTrackerClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _get_json(
        self, path: str, extra_params: Optional[Mapping[str, str]] = None
    ) -> Any:
        url = self._url(path)
        session = await self._ensure_session()
        params = self._params()
        if extra_params:
            params.update(extra_params)

        try:
            async with session.get(url, params=params) as response:
                if not 200 <= response.status < 300:
                    raise ProtocolError(
                        f"GET {path} returned status {response.status}",
                        status=response.status,
                    )
                body = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            LOGGER.warning("Request to %s failed: %s", url, exc)
            raise TransportError(f"GET {path} failed: {exc}") from exc

        try:
            return json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DecodeError(f"GET {path} returned invalid JSON: {exc}") from exc

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _params(self) -> dict[str, str]:
        if self.config.api_key:
            return {"apikey": self.config.api_key}
        return {}

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            if self.config.request_timeout_seconds is None:
                self._session = aiohttp.ClientSession()
            else:
                timeout = aiohttp.ClientTimeout(
                    total=self.config.request_timeout_seconds
                )
                self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session
