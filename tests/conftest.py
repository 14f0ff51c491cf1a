import asyncio
import math
from datetime import datetime, timezone
from typing import Any, Optional

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from tech_tracker.adapters import TechTrackerClient
from tech_tracker.config import ApiConfig
from tech_tracker.core import format_timestamp

API_KEY = "secret"


def status_record(name: str, status: str, time: str = "2024-04-06T10:00:00.000Z") -> dict[str, str]:
    return {"name": name, "status": status, "time": time}


class FakeTechTrackerApi:
    """In-process stand-in for the Tech Tracker server."""

    api_key = API_KEY

    def __init__(self) -> None:
        self.technicians: list[dict[str, Any]] = [
            status_record("Alice", "In the Office", "2024-04-06T08:30:00.123Z"),
            status_record("Bob", "At desk", "2024-04-06T09:15:42.500Z"),
        ]
        self.history: list[dict[str, Any]] = [
            status_record(f"Tech {index}", "At desk", f"2024-04-05T10:{index:02d}:00.000Z")
            for index in range(5)
        ]
        self.per_page = 2
        self.requests: list[tuple[str, str, dict[str, str]]] = []
        self.update_bodies: list[Any] = []
        self.fail_status: dict[str, int] = {}
        self.raw_bodies: dict[str, str | bytes] = {}
        self.history_delays: dict[int, float] = {}

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/api/technicians", self._technicians)
        app.router.add_post("/api/update_technicians", self._update)
        app.router.add_get("/api/history", self._history)
        return app

    def _check(self, request: web.Request) -> Optional[web.Response]:
        self.requests.append((request.method, request.path, dict(request.query)))
        if request.query.get("apikey") != API_KEY:
            return web.json_response({"error": "invalid api key"}, status=401)
        status = self.fail_status.get(request.path)
        if status is not None:
            return web.Response(status=status, text="server error")
        raw = self.raw_bodies.get(request.path)
        if raw is not None:
            if isinstance(raw, bytes):
                return web.Response(
                    body=raw, content_type="application/json", charset="utf-8"
                )
            return web.Response(text=raw, content_type="application/json")
        return None

    async def _technicians(self, request: web.Request) -> web.Response:
        failure = self._check(request)
        if failure is not None:
            return failure
        return web.json_response(self.technicians)

    async def _update(self, request: web.Request) -> web.Response:
        failure = self._check(request)
        if failure is not None:
            return failure
        body = await request.json()
        self.update_bodies.append(body)
        now = format_timestamp(datetime.now(timezone.utc))
        for update in body["technicians"]:
            record = status_record(update["name"], update["status"], now)
            self.technicians = [
                item for item in self.technicians if item["name"] != update["name"]
            ] + [record]
            self.history.insert(0, record)
        return web.json_response({"message": "Technicians updated"})

    async def _history(self, request: web.Request) -> web.Response:
        failure = self._check(request)
        if failure is not None:
            return failure
        page = int(request.query.get("page", "1"))
        delay = self.history_delays.get(page)
        if delay:
            await asyncio.sleep(delay)
        total_pages = max(1, math.ceil(len(self.history) / self.per_page))
        start = (page - 1) * self.per_page
        return web.json_response(
            {
                "data": self.history[start : start + self.per_page],
                "meta": {
                    "current_page": page,
                    "per_page": self.per_page,
                    "total_pages": total_pages,
                    "total_count": len(self.history),
                },
            }
        )


@pytest.fixture
def fake_api() -> FakeTechTrackerApi:
    return FakeTechTrackerApi()


@pytest_asyncio.fixture
async def api_server(fake_api: FakeTechTrackerApi):
    async with TestServer(fake_api.build_app()) as server:
        yield server


@pytest_asyncio.fixture
async def api_client(api_server):
    client = TechTrackerClient(
        ApiConfig(base_url=str(api_server.make_url("/")), api_key=API_KEY)
    )
    try:
        yield client
    finally:
        await client.aclose()
