"""Shared test fixtures for marathon pronoun statistics."""

from typing import Any, Dict, List, Optional

import httpx
import pytest

from marathon_pronouns.models.enums import Platform
from marathon_pronouns.models.runner import Runner
from marathon_pronouns.resolution.cache import TTLCache


class FakeAPI:
    """Routes requests by URL (query string ignored); unknown URLs answer 404."""

    def __init__(self):
        self.routes: Dict[str, Dict[str, Any]] = {}
        self.calls: List[str] = []

    def add(
        self,
        url: str,
        json: Any = None,
        status: int = 200,
        error: Optional[Exception] = None,
    ) -> None:
        self.routes[url] = {"json": json, "status": status, "error": error}

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url).split("?")[0]
        self.calls.append(url)
        route = self.routes.get(url)
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        if route["error"] is not None:
            raise route["error"]
        return httpx.Response(route["status"], json=route["json"])

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def count(self, prefix: str) -> int:
        return sum(1 for call in self.calls if call.startswith(prefix))


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def fake_api() -> FakeAPI:
    return FakeAPI()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> TTLCache:
    return TTLCache(ttl_seconds=3600, clock=clock)


@pytest.fixture
def oengus_payload() -> Dict[str, Any]:
    return {
        "marathon": {"id": "gdq", "name": "Great Demo Quest"},
        "submissions": [
            {
                "user": {
                    "username": "alice",
                    "pronouns": "she/her",
                    "connections": [{"platform": "TWITCH", "username": "alice_tv"}],
                }
            },
            {
                "user": {
                    "username": "bob",
                    "pronouns": None,
                    "connections": [
                        {"platform": "SPEEDRUNCOM", "username": "bob_src"},
                        {"platform": "TWITCH", "username": "bobtwitch"},
                        {"platform": "DISCORD", "username": "bob#1"},
                    ],
                }
            },
            {"user": {"username": "carol", "pronouns": "they/them", "connections": []}},
        ],
        "schedule": {
            "lines": [
                {"runners": [{"username": "alice"}]},
                {"runners": [{"username": "bob"}, {"username": "zed"}]},
            ]
        },
    }


@pytest.fixture
def horaro_payload() -> Dict[str, Any]:
    return {
        "schedule": {
            "name": "Horaro Summer Relay",
            "columns": ["Game", " Runner(s) ", "Category"],
            "items": [
                {"data": ["Game A", "dave, erin", "Any%"]},
                {"data": ["Game B", "dave", "100%"]},
                {"data": ["Game C", None, "Low%"]},
            ],
        }
    }


@pytest.fixture
def bob() -> Runner:
    return Runner(
        identifier="bob",
        external_handles={Platform.SPEEDRUNCOM: "bob_src", Platform.TWITCH: "bobtwitch"},
    )
