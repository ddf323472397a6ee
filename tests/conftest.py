"""
Shared pytest fixtures for the LIFF registration tests.

Sets required environment variables BEFORE any liffapp module is imported so
that pydantic-settings initialisation uses safe test values.
"""
from __future__ import annotations

import asyncio
import json
import os
from typing import AsyncGenerator, Callable, List, Optional

# ── Set env vars before any liffapp import ────────────────────────────────────
os.environ.setdefault("API_BASE_URL", "https://api.example.test/wp-json/line/v1/")
os.environ.setdefault("LIFF_ID", "1234567890-AbCdEfGh")

# ── Third-party ───────────────────────────────────────────────────────────────
import httpx
import pytest

# ── liffapp imports (safe after env vars are set) ─────────────────────────────
from liffapp.services.registration_api import RegistrationApiClient
from liffapp.services.session_service import StubSessionProvider

API_BASE = "https://api.example.test/wp-json/line/v1"

ResponseFactory = Callable[[httpx.Request], httpx.Response]


# ── Scripted Registration API ─────────────────────────────────────────────────

class FakeRegistrationApi:
    """
    httpx handler standing in for the Registration API.

    `user_response` / `register_response` build the reply for
    GET /user/{id} and POST /register; replace them per test. A factory may
    raise an httpx exception to simulate a transport failure.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.register_delay = 0.0
        self.user_response: ResponseFactory = lambda req: httpx.Response(
            200, json={"status": "not_registered"}
        )
        self.register_response: ResponseFactory = lambda req: httpx.Response(
            200, json={"status": "success"}
        )

    @property
    def register_calls(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == "POST" and r.url.path.endswith("/register")]

    @property
    def user_calls(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == "GET" and "/user/" in r.url.path]

    def last_payload(self) -> dict:
        return json.loads(self.register_calls[-1].content)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "GET" and "/user/" in path:
            return self.user_response(request)
        if request.method == "POST" and path.endswith("/register"):
            if self.register_delay:
                await asyncio.sleep(self.register_delay)
            return self.register_response(request)
        return httpx.Response(404, json={"message": "not found"})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_api() -> FakeRegistrationApi:
    return FakeRegistrationApi()


@pytest.fixture
async def api_client(fake_api: FakeRegistrationApi) -> AsyncGenerator[RegistrationApiClient, None]:
    """RegistrationApiClient wired to the fake API; closed on teardown."""
    client = httpx.AsyncClient(transport=fake_api.transport())
    try:
        yield RegistrationApiClient(API_BASE, timeout=5.0, client=client)
    finally:
        await client.aclose()


# ── Session helpers ───────────────────────────────────────────────────────────

class ScriptedSession(StubSessionProvider):
    """Stub provider whose environment answers can be switched per test."""

    def __init__(
        self,
        user_id: str = "U1234567890abcdef",
        display_name: str = "山田 太郎",
        *,
        in_client: bool = True,
        logged_in: bool = True,
        init_error: Optional[Exception] = None,
        profile_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(user_id, display_name)
        self.in_client     = in_client
        self.logged_in     = logged_in
        self.init_error    = init_error
        self.profile_error = profile_error
        self.profile_calls = 0

    async def init(self) -> None:
        if self.init_error:
            raise self.init_error

    async def is_in_client(self) -> bool:
        return self.in_client

    async def is_logged_in(self) -> bool:
        return self.logged_in

    async def get_profile(self):
        self.profile_calls += 1
        if self.profile_error:
            raise self.profile_error
        return self.profile


@pytest.fixture
def make_session():
    """Factory fixture: returns a callable that builds a ScriptedSession."""
    return ScriptedSession
