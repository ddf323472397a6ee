"""
Session providers: the LIFF side of the registration view.

A provider answers: are we inside the LINE app, is the user logged in, who
is the user; and it can trigger the login redirect or close the view. The
view only talks to the `SessionProvider` protocol, so the host SDK can be
swapped for a stub in development and tests.
"""
from __future__ import annotations

import logging
from typing import Mapping, Optional, Protocol

import httpx

from liffapp.exceptions import AuthRequired, InitFailure
from liffapp.models import Profile

logger = logging.getLogger(__name__)

ACCESS_TOKEN_COOKIE = "liff_access_token"
LINE_UA_MARKER      = "Line/"


class SessionProvider(Protocol):
    async def init(self) -> None: ...

    async def is_in_client(self) -> bool: ...

    async def is_logged_in(self) -> bool: ...

    async def login(self) -> None: ...

    async def get_profile(self) -> Profile: ...

    async def close_window(self) -> None: ...


class StubSessionProvider:
    """
    Fixed identity, always "inside the app" and logged in.
    Records close_window() calls so callers can assert on them.
    """

    def __init__(self, user_id: str, display_name: str = "") -> None:
        self.profile       = Profile(id=user_id, display_name=display_name)
        self.close_calls   = 0
        self.login_calls   = 0

    async def init(self) -> None:
        return None

    async def is_in_client(self) -> bool:
        return True

    async def is_logged_in(self) -> bool:
        return True

    async def login(self) -> None:
        self.login_calls += 1

    async def get_profile(self) -> Profile:
        return self.profile

    async def close_window(self) -> None:
        self.close_calls += 1


class LineSessionProvider:
    """
    Server-side view of a LIFF session for one HTTP request.

    - in-client: the LINE in-app browser announces itself in User-Agent
    - logged in: the page forwarded a LIFF access token (Bearer header or
      `liff_access_token` cookie)
    - profile:   fetched from the LINE profile endpoint with that token

    login() and close_window() cannot act server-side; they raise flags the
    rendered page turns into liff.login() / liff.closeWindow() calls.
    """

    def __init__(
        self,
        *,
        liff_id: str,
        headers: Mapping[str, str],
        cookies: Mapping[str, str],
        http: httpx.AsyncClient,
        profile_url: str,
        timeout: float = 10.0,
    ) -> None:
        self._liff_id      = liff_id
        self._headers      = headers
        self._cookies      = cookies
        self._http         = http
        self._profile_url  = profile_url
        self._timeout      = timeout
        self.login_requested = False
        self.close_requested = False

    @property
    def access_token(self) -> Optional[str]:
        auth = self._headers.get("Authorization", "")
        if auth.lower().startswith("bearer "):
            token = auth[7:].strip()
            if token:
                return token
        return self._cookies.get(ACCESS_TOKEN_COOKIE) or None

    async def init(self) -> None:
        if not self._liff_id:
            raise InitFailure("LIFF_ID is not configured")

    async def is_in_client(self) -> bool:
        return LINE_UA_MARKER in self._headers.get("User-Agent", "")

    async def is_logged_in(self) -> bool:
        return self.access_token is not None

    async def login(self) -> None:
        self.login_requested = True

    async def get_profile(self) -> Profile:
        token = self.access_token
        if token is None:
            raise AuthRequired("no LIFF access token")
        try:
            res = await self._http.get(
                self._profile_url,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            raise InitFailure(f"profile request failed: {exc}") from exc

        if res.status_code == 401:
            # Expired or revoked token: send the user through login again
            logger.info("LIFF access token rejected by profile endpoint")
            raise AuthRequired("LIFF access token rejected")
        if res.status_code >= 400:
            raise InitFailure(f"profile request failed: HTTP {res.status_code}")

        try:
            return Profile.model_validate(res.json())
        except ValueError as exc:
            raise InitFailure(f"malformed profile response: {exc}") from exc

    async def close_window(self) -> None:
        self.close_requested = True
