"""
Registration API client (httpx).

Two operations against API_BASE_URL:

  GET  /user/{line_user_id}  → {"status": "registered", "user": {...}} | other
  POST /register             → {"status": "success"} | {"status": ..., "message": ...}

Every call carries an explicit timeout; expiry is reported like any other
transport failure.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from liffapp.exceptions import StatusCheckFailure, SubmitFailure
from liffapp.models import RegisteredUser

logger = logging.getLogger(__name__)

STATUS_REGISTERED = "registered"
STATUS_SUCCESS    = "success"


def _json_body(response: httpx.Response) -> Dict[str, Any]:
    """Decoded JSON object body, or {} for anything else."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _server_message(response: httpx.Response) -> Optional[str]:
    message = _json_body(response).get("message")
    return str(message) if message else None


class RegistrationApiClient:
    """
    Parameters
    ----------
    base_url : API base URL (trailing slash is ignored)
    timeout  : seconds per request
    client   : optional shared httpx.AsyncClient; when omitted the client
               creates and owns one
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base    = base_url.rstrip("/")
        self._timeout = timeout
        self._owns    = client is None
        self._client  = client or httpx.AsyncClient(timeout=timeout)

    async def __aenter__(self) -> "RegistrationApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns:
            await self._client.aclose()

    # ── Public API ────────────────────────────────────────────────────────────

    async def check_registration(self, line_user_id: str) -> Optional[RegisteredUser]:
        """
        Return the stored user record when the API reports it as registered,
        None for any other well-formed answer.

        Raises StatusCheckFailure on any request failure: transport errors,
        invalid URLs, a closed client, non-2xx statuses, undecodable bodies.
        """
        url = f"{self._base}/user/{quote(line_user_id, safe='')}"
        try:
            res = await self._client.get(url, timeout=self._timeout)
            res.raise_for_status()
            data = res.json()
        except Exception as exc:
            # Any failure of the request itself counts as "status unknown"
            raise StatusCheckFailure(str(exc) or exc.__class__.__name__) from exc

        if isinstance(data, dict) and data.get("status") == STATUS_REGISTERED:
            user = data.get("user")
            return user if isinstance(user, dict) else {}
        return None

    async def submit_registration(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST the registration payload and return the decoded response body.

        Raises SubmitFailure on any request failure; for non-2xx statuses it
        carries the server's `message` when the error body has one.
        """
        url = f"{self._base}/register"
        try:
            res = await self._client.post(url, json=payload, timeout=self._timeout)
            res.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise SubmitFailure(
                str(exc),
                server_message=_server_message(exc.response),
            ) from exc
        except httpx.TimeoutException as exc:
            raise SubmitFailure(str(exc) or "request timed out") from exc
        except Exception as exc:
            raise SubmitFailure(str(exc) or exc.__class__.__name__) from exc

        return _json_body(res)
