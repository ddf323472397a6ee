"""
Rate-limiting middleware for the LIFF registration host.

Protects the Registration API against form-submit floods by limiting how
many requests a single client can send within a rolling time window.

Default: 30 requests per 60 seconds per client.
Clients over the limit get a 429 page until the window frees up.

Clients are identified by the peer address. X-Forwarded-For is only read
when the host runs behind `trusted_proxies` reverse proxies, and hops a
client could have written itself are never used as the key.
"""
from __future__ import annotations

import time
from collections import deque
from typing import Awaitable, Callable, Deque, Dict, List, Optional

from aiohttp import web

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]
Middleware = Callable[[web.Request, Handler], Awaitable[web.StreamResponse]]

THROTTLE_MESSAGE = "⏳ リクエストが多すぎます。しばらくしてからもう一度お試しください。"


def client_key(request: web.Request, trusted_proxies: int = 0) -> str:
    """
    Address of the client as seen by the outermost trusted proxy.

    The chain is every X-Forwarded-For hop followed by the peer address; the
    last `trusted_proxies` entries belong to our own proxies, so the client
    is the entry right before them.
    """
    remote = request.remote or "unknown"
    if trusted_proxies <= 0:
        return remote

    forwarded = request.headers.get("X-Forwarded-For", "")
    chain: List[str] = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
    chain.append(remote)
    if len(chain) > trusted_proxies:
        return chain[-(trusted_proxies + 1)]
    return chain[0]


class SlidingWindowLimiter:
    """
    Per-client sliding window.

    Parameters
    ----------
    rate   : maximum number of requests allowed per client per window
    period : window size in seconds
    """

    def __init__(self, rate: int = 30, period: float = 60.0) -> None:
        self.rate   = rate
        self.period = period
        # client key → deque of timestamps (most recent first)
        self._history: Dict[str, Deque[float]] = {}
        self._last_sweep = time.monotonic()

    def __len__(self) -> int:
        return len(self._history)

    def _evict(self, window: Deque[float], now: float) -> None:
        while window and now - window[-1] > self.period:
            window.pop()

    def sweep(self, now: Optional[float] = None) -> None:
        """Forget clients whose whole window has expired."""
        now = time.monotonic() if now is None else now
        for key in list(self._history):
            self._evict(self._history[key], now)
            if not self._history[key]:
                del self._history[key]
        self._last_sweep = now

    def hit(self, key: str, now: Optional[float] = None) -> bool:
        """Record a request for `key`; False when the client is over the limit."""
        now = time.monotonic() if now is None else now
        if now - self._last_sweep > self.period:
            self.sweep(now)

        window = self._history.setdefault(key, deque())
        self._evict(window, now)
        if len(window) >= self.rate:
            return False
        window.appendleft(now)
        return True


def rate_limit_middleware(
    limiter: SlidingWindowLimiter,
    trusted_proxies: int = 0,
) -> Middleware:
    @web.middleware
    async def middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
        if not limiter.hit(client_key(request, trusted_proxies)):
            return web.Response(
                status=429,
                text=THROTTLE_MESSAGE,
                headers={"Retry-After": str(int(limiter.period))},
            )
        return await handler(request)

    return middleware
