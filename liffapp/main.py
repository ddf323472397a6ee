"""
LIFF registration host: alumni sign-up form for the LINE in-app browser.
Entry point: creates the web app, registers routes + middleware, handles graceful shutdown.
"""
import asyncio
import logging
import signal
import sys
from typing import AsyncIterator, Callable, Optional

import httpx
from aiohttp import web

from liffapp.config import Settings, settings
from liffapp.handlers.web import (
    API_KEY,
    HTTP_CLIENT_KEY,
    INFLIGHT_KEY,
    SESSION_FACTORY_KEY,
    SETTINGS_KEY,
    SessionFactory,
    line_session_factory,
    routes,
)
from liffapp.middlewares import SlidingWindowLimiter, error_middleware, rate_limit_middleware
from liffapp.services.registration_api import RegistrationApiClient

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)


def _http_client_ctx(
    http_client: Optional[httpx.AsyncClient],
) -> Callable[[web.Application], AsyncIterator[None]]:
    """Shared httpx client for the LINE profile endpoint and the Registration API."""

    async def ctx(app: web.Application) -> AsyncIterator[None]:
        cfg    = app[SETTINGS_KEY]
        owned  = http_client is None
        client = http_client or httpx.AsyncClient(timeout=cfg.REQUEST_TIMEOUT)

        app[HTTP_CLIENT_KEY] = client
        app[API_KEY] = RegistrationApiClient(
            cfg.api_base_url,
            timeout=cfg.REQUEST_TIMEOUT,
            client=client,
        )
        yield
        if owned:
            await client.aclose()

    return ctx


def build_app(
    app_settings: Optional[Settings] = None,
    *,
    session_factory: Optional[SessionFactory] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> web.Application:
    cfg = app_settings or settings

    # ── Middlewares (error handler outermost) ───────────────────────────────
    app = web.Application(
        middlewares=[
            error_middleware,
            rate_limit_middleware(
                SlidingWindowLimiter(rate=cfg.RATE_LIMIT, period=cfg.RATE_PERIOD),
                trusted_proxies=cfg.TRUSTED_PROXIES,
            ),
        ]
    )

    app[SETTINGS_KEY]        = cfg
    app[SESSION_FACTORY_KEY] = session_factory or line_session_factory
    app[INFLIGHT_KEY]        = {}

    app.cleanup_ctx.append(_http_client_ctx(http_client))
    app.add_routes(routes)
    return app


async def main() -> None:
    logger.info("Starting LIFF registration host…")
    if not settings.LIFF_ID and not settings.ALLOW_STUB_SESSION:
        logger.warning("LIFF_ID is empty: every visitor will see the init failure notice")

    runner = web.AppRunner(build_app())
    await runner.setup()
    site = web.TCPSite(runner, settings.HOST, settings.PORT)

    # ── Graceful shutdown on SIGTERM (Docker / PaaS) ──────────────────────────
    loop = asyncio.get_running_loop()

    shutdown_event = asyncio.Event()

    def _handle_signal():
        logger.info("Received shutdown signal, stopping…")
        shutdown_event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, _handle_signal)
        except NotImplementedError:
            # Windows does not support add_signal_handler
            pass

    try:
        await site.start()
        logger.info("Listening on http://%s:%d", settings.HOST, settings.PORT)
        await shutdown_event.wait()
    finally:
        logger.info("Shutting down…")
        await runner.cleanup()
        logger.info("Shutdown complete.")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
