"""
Global error handler. Ensures every request ends in a rendered page.

HTTP exceptions raised by handlers (redirects, 404) pass through untouched.
"""
from __future__ import annotations

import logging

from aiohttp import web

from liffapp.middlewares.rate_limit_middleware import Handler

logger = logging.getLogger(__name__)

ERROR_PAGE = (
    "<!DOCTYPE html><html lang=\"ja\"><meta charset=\"utf-8\">"
    "<p>⚠️ エラーが発生しました。時間をおいて再度お試しください。</p></html>"
)


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except Exception as exc:
        logger.exception("Unhandled error on %s %s: %s", request.method, request.path, exc)
        return web.Response(status=500, text=ERROR_PAGE, content_type="text/html")
