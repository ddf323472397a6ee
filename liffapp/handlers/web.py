"""
aiohttp routes hosting the registration view.

  GET  /         → mount a view for this request and render it
  POST /         → mount, apply the posted form, submit, render
  GET  /healthz  → liveness probe
"""
from __future__ import annotations

import logging
from typing import Callable, Dict

import httpx
from aiohttp import web

from liffapp.config import Settings
from liffapp.handlers.registration import RegistrationView, ViewOptions
from liffapp.pages import render_page
from liffapp.services.registration_api import RegistrationApiClient
from liffapp.services.session_service import ACCESS_TOKEN_COOKIE, LineSessionProvider, SessionProvider
from liffapp.states import ViewState

logger = logging.getLogger(__name__)
routes = web.RouteTableDef()

SessionFactory = Callable[[web.Request], SessionProvider]

SETTINGS_KEY        = web.AppKey("settings", Settings)
HTTP_CLIENT_KEY     = web.AppKey("http_client", httpx.AsyncClient)
API_KEY             = web.AppKey("registration_api", RegistrationApiClient)
SESSION_FACTORY_KEY = web.AppKey("session_factory", object)
# line user id → view whose submission is in flight
INFLIGHT_KEY        = web.AppKey("inflight_views", dict)


def line_session_factory(request: web.Request) -> SessionProvider:
    settings = request.app[SETTINGS_KEY]
    return LineSessionProvider(
        liff_id=settings.LIFF_ID,
        headers=request.headers,
        cookies=request.cookies,
        http=request.app[HTTP_CLIENT_KEY],
        profile_url=settings.LINE_PROFILE_URL,
        timeout=settings.REQUEST_TIMEOUT,
    )


def _build_view(request: web.Request) -> RegistrationView:
    settings = request.app[SETTINGS_KEY]
    session_factory: SessionFactory = request.app[SESSION_FACTORY_KEY]
    return RegistrationView(
        session_factory(request),
        request.app[API_KEY],
        ViewOptions.from_settings(settings),
    )


def _render(request: web.Request, view: RegistrationView) -> web.Response:
    settings = request.app[SETTINGS_KEY]
    html = render_page(
        view.model,
        view.catalog,
        schema=view.options.name_schema,
        liff_id=settings.LIFF_ID,
        action=request.path,
    )
    response = web.Response(text=html, content_type="text/html")
    if view.model.token_rejected:
        response.del_cookie(ACCESS_TOKEN_COOKIE)
    return response


# ── Routes ────────────────────────────────────────────────────────────────────

@routes.get("/")
async def show_registration(request: web.Request) -> web.Response:
    view = _build_view(request)
    await view.mount()
    return _render(request, view)


@routes.post("/")
async def submit_registration(request: web.Request) -> web.Response:
    view  = _build_view(request)
    model = await view.mount()
    if model.state is not ViewState.FORM_ENTRY or model.profile is None:
        return _render(request, view)

    form = await request.post()

    inflight: Dict[str, RegistrationView] = request.app[INFLIGHT_KEY]
    user_id = model.profile.id

    # No await between this check and the registration below
    running = inflight.get(user_id)
    if running is not None:
        # Same instance as the pending submission: submit() is a no-op while busy
        await running.submit()
        return _render(request, running)

    view.apply_form({k: v for k, v in form.items() if isinstance(v, str)})
    inflight[user_id] = view
    try:
        await view.submit()
    finally:
        if inflight.get(user_id) is view:
            del inflight[user_id]
    return _render(request, view)


@routes.get("/healthz")
async def healthz(request: web.Request) -> web.Response:
    return web.Response(text="ok")
