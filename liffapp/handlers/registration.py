"""
Registration view controller.

Flow:
  mount → LIFF init → in-app check → login / profile → registration check
        → ALREADY_REGISTERED (summary)  |  FORM_ENTRY (form)
  FORM_ENTRY → field input / birth selects → submit → status message
             → (optional) close the LIFF window

All state lives in one ViewModel; every change goes through reduce().
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Mapping, Optional

from liffapp.exceptions import AuthRequired, StatusCheckFailure, SubmitFailure, ValidationGap
from liffapp.models import BirthPart, NameSchema, Profile
from liffapp.services.catalog_service import FieldCatalog, build_field_catalog
from liffapp.services.registration_api import STATUS_SUCCESS, RegistrationApiClient
from liffapp.services.session_service import SessionProvider
from liffapp.states import (
    BirthChanged,
    FieldChanged,
    InitHalted,
    LoginRequested,
    ProfileLoaded,
    RegistrationFound,
    RegistrationMissing,
    StatusMessage,
    SubmitFinished,
    SubmitStarted,
    ViewEvent,
    ViewModel,
    ViewState,
    reduce,
)
from liffapp.validators import build_payload

logger = logging.getLogger(__name__)


class Messages:
    NOT_IN_CLIENT     = "LINEアプリ内でアクセスしてください。"
    INIT_FAILED       = "LIFF の初期化に失敗しました。"
    PROFILE_LOADING   = "プロフィールを取得中です……"
    GRAD_YEAR_INVALID = "卒業年度を選択してください。"
    SUCCESS           = "登録が完了しました！"
    FAILURE           = "登録に失敗しました。"
    ERROR_PREFIX      = "エラーが発生しました: "


@dataclass(frozen=True)
class ViewOptions:
    check_registration: bool = True
    close_on_success: bool = True
    name_schema: str = NameSchema.SPLIT
    allow_stub_session: bool = False
    stub_profile: Optional[Profile] = None

    @classmethod
    def from_settings(cls, settings: Any) -> "ViewOptions":
        return cls(
            check_registration=settings.CHECK_REGISTRATION,
            close_on_success=settings.CLOSE_ON_SUCCESS,
            name_schema=settings.NAME_SCHEMA,
            allow_stub_session=settings.ALLOW_STUB_SESSION,
            stub_profile=Profile(
                id=settings.STUB_USER_ID,
                display_name=settings.STUB_DISPLAY_NAME,
            ),
        )


class RegistrationView:
    """
    One instance per mounted page.

    Parameters
    ----------
    session : LIFF session provider
    api     : Registration API client
    options : feature toggles (registration check, close on success, schema,
              stub identity)
    today   : date the field catalog is computed from (defaults to today)
    """

    def __init__(
        self,
        session: SessionProvider,
        api: RegistrationApiClient,
        options: Optional[ViewOptions] = None,
        *,
        today: Optional[date] = None,
    ) -> None:
        self.session  = session
        self.api      = api
        self.options  = options or ViewOptions()
        self.model    = ViewModel.initial(self.options.name_schema)
        self.catalog: FieldCatalog = build_field_catalog(today)
        self._mounted = False

    def dispatch(self, event: ViewEvent) -> ViewModel:
        self.model = reduce(self.model, event)
        return self.model

    # ── Mount ─────────────────────────────────────────────────────────────────

    async def mount(self) -> ViewModel:
        """Run the init sequence once; later calls return the current model."""
        if self._mounted:
            return self.model
        self._mounted = True

        profile = await self._bootstrap_session()
        if profile is None:
            return self.model

        self.dispatch(ProfileLoaded(profile))

        if not self.options.check_registration:
            return self.dispatch(RegistrationMissing())

        try:
            user = await self.api.check_registration(profile.id)
        except StatusCheckFailure as exc:
            # Fail open: a broken status check must not block a new registration
            logger.warning("Registration check failed for %s: %s", profile.id, exc)
            user = None

        if user is not None:
            return self.dispatch(RegistrationFound(user))
        return self.dispatch(RegistrationMissing())

    async def _bootstrap_session(self) -> Optional[Profile]:
        """Profile for the current user, or None when init halted or login is pending."""
        try:
            await self.session.init()

            if not await self.session.is_in_client():
                if self.options.allow_stub_session and self.options.stub_profile:
                    logger.info("Outside the LINE app, using stub identity")
                    return self.options.stub_profile
                self.dispatch(InitHalted(Messages.NOT_IN_CLIENT))
                return None

            if not await self.session.is_logged_in():
                await self.session.login()
                self.dispatch(LoginRequested())
                return None

            return await self.session.get_profile()

        except AuthRequired:
            await self.session.login()
            self.dispatch(LoginRequested(token_rejected=True))
            return None
        except Exception:
            logger.exception("LIFF initialization failed")
            self.dispatch(InitHalted(Messages.INIT_FAILED))
            return None

    # ── Input ─────────────────────────────────────────────────────────────────

    def change_field(self, name: str, value: str) -> ViewModel:
        return self.dispatch(FieldChanged(name, value))

    def change_birth(self, part: str, value: str) -> ViewModel:
        return self.dispatch(BirthChanged(part, value))

    def apply_form(self, form: Mapping[str, str]) -> ViewModel:
        """Feed a posted HTML form through the same events as single inputs."""
        for name in NameSchema.fields_for(self.options.name_schema):
            if name in form and name != "birth_date":
                self.change_field(name, form[name])
        for key, part in BirthPart.FORM_KEYS.items():
            if key in form:
                self.change_birth(part, form[key])
        return self.model

    # ── Submit ────────────────────────────────────────────────────────────────

    async def submit(self) -> ViewModel:
        """
        Send the form to POST /register.

        At most one submission is in flight per view; a second call while
        busy returns the current model without touching the network.
        """
        if self.model.submitting:
            logger.debug("Submit ignored: a submission is already in flight")
            return self.model

        profile = self.model.profile
        if profile is None:
            return self.dispatch(StatusMessage(Messages.PROFILE_LOADING))

        if self.model.state is not ViewState.FORM_ENTRY:
            return self.model

        payload = build_payload(self.model.fields, profile, self.options.name_schema)
        try:
            payload.ensure_complete(self.catalog.graduation_years)
        except ValidationGap:
            return self.dispatch(StatusMessage(Messages.GRAD_YEAR_INVALID))

        self.dispatch(SubmitStarted())
        try:
            return await self._post(profile, payload.model_dump())
        finally:
            if self.model.submitting:
                self.dispatch(SubmitFinished(Messages.FAILURE))

    async def _post(self, profile: Profile, body: Dict[str, Any]) -> ViewModel:
        try:
            data = await self.api.submit_registration(body)
        except SubmitFailure as exc:
            logger.warning("Registration submit failed for %s: %s", profile.id, exc)
            return self.dispatch(
                SubmitFinished(Messages.ERROR_PREFIX + exc.display_message)
            )

        if data.get("status") != STATUS_SUCCESS:
            logger.info("Registration rejected for %s: status=%r", profile.id, data.get("status"))
            return self.dispatch(SubmitFinished(Messages.FAILURE))

        logger.info("Registration completed for %s", profile.id)
        closed = False
        if self.options.close_on_success:
            try:
                await self.session.close_window()
                closed = True
            except Exception as exc:
                logger.warning("Could not close LIFF window: %s", exc)

        return self.dispatch(SubmitFinished(Messages.SUCCESS, success=True, closed=closed))
