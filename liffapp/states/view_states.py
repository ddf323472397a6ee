"""
View state machine for the registration page.

One immutable `ViewModel` record plus a pure `reduce(model, event)` function.
The only transitions out of LOADING are to ALREADY_REGISTERED or FORM_ENTRY;
neither of those ever goes back.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Optional, Union

from liffapp.models import (
    BirthPart,
    BirthSelection,
    FormFields,
    NameSchema,
    Profile,
    RegisteredUser,
    derive_birth_date,
    empty_fields,
)


class ViewState(str, enum.Enum):
    LOADING            = "loading"             # Spinner only
    ALREADY_REGISTERED = "already_registered"  # Read-only summary
    FORM_ENTRY         = "form_entry"          # Editable form


@dataclass(frozen=True)
class ViewModel:
    state: ViewState = ViewState.LOADING
    profile: Optional[Profile] = None
    registered_user: Optional[RegisteredUser] = None
    fields: FormFields = field(default_factory=lambda: empty_fields(NameSchema.SPLIT))
    birth: BirthSelection = field(default_factory=BirthSelection)
    status_message: str = ""
    submitting: bool = False
    submitted: bool = False
    closed: bool = False
    halted: bool = False          # init stopped with an advisory message
    login_pending: bool = False   # login redirect triggered, awaiting resume
    token_rejected: bool = False  # the stored access token was refused by the host

    @classmethod
    def initial(cls, schema: str = NameSchema.SPLIT) -> "ViewModel":
        return cls(fields=empty_fields(schema))


# ─────────────────────────── Events ───────────────────────────────────────────

@dataclass(frozen=True)
class ProfileLoaded:
    profile: Profile


@dataclass(frozen=True)
class RegistrationFound:
    user: RegisteredUser


@dataclass(frozen=True)
class RegistrationMissing:
    pass


@dataclass(frozen=True)
class InitHalted:
    message: str


@dataclass(frozen=True)
class LoginRequested:
    token_rejected: bool = False


@dataclass(frozen=True)
class FieldChanged:
    name: str
    value: str


@dataclass(frozen=True)
class BirthChanged:
    part: str
    value: str


@dataclass(frozen=True)
class SubmitStarted:
    pass


@dataclass(frozen=True)
class SubmitFinished:
    message: str
    success: bool = False
    closed: bool = False


@dataclass(frozen=True)
class StatusMessage:
    message: str


ViewEvent = Union[
    ProfileLoaded, RegistrationFound, RegistrationMissing, InitHalted, LoginRequested,
    FieldChanged, BirthChanged, SubmitStarted, SubmitFinished, StatusMessage,
]


# ─────────────────────────── Reducer ──────────────────────────────────────────

def reduce(model: ViewModel, event: ViewEvent) -> ViewModel:
    """
    Apply one event. Events that the current state does not accept return
    the model unchanged.
    """
    if model.state is ViewState.LOADING:
        return _reduce_loading(model, event)
    if model.state is ViewState.FORM_ENTRY:
        return _reduce_form(model, event)
    # ALREADY_REGISTERED is terminal
    return model


def _reduce_loading(model: ViewModel, event: ViewEvent) -> ViewModel:
    if model.halted:
        return model

    if isinstance(event, ProfileLoaded):
        return replace(model, profile=event.profile, login_pending=False, token_rejected=False)

    if isinstance(event, RegistrationFound):
        return replace(
            model,
            state=ViewState.ALREADY_REGISTERED,
            registered_user=event.user,
        )

    if isinstance(event, RegistrationMissing):
        return replace(model, state=ViewState.FORM_ENTRY)

    if isinstance(event, InitHalted):
        return replace(model, halted=True, status_message=event.message)

    if isinstance(event, LoginRequested):
        return replace(model, login_pending=True, token_rejected=event.token_rejected)

    if isinstance(event, StatusMessage):
        return replace(model, status_message=event.message)

    return model


def _reduce_form(model: ViewModel, event: ViewEvent) -> ViewModel:
    if isinstance(event, FieldChanged):
        # birth_date is derived; only the selects may change it
        if event.name not in model.fields or event.name == "birth_date":
            return model
        return replace(model, fields={**model.fields, event.name: event.value})

    if isinstance(event, BirthChanged):
        if event.part not in BirthPart.ALL:
            return model
        birth = model.birth.with_part(event.part, event.value)
        birth_date = derive_birth_date(birth, model.fields.get("birth_date", ""))
        return replace(
            model,
            birth=birth,
            fields={**model.fields, "birth_date": birth_date},
        )

    if isinstance(event, SubmitStarted):
        return replace(model, submitting=True)

    if isinstance(event, SubmitFinished):
        return replace(
            model,
            submitting=False,
            status_message=event.message,
            submitted=model.submitted or event.success,
            closed=model.closed or event.closed,
        )

    if isinstance(event, StatusMessage):
        return replace(model, status_message=event.message)

    return model
