"""
Error taxonomy for the registration view.

None of these are fatal: the view resolves each one to a rendered message.
"""
from __future__ import annotations

from typing import Optional


class RegistrationViewError(Exception):
    """Base class for every error raised inside the registration view."""


class InitFailure(RegistrationViewError):
    """LIFF SDK / environment setup or profile fetch failed."""


class AuthRequired(RegistrationViewError):
    """The user is not logged in; resolved by the login redirect."""


class StatusCheckFailure(RegistrationViewError):
    """GET /user/{id} failed. The view treats this as "not registered"."""


class SubmitFailure(RegistrationViewError):
    """
    POST /register failed at the transport level or with a non-2xx status.

    `server_message` holds the `message` key of the response body when the
    server sent one; it is preferred over the transport text when shown.
    """

    def __init__(self, message: str, server_message: Optional[str] = None) -> None:
        super().__init__(message)
        self.message        = message
        self.server_message = server_message

    @property
    def display_message(self) -> str:
        return self.server_message or self.message


class ValidationGap(RegistrationViewError):
    """A form value could not be normalised (e.g. a non-numeric graduation year)."""
