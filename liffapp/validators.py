"""
Payload normalisation for POST /register (Pydantic v2 models).

Maps the view's string-valued form fields onto the request body the
Registration API expects. Keeps the mapping out of the view controller and
makes it trivially testable.
"""
from __future__ import annotations

import re
from typing import Any, Collection, Optional, Union

from pydantic import BaseModel, field_validator

from liffapp.exceptions import ValidationGap
from liffapp.models import FormFields, NameSchema, Profile

_INT_RE = re.compile(r"^[+-]?\d+$")


def parse_graduation_year(raw: Any) -> Optional[int]:
    """
    Parse the graduation-year select value.

    Returns None (the non-numeric sentinel) for anything that is not a plain
    integer; never raises.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    text = str(raw or "").strip()
    if not _INT_RE.match(text):
        return None
    return int(text)


class _BasePayload(BaseModel):
    line_user_id: str
    email: str = ""
    old_name: str = ""
    birth_date: str = ""
    graduation_year: Optional[int] = None

    @field_validator("graduation_year", mode="before")
    @classmethod
    def normalize_graduation_year(cls, v: Any) -> Optional[int]:
        return parse_graduation_year(v)

    @field_validator("old_name", mode="before")
    @classmethod
    def default_old_name(cls, v: Any) -> str:
        return v or ""

    def ensure_complete(self, allowed_years: Optional[Collection[int]] = None) -> None:
        """
        Reject the payload client-side when the graduation year is unusable:
        not a number, or not one of `allowed_years` when that is given.
        """
        if self.graduation_year is None:
            raise ValidationGap("graduation_year is not a number")
        if allowed_years is not None and self.graduation_year not in allowed_years:
            raise ValidationGap(f"graduation_year {self.graduation_year} is not selectable")


class SplitNamePayload(_BasePayload):
    """
    Request body for the split name schema.

    Attributes
    ----------
    last_name / first_name         : 姓 / 名
    last_furigana / first_furigana : セイ / メイ
    """

    last_name: str = ""
    first_name: str = ""
    last_furigana: str = ""
    first_furigana: str = ""


class CombinedNamePayload(_BasePayload):
    """Request body for the single-name schema (name + furigana)."""

    name: str = ""
    furigana: str = ""


RegistrationPayload = Union[SplitNamePayload, CombinedNamePayload]

_PAYLOADS: dict[str, type[_BasePayload]] = {
    NameSchema.SPLIT:    SplitNamePayload,
    NameSchema.COMBINED: CombinedNamePayload,
}


def build_payload(
    fields: FormFields,
    profile: Profile,
    schema: str = NameSchema.SPLIT,
) -> RegistrationPayload:
    """
    Build the request body from the current form state.

    Only fields belonging to `schema` are read; the two name schemas are never
    mixed in one submission.
    """
    names = NameSchema.fields_for(schema)
    data  = {name: fields.get(name, "") for name in names}
    return _PAYLOADS[schema](line_user_id=profile.id, **data)
