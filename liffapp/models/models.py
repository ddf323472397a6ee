"""
Data model for the LIFF registration view.

Domain overview
---------------
Profile        : the LINE user as reported by the session provider (read-only)
FormFields     : field name → string value, owned by the view
  └─ BirthSelection: year / month / day selects; derive FormFields["birth_date"]
RegisteredUser : opaque record returned by the Registration API (flat or nested)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field

# ─────────────────────────── Constants ────────────────────────────────────────

class NameSchema:
    SPLIT    = "split"     # last/first name + last/first furigana
    COMBINED = "combined"  # single name + single furigana

    FIELDS: dict[str, tuple[str, ...]] = {
        SPLIT: (
            "email",
            "last_name", "first_name",
            "last_furigana", "first_furigana",
            "old_name", "birth_date", "graduation_year",
        ),
        COMBINED: (
            "email",
            "name", "furigana",
            "old_name", "birth_date", "graduation_year",
        ),
    }

    # Fields rendered with a required marker
    REQUIRED: dict[str, tuple[str, ...]] = {
        SPLIT:    ("email", "last_name", "first_name", "last_furigana", "first_furigana"),
        COMBINED: ("email", "name", "furigana"),
    }

    @classmethod
    def fields_for(cls, schema: str) -> tuple[str, ...]:
        try:
            return cls.FIELDS[schema]
        except KeyError:
            raise ValueError(f"Unknown name schema: {schema!r}") from None


class BirthPart:
    YEAR  = "year"
    MONTH = "month"
    DAY   = "day"

    ALL = (YEAR, MONTH, DAY)

    # HTML select names → BirthSelection attribute
    FORM_KEYS: dict[str, str] = {
        "birth_year":  YEAR,
        "birth_month": MONTH,
        "birth_day":   DAY,
    }


RegisteredUser = Mapping[str, Any]
FormFields     = Dict[str, str]


# ─────────────────────────── Models ───────────────────────────────────────────

class Profile(BaseModel):
    """LINE profile as returned by liff.getProfile() / the profile endpoint."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(alias="userId")
    display_name: str = Field(default="", alias="displayName")


@dataclass(frozen=True)
class BirthSelection:
    year:  str = ""
    month: str = ""
    day:   str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.year and self.month and self.day)

    def with_part(self, part: str, value: str) -> "BirthSelection":
        if part not in BirthPart.ALL:
            raise ValueError(f"Unknown birth part: {part!r}")
        values = {p: getattr(self, p) for p in BirthPart.ALL}
        values[part] = value
        return BirthSelection(**values)

    def as_date(self) -> str:
        """`YYYY-MM-DD` with month and day zero-padded to two digits."""
        return f"{self.year}-{self.month.zfill(2)}-{self.day.zfill(2)}"


def empty_fields(schema: str) -> FormFields:
    return {name: "" for name in NameSchema.fields_for(schema)}


def derive_birth_date(birth: BirthSelection, previous: str = "") -> str:
    """
    Birth date kept in sync with the selects: recomputed only once all three
    parts are set, otherwise the last computed value stays.
    """
    if birth.is_complete:
        return birth.as_date()
    return previous
