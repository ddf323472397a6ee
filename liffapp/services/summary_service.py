"""
Read-only summary of an already registered user.

The Registration API has shipped two record shapes:

  flat   : name, last_name, first_name, last_furigana, first_furigana,
           email, birth_date, graduation_year, old_name
  nested : main.kana_sei, main.kana_mei, main.birthday, main.grad_year,
           main.old_name

Every displayed value is resolved through an ordered tuple of resolver
functions; the first truthy result wins (nested → flat → split `name`).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Sequence

from liffapp.models import RegisteredUser

Resolver = Callable[[RegisteredUser], Any]


# ── Resolver factories ────────────────────────────────────────────────────────

def nested(key: str) -> Resolver:
    """Value under the `main` group."""
    def _resolve(user: RegisteredUser) -> Any:
        main = user.get("main")
        if isinstance(main, Mapping):
            return main.get(key)
        return None
    return _resolve


def flat(key: str) -> Resolver:
    """Top-level value."""
    def _resolve(user: RegisteredUser) -> Any:
        return user.get(key)
    return _resolve


def name_part(index: int) -> Resolver:
    """Whitespace-separated part of the legacy single `name` string."""
    def _resolve(user: RegisteredUser) -> Any:
        name = user.get("name")
        if not isinstance(name, str):
            return None
        parts = name.split()
        return parts[index] if index < len(parts) else None
    return _resolve


def resolve(user: RegisteredUser, resolvers: Sequence[Resolver]) -> str:
    for resolver in resolvers:
        value = resolver(user)
        if value:
            return str(value)
    return ""


# ── Field chains ──────────────────────────────────────────────────────────────

SURNAME        = (nested("kana_sei"), flat("last_name"), name_part(0))
GIVEN_NAME     = (nested("kana_mei"), flat("first_name"), name_part(1))
SURNAME_KANA   = (nested("kana_sei"), flat("last_furigana"))
GIVEN_KANA     = (nested("kana_mei"), flat("first_furigana"))
FURIGANA       = (flat("furigana"),)
EMAIL          = (flat("email"),)
BIRTH_DATE     = (nested("birthday"), flat("birth_date"))
GRAD_YEAR      = (nested("grad_year"), flat("graduation_year"))
OLD_NAME       = (nested("old_name"), flat("old_name"))


@dataclass(frozen=True)
class SummaryRow:
    label: str
    value: str


def _join(*parts: str) -> str:
    return " ".join(p for p in parts if p)


def full_name(user: RegisteredUser) -> str:
    return _join(resolve(user, SURNAME), resolve(user, GIVEN_NAME))


def furigana(user: RegisteredUser) -> str:
    reading = _join(resolve(user, SURNAME_KANA), resolve(user, GIVEN_KANA))
    return reading or resolve(user, FURIGANA)


def legacy_name(user: RegisteredUser) -> Optional[str]:
    """The raw `name` string, shown only for records without `last_name`."""
    name = user.get("name")
    if name and not user.get("last_name"):
        return str(name)
    return None


def build_summary(user: RegisteredUser) -> List[SummaryRow]:
    rows = [
        SummaryRow("氏名",           full_name(user)),
        SummaryRow("フリガナ",       furigana(user)),
        SummaryRow("メールアドレス", resolve(user, EMAIL)),
        SummaryRow("生年月日",       resolve(user, BIRTH_DATE)),
        SummaryRow("卒業年度",       resolve(user, GRAD_YEAR)),
    ]

    old_name = resolve(user, OLD_NAME)
    if old_name:
        rows.append(SummaryRow("旧姓", old_name))

    legacy = legacy_name(user)
    if legacy:
        rows.append(SummaryRow("氏名(旧形式)", legacy))

    return rows
