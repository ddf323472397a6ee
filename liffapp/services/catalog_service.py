"""
Field catalog: option lists for the birth-date and graduation-year selects.

Computed once per mount from the current date. Day options are always 1–31;
impossible dates (e.g. 31 February) are not filtered here.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

MIN_AGE          = 14   # youngest selectable birth year is currentYear - 14
BIRTH_YEAR_SPAN  = 100  # number of birth-year options
GRAD_YEAR_SPAN   = 91   # currentYear down to currentYear - 90


@dataclass(frozen=True)
class FieldCatalog:
    birth_years:      List[int]
    months:           List[int]
    days:             List[int]
    graduation_years: List[int]


def birth_year_options(current_year: int) -> List[int]:
    """currentYear-14 down to currentYear-113, descending."""
    newest = current_year - MIN_AGE
    return list(range(newest, newest - BIRTH_YEAR_SPAN, -1))


def graduation_year_options(current_year: int) -> List[int]:
    """currentYear down to currentYear-90, descending."""
    return list(range(current_year, current_year - GRAD_YEAR_SPAN, -1))


def build_field_catalog(today: Optional[date] = None) -> FieldCatalog:
    current_year = (today or date.today()).year
    return FieldCatalog(
        birth_years=birth_year_options(current_year),
        months=list(range(1, 13)),
        days=list(range(1, 32)),
        graduation_years=graduation_year_options(current_year),
    )
