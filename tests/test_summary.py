"""
Unit tests: Registered-user summary (summary_service.py).

Covers the nested → flat → split-name fallback chain field by field.
"""
from __future__ import annotations

from liffapp.services.summary_service import (
    BIRTH_DATE,
    GIVEN_NAME,
    GRAD_YEAR,
    SURNAME,
    build_summary,
    furigana,
    full_name,
    legacy_name,
    resolve,
)


def _rows(user) -> dict:
    return {row.label: row.value for row in build_summary(user)}


class TestResolverChains:
    def test_nested_wins_over_flat(self) -> None:
        user = {"main": {"kana_sei": "A"}, "last_name": "B"}
        assert resolve(user, SURNAME) == "A"

    def test_flat_used_when_nested_missing(self) -> None:
        assert resolve({"main": {}, "last_name": "B"}, SURNAME) == "B"

    def test_split_name_last_resort(self) -> None:
        user = {"name": "山田 太郎"}
        assert resolve(user, SURNAME) == "山田"
        assert resolve(user, GIVEN_NAME) == "太郎"

    def test_split_name_handles_ideographic_space(self) -> None:
        assert resolve({"name": "山田　太郎"}, GIVEN_NAME) == "太郎"

    def test_single_word_name_has_no_given_part(self) -> None:
        assert resolve({"name": "山田"}, GIVEN_NAME) == ""

    def test_empty_values_fall_through(self) -> None:
        user = {"main": {"birthday": ""}, "birth_date": "1990-04-01"}
        assert resolve(user, BIRTH_DATE) == "1990-04-01"

    def test_non_mapping_main_ignored(self) -> None:
        assert resolve({"main": ["x"], "graduation_year": 2008}, GRAD_YEAR) == "2008"

    def test_nothing_resolves_to_empty(self) -> None:
        assert resolve({}, SURNAME) == ""


class TestDisplayValues:
    def test_full_name_joins_parts(self) -> None:
        assert full_name({"last_name": "山田", "first_name": "太郎"}) == "山田 太郎"

    def test_furigana_split_fields(self) -> None:
        user = {"last_furigana": "ヤマダ", "first_furigana": "タロウ"}
        assert furigana(user) == "ヤマダ タロウ"

    def test_furigana_combined_field(self) -> None:
        assert furigana({"furigana": "ヤマダ タロウ"}) == "ヤマダ タロウ"

    def test_legacy_name_only_without_last_name(self) -> None:
        assert legacy_name({"name": "山田 太郎"}) == "山田 太郎"
        assert legacy_name({"name": "山田 太郎", "last_name": "山田"}) is None


class TestBuildSummary:
    def test_flat_record(self) -> None:
        rows = _rows({
            "last_name": "山田", "first_name": "太郎",
            "last_furigana": "ヤマダ", "first_furigana": "タロウ",
            "email": "taro@example.com", "birth_date": "1990-04-01",
            "graduation_year": 2008,
        })
        assert rows["氏名"] == "山田 太郎"
        assert rows["フリガナ"] == "ヤマダ タロウ"
        assert rows["メールアドレス"] == "taro@example.com"
        assert rows["生年月日"] == "1990-04-01"
        assert rows["卒業年度"] == "2008"
        assert "旧姓" not in rows
        assert "氏名(旧形式)" not in rows

    def test_nested_record(self) -> None:
        rows = _rows({
            "email": "hanako@example.com",
            "main": {
                "kana_sei": "スズキ", "kana_mei": "ハナコ",
                "birthday": "1985-12-24", "grad_year": "2003", "old_name": "サトウ",
            },
        })
        assert rows["氏名"] == "スズキ ハナコ"
        assert rows["生年月日"] == "1985-12-24"
        assert rows["卒業年度"] == "2003"
        assert rows["旧姓"] == "サトウ"

    def test_legacy_record_shows_old_format_row(self) -> None:
        rows = _rows({"name": "山田 太郎", "email": "taro@example.com"})
        assert rows["氏名"] == "山田 太郎"
        assert rows["氏名(旧形式)"] == "山田 太郎"

    def test_row_order(self) -> None:
        labels = [r.label for r in build_summary({"old_name": "佐藤"})]
        assert labels == ["氏名", "フリガナ", "メールアドレス", "生年月日", "卒業年度", "旧姓"]
