"""
Unit tests: View state machine (states/view_states.py).

The reducer is pure, so every transition is checked without a session,
network or renderer.
"""
from __future__ import annotations

import pytest

from liffapp.models import NameSchema, Profile
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
    ViewModel,
    ViewState,
    reduce,
)

PROFILE = Profile(id="Uabc", display_name="Taro")


def _form_model(schema: str = NameSchema.SPLIT) -> ViewModel:
    model = reduce(ViewModel.initial(schema), ProfileLoaded(PROFILE))
    return reduce(model, RegistrationMissing())


# ─────────────────────────── Loading ──────────────────────────────────────────

class TestLoadingTransitions:
    def test_initial_state(self) -> None:
        model = ViewModel.initial()
        assert model.state is ViewState.LOADING
        assert model.profile is None
        assert model.fields["birth_date"] == ""

    def test_registered_user_goes_to_summary(self) -> None:
        user = {"status_note": "x", "email": "a@b.c"}
        model = reduce(ViewModel.initial(), RegistrationFound(user))
        assert model.state is ViewState.ALREADY_REGISTERED
        assert model.registered_user == user

    def test_missing_goes_to_form(self) -> None:
        assert _form_model().state is ViewState.FORM_ENTRY

    def test_halt_keeps_loading_with_message(self) -> None:
        model = reduce(ViewModel.initial(), InitHalted("advisory"))
        assert model.state is ViewState.LOADING
        assert model.halted
        assert model.status_message == "advisory"

    def test_halted_model_ignores_later_events(self) -> None:
        model = reduce(ViewModel.initial(), InitHalted("advisory"))
        assert reduce(model, RegistrationMissing()) is model

    def test_login_requested(self) -> None:
        model = reduce(ViewModel.initial(), LoginRequested())
        assert model.login_pending
        assert not model.token_rejected
        assert model.state is ViewState.LOADING

    def test_rejected_token_flagged_separately(self) -> None:
        model = reduce(ViewModel.initial(), LoginRequested(token_rejected=True))
        assert model.login_pending
        assert model.token_rejected

    def test_form_events_ignored_while_loading(self) -> None:
        model = ViewModel.initial()
        assert reduce(model, FieldChanged("email", "x@y.z")) is model
        assert reduce(model, SubmitStarted()) is model


# ─────────────────────────── One-directional ──────────────────────────────────

class TestNoBackwardTransitions:
    def test_form_never_returns_to_summary(self) -> None:
        model = _form_model()
        assert reduce(model, RegistrationFound({"email": "x"})).state is ViewState.FORM_ENTRY

    def test_summary_is_terminal(self) -> None:
        model = reduce(ViewModel.initial(), RegistrationFound({}))
        assert reduce(model, RegistrationMissing()) is model
        assert reduce(model, FieldChanged("email", "x")) is model


# ─────────────────────────── Form fields ──────────────────────────────────────

class TestFieldChanges:
    def test_known_field_updates(self) -> None:
        model = reduce(_form_model(), FieldChanged("email", "taro@example.com"))
        assert model.fields["email"] == "taro@example.com"

    def test_field_of_other_schema_ignored(self) -> None:
        model = _form_model(NameSchema.SPLIT)
        assert reduce(model, FieldChanged("furigana", "ヤマダ")) is model

    def test_birth_date_cannot_be_set_directly(self) -> None:
        model = _form_model()
        assert reduce(model, FieldChanged("birth_date", "2000-01-01")) is model

    def test_previous_model_untouched(self) -> None:
        before = _form_model()
        reduce(before, FieldChanged("email", "x@y.z"))
        assert before.fields["email"] == ""


# ─────────────────────────── Birth-date derivation ────────────────────────────

def _with_birth(model: ViewModel, year: str, month: str, day: str) -> ViewModel:
    model = reduce(model, BirthChanged("year", year))
    model = reduce(model, BirthChanged("month", month))
    return reduce(model, BirthChanged("day", day))


class TestBirthDerivation:
    @pytest.mark.parametrize(
        ("year", "month", "day", "expected"),
        [
            ("1990", "4", "1", "1990-04-01"),
            ("2005", "12", "31", "2005-12-31"),
            ("1911", "02", "9", "1911-02-09"),
            # catalog does not filter impossible dates
            ("2001", "2", "31", "2001-02-31"),
        ],
    )
    def test_all_parts_set(self, year, month, day, expected) -> None:
        model = _with_birth(_form_model(), year, month, day)
        assert model.fields["birth_date"] == expected

    def test_partial_selection_leaves_empty(self) -> None:
        model = reduce(_form_model(), BirthChanged("year", "1990"))
        model = reduce(model, BirthChanged("month", "4"))
        assert model.fields["birth_date"] == ""

    def test_clearing_a_part_keeps_last_value(self) -> None:
        model = _with_birth(_form_model(), "1990", "4", "1")
        model = reduce(model, BirthChanged("day", ""))
        assert model.birth.day == ""
        assert model.fields["birth_date"] == "1990-04-01"

    def test_recomputed_after_change(self) -> None:
        model = _with_birth(_form_model(), "1990", "4", "1")
        model = reduce(model, BirthChanged("month", "11"))
        assert model.fields["birth_date"] == "1990-11-01"

    def test_unknown_part_ignored(self) -> None:
        model = _form_model()
        assert reduce(model, BirthChanged("hour", "3")) is model


# ─────────────────────────── Submission flags ─────────────────────────────────

class TestSubmitFlags:
    def test_started_sets_busy(self) -> None:
        assert reduce(_form_model(), SubmitStarted()).submitting

    def test_finished_clears_busy_and_sets_message(self) -> None:
        model = reduce(_form_model(), SubmitStarted())
        model = reduce(model, SubmitFinished("done", success=True, closed=True))
        assert not model.submitting
        assert model.status_message == "done"
        assert model.submitted
        assert model.closed
        assert model.state is ViewState.FORM_ENTRY

    def test_failure_keeps_form_for_retry(self) -> None:
        model = reduce(_form_model(), FieldChanged("email", "x@y.z"))
        model = reduce(reduce(model, SubmitStarted()), SubmitFinished("failed"))
        assert not model.submitted
        assert model.fields["email"] == "x@y.z"

    def test_status_message(self) -> None:
        model = reduce(_form_model(), StatusMessage("hello"))
        assert model.status_message == "hello"
