from liffapp.states.view_states import (
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

__all__ = [
    "ViewState", "ViewModel", "ViewEvent", "reduce",
    "ProfileLoaded", "RegistrationFound", "RegistrationMissing",
    "InitHalted", "LoginRequested",
    "FieldChanged", "BirthChanged",
    "SubmitStarted", "SubmitFinished", "StatusMessage",
]
