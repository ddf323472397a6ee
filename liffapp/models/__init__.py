from liffapp.models.models import (
    BirthPart,
    BirthSelection,
    FormFields,
    NameSchema,
    Profile,
    RegisteredUser,
    derive_birth_date,
    empty_fields,
)

__all__ = [
    "BirthPart", "BirthSelection", "FormFields", "NameSchema",
    "Profile", "RegisteredUser", "derive_birth_date", "empty_fields",
]
