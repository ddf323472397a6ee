from liffapp.services.catalog_service import (
    FieldCatalog, build_field_catalog, birth_year_options, graduation_year_options,
)
from liffapp.services.registration_api import RegistrationApiClient
from liffapp.services.session_service import (
    SessionProvider, StubSessionProvider, LineSessionProvider,
)
from liffapp.services.summary_service import SummaryRow, build_summary

__all__ = [
    # field catalog
    "FieldCatalog", "build_field_catalog", "birth_year_options", "graduation_year_options",
    # registration API
    "RegistrationApiClient",
    # session
    "SessionProvider", "StubSessionProvider", "LineSessionProvider",
    # summary
    "SummaryRow", "build_summary",
]
