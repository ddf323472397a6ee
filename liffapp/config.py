"""
Central configuration via pydantic-settings.
All values are read from environment variables / .env file.
"""
from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── LIFF ──────────────────────────────────────────────────────────────────
    LIFF_ID: str = ""

    # Outside the LINE app: substitute the stub identity instead of halting
    ALLOW_STUB_SESSION: bool = False
    STUB_USER_ID: str = "U00000000000000000000000000000000"
    STUB_DISPLAY_NAME: str = "開発ユーザー"

    LINE_PROFILE_URL: str = "https://api.line.me/v2/profile"

    # ── Registration API ──────────────────────────────────────────────────────
    # e.g. "https://example.com/wp-json/line/v1"
    API_BASE_URL: str

    REQUEST_TIMEOUT: float = 10.0

    # ── Form behaviour ────────────────────────────────────────────────────────
    CHECK_REGISTRATION: bool = True
    CLOSE_ON_SUCCESS: bool = True
    NAME_SCHEMA: Literal["split", "combined"] = "split"

    # ── Web listener ──────────────────────────────────────────────────────────
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    RATE_LIMIT: int = 30
    RATE_PERIOD: float = 60.0
    # Reverse proxies in front of the host; 0 ignores X-Forwarded-For
    TRUSTED_PROXIES: int = 0

    # ─────────────────────────────────────────────────────────────────────────

    @property
    def api_base_url(self) -> str:
        """API_BASE_URL without a trailing slash, so paths can be appended."""
        return self.API_BASE_URL.rstrip("/")


settings = Settings()
