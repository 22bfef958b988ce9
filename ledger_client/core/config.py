from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Core
    project_name: str = "SoupFinance Ledger Client"

    # ============================================
    # BACKEND API
    # ============================================
    api_base_url: str = "http://localhost:8080/rest"
    api_timeout_seconds: float = 30.0
    auth_token: str | None = None
    auth_header_name: str = "X-Auth-Token"

    # ============================================
    # LOGGING
    # ============================================
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"

    # ============================================
    # AMOUNTS
    # ============================================
    currency_decimal_places: int = 2
    default_currency: str = "USD"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "LEDGER_"

    # Helper methods
    def get_base_url(self) -> str:
        """Return the API base URL without a trailing slash."""
        return self.api_base_url.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()
