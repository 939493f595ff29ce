from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

from callscope.errors import ConfigError

# Hard ceiling on selected expirations (extended variant).
MAX_EXPIRATIONS_CAP = 20


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Single shared credential for the snapshot provider. Optional here so that
    # a missing key surfaces as a ConfigError at request time, not at import.
    MASSIVE_API_KEY: str | None = None
    MASSIVE_BASE_URL: str = "https://api.massive.com"
    # None = transport default (requests waits indefinitely).
    MASSIVE_TIMEOUT_SECONDS: float | None = None

    CALLSCOPE_PAGE_SIZE: int = 250
    CALLSCOPE_MAX_PAGES: int = 15
    CALLSCOPE_MAX_EXPIRATIONS: int = 10
    # Extended variant: 20 expirations instead of 10.
    CALLSCOPE_EXTENDED: bool = False

    @property
    def massive_api_key(self) -> str | None:
        return self.MASSIVE_API_KEY

    @property
    def massive_base_url(self) -> str:
        return (self.MASSIVE_BASE_URL or "https://api.massive.com").rstrip("/")

    @property
    def timeout(self) -> float | None:
        return self.MASSIVE_TIMEOUT_SECONDS

    @property
    def page_size(self) -> int:
        return int(self.CALLSCOPE_PAGE_SIZE)

    @property
    def max_pages(self) -> int:
        return int(self.CALLSCOPE_MAX_PAGES)

    @property
    def max_expirations(self) -> int:
        if self.CALLSCOPE_EXTENDED:
            return MAX_EXPIRATIONS_CAP
        return max(min(int(self.CALLSCOPE_MAX_EXPIRATIONS), MAX_EXPIRATIONS_CAP), 0)


def load_settings() -> Settings:
    return Settings()


def require_api_key(settings: Settings) -> str:
    """Return the configured credential, or raise ConfigError if it is missing/blank."""
    key = (settings.massive_api_key or "").strip()
    if not key:
        raise ConfigError("MASSIVE_API_KEY is not configured")
    return key
