"""Runtime configuration loaded from the environment or a ``.env`` file.

Only :func:`get_settings` and the CLI touch the environment. Everything else
receives a :class:`Settings` (or the :class:`ClientConfig` derived from it)
as an explicit argument.
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ballot_snapshot.infrastructure.openstates import ClientConfig

OPENSTATES_BASE_URL = "https://v3.openstates.org"
GEOCODER_BASE_URL = "https://api.zippopotam.us"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    openstates_api_key: str | None = None
    openstates_base_url: str = OPENSTATES_BASE_URL
    geocoder_base_url: str = GEOCODER_BASE_URL

    # When set, the client talks to a deployed gateway instead of OpenStates.
    use_server_proxy: bool = False
    proxy_base_url: str = "http://localhost:3000/api"

    host: str = "0.0.0.0"
    port: int = 3000
    request_timeout: float = 10.0
    api_cors_origins: str = "*"
    log_level: str = "INFO"

    @field_validator("openstates_api_key", mode="before")
    @classmethod
    def blank_key_is_missing(cls, value):
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @field_validator("request_timeout")
    @classmethod
    def positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("request_timeout must be positive")
        return value

    @property
    def cors_origins(self) -> list[str]:
        origins = [origin.strip() for origin in self.api_cors_origins.split(",") if origin.strip()]
        return origins or ["*"]

    def client_config(self, *, use_proxy: bool | None = None) -> ClientConfig:
        """Configuration for an :class:`OpenStatesClient`.

        The gateway always calls OpenStates directly; ``use_proxy`` lets it
        override whatever the environment says.
        """

        proxied = self.use_server_proxy if use_proxy is None else use_proxy
        if proxied:
            return ClientConfig(base_url=self.proxy_base_url, use_proxy=True, timeout=self.request_timeout)
        return ClientConfig(
            base_url=self.openstates_base_url,
            api_key=self.openstates_api_key,
            use_proxy=False,
            timeout=self.request_timeout,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
