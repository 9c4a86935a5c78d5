from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GatewaySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore", env_ignore_empty=True)

    # Gateway endpoint, without the /sendMessages suffix
    SMSGW_BASE_URL: str = Field(default="")
    SMSGW_SERVICE_ID: int = Field(default=0)
    SMSGW_USERNAME: str = Field(default="")
    SMSGW_PASSWORD: str = Field(default="")

    # Unset means the httpx default timeout
    SMSGW_TIMEOUT_SECONDS: Optional[float] = Field(default=None)

    LOG_LEVEL: str = Field(default="INFO")


@lru_cache
def get_settings() -> GatewaySettings:
    """Read the environment on first use, not at import."""

    return GatewaySettings()
