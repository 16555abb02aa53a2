from __future__ import annotations

from functools import lru_cache
from typing import List

from loguru import logger
from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from relay.services.inline_code import DisplayLimits


class RelaySettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    host: str = Field(default="127.0.0.1", alias="RELAY_HOST")
    port: int = Field(default=8080, alias="RELAY_PORT")

    display_limit: int = Field(default=50, alias="DISPLAY_LIMIT")
    ellipsis_width: int = Field(default=3, alias="ELLIPSIS_WIDTH")
    resolve_gitmoji: bool = Field(default=True, alias="RESOLVE_GITMOJI")

    forward_timeout: float = Field(default=15.0, alias="FORWARD_TIMEOUT")
    allowed_webhook_hosts: str | None = Field(default=None, alias="ALLOWED_WEBHOOK_HOSTS")
    homepage_url: str | None = Field(default=None, alias="HOMEPAGE_URL")

    webhook_hosts: List[str] = Field(default_factory=list)

    @field_validator("display_limit")
    @classmethod
    def validate_display_limit(cls, value: int) -> int:
        if value <= 0:
            raise ValueError(f"DISPLAY_LIMIT must be positive, got {value}")
        return value

    @field_validator("forward_timeout")
    @classmethod
    def validate_forward_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError(f"FORWARD_TIMEOUT must be positive, got {value}")
        return value

    @model_validator(mode="after")
    def _check_limits(self) -> "RelaySettings":
        if not 0 <= self.ellipsis_width < self.display_limit:
            raise ValueError(
                f"ELLIPSIS_WIDTH must be between 0 and DISPLAY_LIMIT - 1, got {self.ellipsis_width}"
            )
        return self

    @model_validator(mode="after")
    def _build_webhook_hosts(self) -> "RelaySettings":
        hosts: List[str] = []
        if self.allowed_webhook_hosts:
            for item in self.allowed_webhook_hosts.split(","):
                lowered = item.strip().lower()
                if lowered and lowered not in hosts:
                    hosts.append(lowered)
        self.webhook_hosts = hosts
        return self

    @property
    def display_limits(self) -> DisplayLimits:
        return DisplayLimits(limit=self.display_limit, ellipsis_width=self.ellipsis_width)


@lru_cache
def get_settings() -> RelaySettings:
    try:
        return RelaySettings()
    except ValidationError as exc:
        logger.error("Configuration validation failed: {}", exc)
        raise
