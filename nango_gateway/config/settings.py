"""Application settings loaded from environment variables."""

import re
from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationError as PydanticValidationError, field_validator
from pydantic_settings import BaseSettings

from nango_gateway.client.models import DEFAULT_BASE_URL, ClientConfig
from nango_gateway.errors import ValidationError

_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_BARE_NUMBER = re.compile(r"[+-]?(\d+(?:\.\d*)?|\.\d+)")


def parse_duration(value: str) -> float:
    """Parse a duration such as "30s", "1m30s" or "250ms" into seconds.

    A bare number is read as seconds.
    """
    text = value.strip()
    if _BARE_NUMBER.fullmatch(text):
        return float(text)

    sign = 1.0
    if text[:1] in ("+", "-"):
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if not text or pos != len(text):
        raise ValueError(f"invalid duration {value!r}")
    return sign * total


class ClientSettings(BaseSettings):
    """Upstream Nango API settings; all the CLI needs."""

    nango_api_key: str = Field(min_length=1)
    nango_base_url: str = Field(default=DEFAULT_BASE_URL, min_length=1)
    timeout: float = 30.0  # seconds; env accepts "30s", "1m", "500ms"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_ignore_empty": True,
        "extra": "ignore",  # .env may also hold server-only keys
    }

    @field_validator("timeout", mode="before")
    @classmethod
    def _parse_timeout(cls, value):
        if isinstance(value, str):
            return parse_duration(value)
        return value

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be positive")
        return value

    def client_config(self) -> ClientConfig:
        return ClientConfig(
            api_key=self.nango_api_key,
            base_url=self.nango_base_url,
            timeout=self.timeout,
        )


class Settings(ClientSettings):
    # Server
    host: str = "0.0.0.0"
    port: int = Field(default=8080, ge=1, le=65535)

    # Logging
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    audit_log_file: str = ""  # Empty = stdout only

    @field_validator("log_level", mode="before")
    @classmethod
    def _lower_log_level(cls, value):
        return value.lower() if isinstance(value, str) else value


def _build(settings_cls: type[ClientSettings], overrides: dict):
    try:
        return settings_cls(**overrides)
    except PydanticValidationError as exc:
        problems = []
        fields = []
        for error in exc.errors():
            name = ".".join(str(part) for part in error["loc"]) or "settings"
            fields.append(name)
            problems.append(f"{name}: {error['msg']}")
        raise ValidationError("invalid configuration: " + "; ".join(problems), fields=fields) from exc


def load_settings(**overrides) -> Settings:
    """Build settings from the environment; keyword overrides win over env vars."""
    return _build(Settings, overrides)


def load_client_settings(**overrides) -> ClientSettings:
    """Like load_settings, but reads and validates only the upstream API fields."""
    return _build(ClientSettings, overrides)


@lru_cache
def get_settings() -> Settings:
    return load_settings()
