"""Integration record and client configuration."""

from dataclasses import asdict, dataclass, fields

from nango_gateway.errors import DecodeError

DEFAULT_BASE_URL = "https://api.nango.dev"
DEFAULT_TIMEOUT = 30.0  # seconds


@dataclass(frozen=True)
class Integration:
    id: str = ""
    name: str = ""
    provider: str = ""
    created_at: str = ""  # ISO-8601, as sent by the API
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Integration":
        """Build a record from a decoded JSON object; absent fields stay empty."""
        if not isinstance(data, dict):
            raise DecodeError(f"expected a JSON object, got {type(data).__name__}")
        values = {}
        for f in fields(cls):
            value = data.get(f.name, "")
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise DecodeError(f"field '{f.name}' must be a string, got {type(value).__name__}")
            values[f.name] = value
        return cls(**values)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ClientConfig:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
