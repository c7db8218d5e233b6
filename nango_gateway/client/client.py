"""Async client for the Nango integrations API."""

from dataclasses import replace
from urllib.parse import quote

import httpx

from nango_gateway.client.models import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, ClientConfig, Integration
from nango_gateway.errors import (
    DecodeError,
    NotFoundError,
    RequestFailedError,
    TransportError,
    ValidationError,
)


class NangoClient:
    """Performs authenticated read calls against the integrations endpoints.

    The client keeps no per-request state: one instance can be shared by any
    number of concurrent callers. Failures are raised as NangoError subclasses
    and are never retried.
    """

    def __init__(self, config: ClientConfig, transport: httpx.AsyncBaseTransport | None = None):
        if not config.api_key:
            raise ValidationError("API key is required", fields=["api_key"])
        if not config.base_url:
            config = replace(config, base_url=DEFAULT_BASE_URL)
        if not config.timeout or config.timeout <= 0:
            config = replace(config, timeout=DEFAULT_TIMEOUT)
        self._config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def base_url(self) -> str:
        return self._config.base_url

    @property
    def timeout(self) -> float:
        return self._config.timeout

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.timeout),
                transport=self._transport,
            )
        return self._client

    def _build_headers(self) -> dict:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._config.api_key}",
        }

    def _url(self, path: str) -> str:
        return f"{self._config.base_url.rstrip('/')}{path}"

    async def _get(self, path: str) -> httpx.Response:
        client = await self._get_client()
        try:
            return await client.get(self._url(path), headers=self._build_headers())
        except httpx.TimeoutException as e:
            raise TransportError("request timed out", cause=e) from e
        except httpx.HTTPError as e:
            raise TransportError("making request", cause=e) from e
        except httpx.InvalidURL as e:
            raise ValidationError(
                f"invalid base URL {self._config.base_url!r}: {e}", fields=["base_url"]
            ) from e

    @staticmethod
    def _decode(response: httpx.Response):
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"decoding response: {e}") from e

    async def list_integrations(self) -> list[Integration]:
        """Return every integration of the account, in the order the API sends them."""
        response = await self._get("/integrations")
        if response.status_code != 200:
            raise RequestFailedError(response.status_code)

        payload = self._decode(response)
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise DecodeError(f"expected a JSON array, got {type(payload).__name__}")
        return [Integration.from_dict(item) for item in payload]

    async def get_integration(self, integration_id: str) -> Integration:
        """Fetch a single integration by ID.

        Raises:
            ValidationError: ``integration_id`` is empty (no request is made)
                or the base URL cannot be parsed.
            NotFoundError: the API answered 404.
            RequestFailedError: any other non-200 status.
            TransportError: the request could not be completed.
        """
        if not integration_id:
            raise ValidationError("integration ID cannot be empty", fields=["id"])

        response = await self._get(f"/integrations/{quote(integration_id, safe='')}")
        if response.status_code == 404:
            raise NotFoundError(integration_id)
        if response.status_code != 200:
            raise RequestFailedError(response.status_code)

        return Integration.from_dict(self._decode(response))

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "NangoClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()
