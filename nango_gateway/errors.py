"""Error taxonomy shared by the client, the CLI and the server.

Every failure surfaced by this package is one of the NangoError subclasses
below, so callers branch on the exception type rather than its message.
"""


class NangoError(Exception):
    """Base class for all gateway errors."""


class ValidationError(NangoError):
    """Invalid input detected before any network call (empty id, bad config)."""

    def __init__(self, message: str, fields: list[str] | None = None):
        super().__init__(message)
        self.fields = fields or []


class NotFoundError(NangoError):
    """The remote API answered 404 for a specific integration."""

    def __init__(self, integration_id: str):
        super().__init__(f"integration with ID {integration_id} not found")
        self.integration_id = integration_id


class RequestFailedError(NangoError):
    """The remote API answered with an unexpected status code."""

    def __init__(self, status_code: int):
        super().__init__(f"API request failed with status {status_code}")
        self.status_code = status_code


class TransportError(NangoError):
    """The request never produced a response (DNS, connect, timeout)."""

    def __init__(self, message: str, cause: BaseException):
        super().__init__(f"{message}: {cause}")
        self.cause = cause


class DecodeError(NangoError):
    """A 200 response whose body is not the expected JSON shape."""
