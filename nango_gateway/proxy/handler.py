"""Proxy handler — runs client calls on behalf of an incoming request.

Ties the outbound call to the lifetime of the inbound connection and maps
client errors onto HTTP responses.
"""

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from fastapi import Request
from fastapi.responses import JSONResponse

from nango_gateway.errors import NangoError, NotFoundError

T = TypeVar("T")

# nginx convention for "client closed request"; never reaches the caller
CLIENT_CLOSED_REQUEST = 499


class ClientDisconnected(Exception):
    """The caller went away before the upstream call finished."""


async def _wait_for_disconnect(request: Request) -> None:
    while True:
        message = await request.receive()
        if message["type"] == "http.disconnect":
            return


async def run_until_disconnect(request: Request, call: Awaitable[T]) -> T:
    """Await ``call``, cancelling it if the caller disconnects first.

    Raises ClientDisconnected when the call was abandoned.
    """
    task = asyncio.ensure_future(call)
    watcher = asyncio.ensure_future(_wait_for_disconnect(request))
    try:
        done, _ = await asyncio.wait({task, watcher}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        watcher.cancel()
        if not task.done():
            task.cancel()

    if task in done:
        return task.result()
    raise ClientDisconnected(f"{request.method} {request.url.path} abandoned by caller")


def error_response(exc: NangoError) -> JSONResponse:
    """Translate a client error into the proxy's HTTP response."""
    if isinstance(exc, NotFoundError):
        return JSONResponse(status_code=404, content={"error": "Integration not found"})
    return JSONResponse(status_code=500, content={"error": "Internal server error"})
