"""Nango Gateway — FastAPI application entry point.

A small REST proxy in front of the Nango integrations API. Every route
delegates to one shared NangoClient and re-serializes its results.
"""

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from nango_gateway.client.client import NangoClient
from nango_gateway.config.settings import Settings, get_settings
from nango_gateway.errors import NangoError, NotFoundError, ValidationError
from nango_gateway.logging.audit import (
    RequestTimer,
    generate_request_id,
    get_audit_logger,
    level_name,
    request_id_var,
    setup_logging,
)
from nango_gateway.proxy.handler import (
    CLIENT_CLOSED_REQUEST,
    ClientDisconnected,
    error_response,
    run_until_disconnect,
)

VERSION = "0.1.0"

SHUTDOWN_GRACE_SECONDS = 30
KEEP_ALIVE_SECONDS = 60

router = APIRouter()


class RequestAuditMiddleware(BaseHTTPMiddleware):
    """Assigns a request id and logs one line per completed request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = generate_request_id()
        token = request_id_var.set(rid)
        try:
            with RequestTimer() as timer:
                response = await call_next(request)
            response.headers["X-Request-Id"] = rid
            get_audit_logger().info(
                "Request completed",
                extra={"audit_data": {
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "latency_ms": timer.elapsed_ms,
                    "client_ip": request.client.host if request.client else "unknown",
                }},
            )
            return response
        finally:
            request_id_var.reset(token)


def get_client(request: Request) -> NangoClient:
    return request.app.state.nango_client


@router.get("/health")
async def health():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ"),
    }


@router.get("/integrations")
async def list_integrations(request: Request, client: NangoClient = Depends(get_client)):
    logger = get_audit_logger()
    try:
        integrations = await run_until_disconnect(request, client.list_integrations())
    except ClientDisconnected as e:
        logger.info("Request abandoned", extra={"audit_data": {"reason": str(e)}})
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    except NangoError as e:
        logger.error(
            "Failed to list integrations",
            extra={"audit_data": {"error": str(e), "error_type": type(e).__name__}},
        )
        return error_response(e)

    logger.debug("Integrations listed", extra={"audit_data": {"count": len(integrations)}})
    return JSONResponse(content=[integration.to_dict() for integration in integrations])


@router.get("/integrations/{integration_id:path}")
async def get_integration(
    integration_id: str, request: Request, client: NangoClient = Depends(get_client)
):
    logger = get_audit_logger()
    if not integration_id:
        return JSONResponse(status_code=400, content={"error": "Integration ID is required"})

    try:
        integration = await run_until_disconnect(request, client.get_integration(integration_id))
    except ClientDisconnected as e:
        logger.info("Request abandoned", extra={"audit_data": {"reason": str(e)}})
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    except NangoError as e:
        logger.log(
            logging.WARNING if isinstance(e, NotFoundError) else logging.ERROR,
            "Failed to get integration",
            extra={"audit_data": {
                "integration_id": integration_id,
                "error": str(e),
                "error_type": type(e).__name__,
            }},
        )
        return error_response(e)

    return JSONResponse(content=integration.to_dict())


def create_app(settings: Settings, client: NangoClient | None = None) -> FastAPI:
    """Build the application around a single shared NangoClient."""
    nango_client = client or NangoClient(settings.client_config())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown lifecycle hooks."""
        get_audit_logger().info(
            "Gateway started",
            extra={"audit_data": {"base_url": nango_client.base_url, "port": settings.port}},
        )
        yield
        await nango_client.close()
        get_audit_logger().info("Gateway stopped")

    app = FastAPI(
        title="Nango Gateway",
        description="REST proxy for the Nango integrations API",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.nango_client = nango_client
    app.add_middleware(RequestAuditMiddleware)
    app.include_router(router)
    return app


def serve() -> None:
    """Run the gateway under uvicorn until SIGINT/SIGTERM."""
    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Failed to load configuration: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logging(settings.log_level, settings.audit_log_file)
    get_audit_logger().info(f"Starting server on port {settings.port}")

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=level_name(settings.log_level).lower(),
        timeout_keep_alive=KEEP_ALIVE_SECONDS,
        timeout_graceful_shutdown=SHUTDOWN_GRACE_SECONDS,
    )
    get_audit_logger().info("Server exited")


if __name__ == "__main__":
    serve()
