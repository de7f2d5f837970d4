from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ballot_snapshot import __version__
from ballot_snapshot.config import Settings, get_settings
from ballot_snapshot.core.logging import configure_logging, get_logger, log_event
from ballot_snapshot.domain.errors import CivicError, UpstreamError
from ballot_snapshot.routes import gateway

logger = get_logger("gateway")

# Upstream stages answered with a gateway-chosen status instead of the upstream one.
_MAPPED_STAGES = {"geocode": 400, "timeout": 504, "jurisdiction-lookup": 502, "transport": 502}


def error_status(exc: CivicError) -> int:
    """HTTP status the gateway answers with for a failed lookup."""

    if not isinstance(exc, UpstreamError):
        return exc.http_status
    if exc.stage in _MAPPED_STAGES:
        return _MAPPED_STAGES[exc.stage]
    if exc.status is not None and exc.status >= 400:
        return exc.status
    return 502


def error_payload(exc: CivicError) -> dict[str, Any]:
    """``{error}``, plus the upstream ``body`` when its status is forwarded."""

    payload: dict[str, Any] = {"error": exc.message}
    if isinstance(exc, UpstreamError) and exc.stage not in _MAPPED_STAGES and exc.body is not None:
        payload["body"] = exc.body
    return payload


def validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        name = ".".join(str(item) for item in error.get("loc", ()) if item != "query")
        parts.append(f"{name}: {error.get('msg', 'invalid value')}" if name else str(error.get("msg")))
    return "; ".join(parts) or "Invalid request"


def create_app(settings: Settings | None = None, *, http_client: httpx.AsyncClient | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = http_client or httpx.AsyncClient(timeout=settings.request_timeout)
        app.state.http_client = client
        try:
            yield
        finally:
            if http_client is None:
                await client.aclose()

    app = FastAPI(title="Ballot Snapshot API", version=__version__, lifespan=lifespan)
    app.state.settings = settings

    origins = settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CivicError)
    async def civic_error_handler(request: Request, exc: CivicError) -> JSONResponse:
        status = error_status(exc)
        log_event(
            logger,
            f"{request.url.path} failed: {exc.message}",
            event="request_failed",
            stage=getattr(exc, "stage", None),
            status=status,
            error_code=exc.error_code,
        )
        return JSONResponse(error_payload(exc), status_code=status)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = validation_message(exc)
        log_event(logger, f"{request.url.path} rejected: {message}", event="request_failed", status=400, error_code="INVALID_INPUT")
        return JSONResponse({"error": message}, status_code=400)

    app.include_router(gateway.router, prefix="/api")

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        """Provide a lightweight landing page for container checks."""
        return JSONResponse(
            {
                "message": "Ballot Snapshot API",
                "docs": "/docs",
                "health": "/api/health",
            }
        )

    return app


app = create_app()
