"""
Tenantdeck API Server

Entry point for the FastAPI application.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tenantdeck.api.v1 import router as api_v1_router
from tenantdeck.api.v1.auth import router as auth_router
from tenantdeck.core.config import get_settings
from tenantdeck.core.errors import ServiceError
from tenantdeck.core.redis import close_redis
from tenantdeck_shared.schemas.common import ErrorBody, ErrorResponse

settings = get_settings()
log = structlog.get_logger()


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render typed service failures as ``{"error": {"code", "message"}}``."""
    body = ErrorResponse(error=ErrorBody(code=exc.code, message=exc.message))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Tenantdeck",
        description="Organizations, members, invitations and projects for multi-tenant apps.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.add_exception_handler(ServiceError, service_error_handler)

    # Auth routes (not org-scoped)
    app.include_router(auth_router, prefix="/auth", tags=["Authentication"])

    # API routes
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint for liveness probes."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Readiness check endpoint for startup probes."""
        return {"status": "ready"}

    @app.on_event("startup")
    async def on_startup():
        log.info("Tenantdeck starting", debug=settings.debug)

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("Tenantdeck shutting down")
        await close_redis()

    return app


app = create_app()
