"""
FastAPI Production Application

Main entry point for the storefront admin and webhook API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import structlog

from storefront.config import get_settings
from storefront.config.logging import configure_logging
from storefront.database.connection import init_database, close_database
from storefront.errors import StoreUnavailableError
from storefront.serving.api.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from storefront.serving.api.routes import (
    admin_router,
    health_router,
    webhooks_router,
)

settings = get_settings()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()

    logger.info("Starting storefront API", environment=settings.app_env)

    if settings.stripe.webhook_secret is None:
        logger.warning("STRIPE_WEBHOOK_SECRET is not set, Stripe webhooks will be rejected")

    await init_database()

    yield

    logger.info("Shutting down...")
    await close_database()


async def store_unavailable_handler(request: Request, exc: StoreUnavailableError) -> JSONResponse:
    """Translate store failures into a 500 without leaking driver details."""
    logger.error(
        "Store unavailable",
        path=request.url.path,
        cause=type(exc.__cause__).__name__ if exc.__cause__ else None,
    )
    return JSONResponse(status_code=500, content={"detail": "Store unavailable"})


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="Storefront API",
        description="Admin dashboard, order management and payment webhooks",
        version=settings.version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    app.add_exception_handler(StoreUnavailableError, store_unavailable_handler)

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(admin_router, prefix="/api/v1/admin", tags=["Admin"])
    app.include_router(webhooks_router, prefix="/api", tags=["Webhooks"])

    @app.get("/api/v1/info")
    async def api_info():
        """API information endpoint."""
        return {
            "name": "Storefront API",
            "version": settings.version,
            "environment": settings.app_env,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
