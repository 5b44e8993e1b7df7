"""RentShare API application."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rentshare.api.v1.router import api_router
from rentshare.config import settings
from rentshare.core.exceptions import AppException
from rentshare.core.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from rentshare.database import close_db, init_db

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Third-party clients are chatty at INFO
    for noisy in ("httpx", "httpcore", "stripe"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # Local development runs without migrations
    if settings.debug:
        await init_db()
    logger.info(f"{settings.app_name} {settings.app_version} up ({settings.environment})")
    yield
    await close_db()


async def handle_app_exception(request: Request, exc: AppException) -> JSONResponse:
    """Render domain errors as ``{"detail", "code"}``."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: [{exc.code}] {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": exc.code},
        headers=exc.headers,
    )


def create_application() -> FastAPI:
    """Build the FastAPI app with middleware and routes."""
    docs_enabled = settings.debug
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Booking engine for peer-to-peer item rentals",
        docs_url="/docs" if docs_enabled else None,
        redoc_url=None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )
    app.add_exception_handler(AppException, handle_app_exception)

    # Last added runs first
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict:
        return {
            "status": "healthy",
            "version": settings.app_version,
            "environment": settings.environment,
            "timestamp": datetime.now(UTC).isoformat(),
        }

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        return {"name": settings.app_name, "version": settings.app_version}

    return app


configure_logging()
app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "rentshare.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=1 if settings.debug else settings.workers,
    )
