"""ASGI application for the settlement robot portal."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from postgrest.exceptions import APIError as PostgrestError
from starlette.middleware.base import BaseHTTPMiddleware

from src.api.middleware.error_handler import (
    APIError,
    api_error_exception_handler,
    database_error_exception_handler,
    error_handler_middleware,
)
from src.api.middleware.latency_logging import latency_logging_middleware
from src.api.middleware.request_size import request_size_limit_middleware
from src.api.routes import (
    auth,
    contracts,
    corporations,
    health,
    invitations,
    notifications,
    profiles,
    system,
    users,
)
from src.core.config import get_settings
from src.core.rate_limiter import init_login_throttle, shutdown_login_throttle

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

API_V1_ROUTERS = (
    auth.router,
    profiles.router,
    users.router,
    contracts.router,
    system.router,
    corporations.router,
    invitations.router,
    notifications.router,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Run the login throttle's sweeper for the lifetime of the app."""
    settings = get_settings()
    logger.info("Starting %s (%s)", settings.app_name, settings.app_env)
    await init_login_throttle()

    yield

    await shutdown_login_throttle()
    logger.info("Stopped %s", settings.app_name)


def create_app() -> FastAPI:
    """Build the application.

    Middleware runs outermost first: request size limit, latency logging,
    error handling, then CORS. API docs are only served in debug mode.
    """
    settings = get_settings()

    app = FastAPI(
        title="Settlement Robot Portal API",
        description="Corporations, contracts, users and permissions for the settlement robot portal",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(BaseHTTPMiddleware, dispatch=error_handler_middleware)
    app.add_middleware(BaseHTTPMiddleware, dispatch=latency_logging_middleware)
    app.add_middleware(BaseHTTPMiddleware, dispatch=request_size_limit_middleware)

    app.add_exception_handler(APIError, api_error_exception_handler)
    app.add_exception_handler(PostgrestError, database_error_exception_handler)

    app.include_router(health.router)

    api_v1 = APIRouter(prefix="/api/v1")
    for router in API_V1_ROUTERS:
        api_v1.include_router(router)
    app.include_router(api_v1)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("src.main:app", host=settings.host, port=settings.port, reload=settings.debug)
