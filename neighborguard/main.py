"""FastAPI application entry point for the NeighborGuard service."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from neighborguard.api.exception_handlers import register_exception_handlers
from neighborguard.api.middleware.request_id import RequestIDMiddleware
from neighborguard.api.routes import (
    circles,
    events,
    home,
    media,
    metrics,
    notifications,
    system,
    users,
)
from neighborguard.core import close_db, get_settings, init_db
from neighborguard.core.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifecycle - startup and shutdown events."""
    setup_logging()
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} {settings.app_version}")

    await init_db()
    logger.info("Database initialized")

    yield

    await close_db()
    logger.info("Database connections closed")


settings = get_settings()

app = FastAPI(
    title=f"{settings.app_name} API",
    description="Neighborhood safety circles: events, notes and notifications",
    version=settings.app_version,
    lifespan=lifespan,
)

# Add request ID middleware for log correlation
app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Register routers
app.include_router(system.router)
if settings.metrics_enabled:
    app.include_router(metrics.router)
app.include_router(users.router)
app.include_router(circles.router)
app.include_router(events.router)
app.include_router(notifications.router)
app.include_router(home.router)
app.include_router(media.router)


def run() -> None:
    """Serve the app with uvicorn on the configured host and port."""
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
