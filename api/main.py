"""
Main FastAPI application for Prompt Desk Bot.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .middleware.metrics import MetricsMiddleware, metrics_endpoint
from .routes import telegram
from .services import get_services, initialize_services
from config.settings import get_settings

logger = logging.getLogger(__name__)


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Prompt Desk Bot starting up...")

    await initialize_services()
    logger.info("Prompt Desk Bot ready")
    yield
    logger.info("Prompt Desk Bot shutting down...")
    await get_services().shutdown()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        description="Menu-driven question-and-answer bot for Telegram.",
        version=settings.api_version,
        lifespan=lifespan,
    )

    # Prometheus metrics middleware
    app.add_middleware(MetricsMiddleware)

    app.include_router(telegram.router, tags=["Telegram"])

    # --- Prometheus metrics endpoint ---
    app.get("/metrics", tags=["Monitoring"])(metrics_endpoint)

    # Root endpoint
    @app.get("/")
    async def root():
        return {
            "service": settings.api_title,
            "version": settings.api_version,
            "status": "operational",
        }

    # Health check
    @app.get("/health")
    async def health():
        services = get_services()
        return {
            "status": "healthy" if services.is_ready else "degraded",
            "services": services.health(),
        }

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    s = get_settings()
    uvicorn.run(app, host=s.api_host, port=s.port)
