"""
FastAPI application for the salon scheduling core

Thin request handlers over the availability, booking and reschedule services
"""
import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from salon_scheduling.api.v1.router import api_v1_router
from salon_scheduling.config.settings import get_settings
from salon_scheduling.core.exceptions import SchedulingError
from salon_scheduling.core.middleware import correlation_id_middleware, request_logging_middleware
from salon_scheduling.core.monitoring import health_router
from salon_scheduling.utils.my_logging import setup_logging

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    setup_logging()
    logger.info(f"{settings.APP_NAME} API starting up")
    yield
    logger.info(f"{settings.APP_NAME} API shutting down")


async def scheduling_error_handler(request: Request, exc: SchedulingError):
    """Render scheduling failures as {"detail": message} with their status code"""
    logger.info(
        f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}",
        extra={"correlation_id": getattr(request.state, "correlation_id", "unknown")}
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""

    app = FastAPI(
        title="Salon Scheduling API",
        description="Availability, booking and reschedule links for the grooming salon",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "PUT"],
        allow_headers=["*"],
    )

    # Add custom middleware
    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(correlation_id_middleware)

    app.add_exception_handler(SchedulingError, scheduling_error_handler)

    # Include routers
    app.include_router(health_router, prefix="/health", tags=["monitoring"])
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {
            "service": "Salon Scheduling API",
            "version": "0.1.0",
            "status": "running",
            "endpoints": {
                "api": "/api/v1/",
                "health": "/health",
                "docs": "/docs" if settings.DEBUG else "disabled"
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "salon_scheduling.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
