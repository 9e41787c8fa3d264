"""FastAPI application for the motorcycle marketplace API."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError

from .core.config import settings
from .routers import bookings as bookings_router
from .routers import listings as listings_router
from .routers import services as services_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="MotoMarket API", version="0.1.0")

if settings.cors_allow_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(listings_router.router, prefix="/api/listings", tags=["listings"])
app.include_router(services_router.router, prefix="/api/services", tags=["services"])
app.include_router(bookings_router.router, prefix="/api/bookings", tags=["bookings"])


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Log persistence failures and hide their details from callers."""

    logger.exception("Database error while handling %s %s", request.method, request.url.path)
    detail = "Internal server error"
    if settings.is_development:
        detail = f"{detail} ({type(exc).__name__})"
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": detail})


@app.get("/api/health", tags=["meta"])
async def health() -> dict[str, str]:
    """Simple liveness check."""

    return {"status": "ok"}


@app.head("/api/health", tags=["meta"])
async def health_head() -> Response:
    """Allow HEAD for uptime monitors that only need the status code."""

    return Response(status_code=200)
