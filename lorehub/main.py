"""
LoreHub - FastAPI application

Character relationships, lore entries, fan theories and timelines for a
fan lore site.
"""

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Any
import logging

from sqlalchemy.exc import SQLAlchemyError

from lorehub.core.config import settings
from lorehub.core.database import check_db_connection, init_db
from lorehub.core.errors import ConflictError, LoreHubError, StoreError
from lorehub.core.rate_limit import close_redis_client

from lorehub.api.characters import router as characters_router
from lorehub.api.lore import router as lore_router
from lorehub.api.theories import router as theories_router
from lorehub.api.timelines import router as timelines_router
from lorehub.api.series import router as series_router
from lorehub.api.profiles import router as profiles_router
from lorehub.api.moderation import router as moderation_router

# Logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("LoreHub API starting")

    # Create tables (development)
    if settings.ENVIRONMENT == "development":
        await init_db()
        logger.info("Database tables ready")

    yield

    await close_redis_client()
    logger.info("LoreHub API stopped")


app = FastAPI(
    title="LoreHub API",
    description="Relationship and association graph for a fan lore site",
    version=APP_VERSION,
    docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT == "development" else None,
    lifespan=lifespan
)

# CORS: the frontend origin, plus local dev servers in development
ALLOWED_ORIGINS = [settings.FRONTEND_BASE_URL]
if settings.ENVIRONMENT == "development":
    ALLOWED_ORIGINS += ["http://localhost:5173", "http://127.0.0.1:5173"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=sorted(set(ALLOWED_ORIGINS)),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(error: str, message: str, details: Any, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "message": message, "details": details},
    )


@app.exception_handler(LoreHubError)
async def lorehub_error_handler(request: Request, exc: LoreHubError):
    if isinstance(exc, ConflictError):
        logger.warning(f"Conflict on {request.method} {request.url.path}: {exc.message}")
        return _error_response(exc.code, "The change conflicts with another update. Please try again.",
                               None, exc.status_code)
    if isinstance(exc, StoreError):
        logger.error(f"Store error on {request.method} {request.url.path}: {exc.__cause__ or exc.message}")
        return _error_response(exc.code, "The service is temporarily unavailable. Please try again.",
                               None, exc.status_code)
    return _error_response(exc.code, exc.message, exc.details, exc.status_code)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return _error_response(StoreError.code, "The service is temporarily unavailable. Please try again.",
                           None, status.HTTP_503_SERVICE_UNAVAILABLE)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _error_response("internal_error", "Internal server error.", {"type": type(exc).__name__},
                           status.HTTP_500_INTERNAL_SERVER_ERROR)


app.include_router(characters_router, prefix="/characters", tags=["characters"])
app.include_router(lore_router, prefix="/lore", tags=["lore"])
app.include_router(theories_router, prefix="/theories", tags=["theories"])
app.include_router(timelines_router, prefix="/timelines", tags=["timelines"])
app.include_router(series_router, prefix="/series", tags=["series"])
app.include_router(profiles_router, prefix="/profiles", tags=["profiles"])
app.include_router(moderation_router, prefix="/moderation", tags=["moderation"])


@app.get("/")
async def root():
    return {
        "message": "LoreHub API",
        "version": APP_VERSION,
        "docs": "/docs",
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check"""
    database_ok = await check_db_connection()
    return {
        "status": "healthy" if database_ok else "degraded",
        "environment": settings.ENVIRONMENT,
        "database": "connected" if database_ok else "unavailable",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "lorehub.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
