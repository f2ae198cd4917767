"""
Panel Notation - service entry point
Normalizes panel machining notation (edgeband, groove, drilling, CNC)
"""

import logging
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app

from panel_notation import __version__
from panel_notation.api import api_router
from panel_notation.core.config import get_settings
from panel_notation.core.errors import DialectError
from panel_notation.core.services.default_dialect import DEFAULT_DIALECT_VERSION
from panel_notation.core.services.runtime import get_store
from panel_notation.utils.logging import setup_logging

settings = get_settings()

setup_logging(settings.LOG_LEVEL, settings.LOG_JSON)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Starting Panel Notation service",
        extra={"path": str(get_store().config.dir_path)},
    )
    yield
    logger.info("Shutting down Panel Notation service")


app = FastAPI(
    title="Panel Notation",
    description="Service notation normalization for panel machining",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")

metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)


@app.exception_handler(DialectError)
async def dialect_error_handler(request: Request, exc: DialectError) -> JSONResponse:
    logger.warning(
        "dialect configuration rejected",
        extra={"organization_id": exc.organization_id, "error_code": exc.to_dict()["code"], "path": request.url.path},
    )
    return JSONResponse(status_code=422, content={"detail": exc.to_dict()})


@app.get("/")
async def root():
    return {
        "name": "Panel Notation",
        "version": __version__,
        "status": "running",
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health_check():
    current_settings = get_settings()
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "runtime": {
            "python_version": sys.version.split(" ")[0],
            "default_dialect_version": DEFAULT_DIALECT_VERSION,
        },
        "config": {
            "dialect_dir": current_settings.DIALECT_DIR,
            "dialect_cache_ttl_seconds": current_settings.DIALECT_CACHE_TTL_SECONDS,
            "shortcode_cache_ttl_seconds": current_settings.SHORTCODE_CACHE_TTL_SECONDS,
            "nl_heuristics_enabled": current_settings.NL_HEURISTICS_ENABLED,
            "debug": current_settings.DEBUG,
            "log_level": current_settings.LOG_LEVEL,
        },
    }


if __name__ == "__main__":
    uvicorn.run(
        "panel_notation.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
