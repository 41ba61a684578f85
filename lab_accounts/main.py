"""FastAPI application wiring for the lab account service."""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .api.routes import router as v1_router
from .cache import RedisCacheStore, build_cache_store
from .config import get_settings
from .domain.service import LabAccountService
from .errors import RecordDecodeError

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise the cache store and account service for the app lifecycle."""
    naming = settings.naming()
    store = build_cache_store(settings)
    app.state.cache_store = store
    app.state.account_service = LabAccountService(store, naming)
    try:
        yield
    finally:
        if isinstance(store, RedisCacheStore):
            await store.close()


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)


@app.exception_handler(RecordDecodeError)
async def corrupt_record_handler(request: Request, exc: RecordDecodeError) -> JSONResponse:
    logger.error("refusing to serve %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "corrupt account record"},
    )


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


@app.get("/metrics")
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(v1_router)
