# main.py
from __future__ import annotations

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse

# Import logging utilities early so that the logger configuration is
# applied before any other modules emit log messages.
from app.logging_config import logger
import json
import time

from app.core.config import get_settings
from app.database import init_db
from app.routes.health import router as health_router
from app.routes.products import router as products_router
from app.utils.cache import init_cache, shutdown_cache


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    init_db()
    # una sola caché por proceso, compartida por todos los workers del pool
    app.state.cache = init_cache(settings.cache_default_ttl, settings.cache_sweep_interval)
    try:
        yield
    finally:
        # detener el sweeper y vaciar la caché antes de salir
        shutdown_cache()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Product Catalog",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    app.include_router(products_router)
    app.include_router(health_router)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        # el catálogo siempre respondió 400 ante payloads inválidos
        return ORJSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    # -----------------------------------------------------------------
    # Middleware de logging de requests
    # -----------------------------------------------------------------
    # Registra camino, método, código de respuesta y duración de cada
    # solicitud como un objeto JSON.
    @app.middleware("http")  # type: ignore[misc]
    async def log_requests(request: Request, call_next):
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info(json.dumps({
            "event": "http_request",
            "path": request.url.path,
            "method": request.method,
            "status": response.status_code,
            "duration_ms": round(duration_ms, 2),
        }))
        return response

    return app

app = create_app()
