"""
routes/health.py
----------------

Liveness endpoint.  Reports whether the database answers and a
best-effort view of the cache (its entry count includes expired
entries the sweeper has not removed yet).
"""

from __future__ import annotations

import json

from fastapi import APIRouter, Depends
from fastapi.responses import ORJSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.database import check_database
from app.logging_config import logger
from app.utils.cache import TTLCache, get_request_cache

router = APIRouter(tags=["health"])


@router.get("/health")
def health(cache: TTLCache = Depends(get_request_cache)):
    database = "ok"
    try:
        check_database()
    except SQLAlchemyError as e:
        database = "unavailable"
        logger.error(json.dumps({"event": "health_database_error", "detalle": str(e)}))
    body = {
        "status": "ok" if database == "ok" else "degraded",
        "database": database,
        "cache": cache.stats(),
    }
    return ORJSONResponse(body, status_code=200 if database == "ok" else 503)
