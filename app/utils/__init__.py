# app/utils/__init__.py
"""
Exporta las utilidades compartidas para que ``from app.utils import ...``
funcione sin conocer la estructura interna del paquete:

- TTLCache / init_cache / get_cache / shutdown_cache
- EncodingError / DecodingError
- ListParams / build_list_params
"""

from __future__ import annotations

from .cache import (
    CacheError,
    DecodingError,
    EncodingError,
    TTLCache,
    get_cache,
    get_request_cache,
    init_cache,
    shutdown_cache,
)
from .pagination import ListParams, build_list_params, get_pagination_params

__all__ = [
    "CacheError",
    "DecodingError",
    "EncodingError",
    "TTLCache",
    "get_cache",
    "get_request_cache",
    "init_cache",
    "shutdown_cache",
    "ListParams",
    "build_list_params",
    "get_pagination_params",
]
