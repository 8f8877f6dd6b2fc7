"""
services/product_service.py
---------------------------

Business logic of the catalog endpoints: cache-aside reads and
invalidate-on-write around :class:`ProductRepository`.

Cache keys come in two families that never share a prefix:

* ``product:<id>`` holds one serialized product;
* ``products:list:<canonical params>`` holds one serialized listing
  page, one key per combination of paging, sorting and filters.

Any write drops the affected ``product:`` key and every
``products:list:`` key, because a single create, update or delete can
change the content, order or total of any listing page.  The cache is
only an accelerator: a miss, an expired entry or a corrupt blob all
fall back to the database.

A read that misses can load a row, lose the CPU to a write that
commits and invalidates, and only then store what it loaded.  To keep
that old row from living in the cache for a whole TTL, every
invalidation bumps a generation counter; a read only stores its result
if the generation it saw before querying is still current, and the
check and the store happen under the same lock as the bump and the
deletes.
"""

from __future__ import annotations

import json
import threading

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import get_settings
from app.logging_config import logger, log_call
from app.schemas.products import (
    ProductCreate,
    ProductListResponse,
    ProductOut,
    ProductUpdate,
)
from app.services.product_repository import (
    DuplicateSkuError,
    InvalidProductIdError,
    ProductNotFoundError,
    ProductRepository,
)
from app.utils.cache import DecodingError, EncodingError, TTLCache
from app.utils.pagination import ListParams

PRODUCT_KEY_PREFIX = "product:"
LIST_KEY_PREFIX = "products:list:"

_generation = 0
_generation_lock = threading.Lock()


def current_generation() -> int:
    with _generation_lock:
        return _generation


def product_cache_key(product_id: str) -> str:
    return f"{PRODUCT_KEY_PREFIX}{product_id}"


def list_cache_key(params: ListParams) -> str:
    return f"{LIST_KEY_PREFIX}{params.canonical()}"


def _read_cached(cache: TTLCache, key: str, shape):
    """Return the cached object or ``None``; corrupt entries count as misses."""
    try:
        found, value = cache.get_serialized(key, shape)
    except DecodingError as e:
        logger.warning(json.dumps({
            "event": "cache_decode_error",
            "key": key,
            "detalle": str(e),
        }))
        return None
    if found:
        logger.debug(json.dumps({"event": "cache_hit", "key": key}))
        return value
    logger.debug(json.dumps({"event": "cache_miss", "key": key}))
    return None


def _write_cached(cache: TTLCache, key: str, value, ttl: float, generation: int) -> None:
    try:
        with _generation_lock:
            if generation != _generation:
                # una escritura invalidó mientras leíamos la base
                logger.debug(json.dumps({"event": "cache_store_skipped", "key": key}))
                return
            cache.put_serialized(key, value, ttl)
    except EncodingError as e:
        # sin caché la respuesta sigue siendo correcta
        logger.warning(json.dumps({
            "event": "cache_encode_error",
            "key": key,
            "detalle": str(e),
        }))


def _invalidate(cache: TTLCache, product_id: str | None = None) -> None:
    global _generation
    with _generation_lock:
        _generation += 1
        if product_id is not None:
            cache.delete(product_cache_key(product_id))
        removed = cache.delete_by_prefix(LIST_KEY_PREFIX)
    logger.info(json.dumps({
        "event": "cache_invalidated",
        "product_id": product_id,
        "list_entries_removed": removed,
    }))


def _raise_for(e: Exception, action: str) -> None:
    if isinstance(e, InvalidProductIdError):
        raise HTTPException(status_code=400, detail="invalid product ID") from e
    if isinstance(e, ProductNotFoundError):
        raise HTTPException(status_code=404, detail="product not found") from e
    if isinstance(e, DuplicateSkuError):
        raise HTTPException(status_code=409, detail=str(e)) from e
    logger.error(json.dumps({"event": "database_error", "action": action, "detalle": str(e)}), exc_info=e)
    raise HTTPException(status_code=500, detail=f"could not {action}") from e


_HANDLED = (InvalidProductIdError, ProductNotFoundError, DuplicateSkuError, SQLAlchemyError)


@log_call
def get_product(product_id: str, repo: ProductRepository, cache: TTLCache) -> ProductOut:
    key = product_cache_key(product_id)
    cached = _read_cached(cache, key, ProductOut)
    if cached is not None:
        return cached
    generation = current_generation()
    try:
        product = repo.find_by_id(product_id)
    except _HANDLED as e:
        _raise_for(e, "get product")
    _write_cached(cache, key, product, get_settings().product_cache_ttl, generation)
    return product


@log_call
def list_products(params: ListParams, repo: ProductRepository, cache: TTLCache) -> ProductListResponse:
    key = list_cache_key(params)
    cached = _read_cached(cache, key, ProductListResponse)
    if cached is not None:
        return cached
    generation = current_generation()
    try:
        products, total = repo.find_all(params)
    except SQLAlchemyError as e:
        _raise_for(e, "fetch products")
    response = ProductListResponse(
        page=params.page,
        page_size=params.page_size,
        total=total,
        products=products,
    )
    _write_cached(cache, key, response, get_settings().list_cache_ttl, generation)
    return response


@log_call
def create_product(data: ProductCreate, repo: ProductRepository, cache: TTLCache) -> ProductOut:
    try:
        product = repo.create(data)
    except _HANDLED as e:
        _raise_for(e, "create product")
    _invalidate(cache)
    return product


@log_call
def update_product(product_id: str, data: ProductUpdate, repo: ProductRepository, cache: TTLCache) -> ProductOut:
    fields = data.model_dump(exclude_unset=True, exclude_none=True)
    try:
        product = repo.update(product_id, fields)
    except _HANDLED as e:
        _raise_for(e, "update product")
    _invalidate(cache, product_id)
    return product


@log_call
def delete_product(product_id: str, repo: ProductRepository, cache: TTLCache) -> None:
    try:
        repo.soft_delete(product_id)
    except _HANDLED as e:
        _raise_for(e, "delete product")
    _invalidate(cache, product_id)
