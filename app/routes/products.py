"""
routes/products.py
-------------------

Product catalog endpoints under ``/v1/products``.  Handlers stay thin:
they resolve the repository and the shared cache through dependencies,
log the request, and delegate to :mod:`app.services.product_service`.
"""

from __future__ import annotations

import json
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.logging_config import logger
from app.schemas.products import (
    MessageResponse,
    ProductCreate,
    ProductListResponse,
    ProductOut,
    ProductUpdate,
)
from app.services import product_service
from app.services.product_repository import ProductRepository
from app.utils.cache import TTLCache, get_request_cache
from app.utils.pagination import build_list_params

router = APIRouter(prefix="/v1/products", tags=["products"])


def get_repository(db: Session = Depends(get_db)) -> ProductRepository:
    return ProductRepository(db)


def _log_error(event: str, e: Exception, **fields) -> None:
    if isinstance(e, HTTPException) and e.status_code < 500:
        logger.info(json.dumps({"event": event, "status": e.status_code, **fields}))
        return
    logger.error(json.dumps({"event": event, "detalle": str(e), **fields}), exc_info=True)


@router.post("", response_model=ProductOut, status_code=201)
def post_product(
    data: ProductCreate,
    repo: ProductRepository = Depends(get_repository),
    cache: TTLCache = Depends(get_request_cache),
):
    logger.info(json.dumps({"event": "create_product_request", "sku": data.sku}))
    try:
        product = product_service.create_product(data, repo, cache)
    except Exception as e:
        _log_error("create_product_error", e, sku=data.sku)
        raise
    logger.info(json.dumps({"event": "create_product_response", "id": product.id}))
    return product


@router.get("", response_model=ProductListResponse)
def get_products(
    page: Optional[str] = None,
    page_size: Optional[str] = None,
    category: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    summary: bool = False,
    q: Optional[str] = None,
    active: Optional[str] = None,
    min_price: Optional[str] = None,
    max_price: Optional[str] = None,
    repo: ProductRepository = Depends(get_repository),
    cache: TTLCache = Depends(get_request_cache),
):
    """Paginated, filterable listing. Invalid paging or price values are ignored."""
    params = build_list_params(
        page,
        page_size,
        category,
        sort_by,
        sort_order,
        summary,
        q=q,
        active=active,
        min_price=min_price,
        max_price=max_price,
    )
    try:
        return product_service.list_products(params, repo, cache)
    except Exception as e:
        _log_error("list_products_error", e, params=params.canonical())
        raise


@router.get("/{product_id}", response_model=ProductOut)
def get_product(
    product_id: str,
    repo: ProductRepository = Depends(get_repository),
    cache: TTLCache = Depends(get_request_cache),
):
    try:
        return product_service.get_product(product_id, repo, cache)
    except Exception as e:
        _log_error("get_product_error", e, id=product_id)
        raise


@router.patch("/{product_id}", response_model=ProductOut)
def patch_product(
    product_id: str,
    data: ProductUpdate,
    repo: ProductRepository = Depends(get_repository),
    cache: TTLCache = Depends(get_request_cache),
):
    logger.info(json.dumps({
        "event": "update_product_request",
        "id": product_id,
        "fields": sorted(data.model_dump(exclude_unset=True)),
    }))
    try:
        return product_service.update_product(product_id, data, repo, cache)
    except Exception as e:
        _log_error("update_product_error", e, id=product_id)
        raise


@router.delete("/{product_id}", response_model=MessageResponse)
def delete_product(
    product_id: str,
    repo: ProductRepository = Depends(get_repository),
    cache: TTLCache = Depends(get_request_cache),
):
    logger.info(json.dumps({"event": "delete_product_request", "id": product_id}))
    try:
        product_service.delete_product(product_id, repo, cache)
    except Exception as e:
        _log_error("delete_product_error", e, id=product_id)
        raise
    return MessageResponse(message="product deleted successfully")
