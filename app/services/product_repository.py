"""
services/product_repository.py
------------------------------

Database access for products.  This is the system of record behind the
cache: every cached read path falls back to these queries, and every
write here is followed by a cache invalidation in
:mod:`app.services.product_service`.

The repository speaks ORM rows internally and hands out
:class:`~app.schemas.products.ProductOut` models, so that nothing
outside this module depends on SQLAlchemy sessions staying open.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Tuple

from sqlalchemy import asc, desc, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import Product
from app.schemas.products import ProductCreate, ProductOut
from app.utils.pagination import ListParams

_ID_RE = re.compile(r"^[0-9a-f]{32}$")

# campos que el usuario no puede tocar en un update
PROTECTED_FIELDS = frozenset({"id", "created_at", "updated_at", "is_deleted"})

UPDATABLE_FIELDS = frozenset({
    "name",
    "description",
    "category",
    "price_cents",
    "currency",
    "stock",
    "images",
    "attributes",
    "is_active",
})


class RepositoryError(Exception):
    """Base class for product store errors."""


class ProductNotFoundError(RepositoryError):
    def __init__(self, product_id: str) -> None:
        super().__init__("product not found")
        self.product_id = product_id


class InvalidProductIdError(RepositoryError):
    def __init__(self, product_id: str) -> None:
        super().__init__("invalid product ID")
        self.product_id = product_id


class DuplicateSkuError(RepositoryError):
    def __init__(self, sku: str) -> None:
        super().__init__(f"a product with SKU '{sku}' already exists")
        self.sku = sku


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_out(row: Product) -> ProductOut:
    return ProductOut.model_validate(row)


def _to_summary(row: Product) -> ProductOut:
    """Projection used by summary listings: first image only, no details."""
    return ProductOut(
        id=row.id,
        sku=row.sku,
        name=row.name,
        category=row.category,
        price_cents=row.price_cents,
        currency=row.currency,
        stock=row.stock,
        images=list(row.images or [])[:1],
        is_active=row.is_active,
        created_at=row.created_at,
    )


class ProductRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def _check_id(self, product_id: str) -> None:
        if not _ID_RE.match(product_id or ""):
            raise InvalidProductIdError(product_id)

    def _get_live(self, product_id: str) -> Product:
        self._check_id(product_id)
        row = self.session.scalar(
            select(Product).where(Product.id == product_id, Product.is_deleted.is_(False))
        )
        if row is None:
            raise ProductNotFoundError(product_id)
        return row

    def create(self, data: ProductCreate) -> ProductOut:
        now = _utcnow()
        row = Product(**data.model_dump(), created_at=now, updated_at=now, is_deleted=False)
        self.session.add(row)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise DuplicateSkuError(data.sku) from exc
        # recargar desde la base para que POST y GET serialicen igual las fechas
        self.session.refresh(row)
        return _to_out(row)

    def find_by_id(self, product_id: str) -> ProductOut:
        return _to_out(self._get_live(product_id))

    def find_all(self, params: ListParams) -> Tuple[List[ProductOut], int]:
        conditions = [Product.is_deleted.is_(False)]
        if params.q:
            conditions.append(or_(
                Product.name.icontains(params.q, autoescape=True),
                Product.description.icontains(params.q, autoescape=True),
                Product.category.icontains(params.q, autoescape=True),
            ))
        if params.category:
            conditions.append(Product.category == params.category)
        if params.active is not None:
            conditions.append(Product.is_active.is_(params.active))
        if params.min_price is not None:
            conditions.append(Product.price_cents >= params.min_price)
        if params.max_price is not None:
            conditions.append(Product.price_cents <= params.max_price)

        total = self.session.scalar(select(func.count()).select_from(Product).where(*conditions)) or 0

        column = getattr(Product, params.sort_by)
        order = asc(column) if params.sort_order == "asc" else desc(column)
        stmt = (
            select(Product)
            .where(*conditions)
            .order_by(order, Product.id)
            .offset(params.offset)
            .limit(params.page_size)
        )
        rows = self.session.scalars(stmt).all()
        convert = _to_summary if params.summary else _to_out
        return [convert(row) for row in rows], int(total)

    def update(self, product_id: str, fields: Dict[str, Any]) -> ProductOut:
        row = self._get_live(product_id)
        for name, value in fields.items():
            if name in PROTECTED_FIELDS or name not in UPDATABLE_FIELDS:
                continue
            setattr(row, name, value)
        row.updated_at = _utcnow()
        self.session.commit()
        self.session.refresh(row)
        return _to_out(row)

    def soft_delete(self, product_id: str) -> None:
        row = self._get_live(product_id)
        row.is_deleted = True
        row.updated_at = _utcnow()
        self.session.commit()
