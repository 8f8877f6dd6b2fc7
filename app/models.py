"""
ORM models for the product catalog.

Products are never physically removed: ``DELETE`` sets ``is_deleted``
and every read filters it out.  The indexes follow the queries the
listing endpoint actually runs (filter on ``is_deleted``/``is_active``
and ``category``, sort on price, stock or creation date).
"""

import uuid

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, JSON, String, Text
from sqlalchemy.sql import func

from app.database import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        Index("idx_is_deleted", "is_deleted"),
        Index("idx_deleted_active", "is_deleted", "is_active"),
        Index("idx_category", "category"),
        Index("idx_deleted_category_active", "is_deleted", "category", "is_active"),
        Index("idx_price", "price_cents"),
        Index("idx_stock", "stock"),
        Index("idx_created_at", "created_at"),
    )

    id = Column(String(32), primary_key=True, default=_new_id)
    sku = Column(String(64), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String(120), nullable=False)
    price_cents = Column(Integer, nullable=False, default=0)
    currency = Column(String(3), nullable=False)
    stock = Column(Integer, nullable=False, default=0)
    images = Column(JSON, nullable=False, default=list)
    attributes = Column(JSON, nullable=False, default=dict)
    is_active = Column(Boolean, nullable=False, default=True)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    def __repr__(self):
        return f"<Product(id={self.id}, sku='{self.sku}')>"
