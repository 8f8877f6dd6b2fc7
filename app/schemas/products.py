"""
schemas/products.py
--------------------

Request and response models of the product endpoints.  The validators
apply the same sanity checks the catalog has always enforced: a
product needs a name and a SKU, and neither its price nor its stock can
be negative.  The response models double as the shapes cached product
payloads are decoded into.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductCreate(BaseModel):
    sku: str
    name: str
    description: str = ""
    category: str = Field(min_length=1)
    price_cents: int = Field(ge=0)
    currency: str = Field(min_length=1, max_length=3)
    stock: int = Field(default=0, ge=0)
    images: List[str] = Field(default_factory=list)
    attributes: Dict[str, Any] = Field(default_factory=dict)
    is_active: bool = True

    @field_validator("sku", "name")
    @classmethod
    def validar_no_vacio(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class ProductUpdate(BaseModel):
    """Partial update. Unknown and protected fields are ignored."""

    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = Field(default=None, min_length=1)
    price_cents: Optional[int] = Field(default=None, ge=0)
    currency: Optional[str] = Field(default=None, min_length=1, max_length=3)
    stock: Optional[int] = Field(default=None, ge=0)
    images: Optional[List[str]] = None
    attributes: Optional[Dict[str, Any]] = None
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def validar_nombre(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("must not be blank")
        return v


class ProductOut(BaseModel):
    """A product as returned by the API.

    ``description``, ``attributes`` and ``updated_at`` are ``None`` in
    summary listings, which only project the fields a catalog grid
    needs.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    sku: str
    name: str
    description: Optional[str] = None
    category: str
    price_cents: int
    currency: str
    stock: int
    images: List[str] = Field(default_factory=list)
    attributes: Optional[Dict[str, Any]] = None
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class ProductListResponse(BaseModel):
    page: int
    page_size: int
    total: int
    products: List[ProductOut]


class MessageResponse(BaseModel):
    message: str
