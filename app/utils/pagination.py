"""
utils/pagination.py
--------------------

Normalisation of the listing query parameters.

Clients send ``page``, ``page_size``, ``sort_by`` and ``sort_order`` as
free-form query strings.  Rather than rejecting odd values the catalog
falls back to sensible defaults:

* ``page`` below 1 becomes 1.
* ``page_size`` below 1 or above the configured maximum becomes the
  default page size.
* ``sort_by`` outside the sortable columns becomes ``created_at``.
* ``sort_order`` is ``asc`` only when spelled so; anything else is
  ``desc``.

The filters follow the same forgiving rules:

* ``q`` is a case-insensitive substring match on name, description and
  category; blank means no search.
* ``active`` filters on ``is_active``: ``"true"`` keeps active
  products, any other non-empty value keeps inactive ones.
* ``min_price`` / ``max_price`` bound ``price_cents`` and are only
  applied when they parse as integers greater than zero.

The resulting :class:`ListParams` is hashable and has a stable text
form, which the product service uses to build listing cache keys.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union
from urllib.parse import quote

from app.core.config import get_settings

DEFAULT_PAGE = 1
DEFAULT_SORT_FIELD = "created_at"

SORTABLE_FIELDS = frozenset({
    "name",
    "sku",
    "category",
    "price_cents",
    "stock",
    "created_at",
    "updated_at",
})


@dataclass(frozen=True)
class ListParams:
    page: int = DEFAULT_PAGE
    page_size: int = 10
    category: str = ""
    sort_by: str = DEFAULT_SORT_FIELD
    sort_order: str = "desc"
    summary: bool = False
    q: str = ""
    active: Optional[bool] = None
    min_price: Optional[int] = None
    max_price: Optional[int] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def canonical(self) -> str:
        """Stable ``:``-joined form, e.g. ``2:10:toys:price_cents:asc:0:mate:1:100:``.

        Free text is percent-encoded so a ``:`` typed by the client
        cannot shift the fields of another combination onto this key.
        """
        if self.active is None:
            active = ""
        else:
            active = "1" if self.active else "0"
        return ":".join((
            str(self.page),
            str(self.page_size),
            quote(self.category, safe=""),
            self.sort_by,
            self.sort_order,
            "1" if self.summary else "0",
            quote(self.q, safe=""),
            active,
            "" if self.min_price is None else str(self.min_price),
            "" if self.max_price is None else str(self.max_price),
        ))


def _to_int(value: Union[int, str, None]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def get_pagination_params(page: Union[int, str, None], page_size: Union[int, str, None]) -> Tuple[int, int]:
    """Clamp ``page`` and ``page_size`` into the accepted range.

    Values that are not integers at all (``"abc"``) are treated as
    missing.
    """
    settings = get_settings()
    page_num = _to_int(page)
    size = _to_int(page_size)
    if page_num is None or page_num < 1:
        page_num = DEFAULT_PAGE
    if size is None or size < 1 or size > settings.max_page_size:
        size = settings.default_page_size
    return page_num, size


def _price_bound(value: Union[int, str, None]) -> Optional[int]:
    price = _to_int(value)
    if price is None or price <= 0:
        return None
    return price


def _active_filter(value: Union[bool, str, None]) -> Optional[bool]:
    if value is None or isinstance(value, bool):
        return value
    value = value.strip()
    if not value:
        return None
    return value == "true"


def build_list_params(
    page: Union[int, str, None] = None,
    page_size: Union[int, str, None] = None,
    category: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    summary: bool = False,
    q: Optional[str] = None,
    active: Union[bool, str, None] = None,
    min_price: Union[int, str, None] = None,
    max_price: Union[int, str, None] = None,
) -> ListParams:
    page, page_size = get_pagination_params(page, page_size)
    field = (sort_by or "").strip()
    if field not in SORTABLE_FIELDS:
        field = DEFAULT_SORT_FIELD
    order = "asc" if (sort_order or "").strip().lower() == "asc" else "desc"
    return ListParams(
        page=page,
        page_size=page_size,
        category=(category or "").strip(),
        sort_by=field,
        sort_order=order,
        summary=bool(summary),
        q=(q or "").strip(),
        active=_active_filter(active),
        min_price=_price_bound(min_price),
        max_price=_price_bound(max_price),
    )
