"""Tests for listing parameter normalisation."""

import pytest

from app.utils.pagination import build_list_params, get_pagination_params


@pytest.mark.parametrize(
    "page, page_size, expected",
    [
        (None, None, (1, 10)),
        (3, 25, (3, 25)),
        (0, 0, (1, 10)),
        (-2, 101, (1, 10)),
        ("4", "100", (4, 100)),
        ("abc", "xyz", (1, 10)),
    ],
)
def test_get_pagination_params(page, page_size, expected):
    assert get_pagination_params(page, page_size) == expected


def test_defaults():
    params = build_list_params()
    assert params.sort_by == "created_at"
    assert params.sort_order == "desc"
    assert params.category == ""
    assert params.summary is False
    assert params.offset == 0


def test_unknown_sort_field_falls_back():
    params = build_list_params(sort_by="password", sort_order="ASC")
    assert params.sort_by == "created_at"
    assert params.sort_order == "asc"


def test_canonical_form_is_stable():
    a = build_list_params(page="2", page_size="20", category=" toys ", sort_by="price_cents", sort_order="asc", summary=True)
    b = build_list_params(page=2, page_size=20, category="toys", sort_by="price_cents", sort_order="asc", summary=True)
    assert a == b
    assert a.canonical() == "2:20:toys:price_cents:asc:1::::"
    assert a.offset == 20


def test_filters_default_to_unset():
    params = build_list_params()
    assert params.q == ""
    assert params.active is None
    assert params.min_price is None
    assert params.max_price is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, None),
        ("", None),
        ("true", True),
        ("false", False),
        ("yes", False),
        (True, True),
    ],
)
def test_active_filter(raw, expected):
    assert build_list_params(active=raw).active is expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, None),
        ("0", None),
        ("-5", None),
        ("abc", None),
        ("250", 250),
        (900, 900),
    ],
)
def test_price_bounds_only_apply_when_positive(raw, expected):
    params = build_list_params(min_price=raw, max_price=raw)
    assert params.min_price == expected
    assert params.max_price == expected


def test_each_filter_combination_has_its_own_key():
    base = build_list_params()
    variants = [
        build_list_params(q="mate"),
        build_list_params(active="true"),
        build_list_params(active="false"),
        build_list_params(min_price="100"),
        build_list_params(max_price="100"),
    ]
    keys = {base.canonical()} | {p.canonical() for p in variants}
    assert len(keys) == 6


def test_free_text_cannot_collide_across_fields():
    a = build_list_params(category="a:b", q="")
    b = build_list_params(category="a", q="b")
    assert a.canonical() != b.canonical()
    assert build_list_params(q=" mate ").canonical().split(":")[6] == "mate"
