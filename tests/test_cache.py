"""Tests for TTLCache: expiry, invalidation and serialized values."""

import threading
import time
from datetime import datetime, timezone
from typing import List

import pytest
from pydantic import BaseModel

from app.utils.cache import DecodingError, EncodingError, TTLCache


class Item(BaseModel):
    id: str
    name: str
    price_cents: int
    tags: List[str] = []


def test_set_then_get(cache):
    cache.set("x", 42)
    assert cache.get("x") == (42, True)


def test_missing_key_is_not_found(cache):
    assert cache.get("nope") == (None, False)


def test_entry_expires_without_sweep(cache, clock):
    cache.set("x", 42, ttl=10)
    clock.advance(9)
    assert cache.get("x") == (42, True)
    clock.advance(1)
    assert cache.get("x") == (None, False)
    # still stored until the sweeper or a delete removes it
    assert cache.size() == 1


def test_default_ttl_applies(cache, clock):
    cache.set("x", "v")
    clock.advance(59)
    assert cache.get("x")[1] is True
    clock.advance(1)
    assert cache.get("x")[1] is False


def test_overwrite_replaces_value_and_expiry(cache, clock):
    cache.set("k", "v1", ttl=1)
    cache.set("k", "v2", ttl=100)
    clock.advance(50)
    assert cache.get("k") == ("v2", True)


def test_negative_ttl_is_immediately_expired(cache):
    cache.set("k", "v", ttl=-5)
    assert cache.get("k") == (None, False)


def test_delete_is_idempotent(cache):
    cache.set("a", 1)
    cache.delete("missing")
    cache.delete("a")
    cache.delete("a")
    assert cache.get("a") == (None, False)
    assert cache.size() == 0


def test_delete_by_prefix_only_touches_matching_keys(cache):
    cache.set("product:1", "p1")
    cache.set("product:2", "p2")
    cache.set("list:a", "la")
    assert cache.size() == 3

    removed = cache.delete_by_prefix("product:")

    assert removed == 2
    assert cache.get("product:1") == (None, False)
    assert cache.get("product:2") == (None, False)
    assert cache.get("list:a") == ("la", True)
    assert cache.size() == 1


def test_delete_by_prefix_without_matches(cache):
    cache.set("a", 1)
    assert cache.delete_by_prefix("zzz") == 0
    assert cache.size() == 1


def test_clear(cache):
    for i in range(5):
        cache.set(f"k{i}", i)
    cache.clear()
    assert cache.size() == 0
    assert len(cache) == 0


def test_empty_cache_size(cache):
    assert cache.size() == 0


def test_real_clock_expiry():
    c = TTLCache(60.0)
    c.set("x", 42, ttl=0.1)
    assert c.get("x") == (42, True)
    time.sleep(0.15)
    assert c.get("x") == (None, False)


def test_serialized_round_trip_model(cache):
    item = Item(id="abc", name="Mate", price_cents=300, tags=["bebida"])
    cache.put_serialized("product:abc", item)

    found, value = cache.get_serialized("product:abc", Item)

    assert found is True
    assert value == item


def test_serialized_round_trip_plain_data(cache):
    payload = {"page": 1, "items": [{"id": 1}, {"id": 2}], "ok": True, "note": None}
    cache.put_serialized("list:1", payload)
    assert cache.get_serialized("list:1") == (True, payload)


def test_serialized_values_are_bytes(cache):
    cache.put_serialized("k", {"when": datetime(2024, 1, 2, tzinfo=timezone.utc)})
    raw, found = cache.get("k")
    assert found
    assert isinstance(raw, bytes)
    assert b"2024-01-02T00:00:00+00:00" in raw


def test_serialized_miss(cache):
    assert cache.get_serialized("missing", Item) == (False, None)


def test_serialized_entry_expires(cache, clock):
    cache.put_serialized("k", {"a": 1}, ttl=5)
    clock.advance(5)
    assert cache.get_serialized("k") == (False, None)


def test_unencodable_value_stores_nothing(cache):
    with pytest.raises(EncodingError):
        cache.put_serialized("k", {"bad": object()})
    assert cache.get("k") == (None, False)
    assert cache.size() == 0


def test_plain_value_reads_as_serialized_miss(cache):
    cache.set("k", {"not": "bytes"})
    assert cache.get_serialized("k") == (False, None)


def test_corrupt_bytes_raise_decoding_error(cache):
    cache.set("k", b"{not json")
    with pytest.raises(DecodingError):
        cache.get_serialized("k")


def test_shape_mismatch_raises_decoding_error(cache):
    cache.put_serialized("k", {"id": "x"})
    with pytest.raises(DecodingError):
        cache.get_serialized("k", Item)


def test_sweep_expired_removes_only_expired(cache, clock):
    cache.set("short", 1, ttl=1)
    cache.set("long", 2, ttl=100)
    clock.advance(2)

    assert cache.sweep_expired() == 1
    assert cache.size() == 1
    assert cache.get("long") == (2, True)


def test_concurrent_reads_see_same_value(cache):
    cache.set("hot", {"id": 7})
    results = []
    errors = []
    start = threading.Barrier(16)

    def reader():
        try:
            start.wait(2.0)
            for _ in range(200):
                results.append(cache.get("hot"))
        except Exception as exc:  # pragma: no cover - reported below
            errors.append(exc)

    threads = [threading.Thread(target=reader) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(5.0)

    assert not errors
    assert len(results) == 16 * 200
    assert all(r == ({"id": 7}, True) for r in results)


def test_concurrent_writers_and_invalidation(cache):
    stop = threading.Event()

    def writer(n):
        i = 0
        while not stop.is_set():
            cache.set(f"product:{n}:{i % 50}", i)
            i += 1

    def invalidator():
        while not stop.is_set():
            cache.delete_by_prefix("product:")

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    threads.append(threading.Thread(target=invalidator))
    for t in threads:
        t.start()
    time.sleep(0.2)
    stop.set()
    for t in threads:
        t.join(5.0)

    assert all(not t.is_alive() for t in threads)
    cache.delete_by_prefix("product:")
    assert cache.size() == 0


def test_stats(cache):
    cache.set("a", 1)
    stats = cache.stats()
    assert stats["size"] == 1
    assert stats["default_ttl_s"] == 60.0
    assert stats["sweep_interval_s"] == 300.0
    assert stats["sweeper_running"] is False
