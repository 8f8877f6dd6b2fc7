"""Tests for the background expiration sweeper."""

import threading
import time

import pytest

from app.utils.cache import TTLCache
from app.utils.sweeper import ExpirationSweeper


def _wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_sweeper_removes_expired_entries_in_background():
    c = TTLCache(60.0, sweep_interval=0.02)
    c.set("gone", 1, ttl=0.01)
    c.set("kept", 2, ttl=60)
    c.start_sweeper()
    try:
        assert _wait_for(lambda: c.size() == 1)
        assert c.get("kept") == (2, True)
        assert c.sweeper.ticks >= 1
    finally:
        c.stop_sweeper(timeout=2.0)


def test_stop_terminates_thread():
    c = TTLCache(60.0, sweep_interval=0.02)
    c.start_sweeper()
    assert c.sweeper.running
    c.stop_sweeper(timeout=2.0)
    assert not c.sweeper.running
    assert not any(t.name == "cache-expiration-sweeper" and t.is_alive() for t in threading.enumerate())


def test_stop_does_not_wait_for_the_interval():
    c = TTLCache(60.0, sweep_interval=3600)
    c.start_sweeper()
    started = time.monotonic()
    c.stop_sweeper(timeout=5.0)
    assert time.monotonic() - started < 1.0
    assert not c.sweeper.running


def test_start_is_idempotent(cache):
    cache.start_sweeper()
    first = cache.sweeper._thread
    cache.start_sweeper()
    assert cache.sweeper._thread is first


def test_sweeper_can_restart_after_stop(cache):
    cache.start_sweeper()
    cache.stop_sweeper(timeout=2.0)
    cache.start_sweeper()
    assert cache.sweeper.running


def test_interval_must_be_positive(cache):
    with pytest.raises(ValueError):
        ExpirationSweeper(cache, 0)


def test_stop_without_start_is_harmless(cache):
    cache.stop_sweeper(timeout=1.0)
    assert not cache.sweeper.running
