"""
Shared pytest configuration.

The environment is set before any ``app`` module is imported so that
settings, the database engine and the logger pick up the test values:
an in-memory SQLite database shared by every thread and a quiet logger.
"""

import os

os.environ["APP_DATABASE_URL"] = "sqlite://"
os.environ.setdefault("APP_LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from app.database import Base, engine
from app.main import app
from app.utils.cache import TTLCache, shutdown_cache


class FakeClock:
    """Monotonic nanosecond clock moved by hand."""

    def __init__(self, start: int = 1_000_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += int(seconds * 1_000_000_000)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    """A private cache on the fake clock; its sweeper is not started."""
    c = TTLCache(60.0, sweep_interval=300.0, clock=clock)
    yield c
    c.stop_sweeper(timeout=2.0)


@pytest.fixture(autouse=True)
def reset_shared_cache():
    shutdown_cache()
    yield
    shutdown_cache()


@pytest.fixture
def client():
    Base.metadata.drop_all(bind=engine)
    with TestClient(app) as c:
        yield c
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def product_payload():
    return {
        "sku": "SKU-001",
        "name": "Café molido 500g",
        "description": "Tueste medio",
        "category": "alimentos",
        "price_cents": 1250,
        "currency": "USD",
        "stock": 40,
        "images": ["https://cdn.example.com/cafe-1.jpg", "https://cdn.example.com/cafe-2.jpg"],
        "attributes": {"peso": "500g"},
    }
