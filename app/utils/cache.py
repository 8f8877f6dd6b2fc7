"""
utils/cache.py
---------------

In-process cache with TTL support, shared by every request worker.

The catalog API caches single products and paginated listings here so
that hot reads do not hit the database. Each entry stores its payload
together with an absolute expiry timestamp taken from a monotonic
clock. Two kinds of payload share one key space:

* opaque Python values written with :meth:`TTLCache.set`, and
* serialized blobs written with :meth:`TTLCache.put_serialized`
  (``orjson`` bytes) and read back with :meth:`TTLCache.get_serialized`.

Expiration is enforced twice. Reads treat an entry whose ``expires_at``
has passed as absent, even if it is still physically stored, and a
background :class:`~app.utils.sweeper.ExpirationSweeper` removes such
entries on a fixed interval. ``get`` never deletes: removing on read
would require the exclusive lock on the hot path.

All access goes through a :class:`~app.utils.locks.ReadWriteLock`.
Values are returned as-is, not copied; callers must treat them as
read-only. ``delete_by_prefix`` is what keeps listings consistent after
a write, so single-entity keys and listing keys must live under
distinct prefixes (see :mod:`app.services.product_service`).

The process-wide instance is created by :func:`init_cache` exactly
once, even when several threads race on first use. The FastAPI
lifespan calls it at startup and hands the instance to routes through
``app.state``; :func:`get_cache` is only a convenience for code that
runs outside a request.
"""

from __future__ import annotations

import json
import threading
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Dict, Optional, Tuple

import orjson
from fastapi import Request
from pydantic import BaseModel, TypeAdapter, ValidationError

from app.logging_config import logger
from app.utils.locks import ReadWriteLock
from app.utils.sweeper import ExpirationSweeper

# Seconds. Used when nobody configured the cache explicitly.
DEFAULT_TTL: float = 300.0
DEFAULT_SWEEP_INTERVAL: float = 300.0

_NS_PER_SECOND = 1_000_000_000


class CacheError(Exception):
    """Base class for errors raised by the cache helpers."""


class EncodingError(CacheError, ValueError):
    """A value could not be converted to its stored byte form."""


class DecodingError(CacheError, ValueError):
    """Stored bytes could not be converted back to the requested shape."""


@dataclass
class CacheEntry:
    value: Any
    expires_at: int  # monotonic nanoseconds

    def is_expired(self, now: int) -> bool:
        return self.expires_at <= now


def _encode_default(obj: Any) -> Any:
    # orjson llama a esta función sólo para tipos que no conoce
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    raise TypeError(f"Type is not serializable: {type(obj).__name__}")


@lru_cache(maxsize=128)
def _adapter(shape: Any) -> TypeAdapter:
    return TypeAdapter(shape)


class TTLCache:
    """Thread-safe in-memory cache with per-entry time to live.

    :param default_ttl: TTL in seconds applied when ``set`` gets none
    :param sweep_interval: seconds between background sweeps
    :param clock: returns the current time in nanoseconds; defaults to
        :func:`time.monotonic_ns`. Tests inject a fake clock.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL,
        *,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL,
        clock: Callable[[], int] = time.monotonic_ns,
    ) -> None:
        self.default_ttl = default_ttl
        self._clock = clock
        self._lock = ReadWriteLock()
        self._entries: Dict[str, CacheEntry] = {}
        self._sweeper = ExpirationSweeper(self, sweep_interval)

    # ------------------------------------------------------------------
    # Core operations
    # ------------------------------------------------------------------

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store ``value`` under ``key``, replacing any previous entry.

        A negative or zero ``ttl`` is not rejected; the entry is simply
        expired by the next read.
        """
        duration = self.default_ttl if ttl is None else ttl
        expires_at = self._clock() + int(duration * _NS_PER_SECOND)
        with self._lock.write_locked():
            self._entries[key] = CacheEntry(value=value, expires_at=expires_at)

    def get(self, key: str) -> Tuple[Any, bool]:
        """Return ``(value, True)`` for a live entry, else ``(None, False)``."""
        with self._lock.read_locked():
            entry = self._entries.get(key)
            if entry is None:
                return None, False
            if entry.is_expired(self._clock()):
                return None, False
            return entry.value, True

    def delete(self, key: str) -> None:
        """Remove ``key`` if present. Missing keys are ignored."""
        with self._lock.write_locked():
            self._entries.pop(key, None)

    def delete_by_prefix(self, prefix: str) -> int:
        """Remove every key starting with ``prefix``; return how many went."""
        with self._lock.write_locked():
            doomed = [key for key in self._entries if key.startswith(prefix)]
            for key in doomed:
                del self._entries[key]
        logger.debug(json.dumps({
            "event": "cache_invalidate_prefix",
            "prefix": prefix,
            "removed": len(doomed),
        }))
        return len(doomed)

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock.write_locked():
            self._entries = {}

    def size(self) -> int:
        """Number of stored entries, including expired ones not yet swept."""
        with self._lock.read_locked():
            return len(self._entries)

    def __len__(self) -> int:
        return self.size()

    # ------------------------------------------------------------------
    # Serialized values
    # ------------------------------------------------------------------

    def put_serialized(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Encode ``value`` as JSON bytes and store them.

        Pydantic models, dataclasses, datetimes and UUIDs are accepted.
        Raises :class:`EncodingError` if the value cannot be encoded, in
        which case nothing is written.
        """
        try:
            data = orjson.dumps(value, default=_encode_default)
        except orjson.JSONEncodeError as exc:
            raise EncodingError(f"cannot encode value for key {key!r}: {exc}") from exc
        self.set(key, data, ttl)

    def get_serialized(self, key: str, shape: Any = None) -> Tuple[bool, Any]:
        """Look up ``key`` and decode the stored bytes.

        Returns ``(False, None)`` on a miss. An entry that holds a plain
        Python value rather than bytes is also reported as a miss. When
        ``shape`` is given (a pydantic model, ``List[Model]``, ``dict``,
        ...) the decoded JSON is validated into it.

        Raises :class:`DecodingError` when the bytes are not valid JSON
        or do not fit ``shape``, so callers can tell a corrupt entry
        from a missing one.
        """
        raw, found = self.get(key)
        if not found:
            return False, None
        if not isinstance(raw, (bytes, bytearray)):
            return False, None
        try:
            data = orjson.loads(raw)
        except orjson.JSONDecodeError as exc:
            raise DecodingError(f"cannot decode cached value for key {key!r}: {exc}") from exc
        if shape is None:
            return True, data
        try:
            return True, _adapter(shape).validate_python(data)
        except ValidationError as exc:
            raise DecodingError(f"cached value for key {key!r} does not match {shape!r}") from exc

    # ------------------------------------------------------------------
    # Expiration
    # ------------------------------------------------------------------

    def sweep_expired(self) -> int:
        """Physically remove expired entries. Returns the number removed."""
        with self._lock.write_locked():
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def start_sweeper(self) -> None:
        self._sweeper.start()

    def stop_sweeper(self, timeout: Optional[float] = None) -> None:
        self._sweeper.stop(timeout)

    @property
    def sweeper(self) -> ExpirationSweeper:
        return self._sweeper

    def stats(self) -> Dict[str, Any]:
        """Summary used by the health endpoint. ``size`` is best-effort."""
        return {
            "size": self.size(),
            "default_ttl_s": self.default_ttl,
            "sweep_interval_s": self._sweeper.interval,
            "sweeper_running": self._sweeper.running,
        }


# ----------------------------------------------------------------------
# Process-wide instance
# ----------------------------------------------------------------------

_instance: Optional[TTLCache] = None
_instance_lock = threading.Lock()


def init_cache(
    default_ttl: float = DEFAULT_TTL,
    sweep_interval: float = DEFAULT_SWEEP_INTERVAL,
) -> TTLCache:
    """Create the shared cache and start its sweeper, exactly once.

    Later calls return the existing instance and ignore their
    arguments: the first caller wins.
    """
    global _instance
    cache = _instance
    if cache is not None:
        return cache
    with _instance_lock:
        if _instance is None:
            cache = TTLCache(default_ttl, sweep_interval=sweep_interval)
            cache.start_sweeper()
            _instance = cache
            logger.info(json.dumps({
                "event": "cache_initialized",
                "default_ttl_s": default_ttl,
                "sweep_interval_s": sweep_interval,
            }))
        return _instance


def get_cache() -> TTLCache:
    """Return the shared cache, creating it with :data:`DEFAULT_TTL` if needed."""
    cache = _instance
    if cache is not None:
        return cache
    return init_cache(DEFAULT_TTL)


def shutdown_cache(timeout: Optional[float] = 5.0) -> None:
    """Stop the sweeper, clear the entries and forget the shared instance."""
    global _instance
    with _instance_lock:
        cache = _instance
        _instance = None
    if cache is None:
        return
    cache.stop_sweeper(timeout)
    cache.clear()
    logger.info(json.dumps({"event": "cache_shutdown"}))


def get_request_cache(request: Request) -> TTLCache:
    """FastAPI dependency: the cache the lifespan stored on ``app.state``."""
    return request.app.state.cache
