"""
logging_config.py
------------------

Shared logging setup for the product catalog service.  Everything goes
through Python's built‑in ``logging`` module to stdout, and each
message is a JSON object with an ``"event"`` field so that log
pipelines can filter on it without regexes.

Import ``logger`` instead of calling ``logging.info`` directly.  The
``log_call`` decorator records entry and exit of service functions at
DEBUG level, with credentials and raw byte payloads (for example
serialized cache blobs) stripped from the snapshot.
"""

from __future__ import annotations

import json
import logging
import sys
from functools import wraps
from typing import Any, Callable, Dict

from app.core.config import get_settings

_SENSITIVE_KEYS = ("token", "password", "secret", "authorization")

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger("catalog")
logger.setLevel(get_settings().log_level.upper())


def _sanitize(obj: Any) -> Any:
    """Return a JSON‑friendly copy of ``obj`` that is safe to log.

    Byte strings are replaced by their length, dict keys that look like
    credentials are dropped, sequences are processed element‑wise and
    Pydantic models are logged through ``model_dump``.  Anything else
    that cannot be serialised falls back to ``str``.
    """
    if isinstance(obj, (bytes, bytearray)):
        return f"<binary {len(obj)} bytes>"
    if isinstance(obj, dict):
        clean: Dict[str, Any] = {}
        for k, v in obj.items():
            if any(keyword in str(k).lower() for keyword in _SENSITIVE_KEYS):
                continue
            clean[str(k)] = _sanitize(v)
        return clean
    if isinstance(obj, (list, tuple)):
        return [_sanitize(i) for i in obj]
    if hasattr(obj, "model_dump"):
        try:
            return _sanitize(obj.model_dump(mode="json"))
        except Exception:
            return repr(obj)
    try:
        return json.loads(json.dumps(obj))
    except (TypeError, ValueError):
        return str(obj)


def log_call(func: Callable[..., Any]) -> Callable[..., Any]:
    """Log ``call_start``/``call_end`` events around ``func`` at DEBUG.

    Arguments and the return value go through ``_sanitize`` first.  A
    failure while building the log line never affects the call itself;
    exceptions raised by ``func`` propagate unchanged.

    Examples
    --------

    >>> @log_call
    ... def get_product(product_id):
    ...     ...
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        if logger.isEnabledFor(logging.DEBUG):
            try:
                logger.debug(json.dumps({
                    "event": "call_start",
                    "function": func.__name__,
                    "args": _sanitize(args),
                    "kwargs": _sanitize(kwargs),
                }))
            except (TypeError, ValueError):
                logger.debug(json.dumps({"event": "call_start", "function": func.__name__}))
        result = func(*args, **kwargs)
        if logger.isEnabledFor(logging.DEBUG):
            try:
                logger.debug(json.dumps({
                    "event": "call_end",
                    "function": func.__name__,
                    "result": _sanitize(result),
                }))
            except (TypeError, ValueError):
                logger.debug(json.dumps({"event": "call_end", "function": func.__name__}))
        return result

    return wrapper
