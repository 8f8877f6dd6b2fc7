"""
app package
-----------

Product catalog service: FastAPI application, product store and the
in-process TTL cache that fronts it. Importing ``app`` loads
:mod:`main` and exposes the ``app`` instance for ASGI servers.
"""

from .main import app  # noqa: F401
