"""
Route aggregation package for the product catalog service.

Each module defines an ``APIRouter`` for one functional area: the
product catalog itself and the health check.  The main application
imports these routers and includes them in the global FastAPI instance.
"""

__all__ = [
    "health",
    "products",
]

# Import submodules so their routers can be registered by main.py
from . import health, products  # noqa: E402,F401
