"""
Root application entry point for the product catalog API
========================================================

This module exposes the FastAPI application instance defined in
``app/main.py`` so that Uvicorn can import ``main:app`` from the
repository root.

Usage
-----

.. code-block:: bash

    uvicorn main:app --host 0.0.0.0 --port 8000

Run a single worker process: the response cache lives in process
memory and is not shared between workers.
"""

from app.main import app  # noqa: F401 re-export for Uvicorn

__all__ = ["app"]
