"""
Core helpers package for the product catalog service.

Holds process-wide infrastructure such as the settings object. Keeping
it apart from routes and services makes it easy to override for
testing.
"""

__all__ = ["config"]
