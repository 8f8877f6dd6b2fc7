"""Business logic and data access for the catalog endpoints."""
