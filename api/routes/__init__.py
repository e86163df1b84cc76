"""API Routes Package."""

from api.routes import health, reference, records, exports

__all__ = [
    "health",
    "reference",
    "records",
    "exports",
]
