"""API Package.

FastAPI server for the abattoir register: submissions, month views and exports.
"""

from api.server import create_app

__all__ = [
    "create_app",
]
