"""Request-scoped access to the shared store and catalog."""

from fastapi import HTTPException, Request

from catalog import DomainCatalog
from db import Database
from validation import validate_month

INVALID_MONTH = "Paramètre mois invalide (YYYY-MM)"


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_catalog(request: Request) -> DomainCatalog:
    return request.app.state.catalog


def month_param(month: str) -> str:
    """Path parameter `month` validated as YYYY-MM."""
    valid = validate_month(month)
    if valid is None:
        raise HTTPException(status_code=400, detail=INVALID_MONTH)
    return valid
