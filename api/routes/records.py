"""Submission and month view endpoints.

Bodies are checked by the explicit validators in `validation`; every
violated field is returned at once so a form can show all issues.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from aggregator import group_by_date, summarize
from api.deps import get_catalog, get_db, month_param
from catalog import DomainCatalog
from db import Database
from validation import Issue, ValidationError, validate_seizure_input, validate_slaughter_input


logger = logging.getLogger(__name__)

router = APIRouter()


class OkResponse(BaseModel):
    ok: bool = True


_INVALID_JSON = object()


async def _read_json(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        return _INVALID_JSON


def _rejected(result: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content=result.as_dict())


@router.post("/abattage", response_model=OkResponse)
async def submit_abattage(
    request: Request,
    database: Database = Depends(get_db),
    catalog: DomainCatalog = Depends(get_catalog),
):
    payload = await _read_json(request)
    if payload is _INVALID_JSON:
        return _rejected(ValidationError([Issue("body", "invalid_json", "JSON invalide")]))

    result = validate_slaughter_input(payload, catalog)
    if isinstance(result, ValidationError):
        logger.info("abattage rejected: %s", result.fields())
        return _rejected(result)

    await database.add_slaughter(result)
    return OkResponse()


@router.post("/seizures", response_model=OkResponse)
async def submit_seizure(
    request: Request,
    database: Database = Depends(get_db),
    catalog: DomainCatalog = Depends(get_catalog),
):
    payload = await _read_json(request)
    if payload is _INVALID_JSON:
        return _rejected(ValidationError([Issue("body", "invalid_json", "JSON invalide")]))

    result = validate_seizure_input(payload, catalog)
    if isinstance(result, ValidationError):
        logger.info("seizure rejected: %s", result.fields())
        return _rejected(result)

    await database.add_seizure(result)
    return OkResponse()


@router.get("/month/{month}")
async def read_month(
    month: str = Depends(month_param),
    database: Database = Depends(get_db),
) -> Dict[str, Any]:
    result = await database.query_month(month)
    return result.as_dict()


@router.get("/month/{month}/summary")
async def read_month_summary(
    month: str = Depends(month_param),
    database: Database = Depends(get_db),
    catalog: DomainCatalog = Depends(get_catalog),
) -> Dict[str, Any]:
    result = await database.query_month(month)
    return {
        "month": month,
        "summary": summarize(result, catalog).as_dict(),
        "days": [d.as_dict() for d in group_by_date(result)],
    }
