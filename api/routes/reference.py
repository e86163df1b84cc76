"""Reference data: species, organs and the causes allowed per organ."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from api.deps import get_catalog
from catalog import DomainCatalog


router = APIRouter()


@router.get("/catalog")
async def read_catalog(catalog: DomainCatalog = Depends(get_catalog)) -> Dict[str, Any]:
    return catalog.as_dict()
