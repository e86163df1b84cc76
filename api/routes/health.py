"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from api.deps import get_db
from db import Database


router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    timestamp: str
    storage: str


@router.get("/health", response_model=HealthResponse)
async def health_check(database: Database = Depends(get_db)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
        storage="up" if database.conn is not None else "down",
    )
