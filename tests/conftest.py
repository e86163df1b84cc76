from __future__ import annotations

from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from api.server import create_app
from db import Database


def _db_file(tmp_path: Path) -> str:
    return str(tmp_path / "store" / "abattoir.db")


@pytest_asyncio.fixture
async def store(tmp_path: Path):
    database = Database()
    await database.connect(_db_file(tmp_path), fallback=str(tmp_path / "fallback" / "abattoir.db"))
    try:
        yield database
    finally:
        await database.close()


@pytest.fixture
def client(tmp_path: Path):
    app = create_app(db_path=_db_file(tmp_path))
    with TestClient(app) as c:
        yield c
