"""FastAPI server for the abattoir register.

Main entry point for the HTTP API.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.routes import exports, health, records, reference
from catalog import DEFAULT_CATALOG, DomainCatalog
from config import load_config
from db import Database, StorageError


logger = logging.getLogger(__name__)


def create_app(
    db_path: Optional[str] = None,
    database: Optional[Database] = None,
    catalog: DomainCatalog = DEFAULT_CATALOG,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The store is opened on startup and closed on shutdown; `db_path`
    overrides the configured location.
    """
    config = load_config()
    store = database or Database()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Abattoir API starting up…")
        await store.connect(db_path or config.db_path, config.fallback_db_path)
        yield
        await store.close()
        logger.info("Abattoir API shutting down…")

    app = FastAPI(
        title="Abattoir API",
        description="Registre des abattages et des saisies, synthèses mensuelles et exports CSV/PDF",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.db = store
    app.state.catalog = catalog

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(StorageError)
    async def storage_error(request: Request, exc: StorageError) -> JSONResponse:
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=503, content={"error": "Stockage indisponible"})

    app.include_router(health.router, tags=["Health"])
    app.include_router(reference.router, prefix="/api", tags=["Catalog"])
    app.include_router(records.router, prefix="/api", tags=["Records"])
    app.include_router(exports.router, prefix="/api", tags=["Exports"])

    return app


def main() -> None:
    import uvicorn

    config = load_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    uvicorn.run(create_app(), host=config.host, port=config.port)


if __name__ == "__main__":
    main()
