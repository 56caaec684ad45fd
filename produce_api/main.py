from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from produce_api.api.v1.collections import router as collections_router
from produce_api.config import Settings
from produce_api.services.exceptions import ServiceError
from produce_api.services.importer import DatasetImporter
from produce_api.services.storage import InMemoryStorage

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = FastAPI(title="Produce Inventory API", version="1.0")

    # One storage + importer per app; the bootstrap latch lives on the importer
    storage = InMemoryStorage()
    app.state.settings = settings
    app.state.storage = storage
    app.state.importer = DatasetImporter(storage, retry_on_failure=settings.bootstrap_retry_on_failure)

    # CORS (narrow it down in .env via CORS_ALLOW_ORIGINS if you want)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(collections_router)

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.get("/readyz")
    def readyz():
        return {"status": "ready", "dataset": app.state.importer.state.value}

    logger.info("Bootstrap dataset: %s", settings.bootstrap_file)
    return app

app = create_app()
