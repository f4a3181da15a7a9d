from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from texttranslator.app.history.ledger import open_ledger
from texttranslator.app.history.store import (
    HistoryStore,
    InMemoryKeyValueBackend,
    JsonFileKeyValueBackend,
    KeyValueBackend,
)
from texttranslator.app.languages.catalog import LanguageCatalog
from texttranslator.app.logging_config import configure_logging
from texttranslator.app.routes.health import router as health_router
from texttranslator.app.routes.history import router as history_router
from texttranslator.app.routes.languages import router as languages_router
from texttranslator.app.routes.translations import router as translations_router
from texttranslator.app.settings import Settings, build_settings
from texttranslator.app.translation.controller import TranslationRequestController
from texttranslator.app.translation.providers.base import TranslationProvider


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _service_logger() -> logging.Logger:
    return logging.getLogger("texttranslator.service")


def build_key_value_backend(settings: Settings) -> KeyValueBackend:
    if settings.history_store_mode == "memory" or not settings.history_store_path:
        return InMemoryKeyValueBackend()
    return JsonFileKeyValueBackend(
        settings.history_store_path,
        quota_bytes=settings.history_store_quota_bytes,
    )


def create_app(
    settings: Settings | None = None,
    provider_override: TranslationProvider | None = None,
    backend_override: KeyValueBackend | None = None,
) -> FastAPI:
    settings = settings or build_settings(_project_root())
    configure_logging(settings.log_level)
    logger = _service_logger()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.settings = settings
        app.state.started_at = datetime.now(timezone.utc)
        app.state.language_catalog = LanguageCatalog()
        app.state.history_store = HistoryStore(
            backend_override or build_key_value_backend(settings),
            logger=logger,
            slot_key=settings.history_slot_key,
        )
        app.state.history_ledger = open_ledger(app.state.history_store, logger=logger)
        app.state.translation_controller = TranslationRequestController(
            settings=settings,
            logger=logger,
            ledger=app.state.history_ledger,
            catalog=app.state.language_catalog,
            provider_override=provider_override,
        )

        logger.info(
            "service_startup",
            extra={
                "event": "startup",
                "service_name": settings.service_name,
                "service_version": settings.service_version,
                "history_records": len(app.state.history_ledger),
            },
        )
        logger.info(
            "service_config_loaded",
            extra={
                "event": "config_loaded",
                "service_name": settings.service_name,
                "service_version": settings.service_version,
                "config": settings.redacted(),
            },
        )
        yield
        logger.info(
            "service_shutdown",
            extra={
                "event": "shutdown",
                "service_name": settings.service_name,
                "service_version": settings.service_version,
            },
        )

    app = FastAPI(
        title=settings.service_name,
        version=settings.service_version,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    def root() -> dict[str, str]:
        return {"message": "Text translator service is running."}

    app.include_router(health_router)
    app.include_router(translations_router)
    app.include_router(history_router)
    app.include_router(languages_router)
    return app


def run() -> None:
    settings = build_settings(_project_root())
    uvicorn.run(
        "texttranslator.app.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
