from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone

from texttranslator.app.settings import Settings

BASE_SETTINGS = Settings(
    service_name="texttranslator",
    service_version="0.1.0-test",
    environment="test",
    log_level="INFO",
    host="127.0.0.1",
    port=8000,
    translation_mode="mock",
    translation_api_url="http://translate.mock/translate",
    translation_api_host="translate.mock",
    translation_api_key="test-key",
    default_target_language="fr",
    history_store_mode="memory",
    history_store_path=None,
)


def make_settings(**overrides: object) -> Settings:
    return replace(BASE_SETTINGS, **overrides)


class FixedClock:
    """Clock that always returns the same instant, to force id collisions."""

    def __init__(self, instant: datetime | None = None) -> None:
        self.instant = instant or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.instant


class CaptureHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def events(self, message: str) -> list[logging.LogRecord]:
        return [record for record in self.records if record.getMessage() == message]
