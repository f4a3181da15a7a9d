from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from time import monotonic

from texttranslator.app.history.ledger import HistoryLedger
from texttranslator.app.history.types import TranslationRecord
from texttranslator.app.languages.catalog import LanguageCatalog
from texttranslator.app.settings import Settings
from texttranslator.app.translation.providers.base import (
    TranslationProvider,
    TranslationProviderError,
)
from texttranslator.app.translation.providers.mock import MockTranslationProvider
from texttranslator.app.translation.providers.rapidapi import RapidApiTranslationProvider
from texttranslator.app.translation.types import (
    ControllerState,
    TranslationOutcome,
    TranslationRequest,
)

EMPTY_INPUT_MESSAGE = "Please enter some text to translate"
NOT_CONFIGURED_MESSAGE = (
    "Translation service is not configured. Set TRANSLATION_API_KEY and restart."
)
NETWORK_FAILURE_MESSAGE = (
    "Translation failed. Please check your API configuration and try again."
)
EMPTY_RESPONSE_MESSAGE = "Translation failed - no translated text received"


class TranslationValidationError(Exception):
    """Raised when a request is refused before reaching the provider."""


class TranslationConfigurationError(Exception):
    """Raised when the translation provider has no credentials."""


class TranslationAlreadyPendingError(Exception):
    """Raised when a request arrives while another one is still in flight."""


@dataclass
class ControllerMetrics:
    provider_name: str | None = None
    requests_issued: int = 0
    requests_succeeded: int = 0
    requests_failed: int = 0
    requests_rejected: int = 0
    last_latency_ms: float = 0.0
    last_error_kind: str | None = None


def describe_provider_error(exc: TranslationProviderError) -> str:
    if exc.kind == "status":
        _, _, status_code = str(exc).rpartition(":")
        return f"Translation request failed with HTTP status {status_code}"
    if exc.kind == "empty_response":
        return EMPTY_RESPONSE_MESSAGE
    return NETWORK_FAILURE_MESSAGE


class TranslationRequestController:
    """Issues at most one translation request at a time and records successes.

    The pending check and the idle -> pending transition happen before the first
    await, so a second call made while a request is in flight is refused rather
    than queued.
    """

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        ledger: HistoryLedger,
        catalog: LanguageCatalog,
        provider_override: TranslationProvider | None = None,
    ) -> None:
        self._settings = settings
        self._logger = logger
        self._ledger = ledger
        self._catalog = catalog
        self._provider = provider_override or self._build_provider(settings)
        self._metrics = ControllerMetrics(provider_name=self._provider.name)
        self._state = ControllerState.IDLE
        self._input_text = ""
        self._translated_text = ""
        self._selected_language = settings.default_target_language
        self._error: str | None = None

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def selected_language(self) -> str:
        return self._selected_language

    @property
    def provider(self) -> TranslationProvider:
        return self._provider

    async def translate(
        self,
        text: str,
        target_language_code: str | None = None,
    ) -> TranslationOutcome:
        if self._state is ControllerState.PENDING:
            self._metrics.requests_rejected += 1
            self._log_event("translation_request_rejected", reason="already_pending")
            raise TranslationAlreadyPendingError("a translation request is already pending")

        target_code = target_language_code or self._selected_language
        self._input_text = text

        if not text.strip():
            self._error = EMPTY_INPUT_MESSAGE
            raise TranslationValidationError(EMPTY_INPUT_MESSAGE)

        if not self._catalog.is_supported(target_code):
            self._error = f"Unsupported target language: {target_code}"
            raise TranslationValidationError(self._error)

        if not self._provider.configured:
            self._error = NOT_CONFIGURED_MESSAGE
            raise TranslationConfigurationError(NOT_CONFIGURED_MESSAGE)

        self._state = ControllerState.PENDING
        self._selected_language = target_code
        self._error = None
        self._metrics.requests_issued += 1
        started = monotonic()
        self._log_event(
            "translation_request_started",
            target_language=target_code,
            characters=len(text),
        )

        try:
            payload = await self._provider.translate(
                TranslationRequest(text=text, target_language_code=target_code)
            )
        except TranslationProviderError as exc:
            return self._fail(exc, started)
        finally:
            self._state = ControllerState.IDLE

        latency_ms = self._elapsed_ms(started)
        record = self._ledger.add(
            text,
            payload.translated_text,
            target_code,
            self._catalog.resolve_name(target_code),
        )
        self._translated_text = payload.translated_text
        self._metrics.requests_succeeded += 1
        self._metrics.last_latency_ms = latency_ms
        self._metrics.last_error_kind = None
        self._log_event(
            "translation_request_succeeded",
            target_language=target_code,
            record_id=record.id,
            latency_ms=latency_ms,
        )
        return TranslationOutcome(
            translated_text=payload.translated_text,
            record=record,
            error=None,
            error_kind=None,
            latency_ms=latency_ms,
        )

    def reuse(self, record_id: int) -> TranslationRecord | None:
        record = self._ledger.get(record_id)
        if record is None:
            return None
        self._input_text = record.input_text
        self._translated_text = record.translated_text
        self._selected_language = record.target_language_code
        self._error = None
        return record

    def clear_input(self) -> None:
        self._input_text = ""
        self._translated_text = ""
        self._error = None

    def select_language(self, code: str) -> str:
        if not self._catalog.is_supported(code):
            raise TranslationValidationError(f"Unsupported target language: {code}")
        self._selected_language = code
        return self._catalog.resolve_name(code)

    def snapshot(self) -> dict[str, object]:
        payload = asdict(self._metrics)
        payload["state"] = self._state.value
        payload["translation_mode"] = self._settings.translation_mode
        payload["configured"] = self._provider.configured
        payload["input_text"] = self._input_text
        payload["translated_text"] = self._translated_text
        payload["selected_language"] = self._selected_language
        payload["selected_language_name"] = self._catalog.resolve_name(self._selected_language)
        payload["error"] = self._error
        return payload

    def _fail(self, exc: TranslationProviderError, started: float) -> TranslationOutcome:
        latency_ms = self._elapsed_ms(started)
        message = describe_provider_error(exc)
        self._error = message
        self._metrics.requests_failed += 1
        self._metrics.last_latency_ms = latency_ms
        self._metrics.last_error_kind = exc.kind
        self._logger.warning(
            "translation_request_failed",
            extra={
                "event": "translation_request_failed",
                "service_name": self._settings.service_name,
                "service_version": self._settings.service_version,
                "provider_name": self._provider.name,
                "error_kind": exc.kind,
                "reason": str(exc),
                "latency_ms": latency_ms,
            },
        )
        return TranslationOutcome(
            translated_text=self._translated_text,
            record=None,
            error=message,
            error_kind=exc.kind,
            latency_ms=latency_ms,
        )

    def _build_provider(self, settings: Settings) -> TranslationProvider:
        if settings.translation_mode == "mock":
            return MockTranslationProvider(
                delay_seconds=settings.mock_translation_delay_seconds
            )

        if settings.translation_mode == "rapidapi":
            return RapidApiTranslationProvider(settings=settings)

        raise ValueError("unsupported translation mode. Expected 'mock' or 'rapidapi'.")

    def _elapsed_ms(self, started: float) -> float:
        return round((monotonic() - started) * 1000.0, 3)

    def _log_event(self, event: str, **fields: object) -> None:
        self._logger.info(
            event,
            extra={
                "event": event,
                "service_name": self._settings.service_name,
                "service_version": self._settings.service_version,
                "provider_name": self._provider.name,
                **fields,
            },
        )
