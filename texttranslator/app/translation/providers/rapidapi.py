from __future__ import annotations

from typing import Any, Callable

import httpx

from texttranslator.app.settings import Settings
from texttranslator.app.translation.providers.base import (
    TranslationProvider,
    TranslationProviderError,
)
from texttranslator.app.translation.types import TranslationPayload, TranslationRequest


class RapidApiTranslationProvider(TranslationProvider):
    """OpenL Translate over RapidAPI: POST {target_lang, text} -> {translatedText}."""

    def __init__(
        self,
        settings: Settings,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ) -> None:
        self._settings = settings
        self._endpoint = settings.translation_api_url
        self._client_factory = client_factory

    @property
    def name(self) -> str:
        return "rapidapi-translation-provider"

    @property
    def configured(self) -> bool:
        return bool(self._settings.translation_api_key)

    async def translate(self, request: TranslationRequest) -> TranslationPayload:
        headers = {
            "x-rapidapi-key": self._settings.translation_api_key or "",
            "x-rapidapi-host": self._settings.translation_api_host,
            "Content-Type": "application/json",
        }
        body = {
            "target_lang": request.target_language_code,
            "text": request.text,
        }

        try:
            async with self._build_client() as client:
                response = await client.post(self._endpoint, headers=headers, json=body)
        except httpx.RequestError as exc:
            raise TranslationProviderError("network", f"rapidapi_request_error:{exc}") from exc

        if not response.is_success:
            raise TranslationProviderError(
                "status",
                f"rapidapi_status_error:{response.status_code}",
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise TranslationProviderError(
                "empty_response",
                "rapidapi_invalid_json_response",
            ) from exc

        text = self._extract_text(payload)
        if not text:
            raise TranslationProviderError("empty_response", "rapidapi_empty_text_response")

        return TranslationPayload(translated_text=text)

    def _build_client(self) -> httpx.AsyncClient:
        if self._client_factory is not None:
            return self._client_factory()
        return httpx.AsyncClient(timeout=httpx.Timeout(self._settings.translation_timeout))

    def _extract_text(self, payload: Any) -> str:
        if not isinstance(payload, dict):
            return ""
        text = payload.get("translatedText")
        if not isinstance(text, str):
            return ""
        return text
