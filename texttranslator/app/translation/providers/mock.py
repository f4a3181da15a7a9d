from __future__ import annotations

import asyncio

from texttranslator.app.translation.providers.base import TranslationProvider
from texttranslator.app.translation.types import TranslationPayload, TranslationRequest

MOCK_PHRASEBOOK: dict[str, dict[str, str]] = {
    "hello": {
        "fr": "Bonjour",
        "es": "Hola",
        "de": "Hallo",
        "it": "Ciao",
        "pt": "Olá",
        "ja": "こんにちは",
    },
    "thank you": {
        "fr": "Merci",
        "es": "Gracias",
        "de": "Danke",
        "it": "Grazie",
        "pt": "Obrigado",
        "ja": "ありがとう",
    },
    "good morning": {
        "fr": "Bonjour",
        "es": "Buenos días",
        "de": "Guten Morgen",
        "it": "Buongiorno",
        "pt": "Bom dia",
        "ja": "おはようございます",
    },
}


class MockTranslationProvider(TranslationProvider):
    def __init__(self, delay_seconds: float = 0.0) -> None:
        self._delay_seconds = max(0.0, delay_seconds)

    @property
    def name(self) -> str:
        return "mock-translation-provider"

    async def translate(self, request: TranslationRequest) -> TranslationPayload:
        if self._delay_seconds > 0:
            await asyncio.sleep(self._delay_seconds)

        key = request.text.strip().lower().rstrip("!.?")
        phrase = MOCK_PHRASEBOOK.get(key, {}).get(request.target_language_code)
        if phrase is None:
            phrase = f"[{request.target_language_code}] {request.text.strip()}"
        return TranslationPayload(translated_text=phrase)
