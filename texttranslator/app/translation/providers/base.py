from __future__ import annotations

from abc import ABC, abstractmethod

from texttranslator.app.translation.types import TranslationPayload, TranslationRequest


class TranslationProviderError(Exception):
    """Raised when a translation provider call fails.

    ``kind`` is one of ``network``, ``status`` or ``empty_response``.
    """

    def __init__(self, kind: str, message: str) -> None:
        super().__init__(message)
        self.kind = kind


class TranslationProvider(ABC):
    @property
    @abstractmethod
    def name(self) -> str:
        raise NotImplementedError

    @property
    def configured(self) -> bool:
        return True

    @abstractmethod
    async def translate(self, request: TranslationRequest) -> TranslationPayload:
        raise NotImplementedError
