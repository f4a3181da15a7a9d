from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from texttranslator.app.history.types import TranslationRecord


class ControllerState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"


@dataclass(frozen=True)
class TranslationRequest:
    text: str
    target_language_code: str


@dataclass(frozen=True)
class TranslationPayload:
    translated_text: str


@dataclass(frozen=True)
class TranslationOutcome:
    """Result of one controller request; exactly one of record/error is set."""

    translated_text: str
    record: TranslationRecord | None
    error: str | None
    error_kind: str | None
    latency_ms: float

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, object]:
        return {
            "ok": self.ok,
            "translated_text": self.translated_text,
            "record": self.record.to_dict() if self.record is not None else None,
            "error": self.error,
            "error_kind": self.error_kind,
            "latency_ms": self.latency_ms,
        }
