from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

_RECORD_KEYS = (
    "id",
    "inputText",
    "translatedText",
    "targetLanguageCode",
    "targetLanguageName",
    "createdAt",
)

# Keys written by the earlier browser client, mapped to the current names.
_LEGACY_KEYS = {
    "targetLanguage": "targetLanguageCode",
    "timestamp": "createdAt",
}


class MalformedRecordError(ValueError):
    """Raised when a persisted history entry does not have the record shape."""


@dataclass(frozen=True)
class TranslationRecord:
    id: int
    input_text: str
    translated_text: str
    target_language_code: str
    target_language_name: str
    created_at: datetime

    @property
    def character_count(self) -> int:
        return len(self.input_text) + len(self.translated_text)

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "inputText": self.input_text,
            "translatedText": self.translated_text,
            "targetLanguageCode": self.target_language_code,
            "targetLanguageName": self.target_language_name,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, payload: Any) -> TranslationRecord:
        if not isinstance(payload, dict):
            raise MalformedRecordError("history entry is not an object")

        payload = _with_current_keys(payload)

        missing = [key for key in _RECORD_KEYS if key not in payload]
        if missing:
            raise MalformedRecordError(f"history entry missing fields: {', '.join(missing)}")

        record_id = payload["id"]
        # bool is an int subclass and never a valid id.
        if isinstance(record_id, bool) or not isinstance(record_id, int):
            raise MalformedRecordError("history entry id must be an integer")

        for key in _RECORD_KEYS[1:]:
            if not isinstance(payload[key], str):
                raise MalformedRecordError(f"history entry field {key} must be a string")

        try:
            created_at = datetime.fromisoformat(payload["createdAt"].replace("Z", "+00:00"))
        except ValueError as exc:
            raise MalformedRecordError("history entry createdAt is not ISO-8601") from exc

        return cls(
            id=record_id,
            input_text=payload["inputText"],
            translated_text=payload["translatedText"],
            target_language_code=payload["targetLanguageCode"],
            target_language_name=payload["targetLanguageName"],
            created_at=created_at,
        )


def _with_current_keys(payload: dict[str, Any]) -> dict[str, Any]:
    renamed = dict(payload)
    for legacy, current in _LEGACY_KEYS.items():
        if current not in renamed and legacy in renamed:
            renamed[current] = renamed.pop(legacy)
    return renamed


@dataclass(frozen=True)
class LanguageUsage:
    name: str
    count: int

    def to_dict(self) -> dict[str, object]:
        return {"name": self.name, "count": self.count}
