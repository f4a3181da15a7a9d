from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path

from texttranslator.app.history.types import MalformedRecordError, TranslationRecord


class HistoryStoreWriteError(Exception):
    """Raised by a key-value backend when a write cannot be completed."""


class KeyValueBackend(ABC):
    """Durable string slots addressed by key, in the manner of browser localStorage."""

    @property
    @abstractmethod
    def name(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def get(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove(self, key: str) -> None:
        raise NotImplementedError


class InMemoryKeyValueBackend(KeyValueBackend):
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._slots: dict[str, str] = dict(initial or {})

    @property
    def name(self) -> str:
        return "memory"

    def get(self, key: str) -> str | None:
        return self._slots.get(key)

    def set(self, key: str, value: str) -> None:
        self._slots[key] = value

    def remove(self, key: str) -> None:
        self._slots.pop(key, None)


class JsonFileKeyValueBackend(KeyValueBackend):
    """All slots live in one JSON object file; every write replaces the file atomically."""

    def __init__(self, path: str | Path, quota_bytes: int = 0) -> None:
        self._path = Path(path)
        self._quota_bytes = max(0, quota_bytes)

    @property
    def name(self) -> str:
        return "file"

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str | None:
        # A hand-edited file can hold a non-string value; it is returned as found
        # and rejected by the reader.
        return self._read_slots().get(key)

    def set(self, key: str, value: str) -> None:
        slots = self._read_slots()
        slots[key] = value
        self._write_slots(slots)

    def remove(self, key: str) -> None:
        slots = self._read_slots()
        if key not in slots:
            return
        del slots[key]
        self._write_slots(slots)

    def _read_slots(self) -> dict[str, object]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError:
            return {}

        try:
            slots = json.loads(raw)
        except json.JSONDecodeError:
            return {}
        return slots if isinstance(slots, dict) else {}

    def _write_slots(self, slots: dict[str, object]) -> None:
        encoded = json.dumps(slots, ensure_ascii=False).encode("utf-8")
        if self._quota_bytes and len(encoded) > self._quota_bytes:
            raise HistoryStoreWriteError(
                f"quota_exceeded:{len(encoded)}>{self._quota_bytes}"
            )

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "wb") as handle:
                    handle.write(encoded)
                    handle.flush()
                    os.fsync(handle.fileno())
                os.replace(temp_path, self._path)
            except BaseException:
                Path(temp_path).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise HistoryStoreWriteError(f"write_failed:{exc}") from exc


class HistoryStore:
    """Mirrors the whole history ledger into a single key-value slot."""

    def __init__(
        self,
        backend: KeyValueBackend,
        logger: logging.Logger,
        slot_key: str = "translationHistory",
    ) -> None:
        self._backend = backend
        self._logger = logger
        self._slot_key = slot_key
        self._write_lock = threading.Lock()
        self._writes = 0
        self._write_failures = 0
        self._corruption_resets = 0

    @property
    def slot_key(self) -> str:
        return self._slot_key

    @property
    def backend(self) -> KeyValueBackend:
        return self._backend

    def load(self) -> list[TranslationRecord]:
        """Read the slot; a malformed value is discarded and an empty history returned."""
        raw = self._backend.get(self._slot_key)
        if raw is None:
            return []

        if not isinstance(raw, str):
            self._discard_corrupt_slot("history slot is not a string")
            return []

        try:
            payload = json.loads(raw)
            if not isinstance(payload, list):
                raise MalformedRecordError("history slot is not a list")
            records = [TranslationRecord.from_dict(item) for item in payload]
        except (json.JSONDecodeError, MalformedRecordError) as exc:
            self._discard_corrupt_slot(str(exc))
            return []

        self._logger.info(
            "history_store_loaded",
            extra={
                "event": "history_store_loaded",
                "slot_key": self._slot_key,
                "backend": self._backend.name,
                "records": len(records),
            },
        )
        return records

    def save(self, records: list[TranslationRecord]) -> bool:
        """Write a full snapshot, or remove the slot when there is nothing to keep."""
        with self._write_lock:
            try:
                if records:
                    encoded = json.dumps(
                        [record.to_dict() for record in records],
                        ensure_ascii=False,
                    )
                    self._backend.set(self._slot_key, encoded)
                else:
                    self._backend.remove(self._slot_key)
            except (HistoryStoreWriteError, OSError) as exc:
                self._write_failures += 1
                self._logger.error(
                    "history_store_write_failed",
                    extra={
                        "event": "history_store_write_failed",
                        "slot_key": self._slot_key,
                        "backend": self._backend.name,
                        "records": len(records),
                        "reason": str(exc),
                    },
                )
                return False

            self._writes += 1
            return True

    def snapshot(self) -> dict[str, object]:
        return {
            "backend": self._backend.name,
            "slot_key": self._slot_key,
            "slot_present": self._backend.get(self._slot_key) is not None,
            "writes": self._writes,
            "write_failures": self._write_failures,
            "corruption_resets": self._corruption_resets,
        }

    def _discard_corrupt_slot(self, reason: str) -> None:
        self._corruption_resets += 1
        self._logger.warning(
            "history_store_corrupt",
            extra={
                "event": "history_store_corrupt",
                "slot_key": self._slot_key,
                "backend": self._backend.name,
                "reason": reason,
            },
        )
        with self._write_lock:
            try:
                self._backend.remove(self._slot_key)
            except (HistoryStoreWriteError, OSError) as exc:
                self._write_failures += 1
                self._logger.error(
                    "history_store_write_failed",
                    extra={
                        "event": "history_store_write_failed",
                        "slot_key": self._slot_key,
                        "backend": self._backend.name,
                        "reason": str(exc),
                    },
                )
