from __future__ import annotations

import logging
import math
from collections import Counter
from datetime import datetime, timezone
from typing import Callable, Iterable

from texttranslator.app.history.store import HistoryStore
from texttranslator.app.history.types import LanguageUsage, TranslationRecord

LedgerObserver = Callable[[list[TranslationRecord]], object]


def _now_ms(now: datetime) -> int:
    return int(now.timestamp() * 1000)


def paginate(
    records: list[TranslationRecord],
    page_number: int,
    page_size: int,
) -> list[TranslationRecord]:
    """Return the 1-based page of ``records``; invalid or out-of-range pages are empty."""
    if page_number < 1 or page_size < 1:
        return []
    start = (page_number - 1) * page_size
    end = min(page_number * page_size, len(records))
    if start >= end:
        return []
    return records[start:end]


def page_count(total: int, page_size: int) -> int:
    if page_size < 1:
        return 0
    return math.ceil(total / page_size)


class HistoryLedger:
    """Newest-first history of completed translations for the running session.

    Insertion order is authoritative: records are prepended on ``add`` and never
    re-sorted by timestamp. Observers registered with ``observe`` receive a copy
    of the records after every mutation.
    """

    def __init__(
        self,
        records: Iterable[TranslationRecord] = (),
        logger: logging.Logger | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._records: list[TranslationRecord] = list(records)
        self._logger = logger or logging.getLogger("texttranslator.history")
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._observers: list[LedgerObserver] = []
        self._last_id = max((record.id for record in self._records), default=0)

    def __len__(self) -> int:
        return len(self._records)

    def observe(self, observer: LedgerObserver) -> None:
        self._observers.append(observer)

    def records(self) -> list[TranslationRecord]:
        return list(self._records)

    def get(self, record_id: int) -> TranslationRecord | None:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def add(
        self,
        input_text: str,
        translated_text: str,
        target_language_code: str,
        target_language_name: str,
    ) -> TranslationRecord:
        created_at = self._clock()
        # Same-millisecond adds still get distinct, increasing ids.
        record_id = max(_now_ms(created_at), self._last_id + 1)
        self._last_id = record_id

        record = TranslationRecord(
            id=record_id,
            input_text=input_text,
            translated_text=translated_text,
            target_language_code=target_language_code,
            target_language_name=target_language_name,
            created_at=created_at,
        )
        self._records.insert(0, record)
        self._notify("add")
        return record

    def delete(self, record_id: int) -> bool:
        remaining = [record for record in self._records if record.id != record_id]
        if len(remaining) == len(self._records):
            return False
        self._records = remaining
        self._notify("delete")
        return True

    def clear(self) -> None:
        self._records = []
        self._notify("clear")

    def page(self, page_number: int, page_size: int) -> list[TranslationRecord]:
        return paginate(self._records, page_number, page_size)

    def total_pages(self, page_size: int) -> int:
        return page_count(len(self._records), page_size)

    def search(self, term: str) -> list[TranslationRecord]:
        needle = term.strip().lower()
        if not needle:
            return self.records()
        return [
            record
            for record in self._records
            if needle in record.input_text.lower()
            or needle in record.translated_text.lower()
            or needle in record.target_language_name.lower()
            or needle in record.target_language_code.lower()
        ]

    def most_used_language(self) -> LanguageUsage | None:
        if not self._records:
            return None
        # Counter keeps first-seen order, so max() resolves ties to the earliest name.
        tally = Counter(record.target_language_name for record in self._records)
        name, count = max(tally.items(), key=lambda item: item[1])
        return LanguageUsage(name=name, count=count)

    def total_characters(self) -> int:
        return sum(record.character_count for record in self._records)

    def _notify(self, operation: str) -> None:
        snapshot = self.records()
        for observer in self._observers:
            try:
                observer(snapshot)
            except Exception as exc:
                self._logger.error(
                    "history_observer_error",
                    extra={
                        "event": "history_observer_error",
                        "operation": operation,
                        "records": len(snapshot),
                        "reason": str(exc),
                    },
                )


def open_ledger(
    store: HistoryStore,
    logger: logging.Logger | None = None,
    clock: Callable[[], datetime] | None = None,
) -> HistoryLedger:
    """Seed a ledger from the store once and keep the store mirrored after every change.

    The mirror write runs synchronously inside the mutating call, including on the
    event loop when called from a route. A mutation is therefore durable by the time
    it returns, at the cost of one small file write per change. History slots stay
    well under the store quota, so that write is short.
    """
    ledger = HistoryLedger(store.load(), logger=logger, clock=clock)
    ledger.observe(store.save)
    return ledger
