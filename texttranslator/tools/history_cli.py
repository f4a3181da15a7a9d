from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from texttranslator.app.history.ledger import HistoryLedger, open_ledger, page_count, paginate
from texttranslator.app.history.store import HistoryStore, JsonFileKeyValueBackend
from texttranslator.app.logging_config import configure_logging
from texttranslator.app.settings import build_settings


def emit(message: str = "") -> None:
    print(message, flush=True)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Inspect or manage the persisted translation history without the service."
    )
    parser.add_argument(
        "--store-path",
        default=None,
        help="Path to the local storage file (default: HISTORY_STORE_PATH)",
    )
    parser.add_argument(
        "--slot",
        default=None,
        help="Slot key holding the history (default: HISTORY_SLOT_KEY)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show", help="Print one page of history")
    show.add_argument("--page", type=int, default=1)
    show.add_argument("--page-size", type=int, default=None)
    show.add_argument("--search", default="")

    subparsers.add_parser("stats", help="Print history statistics")

    export = subparsers.add_parser("export", help="Write the history as a JSON array")
    export.add_argument("--output", required=True)

    subparsers.add_parser("clear", help="Remove every history record")
    return parser.parse_args()


def _truncate(text: str, limit: int = 48) -> str:
    flat = " ".join(text.split())
    return flat if len(flat) <= limit else f"{flat[: limit - 3]}..."


def show_page(ledger: HistoryLedger, page: int, page_size: int, search: str) -> None:
    records = ledger.search(search) if search.strip() else ledger.records()
    rows = paginate(records, page, page_size)
    total = len(records)

    if not rows:
        emit("No translations on this page.")
        return

    for record in rows:
        emit(
            f"{record.id}  {record.created_at.isoformat()}  "
            f"[{record.target_language_name}]  "
            f"{_truncate(record.input_text)!r} -> {_truncate(record.translated_text)!r}"
        )
    emit(f"-- page {page} of {page_count(total, page_size)}, {total} records --")


def show_stats(ledger: HistoryLedger) -> None:
    most_used = ledger.most_used_language()
    emit(f"records: {len(ledger)}")
    if most_used is not None:
        emit(f"most used: {most_used.name} ({most_used.count})")
    emit(f"total characters: {ledger.total_characters():,}")


def main() -> int:
    args = parse_args()
    settings = build_settings(Path(__file__).resolve().parents[2])
    configure_logging("WARNING")
    logger = logging.getLogger("texttranslator.tools.history")

    store_path = args.store_path or settings.history_store_path
    if not store_path:
        emit("no history store path configured")
        return 2

    store = HistoryStore(
        JsonFileKeyValueBackend(store_path, quota_bytes=settings.history_store_quota_bytes),
        logger=logger,
        slot_key=args.slot or settings.history_slot_key,
    )
    ledger = open_ledger(store, logger=logger)

    if args.command == "show":
        show_page(ledger, args.page, args.page_size or settings.history_page_size, args.search)
    elif args.command == "stats":
        show_stats(ledger)
    elif args.command == "export":
        payload = [record.to_dict() for record in ledger.records()]
        Path(args.output).write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        emit(f"exported {len(payload)} records to {args.output}")
    elif args.command == "clear":
        count = len(ledger)
        ledger.clear()
        emit(f"cleared {count} records")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
