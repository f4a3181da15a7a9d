from __future__ import annotations

import argparse
from typing import Any

import httpx


def emit(message: str = "") -> None:
    print(message, flush=True)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Send one translation through a running service and report the controller "
            "state and history counters before and after."
        )
    )
    parser.add_argument(
        "--base-url",
        default="http://127.0.0.1:8000",
        help="Service base URL (default: http://127.0.0.1:8000)",
    )
    parser.add_argument("--text", default="Hello", help="Text to translate (default: Hello)")
    parser.add_argument(
        "--target",
        default=None,
        help="Target language code (default: the service's selected language)",
    )
    return parser.parse_args()


def _history_count(client: httpx.Client, base_url: str) -> int:
    stats: dict[str, Any] = client.get(f"{base_url}/history/stats").json()
    try:
        return int(stats.get("total_records", 0))
    except (TypeError, ValueError):
        return 0


def main() -> int:
    args = parse_args()
    base_url = args.base_url.rstrip("/")

    with httpx.Client(timeout=30.0) as client:
        try:
            health = client.get(f"{base_url}/health")
            health.raise_for_status()
        except httpx.HTTPError as exc:
            emit(f"failed to reach service health endpoint: {exc}")
            return 2

        checks = health.json().get("checks", {})
        emit(f"health: {checks}")
        before = _history_count(client, base_url)

        body: dict[str, Any] = {"text": args.text}
        if args.target:
            body["target_language"] = args.target
        response = client.post(f"{base_url}/translations", json=body)
        payload = response.json()
        after = _history_count(client, base_url)

    emit(f"status: {response.status_code}")
    if response.status_code == 200:
        emit(f"translated: {payload.get('translated_text')!r}")
    else:
        emit(f"error: {payload.get('error') or payload.get('detail')!r}")
    emit(f"history records: {before} -> {after}")
    return 0 if response.status_code == 200 else 1


if __name__ == "__main__":
    raise SystemExit(main())
