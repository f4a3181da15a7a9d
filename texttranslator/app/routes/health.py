from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def get_health(request: Request) -> dict[str, Any]:
    settings = request.app.state.settings
    started_at = request.app.state.started_at
    ledger = request.app.state.history_ledger
    store = request.app.state.history_store
    controller = request.app.state.translation_controller
    now = datetime.now(timezone.utc)
    uptime_seconds = max(0.0, (now - started_at).total_seconds())

    return {
        "status": "ok",
        "service": settings.service_name,
        "version": settings.service_version,
        "environment": settings.environment,
        "started_at": started_at.isoformat(),
        "uptime_seconds": round(uptime_seconds, 3),
        "checks": {
            "translation_configured": controller.provider.configured,
            "translation_mode": settings.translation_mode,
            "translation_state": controller.state.value,
            "history_records": len(ledger),
            "history_store_mode": store.backend.name,
        },
    }
