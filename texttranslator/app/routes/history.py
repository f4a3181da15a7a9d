from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request

from texttranslator.app.history.ledger import page_count, paginate

router = APIRouter(prefix="/history", tags=["history"])


@router.get("")
async def list_history(
    request: Request,
    page: int = Query(default=1, ge=1),
    page_size: int | None = Query(default=None, ge=1, le=500),
    search: str = Query(default=""),
) -> dict[str, Any]:
    settings = request.app.state.settings
    ledger = request.app.state.history_ledger
    size = page_size or settings.history_page_size

    records = ledger.search(search) if search.strip() else ledger.records()
    total_records = len(records)
    total_pages = page_count(total_records, size)
    start = (page - 1) * size
    results = paginate(records, page, size)

    return {
        "results": [record.to_dict() for record in results],
        "count": len(results),
        "page": page,
        "page_size": size,
        "total_pages": total_pages,
        "total_records": total_records,
        "showing_from": start + 1 if results else 0,
        "showing_to": start + len(results),
        "search": search,
    }


@router.get("/stats")
async def get_history_stats(request: Request) -> dict[str, Any]:
    ledger = request.app.state.history_ledger
    store = request.app.state.history_store
    most_used = ledger.most_used_language()
    return {
        "total_records": len(ledger),
        "most_used_language": most_used.to_dict() if most_used is not None else None,
        "total_characters": ledger.total_characters(),
        "store": store.snapshot(),
    }


@router.get("/{record_id}")
async def get_history_record(request: Request, record_id: int) -> dict[str, Any]:
    ledger = request.app.state.history_ledger
    record = ledger.get(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="history record not found")
    return record.to_dict()


@router.delete("/{record_id}")
async def delete_history_record(request: Request, record_id: int) -> dict[str, Any]:
    ledger = request.app.state.history_ledger
    removed = ledger.delete(record_id)
    return {"removed": removed, "total_records": len(ledger)}


@router.delete("")
async def clear_history(request: Request) -> dict[str, Any]:
    ledger = request.app.state.history_ledger
    ledger.clear()
    return {"cleared": True, "total_records": 0}


@router.post("/{record_id}/reuse")
async def reuse_history_record(request: Request, record_id: int) -> dict[str, Any]:
    controller = request.app.state.translation_controller
    record = controller.reuse(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="history record not found")
    return controller.snapshot()
