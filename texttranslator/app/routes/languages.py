from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel

from texttranslator.app.translation.controller import TranslationValidationError

router = APIRouter(prefix="/languages", tags=["languages"])


class SelectLanguageRequest(BaseModel):
    code: str


@router.get("")
async def list_languages(
    request: Request,
    search: str = Query(default=""),
) -> dict[str, Any]:
    catalog = request.app.state.language_catalog
    languages = catalog.search(search)
    return {
        "results": [language.to_dict() for language in languages],
        "count": len(languages),
    }


@router.put("/selected")
async def select_language(request: Request, body: SelectLanguageRequest) -> dict[str, Any]:
    controller = request.app.state.translation_controller
    try:
        name = controller.select_language(body.code)
    except TranslationValidationError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"code": body.code, "name": name}
