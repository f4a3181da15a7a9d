from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from texttranslator.app.translation.controller import (
    TranslationAlreadyPendingError,
    TranslationConfigurationError,
    TranslationValidationError,
)

router = APIRouter(prefix="/translations", tags=["translations"])


class TranslateRequest(BaseModel):
    text: str
    target_language: str | None = None


@router.post("")
async def translate_text(request: Request, body: TranslateRequest) -> Any:
    controller = request.app.state.translation_controller

    try:
        outcome = await controller.translate(body.text, body.target_language)
    except TranslationValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except TranslationAlreadyPendingError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except TranslationConfigurationError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    if not outcome.ok:
        return JSONResponse(status_code=502, content=outcome.to_dict())
    return outcome.to_dict()


@router.get("/status")
async def get_translation_status(request: Request) -> dict[str, Any]:
    controller = request.app.state.translation_controller
    return controller.snapshot()


@router.post("/clear")
async def clear_translation_input(request: Request) -> dict[str, Any]:
    controller = request.app.state.translation_controller
    controller.clear_input()
    return controller.snapshot()
