from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass

from fastapi import FastAPI, Header
from fastapi.responses import JSONResponse
from pydantic import BaseModel


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    return float(raw)


@dataclass
class MockState:
    request_count: int = 0
    fail_every: int = 0
    omit_field_every: int = 0
    response_delay_seconds: float = 0.0
    required_key: str = ""

    def should_fail(self) -> bool:
        return self.fail_every > 0 and self.request_count % self.fail_every == 0

    def should_omit_field(self) -> bool:
        return self.omit_field_every > 0 and self.request_count % self.omit_field_every == 0


class MockTranslateBody(BaseModel):
    target_lang: str
    text: str


def create_mock_app() -> FastAPI:
    app = FastAPI(title="Translation API Mock")

    state = MockState(
        fail_every=_env_int("TRANSLATE_MOCK_FAIL_EVERY", 0),
        omit_field_every=_env_int("TRANSLATE_MOCK_OMIT_FIELD_EVERY", 0),
        response_delay_seconds=_env_float("TRANSLATE_MOCK_DELAY_SECONDS", 0.0),
        required_key=os.getenv("TRANSLATE_MOCK_REQUIRED_KEY", ""),
    )
    app.state.mock_state = state

    @app.get("/health")
    async def health() -> dict[str, object]:
        return {
            "status": "ok",
            "request_count": state.request_count,
            "fail_every": state.fail_every,
            "omit_field_every": state.omit_field_every,
            "response_delay_seconds": state.response_delay_seconds,
        }

    @app.post("/translate")
    async def translate(
        body: MockTranslateBody,
        x_rapidapi_key: str = Header(default=""),
    ) -> JSONResponse:
        state.request_count += 1

        if state.response_delay_seconds > 0:
            await asyncio.sleep(state.response_delay_seconds)

        if state.required_key and x_rapidapi_key != state.required_key:
            return JSONResponse(status_code=403, content={"message": "invalid api key"})

        if state.should_fail():
            return JSONResponse(status_code=503, content={"message": "service unavailable"})

        if state.should_omit_field():
            return JSONResponse(status_code=200, content={"status": "ok"})

        translated = f"{body.text[::-1]} ({body.target_lang})"
        return JSONResponse(status_code=200, content={"translatedText": translated})

    return app


app = create_mock_app()
