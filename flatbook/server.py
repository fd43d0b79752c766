from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from .aggregate import DEFAULT_SCOPE
from .convert import STATUS_FAILED, Outcome, infer_kind, run_conversion

logger = logging.getLogger(__name__)


class MarkdownRequest(BaseModel):
    content: str
    type: str = "markdown"


def _no_store(data: dict) -> JSONResponse:
    return JSONResponse(data, headers={"Cache-Control": "no-store"})


def _resolve_kind(filename: str, declared: Optional[str]) -> str:
    try:
        return infer_kind(filename, declared)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _success(outcome: Outcome) -> JSONResponse:
    if outcome.status == STATUS_FAILED or outcome.conversion is None:
        raise HTTPException(status_code=400, detail=outcome.error)
    return _no_store(
        {
            "type": "success",
            "status": outcome.status,
            "payload": outcome.conversion.to_payload(),
        }
    )


def create_app(scope: str = DEFAULT_SCOPE) -> FastAPI:
    templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
    app = FastAPI()

    @app.get("/", response_class=HTMLResponse)
    def index(request: Request) -> HTMLResponse:
        context = {
            "scope": scope,
            "container_id": scope[1:] if scope.startswith("#") else "",
            "container_class": scope[1:] if scope.startswith(".") else "",
        }
        return templates.TemplateResponse(request, "reader.html", context)

    @app.get("/api/health")
    def health() -> JSONResponse:
        return _no_store({"status": "ok"})

    @app.post("/api/convert")
    def convert_file(
        file: UploadFile = File(...),
        kind: Optional[str] = Form(None, alias="type"),
    ) -> JSONResponse:
        resolved_kind = _resolve_kind(file.filename or "", kind)
        data = file.file.read()
        outcome = run_conversion(data, resolved_kind, scope=scope)
        logger.info(
            "Converted %s (%s): %s, %d warnings",
            file.filename,
            resolved_kind,
            outcome.status,
            len(outcome.warnings),
        )
        return _success(outcome)

    @app.post("/api/convert/text")
    def convert_text(payload: MarkdownRequest) -> JSONResponse:
        outcome = run_conversion(payload.content, _resolve_kind("", payload.type), scope=scope)
        return _success(outcome)

    return app


def run(host: str, port: int, scope: str = DEFAULT_SCOPE) -> None:
    import uvicorn

    app = create_app(scope=scope)
    uvicorn.run(app, host=host, port=port)
