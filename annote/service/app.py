"""FastAPI application entrypoint for annote service mode."""

from __future__ import annotations

import asyncio
from functools import partial
from typing import Any, Callable, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import AnnoteConfig, ConfigError
from ..errors import AnnotationError
from ..models import AnnotatedDocument, RunReport
from ..orchestrator import Annotator


class AnnotateRequest(BaseModel):
    source: str
    filename: str = "source.js"
    markdown: bool = True
    highlight: bool = True


class AnnotateResponse(BaseModel):
    html: str
    blocks: int


class RunRequest(BaseModel):
    path: str
    match: Optional[List[str]] = None
    maxdepth: Optional[int] = None
    write_to: Optional[str] = None
    markdown: Optional[bool] = None
    highlight: Optional[bool] = None


class FileResult(BaseModel):
    source: str
    output: str
    ok: bool
    error: Optional[str] = None


class RunResponse(BaseModel):
    status: str
    files: List[FileResult]


class HealthResponse(BaseModel):
    status: str


def _default_annotator(config: AnnoteConfig) -> Annotator:
    return Annotator(config)


def create_app(
    annotator_factory: Callable[[AnnoteConfig], Annotator] = _default_annotator,
    base_config: AnnoteConfig | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing annote operations."""

    app = FastAPI(title="annote", version="1.0.0")
    defaults = base_config or AnnoteConfig()

    async def get_factory() -> Callable[[AnnoteConfig], Annotator]:
        return annotator_factory

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/annotate", response_model=AnnotateResponse)
    async def annotate(
        payload: AnnotateRequest,
        factory: Callable[[AnnoteConfig], Annotator] = Depends(get_factory),
    ) -> AnnotateResponse:
        config = defaults.merged(markdown=payload.markdown, highlight=payload.highlight)
        annotator = factory(config)
        loop = asyncio.get_running_loop()
        document: AnnotatedDocument = await loop.run_in_executor(
            None, partial(annotator.render_document, payload.source, payload.filename)
        )
        return AnnotateResponse(html=document.html, blocks=document.blocks)

    @app.post("/run", response_model=RunResponse)
    async def run(
        payload: RunRequest,
        factory: Callable[[AnnoteConfig], Annotator] = Depends(get_factory),
    ) -> RunResponse:
        config = defaults.merged(
            path=payload.path,
            match=payload.match,
            maxdepth=payload.maxdepth,
            write_to=payload.write_to,
            markdown=payload.markdown,
            highlight=payload.highlight,
            fail_fast=False,
        )
        annotator = factory(config)
        loop = asyncio.get_running_loop()
        report: RunReport = await loop.run_in_executor(None, annotator.run)
        return RunResponse(
            status="ok" if report.ok else "partial",
            files=[
                FileResult(
                    source=outcome.source.as_posix(),
                    output=outcome.output.as_posix(),
                    ok=outcome.ok,
                    error=str(outcome.error) if outcome.error else None,
                )
                for outcome in report.outcomes
            ],
        )

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(AnnotationError)
    async def annotation_error_handler(_: Any, exc: AnnotationError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc), "stage": exc.stage})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000, config: AnnoteConfig | None = None
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app(base_config=config)
    uvicorn.run(app, host=host, port=port)
