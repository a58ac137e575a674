"""FastAPI application entrypoint for autodoc service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..config import AnalysisConfig, ConfigError
from ..errors import AutodocError, SourceNotFoundError
from ..logging import get_logger
from ..orchestrator import Orchestrator, RunReport

_LOGGER = get_logger("service")


class AnalyzeRequest(BaseModel):
    paths: List[str] = Field(..., min_length=1)
    config_only: bool = False
    types_only: bool = False
    validate_result: bool = Field(False, alias="validate")
    parallel: Optional[int] = None
    include_patterns: List[str] = Field(default_factory=list)
    exclude_patterns: List[str] = Field(default_factory=list)
    timeout: Optional[float] = None
    include_result: bool = False

    model_config = {"populate_by_name": True}


class SourceResult(BaseModel):
    source: str
    summary: Dict[str, Any]
    warnings: List[str] = Field(default_factory=list)
    result: Optional[Dict[str, Any]] = None


class AnalyzeResponse(BaseModel):
    status: str
    results: List[SourceResult]
    errors: Dict[str, str] = Field(default_factory=dict)


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def build_config(payload: AnalyzeRequest) -> AnalysisConfig:
    """Translate request options into an analysis config."""
    if payload.config_only and payload.types_only:
        raise ConfigError("config_only and types_only are mutually exclusive")
    builder = AnalysisConfig.builder().validate(payload.validate_result).site_lookup(False)
    if payload.config_only:
        builder.analyze_configurations(True).analyze_types(False)
    if payload.types_only:
        builder.analyze_configurations(False).analyze_types(True)
    if payload.parallel is not None:
        if payload.parallel <= 0:
            builder.parallel(False)
        else:
            builder.parallel(True).thread_count(payload.parallel)
    for pattern in payload.include_patterns:
        builder.include_pattern(pattern)
    for pattern in payload.exclude_patterns:
        builder.exclude_pattern(pattern)
    if payload.timeout is not None:
        builder.timeout(payload.timeout)
    return builder.build()


def _to_response(report: RunReport, include_result: bool) -> AnalyzeResponse:
    results = [
        SourceResult(
            source=source,
            summary=aggregate.summary(),
            warnings=[f"{warning.path}: {warning.reason}" for warning in report.warnings.get(source, [])],
            result=aggregate.to_dict() if include_result else None,
        )
        for source, aggregate in report.results.items()
    ]
    errors = {source: str(exc) for source, exc in report.errors.items()}
    status = "ok" if report.ok else ("partial" if results else "failed")
    return AnalyzeResponse(status=status, results=results, errors=errors)


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing autodoc analysis."""

    app = FastAPI(title="Autodoc Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        # Fresh orchestrator per request; read warnings are tracked on the instance.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/analyze", response_model=AnalyzeResponse)
    async def analyze(
        payload: AnalyzeRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> AnalyzeResponse:
        config = build_config(payload)
        for path in payload.paths:
            if not Path(path).expanduser().exists():
                raise SourceNotFoundError(f"Source path not found: {path}", path=path)

        def _run() -> RunReport:
            return orchestrator.run_many(payload.paths, config)

        loop = asyncio.get_running_loop()
        report = await loop.run_in_executor(None, _run)
        _LOGGER.info("Analyzed %d sources (%d failed)", len(payload.paths), len(report.errors))
        return _to_response(report, payload.include_result)

    @app.exception_handler(SourceNotFoundError)
    async def source_not_found_handler(_: Any, exc: SourceNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(AutodocError)
    async def autodoc_error_handler(_: Any, exc: AutodocError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    app = create_app()
    uvicorn.run(app, host=host, port=port)


__all__ = ["AnalyzeRequest", "AnalyzeResponse", "build_config", "create_app", "run_service"]
