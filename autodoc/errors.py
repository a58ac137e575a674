"""Typed errors raised by the ingestion and analysis pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class AutodocError(RuntimeError):
    """Base class for every error surfaced by autodoc."""


class UnitReadError(AutodocError):
    """Raised when a unit or a container cannot be read."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        super().__init__(message)
        self.path = str(path) if path is not None else None


class SourceNotFoundError(UnitReadError):
    """Raised when a requested source path does not exist."""


class UnsupportedFormatError(AutodocError):
    """Raised for containers that are recognized but cannot be read yet."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        super().__init__(message)
        self.path = str(path) if path is not None else None


class MalformedUnitError(AutodocError):
    """Raised by analyzers when a unit's content is not a usable class file."""


class AnalyzerFailure(AutodocError):
    """Wraps an exception raised by one analyzer while processing one unit."""

    def __init__(self, analyzer: str, unit_name: str, cause: BaseException) -> None:
        super().__init__(f"Analyzer '{analyzer}' failed on {unit_name}: {cause}")
        self.analyzer = analyzer
        self.unit_name = unit_name
        self.cause = cause


class CoordinatorFailure(AutodocError):
    """Raised when the dispatch or merge machinery breaks during a run."""

    def __init__(self, phase: str, message: str, source_path: Optional[str] = None) -> None:
        location = f" for {source_path}" if source_path else ""
        super().__init__(f"Analysis failed during {phase}{location}: {message}")
        self.phase = phase
        self.source_path = source_path


class OutputGenerationError(AutodocError):
    """Raised when an aggregate cannot be rendered in the requested format."""


class AnalysisTimeoutError(AutodocError):
    """Raised when a run exceeds its wall-clock limit."""

    def __init__(self, timeout: float, phase: str, source_path: Optional[str] = None) -> None:
        location = f" for {source_path}" if source_path else ""
        super().__init__(f"Analysis timed out after {timeout:g}s during {phase}{location}")
        self.timeout = timeout
        self.phase = phase
        self.source_path = source_path


__all__ = [
    "AnalysisTimeoutError",
    "AnalyzerFailure",
    "AutodocError",
    "CoordinatorFailure",
    "MalformedUnitError",
    "OutputGenerationError",
    "SourceNotFoundError",
    "UnitReadError",
    "UnsupportedFormatError",
]
