"""Pipeline orchestration: read, filter, analyze, resolve and validate sources."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .aggregate import ResultAggregate
from .analyzers import Analyzer
from .config import AnalysisConfig
from .coordinator import AnalysisCoordinator
from .errors import AnalysisTimeoutError, AutodocError
from .logging import get_logger
from .unit_reader import ReadWarning, UnitReader
from .unit_set import UnitSet


@dataclass
class RunReport:
    """Outcome of analyzing several sources; one failing source does not stop the rest."""

    results: Dict[str, ResultAggregate] = field(default_factory=dict)
    errors: Dict[str, AutodocError] = field(default_factory=dict)
    warnings: Dict[str, List[ReadWarning]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


class Orchestrator:
    """Coordinates the per-source pipeline under one wall-clock limit."""

    def __init__(
        self,
        reader_factory: Callable[[], UnitReader] = UnitReader,
        coordinator: AnalysisCoordinator | None = None,
        analyzers: Optional[Iterable[Analyzer]] = None,
    ) -> None:
        self.logger = get_logger("orchestrator")
        self.reader_factory = reader_factory
        self.coordinator = coordinator or AnalysisCoordinator(analyzers)
        self.last_warnings: List[ReadWarning] = []

    def build_unit_set(self, source: Path | str, config: AnalysisConfig) -> UnitSet:
        """Read ``source`` and keep the units accepted by the name patterns."""
        reader = self.reader_factory()
        units = reader.read(source)
        self.last_warnings = list(reader.warnings)

        unit_set = UnitSet(unit for unit in units if config.accepts(unit.logical_name))
        skipped = len(units) - len(unit_set)
        self.logger.debug(
            "Read %d units from %s (%d filtered out, %d warnings)",
            len(units),
            source,
            skipped,
            len(reader.warnings),
        )
        return unit_set

    def analyze(self, source: Path | str, config: AnalysisConfig | None = None) -> ResultAggregate:
        """Run the full pipeline for one source and return its aggregate."""
        config = config or AnalysisConfig.default()
        source_path = str(source)
        deadline = time.monotonic() + config.timeout if config.timeout is not None else None

        self.logger.info("Analyzing %s", source_path)
        unit_set = self.build_unit_set(source, config)
        if deadline is not None and time.monotonic() >= deadline:
            raise AnalysisTimeoutError(config.timeout or 0.0, "reading", source_path)

        return self.coordinator.run(unit_set, config, source_path=source_path, deadline=deadline)

    def run_many(self, sources: Sequence[Path | str], config: AnalysisConfig | None = None) -> RunReport:
        """Analyze each source independently, recording fatal errors per source."""
        config = config or AnalysisConfig.default()
        report = RunReport()
        for source in sources:
            key = str(source)
            try:
                report.results[key] = self.analyze(source, config)
            except AutodocError as exc:
                self._log_exception(f"Analysis of {key} failed", exc)
                report.errors[key] = exc
            finally:
                if self.last_warnings:
                    report.warnings[key] = list(self.last_warnings)
                self.last_warnings = []
        return report

    def _log_exception(self, message: str, exc: Exception) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("%s: %s", message, exc)
        else:
            self.logger.error("%s: %s", message, exc)


__all__ = ["Orchestrator", "RunReport"]
