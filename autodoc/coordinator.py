"""Dispatch analyzers across a unit set and merge their facts."""

from __future__ import annotations

import logging
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from .aggregate import FactBatch, ResultAggregate
from .analyzers import Analyzer, discover_analyzers, select_analyzers
from .config import AnalysisConfig
from .errors import AnalysisTimeoutError, AnalyzerFailure, CoordinatorFailure
from .logging import get_logger
from .models import Unit
from .resolver import CrossReferenceResolver
from .unit_set import UnitSet
from .validators import Validator, run_validators

DEFAULT_GRACE_PERIOD = 1.0

_UnitResult = Tuple[FactBatch, List[AnalyzerFailure]]


class Phase(str, Enum):
    """Lifecycle of one coordinator run."""

    IDLE = "idle"
    DISPATCHING = "dispatching"
    MERGING = "merging"
    CROSS_REFERENCING = "cross_referencing"
    VALIDATING = "validating"
    DONE = "done"


_PHASE_ORDER = {phase: index for index, phase in enumerate(Phase)}


class RunState:
    """Per-run phase tracker; transitions only move forward."""

    def __init__(self) -> None:
        self.phase = Phase.IDLE
        self.history: List[Phase] = [Phase.IDLE]
        self.failures: List[AnalyzerFailure] = []

    def advance(self, phase: Phase) -> None:
        if _PHASE_ORDER[phase] < _PHASE_ORDER[self.phase]:
            raise CoordinatorFailure(self.phase.value, f"cannot move back to {phase.value}")
        if phase is not self.phase:
            self.phase = phase
            self.history.append(phase)


class AnalysisCoordinator:
    """Runs analyzers over every unit, sequentially or on a bounded worker pool.

    Each unit's facts are buffered in a :class:`FactBatch` and merged into the
    aggregate once the unit is done, so an analyzer that raises contributes
    nothing for that unit. Cross-references are derived only after every batch
    has been merged.
    """

    def __init__(
        self,
        analyzers: Optional[Iterable[Analyzer]] = None,
        *,
        resolver: CrossReferenceResolver | None = None,
        validators: Sequence[Validator] | None = None,
        grace_period: float = DEFAULT_GRACE_PERIOD,
        max_in_flight: int | None = None,
    ) -> None:
        self.logger = get_logger("coordinator")
        self.analyzers: List[Analyzer] = list(analyzers) if analyzers is not None else discover_analyzers()
        self.resolver = resolver or CrossReferenceResolver()
        self.validators = list(validators) if validators is not None else None
        self.grace_period = grace_period
        self.max_in_flight = max_in_flight

    def run(
        self,
        unit_set: UnitSet,
        config: AnalysisConfig,
        *,
        source_path: str = "",
        deadline: float | None = None,
    ) -> ResultAggregate:
        """Analyze ``unit_set`` and return the closed aggregate.

        ``deadline`` is a :func:`time.monotonic` value; when omitted it is derived
        from ``config.timeout``.
        """
        if deadline is None and config.timeout is not None:
            deadline = time.monotonic() + config.timeout

        state = RunState()
        aggregate = ResultAggregate(source_path=source_path, config=config)
        analyzers = select_analyzers(self.analyzers, config)

        try:
            state.advance(Phase.DISPATCHING)
            if config.parallel:
                self._run_parallel(unit_set, analyzers, aggregate, config, state, deadline)
            else:
                self._run_sequential(unit_set, analyzers, aggregate, config, state, deadline)
            aggregate.failures = tuple(state.failures)

            if config.analyze_types:
                self._check_deadline(deadline, config, state, source_path)
                state.advance(Phase.CROSS_REFERENCING)
                added = self.resolver.resolve(aggregate)
                self.logger.debug("Derived %d cross-references for %s", added, source_path or "<units>")

            if config.validate:
                state.advance(Phase.VALIDATING)
                aggregate.validation_report = run_validators(aggregate, self.validators)

            state.advance(Phase.DONE)
        except (AnalysisTimeoutError, CoordinatorFailure):
            raise
        except Exception as exc:
            self._log_exception(f"Coordinator failed during {state.phase.value}", exc)
            raise CoordinatorFailure(state.phase.value, str(exc), source_path or None) from exc

        self.logger.info(
            "Analyzed %d units from %s: %d configuration facts, %d type facts, %d analyzer failures",
            len(unit_set),
            source_path or "<units>",
            aggregate.total_configurations,
            aggregate.total_types,
            len(aggregate.failures),
        )
        return aggregate

    def _run_sequential(
        self,
        unit_set: UnitSet,
        analyzers: Sequence[Analyzer],
        aggregate: ResultAggregate,
        config: AnalysisConfig,
        state: RunState,
        deadline: float | None,
    ) -> None:
        for unit in unit_set:
            self._check_deadline(deadline, config, state, aggregate.source_path)
            batch, failures = self._analyze_unit(unit, analyzers)
            aggregate.merge(batch)
            state.failures.extend(failures)
        state.advance(Phase.MERGING)

    def _run_parallel(
        self,
        unit_set: UnitSet,
        analyzers: Sequence[Analyzer],
        aggregate: ResultAggregate,
        config: AnalysisConfig,
        state: RunState,
        deadline: float | None,
    ) -> None:
        window = self.max_in_flight or config.thread_count * 2
        executor = ThreadPoolExecutor(max_workers=config.thread_count, thread_name_prefix="autodoc-analyze")
        pending: Set[Future[_UnitResult]] = set()
        timed_out = False
        try:
            for unit in unit_set:
                if _expired(deadline):
                    timed_out = True
                    self._abandon(pending)
                    self._raise_timeout(config, state, aggregate.source_path)
                while len(pending) >= window:
                    pending, timed_out = self._drain(pending, aggregate, state, deadline)
                    if timed_out:
                        self._abandon(pending)
                        self._raise_timeout(config, state, aggregate.source_path)
                pending.add(executor.submit(self._analyze_unit, unit, analyzers))

            state.advance(Phase.MERGING)
            while pending:
                pending, timed_out = self._drain(pending, aggregate, state, deadline)
                if timed_out:
                    self._abandon(pending)
                    self._raise_timeout(config, state, aggregate.source_path)
        finally:
            executor.shutdown(wait=not timed_out, cancel_futures=True)

    def _drain(
        self,
        pending: Set[Future[_UnitResult]],
        aggregate: ResultAggregate,
        state: RunState,
        deadline: float | None,
    ) -> Tuple[Set[Future[_UnitResult]], bool]:
        done, remaining = wait(pending, timeout=_remaining(deadline), return_when=FIRST_COMPLETED)
        if not done:
            return set(remaining), True
        for future in done:
            try:
                batch, failures = future.result()
            except Exception as exc:
                raise CoordinatorFailure(state.phase.value, str(exc), aggregate.source_path or None) from exc
            aggregate.merge(batch)
            state.failures.extend(failures)
        return set(remaining), False

    def _abandon(self, pending: Set[Future[_UnitResult]]) -> None:
        for future in pending:
            future.cancel()
        if pending:
            wait(pending, timeout=self.grace_period)

    def _analyze_unit(self, unit: Unit, analyzers: Sequence[Analyzer]) -> _UnitResult:
        batch = FactBatch(unit.logical_name)
        failures: List[AnalyzerFailure] = []
        for analyzer in analyzers:
            local = FactBatch(unit.logical_name)
            try:
                analyzer.analyze(unit, local)
            except Exception as exc:
                failure = AnalyzerFailure(getattr(analyzer, "name", type(analyzer).__name__), unit.logical_name, exc)
                self.logger.warning("%s", failure)
                failures.append(failure)
                continue
            batch.extend(local.facts)
        return batch, failures

    def _check_deadline(
        self,
        deadline: float | None,
        config: AnalysisConfig,
        state: RunState,
        source_path: str,
    ) -> None:
        if _expired(deadline):
            self._raise_timeout(config, state, source_path)

    def _raise_timeout(self, config: AnalysisConfig, state: RunState, source_path: str) -> None:
        timeout = config.timeout if config.timeout is not None else 0.0
        self.logger.error("Analysis of %s exceeded %gs during %s", source_path or "<units>", timeout, state.phase.value)
        raise AnalysisTimeoutError(timeout, state.phase.value, source_path or None)

    def _log_exception(self, message: str, exc: Exception) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("%s: %s", message, exc)
        else:
            self.logger.error("%s: %s", message, exc)


def _remaining(deadline: float | None) -> float | None:
    if deadline is None:
        return None
    return max(0.0, deadline - time.monotonic())


def _expired(deadline: float | None) -> bool:
    return deadline is not None and time.monotonic() >= deadline


__all__ = ["AnalysisCoordinator", "Phase", "RunState"]
