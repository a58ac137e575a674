"""Thread-safe aggregate of facts and cross-references for one source."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .config import AnalysisConfig
from .errors import AnalyzerFailure
from .models import (
    CONFIGURATION_KINDS,
    TYPE_KINDS,
    ChoiceGenerator,
    ConfigAnnotation,
    ConfigOption,
    CrossReference,
    Fact,
    FactKind,
    Listener,
    LoggerConfig,
    ModelClass,
    NativePeer,
    TypeInfo,
)

if TYPE_CHECKING:
    from .validators.base import ValidationReport


@dataclass
class FactBatch:
    """Facts buffered for one unit before they are merged into an aggregate."""

    unit_name: str
    facts: List[Fact] = field(default_factory=list)

    def add(self, fact: Fact) -> None:
        self.facts.append(fact)

    def extend(self, facts: Iterable[Fact]) -> None:
        self.facts.extend(facts)

    def __len__(self) -> int:
        return len(self.facts)


class _KindStore:
    """One natural-key mapping guarded by its own lock."""

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.items: Dict[str, Any] = {}

    def put(self, key: str, value: Any) -> None:
        with self.lock:
            self.items[key] = value

    def snapshot(self) -> Mapping[str, Any]:
        with self.lock:
            return MappingProxyType(dict(self.items))

    def __len__(self) -> int:
        with self.lock:
            return len(self.items)


class ResultAggregate:
    """Facts keyed by natural key per kind, plus cross-references and run metadata.

    Writers may call :meth:`add_fact`, :meth:`merge` and
    :meth:`add_cross_reference` from several threads. There is no removal API;
    repeated natural keys keep the most recent fact.
    """

    def __init__(
        self,
        source_path: str = "",
        config: Optional[AnalysisConfig] = None,
        started_at: Optional[datetime] = None,
    ) -> None:
        self.source_path = source_path
        self.config = config if config is not None else AnalysisConfig.default()
        self.started_at = started_at or datetime.now(timezone.utc)
        self.validation_report: Optional["ValidationReport"] = None
        self.failures: Tuple[AnalyzerFailure, ...] = ()
        self._stores: Dict[FactKind, _KindStore] = {kind: _KindStore() for kind in FactKind}
        self._cross_references = _KindStore()

    def add_fact(self, fact: Fact) -> None:
        self._stores[fact.kind].put(fact.natural_key, fact)

    def merge(self, batch: FactBatch) -> int:
        for fact in batch.facts:
            self.add_fact(fact)
        return len(batch.facts)

    def add_cross_reference(self, reference: CrossReference) -> None:
        self._cross_references.put(reference.id, reference)

    def facts(self, kind: FactKind) -> Mapping[str, Fact]:
        """Return a read-only snapshot of the facts of one kind."""
        return self._stores[kind].snapshot()

    def count(self, kind: FactKind) -> int:
        return len(self._stores[kind])

    def config_options(self) -> Mapping[str, ConfigOption]:
        return self.facts(FactKind.CONFIG_OPTION)  # type: ignore[return-value]

    def config_annotations(self) -> Mapping[str, ConfigAnnotation]:
        return self.facts(FactKind.CONFIG_ANNOTATION)  # type: ignore[return-value]

    def choice_generators(self) -> Mapping[str, ChoiceGenerator]:
        return self.facts(FactKind.CHOICE_GENERATOR)  # type: ignore[return-value]

    def loggers(self) -> Mapping[str, LoggerConfig]:
        return self.facts(FactKind.LOGGER_CONFIG)  # type: ignore[return-value]

    def types(self) -> Mapping[str, TypeInfo]:
        return self.facts(FactKind.TYPE_INFO)  # type: ignore[return-value]

    def model_classes(self) -> Mapping[str, ModelClass]:
        return self.facts(FactKind.MODEL_CLASS)  # type: ignore[return-value]

    def native_peers(self) -> Mapping[str, NativePeer]:
        return self.facts(FactKind.NATIVE_PEER)  # type: ignore[return-value]

    def listeners(self) -> Mapping[str, Listener]:
        return self.facts(FactKind.LISTENER)  # type: ignore[return-value]

    def cross_references(self) -> Mapping[str, CrossReference]:
        return self._cross_references.snapshot()

    @property
    def total_configurations(self) -> int:
        return sum(self.count(kind) for kind in CONFIGURATION_KINDS)

    @property
    def total_types(self) -> int:
        return sum(self.count(kind) for kind in TYPE_KINDS)

    @property
    def total_facts(self) -> int:
        return self.total_configurations + self.total_types

    @property
    def has_configurations(self) -> bool:
        return self.total_configurations > 0

    @property
    def is_empty(self) -> bool:
        return self.total_facts == 0 and len(self._cross_references) == 0

    def summary(self) -> Dict[str, Any]:
        counts = {kind.value: self.count(kind) for kind in FactKind}
        counts["CrossReference"] = len(self._cross_references)
        return {
            "source_path": self.source_path,
            "total_configurations": self.total_configurations,
            "total_types": self.total_types,
            "counts": counts,
            "analyzer_failures": len(self.failures),
            "valid": self.validation_report.is_valid if self.validation_report else None,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Serialisable form with facts sorted by natural key."""
        facts: Dict[str, List[Dict[str, Any]]] = {}
        for kind in FactKind:
            snapshot = self.facts(kind)
            facts[kind.value] = [snapshot[key].to_dict() for key in sorted(snapshot)]
        references = sorted(
            self.cross_references().values(),
            key=lambda ref: (ref.relationship.value, ref.source_key, ref.target_key, ref.id),
        )
        payload: Dict[str, Any] = {
            "source_path": self.source_path,
            "started_at": self.started_at.isoformat(),
            "config": self.config.to_dict(),
            "facts": facts,
            "cross_references": [ref.to_dict() for ref in references],
            "summary": self.summary(),
        }
        if self.failures:
            payload["failures"] = [
                {"analyzer": failure.analyzer, "unit": failure.unit_name, "error": str(failure.cause)}
                for failure in self.failures
            ]
        if self.validation_report is not None:
            payload["validation"] = self.validation_report.to_dict()
        return payload

    def __repr__(self) -> str:
        return (
            f"ResultAggregate(source_path={self.source_path!r}, "
            f"configurations={self.total_configurations}, types={self.total_types})"
        )


__all__ = ["FactBatch", "ResultAggregate"]
