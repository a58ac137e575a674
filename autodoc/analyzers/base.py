"""Base classes for analyzer plugins."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol, Sequence, Tuple

from ..config import DEFAULT_SCOPE
from ..models import Fact, Unit
from .classifiers import Classifier


class FactSink(Protocol):
    """Destination for facts emitted while analyzing one unit."""

    def add(self, fact: Fact) -> None:
        ...


class Analyzer(ABC):
    """Contract for analyzers that emit facts from a single unit.

    Analyzers must not depend on facts produced for other units in the same run.
    """

    name: str = "analyzer"

    @abstractmethod
    def analyze(self, unit: Unit, sink: FactSink) -> None:
        """Emit every fact this analyzer derives from ``unit`` into ``sink``."""


class ClassifierAnalyzer(Analyzer):
    """Analyzer driven by an explicit, replaceable set of classifiers."""

    classifiers: Tuple[Classifier, ...] = ()

    def __init__(
        self,
        classifiers: Sequence[Classifier] | None = None,
        scope: Sequence[str] | None = None,
    ) -> None:
        if classifiers is not None:
            self.classifiers = tuple(classifiers)
        self.scope: Tuple[str, ...] = tuple(scope) if scope is not None else DEFAULT_SCOPE

    def in_scope(self, unit: Unit) -> bool:
        if not self.scope:
            return True
        return unit.logical_name.startswith(self.scope)

    def inspect(self, unit: Unit) -> None:
        """Hook for content checks run before any classifier; may raise."""

    def analyze(self, unit: Unit, sink: FactSink) -> None:
        if not self.in_scope(unit):
            return
        self.inspect(unit)
        for classifier in self.classifiers:
            if classifier.matches(unit):
                sink.add(classifier.build(unit))


__all__ = ["Analyzer", "ClassifierAnalyzer", "FactSink"]
