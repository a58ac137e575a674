"""Analyzer plugin implementations and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, List, Sequence, Set

from ..config import AnalysisConfig
from .base import Analyzer, ClassifierAnalyzer, FactSink
from .classifiers import Classifier
from .configuration import ConfigurationAnalyzer
from .types import TypeAnalyzer

_ENTRY_POINT_GROUP = "autodoc.analyzers"

_BUILTIN_FACTORIES: dict[str, Callable[[], Analyzer]] = {
    "configuration": ConfigurationAnalyzer,
    "types": TypeAnalyzer,
}

CONFIGURATION_ANALYZERS = frozenset({"configuration"})
TYPE_ANALYZERS = frozenset({"types"})


def discover_analyzers(
    enabled: Sequence[str] | None = None,
    scope: Sequence[str] | None = None,
) -> List[Analyzer]:
    """Return instantiated analyzers, honoring optional enabled names.

    ``scope`` overrides the namespace prefixes of classifier-based analyzers.
    """

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    analyzers: List[Analyzer] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], Analyzer]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, Analyzer):
            raise TypeError(f"Analyzer factory for '{name}' did not return an Analyzer instance")
        if scope is not None and isinstance(instance, ClassifierAnalyzer):
            instance.scope = tuple(scope)
        analyzers.append(instance)
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        name = entry.name
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - broken third-party plugin
            raise RuntimeError(f"Failed to load analyzer entry point '{name}': {exc}") from exc

        def _factory(obj: object = loaded) -> Analyzer:
            return _coerce_analyzer(obj)

        _add(name, _factory)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown analyzers requested: {missing}")

    return analyzers


def select_analyzers(analyzers: Sequence[Analyzer], config: AnalysisConfig) -> List[Analyzer]:
    """Drop built-in analyzer families switched off in ``config``; plugins always run."""
    selected: List[Analyzer] = []
    for analyzer in analyzers:
        if analyzer.name in CONFIGURATION_ANALYZERS and not config.analyze_configurations:
            continue
        if analyzer.name in TYPE_ANALYZERS and not config.analyze_types:
            continue
        selected.append(analyzer)
    return selected


def _coerce_analyzer(obj: object) -> Analyzer:
    if isinstance(obj, Analyzer):
        return obj
    if isinstance(obj, type) and issubclass(obj, Analyzer):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, Analyzer):
            return instance
    raise TypeError("Analyzer entry point must be an Analyzer subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "Analyzer",
    "CONFIGURATION_ANALYZERS",
    "ClassifierAnalyzer",
    "Classifier",
    "ConfigurationAnalyzer",
    "FactSink",
    "TYPE_ANALYZERS",
    "TypeAnalyzer",
    "discover_analyzers",
    "select_analyzers",
]
