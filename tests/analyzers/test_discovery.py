"""Tests for analyzer discovery utilities."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from autodoc.analyzers import (
    Analyzer,
    ConfigurationAnalyzer,
    TypeAnalyzer,
    discover_analyzers,
    select_analyzers,
)
from autodoc.config import AnalysisConfig


class DummyAnalyzer(Analyzer):
    """Test analyzer used for plugin discovery validation."""

    name = "dummy"

    def analyze(self, unit, sink):  # pragma: no cover - unused
        return None


def test_discover_analyzers_returns_builtin_analyzers() -> None:
    analyzers = discover_analyzers()
    classes = {type(analyzer) for analyzer in analyzers}
    assert ConfigurationAnalyzer in classes
    assert TypeAnalyzer in classes


def test_discover_analyzers_respects_enabled_filter() -> None:
    analyzers = discover_analyzers(["types"])
    assert len(analyzers) == 1
    assert isinstance(analyzers[0], TypeAnalyzer)


def test_discover_analyzers_applies_scope_override() -> None:
    analyzers = discover_analyzers(["configuration"], scope=["org.example"])
    assert analyzers[0].scope == ("org.example",)


def test_discover_analyzers_loads_entry_points(monkeypatch) -> None:
    dummy_entry = SimpleNamespace(
        name="dummy",
        load=lambda: DummyAnalyzer,
    )

    class DummyEntryPoints(list):
        def select(self, **kwargs):
            if kwargs.get("group") == "autodoc.analyzers":
                return self
            return []

    monkeypatch.setattr(
        "autodoc.analyzers.metadata.entry_points",
        lambda: DummyEntryPoints([dummy_entry]),
    )

    analyzers = discover_analyzers()
    assert any(isinstance(analyzer, DummyAnalyzer) for analyzer in analyzers)


def test_discover_analyzers_unknown_name_raises() -> None:
    with pytest.raises(ValueError) as excinfo:
        discover_analyzers(["configuration", "bytecode"])
    assert "bytecode" in str(excinfo.value)


def test_select_analyzers_follows_config_families() -> None:
    analyzers = [ConfigurationAnalyzer(), TypeAnalyzer(), DummyAnalyzer()]

    config_only = select_analyzers(analyzers, AnalysisConfig.config_only())
    types_only = select_analyzers(analyzers, AnalysisConfig.types_only())

    assert [analyzer.name for analyzer in config_only] == ["configuration", "dummy"]
    assert [analyzer.name for analyzer in types_only] == ["types", "dummy"]
