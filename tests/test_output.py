"""Tests for the text, JSON and Markdown renderers."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from autodoc.aggregate import ResultAggregate
from autodoc.errors import AnalyzerFailure, OutputGenerationError
from autodoc.models import (
    ConfigOption,
    CrossReference,
    FactKind,
    Listener,
    Relationship,
    TypeInfo,
)
import autodoc.output as output_module
from autodoc.output import OutputFormat, render, render_json, render_markdown, render_text
from autodoc.validators import run_validators


def _aggregate() -> ResultAggregate:
    aggregate = ResultAggregate(
        source_path="/tmp/core.jar",
        started_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    )
    aggregate.add_fact(
        ConfigOption(
            name="search",
            class_name="gov.nasa.jpf.SearchConfig",
            type="String",
            source_method="getsearchOption",
        )
    )
    aggregate.add_fact(
        TypeInfo(
            name="gov.nasa.jpf.SearchConfig",
            super_name="java.lang.Object",
            classification="Configuration",
            interfaces=("java.io.Serializable",),
            class_version="61.0",
            methods=("toString", "equals", "hashCode"),
        )
    )
    aggregate.add_fact(Listener(name="gov.nasa.jpf.SearchListener", type="SearchListener"))
    aggregate.add_cross_reference(
        CrossReference(
            id="ref-1",
            source_kind=FactKind.CONFIG_OPTION,
            target_kind=FactKind.TYPE_INFO,
            source_key="gov.nasa.jpf.SearchConfig#search",
            target_key="gov.nasa.jpf.SearchConfig",
            relationship=Relationship.IMPLEMENTATION,
        )
    )
    return aggregate


def test_text_output_lists_sections_and_summary() -> None:
    text = render_text(_aggregate())

    assert text.startswith("=== Analysis Results ===\nSource: /tmp/core.jar\n")
    assert "Configuration Options (1):\n  - search (String)" in text
    assert "Types (1):\n  - gov.nasa.jpf.SearchConfig (Configuration)" in text
    assert "gov.nasa.jpf.SearchConfig#search -> gov.nasa.jpf.SearchConfig (IMPLEMENTATION)" in text
    assert "Loggers (" not in text.split("=== Summary ===")[0]
    assert "Total Loggers: 0" in text
    assert "Total Cross References: 1" in text


def test_text_output_includes_failures_and_validation() -> None:
    aggregate = _aggregate()
    aggregate.failures = (AnalyzerFailure("types", "gov.nasa.jpf.Broken", ValueError("bad magic")),)
    aggregate.validation_report = run_validators(aggregate)

    text = render_text(aggregate)

    assert "Analyzer Failures (1):" in text
    assert "gov.nasa.jpf.Broken" in text
    assert "Validation passed" in text


def test_json_output_is_sorted_and_parseable() -> None:
    payload = json.loads(render_json(_aggregate()))

    assert payload["source_path"] == "/tmp/core.jar"
    assert payload["facts"]["TypeInfo"][0]["interfaces"] == ["java.io.Serializable"]
    assert payload["facts"]["TypeInfo"][0]["methods"] == ["toString", "equals", "hashCode"]
    assert payload["facts"]["ConfigOption"][0]["key"] == "gov.nasa.jpf.SearchConfig#search"
    assert payload["cross_references"][0]["relationship"] == "IMPLEMENTATION"
    assert payload["summary"]["counts"]["Listener"] == 1
    assert "failures" not in payload


def test_markdown_output_has_one_table_per_kind() -> None:
    markdown = render_markdown(_aggregate())

    assert markdown.startswith("# Analysis of `/tmp/core.jar`")
    assert "## Configuration Options (1)" in markdown
    assert "| name | super_name | classification | class_version | methods |" in markdown
    assert "| toString, equals, hashCode |" in markdown
    assert "## Cross References (1)" in markdown
    assert "## Loggers" not in markdown


def test_markdown_marks_empty_aggregate() -> None:
    assert "_No facts were extracted._" in render_markdown(ResultAggregate(source_path="/tmp/empty"))


@pytest.mark.parametrize(
    ("value", "expected"),
    [("text", OutputFormat.TEXT), ("JSON", OutputFormat.JSON), ("md", OutputFormat.MARKDOWN)],
)
def test_output_format_parse(value: str, expected: OutputFormat) -> None:
    assert OutputFormat.parse(value) is expected


def test_unknown_format_raises() -> None:
    with pytest.raises(OutputGenerationError, match="Unsupported output format 'xml'"):
        render(_aggregate(), "xml")


def test_renderer_errors_are_wrapped(monkeypatch) -> None:
    def _explode(aggregate):
        raise ValueError("broken renderer")

    monkeypatch.setitem(output_module._RENDERERS, OutputFormat.JSON, _explode)

    with pytest.raises(OutputGenerationError, match="Failed to generate json output"):
        render(_aggregate(), OutputFormat.JSON)


def test_extensions() -> None:
    assert [fmt.extension for fmt in OutputFormat] == [".txt", ".json", ".md"]
