"""Markdown rendering with one table per fact kind."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from ..aggregate import ResultAggregate
from ..models import FactKind

_TITLES = {
    FactKind.CONFIG_OPTION: "Configuration Options",
    FactKind.CONFIG_ANNOTATION: "Configuration Annotations",
    FactKind.CHOICE_GENERATOR: "Choice Generators",
    FactKind.LOGGER_CONFIG: "Loggers",
    FactKind.TYPE_INFO: "Types",
    FactKind.MODEL_CLASS: "Model Classes",
    FactKind.NATIVE_PEER: "Native Peers",
    FactKind.LISTENER: "Listeners",
}

_COLUMNS: Dict[FactKind, Sequence[str]] = {
    FactKind.CONFIG_OPTION: ("name", "class_name", "type", "source_method"),
    FactKind.CONFIG_ANNOTATION: ("name", "class_name", "type", "value", "annotation_type"),
    FactKind.CHOICE_GENERATOR: ("name", "class_name", "method_name", "type"),
    FactKind.LOGGER_CONFIG: ("name", "class_name", "type"),
    FactKind.TYPE_INFO: ("name", "super_name", "classification", "class_version", "methods"),
    FactKind.MODEL_CLASS: ("name", "std_name", "std_methods"),
    FactKind.NATIVE_PEER: ("name", "model_name", "model_methods"),
    FactKind.LISTENER: ("name", "type"),
}


def _cell(value: Any) -> str:
    text = ", ".join(str(item) for item in value) if isinstance(value, (list, tuple)) else str(value)
    return text.replace("|", "\\|") or " "


def _table(columns: Sequence[str], rows: List[Sequence[Any]]) -> List[str]:
    lines = [
        "| " + " | ".join(columns) + " |",
        "| " + " | ".join("---" for _ in columns) + " |",
    ]
    lines.extend("| " + " | ".join(_cell(value) for value in row) + " |" for row in rows)
    return lines


def render_markdown(aggregate: ResultAggregate) -> str:
    lines = [
        f"# Analysis of `{aggregate.source_path}`",
        "",
        f"_Generated {aggregate.started_at.isoformat()}_",
        "",
    ]

    for kind in FactKind:
        facts = aggregate.facts(kind)
        if not facts:
            continue
        columns = _COLUMNS[kind]
        rows = [[getattr(facts[key], column) for column in columns] for key in sorted(facts)]
        lines.append(f"## {_TITLES[kind]} ({len(facts)})")
        lines.append("")
        lines.extend(_table(columns, rows))
        lines.append("")

    references = sorted(
        aggregate.cross_references().values(),
        key=lambda ref: (ref.relationship.value, ref.source_key, ref.target_key),
    )
    if references:
        lines.append(f"## Cross References ({len(references)})")
        lines.append("")
        lines.extend(
            _table(
                ("source", "target", "relationship"),
                [
                    [f"{ref.source_kind.value} {ref.source_key}", f"{ref.target_kind.value} {ref.target_key}", ref.relationship.value]
                    for ref in references
                ],
            )
        )
        lines.append("")

    report = aggregate.validation_report
    if report is not None:
        lines.append("## Validation")
        lines.append("")
        lines.append(report.summary)
        lines.append("")
        lines.extend(f"- **{issue.severity.name}** {issue.message}" for issue in report.issues)
        if report.issues:
            lines.append("")

    if aggregate.is_empty:
        lines.append("_No facts were extracted._")
        lines.append("")

    return "\n".join(lines)


__all__ = ["render_markdown"]
