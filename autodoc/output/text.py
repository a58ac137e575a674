"""Plain-text console summary of an aggregate."""

from __future__ import annotations

from typing import Callable, List, Mapping, Tuple

from ..aggregate import ResultAggregate

_Line = Callable[[object], str]


def _sections(aggregate: ResultAggregate) -> List[Tuple[str, Mapping[str, object], _Line]]:
    return [
        ("Configuration Options", aggregate.config_options(), lambda f: f"{f.name} ({f.type})"),
        ("Configuration Annotations", aggregate.config_annotations(), lambda f: f"{f.name} ({f.type})"),
        ("Choice Generators", aggregate.choice_generators(), lambda f: f"{f.name} ({f.type})"),
        ("Loggers", aggregate.loggers(), lambda f: f"{f.name} ({f.type})"),
        ("Types", aggregate.types(), lambda f: f"{f.name} ({f.classification})"),
        ("Model Classes", aggregate.model_classes(), lambda f: f"{f.name} -> {f.std_name}"),
        ("Native Peers", aggregate.native_peers(), lambda f: f"{f.name} -> {f.model_name}"),
        ("Listeners", aggregate.listeners(), lambda f: f"{f.name} ({f.type})"),
    ]


def render_text(aggregate: ResultAggregate) -> str:
    lines = [
        "=== Analysis Results ===",
        f"Source: {aggregate.source_path}",
        f"Date: {aggregate.started_at.isoformat()}",
        "",
    ]

    sections = _sections(aggregate)
    for title, facts, describe in sections:
        if not facts:
            continue
        lines.append(f"{title} ({len(facts)}):")
        lines.extend(f"  - {describe(facts[key])}" for key in sorted(facts))
        lines.append("")

    references = sorted(
        aggregate.cross_references().values(),
        key=lambda ref: (ref.relationship.value, ref.source_key, ref.target_key),
    )
    if references:
        lines.append(f"Cross References ({len(references)}):")
        lines.extend(
            f"  - {ref.source_key} -> {ref.target_key} ({ref.relationship.value})" for ref in references
        )
        lines.append("")

    if aggregate.failures:
        lines.append(f"Analyzer Failures ({len(aggregate.failures)}):")
        lines.extend(f"  - {failure}" for failure in aggregate.failures)
        lines.append("")

    report = aggregate.validation_report
    if report is not None:
        lines.append(report.summary)
        lines.extend(f"  [{issue.severity.name}] {issue.message}" for issue in report.issues)
        lines.append("")

    lines.append("=== Summary ===")
    for title, facts, _ in sections:
        lines.append(f"Total {title}: {len(facts)}")
    lines.append(f"Total Cross References: {len(references)}")
    return "\n".join(lines) + "\n"


__all__ = ["render_text"]
