"""Unit tests for the consistency validator."""

from __future__ import annotations

from autodoc.aggregate import ResultAggregate
from autodoc.models import (
    CrossReference,
    FactKind,
    ModelClass,
    NativePeer,
    Relationship,
    TypeInfo,
)
from autodoc.validators import ConsistencyValidator, Severity, ValidationReport, run_validators


def _aggregate_with_types() -> ResultAggregate:
    aggregate = ResultAggregate(source_path="/tmp/core.jar")
    aggregate.add_fact(TypeInfo(name="gov.nasa.jpf.Listener", super_name="java.lang.Object", classification="Listener"))
    aggregate.add_fact(
        TypeInfo(name="gov.nasa.jpf.SearchListener", super_name="gov.nasa.jpf.Listener", classification="Listener")
    )
    return aggregate


def test_consistent_aggregate_has_no_issues() -> None:
    aggregate = _aggregate_with_types()
    aggregate.add_fact(ModelClass(name="gov.nasa.jpf.vm.StringModel", std_name="java.lang.String"))
    aggregate.add_fact(NativePeer(name="gov.nasa.jpf.vm.StringNativePeer", model_name="StringModel"))
    aggregate.add_cross_reference(
        CrossReference(
            id="r1",
            source_kind=FactKind.TYPE_INFO,
            target_kind=FactKind.TYPE_INFO,
            source_key="gov.nasa.jpf.SearchListener",
            target_key="gov.nasa.jpf.Listener",
            relationship=Relationship.INHERITANCE,
        )
    )

    issues = ConsistencyValidator().validate(aggregate)

    assert issues == []


def test_empty_aggregate_is_a_warning() -> None:
    issues = ConsistencyValidator().validate(ResultAggregate(source_path="/tmp/empty"))

    assert [issue.severity for issue in issues] == [Severity.WARNING]
    assert issues[0].details["source_path"] == "/tmp/empty"


def test_dangling_cross_reference_is_an_error() -> None:
    aggregate = _aggregate_with_types()
    aggregate.add_cross_reference(
        CrossReference(
            id="dangling",
            source_kind=FactKind.LISTENER,
            target_kind=FactKind.CONFIG_OPTION,
            source_key="gov.nasa.jpf.SearchListener",
            target_key="gov.nasa.jpf.SearchConfig#search",
            relationship=Relationship.CONFIGURATION,
        )
    )

    report = run_validators(aggregate)

    errors = report.issues_by_severity(Severity.ERROR)
    assert {issue.details["role"] for issue in errors} == {"source", "target"}
    assert not report.is_valid
    assert report.summary.startswith("Validation failed")


def test_orphan_peer_and_external_supertype_are_reported() -> None:
    aggregate = ResultAggregate()
    aggregate.add_fact(NativePeer(name="gov.nasa.jpf.vm.ThreadNativePeer", model_name="ThreadModel"))
    aggregate.add_fact(
        TypeInfo(name="gov.nasa.jpf.vm.ThreadNativePeer", super_name="gov.nasa.jpf.NativePeer", classification="NativePeer")
    )

    report = run_validators(aggregate)

    assert [issue.severity for issue in report.issues] == [Severity.WARNING, Severity.INFO]
    assert report.is_valid
    assert report.summary == "Validation passed: 1 info, 1 warning"


def test_custom_validators_replace_the_default() -> None:
    class AlwaysCritical:
        name = "critical"

        def validate(self, aggregate):
            from autodoc.validators import ValidationIssue

            return [ValidationIssue(message="stop", severity=Severity.CRITICAL, source=self.name)]

    report = run_validators(ResultAggregate(), [AlwaysCritical()])

    assert len(report) == 1
    assert report.to_dict()["issues"][0]["severity"] == "CRITICAL"
    assert not report.is_valid


def test_empty_report_summary() -> None:
    report = ValidationReport.from_issues([])
    assert report.is_valid
    assert report.summary == "Validation passed with no issues"
