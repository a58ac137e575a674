"""Tests for autodoc.resolver."""

from __future__ import annotations

import itertools
import random

from autodoc.aggregate import ResultAggregate
from autodoc.models import (
    ConfigOption,
    FactKind,
    Listener,
    ModelClass,
    NativePeer,
    Relationship,
    TypeInfo,
)
from autodoc.resolver import CrossReferenceResolver


def _facts() -> list:
    return [
        ConfigOption(name="search", class_name="gov.nasa.jpf.SearchConfig", type="String", source_method="getsearchOption"),
        TypeInfo(name="gov.nasa.jpf.SearchConfig", super_name="java.lang.Object", classification="Configuration"),
        Listener(name="gov.nasa.jpf.SearchListener", type="SearchListener"),
        ModelClass(name="gov.nasa.jpf.vm.StringModel", std_name="java.lang.String"),
        NativePeer(name="gov.nasa.jpf.vm.StringNativePeer", model_name="StringModel"),
        TypeInfo(name="gov.nasa.jpf.Listener", super_name="java.lang.Object", classification="Listener"),
        TypeInfo(name="gov.nasa.jpf.SearchListener", super_name="gov.nasa.jpf.Listener", classification="Listener"),
    ]


def _relationships(aggregate: ResultAggregate) -> set:
    return {
        (ref.source_kind, ref.source_key, ref.target_kind, ref.target_key, ref.relationship)
        for ref in aggregate.cross_references().values()
    }


def _resolved(facts: list) -> ResultAggregate:
    aggregate = ResultAggregate()
    for fact in facts:
        aggregate.add_fact(fact)
    CrossReferenceResolver().resolve(aggregate)
    return aggregate


def test_resolver_derives_all_relationship_kinds() -> None:
    aggregate = _resolved(_facts())

    relationships = _relationships(aggregate)
    assert (
        FactKind.CONFIG_OPTION,
        "gov.nasa.jpf.SearchConfig#search",
        FactKind.TYPE_INFO,
        "gov.nasa.jpf.SearchConfig",
        Relationship.IMPLEMENTATION,
    ) in relationships
    assert (
        FactKind.LISTENER,
        "gov.nasa.jpf.SearchListener",
        FactKind.CONFIG_OPTION,
        "gov.nasa.jpf.SearchConfig#search",
        Relationship.CONFIGURATION,
    ) not in relationships  # "search" is lowercase, listener name is not
    assert (
        FactKind.MODEL_CLASS,
        "gov.nasa.jpf.vm.StringModel",
        FactKind.NATIVE_PEER,
        "gov.nasa.jpf.vm.StringNativePeer",
        Relationship.IMPLEMENTATION,
    ) in relationships
    assert (
        FactKind.TYPE_INFO,
        "gov.nasa.jpf.SearchListener",
        FactKind.TYPE_INFO,
        "gov.nasa.jpf.Listener",
        Relationship.INHERITANCE,
    ) in relationships


def test_listener_config_by_class_name() -> None:
    aggregate = _resolved(
        [
            ConfigOption(name="trace", class_name="gov.nasa.jpf.TraceListenerConfig", type="String", source_method="gettraceOption"),
            Listener(name="gov.nasa.jpf.StateListener", type="StateListener"),
        ]
    )

    relationships = [ref.relationship for ref in aggregate.cross_references().values()]
    assert relationships == [Relationship.CONFIGURATION]


def test_resolution_is_independent_of_insertion_order() -> None:
    facts = _facts()
    expected = _relationships(_resolved(facts))

    rng = random.Random(7)
    for _ in range(5):
        shuffled = list(facts)
        rng.shuffle(shuffled)
        assert _relationships(_resolved(shuffled)) == expected


def test_resolve_returns_count_and_ids_are_unique() -> None:
    aggregate = ResultAggregate()
    for fact in _facts():
        aggregate.add_fact(fact)

    added = CrossReferenceResolver().resolve(aggregate)

    references = aggregate.cross_references()
    assert added == len(references)
    assert len({ref.id for ref in references.values()}) == added


def test_failing_pass_does_not_stop_others(monkeypatch, caplog) -> None:
    counter = itertools.count()
    resolver = CrossReferenceResolver(id_factory=lambda: f"ref-{next(counter)}")

    def _boom(_aggregate):
        raise RuntimeError("broken pass")

    monkeypatch.setattr(resolver, "_config_type", _boom)
    aggregate = ResultAggregate()
    for fact in _facts():
        aggregate.add_fact(fact)

    with caplog.at_level("WARNING", logger="autodoc"):
        resolver.resolve(aggregate)

    relationships = {ref.relationship for ref in aggregate.cross_references().values()}
    assert Relationship.INHERITANCE in relationships
    assert all(ref.id.startswith("ref-") for ref in aggregate.cross_references().values())
    assert "broken pass" in caplog.text
