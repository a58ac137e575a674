"""Tests for the configuration analyzer and its classifiers."""

from __future__ import annotations

from autodoc.aggregate import FactBatch
from autodoc.analyzers import Classifier, ConfigurationAnalyzer
from autodoc.analyzers.classifiers import choice_generator_name, logger_name, option_name
from autodoc.models import ChoiceGenerator, ConfigAnnotation, ConfigOption, FactKind, LoggerConfig
from tests._fixtures.artifact_builder import make_unit


def _analyze(name: str, analyzer: ConfigurationAnalyzer | None = None) -> FactBatch:
    batch = FactBatch(name)
    (analyzer or ConfigurationAnalyzer()).analyze(make_unit(name), batch)
    return batch


def test_option_name_strips_markers_and_lowercases() -> None:
    assert option_name("gov.nasa.jpf.SearchConfig") == "search"
    assert option_name("gov.nasa.jpf.JPFOption") == "unknown"
    assert choice_generator_name("gov.nasa.jpf.vm.IntChoiceGenerator") == "Int"
    assert logger_name("gov.nasa.jpf.util.JPFLogger") == "JPF"


def test_config_class_yields_option_and_annotation() -> None:
    batch = _analyze("gov.nasa.jpf.SearchConfig")

    assert {fact.kind for fact in batch.facts} == {FactKind.CONFIG_OPTION, FactKind.CONFIG_ANNOTATION}
    option = next(fact for fact in batch.facts if isinstance(fact, ConfigOption))
    assert option.name == "search"
    assert option.class_name == "gov.nasa.jpf.SearchConfig"
    assert option.type == "String"
    assert option.source_method == "getsearchOption"
    assert option.natural_key == "gov.nasa.jpf.SearchConfig#search"

    annotation = next(fact for fact in batch.facts if isinstance(fact, ConfigAnnotation))
    assert annotation.value == "default"
    assert annotation.annotation_type == "JPFOption"


def test_event_class_yields_only_option() -> None:
    batch = _analyze("gov.nasa.jpf.vm.VMEvent")
    assert [fact.kind for fact in batch.facts] == [FactKind.CONFIG_OPTION]


def test_choice_generator_and_logger_classifiers() -> None:
    choice = _analyze("gov.nasa.jpf.vm.BooleanChoiceGenerator").facts
    assert [type(fact) for fact in choice] == [ChoiceGenerator]
    assert choice[0].method_name == "generate"
    assert choice[0].name == "Boolean"

    logger = _analyze("gov.nasa.jpf.util.LogManager").facts
    assert [type(fact) for fact in logger] == [LoggerConfig]
    assert logger[0].name == "Manager"


def test_units_outside_scope_are_ignored() -> None:
    assert _analyze("org.example.SearchConfig").facts == []


def test_custom_scope_and_classifiers() -> None:
    marker = Classifier(
        "marker",
        lambda unit: unit.simple_name.startswith("Marker"),
        lambda unit: LoggerConfig(name="marker", class_name=unit.logical_name, type="Marker"),
    )
    analyzer = ConfigurationAnalyzer(classifiers=[marker], scope=["org.example"])

    batch = _analyze("org.example.MarkerConfig", analyzer)

    assert [fact.type for fact in batch.facts] == ["Marker"]


def test_same_unit_yields_identical_facts() -> None:
    first = _analyze("gov.nasa.jpf.listener.ChoiceTracker").facts
    second = _analyze("gov.nasa.jpf.listener.ChoiceTracker").facts
    assert first == second
