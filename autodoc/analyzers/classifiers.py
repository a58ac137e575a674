"""Name and header heuristics used by the built-in analyzers.

Each :class:`Classifier` pairs a side-effect-free predicate with a constructor
for one fact. The heuristics stand in for real bytecode parsing and can be
swapped out one at a time.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Sequence

from ..errors import MalformedUnitError
from ..models import (
    ChoiceGenerator,
    ConfigAnnotation,
    ConfigOption,
    Fact,
    Listener,
    LoggerConfig,
    ModelClass,
    NativePeer,
    TypeInfo,
    Unit,
    simple_name,
)

CLASS_MAGIC = b"\xca\xfe\xba\xbe"
HEADER_SIZE = 8

DEFAULT_OPTION_TYPE = "String"
DEFAULT_ANNOTATION_VALUE = "default"
DEFAULT_ANNOTATION_COMMENT = "JPF configuration option"
ANNOTATION_TYPE = "JPFOption"
CHOICE_METHOD = "generate"
BASE_SUPER_NAME = "java.lang.Object"
STD_PACKAGE = "java.lang."
DEFAULT_INTERFACES = ("java.io.Serializable",)
OBJECT_METHODS = ("toString", "equals", "hashCode")
PEER_METHODS = ("nativeMethod", "getPeer")


@dataclass(frozen=True)
class Classifier:
    """A named predicate plus the fact it produces when it matches."""

    name: str
    predicate: Callable[[Unit], bool]
    build: Callable[[Unit], Fact]

    def matches(self, unit: Unit) -> bool:
        return bool(self.predicate(unit))


def name_contains(*needles: str) -> Callable[[Unit], bool]:
    """Predicate matching units whose logical name contains any needle."""

    def _predicate(unit: Unit) -> bool:
        return any(needle in unit.logical_name for needle in needles)

    return _predicate


def _strip(qualified: str, *tokens: str) -> str:
    pattern = "|".join(re.escape(token) for token in tokens)
    return re.sub(pattern, "", simple_name(qualified))


def option_name(qualified: str) -> str:
    """``gov.nasa.jpf.SearchConfig`` -> ``search``; ``unknown`` when nothing remains."""
    name = _strip(qualified, "Config", "Option", "JPF")
    return name.lower() if name else "unknown"


def choice_generator_name(qualified: str) -> str:
    name = _strip(qualified, "ChoiceGenerator", "Choice")
    return name or "unknown"


def logger_name(qualified: str) -> str:
    name = _strip(qualified, "Logger", "Log")
    return name or "unknown"


def standard_class_name(qualified: str) -> str:
    """``gov.nasa.jpf.vm.StringModel`` -> ``java.lang.String``."""
    return STD_PACKAGE + _strip(qualified, "Model", "Peer")


def peer_model_name(qualified: str) -> str:
    """``gov.nasa.jpf.vm.StringNativePeer`` -> ``StringModel``."""
    return _strip(qualified, "NativePeer", "Peer") + "Model"


# Ordered: the first matching token decides.
_TYPE_CLASSIFICATIONS: Sequence[tuple[str, str]] = (
    ("Listener", "Listener"),
    ("InstructionFactory", "InstructionFactory"),
    ("NativePeer", "NativePeer"),
    ("Model", "ModelClass"),
    ("ChoiceGenerator", "ChoiceGenerator"),
    ("Config", "Configuration"),
)

_SUPER_NAMES: Sequence[tuple[str, str]] = (
    ("Listener", "gov.nasa.jpf.Listener"),
    ("InstructionFactory", "gov.nasa.jpf.InstructionFactory"),
    ("NativePeer", "gov.nasa.jpf.NativePeer"),
    ("ChoiceGenerator", "gov.nasa.jpf.ChoiceGenerator"),
)

_LISTENER_TYPES: Sequence[tuple[str, str]] = (
    ("Search", "SearchListener"),
    ("Property", "PropertyListener"),
    ("Error", "ErrorListener"),
    ("State", "StateListener"),
)


def _first_match(name: str, table: Sequence[tuple[str, str]]) -> str | None:
    for token, result in table:
        if token in name:
            return result
    return None


def type_classification(qualified: str) -> str | None:
    return _first_match(qualified, _TYPE_CLASSIFICATIONS)


def super_name(qualified: str) -> str:
    return _first_match(qualified, _SUPER_NAMES) or BASE_SUPER_NAME


def listener_type(qualified: str) -> str:
    return _first_match(qualified, _LISTENER_TYPES) or "GenericListener"


def check_header(unit: Unit) -> None:
    """Raise :class:`MalformedUnitError` when non-empty content lacks the class-file magic."""
    if unit.content and not unit.content.startswith(CLASS_MAGIC):
        raise MalformedUnitError(f"{unit.logical_name} is not a class file (bad magic number)")


def class_version(content: bytes) -> str:
    """Return ``major.minor`` from a class-file header, or an empty string."""
    if len(content) < HEADER_SIZE or not content.startswith(CLASS_MAGIC):
        return ""
    minor = int.from_bytes(content[4:6], "big")
    major = int.from_bytes(content[6:8], "big")
    return f"{major}.{minor}"


def _config_option(unit: Unit) -> ConfigOption:
    name = option_name(unit.logical_name)
    return ConfigOption(
        name=name,
        class_name=unit.logical_name,
        type=DEFAULT_OPTION_TYPE,
        source_method=f"get{name}Option",
    )


def _config_annotation(unit: Unit) -> ConfigAnnotation:
    return ConfigAnnotation(
        name=option_name(unit.logical_name),
        class_name=unit.logical_name,
        type=DEFAULT_OPTION_TYPE,
        value=DEFAULT_ANNOTATION_VALUE,
        comment=DEFAULT_ANNOTATION_COMMENT,
        annotation_type=ANNOTATION_TYPE,
    )


def _choice_generator(unit: Unit) -> ChoiceGenerator:
    return ChoiceGenerator(
        name=choice_generator_name(unit.logical_name),
        class_name=unit.logical_name,
        method_name=CHOICE_METHOD,
        type="ChoiceGenerator",
    )


def _logger(unit: Unit) -> LoggerConfig:
    return LoggerConfig(name=logger_name(unit.logical_name), class_name=unit.logical_name, type="Logger")


def _has_classification(unit: Unit) -> bool:
    return type_classification(unit.logical_name) is not None


def _type_info(unit: Unit) -> TypeInfo:
    return TypeInfo(
        name=unit.logical_name,
        super_name=super_name(unit.logical_name),
        classification=type_classification(unit.logical_name) or "",
        interfaces=DEFAULT_INTERFACES,
        class_version=class_version(unit.content),
        methods=OBJECT_METHODS,
    )


def _model_class(unit: Unit) -> ModelClass:
    return ModelClass(
        name=unit.logical_name,
        std_name=standard_class_name(unit.logical_name),
        std_methods=OBJECT_METHODS,
    )


def _native_peer(unit: Unit) -> NativePeer:
    return NativePeer(
        name=unit.logical_name,
        model_name=peer_model_name(unit.logical_name),
        model_methods=PEER_METHODS,
    )


def _listener(unit: Unit) -> Listener:
    return Listener(name=unit.logical_name, type=listener_type(unit.logical_name))


CONFIGURATION_CLASSIFIERS = (
    Classifier("config-option", name_contains("Config", "Option", "Event"), _config_option),
    Classifier("config-annotation", name_contains("Option", "Config"), _config_annotation),
    Classifier("choice-generator", name_contains("ChoiceGenerator", "Choice"), _choice_generator),
    Classifier("logger", name_contains("Logger", "Log"), _logger),
)

TYPE_CLASSIFIERS = (
    Classifier("type-info", _has_classification, _type_info),
    Classifier("model-class", name_contains("Model", "model"), _model_class),
    Classifier("native-peer", name_contains("NativePeer", "Peer"), _native_peer),
    Classifier("listener", name_contains("Listener", "listener"), _listener),
)


__all__ = [
    "CLASS_MAGIC",
    "CONFIGURATION_CLASSIFIERS",
    "Classifier",
    "TYPE_CLASSIFIERS",
    "check_header",
    "choice_generator_name",
    "class_version",
    "listener_type",
    "logger_name",
    "name_contains",
    "option_name",
    "peer_model_name",
    "standard_class_name",
    "super_name",
    "type_classification",
]
