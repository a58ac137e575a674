"""Core data models shared across autodoc components."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple, Union


class ProvenanceKind(str, Enum):
    """Where a unit was found."""

    FILE = "file"
    ARCHIVE_MEMBER = "archive_member"
    DIRECTORY_MEMBER = "directory_member"


class FactKind(str, Enum):
    """Kinds of facts produced by analyzers, one aggregate mapping per kind."""

    CONFIG_OPTION = "ConfigOption"
    CONFIG_ANNOTATION = "ConfigAnnotation"
    CHOICE_GENERATOR = "ChoiceGenerator"
    LOGGER_CONFIG = "LoggerConfig"
    TYPE_INFO = "TypeInfo"
    MODEL_CLASS = "ModelClass"
    NATIVE_PEER = "NativePeer"
    LISTENER = "Listener"


CONFIGURATION_KINDS = (
    FactKind.CONFIG_OPTION,
    FactKind.CONFIG_ANNOTATION,
    FactKind.CHOICE_GENERATOR,
    FactKind.LOGGER_CONFIG,
)

TYPE_KINDS = (
    FactKind.TYPE_INFO,
    FactKind.MODEL_CLASS,
    FactKind.NATIVE_PEER,
    FactKind.LISTENER,
)


class Relationship(str, Enum):
    """Relationship carried by a cross-reference."""

    IMPLEMENTATION = "IMPLEMENTATION"
    CONFIGURATION = "CONFIGURATION"
    INHERITANCE = "INHERITANCE"


@dataclass(frozen=True)
class Unit:
    """One addressable class-file blob with its logical name and provenance."""

    logical_name: str
    content: bytes = field(repr=False)
    provenance_kind: ProvenanceKind
    provenance_path: str

    @property
    def simple_name(self) -> str:
        return self.logical_name.rsplit(".", 1)[-1]

    @property
    def size(self) -> int:
        return len(self.content)


def simple_name(qualified: str) -> str:
    """Return the last dotted segment of a qualified name."""
    return qualified.rsplit(".", 1)[-1]


class _Fact:
    """Mixin giving facts a serialisable form."""

    kind: FactKind

    @property
    def natural_key(self) -> str:  # pragma: no cover - overridden
        raise NotImplementedError

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)  # type: ignore[call-overload]
        for key, value in list(data.items()):
            if isinstance(value, tuple):
                data[key] = list(value)
        data["kind"] = self.kind.value
        data["key"] = self.natural_key
        return data


class _OwnedFact(_Fact):
    """Facts identified by their name within the class that declares them."""

    name: str
    class_name: str

    @property
    def natural_key(self) -> str:
        return f"{self.class_name}#{self.name}"


class _TypeFact(_Fact):
    """Facts identified by a fully qualified class name."""

    name: str

    @property
    def natural_key(self) -> str:
        return self.name


@dataclass(frozen=True)
class OptionValue:
    """A value a configuration option may take."""

    value: str
    type: str
    is_default: bool = False


@dataclass(frozen=True)
class ConfigOption(_OwnedFact):
    name: str
    class_name: str
    type: str
    source_method: str
    values: Tuple[OptionValue, ...] = ()
    comment: str = ""

    kind = FactKind.CONFIG_OPTION


@dataclass(frozen=True)
class ConfigAnnotation(_OwnedFact):
    name: str
    class_name: str
    type: str
    value: str
    comment: str
    annotation_type: str

    kind = FactKind.CONFIG_ANNOTATION


@dataclass(frozen=True)
class ChoiceGenerator(_OwnedFact):
    name: str
    class_name: str
    method_name: str
    type: str

    kind = FactKind.CHOICE_GENERATOR


@dataclass(frozen=True)
class LoggerConfig(_OwnedFact):
    name: str
    class_name: str
    type: str

    kind = FactKind.LOGGER_CONFIG


@dataclass(frozen=True)
class TypeInfo(_TypeFact):
    """Type classification and declared supertype for one class."""

    name: str
    super_name: str
    classification: str
    interfaces: Tuple[str, ...] = ()
    class_version: str = ""
    methods: Tuple[str, ...] = ()

    kind = FactKind.TYPE_INFO


@dataclass(frozen=True)
class ModelClass(_TypeFact):
    """A model class standing in for a standard library class."""

    name: str
    std_name: str
    std_methods: Tuple[str, ...] = ()

    kind = FactKind.MODEL_CLASS


@dataclass(frozen=True)
class NativePeer(_TypeFact):
    """A native peer and the model class it backs."""

    name: str
    model_name: str
    model_methods: Tuple[str, ...] = ()

    kind = FactKind.NATIVE_PEER


@dataclass(frozen=True)
class Listener(_TypeFact):
    name: str
    type: str

    kind = FactKind.LISTENER


Fact = Union[
    ConfigOption,
    ConfigAnnotation,
    ChoiceGenerator,
    LoggerConfig,
    TypeInfo,
    ModelClass,
    NativePeer,
    Listener,
]


@dataclass(frozen=True)
class CrossReference:
    """Derived relationship between two facts, created after merge."""

    id: str
    source_kind: FactKind
    target_kind: FactKind
    source_key: str
    target_key: str
    relationship: Relationship

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "source_kind": self.source_kind.value,
            "target_kind": self.target_kind.value,
            "source_key": self.source_key,
            "target_key": self.target_key,
            "relationship": self.relationship.value,
        }


__all__ = [
    "CONFIGURATION_KINDS",
    "ChoiceGenerator",
    "ConfigAnnotation",
    "ConfigOption",
    "CrossReference",
    "Fact",
    "FactKind",
    "Listener",
    "LoggerConfig",
    "ModelClass",
    "NativePeer",
    "OptionValue",
    "ProvenanceKind",
    "Relationship",
    "TYPE_KINDS",
    "TypeInfo",
    "Unit",
    "simple_name",
]
