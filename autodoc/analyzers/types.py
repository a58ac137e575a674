"""Analyzer emitting type and hierarchy facts."""

from __future__ import annotations

from ..models import Unit
from .base import ClassifierAnalyzer
from .classifiers import TYPE_CLASSIFIERS, check_header


class TypeAnalyzer(ClassifierAnalyzer):
    """Classifies types, model classes, native peers and listeners.

    Units whose content is present but does not carry the class-file magic
    number are rejected with :class:`~autodoc.errors.MalformedUnitError`.
    """

    name = "types"
    classifiers = TYPE_CLASSIFIERS

    def inspect(self, unit: Unit) -> None:
        check_header(unit)


__all__ = ["TypeAnalyzer"]
