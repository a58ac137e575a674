"""Analyzer emitting configuration-related facts."""

from __future__ import annotations

from .base import ClassifierAnalyzer
from .classifiers import CONFIGURATION_CLASSIFIERS


class ConfigurationAnalyzer(ClassifierAnalyzer):
    """Detects configuration options, option annotations, choice generators and loggers."""

    name = "configuration"
    classifiers = CONFIGURATION_CLASSIFIERS


__all__ = ["ConfigurationAnalyzer"]
