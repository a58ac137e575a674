"""Analysis configuration and `.autodoc.yml` loading."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".autodoc.yml"
MIN_THREADS = 1
MAX_THREADS = 32
DEFAULT_SCOPE = ("gov.nasa.jpf",)


class ConfigError(RuntimeError):
    """Raised when configuration values or files are invalid."""


def _default_thread_count() -> int:
    return max(MIN_THREADS, min(MAX_THREADS, os.cpu_count() or 1))


@dataclass(frozen=True)
class AnalysisConfig:
    """Immutable description of one analysis run.

    Instances are shared read-only between worker threads, so every
    collection field is a frozenset. Use :meth:`builder` to derive variants.
    """

    analyze_configurations: bool = True
    analyze_types: bool = True
    validate: bool = False
    parallel: bool = True
    thread_count: int = field(default_factory=_default_thread_count)
    include_patterns: FrozenSet[str] = frozenset()
    exclude_patterns: FrozenSet[str] = frozenset()
    verbose: bool = False
    timeout: Optional[float] = None
    site_lookup: bool = True

    def __post_init__(self) -> None:
        if not MIN_THREADS <= self.thread_count <= MAX_THREADS:
            raise ConfigError(
                f"Thread count must be between {MIN_THREADS} and {MAX_THREADS}, got {self.thread_count}"
            )
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigError(f"Timeout must be positive, got {self.timeout}")
        for pattern in sorted(self.include_patterns | self.exclude_patterns):
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ConfigError(f"Invalid name pattern '{pattern}': {exc}") from exc

    @staticmethod
    def builder() -> "AnalysisConfigBuilder":
        return AnalysisConfigBuilder()

    @classmethod
    def default(cls) -> "AnalysisConfig":
        return cls.builder().build()

    @classmethod
    def config_only(cls) -> "AnalysisConfig":
        return cls.builder().analyze_configurations(True).analyze_types(False).build()

    @classmethod
    def types_only(cls) -> "AnalysisConfig":
        return cls.builder().analyze_configurations(False).analyze_types(True).build()

    def to_builder(self) -> "AnalysisConfigBuilder":
        """Return a builder seeded with this snapshot's values."""
        builder = AnalysisConfigBuilder()
        builder._values.update(
            analyze_configurations=self.analyze_configurations,
            analyze_types=self.analyze_types,
            validate=self.validate,
            parallel=self.parallel,
            thread_count=self.thread_count,
            verbose=self.verbose,
            timeout=self.timeout,
            site_lookup=self.site_lookup,
        )
        builder._include.update(self.include_patterns)
        builder._exclude.update(self.exclude_patterns)
        return builder

    def accepts(self, logical_name: str) -> bool:
        """Return True when a unit with this logical name should be analyzed.

        Exclusion wins over inclusion; an empty include set admits everything.
        """
        if any(re.fullmatch(pattern, logical_name) for pattern in self.exclude_patterns):
            return False
        if not self.include_patterns:
            return True
        return any(re.fullmatch(pattern, logical_name) for pattern in self.include_patterns)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "analyze_configurations": self.analyze_configurations,
            "analyze_types": self.analyze_types,
            "validate": self.validate,
            "parallel": self.parallel,
            "thread_count": self.thread_count,
            "include_patterns": sorted(self.include_patterns),
            "exclude_patterns": sorted(self.exclude_patterns),
            "verbose": self.verbose,
            "timeout": self.timeout,
            "site_lookup": self.site_lookup,
        }


class AnalysisConfigBuilder:
    """Fluent builder producing immutable :class:`AnalysisConfig` snapshots."""

    def __init__(self) -> None:
        self._values: Dict[str, Any] = {}
        self._include: set[str] = set()
        self._exclude: set[str] = set()

    def analyze_configurations(self, enabled: bool) -> "AnalysisConfigBuilder":
        self._values["analyze_configurations"] = bool(enabled)
        return self

    def analyze_types(self, enabled: bool) -> "AnalysisConfigBuilder":
        self._values["analyze_types"] = bool(enabled)
        return self

    def validate(self, enabled: bool) -> "AnalysisConfigBuilder":
        self._values["validate"] = bool(enabled)
        return self

    def parallel(self, enabled: bool) -> "AnalysisConfigBuilder":
        self._values["parallel"] = bool(enabled)
        return self

    def thread_count(self, count: int) -> "AnalysisConfigBuilder":
        self._values["thread_count"] = int(count)
        return self

    def include_pattern(self, pattern: str) -> "AnalysisConfigBuilder":
        self._include.add(pattern)
        return self

    def exclude_pattern(self, pattern: str) -> "AnalysisConfigBuilder":
        self._exclude.add(pattern)
        return self

    def verbose(self, enabled: bool) -> "AnalysisConfigBuilder":
        self._values["verbose"] = bool(enabled)
        return self

    def timeout(self, seconds: Optional[float]) -> "AnalysisConfigBuilder":
        self._values["timeout"] = float(seconds) if seconds is not None else None
        return self

    def site_lookup(self, enabled: bool) -> "AnalysisConfigBuilder":
        self._values["site_lookup"] = bool(enabled)
        return self

    def build(self) -> AnalysisConfig:
        return AnalysisConfig(
            include_patterns=frozenset(self._include),
            exclude_patterns=frozenset(self._exclude),
            **self._values,
        )


@dataclass
class AnalyzerSettings:
    """Analyzer enablement and namespace scope."""

    enabled: List[str] = field(default_factory=list)
    scope: List[str] = field(default_factory=lambda: list(DEFAULT_SCOPE))


@dataclass
class OutputSettings:
    """Renderer defaults used by the CLI."""

    format: Optional[str] = None
    directory: Optional[Path] = None


@dataclass
class FileConfig:
    """Settings read from `.autodoc.yml`."""

    root: Path
    analysis: Dict[str, Any] = field(default_factory=dict)
    analyzers: AnalyzerSettings = field(default_factory=AnalyzerSettings)
    output: OutputSettings = field(default_factory=OutputSettings)

    def apply(self, builder: AnalysisConfigBuilder) -> AnalysisConfigBuilder:
        """Layer the file's analysis settings onto ``builder``."""
        data = self.analysis
        if _as_bool(data.get("config_only")):
            builder.analyze_configurations(True).analyze_types(False)
        if _as_bool(data.get("types_only")):
            builder.analyze_configurations(False).analyze_types(True)

        validate = _as_bool(data.get("validate"))
        if validate is not None:
            builder.validate(validate)

        if "parallel" in data:
            parallel = data.get("parallel")
            if parallel is True:
                builder.parallel(True)
            elif parallel is False or parallel == 0:
                builder.parallel(False)
            else:
                threads = _as_int(parallel)
                if threads is None:
                    raise ConfigError(f"Invalid parallel setting: {parallel!r}")
                builder.parallel(True).thread_count(threads)

        timeout = _as_float(data.get("timeout"))
        if timeout is not None:
            builder.timeout(timeout)

        for pattern in _as_str_list(data.get("include_patterns")):
            builder.include_pattern(pattern)
        for pattern in _as_str_list(data.get("exclude_patterns")):
            builder.exclude_pattern(pattern)

        verbose = _as_bool(data.get("verbose"))
        if verbose is not None:
            builder.verbose(verbose)
        site_lookup = _as_bool(data.get("site_lookup"))
        if site_lookup is not None:
            builder.site_lookup(site_lookup)
        return builder


def load_config(config_path: Path) -> FileConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return FileConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    analysis = _as_dict(data.get("analysis"))
    if _as_bool(analysis.get("config_only")) and _as_bool(analysis.get("types_only")):
        raise ConfigError("config_only and types_only cannot both be enabled")

    analyzer_data = _as_dict(data.get("analyzers"))
    analyzers = AnalyzerSettings()
    if analyzer_data:
        analyzers.enabled = _as_str_list(analyzer_data.get("enabled"))
        if "scope" in analyzer_data:
            analyzers.scope = _as_str_list(analyzer_data.get("scope"))

    output_data = _as_dict(data.get("output"))
    directory = _as_str(output_data.get("directory"))
    output = OutputSettings(
        format=_as_str(output_data.get("format")),
        directory=root / directory if directory else None,
    )

    return FileConfig(root=root, analysis=analysis, analyzers=analyzers, output=output)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


