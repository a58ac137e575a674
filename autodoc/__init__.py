"""Extract configuration and type metadata from compiled class artifacts."""

from .aggregate import ResultAggregate
from .config import AnalysisConfig, ConfigError
from .coordinator import AnalysisCoordinator
from .orchestrator import Orchestrator, RunReport
from .unit_reader import UnitReader
from .unit_set import UnitSet

__all__ = [
    "AnalysisConfig",
    "AnalysisCoordinator",
    "ConfigError",
    "Orchestrator",
    "ResultAggregate",
    "RunReport",
    "UnitReader",
    "UnitSet",
]
