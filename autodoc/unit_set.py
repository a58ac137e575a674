"""Indexed collection of units keyed by logical name."""

from __future__ import annotations

import re
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Set

from .logging import get_logger
from .models import ProvenanceKind, Unit

_LOGGER = get_logger("unit_set")


class UnitSet:
    """Ordered units plus a name index; a repeated logical name replaces the earlier unit."""

    def __init__(self, units: Iterable[Unit] | None = None) -> None:
        self._units: List[Unit] = []
        self._index: Dict[str, Unit] = {}
        if units is not None:
            self.add_all(units)

    def add(self, unit: Unit) -> None:
        previous = self._index.get(unit.logical_name)
        if previous is not None:
            _LOGGER.debug(
                "Replacing unit %s from %s with copy from %s",
                unit.logical_name,
                previous.provenance_path,
                unit.provenance_path,
            )
            self._units = [item for item in self._units if item.logical_name != unit.logical_name]
        self._units.append(unit)
        self._index[unit.logical_name] = unit

    def add_all(self, units: Iterable[Unit]) -> None:
        for unit in units:
            self.add(unit)

    def get(self, name: str) -> Optional[Unit]:
        return self._index.get(name)

    def contains(self, name: str) -> bool:
        return name in self._index

    def filter_by_provenance(self, kind: ProvenanceKind) -> List[Unit]:
        return [unit for unit in self._units if unit.provenance_kind == kind]

    def filter_by_name_pattern(self, pattern: str) -> List[Unit]:
        """Return units whose logical name fully matches ``pattern``."""
        compiled = re.compile(pattern)
        return [unit for unit in self._units if compiled.fullmatch(unit.logical_name)]

    def filtered(self, predicate: Callable[[Unit], bool]) -> "UnitSet":
        return UnitSet(unit for unit in self._units if predicate(unit))

    def names(self) -> Set[str]:
        return set(self._index)

    def units(self) -> List[Unit]:
        return list(self._units)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._index

    def __iter__(self) -> Iterator[Unit]:
        return iter(list(self._units))

    def __len__(self) -> int:
        return len(self._units)

    def __repr__(self) -> str:
        return f"UnitSet(size={len(self._units)})"


__all__ = ["UnitSet"]
