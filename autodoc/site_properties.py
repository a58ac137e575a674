"""Locate the jpf-core distribution through ``site.properties`` files."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .logging import get_logger

CORE_KEY = "jpf-core"
JAR_CANDIDATES = (
    Path("build") / "libs" / "jpf-core-DEVELOPMENT-SNAPSHOT.jar",
    Path("build") / "jpf.jar",
)

# key=value or key: value; lines starting with # or ! are comments.
_KV_RE = re.compile(r"^\s*([^#!\s][^=:\s]*)\s*[=:]\s*(.*)$")

_LOGGER = get_logger("site_properties")


def default_locations() -> List[Path]:
    return [Path("..") / "site.properties", Path.home() / ".jpf" / "site.properties"]


def parse_properties(text: str) -> Dict[str, str]:
    """Parse simple Java properties text into a dict; later keys win."""
    values: Dict[str, str] = {}
    for line in text.splitlines():
        match = _KV_RE.match(line)
        if match:
            values[match.group(1).strip()] = match.group(2).strip()
    return values


def resolve_path(value: str) -> str:
    """Expand ``${user.home}`` and drop self-referencing ``${jpf-core}``."""
    resolved = value.replace("${user.home}", str(Path.home()))
    resolved = resolved.replace("${jpf-core}", "")
    return resolved.strip()


class SitePropertiesReader:
    """Reads the jpf-core location from the first site file that defines it.

    A disabled reader never touches the filesystem and reports nothing.
    """

    def __init__(self, enabled: bool = True, locations: Optional[Sequence[Path | str]] = None) -> None:
        self.enabled = enabled
        self.locations = [Path(item) for item in locations] if locations is not None else default_locations()

    def core_path(self) -> Optional[str]:
        if not self.enabled:
            return None
        for location in self.locations:
            value = self._read_core_path(location)
            if value:
                return value
        return None

    def core_jar_locations(self) -> List[str]:
        core = self.core_path()
        if core is None:
            return []
        return [str(Path(core) / candidate) for candidate in JAR_CANDIDATES]

    def core_jar_path(self) -> Optional[str]:
        for candidate in self.core_jar_locations():
            if Path(candidate).exists():
                return candidate
        return None

    def _read_core_path(self, location: Path) -> Optional[str]:
        path = location.expanduser()
        if not path.is_file():
            return None
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            _LOGGER.warning("Could not read site properties from %s: %s", path, exc)
            return None
        raw = parse_properties(text).get(CORE_KEY)
        if raw is None or not raw.strip():
            return None
        return resolve_path(raw)


__all__ = [
    "CORE_KEY",
    "SitePropertiesReader",
    "default_locations",
    "parse_properties",
    "resolve_path",
]
