"""Normalize directories, class files and archives into analyzable units."""

from __future__ import annotations

import os
import re
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Sequence

from .errors import SourceNotFoundError, UnitReadError, UnsupportedFormatError
from .logging import get_logger
from .models import ProvenanceKind, Unit

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".gradle",
    ".idea",
    "__pycache__",
    ".pytest_cache",
}

CLASS_SUFFIX = ".class"
ZIP_SUFFIXES = (".jar", ".zip")

_TAR_COMPRESSION: tuple[tuple[str, str], ...] = (
    (".tar.bz2", "bzip2"),
    (".tar.gz", "gzip"),
    (".tgz", "gzip"),
    (".tar", "none"),
)

_CLASSES_PREFIX = re.compile(r".*classes/")
_BUILD_PREFIX = re.compile(r".*build/")


@dataclass(frozen=True)
class ReadWarning:
    """A member or nested container skipped while reading a directory."""

    path: str
    reason: str


@dataclass
class ReadOutcome:
    """Units read from several containers plus the containers that failed."""

    units: List[Unit] = field(default_factory=list)
    failures: Dict[str, Exception] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


def is_archive(path: Path | str) -> bool:
    """Return True for any recognized container suffix, readable or not."""
    lowered = str(path).lower()
    return lowered.endswith(ZIP_SUFFIXES) or any(lowered.endswith(suffix) for suffix, _ in _TAR_COMPRESSION)


def is_class_file(path: Path | str) -> bool:
    return str(path).lower().endswith(CLASS_SUFFIX)


def logical_name_from_entry(entry_name: str) -> str:
    """Convert an archive entry such as ``a/b/C.class`` into ``a.b.C``."""
    name = entry_name
    if name.lower().endswith(CLASS_SUFFIX):
        name = name[: -len(CLASS_SUFFIX)]
    return name.replace("/", ".").replace("\\", ".")


def strip_output_prefix(path_text: str) -> str:
    """Drop everything up to the last ``classes/`` segment, then the last ``build/``."""
    return _BUILD_PREFIX.sub("", _CLASSES_PREFIX.sub("", path_text, count=1), count=1)


def logical_name_from_path(path: Path | str) -> str:
    """Derive a logical name for a standalone class file on disk.

    A path without a ``classes/`` or ``build/`` segment falls back to the
    file stem.
    """
    text = Path(path).as_posix()
    stripped = strip_output_prefix(text)
    if stripped == text:
        return Path(path).stem
    return logical_name_from_entry(stripped)


def _compression_scheme(path: Path) -> str | None:
    lowered = path.name.lower()
    for suffix, scheme in _TAR_COMPRESSION:
        if lowered.endswith(suffix):
            return scheme
    return None


class UnitReader:
    """Reads class-file units from directories, single files and archives.

    A reader is single-threaded. Members and nested archives that fail inside a
    directory are recorded in :attr:`warnings` and skipped.
    """

    def __init__(self) -> None:
        self.logger = get_logger("unit_reader")
        self.warnings: List[ReadWarning] = []

    def read(self, path: Path | str) -> List[Unit]:
        """Return every unit reachable from ``path``."""
        source = Path(path).expanduser()
        if not source.exists():
            raise SourceNotFoundError(f"Source path not found: {path}", path=path)

        if source.is_dir():
            return self._read_directory(source)
        if is_archive(source):
            return self._read_archive(source)
        if is_class_file(source):
            return [self._read_class_file(source, ProvenanceKind.FILE)]
        raise UnsupportedFormatError(
            f"Unsupported file type (expected .class, .jar, .zip or a directory): {source}",
            path=source,
        )

    def read_many(self, paths: Sequence[Path | str]) -> ReadOutcome:
        """Read several containers, collecting per-container failures."""
        outcome = ReadOutcome()
        for path in paths:
            try:
                outcome.units.extend(self.read(path))
            except (UnitReadError, UnsupportedFormatError) as exc:
                self.logger.warning("Failed to read %s: %s", path, exc)
                outcome.failures[str(path)] = exc
        return outcome

    def _read_directory(self, root: Path) -> List[Unit]:
        units: List[Unit] = []
        archives: List[Path] = []
        for file_path in _iter_files(root, onerror=self._walk_error):
            if is_class_file(file_path):
                try:
                    units.append(self._read_member(root, file_path))
                except UnitReadError as exc:
                    self._warn(file_path, str(exc))
            elif is_archive(file_path):
                archives.append(file_path)

        for archive in archives:
            try:
                units.extend(self._read_archive(archive))
            except (UnitReadError, UnsupportedFormatError) as exc:
                self._warn(archive, str(exc))

        self.logger.debug("Read %d units from directory %s", len(units), root)
        return units

    def _read_member(self, root: Path, file_path: Path) -> Unit:
        relative = file_path.relative_to(root).as_posix()
        return Unit(
            logical_name=logical_name_from_entry(strip_output_prefix(relative)),
            content=_read_bytes(file_path),
            provenance_kind=ProvenanceKind.DIRECTORY_MEMBER,
            provenance_path=str(file_path),
        )

    def _read_class_file(self, file_path: Path, kind: ProvenanceKind) -> Unit:
        return Unit(
            logical_name=logical_name_from_path(file_path),
            content=_read_bytes(file_path),
            provenance_kind=kind,
            provenance_path=str(file_path),
        )

    def _read_archive(self, archive: Path) -> List[Unit]:
        scheme = _compression_scheme(archive)
        if scheme is not None:
            raise UnsupportedFormatError(
                f"Cannot read tar archive {archive} (compression: {scheme}): "
                "missing decompression capability",
                path=archive,
            )
        if not archive.name.lower().endswith(ZIP_SUFFIXES):
            raise UnsupportedFormatError(f"Unsupported archive type: {archive}", path=archive)

        units: List[Unit] = []
        try:
            with zipfile.ZipFile(archive) as bundle:
                for info in bundle.infolist():
                    if info.is_dir() or not is_class_file(info.filename):
                        continue
                    units.append(
                        Unit(
                            logical_name=logical_name_from_entry(info.filename),
                            content=_read_entry(bundle, info, archive),
                            provenance_kind=ProvenanceKind.ARCHIVE_MEMBER,
                            provenance_path=str(archive),
                        )
                    )
        except (zipfile.BadZipFile, OSError, EOFError) as exc:
            raise UnitReadError(f"Failed to read archive {archive}: {exc}", path=archive) from exc

        self.logger.debug("Read %d units from archive %s", len(units), archive)
        return units

    def _warn(self, path: Path, reason: str) -> None:
        self.logger.warning("Skipping %s: %s", path, reason)
        self.warnings.append(ReadWarning(path=str(path), reason=reason))

    def _walk_error(self, exc: OSError) -> None:
        self._warn(Path(exc.filename) if exc.filename else Path("."), exc.strerror or str(exc))


def _read_entry(bundle: zipfile.ZipFile, info: zipfile.ZipInfo, archive: Path) -> bytes:
    try:
        return bundle.read(info)
    except NotImplementedError as exc:
        method = zipfile.compressor_names.get(info.compress_type, str(info.compress_type))
        raise UnsupportedFormatError(
            f"Cannot read {info.filename} in {archive} (compression: {method}): "
            "missing decompression capability",
            path=archive,
        ) from exc
    except RuntimeError as exc:
        # zipfile signals encrypted entries with a bare RuntimeError.
        raise UnitReadError(f"Failed to read {info.filename} in {archive}: {exc}", path=archive) from exc


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise UnitReadError(f"Failed to read {path}: {exc}", path=path) from exc


def _iter_files(root: Path, onerror: Callable[[OSError], None] | None = None) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root, onerror=onerror):
        dirnames[:] = sorted(name for name in dirnames if name not in _EXCLUDED_DIRS)
        current_dir = Path(dirpath)
        for filename in sorted(filenames):
            yield current_dir / filename


__all__ = [
    "ReadOutcome",
    "ReadWarning",
    "UnitReader",
    "is_archive",
    "is_class_file",
    "logical_name_from_entry",
    "logical_name_from_path",
    "strip_output_prefix",
]
