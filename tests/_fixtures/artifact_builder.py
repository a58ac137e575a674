"""Helper utilities for constructing class files and archives in tests."""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Iterable, Mapping

from autodoc.models import ProvenanceKind, Unit

CLASS_MAGIC = b"\xca\xfe\xba\xbe"


def class_bytes(major: int = 61, minor: int = 0, body: bytes = b"\x00\x10") -> bytes:
    """Return a minimal class-file header followed by ``body``."""
    return CLASS_MAGIC + minor.to_bytes(2, "big") + major.to_bytes(2, "big") + body


def make_unit(
    name: str,
    content: bytes | None = None,
    kind: ProvenanceKind = ProvenanceKind.FILE,
    path: str | None = None,
) -> Unit:
    return Unit(
        logical_name=name,
        content=class_bytes() if content is None else content,
        provenance_kind=kind,
        provenance_path=path or f"/virtual/{name.replace('.', '/')}.class",
    )


def make_units(names: Iterable[str]) -> list[Unit]:
    return [make_unit(name) for name in names]


_LOCAL_HEADER = b"PK\x03\x04"
_CENTRAL_HEADER = b"PK\x01\x02"


def patch_zip_entries(path: Path, *, compress_type: int | None = None, flag_bits: int | None = None) -> Path:
    """Rewrite the method or flag fields of every entry header in an existing zip."""
    data = bytearray(path.read_bytes())
    for signature, flag_offset, method_offset in ((_LOCAL_HEADER, 6, 8), (_CENTRAL_HEADER, 8, 10)):
        start = data.find(signature)
        while start != -1:
            if flag_bits is not None:
                data[start + flag_offset : start + flag_offset + 2] = flag_bits.to_bytes(2, "little")
            if compress_type is not None:
                data[start + method_offset : start + method_offset + 2] = compress_type.to_bytes(2, "little")
            start = data.find(signature, start + 4)
    path.write_bytes(bytes(data))
    return path


class ArtifactBuilder:
    """Writes loose class files and archives under a throwaway root."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "artifacts"
        self.root.mkdir()

    def class_file(self, relative: str, content: bytes | None = None) -> Path:
        """Write a class file at ``relative`` (``.class`` appended when missing)."""
        if not relative.endswith(".class"):
            relative = f"{relative}.class"
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(class_bytes() if content is None else content)
        return path

    def jar(
        self,
        relative: str,
        entries: Mapping[str, bytes | None],
        directories: Iterable[str] = (),
    ) -> Path:
        """Write a zip-format archive holding ``entries`` plus directory markers."""
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(path, "w") as bundle:
            for directory in directories:
                bundle.writestr(directory.rstrip("/") + "/", b"")
            for name, content in entries.items():
                bundle.writestr(name, class_bytes() if content is None else content)
        return path

    def file(self, relative: str, content: bytes = b"") -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    def path(self) -> Path:
        return self.root


__all__ = ["ArtifactBuilder", "CLASS_MAGIC", "class_bytes", "make_unit", "make_units", "patch_zip_entries"]
