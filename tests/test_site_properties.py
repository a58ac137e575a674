"""Tests for site.properties discovery."""

from __future__ import annotations

from pathlib import Path

from autodoc.site_properties import SitePropertiesReader, parse_properties, resolve_path


def test_parse_properties_skips_comments_and_blank_lines() -> None:
    text = "# comment\n! also a comment\n\njpf-core = /opt/jpf/core\nextensions: ${jpf-core}\n"

    values = parse_properties(text)

    assert values == {"jpf-core": "/opt/jpf/core", "extensions": "${jpf-core}"}


def test_resolve_path_expands_home_and_drops_core_reference() -> None:
    resolved = resolve_path("${user.home}/jpf/jpf-core${jpf-core} ")

    assert resolved == f"{Path.home()}/jpf/jpf-core"


def test_first_location_defining_core_wins(tmp_path: Path) -> None:
    empty = tmp_path / "empty.properties"
    empty.write_text("other=1\n", encoding="utf-8")
    first = tmp_path / "first.properties"
    first.write_text("jpf-core = /first/core\n", encoding="utf-8")
    second = tmp_path / "second.properties"
    second.write_text("jpf-core = /second/core\n", encoding="utf-8")

    reader = SitePropertiesReader(locations=[tmp_path / "absent.properties", empty, first, second])

    assert reader.core_path() == "/first/core"


def test_core_jar_path_prefers_snapshot_jar(tmp_path: Path) -> None:
    core = tmp_path / "jpf-core"
    snapshot = core / "build" / "libs" / "jpf-core-DEVELOPMENT-SNAPSHOT.jar"
    legacy = core / "build" / "jpf.jar"
    for jar in (snapshot, legacy):
        jar.parent.mkdir(parents=True, exist_ok=True)
        jar.write_bytes(b"PK")
    site = tmp_path / "site.properties"
    site.write_text(f"jpf-core={core}\n", encoding="utf-8")

    reader = SitePropertiesReader(locations=[site])

    assert reader.core_jar_locations() == [str(snapshot), str(legacy)]
    assert reader.core_jar_path() == str(snapshot)


def test_core_jar_path_is_none_when_no_candidate_exists(tmp_path: Path) -> None:
    site = tmp_path / "site.properties"
    site.write_text(f"jpf-core={tmp_path / 'nowhere'}\n", encoding="utf-8")

    assert SitePropertiesReader(locations=[site]).core_jar_path() is None


def test_disabled_reader_reports_nothing(tmp_path: Path) -> None:
    site = tmp_path / "site.properties"
    site.write_text("jpf-core=/opt/core\n", encoding="utf-8")

    reader = SitePropertiesReader(enabled=False, locations=[site])

    assert reader.core_path() is None
    assert reader.core_jar_locations() == []


def test_blank_core_value_is_ignored(tmp_path: Path) -> None:
    site = tmp_path / "site.properties"
    site.write_text("jpf-core=\n", encoding="utf-8")

    assert SitePropertiesReader(locations=[site]).core_path() is None
