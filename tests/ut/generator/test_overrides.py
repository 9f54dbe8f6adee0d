"""版本覆盖测试"""

from __future__ import annotations

import logging

import pytest

from inboxpkgs.core.generator.overrides import apply_overrides, parse_overrides, read_overrides
from inboxpkgs.core.models import OverrideEntry, PackageTable
from inboxpkgs.core.nuget.archive import PackageArchive
from inboxpkgs.core.versioning import NuGetVersion


def v(text: str) -> NuGetVersion:
    return NuGetVersion.parse(text)


class TestParseOverrides:
    def test_parse(self) -> None:
        entries = parse_overrides(
            "System.Buffers|4.5.1\n"
            "\n"
            "Microsoft.Win32.Registry|5.0.0-preview.1.20120.5\n"
            "no separator\n"
            "A|B|C\n"
            "Broken|x.y\n"
        )
        assert entries == [
            OverrideEntry("System.Buffers", v("4.5.1")),
            OverrideEntry("Microsoft.Win32.Registry", v("5.0.0")),
        ]

    def test_read_from_archive(self, nupkg) -> None:
        archive = PackageArchive(nupkg({"data/PackageOverrides.txt": "A|1.0.0\r\n"}))
        assert read_overrides(archive) == [OverrideEntry("A", v("1.0.0"))]

    def test_absent_file(self, nupkg) -> None:
        assert read_overrides(PackageArchive(nupkg({"ref/x.dll": b""}))) is None


class TestApplyOverrides:
    @pytest.mark.parametrize(("computed", "override", "expected"), [
        ("1.2.0", "1.1.0", "1.2.0"),
        ("1.2.0", "1.3.0", "1.3.0"),
        ("1.2.0", "1.2.0", "1.2.0"),
        (None, "1.0.0", "1.0.0"),
    ])
    def test_precedence(self, computed: str | None, override: str, expected: str) -> None:
        table = PackageTable({"P": v(computed)} if computed else {})
        apply_overrides(table, [OverrideEntry("P", v(override))])
        assert str(table.get("P")) == expected

    def test_discrepancies_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        table = PackageTable({"Low": v("1.0.0"), "High": v("3.0.0")})
        with caplog.at_level(logging.WARNING, logger="inboxpkgs.core.generator.overrides"):
            apply_overrides(table, [OverrideEntry("Low", v("2.0.0")), OverrideEntry("High", v("2.0.0"))])
        assert len(caplog.records) == 2
        assert "Low" in caplog.records[0].getMessage()
