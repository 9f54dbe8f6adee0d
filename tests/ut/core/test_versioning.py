"""版本号模型与比较测试"""

import pytest

from inboxpkgs.core.exceptions import ValidationError
from inboxpkgs.core.versioning import (
    NuGetVersion,
    NumericVersion,
    VersionPair,
    package_wins,
    parse_version_range_min,
)


class TestNuGetVersion:
    def test_parse_full(self) -> None:
        v = NuGetVersion.parse("4.5.1.2-preview.3+sha.abc")
        assert (v.major, v.minor, v.patch, v.revision) == (4, 5, 1, 2)
        assert v.release == "preview.3"
        assert v.is_prerelease
        assert str(v) == "4.5.1.2-preview.3"

    def test_parse_short_forms(self) -> None:
        assert str(NuGetVersion.parse("2")) == "2.0.0"
        assert str(NuGetVersion.parse("2.1")) == "2.1.0"

    @pytest.mark.parametrize("text", ["", "abc", "1.2.3.4.5", "1..2"])
    def test_parse_invalid(self, text: str) -> None:
        with pytest.raises(ValidationError):
            NuGetVersion.parse(text)

    def test_prerelease_sorts_before_release(self) -> None:
        assert NuGetVersion.parse("3.0.0-rc.1") < NuGetVersion.parse("3.0.0")
        assert NuGetVersion.parse("3.0.0-preview.2") < NuGetVersion.parse("3.0.0-preview.10")
        assert NuGetVersion.parse("2.9.9") < NuGetVersion.parse("3.0.0-alpha")

    def test_metadata_ignored_in_equality(self) -> None:
        a = NuGetVersion.parse("1.0.0+build1")
        b = NuGetVersion.parse("1.0.0+build2")
        assert a == b
        assert hash(a) == hash(b)

    def test_as_three_part(self) -> None:
        v = NuGetVersion.parse("4.5.1.7-rc.1").as_three_part()
        assert str(v) == "4.5.1"
        assert not v.is_prerelease


class TestVersionRange:
    @pytest.mark.parametrize(("text", "expected"), [
        ("1.0", "1.0.0"),
        ("[4.3.0, )", "4.3.0"),
        ("[1.0, 2.0)", "1.0.0"),
        ("(, 2.0]", None),
        ("", None),
    ])
    def test_min_version(self, text: str, expected: str | None) -> None:
        result = parse_version_range_min(text)
        assert (str(result) if result else None) == expected


class TestNumericVersion:
    def test_empty(self) -> None:
        assert not NumericVersion.parse("")
        assert NumericVersion.parse("") < NumericVersion.parse("0.0.0.1")

    def test_invalid(self) -> None:
        with pytest.raises(ValidationError):
            NumericVersion.parse("4.x")


class TestPackageWins:
    REF = VersionPair.parse("4.0.1.0", "4.6.100.0")

    def test_higher_assembly_wins(self) -> None:
        assert package_wins([VersionPair.parse("4.0.2.0", "1.0.0.0")], self.REF)

    def test_lower_assembly_loses_immediately(self) -> None:
        pairs = [VersionPair.parse("4.0.0.0", "9.0.0.0"), VersionPair.parse("5.0.0.0")]
        assert not package_wins(pairs, self.REF)

    def test_same_assembly_higher_file_wins(self) -> None:
        assert package_wins([VersionPair.parse("4.0.1.0", "4.6.200.0")], self.REF)

    def test_same_assembly_equal_file_loses(self) -> None:
        assert not package_wins([VersionPair.parse("4.0.1.0", "4.6.100.0")], self.REF)

    def test_tie_moves_to_next_asset(self) -> None:
        pairs = [VersionPair.parse("4.0.1.0", "4.6.0.0"), VersionPair.parse("4.0.3.0")]
        assert package_wins(pairs, self.REF)

    def test_no_assets(self) -> None:
        assert not package_wins([], self.REF)
