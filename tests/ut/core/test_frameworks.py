"""目标框架解析与兼容性归约测试"""

import pytest

from inboxpkgs.core.exceptions import FrameworkParseError
from inboxpkgs.core.frameworks import (
    ANY,
    NETCOREAPP,
    NETFRAMEWORK,
    NETSTANDARD,
    Framework,
    FrameworkReducer,
    is_compatible,
)


def fw(name: str) -> Framework:
    return Framework.parse(name)


class TestFrameworkParse:
    @pytest.mark.parametrize(("name", "identifier", "version"), [
        ("netstandard2.0", NETSTANDARD, (2, 0)),
        ("netcoreapp2.1", NETCOREAPP, (2, 1)),
        ("net6.0", NETCOREAPP, (6, 0)),
        ("net472", NETFRAMEWORK, (4, 7, 2)),
        (".NETCoreApp,Version=v3.1", NETCOREAPP, (3, 1)),
        (".NETStandard1.3", NETSTANDARD, (1, 3)),
    ])
    def test_parse(self, name: str, identifier: str, version: tuple) -> None:
        f = fw(name)
        assert f.identifier == identifier
        assert f.version == version

    def test_platform(self) -> None:
        f = fw("net6.0-windows10.0")
        assert f.platform == "windows"
        assert f.short_folder_name == "net6.0-windows10.0"

    def test_round_trip_names(self) -> None:
        assert fw("netcoreapp2.1").short_folder_name == "netcoreapp2.1"
        assert fw("netcoreapp2.1").dotnet_framework_name == ".NETCoreApp,Version=v2.1"
        assert fw("netcoreapp2.1").token == "NETCoreApp21"
        assert str(fw("net8.0")) == "net8.0"

    def test_any(self) -> None:
        assert Framework.parse_lenient("").identifier == ANY

    @pytest.mark.parametrize("name,expected", [
        ("dotnet", "netstandard1.0"),
        ("dotnet5.1", "netstandard1.0"),
        ("dotnet5.4", "netstandard1.3"),
        ("dotnet5.6", "netstandard1.5"),
    ])
    def test_legacy_dotnet_folders(self, name: str, expected: str) -> None:
        assert Framework.parse_lenient(name) == fw(expected)

    def test_legacy_dotnet_out_of_range(self) -> None:
        assert Framework.parse_lenient("dotnet5.9").is_unsupported

    def test_unsupported(self) -> None:
        assert Framework.parse_lenient("portable-net45+win8").is_unsupported
        with pytest.raises(FrameworkParseError):
            fw("monoandroid")


class TestCompatibility:
    @pytest.mark.parametrize(("target", "candidate", "expected"), [
        ("netcoreapp2.1", "netcoreapp2.0", True),
        ("netcoreapp2.0", "netcoreapp2.1", False),
        ("netcoreapp2.1", "netstandard2.0", True),
        ("netcoreapp2.1", "netstandard2.1", False),
        ("netcoreapp3.0", "netstandard2.1", True),
        ("net461", "netstandard2.0", True),
        ("net45", "netstandard1.3", False),
        ("net6.0-windows", "net6.0", True),
        ("net6.0", "net6.0-windows", False),
        ("netstandard2.0", "netcoreapp2.0", False),
    ])
    def test_is_compatible(self, target: str, candidate: str, expected: bool) -> None:
        assert is_compatible(fw(target), fw(candidate)) is expected

    def test_any_candidate(self) -> None:
        assert is_compatible(fw("net8.0"), Framework(ANY))


class TestFrameworkReducer:
    def test_nearest_prefers_same_identifier(self) -> None:
        reducer = FrameworkReducer()
        candidates = [fw("netstandard2.0"), fw("netcoreapp2.0"), fw("netcoreapp1.0")]
        assert reducer.get_nearest(fw("netcoreapp2.1"), candidates) == fw("netcoreapp2.0")

    def test_nearest_exact(self) -> None:
        reducer = FrameworkReducer()
        assert reducer.get_nearest(fw("net6.0"), [fw("net5.0"), fw("net6.0")]) == fw("net6.0")

    def test_nearest_platform_specific(self) -> None:
        reducer = FrameworkReducer()
        candidates = [fw("net6.0"), fw("net6.0-windows")]
        assert reducer.get_nearest(fw("net6.0-windows"), candidates) == fw("net6.0-windows")

    def test_nearest_none(self) -> None:
        assert FrameworkReducer().get_nearest(fw("netstandard2.0"), [fw("net6.0")]) is None

    def test_ancestors(self) -> None:
        pool = [fw("netstandard2.0"), fw("netcoreapp2.0"), fw("netcoreapp2.1"), fw("netcoreapp3.0")]
        chain = FrameworkReducer().get_ancestors(fw("netcoreapp3.0"), pool)
        assert chain == [fw("netcoreapp2.1"), fw("netcoreapp2.0"), fw("netstandard2.0")]
