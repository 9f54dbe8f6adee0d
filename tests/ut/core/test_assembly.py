"""程序集版本读取测试"""

import pytest

from inboxpkgs.core.exceptions import PackageFormatError
from inboxpkgs.core.nuget.assembly import read_version_pair
from inboxpkgs.core.versioning import NumericVersion, VersionPair


class TestReadVersionPair:
    def test_facade_assembly(self, facade_assembly: bytes) -> None:
        pair = read_version_pair(facade_assembly, name="System.Diagnostics.Tools.dll")
        assert pair == VersionPair.parse("8.0.0.0", "8.0.2025.41914")

    def test_file_version_unpacked(self, facade_assembly: bytes) -> None:
        pair = read_version_pair(facade_assembly)
        assert pair.assembly_version == NumericVersion((8, 0, 0, 0))
        assert pair.file_version == NumericVersion((8, 0, 2025, 41914))
        assert pair.file_version > pair.assembly_version

    def test_not_a_pe(self) -> None:
        with pytest.raises(PackageFormatError, match="System.Memory.dll"):
            read_version_pair(b"definitely not a PE image", name="System.Memory.dll")
