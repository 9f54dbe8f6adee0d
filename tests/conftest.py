"""测试公共夹具：内存 .nupkg 构造器与内存包源"""

from __future__ import annotations

import io
import json
import zipfile
from pathlib import Path
from typing import Any, Callable

import pytest

from inboxpkgs.core.exceptions import RegistryError
from inboxpkgs.core.frameworks import Framework
from inboxpkgs.core.nuget.archive import PackageArchive
from inboxpkgs.core.versioning import NuGetVersion, VersionPair

DATA_DIR = Path(__file__).resolve().parent / "data"

# .NET 8 运行时自带的 System.Diagnostics.Tools 门面程序集 (MIT)
FACADE_ASSEMBLY = DATA_DIR / "System.Diagnostics.Tools.dll"


def build_nupkg(
    files: dict[str, bytes | str] | None = None,
    *,
    package_id: str = "Test.Package",
    dependencies: dict[str, list[tuple[str, str]]] | None = None,
    runtime_json: dict[str, Any] | None = None,
) -> bytes:
    """构造内存 .nupkg

    dependencies: 目标框架 -> [(依赖 id, 版本区间)]，框架为空串时生成无分组依赖
    """
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        if dependencies is not None:
            groups = []
            for tfm, deps in dependencies.items():
                items = "".join(f'<dependency id="{d}" version="{v}" />' for d, v in deps)
                if tfm:
                    groups.append(f'<group targetFramework="{tfm}">{items}</group>')
                else:
                    groups.append(items)
            nuspec = (
                '<?xml version="1.0" encoding="utf-8"?>'
                '<package xmlns="http://schemas.microsoft.com/packaging/2013/05/nuspec.xsd">'
                f"<metadata><id>{package_id}</id><version>1.0.0</version>"
                f"<dependencies>{''.join(groups)}</dependencies></metadata></package>"
            )
            zf.writestr(f"{package_id}.nuspec", nuspec)
        if runtime_json is not None:
            zf.writestr("runtime.json", json.dumps(runtime_json))
        for path, content in (files or {}).items():
            zf.writestr(path, content)
    return buf.getvalue()


class FakePackageSource:
    """内存包源，实现 PackageSource 协议"""

    def __init__(self) -> None:
        self.versions: dict[str, list[str]] = {}
        self.archives: dict[tuple[str, str], bytes] = {}
        self.assets: dict[tuple[str, str], list[VersionPair]] = {}
        self.opened: list[tuple[str, str]] = []
        self.resolved: list[tuple[str, str]] = []

    @staticmethod
    def _key(package_id: str, version: NuGetVersion | str) -> tuple[str, str]:
        return package_id.lower(), str(NuGetVersion.parse(str(version)))

    def add_versions(self, package_id: str, *versions: str) -> None:
        self.versions.setdefault(package_id.lower(), []).extend(versions)

    def add_package(self, package_id: str, version: str, data: bytes) -> None:
        self.archives[self._key(package_id, version)] = data

    def set_assets(self, package_id: str, version: str, *pairs: tuple[str, str]) -> None:
        """pairs: (程序集版本, 文件版本)"""
        self.assets[self._key(package_id, version)] = [VersionPair.parse(a, f) for a, f in pairs]

    # ---- PackageSource ----

    def get_versions(self, package_id: str) -> list[NuGetVersion]:
        parsed = {NuGetVersion.parse(v) for v in self.versions.get(package_id.lower(), [])}
        return sorted(parsed, reverse=True)

    def get_stable_versions(self, package_id: str) -> list[NuGetVersion]:
        return [v for v in self.get_versions(package_id) if not v.is_prerelease]

    def open_package(self, package_id: str, version: NuGetVersion) -> PackageArchive:
        key = self._key(package_id, version)
        self.opened.append(key)
        if key not in self.archives:
            raise RegistryError(f"请求失败: {package_id}@{version} - HTTP 404")
        return PackageArchive(self.archives[key], source=f"{package_id}@{version}")

    def resolve_asset_versions(
        self, package_id: str, version: NuGetVersion, framework: Framework,
    ) -> list[VersionPair]:
        key = self._key(package_id, version)
        self.resolved.append(key)
        return list(self.assets.get(key, []))


@pytest.fixture()
def nupkg() -> Callable[..., bytes]:
    return build_nupkg


@pytest.fixture()
def facade_assembly() -> bytes:
    return FACADE_ASSEMBLY.read_bytes()


@pytest.fixture()
def source() -> FakePackageSource:
    return FakePackageSource()


@pytest.fixture(autouse=True)
def _reset_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """每个用例使用默认配置，避免全局单例互相影响"""
    import inboxpkgs.core.config as cfgmod
    from inboxpkgs.core.registry import default_registry
    monkeypatch.setattr(cfgmod, "_current", None)
    default_registry.cache_clear()
