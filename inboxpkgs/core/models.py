"""核心数据模型

- PackageTable: 包 id（大小写不敏感）-> 最低内置版本
- OverrideEntry: 人工维护的版本覆盖条目
- RefPack: 需要跟踪的框架引用包定义
- 框架族常量与显示名映射
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from inboxpkgs.core.frameworks import NETSTANDARD, Framework
from inboxpkgs.core.versioning import NuGetVersion

# =========================================================================
# 框架族
# =========================================================================

DEFAULT_FAMILY = "default"
WEB_HOSTING_FAMILY = "web-hosting"
DESKTOP_HOSTING_FAMILY = "desktop-hosting"

_FAMILY_FRAMEWORK_NAMES = {
    WEB_HOSTING_FAMILY: "Microsoft.AspNetCore.App",
    DESKTOP_HOSTING_FAMILY: "Microsoft.WindowsDesktop.App",
}


def framework_display_name(family: str, framework: Framework) -> str:
    """框架族在指定框架下对应的共享框架名"""
    if family == DEFAULT_FAMILY:
        if framework.identifier == NETSTANDARD:
            return "NETStandard.Library"
        return "Microsoft.NETCore.App"
    return _FAMILY_FRAMEWORK_NAMES.get(family, family)


# =========================================================================
# 包表
# =========================================================================


class PackageTable:
    """包 id -> 最低内置版本

    约束: 同一次生成过程中版本只升不降，所有写入都经过 merge()。
    remove() 仅供框架归约使用。
    """

    def __init__(self, entries: dict[str, NuGetVersion] | None = None) -> None:
        self._entries: dict[str, tuple[str, NuGetVersion]] = {}
        for package_id, version in (entries or {}).items():
            self.merge(package_id, version)

    def get(self, package_id: str) -> NuGetVersion | None:
        entry = self._entries.get(package_id.lower())
        return entry[1] if entry else None

    def merge(self, package_id: str, version: NuGetVersion) -> bool:
        """按 max 语义写入，版本提高（或新增）时返回 True"""
        version = version.as_three_part()
        key = package_id.lower()
        existing = self._entries.get(key)
        if existing is not None and existing[1] >= version:
            return False
        self._entries[key] = (existing[0] if existing else package_id, version)
        return True

    def remove(self, package_id: str) -> bool:
        return self._entries.pop(package_id.lower(), None) is not None

    def items(self) -> list[tuple[str, NuGetVersion]]:
        """按 id 排序的 (id, version) 列表"""
        return sorted(self._entries.values(), key=lambda e: e[0].lower())

    def to_dict(self) -> dict[str, str]:
        return {package_id: str(version) for package_id, version in self.items()}

    def __contains__(self, package_id: object) -> bool:
        return isinstance(package_id, str) and package_id.lower() in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter([package_id for package_id, _ in self.items()])

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"PackageTable({self.to_dict()!r})"


# =========================================================================
# 覆盖 / 引用包
# =========================================================================


@dataclass(frozen=True)
class OverrideEntry:
    """版本覆盖条目（来自 data/PackageOverrides.txt）"""

    package_id: str
    version: NuGetVersion


@dataclass
class RuntimeSeed:
    """特定框架下需要额外导入的运行时依赖"""

    framework: str
    runtime_graphs: list[tuple[str, str]] = field(default_factory=list)
    package_dependencies: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class RefPack:
    """跟踪的框架引用包

    versions 来自 <name>.Ref 的全部发布版本，
    legacy_versions 是没有 .Ref 包的旧版本，直接读取 <name> 本身。
    """

    name: str
    family: str = DEFAULT_FAMILY
    legacy_versions: list[str] = field(default_factory=list)
    runtime_seeds: list[RuntimeSeed] = field(default_factory=list)

    @property
    def ref_package_id(self) -> str:
        return f"{self.name}.Ref"
