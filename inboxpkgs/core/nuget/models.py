"""NuGet 包相关数据模型

数据类:
- PackageDependency: nuspec 中声明的依赖
- RuntimeDescription / RuntimeGraph: runtime.json 中的运行时依赖图
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from inboxpkgs.core.versioning import NuGetVersion, parse_version_range_min


@dataclass(frozen=True)
class PackageDependency:
    """单条包依赖，version_range 保留原始区间文本"""

    package_id: str
    version_range: str = ""

    @property
    def min_version(self) -> NuGetVersion | None:
        return parse_version_range_min(self.version_range)


@dataclass
class RuntimeDescription:
    """单个运行时标识 (RID) 的描述"""

    rid: str
    imports: list[str] = field(default_factory=list)
    # 依赖集 id -> {依赖包 id: 版本区间}
    dependency_sets: dict[str, dict[str, str]] = field(default_factory=dict)


@dataclass
class RuntimeGraph:
    """runtime.json 解析结果"""

    runtimes: dict[str, RuntimeDescription] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> RuntimeGraph:
        runtimes: dict[str, RuntimeDescription] = {}
        for rid, body in (data.get("runtimes") or {}).items():
            body = body or {}
            description = RuntimeDescription(rid=rid, imports=list(body.get("#import") or []))
            for set_id, deps in body.items():
                if set_id == "#import" or not isinstance(deps, dict):
                    continue
                description.dependency_sets[set_id] = {
                    dep_id: str(dep_range) for dep_id, dep_range in deps.items()
                }
            runtimes[rid] = description
        return cls(runtimes=runtimes)

    def dependencies(self) -> Iterator[PackageDependency]:
        """遍历所有 RID 下的全部运行时依赖"""
        for description in self.runtimes.values():
            for deps in description.dependency_sets.values():
                for dep_id, dep_range in deps.items():
                    yield PackageDependency(dep_id, dep_range)
