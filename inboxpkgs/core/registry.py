"""框架内置包注册表（运行时查询）

由生成器输出的 YAML 文档构建一片只读的包表森林:
  - 每个节点对应 (框架族, 框架)，父节点为同一框架族内最接近的兼容框架
  - 父链接在构建时一次确定，之后不再修改；整个注册表只读，可被多线程并发查询

用法:
    registry = default_registry()
    registry.is_in_box("default", "net6.0", "System.Memory", "4.5.4")
    registry.is_framework_package("net6.0", "Microsoft.Extensions.Logging", "6.0.0")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from inboxpkgs.core.exceptions import ConfigError, FrameworkParseError, ValidationError
from inboxpkgs.core.frameworks import Framework, FrameworkReducer
from inboxpkgs.core.models import DEFAULT_FAMILY, framework_display_name
from inboxpkgs.core.versioning import NuGetVersion
from inboxpkgs.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

PACKAGED_DATA_DIR = Path(__file__).resolve().parent.parent / "data" / "framework_packages"


def _as_framework(framework: Framework | str) -> Framework:
    return framework if isinstance(framework, Framework) else Framework.parse(framework)


def _as_version(version: NuGetVersion | str) -> NuGetVersion:
    return version if isinstance(version, NuGetVersion) else NuGetVersion.parse(version)


@dataclass(frozen=True, eq=False)
class FrameworkPackages:
    """单个框架族在单个框架下的内置包表（只保存相对父节点的增量）"""

    framework: Framework
    family: str
    framework_name: str
    packages: Mapping[str, NuGetVersion]
    names: Mapping[str, str]
    parent: FrameworkPackages | None = None

    @classmethod
    def create(
        cls,
        framework: Framework,
        family: str,
        packages: Mapping[str, NuGetVersion | str],
        *,
        framework_name: str = "",
        parent: FrameworkPackages | None = None,
    ) -> FrameworkPackages:
        versions: dict[str, NuGetVersion] = {}
        names: dict[str, str] = {}
        for package_id, version in packages.items():
            versions[package_id.lower()] = _as_version(str(version)).as_three_part()
            names[package_id.lower()] = package_id
        return cls(
            framework=framework,
            family=family,
            framework_name=framework_name or framework_display_name(family, framework),
            packages=MappingProxyType(versions),
            names=MappingProxyType(names),
            parent=parent,
        )

    def lookup(self, package_id: str) -> NuGetVersion | None:
        """先查本表，再沿父链查找"""
        key = package_id.lower()
        node: FrameworkPackages | None = self
        while node is not None:
            version = node.packages.get(key)
            if version is not None:
                return version
            node = node.parent
        return None

    def contains(self, package_id: str, version: NuGetVersion | str) -> bool:
        requested = _as_version(version)
        inbox = self.lookup(package_id)
        return inbox is not None and requested <= inbox

    def flatten(self) -> dict[str, NuGetVersion]:
        """合并父链后的完整包表，子节点优先"""
        chain: list[FrameworkPackages] = []
        node: FrameworkPackages | None = self
        while node is not None:
            chain.append(node)
            node = node.parent
        merged: dict[str, tuple[str, NuGetVersion]] = {}
        for entry in reversed(chain):
            for key, version in entry.packages.items():
                merged[key] = (entry.names[key], version)
        return dict(sorted(merged.values(), key=lambda kv: kv[0].lower()))

    def __len__(self) -> int:
        return len(self.packages)

    def __repr__(self) -> str:
        parent = self.parent.framework if self.parent else None
        return (
            f"FrameworkPackages({self.family}, {self.framework}, "
            f"{len(self.packages)} packages, parent={parent})"
        )


class FrameworkPackageRegistry:
    """框架内置包注册表"""

    def __init__(self, nodes: Iterable[FrameworkPackages]) -> None:
        self._nodes: dict[str, dict[Framework, FrameworkPackages]] = {}
        for node in nodes:
            self._nodes.setdefault(node.family, {})[node.framework] = node
        self._reducer = FrameworkReducer()

    # ------------------------------------------------------------------
    # 构建
    # ------------------------------------------------------------------

    @classmethod
    def from_documents(cls, documents: Iterable[dict[str, Any]]) -> FrameworkPackageRegistry:
        """从生成器输出的文档构建，父节点在此一次性确定"""
        specs: dict[tuple[str, Framework], dict[str, Any]] = {}
        for doc in documents:
            if not doc:
                continue
            try:
                framework = Framework.parse(str(doc["framework"]))
            except KeyError as e:
                raise ConfigError(f"框架包文档缺少 framework 字段: {doc!r}") from e
            for family, table in (doc.get("tables") or {}).items():
                specs[(family, framework)] = table or {}

        reducer = FrameworkReducer()
        built: dict[tuple[str, Framework], FrameworkPackages] = {}
        building: set[tuple[str, Framework]] = set()

        def resolve_parent(family: str, framework: Framework, declared: str | None) -> Framework | None:
            siblings = [fw for fam, fw in specs if fam == family and fw != framework]
            if declared:
                parent = Framework.parse(declared)
                if (family, parent) in specs:
                    return parent
                logger.warning(
                    "%s/%s 声明的父框架 %s 未加载，改用最接近的兼容框架",
                    family, framework, declared,
                )
            return reducer.get_nearest(framework, siblings)

        def build(key: tuple[str, Framework]) -> FrameworkPackages:
            if key in built:
                return built[key]
            if key in building:
                raise ConfigError(f"框架包父链存在循环: {key[0]}/{key[1]}")
            building.add(key)
            family, framework = key
            spec = specs[key]
            parent_fw = resolve_parent(family, framework, spec.get("parent"))
            parent = build((family, parent_fw)) if parent_fw is not None else None
            node = FrameworkPackages.create(
                framework, family, spec.get("packages") or {},
                framework_name=spec.get("framework_name", ""),
                parent=parent,
            )
            building.discard(key)
            built[key] = node
            return node

        for key in specs:
            build(key)
        logger.info("框架包注册表已加载: %d 个包表", len(built))
        return cls(built.values())

    @classmethod
    def from_directory(cls, path: str | Path) -> FrameworkPackageRegistry:
        directory = Path(path)
        if not directory.is_dir():
            raise ConfigError(f"框架包数据目录不存在: {directory}")
        documents = [load_yaml(p) for p in sorted(directory.glob("*.yml"))]
        return cls.from_documents(documents)

    # ------------------------------------------------------------------
    # 查询
    # ------------------------------------------------------------------

    def families(self) -> list[str]:
        return sorted(self._nodes, key=lambda f: (f != DEFAULT_FAMILY, f))

    def frameworks(self, family: str = DEFAULT_FAMILY) -> list[Framework]:
        return sorted(self._nodes.get(family, {}), key=lambda f: f.short_folder_name)

    def get(self, family: str, framework: Framework | str) -> FrameworkPackages | None:
        """精确匹配，否则取该框架族中最接近的兼容框架"""
        nodes = self._nodes.get(family, {})
        fw = _as_framework(framework)
        if fw in nodes:
            return nodes[fw]
        nearest = self._reducer.get_nearest(fw, nodes)
        return nodes[nearest] if nearest is not None else None

    def lookup(
        self, family: str, framework: Framework | str, package_id: str,
    ) -> NuGetVersion | None:
        node = self.get(family, framework)
        return node.lookup(package_id) if node is not None else None

    def is_in_box(
        self,
        family: str,
        framework: Framework | str,
        package_id: str,
        version: NuGetVersion | str,
    ) -> bool:
        """version 不高于该框架族在该框架下的内置版本时返回 True"""
        node = self.get(family, framework)
        return node is not None and node.contains(package_id, version)

    def is_framework_package(
        self,
        framework: Framework | str,
        package_id: str,
        version: NuGetVersion | str,
        families: Iterable[str] | None = None,
    ) -> bool:
        """检查默认框架族以及指定（默认全部）叠加框架族"""
        try:
            target = _as_framework(framework)
            requested = _as_version(version)
        except (FrameworkParseError, ValidationError):
            logger.debug("无法解析的查询: %s %s %s", framework, package_id, version)
            return False
        selected = {DEFAULT_FAMILY, *(self._nodes if families is None else families)}
        return any(
            self.is_in_box(family, target, package_id, requested)
            for family in self.families() if family in selected
        )


@lru_cache(maxsize=1)
def default_registry() -> FrameworkPackageRegistry:
    """进程级只读注册表，首次调用时从配置的数据目录（默认包内置数据）加载"""
    from inboxpkgs.core.config import get_config
    data_dir = get_config().data_dir or PACKAGED_DATA_DIR
    return FrameworkPackageRegistry.from_directory(data_dir)
