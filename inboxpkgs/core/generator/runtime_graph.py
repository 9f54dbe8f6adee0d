"""运行时依赖图合并

- apply_runtime_graph: 导入原生包 runtime.json 中全部 RID 的依赖下界
- apply_package_dependencies: 沿 nuspec 依赖组递归导入依赖链

两者都按 max 语义写入包表，永不降级；已记录为相同或更高版本的包不再展开，
同时保证依赖环不会无限递归。
"""

from __future__ import annotations

import logging

from inboxpkgs.core.exceptions import PackageFormatError, RegistryError, ValidationError
from inboxpkgs.core.frameworks import Framework, FrameworkReducer
from inboxpkgs.core.models import PackageTable
from inboxpkgs.core.nuget.models import PackageDependency
from inboxpkgs.core.protocols import PackageSource
from inboxpkgs.core.versioning import NuGetVersion

logger = logging.getLogger(__name__)


class RuntimeGraphMerger:
    """运行时依赖合并器"""

    def __init__(self, source: PackageSource) -> None:
        self.source = source
        self.reducer = FrameworkReducer()

    @staticmethod
    def _min_version(
        dependency: PackageDependency, package_id: str, version: NuGetVersion,
    ) -> NuGetVersion | None:
        """依赖区间下界，无法解析的区间记录警告后跳过"""
        try:
            return dependency.min_version
        except ValidationError as e:
            logger.warning(
                "%s@%s 中依赖 %s 的版本区间无效，跳过: %s",
                package_id, version, dependency.package_id, e,
            )
            return None

    def apply_runtime_graph(
        self, package_id: str, version: NuGetVersion, table: PackageTable,
    ) -> int:
        """合并 runtime.json 中的依赖，返回提升（或新增）的条目数"""
        try:
            with self.source.open_package(package_id, version) as archive:
                graph = archive.runtime_graph()
        except (PackageFormatError, RegistryError) as e:
            logger.warning("无法读取运行时图 %s@%s: %s", package_id, version, e)
            return 0
        if graph is None:
            logger.info("%s@%s 不含 runtime.json，跳过", package_id, version)
            return 0

        raised = 0
        for dependency in graph.dependencies():
            min_version = self._min_version(dependency, package_id, version)
            if min_version is None:
                continue
            if table.merge(dependency.package_id, min_version):
                raised += 1
        logger.info("运行时图 %s@%s: 合并 %d 条", package_id, version, raised)
        return raised

    def apply_package_dependencies(
        self,
        package_id: str,
        version: NuGetVersion,
        framework: Framework,
        table: PackageTable,
    ) -> None:
        """写入包本身，并递归写入最接近目标框架的依赖组"""
        if not table.merge(package_id, version):
            return

        try:
            with self.source.open_package(package_id, version) as archive:
                groups = archive.dependency_groups()
        except (PackageFormatError, RegistryError) as e:
            logger.warning("无法展开依赖 %s@%s: %s", package_id, version, e)
            return

        nearest = self.reducer.get_nearest(framework, groups)
        if nearest is None:
            return
        for dependency in groups[nearest]:
            min_version = self._min_version(dependency, package_id, version)
            if min_version is None:
                continue
            self.apply_package_dependencies(
                dependency.package_id, min_version, framework, table,
            )
