"""框架包表构建管线

对每个跟踪的框架引用包:
  1. 列出 <Pack>.Ref 的全部版本（含预发布，降序），再追加没有 .Ref 包的旧版本
  2. 同一 major.minor 只读取最新的一个版本
  3. 定位引用程序集（ref/，没有则 build/），推断目标框架
  4. 依次填充包表: 平台清单 / 引用程序集评估 -> 运行时依赖种子 -> 版本覆盖
然后按框架族归约，叠加框架族再相对默认框架族归约。

整个过程单线程顺序执行，每次网络请求阻塞完成后再继续。
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass, field

from inboxpkgs.core.exceptions import PackageFormatError
from inboxpkgs.core.frameworks import Framework, FrameworkReducer
from inboxpkgs.core.generator.evaluator import PackageEvaluator
from inboxpkgs.core.generator.overrides import apply_overrides, read_overrides
from inboxpkgs.core.generator.reducer import reduce_against_base, reduce_tables
from inboxpkgs.core.generator.runtime_graph import RuntimeGraphMerger
from inboxpkgs.core.models import DEFAULT_FAMILY, PackageTable, RefPack
from inboxpkgs.core.nuget.archive import PackageArchive
from inboxpkgs.core.protocols import PackageSource
from inboxpkgs.core.versioning import NuGetVersion

logger = logging.getLogger(__name__)


@dataclass
class FamilyTables:
    """构建结果: 框架族 -> 框架 -> 包表"""

    families: dict[str, dict[Framework, PackageTable]] = field(default_factory=dict)

    def tables(self, family: str) -> dict[Framework, PackageTable]:
        return self.families.setdefault(family, {})

    def lookup(self, family: str, framework: Framework, package_id: str) -> NuGetVersion | None:
        """沿兼容链查找某框架族的内置版本"""
        tables = self.families.get(family, {})
        if framework not in tables:
            return None
        reducer = FrameworkReducer()
        for fw in [framework, *reducer.get_ancestors(framework, tables)]:
            version = tables[fw].get(package_id)
            if version is not None:
                return version
        return None


class FrameworkTableBuilder:
    """框架包表构建器"""

    def __init__(
        self,
        source: PackageSource,
        ref_packs: list[RefPack],
        *,
        ignored_assemblies: list[str] | None = None,
        evaluate_assemblies: bool = True,
    ) -> None:
        self.source = source
        self.ref_packs = ref_packs
        self.ignored = {name.lower() for name in (ignored_assemblies or [])}
        self.evaluate_assemblies = evaluate_assemblies
        self.evaluator = PackageEvaluator(source)
        self.merger = RuntimeGraphMerger(source)

    @classmethod
    def from_config(cls, source: PackageSource) -> FrameworkTableBuilder:
        from inboxpkgs.core.config import get_config
        cfg = get_config()
        return cls(
            source,
            cfg.tracked_ref_packs(),
            ignored_assemblies=cfg.ignored_assemblies,
            evaluate_assemblies=cfg.evaluate_assemblies,
        )

    def build(self) -> FamilyTables:
        result = FamilyTables()
        for ref_pack in self.ref_packs:
            self.build_ref_pack(ref_pack, result.tables(ref_pack.family))

        for family, tables in result.families.items():
            logger.info("归约框架族 %s: %d 个框架", family, len(tables), extra={"family": family})
            reduce_tables(tables)

        for family, tables in result.families.items():
            if family == DEFAULT_FAMILY:
                continue
            reduce_against_base(
                tables,
                lambda fw, pid: result.lookup(DEFAULT_FAMILY, fw, pid),
            )
        return result

    def _candidate_versions(self, ref_pack: RefPack) -> list[tuple[str, NuGetVersion]]:
        versions = [
            (ref_pack.ref_package_id, v)
            for v in self.source.get_versions(ref_pack.ref_package_id)
        ]
        versions.extend(
            (ref_pack.name, NuGetVersion.parse(v)) for v in ref_pack.legacy_versions
        )
        return versions

    def build_ref_pack(
        self, ref_pack: RefPack, tables: dict[Framework, PackageTable],
    ) -> None:
        """处理一个引用包的全部版本，结果按框架合并进 tables"""
        last: NuGetVersion | None = None
        for package_id, version in self._candidate_versions(ref_pack):
            # 同一 major.minor 只读取最新版本
            if last is not None and (last.major, last.minor) == (version.major, version.minor):
                continue
            last = version

            logger.info(
                "处理框架引用包 %s@%s", package_id, version,
                extra={"package": package_id, "family": ref_pack.family},
            )
            with self.source.open_package(package_id, version) as archive:
                framework, table = self.build_table(ref_pack, archive)

            existing = tables.get(framework)
            if existing is None:
                tables[framework] = table
            else:
                for pid, ver in table.items():
                    existing.merge(pid, ver)

    def reference_files(self, archive: PackageArchive) -> list[str]:
        """引用程序集路径，排除框架兼容门面程序集

        Raises:
            PackageFormatError: 既没有 ref/ 也没有 build/ 条目
        """
        files = archive.files("ref") or archive.files("build")
        if not files:
            raise PackageFormatError(f"框架包结构不符合预期: {archive.source}")
        return [
            f for f in files
            if f.lower().endswith(".dll")
            and posixpath.splitext(posixpath.basename(f))[0].lower() not in self.ignored
        ]

    def build_table(
        self, ref_pack: RefPack, archive: PackageArchive,
    ) -> tuple[Framework, PackageTable]:
        """为单个框架引用包版本构建原始包表"""
        files = self.reference_files(archive)
        if not files:
            raise PackageFormatError(f"框架包中没有可用的引用程序集: {archive.source}")
        framework = Framework.parse(files[0].split("/")[1])
        table = PackageTable()

        if self.evaluate_assemblies and not self.evaluator.evaluate_platform_manifest(
            archive, framework, table,
        ):
            self.evaluator.evaluate_reference_assemblies(archive, files, framework, table)

        for seed in ref_pack.runtime_seeds:
            if Framework.parse(seed.framework) != framework:
                continue
            for package_id, version in seed.runtime_graphs:
                self.merger.apply_runtime_graph(package_id, NuGetVersion.parse(version), table)
            for package_id, version in seed.package_dependencies:
                self.merger.apply_package_dependencies(
                    package_id, NuGetVersion.parse(version), framework, table,
                )

        overrides = read_overrides(archive)
        if overrides is None:
            logger.debug("%s 不含版本覆盖文件", archive.source)
        else:
            apply_overrides(table, overrides)

        logger.info(
            "%s -> %s: %d 个内置包", archive.source, framework, len(table),
            extra={"framework": framework, "family": ref_pack.family},
        )
        return framework, table
