"""包评估器

对引用包中的每个程序集，找出最低的、二进制不超过参考基线的正式版本:

  1. 取该包全部正式版本，按版本降序逐个检查
  2. 包表中已有不低于当前候选的版本 -> 停止（已被更高结果覆盖）
  3. 解析候选版本为目标框架实际提供的二进制版本
  4. 包二进制比参考基线新（包"胜出"）-> 继续看更低的版本
  5. 第一个不胜出的候选写入包表，停止

参考基线的来源:
  - *PlatformManifest.txt: path|?|assemblyVersion|fileVersion
  - 引用程序集本身: ref/<tfm>/*.dll 的元数据
"""

from __future__ import annotations

import logging
import posixpath
from typing import Iterable

from inboxpkgs.core.exceptions import PackageFormatError, ValidationError
from inboxpkgs.core.frameworks import Framework
from inboxpkgs.core.models import PackageTable
from inboxpkgs.core.nuget.archive import PackageArchive
from inboxpkgs.core.nuget.assembly import read_version_pair
from inboxpkgs.core.protocols import PackageSource
from inboxpkgs.core.versioning import NuGetVersion, VersionPair, package_wins

logger = logging.getLogger(__name__)

PLATFORM_MANIFEST_SUFFIX = "PlatformManifest.txt"


def _stem(path: str) -> str:
    return posixpath.splitext(posixpath.basename(path.replace("\\", "/")))[0]


def parse_platform_manifest(text: str) -> list[tuple[str, VersionPair]]:
    """解析平台清单，返回 [(包 id, 参考版本)]，忽略字段数不为 4 的行"""
    records: list[tuple[str, VersionPair]] = []
    for line in text.splitlines():
        parts = line.strip().split("|")
        if len(parts) != 4:
            continue
        try:
            pair = VersionPair.parse(parts[2], parts[3])
        except ValidationError:
            logger.warning("平台清单行版本无效，已忽略: %s", line.strip())
            continue
        records.append((_stem(parts[0]), pair))
    return records


class PackageEvaluator:
    """包评估器 - 决定某个包在目标框架下的最低内置版本"""

    def __init__(self, source: PackageSource) -> None:
        self.source = source

    def evaluate(
        self,
        package_id: str,
        framework: Framework,
        reference: VersionPair,
        table: PackageTable,
    ) -> NuGetVersion | None:
        """评估单个包，返回写入包表的版本；没有合格版本时返回 None"""
        for candidate in self.source.get_stable_versions(package_id):
            baseline = candidate.as_three_part()
            existing = table.get(package_id)
            if existing is not None and existing >= baseline:
                # 已有相同或更高的结果
                return None

            pairs = self.source.resolve_asset_versions(package_id, candidate, framework)
            if not pairs:
                continue

            if package_wins(pairs, reference):
                logger.debug(
                    "%s@%s 比 %s 内置版本 %s 更新，继续查找更低版本",
                    package_id, candidate, framework, reference,
                )
                continue

            table.merge(package_id, baseline)
            logger.debug("%s 在 %s 的内置版本: %s", package_id, framework, baseline)
            return baseline
        return None

    def evaluate_platform_manifest(
        self, archive: PackageArchive, framework: Framework, table: PackageTable,
    ) -> bool:
        """用平台清单评估全部程序集，清单不存在时返回 False"""
        manifest = archive.find_file(PLATFORM_MANIFEST_SUFFIX)
        if manifest is None:
            return False

        records = parse_platform_manifest(archive.read_text(manifest) or "")
        logger.info("平台清单 %s: %d 条记录", manifest, len(records))
        for package_id, reference in records:
            self.evaluate(package_id, framework, reference, table)
        return True

    def evaluate_reference_assemblies(
        self,
        archive: PackageArchive,
        paths: Iterable[str],
        framework: Framework,
        table: PackageTable,
    ) -> None:
        """逐个读取引用程序集的版本并评估同名包"""
        for path in paths:
            data = archive.read(path)
            if data is None:
                logger.warning("引用程序集不存在: %s", path)
                continue
            try:
                reference = read_version_pair(data, name=path)
            except PackageFormatError as e:
                logger.warning("跳过无法解析的引用程序集 %s: %s", path, e)
                continue
            self.evaluate(_stem(path), framework, reference, table)
