"""版本覆盖

覆盖数据来自框架引用包内的 data/PackageOverrides.txt（每行 packageId|version），
在计算结果之后应用:

  - 包表中没有该包 -> 写入覆盖版本
  - 计算值低于覆盖值 -> 提升为覆盖值，并输出诊断
  - 计算值高于覆盖值 -> 保留计算值，输出覆盖已过期的诊断
  - 相等 -> 不处理
"""

from __future__ import annotations

import logging

from inboxpkgs.core.exceptions import ValidationError
from inboxpkgs.core.models import OverrideEntry, PackageTable
from inboxpkgs.core.nuget.archive import PackageArchive
from inboxpkgs.core.versioning import NuGetVersion

logger = logging.getLogger(__name__)

OVERRIDES_PATH = "data/PackageOverrides.txt"


def parse_overrides(text: str) -> list[OverrideEntry]:
    """解析覆盖文件，丢弃预发布标签，忽略格式不符的行"""
    entries: list[OverrideEntry] = []
    for line in text.splitlines():
        parts = line.strip().split("|")
        if len(parts) != 2 or not parts[0]:
            continue
        try:
            version = NuGetVersion.parse(parts[1]).as_three_part()
        except ValidationError:
            logger.warning("覆盖条目版本无效，已忽略: %s", line.strip())
            continue
        entries.append(OverrideEntry(parts[0], version))
    return entries


def read_overrides(archive: PackageArchive) -> list[OverrideEntry] | None:
    """读取包内覆盖文件，不存在时返回 None"""
    text = archive.read_text(OVERRIDES_PATH)
    if text is None:
        return None
    return parse_overrides(text)


def apply_overrides(table: PackageTable, overrides: list[OverrideEntry]) -> PackageTable:
    """按优先级规则把覆盖条目应用到包表"""
    for entry in overrides:
        existing = table.get(entry.package_id)
        if existing is None:
            table.merge(entry.package_id, entry.version)
        elif existing < entry.version:
            logger.warning(
                "%s -- 计算值 %s < 覆盖值 %s，采用覆盖值",
                entry.package_id, existing, entry.version,
            )
            table.merge(entry.package_id, entry.version)
        elif existing > entry.version:
            logger.warning(
                "%s -- 计算值 %s > 覆盖值 %s，覆盖已过期，保留计算值",
                entry.package_id, existing, entry.version,
            )
    return table
