"""框架归约

每个框架的包表只保留相对兼容祖先框架的增量:
对框架 F，沿 nearest(F) -> nearest(nearest(F)) ... 逐级比较，
祖先已提供相同或更高版本的包从 F 的表中删除；F 中版本更高的条目保留。

复杂度 O(F^2 * |T|)，跟踪的框架数量小且固定，可以接受。
"""

from __future__ import annotations

import logging
from typing import Callable

from inboxpkgs.core.frameworks import Framework, FrameworkReducer
from inboxpkgs.core.models import PackageTable
from inboxpkgs.core.versioning import NuGetVersion

logger = logging.getLogger(__name__)


def reduce_tables(
    tables: dict[Framework, PackageTable],
    reducer: FrameworkReducer | None = None,
) -> int:
    """原地归约同一框架族下的全部包表，返回删除的条目数"""
    reducer = reducer or FrameworkReducer()
    frameworks = list(tables)
    removed = 0

    for framework in frameworks:
        reduced = tables[framework]
        for ancestor in reducer.get_ancestors(framework, frameworks):
            for package_id, version in tables[ancestor].items():
                existing = reduced.get(package_id)
                if existing is None or existing > version:
                    # 祖先版本更低，保留本框架的更高版本
                    continue
                if existing < version:
                    logger.info(
                        "%s - 兼容框架 %s 的版本 %s 高于 %s 的 %s",
                        package_id, ancestor, version, framework, existing,
                    )
                reduced.remove(package_id)
                removed += 1

    if removed:
        logger.info("框架归约完成: 删除 %d 条冗余条目", removed)
    return removed


def reduce_against_base(
    overlay_tables: dict[Framework, PackageTable],
    base_lookup: Callable[[Framework, str], NuGetVersion | None],
) -> int:
    """删除叠加框架族中已由默认框架族（同一框架及其继承链）保证的条目

    base_lookup(framework, package_id) 返回默认框架族在该框架下的内置版本。
    """
    removed = 0
    for framework, table in overlay_tables.items():
        for package_id, version in table.items():
            base_version = base_lookup(framework, package_id)
            if base_version is not None and version <= base_version:
                table.remove(package_id)
                removed += 1
    if removed:
        logger.info("叠加框架族归约: 删除 %d 条已由默认框架族提供的条目", removed)
    return removed
