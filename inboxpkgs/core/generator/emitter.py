"""框架包表输出

为默认框架族中的每个框架输出一个 YAML 文件 <short_folder_name>.yml:

    framework: netcoreapp2.1
    name: .NETCoreApp,Version=v2.1
    tables:
      default:
        framework_name: Microsoft.NETCore.App
        parent: netcoreapp2.0
        packages:
          System.Memory: 4.5.5
      web-hosting:
        ...

叠加框架族只在该框架下有包表时输出；parent 为同框架族内最接近的兼容框架。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from inboxpkgs.core.frameworks import Framework, FrameworkReducer
from inboxpkgs.core.generator.builder import FamilyTables
from inboxpkgs.core.models import DEFAULT_FAMILY, framework_display_name
from inboxpkgs.utils.yaml_io import save_yaml

logger = logging.getLogger(__name__)


def render_document(result: FamilyTables, framework: Framework) -> dict[str, Any]:
    """生成单个框架的输出文档"""
    reducer = FrameworkReducer()
    families = [DEFAULT_FAMILY] + sorted(f for f in result.families if f != DEFAULT_FAMILY)

    tables: dict[str, Any] = {}
    for family in families:
        family_tables = result.families.get(family, {})
        if framework not in family_tables:
            continue
        parent = reducer.get_nearest(
            framework, [f for f in family_tables if f != framework],
        )
        tables[family] = {
            "framework_name": framework_display_name(family, framework),
            "parent": parent.short_folder_name if parent else None,
            "packages": family_tables[framework].to_dict(),
        }

    return {
        "framework": framework.short_folder_name,
        "name": framework.dotnet_framework_name,
        "tables": tables,
    }


def emit_tables(result: FamilyTables, output_dir: str | Path) -> list[Path]:
    """写出全部框架文件，返回文件路径列表"""
    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for framework in sorted(
        result.families.get(DEFAULT_FAMILY, {}), key=lambda f: f.short_folder_name,
    ):
        path = out / f"{framework.short_folder_name}.yml"
        save_yaml(path, render_document(result, framework))
        written.append(path)
    logger.info("已输出 %d 个框架包表到 %s", len(written), out)
    return written
