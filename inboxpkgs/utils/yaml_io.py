"""YAML 读写

配置文件与框架包表共用同一套读写规则:
  - 读取: 不存在或为空返回 {}；格式错误、超限、顶层不是映射时抛 ConfigError
  - 写入: 保持键顺序，先写同目录临时文件再替换，中途失败不留下半截文件
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

from inboxpkgs.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

# 单个包表文件通常只有几十 KB
MAX_YAML_SIZE = 10 * 1024 * 1024


def load_yaml(path: str | Path) -> dict[str, Any]:
    """读取 YAML 映射

    Raises:
        ConfigError: 文件过大、YAML 语法错误或顶层不是映射
    """
    p = Path(path)
    if not p.exists():
        return {}
    if p.stat().st_size > MAX_YAML_SIZE:
        raise ConfigError(f"YAML 文件过大: {p} (上限 {MAX_YAML_SIZE} 字节)")

    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML 格式错误: {p}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{p} 顶层应为映射，实际为 {type(data).__name__}")
    return data


def dump_yaml(data: Any) -> str:
    return yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)


def save_yaml(path: str | Path, data: Any) -> None:
    """原子写入 YAML 文件，自动创建父目录"""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    text = dump_yaml(data)
    fd, tmp = tempfile.mkstemp(dir=str(p.parent), prefix=f".{p.stem}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp, p)
    except OSError:
        logger.error("写入失败，清理临时文件: %s", tmp)
        Path(tmp).unlink(missing_ok=True)
        raise
    logger.debug("已写入 %s", p)
