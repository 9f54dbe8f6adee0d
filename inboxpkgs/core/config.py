"""集中配置管理

提供统一的配置入口，支持从 YAML 文件加载 + 编程式覆盖。
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any

from inboxpkgs.core.exceptions import ConfigError
from inboxpkgs.core.models import (
    DEFAULT_FAMILY,
    DESKTOP_HOSTING_FAMILY,
    WEB_HOSTING_FAMILY,
    RefPack,
    RuntimeSeed,
)
from inboxpkgs.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_REF_PACKS: list[dict[str, Any]] = [
    {
        "name": "Microsoft.NETCore.App",
        "family": DEFAULT_FAMILY,
        "legacy_versions": ["2.1.0", "2.0.0"],
        "runtime_seeds": [
            {
                "framework": "netcoreapp2.0",
                "runtime_graphs": [["Microsoft.NETCore.Targets", "1.1.4"]],
                "package_dependencies": [
                    ["runtime.native.System.Security.Cryptography", "4.3.4"],
                    ["runtime.native.System.Security.Cryptography.OpenSsl", "4.3.3"],
                    ["runtime.native.System.Security.Cryptography.Apple", "4.3.1"],
                    ["Microsoft.NETCore.App", "2.0.0"],
                ],
            },
        ],
    },
    {"name": "Microsoft.AspNetCore.App", "family": WEB_HOSTING_FAMILY},
    {"name": "Microsoft.WindowsDesktop.App", "family": DESKTOP_HOSTING_FAMILY},
    {
        "name": "NETStandard.Library",
        "family": DEFAULT_FAMILY,
        "legacy_versions": ["2.0.0"],
    },
]

# 框架兼容门面程序集，不与独立包比较
DEFAULT_IGNORED_ASSEMBLIES: list[str] = [
    "mscorlib",
    "Microsoft.VisualBasic",
    "System",
    "System.ComponentModel.DataAnnotations",
    "System.Configuration",
    "System.Core",
    "System.Data",
    "System.Drawing",
    "System.IO.Compression.FileSystem",
    "System.Net",
    "System.Numerics",
    "System.Runtime.Serialization",
    "System.Security",
    "System.ServiceProcess",
    "System.ServiceModel.Web",
    "System.Transactions",
    "System.Web",
    "System.Windows",
    "System.Xml",
    "System.Xml.Serialization",
    "System.Xml.Linq",
    "WindowsBase",
]


@dataclass
class Config:
    """全局配置"""

    # 包源
    flat_container_url: str = "https://api.nuget.org/v3-flatcontainer"
    registration_url: str = "https://api.nuget.org/v3/registration5-gz-semver2"
    http_timeout: int = 60

    # 目录
    data_dir: str = ""  # 为空时使用包内置数据
    output_dir: str = "output/framework_packages"

    # 生成
    evaluate_assemblies: bool = True
    ref_packs: list[dict[str, Any]] = field(
        default_factory=lambda: [dict(p) for p in DEFAULT_REF_PACKS],
    )
    ignored_assemblies: list[str] = field(
        default_factory=lambda: list(DEFAULT_IGNORED_ASSEMBLIES),
    )

    # 自定义扩展 (放不到字段里的配置项)
    extra: dict = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = "configs/default.yml") -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        data = load_yaml(path)
        if not data:
            return cls()
        known = {f.name for f in cls.__dataclass_fields__.values()}
        matched = {k: v for k, v in data.items() if k in known}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def tracked_ref_packs(self) -> list[RefPack]:
        """把 ref_packs 配置段转换为 RefPack 列表"""
        packs: list[RefPack] = []
        for raw in self.ref_packs:
            if not isinstance(raw, dict) or not raw.get("name"):
                raise ConfigError(f"ref_packs 条目缺少 name: {raw!r}")
            seeds = []
            for s in raw.get("runtime_seeds", []):
                if not isinstance(s, dict) or not s.get("framework"):
                    raise ConfigError(f"{raw['name']} 的 runtime_seeds 条目缺少 framework: {s!r}")
                seeds.append(RuntimeSeed(
                    framework=s["framework"],
                    runtime_graphs=[tuple(p) for p in s.get("runtime_graphs", [])],
                    package_dependencies=[tuple(p) for p in s.get("package_dependencies", [])],
                ))
            packs.append(RefPack(
                name=raw["name"],
                family=raw.get("family", DEFAULT_FAMILY),
                legacy_versions=[str(v) for v in raw.get("legacy_versions", [])],
                runtime_seeds=seeds,
            ))
        return packs

    def to_dict(self) -> dict:
        return asdict(self)


# 全局单例，首次 import 时不加载文件；由 CLI / Web 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = "configs/default.yml") -> Config:
    """从文件初始化全局配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
