"""NuGet 包源访问模块

- client.py: 包源 HTTP 客户端（版本列表 / 元数据 / 包下载）
- archive.py: .nupkg 归档读取与资产选择
- assembly.py: 从程序集元数据读取版本
- models.py: 依赖与运行时图数据模型
"""

from inboxpkgs.core.nuget.archive import PackageArchive
from inboxpkgs.core.nuget.client import NuGetClient
from inboxpkgs.core.nuget.models import PackageDependency, RuntimeGraph

__all__ = [
    "NuGetClient",
    "PackageArchive",
    "PackageDependency",
    "RuntimeGraph",
]
