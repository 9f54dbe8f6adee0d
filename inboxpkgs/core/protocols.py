"""领域协议定义

生成器各组件只依赖 PackageSource 协议，
真实实现是 NuGetClient，测试中可替换为内存实现。
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from inboxpkgs.core.frameworks import Framework
    from inboxpkgs.core.nuget.archive import PackageArchive
    from inboxpkgs.core.versioning import NuGetVersion, VersionPair


class PackageSource(Protocol):
    """包源协议"""

    def get_versions(self, package_id: str) -> list[NuGetVersion]:
        """全部已上架版本（含预发布），降序"""
        ...

    def get_stable_versions(self, package_id: str) -> list[NuGetVersion]:
        """已上架的正式版本，降序"""
        ...

    def open_package(self, package_id: str, version: NuGetVersion) -> PackageArchive:
        """下载并打开包归档"""
        ...

    def resolve_asset_versions(
        self, package_id: str, version: NuGetVersion, framework: Framework,
    ) -> list[VersionPair]:
        """解析该版本为目标框架实际提供的二进制版本"""
        ...
