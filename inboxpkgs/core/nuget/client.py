"""NuGet 包源客户端

职责:
- 平铺版本列表: GET {flat}/{id}/index.json
- 元数据（注册表）: GET {registration}/{id}/index.json，含上架状态
  注册表不可用时退回平铺版本列表，此时无法区分下架版本，全部视为已上架
- 包下载: GET {flat}/{id}/{ver}/{id}.{ver}.nupkg
- 解析包在目标框架下实际提供的二进制版本

网络调用不重试；同一次运行内的重复请求走会话级内存缓存，不跨运行持久化。
"""

from __future__ import annotations

import gzip
import json
import logging
import posixpath
import urllib.error
import urllib.request
from typing import Any

from inboxpkgs.core.exceptions import PackageFormatError, RegistryError, ValidationError
from inboxpkgs.core.frameworks import Framework
from inboxpkgs.core.nuget.archive import PackageArchive
from inboxpkgs.core.nuget.assembly import read_version_pair
from inboxpkgs.core.versioning import NuGetVersion, VersionPair
from inboxpkgs.utils.net import join_url, validate_feed_url

logger = logging.getLogger(__name__)

# 找不到 RID 无关资产时尝试的单一运行时标识
FALLBACK_RID = "win"


def _sort_desc(versions: list[NuGetVersion]) -> list[NuGetVersion]:
    return sorted(set(versions), reverse=True)


class NuGetClient:
    """NuGet v3 包源客户端"""

    def __init__(
        self,
        flat_container_url: str = "https://api.nuget.org/v3-flatcontainer",
        registration_url: str = "https://api.nuget.org/v3/registration5-gz-semver2",
        timeout: int = 60,
    ) -> None:
        self.flat_container_url = flat_container_url
        self.registration_url = registration_url
        self.timeout = timeout
        self._archives: dict[tuple[str, str], bytes] = {}
        self._metadata: dict[str, list[tuple[NuGetVersion, bool]]] = {}

    @classmethod
    def from_config(cls) -> NuGetClient:
        from inboxpkgs.core.config import get_config
        cfg = get_config()
        return cls(
            flat_container_url=cfg.flat_container_url,
            registration_url=cfg.registration_url,
            timeout=cfg.http_timeout,
        )

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _get(self, url: str) -> bytes:
        validate_feed_url(url, context="nuget")
        req = urllib.request.Request(url, headers={"Accept-Encoding": "gzip"})
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:  # nosec B310
                body = resp.read()
                encoding = resp.headers.get("Content-Encoding", "")
        except urllib.error.HTTPError as e:
            raise RegistryError(f"请求失败: {url} - HTTP {e.code}") from e
        except (urllib.error.URLError, OSError) as e:
            raise RegistryError(f"请求失败: {url} - {e}") from e
        if encoding == "gzip":
            body = gzip.decompress(body)
        return body

    def _get_json(self, url: str) -> dict[str, Any]:
        try:
            data = json.loads(self._get(url))
        except json.JSONDecodeError as e:
            raise RegistryError(f"响应不是合法 JSON: {url} - {e}") from e
        if not isinstance(data, dict):
            raise RegistryError(f"响应格式错误: {url}")
        return data

    # ------------------------------------------------------------------
    # 版本列表
    # ------------------------------------------------------------------

    def list_flat_versions(self, package_id: str) -> list[NuGetVersion]:
        """平铺版本列表（不区分上架状态），失败时返回空列表"""
        url = join_url(self.flat_container_url, package_id.lower(), "index.json")
        try:
            data = self._get_json(url)
        except RegistryError as e:
            logger.warning("获取版本列表失败 %s: %s", package_id, e)
            return []
        versions = []
        for text in data.get("versions") or []:
            try:
                versions.append(NuGetVersion.parse(text))
            except ValidationError:
                logger.debug("忽略无法解析的版本 %s %s", package_id, text)
        return _sort_desc(versions)

    def _load_metadata(self, package_id: str) -> list[tuple[NuGetVersion, bool]]:
        key = package_id.lower()
        if key in self._metadata:
            return self._metadata[key]

        url = join_url(self.registration_url, key, "index.json")
        entries: list[tuple[NuGetVersion, bool]] = []
        try:
            index = self._get_json(url)
            for page in index.get("items") or []:
                leaves = page.get("items")
                if leaves is None and page.get("@id"):
                    leaves = self._get_json(page["@id"]).get("items") or []
                for leaf in leaves or []:
                    entry = leaf.get("catalogEntry") or {}
                    if not entry.get("version"):
                        continue
                    try:
                        version = NuGetVersion.parse(entry["version"])
                    except ValidationError:
                        continue
                    entries.append((version, entry.get("listed", True) is not False))
        except RegistryError as e:
            logger.warning("获取包元数据失败 %s: %s，退回平铺版本列表", package_id, e)
            entries = [(version, True) for version in self.list_flat_versions(package_id)]

        self._metadata[key] = entries
        return entries

    def get_versions(self, package_id: str) -> list[NuGetVersion]:
        """全部已上架版本（含预发布），降序"""
        return _sort_desc([v for v, listed in self._load_metadata(package_id) if listed])

    def get_stable_versions(self, package_id: str) -> list[NuGetVersion]:
        """已上架正式版本，降序"""
        return [v for v in self.get_versions(package_id) if not v.is_prerelease]

    # ------------------------------------------------------------------
    # 包下载
    # ------------------------------------------------------------------

    def download(self, package_id: str, version: NuGetVersion) -> bytes:
        """下载 .nupkg 字节，命中会话缓存时不发请求"""
        key = (package_id.lower(), str(version).lower())
        cached = self._archives.get(key)
        if cached is not None:
            return cached
        pid, ver = key
        url = join_url(self.flat_container_url, pid, ver, f"{pid}.{ver}.nupkg")
        logger.info("下载: %s@%s", package_id, version)
        data = self._get(url)
        self._archives[key] = data
        return data

    def open_package(self, package_id: str, version: NuGetVersion) -> PackageArchive:
        return PackageArchive(
            self.download(package_id, version), source=f"{package_id}@{version}",
        )

    def resolve_asset_versions(
        self, package_id: str, version: NuGetVersion, framework: Framework,
    ) -> list[VersionPair]:
        """解析该版本包为目标框架提供的二进制版本

        资产选择顺序: RID 无关运行时资产 -> 单一 RID 运行时资产 -> 编译资产。
        运行时资产可能比编译资产版本更高（只服务运行时），所以优先比较它。
        无法下载或打开的包记录诊断后返回空列表。
        """
        try:
            archive = self.open_package(package_id, version)
        except (PackageFormatError, RegistryError) as e:
            logger.warning("加载包失败 %s@%s: %s", package_id, version, e)
            return []

        pairs: list[VersionPair] = []
        with archive:
            assets = archive.runtime_assets(framework)
            if not assets:
                assets = archive.runtime_assets_for_rid(framework, FALLBACK_RID)
            if not assets:
                assets = archive.compile_assets(framework)

            for path in assets or []:
                stem = posixpath.splitext(posixpath.basename(path))[0]
                if stem.lower() != package_id.lower():
                    continue
                try:
                    pairs.append(read_version_pair(archive.read(path) or b"", name=path))
                except PackageFormatError as e:
                    logger.warning("跳过无法解析的资产 %s@%s %s: %s", package_id, version, path, e)
        return pairs
