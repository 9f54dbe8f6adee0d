"""NuGet 包归档 (.nupkg) 读取

职责:
- 列出 / 读取归档条目（条目不存在时返回 None，而非抛异常）
- 解析 nuspec 依赖组、runtime.json
- 为目标框架选择运行时资产 / 编译资产
"""

from __future__ import annotations

import io
import json
import logging
import posixpath
import zipfile
from xml.etree import ElementTree

from inboxpkgs.core.exceptions import PackageFormatError
from inboxpkgs.core.frameworks import Framework, FrameworkReducer
from inboxpkgs.core.nuget.models import PackageDependency, RuntimeGraph

logger = logging.getLogger(__name__)

ASSEMBLY_EXTENSIONS = (".dll", ".exe", ".winmd")
# 空文件夹占位符，表示该框架下有意不提供资产
PLACEHOLDER_FILE = "_._"


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


class PackageArchive:
    """单个 .nupkg 的只读视图"""

    def __init__(self, data: bytes, *, source: str = "") -> None:
        self.source = source or "<memory>"
        try:
            self._zip = zipfile.ZipFile(io.BytesIO(data))
        except zipfile.BadZipFile as e:
            raise PackageFormatError(f"无法打开包归档 {self.source}: {e}") from e
        # 小写路径 -> 原始路径，条目查找大小写不敏感
        self._names: dict[str, str] = {}
        for name in self._zip.namelist():
            if name.endswith("/"):
                continue
            normalized = name.replace("\\", "/")
            self._names[normalized.lower()] = name
        self._reducer = FrameworkReducer()

    def close(self) -> None:
        self._zip.close()

    def __enter__(self) -> PackageArchive:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # 条目访问
    # ------------------------------------------------------------------

    def files(self, folder: str = "") -> list[str]:
        """列出条目路径（统一使用 /），可按顶层目录过滤"""
        names = sorted(original.replace("\\", "/") for original in self._names.values())
        if not folder:
            return names
        prefix = folder.strip("/").lower() + "/"
        return [n for n in names if n.lower().startswith(prefix)]

    def find_file(self, suffix: str) -> str | None:
        """找出第一个以 suffix 结尾的条目"""
        suffix = suffix.lower()
        for name in self.files():
            if name.lower().endswith(suffix):
                return name
        return None

    def read(self, path: str) -> bytes | None:
        original = self._names.get(path.replace("\\", "/").lower())
        if original is None:
            return None
        try:
            return self._zip.read(original)
        except (zipfile.BadZipFile, OSError) as e:
            raise PackageFormatError(f"读取条目失败 {self.source}!{path}: {e}") from e

    def read_text(self, path: str) -> str | None:
        data = self.read(path)
        if data is None:
            return None
        return data.decode("utf-8-sig", errors="replace")

    # ------------------------------------------------------------------
    # nuspec / runtime.json
    # ------------------------------------------------------------------

    def _nuspec_root(self) -> ElementTree.Element | None:
        nuspec = next(
            (n for n in self.files() if "/" not in n and n.lower().endswith(".nuspec")),
            None,
        )
        if nuspec is None:
            return None
        try:
            return ElementTree.fromstring(self.read(nuspec) or b"")
        except ElementTree.ParseError as e:
            raise PackageFormatError(f"nuspec 解析失败 {self.source}: {e}") from e

    def dependency_groups(self) -> dict[Framework, list[PackageDependency]]:
        """按目标框架分组的依赖声明，无分组的依赖归入 Any"""
        root = self._nuspec_root()
        groups: dict[Framework, list[PackageDependency]] = {}
        if root is None:
            return groups

        for element in root.iter():
            if _local_name(element.tag) != "dependencies":
                continue
            flat: list[PackageDependency] = []
            for child in element:
                name = _local_name(child.tag)
                if name == "group":
                    framework = Framework.parse_lenient(child.get("targetFramework"))
                    deps = groups.setdefault(framework, [])
                    for dep in child:
                        if _local_name(dep.tag) == "dependency" and dep.get("id"):
                            deps.append(PackageDependency(dep.get("id", ""), dep.get("version", "")))
                elif name == "dependency" and child.get("id"):
                    flat.append(PackageDependency(child.get("id", ""), child.get("version", "")))
            if flat:
                groups.setdefault(Framework.parse_lenient(""), []).extend(flat)
        return groups

    def runtime_graph(self) -> RuntimeGraph | None:
        """读取 runtime.json，不存在时返回 None"""
        text = self.read_text("runtime.json")
        if text is None:
            return None
        try:
            return RuntimeGraph.from_dict(json.loads(text))
        except (json.JSONDecodeError, AttributeError, TypeError) as e:
            raise PackageFormatError(f"runtime.json 格式错误 {self.source}: {e}") from e

    # ------------------------------------------------------------------
    # 资产选择
    # ------------------------------------------------------------------

    def _asset_groups(self, folder: str) -> dict[Framework, list[str]]:
        """把 folder/<tfm>/... 下的文件按框架分组"""
        depth = folder.count("/") + 1
        groups: dict[Framework, list[str]] = {}
        for name in self.files(folder):
            parts = name.split("/")
            if len(parts) <= depth + 1:
                # 直接位于 folder/ 下的文件视为与框架无关
                framework = Framework.parse_lenient("")
            else:
                framework = Framework.parse_lenient(parts[depth])
            if framework.is_unsupported:
                continue
            groups.setdefault(framework, []).append(name)
        return groups

    def _best_assets(self, folder: str, framework: Framework) -> list[str] | None:
        groups = self._asset_groups(folder)
        nearest = self._reducer.get_nearest(framework, groups)
        if nearest is None:
            return None
        return [
            name for name in groups[nearest]
            if posixpath.basename(name) != PLACEHOLDER_FILE
            and name.lower().endswith(ASSEMBLY_EXTENSIONS)
        ]

    def runtime_assets(self, framework: Framework) -> list[str] | None:
        """与 RID 无关的运行时资产 lib/<tfm>/"""
        return self._best_assets("lib", framework)

    def runtime_assets_for_rid(self, framework: Framework, rid: str) -> list[str] | None:
        """特定 RID 的运行时资产 runtimes/<rid>/lib/<tfm>/"""
        return self._best_assets(f"runtimes/{rid}/lib", framework)

    def compile_assets(self, framework: Framework) -> list[str] | None:
        """编译资产：优先 ref/<tfm>/，没有 ref 目录时退回 lib/"""
        if self.files("ref"):
            return self._best_assets("ref", framework)
        return self._best_assets("lib", framework)
