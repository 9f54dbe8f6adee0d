"""目标框架标识与兼容性归约

职责:
- 解析短文件夹名 (netstandard2.0 / netcoreapp2.1 / net6.0-windows / net472)
  与完整名 (.NETCoreApp,Version=v2.1 / .NETStandard1.3)
- 判断框架兼容性：target 能否消费为 candidate 构建的资产
- FrameworkReducer.get_nearest: 在候选集中找出与目标兼容的最具体框架

兼容规则:
  - 同一框架族: 版本不高于目标，且平台一致（或候选无平台）
  - .NETStandard 可被 .NETCoreApp / .NETFramework 按映射表消费
  - Any 可被任何框架消费；Unsupported 只与自身兼容

旧式 dotnet / dotnet5.x 文件夹按 NuGet 的等价关系映射为 netstandard1.x
(dotnet5.1 -> netstandard1.0 ... dotnet5.6 -> netstandard1.5，无版本的 dotnet 视为 netstandard1.0)。
portable-* 可移植类库文件夹解析为 Unsupported，资产选择会忽略它们。
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from inboxpkgs.core.exceptions import FrameworkParseError

NETSTANDARD = ".NETStandard"
NETCOREAPP = ".NETCoreApp"
NETFRAMEWORK = ".NETFramework"
ANY = "Any"
UNSUPPORTED = "Unsupported"

_IDENTIFIER_ALIASES = {
    "netstandard": NETSTANDARD,
    ".netstandard": NETSTANDARD,
    "netcoreapp": NETCOREAPP,
    ".netcoreapp": NETCOREAPP,
    ".netframework": NETFRAMEWORK,
    "netframework": NETFRAMEWORK,
    "net": NETFRAMEWORK,
}

_FULL_NAME_RE = re.compile(
    r"^(?P<id>\.?[a-z]+)\s*,\s*version=v?(?P<ver>\d+(?:\.\d+)*)(?:\s*,\s*profile=\w+)?$"
)
_DOTNET_RE = re.compile(r"^dotnet(?:5\.(?P<minor>\d))?$")

_SHORT_NAME_RE = re.compile(
    r"^(?P<id>\.?[a-z]+?)(?P<ver>\d+(?:\.\d+)*)"
    r"(?:-(?P<plat>[a-z]+)(?P<platver>\d+(?:\.\d+)*)?)?$"
)

# 各框架能消费的最高 netstandard 版本（按框架版本降序）
_NETSTANDARD_SUPPORT = {
    NETCOREAPP: [((3, 0), (2, 1)), ((2, 0), (2, 0)), ((1, 0), (1, 6))],
    NETFRAMEWORK: [
        ((4, 6, 1), (2, 0)),
        ((4, 6), (1, 3)),
        ((4, 5, 1), (1, 2)),
        ((4, 5), (1, 1)),
    ],
}


def _normalize(parts: Iterable[int]) -> tuple[int, ...]:
    values = list(parts)
    while len(values) > 2 and values[-1] == 0:
        values.pop()
    while len(values) < 2:
        values.append(0)
    return tuple(values)


def _padded(version: tuple[int, ...]) -> tuple[int, ...]:
    return tuple(version) + (0,) * (4 - len(version))


def _dotted(text: str) -> tuple[int, ...]:
    return tuple(int(p) for p in text.split("."))


@dataclass(frozen=True)
class Framework:
    """目标框架标识"""

    identifier: str
    version: tuple[int, ...] = ()
    platform: str = ""
    platform_version: tuple[int, ...] = ()

    @classmethod
    def parse(cls, name: str) -> Framework:
        """严格解析，无法识别时抛 FrameworkParseError"""
        framework = cls.parse_lenient(name)
        if framework.identifier == UNSUPPORTED:
            raise FrameworkParseError(f"无法识别的目标框架: {name!r}")
        return framework

    @classmethod
    def parse_lenient(cls, name: str | None) -> Framework:
        """宽松解析，无法识别的框架返回 Unsupported（nuspec 依赖组常见）"""
        text = (name or "").strip().lower()
        if text in ("", "any", "agnostic"):
            return cls(ANY)

        m = _DOTNET_RE.match(text)
        if m:
            minor = int(m.group("minor") or 1)
            if minor <= 6:
                return cls(NETSTANDARD, (1, max(minor - 1, 0)))
            return cls(UNSUPPORTED, platform=text)

        m = _FULL_NAME_RE.match(text)
        if m:
            identifier = _IDENTIFIER_ALIASES.get(m.group("id"))
            if identifier:
                version = _dotted(m.group("ver"))
                if identifier == NETFRAMEWORK and m.group("id") == "net" and version[0] >= 5:
                    identifier = NETCOREAPP
                return cls(identifier, _normalize(version))

        m = _SHORT_NAME_RE.match(text)
        if m:
            raw_id, raw_ver = m.group("id"), m.group("ver")
            identifier = _IDENTIFIER_ALIASES.get(raw_id)
            if identifier == NETFRAMEWORK and raw_id == "net":
                if "." in raw_ver:
                    version = _dotted(raw_ver)
                    if version[0] >= 5:
                        identifier = NETCOREAPP
                else:
                    # net472 -> 4.7.2
                    version = tuple(int(c) for c in raw_ver)
            elif identifier is not None:
                version = _dotted(raw_ver)
            if identifier is not None:
                platform = m.group("plat") or ""
                if platform and identifier != NETCOREAPP:
                    return cls(UNSUPPORTED, platform=text)
                platform_version = m.group("platver")
                return cls(
                    identifier,
                    _normalize(version),
                    platform=platform,
                    platform_version=_dotted(platform_version) if platform_version else (),
                )

        return cls(UNSUPPORTED, platform=text)

    @property
    def is_unsupported(self) -> bool:
        return self.identifier == UNSUPPORTED

    @property
    def version_text(self) -> str:
        return ".".join(str(p) for p in self.version)

    @property
    def short_folder_name(self) -> str:
        if self.identifier == NETSTANDARD:
            return f"netstandard{self.version_text}"
        if self.identifier == NETCOREAPP:
            if self.version[0] < 5:
                return f"netcoreapp{self.version_text}"
            name = f"net{self.version_text}"
            if self.platform:
                name += f"-{self.platform}"
                if self.platform_version:
                    name += ".".join(str(p) for p in self.platform_version)
            return name
        if self.identifier == NETFRAMEWORK:
            return "net" + "".join(str(p) for p in self.version)
        if self.identifier == ANY:
            return "any"
        return self.platform or "unsupported"

    @property
    def dotnet_framework_name(self) -> str:
        """如 .NETStandard,Version=v2.0"""
        if self.identifier in (ANY, UNSUPPORTED):
            return self.identifier
        return f"{self.identifier},Version=v{self.version_text}"

    @property
    def token(self) -> str:
        """可作为标识符的形式，如 NETCoreApp21"""
        return self.dotnet_framework_name.replace(",Version=v", "").replace(".", "")

    def __str__(self) -> str:
        return self.short_folder_name


def _max_netstandard(target: Framework) -> tuple[int, ...] | None:
    for min_version, netstandard in _NETSTANDARD_SUPPORT.get(target.identifier, []):
        if _padded(target.version) >= _padded(min_version):
            return netstandard
    return None


def is_compatible(target: Framework, candidate: Framework) -> bool:
    """target 是否能消费为 candidate 构建的资产"""
    if candidate.identifier == ANY:
        return True
    if target.identifier in (ANY, UNSUPPORTED) or candidate.identifier == UNSUPPORTED:
        return target == candidate

    if candidate.identifier == target.identifier:
        if _padded(candidate.version) > _padded(target.version):
            return False
        if not candidate.platform:
            return True
        return (
            candidate.platform == target.platform
            and _padded(candidate.platform_version) <= _padded(target.platform_version)
        )

    if candidate.identifier == NETSTANDARD:
        supported = _max_netstandard(target)
        return supported is not None and _padded(candidate.version) <= _padded(supported)

    return False


class FrameworkReducer:
    """框架归约器 - 在候选框架中挑选最接近目标的兼容框架"""

    def get_nearest(
        self, framework: Framework, candidates: Iterable[Framework],
    ) -> Framework | None:
        compatible = {c for c in candidates if is_compatible(framework, c)}
        if not compatible:
            return None

        def rank(c: Framework) -> tuple:
            return (
                c == framework,
                c.identifier == framework.identifier,
                c.identifier != ANY,
                _padded(c.version),
                c.platform == framework.platform,
                _padded(c.platform_version),
            )

        return max(compatible, key=rank)

    def get_ancestors(
        self, framework: Framework, candidates: Iterable[Framework],
    ) -> list[Framework]:
        """沿兼容链逐级查找祖先框架，从最近到最远"""
        pool = set(candidates)
        chain: list[Framework] = []
        seen = {framework}
        current = self.get_nearest(framework, pool - {framework})
        while current is not None and current not in seen:
            chain.append(current)
            seen.add(current)
            current = self.get_nearest(current, pool - {current})
        return chain
