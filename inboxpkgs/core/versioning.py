"""版本号模型与比较

数据类:
- NumericVersion: 程序集 / 文件版本（2~4 段纯数字）
- NuGetVersion: 包版本（major.minor.patch[.revision][-prerelease][+metadata]）
- VersionPair: (程序集版本, 文件版本) 二元组，字典序比较

比较规则:
  - NumericVersion 缺失的分量排在更小一侧，空版本最小
  - NuGetVersion 预发布版本低于同号正式版本，metadata 不参与比较
  - 包表中只保存三段式版本 (as_three_part)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Iterable

from inboxpkgs.core.exceptions import ValidationError

_NUGET_VERSION_RE = re.compile(
    r"^\s*[vV]?(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:\.(\d+))?"
    r"(?:-([0-9A-Za-z\-.]+))?(?:\+([0-9A-Za-z\-.]+))?\s*$"
)


@dataclass(frozen=True, order=True)
class NumericVersion:
    """纯数字版本，对应程序集元数据中的 AssemblyVersion / FileVersion"""

    parts: tuple[int, ...] = ()

    @classmethod
    def parse(cls, text: str | None) -> NumericVersion:
        """解析 "4.0.0.0" 形式的版本，空串返回空版本"""
        if not text or not text.strip():
            return cls()
        try:
            parts = tuple(int(p) for p in text.strip().split("."))
        except ValueError as e:
            raise ValidationError(f"无效的数字版本: {text}") from e
        if not 1 <= len(parts) <= 4 or any(p < 0 for p in parts):
            raise ValidationError(f"无效的数字版本: {text}")
        return cls(parts)

    def __bool__(self) -> bool:
        return bool(self.parts)

    def __str__(self) -> str:
        return ".".join(str(p) for p in self.parts)


def _release_key(release: str) -> tuple:
    # 正式版排在所有预发布版之后
    if not release:
        return (1,)
    labels = []
    for label in release.split("."):
        if label.isdigit():
            labels.append((0, int(label), ""))
        else:
            labels.append((1, 0, label.lower()))
    return (0, tuple(labels))


@total_ordering
@dataclass(frozen=True, eq=False)
class NuGetVersion:
    """NuGet 包版本"""

    major: int
    minor: int = 0
    patch: int = 0
    revision: int = 0
    release: str = ""
    metadata: str = field(default="", repr=False)

    @classmethod
    def parse(cls, text: str) -> NuGetVersion:
        m = _NUGET_VERSION_RE.match(text or "")
        if not m:
            raise ValidationError(f"无效的包版本: {text!r}")
        major, minor, patch, revision, release, metadata = m.groups()
        return cls(
            major=int(major),
            minor=int(minor or 0),
            patch=int(patch or 0),
            revision=int(revision or 0),
            release=release or "",
            metadata=metadata or "",
        )

    @property
    def is_prerelease(self) -> bool:
        return bool(self.release)

    def as_three_part(self) -> NuGetVersion:
        """截断为 major.minor.patch，丢弃 revision 与预发布标签"""
        return NuGetVersion(self.major, self.minor, self.patch)

    def _key(self) -> tuple:
        return (
            self.major, self.minor, self.patch, self.revision,
            _release_key(self.release),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NuGetVersion):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: NuGetVersion) -> bool:
        if not isinstance(other, NuGetVersion):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.revision:
            text += f".{self.revision}"
        if self.release:
            text += f"-{self.release}"
        return text


def parse_version_range_min(text: str) -> NuGetVersion | None:
    """取版本区间的下界

    "1.0" -> 1.0.0, "[1.0, 2.0)" -> 1.0.0, "(, 2.0]" -> None
    """
    text = (text or "").strip()
    if not text:
        return None
    if text[0] not in "[(":
        return NuGetVersion.parse(text)
    lower = text[1:].rstrip("])").split(",", 1)[0].strip()
    if not lower:
        return None
    return NuGetVersion.parse(lower)


@dataclass(frozen=True, order=True)
class VersionPair:
    """(程序集版本, 文件版本)，先比较程序集版本，相等时比较文件版本"""

    assembly_version: NumericVersion
    file_version: NumericVersion = NumericVersion()

    @classmethod
    def parse(cls, assembly_version: str, file_version: str = "") -> VersionPair:
        return cls(NumericVersion.parse(assembly_version), NumericVersion.parse(file_version))

    def __str__(self) -> str:
        return f"{self.assembly_version}/{self.file_version or '-'}"


def package_wins(candidates: Iterable[VersionPair], reference: VersionPair) -> bool:
    """判断包内二进制是否比参考基线更新（包"胜出"）

    逐个资产比较:
      - 程序集版本更高 -> 胜出
      - 程序集版本更低 -> 落败，停止比较
      - 程序集版本相同且文件版本更高 -> 胜出
      - 文件版本相同或更低 -> 本资产落败，继续看下一个资产
    """
    for pair in candidates:
        if pair.assembly_version > reference.assembly_version:
            return True
        if pair.assembly_version < reference.assembly_version:
            return False
        if pair.file_version > reference.file_version:
            return True
    return False
