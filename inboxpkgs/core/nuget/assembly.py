"""程序集版本读取

从 PE 文件读取 (AssemblyVersion, FileVersion):
  - AssemblyVersion: CLI 元数据 Assembly 表
  - FileVersion: Win32 版本资源 VS_FIXEDFILEINFO
"""

from __future__ import annotations

import logging

import dnfile
import pefile

from inboxpkgs.core.exceptions import PackageFormatError
from inboxpkgs.core.versioning import NumericVersion, VersionPair

logger = logging.getLogger(__name__)


def _file_version(pe: pefile.PE) -> NumericVersion:
    infos = getattr(pe, "VS_FIXEDFILEINFO", None)
    if not infos:
        return NumericVersion()
    info = infos[0]
    return NumericVersion((
        info.FileVersionMS >> 16,
        info.FileVersionMS & 0xFFFF,
        info.FileVersionLS >> 16,
        info.FileVersionLS & 0xFFFF,
    ))


def read_version_pair(data: bytes, *, name: str = "") -> VersionPair:
    """解析程序集字节，返回 VersionPair

    Raises:
        PackageFormatError: 不是合法的 .NET 程序集
    """
    label = name or "<assembly>"
    try:
        pe = dnfile.dnPE(data=data)
    except pefile.PEFormatError as e:
        raise PackageFormatError(f"无法解析程序集 {label}: {e}") from e

    try:
        net = getattr(pe, "net", None)
        mdtables = getattr(net, "mdtables", None)
        table = getattr(mdtables, "Assembly", None) if mdtables is not None else None
        if table is None or not table.rows:
            raise PackageFormatError(f"程序集 {label} 缺少 Assembly 元数据表")
        row = table.rows[0]
        assembly_version = NumericVersion((
            row.MajorVersion, row.MinorVersion, row.BuildNumber, row.RevisionNumber,
        ))
        pair = VersionPair(assembly_version, _file_version(pe))
    finally:
        pe.close()

    logger.debug("程序集版本: %s -> %s", label, pair)
    return pair
