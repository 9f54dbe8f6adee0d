"""包源 URL 工具"""

from __future__ import annotations

from urllib.parse import quote, urlparse

from inboxpkgs.core.exceptions import ValidationError

FEED_SCHEMES = ("https", "http")


def validate_feed_url(url: str, *, context: str = "") -> None:
    """包源地址必须是带主机名的 http(s) URL

    Raises:
        ValidationError: 协议不在 FEED_SCHEMES 中，或缺少主机名
    """
    parsed = urlparse(url)
    label = f" ({context})" if context else ""
    if parsed.scheme not in FEED_SCHEMES:
        raise ValidationError(f"不允许的 URL 协议 '{parsed.scheme}'{label}: {url}")
    if not parsed.netloc:
        raise ValidationError(f"包源 URL 缺少主机名{label}: {url}")


def join_url(base: str, *segments: str) -> str:
    """在包源根地址后追加路径段，各段做百分号转义"""
    return "/".join([base.rstrip("/"), *(quote(s.strip("/"), safe="") for s in segments)])
