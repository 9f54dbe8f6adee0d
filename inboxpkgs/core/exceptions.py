"""统一异常体系

所有业务异常继承 InboxError，替代散落的 ValueError / RuntimeError。
CLI 层据此输出友好提示，Web 层据此映射 HTTP 状态码。
"""

from __future__ import annotations


class InboxError(Exception):
    """基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(InboxError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class RegistryError(InboxError):
    """包源不可用或响应格式错误"""

    code = "REGISTRY_ERROR"


class PackageFormatError(InboxError):
    """包归档损坏或结构不符合预期"""

    code = "PACKAGE_FORMAT_ERROR"


class FrameworkParseError(InboxError, ValueError):
    """无法识别的目标框架名"""

    code = "FRAMEWORK_PARSE_ERROR"


class ValidationError(InboxError, ValueError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []
