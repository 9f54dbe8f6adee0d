"""inboxpkgs - 框架内置 NuGet 包表生成与查询"""

__version__ = "0.1.0"
