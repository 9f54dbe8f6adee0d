"""内置包查询 API Blueprint

职责:
- 框架族与框架列表
- 单个框架的内置包表
- 包版本内置判定
"""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, request

from inboxpkgs.core.exceptions import InboxError
from inboxpkgs.core.models import DEFAULT_FAMILY
from inboxpkgs.core.registry import FrameworkPackageRegistry, default_registry
from inboxpkgs.web.responses import bad_request, inbox_error, not_found, ok

logger = logging.getLogger(__name__)

inbox_bp = Blueprint("inbox", __name__, url_prefix="/api")


def _registry() -> FrameworkPackageRegistry:
    """测试时可通过 app.config["INBOX_REGISTRY"] 注入"""
    return current_app.config.get("INBOX_REGISTRY") or default_registry()


@inbox_bp.route("/frameworks")
def api_frameworks():
    registry = _registry()
    return ok({
        "families": {
            family: [str(fw) for fw in registry.frameworks(family)]
            for family in registry.families()
        },
    })


@inbox_bp.route("/frameworks/<framework>/packages")
def api_framework_packages(framework: str):
    """框架包表，?flatten=1 时合并父链"""
    family = request.args.get("family", DEFAULT_FAMILY)
    try:
        node = _registry().get(family, framework)
    except InboxError as e:
        return inbox_error(e)
    if node is None:
        return not_found(f"框架包表 {family}/{framework} ")

    if request.args.get("flatten", "") in ("1", "true"):
        packages = node.flatten()
    else:
        packages = {node.names[key]: v for key, v in node.packages.items()}
    return ok({
        "framework": str(node.framework),
        "family": node.family,
        "framework_name": node.framework_name,
        "parent": str(node.parent.framework) if node.parent else None,
        "packages": {pid: str(v) for pid, v in sorted(packages.items(), key=lambda kv: kv[0].lower())},
    })


@inbox_bp.route("/inbox")
def api_inbox():
    """?framework=&package=&version=[&family=]"""
    framework = request.args.get("framework", "").strip()
    package_id = request.args.get("package", "").strip()
    version = request.args.get("version", "").strip()
    family = request.args.get("family", "").strip() or None
    if not framework or not package_id or not version:
        return bad_request("需要提供 framework、package 和 version")

    registry = _registry()
    try:
        if family:
            in_box = registry.is_in_box(family, framework, package_id, version)
        else:
            in_box = registry.is_framework_package(framework, package_id, version)
        inbox_version = registry.lookup(family or DEFAULT_FAMILY, framework, package_id)
    except InboxError as e:
        return inbox_error(e)

    return ok({
        "framework": framework,
        "package": package_id,
        "version": version,
        "family": family,
        "in_box": in_box,
        "inbox_version": str(inbox_version) if inbox_version else None,
    })
