"""内置包查询 Web API（基于 Flask）

启动方式: inboxpkgs serve --port 8888
生产部署: gunicorn --config deploy/gunicorn.conf.py inboxpkgs.web.app:app
"""

from __future__ import annotations

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from inboxpkgs.web.inbox_bp import inbox_bp

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.register_blueprint(inbox_bp)


# =========================================================================
# 全局 JSON 错误处理
# =========================================================================


@app.errorhandler(HTTPException)
def handle_http_exception(exc):
    """将所有 HTTP 异常统一返回 JSON"""
    return jsonify(error=exc.description), exc.code


@app.errorhandler(Exception)
def handle_generic_exception(exc):  # noqa: ARG001
    """捕获未处理异常，返回 500 JSON"""
    logger.exception("未处理的异常")
    return jsonify(error="服务器内部错误"), 500


@app.route("/healthz")
def healthz():
    return jsonify(status="ok")


def run_server(port: int = 8888, debug: bool = False, host: str = "127.0.0.1") -> None:
    logger.info("inboxpkgs 查询服务已启动: http://%s:%d", host, port)
    app.run(host=host, port=port, debug=debug)
