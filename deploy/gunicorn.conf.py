"""Gunicorn 生产配置

用法:
  gunicorn --config deploy/gunicorn.conf.py inboxpkgs.web.app:app

INBOXPKGS_CONFIG 指定配置文件（其中 data_dir 决定加载哪一组框架包表）。
"""

import multiprocessing
import os

bind = os.getenv("INBOXPKGS_BIND", "0.0.0.0:8888")

# 注册表只读，同一 worker 内的线程共享一份
workers = int(os.getenv("INBOXPKGS_WORKERS", min(multiprocessing.cpu_count() + 1, 4)))
threads = int(os.getenv("INBOXPKGS_THREADS", "4"))
worker_class = "gthread"
timeout = 30
graceful_timeout = 15
keepalive = 5

accesslog = os.getenv("INBOXPKGS_ACCESS_LOG", "-")
errorlog = "-"
loglevel = os.getenv("INBOXPKGS_LOG_LEVEL", "info").lower()


def post_worker_init(worker):
    """worker 启动后先加载注册表，数据有误时在接收请求前失败"""
    from inboxpkgs.core.config import init_config
    from inboxpkgs.core.registry import default_registry

    init_config(os.getenv("INBOXPKGS_CONFIG", "configs/default.yml"))
    registry = default_registry()
    worker.log.info("框架包注册表已就绪: %s", ", ".join(registry.families()))
