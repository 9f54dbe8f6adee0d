"""Web API 端点测试"""

from __future__ import annotations

import pytest

from inboxpkgs.core.models import DEFAULT_FAMILY, WEB_HOSTING_FAMILY
from inboxpkgs.core.registry import FrameworkPackageRegistry
from inboxpkgs.web.app import app


@pytest.fixture()
def client():
    """注入内存注册表的 Flask 测试客户端"""
    registry = FrameworkPackageRegistry.from_documents([
        {"framework": "netstandard2.0", "tables": {
            DEFAULT_FAMILY: {"packages": {"System.Buffers": "4.4.0"}},
        }},
        {"framework": "net6.0", "tables": {
            DEFAULT_FAMILY: {"parent": "netstandard2.0", "packages": {"System.Text.Json": "6.0.0"}},
            WEB_HOSTING_FAMILY: {"packages": {"Microsoft.Extensions.Logging": "6.0.0"}},
        }},
    ])
    app.config["TESTING"] = True
    app.config["INBOX_REGISTRY"] = registry
    with app.test_client() as c:
        yield c
    app.config.pop("INBOX_REGISTRY", None)


class TestGlobalErrorHandlers:
    def test_404_returns_json(self, client) -> None:
        resp = client.get("/api/nonexistent")
        assert resp.status_code == 404
        assert "error" in resp.get_json()

    def test_405_returns_json(self, client) -> None:
        resp = client.delete("/api/frameworks")
        assert resp.status_code == 405
        assert "error" in resp.get_json()

    def test_healthz(self, client) -> None:
        assert client.get("/healthz").get_json() == {"status": "ok"}


class TestApiFrameworks:
    def test_list(self, client) -> None:
        data = client.get("/api/frameworks").get_json()
        assert data["families"] == {
            DEFAULT_FAMILY: ["net6.0", "netstandard2.0"],
            WEB_HOSTING_FAMILY: ["net6.0"],
        }

    def test_packages(self, client) -> None:
        data = client.get("/api/frameworks/net6.0/packages").get_json()
        assert data["parent"] == "netstandard2.0"
        assert data["framework_name"] == "Microsoft.NETCore.App"
        assert data["packages"] == {"System.Text.Json": "6.0.0"}

    def test_packages_flatten(self, client) -> None:
        data = client.get("/api/frameworks/net6.0/packages?flatten=1").get_json()
        assert data["packages"] == {"System.Buffers": "4.4.0", "System.Text.Json": "6.0.0"}

    def test_packages_overlay_family(self, client) -> None:
        data = client.get(f"/api/frameworks/net6.0/packages?family={WEB_HOSTING_FAMILY}").get_json()
        assert data["packages"] == {"Microsoft.Extensions.Logging": "6.0.0"}

    def test_packages_not_found(self, client) -> None:
        resp = client.get("/api/frameworks/netstandard1.0/packages")
        assert resp.status_code == 404

    def test_packages_invalid_framework(self, client) -> None:
        resp = client.get("/api/frameworks/monoandroid/packages")
        assert resp.status_code == 400
        assert resp.get_json()["code"] == "FRAMEWORK_PARSE_ERROR"


class TestApiInbox:
    def test_in_box_inherited(self, client) -> None:
        data = client.get("/api/inbox?framework=net6.0&package=System.Buffers&version=4.3.0").get_json()
        assert data["in_box"] is True
        assert data["inbox_version"] == "4.4.0"

    def test_not_in_box(self, client) -> None:
        data = client.get("/api/inbox?framework=net6.0&package=System.Buffers&version=4.5.0").get_json()
        assert data["in_box"] is False

    def test_all_families_by_default(self, client) -> None:
        url = "/api/inbox?framework=net6.0&package=Microsoft.Extensions.Logging&version=6.0.0"
        assert client.get(url).get_json()["in_box"] is True
        assert client.get(url + f"&family={DEFAULT_FAMILY}").get_json()["in_box"] is False

    def test_missing_params(self, client) -> None:
        resp = client.get("/api/inbox?framework=net6.0")
        assert resp.status_code == 400

    def test_invalid_version_with_family(self, client) -> None:
        resp = client.get(f"/api/inbox?framework=net6.0&package=A&version=x.y&family={DEFAULT_FAMILY}")
        assert resp.status_code == 400
        assert resp.get_json()["code"] == "VALIDATION_ERROR"
