"""Flask dashboard and JSON API."""

from unittest.mock import patch

import pytest

from termux_stack.webapp import create_app


@pytest.fixture
def client(cfg, fake_services):
    fake_services[0].running = True
    app = create_app(cfg, metrics_interval=0)
    app.config["TESTING"] = True
    with patch("termux_stack.webapp.build_services", return_value=fake_services):
        yield app.test_client()


@pytest.mark.parametrize("path", ["/", "/dashboard"])
def test_dashboard_renders(client, path):
    r = client.get(path)
    assert r.status_code == 200
    body = r.get_data(as_text=True)
    assert "Termux Server Dashboard" in body
    assert "/api/status" in body


def test_status_reports_live_services(client):
    data = client.get("/api/status").get_json()
    assert data["status"] == "online"
    assert data["services"] == {"nginx": "running", "flask": "running", "ssh": "stopped"}
    assert "T" in data["timestamp"]


def test_system_info_fields(client):
    data = client.get("/api/system").get_json()
    for key in ("python_version", "platform", "hostname", "uptime", "local_ip", "cpu_usage", "memory_usage"):
        assert key in data


def test_system_info_degrades_when_psutil_fails(client):
    with patch("termux_stack.lib.sysinfo.psutil.boot_time", side_effect=PermissionError("denied")):
        data = client.get("/api/system").get_json()
    assert data["uptime"] == "Unknown"
    assert data["cpu_usage"] == 0


def test_network_lists_configured_ports(client):
    data = client.get("/api/network").get_json()
    assert data["ports"] == {"http": 8080, "https": 8443, "flask": 5000, "ssh": 8022}
    assert data["protocols"] == ["HTTP", "HTTPS", "SSH"]


def test_echo_endpoint(client):
    assert client.get("/api/test").get_json()["method"] == "GET"
    r = client.post("/api/test", json={"hello": "termux"})
    data = r.get_json()
    assert data["method"] == "POST"
    assert data["received_data"] == {"hello": "termux"}


def test_unknown_route_is_404(client):
    assert client.get("/api/missing").status_code == 404
