import pytest

from rememberme.notifications import client


class FakeResponse:
    def __init__(self, data=None, status_code=200):
        self.data = data
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise RuntimeError(f"HTTP {self.status_code}")

    def json(self):
        return self.data


@pytest.fixture
def calls(monkeypatch):
    recorded = []

    def fake(method):
        def _request(url, **kwargs):
            recorded.append((method, url, kwargs))
            return FakeResponse({"scheduled_times": []})
        return _request

    for method in ("get", "post", "put", "patch", "delete"):
        monkeypatch.setattr(client.requests, method, fake(method))
    monkeypatch.setenv("NOTIFICATION_SERVICE_URL", "http://notifications:8010/")
    return recorded


def test_push_calls_preferences_endpoints(calls):
    client.push_create_preferences("tok", {"notifications_per_day": 2})
    client.push_update_preferences("tok", {"timezone": "UTC"})
    client.push_toggle_preferences("tok", False)
    client.push_delete_preferences("tok")

    base = "http://notifications:8010/api/v1/notifications/preferences"
    assert [(m, u) for m, u, _ in calls] == [
        ("post", f"{base}/"),
        ("put", f"{base}/"),
        ("patch", f"{base}/toggle"),
        ("delete", f"{base}/"),
    ]
    assert calls[0][2]["headers"]["Authorization"] == "Bearer tok"
    assert calls[2][2]["json"] == {"is_active": False}


def test_fetch_schedule_info(calls):
    assert client.fetch_schedule_info("tok") == {"scheduled_times": []}
    assert calls[0][1].endswith("/preferences/jobs")


def test_base_url_from_host_and_port(monkeypatch):
    monkeypatch.delenv("NOTIFICATION_SERVICE_URL", raising=False)
    monkeypatch.setenv("NOTIFICATION_SERVICE_HOST", "localhost")
    monkeypatch.setenv("NOTIFICATION_SERVICE_PORT", "8010")
    assert client._resolve_base_url() == "http://localhost:8010"


def test_base_url_missing(monkeypatch):
    for name in ("NOTIFICATION_SERVICE_URL", "NOTIFICATION_SERVICE_HOST", "NOTIFICATION_SERVICE_PORT"):
        monkeypatch.delenv(name, raising=False)
    with pytest.raises(RuntimeError):
        client._resolve_base_url()
