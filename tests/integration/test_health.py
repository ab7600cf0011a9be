from unittest.mock import MagicMock

from booking_backend.health import service as health_service


def test_health_root(client):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["rate_limit"]["enabled"] is False

def test_health_supabase_ok(client, monkeypatch):
    monkeypatch.setattr(health_service, "SUPABASE_URL", "")
    r = client.get("/health/supabase")
    assert r.status_code == 200
    assert set(r.json()["tables"]) == {"bookings", "services"}

def test_health_supabase_down(client, monkeypatch):
    failing = MagicMock()
    failing.table.return_value.select.return_value.limit.return_value.execute.side_effect = ConnectionError("down")
    monkeypatch.setattr(health_service, "SUPABASE_URL", "")
    monkeypatch.setattr("booking_backend.infra.supabase_client.get_service_supabase", lambda: failing)
    r = client.get("/health/supabase")
    assert r.status_code == 503
    assert r.json()["tables"]["bookings"] == {"ok": False, "error": "ConnectionError"}
