import pytest
from fastapi import FastAPI, Depends
from fastapi.testclient import TestClient

from booking_backend.utils.rate_limit import optional_rate_limit


def _app():
    app = FastAPI()

    @app.get("/limited", dependencies=[Depends(optional_rate_limit(times=2, seconds=60))])
    def limited():
        return {"ok": True}
    return app

def test_local_fallback_returns_429(monkeypatch):
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")
    client = TestClient(_app())
    assert client.get("/limited").status_code == 200
    assert client.get("/limited").status_code == 200
    assert client.get("/limited").status_code == 429

def test_forwarded_header_does_not_reset_window(monkeypatch):
    monkeypatch.setenv("LOCAL_RATE_LIMIT_FALLBACK", "1")
    client = TestClient(_app())
    codes = [
        client.get("/limited", headers={"X-Forwarded-For": f"10.0.0.{i}"}).status_code
        for i in range(10)
    ]
    assert codes[:2] == [200, 200]
    assert set(codes[2:]) == {429}

def test_disabled_limiter_lets_requests_through(monkeypatch):
    monkeypatch.delenv("LOCAL_RATE_LIMIT_FALLBACK", raising=False)
    app = _app()
    app.state.rate_limit_enabled = False
    client = TestClient(app)
    assert all(client.get("/limited").status_code == 200 for _ in range(5))
