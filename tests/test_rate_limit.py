"""
Tests for the per-IP token bucket middleware (in-memory fallback)
"""
from fastapi import FastAPI
from fastapi.testclient import TestClient

from utils.rate_limit import RateLimiterMiddleware


def _app(requests_per_minute):
    app = FastAPI()
    app.add_middleware(RateLimiterMiddleware, requests_per_minute=requests_per_minute)

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    return app


def test_requests_beyond_bucket_are_rejected():
    client = TestClient(_app(2))

    assert client.get("/ping").status_code == 200
    assert client.get("/ping").status_code == 200

    limited = client.get("/ping")
    assert limited.status_code == 429
    assert limited.json()["error"] == "rate_limited"


def test_buckets_are_per_client_ip():
    client = TestClient(_app(1))

    assert client.get("/ping", headers={"X-Forwarded-For": "10.0.0.1"}).status_code == 200
    assert client.get("/ping", headers={"X-Forwarded-For": "10.0.0.1"}).status_code == 429
    assert client.get("/ping", headers={"X-Forwarded-For": "10.0.0.2, 10.0.0.1"}).status_code == 200


def test_zero_disables_limiting():
    client = TestClient(_app(0))
    for _ in range(5):
        assert client.get("/ping").status_code == 200
