import json

import pytest

from app.routevault import create_app


@pytest.fixture()
def env(tmp_path, monkeypatch):
    monkeypatch.setenv("SECRET_KEY", "test-secret")
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    monkeypatch.setenv("STORAGE_BACKEND", "local")
    monkeypatch.setenv("PASSWORD_HASH_METHOD", "pbkdf2:sha256:1000")
    monkeypatch.setenv("ADMIN_USERNAME", "admin")
    monkeypatch.setenv("ADMIN_PASSWORD", "dev-password")
    monkeypatch.setenv("SEED_LOCATIONS", "North Gate,South Gate")
    for k in ("S3_ENDPOINT", "S3_REGION", "S3_BUCKET", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY", "CORS_ORIGINS"):
        monkeypatch.delenv(k, raising=False)
    return tmp_path


@pytest.fixture()
def client(env):
    app = create_app()
    return app.test_client()


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json["ok"] is True

    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.data == b"ok"


@pytest.mark.parametrize("secret", ["", "change-me", "changeme", "secret"])
def test_missing_or_default_secret_is_fatal(env, monkeypatch, secret):
    monkeypatch.setenv("SECRET_KEY", secret)
    with pytest.raises(RuntimeError):
        create_app()


def test_fresh_store_is_seeded(env):
    create_app()
    raw = json.loads((env / "data.json").read_text(encoding="utf-8"))
    assert set(raw) == {"users", "pendingSubmissions", "approvedData", "logs"}
    assert [(u["id"], u["username"], u["role"]) for u in raw["users"]] == [(1, "admin", "developer")]
    assert raw["users"][0]["passwordHash"] != "dev-password"
    assert [loc["name"] for loc in raw["approvedData"]["locations"]] == ["North Gate", "South Gate"]
    assert raw["approvedData"]["routes"] == {}


def test_existing_store_is_not_reseeded(env, monkeypatch):
    create_app()
    path = env / "data.json"
    raw = json.loads(path.read_text(encoding="utf-8"))
    raw["approvedData"]["locations"] = []
    path.write_text(json.dumps(raw), encoding="utf-8")

    create_app()
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["approvedData"]["locations"] == []


def test_unknown_api_path_returns_json_404(client):
    r = client.get("/api/nope")
    assert r.status_code == 404
    assert "error" in r.json


def test_security_headers_present(client):
    r = client.get("/health")
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "SAMEORIGIN"


def test_cors_origin_allowed_when_configured(env, monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "https://routes.example.com")
    c = create_app().test_client()
    r = c.get("/health", headers={"Origin": "https://routes.example.com"})
    assert r.headers["Access-Control-Allow-Origin"] == "https://routes.example.com"

    r = c.get("/health", headers={"Origin": "https://evil.example.com"})
    assert "Access-Control-Allow-Origin" not in r.headers
