from fastapi.testclient import TestClient
from jose import jwt

from inspection_api.api.main import create_app
from inspection_api.core.security import create_access_token
from inspection_api.core.settings import AppSettings
from inspection_api.services.storage import MemoryBlobStorage


def test_health_is_public(client: TestClient) -> None:
    res = client.get("/api/v1/health")
    assert res.status_code == 200
    assert res.json()["message"] == "Healthy"
    assert res.headers["X-Correlation-ID"]


def test_correlation_id_is_echoed(client: TestClient) -> None:
    res = client.get("/api/v1/health", headers={"X-Correlation-ID": "abc-123"})
    assert res.headers["X-Correlation-ID"] == "abc-123"


def test_login_and_me(client: TestClient) -> None:
    res = client.post(
        "/api/v1/auth/login",
        data={"username": "sourcebynet@gmail.com", "password": "sourcebynet@999"},
    )
    assert res.status_code == 200
    tokens = res.json()
    assert tokens["token_type"] == "bearer"

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert me.status_code == 200
    assert me.json() == {"email": "sourcebynet@gmail.com"}


def test_login_rejects_wrong_password(client: TestClient) -> None:
    res = client.post("/api/v1/auth/login", data={"username": "admin@inspectai.com", "password": "nope"})
    assert res.status_code == 401
    body = res.json()
    assert body["status"] == 401
    assert body["error"]["type"] == "http_error"
    assert body["path"] == "/api/v1/auth/login"


def test_protected_routes_need_token(client: TestClient) -> None:
    assert client.get("/api/v1/inspections").status_code == 401
    assert client.get("/api/v1/checkpoints", headers={"Authorization": "Bearer garbage"}).status_code == 401


def test_refresh_token_cannot_be_used_as_access_token(client: TestClient) -> None:
    tokens = client.post(
        "/api/v1/auth/login", data={"username": "admin@inspectai.com", "password": "admin123"}
    ).json()
    res = client.get("/api/v1/inspections", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
    assert res.status_code == 401


def test_refresh_issues_new_pair(client: TestClient) -> None:
    tokens = client.post(
        "/api/v1/auth/login", data={"username": "admin@inspectai.com", "password": "admin123"}
    ).json()
    res = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert res.status_code == 200
    assert client.get(
        "/api/v1/auth/me", headers={"Authorization": f"Bearer {res.json()['access_token']}"}
    ).status_code == 200

    bad = client.post("/api/v1/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert bad.status_code == 401


def test_token_for_unknown_account_is_rejected(client: TestClient, settings: AppSettings) -> None:
    token = create_access_token("someone@else.com", settings)
    res = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 401


def test_logout(client: TestClient) -> None:
    assert client.post("/api/v1/auth/logout").json()["message"] == "Logged out"


def test_tokens_follow_the_app_settings(generation) -> None:
    settings = AppSettings(
        _env_file=None,
        RUN_MIGRATIONS_ON_STARTUP=False,
        STORAGE_BACKEND="memory",
        JWT_SECRET_KEY="per-app-secret",
        ACCESS_TOKEN_EXPIRE_MINUTES=5,
    )
    app = create_app(settings, storage=MemoryBlobStorage(), generation_client=generation)
    with TestClient(app) as client:
        tokens = client.post(
            "/api/v1/auth/login", data={"username": "admin@inspectai.com", "password": "admin123"}
        ).json()
        claims = jwt.decode(tokens["access_token"], "per-app-secret", algorithms=["HS256"])
        assert claims["exp"] - claims["iat"] == 5 * 60

        me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
        assert me.status_code == 200

        foreign = create_access_token("admin@inspectai.com", AppSettings(_env_file=None, JWT_SECRET_KEY="x"))
        res = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {foreign}"})
        assert res.status_code == 401
