import logging

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from kanban_lists.auth import get_user_id_dependency
from kanban_lists.settings import get_settings


def whoami_client() -> TestClient:
    dep = get_user_id_dependency()
    app = FastAPI()

    @app.get("/whoami")
    def whoami(user_id=Depends(dep)):
        return {"user_id": user_id}

    return TestClient(app)


class TestHeaderUser:
    def test_header_sets_user(self, monkeypatch):
        monkeypatch.delenv("ENABLE_BASIC_AUTH", raising=False)
        client = whoami_client()
        assert client.get("/whoami", headers={"X-User-Id": "alice"}).json() == {"user_id": "alice"}
        assert client.get("/whoami").json() == {"user_id": None}

    def test_custom_header(self, monkeypatch):
        monkeypatch.delenv("ENABLE_BASIC_AUTH", raising=False)
        monkeypatch.setenv("USER_ID_HEADER", "X-Actor")
        client = whoami_client()
        assert client.get("/whoami", headers={"X-Actor": "bob"}).json() == {"user_id": "bob"}


class TestBasicAuthUser:
    def test_valid_credentials(self, monkeypatch):
        monkeypatch.setenv("ENABLE_BASIC_AUTH", "true")
        monkeypatch.setenv("BASIC_AUTH_USERNAME", "alice")
        monkeypatch.setenv("BASIC_AUTH_PASSWORD", "s3cret")
        client = whoami_client()
        assert client.get("/whoami", auth=("alice", "s3cret")).json() == {"user_id": "alice"}

    def test_missing_and_invalid_credentials(self, monkeypatch):
        monkeypatch.setenv("ENABLE_BASIC_AUTH", "true")
        monkeypatch.setenv("BASIC_AUTH_USERNAME", "alice")
        monkeypatch.setenv("BASIC_AUTH_PASSWORD", "s3cret")
        client = whoami_client()

        res = client.get("/whoami")
        assert res.status_code == 401
        assert res.headers["WWW-Authenticate"] == "Basic"

        res = client.get("/whoami", auth=("alice", "wrong"))
        assert res.status_code == 401
        assert res.json()["detail"] == "Invalid authentication credentials"

    def test_unconfigured_server(self, monkeypatch):
        monkeypatch.setenv("ENABLE_BASIC_AUTH", "true")
        monkeypatch.delenv("BASIC_AUTH_USERNAME", raising=False)
        monkeypatch.delenv("BASIC_AUTH_PASSWORD", raising=False)
        res = whoami_client().get("/whoami", auth=("alice", "s3cret"))
        assert res.status_code == 401
        assert res.json()["detail"] == "Server authentication not configured"


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("PERSISTENCE_BACKEND", "SQLITE_DB_PATH", "LOG_LEVEL", "USER_ID_HEADER"):
            monkeypatch.delenv(name, raising=False)
        settings = get_settings()
        assert settings.persistence_backend == "memory"
        assert settings.sqlite_db_path == "./data/lists.db"
        assert settings.user_id_header == "X-User-Id"
        assert settings.log_level == logging.INFO

    def test_unknown_backend_and_level_fall_back(self, monkeypatch):
        monkeypatch.setenv("PERSISTENCE_BACKEND", "mongo")
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        settings = get_settings()
        assert settings.persistence_backend == "memory"
        assert settings.log_level == logging.INFO

    def test_origins(self, monkeypatch):
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.example, https://b.example")
        assert get_settings().cors_allow_origins == ["https://a.example", "https://b.example"]
