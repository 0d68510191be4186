# tests/test_cors.py

from __future__ import annotations

from fastapi.testclient import TestClient

from taskboard.middleware.cors import DEV_ORIGINS, cors_settings


def test_development_admits_dev_servers_and_frontend() -> None:
    settings = cors_settings({"FRONTEND_URL": "https://tasks.example.com"})

    assert settings["allow_origins"] == [*DEV_ORIGINS, "https://tasks.example.com"]
    assert settings["allow_methods"] == ["*"]


def test_frontend_already_listed_is_not_duplicated() -> None:
    assert cors_settings({"FRONTEND_URL": "http://localhost:5173"})["allow_origins"] == DEV_ORIGINS


def test_production_admits_only_frontend() -> None:
    settings = cors_settings({"ENVIRONMENT": "production", "FRONTEND_URL": "https://tasks.example.com"})

    assert settings["allow_origins"] == ["https://tasks.example.com"]
    assert "PUT" in settings["allow_methods"]
    assert "allow_credentials" not in settings


def test_preflight_from_dev_server(client: TestClient) -> None:
    response = client.options(
        "/api/tasks",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
