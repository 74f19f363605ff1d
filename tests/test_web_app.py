"""Tests for the FastAPI application."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from clientfinder.config import AppConfig
from clientfinder.index.store import StoreHolder
from clientfinder.web.app import create_app

CLIENTS = [
    {"id": 1, "name": "Alice Johnson", "email": "a@x.com"},
    {"id": 2, "name": "Bob Smith", "email": "b@x.com"},
    {"id": 3, "name": "Alicia Stone", "email": "a@x.com"},
    {"id": 4, "name": "Charlie", "email": "c@x.com"},
    {"id": 5, "name": "Dana", "email": "d@x.com"},
    {"id": 6, "name": "Eve", "email": "d@x.com"},
    {"id": 7, "name": "Frank", "phone": "555"},
]


@pytest.fixture
def data_path(tmp_path: Path) -> Path:
    path = tmp_path / "clients.json"
    path.write_text(json.dumps(CLIENTS), encoding="utf-8")
    return path


@pytest.fixture
def client(data_path: Path) -> TestClient:
    config = AppConfig(data_path=data_path)
    return TestClient(create_app(config))


def _ids(items) -> list:
    return [item["id"] for item in items]


class TestKeysEndpoint:
    """Tests for GET /api/keys."""

    def test_returns_field_names(self, client: TestClient) -> None:
        response = client.get("/api/keys")

        assert response.status_code == 200
        assert response.json() == ["id", "name", "email", "phone"]


class TestListEndpoint:
    """Tests for GET /api/list."""

    def test_defaults(self, client: TestClient) -> None:
        """Uses page 1 and 5 per page by default."""
        body = client.get("/api/list").json()

        assert body["page"] == 1
        assert body["per_page"] == 5
        assert body["total"] == 7
        assert _ids(body["clients"]) == [1, 2, 3, 4, 5]

    def test_second_page(self, client: TestClient) -> None:
        body = client.get("/api/list", params={"page": 2, "per_page": 3}).json()

        assert body["page"] == 2
        assert body["per_page"] == 3
        assert _ids(body["clients"]) == [4, 5, 6]

    def test_page_past_end(self, client: TestClient) -> None:
        """Returns an empty page, not an error."""
        response = client.get("/api/list", params={"page": 10})

        assert response.status_code == 200
        assert response.json()["clients"] == []
        assert response.json()["total"] == 7

    def test_records_serialised_as_objects(self, client: TestClient) -> None:
        body = client.get("/api/list", params={"per_page": 1}).json()

        assert body["clients"] == [CLIENTS[0]]

    @pytest.mark.parametrize("params", [{"page": 0}, {"per_page": 0}, {"page": "abc"}])
    def test_invalid_pagination(self, client: TestClient, params: dict) -> None:
        """Returns 400 for non-positive or non-numeric paging values."""
        response = client.get("/api/list", params=params)

        assert response.status_code == 400
        assert "Invalid query parameter" in response.json()["error"]

    def test_default_per_page_from_config(self, data_path: Path) -> None:
        client = TestClient(create_app(AppConfig(data_path=data_path, per_page=2)))

        body = client.get("/api/list").json()

        assert body["per_page"] == 2
        assert _ids(body["clients"]) == [1, 2]


class TestDuplicatesEndpoint:
    """Tests for GET /api/duplicates."""

    def test_returns_duplicates_in_store_order(self, client: TestClient) -> None:
        body = client.get("/api/duplicates").json()

        assert body["total"] == 4
        assert _ids(body["duplicates"]) == [1, 3, 5, 6]

    def test_paginated(self, client: TestClient) -> None:
        body = client.get("/api/duplicates", params={"page": 2, "per_page": 3}).json()

        assert _ids(body["duplicates"]) == [6]
        assert body["total"] == 4


class TestSearchEndpoint:
    """Tests for GET /api/search."""

    def test_search_by_name(self, client: TestClient) -> None:
        response = client.get("/api/search", params={"field": "name", "query": "ALI"})

        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        assert _ids(body["results"]) == [1, 3]

    def test_search_paginated(self, client: TestClient) -> None:
        body = client.get(
            "/api/search", params={"field": "name", "query": "ali", "page": 2, "per_page": 1}
        ).json()

        assert body["page"] == 2
        assert _ids(body["results"]) == [3]

    def test_empty_query_matches_records_with_field(self, client: TestClient) -> None:
        body = client.get("/api/search", params={"field": "phone", "query": ""}).json()

        assert _ids(body["results"]) == [7]

    def test_unknown_field(self, client: TestClient) -> None:
        body = client.get("/api/search", params={"field": "nope", "query": "x"}).json()

        assert body["total"] == 0
        assert body["results"] == []

    @pytest.mark.parametrize("params", [{"field": "name"}, {"query": "ali"}, {}])
    def test_missing_parameters(self, client: TestClient, params: dict) -> None:
        """Returns 400 when field or query is missing."""
        response = client.get("/api/search", params=params)

        assert response.status_code == 400
        assert response.json() == {"error": "Missing field or query parameter"}


class TestRefreshEndpoint:
    """Tests for POST /api/refresh."""

    def test_refresh_reloads_file(self, client: TestClient, data_path: Path) -> None:
        data_path.write_text(json.dumps(CLIENTS[:2]), encoding="utf-8")

        response = client.post("/api/refresh")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "total": 2, "detail": ""}
        assert client.get("/api/list").json()["total"] == 2

    def test_refresh_missing_file(self, client: TestClient, data_path: Path) -> None:
        data_path.unlink()

        body = client.post("/api/refresh").json()

        assert body["status"] == "not_found"
        assert body["total"] == 0
        assert client.get("/api/keys").json() == []


class TestErrors:
    """Tests for unknown routes and the error envelope."""

    def test_unknown_path(self, client: TestClient) -> None:
        response = client.get("/api/unknown")

        assert response.status_code == 404
        assert response.json() == {"error": "Not found"}

    def test_wrong_method(self, client: TestClient) -> None:
        response = client.get("/api/refresh")

        assert response.status_code == 405
        assert "error" in response.json()

    def test_missing_data_file(self, tmp_path: Path) -> None:
        """Serves an empty store when the data file is missing."""
        client = TestClient(create_app(AppConfig(data_path=tmp_path / "missing.json")))

        assert client.get("/api/keys").json() == []
        assert client.get("/api/list").json()["total"] == 0


class TestDocs:
    """Tests for the Swagger UI and OpenAPI document."""

    def test_swagger_json(self, client: TestClient) -> None:
        response = client.get("/swagger.json")

        assert response.status_code == 200
        assert "/api/search" in response.json()["paths"]

    def test_swagger_ui_at_root(self, client: TestClient) -> None:
        response = client.get("/")

        assert response.status_code == 200
        assert "swagger" in response.text.lower()


class TestThrottling:
    """Tests for per-client request limits."""

    def test_requests_over_limit_rejected(self, data_path: Path) -> None:
        client = TestClient(create_app(AppConfig(data_path=data_path, request_limit=2)))

        statuses = [client.get("/api/keys").status_code for _ in range(3)]

        assert statuses == [200, 200, 429]
        assert client.get("/api/keys").json() == {"error": "Too Many Requests"}

    def test_swagger_ui_not_throttled(self, data_path: Path) -> None:
        client = TestClient(create_app(AppConfig(data_path=data_path, request_limit=1)))

        client.get("/api/keys")

        assert client.get("/").status_code == 200


class TestCreateApp:
    """Tests for the app factory."""

    def test_uses_given_holder(self, data_path: Path) -> None:
        holder = StoreHolder(data_path)

        app = create_app(AppConfig(data_path=Path("elsewhere.json")), holder)

        assert app.state.holder is holder
        assert TestClient(app).get("/api/list").json()["total"] == len(CLIENTS)
