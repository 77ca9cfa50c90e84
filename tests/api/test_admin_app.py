"""Smoke tests for the assembled admin application."""

import pytest
from fastapi.testclient import TestClient

from droploop.api.admin_api.app import create_admin_app


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_admin_app())


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "cluster" in response.json()


def test_root_points_to_docs(client: TestClient) -> None:
    assert client.get("/").json()["docs"] == "/docs"


def test_metrics_exposes_bootstrap_counter(client: TestClient) -> None:
    response = client.get("/metrics/")
    assert response.status_code == 200
    assert "droploop_state_tree_bootstrap" in response.text


def test_routes_are_mounted(client: TestClient) -> None:
    paths = {route.path for route in client.app.routes}
    assert "/api/token/init-state-tree" in paths
    assert "/api/admin/balance" in paths
    assert "/api/admin/readiness" in paths
