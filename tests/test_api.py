from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from lab_accounts import main
from lab_accounts.api import routes
from lab_accounts.cache import InMemoryCacheStore
from lab_accounts.config import AccountNaming, Settings
from lab_accounts.domain.service import LabAccountService


@pytest.fixture
def api_client():
    """Provide a FastAPI test client with isolated state."""
    store = InMemoryCacheStore()
    service = LabAccountService(store, AccountNaming(prefix="evals", pad_zeroes=True))

    app = FastAPI()
    app.include_router(routes.router)
    app.state.account_service = service

    with TestClient(app) as client:
        yield client, store


def test_get_account_defaults_without_writing(api_client):
    client, store = api_client

    response = client.get("/v1/accounts/3")

    assert response.status_code == 200
    assert response.json() == {
        "username": "evals03",
        "assigned_ts": None,
        "email": None,
        "ip": None,
        "disabled": False,
        "assigned": False,
        "assignable": True,
    }
    assert store.keys() == []


def test_assignment_defaults_ip_to_client(api_client):
    client, _ = api_client

    response = client.put("/v1/accounts/4/assignment", json={"email": "dev@example.com"})

    assert response.status_code == 200
    data = response.json()
    assert data["username"] == "evals04"
    assert data["email"] == "dev@example.com"
    assert data["ip"] == "testclient"
    assert data["assigned_ts"]
    assert data["assigned"] is True
    assert data["assignable"] is False


def test_assigning_taken_account_conflicts(api_client):
    client, _ = api_client
    first = client.put(
        "/v1/accounts/12/assignment", json={"email": "first@example.com", "ip": "10.0.0.1"}
    )
    second = client.put(
        "/v1/accounts/12/assignment", json={"email": "second@example.com", "ip": "10.0.0.2"}
    )

    assert first.status_code == 200
    assert second.status_code == 409
    assert "evals12" in second.json()["detail"]
    assert client.get("/v1/accounts/12").json()["email"] == "first@example.com"


def test_disabled_account_cannot_be_assigned_until_enabled(api_client):
    client, _ = api_client

    disabled = client.post("/v1/accounts/5/disable")
    assert disabled.status_code == 200
    assert disabled.json()["disabled"] is True
    assert disabled.json()["assignable"] is False

    rejected = client.put("/v1/accounts/5/assignment", json={"email": "x@example.com"})
    assert rejected.status_code == 409

    enabled = client.post("/v1/accounts/5/enable")
    assert enabled.json()["assignable"] is True
    accepted = client.put("/v1/accounts/5/assignment", json={"email": "x@example.com"})
    assert accepted.status_code == 200


def test_release_keeps_disabled_flag(api_client):
    client, _ = api_client
    client.put("/v1/accounts/6/assignment", json={"email": "x@example.com", "ip": "10.0.0.6"})
    client.post("/v1/accounts/6/disable")

    released = client.delete("/v1/accounts/6/assignment")

    assert released.status_code == 200
    body = released.json()
    assert body["assigned"] is False
    assert body["email"] is None
    assert body["disabled"] is True
    assert body["assignable"] is False


def test_empty_ip_is_rejected(api_client):
    client, store = api_client

    response = client.put("/v1/accounts/7/assignment", json={"email": "x@example.com", "ip": ""})

    assert response.status_code == 400
    assert "ip" in response.json()["detail"]
    assert store.keys() == []


def test_negative_index_is_rejected(api_client):
    client, _ = api_client
    assert client.get("/v1/accounts/-1").status_code == 400


def test_list_accounts_returns_requested_range(api_client):
    client, store = api_client
    client.put("/v1/accounts/2/assignment", json={"email": "two@example.com", "ip": "10.0.0.2"})

    response = client.get("/v1/accounts", params={"start": 1, "count": 3})

    assert response.status_code == 200
    items = response.json()["items"]
    assert [item["username"] for item in items] == ["evals01", "evals02", "evals03"]
    assert [item["assigned"] for item in items] == [False, True, False]
    assert store.keys() == ["user:evals02"]


def test_list_accounts_bounds_count(api_client):
    client, _ = api_client
    limit = routes.settings.account_list_limit
    assert client.get("/v1/accounts", params={"count": limit + 1}).status_code == 422


def test_application_lifespan_serves_health_metrics_and_corrupt_records(monkeypatch):
    monkeypatch.setattr(
        main,
        "settings",
        Settings(accounts_prefix="lab", accounts_pad_zeroes=False, cache_backend="memory"),
    )

    with TestClient(main.app) as client:
        assert client.get("/healthz").json() == {"status": "ok"}

        client.post("/v1/accounts/1/disable")
        metrics = client.get("/metrics")
        assert metrics.status_code == 200
        assert "lab_account_transitions_total" in metrics.text

        store: InMemoryCacheStore = main.app.state.cache_store
        store._values["user:lab9"] = b"[]"
        response = client.get("/v1/accounts/9")
        assert response.status_code == 500
        assert response.json() == {"detail": "corrupt account record"}
