import pytest
from fastapi.testclient import TestClient

from conftest import make_record
from moneycoach.main import create_app
from moneycoach.models.constants import KEY_EXPENSES


@pytest.fixture
def client(settings, memory_store, coach_transport):
    app = create_app(settings_override=settings, store=memory_store, coach_transport=coach_transport)
    return TestClient(app)


@pytest.fixture
def configured(client):
    resp = client.put("/profile", json={"api_key": "sk-test-1234", "monthly_budget": 20000})
    assert resp.status_code == 200
    return client


def test_health(client):
    assert client.get("/health").json() == {"status": "ok", "version": "0.1.0"}


def test_profile_starts_unconfigured(client):
    body = client.get("/profile").json()
    assert body == {
        "configured": False,
        "api_key_set": False,
        "api_key_hint": "",
        "monthly_budget": 0,
    }


def test_put_profile_masks_key(configured):
    body = configured.get("/profile").json()
    assert body["configured"] is True
    assert body["api_key_hint"] == "sk-...1234"
    assert "sk-test-1234" not in str(body)


@pytest.mark.parametrize(
    "payload",
    [
        {"api_key": "pk-nope", "monthly_budget": 100},
        {"api_key": "sk-ok", "monthly_budget": 0},
        {"api_key": "sk-ok", "monthly_budget": -5},
        {"api_key": "   ", "monthly_budget": 100},
    ],
)
def test_put_profile_rejects_invalid_without_mutation(client, memory_store, payload):
    resp = client.put("/profile", json=payload)
    assert resp.status_code == 422
    assert resp.json()["error"] == "validation_error"
    assert memory_store.data == {}


def test_create_expense_requires_setup(client, memory_store):
    resp = client.post("/expenses", json={"description": "Latte", "amount": 150, "category": "coffee"})
    assert resp.status_code == 409
    assert resp.json()["detail"] == "profile not configured"
    assert KEY_EXPENSES not in memory_store.data


def test_create_expense_returns_snapshot_and_runs_coach(configured, coach_requests):
    resp = configured.post(
        "/expenses", json={"description": "Latte", "amount": 150, "category": "coffee"}
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["expense"]["description"] == "Latte"
    assert body["stats"]["coffee_count"] == 1
    assert body["stats"]["week_total"] == 150
    assert body["stats"]["category"] == "coffee"

    # the background coach request ran after the response
    assert len(coach_requests) == 1
    state = configured.get("/coach").json()
    assert state["status"] == "ok"
    assert state["expense_id"] == body["expense"]["id"]
    assert state["text"] == "Nice one! That latte had your name on it."


def test_second_latte_adds_one_coffee_and_150(configured):
    first = configured.post("/expenses", json={"description": "Latte", "amount": 150, "category": "coffee"}).json()
    second = configured.post("/expenses", json={"description": "Latte", "amount": 150, "category": "coffee"}).json()
    assert second["stats"]["coffee_count"] == first["stats"]["coffee_count"] + 1
    assert second["stats"]["week_total"] == first["stats"]["week_total"] + 150
    assert second["expense"]["id"] > first["expense"]["id"]


@pytest.mark.parametrize(
    "payload",
    [
        {"description": "", "amount": 10, "category": "food"},
        {"description": "Tea", "amount": 0, "category": "food"},
        {"description": "Tea", "amount": 10, "category": "crypto"},
    ],
)
def test_create_expense_validation(configured, memory_store, payload):
    resp = configured.post("/expenses", json=payload)
    assert resp.status_code == 422
    assert KEY_EXPENSES not in memory_store.data


def test_list_expenses_newest_first_capped(configured, memory_store):
    memory_store.save(expenses=[make_record(i, i) for i in range(30, 0, -1)])
    rows = configured.get("/expenses").json()
    assert len(rows) == 20
    assert [r["id"] for r in rows][:3] == [30, 29, 28]
    assert len(configured.get("/expenses", params={"limit": 5}).json()) == 5


def test_stats_rejects_unknown_category(client):
    resp = client.get("/stats", params={"category": "crypto"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "http_error", "detail": "unsupported category"}


def test_stats_empty_week(client):
    body = client.get("/stats", params={"category": "food"}).json()
    assert body["week_total"] == 0
    assert body["transaction_count"] == 0
    assert body["monthly_projection"] == 0


def test_unknown_route_uses_not_found_envelope(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


def test_delete_data_resets_everything(configured, memory_store):
    configured.post("/expenses", json={"description": "Latte", "amount": 150, "category": "coffee"})
    resp = configured.delete("/data")
    assert resp.status_code == 204
    assert memory_store.data == {}
    assert configured.get("/profile").json()["configured"] is False
    assert configured.get("/coach").json()["status"] == "idle"


def test_non_finite_amount_is_rejected(configured, memory_store):
    resp = configured.post(
        "/expenses",
        content='{"description": "Yacht", "amount": 1e400, "category": "other"}',
        headers={"content-type": "application/json"},
    )
    assert resp.status_code == 422
    assert KEY_EXPENSES not in memory_store.data
    assert configured.get("/ui").status_code == 200


def test_huge_finite_amount_keeps_every_view_working(configured):
    resp = configured.post(
        "/expenses", json={"description": "Island", "amount": 1e25, "category": "other"}
    )
    assert resp.status_code == 201
    assert resp.json()["stats"]["week_total"] == 1e25
    assert configured.get("/stats", params={"category": "other"}).status_code == 200
    assert configured.get("/coach").json()["status"] == "ok"
    assert configured.get("/ui").status_code == 200


def test_requests_are_logged_with_status(client, caplog):
    with caplog.at_level("INFO", logger="moneycoach.request"):
        client.get("/health")
        client.get("/nope")
    messages = [r.getMessage() for r in caplog.records if r.name == "moneycoach.request"]
    assert any(m.startswith("GET /health 200 ") for m in messages)
    assert any(m.startswith("GET /nope 404 ") for m in messages)
