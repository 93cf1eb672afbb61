import json
import sqlite3

import pytest

from conftest import WEDNESDAY_NOON, make_record
from moneycoach.db.store import MemoryStore, SqliteStore
from moneycoach.models.constants import KEY_API_KEY, KEY_BUDGET, KEY_EXPENSES


def test_empty_store_loads_defaults(memory_store):
    data = memory_store.load()
    assert data.api_key == ""
    assert data.monthly_budget == 0
    assert data.expenses == []
    assert not data.is_configured


def test_save_is_partial(memory_store):
    memory_store.save(api_key="sk-abc", monthly_budget=15000)
    memory_store.save(expenses=[make_record(1, 99)])
    memory_store.save(monthly_budget=18000)

    data = memory_store.load()
    assert data.api_key == "sk-abc"
    assert data.monthly_budget == 18000
    assert [e.id for e in data.expenses] == [1]
    assert data.is_configured


def test_budget_stored_as_text(memory_store):
    memory_store.save(monthly_budget=25000)
    assert memory_store.data[KEY_BUDGET] == "25000"


def test_budget_parsed_like_parse_int():
    assert MemoryStore({KEY_BUDGET: "1200abc"}).load().monthly_budget == 1200
    assert MemoryStore({KEY_BUDGET: "abc"}).load().monthly_budget == 0
    assert MemoryStore({KEY_BUDGET: ""}).load().monthly_budget == 0


def test_expense_blob_layout(memory_store):
    memory_store.save(expenses=[make_record(1700000000000, 150, "coffee", description="Latte")])
    stored = json.loads(memory_store.data[KEY_EXPENSES])
    assert stored == [
        {
            "id": 1700000000000,
            "description": "Latte",
            "amount": 150.0,
            "category": "coffee",
            "timestamp": "2026-10-21T06:30:00.000Z",
            "date": "21/10/2026",
        }
    ]


def test_loads_blob_written_by_browser_version():
    blob = json.dumps(
        [
            {
                "id": 1760000000000,
                "description": "Chai",
                "amount": 20,
                "category": "coffee",
                "timestamp": "2025-10-09T08:53:20.000Z",
                "date": "9/10/2025",
            }
        ]
    )
    data = MemoryStore({KEY_API_KEY: "sk-x", KEY_BUDGET: "5000", KEY_EXPENSES: blob}).load()
    assert data.expenses[0].amount == 20
    assert data.expenses[0].timestamp.utcoffset().total_seconds() == 0


@pytest.mark.parametrize(
    "blob",
    ["{not json", '{"id": 1}', '[{"id": 1, "description": "x"}]', '[{"id": 1, "description": "x", "amount": -5, "category": "food", "timestamp": "2026-01-01T00:00:00Z", "date": "1/1/2026"}]', '[{"id": 1, "description": "x", "amount": Infinity, "category": "food", "timestamp": "2026-01-01T00:00:00Z", "date": "1/1/2026"}]'],
)
def test_corrupt_expense_blob_falls_back_to_empty(blob, caplog):
    store = MemoryStore({KEY_API_KEY: "sk-keep", KEY_BUDGET: "3000", KEY_EXPENSES: blob})
    with caplog.at_level("WARNING", logger="moneycoach.db"):
        data = store.load()
    assert data.expenses == []
    assert data.api_key == "sk-keep"
    assert data.monthly_budget == 3000
    assert "discarding unreadable expense data" in caplog.text


def test_reset_clears_every_key(memory_store):
    memory_store.save(api_key="sk-abc", monthly_budget=100, expenses=[make_record(1, 5)])
    memory_store.data["unrelated"] = "stays"
    memory_store.reset()
    for key in (KEY_API_KEY, KEY_BUDGET, KEY_EXPENSES):
        assert key not in memory_store.data
    data = memory_store.load()
    assert (data.api_key, data.monthly_budget, data.expenses) == ("", 0, [])


def test_sqlite_store_persists_across_instances(tmp_path):
    path = tmp_path / "kv.sqlite3"
    first = SqliteStore(path)
    first.save(api_key="sk-disk", monthly_budget=42000)
    first.save(expenses=[make_record(2, 60, when=WEDNESDAY_NOON), make_record(1, 40)])

    second = SqliteStore(path)
    data = second.load()
    assert data.api_key == "sk-disk"
    assert data.monthly_budget == 42000
    assert [e.id for e in data.expenses] == [2, 1]

    second.reset()
    assert SqliteStore(path).load().is_configured is False
    assert SqliteStore(path).load().expenses == []


def test_sqlite_store_closes_its_connections(tmp_path, monkeypatch):
    store = SqliteStore(tmp_path / "kv.sqlite3")
    opened = []
    connect = store._connect

    def tracking_connect():
        conn = connect()
        opened.append(conn)
        return conn

    monkeypatch.setattr(store, "_connect", tracking_connect)
    store.save(api_key="sk-abc", monthly_budget=10)
    assert store.load().monthly_budget == 10
    store.reset()

    assert opened
    for conn in opened:
        with pytest.raises(sqlite3.ProgrammingError):
            conn.execute("SELECT 1")
