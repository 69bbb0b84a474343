import json
import logging
from datetime import datetime

import pytest

from tracker.domain import Budget, Category, Transaction
from tracker.store import (
    DEFAULT_BUDGETS,
    DEFAULT_CATEGORIES,
    InMemoryStore,
    JsonFileStore,
    StoreError,
    export_snapshot,
)


def make_tx(id, amount=100.0, date=datetime(2026, 10, 5)):
    return Transaction(id=id, type="expense", amount=amount, description=f"tx {id}", date=date, category_id="1")


def test_from_raw_skips_invalid_rows(caplog):
    raw = {
        "transactions": [
            {"id": "t1", "type": "expense", "amount": 20, "date": "2026-10-05", "categoryId": "1"},
            {"id": "t2", "type": "expense", "amount": -20, "date": "2026-10-05"},
            {"id": "t3", "type": "transfer", "amount": 20, "date": "2026-10-05"},
        ],
        "categories": [{"id": "1", "name": "Groceries", "type": "expense", "color": "#4CAF50"}],
        "budgets": [{"id": "b1", "limit": 100}],
    }
    with caplog.at_level(logging.WARNING, logger="tracker.store"):
        store = InMemoryStore.from_raw(raw)

    assert [t.id for t in store.get_transactions()] == ["t1"]
    assert len(store.get_categories()) == 1
    assert store.get_budgets() == ()
    assert "skipping transaction t2" in caplog.text
    assert "skipping transaction t3" in caplog.text
    assert "skipping budget b1" in caplog.text


def test_from_raw_tolerates_missing_collections():
    store = InMemoryStore.from_raw({})
    assert store.get_transactions() == ()
    assert store.get_categories() == ()
    assert store.get_budgets() == ()


def test_in_memory_crud():
    store = InMemoryStore()
    store.add_transaction(make_tx("t1"))
    store.add_transaction(make_tx("t2"))
    assert [t.id for t in store.get_transactions()] == ["t2", "t1"]

    store.update_transaction(make_tx("t1", amount=55.0))
    assert store.get_transactions()[1].amount == 55.0

    store.delete_transaction("t2")
    assert [t.id for t in store.get_transactions()] == ["t1"]


def test_in_memory_rejects_duplicate_and_unknown_ids():
    store = InMemoryStore(transactions=(make_tx("t1"),))
    with pytest.raises(StoreError):
        store.add_transaction(make_tx("t1"))
    with pytest.raises(StoreError):
        store.update_transaction(make_tx("nope"))


def test_json_store_starts_from_defaults(tmp_path):
    path = tmp_path / "tracker.json"
    store = JsonFileStore(path)

    assert store.get_transactions() == ()
    assert [c.name for c in store.get_categories()] == [c["name"] for c in DEFAULT_CATEGORIES]
    assert [b.limit for b in store.get_budgets()] == [b["limit"] for b in DEFAULT_BUDGETS]
    assert not path.exists()


def test_json_store_persists_changes(tmp_path):
    path = tmp_path / "nested" / "tracker.json"
    store = JsonFileStore(path)
    store.add_transaction(make_tx("t1"))
    store.save_budgets((Budget("b9", 750.0, category_id="1"),))

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["transactions"][0]["categoryId"] == "1"
    assert data["budgets"] == [{"id": "b9", "limit": 750.0, "categoryId": "1", "period": "monthly"}]

    reloaded = JsonFileStore(path)
    assert reloaded.get_transactions() == (make_tx("t1"),)
    assert reloaded.get_budgets() == (Budget("b9", 750.0, category_id="1"),)

    reloaded.delete_transaction("t1")
    assert JsonFileStore(path).get_transactions() == ()


def test_json_store_reads_browser_export(tmp_path):
    path = tmp_path / "export.json"
    path.write_text(json.dumps({
        "transactions": [{
            "id": "abc1234", "type": "income", "amount": 65000, "description": "Salary",
            "date": "2026-10-01T09:00:00.000Z", "categoryId": "5", "createdAt": "2026-10-01T09:05:00.000Z",
        }],
        "budgets": [{"id": "1", "name": "Groceries", "limit": 5000}],
        "categories": [{"id": "5", "name": "Salary", "type": "income", "color": "#4CAF50"}],
        "exportDate": "2026-10-02T00:00:00.000Z",
    }), encoding="utf-8")

    store = JsonFileStore(path)
    assert store.get_transactions()[0].date == datetime(2026, 10, 1, 9, 0)
    assert store.get_budgets()[0].name == "Groceries"


def test_json_store_rejects_broken_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StoreError):
        JsonFileStore(path)

    path.write_text("[]", encoding="utf-8")
    with pytest.raises(StoreError):
        JsonFileStore(path)


def test_export_snapshot():
    store = InMemoryStore(transactions=(make_tx("t1"),), budgets=(Budget("b1", 10.0, name="Food"),))
    data = export_snapshot(store, now=datetime(2026, 10, 19, 8, 0))

    assert data["exportDate"] == "2026-10-19T08:00:00"
    assert data["transactions"][0]["id"] == "t1"
    assert data["categories"] == []
    assert data["budgets"] == [{"id": "b1", "limit": 10.0, "name": "Food", "period": "monthly"}]


def test_category_crud_rules():
    store = InMemoryStore(categories=(Category("1", "Groceries", "expense", "#4CAF50"),))
    store.add_category(Category("9", "Pets", "expense", "#795548"))

    with pytest.raises(StoreError):
        store.add_category(Category("9", "Other", "expense", "#000000"))
    with pytest.raises(StoreError):
        store.add_category(Category("10", " groceries ", "expense", "#000000"))
    with pytest.raises(StoreError):
        store.update_category(Category("404", "Nobody", "expense", "#000000"))
    with pytest.raises(StoreError):
        store.update_category(Category("9", "GROCERIES", "expense", "#795548"))

    # renaming to its own name in another case is allowed
    store.update_category(Category("1", "GROCERIES", "expense", "#4CAF50"))
    store.delete_category("9")
    assert [c.name for c in store.get_categories()] == ["GROCERIES"]


def test_json_store_persists_categories(tmp_path):
    path = tmp_path / "tracker.json"
    store = JsonFileStore(path)
    store.add_category(Category("8", "Pets", "expense", "#795548"))
    store.update_category(Category("1", "Food", "expense", "#4CAF50"))
    store.delete_category("2")

    names = [c.name for c in JsonFileStore(path).get_categories()]
    assert "Pets" in names
    assert "Food" in names
    assert "Groceries" not in names
    assert "Rent" not in names


def test_json_store_starts_from_seed_without_touching_it(tmp_path):
    seed = tmp_path / "seed.json"
    seed_text = json.dumps({
        "transactions": [{"id": "s1", "type": "expense", "amount": 5, "date": "2026-10-01", "categoryId": "1"}],
        "categories": [{"id": "1", "name": "Groceries", "type": "expense", "color": "#4CAF50"}],
        "budgets": [],
    })
    seed.write_text(seed_text, encoding="utf-8")
    path = tmp_path / "user" / "tracker.json"

    store = JsonFileStore(path, seed_path=seed)
    assert [t.id for t in store.get_transactions()] == ["s1"]
    assert not path.exists()

    store.add_transaction(make_tx("t1"))
    assert seed.read_text(encoding="utf-8") == seed_text
    assert [t.id for t in JsonFileStore(path, seed_path=seed).get_transactions()] == ["t1", "s1"]


def test_json_store_missing_seed_falls_back_to_defaults(tmp_path):
    store = JsonFileStore(tmp_path / "tracker.json", seed_path=tmp_path / "nope.json")
    assert len(store.get_categories()) == len(DEFAULT_CATEGORIES)
