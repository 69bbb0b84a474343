"""Data access for transactions, categories and budgets.

Everything the aggregation functions see comes through a ``Store`` as a
tuple snapshot. Raw rows are validated on the way in; rows that fail are
logged and skipped so one bad record does not hide the rest.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Tuple, Union

from tracker import transforms
from tracker.domain import Budget, Category, Transaction, utc_now
from tracker.functional import validate_record
from tracker.schemas import dump_record

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = (
    {"id": "1", "name": "Groceries", "type": "expense", "color": "#4CAF50"},
    {"id": "2", "name": "Rent", "type": "expense", "color": "#F44336"},
    {"id": "3", "name": "Utilities", "type": "expense", "color": "#2196F3"},
    {"id": "4", "name": "Entertainment", "type": "expense", "color": "#9C27B0"},
    {"id": "5", "name": "Salary", "type": "income", "color": "#4CAF50"},
    {"id": "6", "name": "Freelance", "type": "income", "color": "#2196F3"},
    {"id": "7", "name": "Investments", "type": "income", "color": "#FF9800"},
)

DEFAULT_BUDGETS = (
    {"id": "1", "name": "Groceries", "limit": 5000},
    {"id": "2", "name": "Rent", "limit": 15000},
    {"id": "3", "name": "Utilities", "limit": 3000},
    {"id": "4", "name": "Entertainment", "limit": 2000},
)


class StoreError(Exception):
    pass


def load_records(kind: str, rows: Iterable[dict]) -> tuple:
    """Validate raw rows into domain objects, dropping the invalid ones."""
    loaded = []
    for row in rows:
        result = validate_record(kind, row)
        if result.is_left():
            err = result.get_error()
            logger.warning("skipping %s %s: %s", kind, err["record_id"], err["message"])
            continue
        loaded.append(result.get_or_else(None))
    return tuple(loaded)


def _read_json(path: Path) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise StoreError(f"{path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise StoreError(f"{path} must hold a JSON object")
    return data


class Store(ABC):

    @abstractmethod
    def get_transactions(self) -> Tuple[Transaction, ...]:
        pass

    @abstractmethod
    def get_categories(self) -> Tuple[Category, ...]:
        pass

    @abstractmethod
    def get_budgets(self) -> Tuple[Budget, ...]:
        pass

    @abstractmethod
    def add_transaction(self, t: Transaction) -> None:
        pass

    @abstractmethod
    def update_transaction(self, t: Transaction) -> None:
        pass

    @abstractmethod
    def delete_transaction(self, tid: str) -> None:
        pass

    @abstractmethod
    def save_budgets(self, budgets: Iterable[Budget]) -> None:
        pass

    @abstractmethod
    def add_category(self, c: Category) -> None:
        pass

    @abstractmethod
    def update_category(self, c: Category) -> None:
        pass

    @abstractmethod
    def delete_category(self, cid: str) -> None:
        pass


class InMemoryStore(Store):

    def __init__(
        self,
        transactions: Iterable[Transaction] = (),
        categories: Iterable[Category] = (),
        budgets: Iterable[Budget] = (),
    ):
        self._transactions = tuple(transactions)
        self._categories = tuple(categories)
        self._budgets = tuple(budgets)

    @classmethod
    def from_raw(cls, data: dict) -> "InMemoryStore":
        return cls(
            transactions=load_records("transaction", data.get("transactions") or ()),
            categories=load_records("category", data.get("categories") or ()),
            budgets=load_records("budget", data.get("budgets") or ()),
        )

    def get_transactions(self) -> Tuple[Transaction, ...]:
        return self._transactions

    def get_categories(self) -> Tuple[Category, ...]:
        return self._categories

    def get_budgets(self) -> Tuple[Budget, ...]:
        return self._budgets

    def add_transaction(self, t: Transaction) -> None:
        if any(old.id == t.id for old in self._transactions):
            raise StoreError(f"transaction {t.id} already exists")
        self._transactions = transforms.add_transaction(self._transactions, t)

    def update_transaction(self, t: Transaction) -> None:
        if not any(old.id == t.id for old in self._transactions):
            raise StoreError(f"transaction {t.id} not found")
        self._transactions = transforms.update_transaction(self._transactions, t)

    def delete_transaction(self, tid: str) -> None:
        self._transactions = transforms.delete_transaction(self._transactions, tid)

    def save_budgets(self, budgets: Iterable[Budget]) -> None:
        self._budgets = tuple(budgets)

    def add_category(self, c: Category) -> None:
        if any(old.id == c.id for old in self._categories):
            raise StoreError(f"category {c.id} already exists")
        self._check_name_free(c)
        self._categories = transforms.add_category(self._categories, c)

    def update_category(self, c: Category) -> None:
        if not any(old.id == c.id for old in self._categories):
            raise StoreError(f"category {c.id} not found")
        self._check_name_free(c)
        self._categories = transforms.update_category(self._categories, c)

    def delete_category(self, cid: str) -> None:
        self._categories = transforms.delete_category(self._categories, cid)

    def _check_name_free(self, c: Category) -> None:
        # names are unique ignoring case
        wanted = c.name.strip().lower()
        for old in self._categories:
            if old.id != c.id and old.name.strip().lower() == wanted:
                raise StoreError(f"category {c.name!r} already exists")


class JsonFileStore(InMemoryStore):
    """Store backed by one JSON document holding all three collections.

    A missing file starts out from ``seed_path`` when one is given, otherwise
    with the default categories and budgets and no transactions. Either way
    nothing is written until the first change, and only ever to ``path``;
    the seed file is read, never written.
    """

    def __init__(self, path: Union[str, Path], seed_path: Optional[Union[str, Path]] = None):
        self.path = Path(path)
        self.seed_path = Path(seed_path) if seed_path is not None else None
        data = self._read()
        super().__init__(
            transactions=load_records("transaction", data.get("transactions") or ()),
            categories=load_records("category", data.get("categories") or ()),
            budgets=load_records("budget", data.get("budgets") or ()),
        )

    def _read(self) -> dict:
        if self.path.exists():
            return _read_json(self.path)
        if self.seed_path is not None and self.seed_path.exists():
            logger.info("no data file at %s, starting from %s", self.path, self.seed_path)
            return _read_json(self.seed_path)
        logger.info("no data file at %s, starting from defaults", self.path)
        return {
            "transactions": [],
            "categories": list(DEFAULT_CATEGORIES),
            "budgets": list(DEFAULT_BUDGETS),
        }

    def save(self) -> None:
        payload = snapshot(self)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            os.replace(tmp, self.path)
        except BaseException:
            os.unlink(tmp)
            raise
        logger.debug("saved %d transactions to %s", len(payload["transactions"]), self.path)

    def add_transaction(self, t: Transaction) -> None:
        super().add_transaction(t)
        self.save()

    def update_transaction(self, t: Transaction) -> None:
        super().update_transaction(t)
        self.save()

    def delete_transaction(self, tid: str) -> None:
        super().delete_transaction(tid)
        self.save()

    def save_budgets(self, budgets: Iterable[Budget]) -> None:
        super().save_budgets(budgets)
        self.save()

    def add_category(self, c: Category) -> None:
        super().add_category(c)
        self.save()

    def update_category(self, c: Category) -> None:
        super().update_category(c)
        self.save()

    def delete_category(self, cid: str) -> None:
        super().delete_category(cid)
        self.save()


def snapshot(store: Store) -> dict:
    return {
        "transactions": [dump_record("transaction", t) for t in store.get_transactions()],
        "categories": [dump_record("category", c) for c in store.get_categories()],
        "budgets": [dump_record("budget", b) for b in store.get_budgets()],
    }


def export_snapshot(store: Store, now: Optional[datetime] = None) -> dict:
    """Everything in the store plus the export timestamp, as a backup file holds it."""
    data = snapshot(store)
    data["exportDate"] = (now or utc_now()).isoformat()
    return data
