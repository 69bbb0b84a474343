from typing import Iterable, Sequence

import pandas as pd

from tracker.budgets import budget_status
from tracker.categories import category_label
from tracker.domain import BudgetUsage, Category, Transaction, as_dict
from tracker.transforms import sort_newest_first

TRANSACTION_COLUMNS = ["date", "type", "category", "description", "amount", "notes"]


def records_frame(records: Iterable, columns: Sequence[str] = ()) -> pd.DataFrame:
    """DataFrame of output records (buckets, category totals, trend points)."""
    rows = [as_dict(r) for r in records]
    if not rows:
        return pd.DataFrame(columns=list(columns))
    return pd.DataFrame(rows)


def transactions_frame(trans: Iterable[Transaction], cats: Iterable[Category]) -> pd.DataFrame:
    cats = tuple(cats)
    rows = [
        {
            "id": t.id,
            "date": pd.Timestamp(t.date),
            "type": t.type,
            "category": category_label(cats, t.category_id),
            "description": t.description,
            "amount": t.amount,
            "notes": t.notes or "",
        }
        for t in sort_newest_first(trans)
    ]
    if not rows:
        return pd.DataFrame(columns=["id"] + TRANSACTION_COLUMNS)
    return pd.DataFrame(rows)


def budgets_frame(usages: Iterable[BudgetUsage]) -> pd.DataFrame:
    df = records_frame(usages, ["id", "name", "spent", "limit", "percentage", "color", "estimated"])
    if not df.empty:
        df["status"] = df["percentage"].map(budget_status)
    return df
