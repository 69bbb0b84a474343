from dataclasses import replace
from datetime import datetime
from typing import Iterable, Optional, Tuple

from tracker.domain import Budget, Category, EXPENSE, INCOME, Transaction, utc_now


def add_transaction(
    trans: Tuple[Transaction, ...], t: Transaction
) -> Tuple[Transaction, ...]:
    # newest first, the order the dashboard lists them in
    return (t,) + trans


def update_transaction(
    trans: Tuple[Transaction, ...], t: Transaction
) -> Tuple[Transaction, ...]:
    return tuple(t if old.id == t.id else old for old in trans)


def delete_transaction(
    trans: Tuple[Transaction, ...], tid: str
) -> Tuple[Transaction, ...]:
    return tuple(t for t in trans if t.id != tid)


def add_budget(budgets: Tuple[Budget, ...], b: Budget) -> Tuple[Budget, ...]:
    return budgets + (b,)


def update_budget(
    budgets: Tuple[Budget, ...], bid: str, new_limit: float
) -> Tuple[Budget, ...]:
    if new_limit < 0:
        raise ValueError("Budget limit must be non-negative.")
    return tuple(
        replace(b, limit=new_limit) if b.id == bid else b
        for b in budgets
    )


def delete_budget(budgets: Tuple[Budget, ...], bid: str) -> Tuple[Budget, ...]:
    return tuple(b for b in budgets if b.id != bid)


def add_category(cats: Tuple[Category, ...], c: Category) -> Tuple[Category, ...]:
    return cats + (c,)


def update_category(cats: Tuple[Category, ...], c: Category) -> Tuple[Category, ...]:
    return tuple(c if old.id == c.id else old for old in cats)


def delete_category(cats: Tuple[Category, ...], cid: str) -> Tuple[Category, ...]:
    # transactions keep their category_id and show as Uncategorized afterwards
    return tuple(c for c in cats if c.id != cid)


def categories_of_type(cats: Iterable[Category], type: Optional[str] = None) -> Tuple[Category, ...]:
    """Categories of one type (or all), sorted by name."""
    return tuple(sorted(
        (c for c in cats if type is None or c.type == type),
        key=lambda c: c.name.lower(),
    ))


def income_transactions(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.type == INCOME, trans))


def expense_transactions(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    return tuple(filter(lambda t: t.type == EXPENSE, trans))


def sort_newest_first(trans: Iterable[Transaction]) -> Tuple[Transaction, ...]:
    return tuple(sorted(trans, key=lambda t: t.date, reverse=True))


def filter_transactions(
    trans: Iterable[Transaction],
    type: Optional[str] = None,
    search: str = "",
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    category_id: Optional[str] = None,
) -> Tuple[Transaction, ...]:
    """Transactions matching every given criterion.

    ``search`` is a case-insensitive substring match against the description
    and the notes. ``start`` and ``end`` are inclusive.
    """
    term = search.strip().lower()

    def _keep(t: Transaction) -> bool:
        if type and t.type != type:
            return False
        if category_id and t.category_id != category_id:
            return False
        if start is not None and t.date < start:
            return False
        if end is not None and t.date > end:
            return False
        if term:
            haystacks = (t.description or "", t.notes or "")
            if not any(term in h.lower() for h in haystacks):
                return False
        return True

    return tuple(filter(_keep, trans))


def in_calendar_month(t: Transaction, year: int, month: int) -> bool:
    return t.date.year == year and t.date.month == month


def current_month_expenses(
    trans: Iterable[Transaction], now: Optional[datetime] = None
) -> Tuple[Transaction, ...]:
    now = now or utc_now()
    return tuple(
        t for t in trans
        if t.type == EXPENSE and in_calendar_month(t, now.year, now.month)
    )
