"""Budget usage: actual per-category spend and the proportional estimate.

Percentages are whole numbers rounded half up and capped at 100. A budget
with a limit of zero (or a set of budgets whose limits sum to zero) reports
0 spent-percentage instead of dividing by zero.
"""

import logging
import math
from datetime import datetime
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from tracker.categories import category_index
from tracker.domain import (
    Budget,
    BudgetTotals,
    BudgetUsage,
    Category,
    EXPENSE,
    MONTHLY,
    Transaction,
    UNCATEGORIZED_NAME,
    YEARLY,
    utc_now,
)
from tracker.transforms import current_month_expenses

logger = logging.getLogger(__name__)

DEFAULT_BUDGET_LIMIT = 1000.0
WARNING_THRESHOLD = 75
DANGER_THRESHOLD = 90


def round_half_up(x: float) -> int:
    # compares the fraction directly; floor(x + 0.5) rounds 0.49999999999999994 up
    whole = math.floor(x)
    return whole + (1 if x - whole >= 0.5 else 0)


def budget_percentage(spent: float, limit: float) -> int:
    if limit <= 0:
        return 0
    return max(0, min(round_half_up(spent / limit * 100), 100))


def budget_status(percentage: int) -> str:
    if percentage > DANGER_THRESHOLD:
        return "danger"
    if percentage > WARNING_THRESHOLD:
        return "warning"
    return "ok"


def budget_window(budget: Budget, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """[start, end) of the calendar period a budget covers."""
    now = now or utc_now()
    year = budget.year or now.year
    if budget.period == YEARLY:
        return datetime(year, 1, 1), datetime(year + 1, 1, 1)
    if budget.period != MONTHLY:
        raise ValueError(f"unknown budget period {budget.period!r}")
    month = budget.month or now.month
    start = datetime(year, month, 1)
    end = datetime(year + 1, 1, 1) if month == 12 else datetime(year, month + 1, 1)
    return start, end


def _budget_category(budget: Budget, cats: Mapping[str, Category]) -> Optional[Category]:
    if budget.category_id:
        return cats.get(budget.category_id)
    if budget.name:
        wanted = budget.name.strip().lower()
        for c in cats.values():
            if c.type == EXPENSE and c.name.strip().lower() == wanted:
                return c
    return None


def _budget_name(budget: Budget, cat: Optional[Category] = None) -> str:
    if budget.name:
        return budget.name
    if cat is not None:
        return cat.name
    return UNCATEGORIZED_NAME


def spent_in_window(
    trans: Iterable[Transaction], category_id: str, start: datetime, end: datetime
) -> float:
    return sum(
        (t.amount for t in trans
         if t.type == EXPENSE and t.category_id == category_id and start <= t.date < end),
        0.0,
    )


def budget_usage(
    budgets: Iterable[Budget],
    trans: Iterable[Transaction],
    cats: Iterable[Category] = (),
    now: Optional[datetime] = None,
) -> List[BudgetUsage]:
    """Actual spend against each budget inside its own period.

    A budget is linked to its category by ``category_id``, or failing that by
    a case-insensitive match of its name against an expense category name.
    Unlinked budgets report nothing spent.
    """
    trans = tuple(trans)
    index = category_index(cats)
    rows = []
    for b in budgets:
        cat = _budget_category(b, index)
        if cat is None:
            logger.debug("budget %s has no matching category", b.id)
            spent = 0.0
        else:
            start, end = budget_window(b, now)
            spent = spent_in_window(trans, cat.id, start, end)
        rows.append(BudgetUsage(
            id=b.id,
            name=_budget_name(b, cat),
            spent=spent,
            limit=b.limit,
            percentage=budget_percentage(spent, b.limit),
            color=cat.color if cat is not None else None,
        ))
    return rows


def category_budget_overview(
    trans: Iterable[Transaction],
    cats: Iterable[Category],
    limits: Mapping[str, float],
    now: Optional[datetime] = None,
    default_limit: float = DEFAULT_BUDGET_LIMIT,
) -> List[BudgetUsage]:
    """This month's spend for every expense category against a limit table.

    Categories missing from ``limits`` (or listed with a zero limit) fall
    back to ``default_limit``.
    """
    month_expenses = current_month_expenses(trans, now)
    spending = {}
    for t in month_expenses:
        spending[t.category_id] = spending.get(t.category_id, 0.0) + t.amount

    rows = []
    for c in cats:
        if c.type != EXPENSE:
            continue
        spent = spending.get(c.id, 0.0)
        limit = limits.get(c.id) or default_limit
        rows.append(BudgetUsage(
            id=c.id,
            name=c.name,
            spent=spent,
            limit=limit,
            percentage=budget_percentage(spent, limit),
            color=c.color,
        ))
    return rows


def allocate_proportionally(
    budgets: Sequence[Budget], total_expenses: float, cats: Iterable[Category] = ()
) -> List[BudgetUsage]:
    """Split ``total_expenses`` over budgets in proportion to their limits.

    This is an estimate, not a ledger: no transaction is matched to any
    budget. Every row is flagged ``estimated``.
    """
    index = category_index(cats)
    total_limits = sum(b.limit for b in budgets)
    if total_limits <= 0 and budgets:
        logger.debug("budget limits sum to zero, estimating nothing spent")

    rows = []
    for b in budgets:
        spent = total_expenses * (b.limit / total_limits) if total_limits > 0 else 0.0
        cat = _budget_category(b, index)
        rows.append(BudgetUsage(
            id=b.id,
            name=_budget_name(b, cat),
            spent=spent,
            limit=b.limit,
            percentage=budget_percentage(spent, b.limit),
            color=cat.color if cat is not None else None,
            estimated=True,
        ))
    return rows


def proportional_budget_usage(
    budgets: Sequence[Budget],
    trans: Iterable[Transaction],
    cats: Iterable[Category] = (),
    now: Optional[datetime] = None,
) -> List[BudgetUsage]:
    """Proportional estimate of this calendar month's expenses per budget."""
    total = sum((t.amount for t in current_month_expenses(trans, now)), 0.0)
    return allocate_proportionally(budgets, total, cats)


def budget_totals(
    usages: Iterable[BudgetUsage], total_budget: Optional[float] = None
) -> BudgetTotals:
    """Headline numbers for a set of budget rows.

    ``total_budget`` defaults to the sum of the rows' limits. Health is the
    share of the total budget already spent; it is not capped, so overspending
    shows above 100.
    """
    usages = tuple(usages)
    if total_budget is None:
        total_budget = sum((u.limit for u in usages), 0.0)
    total_spent = sum((u.spent for u in usages), 0.0)
    health = round_half_up(total_spent / total_budget * 100) if total_budget > 0 else 0
    return BudgetTotals(
        total_budget=total_budget,
        total_spent=total_spent,
        remaining=total_budget - total_spent,
        health=health,
    )
