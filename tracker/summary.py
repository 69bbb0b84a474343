from functools import reduce
from typing import Dict, Iterable, Tuple

from tracker.domain import EXPENSE, INCOME, Summary, Transaction

# "Average monthly" figures divide by this regardless of how many months the
# data actually spans. Kept as-is until someone decides what the figure means.
MONTHS_PER_YEAR = 12


def _totals(trans: Iterable[Transaction]) -> Tuple[float, float, int, int]:
    def step(acc, t):
        income, expenses, n_in, n_out = acc
        if t.type == INCOME:
            return income + t.amount, expenses, n_in + 1, n_out
        if t.type == EXPENSE:
            return income, expenses + t.amount, n_in, n_out + 1
        return acc

    return reduce(step, trans, (0.0, 0.0, 0, 0))


def savings_rate(total_income: float, balance: float) -> float:
    if total_income <= 0:
        return 0.0
    return balance / total_income * 100


def summarize(trans: Iterable[Transaction]) -> Summary:
    total_income, total_expenses, n_in, n_out = _totals(trans)
    balance = total_income - total_expenses
    return Summary(
        total_income=total_income,
        total_expenses=total_expenses,
        balance=balance,
        savings_rate=savings_rate(total_income, balance),
        income_count=n_in,
        expense_count=n_out,
    )


def average_monthly(total: float, trans: Iterable[Transaction]) -> float:
    """``total`` spread over a fixed twelve months; 0 with no transactions at all.

    This is not a true monthly average: a single week of data still divides
    by twelve.
    """
    if not any(True for _ in trans):
        return 0.0
    return total / MONTHS_PER_YEAR


def monthly_averages(trans: Iterable[Transaction]) -> Dict[str, float]:
    trans = tuple(trans)
    summary = summarize(trans)
    return {
        "income": average_monthly(summary.total_income, trans),
        "expenses": average_monthly(summary.total_expenses, trans),
    }
