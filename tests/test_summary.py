import math
from datetime import datetime

from tracker.domain import Summary, Transaction
from tracker.summary import average_monthly, monthly_averages, savings_rate, summarize


def tx(id, type, amount):
    return Transaction(id=id, type=type, amount=amount, description=id, date=datetime(2026, 10, 1))


def test_summarize_income_and_expenses():
    trans = (tx("t1", "income", 1000.0), tx("t2", "expense", 400.0), tx("t3", "expense", 100.0))
    assert summarize(trans) == Summary(
        total_income=1000.0,
        total_expenses=500.0,
        balance=500.0,
        savings_rate=50.0,
        income_count=1,
        expense_count=2,
    )


def test_summarize_empty_is_all_zero():
    summary = summarize(())
    assert summary == Summary(0.0, 0.0, 0.0, 0.0, 0, 0)
    assert not math.isnan(summary.savings_rate)


def test_savings_rate_without_income_is_zero():
    summary = summarize((tx("t1", "expense", 250.0),))
    assert summary.balance == -250.0
    assert summary.savings_rate == 0.0
    assert savings_rate(0.0, -10.0) == 0.0


def test_negative_savings_rate_when_overspending():
    summary = summarize((tx("t1", "income", 100.0), tx("t2", "expense", 300.0)))
    assert summary.savings_rate == -200.0


def test_balance_identity():
    amounts = [0.1, 0.2, 0.3, 19.99, 1234.56, 7.0]
    trans = tuple(
        tx(f"t{i}", "income" if i % 2 else "expense", a) for i, a in enumerate(amounts)
    )
    s = summarize(trans)
    assert s.total_income - s.total_expenses == s.balance


def test_average_monthly_divides_by_twelve():
    trans = (tx("t1", "expense", 1200.0),)
    # one transaction or a year of them, always twelve
    assert average_monthly(1200.0, trans) == 100.0
    assert average_monthly(0.0, ()) == 0.0
    assert average_monthly(500.0, ()) == 0.0


def test_monthly_averages():
    trans = (tx("t1", "income", 1200.0), tx("t2", "expense", 600.0))
    assert monthly_averages(trans) == {"income": 100.0, "expenses": 50.0}
    assert monthly_averages(()) == {"income": 0.0, "expenses": 0.0}
