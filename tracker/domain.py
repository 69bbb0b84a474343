from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Optional

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)

MONTHLY = "monthly"
YEARLY = "yearly"
BUDGET_PERIODS = (MONTHLY, YEARLY)

WEEK = "week"
MONTH = "month"
QUARTER = "quarter"
YEAR = "year"
TIME_RANGES = (WEEK, MONTH, QUARTER, YEAR)

UNCATEGORIZED_NAME = "Uncategorized"
UNCATEGORIZED_COLOR = "#999999"


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    type: str       # "income" | "expense"
    color: str      # display hint, e.g. "#4CAF50"


# shown for any transaction whose category_id resolves to nothing
UNCATEGORIZED = Category(id="", name=UNCATEGORIZED_NAME, type=EXPENSE, color=UNCATEGORIZED_COLOR)


@dataclass(frozen=True)
class Transaction:
    id: str
    type: str                     # "income" | "expense"
    amount: float                 # always >= 0, sign comes from type
    description: str
    date: datetime                # naive UTC
    category_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Budget:
    id: str
    limit: float
    category_id: Optional[str] = None
    name: Optional[str] = None
    period: str = MONTHLY
    month: Optional[int] = None   # 1-12, pins a monthly budget to one month
    year: Optional[int] = None


@dataclass(frozen=True)
class BucketTotals:
    name: str
    income: float
    expense: float


@dataclass(frozen=True)
class TrendPoint:
    name: str
    balance: float


@dataclass(frozen=True)
class CategoryTotal:
    name: str
    value: float
    color: str


@dataclass(frozen=True)
class BudgetUsage:
    id: str
    name: str
    spent: float
    limit: float
    percentage: int
    color: Optional[str] = None
    estimated: bool = False   # True for proportional estimates, not actual spend


@dataclass(frozen=True)
class BudgetTotals:
    total_budget: float
    total_spent: float
    remaining: float
    health: int


@dataclass(frozen=True)
class Summary:
    total_income: float
    total_expenses: float
    balance: float
    savings_rate: float
    income_count: int = 0
    expense_count: int = 0


def as_dict(record) -> dict:
    """Plain dict view of an output record, ready for a table or chart."""
    return asdict(record)


def utc_now() -> datetime:
    """Current time as a naive UTC datetime, the form every stored date takes."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
