import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from tracker.buckets import balance_trend, bucket_transactions, filter_by_range
from tracker.budgets import budget_totals, budget_usage, proportional_budget_usage
from tracker.categories import category_index, group_by_category
from tracker.domain import Budget, Category, MONTH, Transaction, utc_now
from tracker.store import Store
from tracker.summary import monthly_averages, summarize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """One consistent read of the store plus the report parameters."""
    transactions: Tuple[Transaction, ...]
    categories: Tuple[Category, ...]
    budgets: Tuple[Budget, ...]
    time_range: str
    now: datetime

    def in_range(self) -> Tuple[Transaction, ...]:
        return filter_by_range(self.transactions, self.time_range, self.now)


Aggregator = Callable[[Snapshot, Dict[str, Any]], Dict[str, Any]]
Validator = Callable[[Snapshot], Sequence[str]]


def summary_aggregator(snap: Snapshot, acc: Dict[str, Any]) -> Dict[str, Any]:
    return {"summary": summarize(snap.in_range())}


def overview_aggregator(snap: Snapshot, acc: Dict[str, Any]) -> Dict[str, Any]:
    return {"overview": bucket_transactions(snap.transactions, snap.time_range, snap.now)}


def trend_aggregator(snap: Snapshot, acc: Dict[str, Any]) -> Dict[str, Any]:
    return {"trend": balance_trend(snap.transactions, snap.time_range, snap.now)}


def category_aggregator(snap: Snapshot, acc: Dict[str, Any]) -> Dict[str, Any]:
    return {"categories": group_by_category(snap.in_range(), snap.categories)}


def budget_aggregator(snap: Snapshot, acc: Dict[str, Any]) -> Dict[str, Any]:
    usage = budget_usage(snap.budgets, snap.transactions, snap.categories, snap.now)
    return {"budgets": usage, "budget_totals": budget_totals(usage)}


def proportional_aggregator(snap: Snapshot, acc: Dict[str, Any]) -> Dict[str, Any]:
    estimates = proportional_budget_usage(snap.budgets, snap.transactions, snap.categories, snap.now)
    return {"budget_estimates": estimates, "budget_estimate_totals": budget_totals(estimates)}


def averages_aggregator(snap: Snapshot, acc: Dict[str, Any]) -> Dict[str, Any]:
    return {"averages": monthly_averages(snap.transactions)}


DEFAULT_AGGREGATORS: Tuple[Aggregator, ...] = (
    summary_aggregator,
    overview_aggregator,
    trend_aggregator,
    category_aggregator,
    budget_aggregator,
    proportional_aggregator,
    averages_aggregator,
)


def zero_limit_budgets(snap: Snapshot) -> Sequence[str]:
    return [
        f"budget {b.id} has a zero limit; its usage is reported as 0%"
        for b in snap.budgets if b.limit <= 0
    ]


def unknown_category_refs(snap: Snapshot) -> Sequence[str]:
    known = category_index(snap.categories)
    missing = sorted({t.category_id for t in snap.transactions if t.category_id and t.category_id not in known})
    if not missing:
        return []
    return [f"{len(missing)} category id(s) not found, shown as Uncategorized: {', '.join(missing)}"]


DEFAULT_VALIDATORS: Tuple[Validator, ...] = (zero_limit_budgets, unknown_category_refs)


class ReportService:
    """Builds a report from one store snapshot using injected aggregators.

    Each aggregator gets the snapshot and everything produced so far, and
    returns a partial result dict. A failing aggregator is recorded as an
    error step and the rest still run. Validators only produce messages; they
    never stop a report.
    """

    def __init__(
        self,
        store: Store,
        aggregators: Optional[Sequence[Aggregator]] = None,
        validators: Optional[Sequence[Validator]] = None,
        default_range: str = MONTH,
    ):
        self.store = store
        self.aggregators = tuple(DEFAULT_AGGREGATORS if aggregators is None else aggregators)
        self.validators = tuple(DEFAULT_VALIDATORS if validators is None else validators)
        self.default_range = default_range

    def snapshot(self, time_range: Optional[str] = None, now: Optional[datetime] = None) -> Snapshot:
        return Snapshot(
            transactions=tuple(self.store.get_transactions()),
            categories=tuple(self.store.get_categories()),
            budgets=tuple(self.store.get_budgets()),
            time_range=time_range or self.default_range,
            now=now or utc_now(),
        )

    def report(self, time_range: Optional[str] = None, now: Optional[datetime] = None) -> Dict[str, Any]:
        snap = self.snapshot(time_range, now)
        report = {
            "time_range": snap.time_range,
            "generated_at": snap.now.isoformat(),
            "validation": [],
            "steps": [],
            "result": {},
        }

        for v in self.validators:
            name = getattr(v, "__name__", str(v))
            try:
                msgs = list(v(snap))
            except Exception as e:
                logger.exception("validator %s failed", name)
                msgs = [f"validator_error: {e}"]
            report["validation"].append({"validator": name, "messages": msgs})

        acc: Dict[str, Any] = {}
        for agg in self.aggregators:
            name = getattr(agg, "__name__", str(agg))
            try:
                out = agg(snap, acc)
            except Exception as e:
                logger.exception("aggregator %s failed", name)
                report["steps"].append({"aggregator": name, "error": f"aggregator_error: {e}"})
                continue
            report["steps"].append({"aggregator": name, "output": out})
            if isinstance(out, dict):
                acc.update(out)

        report["result"] = acc
        logger.debug("built %s report with %d steps", snap.time_range, len(report["steps"]))
        return report
