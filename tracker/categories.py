from itertools import islice
from typing import Dict, Iterable, Iterator, List, Optional

from tracker.domain import Category, CategoryTotal, EXPENSE, Transaction, UNCATEGORIZED
from tracker.functional import resolve_category


def category_index(cats: Iterable[Category]) -> Dict[str, Category]:
    index: Dict[str, Category] = {}
    for c in cats:
        # first definition wins, as a linear lookup would
        index.setdefault(c.id, c)
    return index


def category_label(cats: Iterable[Category], cat_id: Optional[str]) -> str:
    return resolve_category(cats, cat_id).name


def group_by_category(
    trans: Iterable[Transaction],
    cats: Iterable[Category],
    expense_only: bool = True,
) -> List[CategoryTotal]:
    """Sum amounts per category, largest first.

    Every transaction whose category cannot be resolved is counted under one
    shared Uncategorized row. Equal totals keep the order in which their
    categories were first seen.
    """
    index = category_index(cats)
    totals: Dict[str, float] = {}
    seen: Dict[str, Category] = {}

    for t in trans:
        if expense_only and t.type != EXPENSE:
            continue
        cat = index.get(t.category_id, UNCATEGORIZED) if t.category_id else UNCATEGORIZED
        totals[cat.id] = totals.get(cat.id, 0.0) + t.amount
        seen.setdefault(cat.id, cat)

    rows = [
        CategoryTotal(name=seen[cid].name, value=total, color=seen[cid].color)
        for cid, total in totals.items()
    ]
    return sorted(rows, key=lambda r: r.value, reverse=True)


def top_categories(
    trans: Iterable[Transaction], cats: Iterable[Category], k: int
) -> Iterator[CategoryTotal]:
    yield from islice(group_by_category(trans, cats), max(0, k))
