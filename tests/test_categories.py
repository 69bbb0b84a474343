from datetime import datetime
from typing import Iterable

from tracker.categories import category_index, category_label, group_by_category, top_categories
from tracker.domain import Category, CategoryTotal, Transaction


def make_sample():
    cats = (
        Category("1", "Groceries", "expense", "#4CAF50"),
        Category("2", "Rent", "expense", "#F44336"),
        Category("5", "Salary", "income", "#2196F3"),
    )
    trans = (
        Transaction("t1", "expense", 300.0, "Market", datetime(2026, 10, 1), "1"),
        Transaction("t2", "expense", 1200.0, "October rent", datetime(2026, 10, 2), "2"),
        Transaction("t3", "income", 5000.0, "Salary", datetime(2026, 10, 3), "5"),
        Transaction("t4", "expense", 700.0, "Restaurant", datetime(2026, 10, 4), "1"),
    )
    return cats, trans


def test_group_by_category_sums_and_sorts_descending():
    cats, trans = make_sample()
    assert group_by_category(trans, cats) == [
        CategoryTotal("Rent", 1200.0, "#F44336"),
        CategoryTotal("Groceries", 1000.0, "#4CAF50"),
    ]


def test_group_by_category_including_income():
    cats, trans = make_sample()
    names = [row.name for row in group_by_category(trans, cats, expense_only=False)]
    assert names == ["Salary", "Rent", "Groceries"]


def test_unresolved_categories_share_one_uncategorized_row():
    cats, _ = make_sample()
    trans = tuple(
        Transaction(f"u{i}", "expense", 10.0 * (i + 1), "misc", datetime(2026, 10, 5), cat_id)
        for i, cat_id in enumerate(["404", "405", None, "", "999"])
    )
    assert group_by_category(trans, cats) == [CategoryTotal("Uncategorized", 150.0, "#999999")]


def test_equal_totals_keep_encounter_order():
    cats = (
        Category("a", "Books", "expense", "#111111"),
        Category("b", "Games", "expense", "#222222"),
        Category("c", "Music", "expense", "#333333"),
    )
    trans = (
        Transaction("t1", "expense", 50.0, "x", datetime(2026, 10, 1), "b"),
        Transaction("t2", "expense", 80.0, "x", datetime(2026, 10, 1), "c"),
        Transaction("t3", "expense", 50.0, "x", datetime(2026, 10, 1), "a"),
    )
    assert [row.name for row in group_by_category(trans, cats)] == ["Music", "Games", "Books"]


def test_group_by_category_empty():
    cats, _ = make_sample()
    assert group_by_category((), cats) == []
    assert group_by_category((), ()) == []


def test_top_categories_accepts_generator_input():
    cats, trans = make_sample()

    def tx_stream() -> Iterable[Transaction]:
        for t in trans:
            yield t

    assert list(top_categories(tx_stream(), cats, k=1)) == [CategoryTotal("Rent", 1200.0, "#F44336")]


def test_top_categories_k_bigger_than_categories():
    cats, trans = make_sample()
    assert len(list(top_categories(trans, cats, k=10))) == 2
    assert list(top_categories(trans, cats, k=0)) == []


def test_category_label():
    cats, _ = make_sample()
    assert category_label(cats, "2") == "Rent"
    assert category_label(cats, "nope") == "Uncategorized"
    assert category_label(cats, None) == "Uncategorized"


def test_category_index_keeps_first_definition():
    cats = (
        Category("1", "Groceries", "expense", "#4CAF50"),
        Category("1", "Food", "expense", "#000000"),
    )
    assert category_index(cats)["1"].name == "Groceries"
