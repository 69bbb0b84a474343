import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import json
from datetime import datetime, time as dtime
from uuid import uuid4

import streamlit as st
import plotly.express as px
import plotly.graph_objects as go

from app.formatting import format_inr, format_inr_short, format_percent
from app.frames import budgets_frame, records_frame, transactions_frame
from tracker.budgets import budget_status, category_budget_overview
from tracker.config import get_settings
from tracker.domain import Budget, Category, EXPENSE, INCOME, TIME_RANGES, Transaction, TRANSACTION_TYPES, utc_now
from tracker.log import setup_logging
from tracker.services import ReportService
from tracker.store import JsonFileStore, StoreError, export_snapshot
from tracker.transforms import (
    add_budget,
    categories_of_type,
    delete_budget,
    expense_transactions,
    filter_transactions,
    income_transactions,
    update_budget,
)

settings = get_settings()
setup_logging(settings.log_level)

st.set_page_config(page_title="Finance Tracker", layout="wide")

if "store" not in st.session_state:
    st.session_state.store = JsonFileStore(settings.data_path, seed_path=settings.seed_path)
store = st.session_state.store
service = ReportService(store, default_range=settings.default_range)

menu = st.sidebar.radio("Menu", ["🏠 Overview", "🧾 Transactions", "💰 Budgets", "🏷 Categories", "📑 Reports"])
time_range = st.sidebar.selectbox(
    "Time range", TIME_RANGES, index=TIME_RANGES.index(settings.default_range)
)

report = service.report(time_range)
result = report["result"]
for v in report["validation"]:
    for msg in v["messages"]:
        st.sidebar.caption(f"⚠️ {msg}")
for step in report["steps"]:
    if "error" in step:
        st.sidebar.error(f"{step['aggregator']}: {step['error']}")


def summary_cards(summary):
    k1, k2, k3, k4 = st.columns(4)
    k1.metric("Total Income", format_inr(summary.total_income), f"{summary.income_count} income transactions")
    k2.metric("Total Expenses", format_inr(summary.total_expenses), f"{summary.expense_count} expense transactions")
    k3.metric("Net Balance", format_inr(summary.balance))
    k4.metric("Savings Rate", format_percent(summary.savings_rate))


if menu == "🏠 Overview":
    st.title("🏠 Overview")
    if "summary" in result:
        summary_cards(result["summary"])

    df = records_frame(result.get("overview", []), ["name", "income", "expense"])
    if df.empty:
        st.info("No data available for the selected period")
    else:
        fig = go.Figure()
        fig.add_trace(go.Bar(x=df["name"], y=df["income"], name="Income", marker_color="#4CAF50"))
        fig.add_trace(go.Bar(x=df["name"], y=df["expense"], name="Expense", marker_color="#F44336"))
        fig.update_layout(template="plotly_dark", barmode="group", margin=dict(t=30, b=10, l=10, r=10))
        st.plotly_chart(fig, use_container_width=True)

    averages = result.get("averages", {})
    a1, a2 = st.columns(2)
    a1.metric("Average Monthly Income", format_inr(averages.get("income", 0.0)), "Estimated monthly average")
    a2.metric("Average Monthly Expenses", format_inr(averages.get("expenses", 0.0)), "Estimated monthly average")

    st.subheader("Budget Overview")
    limits = {b.category_id: b.limit for b in store.get_budgets() if b.category_id}
    overview = category_budget_overview(
        store.get_transactions(), store.get_categories(), limits,
        default_limit=settings.default_budget_limit,
    )
    for u in overview:
        st.write(f"**{u.name}** · {format_inr(u.spent)} / {format_inr(u.limit)} ({u.percentage}%)")
        st.progress(u.percentage / 100)

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions")
    categories = store.get_categories()

    with st.expander("➕ Add Transaction"):
        with st.form("add_tx", clear_on_submit=True):
            tx_type = st.radio("Type", [EXPENSE, INCOME], horizontal=True)
            amount = st.number_input("Amount", min_value=0.0, step=100.0)
            description = st.text_input("Description")
            options = categories_of_type(categories, tx_type)
            cat = st.selectbox("Category", options, format_func=lambda c: c.name) if options else None
            day = st.date_input("Date")
            notes = st.text_area("Notes")
            if st.form_submit_button("Add") and description:
                now = utc_now()
                store.add_transaction(Transaction(
                    id=uuid4().hex[:9],
                    type=tx_type,
                    amount=float(amount),
                    description=description,
                    date=datetime.combine(day, dtime()),
                    category_id=cat.id if cat else None,
                    notes=notes or None,
                    created_at=now,
                ))
                st.rerun()

    c1, c2 = st.columns(2)
    type_filter = c1.selectbox("Type", ["all", INCOME, EXPENSE])
    search = c2.text_input("Search description or notes")
    by_type = {"all": tuple, INCOME: income_transactions, EXPENSE: expense_transactions}[type_filter]
    shown = filter_transactions(by_type(store.get_transactions()), search=search)
    df = transactions_frame(shown, categories)
    if df.empty:
        st.info("No transactions yet")
    else:
        disp = df.drop(columns=["id"]).copy()
        disp["date"] = disp["date"].dt.strftime("%Y-%m-%d")
        disp["amount"] = disp["amount"].map(format_inr)
        st.dataframe(disp, use_container_width=True, hide_index=True)
        to_delete = st.selectbox("Delete transaction", [""] + list(df["id"]),
                                 format_func=lambda i: i and f"{i} · {df.loc[df['id'] == i, 'description'].iloc[0]}")
        if to_delete and st.button("🗑 Delete"):
            store.delete_transaction(to_delete)
            st.rerun()

elif menu == "💰 Budgets":
    st.title("💰 Budgets")
    mode = st.radio("Spending", ["Actual by category", "Proportional estimate"], horizontal=True)
    if mode == "Actual by category":
        usages, totals = result.get("budgets", []), result.get("budget_totals")
    else:
        st.caption("Estimate only: this month's expenses split across budgets in proportion to their limits.")
        usages, totals = result.get("budget_estimates", []), result.get("budget_estimate_totals")

    if totals is not None:
        k1, k2, k3, k4 = st.columns(4)
        k1.metric("Total Budget", format_inr_short(totals.total_budget))
        k2.metric("Total Spent", format_inr_short(totals.total_spent))
        k3.metric("Remaining", format_inr_short(totals.remaining))
        k4.metric("Budget Health", f"{totals.health}%", "Of total budget used")

    for u in usages:
        status = budget_status(u.percentage)
        icon = {"ok": "🟢", "warning": "🟡", "danger": "🔴"}[status]
        st.write(f"{icon} **{u.name}** · {format_inr(u.spent)} / {format_inr(u.limit)}")
        st.progress(u.percentage / 100)

    with st.expander("➕ Add Budget"):
        with st.form("add_budget", clear_on_submit=True):
            name = st.text_input("Name")
            limit = st.number_input("Monthly limit", min_value=0.0, step=500.0)
            if st.form_submit_button("Add") and name:
                store.save_budgets(add_budget(store.get_budgets(), Budget(id=uuid4().hex[:9], name=name, limit=limit)))
                st.rerun()

    df = budgets_frame(usages)
    if not df.empty:
        edit = st.selectbox("Edit budget limit", [""] + list(df["id"]),
                            format_func=lambda i: i and df.loc[df["id"] == i, "name"].iloc[0])
        if edit:
            new_limit = st.number_input("New limit", min_value=0.0, step=500.0,
                                        value=float(df.loc[df["id"] == edit, "limit"].iloc[0]))
            if st.button("💾 Save limit"):
                store.save_budgets(update_budget(store.get_budgets(), edit, new_limit))
                st.rerun()
        drop = st.selectbox("Delete budget", [""] + list(df["id"]))
        if drop and st.button("🗑 Delete budget"):
            store.save_budgets(delete_budget(store.get_budgets(), drop))
            st.rerun()

elif menu == "🏷 Categories":
    st.title("🏷 Categories")
    categories = categories_of_type(store.get_categories())

    with st.expander("➕ Add Category"):
        with st.form("add_category", clear_on_submit=True):
            name = st.text_input("Name")
            cat_type = st.radio("Type", TRANSACTION_TYPES, horizontal=True, key="new_cat_type")
            color = st.color_picker("Color", "#4CAF50")
            if st.form_submit_button("Add") and name.strip():
                try:
                    store.add_category(Category(id=uuid4().hex[:9], name=name.strip(), type=cat_type, color=color))
                except StoreError as e:
                    st.error(str(e))
                else:
                    st.rerun()

    for c in categories:
        st.markdown(f"<span style='color:{c.color}'>●</span> **{c.name}** · {c.type}", unsafe_allow_html=True)

    if categories:
        picked = st.selectbox("Edit category", [""] + [c.id for c in categories],
                              format_func=lambda i: i and next(c.name for c in categories if c.id == i))
        if picked:
            current = next(c for c in categories if c.id == picked)
            new_name = st.text_input("Name", current.name, key=f"name_{picked}")
            new_color = st.color_picker("Color", current.color, key=f"color_{picked}")
            s1, s2 = st.columns(2)
            if s1.button("💾 Save category"):
                try:
                    store.update_category(Category(current.id, new_name.strip() or current.name, current.type, new_color))
                except StoreError as e:
                    st.error(str(e))
                else:
                    st.rerun()
            if s2.button("🗑 Delete category"):
                store.delete_category(picked)
                st.rerun()

elif menu == "📑 Reports":
    st.title("📑 Reports")
    if "summary" in result:
        summary_cards(result["summary"])

    tab_ie, tab_cat, tab_trend = st.tabs(["Income vs Expense", "Categories", "Trend"])
    with tab_ie:
        df = records_frame(result.get("overview", []), ["name", "income", "expense"])
        if not df.empty:
            fig = px.bar(df, x="name", y=["income", "expense"], barmode="group", template="plotly_dark",
                         color_discrete_sequence=["#4CAF50", "#F44336"])
            st.plotly_chart(fig, use_container_width=True)
    with tab_cat:
        df = records_frame(result.get("categories", []), ["name", "value", "color"])
        if not df.empty:
            fig = px.pie(df, names="name", values="value", color="name",
                         color_discrete_map=dict(zip(df["name"], df["color"])), template="plotly_dark")
            st.plotly_chart(fig, use_container_width=True)
            st.table(df.assign(value=df["value"].map(format_inr))[["name", "value"]])
    with tab_trend:
        df = records_frame(result.get("trend", []), ["name", "balance"])
        if not df.empty:
            fig = px.line(df, x="name", y="balance", markers=True, template="plotly_dark")
            st.plotly_chart(fig, use_container_width=True)

    payload = json.dumps(export_snapshot(store), indent=2, ensure_ascii=False)
    st.download_button("⬇ Export data (JSON)", payload,
                       file_name=f"tracker-export-{utc_now().date().isoformat()}.json",
                       mime="application/json")
