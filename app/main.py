"""
Streamlit Frontend for SmartReceipt

A single-page expense tracker with four views:
dashboard, history, add/edit and settings.

DESIGN PRINCIPLES:
1. One snapshot of the data, kept in st.session_state as an AppState
2. Every button hands the snapshot to the controller and stores
   the snapshot it returns
3. Receipt scans only pre-fill the form; the user always presses Save
4. Clear messages for every failure, nothing hidden
"""

import asyncio
from datetime import date
from decimal import Decimal

import streamlit as st

from smartreceipt.config import get_settings, validate_all_settings
from smartreceipt.models import ExpenseCategory, ViewType
from smartreceipt.orchestrator import ExpenseController, create_app_components
from smartreceipt.queries import describe_range


# Page configuration
st.set_page_config(
    page_title="SmartReceipt",
    page_icon="🧾",
    layout="centered",
    initial_sidebar_state="collapsed",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .badge {
        display: inline-block;
        padding: 2px 10px;
        border-radius: 10px;
        background-color: #e0e7ff;
        color: #3730a3;
        font-size: 0.8em;
        text-transform: uppercase;
    }
    .over-limit {
        padding: 16px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)

NAV_ITEMS = [
    (ViewType.DASHBOARD, "📊 Dashboard"),
    (ViewType.HISTORY, "📜 History"),
    (ViewType.ADD, "➕ Add"),
    (ViewType.SETTINGS, "⚙️ Settings"),
]

NOTICE_RENDERERS = {
    "success": st.success,
    "info": st.info,
    "warning": st.warning,
    "error": st.error,
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_controller() -> ExpenseController:
    """Get or create the application controller (cached)."""
    return create_app_components()


def get_state(controller: ExpenseController):
    if "app_state" not in st.session_state:
        st.session_state.app_state = controller.initial_state()
        st.session_state.form_version = 0
    return st.session_state.app_state


def set_state(new_state, reset_form: bool = False):
    """Store the next snapshot and rerun the script."""
    st.session_state.app_state = new_state
    if reset_form:
        # New widget keys, so the inputs show the new form values
        st.session_state.form_version += 1
    st.rerun()


def format_money(amount: Decimal) -> str:
    return f"${amount:,.2f}"


def main():
    """Main application entry point."""
    controller = get_controller()
    state = get_state(controller)

    col_title, col_badge = st.columns([4, 1])
    with col_title:
        st.title("🧾 SmartReceipt")
    with col_badge:
        st.markdown(
            f'<span class="badge">{state.header_label}</span>',
            unsafe_allow_html=True,
        )

    nav_cols = st.columns(len(NAV_ITEMS))
    for col, (view, label) in zip(nav_cols, NAV_ITEMS):
        with col:
            if st.button(label, key=f"nav_{view.value}",
                         type="primary" if state.view == view else "secondary"):
                set_state(controller.navigate(state, view), reset_form=True)

    if state.notice:
        NOTICE_RENDERERS[state.notice.level](state.notice.text)

    if state.view == ViewType.DASHBOARD:
        render_dashboard(controller, state)
    elif state.view == ViewType.HISTORY:
        render_history(controller, state)
    elif state.view == ViewType.ADD:
        render_add(controller, state)
    elif state.view == ViewType.SETTINGS:
        render_settings(controller, state)


def render_dashboard(controller: ExpenseController, state):
    """Render today's spend, period totals and the 7-day trend."""
    st.subheader("Today")

    with st.expander("📅 Custom date range"):
        col1, col2 = st.columns(2)
        with col1:
            range_start = st.date_input("From", value=None, key="range_start")
        with col2:
            range_end = st.date_input("To", value=None, key="range_end")

    summary = controller.dashboard(state, range_start=range_start, range_end=range_end)

    st.markdown(
        f'<div class="big-number">{format_money(summary.daily_total)}</div>',
        unsafe_allow_html=True,
    )
    st.caption(f"Daily limit: {format_money(summary.daily_limit)}")
    st.progress(int(summary.limit_progress))

    if summary.is_over_limit:
        over_text = "Over your daily limit!"
        if summary.over_limit_percent is not None:
            over_text = f"{summary.over_limit_percent:.0f}% over your daily limit!"
        st.markdown(
            f'<div class="over-limit"><strong>⚠️ {over_text}</strong></div>',
            unsafe_allow_html=True,
        )
    else:
        st.success("✅ You are within your daily limit.")

    col1, col2 = st.columns(2)
    with col1:
        st.metric("This week", format_money(summary.week_total))
    with col2:
        st.metric("This month", format_money(summary.month_total))

    if summary.custom_range is not None:
        st.metric(
            f"Spent {describe_range(range_start, range_end)}",
            format_money(summary.custom_range.total),
            help=f"{summary.custom_range.count} expense(s)",
        )

    st.markdown("### Last 7 days")
    st.bar_chart(
        {
            "Day": [point.label for point in summary.last_7_days],
            "Spent": [float(point.amount) for point in summary.last_7_days],
        },
        x="Day",
        y="Spent",
    )


def render_history(controller: ExpenseController, state):
    """Render the searchable, date-filtered expense list."""
    st.subheader("History")

    search_term = st.text_input(
        "Search",
        placeholder="Merchant or category",
        key="history_search",
    )
    col1, col2 = st.columns(2)
    with col1:
        start_date = st.date_input("From", value=None, key="history_start")
    with col2:
        end_date = st.date_input("To", value=None, key="history_end")

    result = controller.history(state, search_term, start_date, end_date)

    st.caption(f"{result.count} expense(s), {format_money(result.total)} in total")

    if not result.expenses:
        st.info("📋 No expenses found. Use the 'Add' view to record one.")
        return

    for expense in result.expenses:
        col_info, col_edit, col_delete = st.columns([5, 1, 1])
        with col_info:
            ai_mark = " 🤖" if expense.is_ai_generated else ""
            st.markdown(
                f"{expense.icon} **{expense.merchant}**{ai_mark}  \n"
                f"{expense.category} · {expense.date.strftime('%d %b %Y')} · "
                f"**{format_money(expense.amount)}**"
            )
        with col_edit:
            if st.button("✏️", key=f"edit_{expense.id}", help="Edit"):
                set_state(controller.begin_edit(state, expense.id), reset_form=True)
        with col_delete:
            if st.button("🗑️", key=f"delete_{expense.id}", help="Delete"):
                set_state(controller.delete_expense(state, expense.id))


def render_add(controller: ExpenseController, state):
    """Render the add/edit form with the optional receipt scan."""
    st.subheader("Edit expense" if state.is_editing else "Add expense")
    version = st.session_state.form_version

    if not state.is_editing:
        if controller.can_scan:
            uploaded_file = st.file_uploader(
                "Scan a receipt (optional)",
                type=get_settings().app.supported_formats_list,
                key=f"receipt_{version}",
                help="Take a clear, well-lit photo of the receipt",
            )
            if uploaded_file and st.button("🔍 Scan Receipt", disabled=controller.is_scanning):
                with st.spinner("Reading your receipt..."):
                    scanned = run_async(controller.scan_receipt(
                        state,
                        uploaded_file.getvalue(),
                        uploaded_file.type or "image/jpeg",
                    ))
                set_state(scanned, reset_form=True)
        else:
            st.caption("Receipt scanning is off. Set GEMINI_API_KEY to enable it.")

    form = state.form
    if form.is_ai_generated:
        st.info("🤖 These details were read from a receipt. Please check them.")

    categories = [category.value for category in ExpenseCategory]
    if form.category and form.category not in categories:
        categories.append(form.category)

    amount = st.number_input(
        "Amount *",
        value=float(form.amount) if form.amount is not None else None,
        min_value=0.0,
        step=0.01,
        format="%.2f",
        key=f"amount_{version}",
    )
    merchant = st.text_input(
        "Merchant / Title *",
        value=form.merchant,
        key=f"merchant_{version}",
    )
    category = st.selectbox(
        "Category *",
        options=categories,
        index=categories.index(form.category) if form.category in categories else None,
        key=f"category_{version}",
    )
    expense_date = st.date_input(
        "Date *",
        value=form.date or date.today(),
        key=f"date_{version}",
    )

    if state.validation and state.validation.warnings:
        for issue in state.validation.warnings:
            st.warning(issue.message)

    col1, col2 = st.columns(2)
    with col1:
        if st.button("✅ Save", type="primary"):
            updated = controller.update_form(
                state,
                amount=Decimal(str(amount)) if amount is not None else None,
                merchant=merchant or "",
                category=category or "",
                date=expense_date,
            )
            if updated.notice and updated.notice.level == "error":
                set_state(updated)
            set_state(controller.submit_expense(updated), reset_form=True)
    with col2:
        if st.button("❌ Cancel"):
            set_state(controller.cancel_edit(state), reset_form=True)


def render_settings(controller: ExpenseController, state):
    """Render the daily-limit form and the service status."""
    st.subheader("Settings")

    daily_limit = st.number_input(
        "Daily spending limit",
        value=float(state.settings.daily_limit),
        min_value=0.0,
        step=1.0,
        format="%.2f",
        key=f"daily_limit_{st.session_state.form_version}",
    )
    if st.button("💾 Save Settings", type="primary"):
        set_state(controller.save_settings(state, Decimal(str(daily_limit))), reset_form=True)

    st.markdown("---")
    st.markdown("### Receipt Scanning")
    status = validate_all_settings()
    if status.get("gemini", False):
        st.success("✅ Gemini (AI) - Configured")
    else:
        st.error(f"❌ Gemini (AI) - {status.get('gemini_error', 'Not configured')}")

    st.markdown(
        "To configure the application, create a `.env` file with your "
        "GEMINI_API_KEY and optional SMARTRECEIPT_* settings."
    )


if __name__ == "__main__":
    main()
