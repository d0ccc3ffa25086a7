"""
Streamlit Frontend for Milkman Ledger

The calendar the operator uses every day:
1. Log in with the shared credentials
2. Pick a month, click a day, adjust the liters or mark no delivery
3. Open the bill to see the month's totals

All decisions live in CalendarState (src/ui); this file only draws it and
wires widget callbacks to it. The state is authoritative: widget values are
re-seeded from it on every rerun, so a failed save never leaves a widget
showing a number that isn't persisted.
"""

from datetime import date

import streamlit as st

from src.billing.engine import format_date_key, format_liters, format_money
from src.client import LedgerApiClient
from src.config import get_settings, validate_all_settings
from src.models.ledger import Category, DayStatus
from src.ui import CalendarState, Phase


# Page configuration
st.set_page_config(
    page_title="Milkman Ledger",
    page_icon="🥛",
    layout="wide",
    initial_sidebar_state="collapsed",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        white-space: pre-line;
    }
    .legend {
        font-size: 0.9em;
        color: #555;
    }
</style>
""", unsafe_allow_html=True)


STATUS_MARKERS = {
    DayStatus.DEFAULT: "⬜",
    DayStatus.MODIFIED: "🟧",
    DayStatus.NO_DELIVERY: "🟥",
}

WEEKDAYS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

SETTING_LABELS = {
    "global_rate": ("Global Rate (Rs/Liter)", 1.0),
    "default_category1": ("Default Category 1 (L/day)", 0.1),
    "default_category2": ("Default Category 2 (L/day)", 0.1),
}


def get_state() -> CalendarState:
    """One CalendarState per browser session, loaded on first use."""
    if "calendar" not in st.session_state:
        app_settings = get_settings().app
        client = LedgerApiClient(
            app_settings.api_base_url,
            timeout=app_settings.request_timeout_seconds,
        )
        state = CalendarState(client, app_settings=app_settings)
        with st.spinner("Loading..."):
            state.load(st.session_state.get("auth_session"))
        st.session_state.calendar = state
    return st.session_state.calendar


def main():
    """Main application entry point."""
    state = get_state()
    state.check_session()

    for message in state.pop_errors():
        st.error(message)

    if state.phase == Phase.UNAUTHENTICATED:
        render_login(state)
    elif state.phase == Phase.VIEWING:
        render_calendar(state)


def render_login(state: CalendarState):
    st.title("🥛 Milkman Ledger")

    with st.form("login"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in", type="primary")

    if submitted:
        if state.login(username, password):
            st.session_state.auth_session = state.session
            st.rerun()
        else:
            for message in state.pop_errors():
                st.error(message)


def _logout(state: CalendarState):
    state.logout()
    st.session_state.pop("auth_session", None)


def render_calendar(state: CalendarState):
    header, settings_col, bill_col, logout_col = st.columns([5, 1, 1, 1])
    with header:
        st.title("🥛 Milkman Ledger")
    with settings_col:
        st.button("⚙️ Settings", on_click=state.toggle_settings)
    with bill_col:
        st.button("🧾 Bill", on_click=state.toggle_bill)
    with logout_col:
        st.button("Logout", on_click=_logout, args=(state,))

    # Month navigation
    prev_col, title_col, next_col = st.columns([1, 4, 1])
    with prev_col:
        st.button("◀ Prev", on_click=state.change_month, args=(-1,))
    with title_col:
        st.subheader(date(state.year, state.month, 1).strftime("%B %Y"))
    with next_col:
        st.button("Next ▶", on_click=state.change_month, args=(1,))

    st.markdown(
        f'<div class="legend">{STATUS_MARKERS[DayStatus.DEFAULT]} Default &nbsp; '
        f'{STATUS_MARKERS[DayStatus.MODIFIED]} Modified &nbsp; '
        f'{STATUS_MARKERS[DayStatus.NO_DELIVERY]} No delivery</div>',
        unsafe_allow_html=True,
    )

    render_grid(state)

    if state.show_settings:
        render_settings_panel(state)
    if state.selected_day is not None:
        render_day_panel(state, state.selected_day)
    if state.show_bill:
        render_bill_panel(state)


def render_grid(state: CalendarState):
    for column, name in zip(st.columns(7), WEEKDAYS):
        column.markdown(f"**{name}**")

    for week in state.grid():
        for column, day in zip(st.columns(7), week):
            if day is None:
                column.write("")
                continue

            marker = STATUS_MARKERS[state.day_status(day)]
            c1 = state.effective(day, Category.CATEGORY_1)
            c2 = state.effective(day, Category.CATEGORY_2)
            column.button(
                f"{marker} {day.day}\nC1: {c1:g}L\nC2: {c2:g}L",
                key=f"day-{format_date_key(day)}",
                on_click=state.select_day,
                args=(day,),
                type="primary" if day == state.selected_day else "secondary",
            )


def _on_amount_change(state: CalendarState, day: date, category: Category, widget_key: str):
    state.edit_day(day, category, st.session_state[widget_key])


def render_day_panel(state: CalendarState, day: date):
    date_key = format_date_key(day)
    st.markdown("---")
    title_col, close_col = st.columns([5, 1])
    with title_col:
        st.subheader(f"Override for {day.strftime('%d %B %Y')}")
    with close_col:
        st.button("✕ Close", on_click=state.clear_selection)

    columns = st.columns(2)
    for column, category in zip(columns, Category):
        widget_key = f"amount-{category.value}-{date_key}"
        # Re-seed from state: it only holds confirmed values
        st.session_state[widget_key] = state.effective(day, category)
        column.number_input(
            f"Category {category.value} (Liters)",
            min_value=0.0,
            step=0.1,
            format="%.1f",
            key=widget_key,
            on_change=_on_amount_change,
            args=(state, day, category, widget_key),
        )

    st.button(
        "🚫 Mark No Delivery",
        on_click=state.mark_no_delivery,
        args=(day,),
    )


def _on_setting_change(state: CalendarState, field: str, widget_key: str):
    state.update_setting(field, st.session_state[widget_key])


def render_settings_panel(state: CalendarState):
    st.markdown("---")
    st.subheader("Settings")

    columns = st.columns(3)
    for column, (field, (label, step)) in zip(columns, SETTING_LABELS.items()):
        widget_key = f"setting-{field}"
        st.session_state[widget_key] = float(getattr(state.settings, field))
        column.number_input(
            label,
            min_value=0.0,
            step=step,
            key=widget_key,
            on_change=_on_setting_change,
            args=(state, field, widget_key),
        )

    if state.saving:
        st.caption("⏳ Auto-saving...")

    with st.expander("Configuration status"):
        render_configuration_status()


def render_configuration_status():
    status = validate_all_settings()

    services = [
        ("Operator login", "auth"),
        ("MongoDB (Storage)", "mongodb"),
        ("Google Sheets (Storage)", "google_sheets"),
    ]

    st.caption(f"Storage backend: {get_settings().app.storage_backend}")
    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")


def render_bill_panel(state: CalendarState):
    bill = state.bill()
    st.markdown("---")
    st.subheader(f"Bill Summary - {date(bill.year, bill.month, 1).strftime('%B %Y')}")

    for column, category in zip(st.columns(2), Category):
        totals = bill.for_category(category)
        with column:
            st.markdown(f"#### Category {category.value}")
            st.write(f"Total Liters: {format_liters(totals.total_liters)}L")
            st.write(f"Active Days: {totals.active_days}")
            st.metric("Amount", f"Rs{format_money(totals.total_amount)}")

    st.markdown(f"### Total: Rs{format_money(bill.grand_total)}")


if __name__ == "__main__":
    main()
