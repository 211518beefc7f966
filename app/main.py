"""
Streamlit Frontend for Expense Tracker

This is the page the user keeps open to record day-to-day spending.

DESIGN PRINCIPLES:
1. One form for adding and editing
2. Every change shows up immediately in the table, total and chart
3. Clear, field-level messages when input is invalid
4. Changes made in another browser tab show up on the next interaction

Each browser session owns its own ExpenseTrackerSession in
st.session_state; sessions only share the storage backend.
"""

import streamlit as st

from src.models.expense import FormValues
from src.orchestrator import (
    ExpenseTrackerSession,
    create_app_components,
)
from src.projections import input_date_value
from src.services.storage import InMemoryKeyValueStorage


# Page configuration
st.set_page_config(
    page_title="Expense Tracker",
    page_icon="💸",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


def get_session() -> ExpenseTrackerSession:
    """Get or create this browser session's components."""
    if "tracker" not in st.session_state:
        try:
            st.session_state.tracker = create_app_components()
        except Exception as e:
            st.error(f"Failed to open storage, changes will not be saved: {e}")
            st.session_state.tracker = create_app_components(
                storage=InMemoryKeyValueStorage()
            )
        st.session_state.form_version = 0
    return st.session_state.tracker


def bump_form_version() -> None:
    """Recreate the form widgets so they pick up the controller's values."""
    st.session_state.form_version += 1


def main():
    """Main application entry point."""
    session = get_session()

    # Pick up changes other tabs made since our last run
    for notice in session.sync():
        bump_form_version()
        if notice.edit_cancelled:
            st.warning("The expense you were editing was deleted in another tab.")
        elif notice.edit_conflict:
            st.warning(
                "The expense you are editing was changed in another tab. "
                "Saving now will overwrite those changes."
            )
        else:
            st.info("Expenses were updated in another tab.")

    # Sidebar navigation
    st.sidebar.title("💸 Expense Tracker")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📒 Expenses", "⚙️ Settings"],
        index=0,
    )

    if page == "📒 Expenses":
        render_expenses_page(session)
    elif page == "⚙️ Settings":
        render_settings_page(session)


def render_form(session: ExpenseTrackerSession):
    """Render the add/edit form."""
    controller = session.controller
    values = controller.form_values
    version = st.session_state.form_version

    with st.form("expense-form"):
        col1, col2 = st.columns(2)
        with col1:
            description = st.text_input(
                "Description *",
                value=values.description,
                key=f"description-{version}",
            )
            category = st.text_input(
                "Category *",
                value=values.category,
                key=f"category-{version}",
                help="Any label, e.g. Food, Rent, Travel",
            )
        with col2:
            amount = st.text_input(
                "Amount *",
                value=values.amount,
                key=f"amount-{version}",
                placeholder="0.00",
            )
            picked_date = st.date_input(
                "Date *",
                value=input_date_value(values.date),
                key=f"date-{version}",
            )

        submit_col, cancel_col = st.columns([3, 1])
        with submit_col:
            submitted = st.form_submit_button(controller.submit_label, type="primary")
        cancelled = False
        if controller.show_cancel:
            with cancel_col:
                cancelled = st.form_submit_button("Cancel Edit")

    if cancelled:
        session.cancel_edit()
        bump_form_version()
        st.rerun()

    if submitted:
        outcome, _ = session.submit(FormValues(
            description=description,
            category=category,
            amount=amount,
            date=picked_date.isoformat() if picked_date else "",
        ))
        if outcome.accepted:
            bump_form_version()
            st.rerun()
        for issue in outcome.validation.issues:
            st.error(issue.message)


def render_expenses_page(session: ExpenseTrackerSession):
    """Render the main expenses page."""
    st.title("📒 Expenses")

    render_form(session)

    if not session.store.last_persist_ok:
        st.warning(
            "Your last change could not be saved to storage. "
            "It is kept in this tab only."
        )

    view = session.view()

    st.markdown("---")
    table_col, chart_col = st.columns([3, 2])

    with table_col:
        st.markdown(
            f'Total: <span class="big-number">{view.formatted_total}</span>',
            unsafe_allow_html=True,
        )

        if view.empty_message:
            st.info(view.empty_message)

        for row in view.rows:
            cols = st.columns([3, 2, 2, 2, 1, 1])
            marker = "✏️ " if row.is_editing else ""
            # st.text never interprets markup in user-entered values
            cols[0].text(f"{marker}{row.description}")
            cols[1].text(row.category)
            cols[2].text(row.formatted_amount)
            cols[3].text(row.formatted_date)
            if cols[4].button("Edit", key=f"edit-{row.id}"):
                session.start_edit(row.id)
                bump_form_version()
                st.rerun()
            if cols[5].button("Delete", key=f"delete-{row.id}"):
                session.delete(row.id)
                bump_form_version()
                st.rerun()

    with chart_col:
        st.subheader("By Category")
        chart = view.chart
        if chart is not None and chart.has_chart:
            st.plotly_chart(chart.handle, use_container_width=True)
        if chart is not None:
            st.caption(chart.status_message)


def render_settings_page(session: ExpenseTrackerSession):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")

    from src.config import validate_all_settings

    status = validate_all_settings()
    for name in ("storage", "display", "app"):
        if status.get(name, False):
            st.success(f"✅ {name.title()} settings loaded")
        else:
            st.error(f"❌ {name.title()} - {status.get(f'{name}_error', 'Invalid')}")

    st.markdown("### Storage")
    st.markdown(f"**Backend:** `{type(session.storage).__name__}`")
    st.markdown(f"**Key:** `{session.store.key}`")
    st.markdown(f"**Expenses stored:** {len(session.store)}")

    st.markdown("### Recent Diagnostics")
    events = session.diagnostics.recent_events[-20:]
    if not events:
        st.info("Nothing to report.")
    for event in reversed(events):
        with st.expander(f"{event.severity.value.upper()} · {event.description}"):
            st.json(event.to_log_dict())

    st.markdown("---")
    st.markdown(
        "Configure the tracker with environment variables or a `.env` file, "
        "e.g. `EXPENSE_STORAGE_PATH` and `EXPENSE_DISPLAY_CURRENCY_SYMBOL`."
    )


if __name__ == "__main__":
    main()
