"""
Streamlit Frontend for Split Ledger

The page a group of friends opens to track who paid for what.

DESIGN PRINCIPLES:
1. The page never changes the ledger itself - it calls the session
2. After every change the page re-queries balances and settlements
3. Rejected input is shown next to the form, the ledger stays as it was
4. The current ledger always lives in the page URL, so copying the URL shares it
"""

import time
from datetime import date
from urllib.parse import urlencode

import streamlit as st

from splitledger.codec import serialize
from splitledger.config import get_settings
from splitledger.ledger import LedgerError
from splitledger.models.ledger import Expense, ExpenseType
from splitledger.orchestrator import LedgerSession, create_app_components
from splitledger.queries import LedgerQueries, balance_markup, format_currency


st.set_page_config(
    page_title="Split Ledger",
    page_icon="💸",
    layout="wide",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .owed { color: #28a745; font-weight: bold; }
    .owes { color: #dc3545; font-weight: bold; }
    .settled { color: #6c757d; }
</style>
""", unsafe_allow_html=True)


def get_session() -> LedgerSession:
    """Open the ledger once per browser session."""
    if "ledger_session" not in st.session_state:
        settings = get_settings()
        param = settings.sharing.query_param
        token = st.query_params.get(param)
        reference = None
        if token:
            reference = f"{settings.sharing.base_url}?{urlencode({param: token})}"
        st.session_state.ledger_session = create_app_components(reference=reference)
        st.session_state.last_backup = time.monotonic()
    return st.session_state.ledger_session


def sync_url(session: LedgerSession) -> None:
    """Keep the page URL carrying the current ledger."""
    param = get_settings().sharing.query_param
    state = session.snapshot()
    if state.is_empty:
        st.query_params.pop(param, None)
    else:
        st.query_params[param] = serialize(state)


def maybe_backup(session: LedgerSession) -> None:
    """Write a backup when the configured interval has passed."""
    interval = get_settings().app.backup_interval_seconds
    now = time.monotonic()
    if now - st.session_state.get("last_backup", now) >= interval:
        session.backup()
        st.session_state.last_backup = now


def run_mutation(session: LedgerSession, action, success_message: str) -> bool:
    """Run one session mutation, report the outcome and refresh the URL."""
    try:
        action()
    except LedgerError as e:
        st.error(str(e))
        return False
    sync_url(session)
    st.toast(success_message)
    return True


def main():
    """Main application entry point."""
    session = get_session()
    maybe_backup(session)

    st.title("💸 Split Ledger")

    people_tab, expenses_tab, settle_tab, share_tab = st.tabs(
        ["👥 People", "🧾 Expenses", "⚖️ Settle Up", "🔗 Share"]
    )

    with people_tab:
        render_people_tab(session)
    with expenses_tab:
        render_expenses_tab(session)
    with settle_tab:
        render_settlements_tab(session)
    with share_tab:
        render_share_tab(session)


def render_people_tab(session: LedgerSession):
    """Add, rename and delete people."""
    with st.form("add_person", clear_on_submit=True):
        name = st.text_input("Name", placeholder="e.g., Asha")
        if st.form_submit_button("➕ Add Person", type="primary"):
            run_mutation(
                session,
                lambda: session.add_person(name),
                f"{name.strip()} added successfully",
            )

    if not session.people:
        st.info("👥 No people added yet. Add someone to get started.")
        return

    for person in session.people:
        col1, col2, col3 = st.columns([3, 2, 1])
        with col1:
            new_name = st.text_input(
                "Name",
                value=person.name,
                key=f"rename_{person.id}",
                label_visibility="collapsed",
            )
        with col2:
            if st.button("✏️ Rename", key=f"rename_btn_{person.id}"):
                if run_mutation(
                    session,
                    lambda: session.rename_person(person.id, new_name),
                    f"{person.name} renamed to {new_name.strip()}",
                ):
                    st.rerun()
        with col3:
            if st.button("🗑️", key=f"delete_person_{person.id}",
                         help="Also deletes every expense they are part of"):
                if run_mutation(
                    session,
                    lambda: session.delete_person(person.id),
                    f"{person.name} and their expenses deleted",
                ):
                    st.rerun()


def expense_form(session: LedgerSession, key: str, expense: Expense = None):
    """
    Render the expense fields.

    Returns the field values in LedgerSession.add_expense order.
    """
    people = list(session.people)
    names = {p.id: p.name for p in people}
    types = [t.value for t in ExpenseType]
    if expense and expense.expense_type not in types:
        types.append(expense.expense_type)

    col1, col2 = st.columns(2)
    with col1:
        description = st.text_input(
            "Description *",
            value=expense.description if expense else "",
            key=f"{key}_description",
        )
        amount = st.number_input(
            f"Amount ({get_settings().app.currency_symbol}) *",
            value=float(expense.amount) if expense else 0.0,
            min_value=0.0,
            step=0.01,
            format="%.2f",
            key=f"{key}_amount",
        )
        expense_type = st.selectbox(
            "Type *",
            options=types,
            index=types.index(expense.expense_type) if expense else 0,
            key=f"{key}_type",
        )
    with col2:
        expense_date = st.date_input(
            "Date *",
            value=expense.expense_date if expense else date.today(),
            key=f"{key}_date",
        )
        payer_ids = [p.id for p in people]
        paid_by = st.selectbox(
            "Paid by *",
            options=payer_ids,
            index=payer_ids.index(expense.paid_by) if expense else 0,
            format_func=lambda pid: names[pid],
            key=f"{key}_paid_by",
        )
        split_between = st.multiselect(
            "Split between *",
            options=payer_ids,
            default=list(expense.split_between) if expense else payer_ids,
            format_func=lambda pid: names[pid],
            key=f"{key}_split",
        )

    # str() keeps the typed value; float cents would drift
    return description, str(amount), expense_type, expense_date, paid_by, split_between


def render_expenses_tab(session: LedgerSession):
    """Add, edit and delete expenses."""
    if not session.people:
        st.info("Add people before adding expenses.")
        return

    symbol = get_settings().app.currency_symbol

    with st.form("add_expense", clear_on_submit=True):
        st.subheader("Add Expense")
        fields = expense_form(session, "new")
        if st.form_submit_button("➕ Add Expense", type="primary"):
            run_mutation(
                session,
                lambda: session.add_expense(*fields),
                "Expense added successfully",
            )

    queries = LedgerQueries(session.snapshot())
    expenses = queries.list_expenses(newest_first=True)
    if not expenses:
        st.info("💸 No expenses added yet. Add an expense to start tracking.")
        return

    st.markdown("---")
    st.metric("Total spent", format_currency(queries.total_spent(), symbol))

    for expense in expenses:
        payer = queries.person_name(expense.paid_by) or "Unknown"
        members = ", ".join(
            queries.person_name(pid) or "Unknown" for pid in expense.split_between
        )
        title = (
            f"{expense.description} - {format_currency(expense.amount, symbol)} "
            f"({expense.expense_type}, {expense.expense_date.strftime('%d %b %Y')})"
        )
        with st.expander(title):
            st.markdown(f"**Paid by** {payer}  \n**Split:** {members}")

            with st.form(f"edit_expense_{expense.id}"):
                fields = expense_form(session, f"edit_{expense.id}", expense)
                if st.form_submit_button("💾 Save Changes"):
                    if run_mutation(
                        session,
                        lambda: session.edit_expense(expense.id, *fields),
                        "Expense updated successfully",
                    ):
                        st.rerun()

            if st.button("🗑️ Delete Expense", key=f"delete_expense_{expense.id}"):
                if run_mutation(
                    session,
                    lambda: session.delete_expense(expense.id),
                    "Expense deleted",
                ):
                    st.rerun()


def render_settlements_tab(session: LedgerSession):
    """Show balances and who pays whom."""
    symbol = get_settings().app.currency_symbol
    queries = LedgerQueries(session.snapshot())

    st.subheader("Balances")
    lines = queries.balance_summary()
    if not lines:
        st.info("⚖️ No balances to show. Add people and expenses to see settlements.")
    for line in lines:
        st.markdown(balance_markup(line, symbol), unsafe_allow_html=True)

    st.subheader("Settlements")
    settlements = queries.settlement_lines()
    if not settlements:
        st.success("✅ All settled up! No payments needed.")
    for settlement in settlements:
        st.markdown(f"**{settlement.text}** {format_currency(settlement.amount, symbol)}")

    totals = queries.total_by_type()
    if totals:
        st.subheader("Spending by Type")
        st.bar_chart({label: float(total) for label, total in totals.items()})


def render_share_tab(session: LedgerSession):
    """Show a link that opens this exact ledger."""
    st.subheader("Share this ledger")
    if session.snapshot().is_empty:
        st.info("Nothing to share yet.")
        return
    st.markdown("Anyone opening this link sees the same people and expenses.")
    if st.button("🔗 Create Share Link"):
        st.code(session.share_reference(), language=None)


if __name__ == "__main__":
    main()
