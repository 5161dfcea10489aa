"""
Streamlit Frontend for Khata

This is the screen a shopkeeper keeps open at the counter all day.

DESIGN PRINCIPLES:
1. Two taps to record an entry
2. Balances always recomputed, never typed in
3. Clear error messages in simple language
4. Visual feedback for all operations
5. Nothing is saved without an explicit "Save" action

Every write goes through the flows in khata.orchestrator, which
validate, persist and audit. The UI only renders and collects input.
"""

import tempfile
from datetime import date
from pathlib import Path

import streamlit as st

from khata.config import validate_all_settings
from khata.models import (
    BalanceStatus,
    ExpenseCategory,
    Language,
    ReportTab,
    Theme,
    TimeWindow,
    TransactionType,
)
from khata.orchestrator import (
    ExpenseFlow,
    LedgerFlow,
    ReportFlow,
    ShopFlow,
    create_app_components,
)
from khata.services.export_csv import report_filename
from khata.utils import format_currency, format_date, format_time


# Page configuration
st.set_page_config(
    page_title="Khata",
    page_icon="📒",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .receivable-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .payable-box {
        padding: 20px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 10px 0;
    }
    .settled-box {
        padding: 20px;
        background-color: #e2e3e5;
        border-radius: 10px;
        border-left: 5px solid #6c757d;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)

BALANCE_BOXES = {
    BalanceStatus.RECEIVABLE: ("receivable-box", "You will get"),
    BalanceStatus.PAYABLE: ("payable-box", "You will give (advance)"),
    BalanceStatus.SETTLED: ("settled-box", "Settled"),
}

WINDOW_LABELS = {
    TimeWindow.ALL: "All time",
    TimeWindow.TODAY: "Today",
    TimeWindow.THIS_MONTH: "This month",
}


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components()


def main():
    """Main application entry point."""
    shop_flow, ledger_flow, expense_flow, report_flow = get_components()

    if not shop_flow.is_setup():
        render_setup_page(shop_flow)
        return

    profile = shop_flow.get_profile()
    currency = profile.currency

    # Sidebar navigation
    st.sidebar.title(f"📒 {profile.name}")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["🏠 Dashboard", "👥 Customers", "📖 Ledger", "💸 Expenses", "📊 Reports", "⚙️ Settings"],
        key="page",
    )

    # Route to appropriate page
    if page == "🏠 Dashboard":
        render_dashboard_page(ledger_flow, currency)
    elif page == "👥 Customers":
        render_customers_page(ledger_flow, currency)
    elif page == "📖 Ledger":
        render_ledger_page(ledger_flow, currency)
    elif page == "💸 Expenses":
        render_expenses_page(expense_flow, currency)
    elif page == "📊 Reports":
        render_reports_page(report_flow, currency)
    elif page == "⚙️ Settings":
        render_settings_page(shop_flow)


def render_setup_page(shop_flow: ShopFlow):
    """First-run shop setup."""
    st.title("📒 Set up your Khata")
    st.markdown("Tell us about your shop. You can change this later in Settings.")

    with st.form("setup"):
        name = st.text_input("Shop Name *")
        owner_name = st.text_input("Owner Name *")
        phone = st.text_input("Shop Phone")
        phone_pe_number = st.text_input(
            "PhonePe / UPI Number",
            help="Shown in payment reminders. Leave empty to use the shop phone.",
        )
        address = st.text_area("Address")
        submitted = st.form_submit_button("✅ Start Khata", type="primary")

    if submitted:
        result = shop_flow.setup_shop(
            name=name,
            owner_name=owner_name,
            phone=phone,
            address=address,
            phone_pe_number=phone_pe_number,
        )
        if result.success:
            st.rerun()
        else:
            st.error(result.message)


def render_dashboard_page(ledger_flow: LedgerFlow, currency: str):
    """Shop-wide totals and the latest entries."""
    st.title("🏠 Dashboard")

    stats = ledger_flow.dashboard()

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("You will get", format_currency(stats.total_receivable, currency))
    col2.metric("You will give", format_currency(stats.total_payable, currency))
    col3.metric("Net balance", format_currency(stats.net_balance, currency))
    col4.metric("Collected today", format_currency(stats.today_collection, currency))

    st.markdown("---")
    st.subheader("Recent Activity")

    rows = ledger_flow.recent_activity()
    if not rows:
        st.info("No entries yet. Open a customer ledger to record the first one.")
        return

    for row in rows:
        st.markdown(
            f"**{row.customer_name}** · {row.type_label} · "
            f"{format_currency(row.amount, currency)} · "
            f"{format_date(row.date)} {format_time(row.date)}"
        )


def _open_ledger(customer_id: str):
    st.session_state.customer_id = customer_id
    st.session_state.page = "📖 Ledger"


def render_customers_page(ledger_flow: LedgerFlow, currency: str):
    """Customer list with search and the add-customer form."""
    st.title("👥 Customers")

    with st.expander("➕ Add Customer"):
        with st.form("add_customer", clear_on_submit=True):
            name = st.text_input("Name *")
            phone = st.text_input("Phone")
            address = st.text_input("Address")
            submitted = st.form_submit_button("Save Customer", type="primary")

        if submitted:
            result = ledger_flow.add_customer(name=name, phone=phone, address=address)
            if result.success:
                st.success(result.message)
            else:
                st.error(result.message)

    search = st.text_input("🔍 Search by name or phone")
    entries = ledger_flow.list_customers(search)

    if not entries:
        st.info("No customers found.")
        return

    for entry in entries:
        col1, col2, col3 = st.columns([3, 2, 1])
        col1.markdown(f"**{entry.customer.name}**  \n{entry.customer.phone or '-'}")
        _, label = BALANCE_BOXES[entry.balance.status]
        col2.markdown(f"{label}: **{format_currency(entry.balance.amount, currency)}**")
        col3.button(
            "Open",
            key=f"open_{entry.customer.id}",
            on_click=_open_ledger,
            args=(entry.customer.id,),
        )


def render_ledger_page(ledger_flow: LedgerFlow, currency: str):
    """One customer's entries, the entry form and the reminder link."""
    customer_id = st.session_state.get("customer_id")
    ledger = ledger_flow.open_ledger(customer_id) if customer_id else None

    if ledger is None:
        st.session_state.customer_id = None
        st.title("📖 Ledger")
        st.info("Pick a customer on the Customers page to open their ledger.")
        return

    customer = ledger.customer
    st.title(f"📖 {customer.name}")

    box, label = BALANCE_BOXES[ledger.balance.status]
    st.markdown(f"""
    <div class="{box}">
        <h4>{label}</h4>
        <p class="big-number">{format_currency(ledger.balance.amount, currency)}</p>
    </div>
    """, unsafe_allow_html=True)

    # Entry form
    with st.form("entry", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            amount = st.text_input("Amount *", placeholder="e.g. 500")
            entry_date = st.date_input("Date", value=date.today())
        with col2:
            notes = st.text_area("Note (optional)")

        col1, col2 = st.columns(2)
        gave = col1.form_submit_button("🔴 You Gave", type="primary")
        got = col2.form_submit_button("🟢 You Got")

    if gave or got:
        result = ledger_flow.record_transaction(
            customer_id=customer.id,
            transaction_type=TransactionType.GIVE if gave else TransactionType.GET,
            amount=amount,
            entry_date=entry_date,
            notes=notes,
        )
        if result.success:
            st.rerun()
        else:
            st.error(result.message)

    # Reminder
    if not ledger.balance.is_settled and customer.phone:
        reminder = ledger_flow.payment_reminder(customer.id)
        if reminder is not None:
            st.link_button(f"📲 WhatsApp Reminder ({reminder.status_label})", reminder.whatsapp_url)

    st.markdown("---")
    st.subheader("Entries")

    if not ledger.transactions:
        st.info("No entries yet.")

    for tx in ledger.transactions:
        col1, col2, col3 = st.columns([3, 2, 1])
        col1.markdown(f"{format_date(tx.date)} {format_time(tx.date)}  \n{tx.notes or ''}")
        sign = "🔴 Gave" if tx.type == TransactionType.GIVE else "🟢 Got"
        col2.markdown(f"{sign} **{format_currency(tx.amount, currency)}**")
        if col3.button("🗑️", key=f"delete_{tx.id}"):
            result = ledger_flow.delete_transaction(tx.id)
            if result.success:
                st.rerun()
            else:
                st.error(result.message)

    st.markdown("---")
    if st.button("Delete Customer"):
        result = ledger_flow.delete_customer(customer.id)
        if result.success:
            st.session_state.customer_id = None
            st.rerun()
        else:
            st.error(result.message)


def render_expenses_page(expense_flow: ExpenseFlow, currency: str):
    """Record shop expenses and see where the money went."""
    st.title("💸 Expenses")

    with st.form("expense", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            category = st.selectbox(
                "Category *",
                options=list(ExpenseCategory),
                format_func=lambda x: x.value,
            )
            amount = st.text_input("Amount *", placeholder="e.g. 1200")
        with col2:
            notes = st.text_area("Note (optional)")
        submitted = st.form_submit_button("Save Expense", type="primary")

    if submitted:
        result = expense_flow.record_expense(category=category, amount=amount, notes=notes)
        if result.success:
            st.success(result.message)
        else:
            st.error(result.message)

    summary = expense_flow.summary()
    st.metric("Total spent", format_currency(summary.total, currency))
    for item in summary.by_category:
        st.markdown(f"- {item.category.value}: **{format_currency(item.amount, currency)}**")

    st.markdown("---")
    for expense in expense_flow.list_expenses():
        st.markdown(
            f"{format_date(expense.date)} · {expense.category.value} · "
            f"**{format_currency(expense.amount, currency)}** · {expense.notes or '-'}"
        )


def render_reports_page(report_flow: ReportFlow, currency: str):
    """Day Book, Outstanding and Expense tables with CSV download."""
    st.title("📊 Reports")

    col1, col2 = st.columns(2)
    with col1:
        tab = st.selectbox(
            "Report",
            options=list(ReportTab),
            format_func=lambda x: {
                ReportTab.DAY_BOOK: "Day Book",
                ReportTab.OUTSTANDING: "Outstanding",
                ReportTab.EXPENSES: "Expenses",
            }[x],
        )
    with col2:
        window = st.selectbox(
            "Period",
            options=list(TimeWindow),
            format_func=lambda x: WINDOW_LABELS[x],
            disabled=tab == ReportTab.OUTSTANDING,
        )

    report = report_flow.build(tab, window)

    st.subheader(report.title)
    if not report.rows:
        st.info("Nothing to show for this period.")
        return

    st.table([dict(zip(report.headers, row.cells(format_date))) for row in report.rows])
    st.markdown(f"**{report.total_label}:** {format_currency(report.total, currency)}")

    with tempfile.TemporaryDirectory() as tmp:
        path = report_flow.export_csv(report, Path(tmp) / report_filename(report))
        data = path.read_bytes()

    st.download_button(
        "⬇️ Download CSV",
        data=data,
        file_name=report_filename(report),
        mime="text/csv",
    )


def render_settings_page(shop_flow: ShopFlow):
    """Shop profile, preferences and configuration status."""
    st.title("⚙️ Settings")

    profile = shop_flow.get_profile()

    st.markdown("### Shop Profile")
    with st.form("profile"):
        name = st.text_input("Shop Name *", value=profile.name)
        owner_name = st.text_input("Owner Name *", value=profile.owner_name)
        phone = st.text_input("Shop Phone", value=profile.phone)
        phone_pe_number = st.text_input("PhonePe / UPI Number", value=profile.phone_pe_number or "")
        address = st.text_area("Address", value=profile.address)
        language = st.selectbox(
            "Language",
            options=list(Language),
            index=list(Language).index(profile.language),
            format_func=lambda x: {Language.ENGLISH: "English", Language.HINDI: "हिन्दी"}[x],
        )
        submitted = st.form_submit_button("Save Profile", type="primary")

    if submitted:
        result = shop_flow.update_profile(
            name=name,
            owner_name=owner_name,
            phone=phone,
            address=address,
            phone_pe_number=phone_pe_number,
            currency=profile.currency,
            language=language,
        )
        if result.success:
            st.success(result.message)
        else:
            st.error(result.message)

    st.markdown("### Preferences")
    preferences = shop_flow.get_preferences()

    col1, col2 = st.columns(2)
    with col1:
        theme_label = "🌙 Dark" if preferences.theme == Theme.DARK else "☀️ Light"
        if st.button(f"Theme: {theme_label}"):
            shop_flow.toggle_theme()
            st.rerun()
    with col2:
        sound_label = "On" if preferences.sound_enabled else "Off"
        if st.button(f"Sound: {sound_label}"):
            shop_flow.toggle_sound()
            st.rerun()

    st.markdown("---")
    st.markdown("### Configuration Status")

    status = validate_all_settings()
    for key in ("storage", "ledger", "logging"):
        if status.get(key, False):
            st.success(f"✅ {key.title()} settings OK")
        else:
            st.error(f"❌ {key.title()} - {status.get(f'{key}_error', 'Invalid')}")


if __name__ == "__main__":
    main()
