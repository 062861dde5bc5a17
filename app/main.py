"""
Streamlit Frontend for Control Financiero

This is the user interface for tracking day-to-day money: incomes and
expenses per day, monthly fixed costs and taxes, and bills to pay.

DESIGN PRINCIPLES:
1. One month on screen at a time, navigable back and forth
2. Every form is validated before anything is saved
3. Clear error messages next to the form that caused them
4. Totals are always recomputed from storage, never cached in the page

Notifications are advisory: they are recomputed on every load and the
"read" marks only live in the browser session.
"""

from datetime import date

import streamlit as st

from src.aggregation import day_totals
from src.config import get_settings, validate_all_settings
from src.models.finance import BillStatus, PaymentMethod, TransactionType
from src.notifications import mark_as_read, unread_count
from src.orchestrator import BillFlow, DashboardFlow, LedgerFlow, create_app_components
from src.utils.dates import (
    current_date,
    current_month,
    days_until_due,
    first_weekday_of_month,
    month_dates,
    next_month,
    previous_month,
)
from src.utils.formatting import day_name, format_currency, format_date, format_month_year


# Page configuration
st.set_page_config(
    page_title="Control Financiero",
    page_icon="💶",
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
    .success-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .warning-box {
        padding: 20px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
    .error-box {
        padding: 20px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 10px 0;
    }
    .info-box {
        padding: 20px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 10px 0;
    }
    .day-cell {
        padding: 6px;
        border: 1px solid #e0e0e0;
        border-radius: 6px;
        min-height: 80px;
        font-size: 0.85em;
    }
    .income { color: #28a745; }
    .expense { color: #dc3545; }
    .big-number {
        font-size: 2em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)

WEEKDAY_HEADERS = ["Dom", "Lun", "Mar", "Mié", "Jue", "Vie", "Sáb"]

NOTIFICATION_BOXES = {
    "success": "success-box",
    "warning": "warning-box",
    "error": "error-box",
    "info": "info-box",
}


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components()


def money(amount) -> str:
    return format_currency(amount, get_settings().app.currency)


def show_validation(flow, result) -> None:
    """Show the validator's summary under a form."""
    summary = flow.validator.get_user_friendly_summary(result)
    if result.has_errors:
        st.error(summary)
    elif result.warnings:
        st.warning(summary)
    else:
        st.success(summary)


def main():
    """Main application entry point."""
    ledger_flow, bill_flow, dashboard_flow = get_components()

    if "month" not in st.session_state:
        st.session_state.month = current_month()
    if "selected_date" not in st.session_state:
        st.session_state.selected_date = current_date()

    # Sidebar navigation
    st.sidebar.title("💶 Control Financiero")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Ir a:",
        ["📅 Calendario", "📝 Día", "📊 Gastos del mes", "🔔 Panel"],
        index=0,
    )

    st.sidebar.markdown("---")
    col_prev, col_next = st.sidebar.columns(2)
    with col_prev:
        if st.button("◀ Anterior"):
            st.session_state.month = previous_month(st.session_state.month)
            st.rerun()
    with col_next:
        if st.button("Siguiente ▶"):
            st.session_state.month = next_month(st.session_state.month)
            st.rerun()
    st.sidebar.markdown(f"**Mes:** {format_month_year(st.session_state.month)}")

    months = ledger_flow.available_months()
    if months:
        st.sidebar.markdown("**Meses con datos:**")
        st.sidebar.markdown("\n".join(f"- {format_month_year(m)}" for m in months))

    render_settings_status()

    # Route to appropriate page
    if page == "📅 Calendario":
        render_calendar_page(ledger_flow, bill_flow)
    elif page == "📝 Día":
        render_day_page(ledger_flow)
    elif page == "📊 Gastos del mes":
        render_month_page(ledger_flow)
    elif page == "🔔 Panel":
        render_dashboard_page(dashboard_flow)


def render_settings_status():
    """Sidebar check of each configuration section."""
    st.sidebar.markdown("---")
    with st.sidebar.expander("⚙️ Estado de la configuración"):
        status = validate_all_settings()

        sections = [
            ("Almacenamiento", "storage"),
            ("Avisos", "notifications"),
            ("Aplicación", "app"),
        ]

        for name, key in sections:
            if status.get(key, False):
                st.success(f"✅ {name}")
            else:
                error = status.get(f"{key}_error", "No configurado")
                st.error(f"❌ {name} - {error}")

        st.caption("Configura la aplicación con variables FINANCE_* o un archivo `.env`.")


def render_calendar_page(ledger_flow: LedgerFlow, bill_flow: BillFlow):
    """Render the month calendar with totals, monthly items and bills."""
    month = st.session_state.month
    st.title(f"📅 {format_month_year(month).capitalize()}")

    totals = ledger_flow.calendar_totals(month)

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Entradas", money(totals.entradas))
    col2.metric("Salidas", money(totals.salidas))
    col3.metric("Gastos fijos + impuestos", money(totals.gastos_fijos + totals.impuestos))
    col4.metric("Balance", money(totals.balance))
    st.caption(
        f"Tarjeta: {money(totals.entradas_tarjeta)} · "
        f"Efectivo: {money(totals.entradas_efectivo)} · "
        f"Cuentas pendientes: {money(totals.cuentas_pendientes)}"
    )

    st.markdown("---")

    # Calendar grid, Sunday first
    headers = st.columns(7)
    for col, name in zip(headers, WEEKDAY_HEADERS):
        col.markdown(f"**{name}**")

    month_data, _ = ledger_flow.month_view(month)
    cells = [None] * first_weekday_of_month(month) + month_dates(month)
    for start in range(0, len(cells), 7):
        row = st.columns(7)
        for col, day_date in zip(row, cells[start:start + 7]):
            if day_date is None:
                continue
            day = month_data.days.get(day_date)
            daily = day_totals(day) if day is not None else None
            lines = [f"<strong>{int(day_date[8:])}</strong>"]
            if daily is not None and daily.incomes:
                lines.append(f'<span class="income">+{money(daily.incomes)}</span>')
            if daily is not None and daily.expenses:
                lines.append(f'<span class="expense">-{money(daily.expenses)}</span>')
            col.markdown(
                f'<div class="day-cell">{"<br>".join(lines)}</div>',
                unsafe_allow_html=True,
            )

    st.markdown("---")
    render_transaction_form(ledger_flow, month)

    st.markdown("---")
    col_fixed, col_tax = st.columns(2)
    with col_fixed:
        render_monthly_items(ledger_flow, month, "fixed_expense", "💡 Gastos fijos", month_data.fixed_expenses)
    with col_tax:
        render_monthly_items(ledger_flow, month, "tax", "🏛️ Impuestos", month_data.taxes)

    st.markdown("---")
    render_bills_section(bill_flow)


def render_transaction_form(ledger_flow: LedgerFlow, month: str):
    """Form to add an income or expense to a day."""
    st.markdown("### ➕ Añadir movimiento")

    dates = month_dates(month)
    default = st.session_state.selected_date
    index = dates.index(default) if default in dates else 0

    with st.form("transaction_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            day_date = st.selectbox(
                "Día",
                options=dates,
                index=index,
                format_func=lambda d: f"{format_date(d)} ({day_name(d)})",
            )
            kind = st.radio(
                "Tipo",
                options=[TransactionType.INCOME.value, TransactionType.EXPENSE.value],
                format_func=lambda v: "Entrada" if v == TransactionType.INCOME.value else "Salida",
                horizontal=True,
            )
        with col2:
            amount = st.text_input("Importe", placeholder="125,50")
            description = st.text_input("Descripción", placeholder="Opcional")
            payment_method = st.radio(
                "Forma de pago (solo entradas)",
                options=[PaymentMethod.CARD.value, PaymentMethod.CASH.value],
                format_func=lambda v: "Tarjeta" if v == PaymentMethod.CARD.value else "Efectivo",
                horizontal=True,
            )

        if st.form_submit_button("💾 Guardar", type="primary"):
            transaction, result = ledger_flow.record_transaction(
                date=day_date,
                transaction_type=kind,
                amount=amount,
                description=description,
                payment_method=payment_method,
            )
            show_validation(ledger_flow, result)
            if transaction is not None:
                st.session_state.selected_date = day_date


def render_monthly_items(ledger_flow: LedgerFlow, month: str, form: str, title: str, items):
    """List and form for fixed expenses, variable expenses or taxes."""
    st.markdown(f"### {title}")

    remove = {
        "fixed_expense": ledger_flow.remove_fixed_expense,
        "variable_expense": ledger_flow.remove_variable_expense,
        "tax": ledger_flow.remove_tax,
    }[form]
    record = {
        "fixed_expense": ledger_flow.record_fixed_expense,
        "variable_expense": ledger_flow.record_variable_expense,
        "tax": ledger_flow.record_tax,
    }[form]

    if not items:
        st.info("Sin registros este mes.")
    for item in items:
        col_text, col_button = st.columns([4, 1])
        col_text.markdown(f"{item.description}: **{money(item.amount)}**")
        if col_button.button("🗑️", key=f"delete_{form}_{item.id}"):
            remove(month, item.id)
            st.rerun()

    with st.form(f"{form}_form", clear_on_submit=True):
        description = st.text_input("Descripción", key=f"{form}_description")
        amount = st.text_input("Importe", key=f"{form}_amount")
        if st.form_submit_button("➕ Añadir"):
            _, result = record(month, amount, description)
            show_validation(ledger_flow, result)


def render_bills_section(bill_flow: BillFlow):
    """Bills to pay: list, toggle, delete and add."""
    st.markdown("### 🧾 Cuentas a pagar")

    bills = bill_flow.list_bills()
    if not bills:
        st.info("No hay cuentas registradas.")

    today = date.today()
    for bill in bills:
        remaining = days_until_due(bill.due_date, today)
        if bill.status == BillStatus.PAID:
            box, label = "success-box", "Pagada"
        elif bill.status == BillStatus.OVERDUE:
            box, label = "error-box", "Vencida"
        else:
            box, label = "warning-box", f"Pendiente · {remaining} días"

        col_text, col_toggle, col_delete = st.columns([4, 1, 1])
        col_text.markdown(f"""
        <div class="{box}">
            <strong>{bill.creditor}</strong>: {money(bill.amount)}<br>
            Vence el {format_date(bill.due_date)} · {label}<br>
            <small>{bill.description}</small>
        </div>
        """, unsafe_allow_html=True)
        if col_toggle.button("✔️" if not bill.is_paid else "↩️", key=f"toggle_{bill.id}"):
            bill_flow.toggle_bill(bill.id)
            st.rerun()
        if col_delete.button("🗑️", key=f"delete_bill_{bill.id}"):
            bill_flow.remove_bill(bill.id)
            st.rerun()

    with st.form("bill_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            creditor = st.text_input("Acreedor")
            amount = st.text_input("Importe")
        with col2:
            due_date = st.date_input("Vencimiento", value=today)
            description = st.text_input("Descripción", placeholder="Opcional")
        if st.form_submit_button("➕ Añadir cuenta"):
            _, result = bill_flow.record_bill(
                creditor=creditor,
                amount=amount,
                due_date=due_date.isoformat() if due_date else "",
                description=description,
            )
            show_validation(bill_flow, result)


def render_day_page(ledger_flow: LedgerFlow):
    """Render one day's incomes and expenses."""
    month = st.session_state.month
    dates = month_dates(month)
    default = st.session_state.selected_date
    index = dates.index(default) if default in dates else 0

    day_date = st.selectbox(
        "Día",
        options=dates,
        index=index,
        format_func=lambda d: f"{format_date(d)} ({day_name(d)})",
    )
    st.session_state.selected_date = day_date

    st.title(f"📝 {format_date(day_date)}")

    day, totals = ledger_flow.day_view(day_date)

    col1, col2 = st.columns(2)
    col1.metric("Entradas", money(totals.incomes))
    col2.metric("Salidas", money(totals.expenses))

    for title, items, kind in (
        ("### 💰 Entradas", day.incomes, TransactionType.INCOME),
        ("### 💸 Salidas", day.expenses, TransactionType.EXPENSE),
    ):
        st.markdown(title)
        if not items:
            st.info("Sin movimientos.")
        for transaction in items:
            col_text, col_button = st.columns([4, 1])
            method = ""
            if transaction.payment_method is not None:
                method = " (tarjeta)" if transaction.payment_method == PaymentMethod.CARD else " (efectivo)"
            col_text.markdown(f"{transaction.description}: **{money(transaction.amount)}**{method}")
            if col_button.button("🗑️", key=f"delete_tx_{transaction.id}"):
                ledger_flow.remove_transaction(day_date, transaction.id, kind)
                st.rerun()


def render_month_page(ledger_flow: LedgerFlow):
    """Render the month summary with fixed and variable expenses."""
    month = st.session_state.month
    st.title(f"📊 Gastos de {format_month_year(month)}")

    month_data, summary = ledger_flow.month_view(month)

    col1, col2, col3 = st.columns(3)
    col1.metric("Entradas", money(summary.total_incomes))
    col2.metric("Salidas totales", money(summary.total_outgoings))
    col3.metric("Resultado", money(summary.final_profit))

    col_fixed, col_variable = st.columns(2)
    with col_fixed:
        render_monthly_items(ledger_flow, month, "fixed_expense", "💡 Gastos fijos", month_data.fixed_expenses)
    with col_variable:
        render_monthly_items(
            ledger_flow, month, "variable_expense", "🛒 Gastos variables", month_data.variable_expenses
        )

    st.markdown("---")
    st.markdown("### Resumen diario")
    if not summary.daily_data:
        st.info("No hay movimientos este mes.")
    for daily in summary.daily_data:
        st.markdown(
            f"- {format_date(daily.date)}: "
            f"+{money(daily.incomes)} / -{money(daily.expenses)}"
        )


def render_dashboard_page(dashboard_flow: DashboardFlow):
    """Render the totals and notifications."""
    month = st.session_state.month
    st.title("🔔 Panel")

    totals, summary, notifications = dashboard_flow.load(month)

    # Read marks survive reruns of the same session only
    read_ids = st.session_state.setdefault("read_notifications", set())
    for notification_id in read_ids:
        notifications = mark_as_read(notifications, notification_id)

    st.markdown(f"""
    <div class="info-box">
        <p>Balance del mes</p>
        <p class="big-number">{money(totals.balance)}</p>
        <p>Resultado sin impuestos ni cuentas: {money(summary.final_profit)}</p>
    </div>
    """, unsafe_allow_html=True)

    col1, col2, col3 = st.columns(3)
    col1.metric("Impuestos", money(totals.impuestos))
    col2.metric("Cuentas pendientes", money(totals.cuentas_pendientes))
    col3.metric("Cuentas vencidas", money(totals.cuentas_vencidas))

    st.markdown(f"### Notificaciones ({unread_count(notifications)} sin leer)")
    if not notifications:
        st.info("Todo en orden.")

    for notification in notifications:
        if notification.read:
            continue
        col_text, col_button = st.columns([5, 1])
        col_text.markdown(f"""
        <div class="{NOTIFICATION_BOXES[notification.type.value]}">
            <h4>{notification.title}</h4>
            <p>{notification.message}</p>
        </div>
        """, unsafe_allow_html=True)
        if col_button.button("Marcar leída", key=f"read_{notification.id}"):
            read_ids.add(notification.id)
            st.rerun()


if __name__ == "__main__":
    main()
