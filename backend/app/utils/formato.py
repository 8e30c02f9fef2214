# backend/app/utils/formato.py
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from backend.app.settings import REPORT_LOCALE

CENT = Decimal("0.01")
CURRENCY_SYMBOL = "$"

LABELS = {
    "es": {
        "weekly": "Semanal",
        "monthly": "Mensual",
        "range": "Personalizado",
        "income": "Ingreso",
        "expense": "Gasto",
        "incomes": "Ingresos",
        "expenses": "Gastos",
        "balance": "Balance",
        "user": "Usuario",
        "report": "Informe",
        "summary": "Resumen",
        "movements": "movimientos",
        "total_movements": "Total de movimientos",
        "date": "Fecha",
        "type": "Tipo",
        "category": "Categoría",
        "amount": "Importe",
        "range_sep": "al",
        "empty": "No hay movimientos en este período.",
        "greeting": "Hola",
        "intro": "Aquí está tu informe {period} de gastos e ingresos ({range}):",
        "tagline": "Gestión de Finanzas Personales",
        "unknown_user": "Usuario",
    },
    "en": {
        "weekly": "Weekly",
        "monthly": "Monthly",
        "range": "Custom",
        "income": "Income",
        "expense": "Expense",
        "incomes": "Income",
        "expenses": "Expenses",
        "balance": "Balance",
        "user": "User",
        "report": "Report",
        "summary": "Summary",
        "movements": "movements",
        "total_movements": "Total movements",
        "date": "Date",
        "type": "Type",
        "category": "Category",
        "amount": "Amount",
        "range_sep": "to",
        "empty": "No movements in this period.",
        "greeting": "Hello",
        "intro": "Here is your {period} income and expense report ({range}):",
        "tagline": "Personal Finance Management",
        "unknown_user": "User",
    },
}


def labels(locale: str = None) -> dict:
    return LABELS.get(locale or REPORT_LOCALE, LABELS["es"])


def to_decimal(value) -> Decimal:
    if value is None:
        return Decimal("0")
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal("0")


def round_cents(value) -> Decimal:
    # mitad hacia arriba (lejos de cero), como toFixed(2)
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def money(value) -> str:
    """1234.5 -> '$1234.50'; -3 -> '-$3.00'"""
    amount = round_cents(value)
    if amount == 0:
        amount = abs(amount)  # evita "$-0.00"
    if amount < 0:
        return f"-{CURRENCY_SYMBOL}{-amount}"
    return f"{CURRENCY_SYMBOL}{amount}"


def signed_money(value, movement_type: str) -> str:
    sign = "+" if movement_type == "income" else "-"
    return f"{sign}{CURRENCY_SYMBOL}{abs(round_cents(value))}"


def date_range_text(report, locale: str = None) -> str:
    return f"{report.date_range.start_iso} {labels(locale)['range_sep']} {report.date_range.end_iso}"
