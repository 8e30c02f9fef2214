# backend/app/services/periodos.py
import re
from datetime import date, datetime, timedelta
from typing import Union

from backend.app.entidades.informe import DateRange
from backend.app.services.errores import InvalidPeriod, InvalidDateFormat, InvalidRangeOrder

PERIODS = ("weekly", "monthly")

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _as_date(now: Union[date, datetime]) -> date:
    # datetime es subclase de date: se usa la fecha local que trae `now`
    return now.date() if isinstance(now, datetime) else now


def week_of(today: date) -> DateRange:
    """Semana de lunes a domingo que contiene `today`."""
    day = (today.weekday() + 1) % 7  # 0=domingo .. 6=sábado
    offset = 6 if day == 0 else day - 1
    start = today - timedelta(days=offset)
    return DateRange(start_date=start, end_date=start + timedelta(days=6))


def month_of(today: date) -> DateRange:
    start = today.replace(day=1)
    # "día 0 del mes siguiente" = último día del mes actual
    if start.month == 12:
        next_month = start.replace(year=start.year + 1, month=1)
    else:
        next_month = start.replace(month=start.month + 1)
    return DateRange(start_date=start, end_date=next_month - timedelta(days=1))


_RESOLVERS = {"weekly": week_of, "monthly": month_of}


def resolve(period: str, now: Union[date, datetime]) -> DateRange:
    if period not in PERIODS:
        raise InvalidPeriod(period)
    return _RESOLVERS[period](_as_date(now))


def parse_iso_date(value) -> date:
    if not isinstance(value, str) or not _ISO_DATE.match(value):
        raise InvalidDateFormat(value)
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        # cumple el patrón pero no es una fecha real (2024-13-01, 2024-02-30)
        raise InvalidDateFormat(value) from None


def validate_range(start_date, end_date) -> DateRange:
    start = parse_iso_date(start_date)
    end = parse_iso_date(end_date)
    # formato fijo YYYY-MM-DD: orden lexicográfico == orden cronológico
    if start_date > end_date:
        raise InvalidRangeOrder(start_date, end_date)
    return DateRange(start_date=start, end_date=end)
