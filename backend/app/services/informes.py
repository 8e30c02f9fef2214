# backend/app/services/informes.py
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Union

from backend.app.entidades.informe import DateRange, Informe, Resumen, TypeAggregate
from backend.app.services.ledger import LedgerQuery
from backend.app.services.periodos import resolve

log = logging.getLogger("informes")


def normalize_summary(aggregates: Iterable[TypeAggregate]) -> Resumen:
    """Rellena con 0 los tipos que no aparecen y calcula el balance.

    Los totales mantienen la precisión de la suma; el redondeo a 2 decimales
    solo se hace al formatear.
    """
    by_type = {a.type: a for a in aggregates}
    income = by_type.get("income") or TypeAggregate(type="income")
    expenses = by_type.get("expense") or TypeAggregate(type="expense")
    return Resumen(
        income=income,
        expenses=expenses,
        balance=Decimal(income.total) - Decimal(expenses.total),
    )


class ReportBuilder:
    def __init__(self, ledger: LedgerQuery):
        self.ledger = ledger

    def build(self, user_id: int, date_range: DateRange, period: str = "range") -> Informe:
        log.debug("[informes] user=%s period=%s %s..%s",
                  user_id, period, date_range.start_iso, date_range.end_iso)
        movements = self.ledger.find_movements(
            user_id,
            start_date=date_range.start_date,
            end_date=date_range.end_date,
        )
        summary = normalize_summary(
            self.ledger.summarize(user_id, date_range.start_date, date_range.end_date)
        )
        return Informe(
            period=period,
            date_range=date_range,
            movements=tuple(movements),
            summary=summary,
        )

    def build_for_period(self, user_id: int, period: str, now: Union[date, datetime]) -> Informe:
        return self.build(user_id, resolve(period, now), period=period)
