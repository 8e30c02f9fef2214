from pydantic import BaseModel, model_validator
import datetime as dt
from decimal import Decimal
from typing import Literal, Tuple

from backend.app.entidades.movimiento import Movimiento, TipoMovimiento

# weekly / monthly -> periodos con nombre; range -> rango elegido por el usuario
PeriodoInforme = Literal["weekly", "monthly", "range"]

class DateRange(BaseModel):
    start_date: dt.date
    end_date: dt.date

    class Config:
        frozen = True

    @model_validator(mode="after")
    def _ordered(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date no puede ser posterior a end_date")
        return self

    @property
    def start_iso(self) -> str:
        return self.start_date.isoformat()

    @property
    def end_iso(self) -> str:
        return self.end_date.isoformat()

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1

class TypeAggregate(BaseModel):
    type: TipoMovimiento
    total: Decimal = Decimal("0")
    count: int = 0

    class Config:
        frozen = True

class Resumen(BaseModel):
    income: TypeAggregate
    expenses: TypeAggregate
    balance: Decimal

    class Config:
        frozen = True

class Informe(BaseModel):
    """Informe derivado del ledger. Se construye en cada petición y no se guarda."""
    period: PeriodoInforme
    date_range: DateRange
    movements: Tuple[Movimiento, ...] = ()
    summary: Resumen

    class Config:
        frozen = True

    @property
    def movement_count(self) -> int:
        return len(self.movements)

    @property
    def is_empty(self) -> bool:
        return not self.movements
