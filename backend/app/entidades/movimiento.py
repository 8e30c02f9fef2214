from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, Text, ForeignKey, CheckConstraint, Index, func
from backend.app.database import Base
from pydantic import BaseModel
import datetime as dt
from decimal import Decimal
from typing import Literal, Optional

# Valores guardados en la columna `type`; las etiquetas visibles
# ("Ingreso" / "Gasto") salen de utils/formato.LABELS
TipoMovimiento = Literal["expense", "income"]

class MovimientoDB(Base):
    __tablename__ = "movements"
    __table_args__ = (
        CheckConstraint("type IN ('expense', 'income')", name="ck_movements_type"),
        CheckConstraint("amount > 0", name="ck_movements_amount"),
        Index("idx_movements_user_date", "user_id", "date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(10), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    category = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

class Movimiento(BaseModel):
    id: int
    user_id: int
    type: TipoMovimiento
    amount: Decimal
    category: str
    description: Optional[str] = None
    date: dt.date
    created_at: Optional[dt.datetime] = None

    class Config:
        from_attributes = True
        frozen = True
