# backend/app/services/ledger.py
"""Lectura del ledger de movimientos y del directorio de usuarios.

El motor de informes solo necesita dos consultas sobre movimientos y dos sobre
usuarios; se exponen como protocolos para poder sustituir la base de datos por
un fake en memoria en los tests.
"""
import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional, Protocol

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.entidades.informe import TypeAggregate
from backend.app.entidades.movimiento import Movimiento, MovimientoDB
from backend.app.entidades.usuario import Usuario, UsuarioDB
from backend.app.services.errores import LedgerUnavailable

log = logging.getLogger("ledger")


class LedgerQuery(Protocol):
    def find_movements(
        self,
        user_id: int,
        type: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Movimiento]: ...

    def summarize(self, user_id: int, start_date: date, end_date: date) -> List[TypeAggregate]: ...


class UserDirectory(Protocol):
    def get_user(self, user_id: int) -> Optional[Usuario]: ...

    def list_all_user_ids(self) -> List[int]: ...


class SqlLedger:
    def __init__(self, db: Session):
        self.db = db

    def find_movements(self, user_id, type=None, start_date=None, end_date=None):
        q = self.db.query(MovimientoDB).filter(MovimientoDB.user_id == user_id)
        if type:
            q = q.filter(MovimientoDB.type == type)
        if start_date:
            q = q.filter(MovimientoDB.date >= start_date)
        if end_date:
            q = q.filter(MovimientoDB.date <= end_date)
        q = q.order_by(MovimientoDB.date.desc(), MovimientoDB.created_at.desc(), MovimientoDB.id.desc())
        try:
            rows = q.all()
        except SQLAlchemyError as e:
            self.db.rollback()
            log.error("[ledger] Error listando movimientos de user=%s: %s", user_id, e)
            raise LedgerUnavailable(f"No se pudieron leer los movimientos de {user_id}") from e
        return [Movimiento.model_validate(r) for r in rows]

    def summarize(self, user_id, start_date, end_date):
        try:
            rows = (
                self.db.query(
                    MovimientoDB.type.label("type"),
                    func.coalesce(func.sum(MovimientoDB.amount), 0).label("total"),
                    func.count(MovimientoDB.id).label("count"),
                )
                .filter(
                    MovimientoDB.user_id == user_id,
                    MovimientoDB.date >= start_date,
                    MovimientoDB.date <= end_date,
                )
                .group_by(MovimientoDB.type)
                .all()
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            log.error("[ledger] Error agregando movimientos de user=%s: %s", user_id, e)
            raise LedgerUnavailable(f"No se pudo resumir el ledger de {user_id}") from e
        # SQLite devuelve float en SUM; se pasa por str para no arrastrar error binario
        return [
            TypeAggregate(type=r.type, total=Decimal(str(r.total)), count=int(r.count))
            for r in rows
        ]


class SqlUserDirectory:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id):
        try:
            row = self.db.query(UsuarioDB).filter(UsuarioDB.id == user_id).first()
        except SQLAlchemyError as e:
            self.db.rollback()
            log.error("[ledger] Error leyendo user=%s: %s", user_id, e)
            raise LedgerUnavailable(f"No se pudo leer el usuario {user_id}") from e
        return Usuario.model_validate(row) if row else None

    def list_all_user_ids(self):
        try:
            return [r.id for r in self.db.query(UsuarioDB.id).order_by(UsuarioDB.id).all()]
        except SQLAlchemyError as e:
            self.db.rollback()
            log.error("[ledger] Error listando usuarios: %s", e)
            raise LedgerUnavailable("No se pudo listar los usuarios") from e
