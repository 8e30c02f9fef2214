# backend/app/api/informes.py
from fastapi import APIRouter, Depends, Header, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from datetime import datetime
from io import BytesIO
from typing import Optional
from zoneinfo import ZoneInfo
import logging

from backend.app.database import SessionLocal
from backend.app.entidades.informe import Informe
from backend.app.services.errores import (
    ReportValidationError, UserNotFound, LedgerUnavailable, RenderFailure,
)
from backend.app.services.informes import ReportBuilder
from backend.app.services.ledger import SqlLedger, SqlUserDirectory
from backend.app.services.periodos import resolve, validate_range
from backend.app.settings import REPORT_TIMEZONE
from backend.app.utils.formato import date_range_text
from backend.app.utils.informe_json import render_json
from backend.app.utils.informe_pdf import default_title, pdf_filename, render_pdf

router = APIRouter(prefix="/reports", tags=["reports"])
log = logging.getLogger("informes")

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_ledger(db: Session = Depends(get_db)):
    return SqlLedger(db)

def get_users(db: Session = Depends(get_db)):
    return SqlUserDirectory(db)

def get_now() -> datetime:
    return datetime.now(ZoneInfo(REPORT_TIMEZONE))

# La autenticación vive en otro servicio; aquí solo llega el id ya validado.
def get_current_user_id(x_user_id: Optional[int] = Header(None)) -> int:
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Falta X-User-Id")
    return x_user_id

# ---------- Helpers ----------
def _build(user_id: int, period: str, users, ledger, now, start_date=None, end_date=None):
    """Valida, comprueba el usuario y construye el informe. Traduce errores a HTTP."""
    try:
        if period == "range":
            date_range = validate_range(start_date, end_date)
        else:
            date_range = resolve(period, now)
        user = users.get_user(user_id)
        if user is None:
            raise UserNotFound(user_id)
        return user, ReportBuilder(ledger).build(user_id, date_range, period=period)
    except ReportValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except UserNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except LedgerUnavailable:
        log.exception("[informes] Ledger no disponible para user=%s", user_id)
        raise HTTPException(status_code=500, detail=f"Error al generar informe {period}")

def _pdf_response(user, report: Informe):
    buffer = BytesIO()
    try:
        render_pdf(default_title(report), user, report, [date_range_text(report)], buffer)
    except RenderFailure:
        log.exception("[informes] Error generando PDF para user=%s", user.id)
        raise HTTPException(status_code=500, detail="Error al generar el PDF")
    buffer.seek(0)
    return StreamingResponse(
        buffer,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{pdf_filename(report)}"'}
    )

# ---------- JSON ----------
@router.get("/weekly")
def weekly_report(user_id: int = Depends(get_current_user_id), users=Depends(get_users),
                  ledger=Depends(get_ledger), now: datetime = Depends(get_now)):
    _, report = _build(user_id, "weekly", users, ledger, now)
    return render_json(report)

@router.get("/monthly")
def monthly_report(user_id: int = Depends(get_current_user_id), users=Depends(get_users),
                   ledger=Depends(get_ledger), now: datetime = Depends(get_now)):
    _, report = _build(user_id, "monthly", users, ledger, now)
    return render_json(report)

@router.get("/range")
def range_report(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    user_id: int = Depends(get_current_user_id),
    users=Depends(get_users),
    ledger=Depends(get_ledger),
):
    _, report = _build(user_id, "range", users, ledger, None, start_date, end_date)
    return render_json(report)

# ---------- PDF ----------
@router.get("/weekly/pdf")
def weekly_report_pdf(user_id: int = Depends(get_current_user_id), users=Depends(get_users),
                      ledger=Depends(get_ledger), now: datetime = Depends(get_now)):
    return _pdf_response(*_build(user_id, "weekly", users, ledger, now))

@router.get("/monthly/pdf")
def monthly_report_pdf(user_id: int = Depends(get_current_user_id), users=Depends(get_users),
                       ledger=Depends(get_ledger), now: datetime = Depends(get_now)):
    return _pdf_response(*_build(user_id, "monthly", users, ledger, now))

@router.get("/range/pdf")
def range_report_pdf(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    user_id: int = Depends(get_current_user_id),
    users=Depends(get_users),
    ledger=Depends(get_ledger),
):
    return _pdf_response(*_build(user_id, "range", users, ledger, None, start_date, end_date))
