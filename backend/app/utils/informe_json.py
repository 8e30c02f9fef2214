# backend/app/utils/informe_json.py
from typing import Any, Dict

from backend.app.entidades.informe import Informe, TypeAggregate


def _aggregate(a: TypeAggregate) -> Dict[str, Any]:
    return {"total": float(a.total), "count": int(a.count)}


def movement_to_json(m) -> Dict[str, Any]:
    return {
        "id": m.id,
        "userId": m.user_id,
        "type": m.type,
        "amount": float(m.amount),
        "category": m.category,
        "description": m.description,
        "date": m.date.isoformat(),
    }


def render_json(report: Informe) -> Dict[str, Any]:
    """Forma de respuesta que consume el dashboard."""
    s = report.summary
    return {
        "period": report.period,
        "startDate": report.date_range.start_iso,
        "endDate": report.date_range.end_iso,
        "movements": [movement_to_json(m) for m in report.movements],
        "summary": {
            "income": _aggregate(s.income),
            "expenses": _aggregate(s.expenses),
            "balance": float(s.balance),
        },
    }
