# backend/app/utils/informe_email.py
import logging
from typing import NamedTuple

from jinja2 import TemplateError

from backend.app.entidades.informe import Informe
from backend.app.settings import PRODUCT_NAME
from backend.app.services.errores import RenderFailure
from backend.app.utils.formato import labels, date_range_text
from backend.app.utils.templates import render

log = logging.getLogger("informe_email")


class EmailContent(NamedTuple):
    subject: str
    text: str
    html: str


def email_subject(report: Informe) -> str:
    lbl = labels()
    return f"{lbl['report']} {lbl[report.period]} - {PRODUCT_NAME}"


def render_email(user, report: Informe) -> EmailContent:
    lbl = labels()
    period_label = lbl[report.period]
    range_text = date_range_text(report)
    subject = email_subject(report)
    ctx = dict(
        lbl=lbl,
        subject=subject,
        period_label=period_label,
        range_text=range_text,
        intro=lbl["intro"].format(period=period_label.lower(), range=range_text),
        user_name=getattr(user, "name", None) or lbl["unknown_user"],
        summary=report.summary,
        positive=report.summary.balance >= 0,
        movement_count=report.movement_count,
        product_name=PRODUCT_NAME,
    )
    try:
        html = render("report_email.html", **ctx)
        text = render("report_email.txt", **ctx)
    except TemplateError as e:
        log.error("[email] Error renderizando plantilla: %s", e)
        raise RenderFailure(f"Error renderizando el email: {e}") from e
    return EmailContent(subject=subject, text=text, html=html)
