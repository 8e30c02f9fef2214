# backend/app/utils/informe_pdf.py
import logging
from io import BytesIO
from typing import BinaryIO, NamedTuple, Sequence

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from backend.app.entidades.informe import Informe
from backend.app.settings import PRODUCT_NAME
from backend.app.services.errores import RenderFailure
from backend.app.utils.formato import labels, money, signed_money

log = logging.getLogger("informe_pdf")

MARGIN = 50
BOTTOM_LIMIT = 80  # por debajo de esto no cabe otra fila + margen
ROW_HEIGHT = 16

# x de cada columna (Importe alineado a la derecha)
COL_DATE = MARGIN
COL_TYPE = MARGIN + 90
COL_CATEGORY = MARGIN + 170


class PdfStats(NamedTuple):
    pages: int
    rows: int


def pdf_filename(report: Informe) -> str:
    return f"report_{report.period}_{report.date_range.start_iso}_to_{report.date_range.end_iso}.pdf"


def _safe(s, default=""):
    if s is None:
        return default
    return str(s)


class _Writer:
    """Cursor vertical + paginación sobre un canvas de reportlab."""

    def __init__(self, c: canvas.Canvas, width: float, height: float):
        self.c = c
        self.width = width
        self.height = height
        self.page = 1
        self.y = height - MARGIN

    def line(self, text: str, font="Helvetica", size=10, gap=ROW_HEIGHT, color="#111827"):
        self.c.setFillColor(colors.HexColor(color))
        self.c.setFont(font, size)
        self.c.drawString(MARGIN, self.y, text)
        self.y -= gap

    def skip(self, gap=ROW_HEIGHT):
        self.y -= gap

    def footer(self):
        self.c.setFillColor(colors.HexColor("#6B7280"))
        self.c.setFont("Helvetica", 8)
        self.c.drawString(MARGIN, 30, PRODUCT_NAME)
        self.c.drawRightString(self.width - MARGIN, 30, f"{self.page}")

    def new_page(self):
        self.footer()
        self.c.showPage()
        self.page += 1
        self.y = self.height - MARGIN

    def needs_page(self) -> bool:
        return self.y < BOTTOM_LIMIT


def _table_header(w: _Writer, lbl: dict):
    c = w.c
    c.setFillColor(colors.HexColor("#111827"))
    c.setFont("Helvetica-Bold", 10)
    c.drawString(COL_DATE, w.y, lbl["date"])
    c.drawString(COL_TYPE, w.y, lbl["type"])
    c.drawString(COL_CATEGORY, w.y, lbl["category"])
    c.drawRightString(w.width - MARGIN, w.y, lbl["amount"])
    w.y -= 5
    c.setStrokeColor(colors.HexColor("#E5E7EB"))
    c.line(MARGIN, w.y, w.width - MARGIN, w.y)
    w.y -= ROW_HEIGHT - 5


def _draw_document(c: canvas.Canvas, title: str, user, report: Informe, subtitle_lines: Sequence[str]) -> PdfStats:
    width, height = A4
    lbl = labels()
    w = _Writer(c, width, height)

    # Cabecera (solo en la primera página)
    w.line(_safe(title), font="Helvetica-Bold", size=16, gap=24)
    name = _safe(getattr(user, "name", None), lbl["unknown_user"])
    email = _safe(getattr(user, "email", None), "-")
    w.line(f"{lbl['user']}: {name} ({email})")
    for sub in subtitle_lines or ():
        w.line(_safe(sub), color="#6B7280")
    w.skip()

    # Resumen
    s = report.summary
    w.line(lbl["summary"], font="Helvetica-Bold", size=12, gap=18)
    w.line(f"{lbl['incomes']}: {money(s.income.total)} ({s.income.count} {lbl['movements']})", color="#15803D")
    w.line(f"{lbl['expenses']}: {money(s.expenses.total)} ({s.expenses.count} {lbl['movements']})", color="#B91C1C")
    w.line(f"{lbl['balance']}: {money(s.balance)}", font="Helvetica-Bold",
           color="#15803D" if s.balance >= 0 else "#B91C1C")
    w.skip()

    if report.is_empty:
        w.line(lbl["empty"], color="#6B7280")
        w.footer()
        return PdfStats(pages=w.page, rows=0)

    _table_header(w, lbl)
    rows = 0
    for m in report.movements:
        if w.needs_page():
            w.new_page()
            _table_header(w, lbl)
        c.setFillColor(colors.HexColor("#111827"))
        c.setFont("Helvetica", 10)
        c.drawString(COL_DATE, w.y, _safe(m.date)[:10])
        c.drawString(COL_TYPE, w.y, lbl.get(m.type, _safe(m.type)))
        c.drawString(COL_CATEGORY, w.y, _safe(m.category).strip() or "-")
        c.setFillColor(colors.HexColor("#15803D" if m.type == "income" else "#B91C1C"))
        c.drawRightString(w.width - MARGIN, w.y, signed_money(m.amount, m.type))
        w.y -= ROW_HEIGHT
        rows += 1

    w.footer()
    return PdfStats(pages=w.page, rows=rows)


def render_pdf(title: str, user, report: Informe, subtitle_lines: Sequence[str], output: BinaryIO) -> PdfStats:
    """Dibuja el informe en `output` (cualquier objeto con .write)."""
    log.info("[pdf] Generando informe %s %s..%s (%d movimientos)",
             report.period, report.date_range.start_iso, report.date_range.end_iso, report.movement_count)
    c = canvas.Canvas(output, pagesize=A4)
    c.setTitle(_safe(title))
    c.setAuthor(PRODUCT_NAME)
    stats = _draw_document(c, title, user, report, subtitle_lines)
    c.showPage()
    try:
        c.save()
    except (OSError, ValueError) as e:
        # sink cerrado o sin espacio: no es un fallo del builder
        log.error("[pdf] No se pudo escribir el PDF: %s", e)
        raise RenderFailure(f"Error escribiendo el PDF: {e}") from e
    log.info("[pdf] PDF generado (%d páginas, %d filas)", stats.pages, stats.rows)
    return stats


def render_pdf_bytes(title: str, user, report: Informe, subtitle_lines: Sequence[str] = ()) -> bytes:
    buffer = BytesIO()
    render_pdf(title, user, report, subtitle_lines, buffer)
    pdf = buffer.getvalue()
    buffer.close()
    return pdf


def default_title(report: Informe) -> str:
    lbl = labels()
    return f"{lbl['report']} {lbl[report.period]}"
