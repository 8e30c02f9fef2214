# backend/app/services/scheduler.py
"""Envío programado de informes por email.

Dos tareas fijas: semanal (lunes) y mensual (día 1), ambas a REPORT_HOUR en
REPORT_TIMEZONE. No se guarda "última ejecución": cada tarea calcula su
siguiente disparo a partir del reloj, así que un tick dispara como mucho una
vez por tarea.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional
from zoneinfo import ZoneInfo

from backend.app.services.informes import ReportBuilder
from backend.app.services.ledger import LedgerQuery, UserDirectory
from backend.app.settings import REPORT_HOUR, REPORT_TIMEZONE
from backend.app.utils.emailer import MailDispatcher
from backend.app.utils.formato import date_range_text
from backend.app.utils.informe_email import render_email
from backend.app.utils.informe_pdf import default_title, pdf_filename, render_pdf_bytes

log = logging.getLogger("scheduler")

Clock = Callable[[], datetime]

MAX_SLEEP = 60.0


def local_clock(tz: str = REPORT_TIMEZONE) -> Clock:
    zone = ZoneInfo(tz)
    return lambda: datetime.now(zone)


class RecurringTask:
    """Disparo a hora fija: un día de la semana (weekday, 0=lunes) o un día del mes."""

    def __init__(self, name: str, period: str, hour: int, minute: int = 0,
                 weekday: Optional[int] = None, day: Optional[int] = None):
        if (weekday is None) == (day is None):
            raise ValueError("RecurringTask necesita weekday o day (solo uno)")
        self.name = name
        self.period = period
        self.hour = hour
        self.minute = minute
        self.weekday = weekday
        self.day = day

    def matches(self, d) -> bool:
        if self.weekday is not None:
            return d.weekday() == self.weekday
        return d.day == self.day

    def next_fire(self, after: datetime) -> datetime:
        """Primer instante estrictamente posterior a `after`."""
        candidate = after.replace(hour=self.hour, minute=self.minute, second=0, microsecond=0)
        for _ in range(400):
            if candidate > after and self.matches(candidate):
                return candidate
            candidate = (candidate + timedelta(days=1)).replace(hour=self.hour, minute=self.minute)
        raise ValueError(f"La tarea {self.name} no tiene próximo disparo")

    def __repr__(self):
        when = f"weekday={self.weekday}" if self.weekday is not None else f"day={self.day}"
        return f"RecurringTask({self.name!r}, {when}, {self.hour:02d}:{self.minute:02d})"


def default_tasks(hour: int = REPORT_HOUR) -> List[RecurringTask]:
    return [
        RecurringTask("weekly-reports", "weekly", hour=hour, weekday=0),
        RecurringTask("monthly-reports", "monthly", hour=hour, day=1),
    ]


@dataclass
class TickResult:
    period: str
    sent: int = 0
    skipped: int = 0
    failed: int = 0
    aborted: bool = False


class ReportMailer:
    """Genera y envía el informe de `period` a cada usuario, uno detrás de otro."""

    def __init__(self, users: UserDirectory, ledger: LedgerQuery, dispatcher: MailDispatcher,
                 attach_pdf: bool = False):
        self.users = users
        self.builder = ReportBuilder(ledger)
        self.dispatcher = dispatcher
        self.attach_pdf = attach_pdf

    def send_one(self, user_id: int, period: str, now: datetime) -> bool:
        user = self.users.get_user(user_id)
        if user is None:
            log.debug("[scheduler] Usuario %s ya no existe, se omite", user_id)
            return False
        if not user.email:
            log.warning("[scheduler] Usuario %s sin email, se omite", user_id)
            return False

        report = self.builder.build_for_period(user_id, period, now)
        content = render_email(user, report)
        attachments = []
        if self.attach_pdf:
            pdf = render_pdf_bytes(default_title(report), user, report, [date_range_text(report)])
            attachments.append((pdf_filename(report), pdf))
        self.dispatcher.send(user.email, content.subject, content.text, content.html, attachments)
        return True

    def run(self, period: str, now: datetime) -> TickResult:
        result = TickResult(period=period)
        log.info("[scheduler] Iniciando envío de informes %s...", period)
        try:
            user_ids = list(self.users.list_all_user_ids())
        except Exception:
            log.exception("[scheduler] Error listando usuarios: se cancela el envío %s", period)
            result.aborted = True
            return result

        for user_id in user_ids:
            try:
                if self.send_one(user_id, period, now):
                    result.sent += 1
                else:
                    result.skipped += 1
            except Exception:
                log.exception("[scheduler] Error procesando usuario %s", user_id)
                result.failed += 1

        log.info("[scheduler] Envío de informes %s completado: %d enviados, %d omitidos, %d fallidos",
                 period, result.sent, result.skipped, result.failed)
        return result


class ReportScheduler:
    """idle -> firing -> idle. `tick()` dispara las tareas vencidas según `clock`."""

    def __init__(self, tasks: Iterable[RecurringTask], run_job: Callable[[str, datetime], object],
                 clock: Clock):
        self.tasks = list(tasks)
        self.run_job = run_job
        self.clock = clock
        self.state = "idle"
        now = clock()
        self._next: Dict[str, datetime] = {t.name: t.next_fire(now) for t in self.tasks}

    def next_fire_times(self) -> Dict[str, datetime]:
        return dict(self._next)

    def tick(self) -> List[str]:
        now = self.clock()
        fired = []
        for task in self.tasks:
            if self._next[task.name] > now:
                continue
            self.state = "firing"
            try:
                self.run_job(task.period, now)
            except Exception:
                log.exception("[scheduler] La tarea %s ha fallado", task.name)
            finally:
                self.state = "idle"
                # los disparos perdidos se agrupan en uno solo
                self._next[task.name] = task.next_fire(now)
            fired.append(task.name)
        return fired

    def seconds_until_next(self) -> float:
        if not self._next:
            return MAX_SLEEP
        delta = (min(self._next.values()) - self.clock()).total_seconds()
        return max(0.0, delta)

    async def run_forever(self, stop: asyncio.Event):
        log.info("[scheduler] Tareas programadas: %s", ", ".join(repr(t) for t in self.tasks))
        while not stop.is_set():
            timeout = min(self.seconds_until_next(), MAX_SLEEP)
            try:
                await asyncio.wait_for(stop.wait(), timeout=timeout)
            except asyncio.TimeoutError:
                pass
            if stop.is_set():
                break
            await asyncio.to_thread(self.tick)
        log.info("[scheduler] Parado")
