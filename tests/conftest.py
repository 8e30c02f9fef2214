import os

# antes de importar la app: sin Postgres ni scheduler en los tests
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["REPORT_LOCALE"] = "es"
os.environ["REPORTS_SCHEDULER_ENABLED"] = "0"
os.environ["SEED_DEMO"] = "0"

from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from backend.app.entidades.informe import TypeAggregate
from backend.app.entidades.movimiento import Movimiento
from backend.app.entidades.usuario import Usuario
from backend.app.services.errores import LedgerUnavailable


def mov(id, type, amount, day, user_id=1, category="General", description=None, created_at=None):
    return Movimiento(
        id=id,
        user_id=user_id,
        type=type,
        amount=Decimal(str(amount)),
        category=category,
        description=description,
        date=date.fromisoformat(day),
        created_at=created_at or datetime(2024, 1, 1) + timedelta(seconds=id),
    )


class FakeLedger:
    """Ledger en memoria con la misma ordenación que SqlLedger."""

    def __init__(self, movements=()):
        self.movements = list(movements)
        self.calls = []

    def find_movements(self, user_id, type=None, start_date=None, end_date=None):
        self.calls.append(("find_movements", user_id, start_date, end_date))
        rows = [
            m for m in self.movements
            if m.user_id == user_id
            and (type is None or m.type == type)
            and (start_date is None or m.date >= start_date)
            and (end_date is None or m.date <= end_date)
        ]
        return sorted(rows, key=lambda m: (m.date, m.created_at, m.id), reverse=True)

    def summarize(self, user_id, start_date, end_date):
        self.calls.append(("summarize", user_id, start_date, end_date))
        totals = defaultdict(lambda: [Decimal("0"), 0])
        for m in self.movements:
            if m.user_id == user_id and start_date <= m.date <= end_date:
                totals[m.type][0] += m.amount
                totals[m.type][1] += 1
        return [TypeAggregate(type=t, total=v[0], count=v[1]) for t, v in totals.items()]


class BrokenLedger:
    def __init__(self):
        self.calls = 0

    def find_movements(self, *args, **kwargs):
        self.calls += 1
        raise LedgerUnavailable("sin conexión")

    def summarize(self, *args, **kwargs):
        self.calls += 1
        raise LedgerUnavailable("sin conexión")


class FakeUsers:
    def __init__(self, users=(), extra_ids=()):
        self.users = {u.id: u for u in users}
        self.extra_ids = list(extra_ids)

    def get_user(self, user_id):
        return self.users.get(user_id)

    def list_all_user_ids(self):
        return sorted(self.users) + self.extra_ids


class FakeDispatcher:
    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    def send(self, to, subject, text, html, attachments=()):
        if to in self.fail_for:
            raise ConnectionRefusedError(f"SMTP caído para {to}")
        self.sent.append({"to": to, "subject": subject, "text": text, "html": html,
                          "attachments": list(attachments)})


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def march_movements():
    return [
        mov(1, "income", "1000", "2024-03-01", category="Nómina"),
        mov(2, "expense", "250.50", "2024-03-15", category="Supermercado"),
        mov(3, "expense", "49.50", "2024-03-15", category="Transporte"),
    ]


@pytest.fixture
def ana():
    return Usuario(id=1, email="ana@example.com", name="Ana García", currency="EUR")
