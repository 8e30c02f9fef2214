from datetime import date, timedelta
from decimal import Decimal
import random
from sqlalchemy import func
from sqlalchemy.orm import Session
from backend.app.entidades.usuario import UsuarioDB
from backend.app.entidades.movimiento import MovimientoDB

DAYS_BACK = 90
MOVEMENTS_PER_USER = 60

DEMO_USERS = [
    ("ana.garcia@example.com", "Ana García", "EUR"),
    ("luis.martin@example.com", "Luis Martín", "EUR"),
    ("carmen.ruiz@example.com", "Carmen Ruiz", "USD"),
]

EXPENSE_CATEGORIES = [
    ("Supermercado", 20, 140),
    ("Restaurantes", 12, 80),
    ("Transporte", 2, 60),
    ("Alquiler", 650, 950),
    ("Suministros", 30, 120),
    ("Ocio", 10, 90),
    ("Salud", 15, 100),
]

INCOME_CATEGORIES = [
    ("Nómina", 1400, 2600),
    ("Freelance", 150, 700),
    ("Ventas", 20, 200),
]

def _amount(lo: int, hi: int) -> Decimal:
    return Decimal(random.randint(lo * 100, hi * 100)) / 100

def _ensure_users(db: Session):
    if db.query(func.count(UsuarioDB.id)).scalar() == 0:
        db.add_all([UsuarioDB(email=e, name=n, currency=c) for e, n, c in DEMO_USERS])
        db.commit()

def _ensure_movements(db: Session):
    if db.query(func.count(MovimientoDB.id)).scalar() > 0:
        return
    hoy = date.today()
    for user in db.query(UsuarioDB).all():
        movs = []
        for _ in range(MOVEMENTS_PER_USER):
            # 1 de cada 6 movimientos es un ingreso
            if random.random() < 1 / 6:
                cat, lo, hi = random.choice(INCOME_CATEGORIES)
                tipo = "income"
            else:
                cat, lo, hi = random.choice(EXPENSE_CATEGORIES)
                tipo = "expense"
            movs.append(MovimientoDB(
                user_id=user.id,
                type=tipo,
                amount=_amount(lo, hi),
                category=cat,
                description=None,
                date=hoy - timedelta(days=random.randint(0, DAYS_BACK)),
            ))
        db.add_all(movs)
    db.commit()

def seed(db: Session):
    _ensure_users(db)
    _ensure_movements(db)
