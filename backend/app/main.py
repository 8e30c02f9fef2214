from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from backend.app.api import informes
from contextlib import asynccontextmanager
from datetime import datetime
import asyncio
import logging

from backend.app.database import Base, engine, SessionLocal
from backend.app.entidades import movimiento, usuario  # noqa: F401  (registra las tablas)
from backend.app.seed import seed
from backend.app.services.ledger import SqlLedger, SqlUserDirectory
from backend.app.services.scheduler import ReportMailer, ReportScheduler, default_tasks, local_clock
from backend.app.settings import CORS_ORIGINS, REPORTS_ATTACH_PDF, REPORTS_SCHEDULER_ENABLED, SEED_DEMO
from backend.app.utils.emailer import SmtpDispatcher

log = logging.getLogger("main")

def send_scheduled_reports(period: str, now: datetime):
    # Una sesión por tick: nada compartido entre ejecuciones
    with SessionLocal() as db:
        mailer = ReportMailer(
            SqlUserDirectory(db), SqlLedger(db), SmtpDispatcher(), attach_pdf=REPORTS_ATTACH_PDF
        )
        return mailer.run(period, now)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # 1) CREA tablas si no existen (NO borra datos)
    Base.metadata.create_all(bind=engine)

    # 2) SEED idempotente (solo demo)
    if SEED_DEMO:
        with SessionLocal() as db:
            seed(db)

    # 3) Informes programados
    stop = asyncio.Event()
    task = None
    if REPORTS_SCHEDULER_ENABLED:
        scheduler = ReportScheduler(default_tasks(), send_scheduled_reports, local_clock())
        task = asyncio.create_task(scheduler.run_forever(stop))
    else:
        log.info("[main] Informes programados desactivados (REPORTS_SCHEDULER_ENABLED=0)")

    yield

    stop.set()
    if task:
        await task

app = FastAPI(lifespan=lifespan)

# CORS para Vite
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Incluye todas las rutas
app.include_router(informes.router, prefix="/api")

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s %(name)s:%(lineno)d - %(message)s"
)

logging.getLogger("emailer").setLevel(logging.DEBUG)
logging.getLogger("scheduler").setLevel(logging.DEBUG)
logging.getLogger("informe_pdf").setLevel(logging.DEBUG)
