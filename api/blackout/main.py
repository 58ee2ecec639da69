import logging
import time

from fastapi import FastAPI
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from . import models  # noqa: F401  registers tables on Base.metadata
from .database import Base, SessionLocal, engine
from .routes import include_modular_routers

logger = logging.getLogger(__name__)

app = FastAPI(title="Blackout Match API")
include_modular_routers(app)


def init_db() -> None:
    Base.metadata.create_all(bind=engine)


def wait_for_db(max_attempts: int = 20, delay_seconds: float = 1.5) -> None:
    last_err: Exception | None = None
    for _ in range(max_attempts):
        try:
            with SessionLocal() as db:
                db.execute(text("SELECT 1"))
                db.commit()
            return
        except OperationalError as exc:
            last_err = exc
            logger.warning("[STARTUP] database not ready: %s", exc)
            time.sleep(delay_seconds)
    if last_err:
        raise last_err


@app.on_event("startup")
def on_startup() -> None:
    wait_for_db()
    init_db()


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
