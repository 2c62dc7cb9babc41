"""Liveness and readiness probes."""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from consultant_ledger.db.dependencies import get_db_session

router = APIRouter(prefix="/health")


@router.get("")
def health() -> dict[str, str]:
    """Process is up; does not touch the database."""

    return {"status": "ok"}


@router.get("/ready")
def readiness(db: Session = Depends(get_db_session)) -> dict[str, str]:
    """Ledger database answers a trivial query."""

    db.execute(text("SELECT 1"))
    return {"status": "ready", "database": "ok"}
