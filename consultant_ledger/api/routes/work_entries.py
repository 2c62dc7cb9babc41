"""Work ledger and payment summary endpoints."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from consultant_ledger.db.dependencies import get_db_session
from consultant_ledger.services.work_ledger_service import WorkEntryCreateData, WorkLedgerService

router = APIRouter(prefix="/work-entries", tags=["work-entries"])


class WorkEntryCreatePayload(BaseModel):
    consultant_id: int
    task_id: int
    work_date: date
    # Checked by the ledger after the assignment gate, so no bounds here.
    hours_worked: Decimal


def _ledger_service(db: Session) -> WorkLedgerService:
    return WorkLedgerService(db)


@router.get("")
def list_work_entries(db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _ledger_service(db)
    return {"items": service.serialize_entries(service.list_entries())}


@router.post("", status_code=status.HTTP_201_CREATED)
def record_work(payload: WorkEntryCreatePayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _ledger_service(db)
    entry = service.record_work(
        WorkEntryCreateData(
            consultant_id=payload.consultant_id,
            task_id=payload.task_id,
            work_date=payload.work_date,
            hours_worked=payload.hours_worked,
        )
    )
    return service.serialize_entries([entry])[0]


@router.get("/consultant/{consultant_id}/summary")
def get_payment_summary(
    consultant_id: int,
    start_date: date = Query(alias="startDate"),
    end_date: date = Query(alias="endDate"),
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _ledger_service(db)
    summary = service.summarize(consultant_id, start_date, end_date)
    return service.serialize_summary(summary)


@router.get("/{entry_id}")
def get_work_entry(entry_id: int, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _ledger_service(db)
    return service.serialize_entries([service.get_entry(entry_id)])[0]


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_work_entry(entry_id: int, db: Session = Depends(get_db_session)) -> Response:
    _ledger_service(db).delete_entry(entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
