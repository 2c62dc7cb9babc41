"""Task registry and assignment endpoints."""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from consultant_ledger.db.dependencies import get_db_session
from consultant_ledger.services.registry_service import RegistryService, TaskCreateData

router = APIRouter(prefix="/tasks", tags=["tasks"])


class TaskCreatePayload(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    duration_hours: Decimal = Decimal("0")


class AssignmentCreatePayload(BaseModel):
    consultant_id: int


def _registry_service(db: Session) -> RegistryService:
    return RegistryService(db)


@router.get("")
def list_tasks(db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _registry_service(db)
    tasks = service.list_tasks()
    assigned = service.assigned_consultant_ids(tasks)
    return {"items": [service.serialize_task(task, assigned[task.id]) for task in tasks]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_task(payload: TaskCreatePayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _registry_service(db)
    task = service.create_task(
        TaskCreateData(
            name=payload.name,
            description=payload.description,
            duration_hours=payload.duration_hours,
        )
    )
    return service.serialize_task(task, [])


@router.get("/{task_id}")
def get_task(task_id: int, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _registry_service(db)
    task = service.get_task(task_id)
    return service.serialize_task(task, service.assigned_consultant_ids([task])[task.id])


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: int, db: Session = Depends(get_db_session)) -> Response:
    _registry_service(db).delete_task(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{task_id}/assign", status_code=status.HTTP_201_CREATED)
def assign_consultant(
    task_id: int,
    payload: AssignmentCreatePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _registry_service(db)
    assignment = service.assign(payload.consultant_id, task_id)
    return service.serialize_assignment(assignment)


@router.delete("/{task_id}/unassign/{consultant_id}", status_code=status.HTTP_204_NO_CONTENT)
def unassign_consultant(task_id: int, consultant_id: int, db: Session = Depends(get_db_session)) -> Response:
    _registry_service(db).unassign(consultant_id, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
