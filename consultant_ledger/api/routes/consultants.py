"""Consultant registry endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from consultant_ledger.db.dependencies import get_db_session
from consultant_ledger.services.registry_service import ConsultantData, RegistryService

router = APIRouter(prefix="/consultants", tags=["consultants"])


class ConsultantPayload(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    role_id: int


def _registry_service(db: Session) -> RegistryService:
    return RegistryService(db)


def _consultant_data(payload: ConsultantPayload) -> ConsultantData:
    return ConsultantData(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        role_id=payload.role_id,
    )


@router.get("")
def list_consultants(db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _registry_service(db)
    consultants = service.list_consultants()
    roles = service.roles_for(consultants)
    return {
        "items": [
            service.serialize_consultant(consultant, roles[consultant.role_id])
            for consultant in consultants
        ]
    }


@router.post("", status_code=status.HTTP_201_CREATED)
def create_consultant(payload: ConsultantPayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _registry_service(db)
    consultant = service.create_consultant(_consultant_data(payload))
    return service.serialize_consultant(consultant, service.get_role(consultant.role_id))


@router.get("/{consultant_id}")
def get_consultant(consultant_id: int, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _registry_service(db)
    consultant = service.get_consultant(consultant_id)
    return service.serialize_consultant(consultant, service.get_role(consultant.role_id))


@router.put("/{consultant_id}")
def update_consultant(
    consultant_id: int,
    payload: ConsultantPayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _registry_service(db)
    consultant = service.update_consultant(consultant_id, _consultant_data(payload))
    return service.serialize_consultant(consultant, service.get_role(consultant.role_id))


@router.delete("/{consultant_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_consultant(consultant_id: int, db: Session = Depends(get_db_session)) -> Response:
    _registry_service(db).delete_consultant(consultant_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
