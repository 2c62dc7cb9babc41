"""Role registry endpoints."""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from consultant_ledger.db.dependencies import get_db_session
from consultant_ledger.services.registry_service import RegistryService, RoleData

router = APIRouter(prefix="/roles", tags=["roles"])


class RolePayload(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    # Positivity is a registry rule so it reports as invalid_argument, not 422.
    rate_per_hour: Decimal


def _registry_service(db: Session) -> RegistryService:
    return RegistryService(db)


@router.get("")
def list_roles(db: Session = Depends(get_db_session)) -> dict[str, list[object]]:
    service = _registry_service(db)
    return {"items": [service.serialize_role(role) for role in service.list_roles()]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_role(payload: RolePayload, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _registry_service(db)
    role = service.create_role(RoleData(name=payload.name, rate_per_hour=payload.rate_per_hour))
    return service.serialize_role(role)


@router.get("/{role_id}")
def get_role(role_id: int, db: Session = Depends(get_db_session)) -> dict[str, object]:
    service = _registry_service(db)
    return service.serialize_role(service.get_role(role_id))


@router.put("/{role_id}")
def update_role(
    role_id: int,
    payload: RolePayload,
    db: Session = Depends(get_db_session),
) -> dict[str, object]:
    service = _registry_service(db)
    role = service.update_role(role_id, RoleData(name=payload.name, rate_per_hour=payload.rate_per_hour))
    return service.serialize_role(role)


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_role(role_id: int, db: Session = Depends(get_db_session)) -> Response:
    _registry_service(db).delete_role(role_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
