"""Application service for roles, consultants, tasks and task assignments."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from consultant_ledger.core.errors import ConflictError, InvalidArgumentError, NotFoundError
from consultant_ledger.models.entities import Consultant, Role, Task, TaskAssignment, utcnow
from consultant_ledger.repositories.ledger_repository import LedgerRepository
from consultant_ledger.services.amounts import has_cents_precision, q2

logger = logging.getLogger(__name__)

MAX_RATE = Decimal("9999999999.99")
MAX_DURATION = Decimal("999999.99")


def _validate_rate(value: Decimal) -> Decimal:
    if not value.is_finite() or value <= 0:
        raise InvalidArgumentError("rate_per_hour must be greater than 0.")
    if value > MAX_RATE:
        raise InvalidArgumentError("rate_per_hour is too large.")
    if not has_cents_precision(value):
        raise InvalidArgumentError("rate_per_hour supports at most two decimal places.")
    return value


def _validate_duration(value: Decimal) -> Decimal:
    if not value.is_finite() or value < 0:
        raise InvalidArgumentError("duration_hours must be zero or greater.")
    if value > MAX_DURATION:
        raise InvalidArgumentError("duration_hours is too large.")
    if not has_cents_precision(value):
        raise InvalidArgumentError("duration_hours supports at most two decimal places.")
    return value


def _required_text(value: str, field_name: str) -> str:
    text = value.strip()
    if not text:
        raise InvalidArgumentError(f"{field_name} must not be blank.")
    return text


@dataclass(slots=True)
class RoleData:
    name: str
    rate_per_hour: Decimal


@dataclass(slots=True)
class ConsultantData:
    first_name: str
    last_name: str
    email: str
    role_id: int


@dataclass(slots=True)
class TaskCreateData:
    name: str
    description: str | None
    duration_hours: Decimal


class RegistryService:
    """Role, consultant, task and assignment registries."""

    def __init__(self, db: Session) -> None:
        self.db = db
        self.repo = LedgerRepository(db)

    @contextmanager
    def _conflicts_as(self, detail: str) -> Iterator[None]:
        try:
            yield
        except IntegrityError as exc:
            self.db.rollback()
            raise ConflictError(detail) from exc

    # ---------- Serialization ----------
    @staticmethod
    def serialize_role(role: Role) -> dict[str, object]:
        return {
            "id": role.id,
            "name": role.name,
            "rate_per_hour": str(q2(role.rate_per_hour)),
        }

    @staticmethod
    def serialize_consultant(consultant: Consultant, role: Role) -> dict[str, object]:
        return {
            "id": consultant.id,
            "first_name": consultant.first_name,
            "last_name": consultant.last_name,
            "email": consultant.email,
            "role_id": consultant.role_id,
            "role_name": role.name,
            # Billing uses the rate snapshotted on each work entry, not this one.
            "current_rate_per_hour": str(q2(role.rate_per_hour)),
        }

    @staticmethod
    def serialize_task(task: Task, assigned_consultant_ids: list[int]) -> dict[str, object]:
        return {
            "id": task.id,
            "name": task.name,
            "description": task.description,
            "duration_hours": str(q2(task.duration_hours)),
            "assigned_consultant_ids": assigned_consultant_ids,
        }

    @staticmethod
    def serialize_assignment(assignment: TaskAssignment) -> dict[str, object]:
        return {
            "consultant_id": assignment.consultant_id,
            "task_id": assignment.task_id,
            "assigned_at": assignment.assigned_at.isoformat(),
        }

    # ---------- Roles ----------
    def list_roles(self) -> list[Role]:
        return self.repo.list_roles()

    def get_role(self, role_id: int) -> Role:
        role = self.repo.get_role(role_id)
        if role is None:
            raise NotFoundError("Role not found.")
        return role

    def create_role(self, data: RoleData) -> Role:
        now = utcnow()
        role = Role(
            name=_required_text(data.name, "name"),
            rate_per_hour=_validate_rate(data.rate_per_hour),
            created_at=now,
            updated_at=now,
        )
        with self._conflicts_as("Role could not be created."):
            self.repo.add_role(role)
            self.db.commit()
        self.db.refresh(role)
        return role

    def update_role(self, role_id: int, data: RoleData) -> Role:
        role = self.get_role(role_id)
        name = _required_text(data.name, "name")
        rate = _validate_rate(data.rate_per_hour)

        # Existing work entries keep their own rate snapshot.
        role.name = name
        role.rate_per_hour = rate
        role.updated_at = utcnow()

        with self._conflicts_as("Role could not be updated."):
            self.db.commit()
        self.db.refresh(role)
        logger.info("Role %s rate set to %s", role.id, rate)
        return role

    def delete_role(self, role_id: int) -> None:
        role = self.get_role(role_id)
        if self.repo.consultant_count_for_role(role.id) > 0:
            raise ConflictError("Cannot delete role while consultants reference it.")

        with self._conflicts_as("Cannot delete role while consultants reference it."):
            self.repo.delete_role(role)
            self.db.commit()

    # ---------- Consultants ----------
    def list_consultants(self) -> list[Consultant]:
        return self.repo.list_consultants()

    def get_consultant(self, consultant_id: int) -> Consultant:
        consultant = self.repo.get_consultant(consultant_id)
        if consultant is None:
            raise NotFoundError("Consultant not found.")
        return consultant

    def roles_for(self, consultants: list[Consultant]) -> dict[int, Role]:
        return self.repo.get_roles_by_ids(consultant.role_id for consultant in consultants)

    def create_consultant(self, data: ConsultantData) -> Consultant:
        self.get_role(data.role_id)

        now = utcnow()
        consultant = Consultant(
            first_name=_required_text(data.first_name, "first_name"),
            last_name=_required_text(data.last_name, "last_name"),
            email=_required_text(data.email, "email"),
            role_id=data.role_id,
            created_at=now,
            updated_at=now,
        )
        with self._conflicts_as("Consultant could not be created."):
            self.repo.add_consultant(consultant)
            self.db.commit()
        self.db.refresh(consultant)
        return consultant

    def update_consultant(self, consultant_id: int, data: ConsultantData) -> Consultant:
        consultant = self.get_consultant(consultant_id)
        self.get_role(data.role_id)
        first_name = _required_text(data.first_name, "first_name")
        last_name = _required_text(data.last_name, "last_name")
        email = _required_text(data.email, "email")

        consultant.first_name = first_name
        consultant.last_name = last_name
        consultant.email = email
        consultant.role_id = data.role_id
        consultant.updated_at = utcnow()

        with self._conflicts_as("Consultant could not be updated."):
            self.db.commit()
        self.db.refresh(consultant)
        return consultant

    def delete_consultant(self, consultant_id: int) -> None:
        consultant = self.get_consultant(consultant_id)
        self.repo.delete_consultant(consultant)
        self.db.commit()
        logger.info("Consultant %s deleted with assignments and work entries", consultant_id)

    # ---------- Tasks ----------
    def list_tasks(self) -> list[Task]:
        return self.repo.list_tasks()

    def get_task(self, task_id: int) -> Task:
        task = self.repo.get_task(task_id)
        if task is None:
            raise NotFoundError("Task not found.")
        return task

    def assigned_consultant_ids(self, tasks: list[Task]) -> dict[int, list[int]]:
        return self.repo.assigned_consultant_ids_by_task(task.id for task in tasks)

    def create_task(self, data: TaskCreateData) -> Task:
        name = _required_text(data.name, "name")
        duration = _validate_duration(data.duration_hours)

        now = utcnow()
        task = Task(
            name=name,
            description=data.description.strip() if data.description else None,
            duration_hours=duration,
            created_at=now,
            updated_at=now,
        )
        with self._conflicts_as("Task could not be created."):
            self.repo.add_task(task)
            self.db.commit()
        self.db.refresh(task)
        return task

    def delete_task(self, task_id: int) -> None:
        task = self.get_task(task_id)
        self.repo.delete_task(task)
        self.db.commit()
        logger.info("Task %s deleted with assignments and work entries", task_id)

    # ---------- Assignments ----------
    def is_assigned(self, consultant_id: int, task_id: int) -> bool:
        return self.repo.assignment_exists(consultant_id, task_id)

    def assign(self, consultant_id: int, task_id: int) -> TaskAssignment:
        self.get_consultant(consultant_id)
        self.get_task(task_id)
        if self.repo.get_assignment(consultant_id, task_id) is not None:
            raise ConflictError("Consultant already assigned to this task.")

        assignment = TaskAssignment(consultant_id=consultant_id, task_id=task_id, assigned_at=utcnow())
        with self._conflicts_as("Consultant already assigned to this task."):
            self.repo.add_assignment(assignment)
            self.db.commit()
        self.db.refresh(assignment)
        return assignment

    def unassign(self, consultant_id: int, task_id: int) -> None:
        assignment = self.repo.get_assignment(consultant_id, task_id)
        if assignment is None:
            raise NotFoundError("Assignment not found.")

        # Work entries logged under this assignment stay in the ledger.
        self.repo.delete_assignment(assignment)
        self.db.commit()
