"""Repository helpers for registries and the work ledger."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from sqlalchemy import Integer, Select, and_, cast, delete, func, select
from sqlalchemy.orm import Session

from consultant_ledger.models.entities import (
    Consultant,
    Role,
    Task,
    TaskAssignment,
    WorkEntry,
)


def consultant_day_lock(consultant_id: int, work_date: date) -> Select:
    return select(
        func.pg_advisory_xact_lock(
            cast(consultant_id, Integer),
            cast(work_date.toordinal(), Integer),
        )
    )


def consultant_key_share(consultant_id: int) -> Select:
    return select(Consultant).where(Consultant.id == consultant_id).with_for_update(read=True, key_share=True)


class LedgerRepository:
    """Persistence operations used by registry and ledger services."""

    def __init__(self, db: Session) -> None:
        self.db = db

    # ---------- Roles ----------
    def list_roles(self) -> list[Role]:
        return self.db.scalars(select(Role).order_by(Role.id.asc())).all()

    def get_role(self, role_id: int) -> Role | None:
        return self.db.scalar(select(Role).where(Role.id == role_id))

    def get_roles_by_ids(self, role_ids: Iterable[int]) -> dict[int, Role]:
        ids = set(role_ids)
        if not ids:
            return {}
        rows = self.db.scalars(select(Role).where(Role.id.in_(ids))).all()
        return {row.id: row for row in rows}

    def add_role(self, role: Role) -> Role:
        self.db.add(role)
        self.db.flush()
        return role

    def delete_role(self, role: Role) -> None:
        self.db.delete(role)
        self.db.flush()

    def consultant_count_for_role(self, role_id: int) -> int:
        return int(
            self.db.scalar(select(func.count()).select_from(Consultant).where(Consultant.role_id == role_id))
            or 0
        )

    # ---------- Consultants ----------
    def list_consultants(self) -> list[Consultant]:
        return self.db.scalars(select(Consultant).order_by(Consultant.id.asc())).all()

    def get_consultant(self, consultant_id: int) -> Consultant | None:
        return self.db.scalar(select(Consultant).where(Consultant.id == consultant_id))

    def lock_consultant_day(self, consultant_id: int, work_date: date) -> Consultant | None:
        """Hold the (consultant, date) write lock until the transaction ends.

        On PostgreSQL this is a transaction-scoped advisory lock on that key plus
        a key-share lock on the consultant row, which blocks a concurrent delete
        of the consultant but not writers for other dates. Elsewhere it is a
        plain read.
        """

        if self.db.get_bind().dialect.name == "postgresql":
            self.db.execute(consultant_day_lock(consultant_id, work_date))
        return self.db.scalar(consultant_key_share(consultant_id))

    def get_consultants_by_ids(self, consultant_ids: Iterable[int]) -> dict[int, Consultant]:
        ids = set(consultant_ids)
        if not ids:
            return {}
        rows = self.db.scalars(select(Consultant).where(Consultant.id.in_(ids))).all()
        return {row.id: row for row in rows}

    def add_consultant(self, consultant: Consultant) -> Consultant:
        self.db.add(consultant)
        self.db.flush()
        return consultant

    def delete_consultant(self, consultant: Consultant) -> None:
        self.db.execute(delete(WorkEntry).where(WorkEntry.consultant_id == consultant.id))
        self.db.execute(delete(TaskAssignment).where(TaskAssignment.consultant_id == consultant.id))
        self.db.delete(consultant)
        self.db.flush()

    # ---------- Tasks ----------
    def list_tasks(self) -> list[Task]:
        return self.db.scalars(select(Task).order_by(Task.id.asc())).all()

    def get_task(self, task_id: int) -> Task | None:
        return self.db.scalar(select(Task).where(Task.id == task_id))

    def get_tasks_by_ids(self, task_ids: Iterable[int]) -> dict[int, Task]:
        ids = set(task_ids)
        if not ids:
            return {}
        rows = self.db.scalars(select(Task).where(Task.id.in_(ids))).all()
        return {row.id: row for row in rows}

    def add_task(self, task: Task) -> Task:
        self.db.add(task)
        self.db.flush()
        return task

    def delete_task(self, task: Task) -> None:
        self.db.execute(delete(WorkEntry).where(WorkEntry.task_id == task.id))
        self.db.execute(delete(TaskAssignment).where(TaskAssignment.task_id == task.id))
        self.db.delete(task)
        self.db.flush()

    # ---------- Task assignments ----------
    def get_assignment(self, consultant_id: int, task_id: int) -> TaskAssignment | None:
        return self.db.scalar(
            select(TaskAssignment).where(
                and_(
                    TaskAssignment.consultant_id == consultant_id,
                    TaskAssignment.task_id == task_id,
                )
            )
        )

    def assignment_exists(self, consultant_id: int, task_id: int) -> bool:
        found = self.db.scalar(
            select(TaskAssignment.id)
            .where(
                and_(
                    TaskAssignment.consultant_id == consultant_id,
                    TaskAssignment.task_id == task_id,
                )
            )
            .limit(1)
        )
        return found is not None

    def assigned_consultant_ids_by_task(self, task_ids: Iterable[int]) -> dict[int, list[int]]:
        ids = set(task_ids)
        grouped: dict[int, list[int]] = {task_id: [] for task_id in ids}
        if not ids:
            return grouped
        rows = self.db.execute(
            select(TaskAssignment.task_id, TaskAssignment.consultant_id)
            .where(TaskAssignment.task_id.in_(ids))
            .order_by(TaskAssignment.task_id.asc(), TaskAssignment.consultant_id.asc())
        ).all()
        for task_id, consultant_id in rows:
            grouped[task_id].append(consultant_id)
        return grouped

    def add_assignment(self, assignment: TaskAssignment) -> TaskAssignment:
        self.db.add(assignment)
        self.db.flush()
        return assignment

    def delete_assignment(self, assignment: TaskAssignment) -> None:
        self.db.delete(assignment)
        self.db.flush()

    # ---------- Work entries ----------
    def list_entries(self) -> list[WorkEntry]:
        return self.db.scalars(select(WorkEntry).order_by(WorkEntry.id.asc())).all()

    def get_entry(self, entry_id: int) -> WorkEntry | None:
        return self.db.scalar(select(WorkEntry).where(WorkEntry.id == entry_id))

    def hours_logged_on(self, consultant_id: int, work_date: date) -> Decimal:
        total = self.db.scalar(
            select(func.coalesce(func.sum(WorkEntry.hours_worked), 0)).where(
                and_(
                    WorkEntry.consultant_id == consultant_id,
                    WorkEntry.work_date == work_date,
                )
            )
        )
        # SQLite sums REAL values; stored hours carry two decimal places.
        return Decimal(str(total or 0)).quantize(Decimal("0.01"))

    def list_entries_for_consultant(
        self,
        consultant_id: int,
        *,
        start_date: date,
        end_date: date,
    ) -> list[WorkEntry]:
        return self.db.scalars(
            select(WorkEntry)
            .where(
                and_(
                    WorkEntry.consultant_id == consultant_id,
                    WorkEntry.work_date >= start_date,
                    WorkEntry.work_date <= end_date,
                )
            )
            .order_by(WorkEntry.work_date.asc(), WorkEntry.id.asc())
        ).all()

    def add_entry(self, entry: WorkEntry) -> WorkEntry:
        self.db.add(entry)
        self.db.flush()
        return entry

    def delete_entry(self, entry: WorkEntry) -> None:
        self.db.delete(entry)
        self.db.flush()
