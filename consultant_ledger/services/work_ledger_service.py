"""Work ledger engine and payment summaries.

Recording work checks, in order: consultant exists, task exists, the
consultant is assigned to the task, hours are positive, and the consultant's
day stays within the daily cap. The cap check, the rate read and the insert
run under one per (consultant, date) lock so concurrent submissions cannot
jointly exceed the cap. The consultant role's current rate is copied onto the
entry and never re-derived; summaries bill from that snapshot only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from sqlalchemy.orm import Session

from consultant_ledger.core.config import get_settings
from consultant_ledger.core.errors import (
    FailedPreconditionError,
    InvalidArgumentError,
    NotFoundError,
    ResourceExhaustedError,
)
from consultant_ledger.core.locks import KeyedLock, ledger_locks
from consultant_ledger.models.entities import Consultant, Task, WorkEntry, utcnow
from consultant_ledger.repositories.ledger_repository import LedgerRepository
from consultant_ledger.services.amounts import ZERO, has_cents_precision, money, q2

logger = logging.getLogger(__name__)


def entry_amount(entry: WorkEntry) -> Decimal:
    return entry.hours_worked * entry.rate_per_hour_at_time_of_work


@dataclass(slots=True)
class WorkEntryCreateData:
    consultant_id: int
    task_id: int
    work_date: date
    hours_worked: Decimal


@dataclass(slots=True)
class PaymentSummary:
    consultant: Consultant
    start_date: date
    end_date: date
    entries: list[WorkEntry] = field(default_factory=list)
    total_hours: Decimal = ZERO
    total_amount: Decimal = ZERO


class WorkLedgerService:
    """Records, reads and deletes work entries; builds payment summaries."""

    def __init__(self, db: Session, *, locks: KeyedLock | None = None) -> None:
        self.db = db
        self.repo = LedgerRepository(db)
        self.settings = get_settings()
        self.locks = locks if locks is not None else ledger_locks

    # ---------- Serialization ----------
    @staticmethod
    def serialize_entry(entry: WorkEntry, *, consultant: Consultant, task: Task) -> dict[str, object]:
        return {
            "id": entry.id,
            "consultant_id": entry.consultant_id,
            "consultant_name": consultant.display_name,
            "task_id": entry.task_id,
            "task_name": task.name,
            "work_date": entry.work_date.isoformat(),
            "hours_worked": str(q2(entry.hours_worked)),
            "rate_per_hour_at_time_of_work": str(q2(entry.rate_per_hour_at_time_of_work)),
            "total_amount": money(entry_amount(entry)),
        }

    def serialize_entries(self, entries: list[WorkEntry]) -> list[dict[str, object]]:
        consultants = self.repo.get_consultants_by_ids(entry.consultant_id for entry in entries)
        tasks = self.repo.get_tasks_by_ids(entry.task_id for entry in entries)
        return [
            self.serialize_entry(
                entry,
                consultant=consultants[entry.consultant_id],
                task=tasks[entry.task_id],
            )
            for entry in entries
        ]

    def serialize_summary(self, summary: PaymentSummary) -> dict[str, object]:
        return {
            "consultant_id": summary.consultant.id,
            "consultant_name": summary.consultant.display_name,
            "start_date": summary.start_date.isoformat(),
            "end_date": summary.end_date.isoformat(),
            "total_hours": str(q2(summary.total_hours)),
            "total_amount": money(summary.total_amount),
            "work_entries": self.serialize_entries(summary.entries),
        }

    # ---------- Ledger ----------
    def record_work(self, data: WorkEntryCreateData) -> WorkEntry:
        consultant = self.repo.get_consultant(data.consultant_id)
        if consultant is None:
            raise NotFoundError("Consultant not found.")
        if self.repo.get_task(data.task_id) is None:
            raise NotFoundError("Task not found.")
        if not self.repo.assignment_exists(data.consultant_id, data.task_id):
            raise FailedPreconditionError("Consultant is not assigned to this task.")

        hours = data.hours_worked
        if not hours.is_finite() or hours <= 0:
            raise InvalidArgumentError("Hours worked must be greater than 0.")
        if not has_cents_precision(hours):
            raise InvalidArgumentError("Hours worked supports at most two decimal places.")

        cap = self.settings.daily_hour_cap
        key = (data.consultant_id, data.work_date)
        with self.locks.hold(key, timeout=self.settings.ledger_lock_timeout_seconds):
            try:
                # Same key as the in-process lock; spans processes on PostgreSQL.
                consultant = self.repo.lock_consultant_day(data.consultant_id, data.work_date)
                if consultant is None:
                    raise NotFoundError("Consultant not found.")

                already_logged = self.repo.hours_logged_on(data.consultant_id, data.work_date)
                if already_logged + hours > cap:
                    logger.warning(
                        "Daily cap rejected %sh for consultant %s on %s (already %sh)",
                        hours,
                        data.consultant_id,
                        data.work_date,
                        already_logged,
                    )
                    raise ResourceExhaustedError(
                        f"Cannot exceed {cap} hours per day. "
                        f"Already worked {already_logged} hours on this day.",
                        already_logged_hours=already_logged,
                    )

                role = self.repo.get_role(consultant.role_id)
                if role is None:
                    raise NotFoundError("Role not found.")

                now = utcnow()
                entry = WorkEntry(
                    consultant_id=data.consultant_id,
                    task_id=data.task_id,
                    work_date=data.work_date,
                    hours_worked=hours,
                    rate_per_hour_at_time_of_work=role.rate_per_hour,
                    created_at=now,
                    updated_at=now,
                )
                self.repo.add_entry(entry)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        self.db.refresh(entry)
        logger.info(
            "Recorded work entry %s: consultant %s task %s on %s, %sh at %s",
            entry.id,
            entry.consultant_id,
            entry.task_id,
            entry.work_date,
            entry.hours_worked,
            entry.rate_per_hour_at_time_of_work,
        )
        return entry

    def get_entry(self, entry_id: int) -> WorkEntry:
        entry = self.repo.get_entry(entry_id)
        if entry is None:
            raise NotFoundError("Work entry not found.")
        return entry

    def list_entries(self) -> list[WorkEntry]:
        return self.repo.list_entries()

    def delete_entry(self, entry_id: int) -> None:
        # Removing hours only frees capacity, so the day cap is not rechecked.
        entry = self.get_entry(entry_id)
        self.repo.delete_entry(entry)
        self.db.commit()

    # ---------- Payment summary ----------
    def summarize(self, consultant_id: int, start_date: date, end_date: date) -> PaymentSummary:
        consultant = self.repo.get_consultant(consultant_id)
        if consultant is None:
            raise NotFoundError("Consultant not found.")

        if start_date > end_date:
            raise InvalidArgumentError("start_date must be on or before end_date.")

        entries = self.repo.list_entries_for_consultant(
            consultant_id,
            start_date=start_date,
            end_date=end_date,
        )
        total_hours = sum((entry.hours_worked for entry in entries), ZERO)
        total_amount = sum((entry_amount(entry) for entry in entries), ZERO)
        return PaymentSummary(
            consultant=consultant,
            start_date=start_date,
            end_date=end_date,
            entries=list(entries),
            total_hours=total_hours,
            total_amount=total_amount,
        )
