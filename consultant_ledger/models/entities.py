"""ORM entities for the consultant work ledger.

Relations are plain foreign-key columns resolved through the repository;
entities carry no back-reference collections.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, validates

from consultant_ledger.db.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(Base):
    __tablename__ = "roles"
    __table_args__ = (CheckConstraint("rate_per_hour > 0", name="ck_roles_rate_per_hour_positive"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    rate_per_hour: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class Consultant(Base):
    __tablename__ = "consultants"
    __table_args__ = (Index("ix_consultants_role_id", "role_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    role_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("roles.id", ondelete="RESTRICT"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (CheckConstraint("duration_hours >= 0", name="ck_tasks_duration_hours_non_negative"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    # Planned effort; informational only, never checked against logged hours.
    duration_hours: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=Decimal("0.00"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class TaskAssignment(Base):
    __tablename__ = "task_assignments"
    __table_args__ = (
        Index("ix_task_assignments_task_id", "task_id"),
        UniqueConstraint("consultant_id", "task_id", name="uq_task_assignments_consultant_task"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    consultant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("consultants.id", ondelete="CASCADE"), nullable=False
    )
    task_id: Mapped[int] = mapped_column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    assigned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class WorkEntry(Base):
    __tablename__ = "work_entries"
    __table_args__ = (
        CheckConstraint("hours_worked > 0", name="ck_work_entries_hours_worked_positive"),
        CheckConstraint(
            "rate_per_hour_at_time_of_work > 0",
            name="ck_work_entries_rate_per_hour_at_time_of_work_positive",
        ),
        Index("ix_work_entries_consultant_work_date", "consultant_id", "work_date"),
        Index("ix_work_entries_task_id", "task_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    consultant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("consultants.id", ondelete="CASCADE"), nullable=False
    )
    task_id: Mapped[int] = mapped_column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    hours_worked: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    rate_per_hour_at_time_of_work: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    @validates("rate_per_hour_at_time_of_work")
    def _freeze_rate_snapshot(self, _key: str, value: Decimal) -> Decimal:
        current = getattr(self, "rate_per_hour_at_time_of_work", None)
        if current is not None and Decimal(current) != Decimal(value):
            raise ValueError("rate_per_hour_at_time_of_work is fixed once an entry is recorded.")
        return value
