"""ORM model package."""

from consultant_ledger.models.entities import (
    Consultant,
    Role,
    Task,
    TaskAssignment,
    WorkEntry,
)

__all__ = [
    "Consultant",
    "Role",
    "Task",
    "TaskAssignment",
    "WorkEntry",
]
