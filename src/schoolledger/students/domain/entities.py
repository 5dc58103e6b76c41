"""
Student Entity
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Mapping, Optional

from schoolledger.students.domain.value_objects import EnrollmentStatus, Role


@dataclass(frozen=True, slots=True)
class BalanceClearance:
    """Snapshot written when an admin explicitly zeroes a balance."""
    date: str               # ISO timestamp
    previous_balance: float
    reason: str


@dataclass(slots=True)
class Student:
    """
    A user document with ``role=student``.

    ``balance`` is a denormalized hint kept non-negative by every writer; the
    authoritative figure is always recomputed by the BalanceEngine. The freeze
    snapshot (``frozen_at``, ``frozen_fees_total``, ``frozen_balance``) is only
    populated while the student is Inactive.
    """
    id: str
    first_name: str
    last_name: str
    email: str = ""
    role: Role = Role.STUDENT
    enrollment_status: EnrollmentStatus = EnrollmentStatus.PENDING_PAYMENT
    balance: float = 0
    frozen_at: Optional[str] = None
    frozen_fees_total: Optional[float] = None
    frozen_balance: Optional[float] = None
    balance_cleared: Optional[BalanceClearance] = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_active(self) -> bool:
        return self.enrollment_status.is_active

    @property
    def is_inactive(self) -> bool:
        return self.enrollment_status == EnrollmentStatus.INACTIVE


_MUTABLE_FIELDS = frozenset(
    {
        "first_name", "last_name", "email", "role", "enrollment_status", "balance",
        "frozen_at", "frozen_fees_total", "frozen_balance", "balance_cleared",
    }
)


def apply_changes(student: Student, changes: Mapping[str, Any]) -> Student:
    """Copy of ``student`` with ``changes`` written; unknown field names raise ValueError."""
    unknown = set(changes) - _MUTABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown student fields: {sorted(unknown)}")
    values = dict(changes)
    if "enrollment_status" in values:
        values["enrollment_status"] = EnrollmentStatus.parse(values["enrollment_status"])
    if "role" in values:
        values["role"] = Role(values["role"])
    return replace(student, **values)
