"""
Student Value Objects
"""
from __future__ import annotations

from enum import Enum
from typing import FrozenSet


class EnrollmentStatus(str, Enum):
    """Enrollment lifecycle of a student."""
    ENROLLED = "Enrolled"
    PENDING_PAYMENT = "Pending Payment"
    INACTIVE = "Inactive"   # obligations frozen at the moment of transition
    REMOVED = "Removed"     # soft delete

    @property
    def is_active(self) -> bool:
        return self in ACTIVE_STATUSES

    @classmethod
    def parse(cls, value: "EnrollmentStatus | str") -> "EnrollmentStatus":
        """Raises ValueError for anything outside the closed set."""
        return value if isinstance(value, cls) else cls(value)


ACTIVE_STATUSES: FrozenSet[EnrollmentStatus] = frozenset(
    {EnrollmentStatus.ENROLLED, EnrollmentStatus.PENDING_PAYMENT}
)


class Role(str, Enum):
    STUDENT = "student"
    ADMIN = "admin"
    SUPERADMIN = "superadmin"
