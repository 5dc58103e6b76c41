"""
Student Store Protocol (Interface)
"""
from __future__ import annotations

from typing import Any, List, Mapping, Optional, Protocol

from schoolledger.students.domain.entities import Student
from schoolledger.students.domain.value_objects import EnrollmentStatus


class StudentStore(Protocol):
    """Users collection filtered to ``role=student``."""

    async def add(self, student: Student) -> Student:
        """Persist a new student document"""
        ...

    async def get(self, student_id: str) -> Optional[Student]:
        """Get student by id; None when absent"""
        ...

    async def list_all(self) -> List[Student]:
        """All students regardless of status"""
        ...

    async def list_by_status(self, status: EnrollmentStatus) -> List[Student]:
        """Students with the given enrollment status"""
        ...

    async def update(self, student_id: str, changes: Mapping[str, Any]) -> Student:
        """Write the given fields; raises NotFoundError when the student does not exist"""
        ...

    async def soft_remove(self, student_id: str) -> Student:
        """Status write to Removed; the document is kept"""
        ...
