from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional

from schoolledger.shared.exceptions import NotFoundError
from schoolledger.students.domain.entities import Student, apply_changes
from schoolledger.students.domain.value_objects import EnrollmentStatus, Role


class InMemoryStudentStore:
    """Dict-backed StudentStore; hands out copies so callers never alias stored state."""

    def __init__(self, students: Iterable[Student] = ()) -> None:
        self._items: Dict[str, Student] = {s.id: replace(s) for s in students}

    async def add(self, student: Student) -> Student:
        self._items[student.id] = replace(student)
        return replace(student)

    async def get(self, student_id: str) -> Optional[Student]:
        student = self._items.get(student_id)
        if student is None or student.role != Role.STUDENT:
            return None
        return replace(student)

    async def list_all(self) -> List[Student]:
        return [replace(s) for s in self._items.values() if s.role == Role.STUDENT]

    async def list_by_status(self, status: EnrollmentStatus) -> List[Student]:
        return [s for s in await self.list_all() if s.enrollment_status == status]

    async def update(self, student_id: str, changes: Mapping[str, Any]) -> Student:
        current = self._items.get(student_id)
        if current is None:
            raise NotFoundError(f"Student not found: {student_id}", code="student_not_found")
        updated = apply_changes(current, changes)
        self._items[student_id] = updated
        return replace(updated)

    async def soft_remove(self, student_id: str) -> Student:
        return await self.update(student_id, {"enrollment_status": EnrollmentStatus.REMOVED})
