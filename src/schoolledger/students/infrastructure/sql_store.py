"""
SQLAlchemy StudentStore
"""
from __future__ import annotations

from typing import Any, List, Mapping, Optional

from sqlalchemy import select

from schoolledger.shared.database import DatabaseSessionFactory
from schoolledger.shared.exceptions import NotFoundError
from schoolledger.shared.utils.dates import to_local_datetime
from schoolledger.students.domain.entities import BalanceClearance, Student, apply_changes
from schoolledger.students.domain.value_objects import EnrollmentStatus, Role
from schoolledger.students.infrastructure.models import StudentModel


class SqlStudentStore:
    def __init__(self, db: DatabaseSessionFactory) -> None:
        self._db = db

    def _to_entity(self, model: StudentModel) -> Student:
        cleared = (model.balance_history or {}).get("cleared")
        return Student(
            id=model.id,
            first_name=model.first_name,
            last_name=model.last_name,
            email=model.email or "",
            role=Role(model.role),
            enrollment_status=EnrollmentStatus(model.enrollment_status),
            balance=model.balance or 0,
            frozen_at=model.frozen_at,
            frozen_fees_total=model.frozen_fees_total,
            frozen_balance=model.frozen_balance,
            balance_cleared=BalanceClearance(**cleared) if cleared else None,
            created_at=to_local_datetime(model.created_at),
        )

    def _write(self, model: StudentModel, student: Student) -> StudentModel:
        model.first_name = student.first_name
        model.last_name = student.last_name
        model.email = student.email
        model.role = student.role.value
        model.enrollment_status = student.enrollment_status.value
        model.balance = student.balance
        model.frozen_at = student.frozen_at
        model.frozen_fees_total = student.frozen_fees_total
        model.frozen_balance = student.frozen_balance
        if student.balance_cleared is not None:
            c = student.balance_cleared
            model.balance_history = {
                "cleared": {"date": c.date, "previous_balance": c.previous_balance, "reason": c.reason}
            }
        model.created_at = student.created_at
        return model

    async def add(self, student: Student) -> Student:
        async with self._db.transaction("Add student") as session:
            model = await session.get(StudentModel, student.id) or StudentModel(id=student.id)
            session.add(self._write(model, student))
        return student

    async def get(self, student_id: str) -> Optional[Student]:
        async with self._db.transaction("Get student") as session:
            model = await session.get(StudentModel, student_id)
            if model is None or model.role != Role.STUDENT.value:
                return None
            return self._to_entity(model)

    async def list_all(self) -> List[Student]:
        stmt = select(StudentModel).where(StudentModel.role == Role.STUDENT.value)
        async with self._db.transaction("List students") as session:
            rows = (await session.execute(stmt)).scalars().all()
            return [self._to_entity(m) for m in rows]

    async def list_by_status(self, status: EnrollmentStatus) -> List[Student]:
        stmt = select(StudentModel).where(
            StudentModel.role == Role.STUDENT.value,
            StudentModel.enrollment_status == EnrollmentStatus.parse(status).value,
        )
        async with self._db.transaction("List students by status") as session:
            rows = (await session.execute(stmt)).scalars().all()
            return [self._to_entity(m) for m in rows]

    async def update(self, student_id: str, changes: Mapping[str, Any]) -> Student:
        async with self._db.transaction("Update student") as session:
            model = await session.get(StudentModel, student_id)
            if model is None:
                raise NotFoundError(f"Student not found: {student_id}", code="student_not_found")
            updated = apply_changes(self._to_entity(model), changes)
            self._write(model, updated)
            return updated

    async def soft_remove(self, student_id: str) -> Student:
        return await self.update(student_id, {"enrollment_status": EnrollmentStatus.REMOVED})
