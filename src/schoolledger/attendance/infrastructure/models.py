"""
Attendance day documents
"""
from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from schoolledger.shared.database.base_model import Base


class AttendanceDayModel(Base):
    __tablename__ = "attendance_days"

    # YYYY-MM-DD; sorts lexicographically in calendar order
    date_key: Mapped[str] = mapped_column(String(10), primary_key=True)
    # {student_id: {"status": str, "timestamp": iso str, "attributes": {str: bool}}}
    records: Mapped[dict] = mapped_column(default=dict)
