"""
Users table (students are rows with role='student')
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Float, String
from sqlalchemy.orm import Mapped, mapped_column

from schoolledger.shared.database.base_model import Base


class StudentModel(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    first_name: Mapped[str] = mapped_column(String(120))
    last_name: Mapped[str] = mapped_column(String(120))
    email: Mapped[str] = mapped_column(String(255), default="")
    role: Mapped[str] = mapped_column(String(32), default="student", index=True)
    enrollment_status: Mapped[str] = mapped_column(String(32), index=True)
    balance: Mapped[float] = mapped_column(Float, default=0)
    frozen_at: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    frozen_fees_total: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    frozen_balance: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    balance_history: Mapped[Optional[dict]] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column()
