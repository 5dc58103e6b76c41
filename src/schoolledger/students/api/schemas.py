from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class StudentCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    first_name: str
    last_name: str
    email: str
    id: Optional[str] = Field(default=None, max_length=64)


class EnrollmentStatusRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    status: str


class BalanceClearRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    reason: str = ""


class BalanceAmountRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    amount: float
