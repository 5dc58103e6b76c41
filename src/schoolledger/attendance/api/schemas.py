from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class AttendanceMarkRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    status: str
    attributes: Dict[str, bool] = Field(default_factory=dict)


class BulkAttendanceRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    student_ids: List[str]
    status: str
    attributes: Dict[str, bool] = Field(default_factory=dict)


class HolidayCalendarResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")
    date: str
    holiday_name: str | None = None
    is_holiday: bool
    should_charge_fees: bool
    fee_year: str
