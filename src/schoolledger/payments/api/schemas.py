from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class PaymentCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    student_id: str
    # amount/method/date are checked by the balance engine so clients get domain messages
    amount: Any = None
    payment_method: str = "cash"
    date: Optional[str] = None
    notes: str = ""
    admin_id: Optional[str] = None


class ExpenseCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")
    amount: Any = None
    category: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = None
    admin_id: Optional[str] = None
    notes: str = ""
