"""
Payload validation rules.

Validators never raise: each returns a ValidationResult and the caller decides
whether to turn ``errors`` into a domain error.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Final, List, Mapping

EMAIL_REGEX: Final[str] = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"

STUDENT_ROLES: Final = ("student", "admin", "superadmin")
ENROLLMENT_STATUSES: Final = ("Enrolled", "Inactive", "Pending Payment", "Removed")
ATTENDANCE_STATUSES: Final = ("present", "absent", "late", "medicalAbsence", "holiday")
PAYMENT_METHODS: Final = ("cash", "credit", "bank_transfer", "check", "other")

DEFAULT_PAGE: Final = 1
DEFAULT_LIMIT: Final = 10
MAX_LIMIT: Final = 100


@dataclass(frozen=True, slots=True)
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)
    sanitized: Dict[str, Any] = field(default_factory=dict)


def _result(errors: List[str], sanitized: Dict[str, Any] | None = None) -> ValidationResult:
    return ValidationResult(valid=not errors, errors=errors, sanitized=sanitized or {})


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_valid_email(email: str) -> bool:
    return isinstance(email, str) and re.match(EMAIL_REGEX, email) is not None


class ValidationService:
    """Schema rules for student, attendance, payment and pagination payloads."""

    def validate_student(self, data: Mapping[str, Any]) -> ValidationResult:
        errors: List[str] = []
        for name in ("first_name", "last_name", "email", "role"):
            if not data.get(name):
                errors.append(f"{name} is required")

        email = data.get("email")
        if email and not is_valid_email(email):
            errors.append("email format is invalid")

        if data.get("role") == "student":
            status = data.get("enrollment_status")
            if not status:
                errors.append("enrollment_status is required for students")
            elif status not in ENROLLMENT_STATUSES:
                errors.append(f"enrollment_status must be one of: {', '.join(ENROLLMENT_STATUSES)}")

        role = data.get("role")
        if role and role not in STUDENT_ROLES:
            errors.append(f"role must be one of: {', '.join(STUDENT_ROLES)}")

        if "balance" in data and data["balance"] is not None and not _is_number(data["balance"]):
            errors.append("balance must be a number")
        return _result(errors)

    def validate_attendance(self, student_id: str | None, data: Mapping[str, Any]) -> ValidationResult:
        errors: List[str] = []
        if not student_id:
            errors.append("student_id is required")
        if not data.get("status"):
            errors.append("status is required")
        if not data.get("timestamp"):
            errors.append("timestamp is required")

        status = data.get("status")
        if status and status not in ATTENDANCE_STATUSES:
            errors.append(f"status must be one of: {', '.join(ATTENDANCE_STATUSES)}")

        if "attributes" in data and not isinstance(data["attributes"], Mapping):
            errors.append("attributes must be an object")
        return _result(errors)

    def validate_payment(self, data: Mapping[str, Any]) -> ValidationResult:
        errors: List[str] = []
        for name in ("student_id", "amount", "timestamp"):
            if not data.get(name):
                errors.append(f"{name} is required")

        if "amount" in data and data["amount"] is not None:
            amount = data["amount"]
            if not _is_number(amount):
                errors.append("amount must be a number")
            elif amount <= 0:
                errors.append("amount must be a positive number")

        method = data.get("payment_method")
        if method and method not in PAYMENT_METHODS:
            errors.append(f"payment_method must be one of: {', '.join(PAYMENT_METHODS)}")
        return _result(errors)

    def validate_pagination(self, query: Mapping[str, Any]) -> ValidationResult:
        """Page defaults to 1, limit to 10 (allowed 1..100); bad values fall back to the default."""
        errors: List[str] = []
        sanitized: Dict[str, Any] = {"page": DEFAULT_PAGE, "limit": DEFAULT_LIMIT}

        if query.get("page") is not None:
            page = _parse_int(query["page"])
            if page is None or page < 1:
                errors.append("page must be a positive integer")
            else:
                sanitized["page"] = page

        if query.get("limit") is not None:
            limit = _parse_int(query["limit"])
            if limit is None or not 1 <= limit <= MAX_LIMIT:
                errors.append(f"limit must be a positive integer between 1 and {MAX_LIMIT}")
            else:
                sanitized["limit"] = limit
        return _result(errors, sanitized)


def _parse_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = re.match(r"^\s*([+-]?\d+)", str(value))
    return int(match.group(1)) if match else None
