"""
Attendance fee rules.

absent -> absence fee; medicalAbsence/holiday -> 0; present (and the
standalone ``late`` status, which implies late=True) -> one surcharge unit
per true attribute flag.
"""
from __future__ import annotations

from typing import Dict, Mapping, Optional

from schoolledger.attendance.domain.entities import AttendanceRecord
from schoolledger.attendance.domain.value_objects import AttendanceStatus, AttributeKey

ABSENCE_FEE = 5
ATTRIBUTE_FEES: Dict[AttributeKey, int] = {
    AttributeKey.LATE: 1,
    AttributeKey.NO_SHOES: 1,
    AttributeKey.NOT_IN_UNIFORM: 1,
}

_NO_FEE = frozenset({AttendanceStatus.MEDICAL_ABSENCE, AttendanceStatus.HOLIDAY})


class FeeCalculator:
    """Pure function from (status, attributes) to a non-negative integer fee."""

    def __init__(self, absence_fee: int = ABSENCE_FEE, attribute_fees: Optional[Mapping[AttributeKey, int]] = None) -> None:
        self.absence_fee = absence_fee
        self.attribute_fees = dict(attribute_fees or ATTRIBUTE_FEES)

    def effective_flags(self, status: AttendanceStatus | str, attributes: Optional[Mapping[str, bool]] = None) -> Dict[AttributeKey, bool]:
        """Surcharge flags that apply, with the standalone late status folded in."""
        status = AttendanceStatus(status)
        attributes = attributes or {}
        flags = {key: bool(attributes.get(key.value, False)) for key in AttributeKey}
        if status == AttendanceStatus.LATE:
            flags[AttributeKey.LATE] = True
        return flags

    def fee(self, status: AttendanceStatus | str, attributes: Optional[Mapping[str, bool]] = None) -> int:
        status = AttendanceStatus(status)
        if status == AttendanceStatus.ABSENT:
            return self.absence_fee
        if status in _NO_FEE:
            return 0
        flags = self.effective_flags(status, attributes)
        return sum(self.attribute_fees.get(key, 0) for key, on in flags.items() if on)

    def fee_for(self, record: Optional[AttendanceRecord]) -> int:
        return 0 if record is None else self.fee(record.status, record.attributes)

    def fee_difference(self, previous: Optional[AttendanceRecord], status: AttendanceStatus | str, attributes: Optional[Mapping[str, bool]] = None) -> int:
        return self.fee(status, attributes) - self.fee_for(previous)
