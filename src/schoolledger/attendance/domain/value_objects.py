"""
Attendance Value Objects
"""
from enum import Enum


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"                       # same fee as present with late=True
    MEDICAL_ABSENCE = "medicalAbsence"
    HOLIDAY = "holiday"                 # marks the whole day as non-school


class AttributeKey(str, Enum):
    """Flags that carry a surcharge; other keys may be stored but never charge."""
    LATE = "late"
    NO_SHOES = "noShoes"
    NOT_IN_UNIFORM = "notInUniform"
