"""
Holiday calendar: fixed, floating (nth/last weekday) and per-year holidays.
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Optional, Tuple

from schoolledger.shared.utils.dates import DateLike, to_local_date

MONDAY, THURSDAY = 0, 3

FIXED_HOLIDAYS: Dict[Tuple[int, int], str] = {
    (1, 1): "New Year's Day",
    (7, 4): "Independence Day",
    (11, 11): "Veterans Day",
    (12, 25): "Christmas Day",
}


def nth_weekday(year: int, month: int, weekday: int, n: int) -> date:
    first = date(year, month, 1)
    offset = (weekday - first.weekday()) % 7
    return first + timedelta(days=offset + (n - 1) * 7)


def last_weekday(year: int, month: int, weekday: int) -> date:
    last = date(year, month, calendar.monthrange(year, month)[1])
    return last - timedelta(days=(last.weekday() - weekday) % 7)


def floating_holidays(year: int) -> Dict[date, str]:
    return {
        nth_weekday(year, 1, MONDAY, 3): "Martin Luther King Jr. Day",
        nth_weekday(year, 2, MONDAY, 3): "Presidents Day",
        last_weekday(year, 5, MONDAY): "Memorial Day",
        nth_weekday(year, 9, MONDAY, 1): "Labor Day",
        nth_weekday(year, 10, MONDAY, 2): "Columbus Day",
        nth_weekday(year, 11, THURSDAY, 4): "Thanksgiving",
    }


@dataclass(frozen=True, slots=True)
class HolidayFeeAdjustment:
    is_holiday: bool
    original_fee: int
    adjusted_fee: int
    adjustment: int
    holiday_name: Optional[str] = None


class HolidayCalendar:
    def __init__(self) -> None:
        self._specific: Dict[date, str] = {}

    def holiday_name(self, value: DateLike) -> Optional[str]:
        d = to_local_date(value)
        return (
            FIXED_HOLIDAYS.get((d.month, d.day))
            or self._specific.get(d)
            or floating_holidays(d.year).get(d)
        )

    def is_holiday(self, value: DateLike) -> bool:
        return self.holiday_name(value) is not None

    def should_charge_fees(self, value: DateLike) -> bool:
        return not self.is_holiday(value)

    def add_specific_holiday(self, value: DateLike, name: str) -> None:
        """Adds or renames a one-off holiday for that exact date."""
        self._specific[to_local_date(value)] = name

    def remove_specific_holiday(self, value: DateLike) -> None:
        self._specific.pop(to_local_date(value), None)

    def specific_holidays(self) -> List[Tuple[date, str]]:
        return sorted(self._specific.items())

    def fee_adjustment(self, fee: int, value: DateLike) -> HolidayFeeAdjustment:
        """Credit that cancels ``fee`` when ``value`` falls on a calendar holiday."""
        name = self.holiday_name(value)
        if name is None:
            return HolidayFeeAdjustment(is_holiday=False, original_fee=fee, adjusted_fee=fee, adjustment=0)
        return HolidayFeeAdjustment(
            is_holiday=True, original_fee=fee, adjusted_fee=0, adjustment=-fee, holiday_name=name
        )
