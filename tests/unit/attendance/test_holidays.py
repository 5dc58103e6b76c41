from datetime import date

from schoolledger.attendance.domain.holidays import HolidayCalendar, floating_holidays, last_weekday, nth_weekday


def test_floating_holidays_2024():
    holidays = floating_holidays(2024)
    assert holidays[date(2024, 1, 15)] == "Martin Luther King Jr. Day"
    assert holidays[date(2024, 5, 27)] == "Memorial Day"
    assert holidays[date(2024, 11, 28)] == "Thanksgiving"
    assert nth_weekday(2024, 9, 0, 1) == date(2024, 9, 2)
    assert last_weekday(2024, 5, 0) == date(2024, 5, 27)


def test_fixed_and_specific_holidays():
    cal = HolidayCalendar()
    assert cal.holiday_name("2023-12-25") == "Christmas Day"
    assert not cal.is_holiday(date(2023, 12, 26))

    cal.add_specific_holiday(date(2023, 12, 26), "Winter Break")
    assert cal.is_holiday("2023-12-26")
    assert not cal.should_charge_fees("2023-12-26")
    assert cal.specific_holidays() == [(date(2023, 12, 26), "Winter Break")]

    cal.remove_specific_holiday("2023-12-26")
    assert cal.should_charge_fees("2023-12-26")


def test_fee_adjustment_cancels_fee_on_holidays():
    cal = HolidayCalendar()
    adj = cal.fee_adjustment(5, date(2023, 7, 4))
    assert adj.is_holiday and adj.adjusted_fee == 0 and adj.adjustment == -5
    assert adj.holiday_name == "Independence Day"

    plain = cal.fee_adjustment(5, date(2023, 7, 5))
    assert not plain.is_holiday and plain.adjusted_fee == 5 and plain.adjustment == 0
