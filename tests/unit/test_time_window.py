"""Unit tests for period boundary arithmetic."""

import pytest

from src.pond_common.enums import PondPeriod
from src.pond_common.time_window import (
    SECONDS_PER_DAY,
    civil_from_days,
    day_of_week,
    days_from_civil,
    first_of_month,
    next_month,
    period_window,
    truncate_to_day,
)

# 2026-01-01 00:00:00 UTC (Thursday)
JAN_1_2026 = 1_767_225_600


def ts(year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0) -> int:
    return days_from_civil(year, month, day) * SECONDS_PER_DAY + hour * 3600 + minute * 60 + second


class TestCalendar:
    def test_epoch_is_day_zero(self) -> None:
        assert days_from_civil(1970, 1, 1) == 0
        assert civil_from_days(0) == (1970, 1, 1)

    def test_known_date(self) -> None:
        assert days_from_civil(2026, 1, 1) * SECONDS_PER_DAY == JAN_1_2026

    @pytest.mark.parametrize(
        "date",
        [(2000, 2, 29), (1999, 12, 31), (2024, 3, 1), (2100, 2, 28), (1969, 7, 20)],
    )
    def test_round_trip(self, date: tuple[int, int, int]) -> None:
        assert civil_from_days(days_from_civil(*date)) == date

    def test_invalid_month_rejected(self) -> None:
        with pytest.raises(ValueError):
            days_from_civil(2026, 13, 1)


class TestTruncation:
    def test_truncate_to_day(self) -> None:
        assert truncate_to_day(ts(2026, 3, 15, 17, 45, 12)) == ts(2026, 3, 15)

    def test_midnight_is_fixed_point(self) -> None:
        assert truncate_to_day(JAN_1_2026) == JAN_1_2026

    def test_day_of_week_monday_is_one(self) -> None:
        assert day_of_week(JAN_1_2026) == 4  # Thursday
        assert day_of_week(ts(2026, 1, 5, 12)) == 1  # Monday
        assert day_of_week(ts(2026, 1, 4, 23, 59, 59)) == 7  # Sunday

    def test_first_of_month(self) -> None:
        assert first_of_month(ts(2026, 2, 17, 8)) == ts(2026, 2, 1)

    def test_next_month_rolls_over_december(self) -> None:
        assert next_month(ts(2025, 12, 31, 23, 59, 59)) == JAN_1_2026

    def test_next_month_leap_february(self) -> None:
        assert next_month(ts(2024, 2, 29, 12)) == ts(2024, 3, 1)


class TestPeriodWindow:
    def test_five_minutes(self) -> None:
        t = JAN_1_2026 + 7 * 60 + 13
        assert period_window(PondPeriod.FIVE_MINUTES, t) == (JAN_1_2026 + 300, JAN_1_2026 + 599)

    def test_hourly(self) -> None:
        t = ts(2026, 1, 1, 10, 30)
        assert period_window(PondPeriod.HOURLY, t) == (ts(2026, 1, 1, 10), ts(2026, 1, 1, 10, 59, 59))

    def test_daily(self) -> None:
        t = ts(2026, 1, 1, 10, 30)
        assert period_window(PondPeriod.DAILY, t) == (JAN_1_2026, JAN_1_2026 + SECONDS_PER_DAY - 1)

    def test_weekly_is_monday_anchored(self) -> None:
        start, end = period_window(PondPeriod.WEEKLY, JAN_1_2026)
        assert start == ts(2025, 12, 29)
        assert end == ts(2026, 1, 4, 23, 59, 59)
        assert day_of_week(start) == 1

    def test_monthly_uses_calendar_month(self) -> None:
        start, end = period_window(PondPeriod.MONTHLY, ts(2026, 2, 10))
        assert start == ts(2026, 2, 1)
        assert end == ts(2026, 3, 1) - 1

    def test_consecutive_windows_do_not_overlap(self) -> None:
        for period in (PondPeriod.FIVE_MINUTES, PondPeriod.HOURLY, PondPeriod.WEEKLY, PondPeriod.MONTHLY):
            start, end = period_window(period, JAN_1_2026 + 1234)
            next_start, next_end = period_window(period, end + 1)
            assert next_start == end + 1
            assert start < end < next_start < next_end

    def test_custom_has_no_window(self) -> None:
        with pytest.raises(ValueError):
            period_window(PondPeriod.CUSTOM, JAN_1_2026)
