"""Period boundary arithmetic over integer seconds-since-epoch (UTC).

Calendar conversions use the proleptic Gregorian day-count algorithm
(days_from_civil / civil_from_days), so month and year rollover need no
lookup tables. Every window is closed on both ends: [start, end] with
end = next_start - 1, so consecutive windows never overlap.
"""

from src.pond_common.enums import PondPeriod

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400
SECONDS_PER_WEEK = 7 * SECONDS_PER_DAY
FIVE_MINUTES = 5 * SECONDS_PER_MINUTE

# 1970-01-01 is day 0 of the epoch day count
_DAYS_0000_03_01_TO_EPOCH = 719468
_DAYS_PER_ERA = 146097


def days_from_civil(year: int, month: int, day: int) -> int:
    """Days since 1970-01-01 for a Gregorian (year, month, day)."""
    if not 1 <= month <= 12:
        raise ValueError(f"month out of range: {month}")
    y = year - 1 if month <= 2 else year
    era = y // 400
    yoe = y - era * 400
    mp = month - 3 if month > 2 else month + 9
    doy = (153 * mp + 2) // 5 + day - 1
    doe = yoe * 365 + yoe // 4 - yoe // 100 + doy
    return era * _DAYS_PER_ERA + doe - _DAYS_0000_03_01_TO_EPOCH


def civil_from_days(days: int) -> tuple[int, int, int]:
    """Inverse of days_from_civil: (year, month, day)."""
    z = days + _DAYS_0000_03_01_TO_EPOCH
    era = z // _DAYS_PER_ERA
    doe = z - era * _DAYS_PER_ERA
    yoe = (doe - doe // 1460 + doe // 36524 - doe // 146096) // 365
    doy = doe - (365 * yoe + yoe // 4 - yoe // 100)
    mp = (5 * doy + 2) // 153
    day = doy - (153 * mp + 2) // 5 + 1
    month = mp + 3 if mp < 10 else mp - 9
    year = yoe + era * 400 + (1 if month <= 2 else 0)
    return year, month, day


def truncate_to_day(t: int) -> int:
    """UTC midnight of the day containing t."""
    return t - t % SECONDS_PER_DAY


def day_of_week(t: int) -> int:
    """1 = Monday … 7 = Sunday. Epoch day 0 was a Thursday."""
    return (t // SECONDS_PER_DAY + 3) % 7 + 1


def first_of_month(t: int) -> int:
    year, month, _ = civil_from_days(t // SECONDS_PER_DAY)
    return days_from_civil(year, month, 1) * SECONDS_PER_DAY


def next_month(t: int) -> int:
    """Midnight of the first day of the month after the one containing t."""
    year, month, _ = civil_from_days(t // SECONDS_PER_DAY)
    if month == 12:
        year, month = year + 1, 1
    else:
        month += 1
    return days_from_civil(year, month, 1) * SECONDS_PER_DAY


def period_window(period: PondPeriod, t: int) -> tuple[int, int]:
    """Natural [start, end] window of a standard period that contains t."""
    if period is PondPeriod.FIVE_MINUTES:
        start = t - t % FIVE_MINUTES
        return start, start + FIVE_MINUTES - 1
    if period is PondPeriod.HOURLY:
        start = t - t % SECONDS_PER_HOUR
        return start, start + SECONDS_PER_HOUR - 1
    if period is PondPeriod.DAILY:
        start = truncate_to_day(t)
        return start, start + SECONDS_PER_DAY - 1
    if period is PondPeriod.WEEKLY:
        start = truncate_to_day(t) - (day_of_week(t) - 1) * SECONDS_PER_DAY
        return start, start + SECONDS_PER_WEEK - 1
    if period is PondPeriod.MONTHLY:
        return first_of_month(t), next_month(t) - 1
    raise ValueError(f"{period.value} ponds have no natural window")
