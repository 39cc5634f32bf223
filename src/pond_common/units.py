"""Integer arithmetic utilities for base-unit amounts.

All amounts, floors, caps and totals are int base units (18 decimals for the
native asset). No float, no Decimal in the engine; Decimal only at the edges
for parsing human input.
"""

from decimal import Decimal

NATIVE_DECIMALS = 18


def parse_units(value: str | int | Decimal, decimals: int = NATIVE_DECIMALS) -> int:
    """Convert a human amount to base units: '0.1' -> 100000000000000000."""
    scaled = Decimal(str(value)) * (Decimal(10) ** decimals)
    if scaled != scaled.to_integral_value():
        raise ValueError(f"{value} has more than {decimals} decimal places")
    return int(scaled)


def format_units(amount: int, decimals: int = NATIVE_DECIMALS) -> str:
    """Convert base units to a display string: 1500000000000000000 -> '1.5'."""
    sign = "-" if amount < 0 else ""
    whole, frac = divmod(abs(amount), 10**decimals)
    if frac == 0:
        return f"{sign}{whole}"
    frac_str = f"{frac:0{decimals}d}".rstrip("0")
    return f"{sign}{whole}.{frac_str}"


def calculate_fee(value: int, fee_percent: int) -> int:
    """Protocol fee with floor division (winner never loses the remainder).

    fee = floor(value * fee_percent / 100)
    """
    if value == 0 or fee_percent == 0:
        return 0
    return value * fee_percent // 100


def split_prize(value: int, fee_percent: int) -> tuple[int, int]:
    """Return (prize, fee) with prize + fee == value."""
    fee = calculate_fee(value, fee_percent)
    return value - fee, fee
