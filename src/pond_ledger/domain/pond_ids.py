"""Deterministic pond identifiers.

Native-asset standard ponds use fixed well-known ids; token ponds are
namespaced by (period name, token address) so every token gets its own set.
Ids render as 0x-prefixed 32-byte hex.
"""

import hashlib

from src.pond_common.enums import PondPeriod
from src.pond_ledger.domain.models import is_zero_address

_NATIVE_LABELS: dict[PondPeriod, str] = {
    PondPeriod.FIVE_MINUTES: "POND_FIVE_MIN",
    PondPeriod.HOURLY: "POND_HOURLY",
    PondPeriod.DAILY: "POND_DAILY",
    PondPeriod.WEEKLY: "POND_WEEKLY",
    PondPeriod.MONTHLY: "POND_MONTHLY",
}


def _digest(data: bytes) -> str:
    return "0x" + hashlib.sha256(data).hexdigest()


def _address_bytes(address: str) -> bytes:
    digits = address.lower().removeprefix("0x")
    try:
        return bytes.fromhex(digits.rjust(40, "0"))
    except ValueError:
        return address.lower().encode("utf-8")


def standard_pond_id(period: PondPeriod, asset_address: str) -> str:
    if not period.is_standard:
        raise ValueError("custom ponds have no standard id")
    if is_zero_address(asset_address):
        return _digest(_NATIVE_LABELS[period].encode("utf-8"))
    return _digest(period.value.encode("utf-8") + _address_bytes(asset_address))


def custom_pond_id(name: str) -> str:
    return _digest(b"CUSTOM:" + name.encode("utf-8"))
