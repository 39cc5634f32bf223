"""Asset transfer collaborator interface.

The engine never moves value itself: it asks the custody collaborator to pull
value into engine custody (tosses, top-ups) or push it out (prizes, fees,
refunds, emergency withdrawals) and acts on the success flag.
"""

import logging
from typing import Protocol

from src.pond_ledger.domain.models import is_zero_address

logger = logging.getLogger(__name__)

NATIVE_SYMBOL = "NATIVE"
UNKNOWN_TOKEN_SYMBOL = "TOKEN"


class AssetTransferProtocol(Protocol):
    async def pull(self, asset: str, from_addr: str, amount: int) -> bool: ...

    async def push(self, asset: str, to_addr: str, amount: int) -> bool: ...

    async def balance_of(self, asset: str, address: str) -> int: ...

    async def symbol(self, asset: str) -> str: ...


async def token_symbol_or_default(custody: AssetTransferProtocol, asset: str) -> str:
    """Display symbol for an asset; metadata lookups are best-effort."""
    if is_zero_address(asset):
        return NATIVE_SYMBOL
    try:
        return await custody.symbol(asset)
    except Exception as exc:
        logger.warning("Symbol lookup failed for %s: %s", asset, exc)
        return UNKNOWN_TOKEN_SYMBOL
