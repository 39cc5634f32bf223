"""InMemoryCustody: balance book implementation of AssetTransferProtocol.

Balances are keyed by (asset, account). The engine's own holdings sit under
engine_address. Transfers to addresses on the reject list fail, which models
receivers that refuse incoming value.
"""

import logging
from collections import defaultdict

logger = logging.getLogger(__name__)


class InMemoryCustody:
    def __init__(self, engine_address: str, symbols: dict[str, str] | None = None) -> None:
        self.engine_address = engine_address
        self._balances: dict[tuple[str, str], int] = defaultdict(int)
        self._rejecting: set[str] = set()
        self._symbols: dict[str, str] = {k.lower(): v for k, v in (symbols or {}).items()}

    @staticmethod
    def _key(asset: str, address: str) -> tuple[str, str]:
        return asset.lower(), address.lower()

    def fund(self, asset: str, address: str, amount: int) -> None:
        """Seed an account (test and simulation helper)."""
        if amount < 0:
            raise ValueError("amount must be non-negative")
        self._balances[self._key(asset, address)] += amount

    def reject_transfers_to(self, address: str) -> None:
        self._rejecting.add(address.lower())

    def accept_transfers_to(self, address: str) -> None:
        self._rejecting.discard(address.lower())

    def register_symbol(self, asset: str, symbol: str) -> None:
        self._symbols[asset.lower()] = symbol

    def _move(self, asset: str, src: str, dst: str, amount: int) -> bool:
        if amount < 0:
            return False
        src_key = self._key(asset, src)
        if self._balances[src_key] < amount:
            return False
        self._balances[src_key] -= amount
        self._balances[self._key(asset, dst)] += amount
        return True

    async def pull(self, asset: str, from_addr: str, amount: int) -> bool:
        ok = self._move(asset, from_addr, self.engine_address, amount)
        if not ok:
            logger.debug("Pull refused: asset=%s from=%s amount=%d", asset, from_addr, amount)
        return ok

    async def push(self, asset: str, to_addr: str, amount: int) -> bool:
        if to_addr.lower() in self._rejecting:
            logger.debug("Push refused by receiver: asset=%s to=%s", asset, to_addr)
            return False
        return self._move(asset, self.engine_address, to_addr, amount)

    async def balance_of(self, asset: str, address: str) -> int:
        return self._balances[self._key(asset, address)]

    async def symbol(self, asset: str) -> str:
        try:
            return self._symbols[asset.lower()]
        except KeyError:
            raise LookupError(f"no metadata for {asset}") from None
