"""Check-then-perform upkeep for external schedulers."""

import logging
from dataclasses import dataclass

from src.pond_common.enums import PondPhase
from src.pond_ledger.domain.ledger import PondLedger
from src.pond_selection.domain.context import ExecutionContext
from src.pond_settlement.application.service import SettlementResult, SettlementService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpkeepCheck:
    upkeep_needed: bool
    pond_id: str | None = None


class UpkeepService:
    def __init__(self, ledger: PondLedger, settlement: SettlementService) -> None:
        self._ledger = ledger
        self._settlement = settlement

    def check_upkeep(self, now: int) -> UpkeepCheck:
        """First settleable pond in registry order, if any."""
        for pond in self._ledger.all_ponds():
            if pond.refund is None and self._settlement.phase(pond, now) is PondPhase.SETTLEABLE:
                return UpkeepCheck(upkeep_needed=True, pond_id=pond.id)
        return UpkeepCheck(upkeep_needed=False)

    async def perform_upkeep(self, pond_id: str, ctx: ExecutionContext) -> SettlementResult:
        logger.info("Upkeep: settling pond %s", pond_id)
        return await self._settlement.settle(pond_id, ctx)
