"""ReclaimService: chunked participant clearing and emergency pro-rata refunds.

Refund batches are the one place a failed transfer does not abort the call:
the recipient is logged and skipped so one refusing receiver cannot block
everybody else. Each participant slot is processed at most once per refund,
and the refund finalizes once every slot has been processed, whatever order
the ranges arrive in.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from src.pond_common.enums import PondEventType
from src.pond_common.errors import (
    InvalidAmountError,
    InvalidBatchRangeError,
    InvalidBatchSizeError,
    PrizeAlreadyDistributedError,
    TransferFailedError,
    ZeroAddressError,
)
from src.pond_custody.domain.transfer import AssetTransferProtocol
from src.pond_engine.config import EngineConfig
from src.pond_events.domain.events import ENGINE_SCOPE, EventJournal, emit
from src.pond_ledger.domain.ledger import PondLedger
from src.pond_ledger.domain.models import RefundProgress, is_zero_address
from src.pond_settlement.application.service import SettlementService
from src.pond_settlement.domain.lifecycle import ResetOutcome

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClearResult:
    pond_id: str
    start: int
    end: int
    cleared: int
    remaining: int
    completed: bool


@dataclass(frozen=True)
class RefundBatchResult:
    pond_id: str
    start: int
    end: int
    refunded: int
    failed: int
    processed: int
    participant_count: int
    completed: bool
    reset: ResetOutcome | None = None


class ReclaimService:
    def __init__(
        self,
        ledger: PondLedger,
        custody: AssetTransferProtocol,
        journal: EventJournal,
        config_source: Callable[[], EngineConfig],
        settlement: SettlementService,
    ) -> None:
        self._ledger = ledger
        self._custody = custody
        self._journal = journal
        self._config = config_source
        self._settlement = settlement

    async def batch_clear(self, pond_id: str, start: int, end: int, now: int) -> ClearResult:
        """Clear slots [start, end) of the participant records left by the last reset."""
        pond = self._ledger.get(pond_id)
        cleared = PondLedger.clear_stale_range(pond, start, end)
        stale = pond.stale_participants
        remaining = 0 if stale is None else stale.count - stale.cleared
        logger.info(
            "Batch clear: pond=%s range=[%d, %d) cleared=%d remaining=%d",
            pond_id, start, end, cleared, remaining,
        )
        await emit(
            self._journal,
            PondEventType.PARTICIPANTS_CLEARED,
            pond_id,
            now,
            start=start,
            end=end,
            cleared=cleared,
            remaining=remaining,
        )
        return ClearResult(
            pond_id=pond_id,
            start=start,
            end=end,
            cleared=cleared,
            remaining=remaining,
            completed=stale is None,
        )

    async def refund_batch(
        self, pond_id: str, start: int, end: int, now: int
    ) -> RefundBatchResult:
        config = self._config()
        pond = self._ledger.get(pond_id)
        if pond.prize_distributed and pond.refund is None:
            raise PrizeAlreadyDistributedError(pond_id)
        count = pond.participant_count
        if start < 0 or start >= end or end > count:
            raise InvalidBatchRangeError(start, end, count)
        if end - start > config.emergency_batch_size:
            raise InvalidBatchSizeError(end - start, config.emergency_batch_size)

        if pond.refund is None:
            pond.refund = RefundProgress()
            logger.warning(
                "Emergency refund started: pond=%s participants=%d total_value=%d",
                pond_id, count, pond.total_value,
            )
        progress = pond.refund

        refunded = failed = 0
        for idx in range(start, end):
            if idx in progress.processed:
                continue
            progress.processed.add(idx)
            participant = pond.participants[idx]
            if participant.amount == 0:
                continue
            amount = participant.amount * pond.total_value // pond.total_weight
            if amount == 0:
                continue
            try:
                ok = await self._custody.push(pond.asset_address, participant.address, amount)
            except Exception:
                logger.exception("Refund transfer raised: pond=%s to=%s", pond_id, participant.address)
                ok = False
            if ok:
                refunded += amount
                await emit(
                    self._journal,
                    PondEventType.REFUND,
                    pond_id,
                    now,
                    participant=participant.address,
                    amount=amount,
                )
            else:
                failed += amount
                logger.warning(
                    "Refund skipped: pond=%s to=%s amount=%d", pond_id, participant.address, amount
                )
                await emit(
                    self._journal,
                    PondEventType.REFUND_FAILED,
                    pond_id,
                    now,
                    participant=participant.address,
                    amount=amount,
                )
        progress.refunded_total += refunded
        progress.failed_total += failed
        processed = len(progress.processed)

        outcome = None
        if processed == count:
            logger.info(
                "Emergency refund complete: pond=%s refunded=%d failed=%d",
                pond_id, progress.refunded_total, progress.failed_total,
            )
            pond.prize_distributed = True
            outcome = await self._settlement.reset(pond, now, reason="REFUNDED")

        return RefundBatchResult(
            pond_id=pond_id,
            start=start,
            end=end,
            refunded=refunded,
            failed=failed,
            processed=processed,
            participant_count=count,
            completed=outcome is not None,
            reset=outcome,
        )

    async def emergency_reset(self, pond_id: str, now: int) -> ResetOutcome:
        """Reset a pond without payout; custody balances are left alone."""
        pond = self._ledger.get(pond_id)
        logger.warning(
            "Emergency reset: pond=%s tosses=%d total_value=%d prize_distributed=%s",
            pond_id, pond.total_tosses, pond.total_value, pond.prize_distributed,
        )
        return await self._settlement.reset(
            pond, now, reason="EMERGENCY", event_type=PondEventType.EMERGENCY_RESET
        )

    async def emergency_withdraw(self, asset: str, to: str, amount: int, now: int) -> None:
        if is_zero_address(to):
            raise ZeroAddressError("recipient")
        if amount <= 0:
            raise InvalidAmountError(amount, 1)
        if not await self._custody.push(asset, to, amount):
            raise TransferFailedError(f"emergency withdraw of {amount} {asset} to {to}")
        logger.warning("Emergency withdraw: asset=%s to=%s amount=%d", asset, to, amount)
        await emit(
            self._journal,
            PondEventType.EMERGENCY_WITHDRAW,
            ENGINE_SCOPE,
            now,
            asset=asset,
            to=to,
            amount=amount,
        )
