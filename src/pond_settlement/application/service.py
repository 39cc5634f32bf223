"""SettlementService: end-of-window draw, payout and reset.

Order inside settle():
  1. checks: not refunding, not already settled, past close + timelock
  2. no tosses: reset, then carry top-ups forward or return them
  3. selection (read-only over the toss log)
  4. settlement flag set before any value leaves custody
  5. prize push, fee push; either failing aborts with the flag still set
  6. winner record, events, reset
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from src.pond_common.enums import PondEventType, PondPhase, SettlementOutcome
from src.pond_common.errors import (
    PrizeAlreadyDistributedError,
    RefundInProgressError,
    TimelockActiveError,
    TransferFailedError,
    WeightedSelectionFailedError,
)
from src.pond_common.units import split_prize
from src.pond_custody.domain.transfer import AssetTransferProtocol
from src.pond_engine.config import EngineConfig
from src.pond_events.domain.events import EventJournal, emit
from src.pond_ledger.domain.ledger import PondLedger
from src.pond_ledger.domain.models import Pond, WinnerRecord
from src.pond_selection.domain.context import ExecutionContext
from src.pond_selection.domain.selector import draw_winner
from src.pond_settlement.domain.lifecycle import ResetOutcome, pond_phase, reset_instance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SettlementResult:
    pond_id: str
    outcome: SettlementOutcome
    winner: str | None
    prize: int
    fee: int
    draw: int | None
    total_value: int
    total_weight: int
    reset: ResetOutcome


class SettlementService:
    def __init__(
        self,
        ledger: PondLedger,
        custody: AssetTransferProtocol,
        journal: EventJournal,
        config_source: Callable[[], EngineConfig],
    ) -> None:
        self._ledger = ledger
        self._custody = custody
        self._journal = journal
        self._config = config_source

    def phase(self, pond: Pond, now: int) -> PondPhase:
        return pond_phase(pond, now, self._config().effective_timelock(pond.period))

    async def settle(self, pond_id: str, ctx: ExecutionContext) -> SettlementResult:
        config = self._config()
        now = ctx.timestamp
        pond = self._ledger.get(pond_id)

        if pond.refund is not None:
            raise RefundInProgressError(pond_id)
        if pond.prize_distributed:
            raise PrizeAlreadyDistributedError(pond_id)
        timelock = config.effective_timelock(pond.period)
        if pond_phase(pond, now, timelock) is not PondPhase.SETTLEABLE:
            raise TimelockActiveError(pond_id, pond.end_time + timelock)

        if pond.total_tosses == 0:
            logger.info("Settle: pond=%s had no activity, resetting", pond_id)
            sponsored = pond.total_value
            sponsorships = dict(pond.sponsorships)
            outcome = await self.reset(pond, now, reason="NO_ACTIVITY")
            if sponsorships:
                await self._release_sponsorships(pond, sponsorships, outcome, now)
            return SettlementResult(
                pond_id=pond_id,
                outcome=SettlementOutcome.NO_ACTIVITY,
                winner=None,
                prize=0,
                fee=0,
                draw=None,
                total_value=sponsored,
                total_weight=0,
                reset=outcome,
            )

        try:
            selection = draw_winner(pond, ctx)
        except WeightedSelectionFailedError as exc:
            await emit(
                self._journal, PondEventType.SELECTION_FAILED, pond_id, now, **exc.diagnostics
            )
            raise

        total_value, total_weight = pond.total_value, pond.total_weight
        prize, fee = split_prize(total_value, config.fee_percent)

        pond.prize_distributed = True

        if not await self._custody.push(pond.asset_address, selection.winner, prize):
            logger.error(
                "Prize transfer failed: pond=%s winner=%s prize=%d; pond left settled",
                pond_id, selection.winner, prize,
            )
            raise TransferFailedError(f"prize {prize} to {selection.winner}")
        if fee > 0 and not await self._custody.push(pond.asset_address, config.fee_address, fee):
            logger.error(
                "Fee transfer failed: pond=%s fee=%d sink=%s; pond left settled",
                pond_id, fee, config.fee_address,
            )
            raise TransferFailedError(f"fee {fee} to {config.fee_address}")

        pond.last_winner = WinnerRecord(
            winner=selection.winner,
            prize=prize,
            fee=fee,
            draw=selection.draw,
            total_weight=total_weight,
            total_value=total_value,
            settled_at=now,
        )
        logger.info(
            "Winner selected: pond=%s winner=%s prize=%d fee=%d draw=%d/%d",
            pond_id, selection.winner, prize, fee, selection.draw, total_weight,
        )
        await emit(
            self._journal,
            PondEventType.WINNER_SELECTED,
            pond_id,
            now,
            winner=selection.winner,
            prize=prize,
            fee=fee,
            total_value=total_value,
        )
        await emit(
            self._journal,
            PondEventType.SELECTION_DIAGNOSTICS,
            pond_id,
            now,
            block_number=ctx.block_number,
            block_timestamp=ctx.timestamp,
            gas_left=ctx.gas_left,
            gas_price=ctx.gas_price,
            **selection.diagnostics(),
        )

        outcome = await self.reset(pond, now, reason="SETTLED")
        return SettlementResult(
            pond_id=pond_id,
            outcome=SettlementOutcome.WINNER_PAID,
            winner=selection.winner,
            prize=prize,
            fee=fee,
            draw=selection.draw,
            total_value=total_value,
            total_weight=total_weight,
            reset=outcome,
        )

    async def _release_sponsorships(
        self, pond: Pond, sponsorships: dict[str, int], outcome: ResetOutcome, now: int
    ) -> None:
        """Top-ups of a pond that saw no tosses roll into the next window or go back."""
        if outcome.renewed:
            carried = PondLedger.carry_over(pond, sponsorships)
            logger.info(
                "Pond %s: carried %d of sponsored value into window %d-%d",
                pond.id, carried, outcome.start_time, outcome.end_time,
            )
            await emit(
                self._journal,
                PondEventType.TOP_UP_CARRIED_OVER,
                pond.id,
                now,
                amount=carried,
                sponsors=len(sponsorships),
                start_time=outcome.start_time,
                end_time=outcome.end_time,
            )
            return

        for sponsor, amount in sponsorships.items():
            try:
                ok = await self._custody.push(pond.asset_address, sponsor, amount)
            except Exception:
                logger.exception("Top-up return raised: pond=%s to=%s", pond.id, sponsor)
                ok = False
            if ok:
                await emit(
                    self._journal,
                    PondEventType.TOP_UP_RETURNED,
                    pond.id,
                    now,
                    sponsor=sponsor,
                    amount=amount,
                )
            else:
                logger.error(
                    "Top-up return failed: pond=%s sponsor=%s amount=%d; held in custody",
                    pond.id, sponsor, amount,
                )
                await emit(
                    self._journal,
                    PondEventType.TOP_UP_STRANDED,
                    pond.id,
                    now,
                    sponsor=sponsor,
                    amount=amount,
                )

    async def reset(
        self,
        pond: Pond,
        now: int,
        reason: str,
        event_type: PondEventType | None = None,
    ) -> ResetOutcome:
        """Clear the instance and renew or close the pond, then journal it."""
        config = self._config()
        outcome = reset_instance(
            pond, now, config.custom_pond_policy, config.cleanup_batch_threshold
        )
        if not outcome.cleared_inline:
            logger.info(
                "Pond %s: %d participant records deferred to batch clearing",
                pond.id, outcome.deferred_participants,
            )
        if event_type is None:
            event_type = PondEventType.POND_RESET if outcome.renewed else PondEventType.POND_CLOSED
        await emit(
            self._journal,
            event_type,
            pond.id,
            now,
            reason=reason,
            renewed=outcome.renewed,
            previous_start=outcome.previous_start,
            previous_end=outcome.previous_end,
            start_time=outcome.start_time,
            end_time=outcome.end_time,
            deferred_participants=outcome.deferred_participants,
        )
        return outcome
