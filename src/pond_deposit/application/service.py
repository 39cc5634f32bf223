"""DepositService: tosses and top-ups against an open pond.

Everything is validated before custody is touched; custody is pulled before
the ledger is written, so a refused transfer leaves no partial record.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from src.pond_common.enums import AssetKind, PondEventType
from src.pond_common.errors import (
    InvalidAmountError,
    MaxExceededError,
    ParticipantLimitExceededError,
    PondNotOpenError,
    RefundInProgressError,
    TransferFailedError,
    ValueMismatchError,
    ZeroAddressError,
)
from src.pond_custody.domain.transfer import AssetTransferProtocol
from src.pond_engine.config import EngineConfig
from src.pond_events.domain.events import EventJournal, emit
from src.pond_ledger.domain.ledger import PondLedger
from src.pond_ledger.domain.models import Pond, is_zero_address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TossReceipt:
    pond_id: str
    depositor: str
    amount: int
    participant_amount: int
    new_participant: bool
    total_tosses: int
    total_value: int
    total_weight: int
    participant_count: int


@dataclass(frozen=True)
class TopUpReceipt:
    pond_id: str
    sponsor: str
    amount: int
    total_value: int
    total_weight: int


class DepositService:
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

    def _open_pond(self, pond_id: str, now: int) -> Pond:
        pond = self._ledger.get(pond_id)
        if pond.refund is not None:
            raise RefundInProgressError(pond_id)
        if pond.prize_distributed or not self._ledger.is_open(pond_id, now):
            raise PondNotOpenError(pond_id)
        return pond

    @staticmethod
    def _check_attached_value(pond: Pond, amount: int, attached_value: int) -> None:
        if pond.asset_kind is AssetKind.NATIVE and amount != attached_value:
            raise ValueMismatchError(amount, attached_value)
        if pond.asset_kind is AssetKind.TOKEN and attached_value != 0:
            raise ValueMismatchError(0, attached_value)

    async def _pull(self, pond: Pond, from_addr: str, amount: int) -> None:
        ok = await self._custody.pull(pond.asset_address, from_addr, amount)
        if not ok:
            raise TransferFailedError(
                f"could not pull {amount} of {pond.asset_address} from {from_addr}"
            )

    async def toss(
        self,
        pond_id: str,
        depositor: str,
        amount: int,
        attached_value: int,
        now: int,
    ) -> TossReceipt:
        config = self._config()
        if is_zero_address(depositor):
            raise ZeroAddressError("depositor")
        pond = self._open_pond(pond_id, now)

        is_new = depositor not in pond.participant_index
        if is_new and pond.participant_count >= config.max_participants_per_pond:
            raise ParticipantLimitExceededError(pond_id, config.max_participants_per_pond)
        if amount <= 0 or amount < pond.min_toss:
            raise InvalidAmountError(amount, pond.min_toss)
        attempted_total = pond.participant_amount(depositor) + amount
        if attempted_total > pond.max_total_toss:
            raise MaxExceededError(depositor, attempted_total, pond.max_total_toss)
        self._check_attached_value(pond, amount, attached_value)

        await self._pull(pond, depositor, amount)

        participant, is_new = PondLedger.record_toss(pond, depositor, amount)
        logger.info(
            "Toss: pond=%s depositor=%s amount=%d total_value=%d participants=%d",
            pond_id, depositor, amount, pond.total_value, pond.participant_count,
        )
        await emit(
            self._journal,
            PondEventType.TOSS,
            pond_id,
            now,
            depositor=depositor,
            amount=amount,
            participant_amount=participant.amount,
            total_tosses=pond.total_tosses,
            total_value=pond.total_value,
            total_weight=pond.total_weight,
        )

        threshold = config.warning_threshold()
        if is_new and threshold > 0 and pond.participant_count == threshold:
            logger.warning(
                "Pond %s reached %d of %d participants",
                pond_id, pond.participant_count, config.max_participants_per_pond,
            )
            await emit(
                self._journal,
                PondEventType.PARTICIPANT_LIMIT_WARNING,
                pond_id,
                now,
                participant_count=pond.participant_count,
                limit=config.max_participants_per_pond,
            )

        return TossReceipt(
            pond_id=pond_id,
            depositor=depositor,
            amount=amount,
            participant_amount=participant.amount,
            new_participant=is_new,
            total_tosses=pond.total_tosses,
            total_value=pond.total_value,
            total_weight=pond.total_weight,
            participant_count=pond.participant_count,
        )

    async def top_up(
        self,
        pond_id: str,
        sponsor: str,
        amount: int,
        attached_value: int,
        now: int,
    ) -> TopUpReceipt:
        """Add to the payable pool without entering the draw."""
        if is_zero_address(sponsor):
            raise ZeroAddressError("sponsor")
        pond = self._open_pond(pond_id, now)
        if amount <= 0:
            raise InvalidAmountError(amount, 1)
        self._check_attached_value(pond, amount, attached_value)

        await self._pull(pond, sponsor, amount)

        PondLedger.record_top_up(pond, sponsor, amount)
        logger.info("Top-up: pond=%s sponsor=%s amount=%d", pond_id, sponsor, amount)
        await emit(
            self._journal,
            PondEventType.TOP_UP,
            pond_id,
            now,
            sponsor=sponsor,
            amount=amount,
            total_value=pond.total_value,
        )
        return TopUpReceipt(
            pond_id=pond_id,
            sponsor=sponsor,
            amount=amount,
            total_value=pond.total_value,
            total_weight=pond.total_weight,
        )
