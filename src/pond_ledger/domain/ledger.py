"""PondLedger: the single shared mutable store for every pond instance.

All writes are funneled through the deposit, settlement and reclaim services;
each holds the pond's guard for the duration of its call, so the ledger itself
does no locking.
"""

import logging

from src.pond_common.enums import AssetKind, PondPeriod
from src.pond_common.errors import (
    InvalidBatchRangeError,
    InvalidConfigError,
    InvalidPondTypeError,
    InvalidWindowError,
    PondAlreadyExistsError,
    PondNotFoundError,
    RemovalBlockedError,
    ZeroAddressError,
)
from src.pond_ledger.domain.models import (
    ConsistencyReport,
    Participant,
    Pond,
    StaleParticipantSet,
    Toss,
    is_zero_address,
)
from src.pond_ledger.domain.registry import OrderedIdSet

logger = logging.getLogger(__name__)


def validate_limits(min_toss: int, max_total_toss: int) -> None:
    if min_toss <= 0:
        raise InvalidConfigError(f"min toss must be positive, got {min_toss}")
    if min_toss > max_total_toss:
        raise InvalidConfigError(
            f"min toss {min_toss} exceeds max total toss {max_total_toss}"
        )


class PondLedger:
    def __init__(self) -> None:
        self._ponds: dict[str, Pond] = {}
        self._pond_ids = OrderedIdSet()
        self._assets = OrderedIdSet()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create(
        self,
        pond_id: str,
        name: str,
        start_time: int,
        end_time: int,
        min_toss: int,
        max_total_toss: int,
        asset_kind: AssetKind,
        asset_address: str,
        period: PondPeriod,
        now: int,
    ) -> Pond:
        if not pond_id:
            raise InvalidPondTypeError("empty pond id")
        if start_time >= end_time:
            raise InvalidWindowError(start_time, end_time)
        validate_limits(min_toss, max_total_toss)
        if asset_kind is AssetKind.TOKEN and is_zero_address(asset_address):
            raise ZeroAddressError("token asset")
        if asset_kind is AssetKind.NATIVE and not is_zero_address(asset_address):
            raise InvalidPondTypeError("native pond cannot bind a token address")

        existing = self._ponds.get(pond_id)
        if existing is not None and not existing.is_terminal:
            raise PondAlreadyExistsError(pond_id)

        pond = Pond(
            id=pond_id,
            name=name,
            start_time=start_time,
            end_time=end_time,
            min_toss=min_toss,
            max_total_toss=max_total_toss,
            asset_kind=asset_kind,
            asset_address=asset_address,
            period=period,
            created_at=now,
        )
        self._ponds[pond_id] = pond
        self._pond_ids.add(pond_id)
        self._assets.add(asset_address)
        logger.info(
            "Pond created: id=%s name=%s period=%s window=[%d, %d]",
            pond_id, name, period.value, start_time, end_time,
        )
        return pond

    def get(self, pond_id: str) -> Pond:
        pond = self._ponds.get(pond_id)
        if pond is None:
            raise PondNotFoundError(pond_id)
        return pond

    def exists(self, pond_id: str) -> bool:
        return pond_id in self._ponds

    def is_open(self, pond_id: str, now: int) -> bool:
        pond = self.get(pond_id)
        return pond.start_time <= now <= pond.end_time

    def remove(self, pond_id: str) -> Pond:
        pond = self.get(pond_id)
        if pond.is_standard:
            raise RemovalBlockedError(pond_id, "standard ponds are permanent")
        if pond.total_tosses > 0:
            raise RemovalBlockedError(pond_id, f"{pond.total_tosses} tosses recorded")
        if pond.refund is not None:
            raise RemovalBlockedError(pond_id, "refund in progress")
        pond.tosses.clear()
        pond.participants.clear()
        pond.participant_index.clear()
        pond.stale_participants = None
        del self._ponds[pond_id]
        self._pond_ids.remove(pond_id)
        logger.info("Pond removed: id=%s", pond_id)
        return pond

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def all_ids(self) -> list[str]:
        return self._pond_ids.to_list()

    def all_ponds(self) -> list[Pond]:
        return [self._ponds[pid] for pid in self._pond_ids]

    def standard_ids(self, asset_address: str | None = None) -> list[str]:
        return [
            p.id
            for p in self.all_ponds()
            if p.is_standard
            and (asset_address is None or p.asset_address.lower() == asset_address.lower())
        ]

    def supported_assets(self) -> list[str]:
        return self._assets.to_list()

    # ------------------------------------------------------------------
    # Write primitives
    # ------------------------------------------------------------------

    @staticmethod
    def record_toss(pond: Pond, depositor: str, amount: int) -> tuple[Participant, bool]:
        """Append one toss; returns (participant, is_new_participant)."""
        idx = pond.participant_index.get(depositor)
        is_new = idx is None
        if idx is None:
            idx = len(pond.participants)
            pond.participants.append(Participant(address=depositor, amount=0, index=idx))
            pond.participant_index[depositor] = idx
        participant = pond.participants[idx]
        participant.amount += amount
        pond.tosses.append(Toss(depositor=depositor, amount=amount, participant_index=idx))
        pond.total_tosses += 1
        pond.total_value += amount
        pond.total_weight += amount
        return participant, is_new

    @staticmethod
    def record_top_up(pond: Pond, sponsor: str, amount: int) -> None:
        pond.total_value += amount
        pond.sponsorships[sponsor] = pond.sponsorships.get(sponsor, 0) + amount

    @staticmethod
    def carry_over(pond: Pond, sponsorships: dict[str, int]) -> int:
        """Move top-ups of an instance nobody played into the current one."""
        carried = sum(sponsorships.values())
        pond.total_value += carried
        for sponsor, amount in sponsorships.items():
            pond.sponsorships[sponsor] = pond.sponsorships.get(sponsor, 0) + amount
        return carried

    @staticmethod
    def clear_instance(pond: Pond, inline_threshold: int) -> bool:
        """Zero the instance state. Returns False when participant clearing was deferred."""
        pond.tosses.clear()
        inline = len(pond.participants) <= inline_threshold
        if not inline:
            detached: list[Participant | None] = list(pond.participants)
            if pond.stale_participants is None:
                pond.stale_participants = StaleParticipantSet(entries=detached)
            else:
                pond.stale_participants.entries.extend(detached)
        pond.participants = []
        pond.participant_index = {}
        pond.total_tosses = 0
        pond.total_value = 0
        pond.total_weight = 0
        pond.sponsorships = {}
        pond.refund = None
        return inline

    @staticmethod
    def clear_stale_range(pond: Pond, start: int, end: int) -> int:
        """Clear stale participant slots [start, end); returns how many were still set."""
        stale = pond.stale_participants
        if stale is None:
            raise InvalidBatchRangeError(start, end, 0)
        if start >= end or end > stale.count or start < 0:
            raise InvalidBatchRangeError(start, end, stale.count)
        cleared = 0
        for i in range(start, end):
            if stale.entries[i] is not None:
                stale.entries[i] = None
                cleared += 1
        stale.cleared += cleared
        if stale.fully_cleared:
            pond.stale_participants = None
        return cleared

    @staticmethod
    def consistency(pond: Pond) -> ConsistencyReport:
        return ConsistencyReport(
            total_tosses=pond.total_tosses,
            total_value=pond.total_value,
            total_weight=pond.total_weight,
            participant_count=pond.participant_count,
            tosses_length=len(pond.tosses),
            toss_amount_sum=sum(t.amount for t in pond.tosses),
            participant_amount_sum=sum(p.amount for p in pond.participants),
        )
