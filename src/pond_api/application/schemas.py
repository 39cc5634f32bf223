"""Pydantic schemas for the pond HTTP API.

Amounts travel as integer base units (18 decimals for the native asset);
response models add a `*_display` string rendered with format_units.
Timestamps are integer seconds since the epoch.
"""

from typing import Any

from pydantic import BaseModel, Field

from src.pond_common.datetime_utils import format_time_remaining, ts_to_iso
from src.pond_common.enums import PondPeriod
from src.pond_common.units import format_units
from src.pond_engine.views import ParticipantView, PondStatus, StandardPondView
from src.pond_ledger.domain.models import NATIVE_ASSET, ConsistencyReport, WinnerRecord

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreatePondRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    start_time: int
    end_time: int
    asset_address: str = NATIVE_ASSET
    min_toss: int | None = None
    max_total_toss: int | None = None


class CreateStandardPondsRequest(BaseModel):
    asset_address: str = NATIVE_ASSET
    min_toss: int | None = None
    max_total_toss: int | None = None
    periods: list[PondPeriod] | None = None


class UpdateLimitsRequest(BaseModel):
    min_toss: int | None = None
    max_total_toss: int | None = None


class TossRequest(BaseModel):
    depositor: str | None = Field(
        None, description="Defaults to the token subject; another address needs OPERATOR"
    )
    amount: int
    attached_value: int = 0


class TopUpRequest(BaseModel):
    sponsor: str | None = Field(
        None, description="Defaults to the token subject; another address needs OPERATOR"
    )
    amount: int
    attached_value: int = 0


class BatchRangeRequest(BaseModel):
    start: int = Field(..., ge=0)
    end: int = Field(..., ge=0)


class PerformUpkeepRequest(BaseModel):
    pond_id: str


class WithdrawRequest(BaseModel):
    asset_address: str = NATIVE_ASSET
    to: str
    amount: int


class FundRequest(BaseModel):
    asset_address: str = NATIVE_ASSET
    address: str
    amount: int = Field(..., gt=0)


class UpdateConfigRequest(BaseModel):
    fee_address: str | None = None
    fee_percent: int | None = None
    selection_timelock: int | None = None
    five_min_timelock_divisor: int | None = None
    max_participants_per_pond: int | None = None
    cleanup_batch_threshold: int | None = None
    emergency_batch_size: int | None = None
    participant_warning_percent: int | None = None
    default_min_toss: int | None = None
    default_max_total_toss: int | None = None
    custom_pond_policy: str | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class PondStatusOut(BaseModel):
    pond_id: str
    name: str
    period: str
    phase: str
    asset_kind: str
    asset_address: str
    start_time: int
    end_time: int
    time_until_end: int
    time_remaining: str
    total_tosses: int
    total_value: int
    total_value_display: str
    total_weight: int
    participant_count: int
    prize_distributed: bool
    min_toss: int
    max_total_toss: int
    refund_in_progress: bool
    pending_clear: int

    @classmethod
    def from_view(cls, s: PondStatus) -> "PondStatusOut":
        return cls(
            pond_id=s.pond_id,
            name=s.name,
            period=s.period.value,
            phase=s.phase.value,
            asset_kind=s.asset_kind.value,
            asset_address=s.asset_address,
            start_time=s.start_time,
            end_time=s.end_time,
            time_until_end=s.time_until_end,
            time_remaining=format_time_remaining(s.time_until_end),
            total_tosses=s.total_tosses,
            total_value=s.total_value,
            total_value_display=format_units(s.total_value),
            total_weight=s.total_weight,
            participant_count=s.participant_count,
            prize_distributed=s.prize_distributed,
            min_toss=s.min_toss,
            max_total_toss=s.max_total_toss,
            refund_in_progress=s.refund_in_progress,
            pending_clear=s.pending_clear,
        )


class ParticipantOut(BaseModel):
    address: str
    amount: int
    amount_display: str

    @classmethod
    def from_view(cls, p: ParticipantView) -> "ParticipantOut":
        return cls(address=p.address, amount=p.amount, amount_display=format_units(p.amount))


class WinnerOut(BaseModel):
    winner: str
    prize: int
    prize_display: str
    fee: int
    draw: int
    total_weight: int
    total_value: int
    settled_at: int
    settled_at_iso: str

    @classmethod
    def from_record(cls, w: WinnerRecord) -> "WinnerOut":
        return cls(
            winner=w.winner,
            prize=w.prize,
            prize_display=format_units(w.prize),
            fee=w.fee,
            draw=w.draw,
            total_weight=w.total_weight,
            total_value=w.total_value,
            settled_at=w.settled_at,
            settled_at_iso=ts_to_iso(w.settled_at),
        )


class StandardPondOut(BaseModel):
    period: str
    pond_id: str
    exists: bool
    name: str
    start_time: int
    end_time: int
    total_tosses: int
    total_value: int
    participant_count: int
    prize_distributed: bool
    time_until_end: int

    @classmethod
    def from_view(cls, v: StandardPondView) -> "StandardPondOut":
        return cls(
            period=v.period.value,
            pond_id=v.pond_id,
            exists=v.exists,
            name=v.name,
            start_time=v.start_time,
            end_time=v.end_time,
            total_tosses=v.total_tosses,
            total_value=v.total_value,
            participant_count=v.participant_count,
            prize_distributed=v.prize_distributed,
            time_until_end=v.time_until_end,
        )


class DebugOut(BaseModel):
    total_tosses: int
    total_value: int
    total_weight: int
    participant_count: int
    tosses_length: int
    toss_amount_sum: int
    participant_amount_sum: int
    data_consistent: bool

    @classmethod
    def from_report(cls, r: ConsistencyReport) -> "DebugOut":
        return cls(
            total_tosses=r.total_tosses,
            total_value=r.total_value,
            total_weight=r.total_weight,
            participant_count=r.participant_count,
            tosses_length=r.tosses_length,
            toss_amount_sum=r.toss_amount_sum,
            participant_amount_sum=r.participant_amount_sum,
            data_consistent=r.data_consistent,
        )
