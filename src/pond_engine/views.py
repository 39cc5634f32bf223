"""Read-only views returned by the engine's query surface."""

from dataclasses import dataclass

from src.pond_common.enums import AssetKind, PondPeriod, PondPhase


@dataclass(frozen=True)
class PondStatus:
    pond_id: str
    name: str
    start_time: int
    end_time: int
    total_tosses: int
    total_value: int
    total_weight: int
    participant_count: int
    prize_distributed: bool
    time_until_end: int
    min_toss: int
    max_total_toss: int
    asset_kind: AssetKind
    asset_address: str
    period: PondPeriod
    phase: PondPhase
    refund_in_progress: bool
    pending_clear: int


@dataclass(frozen=True)
class ParticipantView:
    address: str
    amount: int


@dataclass(frozen=True)
class StandardPondView:
    """One row per standard period for an asset, whether or not it exists yet."""

    period: PondPeriod
    pond_id: str
    exists: bool
    name: str = ""
    start_time: int = 0
    end_time: int = 0
    total_tosses: int = 0
    total_value: int = 0
    participant_count: int = 0
    prize_distributed: bool = False
    time_until_end: int = 0
