"""Domain models for pond_ledger: dataclasses holding one pond instance's state."""

from dataclasses import dataclass, field

from src.pond_common.enums import AssetKind, PondPeriod

NATIVE_ASSET = "0x0000000000000000000000000000000000000000"


def is_zero_address(address: str) -> bool:
    digits = address.lower().removeprefix("0x")
    return digits == "" or set(digits) == {"0"}


@dataclass
class Participant:
    """A depositor's aggregated position within one pond instance."""

    address: str
    amount: int
    index: int  # slot in Pond.participants


@dataclass
class Toss:
    """One deposit event; never mutated, only bulk-cleared on reset."""

    depositor: str
    amount: int
    participant_index: int


@dataclass
class StaleParticipantSet:
    """Participant records of a finished instance awaiting chunked clearing.

    Slots are set to None as ranges are cleared; indices never shift, so any
    non-overlapping set of ranges covering [0, len) clears everything.
    """

    entries: list[Participant | None]
    cleared: int = 0

    @property
    def count(self) -> int:
        return len(self.entries)

    @property
    def fully_cleared(self) -> bool:
        return self.cleared == len(self.entries)


@dataclass
class RefundProgress:
    """Tracks an emergency pro-rata refund spread over several batches."""

    processed: set[int] = field(default_factory=set)
    refunded_total: int = 0
    failed_total: int = 0


@dataclass
class WinnerRecord:
    winner: str
    prize: int
    fee: int
    draw: int
    total_weight: int
    total_value: int
    settled_at: int


@dataclass
class Pond:
    id: str
    name: str
    start_time: int
    end_time: int
    min_toss: int
    max_total_toss: int
    asset_kind: AssetKind
    asset_address: str
    period: PondPeriod
    created_at: int
    total_tosses: int = 0
    total_value: int = 0
    total_weight: int = 0
    prize_distributed: bool = False
    participants: list[Participant] = field(default_factory=list)
    participant_index: dict[str, int] = field(default_factory=dict)
    tosses: list[Toss] = field(default_factory=list)
    sponsorships: dict[str, int] = field(default_factory=dict)  # sponsor -> top-up total
    stale_participants: StaleParticipantSet | None = None
    refund: RefundProgress | None = None
    last_winner: WinnerRecord | None = None

    @property
    def participant_count(self) -> int:
        return len(self.participants)

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time

    @property
    def is_standard(self) -> bool:
        return self.period.is_standard

    @property
    def is_terminal(self) -> bool:
        """A settled custom pond whose instance state has been cleared."""
        return (
            not self.is_standard
            and self.prize_distributed
            and self.total_tosses == 0
            and self.refund is None
        )

    def participant_amount(self, address: str) -> int:
        idx = self.participant_index.get(address)
        return 0 if idx is None else self.participants[idx].amount


@dataclass
class ConsistencyReport:
    """Read-only cross-check of a pond's running totals."""

    total_tosses: int
    total_value: int
    total_weight: int
    participant_count: int
    tosses_length: int
    toss_amount_sum: int
    participant_amount_sum: int

    @property
    def data_consistent(self) -> bool:
        return (
            self.toss_amount_sum == self.total_weight
            and self.participant_amount_sum == self.total_weight
            and self.total_tosses == self.tosses_length
            and self.total_value >= self.total_weight
        )
