"""EngineConfig: process-wide pond policy, decoupled from the settings module."""

from dataclasses import asdict, dataclass, replace
from typing import Any

from src.pond_common.enums import CustomPondPolicy, PondPeriod
from src.pond_common.errors import InvalidConfigError
from src.pond_ledger.domain.models import is_zero_address

MAX_FEE_PERCENT = 10


def _parse_policy(value: Any) -> CustomPondPolicy:
    try:
        return CustomPondPolicy(value)
    except ValueError:
        raise InvalidConfigError(f"unknown custom pond policy {value!r}") from None


@dataclass(frozen=True)
class EngineConfig:
    fee_address: str
    fee_percent: int = 7
    selection_timelock: int = 30
    five_min_timelock_divisor: int = 3
    max_participants_per_pond: int = 3000
    cleanup_batch_threshold: int = 100
    emergency_batch_size: int = 100
    participant_warning_percent: int = 80
    default_min_toss: int = 10**14
    default_max_total_toss: int = 10 * 10**18
    custom_pond_policy: CustomPondPolicy = CustomPondPolicy.TERMINAL
    engine_address: str = "0x000000000000000000000000000000000000b0d5"

    def __post_init__(self) -> None:
        if is_zero_address(self.fee_address):
            raise InvalidConfigError("fee address must be set")
        if not 0 <= self.fee_percent <= MAX_FEE_PERCENT:
            raise InvalidConfigError(
                f"fee percent must be within 0..{MAX_FEE_PERCENT}, got {self.fee_percent}"
            )
        if self.selection_timelock < 0:
            raise InvalidConfigError("selection timelock must be non-negative")
        if self.five_min_timelock_divisor < 1:
            raise InvalidConfigError("five-minute timelock divisor must be at least 1")
        if self.max_participants_per_pond < 1:
            raise InvalidConfigError("participant cap must be at least 1")
        if self.cleanup_batch_threshold < 1 or self.emergency_batch_size < 1:
            raise InvalidConfigError("batch sizes must be at least 1")
        if not 1 <= self.participant_warning_percent <= 100:
            raise InvalidConfigError("participant warning percent must be within 1..100")
        if self.default_min_toss <= 0 or self.default_min_toss > self.default_max_total_toss:
            raise InvalidConfigError("default toss limits must satisfy 0 < min <= max")

    @classmethod
    def from_settings(cls, settings: Any) -> "EngineConfig":
        return cls(
            fee_address=settings.FEE_ADDRESS,
            fee_percent=settings.FEE_PERCENT,
            selection_timelock=settings.SELECTION_TIMELOCK_SECONDS,
            five_min_timelock_divisor=settings.FIVE_MIN_TIMELOCK_DIVISOR,
            max_participants_per_pond=settings.MAX_PARTICIPANTS_PER_POND,
            cleanup_batch_threshold=settings.CLEANUP_BATCH_THRESHOLD,
            emergency_batch_size=settings.EMERGENCY_BATCH_SIZE,
            participant_warning_percent=settings.PARTICIPANT_WARNING_PERCENT,
            default_min_toss=settings.DEFAULT_MIN_TOSS,
            default_max_total_toss=settings.DEFAULT_MAX_TOTAL_TOSS,
            custom_pond_policy=_parse_policy(settings.CUSTOM_POND_POLICY),
            engine_address=settings.ENGINE_ADDRESS,
        )

    def effective_timelock(self, period: PondPeriod) -> int:
        if period is PondPeriod.FIVE_MINUTES:
            return self.selection_timelock // self.five_min_timelock_divisor
        return self.selection_timelock

    def warning_threshold(self) -> int:
        return self.max_participants_per_pond * self.participant_warning_percent // 100

    def with_changes(self, **changes: Any) -> "EngineConfig":
        unknown = set(changes) - set(asdict(self))
        if unknown:
            raise InvalidConfigError(f"unknown keys: {sorted(unknown)}")
        if "custom_pond_policy" in changes:
            changes["custom_pond_policy"] = _parse_policy(changes["custom_pond_policy"])
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["custom_pond_policy"] = self.custom_pond_policy.value
        return data
