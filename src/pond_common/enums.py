"""Global enums: values are stored in the event journal and returned by the API."""

from enum import Enum


class PondPeriod(str, Enum):
    FIVE_MINUTES = "FIVE_MINUTES"
    HOURLY = "HOURLY"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    CUSTOM = "CUSTOM"

    @property
    def is_standard(self) -> bool:
        return self is not PondPeriod.CUSTOM


STANDARD_PERIODS: tuple[PondPeriod, ...] = (
    PondPeriod.FIVE_MINUTES,
    PondPeriod.HOURLY,
    PondPeriod.DAILY,
    PondPeriod.WEEKLY,
    PondPeriod.MONTHLY,
)


class AssetKind(str, Enum):
    NATIVE = "NATIVE"
    TOKEN = "TOKEN"


class PondPhase(str, Enum):
    """Settlement state machine for one pond instance."""
    PENDING = "PENDING"  # before openTime
    OPEN = "OPEN"
    AWAITING_TIMELOCK = "AWAITING_TIMELOCK"
    SETTLEABLE = "SETTLEABLE"
    SETTLED = "SETTLED"


class CustomPondPolicy(str, Enum):
    """What a custom pond does after its instance is settled."""
    TERMINAL = "TERMINAL"
    RENEW = "RENEW"


class SettlementOutcome(str, Enum):
    WINNER_PAID = "WINNER_PAID"
    NO_ACTIVITY = "NO_ACTIVITY"


class Role(str, Enum):
    ADMIN = "ADMIN"
    POND_MANAGER = "POND_MANAGER"
    FACTORY = "FACTORY"
    OPERATOR = "OPERATOR"  # may toss or top up on behalf of another address


class ErrorKind(str, Enum):
    AUTH = "AUTH"
    INPUT_INVALID = "INPUT_INVALID"
    STATE_CONFLICT = "STATE_CONFLICT"
    RESOURCE_EXCEEDED = "RESOURCE_EXCEEDED"
    TRANSFER_FAILURE = "TRANSFER_FAILURE"
    INTEGRITY_FAILURE = "INTEGRITY_FAILURE"
    SYSTEM = "SYSTEM"


class PondEventType(str, Enum):
    POND_CREATED = "POND_CREATED"
    POND_REMOVED = "POND_REMOVED"
    TOSS = "TOSS"
    TOP_UP = "TOP_UP"
    TOP_UP_CARRIED_OVER = "TOP_UP_CARRIED_OVER"
    TOP_UP_RETURNED = "TOP_UP_RETURNED"
    TOP_UP_STRANDED = "TOP_UP_STRANDED"
    PARTICIPANT_LIMIT_WARNING = "PARTICIPANT_LIMIT_WARNING"
    WINNER_SELECTED = "WINNER_SELECTED"
    SELECTION_DIAGNOSTICS = "SELECTION_DIAGNOSTICS"
    SELECTION_FAILED = "SELECTION_FAILED"
    POND_RESET = "POND_RESET"
    POND_CLOSED = "POND_CLOSED"
    PARTICIPANTS_CLEARED = "PARTICIPANTS_CLEARED"
    REFUND = "REFUND"
    REFUND_FAILED = "REFUND_FAILED"
    EMERGENCY_RESET = "EMERGENCY_RESET"
    EMERGENCY_WITHDRAW = "EMERGENCY_WITHDRAW"
    CONFIG_UPDATED = "CONFIG_UPDATED"
    POND_LIMITS_UPDATED = "POND_LIMITS_UPDATED"
