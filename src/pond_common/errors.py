"""Unified error codes and custom exceptions.

Error code ranges follow the failure taxonomy:
  1xxx: Auth/Permission
  2xxx: InputInvalid (caller error, no state change)
  3xxx: StateConflict (wait or pick different parameters)
  4xxx: ResourceExceeded (retry smaller/later)
  5xxx: TransferFailure (value movement failed)
  6xxx: IntegrityFailure (internal totals inconsistent)
  9xxx: System
"""

from typing import Any

from src.pond_common.enums import ErrorKind


class AppError(Exception):
    """Base application error."""

    kind: ErrorKind = ErrorKind.SYSTEM

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth/Permission ---

class InvalidCredentialsError(AppError):
    kind = ErrorKind.AUTH

    def __init__(self) -> None:
        super().__init__(1001, "Invalid or expired token", 401)


class PermissionDeniedError(AppError):
    kind = ErrorKind.AUTH

    def __init__(self, caller: str, role: str) -> None:
        super().__init__(1002, f"Caller {caller} lacks role {role}", 403)


# --- 2xxx: InputInvalid ---

class InvalidWindowError(AppError):
    kind = ErrorKind.INPUT_INVALID

    def __init__(self, start: int, end: int) -> None:
        super().__init__(2001, f"Invalid window: start {start} must be before end {end}", 422)


class InvalidAmountError(AppError):
    kind = ErrorKind.INPUT_INVALID

    def __init__(self, amount: int, minimum: int) -> None:
        super().__init__(2002, f"Amount {amount} is below the minimum {minimum}", 422)


class ValueMismatchError(AppError):
    kind = ErrorKind.INPUT_INVALID

    def __init__(self, amount: int, attached: int) -> None:
        super().__init__(
            2003, f"Declared amount {amount} does not match attached value {attached}", 422
        )


class ZeroAddressError(AppError):
    kind = ErrorKind.INPUT_INVALID

    def __init__(self, field: str) -> None:
        super().__init__(2004, f"Zero address not allowed for {field}", 422)


class InvalidBatchRangeError(AppError):
    kind = ErrorKind.INPUT_INVALID

    def __init__(self, start: int, end: int, count: int) -> None:
        super().__init__(
            2005, f"Invalid batch range [{start}, {end}) for {count} participants", 422
        )


class InvalidConfigError(AppError):
    kind = ErrorKind.INPUT_INVALID

    def __init__(self, detail: str) -> None:
        super().__init__(2006, f"Invalid configuration: {detail}", 422)


class InvalidPondTypeError(AppError):
    kind = ErrorKind.INPUT_INVALID

    def __init__(self, detail: str) -> None:
        super().__init__(2007, f"Invalid pond type: {detail}", 422)


# --- 3xxx: StateConflict ---

class PondNotFoundError(AppError):
    kind = ErrorKind.STATE_CONFLICT

    def __init__(self, pond_id: str) -> None:
        super().__init__(3001, f"Pond not found: {pond_id}", 404)


class PondAlreadyExistsError(AppError):
    kind = ErrorKind.STATE_CONFLICT

    def __init__(self, pond_id: str) -> None:
        super().__init__(3002, f"Pond already exists: {pond_id}", 409)


class PondNotOpenError(AppError):
    kind = ErrorKind.STATE_CONFLICT

    def __init__(self, pond_id: str) -> None:
        super().__init__(3003, f"Pond is not open: {pond_id}", 422)


class PrizeAlreadyDistributedError(AppError):
    kind = ErrorKind.STATE_CONFLICT

    def __init__(self, pond_id: str) -> None:
        super().__init__(3004, f"Prize already distributed for pond {pond_id}", 409)


class TimelockActiveError(AppError):
    kind = ErrorKind.STATE_CONFLICT

    def __init__(self, pond_id: str, unlocks_after: int) -> None:
        super().__init__(
            3005, f"Timelock active for pond {pond_id} until after {unlocks_after}", 422
        )


class RemovalBlockedError(AppError):
    kind = ErrorKind.STATE_CONFLICT

    def __init__(self, pond_id: str, reason: str) -> None:
        super().__init__(3006, f"Pond {pond_id} cannot be removed: {reason}", 422)


class RefundInProgressError(AppError):
    kind = ErrorKind.STATE_CONFLICT

    def __init__(self, pond_id: str) -> None:
        super().__init__(3007, f"Emergency refund in progress for pond {pond_id}", 409)


class ReentrantCallError(AppError):
    kind = ErrorKind.STATE_CONFLICT

    def __init__(self, pond_id: str) -> None:
        super().__init__(3008, f"Re-entrant call rejected for pond {pond_id}", 409)


# --- 4xxx: ResourceExceeded ---

class ParticipantLimitExceededError(AppError):
    kind = ErrorKind.RESOURCE_EXCEEDED

    def __init__(self, pond_id: str, limit: int) -> None:
        super().__init__(4001, f"Pond {pond_id} is full ({limit} participants)", 422)


class MaxExceededError(AppError):
    kind = ErrorKind.RESOURCE_EXCEEDED

    def __init__(self, depositor: str, attempted_total: int, cap: int) -> None:
        super().__init__(
            4002,
            f"Depositor {depositor} would reach {attempted_total}, above the cap {cap}",
            422,
        )


class InvalidBatchSizeError(AppError):
    kind = ErrorKind.RESOURCE_EXCEEDED

    def __init__(self, size: int, ceiling: int) -> None:
        super().__init__(4003, f"Batch size {size} exceeds the ceiling {ceiling}", 422)


# --- 5xxx: TransferFailure ---

class TransferFailedError(AppError):
    kind = ErrorKind.TRANSFER_FAILURE

    def __init__(self, detail: str) -> None:
        super().__init__(5001, f"Transfer failed: {detail}", 502)


# --- 6xxx: IntegrityFailure ---

class WeightedSelectionFailedError(AppError):
    kind = ErrorKind.INTEGRITY_FAILURE

    def __init__(self, pond_id: str, diagnostics: dict[str, Any]) -> None:
        self.diagnostics = diagnostics
        super().__init__(
            6001,
            f"Weighted selection failed for pond {pond_id}: "
            f"draw={diagnostics.get('draw')} total_weight={diagnostics.get('total_weight')} "
            f"running_sum={diagnostics.get('running_sum')}",
            500,
        )
