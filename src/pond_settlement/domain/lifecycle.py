"""Pond instance state machine and reset/recurrence rules.

    PENDING -> OPEN -> AWAITING_TIMELOCK -> SETTLEABLE -> SETTLED -> (reset | terminal)

Reset anchors the next window to max(now, old_end + 1), so the new window is
always strictly later than the one it replaces, even when a reset happens
before the old window closed (emergency paths).
"""

from dataclasses import dataclass

from src.pond_common.enums import CustomPondPolicy, PondPhase
from src.pond_common.time_window import period_window
from src.pond_ledger.domain.ledger import PondLedger
from src.pond_ledger.domain.models import Pond


@dataclass(frozen=True)
class ResetOutcome:
    previous_start: int
    previous_end: int
    start_time: int
    end_time: int
    renewed: bool
    cleared_inline: bool
    deferred_participants: int


def pond_phase(pond: Pond, now: int, timelock: int) -> PondPhase:
    if pond.prize_distributed:
        return PondPhase.SETTLED
    if now < pond.start_time:
        return PondPhase.PENDING
    if now <= pond.end_time:
        return PondPhase.OPEN
    if now <= pond.end_time + timelock:
        return PondPhase.AWAITING_TIMELOCK
    return PondPhase.SETTLEABLE


def next_window(pond: Pond, now: int) -> tuple[int, int]:
    """Window the pond moves to on renewal, same recurrence class."""
    anchor = max(now, pond.end_time + 1)
    if pond.is_standard:
        return period_window(pond.period, anchor)
    return anchor, anchor + pond.duration


def reset_instance(
    pond: Pond, now: int, policy: CustomPondPolicy, inline_threshold: int
) -> ResetOutcome:
    """Clear the finished instance and either renew the window or close the pond.

    Standard ponds always renew. Custom ponds renew only under RENEW; under
    TERMINAL they keep their settled flag and old window and become removable.
    """
    previous_start, previous_end = pond.start_time, pond.end_time
    participant_count = pond.participant_count
    inline = PondLedger.clear_instance(pond, inline_threshold)

    renew = pond.is_standard or policy is CustomPondPolicy.RENEW
    if renew:
        pond.start_time, pond.end_time = next_window(pond, now)
        pond.prize_distributed = False
    else:
        pond.prize_distributed = True

    return ResetOutcome(
        previous_start=previous_start,
        previous_end=previous_end,
        start_time=pond.start_time,
        end_time=pond.end_time,
        renewed=renew,
        cleared_inline=inline,
        deferred_participants=0 if inline else participant_count,
    )
