"""Weighted winner selection over a pond's toss log.

Probability of winning is participant.amount / total_weight. The draw is
uniform over [0, total_weight); the toss log is walked in insertion order and
the first toss whose running sum exceeds the draw wins. Strict less-than makes
the half-open intervals disjoint, so exactly one toss can match.

Entropy is best-effort: it mixes block-level values with pond totals and the
execution context, which a block producer could bias. Swap the
ContextProvider for a verifiable source if that matters.
"""

import hashlib
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from src.pond_common.errors import WeightedSelectionFailedError
from src.pond_ledger.domain.models import Pond, Toss
from src.pond_selection.domain.context import ExecutionContext

logger = logging.getLogger(__name__)

SOURCE_PARENT = "BLOCKHASH_PARENT"
SOURCE_GRANDPARENT = "BLOCKHASH_GRANDPARENT"
SOURCE_PREVRANDAO = "PREVRANDAO"


@dataclass(frozen=True)
class EntropyMix:
    value: int
    source: str
    digest: str


@dataclass(frozen=True)
class SelectionResult:
    winner: str
    participant_index: int
    toss_position: int
    draw: int
    total_weight: int
    running_sum: int
    entropy: EntropyMix | None

    def diagnostics(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "winner": self.winner,
            "participant_index": self.participant_index,
            "toss_position": self.toss_position,
            "draw": self.draw,
            "total_weight": self.total_weight,
            "running_sum": self.running_sum,
        }
        if self.entropy is not None:
            data["entropy"] = self.entropy.digest
            data["entropy_source"] = self.entropy.source
        return data


def _encode_int(value: int) -> bytes:
    width = max(32, (value.bit_length() + 7) // 8)
    return value.to_bytes(width, "big")


def _encode_address(address: str) -> bytes:
    digits = address.lower().removeprefix("0x")
    try:
        return bytes.fromhex(digits.rjust(40, "0"))
    except ValueError:
        return address.encode("utf-8")


def block_entropy(ctx: ExecutionContext) -> tuple[bytes, str]:
    """Parent block hash, else grandparent, else the per-block prevrandao."""
    parent = ctx.block_hash(ctx.block_number - 1)
    if parent is not None:
        return parent, SOURCE_PARENT
    grandparent = ctx.block_hash(ctx.block_number - 2)
    if grandparent is not None:
        return grandparent, SOURCE_GRANDPARENT
    return _encode_int(ctx.prevrandao), SOURCE_PREVRANDAO


def mix_entropy(
    ctx: ExecutionContext, total_tosses: int, total_value: int, start_time: int
) -> EntropyMix:
    seed, source = block_entropy(ctx)
    h = hashlib.sha256()
    h.update(seed)
    for value in (
        total_tosses,
        total_value,
        start_time,
        ctx.gas_left,
        ctx.gas_price,
        ctx.timestamp,
    ):
        h.update(_encode_int(value))
    h.update(_encode_address(ctx.engine_address))
    digest = h.hexdigest()
    return EntropyMix(value=int(digest, 16), source=source, digest=digest)


def compute_draw(entropy: int, total_weight: int) -> int:
    if total_weight <= 0:
        raise ValueError("total weight must be positive")
    return entropy % total_weight


def walk_tosses(tosses: Sequence[Toss], draw: int) -> tuple[int | None, int]:
    """Return (position of the winning toss or None, running sum reached)."""
    running_sum = 0
    for position, toss in enumerate(tosses):
        running_sum += toss.amount
        if draw < running_sum:
            return position, running_sum
    return None, running_sum


def select_with_draw(
    pond: Pond, draw: int, entropy: EntropyMix | None = None
) -> SelectionResult:
    position, running_sum = walk_tosses(pond.tosses, draw)
    if position is None:
        diagnostics: dict[str, Any] = {
            "draw": draw,
            "total_weight": pond.total_weight,
            "running_sum": running_sum,
            "total_tosses": pond.total_tosses,
            "tosses_length": len(pond.tosses),
        }
        if entropy is not None:
            diagnostics["entropy"] = entropy.digest
            diagnostics["entropy_source"] = entropy.source
        logger.error("Weighted selection exhausted for pond %s: %s", pond.id, diagnostics)
        raise WeightedSelectionFailedError(pond.id, diagnostics)

    toss = pond.tosses[position]
    return SelectionResult(
        winner=pond.participants[toss.participant_index].address,
        participant_index=toss.participant_index,
        toss_position=position,
        draw=draw,
        total_weight=pond.total_weight,
        running_sum=running_sum,
        entropy=entropy,
    )


def draw_winner(pond: Pond, ctx: ExecutionContext) -> SelectionResult:
    """Pick a winner; an instance without weight is an integrity failure here."""
    if pond.total_weight <= 0 or pond.total_tosses == 0:
        diagnostics: dict[str, Any] = {
            "draw": None,
            "total_weight": pond.total_weight,
            "running_sum": 0,
            "total_tosses": pond.total_tosses,
            "tosses_length": len(pond.tosses),
        }
        logger.error("No weight to draw from in pond %s: %s", pond.id, diagnostics)
        raise WeightedSelectionFailedError(pond.id, diagnostics)
    entropy = mix_entropy(ctx, pond.total_tosses, pond.total_value, pond.start_time)
    draw = compute_draw(entropy.value, pond.total_weight)
    return select_with_draw(pond, draw, entropy)
