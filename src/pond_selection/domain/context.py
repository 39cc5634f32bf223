"""Execution context: the environment values mixed into the selection entropy.

A ContextProvider hands out one ExecutionContext per engine call. The engine
also takes its notion of "now" from the context, so a single provider is the
only clock the engine reads.
"""

import random
import secrets
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Protocol

from src.pond_common.datetime_utils import now_ts

ZERO_HASH = bytes(32)


@dataclass(frozen=True)
class ExecutionContext:
    timestamp: int
    block_number: int
    block_hashes: Mapping[int, bytes] = field(default_factory=dict)
    prevrandao: int = 0
    gas_left: int = 0
    gas_price: int = 0
    engine_address: str = ""

    def block_hash(self, number: int) -> bytes | None:
        """Hash of block `number`, or None when unknown or all zero."""
        if number < 0:
            return None
        value = self.block_hashes.get(number)
        if not value or value == ZERO_HASH:
            return None
        return value


class ContextProvider(Protocol):
    def current(self) -> ExecutionContext: ...


class LocalContextProvider:
    """Simulates one block per call on top of the wall clock."""

    GAS_LIMIT = 30_000_000

    def __init__(
        self,
        engine_address: str,
        clock: Callable[[], int] = now_ts,
        gas_price: int = 1,
    ) -> None:
        self._engine_address = engine_address
        self._clock = clock
        self._gas_price = gas_price
        self._block_number = 0
        self._recent: dict[int, bytes] = {}

    def current(self) -> ExecutionContext:
        self._block_number += 1
        self._recent[self._block_number - 1] = secrets.token_bytes(32)
        # keep the two parents the entropy mixer may look at
        self._recent.pop(self._block_number - 3, None)
        return ExecutionContext(
            timestamp=self._clock(),
            block_number=self._block_number,
            block_hashes=dict(self._recent),
            prevrandao=secrets.randbits(256),
            gas_left=self.GAS_LIMIT - secrets.randbelow(self.GAS_LIMIT // 10),
            gas_price=self._gas_price,
            engine_address=self._engine_address,
        )


class FixedContextProvider:
    """Deterministic provider with a settable clock.

    Hashes come from a seeded generator so sequences of draws are repeatable;
    `block_hashes` overrides them entirely when given.
    """

    def __init__(
        self,
        now: int,
        engine_address: str = "0x000000000000000000000000000000000000b0d5",
        seed: int = 0,
        block_hashes: Mapping[int, bytes] | None = None,
        prevrandao: int | None = None,
    ) -> None:
        self.now = now
        self.engine_address = engine_address
        self.block_number = 1
        self._rng = random.Random(seed)
        self._block_hashes = block_hashes
        self._prevrandao = prevrandao

    def advance(self, seconds: int) -> int:
        self.now += seconds
        return self.now

    def current(self) -> ExecutionContext:
        self.block_number += 1
        if self._block_hashes is not None:
            hashes = dict(self._block_hashes)
        else:
            hashes = {
                self.block_number - 1: self._rng.randbytes(32),
                self.block_number - 2: self._rng.randbytes(32),
            }
        prevrandao = (
            self._prevrandao if self._prevrandao is not None else self._rng.getrandbits(256)
        )
        return ExecutionContext(
            timestamp=self.now,
            block_number=self.block_number,
            block_hashes=hashes,
            prevrandao=prevrandao,
            gas_left=1_000_000,
            gas_price=1,
            engine_address=self.engine_address,
        )
