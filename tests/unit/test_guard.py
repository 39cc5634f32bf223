"""Unit tests for the per-pond guard and execution context providers."""

import asyncio

import pytest

from src.pond_common.errors import ReentrantCallError
from src.pond_engine.guard import PondGuard
from src.pond_selection.domain.context import (
    ExecutionContext,
    FixedContextProvider,
    LocalContextProvider,
)
from tests.factories import ENGINE, T0


class TestPondGuard:
    async def test_nested_hold_on_same_key_rejected(self) -> None:
        guard = PondGuard()
        async with guard.hold("p1"):
            assert guard.is_held("p1")
            with pytest.raises(ReentrantCallError):
                async with guard.hold("p1"):
                    pass
        assert not guard.is_held("p1")

    async def test_different_keys_nest(self) -> None:
        guard = PondGuard()
        async with guard.hold("p1"):
            async with guard.hold("p2"):
                assert guard.is_held("p1") and guard.is_held("p2")

    async def test_concurrent_tasks_serialize(self) -> None:
        guard = PondGuard()
        order: list[str] = []

        async def worker(name: str) -> None:
            async with guard.hold("p1"):
                order.append(f"{name}-in")
                await asyncio.sleep(0)
                order.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))
        assert order in (["a-in", "a-out", "b-in", "b-out"], ["b-in", "b-out", "a-in", "a-out"])


class TestContextProviders:
    def test_fixed_provider_is_repeatable(self) -> None:
        a, b = FixedContextProvider(now=T0, seed=5), FixedContextProvider(now=T0, seed=5)
        assert [a.current() for _ in range(3)] == [b.current() for _ in range(3)]

    def test_fixed_provider_clock(self) -> None:
        provider = FixedContextProvider(now=T0)
        provider.advance(10)
        ctx = provider.current()
        assert ctx.timestamp == T0 + 10
        assert ctx.engine_address == ENGINE

    def test_local_provider_advances_blocks(self) -> None:
        provider = LocalContextProvider(ENGINE, clock=lambda: T0)
        first = provider.current()
        second = provider.current()
        assert second.block_number == first.block_number + 1
        assert second.block_hash(second.block_number - 1) is not None
        assert second.timestamp == T0

    def test_zero_hash_is_unavailable(self) -> None:
        ctx = ExecutionContext(timestamp=T0, block_number=5, block_hashes={4: bytes(32)})
        assert ctx.block_hash(4) is None
        assert ctx.block_hash(3) is None
        assert ctx.block_hash(-1) is None
