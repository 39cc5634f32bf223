"""Unit tests for the check-then-perform upkeep pair."""

import pytest

from src.pond_common.enums import SettlementOutcome
from src.pond_common.errors import TimelockActiveError
from src.pond_common.units import parse_units
from tests.factories import ALICE, fund_and_toss, make_custom_pond


class TestCheckUpkeep:
    async def test_nothing_to_do_while_open(self, engine) -> None:
        await make_custom_pond(engine)
        check = engine.check_upkeep()
        assert check.upkeep_needed is False
        assert check.pond_id is None

    async def test_finds_settleable_pond(self, engine, ctx) -> None:
        early = await make_custom_pond(engine, name="early", duration=100)
        await make_custom_pond(engine, name="late", duration=10_000)
        ctx.now = early.end_time + 31

        check = engine.check_upkeep()

        assert check.upkeep_needed is True
        assert check.pond_id == early.id

    async def test_timelock_pond_not_reported(self, engine, ctx) -> None:
        pond = await make_custom_pond(engine)
        ctx.now = pond.end_time + 30
        assert engine.check_upkeep().upkeep_needed is False


class TestPerformUpkeep:
    async def test_perform_settles_reported_pond(self, engine, custody, ctx) -> None:
        pond = await make_custom_pond(engine)
        await fund_and_toss(engine, custody, pond, ALICE, parse_units("0.2"))
        ctx.now = pond.end_time + 31

        check = engine.check_upkeep()
        result = await engine.perform_upkeep(check.pond_id)

        assert result.outcome is SettlementOutcome.WINNER_PAID
        assert result.winner == ALICE
        assert engine.check_upkeep().upkeep_needed is False

    async def test_perform_rechecks_state(self, engine) -> None:
        pond = await make_custom_pond(engine)
        with pytest.raises(TimelockActiveError):
            await engine.perform_upkeep(pond.id)
