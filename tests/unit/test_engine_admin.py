"""Unit tests for role gating, config updates, limits, removal and queries."""

import pytest

from src.pond_common.enums import CustomPondPolicy, PondEventType, PondPeriod
from src.pond_common.errors import (
    InvalidConfigError,
    InvalidPondTypeError,
    PermissionDeniedError,
    RemovalBlockedError,
)
from src.pond_common.units import parse_units
from src.pond_ledger.domain.models import NATIVE_ASSET
from src.pond_ledger.domain.pond_ids import custom_pond_id
from tests.factories import (
    ADMIN,
    ALICE,
    BOB,
    FACTORY,
    MANAGER,
    NOBODY,
    T0,
    fund_and_toss,
    make_custom_pond,
)


class TestRoles:
    async def test_create_requires_factory(self, engine) -> None:
        with pytest.raises(PermissionDeniedError):
            await engine.create_pond(
                NOBODY,
                pond_id=custom_pond_id("x"),
                name="x",
                start_time=T0,
                end_time=T0 + 10,
                min_toss=1,
                max_total_toss=10,
                asset_address=NATIVE_ASSET,
                period=PondPeriod.CUSTOM,
            )

    async def test_admin_implies_every_role(self, engine) -> None:
        pond = await engine.create_pond(
            ADMIN,
            pond_id=custom_pond_id("x"),
            name="x",
            start_time=T0,
            end_time=T0 + 10,
            min_toss=1,
            max_total_toss=10,
            asset_address=NATIVE_ASSET,
            period=PondPeriod.CUSTOM,
        )
        await engine.remove_pond(ADMIN, pond.id)
        assert engine.get_all_pond_ids() == []

    async def test_standard_pond_needs_its_derived_id(self, engine) -> None:
        with pytest.raises(InvalidPondTypeError):
            await engine.create_pond(
                FACTORY,
                pond_id="0x1234",
                name="bad",
                start_time=T0,
                end_time=T0 + 3599,
                min_toss=1,
                max_total_toss=10,
                asset_address=NATIVE_ASSET,
                period=PondPeriod.HOURLY,
            )

    async def test_clear_and_config_require_admin(self, engine) -> None:
        pond = await make_custom_pond(engine)
        with pytest.raises(PermissionDeniedError):
            await engine.batch_clear(MANAGER, pond.id, 0, 1)
        with pytest.raises(PermissionDeniedError):
            await engine.update_config(FACTORY, fee_percent=5)
        with pytest.raises(PermissionDeniedError):
            await engine.emergency_reset(NOBODY, pond.id)


class TestRemove:
    async def test_manager_removes_idle_custom_pond(self, engine, journal) -> None:
        pond = await make_custom_pond(engine)
        await engine.remove_pond(MANAGER, pond.id)
        assert pond.id not in engine.get_all_pond_ids()
        assert await journal.list_events(pond.id, PondEventType.POND_REMOVED)

    async def test_pond_with_tosses_cannot_be_removed(self, engine, custody) -> None:
        pond = await make_custom_pond(engine)
        await fund_and_toss(engine, custody, pond, ALICE, parse_units("0.1"))
        with pytest.raises(RemovalBlockedError):
            await engine.remove_pond(MANAGER, pond.id)

    async def test_settled_terminal_pond_can_be_removed(self, engine, custody, ctx) -> None:
        pond = await make_custom_pond(engine)
        await fund_and_toss(engine, custody, pond, ALICE, parse_units("0.1"))
        ctx.now = pond.end_time + 31
        await engine.settle(pond.id)
        await engine.remove_pond(MANAGER, pond.id)
        assert engine.get_all_pond_ids() == []


class TestLimits:
    async def test_update_limits(self, engine, custody) -> None:
        pond = await make_custom_pond(engine)
        await engine.update_pond_limits(MANAGER, pond.id, max_total_toss=parse_units("2"))
        await fund_and_toss(engine, custody, pond, ALICE, parse_units("1.5"))
        assert engine.get_participant_amount(pond.id, ALICE) == parse_units("1.5")
        assert pond.min_toss == parse_units("0.01")

    async def test_limits_must_stay_ordered(self, engine) -> None:
        pond = await make_custom_pond(engine)
        with pytest.raises(InvalidConfigError):
            await engine.update_pond_limits(MANAGER, pond.id, min_toss=parse_units("5"))
        with pytest.raises(InvalidConfigError):
            await engine.update_pond_limits(MANAGER, pond.id, min_toss=0)


class TestConfig:
    async def test_update_config_replaces_snapshot(self, engine, journal) -> None:
        updated = await engine.update_config(ADMIN, fee_percent=5, custom_pond_policy="RENEW")
        assert engine.get_config() is updated
        assert updated.fee_percent == 5
        assert updated.custom_pond_policy is CustomPondPolicy.RENEW
        events = await journal.list_events(event_type=PondEventType.CONFIG_UPDATED)
        assert events[0].payload["changed"] == ["custom_pond_policy", "fee_percent"]

    async def test_invalid_update_keeps_old_config(self, engine) -> None:
        before = engine.get_config()
        with pytest.raises(InvalidConfigError):
            await engine.update_config(ADMIN, fee_percent=11)
        with pytest.raises(InvalidConfigError):
            await engine.update_config(ADMIN, no_such_key=1)
        assert engine.get_config() is before

    async def test_new_fee_applies_to_next_settlement(self, engine, custody, ctx) -> None:
        pond = await make_custom_pond(engine)
        await fund_and_toss(engine, custody, pond, ALICE, parse_units("1"))
        await engine.update_config(ADMIN, fee_percent=10)
        ctx.now = pond.end_time + 31
        result = await engine.settle(pond.id)
        assert result.fee == parse_units("0.1")


class TestQueries:
    async def test_status_fields(self, engine, custody) -> None:
        pond = await make_custom_pond(engine)
        await fund_and_toss(engine, custody, pond, ALICE, parse_units("0.1"))
        await fund_and_toss(engine, custody, pond, BOB, parse_units("0.2"))

        status = engine.get_pond_status(pond.id)

        assert status.name == "Launch Pond"
        assert status.total_tosses == 2
        assert status.total_value == parse_units("0.3")
        assert status.participant_count == 2
        assert status.time_until_end == 3600
        assert status.period is PondPeriod.CUSTOM
        assert engine.get_pond_status(pond.id, now=pond.end_time + 5).time_until_end == 0

    async def test_participants_in_slot_order(self, engine, custody) -> None:
        pond = await make_custom_pond(engine)
        for depositor, amount in ((BOB, "0.2"), (ALICE, "0.1"), (BOB, "0.1")):
            await fund_and_toss(engine, custody, pond, depositor, parse_units(amount))
        rows = [(p.address, p.amount) for p in engine.get_pond_participants(pond.id)]
        assert rows == [(BOB, parse_units("0.3")), (ALICE, parse_units("0.1"))]

    async def test_debug_reports_consistent_totals(self, engine, custody) -> None:
        pond = await make_custom_pond(engine)
        await fund_and_toss(engine, custody, pond, ALICE, parse_units("0.1"))
        report = engine.debug_pond_data(pond.id)
        assert report.data_consistent
        assert report.tosses_length == 1
