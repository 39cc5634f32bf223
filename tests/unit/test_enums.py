"""Tests for pond_common.enums: journal event types must match the DB CHECK constraint."""

import importlib.util
from pathlib import Path

from src.pond_common.enums import (
    STANDARD_PERIODS,
    CustomPondPolicy,
    PondEventType,
    PondPeriod,
    PondPhase,
    SettlementOutcome,
)

_MIGRATION = Path(__file__).resolve().parents[2] / "alembic" / "versions" / "001_create_pond_events.py"


def _migration_event_types() -> tuple[str, ...]:
    spec = importlib.util.spec_from_file_location("pond_events_migration", _MIGRATION)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module._EVENT_TYPES


class TestPondEventType:
    def test_values_match_check_constraint(self) -> None:
        assert {e.value for e in PondEventType} == set(_migration_event_types())

    def test_str_enum(self) -> None:
        assert PondEventType.TOSS == "TOSS"


class TestPondPeriod:
    def test_standard_periods_exclude_custom(self) -> None:
        assert PondPeriod.CUSTOM not in STANDARD_PERIODS
        assert all(p.is_standard for p in STANDARD_PERIODS)
        assert not PondPeriod.CUSTOM.is_standard

    def test_standard_order_is_shortest_first(self) -> None:
        assert [p.value for p in STANDARD_PERIODS] == [
            "FIVE_MINUTES", "HOURLY", "DAILY", "WEEKLY", "MONTHLY",
        ]


class TestSmallEnums:
    def test_phase_values(self) -> None:
        assert {p.value for p in PondPhase} == {
            "PENDING", "OPEN", "AWAITING_TIMELOCK", "SETTLEABLE", "SETTLED",
        }

    def test_policy_and_outcome(self) -> None:
        assert CustomPondPolicy("RENEW") is CustomPondPolicy.RENEW
        assert {o.value for o in SettlementOutcome} == {"WINNER_PAID", "NO_ACTIVITY"}
