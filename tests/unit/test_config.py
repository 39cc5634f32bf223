"""Unit tests for EngineConfig validation and derived values."""

from types import SimpleNamespace

import pytest

from src.pond_common.enums import CustomPondPolicy, PondPeriod
from src.pond_common.errors import InvalidConfigError
from src.pond_engine.config import EngineConfig
from tests.factories import FEE_SINK


def test_defaults() -> None:
    config = EngineConfig(fee_address=FEE_SINK)
    assert config.fee_percent == 7
    assert config.selection_timelock == 30
    assert config.max_participants_per_pond == 3000
    assert config.custom_pond_policy is CustomPondPolicy.TERMINAL


def test_five_minute_timelock_is_divided() -> None:
    config = EngineConfig(fee_address=FEE_SINK, selection_timelock=300, five_min_timelock_divisor=3)
    assert config.effective_timelock(PondPeriod.FIVE_MINUTES) == 100
    assert config.effective_timelock(PondPeriod.DAILY) == 300
    assert config.effective_timelock(PondPeriod.CUSTOM) == 300


def test_warning_threshold() -> None:
    assert EngineConfig(fee_address=FEE_SINK).warning_threshold() == 2400


@pytest.mark.parametrize(
    "overrides",
    [
        {"fee_percent": 11},
        {"fee_percent": -1},
        {"selection_timelock": -1},
        {"five_min_timelock_divisor": 0},
        {"max_participants_per_pond": 0},
        {"emergency_batch_size": 0},
        {"cleanup_batch_threshold": 0},
        {"participant_warning_percent": 0},
        {"default_min_toss": 0},
        {"default_min_toss": 10, "default_max_total_toss": 5},
    ],
)
def test_invalid_values_rejected(overrides: dict) -> None:
    with pytest.raises(InvalidConfigError):
        EngineConfig(fee_address=FEE_SINK, **overrides)


def test_zero_fee_address_rejected() -> None:
    with pytest.raises(InvalidConfigError):
        EngineConfig(fee_address="0x" + "0" * 40)


def test_with_changes_parses_policy() -> None:
    config = EngineConfig(fee_address=FEE_SINK).with_changes(custom_pond_policy="RENEW")
    assert config.custom_pond_policy is CustomPondPolicy.RENEW
    with pytest.raises(InvalidConfigError):
        config.with_changes(custom_pond_policy="FOREVER")


def test_from_settings() -> None:
    settings = SimpleNamespace(
        FEE_ADDRESS=FEE_SINK,
        FEE_PERCENT=5,
        SELECTION_TIMELOCK_SECONDS=60,
        FIVE_MIN_TIMELOCK_DIVISOR=2,
        MAX_PARTICIPANTS_PER_POND=100,
        CLEANUP_BATCH_THRESHOLD=10,
        EMERGENCY_BATCH_SIZE=20,
        PARTICIPANT_WARNING_PERCENT=90,
        DEFAULT_MIN_TOSS=1,
        DEFAULT_MAX_TOTAL_TOSS=100,
        CUSTOM_POND_POLICY="RENEW",
        ENGINE_ADDRESS="0x" + "e" * 40,
    )
    config = EngineConfig.from_settings(settings)
    assert config.fee_percent == 5
    assert config.effective_timelock(PondPeriod.FIVE_MINUTES) == 30
    assert config.custom_pond_policy is CustomPondPolicy.RENEW
    assert config.to_dict()["custom_pond_policy"] == "RENEW"
