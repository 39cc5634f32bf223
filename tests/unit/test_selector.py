"""Unit tests for entropy mixing and the cumulative-weight walk."""

import math

import pytest

from src.pond_common.enums import AssetKind, PondPeriod
from src.pond_common.errors import WeightedSelectionFailedError
from src.pond_common.units import parse_units
from src.pond_ledger.domain.ledger import PondLedger
from src.pond_ledger.domain.models import NATIVE_ASSET, Pond
from src.pond_selection.domain.context import ExecutionContext, FixedContextProvider
from src.pond_selection.domain.selector import (
    SOURCE_GRANDPARENT,
    SOURCE_PARENT,
    SOURCE_PREVRANDAO,
    block_entropy,
    compute_draw,
    draw_winner,
    mix_entropy,
    select_with_draw,
)
from tests.factories import ALICE, BOB, CAROL, ENGINE, T0


def _pond(*tosses: tuple[str, int]) -> Pond:
    pond = Pond(
        id="p",
        name="p",
        start_time=T0,
        end_time=T0 + 3600,
        min_toss=1,
        max_total_toss=10**30,
        asset_kind=AssetKind.NATIVE,
        asset_address=NATIVE_ASSET,
        period=PondPeriod.CUSTOM,
        created_at=T0,
    )
    for depositor, amount in tosses:
        PondLedger.record_toss(pond, depositor, amount)
    return pond


def _abc_pond() -> Pond:
    return _pond(
        (ALICE, parse_units("0.1")),
        (BOB, parse_units("0.3")),
        (CAROL, parse_units("0.6")),
    )


class TestForcedDraws:
    @pytest.mark.parametrize(
        ("draw", "winner"),
        [
            ("0.05", ALICE),
            ("0.35", BOB),
            ("0.99", CAROL),
        ],
    )
    def test_draw_maps_to_weighted_interval(self, draw: str, winner: str) -> None:
        pond = _abc_pond()
        assert pond.total_weight == parse_units("1")
        assert select_with_draw(pond, parse_units(draw)).winner == winner

    def test_boundary_goes_to_next_interval(self) -> None:
        pond = _abc_pond()
        # draw == 0.1 is not < 0.1, so A's interval [0, 0.1) does not contain it
        assert select_with_draw(pond, parse_units("0.1")).winner == BOB
        assert select_with_draw(pond, parse_units("0.1") - 1).winner == ALICE

    def test_repeat_depositor_wins_through_any_of_their_tosses(self) -> None:
        pond = _pond((ALICE, 10), (BOB, 10), (ALICE, 10))
        result = select_with_draw(pond, 25)
        assert result.winner == ALICE
        assert result.toss_position == 2
        assert result.running_sum == 30

    def test_exhausted_walk_raises_with_diagnostics(self) -> None:
        pond = _abc_pond()
        with pytest.raises(WeightedSelectionFailedError) as exc_info:
            select_with_draw(pond, pond.total_weight)
        diagnostics = exc_info.value.diagnostics
        assert diagnostics["draw"] == pond.total_weight
        assert diagnostics["running_sum"] == pond.total_weight
        assert diagnostics["total_weight"] == pond.total_weight


class TestNoWinner:
    def test_empty_pond_cannot_be_drawn(self) -> None:
        ctx = FixedContextProvider(now=T0).current()
        with pytest.raises(WeightedSelectionFailedError) as exc_info:
            draw_winner(_pond(), ctx)
        assert exc_info.value.diagnostics["total_tosses"] == 0
        assert exc_info.value.diagnostics["draw"] is None


class TestEntropy:
    def _ctx(self, hashes: dict[int, bytes], prevrandao: int = 7) -> ExecutionContext:
        return ExecutionContext(
            timestamp=T0,
            block_number=100,
            block_hashes=hashes,
            prevrandao=prevrandao,
            gas_left=1000,
            gas_price=1,
            engine_address=ENGINE,
        )

    def test_prefers_parent_hash(self) -> None:
        parent, grandparent = b"\x01" * 32, b"\x02" * 32
        value, source = block_entropy(self._ctx({99: parent, 98: grandparent}))
        assert (value, source) == (parent, SOURCE_PARENT)

    def test_zero_parent_falls_back_to_grandparent(self) -> None:
        grandparent = b"\x02" * 32
        value, source = block_entropy(self._ctx({99: bytes(32), 98: grandparent}))
        assert (value, source) == (grandparent, SOURCE_GRANDPARENT)

    def test_no_hashes_falls_back_to_prevrandao(self) -> None:
        _, source = block_entropy(self._ctx({}))
        assert source == SOURCE_PREVRANDAO

    def test_mix_is_deterministic_for_same_inputs(self) -> None:
        ctx = self._ctx({99: b"\x01" * 32})
        assert mix_entropy(ctx, 3, 100, T0) == mix_entropy(ctx, 3, 100, T0)

    def test_mix_depends_on_pond_values(self) -> None:
        ctx = self._ctx({99: b"\x01" * 32})
        assert mix_entropy(ctx, 3, 100, T0).value != mix_entropy(ctx, 4, 100, T0).value

    def test_draw_is_in_range(self) -> None:
        assert compute_draw(2**256 - 1, 7) == (2**256 - 1) % 7
        with pytest.raises(ValueError):
            compute_draw(5, 0)

    def test_draw_winner_records_entropy_source(self) -> None:
        ctx = FixedContextProvider(now=T0).current()
        result = draw_winner(_abc_pond(), ctx)
        assert result.entropy is not None
        assert result.diagnostics()["entropy_source"] == SOURCE_PARENT
        assert 0 <= result.draw < result.total_weight


def test_win_frequency_tracks_weight() -> None:
    """Over many independent draws each share wins about amount / total_weight."""
    pond = _pond((ALICE, 1), (BOB, 3), (CAROL, 6))
    provider = FixedContextProvider(now=T0, seed=1234)
    trials = 3000
    wins = {ALICE: 0, BOB: 0, CAROL: 0}
    for _ in range(trials):
        result = draw_winner(pond, provider.current())
        wins[result.winner] += 1

    for depositor, weight in ((ALICE, 1), (BOB, 3), (CAROL, 6)):
        p = weight / 10
        expected = trials * p
        sigma = math.sqrt(trials * p * (1 - p))
        assert abs(wins[depositor] - expected) < 4 * sigma
