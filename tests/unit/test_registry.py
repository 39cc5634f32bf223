"""Unit tests for the swap-and-pop id registry."""

from src.pond_ledger.domain.registry import OrderedIdSet


def test_add_is_idempotent() -> None:
    ids = OrderedIdSet()
    assert ids.add("a") is True
    assert ids.add("a") is False
    assert len(ids) == 1


def test_insertion_order_before_removal() -> None:
    ids = OrderedIdSet()
    for item in ("a", "b", "c"):
        ids.add(item)
    assert ids.to_list() == ["a", "b", "c"]


def test_remove_swaps_last_into_slot() -> None:
    ids = OrderedIdSet()
    for item in ("a", "b", "c", "d"):
        ids.add(item)
    assert ids.remove("b") is True
    assert ids.to_list() == ["a", "d", "c"]
    assert "b" not in ids
    # index of the moved item is kept up to date
    assert ids.remove("d") is True
    assert ids.to_list() == ["a", "c"]


def test_remove_last_and_missing() -> None:
    ids = OrderedIdSet()
    ids.add("a")
    assert ids.remove("zzz") is False
    assert ids.remove("a") is True
    assert len(ids) == 0
    assert list(ids) == []
