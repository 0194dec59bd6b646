import pytest

from rental_pricing.schemas import SelectionAllocationMode, SelectionMode
from rental_pricing.services.allocation import (
    allocate_across_combinations,
    allocate_for_selection,
    get_matching_combinations,
    get_max_available_for_selection,
    get_selection_capacity,
    get_total_available_for_selection,
    resolve_best_combination,
)


def _summary(allocations):
    return [(a.combination.combination_key, a.quantity) for a in allocations]


def test_matching_combinations(combinations):
    matching = get_matching_combinations(combinations, {"size": "M"})
    assert {c.combination_key for c in matching} == {
        "size:M|color:Red",
        "size:M|color:Blue",
        "size:M|color:Green",
    }
    assert len(get_matching_combinations(combinations, None)) == len(combinations)
    assert get_matching_combinations(None, {"size": "M"}) == []


def test_resolve_best_combination_full_selection(axes, combinations):
    selected = {"size": "M", "color": "Red"}

    best = resolve_best_combination(axes, combinations, selected, 2)
    assert best.combination_key == "size:M|color:Red"

    assert resolve_best_combination(axes, combinations, selected, 3) is None


def test_resolve_best_combination_is_deterministic(axes, combinations):
    best = resolve_best_combination(axes, combinations, {"size": "M"}, 2)
    assert best.combination_key == "size:M|color:Green"

    reversed_best = resolve_best_combination(
        axes, list(reversed(combinations)), {"size": "M"}, 2
    )
    assert reversed_best == best


def test_allocate_across_combinations_partial(axes, combinations):
    allocations = allocate_across_combinations(axes, combinations, {"size": "M"}, 5)

    assert _summary(allocations) == [
        ("size:M|color:Blue", 1),
        ("size:M|color:Green", 3),
        ("size:M|color:Red", 1),
    ]


def test_allocate_across_combinations_skips_empty_stock(axes, combinations):
    allocations = allocate_across_combinations(axes, combinations, {}, 8)

    assert _summary(allocations) == [
        ("size:L|color:Blue", 5),
        ("size:M|color:Blue", 1),
        ("size:M|color:Green", 2),
    ]


def test_allocation_is_all_or_nothing(axes, combinations):
    assert allocate_across_combinations(axes, combinations, {"size": "M"}, 7) is None
    assert allocate_across_combinations(axes, combinations, {"size": "S"}, 1) is None


def test_zero_quantity_allocates_nothing(axes, combinations):
    assert allocate_across_combinations(axes, combinations, {}, 0) == []
    assert allocate_for_selection(axes, combinations, {}, 0) == []


@pytest.mark.parametrize("quantity", range(1, 13))
def test_allocation_conserves_quantity(axes, combinations, quantity):
    allocations = allocate_across_combinations(axes, combinations, None, quantity)

    if allocations is None:
        assert quantity > get_total_available_for_selection(combinations, None)
        return

    assert sum(a.quantity for a in allocations) == quantity
    for allocation in allocations:
        assert 0 < allocation.quantity <= allocation.combination.available_quantity


def test_selection_capacity_mirrors_allocator(axes, combinations):
    full = get_selection_capacity(axes, combinations, {"size": "M", "color": "Red"})
    assert full.mode == SelectionMode.FULL
    assert full.allocation_mode == SelectionAllocationMode.SINGLE
    assert full.capacity == 2

    partial = get_selection_capacity(axes, combinations, {"size": "M"})
    assert partial.mode == SelectionMode.PARTIAL
    assert partial.allocation_mode == SelectionAllocationMode.SPLIT
    assert partial.capacity == 6

    none = get_selection_capacity(axes, combinations, {})
    assert none.mode == SelectionMode.NONE
    assert none.capacity == 11

    assert allocate_across_combinations(axes, combinations, {"size": "M"}, partial.capacity)
    assert allocate_across_combinations(axes, combinations, {"size": "M"}, partial.capacity + 1) is None


def test_max_and_total_available(combinations):
    assert get_max_available_for_selection(combinations, {"color": "Blue"}) == 5
    assert get_total_available_for_selection(combinations, {"color": "Blue"}) == 6
    assert get_max_available_for_selection(combinations, {"color": "Pink"}) == 0
    assert get_total_available_for_selection([], {}) == 0


def test_allocate_for_selection_full_mode_never_splits(axes, combinations):
    selected = {"size": "M", "color": "Green"}

    allocations = allocate_for_selection(axes, combinations, selected, 3)
    assert _summary(allocations) == [("size:M|color:Green", 3)]

    assert allocate_for_selection(axes, combinations, selected, 4) is None


def test_allocate_for_selection_partial_mode_splits(axes, combinations):
    allocations = allocate_for_selection(axes, combinations, {"color": "Blue"}, 6)
    assert _summary(allocations) == [
        ("size:L|color:Blue", 5),
        ("size:M|color:Blue", 1),
    ]


def test_allocation_accepts_generators(axes, combinations):
    allocations = allocate_for_selection(
        (axis for axis in axes), (c for c in combinations), {"size": "M"}, 2
    )
    assert sum(a.quantity for a in allocations) == 2
