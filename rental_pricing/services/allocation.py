from typing import Iterable, List, Optional

from loguru import logger

from rental_pricing.monitoring.metrics import MetricsCollector
from rental_pricing.schemas import (
    CombinationAllocation,
    CombinationAvailability,
    SelectionAllocationMode,
    SelectionCapacity,
    SelectionMode,
)
from rental_pricing.services.attributes import (
    Attributes,
    Axes,
    get_deterministic_combination_sort_value,
    get_selection_mode,
    get_sorted_axes,
    matches_selected_attributes,
)

Combinations = Optional[Iterable[CombinationAvailability]]


def get_matching_combinations(
    combinations: Combinations, selected: Attributes
) -> List[CombinationAvailability]:
    return [
        combination
        for combination in combinations or []
        if matches_selected_attributes(selected, combination.selected_attributes)
    ]


def _sorted_matches(
    axes: Axes, combinations: Combinations, selected: Attributes
) -> List[CombinationAvailability]:
    sorted_axes = get_sorted_axes(axes)
    return sorted(
        get_matching_combinations(combinations, selected),
        key=lambda c: (
            get_deterministic_combination_sort_value(sorted_axes, c.selected_attributes),
            c.combination_key,
        ),
    )


def get_max_available_for_selection(
    combinations: Combinations, selected: Attributes
) -> int:
    matching = get_matching_combinations(combinations, selected)
    return max((max(0, c.available_quantity) for c in matching), default=0)


def get_total_available_for_selection(
    combinations: Combinations, selected: Attributes
) -> int:
    matching = get_matching_combinations(combinations, selected)
    return sum(max(0, c.available_quantity) for c in matching)


def get_selection_capacity(
    axes: Axes, combinations: Combinations, selected: Attributes
) -> SelectionCapacity:
    """Largest quantity the allocator could serve for the current selection."""
    combinations = list(combinations or [])
    mode = get_selection_mode(axes, selected)

    if mode == SelectionMode.FULL:
        return SelectionCapacity(
            mode=mode,
            allocation_mode=SelectionAllocationMode.SINGLE,
            capacity=get_max_available_for_selection(combinations, selected),
        )

    return SelectionCapacity(
        mode=mode,
        allocation_mode=SelectionAllocationMode.SPLIT,
        capacity=get_total_available_for_selection(combinations, selected),
    )


def resolve_best_combination(
    axes: Axes, combinations: Combinations, selected: Attributes, quantity: int
) -> Optional[CombinationAvailability]:
    for combination in _sorted_matches(axes, combinations, selected):
        if combination.available_quantity >= quantity:
            return combination
    return None


def allocate_across_combinations(
    axes: Axes, combinations: Combinations, selected: Attributes, quantity: int
) -> Optional[List[CombinationAllocation]]:
    """Greedy split of ``quantity`` over matching combinations.

    All or nothing: returns None when the matches cannot cover the request.
    """
    if quantity < 1:
        return []

    remaining = quantity
    allocations: List[CombinationAllocation] = []

    for combination in _sorted_matches(axes, combinations, selected):
        if remaining <= 0:
            break
        available = max(0, combination.available_quantity)
        if available == 0:
            continue

        take = min(available, remaining)
        allocations.append(CombinationAllocation(combination=combination, quantity=take))
        remaining -= take

    if remaining > 0:
        return None
    return allocations


def allocate_for_selection(
    axes: Axes, combinations: Combinations, selected: Attributes, quantity: int
) -> Optional[List[CombinationAllocation]]:
    if quantity < 1:
        return []

    axes = get_sorted_axes(axes)
    combinations = list(combinations or [])
    mode = get_selection_mode(axes, selected)

    if mode == SelectionMode.FULL:
        allocation_mode = SelectionAllocationMode.SINGLE
        combination = resolve_best_combination(axes, combinations, selected, quantity)
        allocations = (
            [CombinationAllocation(combination=combination, quantity=quantity)]
            if combination is not None
            else None
        )
    else:
        allocation_mode = SelectionAllocationMode.SPLIT
        allocations = allocate_across_combinations(axes, combinations, selected, quantity)

    MetricsCollector.record_allocation(allocation_mode.value, allocations is not None)
    if allocations is None:
        logger.info(
            f"Insufficient stock for {quantity} units "
            f"(mode={mode.value}, selection={dict(selected or {})})"
        )
    else:
        logger.debug(
            f"Allocated {quantity} units across {len(allocations)} combinations "
            f"(mode={mode.value})"
        )
    return allocations
