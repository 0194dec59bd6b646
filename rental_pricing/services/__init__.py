from .allocation import (
    allocate_across_combinations,
    allocate_for_selection,
    get_matching_combinations,
    get_selection_capacity,
    resolve_best_combination,
)
from .attributes import (
    build_combination_key,
    build_partial_combination_key,
    canonicalize_attributes,
    get_selection_mode,
    matches_selected_attributes,
    normalize_attribute_value,
    normalize_axis_key,
)
from .duration import calculate_duration, from_minutes, to_minutes
from .rates import calculate_best_rate, calculate_rental_price_v2
from .strategy import PricingStrategy, quote, quote_for_duration
from .tiered import (
    calculate_effective_price,
    calculate_rental_price,
    find_applicable_tier,
    validate_pricing_tiers,
)

__all__ = [
    "to_minutes",
    "from_minutes",
    "calculate_duration",
    "find_applicable_tier",
    "calculate_effective_price",
    "calculate_rental_price",
    "validate_pricing_tiers",
    "calculate_best_rate",
    "calculate_rental_price_v2",
    "normalize_axis_key",
    "normalize_attribute_value",
    "canonicalize_attributes",
    "build_combination_key",
    "build_partial_combination_key",
    "matches_selected_attributes",
    "get_selection_mode",
    "get_matching_combinations",
    "resolve_best_combination",
    "allocate_across_combinations",
    "allocate_for_selection",
    "get_selection_capacity",
    "PricingStrategy",
    "quote",
    "quote_for_duration",
]
