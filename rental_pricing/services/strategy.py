from enum import Enum
from typing import Any, Mapping, Union

from loguru import logger
from pydantic import TypeAdapter

from rental_pricing.core.exceptions import UnknownPricingStrategyException
from rental_pricing.schemas import (
    PriceCalculationResult,
    PricingConfig,
    RateBasedPricingConfig,
    RateCalculationResult,
    TieredPricingConfig,
)
from rental_pricing.services.duration import (
    Instant,
    calculate_duration,
    calculate_duration_minutes,
)
from rental_pricing.services.rates import calculate_rental_price_v2
from rental_pricing.services.tiered import calculate_rental_price

QuoteResult = Union[PriceCalculationResult, RateCalculationResult]

_config_adapter = TypeAdapter(PricingConfig)


class PricingStrategy(str, Enum):
    TIERED = "tiered"
    RATE_BASED = "rate_based"


def strategy_for(config: PricingConfig) -> PricingStrategy:
    return PricingStrategy(config.strategy)


def pricing_config_from_dict(data: Mapping[str, Any]) -> PricingConfig:
    strategy = data.get("strategy")
    if strategy not in {s.value for s in PricingStrategy}:
        raise UnknownPricingStrategyException(f"Unknown pricing strategy: {strategy!r}")
    return _config_adapter.validate_python(dict(data))


def quote_for_duration(config: PricingConfig, duration: int, quantity: int) -> QuoteResult:
    """Price a rental whose duration is already known.

    ``duration`` is in pricing-mode units for tiered products and in minutes
    for rate-based products.
    """
    if isinstance(config, TieredPricingConfig):
        return calculate_rental_price(config.pricing, duration, quantity)
    if isinstance(config, RateBasedPricingConfig):
        return calculate_rental_price_v2(config.pricing, duration, quantity)
    raise UnknownPricingStrategyException(f"Unsupported pricing config: {type(config).__name__}")


def quote(config: PricingConfig, start: Instant, end: Instant, quantity: int) -> QuoteResult:
    strategy = strategy_for(config)
    if strategy == PricingStrategy.TIERED:
        duration = calculate_duration(start, end, config.pricing.pricing_mode)
    else:
        duration = calculate_duration_minutes(start, end)

    logger.info(
        f"Quoting {quantity} unit(s) with {strategy.value} pricing for duration {duration}"
    )
    return quote_for_duration(config, duration, quantity)
