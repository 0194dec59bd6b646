from decimal import Decimal
from enum import Enum
from typing import Annotated, Dict, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_COMBINATION_KEY = "__default"
MAX_BOOKING_ATTRIBUTE_AXES = 3
BASE_RATE_ID = "__base__"

UnitAttributes = Dict[str, str]


class DurationUnit(str, Enum):
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"

    @property
    def minutes(self) -> int:
        return _UNIT_MINUTES[self]


_UNIT_MINUTES = {
    DurationUnit.MINUTE: 1,
    DurationUnit.HOUR: 60,
    DurationUnit.DAY: 1440,
    DurationUnit.WEEK: 10080,
}


class PricingMode(str, Enum):
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"

    @property
    def unit(self) -> DurationUnit:
        return DurationUnit(self.value)

    @property
    def minutes(self) -> int:
        return self.unit.minutes


class SelectionMode(str, Enum):
    NONE = "none"
    PARTIAL = "partial"
    FULL = "full"


class SelectionAllocationMode(str, Enum):
    SINGLE = "single"
    SPLIT = "split"


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


# Pricing configuration
class PricingTier(FrozenModel):
    id: Optional[str] = None
    min_duration: int = Field(..., description="Minimum duration in pricing-mode units")
    discount_percent: Decimal = Field(..., ge=0, le=99)


class ProductPricing(FrozenModel):
    base_price: Decimal = Field(..., ge=0)
    deposit: Decimal = Field(Decimal("0"), ge=0)
    pricing_mode: PricingMode = PricingMode.DAY
    tiers: Tuple[PricingTier, ...] = ()
    enforce_strict_tiers: bool = False


class Rate(FrozenModel):
    id: str
    price: Decimal = Field(..., ge=0)
    period_minutes: int = Field(..., gt=0)
    display_order: int = 0


class RateBasedPricing(FrozenModel):
    base_price: Decimal = Field(..., ge=0)
    base_period_minutes: int = Field(..., gt=0)
    deposit: Decimal = Field(Decimal("0"), ge=0)
    rates: Tuple[Rate, ...] = ()
    enforce_strict_tiers: bool = False


class TieredPricingConfig(FrozenModel):
    strategy: Literal["tiered"] = "tiered"
    pricing: ProductPricing


class RateBasedPricingConfig(FrozenModel):
    strategy: Literal["rate_based"] = "rate_based"
    pricing: RateBasedPricing


PricingConfig = Annotated[
    Union[TieredPricingConfig, RateBasedPricingConfig],
    Field(discriminator="strategy"),
]


# Pricing results
class PriceCalculationResult(FrozenModel):
    subtotal: Decimal
    original_subtotal: Decimal
    deposit: Decimal
    total: Decimal
    effective_price_per_unit: Decimal
    base_price: Decimal
    applied_tier: Optional[PricingTier] = None
    discount_percent: Optional[Decimal] = None
    duration: int
    quantity: int
    savings: Decimal
    savings_percent: int


class PricingBreakdown(FrozenModel):
    base_price: Decimal
    effective_price: Decimal
    duration: int
    pricing_mode: PricingMode
    discount_percent: Optional[Decimal] = None
    discount_amount: Decimal
    tier_applied: Optional[str] = None


class RatePlanEntry(FrozenModel):
    rate: Rate
    quantity: int


class BestRateResult(FrozenModel):
    total_cost: Decimal
    covered_minutes: int
    plan: Tuple[RatePlanEntry, ...] = ()
    is_fallback: bool = False


class RateCalculationResult(FrozenModel):
    subtotal: Decimal
    deposit: Decimal
    total: Decimal
    applied_rate: Optional[Rate] = None
    periods_used: int
    plan: Tuple[RatePlanEntry, ...] = ()
    savings: Decimal
    reduction_percent: Optional[Decimal] = None
    duration_minutes: int
    quantity: int
    original_subtotal: Decimal


class StorefrontRateRow(FrozenModel):
    id: str
    period_minutes: int
    price: Decimal
    reduction_percent: Decimal


class StorefrontPricingSummary(FrozenModel):
    display_price: Decimal
    display_period_minutes: int
    show_starting_from: bool
    max_reduction_percent: Decimal


# Booking attributes and inventory
class BookingAttributeAxis(FrozenModel):
    key: str
    label: Optional[str] = None
    position: int = 0


class CombinationAvailability(FrozenModel):
    combination_key: str = DEFAULT_COMBINATION_KEY
    selected_attributes: UnitAttributes = Field(default_factory=dict)
    available_quantity: int = Field(0, ge=0)


class CombinationAllocation(FrozenModel):
    combination: CombinationAvailability
    quantity: int


class SelectionCapacity(FrozenModel):
    mode: SelectionMode
    allocation_mode: SelectionAllocationMode
    capacity: int
