from prometheus_client import Counter, Histogram, Info

# Business metrics - pricing engine specific
price_calculations_total = Counter(
    "rental_system_price_calculations_total",
    "Total number of rental price calculations",
    ["service", "strategy"],  # strategy=tiered/rate_based
)

rate_optimizer_fallbacks_total = Counter(
    "rental_system_rate_optimizer_fallbacks_total",
    "Rate optimizer runs that returned the cheapest-rate fallback plan",
    ["service", "reason"],  # reason=table_limit/no_covering_step
)

rate_optimizer_table_steps = Histogram(
    "rental_system_rate_optimizer_table_steps",
    "Size of the rate optimizer DP table in steps",
    ["service"],
    buckets=[10, 50, 100, 500, 1000, 5000, 10000, 50000, 200000],
)

rate_plan_cache_requests = Counter(
    "rental_system_rate_plan_cache_requests_total",
    "Rate plan cache lookups",
    ["service", "result"],  # result=hit/miss
)

allocations_total = Counter(
    "rental_system_inventory_allocations_total",
    "Inventory allocation attempts",
    ["service", "mode", "outcome"],  # mode=single/split, outcome=allocated/insufficient
)

# Application info
app_info = Info("rental_system_pricing_info", "Pricing engine information")


def init_app_info(version: str = "0.1.0"):
    app_info.info({"version": version, "service": "rental-pricing", "component": "engine"})


class MetricsCollector:
    SERVICE_NAME = "rental-pricing"

    @staticmethod
    def record_price_calculation(strategy: str):
        price_calculations_total.labels(
            service=MetricsCollector.SERVICE_NAME, strategy=strategy
        ).inc()

    @staticmethod
    def record_optimizer_fallback(reason: str):
        rate_optimizer_fallbacks_total.labels(
            service=MetricsCollector.SERVICE_NAME, reason=reason
        ).inc()

    @staticmethod
    def record_optimizer_table(steps: int):
        rate_optimizer_table_steps.labels(
            service=MetricsCollector.SERVICE_NAME
        ).observe(steps)

    @staticmethod
    def record_plan_cache(hit: bool):
        result = "hit" if hit else "miss"
        rate_plan_cache_requests.labels(
            service=MetricsCollector.SERVICE_NAME, result=result
        ).inc()

    @staticmethod
    def record_allocation(mode: str, allocated: bool):
        outcome = "allocated" if allocated else "insufficient"
        allocations_total.labels(
            service=MetricsCollector.SERVICE_NAME, mode=mode, outcome=outcome
        ).inc()
