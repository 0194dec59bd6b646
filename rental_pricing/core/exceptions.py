class PricingEngineException(Exception):
    pass


class InvalidPricingTiersException(PricingEngineException):
    pass


class InvalidRateException(PricingEngineException):
    pass


class InvalidAttributeAxisException(PricingEngineException):
    pass


class TooManyAttributeAxesException(InvalidAttributeAxisException):
    def __init__(self, count: int, limit: int):
        self.count = count
        self.limit = limit
        super().__init__(
            f"At most {limit} booking attribute axes are allowed, got {count}"
        )


class UnknownPricingStrategyException(PricingEngineException):
    pass
