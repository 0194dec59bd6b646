from typing import Optional

from rental_pricing.config.logging import setup_logging
from rental_pricing.config.settings import Settings, get_settings
from rental_pricing.monitoring.metrics import init_app_info

__version__ = "0.1.0"


def configure(settings: Optional[Settings] = None) -> Settings:
    settings = settings or get_settings()
    setup_logging(settings)
    init_app_info(__version__)
    return settings


__all__ = ["configure", "get_settings", "Settings", "__version__"]
