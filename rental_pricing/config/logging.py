import sys
from typing import Optional

from loguru import logger

from rental_pricing.config.settings import Settings, get_settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def setup_logging(settings: Optional[Settings] = None) -> int:
    settings = settings or get_settings()

    logger.remove()
    sink_id = logger.add(
        sys.stderr,
        level=settings.log_level.upper(),
        format=LOG_FORMAT,
        serialize=settings.log_json,
        backtrace=False,
        diagnose=False,
    )

    logger.debug(
        f"Logging configured: level={settings.log_level}, json={settings.log_json}"
    )
    return sink_id
