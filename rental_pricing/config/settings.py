from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


def find_env_file() -> str:
    env_file = ".env" if Path("/.dockerenv").exists() else ".env.local"

    current_path = Path.cwd()

    for path in [current_path] + list(current_path.parents):
        env_path = path / env_file
        if env_path.exists():
            return str(env_path)

    return env_file


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=find_env_file(),
        env_file_encoding="utf-8",
        env_prefix="RENTAL_PRICING_",
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Rate optimizer
    rate_optimizer_max_steps: int = 200_000  # hard ceiling for the DP table
    rate_plan_cache_size: int = 1024  # 0 disables the plan cache

    # Booking attributes
    max_booking_attribute_axes: int = 3


@lru_cache
def get_settings() -> Settings:
    return Settings()
