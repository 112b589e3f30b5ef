import logging
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"


class Settings(BaseSettings):
    """Tracker settings, overridable with ``BUDGET_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="BUDGET_",
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    data_file: Path = _PROJECT_ROOT / "data" / "budget_tracker.json"
    default_monthly_budget: float = Field(3000.0, gt=0)
    trend_months: int = Field(6, ge=1)
    top_categories: int = Field(5, ge=1)
    daily_window_days: int = Field(30, ge=1)
    currency_symbol: str = "$"
    log_level: str = "INFO"


def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
