import logging
import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from bizeval.models.roi import SensitivitySettings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class Settings(BaseModel):
    discount_rate: float = Field(0.10, description="Default NPV discount rate")
    growth_sensitivity: float = Field(0.03, description="Growth rate sensitivity delta")
    margin_sensitivity: float = Field(0.03, description="Profit margin sensitivity delta")
    exit_multiple_sensitivity: float = Field(1.0, description="Exit multiple sensitivity delta")
    offer_band: float = Field(0.15, description="Offer range half-width around the recommended offer")
    default_industry: str = Field("Services", description="Benchmark used when the industry is unknown")
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def sensitivity(self) -> SensitivitySettings:
        return SensitivitySettings(
            growth_delta=self.growth_sensitivity,
            margin_delta=self.margin_sensitivity,
            exit_multiple_delta=self.exit_multiple_sensitivity,
        )


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logging.getLogger(__name__).warning(f"Ignoring non-numeric {name}={raw!r}, using {default}")
        return default


def load_settings() -> Settings:
    """Read settings from the environment (and a .env file, if present)."""
    load_dotenv()
    return Settings(
        discount_rate=_env_float("BIZEVAL_DISCOUNT_RATE", 0.10),
        growth_sensitivity=_env_float("BIZEVAL_GROWTH_SENSITIVITY", 0.03),
        margin_sensitivity=_env_float("BIZEVAL_MARGIN_SENSITIVITY", 0.03),
        exit_multiple_sensitivity=_env_float("BIZEVAL_EXIT_MULTIPLE_SENSITIVITY", 1.0),
        offer_band=_env_float("BIZEVAL_OFFER_BAND", 0.15),
        default_industry=os.getenv("BIZEVAL_DEFAULT_INDUSTRY", "Services"),
        log_level=os.getenv("BIZEVAL_LOG_LEVEL", "INFO").upper(),
        log_file=os.getenv("BIZEVAL_LOG_FILE") or None,
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Console logging plus an optional log file, in the engine's standard format."""
    settings = settings or get_settings()
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file, mode="a"))
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )
