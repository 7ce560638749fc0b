from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from functools import lru_cache
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

load_dotenv()

logger = logging.getLogger(__name__)

SNAPSHOT_SUFFIX = ".json"
DEFAULT_INTERVAL_MIN = 30.0


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    twilio_account_sid: Optional[str] = Field(None, alias="TWILIO_ACCOUNT_SID")
    twilio_auth_token: Optional[str] = Field(None, alias="TWILIO_AUTH_TOKEN")
    twilio_phone_from: Optional[str] = Field(None, alias="TWILIO_PHONE_FROM")
    twilio_phone_to: Optional[str] = Field(None, alias="TWILIO_PHONE_TO")
    twilio_api_url: str = Field(
        "https://api.twilio.com/2010-04-01", alias="TWILIO_API_URL"
    )
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_file: str = Field("fare_sniper.log", alias="LOG_FILE")

    @field_validator(
        "twilio_account_sid",
        "twilio_auth_token",
        "twilio_phone_from",
        "twilio_phone_to",
        mode="before",
    )
    @classmethod
    def _blank_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"LOG_LEVEL {v!r} is not a logging level")
        return level

    @property
    def twilio_configured(self) -> bool:
        return all(
            (
                self.twilio_account_sid,
                self.twilio_auth_token,
                self.twilio_phone_from,
                self.twilio_phone_to,
            )
        )


@lru_cache()
def get_settings() -> Settings:
    """Return application settings loaded from the environment."""
    return Settings()  # type: ignore[call-arg]


def validate_snapshot_path(path: Optional[str]) -> Optional[str]:
    """Reject snapshot paths that do not end in ``.json``."""
    if not path:
        return None
    if not path.lower().endswith(SNAPSHOT_SUFFIX):
        raise ValueError(f"Log file {path} must end in '{SNAPSHOT_SUFFIX}'")
    return path


@dataclass(frozen=True, slots=True)
class RunConfig:
    """Trip and loop parameters, fixed for the lifetime of a run."""

    origin: Optional[str] = None
    destination: Optional[str] = None
    outbound_date: Optional[str] = None
    return_date: Optional[str] = None
    passengers: int = 1
    deal_price_threshold: Optional[int] = None
    interval_min: float = DEFAULT_INTERVAL_MIN
    snapshot_path: Optional[str] = None

    def __post_init__(self) -> None:
        validate_snapshot_path(self.snapshot_path)

    @property
    def interval_s(self) -> float:
        return self.interval_min * 60

    def to_snapshot(self) -> dict[str, Any]:
        data = asdict(self)
        data.pop("snapshot_path")
        return data

    @classmethod
    def from_snapshot(
        cls, data: Mapping[str, Any], snapshot_path: Optional[str] = None
    ) -> "RunConfig":
        threshold = data.get("deal_price_threshold")
        return cls(
            origin=data.get("origin"),
            destination=data.get("destination"),
            outbound_date=data.get("outbound_date"),
            return_date=data.get("return_date"),
            passengers=int(data.get("passengers") or 1),
            deal_price_threshold=int(threshold) if threshold is not None else None,
            interval_min=float(data.get("interval_min") or DEFAULT_INTERVAL_MIN),
            snapshot_path=snapshot_path,
        )


__all__ = [
    "Settings",
    "get_settings",
    "RunConfig",
    "validate_snapshot_path",
    "SNAPSHOT_SUFFIX",
]
