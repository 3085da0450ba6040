"""Validated application configuration models."""

from __future__ import annotations

import math
import re
from datetime import timedelta
from typing import Final

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

DEFAULT_INTERVAL: Final = timedelta(hours=12)
DEFAULT_DISTANCE: Final = 10

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS: Final = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: object) -> timedelta:
    """Parse a duration such as ``12h``, ``1h30m``, ``45s`` or a number of seconds."""

    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)
    if not isinstance(value, str):
        raise ValueError(f"invalid duration: {value!r}")

    raw = value.strip()
    if not raw:
        raise ValueError("duration must not be empty")
    try:
        plain_seconds = float(raw)
    except ValueError:
        plain_seconds = None
    if plain_seconds is not None:
        if not math.isfinite(plain_seconds):
            raise ValueError(f"invalid duration: {value!r}")
        return timedelta(seconds=plain_seconds)

    seconds = 0.0
    position = 0
    for match in _DURATION_PART.finditer(raw):
        if match.start() != position:
            raise ValueError(f"invalid duration: {value!r}")
        seconds += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()
    if position != len(raw):
        raise ValueError(f"invalid duration: {value!r}")
    return timedelta(seconds=seconds)


def format_duration(value: timedelta) -> str:
    """Render a duration the way it is written in config files."""

    total = int(value.total_seconds())
    if total <= 0 or total != value.total_seconds():
        return f"{value.total_seconds()}s"
    hours, remainder = divmod(total, 3600)
    minutes, seconds = divmod(remainder, 60)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds:
        parts.append(f"{seconds}s")
    return "".join(parts)


class NotificationSinkConfig(BaseModel):
    """One notification destination of a subscriber."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    type: str
    endpoint: str = ""
    credential: dict[str, str] = Field(default_factory=dict)
    condense: bool = False

    @field_validator("type")
    @classmethod
    def _normalize_type(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError("notification type must not be empty")
        return normalized

    @field_validator("credential", mode="before")
    @classmethod
    def _default_credential(cls, value: object) -> object:
        return {} if value is None else value


class SubscriberConfig(BaseModel):
    """Search preferences and notification sinks for one subscriber."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    name: str
    items: list[str]
    zipcode: str
    distance: int = DEFAULT_DISTANCE
    notifications: list[NotificationSinkConfig] = Field(default_factory=list)

    @field_validator("name", "zipcode")
    @classmethod
    def _require_text(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("must not be empty")
        return stripped

    @field_validator("items", mode="before")
    @classmethod
    def _parse_items(cls, value: object) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, list):
            return [str(item).strip() for item in value if str(item).strip()]
        raise ValueError("items must be a comma-separated string or list")

    @field_validator("items")
    @classmethod
    def _require_items(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one item to search for is required")
        return value

    @field_validator("distance")
    @classmethod
    def _require_positive_distance(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("distance must be a positive number of miles")
        return value

    @field_validator("notifications", mode="before")
    @classmethod
    def _default_notifications(cls, value: object) -> object:
        return [] if value is None else value


class AppConfig(BaseModel):
    """Global settings plus every configured subscriber."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    interval: timedelta = DEFAULT_INTERVAL
    user_agent: str = ""
    verbose: bool = False
    subscribers: list[SubscriberConfig] = Field(
        default_factory=list,
        validation_alias=AliasChoices("users", "subscribers"),
    )

    @field_validator("interval", mode="before")
    @classmethod
    def _parse_interval(cls, value: object) -> timedelta:
        if value is None or value == "":
            return DEFAULT_INTERVAL
        return parse_duration(value)

    @field_validator("interval")
    @classmethod
    def _require_positive_interval(cls, value: timedelta) -> timedelta:
        if value.total_seconds() <= 0:
            raise ValueError("interval must be a positive duration")
        return value

    @field_validator("user_agent", mode="before")
    @classmethod
    def _default_user_agent(cls, value: object) -> object:
        return "" if value is None else value

    @model_validator(mode="after")
    def _validate_subscribers(self) -> "AppConfig":
        if not self.subscribers:
            raise ValueError("at least one user must be configured")

        seen: set[str] = set()
        for subscriber in self.subscribers:
            if subscriber.name in seen:
                raise ValueError(
                    f"user '{subscriber.name}' is configured more than once"
                )
            seen.add(subscriber.name)
        return self
