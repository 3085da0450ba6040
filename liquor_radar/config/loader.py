"""Load the application config from YAML, environment, and ``.env``.

Priority, highest first:
1. Environment variables (``LIQUOR_RADAR_*``, including values from ``.env``)
2. YAML config file (explicit path, or ``config.yaml`` in the working directory)
3. Built-in defaults

A config without a ``users`` list but with top-level ``items``/``zipcode``/
``notifications`` is the legacy single-user layout and is migrated into one
user named ``default``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from liquor_radar.config.models import DEFAULT_DISTANCE, AppConfig
from liquor_radar.config.settings import Settings, get_settings
from liquor_radar.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path("config.yaml")
LEGACY_USER_NAME = "default"


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"failed to read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"failed to parse YAML config {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"config file {path} must contain a mapping")
    return data


def _resolve_config_path(config_file: str | Path | None) -> Path | None:
    if config_file:
        return Path(config_file)
    if DEFAULT_CONFIG_FILE.is_file():
        return DEFAULT_CONFIG_FILE
    return None


def merge_env_overrides(raw: dict[str, Any], settings: Settings) -> dict[str, Any]:
    """Overlay non-empty environment values onto the YAML mapping."""

    merged = dict(raw)
    if settings.interval:
        merged["interval"] = settings.interval
    if settings.user_agent:
        merged["user_agent"] = settings.user_agent
    if settings.verbose:
        merged["verbose"] = True
    if settings.items:
        merged["items"] = list(settings.items)
    if settings.zipcode:
        merged["zipcode"] = settings.zipcode
    if settings.distance is not None:
        merged["distance"] = settings.distance
    return merged


def is_legacy_layout(raw: dict[str, Any]) -> bool:
    """Legacy configs have search settings at the root and no users list."""

    if raw.get("users") or raw.get("subscribers"):
        return False
    return bool(raw.get("items") or raw.get("zipcode") or raw.get("notifications"))


def migrate_legacy_layout(raw: dict[str, Any]) -> dict[str, Any]:
    """Move root-level search settings into a single ``default`` user."""

    if not raw.get("items"):
        raise ConfigurationError("legacy configuration must have items specified")
    if not raw.get("zipcode"):
        raise ConfigurationError("legacy configuration must have zipcode specified")

    user = {
        "name": LEGACY_USER_NAME,
        "items": raw["items"],
        "zipcode": raw["zipcode"],
        "distance": raw.get("distance") or DEFAULT_DISTANCE,
        "notifications": raw.get("notifications") or [],
    }
    migrated = {
        key: raw[key] for key in ("interval", "user_agent", "verbose") if key in raw
    }
    migrated["users"] = [user]

    logger.info(
        "Migrated legacy configuration to multi-user format "
        f"with user '{LEGACY_USER_NAME}'"
    )
    return migrated


def _describe_validation_error(error: ValidationError) -> str:
    problems = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"])
        problems.append(f"{location}: {detail['msg']}" if location else detail["msg"])
    return "; ".join(problems)


def build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Validate a raw mapping, migrating the legacy layout first."""

    if is_legacy_layout(raw):
        raw = migrate_legacy_layout(raw)

    try:
        return AppConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(
            f"invalid configuration: {_describe_validation_error(e)}"
        ) from e


def load_app_config(
    config_file: str | Path | None = None,
    settings: Settings | None = None,
) -> AppConfig:
    """Load, merge, migrate, and validate the application configuration."""

    settings = settings or get_settings()
    path = _resolve_config_path(config_file or settings.config_file)

    raw: dict[str, Any] = {}
    if path is not None:
        logger.debug(f"Loading config file {path}")
        raw = _read_yaml(path)

    return build_app_config(merge_env_overrides(raw, settings))
