"""Process settings loaded from environment variables and ``.env``."""

import json
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources.providers.dotenv import DotEnvSettingsSource
from pydantic_settings.sources.providers.env import EnvSettingsSource

# Fields that accept comma-separated strings in .env
_COMMA_LIST_FIELDS = frozenset({"items"})


class _CommaListSourceMixin:
    """Allow comma-separated values for list fields instead of requiring JSON."""

    def prepare_field_value(
        self, field_name: str, field: object, value: object, value_is_complex: bool
    ) -> object:
        if field_name in _COMMA_LIST_FIELDS and isinstance(value, str):
            try:
                parsed = json.loads(value)
            except (json.JSONDecodeError, ValueError):
                parsed = None
            if isinstance(parsed, list):
                return [str(v).strip() for v in parsed if str(v).strip()]
            return [v.strip() for v in value.split(",") if v.strip()]
        return super().prepare_field_value(field_name, field, value, value_is_complex)


class _Env(_CommaListSourceMixin, EnvSettingsSource):
    pass


class _DotEnv(_CommaListSourceMixin, DotEnvSettingsSource):
    pass


class Settings(BaseSettings):
    """Environment overrides applied on top of the YAML config file.

    Empty values mean "not set"; the YAML file (or the built-in default)
    then decides.
    """

    model_config = SettingsConfigDict(
        env_prefix="LIQUOR_RADAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    config_file: str = ""
    interval: str = ""
    user_agent: str = ""
    verbose: bool = False

    # Legacy single-user layout
    items: list[str] = Field(default_factory=list)
    zipcode: str = ""
    distance: int | None = Field(default=None, gt=0)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            _Env(settings_cls),
            _DotEnv(
                settings_cls,
                env_file=settings_cls.model_config.get("env_file", ".env"),
                env_file_encoding=settings_cls.model_config.get(
                    "env_file_encoding", "utf-8"
                ),
            ),
            file_secret_settings,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()
