import logging
import os
import sys
from pathlib import Path
from typing import Any

import pydantic
import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from lending.domain.shared.error import ConfigurationError

SECONDS_PER_DAY = 24 * 60 * 60
CONFIG_FILE_ENV = "LENDING_CONFIG_FILE"
LOG_FILE_ENV = "LENDING_LOG_FILE"

_NOISY_LOGGERS = ("asyncio", "aiosqlite", "sqlalchemy.engine", "sqlalchemy.pool")


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Settings read from the YAML file named by LENDING_CONFIG_FILE.

    A missing variable or a missing file contributes nothing. A file that
    exists but does not parse to a mapping is a ConfigurationError.
    """

    def __init__(self, settings_cls: type[BaseSettings]) -> None:
        super().__init__(settings_cls)
        self._data = self._read(os.environ.get(CONFIG_FILE_ENV))

    @staticmethod
    def _read(location: str | None) -> dict[str, Any]:
        if not location:
            return {}
        path = Path(location).expanduser()
        if not path.is_file():
            return {}
        try:
            data = yaml.safe_load(path.read_text())
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Cannot parse {path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a mapping at the top level")
        return data

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return {key: value for key, value in self._data.items() if value is not None}


class DatabaseConfig(BaseModel):
    url: str = "sqlite+aiosqlite:///~/.local/share/lending/lending.db"
    echo: bool = False
    auto_create: bool = True  # create_all on startup


class LendingRules(BaseModel):
    """Loan and penalty windows, in whole days."""

    loan_days: int = Field(default=15, gt=0)
    penalty_days: int = Field(default=7, gt=0)

    @property
    def loan_period(self) -> int:
        return self.loan_days * SECONDS_PER_DAY

    @property
    def penalty_period(self) -> int:
        return self.penalty_days * SECONDS_PER_DAY


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    file: str | None = Field(default_factory=lambda: os.environ.get(LOG_FILE_ENV))


class Config(BaseSettings):
    """Ledger settings.

    Sources, highest priority first: constructor arguments, LENDING_*
    environment variables (nested with ``__``, e.g. LENDING_DATABASE__URL),
    a ``.env`` file, then the YAML file named by LENDING_CONFIG_FILE.
    """

    database: DatabaseConfig = DatabaseConfig()
    lending: LendingRules = LendingRules()
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="LENDING_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
        )


def load_config(**overrides: Any) -> Config:
    """Build a Config, reporting bad values as ConfigurationError."""
    try:
        return Config(**overrides)
    except pydantic.ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _log_handler(config: LoggingConfig) -> logging.Handler:
    if not config.file:
        return logging.StreamHandler(sys.stderr)
    path = Path(config.file).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path)


def configure_logging(config: LoggingConfig) -> None:
    """Route all log records to stderr, or to LENDING_LOG_FILE when set.

    Replaces any handlers already on the root logger, so calling it again
    reconfigures rather than duplicates output.
    """
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)

    handler = _log_handler(config)
    handler.setFormatter(logging.Formatter(config.format, datefmt=config.date_format))
    root.addHandler(handler)
    root.setLevel(config.level.upper())

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        "Logging configured: level=%s file=%s", config.level, config.file
    )
