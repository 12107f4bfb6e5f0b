"""Runtime settings and the per-user config store."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

import structlog
import tomlkit
from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from tomlkit.exceptions import TOMLKitError

from lb.models import CompleteConfig, RawConfig

logger = structlog.get_logger(__name__)

NAMESPACE = "lb"
CONFIG_FILENAME = "default-config.toml"


class LbSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    config_dir: Path = Path.home() / ".config"  # root of the config store

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.strip().upper() if isinstance(value, str) else value


@lru_cache(maxsize=1)
def get_settings() -> LbSettings:
    return LbSettings()


class ConfigStoreError(RuntimeError):
    """The config file could not be read, parsed or written."""


def config_path(namespace: str = NAMESPACE) -> Path:
    """Return the config file location for namespace, e.g. ~/.config/lb/default-config.toml."""
    return get_settings().config_dir.expanduser() / namespace / CONFIG_FILENAME


def load_config(namespace: str = NAMESPACE) -> RawConfig:
    """Load the stored config, returning an empty RawConfig if there is no file yet.

    Raises ConfigStoreError if the file exists but is unreadable, is not TOML,
    or holds values of the wrong type.
    """
    path = config_path(namespace)
    if not path.exists():
        logger.debug("config file missing, using empty config", path=str(path))
        return RawConfig()

    try:
        doc = tomlkit.parse(path.read_text(encoding="utf-8"))
        raw = RawConfig.model_validate(doc.unwrap())
    except (OSError, TOMLKitError, ValidationError) as exc:
        raise ConfigStoreError(f"Could not load config from {path}: {exc}") from exc

    logger.debug("loaded config", path=str(path))
    return raw


def store_config(raw: RawConfig, namespace: str = NAMESPACE) -> Path:
    """Write raw to the config file, creating parent directories. Returns the path written.

    Missing fields are left out of the file; the token is stored in cleartext,
    so the file is kept readable by its owner only.
    """
    path = config_path(namespace)

    values = raw.model_dump(exclude_none=True)
    if raw.gl_token is not None:
        values["gl_token"] = raw.gl_token.get_secret_value()

    doc = tomlkit.document()
    for key, value in values.items():
        doc.add(key, value)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(mode=0o600, exist_ok=True)
        path.chmod(0o600)
        path.write_text(tomlkit.dumps(doc), encoding="utf-8")
    except OSError as exc:
        raise ConfigStoreError(f"Could not write config to {path}: {exc}") from exc

    logger.info("stored config", path=str(path), fields=sorted(values))
    return path


def validate_config(raw: RawConfig) -> CompleteConfig | None:
    """Promote raw to a CompleteConfig, or return None if any field is missing."""
    try:
        return CompleteConfig.model_validate(raw.model_dump())
    except ValidationError:
        return None
