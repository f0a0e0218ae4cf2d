"""
Connection settings loading.

Settings are resolved with the following precedence:
explicit arguments, then ``RSTOOLS_*`` environment variables, then the YAML
config file, then the model defaults.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Final

from pydantic import ValidationError as PydanticValidationError
from ruamel.yaml import YAML

from .exceptions import ConfigurationError
from .models import ConnectionSettings, Credentials

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR: Final[str] = "RSTOOLS_CONFIG"
DEFAULT_CONFIG_FILE: Final[Path] = Path("~/.rstools.yaml")

_ENV_URI: Final[str] = "RSTOOLS_REPORT_SERVER_URI"
_ENV_USERNAME: Final[str] = "RSTOOLS_USERNAME"
_ENV_PASSWORD: Final[str] = "RSTOOLS_PASSWORD"
_ENV_DOMAIN: Final[str] = "RSTOOLS_DOMAIN"

_yaml_parser = YAML(typ="safe")  # safe loader, YAML 1.2


def default_config_path() -> Path:
    """Return the config file path, honouring ``RSTOOLS_CONFIG``."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return DEFAULT_CONFIG_FILE.expanduser()


def read_config_file(path: str | Path) -> dict[str, Any]:
    """
    Read a YAML config file into a dict.

    A missing file is not an error and yields an empty mapping.

    Raises:
        ConfigurationError: If the file cannot be read or parsed, or its
            top-level object is not a mapping.
    """
    file_path = Path(path)

    if not file_path.exists():
        logger.debug("Config file not found, using defaults: %s", file_path)
        return {}

    try:
        raw_text = file_path.read_text(encoding="utf-8")
        data = _yaml_parser.load(raw_text)
    except Exception as exc:
        raise ConfigurationError(
            f"Cannot parse {file_path.name}: {exc}", config_file=str(file_path)
        ) from exc

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigurationError(
            "Top-level object must be a mapping", config_file=str(file_path)
        )

    logger.debug("Config file loaded (%d root keys)", len(data))
    return data


def _credentials_from_env() -> dict[str, Any] | None:
    username = os.environ.get(_ENV_USERNAME)
    if not username:
        return None
    return {
        "username": username,
        "password": os.environ.get(_ENV_PASSWORD, ""),
        "domain": os.environ.get(_ENV_DOMAIN) or None,
    }


def load_settings(
    config_file: str | Path | None = None,
    report_server_uri: str | None = None,
    credentials: Credentials | None = None,
) -> ConnectionSettings:
    """
    Build the connection settings for one command invocation.

    Args:
        config_file: YAML file to read. Defaults to ``default_config_path()``.
        report_server_uri: Explicit server URI, overrides every other source.
        credentials: Explicit credentials, override every other source.

    Returns:
        Validated ConnectionSettings

    Raises:
        ConfigurationError: If the file is unreadable or the merged values
            do not validate.
    """
    path = Path(config_file) if config_file else default_config_path()
    values = read_config_file(path)

    env_uri = os.environ.get(_ENV_URI)
    if env_uri:
        values["report_server_uri"] = env_uri

    env_credentials = _credentials_from_env()
    if env_credentials:
        values["credentials"] = env_credentials

    if report_server_uri:
        values["report_server_uri"] = report_server_uri

    if credentials is not None:
        values["credentials"] = credentials

    try:
        settings = ConnectionSettings.model_validate(values)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid connection settings: {e}", config_file=str(path)
        ) from e

    logger.debug(f"Resolved report server URI: {settings.report_server_uri}")
    return settings
