"""Loading ``config.yaml`` with environment variable placeholders."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.auth_api.runtime.config.config_data import ConfigData

PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")
DEFAULT_CONFIG_FILE = "config.yaml"


def _resolve_placeholder(match: re.Match[str]) -> str:
    expression = match.group(1)

    if ":-" in expression:
        name, default = expression.split(":-", 1)
        return os.getenv(name, default)

    if ":?" in expression:
        name, message = expression.split(":?", 1)
    else:
        name, message = expression, "not set"

    value = os.getenv(name)
    if value is None:
        raise ValueError(f"Required environment variable {name}: {message}")
    return value


def substitute_env_vars(text: str) -> str:
    """Replace ``${VAR}``, ``${VAR:-default}`` and ``${VAR:?message}`` in ``text``.

    Raises:
        ValueError: A required variable is not set
    """
    return PLACEHOLDER.sub(_resolve_placeholder, text)


def apply_environment_overrides(env_mode: str) -> None:
    """Copy ``<ENV>_FOO`` to ``FOO`` for the active environment, e.g. ``PRODUCTION_SMTP_HOST``."""
    prefix = f"{env_mode.upper()}_"
    overrides = {
        name[len(prefix):]: value
        for name, value in os.environ.items()
        if name.startswith(prefix)
    }
    if overrides:
        logger.info("Applying {} environment overrides: {}", env_mode, sorted(overrides))
    os.environ.update(overrides)


def load_templated_yaml(file_path: Path) -> ConfigData:
    """Read the ``config`` section of a YAML file into :class:`ConfigData`.

    Raises:
        ValueError: Missing required variables, unparsable YAML, invalid values,
            or a production configuration without a JWT secret
        FileNotFoundError: The file does not exist
    """
    env_mode = os.getenv("APP_ENVIRONMENT", "development")
    logger.info("Loading configuration {} for environment {}", file_path, env_mode)
    apply_environment_overrides(env_mode)

    raw = Path(file_path).read_text()
    try:
        document = yaml.safe_load(substitute_env_vars(raw))
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e
    if not document:
        raise ValueError(f"Configuration file {file_path} is empty")

    try:
        config = ConfigData(**(document.get("config") or {}))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    if config.app.environment == "production" and not config.jwt.secret:
        raise ValueError("jwt.secret must be configured in production")

    return config


def load_config(file_path: Path | None = None) -> ConfigData:
    """Load ``APP_CONFIG_FILE`` (default ``config.yaml``); defaults when it is absent."""
    path = file_path or Path(os.getenv("APP_CONFIG_FILE", DEFAULT_CONFIG_FILE))
    if not path.exists():
        logger.warning("Configuration file {} not found; using defaults", path)
        return ConfigData()
    return load_templated_yaml(path)
