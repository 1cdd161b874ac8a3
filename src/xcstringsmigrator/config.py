import logging
import os
from typing import Any

import yaml

from xcstringsmigrator.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.yml"

DEFAULT_LOGGING = {
    "level": "WARNING",
    "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
    "datefmt": "%Y-%m-%d %H:%M:%S",
}


def load_config(config_folder: str) -> dict[str, Any]:
    """Loads config.yml from the given folder, falling back to defaults when absent."""
    config_file_path = os.path.abspath(os.path.join(config_folder, CONFIG_FILE_NAME))

    config: dict[str, Any] = {}
    try:
        with open(config_file_path, "r", encoding="utf-8") as file:
            config = yaml.safe_load(file) or {}
    except FileNotFoundError:
        logger.debug(f"{config_file_path} not found, using defaults")
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"invalid configuration file: {exc}") from exc

    if not isinstance(config, dict):
        raise ConfigurationError(f"invalid configuration file: {config_file_path}")

    logging_section = config.get("logging") or {}
    if not isinstance(logging_section, dict):
        raise ConfigurationError("invalid configuration file: logging must be a mapping")
    config["logging"] = {**DEFAULT_LOGGING, **logging_section}
    for key in ("format", "datefmt"):
        if not isinstance(config["logging"][key], str):
            raise ConfigurationError(f"invalid configuration file: logging.{key} must be a string")

    config.setdefault("commands", {})
    if not isinstance(config["commands"], dict):
        raise ConfigurationError("invalid configuration file: commands must be a mapping")
    return config


def configure_logging(config: dict[str, Any]) -> None:
    settings = config["logging"]
    level = logging.getLevelName(str(settings["level"]).upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"invalid configuration file: unknown level {settings['level']}")
    logging.basicConfig(
        level=level,
        format=settings["format"],
        datefmt=settings["datefmt"],
    )
