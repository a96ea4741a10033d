"""
Common configuration settings used throughout the application.

This module contains the settings shared by every part of shrinkpass: logging,
report file names and the loading of user-specific configuration from an
external YAML file, so that tool locations and encode parameters can be
customized without modifying the source code.
"""
from pathlib import Path
from typing import Any, Dict

import yaml
from loguru import logger

# --- User-Defined Configuration ---
# An optional 'config.user.yaml' located at the project root. Its 'paths'
# section locates external tools and its 'encode' section overrides the
# defaults in `config.video`.

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
USER_CONFIG_PATH = PROJECT_ROOT / "config.user.yaml"


def load_user_config(config_path: Path = USER_CONFIG_PATH) -> Dict[str, Any]:
    """
    Reads the user configuration YAML file.

    A missing file is not an error: the application then relies on the system
    PATH for executables and on the built-in encode defaults.

    Args:
        config_path: The YAML file to read.

    Returns:
        The parsed mapping, or an empty dict when the file is missing,
        empty or unreadable.
    """
    if not config_path.is_file():
        logger.debug(f"User config '{config_path}' not found. Using defaults.")
        return {}
    try:
        with config_path.open("r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load or parse '{config_path}': {e}")
        return {}
    if not isinstance(user_config, dict):
        if user_config is not None:
            logger.warning(f"'{config_path}' does not contain a mapping. Ignoring it.")
        return {}
    return user_config


# --- Logging Configuration ---

# The format string for the Loguru logger.
LOGGER_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{process} - <level>{message}</level>"
)

# Length of the random token appended to job identifiers.
RANDOM_TOKEN_LENGTH = 8


# --- Report Files ---
# Written into the target directory unless `write_reports` is disabled.

# YAML report of every committed file.
SUCCESS_LOG_NAME = "shrinkpass_log.yaml"

# Plain text report of every failed file, with the ffmpeg command and stderr.
ERROR_LOG_NAME = "shrinkpass_error.txt"
