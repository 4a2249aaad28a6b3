"""
Configuration loader for vc_history_reader.

Settings are read from a JSON file named ``config.json`` located in the
``~/.vc_history_reader/`` directory, or from an explicit path. Every key
is optional; a missing default file simply yields the defaults. A file
that cannot be parsed, or a key of the wrong type, raises
:class:`ConfigError`.
"""

from __future__ import annotations

import codecs
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from vc_history_reader.process.config import DEFAULT_CONFIG, RunnerConfig


logger = logging.getLogger(__name__)
# Attach a null handler to avoid "No handler" warnings in environments where
# the root logger is not configured. The CLI configures logging explicitly.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


CONFIG_FILE_NAME = "config.json"

DEFAULTS: Dict[str, Any] = {
    "git_path": "git",
    "hg_path": "hg",
    "svn_path": "svn",
    "charset_auto_detect": DEFAULT_CONFIG.charset_auto_detect,
    "output_charset": DEFAULT_CONFIG.output_charset,
    "stdout_buffer_size": DEFAULT_CONFIG.stdout_buffer_size,
    "stderr_buffer_size": DEFAULT_CONFIG.stderr_buffer_size,
    "max_charset_sample_size": DEFAULT_CONFIG.max_charset_sample_size,
    "kill_poll_interval": DEFAULT_CONFIG.kill_poll_interval,
    "kill_timeout": DEFAULT_CONFIG.kill_timeout,
    "rename_workers": 1,
}

_STRING_KEYS = ("git_path", "hg_path", "svn_path", "output_charset")
_POSITIVE_INT_KEYS = ("stdout_buffer_size", "stderr_buffer_size", "max_charset_sample_size", "rename_workers")
_POSITIVE_NUMBER_KEYS = ("kill_poll_interval", "kill_timeout")


class ConfigError(Exception):
    """Raised when the configuration file is missing or invalid."""

    pass


def _get_config_directory() -> Path:
    """Return the user-specific configuration directory ``~/.vc_history_reader/``."""
    return Path.home() / ".vc_history_reader"


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load settings and merge them over :data:`DEFAULTS`.

    Args:
        path: Explicit configuration file. When given it must exist.
              When omitted, ``~/.vc_history_reader/config.json`` is read
              if present.

    Returns:
        A dictionary containing every key of :data:`DEFAULTS`.

    Raises:
        ConfigError: If the file is missing (explicit path only), is not
            valid JSON, or contains values of the wrong type.
    """
    if path is None:
        config_path = _get_config_directory() / CONFIG_FILE_NAME
        if not config_path.exists():
            logger.debug("No configuration file at %s, using defaults", config_path)
            return dict(DEFAULTS)
    else:
        config_path = Path(path)
        if not config_path.exists():
            logger.error("Configuration file '%s' does not exist", config_path)
            raise ConfigError(f"Missing configuration file: {config_path}")

    try:
        content = config_path.read_text(encoding="utf-8")
        data = json.loads(content)
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Failed to read or parse configuration file: %s", exc)
        raise ConfigError(f"Invalid JSON in {config_path.name}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{config_path.name} must contain a JSON object")

    _validate(data)
    settings = dict(DEFAULTS)
    settings.update(data)
    logger.debug("Loaded configuration from: %s", config_path)
    return settings


def _validate(data: Dict[str, Any]) -> None:
    unknown = sorted(set(data) - set(DEFAULTS))
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    for key in _STRING_KEYS:
        if key in data and not isinstance(data[key], str):
            raise ConfigError(f"'{key}' must be a string")
    if "charset_auto_detect" in data and not isinstance(data["charset_auto_detect"], bool):
        raise ConfigError("'charset_auto_detect' must be a boolean")
    for key in _POSITIVE_INT_KEYS:
        if key in data:
            value = data[key]
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(f"'{key}' must be a positive integer")
    for key in _POSITIVE_NUMBER_KEYS:
        if key in data:
            value = data[key]
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ConfigError(f"'{key}' must be a positive number")

    if "output_charset" in data:
        try:
            codecs.lookup(data["output_charset"])
        except LookupError as exc:
            raise ConfigError(f"Unknown output charset: {data['output_charset']}") from exc


def runner_config_from(settings: Dict[str, Any]) -> RunnerConfig:
    """Build a :class:`RunnerConfig` from loaded settings."""
    return (
        DEFAULT_CONFIG
        .with_charset_auto_detect(settings["charset_auto_detect"])
        .with_output_charset(settings["output_charset"])
        .with_buffer_sizes(settings["stdout_buffer_size"], settings["stderr_buffer_size"])
        .with_max_charset_sample_size(settings["max_charset_sample_size"])
        .with_kill_polling(settings["kill_poll_interval"], settings["kill_timeout"])
    )
