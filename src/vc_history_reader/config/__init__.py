"""
Configuration loading for vc_history_reader.

Provides a loader for the optional user configuration file. See
:mod:`vc_history_reader.config.loader` for implementation details.
"""

from .loader import ConfigError, load_config, runner_config_from  # noqa: F401
