"""
External process execution.

Contains the :class:`ProcessRunner` used to invoke VCS command line tools,
its immutable :class:`RunnerConfig`, and the charset helpers used to decode
their output.
"""

from .charset import decode_output, detect_charset  # noqa: F401
from .config import DEFAULT_CONFIG, RunnerConfig  # noqa: F401
from .runner import (  # noqa: F401
    EXIT_CODE_BEFORE_FINISHED,
    ExecutionResult,
    ProcessFailure,
    ProcessRunner,
)
