"""
Commit history model and log parsing.

:mod:`vc_history_reader.history.model` defines the commit and change
value objects, :mod:`vc_history_reader.history.results` the result
objects returned by VCS commands, and
:mod:`vc_history_reader.history.log_parser` turns log output into commits.
"""

from .log_parser import LogFormatError, parse_changes, parse_commits  # noqa: F401
from .model import NO_FILE_PATH, NO_REVISION, Change, ChangeType, Commit  # noqa: F401
from .results import LogFileContentResult, LogResult, VcsError  # noqa: F401
