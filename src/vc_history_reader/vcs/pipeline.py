"""
Log extraction pipeline shared by the VCS clients.

A log command runs the VCS tool, parses its output and optionally
post-processes the commits (rename resolution for git). A file content
command prints one file at one revision. Every expected
failure is turned into a :class:`LogResult`; nothing here raises for a
bad exit code or unreadable output.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, List, Optional, Protocol, TypeVar, runtime_checkable

from vc_history_reader.history.log_parser import LogFormatError
from vc_history_reader.history.model import Commit
from vc_history_reader.history.results import LogFileContentResult, LogResult
from vc_history_reader.process.runner import ProcessRunner


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


T = TypeVar("T", covariant=True)


@runtime_checkable
class VcsCommand(Protocol[T]):
    """A runnable VCS command producing a result object."""

    def execute(self) -> T:
        ...

    def describe(self) -> str:
        ...


@runtime_checkable
class LogSource(Protocol):
    """A repository that can build a dated log command."""

    def log(self, from_date: datetime, to_date: datetime) -> VcsCommand[LogResult]:
        ...


def run_log_command(
    runner: ProcessRunner,
    parse: Callable[[str], List[Commit]],
    resolve: Optional[Callable[[List[Commit]], List[Commit]]] = None,
) -> LogResult:
    """Execute ``runner`` and turn its output into a :class:`LogResult`.

    Parameters
    ----------
    runner : ProcessRunner
        The primary log command.
    parse : Callable[[str], List[Commit]]
        Converts stdout into commits; may raise :class:`LogFormatError`.
    resolve : Callable, optional
        Post-processing applied to the parsed commits.
    """
    result = runner.execute()
    if result.failure is not None:
        return LogResult.from_exception(result.failure)
    if result.exit_code != 0:
        logger.error("Log command failed: %s\nSTDERR: %s", runner.describe(), result.stderr)
        return LogResult(vcs_errors=[result.stderr])

    try:
        commits = parse(result.stdout)
    except LogFormatError as exc:
        logger.error("Failed to parse output of %s: %s", runner.describe(), exc)
        return LogResult.from_exception(exc)
    if resolve is not None:
        commits = resolve(commits)

    errors = []
    if result.stderr.strip():
        logger.warning("Log command %s reported: %s", runner.describe(), result.stderr.strip())
        errors.append(result.stderr)
    return LogResult(commits=commits, vcs_errors=errors)


def run_file_content_command(runner: ProcessRunner) -> LogFileContentResult:
    """Execute a "print file at revision" command."""
    result = runner.execute()
    if result.failure is not None:
        return LogFileContentResult(exception=result.failure)
    if result.exit_code != 0:
        logger.error("File content command failed: %s\nSTDERR: %s", runner.describe(), result.stderr)
        return LogFileContentResult.from_vcs_error(result.stderr, result.exit_code)
    return LogFileContentResult(text=trim_last_newline(result.stdout))


def trim_last_newline(text: str) -> str:
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith(("\n", "\r")):
        return text[:-1]
    return text


def extract_log(client: LogSource, from_date: datetime, to_date: datetime) -> LogResult:
    """Read commits between ``from_date`` and ``to_date`` from a repository.

    ``client`` is a :class:`~vc_history_reader.vcs.git_client.GitClient` or
    :class:`~vc_history_reader.vcs.hg_client.HgClient`. The returned commits
    carry the client as their ``vcs_root``.
    """
    command: VcsCommand[LogResult] = client.log(from_date, to_date)
    logger.debug("Extracting log: %s", command.describe())
    return command.execute().with_vcs_root(client)
