"""
Git client implementation for vc_history_reader.

This module builds the git command lines used to read history: a dated
``git log`` in the separator format understood by
:mod:`vc_history_reader.history.log_parser`, ``git show`` for rename
resolution, and ``git show <revision>:<path>`` for file contents. The
commands are executed through :class:`ProcessRunner` so that unit tests
can replace it easily.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from vc_history_reader.history.log_parser import parse_commits
from vc_history_reader.history.results import LogFileContentResult, LogResult
from vc_history_reader.process.config import DEFAULT_CONFIG, RunnerConfig
from vc_history_reader.process.runner import ProcessRunner
from vc_history_reader.vcs.pipeline import run_file_content_command, run_log_command
from vc_history_reader.vcs.renames import RenameResolver


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs will propagate to the root when configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


def log_format() -> str:
    # see "PRETTY FORMATS" at https://git-scm.com/docs/git-log
    commit_hash = "%H"
    parent_hashes = "%P"
    commit_date = "%ct"
    author_name = "%an"
    raw_body = "%s%n%n%-b"

    record_separator = "%x11%x12%x13%n"
    field_separator = "%x10%x11%x12%n"

    return (
        "--pretty=format:"
        + record_separator
        + commit_hash + field_separator
        + parent_hashes + field_separator
        + commit_date + field_separator
        + author_name + field_separator
        + raw_body + field_separator
    )


class GitClient:
    """Client for reading history from a Git repository."""

    def __init__(
        self,
        repo_root: Path,
        git_path: str = "git",
        config: RunnerConfig = DEFAULT_CONFIG,
        rename_workers: int = 1,
    ) -> None:
        self.repo_root = repo_root
        self.git_path = git_path
        self.config = config.with_working_dir(repo_root)
        self.rename_workers = rename_workers

    # ------------------------------------------------------------------
    # Static helpers
    # ------------------------------------------------------------------
    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Find the root of the Git repository starting from ``start``.

        Walk upwards until a ``.git`` directory is found or the filesystem
        root is reached.
        """
        current = start.resolve()
        while True:
            if (current / ".git").exists():
                return current
            if current.parent == current:
                return None
            current = current.parent

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def _runner(self, args: List[str], config: Optional[RunnerConfig] = None) -> ProcessRunner:
        return ProcessRunner([self.git_path] + args, config or self.config)

    def log(self, from_date: datetime, to_date: datetime) -> "GitLog":
        return GitLog(self, from_date, to_date)

    def log_file_content(self, file_path: str, revision: str, charset: Optional[str] = None) -> "GitLogFileContent":
        return GitLogFileContent(self, file_path, revision, charset)

    def log_command(self, from_date: datetime, to_date: datetime) -> ProcessRunner:
        after = f"--after={int(from_date.timestamp())}"
        before = f"--before={int(to_date.timestamp())}"
        # see --diff-filter at https://git-scm.com/docs/git-log
        show_file_status = "--name-status"
        return self._runner(["log", log_format(), after, before, show_file_status, "--encoding=UTF-8"])

    def renames_command(self, revision: str) -> ProcessRunner:
        return self._runner(["show", "-M", "--pretty=format:", "--name-status", revision])

    def file_content_command(self, file_path: str, revision: str, charset: Optional[str] = None) -> ProcessRunner:
        config = self.config.with_output_charset(charset) if charset else self.config
        return self._runner(["show", f"{revision}:{file_path}"], config)

    def __repr__(self) -> str:
        return f"GitClient(repo_root={str(self.repo_root)!r}, git_path={self.git_path!r})"


@dataclass
class GitLog:
    """``git log`` between two dates, with renames resolved."""

    client: GitClient
    from_date: datetime
    to_date: datetime

    def execute(self) -> LogResult:
        resolver = RenameResolver(self.client.renames_command, max_workers=self.client.rename_workers)
        return run_log_command(
            self.client.log_command(self.from_date, self.to_date),
            parse_commits,
            resolver.resolve_all,
        )

    def describe(self) -> str:
        return self.client.log_command(self.from_date, self.to_date).describe()


@dataclass
class GitLogFileContent:
    """Content of one file at one revision (``git show rev:path``)."""

    client: GitClient
    file_path: str
    revision: str
    charset: Optional[str] = None

    def execute(self) -> LogFileContentResult:
        return run_file_content_command(
            self.client.file_content_command(self.file_path, self.revision, self.charset)
        )

    def describe(self) -> str:
        return self.client.file_content_command(self.file_path, self.revision, self.charset).describe()
