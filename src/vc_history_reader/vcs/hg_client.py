"""
Mercurial (hg) client implementation for vc_history_reader.

``hg log`` is driven with a template that prints the same record and
field separators as the git log format, so both share
:func:`~vc_history_reader.history.log_parser.parse_commits`. Mercurial
reports copies separately from adds, so no rename resolution is done.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from functools import partial
from pathlib import Path
from typing import List, Optional

from vc_history_reader.history.log_parser import parse_commits
from vc_history_reader.history.results import LogFileContentResult, LogResult
from vc_history_reader.process.config import DEFAULT_CONFIG, RunnerConfig
from vc_history_reader.process.runner import ProcessRunner
from vc_history_reader.vcs.pipeline import run_file_content_command, run_log_command


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


NULL_NODE = "0" * 40


def log_template() -> str:
    # see 'hg help templates'; escapes are expanded by hg itself
    record_separator = r"\x11\x12\x13\n"
    field_separator = r"\x10\x11\x12\n"
    changes = (
        r"{file_adds % 'A\t{file}\n'}"
        r"{file_mods % 'M\t{file}\n'}"
        r"{file_dels % 'D\t{file}\n'}"
    )
    return (
        record_separator
        + "{node}" + field_separator
        + "{p1node} {p2node}" + field_separator
        + "{date|hgdate}" + field_separator
        + "{author|person}" + field_separator
        + "{desc}" + field_separator
        + changes
    )


def _as_hg_date(date: datetime) -> str:
    # see 'hg help dates': "<seconds since epoch> <utc offset>"
    return f"{int(date.timestamp()) - 1} 0"


class HgClient:
    """Client for reading history from a Mercurial repository."""

    def __init__(self, repo_root: Path, hg_path: str = "hg", config: RunnerConfig = DEFAULT_CONFIG) -> None:
        self.repo_root = repo_root
        self.hg_path = hg_path
        self.config = config.with_working_dir(repo_root)

    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Walk upwards from ``start`` until a ``.hg`` directory is found."""
        current = start.resolve()
        while True:
            if (current / ".hg").exists():
                return current
            if current.parent == current:
                return None
            current = current.parent

    def _runner(self, args: List[str], config: Optional[RunnerConfig] = None) -> ProcessRunner:
        return ProcessRunner([self.hg_path] + args, config or self.config)

    def log(self, from_date: datetime, to_date: datetime) -> "HgLog":
        return HgLog(self, from_date, to_date)

    def log_file_content(self, file_path: str, revision: str, charset: Optional[str] = None) -> "HgLogFileContent":
        return HgLogFileContent(self, file_path, revision, charset)

    def log_command(self, from_date: datetime, to_date: datetime) -> ProcessRunner:
        date_range = f'date("{_as_hg_date(from_date)} to {_as_hg_date(to_date)}")'
        args = ["log", "--encoding", "UTF-8", "-r", date_range, "--template", log_template()]
        return self._runner(args, self.config.with_output_charset("utf-8"))

    def file_content_command(self, file_path: str, revision: str, charset: Optional[str] = None) -> ProcessRunner:
        config = self.config.with_output_charset(charset) if charset else self.config
        return self._runner(["cat", "-r", revision, file_path], config)

    def __repr__(self) -> str:
        return f"HgClient(repo_root={str(self.repo_root)!r}, hg_path={self.hg_path!r})"


@dataclass
class HgLog:
    """``hg log`` between two dates."""

    client: HgClient
    from_date: datetime
    to_date: datetime

    def execute(self) -> LogResult:
        return run_log_command(
            self.client.log_command(self.from_date, self.to_date),
            partial(parse_commits, ignored_parents=(NULL_NODE,)),
        )

    def describe(self) -> str:
        return self.client.log_command(self.from_date, self.to_date).describe()


@dataclass
class HgLogFileContent:
    """Content of one file at one revision (``hg cat -r rev path``)."""

    client: HgClient
    file_path: str
    revision: str
    charset: Optional[str] = None

    def execute(self) -> LogFileContentResult:
        return run_file_content_command(
            self.client.file_content_command(self.file_path, self.revision, self.charset)
        )

    def describe(self) -> str:
        return self.client.file_content_command(self.file_path, self.revision, self.charset).describe()
