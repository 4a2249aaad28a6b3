"""
Subversion (SVN) client implementation for vc_history_reader.

Only file contents are read from SVN: ``svn cat <url>/<path>@<revision>``
runs against the repository URL, so no working copy is needed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from vc_history_reader.history.results import LogFileContentResult
from vc_history_reader.process.config import DEFAULT_CONFIG, RunnerConfig
from vc_history_reader.process.runner import ProcessRunner
from vc_history_reader.vcs.pipeline import run_file_content_command


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class SVNClient:
    """Client for reading from an SVN repository URL."""

    def __init__(self, repository_url: str, svn_path: str = "svn", config: RunnerConfig = DEFAULT_CONFIG) -> None:
        self.repository_url = repository_url.rstrip("/")
        self.svn_path = svn_path
        self.config = config

    def log_file_content(self, file_path: str, revision: str, charset: Optional[str] = None) -> "SvnLogFileContent":
        return SvnLogFileContent(self, file_path, revision, charset)

    def file_content_command(self, file_path: str, revision: str, charset: Optional[str] = None) -> ProcessRunner:
        config = self.config.with_output_charset(charset) if charset else self.config
        target = f"{self.repository_url}/{file_path}@{revision}"
        return ProcessRunner([self.svn_path, "cat", target], config)

    def __repr__(self) -> str:
        return f"SVNClient(repository_url={self.repository_url!r}, svn_path={self.svn_path!r})"


@dataclass
class SvnLogFileContent:
    """Content of one file at one revision (``svn cat url/path@rev``)."""

    client: SVNClient
    file_path: str
    revision: str
    charset: Optional[str] = None

    def execute(self) -> LogFileContentResult:
        return run_file_content_command(
            self.client.file_content_command(self.file_path, self.revision, self.charset)
        )

    def describe(self) -> str:
        return self.client.file_content_command(self.file_path, self.revision, self.charset).describe()
