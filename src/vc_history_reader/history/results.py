"""
Result objects returned by VCS commands.

Commands never raise for expected failures. Instead they return one of
these objects and callers check ``is_successful`` before trusting the
data.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, List, Optional

from vc_history_reader.history.model import Commit


class VcsError(Exception):
    """Raised (or stored) when a VCS tool reports an error on stderr."""

    pass


@dataclass
class LogResult:
    """Commits read from one or more roots plus any errors encountered.

    Attributes
    ----------
    commits : List[Commit]
        Parsed commits. Ordered by commit date once aggregated.
    vcs_errors : List[str]
        Error text printed by the VCS tool.
    exceptions : List[Exception]
        Internal failures such as a process that could not be started or
        output that could not be parsed.
    """

    commits: List[Commit] = field(default_factory=list)
    vcs_errors: List[str] = field(default_factory=list)
    exceptions: List[Exception] = field(default_factory=list)

    @classmethod
    def from_exception(cls, exc: Exception) -> "LogResult":
        return cls(exceptions=[exc])

    @property
    def is_successful(self) -> bool:
        return not self.vcs_errors and not self.exceptions

    def aggregate_with(self, other: "LogResult") -> "LogResult":
        """Combine two results, keeping commits sorted by commit date."""
        commits = sorted(self.commits + other.commits, key=lambda commit: commit.commit_date)
        return LogResult(
            commits=commits,
            vcs_errors=self.vcs_errors + other.vcs_errors,
            exceptions=self.exceptions + other.exceptions,
        )

    def with_vcs_root(self, vcs_root: Any) -> "LogResult":
        commits = [replace(commit, vcs_root=vcs_root) for commit in self.commits]
        return LogResult(commits=commits, vcs_errors=list(self.vcs_errors), exceptions=list(self.exceptions))

    def __str__(self) -> str:
        return (
            f"LogResult(commits={len(self.commits)}, vcs_errors={len(self.vcs_errors)}, "
            f"exceptions={len(self.exceptions)})"
        )


@dataclass
class LogFileContentResult:
    """Content of a single file at a given revision."""

    text: str = ""
    exit_code: int = 0
    exception: Optional[Exception] = None

    @classmethod
    def from_vcs_error(cls, stderr: str, exit_code: int) -> "LogFileContentResult":
        return cls(text="", exit_code=exit_code, exception=VcsError(stderr))

    @property
    def is_successful(self) -> bool:
        return self.exception is None and self.exit_code == 0
