"""
Rename resolution for commits read from git log.

The primary log command can report a renamed file as an unrelated
deletion plus addition. For every commit that contains both, a secondary
command with rename detection enabled is run against that single
revision, and its change list replaces the original one.

This is a best-effort enrichment: when the secondary command fails the
commit keeps its original changes.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Callable, Iterable, List

from vc_history_reader.history.log_parser import LogFormatError, parse_changes
from vc_history_reader.history.model import ChangeType, Commit
from vc_history_reader.process.runner import ProcessRunner


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


def has_potential_renames(commit: Commit) -> bool:
    """Return True if the commit both deletes and adds files."""
    types = {change.type for change in commit.changes}
    return ChangeType.DELETED in types and ChangeType.NEW in types


class RenameResolver:
    """Re-read the changes of commits that may contain renames.

    Parameters
    ----------
    command_for_revision : Callable[[str], ProcessRunner]
        Builds the secondary command for a revision, e.g.
        ``git show -M --pretty=format: --name-status <revision>``.
    max_workers : int, optional
        Number of commits resolved in parallel by :meth:`resolve_all`.
    """

    def __init__(self, command_for_revision: Callable[[str], ProcessRunner], max_workers: int = 1) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, was {max_workers}")
        self.command_for_revision = command_for_revision
        self.max_workers = max_workers

    def resolve(self, commit: Commit) -> Commit:
        if not has_potential_renames(commit):
            return commit

        runner = self.command_for_revision(commit.revision)
        result = runner.execute()
        if not result.succeeded:
            logger.warning(
                "Could not resolve renames in %s (exit code %s): %s",
                commit.revision,
                result.exit_code,
                result.failure or result.stderr.strip(),
            )
            return commit
        try:
            changes = parse_changes(result.stdout, commit.revision, commit.revision_before)
        except LogFormatError as exc:
            logger.warning("Could not parse renames in %s: %s", commit.revision, exc)
            return commit
        return replace(commit, changes=tuple(changes))

    def resolve_all(self, commits: Iterable[Commit]) -> List[Commit]:
        """Resolve renames in ``commits``, preserving their order."""
        commits = list(commits)
        candidates = sum(1 for commit in commits if has_potential_renames(commit))
        if self.max_workers == 1 or candidates < 2:
            return [self.resolve(commit) for commit in commits]
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="rename-resolver") as pool:
            return list(pool.map(self.resolve, commits))
