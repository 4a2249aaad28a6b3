"""
Data models for commit history.

A :class:`Commit` is one change-set read from VCS history, and a
:class:`Change` is one file's modification within it. Both are immutable;
code that needs a different set of changes builds a new commit with
:func:`dataclasses.replace`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Tuple


NO_REVISION = "noRevision"
NO_FILE_PATH = ""


class ChangeType(Enum):
    NEW = "NEW"
    MODIFICATION = "MODIFICATION"
    DELETED = "DELETED"
    MOVED = "MOVED"


@dataclass(frozen=True)
class Change:
    """Representation of a single file change within a commit.

    Attributes
    ----------
    type : ChangeType
        Kind of change.
    file_path : str
        Path after the change, ``NO_FILE_PATH`` for deleted files.
    file_path_before : str
        Path before the change, ``NO_FILE_PATH`` for new files.
    revision : str
        Revision the change belongs to.
    revision_before : str
        Parent revision, ``NO_REVISION`` for new files.
    """

    type: ChangeType
    file_path: str
    file_path_before: str = NO_FILE_PATH
    revision: str = NO_REVISION
    revision_before: str = NO_REVISION


@dataclass(frozen=True)
class Commit:
    """Representation of a non-merge commit.

    ``vcs_root`` optionally points back at the client the commit was read
    from. It is for display only and takes no part in equality.
    """

    revision: str
    revision_before: str
    commit_date: datetime
    author_name: str
    comment: str
    changes: Tuple[Change, ...] = ()
    vcs_root: Optional[Any] = field(default=None, compare=False, repr=False)
