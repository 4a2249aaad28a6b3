"""
Parser for delimiter-based commit log output.

The log commands print every commit as a record that starts with
:data:`RECORD_SEPARATOR`. Inside a record, :data:`FIELD_SEPARATOR` ends
each of the revision, parent ids, commit timestamp, author and message
fields; whatever follows the last separator is the change list, one
``<status>\\t<path>[\\t<path>]`` line per file (the ``--name-status``
format of ``git log``).

The separators are control characters that do not occur in real commit
data, so no escaping is needed. Merge commits (two or more parents) are
dropped; a record that does not have the expected shape raises
:class:`LogFormatError`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Collection, List, Optional

from vc_history_reader.history.model import NO_FILE_PATH, NO_REVISION, Change, ChangeType, Commit


RECORD_SEPARATOR = "\x11\x12\x13\n"
FIELD_SEPARATOR = "\x10\x11\x12\n"

# revision, parents, timestamp, author, message, changes
_FIELD_COUNT = 6
_COMMENT_TRIM_CHARS = " \r\n\t"

# see "--diff-filter" at https://git-scm.com/docs/git-log
_CHANGE_TYPES = {
    "A": ChangeType.NEW,
    "C": ChangeType.NEW,
    "M": ChangeType.MODIFICATION,
    "T": ChangeType.MODIFICATION,
    "U": ChangeType.MODIFICATION,
    "X": ChangeType.MODIFICATION,
    "D": ChangeType.DELETED,
    "R": ChangeType.MOVED,
}


class LogFormatError(ValueError):
    """Raised when log output does not match the expected format."""

    pass


def parse_commits(stdout: str, ignored_parents: Collection[str] = ()) -> List[Commit]:
    """Parse raw log output into commits, in output order.

    Parameters
    ----------
    stdout : str
        Decoded output of the log command.
    ignored_parents : Collection[str], optional
        Parent ids that stand for "no parent" (e.g. Mercurial's null node).

    Returns
    -------
    List[Commit]
        Commits without merges. Empty output gives an empty list.

    Raises
    ------
    LogFormatError
        If a record has an unexpected number of fields, a non-numeric
        timestamp, or an unknown change status.
    """
    blocks = stdout.split(RECORD_SEPARATOR)
    if blocks and not blocks[0].strip():
        blocks = blocks[1:]

    commits = []
    for block in blocks:
        commit = _parse_commit(block, ignored_parents)
        if commit is not None:
            commits.append(commit)
    return commits


def _parse_commit(block: str, ignored_parents: Collection[str]) -> Optional[Commit]:
    values = block.split(FIELD_SEPARATOR)
    if len(values) != _FIELD_COUNT:
        raise LogFormatError(
            f"Expected {_FIELD_COUNT} fields in commit record but found {len(values)}: {block[:100]!r}"
        )

    parents = [parent for parent in values[1].split() if parent not in ignored_parents]
    if len(parents) > 1:
        # merge commit
        return None

    revision = values[0].strip()
    revision_before = parents[0] if parents else NO_REVISION
    return Commit(
        revision=revision,
        revision_before=revision_before,
        commit_date=_parse_date(values[2]),
        author_name=values[3].strip("\r\n"),
        comment=values[4].strip(_COMMENT_TRIM_CHARS),
        changes=tuple(parse_changes(values[5], revision, revision_before)),
    )


def parse_changes(text: str, revision: str, revision_before: str) -> List[Change]:
    """Parse ``--name-status`` lines into changes of a single revision.

    Blank lines are skipped, so the output of ``git show --pretty=format:``
    can be passed directly.
    """
    changes = []
    for line in text.splitlines():
        if not line.strip():
            continue
        changes.append(_parse_change(line, revision, revision_before))
    return changes


def _parse_change(line: str, revision: str, revision_before: str) -> Change:
    values = line.split("\t")
    if len(values) < 2:
        raise LogFormatError(f"Expected status and file path in change line: {line!r}")

    change_type = _parse_change_type(values[0])
    has_two_paths = len(values) > 2
    file_path = unescape_quotes(values[2] if has_two_paths else values[1])
    file_path_before = unescape_quotes(values[1]) if has_two_paths else file_path

    if change_type == ChangeType.NEW:
        file_path_before = NO_FILE_PATH
        revision_before = NO_REVISION
    elif change_type == ChangeType.DELETED:
        file_path_before = file_path
        file_path = NO_FILE_PATH

    return Change(
        type=change_type,
        file_path=file_path,
        file_path_before=file_path_before,
        revision=revision,
        revision_before=revision_before,
    )


def _parse_change_type(status: str) -> ChangeType:
    status = status.strip()
    change_type = _CHANGE_TYPES.get(status[:1])
    if change_type is None:
        raise LogFormatError(f"Unknown change type: {status!r}")
    return change_type


def unescape_quotes(file_path: str) -> str:
    """Strip the quotes git puts around unusual paths.

    ``"a\\"b"`` becomes ``a"b``. Unquoted paths are returned unchanged.
    """
    if len(file_path) < 2 or not (file_path.startswith('"') and file_path.endswith('"')):
        return file_path
    return file_path[1:-1].replace('\\"', '"')


def _parse_date(value: str) -> datetime:
    # git prints "%ct" as one number; hg's "hgdate" is "<seconds> <offset>"
    tokens = value.split()
    try:
        seconds = int(tokens[0])
    except (IndexError, ValueError) as exc:
        raise LogFormatError(f"Invalid commit timestamp: {value!r}") from exc
    return datetime.fromtimestamp(seconds, tz=timezone.utc)
