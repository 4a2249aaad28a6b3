"""
Command line interface for the vc_history_reader tool.

This module defines the ``main`` click group used as the entry point of
the ``vchistory`` command. ``vchistory log`` prints the commits of a
repository within a date range and ``vchistory content`` prints a file
as it was at a given revision. Exit codes are defined below.
"""

from __future__ import annotations

import codecs
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click

from vc_history_reader import __version__
from vc_history_reader.config.loader import ConfigError, load_config, runner_config_from
from vc_history_reader.history.model import ChangeType, Commit
from vc_history_reader.history.results import LogResult
from vc_history_reader.vcs.git_client import GitClient
from vc_history_reader.vcs.hg_client import HgClient
from vc_history_reader.vcs.pipeline import extract_log
from vc_history_reader.vcs.svn_client import SVNClient

# Module-level logger with a null handler; the CLI configures the root
# logger, after which messages propagate normally.
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------
EXIT_SUCCESS = 0
EXIT_INVALID_USAGE = 2
EXIT_NO_REPO = 3
EXIT_CONFIG_ERROR = 5
EXIT_VCS_FAILURE = 6

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%dT%H:%M:%S", "%Y-%m-%d %H:%M:%S"]


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------

def print_info(message: str, indent: int = 0):
    """Print an info message."""
    prefix = "  " * indent
    click.echo(f"{prefix}ℹ {message}", err=False)


def print_warning(message: str, indent: int = 0):
    """Print a warning message."""
    prefix = "  " * indent
    click.echo(f"{prefix}⚠ {message}", err=True)


def print_error(message: str, indent: int = 0):
    """Print an error message."""
    prefix = "  " * indent
    click.echo(f"{prefix}✗ {message}", err=True)


def format_commit(commit: Commit) -> str:
    summary = commit.comment.splitlines()[0] if commit.comment else ""
    date = commit.commit_date.strftime("%Y-%m-%d %H:%M:%S")
    return f"{date} {commit.revision[:12]} {commit.author_name}: {summary}"


def format_change(change) -> str:
    if change.type == ChangeType.MOVED:
        return f"{change.type.value} {change.file_path_before} -> {change.file_path}"
    if change.type == ChangeType.DELETED:
        return f"{change.type.value} {change.file_path_before}"
    return f"{change.type.value} {change.file_path}"


def print_log_result(result: LogResult, show_changes: bool = True) -> None:
    for commit in result.commits:
        click.echo(format_commit(commit))
        if show_changes:
            for change in commit.changes:
                click.echo(f"    {format_change(change)}")
    for error in result.vcs_errors:
        print_warning(error.strip())
    for exc in result.exceptions:
        print_error(str(exc))


# ---------------------------------------------------------------------------
# Core functionality
# ---------------------------------------------------------------------------

def configure_logging(verbose: bool) -> None:
    # force=True so repeated invocations (e.g. in tests) reconfigure handlers
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
        force=True,
    )


def detect_vcs(start_dir: Path) -> Tuple[str, Path]:
    """Detect the VCS type and repository root.

    Returns
    -------
    Tuple[str, Path]
        ``('git', root)`` or ``('hg', root)``.

    Raises
    ------
    SystemExit
        With code EXIT_NO_REPO if no repository is found or if both kinds
        of repository metadata are found.
    """
    git_root = GitClient.find_repo_root(start_dir)
    hg_root = HgClient.find_repo_root(start_dir)

    if git_root and hg_root:
        print_error("Both Git and Mercurial repository metadata found; ambiguous repository.")
        raise SystemExit(EXIT_NO_REPO)
    if git_root:
        return "git", git_root
    if hg_root:
        return "hg", hg_root

    print_error("No Git or Mercurial repository found in this directory or its parents.")
    raise SystemExit(EXIT_NO_REPO)


def _load_settings(config_file: Optional[Path]) -> Dict[str, Any]:
    try:
        return load_config(config_file)
    except ConfigError as exc:
        print_error(f"Configuration error: {exc}")
        raise click.exceptions.Exit(EXIT_CONFIG_ERROR)


def _as_utc(value: Optional[datetime], default: datetime) -> datetime:
    if value is None:
        return default
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def build_client(vcs: str, repo: str, settings: Dict[str, Any]) -> Any:
    """Create the client for ``vcs`` using the loaded settings."""
    config = runner_config_from(settings)
    if vcs == "git":
        return GitClient(Path(repo), settings["git_path"], config, settings["rename_workers"])
    if vcs == "hg":
        return HgClient(Path(repo), settings["hg_path"], config)
    return SVNClient(repo, settings["svn_path"], config)


@click.group()
@click.version_option(version=__version__, prog_name="vchistory")
def main() -> None:
    """Read commit history from Git and Mercurial repositories."""


@main.command("log")
@click.argument("path", type=click.Path(exists=True, file_okay=False, path_type=Path), default=".")
@click.option("--vcs", type=click.Choice(["git", "hg"]), help="Force the VCS type.")
@click.option("--from", "from_date", type=click.DateTime(formats=_DATE_FORMATS), help="Only commits after this date (UTC).")
@click.option("--to", "to_date", type=click.DateTime(formats=_DATE_FORMATS), help="Only commits before this date (UTC).")
@click.option("--config", "config_file", type=click.Path(path_type=Path), help="Configuration file to use.")
@click.option("--no-changes", is_flag=True, help="Print commits without their file changes.")
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
def log_command(
    path: Path,
    vcs: Optional[str],
    from_date: Optional[datetime],
    to_date: Optional[datetime],
    config_file: Optional[Path],
    no_changes: bool,
    verbose: bool,
) -> None:
    """Print the commits of the repository at PATH."""
    configure_logging(verbose)
    settings = _load_settings(config_file)

    if vcs is None:
        try:
            vcs, repo_root = detect_vcs(path)
        except SystemExit:
            raise click.exceptions.Exit(EXIT_NO_REPO)
    else:
        finder = GitClient.find_repo_root if vcs == "git" else HgClient.find_repo_root
        repo_root = finder(path)
        if repo_root is None:
            print_error(f"{path} is not inside a {vcs} repository.")
            raise click.exceptions.Exit(EXIT_NO_REPO)
    logger.debug("Detected VCS: %s, root: %s", vcs, repo_root)

    client = build_client(vcs, str(repo_root), settings)
    result = extract_log(
        client,
        _as_utc(from_date, _EPOCH),
        _as_utc(to_date, datetime.now(timezone.utc)),
    )
    print_log_result(result, show_changes=not no_changes)

    if not result.is_successful:
        raise click.exceptions.Exit(EXIT_VCS_FAILURE)
    if not result.commits:
        print_info("No commits found in the given date range.")
    raise click.exceptions.Exit(EXIT_SUCCESS)


@main.command("content")
@click.argument("file_path")
@click.argument("revision")
@click.option("--repo", default=".", show_default=True, help="Repository directory, or repository URL for svn.")
@click.option("--vcs", type=click.Choice(["git", "hg", "svn"]), default="git", show_default=True)
@click.option("--charset", help="Charset of the file content.")
@click.option("--config", "config_file", type=click.Path(path_type=Path), help="Configuration file to use.")
@click.option("--verbose", is_flag=True, help="Enable verbose (debug) output.")
def content_command(
    file_path: str,
    revision: str,
    repo: str,
    vcs: str,
    charset: Optional[str],
    config_file: Optional[Path],
    verbose: bool,
) -> None:
    """Print FILE_PATH as it was at REVISION."""
    configure_logging(verbose)
    settings = _load_settings(config_file)

    if charset is not None:
        try:
            codecs.lookup(charset)
        except LookupError:
            print_error(f"Unknown charset: {charset}")
            raise click.exceptions.Exit(EXIT_INVALID_USAGE)

    client = build_client(vcs, repo, settings)
    result = client.log_file_content(file_path, revision, charset).execute()

    if not result.is_successful:
        print_error(f"Failed to read {file_path}@{revision}: {result.exception}")
        raise click.exceptions.Exit(EXIT_VCS_FAILURE)
    click.echo(result.text)
    raise click.exceptions.Exit(EXIT_SUCCESS)
