"""
Version control system (VCS) integrations.

This package contains the clients that build command lines for Git,
Mercurial and Subversion, the log extraction pipeline they share, and
rename resolution for git history.
"""

from .git_client import GitClient  # noqa: F401
from .hg_client import HgClient  # noqa: F401
from .pipeline import LogSource, VcsCommand, extract_log  # noqa: F401
from .svn_client import SVNClient  # noqa: F401
