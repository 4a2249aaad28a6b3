"""
Top-level package for vc_history_reader.

Reads commit history from Git and Mercurial (and file contents from Git,
Mercurial and SVN) by running their command line tools. The command line
entry point lives in ``vc_history_reader.cli``.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
