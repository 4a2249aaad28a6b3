#!/usr/bin/env python
"""
Thin wrapper script to invoke the vc_history_reader CLI.

Running ``python vchistory.py`` is equivalent to running the
``vchistory`` console script installed via ``pyproject.toml``.
"""

from vc_history_reader.cli import main


if __name__ == "__main__":
    main(prog_name="vchistory")
