"""
Charset handling for command output.

VCS tools print file names, author names and commit messages in whatever
encoding the repository or the user's locale uses. When auto-detection is
enabled the raw bytes are sampled and handed to :mod:`charset_normalizer`;
otherwise the configured charset is used as-is.
"""

from __future__ import annotations

import logging
from typing import Optional

from charset_normalizer import from_bytes

from vc_history_reader.process.config import RunnerConfig


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


def detect_charset(data: bytes, max_sample_size: int) -> Optional[str]:
    """Guess the encoding of ``data`` from at most ``max_sample_size`` bytes.

    Returns
    -------
    Optional[str]
        A Python codec name, or ``None`` when the sample is empty or no
        encoding could be determined. The result is a heuristic.
    """
    sample = data[:max_sample_size]
    if not sample:
        return None
    best = from_bytes(sample).best()
    if best is None:
        return None
    return best.encoding


def decode_output(data: bytes, config: RunnerConfig) -> str:
    """Decode command output according to ``config``.

    Falls back to ``config.output_charset`` when detection is disabled or
    inconclusive. Undecodable bytes are replaced rather than raising.
    """
    charset = None
    if config.charset_auto_detect:
        charset = detect_charset(data, config.max_charset_sample_size)
        logger.debug("Detected output charset: %s", charset)
    if charset is None:
        charset = config.output_charset
    return data.decode(charset, errors="replace")
