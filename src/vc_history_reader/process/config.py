"""
Execution settings for external VCS commands.

:class:`RunnerConfig` is an immutable value. Each ``with_*`` method
returns a modified copy so that configuration changes compose without
side effects, e.g.::

    config = DEFAULT_CONFIG.with_working_dir("/repo").with_charset_auto_detect(True)
"""

from __future__ import annotations

import codecs
from concurrent.futures import Executor
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Union


DEFAULT_BUFFER_SIZE = 8192
DEFAULT_CHARSET = "utf-8"
DEFAULT_KILL_POLL_INTERVAL = 0.01
DEFAULT_KILL_TIMEOUT = 0.2


@dataclass(frozen=True)
class RunnerConfig:
    """Settings applied to a single :class:`ProcessRunner` execution.

    Attributes
    ----------
    working_dir : Path, optional
        Directory the command runs in. ``None`` means the current directory.
    stdout_buffer_size, stderr_buffer_size : int
        Chunk size used when draining each stream.
    output_charset : str
        Codec used to decode output when detection is off or inconclusive.
    charset_auto_detect : bool
        Guess the output encoding from the bytes before decoding.
    max_charset_sample_size : int
        Maximum number of bytes handed to the charset detector.
    kill_poll_interval, kill_timeout : float
        Liveness polling used by :meth:`ProcessRunner.kill`, in seconds.
    executor : Executor, optional
        Pool that drains stderr while stdout is read on the calling thread,
        so one free worker per running command is enough. When ``None`` every
        execution creates and shuts down its own single-worker pool;
        otherwise the caller owns the pool's lifecycle.
    """

    working_dir: Optional[Path] = None
    stdout_buffer_size: int = DEFAULT_BUFFER_SIZE
    stderr_buffer_size: int = DEFAULT_BUFFER_SIZE
    output_charset: str = DEFAULT_CHARSET
    charset_auto_detect: bool = False
    max_charset_sample_size: int = DEFAULT_BUFFER_SIZE
    kill_poll_interval: float = DEFAULT_KILL_POLL_INTERVAL
    kill_timeout: float = DEFAULT_KILL_TIMEOUT
    executor: Optional[Executor] = None

    def __post_init__(self) -> None:
        for name in ("stdout_buffer_size", "stderr_buffer_size", "max_charset_sample_size"):
            if getattr(self, name) <= 0:
                raise ValueError(f"'{name}' must be positive, was {getattr(self, name)}")
        if self.kill_poll_interval <= 0 or self.kill_timeout < 0:
            raise ValueError("kill polling interval must be positive and timeout non-negative")
        try:
            codecs.lookup(self.output_charset)
        except LookupError as exc:
            raise ValueError(f"Unknown output charset: {self.output_charset}") from exc

    def with_working_dir(self, path: Optional[Union[str, Path]]) -> "RunnerConfig":
        return replace(self, working_dir=Path(path) if path is not None else None)

    def with_output_charset(self, charset: str) -> "RunnerConfig":
        return replace(self, output_charset=charset)

    def with_charset_auto_detect(self, value: bool) -> "RunnerConfig":
        return replace(self, charset_auto_detect=value)

    def with_buffer_sizes(self, stdout_size: int, stderr_size: int) -> "RunnerConfig":
        return replace(self, stdout_buffer_size=stdout_size, stderr_buffer_size=stderr_size)

    def with_max_charset_sample_size(self, size: int) -> "RunnerConfig":
        return replace(self, max_charset_sample_size=size)

    def with_kill_polling(self, interval: float, timeout: float) -> "RunnerConfig":
        return replace(self, kill_poll_interval=interval, kill_timeout=timeout)

    def with_executor(self, executor: Optional[Executor]) -> "RunnerConfig":
        return replace(self, executor=executor)


DEFAULT_CONFIG = RunnerConfig()
