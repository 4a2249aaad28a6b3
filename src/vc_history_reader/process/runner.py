"""
Subprocess execution for VCS command line tools.

:class:`ProcessRunner` launches a command, drains its stdout and stderr
concurrently and decodes both streams. The two streams must be read in
parallel: a child that fills the stderr pipe while the parent is blocked
reading stdout (or the other way round) never terminates.

Failures to launch or read the process are not raised. They are returned
in :attr:`ExecutionResult.failure` so that callers can turn them into
result objects. A non-zero exit code is ordinary data.
"""

from __future__ import annotations

import logging
import os
import subprocess
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import IO, Dict, List, Mapping, Optional, Sequence

from vc_history_reader.process.charset import decode_output
from vc_history_reader.process.config import DEFAULT_CONFIG, RunnerConfig


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


EXIT_CODE_BEFORE_FINISHED = -(2 ** 31)


class ProcessFailure(Exception):
    """Raised (or returned) when a command could not be executed or read."""

    pass


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of one :meth:`ProcessRunner.execute` call."""

    stdout: str = ""
    stderr: str = ""
    exit_code: int = EXIT_CODE_BEFORE_FINISHED
    failure: Optional[ProcessFailure] = None

    @property
    def finished(self) -> bool:
        return self.exit_code != EXIT_CODE_BEFORE_FINISHED

    @property
    def succeeded(self) -> bool:
        return self.failure is None and self.exit_code == 0


class ProcessRunner:
    """Run one external command and capture its decoded output.

    Parameters
    ----------
    command : Sequence[str]
        Executable followed by its arguments.
    config : RunnerConfig, optional
        Working directory, charset and polling settings.
    environment : Mapping[str, str], optional
        Variables overlaid on top of the current process environment.
    """

    def __init__(
        self,
        command: Sequence[str],
        config: RunnerConfig = DEFAULT_CONFIG,
        environment: Optional[Mapping[str, str]] = None,
    ) -> None:
        if any(arg is None for arg in command):
            raise ValueError(f"Command cannot contain None, but was: {list(command)}")
        self.command: List[str] = [str(arg) for arg in command]
        self.config = config
        self.environment: Dict[str, str] = dict(environment or {})
        self._process: Optional[subprocess.Popen] = None

    def execute(self) -> ExecutionResult:
        """Run the command to completion.

        Returns
        -------
        ExecutionResult
            Decoded stdout/stderr and the exit code. ``failure`` is set when
            the process could not be started or its output could not be read.
        """
        logger.debug("Executing command: %s", self.describe())
        stdout = ""
        stderr = ""
        exit_code = EXIT_CODE_BEFORE_FINISHED
        failure: Optional[ProcessFailure] = None

        executor: Optional[Executor] = self.config.executor
        owns_executor = executor is None
        if owns_executor:
            executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="stream-reader")
        try:
            env = dict(os.environ)
            env.update(self.environment)
            process = subprocess.Popen(
                self.command,
                cwd=self.config.working_dir,
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
            self._process = process
            with process.stdout as stdout_stream, process.stderr as stderr_stream:
                # Only stderr goes to the executor, so a pool with a single
                # free worker cannot leave one of the pipes undrained.
                stderr_future = executor.submit(
                    self._read_stream, stderr_stream, self.config.stderr_buffer_size
                )
                try:
                    stdout = self._read_stream(stdout_stream, self.config.stdout_buffer_size)
                except OSError:
                    # unblock the stderr reader before its stream is closed
                    self.kill()
                    raise
                stderr = stderr_future.result()
            exit_code = process.wait()
        except (OSError, subprocess.SubprocessError) as exc:
            logger.error("Failed to execute %s: %s", self.describe(), exc)
            failure = ProcessFailure(f"Failed to execute {self.describe()}: {exc}")
            failure.__cause__ = exc
        finally:
            # Make sure the child is stopped even if reading failed.
            self.kill()
            self._process = None
            if owns_executor:
                executor.shutdown(wait=False)

        if exit_code not in (0, EXIT_CODE_BEFORE_FINISHED):
            logger.debug("Command %s exited with %s", self.describe(), exit_code)
        return ExecutionResult(stdout=stdout, stderr=stderr, exit_code=exit_code, failure=failure)

    def kill(self) -> bool:
        """Terminate the running process, if any.

        Returns
        -------
        bool
            True if the process is dead (or there is no process), False if it
            survived both ``terminate()`` and ``kill()``.
        """
        process = self._process
        if process is None:
            return True
        if process.poll() is None:
            process.terminate()
        deadline = time.monotonic() + self.config.kill_timeout
        while process.poll() is None and time.monotonic() < deadline:
            time.sleep(self.config.kill_poll_interval)
        if process.poll() is not None:
            return True

        logger.warning("Process did not stop after terminate(), killing: %s", self.describe())
        process.kill()
        try:
            # reap the child so it does not linger as a zombie
            process.wait(timeout=self.config.kill_timeout)
        except subprocess.TimeoutExpired:
            logger.error("Could not kill process: %s", self.describe())
            return False
        return True

    def describe(self) -> str:
        """Return the command line and working directory for diagnostics."""
        result = " ".join(self.command)
        if self.config.working_dir is not None:
            result += f" (working directory '{self.config.working_dir}')"
        return result

    def __str__(self) -> str:
        return self.describe()

    def _read_stream(self, stream: IO[bytes], buffer_size: int) -> str:
        data = bytearray()
        while True:
            chunk = stream.read(buffer_size)
            if not chunk:
                break
            data.extend(chunk)
        return decode_output(bytes(data), self.config)
