"""
Child process helpers.

Toolchain commands are spawned from argument vectors, never through a
shell.  A command may consist of several steps (compile, then run); the
steps share one wall‑clock deadline and stop at the first failure, like a
``&&`` chain.  Each step runs in its own session so that a timeout can
terminate the whole process group, including anything the toolchain forked.

stdout and stderr are read on separate threads into capped buffers.  Output
beyond the cap is read and discarded so the child never blocks on a full
pipe.  Once a step has exited its readers get a short grace period; a
descendant that escaped the process group cannot hold the call open.
"""

from __future__ import annotations

import logging
import os
import shlex
import signal
import subprocess
import threading
import time
from dataclasses import dataclass
from typing import IO, List, Optional, Sequence


logger = logging.getLogger(__name__)

TRUNCATION_NOTICE = "\n[output truncated]"

_READ_CHUNK = 64 * 1024

# How long readers may keep draining once the step has exited.
READER_GRACE_SECONDS = 0.5


class _CappedBuffer:
    """Accumulates bytes up to ``limit`` and remembers whether it overflowed."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.truncated = False
        self._chunks: List[bytes] = []
        self._size = 0
        self._lock = threading.Lock()

    def feed(self, data: bytes) -> None:
        with self._lock:
            room = self.limit - self._size
            if len(data) > room:
                self.truncated = True
                data = data[: max(room, 0)]
            if data:
                self._chunks.append(data)
                self._size += len(data)

    def text(self) -> str:
        with self._lock:
            value = b"".join(self._chunks).decode("utf-8", errors="replace")
            if self.truncated:
                value += TRUNCATION_NOTICE
            return value


@dataclass
class ProcessOutcome:
    """Raw result of running a command chain.

    Attributes
    ----------
    stdout, stderr: str
        Captured streams of all steps that ran, in order.
    exit_code: int
        Exit status of the last step that ran.  Negative values mean the
        step was killed by that signal.
    timed_out: bool
        The deadline expired and the running step was killed.
    failed_command: list[str] or None
        The step that failed, if any.
    missing_executable: str or None
        Set when a step could not be started because its program does not
        exist.
    duration_ms: int
        Wall‑clock time of the whole chain.
    """

    stdout: str
    stderr: str
    exit_code: int
    timed_out: bool
    failed_command: Optional[List[str]]
    missing_executable: Optional[str]
    duration_ms: int


def describe(args: Sequence[str]) -> str:
    return " ".join(shlex.quote(arg) for arg in args)


def _drain(stream: IO[bytes], buffer: _CappedBuffer) -> None:
    try:
        while True:
            chunk = stream.read1(_READ_CHUNK)  # type: ignore[attr-defined]
            if not chunk:
                break
            buffer.feed(chunk)
    finally:
        stream.close()


def _kill_group(process: subprocess.Popen) -> None:
    try:
        if hasattr(os, "killpg"):
            os.killpg(process.pid, signal.SIGKILL)
        else:
            process.kill()
    except (ProcessLookupError, PermissionError):
        # group already gone
        pass


def _run_subprocess(
    args: List[str],
    timeout: float,
    stdout_buf: _CappedBuffer,
    stderr_buf: _CappedBuffer,
) -> tuple[int, bool]:
    """Run one step and return ``(exit_code, timed_out)``.

    Raises whatever :class:`subprocess.Popen` raises when the program
    cannot be started.
    """
    process = subprocess.Popen(
        args,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        start_new_session=True,
    )

    readers = [
        threading.Thread(target=_drain, args=(process.stdout, stdout_buf), daemon=True),
        threading.Thread(target=_drain, args=(process.stderr, stderr_buf), daemon=True),
    ]
    for reader in readers:
        reader.start()

    timed_out = False

    def kill_proc() -> None:
        nonlocal timed_out
        if process.poll() is None:
            timed_out = True
            _kill_group(process)

    # Start timer thread to enforce wall clock timeout
    timer = threading.Timer(timeout, kill_proc)
    timer.start()
    try:
        process.wait()
    finally:
        timer.cancel()
        # Reap anything the step left running in its group so that the
        # pipes reach EOF.
        _kill_group(process)
        join_deadline = time.perf_counter() + READER_GRACE_SECONDS
        for reader in readers:
            reader.join(max(join_deadline - time.perf_counter(), 0))
    if any(reader.is_alive() for reader in readers):
        # A descendant left the group (setsid) and still holds the pipes.
        # The daemon readers are abandoned; whatever they read from now on
        # is no longer part of this result.
        logger.warning("%s left a detached process holding its output pipes", args[0])
    return process.returncode, timed_out


def run_pipeline(
    steps: Sequence[List[str]],
    timeout_ms: int,
    max_output_bytes: int,
) -> ProcessOutcome:
    """Run ``steps`` in order under a shared deadline of ``timeout_ms``."""
    stdout_buf = _CappedBuffer(max_output_bytes)
    stderr_buf = _CappedBuffer(max_output_bytes)
    start_time = time.perf_counter()
    deadline = start_time + timeout_ms / 1000.0

    exit_code = 0
    timed_out = False
    failed_command: Optional[List[str]] = None
    missing_executable: Optional[str] = None

    for args in steps:
        remaining = deadline - time.perf_counter()
        if remaining <= 0:
            timed_out = True
            break
        try:
            exit_code, timed_out = _run_subprocess(args, remaining, stdout_buf, stderr_buf)
        except FileNotFoundError:
            logger.info("Executable not found: %s", args[0])
            exit_code = 127
            failed_command = args
            missing_executable = args[0]
            break
        if timed_out:
            break
        if exit_code != 0:
            failed_command = args
            break

    duration = int((time.perf_counter() - start_time) * 1000)
    return ProcessOutcome(
        stdout=stdout_buf.text(),
        stderr=stderr_buf.text(),
        exit_code=exit_code,
        timed_out=timed_out,
        failed_command=failed_command,
        missing_executable=missing_executable,
        duration_ms=duration,
    )
