"""
Execution core.

:class:`CodeExecutor` turns a ``(language, code)`` pair into an
:class:`ExecutionResult`.  Every call walks the same strictly ordered
lifecycle:

1. *resolve* the language profile in the registry;
2. *materialize* the source text as an artifact on disk;
3. *invoke* the toolchain command under the profile's timeout;
4. *classify* the outcome into success, failure or timeout;
5. *clean up* every artifact, whatever happened before.

All ordinary failures (unknown language, unwritable temp directory,
compile errors, crashes, missing toolchains, timeouts) come back as a
failed result.  Only a broken host, one that cannot spawn processes at
all, surfaces as :class:`ExecutorError`.
"""

from __future__ import annotations

import logging
import signal
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .artifacts import Artifact
from .process import ProcessOutcome, describe, run_pipeline
from .registry import LanguageRegistry


logger = logging.getLogger(__name__)

TIMEOUT_ERROR = "Execution timeout exceeded"
TIMEOUT_STDERR = "Process killed due to timeout"


class ExecutorError(RuntimeError):
    """The execution core itself malfunctioned."""


@dataclass(frozen=True)
class ExecutionResult:
    """Result of running a code snippet.

    Attributes
    ----------
    success: bool
        ``True`` only when every step exited with status zero.
    output: str
        Standard output captured from the execution.
    stderr: str
        Standard error captured from the execution.  May be non‑empty on
        success.
    error: str or None
        Short description of the failure, ``None`` on success.
    """

    success: bool
    output: str
    stderr: str
    error: Optional[str]

    @classmethod
    def failure(cls, error: str, output: str = "", stderr: str = "") -> "ExecutionResult":
        return cls(success=False, output=output, stderr=stderr, error=error)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return str(signum)


def classify(outcome: ProcessOutcome) -> ExecutionResult:
    """Map a finished or killed command chain to an :class:`ExecutionResult`."""
    if outcome.timed_out:
        return ExecutionResult.failure(TIMEOUT_ERROR, stderr=TIMEOUT_STDERR)
    if outcome.missing_executable is not None:
        return ExecutionResult.failure(
            f"Toolchain not found: {outcome.missing_executable}",
            output=outcome.stdout,
            stderr=outcome.stderr,
        )
    if outcome.exit_code != 0:
        command = describe(outcome.failed_command or [])
        if outcome.exit_code < 0:
            reason = f"killed by signal {_signal_name(-outcome.exit_code)}"
        else:
            reason = f"exit code {outcome.exit_code}"
        return ExecutionResult.failure(
            f"Command failed: {command} ({reason})",
            output=outcome.stdout,
            stderr=outcome.stderr,
        )
    return ExecutionResult(success=True, output=outcome.stdout, stderr=outcome.stderr, error=None)


class CodeExecutor:
    """
    Run user supplied code with the toolchain registered for its language.

    The executor holds no per‑request state and may be shared between
    threads.  All executions write into ``temp_dir``; collisions are
    avoided by random artifact names, or by a private subdirectory for
    languages whose toolchain requires a fixed filename.
    """

    def __init__(
        self,
        registry: LanguageRegistry,
        temp_dir: Path,
        max_output_bytes: int = 1024 * 1024,
    ) -> None:
        """
        Parameters
        ----------
        registry: LanguageRegistry
            Read‑only table of supported languages.
        temp_dir: Path
            Directory shared by all executions for transient artifacts.
            Created on demand.
        max_output_bytes: int, optional
            Cap applied to each captured stream.  Output beyond it is
            discarded and the stream is marked as truncated.
        """
        self.registry = registry
        self.temp_dir = Path(temp_dir)
        self.max_output_bytes = max_output_bytes

    def execute(self, language: str, code: str) -> ExecutionResult:
        profile = self.registry.lookup(language)
        if profile is None:
            logger.info("Rejected unsupported language: %s", language)
            return ExecutionResult.failure(f"Unsupported language: {language}")

        artifact = Artifact.allocate(self.temp_dir, profile)
        try:
            try:
                artifact.write(code)
            except (OSError, UnicodeError) as exc:
                logger.warning("Unable to write source file %s: %s", artifact.source, exc)
                return ExecutionResult.failure(str(exc))

            steps = profile.build_command(artifact.source)
            try:
                outcome = run_pipeline(steps, profile.timeout_ms, self.max_output_bytes)
            except OSError as exc:
                raise ExecutorError(f"Unable to spawn {describe(steps[0])}: {exc}") from exc

            if outcome.timed_out:
                logger.warning(
                    "%s execution killed after %d ms (budget %d ms)",
                    language,
                    outcome.duration_ms,
                    profile.timeout_ms,
                )
            else:
                logger.info(
                    "%s execution finished: exit_code=%s, duration_ms=%s",
                    language,
                    outcome.exit_code,
                    outcome.duration_ms,
                )
            return classify(outcome)
        finally:
            artifact.cleanup()
