"""
Execution core of the service.

The registry describes how each language is compiled and run, the
artifacts module owns the files written for one execution, the process
module spawns commands under a timeout, and :class:`CodeExecutor` ties them
together into the ``execute(language, code)`` operation.
"""

from .artifacts import Artifact, sweep_orphans
from .base import CodeExecutor, ExecutionResult, ExecutorError
from .registry import LanguageProfile, LanguageRegistry, default_registry

__all__ = [
    "Artifact",
    "CodeExecutor",
    "ExecutionResult",
    "ExecutorError",
    "LanguageProfile",
    "LanguageRegistry",
    "default_registry",
    "sweep_orphans",
]
