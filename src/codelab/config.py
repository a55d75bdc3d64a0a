"""Configuration loader.

The execution service reads its configuration from environment variables so
that the same installation can run locally, under docker‑compose or behind a
reverse proxy without code changes.  Reasonable defaults are provided so that
local development works out of the box.

Environment variables:

``CODELAB_TEMP_DIR``
    Directory shared by all executions for their transient source files and
    compiler byproducts.  Defaults to ``/tmp/codelab``.

``CODELAB_ALLOWED_LANGS``
    Comma‑separated list of language ids to enable.  Empty (the default)
    enables every built‑in language.  Unknown ids are rejected.

``CODELAB_MAX_OUTPUT_BYTES``
    Maximum number of bytes kept per captured stream (stdout and stderr are
    capped independently).  Anything beyond is discarded.  Default 1 MiB.

``CODELAB_SWEEP_ON_STARTUP``
    If ``true``, leftover artifacts from a previous crash are removed from
    the temp directory when the service starts.  Defaults to ``true``.

``CODELAB_ORPHAN_MAX_AGE_SECONDS``
    Minimum age of a leftover artifact before the startup sweep removes it.
    Default 300.

``CODELAB_STATIC_DIR``
    Optional directory with the editor front end (``index.html``,
    ``style.css``, ``script.js``).  Mounted at ``/`` when set.

``CODELAB_CORS_ORIGINS``
    Comma‑separated list of allowed CORS origins.  Defaults to ``*``.

``CODELAB_LOG_LEVEL``
    Level of the ``codelab`` logger.  Defaults to ``INFO``.

``PORT``
    The port on which the API server listens.  Defaults to 3000.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "y"}


def _parse_list(value: str | None, default: str = "") -> List[str]:
    raw = default if value is None else value
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Config:
    """Centralised configuration object."""

    temp_dir: str
    allowed_langs: List[str]
    max_output_bytes: int
    sweep_on_startup: bool
    orphan_max_age_seconds: int
    static_dir: Optional[str]
    cors_origins: List[str]
    log_level: str
    port: int

    @classmethod
    def load(cls) -> "Config":
        temp_dir = os.getenv("CODELAB_TEMP_DIR", "/tmp/codelab")

        allowed_langs = [lang.lower() for lang in _parse_list(os.getenv("CODELAB_ALLOWED_LANGS"))]

        def _int_var(name: str, default: int) -> int:
            val = os.getenv(name)
            if val is None:
                return default
            try:
                return int(val)
            except ValueError:
                raise ValueError(f"Invalid integer for {name}: {val}")

        max_output_bytes = _int_var("CODELAB_MAX_OUTPUT_BYTES", 1024 * 1024)
        if max_output_bytes <= 0:
            raise ValueError(
                f"CODELAB_MAX_OUTPUT_BYTES must be positive, got {max_output_bytes}"
            )
        sweep_on_startup = _parse_bool(os.getenv("CODELAB_SWEEP_ON_STARTUP"), True)
        orphan_max_age_seconds = _int_var("CODELAB_ORPHAN_MAX_AGE_SECONDS", 300)
        static_dir = os.getenv("CODELAB_STATIC_DIR") or None
        cors_origins = _parse_list(os.getenv("CODELAB_CORS_ORIGINS"), "*")
        log_level = os.getenv("CODELAB_LOG_LEVEL", "INFO").upper()
        port = _int_var("PORT", 3000)

        return cls(
            temp_dir=temp_dir,
            allowed_langs=allowed_langs,
            max_output_bytes=max_output_bytes,
            sweep_on_startup=sweep_on_startup,
            orphan_max_age_seconds=orphan_max_age_seconds,
            static_dir=static_dir,
            cors_origins=cors_origins,
            log_level=log_level,
            port=port,
        )

    @classmethod
    def from_env(cls) -> "Config":
        """Read the process environment; the name used by the API module."""
        return cls.load()
