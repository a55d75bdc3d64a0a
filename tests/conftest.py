"""Shared test setup.

The API module reads its configuration on import, so the artifact
directory is pointed at a throwaway location before any test imports it.
"""

from __future__ import annotations

import os
import sys
import tempfile

import pytest

from codelab.executor import LanguageProfile


os.environ.setdefault("CODELAB_TEMP_DIR", tempfile.mkdtemp(prefix="codelab-tests-"))

PYTHON = sys.executable


@pytest.fixture
def python_profile():
    """Factory for profiles that run the source with the test interpreter."""

    def make(language: str = "py", timeout_ms: int = 5000, **kwargs) -> LanguageProfile:
        return LanguageProfile(language, ".py", lambda f: [[PYTHON, str(f)]], timeout_ms, **kwargs)

    return make


@pytest.fixture
def artifact_dir(tmp_path):
    path = tmp_path / "artifacts"
    path.mkdir()
    return path
