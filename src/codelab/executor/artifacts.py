"""
Transient files created for a single execution.

An :class:`Artifact` is allocated right before a toolchain is invoked and
removed right after the outcome is known.  Ordinary languages get a source
file named ``code_<id><ext>`` directly in the shared temp directory; a
language whose toolchain hardcodes the filename gets its own ``run_<id>``
subdirectory so that concurrent executions never share a path.
"""

from __future__ import annotations

import logging
import secrets
import shutil
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .registry import LanguageProfile


logger = logging.getLogger(__name__)

SOURCE_PREFIX = "code_"
RUN_DIR_PREFIX = "run_"


@dataclass
class Artifact:
    source: Path
    byproducts: List[Path] = field(default_factory=list)
    workdir: Optional[Path] = None

    @classmethod
    def allocate(cls, base_dir: Path, profile: LanguageProfile) -> "Artifact":
        run_id = secrets.token_hex(8)
        if profile.fixed_filename:
            workdir = base_dir / f"{RUN_DIR_PREFIX}{run_id}"
            source = workdir / profile.fixed_filename
        else:
            workdir = None
            source = base_dir / f"{SOURCE_PREFIX}{run_id}{profile.extension}"
        return cls(source=source, byproducts=profile.byproducts(source), workdir=workdir)

    def paths(self) -> List[Path]:
        return [self.source, *self.byproducts]

    def write(self, code: str) -> None:
        self.source.parent.mkdir(parents=True, exist_ok=True)
        # newline="" keeps the submitted text byte for byte
        with open(self.source, "w", encoding="utf-8", newline="") as fh:
            fh.write(code)

    def cleanup(self) -> None:
        """Remove every file of this artifact.  Never raises."""
        for path in self.paths():
            try:
                path.unlink()
            except FileNotFoundError:
                pass
            except OSError as exc:
                logger.warning("Cleanup error for %s: %s", path, exc)
        if self.workdir is not None:
            try:
                shutil.rmtree(self.workdir)
            except FileNotFoundError:
                pass
            except OSError as exc:
                logger.warning("Cleanup error for %s: %s", self.workdir, exc)


def sweep_orphans(base_dir: Path, max_age_seconds: int) -> int:
    """Delete artifacts left behind by a crashed process.

    Only entries carrying one of the artifact prefixes and older than
    ``max_age_seconds`` are touched.  Returns the number of entries removed.
    """
    if not base_dir.is_dir():
        return 0
    cutoff = time.time() - max_age_seconds
    removed = 0
    for entry in base_dir.iterdir():
        if not entry.name.startswith((SOURCE_PREFIX, RUN_DIR_PREFIX)):
            continue
        try:
            if entry.lstat().st_mtime > cutoff:
                continue
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
            removed += 1
        except OSError as exc:
            logger.warning("Unable to sweep orphaned artifact %s: %s", entry, exc)
    if removed:
        logger.info("Swept %d orphaned artifact(s) from %s", removed, base_dir)
    return removed
