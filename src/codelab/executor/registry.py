"""
Language registry.

Each supported language is described by a :class:`LanguageProfile`: the
source extension, an optional filename the toolchain insists on, the
argument vectors that compile and/or run a source file, and the wall‑clock
budget for the whole chain.  Profiles are immutable and the registry is
built once at start‑up; nothing mutates it afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Iterable, List, Optional, Tuple


CommandTemplate = Callable[[Path], List[List[str]]]


@dataclass(frozen=True)
class LanguageProfile:
    """Static description of how to run source text in one language.

    ``command`` maps the source path to one or more argument vectors.  When
    several are returned they are chained: a step only runs once the one
    before it exited with status zero.
    """

    id: str
    extension: str
    command: CommandTemplate
    timeout_ms: int
    fixed_filename: Optional[str] = None
    byproduct_suffixes: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive for {self.id!r}, got {self.timeout_ms}")
        if not self.extension.startswith("."):
            raise ValueError(f"extension must start with '.' for {self.id!r}, got {self.extension!r}")

    def build_command(self, source: Path) -> List[List[str]]:
        steps = self.command(source)
        if not steps or any(not step for step in steps):
            raise ValueError(f"command template for {self.id!r} produced an empty step")
        return [list(step) for step in steps]

    def byproducts(self, source: Path) -> List[Path]:
        """Paths the toolchain may create next to ``source``."""
        return [source.with_suffix(suffix) for suffix in self.byproduct_suffixes]


class LanguageRegistry:
    """Read‑only mapping from language id to :class:`LanguageProfile`."""

    def __init__(self, profiles: Iterable[LanguageProfile]) -> None:
        table = {}
        for profile in profiles:
            if profile.id in table:
                raise ValueError(f"Duplicate language id: {profile.id}")
            table[profile.id] = profile
        self._profiles = MappingProxyType(table)

    def lookup(self, language: str) -> Optional[LanguageProfile]:
        return self._profiles.get(language)

    def languages(self) -> List[str]:
        return list(self._profiles)

    def restrict(self, allowed: Iterable[str]) -> "LanguageRegistry":
        """Return a registry holding only the ``allowed`` ids.

        Raises ``ValueError`` if an id is not registered, so that a typo in
        the configuration fails loudly at start‑up.
        """
        allowed = list(allowed)
        unknown = [lang for lang in allowed if lang not in self._profiles]
        if unknown:
            raise ValueError(f"Unknown language(s): {', '.join(unknown)}")
        return LanguageRegistry(p for p in self._profiles.values() if p.id in allowed)

    def __contains__(self, language: object) -> bool:
        return language in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)


def _executable(source: Path) -> str:
    return str(source.with_suffix(""))


def default_registry() -> LanguageRegistry:
    """Build the registry of built‑in toolchains."""
    return LanguageRegistry(
        [
            LanguageProfile("javascript", ".js", lambda f: [["node", str(f)]], 5000),
            LanguageProfile("python", ".py", lambda f: [["python3", str(f)]], 5000),
            LanguageProfile(
                "java",
                ".java",
                lambda f: [["javac", str(f)], ["java", "-cp", str(f.parent), f.stem]],
                10000,
                fixed_filename="Main.java",
                byproduct_suffixes=(".class",),
            ),
            LanguageProfile(
                "cpp",
                ".cpp",
                lambda f: [["g++", str(f), "-o", _executable(f)], [_executable(f)]],
                10000,
                byproduct_suffixes=("",),
            ),
            LanguageProfile(
                "csharp",
                ".cs",
                lambda f: [["mcs", str(f)], ["mono", str(f.with_suffix(".exe"))]],
                10000,
                byproduct_suffixes=(".exe",),
            ),
            LanguageProfile("php", ".php", lambda f: [["php", str(f)]], 5000),
            LanguageProfile("ruby", ".rb", lambda f: [["ruby", str(f)]], 5000),
            LanguageProfile("go", ".go", lambda f: [["go", "run", str(f)]], 10000),
            LanguageProfile("swift", ".swift", lambda f: [["swift", str(f)]], 10000),
            LanguageProfile(
                "rust",
                ".rs",
                lambda f: [["rustc", str(f), "-o", _executable(f)], [_executable(f)]],
                15000,
                byproduct_suffixes=("",),
            ),
        ]
    )
