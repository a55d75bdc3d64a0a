from __future__ import annotations

from pathlib import Path

import pytest

from codelab.executor import LanguageProfile, LanguageRegistry, default_registry


EXPECTED = ["javascript", "python", "java", "cpp", "csharp", "php", "ruby", "go", "swift", "rust"]


def test_default_registry_languages():
    registry = default_registry()
    assert registry.languages() == EXPECTED
    assert len(registry) == len(EXPECTED)
    assert "python" in registry
    assert "cobol" not in registry


def test_lookup_unknown_returns_none():
    registry = default_registry()
    assert registry.lookup("cobol") is None
    assert registry.lookup("Python") is None


def test_timeouts_and_extensions():
    registry = default_registry()
    assert registry.lookup("python").timeout_ms == 5000
    assert registry.lookup("go").timeout_ms == 10000
    assert registry.lookup("rust").timeout_ms == 15000
    assert registry.lookup("csharp").extension == ".cs"


def test_java_requires_fixed_filename():
    java = default_registry().lookup("java")
    assert java.fixed_filename == "Main.java"
    source = Path("/tmp/codelab/run_abc/Main.java")
    assert java.build_command(source) == [
        ["javac", "/tmp/codelab/run_abc/Main.java"],
        ["java", "-cp", "/tmp/codelab/run_abc", "Main"],
    ]
    assert java.byproducts(source) == [Path("/tmp/codelab/run_abc/Main.class")]


def test_compiled_languages_name_their_executable():
    registry = default_registry()
    source = Path("/tmp/codelab/code_0123.cpp")
    assert registry.lookup("cpp").build_command(source) == [
        ["g++", "/tmp/codelab/code_0123.cpp", "-o", "/tmp/codelab/code_0123"],
        ["/tmp/codelab/code_0123"],
    ]
    assert registry.lookup("cpp").byproducts(source) == [Path("/tmp/codelab/code_0123")]
    cs = Path("/tmp/codelab/code_0123.cs")
    assert registry.lookup("csharp").byproducts(cs) == [Path("/tmp/codelab/code_0123.exe")]
    assert registry.lookup("python").byproducts(Path("/tmp/codelab/code_0123.py")) == []


def test_command_is_argv_not_shell():
    source = Path("/tmp/dir with space/code_1.py")
    steps = default_registry().lookup("python").build_command(source)
    assert steps == [["python3", "/tmp/dir with space/code_1.py"]]


def test_command_template_is_pure():
    go = default_registry().lookup("go")
    source = Path("/tmp/codelab/code_1.go")
    assert go.build_command(source) == go.build_command(source)


def test_profile_rejects_non_positive_timeout():
    with pytest.raises(ValueError):
        LanguageProfile("bad", ".x", lambda f: [["x", str(f)]], 0)


def test_profile_rejects_extension_without_dot():
    with pytest.raises(ValueError):
        LanguageProfile("bad", "x", lambda f: [["x", str(f)]], 1000)


def test_profile_rejects_empty_command():
    profile = LanguageProfile("bad", ".x", lambda f: [], 1000)
    with pytest.raises(ValueError):
        profile.build_command(Path("/tmp/code_1.x"))


def test_duplicate_ids_are_rejected():
    profile = LanguageProfile("dup", ".x", lambda f: [["x", str(f)]], 1000)
    with pytest.raises(ValueError):
        LanguageRegistry([profile, profile])


def test_restrict():
    registry = default_registry()
    restricted = registry.restrict(["python", "ruby"])
    assert restricted.languages() == ["python", "ruby"]
    assert restricted.lookup("java") is None
    # the original is untouched
    assert registry.lookup("java") is not None


def test_restrict_unknown_language():
    with pytest.raises(ValueError, match="cobol"):
        default_registry().restrict(["python", "cobol"])


def test_profiles_are_immutable():
    profile = default_registry().lookup("python")
    with pytest.raises(AttributeError):
        profile.timeout_ms = 1
