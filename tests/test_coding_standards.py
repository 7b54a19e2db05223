"""
Tests that enforce coding standards.

These tests verify that the codebase follows our import conventions:
- no 'from X import Y' outside __init__.py re-exports
- external modules are bound to a private alias ('import threading as _threading')
"""

import pathlib as _pathlib
import re as _re

import pytest as _pytest

# Directories to check
ROOT_DIR = _pathlib.Path(__file__).parent.parent
SRC_DIR = ROOT_DIR / "src" / "scopechain"
TESTS_DIR = ROOT_DIR / "tests"
SCRIPTS_DIR = ROOT_DIR / "scripts"

INTERNAL_PACKAGE = "scopechain"

_PLAIN_IMPORT = _re.compile(r"^import\s+([\w.]+)(?:\s+as\s+(\w+))?\s*(?:#.*)?$")


def _get_python_files(directory: _pathlib.Path) -> list[_pathlib.Path]:
    """Get all Python files in a directory, recursively."""
    return list(directory.rglob("*.py"))


def _is_init_file(path: _pathlib.Path) -> bool:
    """Check if a file is an __init__.py file."""
    return path.name == "__init__.py"


def _code_lines(content: str) -> list[tuple[int, str]]:
    """
    Return (line_number, stripped_line) for lines outside TYPE_CHECKING blocks.

    Lines inside 'if _typing.TYPE_CHECKING:' are skipped; those imports
    never run.
    """
    lines = content.split("\n")
    result: list[tuple[int, str]] = []
    in_type_checking = False

    for i, line in enumerate(lines, start=1):
        stripped = line.strip()

        if "if TYPE_CHECKING:" in line or "if _typing.TYPE_CHECKING:" in line:
            in_type_checking = True
            continue

        # End of TYPE_CHECKING block (simplistic detection)
        if (
            in_type_checking
            and stripped
            and not stripped.startswith("#")
            and not line.startswith(" ")
            and not line.startswith("\t")
        ):
            in_type_checking = False

        if not in_type_checking:
            result.append((i, stripped))

    return result


def _extract_from_imports(content: str) -> list[tuple[int, str]]:
    """Find 'from X import Y' statements, allowing __future__."""
    return [
        (i, line)
        for i, line in _code_lines(content)
        if line.startswith("from ")
        and " import " in line
        and "from __future__ import" not in line
    ]


def _extract_unaliased_external_imports(content: str) -> list[tuple[int, str]]:
    """Find 'import X' of external modules not bound to a '_'-prefixed alias."""
    violations: list[tuple[int, str]] = []
    for i, line in _code_lines(content):
        match = _PLAIN_IMPORT.match(line)
        if not match:
            continue
        module, alias = match.groups()
        if module.split(".")[0] == INTERNAL_PACKAGE:
            continue
        if alias is None or not alias.startswith("_"):
            violations.append((i, line))
    return violations


def _check_file(path: _pathlib.Path) -> list[str]:
    """Return import-style violation messages for one file."""
    content = path.read_text()
    found: list[tuple[int, str]] = []
    # __init__.py files may re-export with 'from X import Y'
    if not _is_init_file(path):
        found.extend(_extract_from_imports(content))
    found.extend(_extract_unaliased_external_imports(content))
    return [f"{path}:{line_num}: {line}" for line_num, line in sorted(found)]


def _fail_on(violations: list[str]) -> None:
    if violations:
        msg = "Found import style violations:\n"
        msg += "\n".join(f"  {v}" for v in violations)
        msg += "\n\nUse 'import X as _x' (external) or 'import X as x' (internal) instead."
        _pytest.fail(msg)


class TestImportStyle:
    """Tests for import style compliance."""

    def test_src_import_style(self) -> None:
        """Source files follow the import conventions."""
        violations: list[str] = []
        for path in _get_python_files(SRC_DIR):
            violations.extend(_check_file(path))
        _fail_on(violations)

    def test_tests_import_style(self) -> None:
        """Test files follow the import conventions."""
        violations: list[str] = []
        for path in _get_python_files(TESTS_DIR):
            # Skip this file itself (its fixtures contain forbidden imports)
            if path.name == "test_coding_standards.py":
                continue
            violations.extend(_check_file(path))
        _fail_on(violations)

    def test_scripts_import_style(self) -> None:
        """Scripts follow the import conventions."""
        violations: list[str] = []
        for path in _get_python_files(SCRIPTS_DIR):
            violations.extend(_check_file(path))
        _fail_on(violations)


class TestImportExtraction:
    """Tests for the import extraction logic itself."""

    def test_detects_from_import(self) -> None:
        """Should detect basic from imports."""
        imports = _extract_from_imports("from pathlib import Path")
        assert imports == [(1, "from pathlib import Path")]

    def test_allows_future_imports(self) -> None:
        """Should allow __future__ imports."""
        assert _extract_from_imports("from __future__ import annotations") == []

    def test_ignores_type_checking_block(self) -> None:
        """Should ignore imports inside TYPE_CHECKING blocks."""
        content = """
import typing as _typing

if _typing.TYPE_CHECKING:
    from some_module import SomeType
    import other_module

def foo():
    pass
"""
        assert _extract_from_imports(content) == []
        assert _extract_unaliased_external_imports(content) == []

    def test_detects_import_after_type_checking(self) -> None:
        """Should still detect imports after TYPE_CHECKING block ends."""
        content = """
import typing as _typing

if _typing.TYPE_CHECKING:
    from allowed import Type

from forbidden import Other
"""
        imports = _extract_from_imports(content)
        assert len(imports) == 1
        assert "from forbidden import Other" in imports[0][1]

    def test_external_import_needs_private_alias(self) -> None:
        """Bare or public-alias external imports are flagged."""
        content = "import threading\nimport weakref as weak\nimport gc as _gc\n"

        assert _extract_unaliased_external_imports(content) == [
            (1, "import threading"),
            (2, "import weakref as weak"),
        ]

    def test_internal_imports_may_be_public(self) -> None:
        """scopechain modules may be imported under public names."""
        content = "import scopechain\nimport scopechain.chain as chain\n"

        assert _extract_unaliased_external_imports(content) == []
