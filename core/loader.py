"""
File loader - expands the include/exclude glob patterns into the list of
source files to process and reads them without touching line endings.
"""

import glob
import os
import re
from pathlib import Path
from typing import Iterable, List

from core.exceptions import ParseError

# Directories to always skip
EXCLUDE_DIRS = frozenset({
    "node_modules", ".git", "__pycache__", ".venv", "venv",
    "dist", "build", ".next", ".nuxt", "coverage", "vendor",
})

_BRACE_RE = re.compile(r"\{([^{}]*)\}")


def expand_braces(pattern: str) -> List[str]:
    """
    Expand ``{a,b}`` groups the way shell/node globs do.
    e.g. src/**/*.{ts,tsx} → [src/**/*.ts, src/**/*.tsx]
    """
    match = _BRACE_RE.search(pattern)
    if not match:
        return [pattern]
    expanded: List[str] = []
    for alternative in match.group(1).split(","):
        expanded.extend(
            expand_braces(pattern[:match.start()] + alternative + pattern[match.end():])
        )
    return expanded


def _glob_all(patterns: Iterable[str], root: str) -> set[str]:
    matches: set[str] = set()
    for pattern in patterns:
        for expanded in expand_braces(pattern):
            matches.update(glob.glob(expanded, root_dir=root, recursive=True))
    return matches


def list_files(
    includes: Iterable[str],
    excludes: Iterable[str] = (),
    root: str = ".",
) -> List[str]:
    """
    Collect the files matched by ``includes`` minus those matched by ``excludes``.
    Paths are relative to ``root`` (joined onto it), de-duplicated and sorted.
    """
    included = _glob_all(includes, root) - _glob_all(excludes, root)

    files: List[str] = []
    for rel in sorted(included):
        if set(Path(rel).parts) & EXCLUDE_DIRS:
            continue
        path = str(Path(root) / rel)
        if os.path.isfile(path):
            files.append(path)
    return files


def read_source(path: str) -> str:
    """Read a source file as UTF-8, keeping its original newlines."""
    try:
        with open(path, "r", encoding="utf-8", newline="") as fh:
            return fh.read()
    except UnicodeDecodeError as e:
        raise ParseError(path, f"not valid UTF-8 ({e.reason} at byte {e.start})") from e
