"""Source tree walking and companion-file resolution."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import AbstractSet, Iterator, List, Set, Tuple

from .keywords import ModelsConfig
from .logging import get_logger

PROVIDER_FILENAME = "model_provider.py"
SOURCE_SUFFIX = ".py"

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".mypy_cache",
    ".tox",
    ".idea",
    "build",
    "dist",
}


def logical_name(filename: str, markers: AbstractSet[str]) -> str | None:
    """Return the logical file a companion belongs to, or None for ordinary files.

    ``user.g.py`` and ``user.mapper.g.py`` both map to ``user.py``. Only inner
    segments count as markers; the stem and the suffix never do.
    """
    segments = filename.split(".")
    if len(segments) <= 2:
        return None
    inner = segments[1:-1]
    if not any(f".{segment}" in markers for segment in inner):
        return None
    kept = [segments[0], *(segment for segment in inner if f".{segment}" not in markers), segments[-1]]
    return ".".join(kept)


def _sorted_entries(directory: Path) -> Tuple[List[Path], List[Path]]:
    files: List[Path] = []
    dirs: List[Path] = []
    with os.scandir(directory) as entries:
        for entry in sorted(entries, key=lambda e: e.name):
            if entry.is_dir(follow_symlinks=False):
                if entry.name not in _EXCLUDED_DIRS:
                    dirs.append(Path(entry.path))
            elif entry.is_file():
                files.append(Path(entry.path))
    return files, dirs


class FileCollector:
    """Collects logical model candidates beneath a source root."""

    def __init__(self, config: ModelsConfig, *, logger: logging.Logger | None = None) -> None:
        self.config = config
        self.logger = logger or get_logger("collector")
        self._markers = config.resolve_extensions()

    def collect(self, root: Path) -> List[Path]:
        """Return candidate paths in traversal order, companions resolved to their logical file."""
        root = Path(root)
        if not root.is_dir():
            raise NotADirectoryError(f"Source directory not found: {root}")
        candidates = list(self._walk(root))
        self.logger.debug("Collected %d candidate files under %s", len(candidates), root)
        return candidates

    def _walk(self, directory: Path) -> Iterator[Path]:
        files, dirs = _sorted_entries(directory)
        resolved: Set[str] = set()
        for path in files:
            if not path.name.endswith(SOURCE_SUFFIX):
                continue
            if path.name in resolved:
                continue

            target = logical_name(path.name, self._markers)
            if target is not None:
                if target not in resolved:
                    resolved.add(target)
                    self.logger.debug("Resolved companion %s -> %s", path.name, target)
                    yield directory / target
                continue

            if self._is_candidate(path):
                resolved.add(path.name)
                yield path

        for child in dirs:
            yield from self._walk(child)

    def _is_candidate(self, path: Path) -> bool:
        if path.name == PROVIDER_FILENAME:
            return False
        content = path.read_text(encoding="utf-8", errors="replace")
        return "class" in content and self.config.mentions_keyword(content)


__all__ = ["FileCollector", "PROVIDER_FILENAME", "logical_name"]
