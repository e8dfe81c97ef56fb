"""Core data models shared across modelgen components."""

from __future__ import annotations

import keyword
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class CandidateFile:
    """A logical source file eligible for analysis."""

    path: Path
    raw_content: str


@dataclass(frozen=True)
class Model:
    """One discovered serializable type."""

    name: str
    import_path: str
    has_to_json: bool = False
    to_json_method: Optional[str] = None
    has_from_json: bool = False
    from_json_method: Optional[str] = None

    def __post_init__(self) -> None:
        if self.has_to_json and not self.to_json_method:
            raise ValueError(f"Model {self.name} is serializable but has no to_json method")
        if self.has_from_json and not self.from_json_method:
            raise ValueError(f"Model {self.name} is deserializable but has no from_json method")

    @property
    def module(self) -> str:
        """Dotted module path derived from ``import_path``."""
        return module_for_path(self.import_path)


@dataclass
class Registry:
    """Ordered models plus the derived import set used for emission."""

    models: List[Model] = field(default_factory=list)

    @property
    def names(self) -> List[str]:
        return [model.name for model in self.models]

    def imports(self) -> List[Tuple[str, List[str]]]:
        """Return ``(module, sorted names)`` pairs, sorted by module."""
        grouped: dict[str, set[str]] = {}
        for model in self.models:
            grouped.setdefault(model.module, set()).add(model.name)
        return [(module, sorted(names)) for module, names in sorted(grouped.items())]

    def serializable(self) -> List[Model]:
        return sorted((model for model in self.models if model.has_to_json), key=lambda m: m.name)

    def deserializable(self) -> List[Model]:
        return sorted((model for model in self.models if model.has_from_json), key=lambda m: m.name)


def module_for_path(import_path: str) -> str:
    """Translate ``pkg/user.py`` into ``pkg.user`` (``pkg/__init__.py`` into ``pkg``)."""
    parts = list(PurePosixPath(import_path).with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts.pop()
    if not parts:
        raise ValueError(f"Cannot derive a module name from {import_path!r}")
    for part in parts:
        if not part.isidentifier() or keyword.iskeyword(part):
            raise ValueError(f"{import_path!r} is not importable: {part!r} is not a valid module name")
    return ".".join(parts)


__all__ = ["CandidateFile", "Model", "Registry", "module_for_path"]
