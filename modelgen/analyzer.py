"""Static detection of serializable classes in Python sources."""

from __future__ import annotations

import ast
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

from .keywords import KeywordSpec, ModelsConfig
from .logging import get_logger
from .models import CandidateFile, Model, module_for_path

_FACTORY_DECORATORS = {"classmethod", "staticmethod"}


class AnalysisError(RuntimeError):
    """Raised when a candidate file cannot be structurally understood."""

    def __init__(self, path: Path | str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = Path(path)


class DuplicateModelError(AnalysisError):
    """Raised when two files declare a model with the same class name."""


def _decorator_names(node: ast.FunctionDef) -> List[str]:
    names: List[str] = []
    for decorator in node.decorator_list:
        if isinstance(decorator, ast.Name):
            names.append(decorator.id)
        elif isinstance(decorator, ast.Attribute):
            names.append(decorator.attr)
    return names


def _public_methods(node: ast.ClassDef) -> tuple[List[str], List[str]]:
    """Split public methods into (instance methods, factory methods)."""
    instance: List[str] = []
    factories: List[str] = []
    for child in node.body:
        if not isinstance(child, ast.FunctionDef) or child.name.startswith("_"):
            continue
        if _FACTORY_DECORATORS.intersection(_decorator_names(child)):
            factories.append(child.name)
        else:
            instance.append(child.name)
    return instance, factories


def _match(methods: Sequence[str], keywords: Iterable[KeywordSpec]) -> Optional[str]:
    for keyword in keywords:
        for method in methods:
            if keyword.matches(method):
                return method
    return None


class ModelAnalyzer:
    """Extracts :class:`Model` records from candidate files."""

    def __init__(self, *, logger: logging.Logger | None = None) -> None:
        self.logger = logger or get_logger("analyzer")

    def analyze(self, files: Iterable[Path], config: ModelsConfig, source_root: Path) -> List[Model]:
        """Return models for every candidate, in file order.

        Raises :class:`DuplicateModelError` when two files define the same class name.
        """
        source_root = Path(source_root)
        models: List[Model] = []
        owners: Dict[str, Path] = {}
        for path in files:
            candidate = self._read(Path(path))
            for model in self.analyze_file(candidate, config, source_root):
                previous = owners.get(model.name)
                if previous is not None and previous != candidate.path:
                    raise DuplicateModelError(
                        candidate.path,
                        f"model '{model.name}' is already declared in {previous}",
                    )
                if previous is None:
                    owners[model.name] = candidate.path
                    models.append(model)
        return models

    def analyze_file(self, candidate: CandidateFile, config: ModelsConfig, source_root: Path) -> List[Model]:
        try:
            tree = ast.parse(candidate.raw_content, filename=str(candidate.path))
        except SyntaxError as exc:
            raise AnalysisError(candidate.path, f"invalid syntax at line {exc.lineno}: {exc.msg}") from exc

        # A later class statement rebinds the name, so the last definition wins.
        classes: Dict[str, ast.ClassDef] = {}
        for node in tree.body:
            if isinstance(node, ast.ClassDef) and not node.name.startswith("_"):
                classes[node.name] = node
        if not classes:
            self.logger.debug("No public classes found in %s; skipping", candidate.path)
            return []

        detected: List[tuple[str, Optional[str], Optional[str]]] = []
        for node in classes.values():
            instance, factories = _public_methods(node)
            to_json = _match(instance, config.serialize_keywords)
            from_json = _match(factories, config.deserialize_keywords)
            if to_json is None and from_json is None:
                continue
            detected.append((node.name, to_json, from_json))
        if not detected:
            return []

        import_path = self._import_path(candidate.path, source_root)
        models: List[Model] = []
        for name, to_json, from_json in detected:
            models.append(
                Model(
                    name=name,
                    import_path=import_path,
                    has_to_json=to_json is not None,
                    to_json_method=to_json,
                    has_from_json=from_json is not None,
                    from_json_method=from_json,
                )
            )
            self.logger.debug("Detected model %s in %s", name, import_path)
        return models

    @staticmethod
    def _read(path: Path) -> CandidateFile:
        try:
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise AnalysisError(path, f"not valid UTF-8 text ({exc.reason})") from exc
        return CandidateFile(path=path, raw_content=content)

    @staticmethod
    def _import_path(path: Path, source_root: Path) -> str:
        try:
            relative = path.resolve().relative_to(source_root.resolve()).as_posix()
        except ValueError as exc:
            raise AnalysisError(path, f"file is outside the source root {source_root}") from exc
        try:
            module_for_path(relative)
        except ValueError as exc:
            raise AnalysisError(path, str(exc)) from exc
        return relative


__all__ = ["AnalysisError", "DuplicateModelError", "ModelAnalyzer"]
