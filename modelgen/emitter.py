"""Renders the model provider module from a registry."""

from __future__ import annotations

import re
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .models import Registry

_TEMPLATE_NAME = "model_provider.py.j2"
_WORD_PATTERN = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|\d+")


def pascal_case(value: str) -> str:
    """Convert ``my_app``, ``my-app`` or ``myApp`` into ``MyApp``."""
    words = _WORD_PATTERN.findall(value)
    result = "".join(word[:1].upper() + word[1:].lower() for word in words)
    if not result:
        return "Project"
    if result[0].isdigit():
        return f"_{result}"
    return result


def provider_class_name(project_name: str) -> str:
    return f"{pascal_case(project_name)}ModelProvider"


class CodeEmitter:
    """Produces deterministic provider source text; performs no file I/O."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    def emit(self, registry: Registry, provider_type_name: str, *, project_name: str = "") -> str:
        if not provider_type_name.isidentifier():
            raise ValueError(f"Invalid provider class name: {provider_type_name!r}")
        if provider_type_name in registry.names:
            raise ValueError(f"Model {provider_type_name} clashes with the generated provider class")
        template = self._env.get_template(_TEMPLATE_NAME)
        return template.render(
            project_name=project_name or provider_type_name,
            class_name=provider_type_name,
            imports=registry.imports(),
            models=sorted(registry.models, key=lambda model: model.name),
            serializable=registry.serializable(),
            deserializable=registry.deserializable(),
        )


__all__ = ["CodeEmitter", "pascal_case", "provider_class_name"]
