"""Keyword registry describing serialize/deserialize markers and companion suffixes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, Tuple

BUILTIN_EXTENSIONS: Tuple[str, ...] = (".mapper", ".freezed", ".g")


class KeywordRole(str, Enum):
    """Capability a keyword marks on a method name."""

    SERIALIZE = "serialize"
    DESERIALIZE = "deserialize"


@dataclass(frozen=True)
class KeywordSpec:
    """A single configured method-name fragment."""

    text: str
    role: KeywordRole

    def __post_init__(self) -> None:
        if not self.text:
            raise ValueError("keyword text must not be empty")

    def matches(self, method_name: str) -> bool:
        return self.text in method_name


BUILTIN_SERIALIZE = KeywordSpec("to_json", KeywordRole.SERIALIZE)
BUILTIN_DESERIALIZE = KeywordSpec("from_json", KeywordRole.DESERIALIZE)


def _with_builtin(specs: Iterable[KeywordSpec], builtin: KeywordSpec) -> Tuple[KeywordSpec, ...]:
    for spec in specs:
        if spec.role is not builtin.role:
            raise ValueError(f"keyword '{spec.text}' has role {spec.role.value}, expected {builtin.role.value}")
    ordered = [spec for spec in specs if spec != builtin]
    ordered.append(builtin)
    return tuple(ordered)


@dataclass(frozen=True)
class ModelsConfig:
    """Immutable model discovery settings.

    The built-in ``to_json``/``from_json`` keywords are always present, appended
    after any configured keywords so custom names take precedence when a method
    matches more than one.
    """

    extra_extensions: FrozenSet[str] = frozenset()
    serialize_keywords: Tuple[KeywordSpec, ...] = (BUILTIN_SERIALIZE,)
    deserialize_keywords: Tuple[KeywordSpec, ...] = (BUILTIN_DESERIALIZE,)

    @classmethod
    def build(
        cls,
        *,
        extensions: Iterable[str] = (),
        serialize: Iterable[str] = (),
        deserialize: Iterable[str] = (),
    ) -> "ModelsConfig":
        """Create a registry from raw configuration values."""
        normalised = frozenset(f".{ext.strip().lstrip('.')}" for ext in extensions if ext.strip().lstrip("."))
        return cls(
            extra_extensions=normalised,
            serialize_keywords=_with_builtin(
                [KeywordSpec(text, KeywordRole.SERIALIZE) for text in serialize],
                BUILTIN_SERIALIZE,
            ),
            deserialize_keywords=_with_builtin(
                [KeywordSpec(text, KeywordRole.DESERIALIZE) for text in deserialize],
                BUILTIN_DESERIALIZE,
            ),
        )

    def resolve_extensions(self) -> FrozenSet[str]:
        """Return built-in companion markers unioned with configured ones."""
        return frozenset(BUILTIN_EXTENSIONS) | self.extra_extensions

    def is_serialize_keyword(self, method_name: str) -> bool:
        return any(spec.matches(method_name) for spec in self.serialize_keywords)

    def is_deserialize_keyword(self, method_name: str) -> bool:
        return any(spec.matches(method_name) for spec in self.deserialize_keywords)

    def mentions_keyword(self, text: str) -> bool:
        """Return True when ``text`` contains any serialize or deserialize keyword."""
        return self.is_serialize_keyword(text) or self.is_deserialize_keyword(text)


__all__ = [
    "BUILTIN_DESERIALIZE",
    "BUILTIN_EXTENSIONS",
    "BUILTIN_SERIALIZE",
    "KeywordRole",
    "KeywordSpec",
    "ModelsConfig",
]
