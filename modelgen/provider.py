"""Runtime base class for generated model providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Mapping, Type, Union

JsonMap = Dict[str, Any]


class UnsupportedModelError(LookupError):
    """Raised when a provider is asked to (de)serialize an unregistered type."""

    def __init__(self, model: object) -> None:
        label = model.__name__ if isinstance(model, type) else str(model)
        super().__init__(f"Model {label} not supported")
        self.model = model


class ModelProvider(ABC):
    """Contract implemented by generated ``model_provider.py`` modules.

    Subclasses expose two type-keyed maps; dispatch is a plain dictionary
    lookup on the exact runtime type (subclasses must be registered on their own).
    """

    #: Stable string tag for every registered model class.
    model_tags: Mapping[str, type] = {}

    @property
    @abstractmethod
    def to_json_models(self) -> Mapping[type, Callable[[Any], JsonMap]]:
        """Serializers keyed by model type."""

    @property
    @abstractmethod
    def from_json_models(self) -> Mapping[type, Callable[[JsonMap], Any]]:
        """Deserializers keyed by model type."""

    def from_json(self, model: Union[Type[Any], str], data: JsonMap) -> Any:
        """Build an instance of ``model`` (a class or its tag) from ``data``."""
        model_type = self.model_tags.get(model, model) if isinstance(model, str) else model
        factory = self.from_json_models.get(model_type)  # type: ignore[arg-type]
        if factory is None:
            raise UnsupportedModelError(model)
        return factory(data)

    def to_json(self, model: Any) -> JsonMap:
        """Serialize ``model`` using the serializer registered for its type."""
        serializer = self.to_json_models.get(type(model))
        if serializer is None:
            raise UnsupportedModelError(type(model))
        return serializer(model)


__all__ = ["JsonMap", "ModelProvider", "UnsupportedModelError"]
