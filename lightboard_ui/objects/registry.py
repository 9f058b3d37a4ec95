from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping


ObjectCallback = Callable[[Any], Any]
ObjectFactory = Callable[[dict[str, Any], ObjectCallback], Any]


def _identity(obj: Any) -> Any:
    return obj


class ObjectRegistry:
    """Maps serialized type tags to reconstruction factories for one editor.

    A factory receives the serialized record and a continuation, and returns
    whatever the continuation returns for the newly built object.
    """

    def __init__(self) -> None:
        self._factories: dict[str, ObjectFactory] = {}

    def register(self, type_tag: str, factory: ObjectFactory) -> None:
        if not type_tag or not isinstance(type_tag, str):
            raise ValueError("type tag must be a non-empty string")
        if type_tag in self._factories:
            raise ValueError(f"object type `{type_tag}` is already registered")
        self._factories[type_tag] = factory

    def unregister(self, type_tag: str) -> None:
        self._factories.pop(type_tag, None)

    def get(self, type_tag: str) -> ObjectFactory:
        try:
            return self._factories[type_tag]
        except KeyError:
            raise KeyError(f"unknown object type: {type_tag}") from None

    def list_types(self) -> list[str]:
        return sorted(self._factories)

    def from_object(self, record: Mapping[str, Any], callback: ObjectCallback | None = None) -> Any:
        type_tag = record.get("type")
        if not isinstance(type_tag, str) or not type_tag:
            raise ValueError("serialized object is missing a `type` tag")
        factory = self.get(type_tag)
        return factory(dict(record), callback or _identity)

    def enliven_objects(self, records: Iterable[Mapping[str, Any]]) -> list[Any]:
        return [self.from_object(record) for record in records]
