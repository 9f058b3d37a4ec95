from __future__ import annotations

from typing import Any, Iterable, Mapping, Protocol

from lightboard_ui.component_schema import STANDARD_FIELDS


class SupportsGet(Protocol):
    def get(self, key: str) -> Any:
        ...


def to_object(
    obj: SupportsGet,
    properties_to_include: Iterable[str] | None = None,
    extra: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Serialize the standard object fields, requested extras, then `extra`.

    Later sources win on key collisions. Values are converted to JSON-friendly
    lists/dicts.
    """

    record: dict[str, Any] = {name: _plain(obj.get(name)) for name in STANDARD_FIELDS}
    for name in properties_to_include or ():
        record[name] = _plain(obj.get(name))
    for name, value in (extra or {}).items():
        record[name] = _plain(value)
    return record


def _plain(value: Any) -> Any:
    if isinstance(value, (tuple, list)):
        return [_plain(item) for item in value]
    if isinstance(value, Mapping):
        return {str(k): _plain(v) for k, v in value.items()}
    return value
