"""Core ClientFinder data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Tuple, Union

FieldValue = Union[str, int, float, bool, None]


def value_text(value: FieldValue) -> str:
    """Return the text used to match and display a field value."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


@dataclass(frozen=True, slots=True)
class Record:
    """One client: an ordered, read-only mapping of field names to scalars.

    Keys are normalised to ``str`` on construction, so ``Record({1: "x"})``
    and ``Record({"1": "x"})`` hold the same field.
    """

    fields: Mapping[str, FieldValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        normalized = {str(key): value for key, value in self.fields.items()}
        object.__setattr__(self, "fields", MappingProxyType(normalized))

    def __contains__(self, field_name: object) -> bool:
        return field_name in self.fields

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    # Field values live in a mappingproxy, which cannot be hashed.
    __hash__ = None  # type: ignore[assignment]

    def get(self, field_name: str, default: Any = None) -> FieldValue:
        return self.fields.get(field_name, default)

    def field_names(self) -> Tuple[str, ...]:
        return tuple(self.fields)

    def render(self) -> str:
        """Human readable ``key: value`` listing in field order."""
        return ", ".join(f"{key}: {value_text(value)}" for key, value in self.fields.items())

    def to_dict(self) -> Dict[str, FieldValue]:
        return dict(self.fields)
