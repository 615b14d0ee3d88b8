"""Read-only mapping fields for frozen models.

``frozen=True`` only blocks attribute assignment; a plain ``dict`` field can
still be changed in place. Fields declared as ``ReadOnlyMapping[K, V]`` are
validated as dicts, stored as ``MappingProxyType`` and serialized back to
plain dicts.

Example:
    >>> from pydantic import BaseModel
    >>> class Labels(BaseModel):
    ...     values: ReadOnlyMapping[str, str] = Field(default_factory=empty_mapping)
    >>> labels = Labels(values={"team": "payments"})
    >>> labels.values["team"] = "search"
    Traceback (most recent call last):
        ...
    TypeError: 'mappingproxy' object does not support item assignment
    >>> labels.model_dump()
    {'values': {'team': 'payments'}}
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Annotated, Any, TypeVar

from pydantic import AfterValidator, Field, SerializerFunctionWrapHandler, WrapSerializer

K = TypeVar("K")
V = TypeVar("V")


def _freeze(value: Mapping[Any, Any]) -> Mapping[Any, Any]:
    return MappingProxyType(dict(value))


def _thaw(value: Mapping[Any, Any], handler: SerializerFunctionWrapHandler) -> Any:
    return handler(dict(value))


ReadOnlyMapping = Annotated[
    Mapping[K, V],
    AfterValidator(_freeze),
    WrapSerializer(_thaw),
]
"""Mapping field type stored as a read-only view."""


def empty_mapping() -> Mapping[Any, Any]:
    """Default factory for ReadOnlyMapping fields."""
    return MappingProxyType({})


__all__ = ["ReadOnlyMapping", "empty_mapping"]
