"""
Base domain model with camelCase JSON compatibility.

Provides automatic camelCase ↔ snake_case conversion for every persisted
output (drift reports, diffs, health, snapshots, checkpoints).
All output models should inherit from BaseDomainModel.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from dataclasses import dataclass, fields
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Type, TypeVar, Union

T = TypeVar("T", bound="BaseDomainModel")


def to_camel_case(snake_str: str) -> str:
    """
    Convert snake_case to camelCase.

    Examples:
        >>> to_camel_case("total_exports")
        'totalExports'
        >>> to_camel_case("drift_count")
        'driftCount'
    """
    components = snake_str.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


def to_snake_case(camel_str: str) -> str:
    """
    Convert camelCase to snake_case.

    Examples:
        >>> to_snake_case("totalExports")
        'total_exports'
        >>> to_snake_case("driftCount")
        'drift_count'
    """
    if not camel_str:
        return camel_str
    result = [camel_str[0].lower()]
    for char in camel_str[1:]:
        if char.isupper():
            result.extend(["_", char.lower()])
        else:
            result.append(char)
    return "".join(result)


def _serialize(value: Any) -> Any:
    if isinstance(value, BaseDomainModel):
        return value.to_json()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    return value


def _strip_optional(tp: Any) -> Any:
    if typing.get_origin(tp) in (Union, types.UnionType):
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def _deserialize(tp: Any, value: Any) -> Any:
    if value is None:
        return None

    tp = _strip_optional(tp)
    origin = typing.get_origin(tp)

    if origin in (list, tuple):
        args = typing.get_args(tp)
        item_type = args[0] if args else Any
        return [_deserialize(item_type, item) for item in value]

    if origin is dict:
        args = typing.get_args(tp)
        value_type = args[1] if len(args) == 2 else Any
        return {k: _deserialize(value_type, v) for k, v in value.items()}

    if isinstance(tp, type):
        if issubclass(tp, BaseDomainModel) and isinstance(value, dict):
            return tp.from_json(value)
        if issubclass(tp, Enum):
            return tp(value)
        if tp is datetime and isinstance(value, str):
            return datetime.fromisoformat(value)
        if tp is date and isinstance(value, str):
            return date.fromisoformat(value)

    return value


@dataclass
class BaseDomainModel:
    """
    Base class for all output models.

    Provides JSON compatibility for persisted and exchanged documents:
    - to_json() serializes to camelCase
    - from_json() deserializes from camelCase JSON
    - Enum values are serialized as their values
    - Dates are serialized as ISO 8601 strings
    - Nested models, lists and dicts of models are handled recursively
    """

    def to_json(self) -> Dict[str, Any]:
        """
        Serialize to camelCase JSON.

        Returns:
            Dictionary with camelCase keys, Enum values, dates as ISO strings
        """
        return {to_camel_case(field.name): _serialize(getattr(self, field.name)) for field in fields(self)}

    @classmethod
    def from_json(cls: Type[T], data: Dict[str, Any]) -> T:
        """
        Deserialize from camelCase JSON to the Python model.

        Args:
            data: Dictionary with camelCase keys

        Returns:
            Instance of the domain model with snake_case fields

        Raises:
            ValueError: If required fields are missing
        """
        hints = typing.get_type_hints(cls)
        kwargs: Dict[str, Any] = {}

        for field in fields(cls):
            if not field.init:
                continue
            json_key = to_camel_case(field.name)

            if json_key not in data:
                if field.default is not dataclasses.MISSING or field.default_factory is not dataclasses.MISSING:
                    continue
                raise ValueError(f"Missing required field: {json_key}")

            kwargs[field.name] = _deserialize(hints.get(field.name, Any), data[json_key])

        return cls(**kwargs)

    def __str__(self) -> str:
        """String representation for logging."""
        field_strs = [f"{field.name}={getattr(self, field.name)!r}" for field in fields(self)]
        return f"{self.__class__.__name__}({', '.join(field_strs)})"

    def __repr__(self) -> str:
        """Detailed representation for debugging."""
        return self.__str__()
