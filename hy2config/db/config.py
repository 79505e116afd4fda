from __future__ import annotations

import json
import logging
import types
from abc import ABC
from dataclasses import dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import (
    Any,
    TypeVar,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

T = TypeVar("T", bound="ConfigBase")

logger = logging.getLogger("hy2config.db")

_UNION_TYPES = (Union, types.UnionType)


def _is_optional(field_type: Any) -> bool:
    """Check if type is Optional[X] or X | None."""
    if get_origin(field_type) in _UNION_TYPES:
        return type(None) in get_args(field_type)
    return False


def _get_inner_type(field_type: Any) -> Any:
    """Get inner type from Optional[X], list[X] or tuple[X, ...]."""
    origin = get_origin(field_type)
    if origin in (list, tuple):
        args = [a for a in get_args(field_type) if a is not Ellipsis]
        return args[0] if args else Any
    if origin in _UNION_TYPES:
        for arg in get_args(field_type):
            if arg is not type(None):
                return arg
    return field_type


def _dump(value: Any) -> Any:
    if isinstance(value, ConfigBase):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_dump(item) for item in value]
    return value


def _load(field_type: Any, value: Any) -> Any:
    origin = get_origin(field_type)
    if origin in (list, tuple):
        inner_type = _get_inner_type(field_type)
        items = [_load(inner_type, item) for item in value]
        return tuple(items) if origin is tuple else items
    if isinstance(field_type, type):
        if issubclass(field_type, ConfigBase):
            return field_type.from_dict(value) if isinstance(value, dict) else value
        if issubclass(field_type, Enum):
            return field_type(value)
    return value


@dataclass(frozen=True)
class ConfigBase(ABC):
    """
    Base class for immutable settings values.

    Subclasses are frozen dataclasses. Changes go through ``with_changes``,
    which returns a new instance. JSON serialization is automatic.
    """

    def to_dict(self, exclude_none: bool = True) -> dict[str, Any]:
        """
        Convert to dictionary.

        Args:
            exclude_none: Exclude fields with None value
        """
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if exclude_none and value is None:
                continue
            result[f.name] = _dump(value)
        return result

    def to_json(self, indent: int | None = 2, ensure_ascii: bool = False) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=ensure_ascii)

    @classmethod
    def from_dict(cls: type[T], data: dict[str, Any]) -> T:
        """
        Create instance from dictionary.

        Unknown keys are ignored, missing keys take the field default.
        """
        if not data:
            return cls()

        field_types = get_type_hints(cls)

        kwargs = {}
        for f in fields(cls):
            if f.name not in data:
                continue

            value = data[f.name]
            field_type = field_types.get(f.name, f.type)

            if _is_optional(field_type):
                if value is None:
                    kwargs[f.name] = None
                    continue
                field_type = _get_inner_type(field_type)

            kwargs[f.name] = _load(field_type, value)

        return cls(**kwargs)

    @classmethod
    def from_json(cls: type[T], json_str: str) -> T:
        """Create instance from JSON string."""
        try:
            data = json.loads(json_str)
            return cls.from_dict(data)
        except json.JSONDecodeError:
            return cls()

    @classmethod
    def load(cls: type[T], filepath: Path | str) -> T:
        """Load from JSON file."""
        path = Path(filepath)
        if not path.exists():
            return cls()

        try:
            content = path.read_text(encoding="utf-8")
            return cls.from_json(content)
        except (OSError, ValueError, TypeError) as e:
            logger.error("Error loading %s from %s: %s", cls.__name__, filepath, e)
            return cls()

    def save(self, filepath: Path | str, indent: int = 2) -> bool:
        """Save to JSON file."""
        path = Path(filepath)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(self.to_json(indent=indent), encoding="utf-8")
            return True
        except OSError as e:
            logger.error("Error saving %s to %s: %s", type(self).__name__, filepath, e)
            return False

    def with_changes(self: T, **changes: Any) -> T:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)
