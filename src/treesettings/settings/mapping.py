"""Conversion between settings objects and neutral field maps.

A field map is a ``dict[str, str]`` from field name to textual value. It is the shape in
which settings are written to snapshots, and the bridge used to read a setting stored as
one class back as another class with compatible field names.

Dataclasses are mapped through their declared fields and annotations. Plain classes are
mapped through their public, non-callable attributes, whether set on the instance or
declared on the class. They must be constructible without arguments so that their
defaults can be used for fields the source lacks. Properties are not fields.
"""

import dataclasses
import enum
import inspect
import json
import types
import typing
from typing import Any

from ..errors import CoercionFailure

_TRUE_TEXT = ('true', '1', 'yes', 'on')
_FALSE_TEXT = ('false', '0', 'no', 'off')


def to_field_map(instance: Any) -> dict[str, str]:
    """Serialize a settings object into a field map.

    Fields whose value is None are omitted so that the target's default applies on the way
    back in.

    Args:
        instance: Dataclass instance or plain object with public attributes

    Returns:
        Mapping of field name to textual value

    Raises:
        CoercionFailure: If the fields of the object cannot be read
    """
    if dataclasses.is_dataclass(instance) and not isinstance(instance, type):
        values = {f.name: getattr(instance, f.name) for f in dataclasses.fields(instance)}
    else:
        values = _object_fields(instance)

    return {name: to_text(value) for name, value in values.items() if value is not None}


def _object_fields(instance: Any) -> dict[str, Any]:
    """Collect the public, non-callable attributes of a plain object.

    Raises:
        CoercionFailure: If the object has no attribute dictionary, as for builtins
    """
    cls = type(instance)
    if not hasattr(instance, '__dict__'):
        raise CoercionFailure(f"Cannot read fields of {cls.__qualname__}: it has no attribute dictionary")

    return {
        name: value
        for name, value in inspect.getmembers(instance)
        if not name.startswith('_')
        and not callable(value)
        and not inspect.isdatadescriptor(inspect.getattr_static(cls, name, None))
    }


def from_field_map(cls: type, fields: dict[str, str]) -> Any:
    """Deserialize a field map into an instance of ``cls``.

    Fields of ``cls`` missing from the map keep the defaults of ``cls``; entries of the map
    that ``cls`` does not declare are ignored.

    Args:
        cls: Target dataclass or plain class
        fields: Mapping of field name to textual value

    Returns:
        New instance of ``cls``

    Raises:
        CoercionFailure: If a value cannot be converted, a required field has no value, or
                         ``cls`` cannot be constructed
    """
    if dataclasses.is_dataclass(cls):
        return _dataclass_from_field_map(cls, fields)
    return _object_from_field_map(cls, fields)


def _dataclass_from_field_map(cls: type, fields: dict[str, str]) -> Any:
    try:
        hints = typing.get_type_hints(cls)
    except Exception as e:
        raise CoercionFailure(f"Cannot resolve field annotations of {cls.__qualname__}: {e}") from e

    kwargs = {}
    for f in dataclasses.fields(cls):
        if not f.init or f.name not in fields:
            continue
        kwargs[f.name] = _from_text(fields[f.name], hints.get(f.name, str), cls, f.name)

    try:
        return cls(**kwargs)
    except TypeError as e:
        raise CoercionFailure(f"Cannot construct {cls.__qualname__} from fields {sorted(fields)}: {e}") from e


def _object_from_field_map(cls: type, fields: dict[str, str]) -> Any:
    try:
        instance = cls()
    except TypeError as e:
        raise CoercionFailure(f"{cls.__qualname__} cannot be constructed without arguments: {e}") from e

    defaults = _object_fields(instance)
    for name, text in fields.items():
        if name not in defaults:
            continue
        current = defaults[name]
        annotation = type(current) if current is not None else str
        setattr(instance, name, _from_text(text, annotation, cls, name))

    return instance


def to_text(value: Any) -> str:
    """Render one field value as text; the inverse of the conversion applied by from_field_map."""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, str):
        return value
    if isinstance(value, enum.Enum):
        return value.name
    if isinstance(value, (list, tuple, dict)):
        return json.dumps(value)
    return str(value)


def _from_text(text: str, annotation: Any, cls: type, name: str) -> Any:
    try:
        return _convert(text, annotation)
    except (ValueError, TypeError, KeyError) as e:
        raise CoercionFailure(
            f"Cannot convert {text!r} for field {cls.__qualname__}.{name} ({annotation!r}): {e}") from e


def _convert(text: str, annotation: Any) -> Any:
    origin = typing.get_origin(annotation)

    if origin is typing.Union or origin is types.UnionType:
        candidates = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        return _convert(text, candidates[0]) if candidates else text

    if origin is not None:
        # Parameterized containers such as list[int] or dict[str, str]
        annotation = origin

    if annotation is Any or annotation is str:
        return text
    if annotation is bool:
        lowered = text.strip().lower()
        if lowered in _TRUE_TEXT:
            return True
        if lowered in _FALSE_TEXT:
            return False
        raise ValueError(f"not a boolean: {text!r}")
    if annotation is int:
        return int(text)
    if annotation is float:
        return float(text)
    if annotation in (list, dict, tuple):
        decoded = json.loads(text)
        if not isinstance(decoded, dict if annotation is dict else list):
            raise ValueError(f"expected a JSON {annotation.__name__}, got {type(decoded).__name__}")
        return tuple(decoded) if annotation is tuple else annotation(decoded)
    if isinstance(annotation, type) and issubclass(annotation, enum.Enum):
        return annotation[text]
    if callable(annotation):
        return annotation(text)
    return text
