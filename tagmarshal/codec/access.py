"""Reading, writing and converting field values of live record instances."""

import dataclasses
import re
from collections.abc import Mapping
from typing import Any

from .descriptor import PathStep, resolve_hints
from .errors import NotAddressableError, TypeMismatchError
from .kinds import Kind, Shape, shape_of, shape_of_value

_TRUE = "true"
_FALSE = "false"

_INT_TEXT = re.compile(r"[+-]?[0-9]+")
_FLOAT_TEXT = re.compile(
    r"[+-]?(?:(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)


def is_addressable(target: Any) -> bool:
    """Check that ``target`` is a record instance that can be mutated in place."""
    if isinstance(target, type) or not dataclasses.is_dataclass(target):
        return False
    params = getattr(type(target), "__dataclass_params__", None)
    return not (params is not None and params.frozen)


def ensure_addressable(target: Any) -> None:
    if not is_addressable(target):
        if isinstance(target, type):
            reason = "a class, not an instance"
        elif dataclasses.is_dataclass(target):
            reason = "a frozen record"
        else:
            reason = f"not a record ({type(target).__name__})"
        raise NotAddressableError(f"Cannot write into {target!r}: {reason}")


def zero_value(shape: Shape) -> Any:
    """Return the zero value of a shape."""
    kind = shape.kind
    if kind == Kind.BOOL:
        return False
    if kind == Kind.INT:
        return 0
    if kind == Kind.FLOAT:
        return 0.0
    if kind == Kind.STRING:
        return ""
    if kind == Kind.BYTES:
        return b""
    if kind == Kind.ENUM:
        members = list(shape.py_type)
        return members[0] if members else None
    if kind == Kind.RECORD:
        return zero_instance(shape.py_type)
    if kind == Kind.SEQUENCE:
        return shape.py_type()
    if kind == Kind.MAPPING:
        return {}
    return None


def zero_instance(record_type: type) -> Any:
    """Create a record whose required fields hold zero values."""
    hints = resolve_hints(record_type)
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(record_type):
        if not f.init:
            continue
        if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            kwargs[f.name] = zero_value(shape_of(hints.get(f.name, Any)))
    return record_type(**kwargs)


def read(instance: Any, path: tuple[PathStep, ...]) -> Any:
    """Return the current value at ``path``; a missing embedded record reads as None."""
    value = instance
    for step in path:
        if value is None:
            return None
        value = getattr(value, step.name)
    return value


def _assign(obj: Any, name: str, value: Any) -> None:
    try:
        setattr(obj, name, value)
    except dataclasses.FrozenInstanceError as ex:
        raise NotAddressableError(
            f"Cannot write {name!r} into frozen record {type(obj).__qualname__}"
        ) from ex


def write(instance: Any, path: tuple[PathStep, ...], value: Any, *, allocate: bool = True) -> None:
    """Write ``value`` at ``path``.

    Embedded steps holding None are allocated as zero records and written
    back before descending when ``allocate`` is set.

    Raises:
        NotAddressableError: If the root or an intermediate record is immutable,
            or an embedded step is None and ``allocate`` is not set.
    """
    ensure_addressable(instance)

    obj = instance
    for step in path[:-1]:
        child = getattr(obj, step.name)
        if child is None:
            if not allocate or step.record_type is None:
                raise NotAddressableError(f"Embedded record {step.name!r} is None")
            child = zero_instance(step.record_type)
            _assign(obj, step.name, child)
        obj = child

    _assign(obj, path[-1].name, value)


def rebuild(instance: Any, assignments: list[tuple[tuple[PathStep, ...], Any]]) -> Any:
    """Return a copy of a frozen record with each value written at its path.

    Embedded records along a path are rebuilt the same way, or written in
    place when they are mutable.

    Raises:
        NotAddressableError: If a field cannot be passed to the constructor.
    """
    changes: dict[str, Any] = {}
    below: dict[PathStep, list[tuple[tuple[PathStep, ...], Any]]] = {}
    for path, value in assignments:
        if len(path) == 1:
            changes[path[0].name] = value
        else:
            below.setdefault(path[0], []).append((path[1:], value))

    for step, inner in below.items():
        child = getattr(instance, step.name)
        if child is None:
            if step.record_type is None:
                raise NotAddressableError(f"Embedded record {step.name!r} is None")
            child = zero_instance(step.record_type)
        if is_addressable(child):
            for path, value in inner:
                write(child, path, value)
        else:
            child = rebuild(child, inner)
        changes[step.name] = child

    try:
        return dataclasses.replace(instance, **changes)
    except (TypeError, ValueError) as ex:
        raise NotAddressableError(
            f"Cannot rebuild frozen record {type(instance).__qualname__}: {ex}"
        ) from ex


def is_empty(shape: Shape, value: Any) -> bool:
    """Check whether a value counts as empty for omit-if-empty."""
    if value is None:
        return True
    kind = shape.kind
    if kind == Kind.ANY:
        kind = shape_of_value(value).kind
    if kind == Kind.BOOL:
        return value is False
    if kind in (Kind.INT, Kind.FLOAT):
        return value == 0
    if kind in (Kind.STRING, Kind.BYTES, Kind.SEQUENCE, Kind.MAPPING):
        return len(value) == 0
    return False


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def convert(shape: Shape, value: Any, *, key: str, as_string: bool = False) -> Any:
    """Reconcile a decoded scalar with a declared scalar shape.

    Numbers convert between int and float when no information is lost;
    ``as_string`` additionally parses strings into numbers and booleans.

    Raises:
        TypeMismatchError: If the value cannot be represented without
            truncation or coercion.
    """
    kind = shape.kind
    text = as_string and isinstance(value, str)

    if kind == Kind.BOOL:
        if isinstance(value, bool):
            return value
        if text and value in (_TRUE, _FALSE):
            return value == _TRUE
    elif kind == Kind.INT:
        if _is_int(value):
            return int(value)
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if text and _INT_TEXT.fullmatch(value):
            return int(value)
    elif kind == Kind.FLOAT:
        if _is_int(value) or isinstance(value, float):
            return float(value)
        if text and _FLOAT_TEXT.fullmatch(value):
            return float(value)
    elif kind == Kind.STRING:
        if isinstance(value, str):
            return value
    elif kind == Kind.BYTES:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
    elif kind == Kind.ENUM:
        if isinstance(value, shape.py_type):
            return value
        if not isinstance(value, (bool, Mapping, list, tuple)):
            try:
                return shape.py_type(value)
            except ValueError:
                pass

    raise TypeMismatchError(key, shape.describe(), value)


def stringify(shape: Shape, value: Any, *, key: str) -> Any:
    """Encode a scalar as its string form; other kinds pass through."""
    kind = shape.kind
    if kind == Kind.BOOL and isinstance(value, bool):
        return _TRUE if value else _FALSE
    if kind == Kind.INT and _is_int(value):
        return str(value)
    if kind == Kind.FLOAT and (_is_int(value) or isinstance(value, float)):
        return str(float(value))
    if kind == Kind.STRING and isinstance(value, str):
        return value
    if kind in (Kind.BOOL, Kind.INT, Kind.FLOAT, Kind.STRING):
        raise TypeMismatchError(key, shape.describe(), value)
    return value
