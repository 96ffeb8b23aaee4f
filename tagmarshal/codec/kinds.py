"""Classification of field annotations into value kinds."""

import collections.abc
import dataclasses
import types
import typing
from dataclasses import dataclass
from enum import Enum, StrEnum, auto
from typing import Any


class Kind(StrEnum):
    """Value category of a field, used to pick encode/decode behavior."""

    BOOL = auto()
    INT = auto()
    FLOAT = auto()
    STRING = auto()
    BYTES = auto()
    ENUM = auto()
    RECORD = auto()
    OPTIONAL = auto()  # pointer-to-X; None is the nil pointer
    SEQUENCE = auto()
    MAPPING = auto()
    ANY = auto()
    UNSUPPORTED = auto()


SCALAR_KINDS = frozenset([Kind.BOOL, Kind.INT, Kind.FLOAT, Kind.STRING])

_SCALAR_TYPES: dict[Any, Kind] = {
    bool: Kind.BOOL,
    int: Kind.INT,
    float: Kind.FLOAT,
    str: Kind.STRING,
    bytes: Kind.BYTES,
}

_SEQUENCE_ORIGINS = (list, tuple, collections.abc.Sequence, collections.abc.MutableSequence)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


@dataclass(frozen=True)
class Shape:
    """Kind of a value plus what is needed to build or convert it.

    ``py_type`` is the record or enum class for RECORD/ENUM, and the
    container type (list or tuple) for SEQUENCE. ``elem`` is the element
    shape for OPTIONAL, SEQUENCE and MAPPING (mapping values).
    """

    kind: Kind
    py_type: Any = None
    elem: "Shape | None" = None
    annotation: Any = None

    @property
    def base(self) -> "Shape":
        """The shape behind any optional wrappers."""
        shape = self
        while shape.kind == Kind.OPTIONAL and shape.elem is not None:
            shape = shape.elem
        return shape

    def describe(self) -> str:
        if self.kind == Kind.OPTIONAL and self.elem is not None:
            return f"optional[{self.elem.describe()}]"
        if self.kind in (Kind.SEQUENCE, Kind.MAPPING) and self.elem is not None:
            return f"{self.kind.value}[{self.elem.describe()}]"
        if self.kind in (Kind.RECORD, Kind.ENUM):
            return self.py_type.__name__
        return self.kind.value


def is_record_type(tp: Any) -> bool:
    """Check if a type is a record type (a dataclass class, not an instance)."""
    return isinstance(tp, type) and dataclasses.is_dataclass(tp)


def shape_of(annotation: Any) -> Shape:
    """Classify a (resolved) type annotation."""
    if annotation is Any or annotation is object:
        return Shape(Kind.ANY, annotation=annotation)

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin is typing.Annotated:
        return shape_of(args[0])

    if origin is typing.Union or origin is types.UnionType:
        members = [arg for arg in args if arg is not type(None)]
        if len(members) == 1 and len(members) < len(args):
            return Shape(Kind.OPTIONAL, elem=shape_of(members[0]), annotation=annotation)
        # General unions are dynamic values
        return Shape(Kind.ANY, annotation=annotation)

    if origin is typing.Literal:
        return Shape(Kind.ANY, annotation=annotation)

    if origin in _SEQUENCE_ORIGINS:
        if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
            # Fixed-size heterogeneous tuples are not sequences of one kind
            return Shape(Kind.UNSUPPORTED, annotation=annotation)
        container = tuple if origin is tuple else list
        elem = shape_of(args[0]) if args else Shape(Kind.ANY)
        return Shape(Kind.SEQUENCE, py_type=container, elem=elem, annotation=annotation)

    if origin in _MAPPING_ORIGINS:
        if args and args[0] is not str:
            return Shape(Kind.UNSUPPORTED, annotation=annotation)
        elem = shape_of(args[1]) if args else Shape(Kind.ANY)
        return Shape(Kind.MAPPING, py_type=dict, elem=elem, annotation=annotation)

    if origin is not None:
        return Shape(Kind.UNSUPPORTED, annotation=annotation)

    if annotation in _SCALAR_TYPES:
        return Shape(_SCALAR_TYPES[annotation], py_type=annotation, annotation=annotation)
    if annotation in (list, tuple):
        return Shape(Kind.SEQUENCE, py_type=annotation, elem=Shape(Kind.ANY), annotation=annotation)
    if annotation is dict:
        return Shape(Kind.MAPPING, py_type=dict, elem=Shape(Kind.ANY), annotation=annotation)
    if isinstance(annotation, type) and issubclass(annotation, Enum):
        return Shape(Kind.ENUM, py_type=annotation, annotation=annotation)
    if is_record_type(annotation):
        return Shape(Kind.RECORD, py_type=annotation, annotation=annotation)

    return Shape(Kind.UNSUPPORTED, annotation=annotation)


def shape_of_value(value: Any) -> Shape:
    """Infer a shape from a runtime value, used for ``Any`` fields."""
    if value is None:
        return Shape(Kind.OPTIONAL, elem=Shape(Kind.ANY))
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return Shape(Kind.RECORD, py_type=type(value))
    if isinstance(value, Enum):
        return Shape(Kind.ENUM, py_type=type(value))
    for tp, kind in _SCALAR_TYPES.items():
        if isinstance(value, tp):
            return Shape(kind, py_type=tp)
    if isinstance(value, (list, tuple)):
        return Shape(Kind.SEQUENCE, py_type=list, elem=Shape(Kind.ANY))
    if isinstance(value, collections.abc.Mapping):
        return Shape(Kind.MAPPING, py_type=dict, elem=Shape(Kind.ANY))
    return Shape(Kind.UNSUPPORTED, py_type=type(value))
