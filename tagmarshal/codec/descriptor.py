"""Introspection of record types into cached type descriptors."""

import dataclasses
import logging
import typing
from dataclasses import dataclass, field
from typing import Any

from .errors import UnsupportedKindError
from .fields import DEFAULT_TAG_KEY, is_embedded, raw_tag
from .kinds import Kind, Shape, is_record_type, shape_of
from .tags import TagDirective, parse_tag

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PathStep:
    """One hop from a record to one of its fields.

    ``record_type`` and ``optional`` are set on embedded steps only; they
    are what a write needs to allocate a missing embedded record.
    """

    index: int
    name: str
    record_type: type | None = None
    optional: bool = False


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """Introspected metadata for one exported field."""

    name: str
    path: tuple[PathStep, ...]
    directive: TagDirective
    shape: Shape
    tag: str | None = None  # raw tag string as declared

    @property
    def key(self) -> str:
        return self.directive.key

    @property
    def kind(self) -> Kind:
        return self.shape.kind

    @property
    def depth(self) -> int:
        return len(self.path)

    @property
    def dotted_path(self) -> str:
        return ".".join(step.name for step in self.path)


@dataclass(frozen=True)
class TypeDescriptor:
    """The complete introspection result for one record type and tag namespace.

    ``fields`` is in declaration order, which is also the encode order.
    ``shadowed`` holds fields dropped because of key conflicts.
    """

    record_type: type
    tag_key: str
    fields: tuple[FieldDescriptor, ...]
    shadowed: tuple[FieldDescriptor, ...] = ()
    _by_key: dict[str, FieldDescriptor] = field(init=False, repr=False, compare=False)
    _by_fold: dict[str, FieldDescriptor] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        by_key: dict[str, FieldDescriptor] = {}
        by_fold: dict[str, FieldDescriptor] = {}
        for fd in self.fields:
            if fd.directive.skip:
                continue
            by_key[fd.key] = fd
            by_fold.setdefault(fd.key.casefold(), fd)
        object.__setattr__(self, "_by_key", by_key)
        object.__setattr__(self, "_by_fold", by_fold)

    @property
    def name(self) -> str:
        return self.record_type.__qualname__

    def lookup(self, key: str, case_insensitive: bool = True) -> FieldDescriptor | None:
        """Find the field decoding ``key``; an exact match always wins."""
        found = self._by_key.get(key)
        if found is None and case_insensitive:
            found = self._by_fold.get(key.casefold())
        return found


def resolve_hints(record_type: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(record_type)
    except (NameError, TypeError) as ex:
        logger.warning("Could not resolve annotations of %s: %s", record_type.__qualname__, ex)
        return {}


def _field_shape(record_type: type, f: dataclasses.Field, hints: dict[str, Any]) -> Shape:
    annotation = hints.get(f.name, f.type)
    if isinstance(annotation, str):
        logger.warning(
            "Unresolved annotation %r on %s.%s", annotation, record_type.__qualname__, f.name
        )
        return Shape(Kind.UNSUPPORTED, annotation=annotation)
    return shape_of(annotation)


def _collect(
    record_type: type, tag_key: str, prefix: tuple[PathStep, ...], flatten: bool
) -> list[FieldDescriptor]:
    hints = resolve_hints(record_type)
    collected: list[FieldDescriptor] = []

    for index, f in enumerate(dataclasses.fields(record_type)):
        if f.name.startswith("_"):
            continue

        raw = raw_tag(f.metadata, tag_key)
        directive = parse_tag(raw, f.name)
        shape = _field_shape(record_type, f, hints)

        promote = (
            flatten
            and is_embedded(f.metadata)
            and not directive.skip
            and not directive.tagged
            and shape.base.kind == Kind.RECORD
        )
        if promote:
            step = PathStep(
                index,
                f.name,
                record_type=shape.base.py_type,
                optional=shape.kind == Kind.OPTIONAL,
            )
            # One level only: embedded fields of the embedded record stay nested
            collected.extend(_collect(shape.base.py_type, tag_key, prefix + (step,), False))
            continue

        collected.append(
            FieldDescriptor(
                name=f.name,
                path=prefix + (PathStep(index, f.name),),
                directive=directive,
                shape=shape,
                tag=raw,
            )
        )

    return collected


def _resolve_conflicts(
    candidates: list[FieldDescriptor],
) -> tuple[list[FieldDescriptor], list[FieldDescriptor]]:
    """Pick one field per key: shallowest first, then the only tagged one."""
    groups: dict[str, list[FieldDescriptor]] = {}
    for fd in candidates:
        if not fd.directive.skip:
            groups.setdefault(fd.key, []).append(fd)

    dropped: set[int] = set()
    for key, group in groups.items():
        if len(group) == 1:
            continue
        min_depth = min(fd.depth for fd in group)
        dominant = [fd for fd in group if fd.depth == min_depth]
        if len(dominant) > 1:
            tagged = [fd for fd in dominant if fd.directive.tagged]
            dominant = tagged if len(tagged) == 1 else []
        winners = {id(fd) for fd in dominant}
        dropped.update(id(fd) for fd in group if id(fd) not in winners)
        if not dominant:
            logger.debug("Dropping all fields for ambiguous key %r", key)

    kept = [fd for fd in candidates if id(fd) not in dropped]
    shadowed = [fd for fd in candidates if id(fd) in dropped]
    return kept, shadowed


def build_descriptor(record_type: type, tag_key: str = DEFAULT_TAG_KEY) -> TypeDescriptor:
    """Introspect a record type.

    Private fields are dropped, embedded records are flattened one level
    and every field gets its parsed tag directive for ``tag_key``.

    Args:
        record_type: A dataclass class.
        tag_key: The metadata namespace holding the tag strings.

    Returns:
        The immutable descriptor.
    """
    if not is_record_type(record_type):
        name = getattr(record_type, "__name__", repr(record_type))
        raise UnsupportedKindError(name, "non-record")

    kept, shadowed = _resolve_conflicts(_collect(record_type, tag_key, (), True))
    return TypeDescriptor(
        record_type=record_type,
        tag_key=tag_key,
        fields=tuple(kept),
        shadowed=tuple(shadowed),
    )
