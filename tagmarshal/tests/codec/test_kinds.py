"""Tests for annotation classification"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from enum import IntEnum
from typing import Annotated, Literal, Optional, Union

from tagmarshal.codec import Kind, build_descriptor, shape_of
from tagmarshal.codec.kinds import shape_of_value


class Mode(IntEnum):
    OFF = 0
    ON = 1


@dataclass
class Leaf:
    value: int = 0


@dataclass
class Unresolved:
    later: "NotDefinedAnywhere" = None  # noqa: F821


def describe_shape_of():
    def unwraps_optional_spellings(expect):
        expect(shape_of(Optional[int]).elem.kind) == Kind.INT
        expect(shape_of(Union[str, None]).elem.kind) == Kind.STRING
        expect(shape_of(Leaf | None).base.kind) == Kind.RECORD

    def treats_wide_unions_as_any(expect):
        expect(shape_of(int | str).kind) == Kind.ANY
        expect(shape_of(Literal["a", "b"]).kind) == Kind.ANY
        expect(shape_of(object).kind) == Kind.ANY

    def strips_annotated(expect):
        expect(shape_of(Annotated[int, "meta"]).kind) == Kind.INT

    def accepts_abstract_containers(expect):
        expect(shape_of(Sequence[int]).kind) == Kind.SEQUENCE
        expect(shape_of(Mapping[str, Leaf]).elem.kind) == Kind.RECORD
        expect(shape_of(list).elem.kind) == Kind.ANY

    def rejects_shapes_without_generic_form(expect):
        expect(shape_of(tuple[int, str]).kind) == Kind.UNSUPPORTED
        expect(shape_of(dict[int, str]).kind) == Kind.UNSUPPORTED
        expect(shape_of(set[int]).kind) == Kind.UNSUPPORTED

    def recognizes_enums(expect):
        shape = shape_of(Mode)
        expect(shape.kind) == Kind.ENUM
        expect(shape.describe()) == "Mode"

    def describes_nested_shapes(expect):
        expect(shape_of(dict[str, list[Leaf | None]]).describe()) == (
            "mapping[sequence[optional[Leaf]]]"
        )


def describe_shape_of_value():
    def infers_kinds_from_values(expect):
        expect(shape_of_value(True).kind) == Kind.BOOL
        expect(shape_of_value(3).kind) == Kind.INT
        expect(shape_of_value(Mode.ON).kind) == Kind.ENUM
        expect(shape_of_value(Leaf()).kind) == Kind.RECORD
        expect(shape_of_value((1, 2)).kind) == Kind.SEQUENCE
        expect(shape_of_value({"a": 1}).kind) == Kind.MAPPING
        expect(shape_of_value(print).kind) == Kind.UNSUPPORTED


def describe_unresolved_annotations():
    def become_unsupported_with_a_warning(expect, caplog):
        descriptor = build_descriptor(Unresolved)
        expect(descriptor.fields[0].kind) == Kind.UNSUPPORTED
        expect("NotDefinedAnywhere" in caplog.text) == True
