"""Tests for type descriptor construction"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pytest import raises

from tagmarshal.codec import Kind, UnsupportedKindError, build_descriptor, embedded, tag_field


@dataclass
class Person:
    id: int = tag_field("id", default=0)
    name: str = tag_field("name,omitempty", default="")
    _secret: str = ""


@dataclass
class Base:
    id: int = tag_field("id", default=0)
    created: str = tag_field("created", default="")


@dataclass
class Audit:
    by: str = ""


@dataclass
class Inner:
    audit: Audit = embedded(default_factory=Audit)
    note: str = ""


@dataclass
class Document:
    title: str = tag_field("title", default="")
    base: Base = embedded(default_factory=Base)
    inner: Inner | None = embedded(default=None)


@dataclass
class Shadowing:
    base: Base = embedded(default_factory=Base)
    id: str = tag_field("id", default="")


@dataclass
class Left:
    code: int = 0
    label: str = tag_field("label", default="")


@dataclass
class Right:
    code: int = 0
    label: str = ""


@dataclass
class Ambiguous:
    left: Left = embedded(default_factory=Left)
    right: Right = embedded(default_factory=Right)


@dataclass
class Kinds:
    flag: bool = False
    count: int = 0
    ratio: float = 0.0
    text: str = ""
    blob: bytes = b""
    maybe: int | None = None
    items: list[int] = field(default_factory=list)
    pairs: tuple[str, ...] = ()
    lookup: dict[str, float] = field(default_factory=dict)
    anything: Any = None
    person: Person = field(default_factory=Person)
    callback: Callable[[], None] | None = None


@dataclass
class Namespaced:
    id: int = tag_field("id", json="ID", default=0)
    name: str = field(default="", metadata={"json": "fullName"})


@dataclass
class Hidden:
    _a: int = 0
    _b: str = ""


@dataclass
class TaggedEmbed:
    base: Base = embedded("base", default_factory=Base)


def describe_build_descriptor():
    def keeps_declaration_order(expect):
        descriptor = build_descriptor(Person)
        expect([fd.name for fd in descriptor.fields]) == ["id", "name"]
        expect([fd.key for fd in descriptor.fields]) == ["id", "name"]

    def drops_private_fields(expect):
        descriptor = build_descriptor(Person)
        expect("_secret" in [fd.name for fd in descriptor.fields]) == False

    def records_tag_directives(expect):
        name = build_descriptor(Person).fields[1]
        expect(name.directive.omit_if_empty) == True
        expect(name.tag) == "name,omitempty"
        expect(name.path[0].index) == 1

    def empty_record_is_valid(expect):
        descriptor = build_descriptor(Hidden)
        expect(descriptor.fields) == ()

    def rejects_non_records(expect):
        with raises(UnsupportedKindError):
            build_descriptor(int)

    def reads_configured_namespace(expect):
        descriptor = build_descriptor(Namespaced, tag_key="json")
        expect([fd.key for fd in descriptor.fields]) == ["ID", "fullName"]
        expect(descriptor.tag_key) == "json"

        default = build_descriptor(Namespaced)
        expect([fd.key for fd in default.fields]) == ["id", "name"]


def describe_kinds():
    def classifies_annotations(expect):
        kinds = {fd.name: fd.kind for fd in build_descriptor(Kinds).fields}
        expect(kinds) == {
            "flag": Kind.BOOL,
            "count": Kind.INT,
            "ratio": Kind.FLOAT,
            "text": Kind.STRING,
            "blob": Kind.BYTES,
            "maybe": Kind.OPTIONAL,
            "items": Kind.SEQUENCE,
            "pairs": Kind.SEQUENCE,
            "lookup": Kind.MAPPING,
            "anything": Kind.ANY,
            "person": Kind.RECORD,
            "callback": Kind.OPTIONAL,
        }

    def describes_element_shapes(expect):
        fields = {fd.name: fd for fd in build_descriptor(Kinds).fields}
        expect(fields["maybe"].shape.elem.kind) == Kind.INT
        expect(fields["items"].shape.describe()) == "sequence[int]"
        expect(fields["pairs"].shape.py_type) == tuple
        expect(fields["lookup"].shape.elem.kind) == Kind.FLOAT
        expect(fields["callback"].shape.elem.kind) == Kind.UNSUPPORTED


def describe_embedding():
    def flattens_one_level(expect):
        descriptor = build_descriptor(Document)
        expect([fd.key for fd in descriptor.fields]) == ["title", "id", "created", "audit", "note"]

    def uses_two_step_paths(expect):
        fields = {fd.key: fd for fd in build_descriptor(Document).fields}
        expect([step.name for step in fields["id"].path]) == ["base", "id"]
        expect([step.index for step in fields["created"].path]) == [1, 1]
        expect(fields["id"].path[0].record_type) == Base

    def marks_optional_embedded_steps(expect):
        fields = {fd.key: fd for fd in build_descriptor(Document).fields}
        expect(fields["note"].path[0].optional) == True
        expect(fields["note"].path[0].record_type) == Inner

    def keeps_deeper_embedding_nested(expect):
        fields = {fd.key: fd for fd in build_descriptor(Document).fields}
        expect(fields["audit"].kind) == Kind.RECORD
        expect(fields["audit"].depth) == 2

    def tagged_embedded_field_is_nested(expect):
        descriptor = build_descriptor(TaggedEmbed)
        expect([fd.key for fd in descriptor.fields]) == ["base"]
        expect(descriptor.fields[0].kind) == Kind.RECORD


def describe_key_conflicts():
    def shallow_field_wins(expect):
        descriptor = build_descriptor(Shadowing)
        expect([fd.dotted_path for fd in descriptor.fields]) == ["base.created", "id"]
        expect([fd.dotted_path for fd in descriptor.shadowed]) == ["base.id"]

    def tagged_field_wins_at_same_depth(expect):
        descriptor = build_descriptor(Ambiguous)
        paths = [fd.dotted_path for fd in descriptor.fields]
        expect(paths) == ["left.label"]

    def untagged_ties_drop_every_field(expect):
        descriptor = build_descriptor(Ambiguous)
        shadowed = [fd.dotted_path for fd in descriptor.shadowed]
        expect(shadowed) == ["left.code", "right.code", "right.label"]


def describe_lookup():
    def prefers_exact_match(expect):
        @dataclass
        class Cased:
            upper: str = tag_field("Name", default="")
            lower: str = tag_field("name", default="")

        descriptor = build_descriptor(Cased)
        expect(descriptor.lookup("name").name) == "lower"
        expect(descriptor.lookup("Name").name) == "upper"
        expect(descriptor.lookup("NAME").name) == "upper"

    def can_disable_case_insensitive_fallback(expect):
        descriptor = build_descriptor(Person)
        expect(descriptor.lookup("ID").name) == "id"
        expect(descriptor.lookup("ID", case_insensitive=False)) == None

    def never_finds_skipped_fields(expect):
        @dataclass
        class WithSkip:
            secret: str = tag_field("-", default="")

        descriptor = build_descriptor(WithSkip)
        expect(len(descriptor.fields)) == 1
        expect(descriptor.lookup("secret")) == None
