"""Record level tag checks."""

import dataclasses
from dataclasses import dataclass

from dataclasses_json import DataClassJsonMixin

from tagmarshal.codec.cache import DescriptorCache, default_cache
from tagmarshal.codec.descriptor import FieldDescriptor, resolve_hints
from tagmarshal.codec.fields import DEFAULT_TAG_KEY, is_embedded, raw_tag
from tagmarshal.codec.kinds import SCALAR_KINDS, Kind, shape_of

from .parser import lint_tag


@dataclass
class TagIssue(DataClassJsonMixin):
    """One problem found on a record field."""

    record: str
    field: str
    message: str


def _field_issues(record: str, fd: FieldDescriptor) -> list[TagIssue]:
    issues = []
    if fd.tag:
        issues.extend(TagIssue(record, fd.dotted_path, msg) for msg in lint_tag(fd.tag))

    directive = fd.directive
    if directive.skip:
        return issues

    if directive.as_string and fd.shape.base.kind not in SCALAR_KINDS:
        issues.append(
            TagIssue(record, fd.dotted_path, f"Option 'string' has no effect on {fd.kind} fields")
        )
    if fd.shape.base.kind == Kind.UNSUPPORTED:
        issues.append(TagIssue(record, fd.dotted_path, "Field type cannot be encoded or decoded"))
    return issues


def lint_record(
    record_type: type,
    tag_key: str = DEFAULT_TAG_KEY,
    cache: DescriptorCache | None = None,
) -> list[TagIssue]:
    """Check a record type's tags for mistakes the engine silently tolerates.

    Args:
        record_type: A dataclass class.
        tag_key: The tag namespace to check.
        cache: Descriptor cache to use instead of the process-wide one.

    Returns:
        The issues found, in field declaration order.
    """
    descriptor = (cache or default_cache).get_or_build(record_type, tag_key)
    record = descriptor.name
    issues: list[TagIssue] = []

    hints = resolve_hints(record_type)
    for f in dataclasses.fields(record_type):
        if f.name.startswith("_") and raw_tag(f.metadata, tag_key):
            issues.append(TagIssue(record, f.name, "Private field is never encoded, tag ignored"))
        elif is_embedded(f.metadata):
            if shape_of(hints.get(f.name, f.type)).base.kind != Kind.RECORD:
                issues.append(TagIssue(record, f.name, "Embedded field is not a record"))

    for fd in descriptor.fields:
        issues.extend(_field_issues(record, fd))

    for fd in descriptor.shadowed:
        issues.extend(_field_issues(record, fd))
        issues.append(
            TagIssue(record, fd.dotted_path, f"Dropped: key {fd.key!r} is used by another field")
        )

    return issues
