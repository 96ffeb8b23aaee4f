"""Helpers for declaring tagged dataclass fields."""

from dataclasses import field
from typing import Any

DEFAULT_TAG_KEY = "data"
EMBED_METADATA_KEY = "tagmarshal.embed"

# Sentinel for missing default
_MISSING: Any = object()


def _make_field(metadata: dict[str, Any], default: Any, default_factory: Any) -> Any:
    if default is not _MISSING:
        return field(default=default, metadata=metadata)
    if default_factory is not _MISSING:
        return field(default_factory=default_factory, metadata=metadata)
    return field(metadata=metadata)


def tag_field(
    data: str | None = None,
    *,
    default: Any = _MISSING,
    default_factory: Any = _MISSING,
    **tags: str,
) -> Any:
    """Define a dataclass field carrying tag strings.

    Args:
        data: Tag for the default ``data`` namespace (e.g. ``"id,omitempty"``).
        default: Default value for the field.
        default_factory: Factory function for default value.
        **tags: Tags for other namespaces, e.g. ``json="id"``.

    Returns:
        A dataclass field with the tags stored in its metadata.

    Example:
        @dataclass
        class Person:
            id: int = tag_field("id", default=0)
            name: str = tag_field("name,omitempty", json="fullName", default="")
    """
    metadata: dict[str, Any] = dict(tags)
    if data is not None:
        metadata[DEFAULT_TAG_KEY] = data
    return _make_field(metadata, default, default_factory)


def embedded(
    data: str | None = None,
    *,
    default: Any = _MISSING,
    default_factory: Any = _MISSING,
    **tags: str,
) -> Any:
    """Define an embedded record field whose fields are promoted into the parent.

    The field's annotation must be a dataclass or an optional dataclass.
    Giving it a tag key turns it back into an ordinary nested field.
    """
    metadata: dict[str, Any] = dict(tags)
    if data is not None:
        metadata[DEFAULT_TAG_KEY] = data
    metadata[EMBED_METADATA_KEY] = True
    return _make_field(metadata, default, default_factory)


def raw_tag(metadata: Any, tag_key: str) -> str | None:
    """Return the raw tag string stored in field metadata for a namespace."""
    value = metadata.get(tag_key)
    return value if isinstance(value, str) else None


def is_embedded(metadata: Any) -> bool:
    return bool(metadata.get(EMBED_METADATA_KEY, False))
