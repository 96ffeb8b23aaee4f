"""tagmarshal - Tag-driven record introspection and marshaling."""

from importlib.metadata import PackageNotFoundError, version

from .codec import (
    DecodeError,
    MarshalError,
    NotAddressableError,
    Options,
    TypeMismatchError,
    UnsupportedKindError,
    decode,
    embedded,
    encode,
    tag_field,
)

try:
    __version__ = version("tagmarshal")
except PackageNotFoundError:
    __version__ = "(local)"
