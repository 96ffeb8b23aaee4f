"""Tag-driven conversion between dataclass records and generic records."""

from .access import is_addressable, is_empty, read, rebuild, write, zero_instance, zero_value
from .cache import DescriptorCache, default_cache
from .descriptor import FieldDescriptor, PathStep, TypeDescriptor, build_descriptor
from .engine import DEFAULT_OPTIONS, Decoder, Encoder, GenericRecord, Options, decode, encode
from .errors import (
    DecodeError,
    MarshalError,
    NotAddressableError,
    TypeMismatchError,
    UnknownKeyError,
    UnsupportedKindError,
)
from .fields import DEFAULT_TAG_KEY, embedded, tag_field
from .kinds import Kind, Shape, shape_of
from .tags import TagDirective, parse_tag
