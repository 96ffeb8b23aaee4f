"""Encoding records into generic records and decoding them back."""

import copy
import dataclasses
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from .access import (
    convert,
    ensure_addressable,
    is_addressable,
    is_empty,
    read,
    rebuild,
    stringify,
    write,
    zero_instance,
    zero_value,
)
from .cache import DescriptorCache, default_cache
from .descriptor import PathStep
from .errors import (
    DecodeError,
    MarshalError,
    NotAddressableError,
    TypeMismatchError,
    UnknownKeyError,
    UnsupportedKindError,
)
from .fields import DEFAULT_TAG_KEY
from .kinds import SCALAR_KINDS, Kind, Shape, shape_of_value

logger = logging.getLogger(__name__)

GenericRecord = dict[str, Any]

T = TypeVar("T")


@dataclass(frozen=True)
class Options:
    """Per-call configuration of the engine.

    Args:
        tag_key: Metadata namespace holding the tags to honor.
        case_insensitive: Let decode fall back to case-insensitive key matching.
        strict: Report input keys that match no field as decode errors.
        cache: Descriptor cache to use instead of the process-wide one.
    """

    tag_key: str = DEFAULT_TAG_KEY
    case_insensitive: bool = True
    strict: bool = False
    cache: DescriptorCache | None = None


DEFAULT_OPTIONS = Options()


def _join(prefix: str, key: str) -> str:
    return f"{prefix}.{key}" if prefix else key


def _is_record(value: Any) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


class Encoder:
    """Turns record instances into generic records."""

    def __init__(self, options: Options | None = None) -> None:
        self.options = options or DEFAULT_OPTIONS
        self._cache = self.options.cache or default_cache

    def encode(self, instance: Any) -> GenericRecord:
        """Encode a record instance.

        Raises:
            UnsupportedKindError: If the instance is not a record or a field
                has a kind with no encode behavior.
            TypeMismatchError: If a field holds a value of the wrong kind.
        """
        if not _is_record(instance):
            raise UnsupportedKindError(type(instance).__qualname__, "non-record")
        return self._encode_record(instance, "")

    def _encode_record(self, instance: Any, prefix: str) -> GenericRecord:
        descriptor = self._cache.get_or_build(type(instance), self.options.tag_key)
        out: GenericRecord = {}
        for fd in descriptor.fields:
            directive = fd.directive
            if directive.skip:
                continue
            # fields promoted from a missing embedded record are absent
            if fd.depth > 1 and read(instance, fd.path[:-1]) is None:
                continue
            value = read(instance, fd.path)
            if directive.omit_if_empty and is_empty(fd.shape, value):
                continue
            out[directive.key] = self._encode_value(
                fd.shape, value, _join(prefix, directive.key), directive.as_string
            )
        return out

    def _encode_value(self, shape: Shape, value: Any, key: str, as_string: bool = False) -> Any:
        kind = shape.kind
        if kind == Kind.UNSUPPORTED:
            raise UnsupportedKindError(key, str(shape.annotation or shape.py_type))
        if value is None:
            return None
        if kind == Kind.OPTIONAL and shape.elem is not None:
            return self._encode_value(shape.elem, value, key, as_string)
        if kind == Kind.ANY:
            return self._encode_value(shape_of_value(value), value, key)

        if kind in SCALAR_KINDS:
            if as_string:
                return stringify(shape, value, key=key)
            return self._check_scalar(shape, value, key)
        if kind == Kind.BYTES:
            if not isinstance(value, (bytes, bytearray)):
                raise TypeMismatchError(key, shape.describe(), value)
            return bytes(value)
        if kind == Kind.ENUM:
            if not isinstance(value, shape.py_type):
                raise TypeMismatchError(key, shape.describe(), value)
            return value.value
        if kind == Kind.RECORD:
            if not isinstance(value, shape.py_type):
                raise TypeMismatchError(key, shape.describe(), value)
            return self._encode_record(value, key)
        if kind == Kind.SEQUENCE:
            if not isinstance(value, (list, tuple)):
                raise TypeMismatchError(key, shape.describe(), value)
            elem = shape.elem or Shape(Kind.ANY)
            return [self._encode_value(elem, item, f"{key}[{i}]") for i, item in enumerate(value)]
        if kind == Kind.MAPPING:
            if not isinstance(value, Mapping):
                raise TypeMismatchError(key, shape.describe(), value)
            elem = shape.elem or Shape(Kind.ANY)
            out: GenericRecord = {}
            for item_key, item in value.items():
                if not isinstance(item_key, str):
                    raise TypeMismatchError(key, "str keys", item_key)
                out[item_key] = self._encode_value(elem, item, _join(key, item_key))
            return out

        raise UnsupportedKindError(key, kind.value)

    @staticmethod
    def _check_scalar(shape: Shape, value: Any, key: str) -> Any:
        kind = shape.kind
        if kind == Kind.BOOL:
            ok = isinstance(value, bool)
        elif kind == Kind.INT:
            ok = isinstance(value, int) and not isinstance(value, bool)
        elif kind == Kind.FLOAT:
            ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        else:
            ok = isinstance(value, str)
        if not ok:
            raise TypeMismatchError(key, shape.describe(), value)
        return value


class Decoder:
    """Populates record instances in place from generic records."""

    def __init__(self, options: Options | None = None) -> None:
        self.options = options or DEFAULT_OPTIONS
        self._cache = self.options.cache or default_cache

    def decode(self, data: Mapping[str, Any], target: T) -> T:
        """Decode ``data`` into ``target``.

        Keys without a matching field are ignored, fields without a matching
        key keep their value. Field failures are collected; every field that
        could be decoded is still written.

        Returns:
            ``target`` itself.

        Raises:
            NotAddressableError: If ``target`` cannot be mutated in place.
            TypeMismatchError: If ``data`` is not a mapping.
            DecodeError: If one or more fields failed to decode.
        """
        ensure_addressable(target)
        if not isinstance(data, Mapping):
            raise TypeMismatchError(type(target).__qualname__, "mapping", data)

        errors: list[MarshalError] = []
        self._decode_record(data, target, "", errors)
        if errors:
            logger.debug(
                "Decoding into %s failed for %d keys", type(target).__qualname__, len(errors)
            )
            raise DecodeError(errors)
        return target

    def _decode_record(
        self, data: Mapping[str, Any], target: Any, prefix: str, errors: list[MarshalError]
    ) -> Any:
        """Decode ``data`` into ``target``.

        Mutable records are written in place and returned. Frozen records
        are returned as a rebuilt copy holding the decoded values.
        """
        descriptor = self._cache.get_or_build(type(target), self.options.tag_key)
        frozen = not is_addressable(target)
        pending: list[tuple[tuple[PathStep, ...], Any]] = []

        for in_key, raw in data.items():
            key = _join(prefix, str(in_key))
            fd = None
            if isinstance(in_key, str):
                fd = descriptor.lookup(in_key, self.options.case_insensitive)
            if fd is None:
                if self.options.strict:
                    errors.append(UnknownKeyError(key))
                continue

            # the exact key wins over any case variant of it
            if fd.key != in_key and fd.key in data:
                continue

            # null leaves non-optional fields untouched
            if raw is None and fd.kind not in (Kind.OPTIONAL, Kind.ANY):
                continue

            try:
                current = read(target, fd.path)
                value = self._decode_value(
                    fd.shape, raw, current, key, fd.directive.as_string, errors
                )
                if frozen:
                    pending.append((fd.path, value))
                else:
                    write(target, fd.path, value)
            except (TypeMismatchError, UnsupportedKindError, NotAddressableError) as ex:
                errors.append(ex)

        if pending:
            return rebuild(target, pending)
        return target

    def _decode_value(
        self,
        shape: Shape,
        raw: Any,
        current: Any,
        key: str,
        as_string: bool,
        errors: list[MarshalError],
    ) -> Any:
        kind = shape.kind
        if kind == Kind.UNSUPPORTED:
            raise UnsupportedKindError(key, str(shape.annotation or shape.py_type))
        if kind == Kind.ANY:
            return copy.deepcopy(raw)
        if raw is None:
            return None if kind == Kind.OPTIONAL else zero_value(shape)
        if kind == Kind.OPTIONAL and shape.elem is not None:
            return self._decode_value(shape.elem, raw, current, key, as_string, errors)

        if kind == Kind.RECORD:
            if not isinstance(raw, Mapping):
                raise TypeMismatchError(key, shape.describe(), raw)
            nested = current if isinstance(current, shape.py_type) else zero_instance(shape.py_type)
            return self._decode_record(raw, nested, key, errors)
        if kind == Kind.SEQUENCE:
            if not isinstance(raw, (list, tuple)):
                raise TypeMismatchError(key, shape.describe(), raw)
            elem = shape.elem or Shape(Kind.ANY)
            items = [
                self._decode_value(elem, item, None, f"{key}[{i}]", False, errors)
                for i, item in enumerate(raw)
            ]
            return shape.py_type(items)
        if kind == Kind.MAPPING:
            if not isinstance(raw, Mapping):
                raise TypeMismatchError(key, shape.describe(), raw)
            elem = shape.elem or Shape(Kind.ANY)
            out: dict[str, Any] = {}
            for item_key, item in raw.items():
                if not isinstance(item_key, str):
                    raise TypeMismatchError(key, "str keys", item_key)
                out[item_key] = self._decode_value(
                    elem, item, None, _join(key, item_key), False, errors
                )
            return out

        return convert(shape, raw, key=key, as_string=as_string)


def encode(instance: Any, options: Options | None = None) -> GenericRecord:
    """Encode a record instance into a generic record."""
    return Encoder(options).encode(instance)


def decode(data: Mapping[str, Any], target: T, options: Options | None = None) -> T:
    """Decode a generic record into ``target`` in place and return it."""
    return Decoder(options).decode(data, target)
