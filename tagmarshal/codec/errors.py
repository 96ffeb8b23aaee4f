"""Exceptions raised while encoding or decoding records."""

from typing import Any


class MarshalError(RuntimeError):
    """Base class for all tagmarshal failures."""


class NotAddressableError(MarshalError):
    """Raised when a write targets something that cannot be mutated in place."""


class TypeMismatchError(MarshalError):
    """Raised when a value cannot be reconciled with a field's declared kind."""

    def __init__(self, key: str, expected: str, got: Any) -> None:
        self.key = key
        self.expected = expected
        self.got = got
        super().__init__(f"{key}: expected {expected}, got {type(got).__name__} {got!r}")


class UnsupportedKindError(MarshalError):
    """Raised when a field's kind has no encode/decode behavior."""

    def __init__(self, key: str, kind: str) -> None:
        self.key = key
        self.kind = kind
        super().__init__(f"{key}: unsupported kind {kind}")


class UnknownKeyError(MarshalError):
    """Raised (collected) in strict mode for input keys with no matching field."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"{key}: no matching field")


class DecodeError(MarshalError):
    """Aggregated failure of a whole-record decode.

    Every field that could be decoded was still written to the target.
    """

    def __init__(self, errors: list[MarshalError]) -> None:
        self.errors = errors
        details = "; ".join(str(err) for err in errors)
        noun = "error" if len(errors) == 1 else "errors"
        super().__init__(f"{len(errors)} decode {noun}: {details}")

    @property
    def keys(self) -> list[str]:
        return [getattr(err, "key", "") for err in self.errors]
