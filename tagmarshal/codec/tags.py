"""Parsing of field tag strings such as ``"name,omitempty"``."""

from dataclasses import dataclass

from dataclasses_json import DataClassJsonMixin

SKIP_KEY = "-"
OPTION_OMIT_EMPTY = "omitempty"
OPTION_STRING = "string"

KNOWN_OPTIONS = frozenset([OPTION_OMIT_EMPTY, OPTION_STRING])

# Punctuation allowed in a key besides letters and digits
KEY_PUNCTUATION = frozenset("!#$%&()*+-./:;<=>?@[]^_{|}~ ")


@dataclass(frozen=True)
class TagDirective(DataClassJsonMixin):
    """Parsed metadata attached to one field."""

    key: str
    skip: bool = False
    omit_if_empty: bool = False
    as_string: bool = False
    unknown: tuple[str, ...] = ()  # option tokens ignored by the engine
    tagged: bool = False  # key came from the tag, not the field name


def is_valid_key(key: str) -> bool:
    """Check that a key segment only uses characters allowed in tag keys."""
    if not key:
        return False
    return all(c.isalnum() or c in KEY_PUNCTUATION for c in key)


def parse_tag(raw: str | None, field_name: str) -> TagDirective:
    """Parse a raw tag string into a directive.

    Never raises: malformed keys fall back to ``field_name`` and unknown
    options are ignored (but remembered in ``TagDirective.unknown``).

    Args:
        raw: The tag string as declared on the field, or None.
        field_name: The field's source name, used as the fallback key.

    Returns:
        The parsed directive.
    """
    if not raw:
        return TagDirective(key=field_name)

    key, comma, rest = raw.partition(",")
    if key == SKIP_KEY and not comma:
        return TagDirective(key=field_name, skip=True)

    tagged = is_valid_key(key)
    if not tagged:
        key = field_name

    omit_if_empty = False
    as_string = False
    unknown: list[str] = []
    for token in rest.split(",") if comma else []:
        if token == OPTION_OMIT_EMPTY:
            omit_if_empty = True
        elif token == OPTION_STRING:
            as_string = True
        else:
            unknown.append(token)

    return TagDirective(
        key=key,
        omit_if_empty=omit_if_empty,
        as_string=as_string,
        unknown=tuple(unknown),
        tagged=tagged,
    )
