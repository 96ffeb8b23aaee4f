"""Strict tag parser using Lark, for linting only.

The engine itself parses tags permissively (see ``tagmarshal.codec.tags``).
"""

import os
from dataclasses import dataclass
from typing import Any

from lark import Lark
from lark.exceptions import UnexpectedInput
from lark.visitors import Transformer

from tagmarshal.codec.tags import KNOWN_OPTIONS, SKIP_KEY

_g_parser: Lark | None = None


class TagSyntaxError(RuntimeError):
    """Raised when a tag string does not follow the tag grammar."""


@dataclass
class _Key:
    value: str


@dataclass
class _Option:
    value: str


@dataclass
class ParsedTag:
    """A tag string split into its parts."""

    key: str | None
    options: list[str]


class TagTransformer(Transformer):
    """Transform parse tree into a parsed tag."""

    def key(self, args: list[Any]) -> _Key:
        return _Key(value=str(args[0]))

    def option(self, args: list[Any]) -> _Option:
        return _Option(value=str(args[0]))

    def start(self, args: list[Any]) -> ParsedTag:
        keys = [arg.value for arg in args if isinstance(arg, _Key)]
        return ParsedTag(
            key=keys[0] if keys else None,
            options=[arg.value for arg in args if isinstance(arg, _Option)],
        )


def _parser() -> Lark:
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/tagdef.lark", encoding="utf-8") as f:
            grammar = f.read()
        _g_parser = Lark(grammar, parser="lalr")

    return _g_parser


def parse_tag_strict(raw: str) -> ParsedTag:
    """Parse a tag string, rejecting anything outside the tag grammar."""
    try:
        tree = _parser().parse(raw)
    except UnexpectedInput as ex:
        raise TagSyntaxError(f"Malformed tag {raw!r} at column {ex.column}") from ex
    return TagTransformer().transform(tree)


def lint_tag(raw: str) -> list[str]:
    """Return a message for every problem found in a tag string."""
    try:
        parsed = parse_tag_strict(raw)
    except TagSyntaxError as ex:
        return [str(ex)]

    messages = []
    if parsed.key == SKIP_KEY and parsed.options:
        messages.append(f"Key {SKIP_KEY!r} with options names the key literally, it does not skip")

    seen: set[str] = set()
    for option in parsed.options:
        if option not in KNOWN_OPTIONS:
            messages.append(f"Unknown option {option!r} is ignored")
        elif option in seen:
            messages.append(f"Option {option!r} given more than once")
        seen.add(option)

    return messages
