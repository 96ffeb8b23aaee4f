"""Optional strict checks for record tags."""

from .parser import ParsedTag, TagSyntaxError, lint_tag, parse_tag_strict
from .rules import TagIssue, lint_record
