"""Named regular-expression matching over file content."""

import re
from typing import Mapping, Pattern

from ..exceptions import ConfigError


def compile_patterns(sources: Mapping[str, str]) -> dict[str, Pattern[str]]:
    """Compile a name -> regex-source mapping.

    Args:
        sources: Pattern names and their regular expressions

    Returns:
        Compiled patterns keyed by name

    Raises:
        ConfigError: If a pattern is not a string or does not compile
    """
    compiled: dict[str, Pattern[str]] = {}
    for name, source in sources.items():
        if not isinstance(source, str):
            raise ConfigError(f"Pattern {name!r} must be a string, got {type(source).__name__}")
        try:
            compiled[name] = re.compile(source)
        except re.error as e:
            raise ConfigError(f"Failed to compile regex {name!r}: {e}") from e
    return compiled


def find_all(pattern: Pattern[str], content: str) -> list[str]:
    """All non-overlapping matches of ``pattern``, as full match text."""
    return [match.group(0) for match in pattern.finditer(content)]


def scan_content(content: str, patterns: Mapping[str, Pattern[str]]) -> dict[str, list[str]]:
    """Apply every named pattern to ``content``.

    Patterns without a match are omitted from the result, so a present key
    always maps to a non-empty list.
    """
    matches: dict[str, list[str]] = {}
    for name, pattern in patterns.items():
        found = find_all(pattern, content)
        if found:
            matches[name] = found
    return matches
