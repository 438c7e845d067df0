"""
Structured paths and ignore/always-include rule matching.

A path is a tuple of segments: field names (``str``) and sequence
indices (``int``). Patterns may also contain ``WILDCARD``, written
``[]`` in text form, which matches any index. Matching compares
segment by segment; field names compare case-insensitively.
"""

from enum import Enum
from functools import lru_cache
from typing import Any, Iterable, Union

from .fields import is_record, is_sequence, read_field
from .models import ComparisonConfig, Segment


class _Wildcard(Enum):
    WILDCARD = "[]"

    def __repr__(self) -> str:
        return "WILDCARD"


WILDCARD = _Wildcard.WILDCARD

PatternSegment = Union[str, int, _Wildcard]


class MatchStrength(int, Enum):
    """How specifically a pattern set matched a path."""

    NONE = 0
    SHORTHAND = 1
    EXACT = 2


class Rule(str, Enum):
    """What the traversal should do at a path."""

    NONE = "none"
    IGNORE = "ignore"
    ALWAYS_INCLUDE = "always_include"


def parse_path(text: str) -> tuple[PatternSegment, ...]:
    """
    Parse a dotted/indexed path into segments.

    Args:
        text: Path text (e.g., "Orders[2].Lines[].Sku")

    Returns:
        Tuple of segments (e.g., ("Orders", 2, "Lines", WILDCARD, "Sku"))

    Raises:
        ValueError: If the text is not a well-formed path
    """
    segments: list[PatternSegment] = []
    i = 0
    n = len(text)
    expect_field = True

    while i < n:
        char = text[i]
        if char == "[":
            end = text.find("]", i)
            if end == -1:
                raise ValueError(f"Unclosed '[' in path: {text!r}")
            inner = text[i + 1:end].strip()
            if inner == "":
                segments.append(WILDCARD)
            elif inner.isdigit():
                segments.append(int(inner))
            else:
                raise ValueError(f"Invalid index '{inner}' in path: {text!r}")
            i = end + 1
            expect_field = False
        elif char == ".":
            if expect_field:
                raise ValueError(f"Empty field name in path: {text!r}")
            i += 1
            expect_field = True
            if i == n:
                raise ValueError(f"Path cannot end with '.': {text!r}")
        elif char == "]":
            raise ValueError(f"Unmatched ']' in path: {text!r}")
        else:
            if not expect_field:
                raise ValueError(f"Missing '.' before field in path: {text!r}")
            end = i
            while end < n and text[end] not in ".[]":
                end += 1
            segments.append(text[i:end])
            i = end
            expect_field = False

    return tuple(segments)


def format_path(segments: Iterable[PatternSegment]) -> str:
    """Render segments back to text form ('' for the root)."""
    parts: list[str] = []
    for segment in segments:
        if segment is WILDCARD:
            parts.append("[]")
        elif isinstance(segment, int):
            parts.append(f"[{segment}]")
        elif parts:
            parts.append(f".{segment}")
        else:
            parts.append(segment)
    return "".join(parts)


def normalize_path(segments: Iterable[PatternSegment]) -> tuple[PatternSegment, ...]:
    """Replace every concrete index with WILDCARD."""
    return tuple(
        WILDCARD if isinstance(segment, int) else segment
        for segment in segments
    )


def _fold(segments: Iterable[PatternSegment]) -> tuple[PatternSegment, ...]:
    return tuple(
        segment.casefold() if isinstance(segment, str) else segment
        for segment in segments
    )


def _segment_matches(pattern: PatternSegment, segment: Segment) -> bool:
    if pattern is WILDCARD:
        return isinstance(segment, int)
    if isinstance(pattern, int):
        return isinstance(segment, int) and pattern == segment
    return isinstance(segment, str) and pattern == segment


class PathMatcher:
    """
    Matches paths against a fixed set of patterns.

    A pattern consisting of a single field name is a shorthand rule: it
    matches that field wherever it occurs. Every other pattern must
    match the whole path.
    """

    def __init__(self, patterns: Iterable[str]):
        self.patterns = tuple(_fold(parse_path(p)) for p in patterns)
        # Index-agnostic patterns are looked up by the normalized path;
        # patterns naming a concrete index are checked segment by segment.
        self._normalized = frozenset(
            p for p in self.patterns
            if not any(isinstance(s, int) for s in p)
        )
        self._indexed = tuple(
            p for p in self.patterns if p not in self._normalized
        )
        self._shorthand = frozenset(
            p[0] for p in self.patterns
            if len(p) == 1 and isinstance(p[0], str)
        )

    def match(self, path: tuple[Segment, ...]) -> MatchStrength:
        """Strongest match of any pattern against the path."""
        if not path:
            return MatchStrength.NONE

        folded = _fold(path)
        if normalize_path(folded) in self._normalized:
            return MatchStrength.EXACT
        for pattern in self._indexed:
            if len(pattern) == len(folded) and all(
                _segment_matches(p, s) for p, s in zip(pattern, folded)
            ):
                return MatchStrength.EXACT

        last = folded[-1]
        if isinstance(last, str) and last in self._shorthand:
            return MatchStrength.SHORTHAND
        return MatchStrength.NONE

    def matches(self, path: tuple[Segment, ...]) -> bool:
        return self.match(path) is not MatchStrength.NONE


class RuleSet:
    """Ignore and always-include matchers for one pair of pattern sets."""

    def __init__(
        self,
        ignore_properties: Iterable[str] = (),
        always_include_properties: Iterable[str] = (),
    ):
        self.ignore = PathMatcher(ignore_properties)
        self.always_include = PathMatcher(always_include_properties)

    def resolve(self, path: tuple[Segment, ...]) -> Rule:
        """
        Decide the rule for a path.

        An exact match beats a shorthand match. When both rule sets
        match with the same strength, ignore wins.
        """
        ignore = self.ignore.match(path)
        always = self.always_include.match(path)

        if ignore is MatchStrength.NONE and always is MatchStrength.NONE:
            return Rule.NONE
        if ignore >= always:
            return Rule.IGNORE
        return Rule.ALWAYS_INCLUDE


@lru_cache(maxsize=128)
def _compile_rules(
    ignore_properties: frozenset[str],
    always_include_properties: frozenset[str],
) -> RuleSet:
    return RuleSet(ignore_properties, always_include_properties)


def rules_for(config: ComparisonConfig) -> RuleSet:
    """
    Compiled rules for a configuration.

    Cached by pattern sets only; the key selector and other settings
    never take part in the cache key.
    """
    return _compile_rules(
        config.ignore_properties,
        config.always_include_properties,
    )


def get_value_at_path(root: Any, path: Iterable[Segment]) -> Any:
    """
    Re-fetch the value at a path.

    Args:
        root: The object to traverse
        path: Path segments

    Returns:
        Value at the path, or None where any link is absent
    """
    current = root
    for segment in path:
        if current is None:
            return None
        if isinstance(segment, int):
            if not is_sequence(current) or not 0 <= segment < len(current):
                return None
            current = current[segment]
        elif is_record(current):
            current = read_field(current, segment)
        else:
            return None
    return current
