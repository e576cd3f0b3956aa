"""Ordered regex cascades with explicit found/not-found results.

Every field extractor is a list of (pattern, handler) rules tried in
priority order. A handler turns a regex match into a value, or returns
None to reject the match and keep looking.
"""

import re
from dataclasses import dataclass
from typing import Callable, Iterable


@dataclass(frozen=True)
class MatchResult:
    """Outcome of a cascade: found(value) or not found."""
    value: str | None = None
    start: int = -1
    end: int = -1

    @property
    def found(self) -> bool:
        return self.value is not None

    def __bool__(self) -> bool:
        return self.found

    @classmethod
    def not_found(cls) -> "MatchResult":
        return NOT_FOUND


NOT_FOUND = MatchResult()


def group_one(match: re.Match) -> str | None:
    """Default handler: first capture group, stripped."""
    value = match.group(1)
    return value.strip() if value else None


@dataclass(frozen=True)
class PatternRule:
    """A single step of a cascade."""
    pattern: re.Pattern
    handler: Callable[[re.Match], str | None] = group_one

    @classmethod
    def compile(
        cls,
        regex: str,
        flags: int = re.IGNORECASE,
        handler: Callable[[re.Match], str | None] = group_one,
    ) -> "PatternRule":
        return cls(re.compile(regex, flags), handler)


def first_match(rules: Iterable[PatternRule], text: str) -> MatchResult:
    """Evaluate rules in order and return the first accepted match."""
    for rule in rules:
        for match in rule.pattern.finditer(text):
            value = rule.handler(match)
            if value:
                return MatchResult(value, match.start(), match.end())
    return NOT_FOUND


def any_match(patterns: Iterable[re.Pattern], text: str) -> bool:
    """True when any pattern occurs in text."""
    return any(p.search(text) for p in patterns)


def compile_all(regexes: Iterable[str], flags: int = re.IGNORECASE) -> list[re.Pattern]:
    return [re.compile(r, flags) for r in regexes]
