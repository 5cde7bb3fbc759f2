"""Pattern candidates and ranking shared by the field extractors.

An extractor turns every regex match into a :class:`PatternCandidate`
carrying a priority score, ranks them, and reports the winner as a
:class:`FieldResult`. Scoring helpers here are pure so they can be unit
tested without any pattern list.
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class PatternCandidate(Generic[T]):
    """A single extraction guess produced by one pattern match."""

    value: T
    priority: float
    pattern_name: str
    matched_text: str
    span: tuple[int, int] = (0, 0)


@dataclass(frozen=True)
class FieldResult(Generic[T]):
    """Best value found by an extractor plus its local confidence."""

    value: T
    confidence: float

    @property
    def found(self) -> bool:
        return self.confidence > 0


@dataclass(frozen=True)
class PatternSpec:
    """A named regex with the base priority of its candidates."""

    name: str
    regex: re.Pattern
    base_priority: float = 0.0


@dataclass(frozen=True)
class ContextRule:
    """Adds ``delta`` when any of ``keywords`` occurs in the match context."""

    keywords: tuple[str, ...]
    delta: float

    def applies(self, context: str) -> bool:
        lowered = context.lower()
        return any(keyword in lowered for keyword in self.keywords)


def apply_context_rules(
    base: float, context: str, rules: Iterable[ContextRule]
) -> float:
    """Adjust a base priority with every rule whose keywords match.

    Args:
        base: Starting priority.
        context: Matched text the rules inspect.
        rules: Keyword rules, each applied at most once.

    Returns:
        Adjusted priority.
    """
    score = base
    for rule in rules:
        if rule.applies(context):
            score += rule.delta
    return score


def rank_candidates(
    candidates: Sequence[PatternCandidate[Any]],
) -> list[PatternCandidate[Any]]:
    """Sort candidates by priority, highest first.

    The sort is stable, so equal priorities keep discovery order
    (pattern order, then position in the text).
    """
    return sorted(candidates, key=lambda c: c.priority, reverse=True)


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp ``value`` into ``[low, high]``."""
    return max(low, min(high, value))
