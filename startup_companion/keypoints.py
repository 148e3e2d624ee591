"""Keyword heuristics that summarize a generated guide into short highlights."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Pattern, Sequence, Tuple

MAX_KEY_POINTS = 6
MAX_CAPTURE_LENGTH = 80


@dataclass(frozen=True)
class KeyPointRule:
    """Map a keyword hit (or regex match) onto a highlight string.

    ``point`` may reference regex groups positionally (``{0}``, ``{1}``).
    Rules sharing a ``group`` are alternatives; only the first matching rule
    of a group contributes. ``also`` narrows a keyword hit: at least one of
    those keywords must also be present.
    """

    point: str
    keywords: Tuple[str, ...] = ()
    pattern: Pattern[str] | None = None
    also: Tuple[str, ...] = ()
    group: str | None = None
    min_capture_length: int = 1

    def apply(self, text: str, lowered: str) -> str | None:
        """Return the highlight for ``text`` or ``None`` when the rule misses."""

        if self.also and not any(keyword in lowered for keyword in self.also):
            return None

        if self.pattern is not None:
            match = self.pattern.search(text)
            if match:
                captures = [_clean_capture(value) for value in match.groups() if value is not None]
                if all(len(value) >= self.min_capture_length for value in captures):
                    return self.point.format(*captures)

        if self.keywords and any(keyword in lowered for keyword in self.keywords):
            if "{" in self.point:
                return None
            return self.point
        return None


def _clean_capture(value: str) -> str:
    cleaned = " ".join(value.replace("*", "").split())
    return cleaned[:MAX_CAPTURE_LENGTH].strip()


def _leading_word(phrase: str) -> str:
    return phrase.lower().split(" ")[0]


def extract_key_points(
    text: str,
    rules: Sequence[KeyPointRule],
    fallbacks: Sequence[str],
    limit: int = MAX_KEY_POINTS,
) -> List[str]:
    """Derive up to ``limit`` highlights from ``text``.

    Matched points come first, in rule order. Fallbacks then fill the list in
    their fixed order, skipping any whose leading word already appears in a
    collected point; if that still leaves the list short, the skipped
    fallbacks are used too.
    """

    lowered = (text or "").lower()
    points: List[str] = []
    fired_groups: set[str] = set()

    for rule in rules:
        if rule.group is not None and rule.group in fired_groups:
            continue
        point = rule.apply(text or "", lowered)
        if point is None or point in points:
            continue
        points.append(point)
        if rule.group is not None:
            fired_groups.add(rule.group)

    for fallback in fallbacks:
        if len(points) >= limit:
            break
        word = _leading_word(fallback)
        if any(word in point.lower() for point in points):
            continue
        points.append(fallback)

    for fallback in fallbacks:
        if len(points) >= limit:
            break
        if fallback not in points:
            points.append(fallback)

    return points[:limit]


def keywords(*values: str) -> Tuple[str, ...]:
    """Normalise a keyword vocabulary to lowercase."""

    return tuple(value.lower() for value in values)


def pattern(expression: str) -> Pattern[str]:
    return re.compile(expression, re.IGNORECASE)
