"""Matcher — finds vocabulary hits in normalized text.

Two layers, both over the normalized string:
  Layer 1: literal terms via the snapshot's Aho-Corasick automaton
  Layer 2: pattern entries, each run independently

Literal hits whose enclosing token is whitelisted are dropped. A token is
the run of normalized characters between two stripped separators, so
"ass" inside "that's classic" sees the token "classic". Leet symbols at the
token edges ("classic!" normalizes to "classici") are trimmed before the
lookup. Pattern hits are returned as-is.
"""

from __future__ import annotations

from .types import Match, NormalizedText
from .vocabulary import Vocabulary

_Bounds = tuple[list[int], list[int]]


def _token_bounds(breaks: tuple[bool, ...]) -> _Bounds:
    """Per index, the start and end of the token containing it."""
    n = len(breaks)
    starts = [0] * n
    ends = [n] * n
    current = 0
    for i in range(n):
        if breaks[i]:
            current = i
        starts[i] = current
    current = n
    for i in range(n - 1, -1, -1):
        ends[i] = current
        if breaks[i]:
            current = i
    return starts, ends


def _token_span(bounds: _Bounds, start: int, end: int) -> tuple[int, int]:
    # boundaries inside [start, end) are ignored
    starts, ends = bounds
    return starts[start], ends[end - 1]


def _is_whitelisted(
    normalized: NormalizedText, vocabulary: Vocabulary, bounds: _Bounds, start: int, end: int
) -> bool:
    text = normalized.text
    lo, hi = _token_span(bounds, start, end)
    if vocabulary.is_whitelisted(text[lo:hi]):
        return True

    symbols = normalized.symbols
    if not symbols:
        return False
    trimmed_lo, trimmed_hi = lo, hi
    while trimmed_lo < start and symbols[trimmed_lo]:
        trimmed_lo += 1
    while trimmed_hi > end and symbols[trimmed_hi - 1]:
        trimmed_hi -= 1
    if (trimmed_lo, trimmed_hi) == (lo, hi):
        return False
    return vocabulary.is_whitelisted(text[trimmed_lo:trimmed_hi])


def enclosing_token(normalized: NormalizedText, start: int, end: int) -> str:
    """Return the token(s) around ``[start, end)``."""
    lo, hi = _token_span(_token_bounds(normalized.breaks), start, end)
    return normalized.text[lo:hi]


def find_literals(normalized: NormalizedText, vocabulary: Vocabulary) -> list[Match]:
    text = normalized.text
    entries = vocabulary.literals
    matches: list[Match] = []
    bounds: _Bounds | None = None

    for start, end, idx in vocabulary.automaton.iter(text):
        entry = entries[idx]
        if vocabulary.whitelist:
            if bounds is None:
                bounds = _token_bounds(normalized.breaks)
            if _is_whitelisted(normalized, vocabulary, bounds, start, end):
                continue
        matches.append(Match(
            start=start,
            end=end,
            category=entry.category,
            matched_text=text[start:end],
            term=entry.source,
            source="literal",
        ))
    return matches


def find_patterns(normalized: NormalizedText, vocabulary: Vocabulary) -> list[Match]:
    text = normalized.text
    matches: list[Match] = []
    for entry in vocabulary.patterns:
        for m in entry.canonical_form.finditer(text):
            if m.end() == m.start():
                continue
            matches.append(Match(
                start=m.start(),
                end=m.end(),
                category=entry.category,
                matched_text=m.group(),
                term=entry.source,
                source="pattern",
            ))
    return matches


def find(normalized: NormalizedText, vocabulary: Vocabulary | None) -> list[Match]:
    """All literal and pattern hits, whitelist applied, sorted by position."""
    if vocabulary is None or vocabulary.is_empty or not normalized.text:
        return []
    matches = find_literals(normalized, vocabulary)
    matches.extend(find_patterns(normalized, vocabulary))
    return sorted(matches, key=lambda m: (m.start, m.end))
