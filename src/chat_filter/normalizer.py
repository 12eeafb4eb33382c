"""Normalizer — canonicalizes chat text before matching.

Every stage maps a ``(chars, origin)`` pair to a new pair without ever
reordering characters, so a contiguous range of normalized text always maps
back to a contiguous range of the original:

    >>> nt = normalize("B.4.D w0rd")
    >>> nt.text
    'badword'
    >>> nt.original_span(0, 3)      # "bad"
    (0, 5)

Pipeline: lowercase → strip diacritics → homoglyphs → leet → collapse
repeats → strip separators (then collapse once more, so ``aa.aa`` and
``aaaa`` normalize the same way).
"""

from __future__ import annotations
import unicodedata

from .charmaps import LEET, fold_homoglyph
from .types import NormalizedText

Span = tuple[int, int]

_MARK_CATEGORIES = ("Mn", "Me")
_MAX_RUN = 2


def _is_separator(ch: str) -> bool:
    # punctuation, whitespace, symbols, controls / format chars
    return unicodedata.category(ch)[0] in "PZSC"


# ------------------------------------------------------------------
# Stages
# ------------------------------------------------------------------

def _lowercase(chars: list[str], origin: list[Span]) -> tuple[list[str], list[Span]]:
    out: list[str] = []
    out_origin: list[Span] = []
    for ch, span in zip(chars, origin):
        lowered = ch.lower()
        # "İ" lowers to two code points; both keep the source range
        for c in lowered:
            out.append(c)
            out_origin.append(span)
    return out, out_origin


def _strip_diacritics(chars: list[str], origin: list[Span]) -> tuple[list[str], list[Span]]:
    out: list[str] = []
    out_origin: list[Span] = []
    pending: int | None = None   # start of marks seen before any base char
    for ch, span in zip(chars, origin):
        kept = [
            c for c in unicodedata.normalize("NFD", ch)
            if unicodedata.category(c) not in _MARK_CATEGORIES
        ]
        if not kept:
            if out_origin:
                start, _ = out_origin[-1]
                out_origin[-1] = (start, span[1])
            elif pending is None:
                pending = span[0]
            continue
        if pending is not None:
            span = (pending, span[1])
            pending = None
        for c in kept:
            out.append(c)
            out_origin.append(span)
    return out, out_origin


def _map_chars(
    chars: list[str], origin: list[Span], fold
) -> tuple[list[str], list[Span]]:
    return [fold(c) for c in chars], origin


def _fold_leet(ch: str) -> str:
    return LEET.get(ch, ch)


def _collapse_repeats(
    chars: list[str], origin: list[Span], breaks: list[bool], symbols: list[bool]
) -> tuple[list[str], list[Span], list[bool], list[bool]]:
    out: list[str] = []
    out_origin: list[Span] = []
    out_breaks: list[bool] = []
    out_symbols: list[bool] = []
    i, n = 0, len(chars)
    while i < n:
        j = i
        while j + 1 < n and chars[j + 1] == chars[i]:
            j += 1
        run = j - i + 1
        if run > _MAX_RUN:
            span = (origin[i][0], origin[j][1])
            out.extend(chars[i] * _MAX_RUN)
            out_origin.extend([span] * _MAX_RUN)
            out_breaks.append(breaks[i])
            out_breaks.append(any(breaks[i + 1:j + 1]))
            out_symbols.append(symbols[i])
            out_symbols.append(symbols[j])
        else:
            out.extend(chars[i:j + 1])
            out_origin.extend(origin[i:j + 1])
            out_breaks.extend(breaks[i:j + 1])
            out_symbols.extend(symbols[i:j + 1])
        i = j + 1
    return out, out_origin, out_breaks, out_symbols


def _strip_separators(
    chars: list[str], origin: list[Span], breaks: list[bool], symbols: list[bool]
) -> tuple[list[str], list[Span], list[bool], list[bool]]:
    out: list[str] = []
    out_origin: list[Span] = []
    out_breaks: list[bool] = []
    out_symbols: list[bool] = []
    pending: int | None = None   # start of the separators waiting for a next char
    for ch, span, brk, sym in zip(chars, origin, breaks, symbols):
        if _is_separator(ch):
            if pending is None:
                pending = span[0]
            continue
        out.append(ch)
        out_symbols.append(sym)
        if pending is not None:
            out_origin.append((pending, span[1]))
            out_breaks.append(True)
            pending = None
        else:
            out_origin.append(span)
            out_breaks.append(brk)
    if pending is not None and out_origin:
        # trailing separators fold into the last kept character
        start, _ = out_origin[-1]
        out_origin[-1] = (start, origin[-1][1])
    return out, out_origin, out_breaks, out_symbols


# ------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------

def _canonical_chars(text: str) -> tuple[list[str], list[Span], list[bool]]:
    """Stages 1–4: all 1:1 (or offset-sharing) character rewrites.

    Also returns, per character, whether leet folding turned a symbol
    (not a letter or digit) into a letter.
    """
    chars = list(text)
    origin = [(i, i + 1) for i in range(len(chars))]
    chars, origin = _lowercase(chars, origin)
    chars, origin = _strip_diacritics(chars, origin)
    chars, origin = _map_chars(chars, origin, fold_homoglyph)
    symbols = [c in LEET and not c.isalnum() for c in chars]
    chars, origin = _map_chars(chars, origin, _fold_leet)
    return chars, origin, symbols


def is_separator(ch: str) -> bool:
    """True if *ch* on its own is removed by :func:`normalize` as a separator."""
    folded, _, _ = _canonical_chars(ch)
    return bool(folded) and all(_is_separator(c) for c in folded)


def normalize(text: str | None) -> NormalizedText:
    """Return the canonical matching form of *text* with its offset map."""
    if not text:
        return NormalizedText()

    chars, origin, symbols = _canonical_chars(text)
    breaks = [False] * len(chars)
    chars, origin, breaks, symbols = _collapse_repeats(chars, origin, breaks, symbols)
    chars, origin, breaks, symbols = _strip_separators(chars, origin, breaks, symbols)
    chars, origin, breaks, symbols = _collapse_repeats(chars, origin, breaks, symbols)
    if breaks:
        breaks[0] = True

    return NormalizedText(
        text="".join(chars),
        origin=tuple(origin),
        breaks=tuple(breaks),
        symbols=tuple(symbols),
    )


def normalize_for_display(text: str | None) -> str:
    """Lowercase/homoglyph/leet canonicalization that keeps separators and repeats."""
    if not text:
        return ""
    chars, _, _ = _canonical_chars(text)
    return "".join(chars)


class Normalizer:
    """Stateless facade over :func:`normalize` / :func:`normalize_for_display`."""

    __slots__ = ()

    @staticmethod
    def normalize(text: str | None) -> NormalizedText:
        return normalize(text)

    @staticmethod
    def normalize_for_display(text: str | None) -> str:
        return normalize_for_display(text)
