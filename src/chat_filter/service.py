"""FilterService — the main API.  Normalize, match, apply tier, redact.

Usage:
    from chat_filter import FilterService, Vocabulary, Category, STRICT, MINIMAL

    vocab = Vocabulary.load(
        literals=[(Category.LOW, "heck"), (Category.SEVERE, "badword")],
    )
    service = FilterService(vocab)     # reusable, thread-safe

    result = service.analyze_message("what the h3ck, b4dw0rd!!", MINIMAL)
    result.is_blocked                  # True (SEVERE is always enforced)

    service.filter_message("what the h3ck", STRICT)   # "what the ****"
    service.contains_slurs("b4dw0rd")                 # True
    service.contains_advertising("join www.x.net")    # True
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Iterable

from . import matcher
from .advertising import AdvertisingDetector
from .normalizer import is_separator, normalize
from .types import Category, FilterResult, Match, NormalizedText, STRICT, Tier, Violation
from .vocabulary import Vocabulary, VocabularyStore

logger = logging.getLogger(__name__)

# No configurable categories: only always-blocked ones count
_ALWAYS_BLOCKED_ONLY = Tier("ALWAYS_BLOCKED", frozenset(), "Hard gate, ignores preferences")


@dataclass
class FilterConfig:
    """Configuration for the FilterService."""
    mask_char: str = "*"              # one code point per masked character
    default_tier: Tier = STRICT       # used when a tier name does not resolve
    whitelisted_domains: list[str] = field(default_factory=list)
    block_ips: bool = True

    def __post_init__(self) -> None:
        if len(self.mask_char) != 1:
            raise ValueError(f"mask_char must be a single character, got {self.mask_char!r}")


class FilterService:
    """Chat filter facade.

    Every call reads the vocabulary snapshot once, so a concurrent reload
    never shows a half-updated word list.
    """

    def __init__(
        self,
        vocabulary: Vocabulary | VocabularyStore | None = None,
        config: FilterConfig | None = None,
    ) -> None:
        if isinstance(vocabulary, VocabularyStore):
            self.store = vocabulary
        else:
            self.store = VocabularyStore(vocabulary)
        self.config = config or FilterConfig()
        self.advertising = AdvertisingDetector(
            self.config.whitelisted_domains, block_ips=self.config.block_ips,
        )

    @property
    def vocabulary(self) -> Vocabulary:
        return self.store.current

    def analyze_message(self, text: str | None, tier: Tier | str | None = None) -> FilterResult:
        """Find the violations enforced under *tier*, in original-text coordinates."""
        tier = self._resolve_tier(tier)
        if not text:
            return FilterResult(tier=tier)

        vocabulary = self.store.current
        normalized = normalize(text)
        # --- Match (whitelist applied inside) ---
        matches = matcher.find(normalized, vocabulary)

        # --- Tier policy ---
        enforced = [m for m in matches if tier.blocks(m.category)]
        if not enforced:
            return FilterResult(tier=tier)

        # --- Map back and resolve overlaps ---
        violations = _to_violations(text, normalized, enforced)
        return FilterResult(tier=tier, violations=_dedupe_overlaps(violations))

    def filter_message(self, text: str | None, tier: Tier | str | None = None) -> str:
        """Return *text* with every violation masked, same length in code points."""
        if not text:
            return text or ""
        result = self.analyze_message(text, tier)
        if not result.violations:
            return text

        mask = self.config.mask_char
        parts: list[str] = []
        pos = 0
        for v in result.violations:
            parts.append(text[pos:v.start])
            parts.append(mask * (v.end - v.start))
            pos = v.end
        parts.append(text[pos:])
        return "".join(parts)

    def contains_slurs(self, text: str | None) -> bool:
        """True if *text* hits an always-blocked category. No tier can weaken this."""
        return self.analyze_message(text, _ALWAYS_BLOCKED_ONLY).is_blocked

    def contains_advertising(self, text: str | None) -> bool:
        """True if *text* links to a non-whitelisted domain or names an IP address."""
        return self.advertising.contains_advertising(text)

    # ------------------------------------------------------------------
    # Admin helpers
    # ------------------------------------------------------------------

    def reload(
        self,
        literals: Iterable[tuple[Category, str]] = (),
        patterns: Iterable[tuple[Category, str]] = (),
        whitelist: Iterable[str] = (),
    ) -> Vocabulary:
        return self.store.reload(literals, patterns, whitelist)

    def stats(self) -> dict:
        vocab = self.store.current
        return {
            "version": vocab.version,
            "words": vocab.word_count,
            "patterns": vocab.pattern_count,
            "whitelist": vocab.whitelist_count,
        }

    def _resolve_tier(self, tier: Tier | str | None) -> Tier:
        if isinstance(tier, Tier):
            return tier
        return Tier.from_string(tier, self.config.default_tier)


def _to_violations(
    text: str, normalized: NormalizedText, matches: list[Match]
) -> list[Violation]:
    """Map normalized spans to original spans.

    A broken offset map would be a normalizer bug; rather than fail the
    chat pipeline, the whole message becomes one span.
    """
    if len(normalized.origin) != len(normalized.text) or not normalized.is_monotonic():
        logger.error("Offset map invariant broken for %r; masking whole message", text)
        worst = max(matches, key=lambda m: m.category.severity)
        return [Violation(0, len(text), worst.category, text, worst.matched_text)]

    violations: list[Violation] = []
    for m in matches:
        start, end = _trim_separators(text, *normalized.original_span(m.start, m.end))
        violations.append(Violation(
            start=start,
            end=end,
            category=m.category,
            text=text[start:end],
            matched_text=m.matched_text,
        ))
    return violations


def _dedupe_overlaps(violations: list[Violation]) -> list[Violation]:
    """Remove overlapping violations: highest severity, then longest, then earliest wins."""
    ranked = sorted(
        violations,
        key=lambda v: (-v.category.severity, -(v.end - v.start), v.start),
    )
    taken: list[Violation] = []
    used: list[tuple[int, int]] = []
    for v in ranked:
        if not any(v.start < e and v.end > s for s, e in used):
            taken.append(v)
            used.append((v.start, v.end))
    return sorted(taken, key=lambda v: v.start)


def _trim_separators(text: str, start: int, end: int) -> tuple[int, int]:
    """Shrink ``[start, end)`` past separators folded in at either edge.

    Separators inside the span stay, so ``b.4.d`` is masked whole while the
    space and comma in front of a word are left alone.
    """
    while end - start > 1 and is_separator(text[start]):
        start += 1
    while end - start > 1 and is_separator(text[end - 1]):
        end -= 1
    return start, end
