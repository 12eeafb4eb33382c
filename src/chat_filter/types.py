"""Core types."""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum


class Category(Enum):
    """Violation categories, ordered by severity."""

    SEVERE = (4, True, "Slurs")
    HIGH = (3, False, "Hate & harassment")
    MODERATE = (2, False, "Profanity")
    LOW = (1, False, "Mild language")

    def __init__(self, severity: int, always_blocked: bool, display_name: str) -> None:
        self.severity = severity
        self.always_blocked = always_blocked   # enforced under every tier
        self.display_name = display_name

    @classmethod
    def from_string(cls, name: str) -> Category:
        key = name.strip().upper()
        key = _CATEGORY_ALIASES.get(key, key)
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"unknown category: {name!r}") from None


_CATEGORY_ALIASES = {"SLURS": "SEVERE", "SLUR": "SEVERE", "MILD": "LOW"}


@dataclass(frozen=True, slots=True)
class Tier:
    """A named policy selecting which categories are enforced."""
    name: str
    blocked: frozenset[Category] = frozenset()
    description: str = ""

    def blocks(self, category: Category) -> bool:
        return category.always_blocked or category in self.blocked

    @classmethod
    def from_string(cls, name: str | None, default: Tier | None = None) -> Tier:
        """Resolve a built-in tier by name, falling back to *default* (or STRICT)."""
        fallback = default or STRICT
        if not name:
            return fallback
        return TIERS.get(name.strip().upper(), fallback)


STRICT = Tier(
    "STRICT",
    frozenset({Category.HIGH, Category.MODERATE, Category.LOW}),
    "Filters all inappropriate language",
)
MODERATE = Tier(
    "MODERATE",
    frozenset({Category.HIGH, Category.MODERATE}),
    "Allows mild language",
)
RELAXED = Tier(
    "RELAXED",
    frozenset({Category.HIGH}),
    "Only filters hateful language",
)
MINIMAL = Tier("MINIMAL", frozenset(), "Only slurs are filtered")

# Strictest first
TIERS: dict[str, Tier] = {t.name: t for t in (STRICT, MODERATE, RELAXED, MINIMAL)}


@dataclass(frozen=True, slots=True)
class NormalizedText:
    """Canonical text plus, per character, the original offsets it came from."""
    text: str = ""
    origin: tuple[tuple[int, int], ...] = ()
    breaks: tuple[bool, ...] = ()   # True where a stripped separator preceded the char
    symbols: tuple[bool, ...] = ()  # True where the char came from a leet symbol ("!", "$", ...)

    def __len__(self) -> int:
        return len(self.text)

    def __str__(self) -> str:
        return self.text

    def is_monotonic(self) -> bool:
        return all(
            self.origin[i - 1][0] <= self.origin[i][0] and self.origin[i][0] <= self.origin[i][1]
            for i in range(1, len(self.origin))
        )

    def original_span(self, start: int, end: int) -> tuple[int, int]:
        """Map a normalized ``[start, end)`` range to original coordinates."""
        return self.origin[start][0], self.origin[end - 1][1]


@dataclass(frozen=True, slots=True)
class Match:
    """A vocabulary hit in normalized coordinates."""
    start: int
    end: int
    category: Category
    matched_text: str
    term: str              # vocabulary term or pattern source
    source: str            # "literal" | "pattern"


@dataclass(frozen=True, slots=True)
class Violation:
    """A match enforced under a tier, in original coordinates."""
    start: int
    end: int
    category: Category
    text: str              # original slice
    matched_text: str      # normalized form that matched


@dataclass(slots=True)
class FilterResult:
    """Result of analysing one message under one tier."""
    tier: Tier
    violations: list[Violation] = field(default_factory=list)

    @property
    def is_blocked(self) -> bool:
        return bool(self.violations)

    has_matches = is_blocked

    @property
    def categories(self) -> frozenset[Category]:
        return frozenset(v.category for v in self.violations)

    def has_category(self, category: Category) -> bool:
        return any(v.category is category for v in self.violations)

    @property
    def matched_terms(self) -> list[str]:
        return list(dict.fromkeys(v.matched_text for v in self.violations))
