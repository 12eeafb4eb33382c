"""Vocabulary — immutable, versioned snapshot of the word lists.

Design goals:
  - Built once per (re)load, never mutated afterwards
  - Shared by any number of concurrent analyses without locking
  - Reload = build a fresh snapshot, then swap one reference

Usage:
    store = VocabularyStore()
    store.reload(
        literals=[(Category.LOW, "heck")],
        patterns=[(Category.SEVERE, r"b+a+d+w+o+r+d+")],
        whitelist=["classic"],
    )
    vocab = store.current      # take once per call
"""

from __future__ import annotations
import itertools
import logging
import re
import threading
from dataclasses import dataclass
from typing import Iterable

from .automaton import Automaton
from .normalizer import normalize
from .types import Category

logger = logging.getLogger(__name__)

_versions = itertools.count(1)


@dataclass(frozen=True, slots=True)
class VocabularyEntry:
    """One categorized term. Literal entries hold normalized text, pattern entries a compiled regex."""
    category: Category
    is_pattern: bool
    canonical_form: str | re.Pattern[str]

    @property
    def source(self) -> str:
        form = self.canonical_form
        return form.pattern if isinstance(form, re.Pattern) else form


class Vocabulary:
    """Read-only word list snapshot: literal automaton + patterns + whitelist."""

    __slots__ = ("version", "_literals", "_patterns", "_whitelist", "_automaton")

    def __init__(
        self,
        literals: Iterable[VocabularyEntry] = (),
        patterns: Iterable[VocabularyEntry] = (),
        whitelist: Iterable[str] = (),
        *,
        version: int | None = None,
    ) -> None:
        self.version = version if version is not None else next(_versions)
        self._literals: tuple[VocabularyEntry, ...] = tuple(literals)
        self._patterns: tuple[VocabularyEntry, ...] = tuple(patterns)
        self._whitelist: frozenset[str] = frozenset(whitelist)
        self._automaton = Automaton(e.canonical_form for e in self._literals)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def load(
        cls,
        literals: Iterable[tuple[Category, str]] = (),
        patterns: Iterable[tuple[Category, str]] = (),
        whitelist: Iterable[str] = (),
        *,
        version: int | None = None,
    ) -> Vocabulary:
        """Build a snapshot from raw config values.

        Literal and whitelist terms go through the same normalization as chat
        text so ``"B4dW0rd"`` in config matches ``"badword"`` in chat.
        Malformed patterns are skipped with a warning.
        """
        literal_entries: list[VocabularyEntry] = []
        seen: set[tuple[Category, str]] = set()
        for category, term in literals:
            if not isinstance(term, str):
                logger.warning("Skipping non-string literal term %r (%s)", term, category.name)
                continue
            form = normalize(term).text
            if not form:
                logger.warning("Skipping empty literal term %r (%s)", term, category.name)
                continue
            if (category, form) in seen:
                continue
            seen.add((category, form))
            literal_entries.append(VocabularyEntry(category, False, form))

        pattern_entries: list[VocabularyEntry] = []
        for category, source in patterns:
            try:
                compiled = re.compile(source, re.IGNORECASE)
            except (re.error, TypeError) as e:
                logger.warning("Skipping malformed pattern %r (%s): %s", source, category.name, e)
                continue
            pattern_entries.append(VocabularyEntry(category, True, compiled))

        safe = {
            form for form in (normalize(w).text for w in whitelist if isinstance(w, str))
            if form
        }

        vocab = cls(literal_entries, pattern_entries, safe, version=version)
        logger.debug(
            "Loaded vocabulary v%d: %d words, %d patterns, %d whitelisted",
            vocab.version, vocab.word_count, vocab.pattern_count, vocab.whitelist_count,
        )
        return vocab

    @classmethod
    def empty(cls) -> Vocabulary:
        """Snapshot with no entries; matches nothing."""
        return cls(version=0)

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    @property
    def literals(self) -> tuple[VocabularyEntry, ...]:
        return self._literals

    @property
    def patterns(self) -> tuple[VocabularyEntry, ...]:
        return self._patterns

    @property
    def whitelist(self) -> frozenset[str]:
        return self._whitelist

    @property
    def automaton(self) -> Automaton:
        return self._automaton

    def is_whitelisted(self, token: str) -> bool:
        return token in self._whitelist

    @property
    def word_count(self) -> int:
        return len(self._literals)

    @property
    def pattern_count(self) -> int:
        return len(self._patterns)

    @property
    def whitelist_count(self) -> int:
        return len(self._whitelist)

    @property
    def is_empty(self) -> bool:
        return not self._literals and not self._patterns

    def __repr__(self) -> str:
        return (
            f"Vocabulary(version={self.version}, words={self.word_count}, "
            f"patterns={self.pattern_count}, whitelist={self.whitelist_count})"
        )


class VocabularyStore:
    """Holds the current snapshot; reloads publish a new one atomically."""

    __slots__ = ("_current", "_write_lock")

    def __init__(self, vocabulary: Vocabulary | None = None) -> None:
        self._current = vocabulary or Vocabulary.empty()
        self._write_lock = threading.Lock()

    @property
    def current(self) -> Vocabulary:
        return self._current

    def publish(self, vocabulary: Vocabulary) -> Vocabulary:
        """Swap in a prebuilt snapshot and return the previous one."""
        with self._write_lock:
            previous, self._current = self._current, vocabulary
        logger.info("Published vocabulary v%d (was v%d)", vocabulary.version, previous.version)
        return previous

    def reload(
        self,
        literals: Iterable[tuple[Category, str]] = (),
        patterns: Iterable[tuple[Category, str]] = (),
        whitelist: Iterable[str] = (),
    ) -> Vocabulary:
        """Build a new snapshot from raw values and publish it."""
        vocabulary = Vocabulary.load(literals, patterns, whitelist)
        self.publish(vocabulary)
        return vocabulary
