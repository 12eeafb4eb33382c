"""Tests for the automaton, vocabulary snapshots and the matcher."""

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import logging

from chat_filter import Category, Vocabulary, VocabularyStore, normalize
from chat_filter.automaton import Automaton
from chat_filter import matcher


def _hits(automaton, text):
    return sorted((s, e, automaton.keywords[i]) for s, e, i in automaton.iter(text))


# ── Automaton ────────────────────────────────────────────────────────

def test_automaton_finds_overlapping_keywords():
    ac = Automaton(["he", "she", "his", "hers"])
    assert _hits(ac, "ushers") == [(1, 4, "she"), (2, 4, "he"), (2, 6, "hers")]


def test_automaton_self_overlap():
    ac = Automaton(["aa"])
    assert _hits(ac, "aaaa") == [(0, 2, "aa"), (1, 3, "aa"), (2, 4, "aa")]


def test_automaton_suffix_outputs():
    ac = Automaton(["badword", "word", "or"])
    assert _hits(ac, "xbadwordx") == [(1, 8, "badword"), (4, 8, "word"), (5, 7, "or")]


def test_automaton_no_match_and_empty():
    assert _hits(Automaton(["abc"]), "abxabyab") == []
    assert _hits(Automaton([]), "anything") == []
    assert len(Automaton(["a", "b"])) == 2


# ── Vocabulary ───────────────────────────────────────────────────────

def test_load_normalizes_literals_and_whitelist():
    vocab = Vocabulary.load(
        literals=[(Category.SEVERE, "B4dW0rd"), (Category.LOW, "h e c k")],
        whitelist=["Cl@ssic"],
    )
    assert [e.canonical_form for e in vocab.literals] == ["badword", "heck"]
    assert vocab.whitelist == frozenset({"classic"})


def test_load_skips_empty_and_duplicate_terms():
    vocab = Vocabulary.load(literals=[
        (Category.LOW, "heck"),
        (Category.LOW, "HECK"),
        (Category.LOW, "..."),
        (Category.HIGH, "heck"),
    ])
    assert vocab.word_count == 2
    assert {e.category for e in vocab.literals} == {Category.LOW, Category.HIGH}


def test_malformed_pattern_skipped_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="chat_filter.vocabulary"):
        vocab = Vocabulary.load(patterns=[
            (Category.HIGH, "(unclosed"),
            (Category.HIGH, r"h+a+t+e+"),
        ])
    assert vocab.pattern_count == 1
    assert vocab.patterns[0].source == r"h+a+t+e+"
    assert "malformed pattern" in caplog.text


def test_empty_vocabulary():
    vocab = Vocabulary.empty()
    assert vocab.is_empty
    assert vocab.word_count == vocab.pattern_count == vocab.whitelist_count == 0


def test_versions_increase():
    a = Vocabulary.load(literals=[(Category.LOW, "heck")])
    b = Vocabulary.load(literals=[(Category.LOW, "heck")])
    assert b.version > a.version


def test_store_reload_swaps_snapshot():
    store = VocabularyStore()
    assert store.current.is_empty

    first = store.reload(literals=[(Category.LOW, "heck")])
    assert store.current is first

    second = store.reload(literals=[(Category.LOW, "darn")])
    assert store.current is second
    # the old snapshot is untouched
    assert [e.canonical_form for e in first.literals] == ["heck"]


def test_store_publish_returns_previous():
    first = Vocabulary.load(literals=[(Category.LOW, "heck")])
    store = VocabularyStore(first)
    second = Vocabulary.load(literals=[(Category.LOW, "darn")])
    assert store.publish(second) is first
    assert store.current is second


# ── Matcher ──────────────────────────────────────────────────────────

def test_find_literals_in_obfuscated_text():
    vocab = Vocabulary.load(literals=[(Category.SEVERE, "badword")])
    matches = matcher.find(normalize("b.4.d w0rd"), vocab)
    assert len(matches) == 1
    assert matches[0].matched_text == "badword"
    assert matches[0].category is Category.SEVERE
    assert matches[0].source == "literal"
    assert (matches[0].start, matches[0].end) == (0, 7)


def test_find_patterns():
    vocab = Vocabulary.load(patterns=[(Category.HIGH, r"h+a+t+e+")])
    matches = matcher.find(normalize("i haaaate you"), vocab)
    assert [m.matched_text for m in matches] == ["haate"]
    assert matches[0].source == "pattern"


def test_zero_width_pattern_matches_ignored():
    vocab = Vocabulary.load(patterns=[(Category.LOW, r"x*")])
    assert matcher.find(normalize("hello"), vocab) == []


def test_whitelist_suppresses_enclosing_token():
    vocab = Vocabulary.load(
        literals=[(Category.LOW, "ass")],
        whitelist=["classic"],
    )
    assert matcher.find(normalize("that's classic"), vocab) == []
    # a different enclosing token still fires
    assert len(matcher.find(normalize("classy ass"), vocab)) == 2


def test_whitelist_needs_whole_token():
    vocab = Vocabulary.load(
        literals=[(Category.LOW, "ass")],
        whitelist=["class"],
    )
    # enclosing token is "classic", not "class"
    assert len(matcher.find(normalize("classic"), vocab)) == 1


def test_whitelist_survives_trailing_punctuation():
    vocab = Vocabulary.load(
        literals=[(Category.LOW, "ass")],
        whitelist=["classic", "assess"],
    )
    # "!" and "|" fold to "i", which must not extend the token
    for text in ("that's classic!", "so classic!!", "so classic!!!", "assess|", "|assess"):
        assert matcher.find(normalize(text), vocab) == [], text


def test_whitelist_trims_only_symbols():
    vocab = Vocabulary.load(
        literals=[(Category.LOW, "ass")],
        whitelist=["classic"],
    )
    # a typed digit is part of the word
    assert len(matcher.find(normalize("classic1"), vocab)) == 1
    assert len(matcher.find(normalize("classic!ass"), vocab)) == 2


def test_whitelist_does_not_apply_to_patterns():
    vocab = Vocabulary.load(
        patterns=[(Category.LOW, r"ass")],
        whitelist=["classic"],
    )
    assert len(matcher.find(normalize("classic"), vocab)) == 1


def test_enclosing_token():
    nt = normalize("that's classic")
    start = nt.text.index("ass")
    assert matcher.enclosing_token(nt, start, start + 3) == "classic"

    nt = normalize("c.l.a.s.s.i.c")
    start = nt.text.index("ass")
    assert matcher.enclosing_token(nt, start, start + 3) == "ass"


def test_enclosing_token_agrees_with_whitelist():
    # whitelisting whatever enclosing_token reports suppresses the hit
    nt = normalize("my class-y assess")
    vocab = Vocabulary.load(literals=[(Category.LOW, "ass")])
    tokens = [matcher.enclosing_token(nt, m.start, m.end) for m in matcher.find(nt, vocab)]
    assert tokens == ["class", "assess"]

    vocab = Vocabulary.load(literals=[(Category.LOW, "ass")], whitelist=tokens)
    assert matcher.find(nt, vocab) == []


def test_find_with_no_vocabulary():
    assert matcher.find(normalize("anything"), None) == []
    assert matcher.find(normalize("anything"), Vocabulary.empty()) == []
    assert matcher.find(normalize(""), Vocabulary.load([(Category.LOW, "a")])) == []


if __name__ == "__main__":
    import pytest
    pytest.main([__file__, "-v"])
