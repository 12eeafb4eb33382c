"""Aho-Corasick automaton for literal vocabulary terms.

Built once per vocabulary snapshot; a scan over a message of length *n*
costs O(n + number of hits) no matter how many terms are loaded.
Immutable after ``__init__`` so one instance is shared by every thread.
"""

from __future__ import annotations
from collections import deque
from typing import Iterable, Iterator


class Automaton:
    """Multi-pattern matcher over a fixed list of keywords."""

    __slots__ = ("_goto", "_fail", "_out", "_keywords")

    def __init__(self, keywords: Iterable[str]) -> None:
        self._keywords: tuple[str, ...] = tuple(keywords)
        self._goto: list[dict[str, int]] = [{}]
        self._fail: list[int] = [0]
        out: list[list[int]] = [[]]

        for idx, word in enumerate(self._keywords):
            if not word:
                continue
            state = 0
            for ch in word:
                nxt = self._goto[state].get(ch)
                if nxt is None:
                    nxt = len(self._goto)
                    self._goto[state][ch] = nxt
                    self._goto.append({})
                    self._fail.append(0)
                    out.append([])
                state = nxt
            out[state].append(idx)

        # Breadth-first so every fail target is finished before it is used
        queue: deque[int] = deque(self._goto[0].values())
        while queue:
            state = queue.popleft()
            for ch, nxt in self._goto[state].items():
                queue.append(nxt)
                f = self._fail[state]
                while f and ch not in self._goto[f]:
                    f = self._fail[f]
                self._fail[nxt] = self._goto[f].get(ch, 0)
                out[nxt].extend(out[self._fail[nxt]])

        self._out: tuple[tuple[int, ...], ...] = tuple(tuple(o) for o in out)

    @property
    def keywords(self) -> tuple[str, ...]:
        return self._keywords

    def __len__(self) -> int:
        return len(self._keywords)

    def iter(self, text: str) -> Iterator[tuple[int, int, int]]:
        """Yield ``(start, end, keyword_index)`` for every occurrence, overlaps included."""
        goto, fail, out, keywords = self._goto, self._fail, self._out, self._keywords
        state = 0
        for pos, ch in enumerate(text):
            while state and ch not in goto[state]:
                state = fail[state]
            state = goto[state].get(ch, 0)
            for idx in out[state]:
                end = pos + 1
                yield end - len(keywords[idx]), end, idx
