"""Advertising check — links and server addresses in chat.

Runs on the raw message, not the normalized one: URLs and IPs are made of
exactly the characters normalization throws away.
"""

from __future__ import annotations
import re
from typing import Iterable

# http(s) links and bare www. hosts
_URL = re.compile(
    r"(?:https?://|www\.)[\w\-._~:/?#\[\]@!$&'()*+,;=%]+",
    re.IGNORECASE,
)

# IPv4 with optional port
_IP = re.compile(
    r"\b(?:\d{1,3}\.){3}\d{1,3}(?::\d{1,5})?\b"
)


class AdvertisingDetector:
    """Flags messages carrying a non-whitelisted link or, optionally, an IP."""

    __slots__ = ("_domains", "_block_ips")

    def __init__(self, whitelisted_domains: Iterable[str] = (), block_ips: bool = True) -> None:
        self._domains = tuple(d.strip().lower() for d in whitelisted_domains if d and d.strip())
        self._block_ips = block_ips

    @property
    def whitelisted_domains(self) -> tuple[str, ...]:
        return self._domains

    def is_whitelisted_domain(self, url: str) -> bool:
        url = url.lower()
        return any(domain in url for domain in self._domains)

    def find(self, text: str | None) -> list[tuple[str, int, int]]:
        """Return ``(kind, start, end)`` for every advertising hit in *text*."""
        if not text:
            return []
        hits: list[tuple[str, int, int]] = []
        for m in _URL.finditer(text):
            if not self.is_whitelisted_domain(m.group()):
                hits.append(("URL", m.start(), m.end()))
        if self._block_ips:
            for m in _IP.finditer(text):
                hits.append(("IP_ADDRESS", m.start(), m.end()))
        return sorted(hits, key=lambda h: h[1])

    def contains_advertising(self, text: str | None) -> bool:
        return bool(self.find(text))
