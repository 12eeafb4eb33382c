"""Character tables used by the normalizer.

All targets are single lowercase ASCII letters so every substitution is 1:1
and the offset map survives untouched.
"""

from __future__ import annotations

# Digits and symbols that read as letters
LEET: dict[str, str] = {
    "@": "a", "4": "a",
    "8": "b",
    "3": "e",
    "1": "i", "!": "i", "|": "i",
    "0": "o",
    "5": "s", "$": "s",
    "7": "t", "+": "t",
    "2": "z",
    "9": "g", "6": "g",
}

# Lookalikes from other scripts. Keys are lowercase: case folding runs first.
HOMOGLYPHS: dict[str, str] = {
    # Cyrillic
    "а": "a",
    "в": "b",
    "е": "e",
    "ё": "e",
    "і": "i",
    "ї": "i",
    "ј": "j",
    "к": "k",
    "м": "m",
    "н": "h",
    "о": "o",
    "р": "p",
    "с": "c",
    "т": "t",
    "у": "y",
    "х": "x",
    "ѕ": "s",
    "ԁ": "d",
    "һ": "h",
    "ӏ": "l",
    "ԛ": "q",
    # Greek
    "α": "a",
    "β": "b",
    "ε": "e",
    "ι": "i",
    "κ": "k",
    "ν": "v",
    "ο": "o",
    "ρ": "p",
    "τ": "t",
    "υ": "u",
    "χ": "x",
    # Latin small capitals and IPA
    "ᴀ": "a",
    "ʙ": "b",
    "ᴄ": "c",
    "ᴅ": "d",
    "ᴇ": "e",
    "ɢ": "g",
    "ʜ": "h",
    "ɪ": "i",
    "ı": "i",
    "ᴊ": "j",
    "ᴋ": "k",
    "ʟ": "l",
    "ᴍ": "m",
    "ɴ": "n",
    "ᴏ": "o",
    "ᴘ": "p",
    "ʀ": "r",
    "ꜱ": "s",
    "ᴛ": "t",
    "ᴜ": "u",
    "ᴠ": "v",
    "ᴡ": "w",
    "ʏ": "y",
    "ᴢ": "z",
    "ø": "o",
    "đ": "d",
    "ł": "l",
}

# Fullwidth ASCII (U+FF01..U+FF5E) sits at a fixed offset from ASCII
FULLWIDTH_FIRST = 0xFF01
FULLWIDTH_LAST = 0xFF5E
FULLWIDTH_OFFSET = 0xFEE0


def fold_homoglyph(ch: str) -> str:
    """Return the Latin lookalike for *ch*, or *ch* unchanged."""
    mapped = HOMOGLYPHS.get(ch)
    if mapped is not None:
        return mapped
    code = ord(ch)
    if FULLWIDTH_FIRST <= code <= FULLWIDTH_LAST:
        return chr(code - FULLWIDTH_OFFSET).lower()
    return ch
