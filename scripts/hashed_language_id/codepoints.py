"""Coarse script classification of non-ASCII codepoints."""

from __future__ import annotations

from bisect import bisect_left
from typing import Tuple

JP_PUNCT_START = 0x3000
JP_PUNCT_END = 0x303F
JP_HIRAGANA_START = 0x3040
JP_HIRAGANA_END = 0x309F
JP_KATAKANA_START = 0x30A0
JP_KATAKANA_END = 0x30FF
CJK_KANJI_START = 0x4E00
CJK_KANJI_END = 0x9FAF
JP_HALFWIDTH_KATAKANA_START = 0xFF61
JP_HALFWIDTH_KATAKANA_END = 0xFF90

# Accented Latin letters and Latin punctuation marks, followed by the
# Japanese/CJK range endpoints. Must stay sorted and free of duplicates.
CODEPOINT_BOUNDARIES: Tuple[int, ...] = (
    160, 161, 171, 172, 173, 174, 187, 192, 196, 199, 200, 201, 202, 205, 214, 220, 223,
    224, 225, 226, 227, 228, 231, 232, 233, 234, 235, 236, 237, 238, 239, 242, 243, 244,
    245, 246, 249, 250, 251, 252, 333, 339,
    JP_PUNCT_START, JP_PUNCT_END, JP_HIRAGANA_START, JP_HIRAGANA_END,
    JP_KATAKANA_START, JP_KATAKANA_END, CJK_KANJI_START, CJK_KANJI_END,
    JP_HALFWIDTH_KATAKANA_START, JP_HALFWIDTH_KATAKANA_END,
)


def classify_codepoint(codepoint: int) -> int:
    """Return the rank ``codepoint`` takes in :data:`CODEPOINT_BOUNDARIES`.

    Exact matches get the index of the matching entry; any other codepoint
    gets the position it would be inserted at, so every codepoint maps to a
    class id in ``0..len(CODEPOINT_BOUNDARIES)``.
    """

    return bisect_left(CODEPOINT_BOUNDARIES, codepoint)
