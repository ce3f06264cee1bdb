"""Hashed character features for the linear language identifier.

Text is turned into a stream of :class:`Feature` events: overlapping ASCII
n-grams packed into a 32-bit window, plus a coarse codepoint bucket and a
script class for every non-ASCII character. Each feature is hashed with
MurmurHash2 into ``dimension`` buckets, so no vocabulary has to be stored
next to the trained weights.
"""

from __future__ import annotations

import math
from collections import defaultdict
from enum import Enum
from typing import Dict, Iterator, NamedTuple

from .codepoints import classify_codepoint

SEED = 3_242_157_231
UNICODE_SEED = SEED ^ 2
UNICODE_CLASS_SEED = SEED ^ 4

MURMUR_M = 0x5BD1E995
UINT32_MASK = 0xFFFFFFFF
BIGRAM_MASK = (1 << 16) - 1
TRIGRAM_MASK = (1 << 24) - 1
CODEPOINT_QUANTUM = 128

BLANK = ord(" ")

FeatureVector = Dict[int, float]


class FeatureKind(Enum):
    ASCII_NGRAM = "ascii_ngram"
    UNICODE = "unicode"
    UNICODE_CLASS = "unicode_class"


class Feature(NamedTuple):
    """A single hashed feature.

    ``value`` is the packed n-gram window for ``ASCII_NGRAM`` and the raw
    codepoint for the two non-ASCII kinds.
    """

    kind: FeatureKind
    value: int

    def to_hash(self) -> int:
        if self.kind is FeatureKind.ASCII_NGRAM:
            return murmurhash2(self.value, SEED)
        if self.kind is FeatureKind.UNICODE:
            return murmurhash2(self.value // CODEPOINT_QUANTUM, UNICODE_SEED)
        if self.kind is FeatureKind.UNICODE_CLASS:
            return murmurhash2(classify_codepoint(self.value), UNICODE_CLASS_SEED)
        raise ValueError(f"Unknown feature kind: {self.kind!r}")


def murmurhash2(key: int, seed: int) -> int:
    """Single-word MurmurHash2 over unsigned 32-bit arithmetic."""

    k = (key * MURMUR_M) & UINT32_MASK
    k ^= k >> 24
    k = (k * MURMUR_M) & UINT32_MASK
    h = (seed * MURMUR_M) & UINT32_MASK
    h ^= k
    h ^= h >> 13
    h = (h * MURMUR_M) & UINT32_MASK
    return h ^ (h >> 15)


def emit_features(text: str) -> Iterator[Feature]:
    """Yield the features of ``text`` from left to right.

    The window starts out holding a blank, so the first ASCII character of
    the text already forms a bigram with the implicit word boundary. A
    non-alphanumeric ASCII character blanks the window after it has been
    emitted; a non-ASCII character leaves the window alone but restarts the
    run counter, so the next ASCII character only primes the window.
    """

    window = BLANK
    run_length = 1
    for char in text:
        if not char.isascii():
            codepoint = ord(char)
            yield Feature(FeatureKind.UNICODE, codepoint)
            yield Feature(FeatureKind.UNICODE_CLASS, codepoint)
            run_length = 0
            continue

        window = ((window << 8) | ord(char.lower())) & UINT32_MASK
        if run_length == 0:
            run_length = 1
        elif run_length == 1:
            yield Feature(FeatureKind.ASCII_NGRAM, window & BIGRAM_MASK)
            run_length = 2
        elif run_length == 2:
            yield Feature(FeatureKind.ASCII_NGRAM, window & BIGRAM_MASK)
            yield Feature(FeatureKind.ASCII_NGRAM, window & TRIGRAM_MASK)
            run_length = 3
        else:
            yield Feature(FeatureKind.ASCII_NGRAM, window & BIGRAM_MASK)
            yield Feature(FeatureKind.ASCII_NGRAM, window & TRIGRAM_MASK)
            yield Feature(FeatureKind.ASCII_NGRAM, window)

        if not char.isalnum():
            window = BLANK


def bucket_of(feature: Feature, dimension: int) -> int:
    return feature.to_hash() % dimension


def extract_features(text: str, dimension: int) -> FeatureVector:
    """Return the sparse ``bucket -> weight`` map for ``text``.

    Bucket counts are scaled by ``1 / sqrt(total emitted features)``, which
    approximates an L2 norm when buckets rarely collide. Empty text yields an
    empty map.
    """

    counts: Dict[int, float] = defaultdict(float)
    total = 0
    for feature in emit_features(text):
        total += 1
        counts[bucket_of(feature, dimension)] += 1.0

    if total == 0:
        return {}
    norm = 1.0 / math.sqrt(total)
    return {bucket: count * norm for bucket, count in counts.items()}
