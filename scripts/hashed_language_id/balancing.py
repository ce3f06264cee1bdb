"""Per-language resampling to a fixed number of training examples."""

from __future__ import annotations

import logging
import random
from collections import defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from .data import TrainingExample, discover_language_codes, display_name

LOGGER = logging.getLogger(__name__)


def group_by_language(examples: Sequence[TrainingExample]) -> Dict[str, List[TrainingExample]]:
    """Group examples by language code, keeping their original order."""

    grouped: Dict[str, List[TrainingExample]] = defaultdict(list)
    for example in examples:
        grouped[example.language_code].append(example)
    return grouped


def resample_language(
    examples: Sequence[TrainingExample],
    target: int,
    rng: random.Random,
) -> List[TrainingExample]:
    """Return exactly ``target`` examples drawn from ``examples``.

    Larger classes are shuffled and truncated (sampling without replacement).
    Smaller classes keep every original and are topped up with uniformly drawn
    duplicates.
    """

    if not examples:
        raise ValueError("Cannot resample a language without examples")
    if len(examples) >= target:
        sampled = list(examples)
        rng.shuffle(sampled)
        return sampled[:target]

    upsampled = list(examples)
    while len(upsampled) < target:
        upsampled.append(rng.choice(examples))
    return upsampled[:target]


def create_balanced_dataset(
    examples: Sequence[TrainingExample],
    samples_per_language: int,
    rng: random.Random,
    language_codes: Optional[Sequence[str]] = None,
    language_names: Optional[Dict[str, str]] = None,
) -> List[TrainingExample]:
    """Resample every language to ``samples_per_language`` examples and shuffle.

    Only codes listed in ``language_codes`` (default: every code present in
    ``examples``) are kept. Codes without any source example are skipped.
    """

    language_names = language_names or {}
    if language_codes is None:
        language_codes = discover_language_codes(examples)
    grouped = group_by_language(examples)

    LOGGER.info("Creating balanced dataset with %d samples per language", samples_per_language)
    balanced: List[TrainingExample] = []
    upsampled: List[Tuple[str, int]] = []
    downsampled: List[Tuple[str, int]] = []
    for code in language_codes:
        source = grouped.get(code)
        if not source:
            LOGGER.info("No examples for language %s, skipping", code)
            continue
        resampled = resample_language(source, samples_per_language, rng)
        if len(source) >= samples_per_language:
            downsampled.append((code, len(source)))
        else:
            upsampled.append((code, len(source)))
        balanced.extend(resampled)
        LOGGER.info(
            "  %s: %d -> %d samples (%s)",
            code,
            len(source),
            len(resampled),
            display_name(code, language_names),
        )

    LOGGER.info(
        "Balanced %d languages into %d samples (%d upsampled, %d downsampled)",
        len(upsampled) + len(downsampled),
        len(balanced),
        len(upsampled),
        len(downsampled),
    )
    for code, original in upsampled:
        LOGGER.debug(
            "Upsampled %s: %d -> %d (%s)",
            code,
            original,
            samples_per_language,
            display_name(code, language_names),
        )
    for code, original in downsampled:
        LOGGER.debug(
            "Downsampled %s: %d -> %d (%s)",
            code,
            original,
            samples_per_language,
            display_name(code, language_names),
        )

    rng.shuffle(balanced)
    return balanced
