"""Corpus and label-name loading."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List

import pandas as pd

LOGGER = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("id", "lan_code", "sentence")


class CorpusFormatError(ValueError):
    """Raised when a corpus or label-name file cannot be interpreted."""


@dataclass(frozen=True)
class TrainingExample:
    """A single labelled sentence."""

    id: int
    language_code: str
    text: str


def load_csv_examples(path: Path) -> List[TrainingExample]:
    """Load ``id,lan_code,sentence`` rows from a CSV file."""

    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Training corpus not found: {path}")

    # Codes such as "nan" or "null" are real language codes, never missing values.
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise CorpusFormatError(f"Could not parse {path}: {exc}") from exc

    missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
    if missing:
        raise CorpusFormatError(f"{path} is missing required column(s): {', '.join(missing)}")

    examples: List[TrainingExample] = []
    for row_number, (raw_id, code, sentence) in enumerate(
        zip(df["id"], df["lan_code"], df["sentence"]), start=2
    ):
        try:
            example_id = int(raw_id)
        except ValueError as exc:
            raise CorpusFormatError(f"{path}:{row_number}: invalid id {raw_id!r}") from exc
        code = code.strip()
        if not code:
            raise CorpusFormatError(f"{path}:{row_number}: empty language code")
        examples.append(TrainingExample(id=example_id, language_code=code, text=sentence))

    LOGGER.info("Loaded %d training examples from %s", len(examples), path)
    return examples


def load_language_names(path: Path) -> Dict[str, str]:
    """Load the optional ``code -> display name`` mapping from JSON."""

    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Language name mapping not found: {path}")
    try:
        mapping = json.loads(path.read_text(encoding="utf8"))
    except json.JSONDecodeError as exc:
        raise CorpusFormatError(f"{path} is not valid JSON: {exc}") from exc
    if not isinstance(mapping, dict) or not all(
        isinstance(key, str) and isinstance(value, str) for key, value in mapping.items()
    ):
        raise CorpusFormatError(f"{path} must contain a JSON object of string to string")
    return mapping


def discover_language_codes(examples: Iterable[TrainingExample]) -> List[str]:
    """Return the sorted, de-duplicated class codes present in ``examples``."""

    return sorted({example.language_code for example in examples})


def display_name(code: str, language_names: Dict[str, str]) -> str:
    return language_names.get(code, code)
