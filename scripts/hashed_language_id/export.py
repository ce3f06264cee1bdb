"""Artifact writers for the external inference runtime.

Two formats are supported: a JSON document (also readable back with
:func:`load_model_json`) and a self-contained C++ header. Both carry the
ordered language codes, the bucket-major weight matrix, the intercepts and
the hashing dimension. A reader has to reproduce the feature hashing in
:mod:`hashed_language_id.features` exactly to get the same rankings.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np

from .data import CorpusFormatError, display_name
from .features import SEED, UNICODE_CLASS_SEED, UNICODE_SEED
from .model import Model

LOGGER = logging.getLogger(__name__)

VALUES_PER_LINE = 8
ARTIFACT_VERSION = 1


class ArtifactWriteError(OSError):
    """Raised when an artifact cannot be written."""


def lang_code_to_cpp_enum(code: str) -> str:
    name = re.sub(r"\W", "_", code[:1].upper() + code[1:])
    if name[:1].isdigit():
        name = "_" + name
    return name


def cpp_enum_names(codes: Sequence[str]) -> List[str]:
    """Return one C++ enum name per code; names that collide raise ``ValueError``."""

    names = [lang_code_to_cpp_enum(code) for code in codes]
    seen: Dict[str, str] = {}
    for code, name in zip(codes, names):
        if name in seen:
            raise ValueError(f"Language codes {seen[name]!r} and {code!r} both map to C++ enum {name!r}")
        seen[name] = code
    return names


def _write_text(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf8")
    except OSError as exc:
        raise ArtifactWriteError(f"Could not write artifact to {path}: {exc}") from exc
    LOGGER.info("Weights exported to %s", path)


def model_to_dict(
    model: Model,
    language_names: Optional[Dict[str, str]] = None,
    samples_per_language: Optional[int] = None,
) -> Dict[str, object]:
    language_names = language_names or {}
    return {
        "version": ARTIFACT_VERSION,
        "dimension": model.dimension,
        "hashing": {
            "seed": SEED,
            "unicode_seed": UNICODE_SEED,
            "unicode_class_seed": UNICODE_CLASS_SEED,
        },
        "language_codes": list(model.language_codes),
        "language_names": {code: display_name(code, language_names) for code in model.language_codes},
        "samples_per_language": samples_per_language,
        "weights": [float(value) for value in model.flat_weights()],
        "intercepts": [float(value) for value in model.intercepts],
    }


def export_json(
    model: Model,
    path: Path,
    language_names: Optional[Dict[str, str]] = None,
    samples_per_language: Optional[int] = None,
) -> Path:
    path = Path(path)
    payload = model_to_dict(model, language_names, samples_per_language)
    _write_text(path, json.dumps(payload, ensure_ascii=False))
    return path


def load_model_json(path: Path) -> Model:
    """Rebuild a :class:`Model` from a JSON artifact."""

    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Model artifact not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf8"))
    except json.JSONDecodeError as exc:
        raise CorpusFormatError(f"{path} is not valid JSON: {exc}") from exc

    hashing = data.get("hashing") if isinstance(data, dict) else None
    if not isinstance(hashing, dict):
        raise CorpusFormatError(f"{path} must contain a 'hashing' object")
    if hashing.get("seed") != SEED:
        raise CorpusFormatError(f"{path} was hashed with seed {hashing.get('seed')}, expected {SEED}")
    try:
        return Model(
            data["language_codes"],
            int(data["dimension"]),
            np.asarray(data["weights"], dtype=np.float32),
            np.asarray(data["intercepts"], dtype=np.float32),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise CorpusFormatError(f"{path} is not a valid model artifact: {exc}") from exc


def _format_float_rows(values: Iterable[float]) -> List[str]:
    formatted = [f"{value:.6f}f" for value in values]
    lines = []
    for start in range(0, len(formatted), VALUES_PER_LINE):
        lines.append("    " + ", ".join(formatted[start : start + VALUES_PER_LINE]))
    return [line + "," for line in lines[:-1]] + lines[-1:]


def render_cpp_header(
    model: Model,
    language_names: Optional[Dict[str, str]] = None,
    samples_per_language: Optional[int] = None,
) -> str:
    language_names = language_names or {}
    enum_names = cpp_enum_names(model.language_codes)
    weights = model.flat_weights()

    lines = [
        "// Auto-generated language detection weights",
        f"// Generated from {model.num_classes} languages with {model.dimension} features",
    ]
    if samples_per_language is not None:
        lines.append(f"// Trained with {samples_per_language} samples per language (egalitarian)")
    lines += ["#pragma once", "#include <array>", "#include <cstddef>", "#include <string>", ""]

    lines.append("enum class Lang {")
    for code, enum_name in zip(model.language_codes, enum_names):
        lines.append(f"    {enum_name},  // {display_name(code, language_names)}")
    lines += ["};", ""]

    lines.append("inline std::string three_letter_code(Lang language) {")
    lines.append("    switch (language) {")
    for code, enum_name in zip(model.language_codes, enum_names):
        lines.append(f'        case Lang::{enum_name}: return "{code}";')
    lines += ["    }", '    return "unknown";', "}", ""]

    lines.append(f"const std::array<Lang, {model.num_classes}> LANGUAGES = {{")
    lines += [f"    Lang::{enum_name}," for enum_name in enum_names]
    lines += ["};", ""]

    lines.append(f"constexpr std::size_t DIMENSION = {model.dimension};")
    lines.append("")

    lines.append(f"const std::array<float, {weights.size}> WEIGHTS = {{")
    lines += _format_float_rows(weights)
    lines += ["};", ""]

    lines.append(f"const float INTERCEPTS[{model.num_classes}] = {{")
    lines += _format_float_rows(model.intercepts)
    lines.append("};")
    return "\n".join(lines) + "\n"


def export_cpp_header(
    model: Model,
    path: Path,
    language_names: Optional[Dict[str, str]] = None,
    samples_per_language: Optional[int] = None,
) -> Path:
    path = Path(path)
    _write_text(path, render_cpp_header(model, language_names, samples_per_language))
    return path


def export_model(
    model: Model,
    path: Path,
    language_names: Optional[Dict[str, str]] = None,
    samples_per_language: Optional[int] = None,
) -> Path:
    """Write ``model`` in the format implied by the file suffix."""

    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".json":
        return export_json(model, path, language_names, samples_per_language)
    if suffix in {".h", ".hpp"}:
        return export_cpp_header(model, path, language_names, samples_per_language)
    raise ValueError(f"Unsupported artifact format {path.suffix!r}; use .json, .h or .hpp")
