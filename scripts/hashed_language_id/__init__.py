"""Hashed n-gram linear language identifier."""

from .balancing import create_balanced_dataset, resample_language
from .cli import main, parse_args
from .codepoints import CODEPOINT_BOUNDARIES, classify_codepoint
from .config import TrainingConfig
from .data import (
    CorpusFormatError,
    TrainingExample,
    discover_language_codes,
    load_csv_examples,
    load_language_names,
)
from .evaluation import EvaluationResult, evaluate, evaluate_report
from .export import ArtifactWriteError, export_cpp_header, export_json, export_model, load_model_json
from .features import Feature, FeatureKind, emit_features, extract_features, murmurhash2
from .model import Model, softmax
from .trainer import Trainer, TrainingHistory, format_duration, sgd_update

__all__ = [
    "ArtifactWriteError",
    "CODEPOINT_BOUNDARIES",
    "CorpusFormatError",
    "EvaluationResult",
    "Feature",
    "FeatureKind",
    "Model",
    "Trainer",
    "TrainingConfig",
    "TrainingExample",
    "TrainingHistory",
    "classify_codepoint",
    "create_balanced_dataset",
    "discover_language_codes",
    "emit_features",
    "evaluate",
    "evaluate_report",
    "export_cpp_header",
    "export_json",
    "export_model",
    "extract_features",
    "format_duration",
    "load_csv_examples",
    "load_language_names",
    "load_model_json",
    "main",
    "murmurhash2",
    "parse_args",
    "resample_language",
    "sgd_update",
    "softmax",
]
