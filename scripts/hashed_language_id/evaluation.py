"""Held-out evaluation of a trained model."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import numpy as np

from .data import TrainingExample
from .metrics import collect_misclassifications, summarise_metrics
from .model import Model

LOGGER = logging.getLogger(__name__)


@dataclass
class EvaluationResult:
    name: str
    metrics: Dict[str, object]
    misclassifications: Dict[str, List[Tuple[str, str]]]
    scored: int
    skipped: int


def predict_examples(model: Model, examples: Sequence[TrainingExample]) -> Tuple[List[TrainingExample], List[str]]:
    """Predict every scoreable example.

    An example is scoreable when its language is known to the model and its
    text yields at least one feature. Ties go to the lowest class index.
    """

    scored: List[TrainingExample] = []
    predictions: List[str] = []
    for example in examples:
        if model.class_index(example.language_code) is None:
            continue
        features = model.extract_features(example.text)
        if not features:
            continue
        predicted_idx = int(np.argmax(model.predict(features)))
        scored.append(example)
        predictions.append(model.language_codes[predicted_idx])
    return scored, predictions


def evaluate(model: Model, examples: Sequence[TrainingExample]) -> float:
    """Return the accuracy over scoreable examples, 0.0 if there are none."""

    scored, predictions = predict_examples(model, examples)
    if not scored:
        return 0.0
    correct = sum(example.language_code == predicted for example, predicted in zip(scored, predictions))
    return correct / len(scored)


def evaluate_report(
    model: Model,
    examples: Sequence[TrainingExample],
    name: str = "Hashed n-gram linear classifier",
) -> EvaluationResult:
    LOGGER.info("Evaluating %s on %d examples", name, len(examples))
    scored, predictions = predict_examples(model, examples)
    gold = [example.language_code for example in scored]
    metrics = summarise_metrics(gold, predictions, model.language_codes)
    misclassifications = collect_misclassifications([example.text for example in scored], gold, predictions)
    return EvaluationResult(
        name=name,
        metrics=metrics,
        misclassifications=misclassifications,
        scored=len(scored),
        skipped=len(examples) - len(scored),
    )
