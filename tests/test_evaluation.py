"""Held-out accuracy and the evaluation report."""

import numpy as np
import pytest

from hashed_language_id import Model, TrainingExample, evaluate, evaluate_report
from hashed_language_id.metrics import collect_misclassifications, format_classification_report


@pytest.fixture
def biased_model():
    """Every bucket votes for "fr", so every scoreable example is predicted "fr"."""
    weights = np.zeros((64, 2))
    weights[:, 1] = 1.0
    return Model(["en", "fr"], 64, weights, np.zeros(2))


class TestEvaluate:
    def test_no_scoreable_examples(self, biased_model):
        assert evaluate(biased_model, []) == 0.0
        assert evaluate(biased_model, [TrainingExample(1, "en", "")]) == 0.0
        assert evaluate(biased_model, [TrainingExample(1, "xx", "text")]) == 0.0

    def test_accuracy_ignores_unscoreable(self, biased_model):
        examples = [
            TrainingExample(1, "fr", "bonjour"),
            TrainingExample(2, "en", "hello"),
            TrainingExample(3, "fr", ""),
            TrainingExample(4, "de", "hallo"),
        ]
        assert evaluate(biased_model, examples) == pytest.approx(0.5)

    def test_ties_go_to_first_class(self):
        model = Model(["en", "fr"], 8, np.zeros((8, 2)), np.zeros(2))
        assert evaluate(model, [TrainingExample(1, "en", "anything")]) == 1.0
        assert model.predict_language("anything") == "en"
        assert model.predict_language("") is None


class TestEvaluateReport:
    def test_report_contents(self, biased_model):
        examples = [
            TrainingExample(1, "fr", "bonjour"),
            TrainingExample(2, "en", "hello there"),
            TrainingExample(3, "en", ""),
        ]
        result = evaluate_report(biased_model, examples)
        assert result.scored == 2
        assert result.skipped == 1
        assert result.metrics["accuracy"] == pytest.approx(0.5)
        assert result.metrics["confusion_matrix"] == [[0, 1], [0, 1]]
        assert result.misclassifications == {"en": [("fr", "hello there")]}

    def test_empty_report(self, biased_model):
        result = evaluate_report(biased_model, [])
        assert result.metrics["accuracy"] == 0.0
        assert result.metrics["confusion_matrix"] == []


class TestMetricsHelpers:
    def test_misclassifications_capped_per_label(self):
        collected = collect_misclassifications(
            ["a", "b", "c", "d"], ["en", "en", "en", "fr"], ["fr", "fr", "fr", "fr"], max_per_label=2
        )
        assert collected == {"en": [("fr", "a"), ("fr", "b")]}

    def test_format_report(self):
        report = {
            "en": {"precision": 1.0, "recall": 0.5, "f1-score": 0.667, "support": 2},
            "accuracy": 0.5,
            "macro avg": {"precision": 0.5, "recall": 0.25, "f1-score": 0.333, "support": 2},
        }
        text = format_classification_report(report)
        assert text.splitlines()[1].startswith("en")
        assert "macro avg" in text
        assert "accuracy" not in text
