"""Metrics and error analysis helpers for held-out evaluation."""

from __future__ import annotations

import textwrap
from collections import defaultdict
from typing import Dict, List, Sequence, Tuple

from sklearn.metrics import accuracy_score, classification_report, confusion_matrix


def collect_misclassifications(
    texts: Sequence[str],
    gold: Sequence[str],
    predicted: Sequence[str],
    max_per_label: int = 2,
) -> Dict[str, List[Tuple[str, str]]]:
    """Return representative misclassifications grouped by gold label."""

    collected: Dict[str, List[Tuple[str, str]]] = defaultdict(list)
    for text, gold_label, pred_label in zip(texts, gold, predicted):
        if gold_label == pred_label:
            continue
        if len(collected[gold_label]) >= max_per_label:
            continue
        snippet = textwrap.shorten(text, width=180, placeholder="…")
        collected[gold_label].append((pred_label, snippet))
    return dict(collected)


def summarise_metrics(
    gold: Sequence[str],
    predicted: Sequence[str],
    labels: Sequence[str],
) -> Dict[str, object]:
    if not gold:
        return {"accuracy": 0.0, "classification_report": {}, "confusion_matrix": []}
    report = classification_report(gold, predicted, labels=labels, zero_division=0, output_dict=True)
    accuracy = accuracy_score(gold, predicted)
    conf_mat = confusion_matrix(gold, predicted, labels=labels)
    return {"accuracy": float(accuracy), "classification_report": report, "confusion_matrix": conf_mat.tolist()}


def format_classification_report(report: Dict[str, Dict[str, float]]) -> str:
    lines = ["label           precision  recall  f1-score  support"]
    for label, metrics in report.items():
        if label in {"accuracy", "macro avg", "weighted avg", "micro avg"}:
            continue
        lines.append(_format_row(label, metrics))
    for summary in ("macro avg", "weighted avg"):
        metrics = report.get(summary)
        if metrics:
            lines.append(_format_row(summary, metrics))
    return "\n".join(lines)


def _format_row(label: str, metrics: Dict[str, float]) -> str:
    precision = metrics.get("precision", 0.0)
    recall = metrics.get("recall", 0.0)
    f1 = metrics.get("f1-score", 0.0)
    support = int(metrics.get("support", 0))
    return f"{label:<15} {precision:>9.3f} {recall:>7.3f} {f1:>8.3f} {support:>8}"
