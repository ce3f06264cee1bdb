"""Reporting helpers for corpus statistics, evaluation and training curves."""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path
from typing import Dict, Optional, Sequence

import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.colors import to_rgba
from pretty_confusion_matrix import pp_matrix

from .data import TrainingExample, display_name
from .evaluation import EvaluationResult
from .metrics import format_classification_report
from .trainer import TrainingHistory

LOGGER = logging.getLogger(__name__)

TOP_LANGUAGES = 20


def _slug(title: str) -> str:
    slug = "".join(ch.lower() if ch.isalnum() else "_" for ch in title).strip("_")
    return slug or "model"


def print_language_distribution(
    examples: Sequence[TrainingExample],
    language_names: Optional[Dict[str, str]] = None,
    top: int = TOP_LANGUAGES,
) -> None:
    language_names = language_names or {}
    counts = Counter(example.language_code for example in examples)
    print("\nOriginal language distribution in dataset:")
    ranked = counts.most_common()
    for code, count in ranked[:top]:
        print(f"  {code}: {display_name(code, language_names)} ({count} examples)")
    if len(ranked) > top:
        print(f"  ... and {len(ranked) - top} more languages")


def render_pretty_confusion_matrix(
    confusion: Sequence[Sequence[int]],
    labels: Sequence[str],
    title: str,
    reports_dir: Path,
) -> Path:
    """Render and save a prettified confusion matrix heatmap."""

    reports_dir.mkdir(parents=True, exist_ok=True)
    output_path = reports_dir / f"confusion_matrix_{_slug(title)}.png"

    df_cm = pd.DataFrame(confusion, index=labels, columns=labels)
    plt.figure(figsize=(8, 6))
    pp_matrix(df_cm, cmap="PuRd", figsize=(8, 6), fz=7)
    ax = plt.gca()
    white = to_rgba("white")
    for text in ax.texts:
        if to_rgba(text.get_color()) == white:
            text.set_color("black")
    plt.title(f"Confusion matrix: {title}")
    plt.tight_layout()
    plt.savefig(output_path, dpi=200)
    plt.close("all")
    return output_path


def plot_training_history(history: TrainingHistory, reports_dir: Path, title: str = "training") -> Path:
    """Save epoch loss, best loss and held-out accuracy curves as a PNG."""

    reports_dir.mkdir(parents=True, exist_ok=True)
    output_path = reports_dir / f"history_{_slug(title)}.png"
    epochs = range(1, history.epochs_completed + 1)

    fig, (loss_ax, acc_ax) = plt.subplots(1, 2, figsize=(11, 4))
    loss_ax.plot(epochs, history.losses, label="epoch loss")
    loss_ax.plot(epochs, history.best_losses, linestyle="--", label="best loss")
    loss_ax.set_xlabel("epoch")
    loss_ax.set_ylabel("cross-entropy")
    loss_ax.legend()
    if history.accuracies:
        eval_epochs, accuracies = zip(*history.accuracies)
        acc_ax.plot(eval_epochs, accuracies, marker="o")
    acc_ax.set_xlabel("epoch")
    acc_ax.set_ylabel("held-out accuracy")
    acc_ax.set_ylim(0.0, 1.0)
    fig.tight_layout()
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    return output_path


def print_results(
    result: EvaluationResult,
    labels: Sequence[str],
    reports_dir: Optional[Path] = None,
) -> None:
    accuracy = result.metrics.get("accuracy", 0.0)
    print("\n" + "=" * 80)
    print(f"Results for {result.name}")
    print("=" * 80)
    print(f"Accuracy: {accuracy:.4f} ({result.scored} scored, {result.skipped} skipped)")
    report = result.metrics.get("classification_report")
    if isinstance(report, dict) and report:
        print("\nClassification report:")
        print(format_classification_report(report))
    confusion = result.metrics.get("confusion_matrix")
    if isinstance(confusion, list) and confusion:
        print("\nConfusion matrix (rows = gold, columns = predicted):")
        header = "{:<12}".format(" ") + " ".join(f"{label:<10}" for label in labels)
        print(header)
        for label, row in zip(labels, confusion):
            values = " ".join(f"{value:<10}" for value in row)
            print(f"{label:<12}{values}")
        if reports_dir is not None:
            pretty_path = render_pretty_confusion_matrix(confusion, labels, result.name, reports_dir)
            print(f"Saved prettified confusion matrix to {pretty_path}")
    if result.misclassifications:
        print("\nRepresentative misclassifications:")
        for gold_label in labels:
            examples = result.misclassifications.get(gold_label)
            if not examples:
                continue
            print(f"- Gold label {gold_label}:")
            for predicted_label, snippet in examples:
                print(f"    predicted {predicted_label:<10} :: {snippet}")
