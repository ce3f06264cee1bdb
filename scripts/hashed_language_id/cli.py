"""Train a hashed n-gram language identifier and export its weights."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, Optional, Sequence

from .config import TrainingConfig
from .data import CorpusFormatError, discover_language_codes, load_csv_examples, load_language_names
from .evaluation import evaluate_report
from .export import ArtifactWriteError, export_model
from .model import Model
from .reporting import plot_training_history, print_language_distribution, print_results
from .trainer import Trainer

LOGGER = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--data",
        type=Path,
        default=Path("dataset/sentences.csv"),
        help="CSV corpus with id, lan_code and sentence columns.",
    )
    parser.add_argument(
        "--language-names",
        type=Path,
        default=None,
        help="Optional JSON mapping from language code to display name.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("weights_balanced.h"),
        help="Artifact path; the suffix selects the format (.h/.hpp or .json).",
    )
    parser.add_argument("--learning-rate", type=float, default=0.01, help="SGD step size (default: 0.01).")
    parser.add_argument("--epochs", type=int, default=200, help="Maximum number of epochs (default: 200).")
    parser.add_argument(
        "--regularization",
        type=float,
        default=0.001,
        help="L2 penalty applied to the weights of touched buckets (default: 0.001).",
    )
    parser.add_argument(
        "--dimension",
        type=int,
        default=4096,
        help="Number of hash buckets (default: 4096).",
    )
    parser.add_argument(
        "--train-test-split",
        type=float,
        default=0.8,
        help="Fraction of the balanced data used for training (default: 0.8).",
    )
    parser.add_argument("--batch-size", type=int, default=64, help="Mini-batch size (default: 64).")
    parser.add_argument(
        "--early-stopping-patience",
        type=int,
        default=20,
        help="Epochs without loss improvement before stopping (default: 20).",
    )
    parser.add_argument(
        "--samples-per-language",
        type=int,
        default=1000,
        help="Examples per language after balancing (default: 1000).",
    )
    parser.add_argument(
        "--eval-interval",
        type=int,
        default=10,
        help="Evaluate on the held-out split every N epochs (default: 10).",
    )
    parser.add_argument(
        "--random-seed",
        type=int,
        default=None,
        help="Seed for balancing, shuffling and initialisation (default: unseeded).",
    )
    parser.add_argument(
        "--report-json",
        type=Path,
        default=None,
        help="Optional path to save the held-out evaluation report as JSON.",
    )
    parser.add_argument(
        "--reports-dir",
        type=Path,
        default=None,
        help="Optional directory for confusion matrix and training curve plots.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def config_from_args(args: argparse.Namespace) -> TrainingConfig:
    return TrainingConfig(
        learning_rate=args.learning_rate,
        epochs=args.epochs,
        regularization=args.regularization,
        dimension=args.dimension,
        train_test_split=args.train_test_split,
        batch_size=args.batch_size,
        early_stopping_patience=args.early_stopping_patience,
        samples_per_language=args.samples_per_language,
        eval_interval=args.eval_interval,
        seed=args.random_seed,
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )
    config = config_from_args(args)
    try:
        config.validate()
    except ValueError as exc:
        raise SystemExit(f"Invalid training configuration: {exc}") from exc

    language_names: Dict[str, str] = {}
    try:
        if args.language_names:
            language_names = load_language_names(args.language_names)
        examples = load_csv_examples(args.data)
    except (OSError, CorpusFormatError) as exc:
        raise SystemExit(f"Failed to load training data: {exc}") from exc
    if not examples:
        raise SystemExit(f"No training examples found in {args.data}")

    language_codes = discover_language_codes(examples)
    LOGGER.info("Found %d unique languages", len(language_codes))
    print_language_distribution(examples, language_names)

    model = Model.initialize(language_codes, config.dimension, config.make_numpy_rng())
    trainer = Trainer(model, config, language_names=language_names)
    LOGGER.info("Starting egalitarian training")
    history = trainer.train(examples)

    result = evaluate_report(model, trainer.test_data)
    print_results(result, model.language_codes, args.reports_dir)
    if args.reports_dir:
        curve_path = plot_training_history(history, args.reports_dir)
        LOGGER.info("Saved training curves to %s", curve_path)

    if args.report_json:
        LOGGER.info("Writing report to %s", args.report_json)
        report = {
            "config": config.to_dict(),
            "epochs_completed": history.epochs_completed,
            "stopped_early": history.stopped_early,
            "best_loss": history.best_loss,
            "losses": history.losses,
            "accuracies": history.accuracies,
            "name": result.name,
            "metrics": result.metrics,
            "misclassifications": result.misclassifications,
        }
        try:
            args.report_json.parent.mkdir(parents=True, exist_ok=True)
            args.report_json.write_text(json.dumps(report, indent=2, ensure_ascii=False), encoding="utf8")
        except OSError as exc:
            raise SystemExit(f"Failed to write report: {exc}") from exc

    try:
        export_model(model, args.output, language_names, config.samples_per_language)
    except (ArtifactWriteError, ValueError) as exc:
        raise SystemExit(f"Failed to export weights: {exc}") from exc
    LOGGER.info("Egalitarian training completed successfully")


if __name__ == "__main__":
    main()
