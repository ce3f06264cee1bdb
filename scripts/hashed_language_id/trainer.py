"""Mini-batch SGD training loop with early stopping."""

from __future__ import annotations

import logging
import math
import random
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .balancing import create_balanced_dataset
from .config import TrainingConfig
from .data import TrainingExample
from .evaluation import evaluate
from .features import FeatureVector
from .model import Model, softmax, sparse_arrays

LOGGER = logging.getLogger(__name__)

LOSS_EPSILON = 1e-10


def format_duration(seconds: float) -> str:
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if hours > 0:
        return f"{hours}h {minutes:02d}m {secs:02d}s"
    if minutes > 0:
        return f"{minutes}m {secs:02d}s"
    return f"{secs}s"


def sgd_update(
    model: Model,
    features: FeatureVector,
    target: int,
    learning_rate: float,
    regularization: float,
) -> float:
    """Apply one cross-entropy SGD step for a single example and return its loss.

    The L2 penalty only decays the rows of the buckets present in
    ``features``; untouched weights are left as they are. Intercepts are not
    regularised.
    """

    buckets, values = sparse_arrays(features)
    model.check_buckets(buckets)
    rows = model.weights[buckets].astype(np.float64)
    scores = model.intercepts + values @ rows
    probabilities = softmax(scores)
    loss = -math.log(max(float(probabilities[target]), LOSS_EPSILON))

    delta = probabilities.copy()
    delta[target] -= 1.0
    gradient = np.outer(values, delta)
    with np.errstate(over="ignore", invalid="ignore"):
        updated_rows = (rows - learning_rate * (gradient + regularization * rows)).astype(model.weights.dtype)
        updated_intercepts = (model.intercepts - learning_rate * delta).astype(model.intercepts.dtype)
    if not (np.all(np.isfinite(updated_rows)) and np.all(np.isfinite(updated_intercepts))):
        raise FloatingPointError("Non-finite parameter update; lower the learning rate")

    model.weights[buckets] = updated_rows
    model.intercepts[:] = updated_intercepts
    return loss


@dataclass
class TrainingHistory:
    """Per-epoch bookkeeping of a training run."""

    losses: List[float] = field(default_factory=list)
    best_losses: List[float] = field(default_factory=list)
    accuracies: List[Tuple[int, float]] = field(default_factory=list)
    stopped_early: bool = False
    elapsed_seconds: float = 0.0
    train_size: int = 0
    test_size: int = 0

    @property
    def epochs_completed(self) -> int:
        return len(self.losses)

    @property
    def best_loss(self) -> float:
        return self.best_losses[-1] if self.best_losses else math.inf


class Trainer:
    """Trains a :class:`Model` in place.

    All randomness (balancing, splitting and per-epoch shuffles) is drawn
    from ``rng``; pass a seeded ``random.Random`` for reproducible runs.
    Examples are applied one after the other, so the result depends on the
    order of examples inside each batch.
    """

    def __init__(
        self,
        model: Model,
        config: TrainingConfig,
        rng: Optional[random.Random] = None,
        language_names: Optional[Dict[str, str]] = None,
    ) -> None:
        config.validate()
        if config.dimension != model.dimension:
            raise ValueError(
                f"Config dimension {config.dimension} does not match model dimension {model.dimension}"
            )
        self.model = model
        self.config = config
        self.rng = rng if rng is not None else config.make_rng()
        self.language_names = language_names or {}
        self.test_data: List[TrainingExample] = []
        self._feature_cache: Dict[str, FeatureVector] = {}

    def features_for(self, text: str) -> FeatureVector:
        # Balanced pools repeat sentences every epoch; extraction is pure, so cache it.
        features = self._feature_cache.get(text)
        if features is None:
            features = self.model.extract_features(text)
            self._feature_cache[text] = features
        return features

    def train_step(self, batch: Sequence[TrainingExample]) -> float:
        """Update the model on ``batch`` and return the mean loss.

        Examples with an unknown language code or no features are skipped and
        do not count towards the mean. Returns 0.0 if nothing was processed.
        """

        total_loss = 0.0
        processed = 0
        for example in batch:
            target = self.model.class_index(example.language_code)
            if target is None:
                LOGGER.debug("Skipping example %d with unknown language %s", example.id, example.language_code)
                continue
            features = self.features_for(example.text)
            if not features:
                continue
            total_loss += sgd_update(
                self.model,
                features,
                target,
                self.config.learning_rate,
                self.config.regularization,
            )
            processed += 1
        return total_loss / processed if processed else 0.0

    def split(self, examples: Sequence[TrainingExample]) -> Tuple[List[TrainingExample], List[TrainingExample]]:
        shuffled = list(examples)
        self.rng.shuffle(shuffled)
        split_idx = int(len(shuffled) * self.config.train_test_split)
        return shuffled[:split_idx], shuffled[split_idx:]

    def train(self, training_data: Sequence[TrainingExample]) -> TrainingHistory:
        """Balance, split and run the epoch loop until done or stopped early."""

        config = self.config
        balanced = create_balanced_dataset(
            training_data,
            config.samples_per_language,
            self.rng,
            language_codes=self.model.language_codes,
            language_names=self.language_names,
        )
        train_data, self.test_data = self.split(balanced)
        LOGGER.info("Training on %d examples, testing on %d examples", len(train_data), len(self.test_data))

        history = TrainingHistory(train_size=len(train_data), test_size=len(self.test_data))
        best_loss = math.inf
        patience_counter = 0
        start_time = time.perf_counter()

        for epoch in range(config.epochs):
            epoch_data = list(train_data)
            self.rng.shuffle(epoch_data)

            batch_losses = [
                self.train_step(epoch_data[start : start + config.batch_size])
                for start in range(0, len(epoch_data), config.batch_size)
            ]
            avg_loss = sum(batch_losses) / len(batch_losses) if batch_losses else 0.0
            if not math.isfinite(avg_loss):
                raise FloatingPointError(f"Epoch {epoch + 1} produced a non-finite loss: {avg_loss}")
            history.losses.append(avg_loss)

            elapsed = time.perf_counter() - start_time
            remaining_epochs = config.epochs - (epoch + 1)
            eta = elapsed / (epoch + 1) * remaining_epochs

            if epoch % config.eval_interval == 0 or epoch == config.epochs - 1:
                accuracy = evaluate(self.model, self.test_data)
                history.accuracies.append((epoch + 1, accuracy))
                LOGGER.info(
                    "Epoch %d: Avg Loss = %.4f, Test Accuracy = %.2f%% | ETA: %s",
                    epoch + 1,
                    avg_loss,
                    accuracy * 100.0,
                    format_duration(eta),
                )
            else:
                LOGGER.info("Epoch %d: Avg Loss = %.4f | ETA: %s", epoch + 1, avg_loss, format_duration(eta))

            if avg_loss < best_loss:
                best_loss = avg_loss
                patience_counter = 0
            else:
                patience_counter += 1
            history.best_losses.append(best_loss)
            if patience_counter and patience_counter >= config.early_stopping_patience:
                LOGGER.info("Early stopping at epoch %d", epoch + 1)
                history.stopped_early = True
                break

        history.elapsed_seconds = time.perf_counter() - start_time
        LOGGER.info("Training completed in %s", format_duration(history.elapsed_seconds))
        return history
