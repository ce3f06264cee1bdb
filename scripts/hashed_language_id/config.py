"""Training hyper-parameters."""

from __future__ import annotations

import random
from dataclasses import asdict, dataclass
from typing import Dict, Optional

import numpy as np


@dataclass
class TrainingConfig:
    """Hyper-parameters for one training run.

    ``seed`` makes balancing, splitting, shuffling and parameter
    initialisation reproducible; leave it as ``None`` for fresh randomness on
    every run.
    """

    learning_rate: float = 0.01
    epochs: int = 100
    regularization: float = 0.001
    dimension: int = 4096
    train_test_split: float = 0.8
    batch_size: int = 32
    early_stopping_patience: int = 10
    samples_per_language: int = 1000
    eval_interval: int = 10
    seed: Optional[int] = None

    def validate(self) -> None:
        for name in ("epochs", "dimension", "batch_size", "samples_per_language", "eval_interval"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        if not 0.0 < self.train_test_split <= 1.0:
            raise ValueError(f"train_test_split must be in (0, 1], got {self.train_test_split}")
        for name in ("learning_rate", "regularization", "early_stopping_patience"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative, got {getattr(self, name)}")

    def make_rng(self) -> random.Random:
        return random.Random(self.seed)

    def make_numpy_rng(self) -> np.random.Generator:
        return np.random.default_rng(self.seed)

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)
