"""Linear softmax classifier over hashed feature buckets."""

from __future__ import annotations

from typing import List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .features import FeatureVector, extract_features

INIT_SCALE = 0.01


def softmax(scores: np.ndarray) -> np.ndarray:
    """Numerically stable softmax; degenerate inputs give a uniform distribution."""

    scores = np.asarray(scores, dtype=np.float64)
    exp_scores = np.exp(scores - np.max(scores))
    total = exp_scores.sum()
    if not total > 0.0:
        return np.full(scores.shape, 1.0 / scores.size)
    return exp_scores / total


def sparse_arrays(features: Mapping[int, float]) -> Tuple[np.ndarray, np.ndarray]:
    buckets = np.fromiter(features.keys(), dtype=np.int64, count=len(features))
    values = np.fromiter(features.values(), dtype=np.float64, count=len(features))
    return buckets, values


class Model:
    """Weight matrix of shape ``(dimension, num_classes)`` plus intercepts.

    Row ``b`` holds the per-class weights of bucket ``b``, so flattening the
    matrix yields the bucket-major layout expected by the inference runtime.
    The position of a code in ``language_codes`` is the class index used for
    training, evaluation and export.
    """

    def __init__(
        self,
        language_codes: Sequence[str],
        dimension: int,
        weights: np.ndarray,
        intercepts: np.ndarray,
    ) -> None:
        codes = list(language_codes)
        if not codes:
            raise ValueError("A model needs at least one language code")
        if codes != sorted(set(codes)):
            raise ValueError("language_codes must be sorted and free of duplicates")
        weights = np.asarray(weights, dtype=np.float32)
        intercepts = np.asarray(intercepts, dtype=np.float32)
        if weights.size != dimension * len(codes):
            raise ValueError(
                f"Expected {dimension * len(codes)} weights, got {weights.size}"
            )
        if intercepts.shape != (len(codes),):
            raise ValueError(f"Expected {len(codes)} intercepts, got {intercepts.size}")

        self.language_codes: List[str] = codes
        self.dimension = dimension
        self.weights = weights.reshape(dimension, len(codes))
        self.intercepts = intercepts
        self._index = {code: idx for idx, code in enumerate(codes)}

    @classmethod
    def initialize(
        cls,
        language_codes: Sequence[str],
        dimension: int,
        rng: Optional[np.random.Generator] = None,
    ) -> "Model":
        """Create a model with small uniform weights in ``[-0.005, 0.005)``."""

        rng = rng if rng is not None else np.random.default_rng()
        num_classes = len(language_codes)
        weights = (rng.random((dimension, num_classes)) - 0.5) * INIT_SCALE
        intercepts = (rng.random(num_classes) - 0.5) * INIT_SCALE
        return cls(language_codes, dimension, weights, intercepts)

    @property
    def num_classes(self) -> int:
        return len(self.language_codes)

    def class_index(self, code: str) -> Optional[int]:
        return self._index.get(code)

    def extract_features(self, text: str) -> FeatureVector:
        return extract_features(text, self.dimension)

    def predict(self, features: Mapping[int, float]) -> np.ndarray:
        """Return the raw per-class scores for a feature vector."""

        scores = self.intercepts.astype(np.float64)
        if not features:
            return scores
        buckets, values = sparse_arrays(features)
        self.check_buckets(buckets)
        return scores + values @ self.weights[buckets]

    def predict_proba(self, features: Mapping[int, float]) -> np.ndarray:
        return softmax(self.predict(features))

    def predict_language(self, text: str) -> Optional[str]:
        features = self.extract_features(text)
        if not features:
            return None
        return self.language_codes[int(np.argmax(self.predict(features)))]

    def check_buckets(self, buckets: np.ndarray) -> None:
        if buckets.size and (buckets.min() < 0 or buckets.max() >= self.dimension):
            raise IndexError(
                f"Feature bucket out of range for dimension {self.dimension}: "
                f"[{buckets.min()}, {buckets.max()}]"
            )

    def flat_weights(self) -> np.ndarray:
        """Weights flattened bucket-major, ``weights[bucket * num_classes + class]``."""

        return self.weights.reshape(-1)
