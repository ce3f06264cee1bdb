import random

import numpy as np
import pytest

from hashed_language_id import Model, TrainingConfig, TrainingExample

EN_SENTENCE = "the dog and the cat walk to the park"
FR_SENTENCE = "le chien et le chat vont dans le parc"


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def two_language_model():
    return Model.initialize(["en", "fr"], 4096, np.random.default_rng(7))


@pytest.fixture
def separable_corpus():
    """50 identical sentences per language, ids interleaved."""
    examples = []
    for i in range(50):
        examples.append(TrainingExample(id=2 * i, language_code="en", text=EN_SENTENCE))
        examples.append(TrainingExample(id=2 * i + 1, language_code="fr", text=FR_SENTENCE))
    return examples


@pytest.fixture
def small_config():
    return TrainingConfig(
        epochs=5,
        samples_per_language=20,
        batch_size=8,
        train_test_split=0.75,
        seed=42,
    )


@pytest.fixture
def corpus_csv(tmp_path):
    path = tmp_path / "sentences.csv"
    rows = ["id,lan_code,sentence"]
    sentences = {
        "eng": ["the weather is nice today", "where is the train station", "i like green tea"],
        "fra": ["le temps est beau aujourd'hui", "où est la gare", "j'aime le thé vert"],
        "jpn": ["今日はいい天気です", "駅はどこですか"],
    }
    idx = 1
    for code, texts in sentences.items():
        for text in texts:
            rows.append(f'{idx},{code},"{text}"')
            idx += 1
    path.write_text("\n".join(rows) + "\n", encoding="utf8")
    return path
