"""Per-language resampling."""

import random
from collections import Counter

import pytest

from hashed_language_id import TrainingExample, create_balanced_dataset, resample_language


def make_examples(code, count, start=0):
    return [TrainingExample(id=start + i, language_code=code, text=f"{code} sentence {i}") for i in range(count)]


class TestBalancedDataset:
    def test_upsample_and_downsample(self, rng):
        en = make_examples("en", 2)
        fr = make_examples("fr", 10, start=100)
        balanced = create_balanced_dataset(en + fr, 5, rng)

        counts = Counter(example.language_code for example in balanced)
        assert counts == {"en": 5, "fr": 5}

        en_rows = [example for example in balanced if example.language_code == "en"]
        assert set(en_rows) == set(en)

        fr_rows = [example for example in balanced if example.language_code == "fr"]
        assert len(set(fr_rows)) == 5
        assert set(fr_rows) <= set(fr)

    def test_every_present_code_gets_target(self, rng):
        examples = make_examples("de", 7) + make_examples("sv", 1) + make_examples("lv", 30)
        balanced = create_balanced_dataset(examples, 12, rng)
        assert len(balanced) == 12 * 3
        assert set(Counter(e.language_code for e in balanced).values()) == {12}

    def test_missing_codes_are_skipped(self, rng):
        examples = make_examples("en", 4)
        balanced = create_balanced_dataset(examples, 3, rng, language_codes=["en", "fr"])
        assert len(balanced) == 3
        assert {e.language_code for e in balanced} == {"en"}

    def test_codes_outside_model_are_dropped(self, rng):
        examples = make_examples("en", 4) + make_examples("xx", 4)
        balanced = create_balanced_dataset(examples, 2, rng, language_codes=["en"])
        assert {e.language_code for e in balanced} == {"en"}

    def test_seeded_rng_is_reproducible(self):
        examples = make_examples("en", 3) + make_examples("fr", 9)
        first = create_balanced_dataset(examples, 6, random.Random(5))
        second = create_balanced_dataset(examples, 6, random.Random(5))
        assert first == second

    def test_empty_input(self, rng):
        assert create_balanced_dataset([], 10, rng) == []


class TestResampleLanguage:
    def test_upsample_keeps_all_originals(self, rng):
        source = make_examples("en", 3)
        resampled = resample_language(source, 8, rng)
        assert len(resampled) == 8
        assert resampled[:3] == source
        assert set(resampled) == set(source)

    def test_exact_size_is_permutation(self, rng):
        source = make_examples("en", 6)
        resampled = resample_language(source, 6, rng)
        assert sorted(resampled, key=lambda e: e.id) == source

    def test_refuses_empty_class(self, rng):
        with pytest.raises(ValueError):
            resample_language([], 4, rng)
