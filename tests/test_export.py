"""Artifact writers and the JSON reader."""

import json

import numpy as np
import pytest

from hashed_language_id import (
    ArtifactWriteError,
    CorpusFormatError,
    Model,
    export_cpp_header,
    export_json,
    export_model,
    load_model_json,
)
from hashed_language_id.export import lang_code_to_cpp_enum
from hashed_language_id.features import SEED


@pytest.fixture
def tiny_model():
    weights = np.arange(6, dtype=np.float32).reshape(3, 2) / 10
    return Model(["eng", "fra"], 3, weights, np.array([0.5, -0.25], dtype=np.float32))


class TestJson:
    def test_contents(self, tmp_path, tiny_model):
        path = export_json(tiny_model, tmp_path / "model.json", {"eng": "English"}, samples_per_language=5)
        data = json.loads(path.read_text(encoding="utf8"))
        assert data["language_codes"] == ["eng", "fra"]
        assert data["language_names"] == {"eng": "English", "fra": "fra"}
        assert data["dimension"] == 3
        assert data["hashing"]["seed"] == SEED
        assert data["weights"] == pytest.approx([0.0, 0.1, 0.2, 0.3, 0.4, 0.5])
        assert data["intercepts"] == pytest.approx([0.5, -0.25])
        assert data["samples_per_language"] == 5
        assert "dimension" not in data["hashing"]

    def test_reload(self, tmp_path, tiny_model):
        path = export_json(tiny_model, tmp_path / "nested" / "model.json")
        loaded = load_model_json(path)
        assert loaded.language_codes == tiny_model.language_codes
        assert np.array_equal(loaded.weights, tiny_model.weights)
        assert np.array_equal(loaded.intercepts, tiny_model.intercepts)

    def test_reload_rejects_foreign_seed(self, tmp_path, tiny_model):
        path = export_json(tiny_model, tmp_path / "model.json")
        data = json.loads(path.read_text(encoding="utf8"))
        data["hashing"]["seed"] = 1
        path.write_text(json.dumps(data), encoding="utf8")
        with pytest.raises(CorpusFormatError):
            load_model_json(path)

    def test_reload_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_model_json(tmp_path / "missing.json")


class TestCppHeader:
    def test_layout(self, tmp_path, tiny_model):
        path = export_cpp_header(tiny_model, tmp_path / "weights.h", {"fra": "French"}, samples_per_language=7)
        text = path.read_text(encoding="utf8")
        assert "#pragma once" in text
        assert "    Fra,  // French" in text
        assert '        case Lang::Eng: return "eng";' in text
        assert "const std::array<Lang, 2> LANGUAGES = {" in text
        assert "const std::array<float, 6> WEIGHTS = {" in text
        assert "    0.000000f, 0.100000f, 0.200000f, 0.300000f, 0.400000f, 0.500000f" in text
        assert "const float INTERCEPTS[2] = {" in text
        assert "    0.500000f, -0.250000f" in text
        assert "7 samples per language" in text

    def test_eight_values_per_line(self, tmp_path):
        model = Model(["a", "b"], 10, np.zeros(20), np.zeros(2))
        text = export_cpp_header(model, tmp_path / "weights.h").read_text(encoding="utf8")
        block = text.split("WEIGHTS = {\n")[1].split("};")[0].splitlines()
        assert [line.count("f") for line in block] == [8, 8, 4]
        assert block[0].endswith(",")
        assert not block[-1].endswith(",")

    @pytest.mark.parametrize("code, expected", [("eng", "Eng"), ("zh-Hant", "Zh_Hant"), ("3xx", "_3xx")])
    def test_enum_names(self, code, expected):
        assert lang_code_to_cpp_enum(code) == expected

    def test_colliding_enum_names_are_rejected(self, tmp_path):
        model = Model(["zh-cn", "zh_cn"], 2, np.zeros(4), np.zeros(2))
        with pytest.raises(ValueError, match="zh-cn"):
            export_cpp_header(model, tmp_path / "weights.h")
        assert not (tmp_path / "weights.h").exists()


class TestExportModel:
    def test_dispatch_by_suffix(self, tmp_path, tiny_model):
        assert export_model(tiny_model, tmp_path / "w.hpp").read_text(encoding="utf8").startswith("//")
        assert json.loads(export_model(tiny_model, tmp_path / "w.json").read_text(encoding="utf8"))

    def test_unknown_suffix(self, tmp_path, tiny_model):
        with pytest.raises(ValueError):
            export_model(tiny_model, tmp_path / "w.bin")

    def test_write_failure(self, tmp_path, tiny_model):
        blocker = tmp_path / "file.txt"
        blocker.write_text("not a directory", encoding="utf8")
        with pytest.raises(ArtifactWriteError):
            export_model(tiny_model, blocker / "w.json")
