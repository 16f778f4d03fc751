"""
Tests for the learning configuration.
"""
import json
import os
import tempfile

import pytest

from relearn.config import (
    DEFAULT_LEARNING_CONFIG,
    LearningConfig,
    LearningPresets,
)


class TestLearningConfig:
    """Test LearningConfig dataclass."""

    def test_default_values(self):
        """Defaults match the classic alpha = gamma = 0.9 setup."""
        config = LearningConfig()
        assert config.algorithm == "q_learning"
        assert config.alpha == 0.9
        assert config.gamma == 0.9
        assert config.passes == 10
        assert config.episodes == 100
        assert config.prng_seed is None
        assert DEFAULT_LEARNING_CONFIG == config

    @pytest.mark.parametrize("kwargs", [
        {"algorithm": "sarsa"},
        {"alpha": 0.0},
        {"alpha": -0.5},
        {"alpha": 1.01},
        {"gamma": -0.01},
        {"gamma": 1.5},
        {"passes": 0},
        {"episodes": 0},
    ])
    def test_invalid_values_rejected(self, kwargs):
        """Invalid parameters raise ValueError."""
        with pytest.raises(ValueError):
            LearningConfig(**kwargs)

    def test_to_dict_roundtrip(self):
        """Should serialize and deserialize correctly."""
        original = LearningConfig(algorithm="q_probabilistic", gamma=0.5, prng_seed=7)
        restored = LearningConfig.from_dict(original.to_dict())
        assert restored == original

    def test_from_dict_ignores_unknown_keys(self):
        """Unknown keys are dropped."""
        config = LearningConfig.from_dict({"alpha": 0.3, "epsilon": 0.1})
        assert config.alpha == 0.3

    def test_save_and_load_json(self):
        """Should persist to a JSON file."""
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "sub", "learning.json")
            LearningConfig(alpha=0.4, passes=3).save(path)

            loaded = LearningConfig.load(path)
            assert loaded is not None
            assert loaded.alpha == 0.4
            assert loaded.passes == 3

    def test_load_yaml(self):
        """YAML files are supported."""
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "learning.yaml")
            with open(path, "w") as f:
                f.write("algorithm: q_probabilistic\ngamma: 0.8\nprng_seed: 3\n")

            loaded = LearningConfig.load(path)
            assert loaded.algorithm == "q_probabilistic"
            assert loaded.gamma == 0.8
            assert loaded.prng_seed == 3

    def test_load_missing_file_returns_none(self):
        """Missing files yield None."""
        assert LearningConfig.load("/nonexistent/learning.json") is None

    def test_load_corrupted_file_returns_none(self):
        """Corrupted files yield None."""
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "bad.json")
            with open(path, "w") as f:
                f.write("{ invalid json garbage }")
            assert LearningConfig.load(path) is None

    def test_load_invalid_values_returns_none(self):
        """Files with out of range values yield None."""
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "bad.json")
            with open(path, "w") as f:
                json.dump({"alpha": 3.0}, f)
            assert LearningConfig.load(path) is None

    def test_load_non_mapping_returns_none(self):
        """A YAML list is not a config."""
        with tempfile.TemporaryDirectory() as d:
            path = os.path.join(d, "list.yml")
            with open(path, "w") as f:
                f.write("- 1\n- 2\n")
            assert LearningConfig.load(path) is None


class TestLearningPresets:
    """Test the presets."""

    def test_presets_are_valid(self):
        """Every preset builds a valid config."""
        assert LearningPresets.default() == LearningConfig()
        assert LearningPresets.fast().alpha == 1.0
        assert LearningPresets.probabilistic().algorithm == "q_probabilistic"

    def test_deterministic_test_seed(self):
        """The test preset is seeded."""
        assert LearningPresets.deterministic_test(seed=5).prng_seed == 5
