"""
Learner configuration.

Holds the learning parameters used by drivers to build a learner and
run training passes. Configurations can be created in code, taken from
a preset, or loaded from JSON/YAML files.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

ALGORITHMS = ("q_learning", "q_probabilistic")


@dataclass
class LearningConfig:
    """
    Configuration for a learner and its training loop.

    Attributes:
        algorithm: "q_learning" (deterministic) or "q_probabilistic"
        alpha: Learning rate in (0, 1], ignored by "q_probabilistic"
        gamma: Discount rate in [0, 1]
        passes: Learning passes over the collected episodes
        episodes: Maximum exploration episodes collected by a driver
        prng_seed: Seed for exploration (None = random)
    """
    algorithm: str = "q_learning"
    alpha: float = 0.9
    gamma: float = 0.9
    passes: int = 10
    episodes: int = 100
    prng_seed: Optional[int] = None

    def __post_init__(self):
        """Reject invalid parameters."""
        if self.algorithm not in ALGORITHMS:
            raise ValueError(
                f"unknown algorithm {self.algorithm!r}, expected one of {ALGORITHMS}"
            )
        if not 0.0 < self.alpha <= 1.0:
            raise ValueError(f"alpha must be in (0, 1], got {self.alpha}")
        if not 0.0 <= self.gamma <= 1.0:
            raise ValueError(f"gamma must be in [0, 1], got {self.gamma}")
        if self.passes < 1:
            raise ValueError(f"passes must be >= 1, got {self.passes}")
        if self.episodes < 1:
            raise ValueError(f"episodes must be >= 1, got {self.episodes}")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LearningConfig":
        """Deserialize from dictionary, ignoring unknown keys."""
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

    def save(self, path: str) -> None:
        """Save config to a JSON file."""
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str) -> Optional["LearningConfig"]:
        """
        Load config from a JSON or YAML file.

        Returns:
            The config, or None if the file is missing or invalid
        """
        if not os.path.exists(path):
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()

            if path.endswith((".yaml", ".yml")):
                data = yaml.safe_load(content)
            else:
                data = json.loads(content)

            if not isinstance(data, dict):
                logger.warning(f"Config file {path} does not contain a mapping")
                return None

            return cls.from_dict(data)

        except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            return None


DEFAULT_LEARNING_CONFIG = LearningConfig()


class LearningPresets:
    """Ready-made configurations."""

    @staticmethod
    def default() -> LearningConfig:
        """Deterministic Q-learning, alpha = gamma = 0.9, ten passes."""
        return LearningConfig()

    @staticmethod
    def fast() -> LearningConfig:
        """Full step size and more passes, for small deterministic worlds."""
        return LearningConfig(alpha=1.0, gamma=0.9, passes=50)

    @staticmethod
    def probabilistic() -> LearningConfig:
        """Frequency weighted learning for non-deterministic environments."""
        return LearningConfig(algorithm="q_probabilistic", gamma=0.9, passes=1)

    @staticmethod
    def deterministic_test(seed: int = 42) -> LearningConfig:
        """Seeded configuration for reproducible runs."""
        return LearningConfig(prng_seed=seed)
