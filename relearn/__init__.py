"""
relearn - tabular reinforcement learning.

Learns action values from observed trajectories and keeps them in an
in-memory policy store that a simulation loop queries for the best
action to take.

Key pieces:
- ``State`` / ``Action`` wrap any hashable descriptor
- ``Episode`` is an ordered list of (state, action) links
- ``PolicyStore`` maps state -> action -> value
- ``QLearning`` updates the store with the one-step TD rule
- ``QProbabilistic`` weights updates by observed transition frequencies

Example drivers live in ``relearn.gridworld`` (deterministic) and
``relearn.blackjack`` (card draws, for ``QProbabilistic``).

Design:
- Single process, synchronous, no I/O in the core
- Rewards are attached to the state entered, not to the transition
- Unknown states report "no knowledge" (None / NaN), never raise
"""

from .traits import State, Action, Link, Episode
from .policy import PolicyStore
from .algorithms import QLearning, QProbabilistic, build_learner
from .config import LearningConfig, LearningPresets, DEFAULT_LEARNING_CONFIG
from .persistence import PolicyPersistence
from .logging_config import configure_logging, get_logger

__version__ = "0.2.0"

__all__ = [
    # Value wrappers
    "State",
    "Action",
    "Link",
    "Episode",

    # Policy store
    "PolicyStore",

    # Learners
    "QLearning",
    "QProbabilistic",
    "build_learner",

    # Configuration
    "LearningConfig",
    "LearningPresets",
    "DEFAULT_LEARNING_CONFIG",

    # Persistence
    "PolicyPersistence",

    # Logging
    "configure_logging",
    "get_logger",
]
