"""
Update rules that train a PolicyStore from episodes.

Rewards belong to the state being entered, so the reward used to
update step ``i`` is read from the state of step ``i + 1``. The last
link of an episode has no successor; its (state, action) is recorded
with the terminal state's reward.

Both learners are called once per episode and mutate the store in
place::

    learner = QLearning(alpha=0.9, gamma=0.9)
    for _ in range(10):
        learner(episode, store)
"""
from __future__ import annotations

import logging
import math
from collections import Counter, defaultdict
from typing import DefaultDict, Dict, Generic, Sequence, Tuple, TypeVar, Union

from .config import LearningConfig
from .policy import PolicyStore
from .traits import Action, Link, State

logger = logging.getLogger(__name__)

S = TypeVar("S")
A = TypeVar("A")

Triplet = Tuple[State, Action, float]


def _next_best(store: PolicyStore, state: State) -> float:
    # No knowledge of the next state counts as 0
    q_next = store.best_value(state)
    return 0.0 if math.isnan(q_next) else q_next


def _check_gamma(gamma: float) -> None:
    if not 0.0 <= gamma <= 1.0:
        raise ValueError(f"gamma must be in [0, 1], got {gamma}")


class QLearning(Generic[S, A]):
    """
    Deterministic one-step Q-learning.

    ``Q(s,a) <- Q(s,a) + alpha * (R(s') + gamma * max Q(s',.) - Q(s,a))``

    One call makes a single forward pass over the episode. Repeated calls
    on the same episode move the values further toward the fixed point.
    """

    def __init__(self, alpha: float = 0.9, gamma: float = 0.9):
        """
        Args:
            alpha: Learning rate in (0, 1]
            gamma: Discount rate in [0, 1]
        """
        if not 0.0 < alpha <= 1.0:
            raise ValueError(f"alpha must be in (0, 1], got {alpha}")
        _check_gamma(gamma)
        self.alpha = alpha
        self.gamma = gamma

    def q_value(
        self,
        episode: Sequence[Link[S, A]],
        index: int,
        store: PolicyStore[S, A],
    ) -> Triplet:
        """Compute the updated value for ``episode[index]``."""
        step = episode[index]
        if index < len(episode) - 1:
            nxt = episode[index + 1]
            q = store.value(step.state, step.action)
            r = nxt.state.reward
            q_next = _next_best(store, nxt.state)
            return step.state, step.action, q + self.alpha * (r + self.gamma * q_next - q)
        return step.state, step.action, step.state.reward

    def __call__(
        self,
        episode: Sequence[Link[S, A]],
        store: PolicyStore[S, A],
    ) -> None:
        """Update ``store`` in place from one episode."""
        for i in range(len(episode)):
            store.update(*self.q_value(episode, i, store))
        logger.debug(f"Q-learning pass over {len(episode)} links")

    def __repr__(self) -> str:
        return f"QLearning(alpha={self.alpha}, gamma={self.gamma})"


class QProbabilistic(Generic[S, A]):
    """
    Non-deterministic Q-learning using observed transition frequencies.

    The learner remembers how often taking ``a`` in ``s`` led to ``s'``
    and weights reward and future value by that empirical probability::

        p = N(s, a, s') / sum(N(s, a, .))
        Q(s,a) <- p * R(s') + gamma * p * max Q(s',.)

    The new value replaces the old one, it is not blended with it.

    Reuse one instance for a whole set of episodes: the transition
    counts accumulate across calls and are only cleared by ``reset``.
    """

    def __init__(self, gamma: float = 0.9):
        """
        Args:
            gamma: Discount rate in [0, 1]
        """
        _check_gamma(gamma)
        self.gamma = gamma
        self._memory: DefaultDict[State[S], DefaultDict[Action[A], Counter]] = \
            defaultdict(lambda: defaultdict(Counter))

    def observe(self, episode: Sequence[Link[S, A]]) -> None:
        """Count every (s, a) -> s' transition of an episode."""
        for i in range(len(episode) - 1):
            step, nxt = episode[i], episode[i + 1]
            self._memory[step.state][step.action][nxt.state] += 1

    def observations(self, state: State[S], action: Action[A]) -> Dict[State[S], int]:
        """Get the successor counts seen for (state, action)."""
        transitions = self._memory.get(state)
        if transitions is None or action not in transitions:
            return {}
        return dict(transitions[action])

    def transition_probability(
        self,
        state: State[S],
        action: Action[A],
        next_state: State[S],
    ) -> float:
        """Get the observed probability of (state, action) leading to next_state."""
        counts = self.observations(state, action)
        total = sum(counts.values())
        if total == 0:
            return 0.0
        return counts.get(next_state, 0) / total

    def q_value(
        self,
        episode: Sequence[Link[S, A]],
        index: int,
        store: PolicyStore[S, A],
    ) -> Triplet:
        """Compute the updated value for ``episode[index]``."""
        step = episode[index]
        if index < len(episode) - 1:
            nxt = episode[index + 1]
            prob = self.transition_probability(step.state, step.action, nxt.state)
            r = nxt.state.reward
            q_next = _next_best(store, nxt.state)
            return step.state, step.action, prob * r + self.gamma * (q_next * prob)
        return step.state, step.action, step.state.reward

    def __call__(
        self,
        episode: Sequence[Link[S, A]],
        store: PolicyStore[S, A],
    ) -> None:
        """Record the episode's transitions, then update ``store`` in place."""
        self.observe(episode)
        for i in range(len(episode)):
            store.update(*self.q_value(episode, i, store))
        logger.debug(
            f"Q-probabilistic pass over {len(episode)} links, "
            f"{len(self._memory)} states observed"
        )

    def reset(self) -> None:
        """Forget all observed transitions."""
        self._memory.clear()

    def __repr__(self) -> str:
        return f"QProbabilistic(gamma={self.gamma}, states={len(self._memory)})"


Learner = Union[QLearning, QProbabilistic]


def build_learner(config: LearningConfig) -> Learner:
    """Create the learner named by ``config.algorithm``."""
    if config.algorithm == "q_probabilistic":
        return QProbabilistic(gamma=config.gamma)
    return QLearning(alpha=config.alpha, gamma=config.gamma)
