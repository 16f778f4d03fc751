"""
Policy store: learned action values per state.

Maps ``state -> action -> value``. The store does not compute values
itself, a learner (``QLearning``, ``QProbabilistic``) writes them.
Drivers read the best action for the state they are in.

Ties between equally valued actions are broken by insertion order: the
action first recorded for a state wins.
"""
from __future__ import annotations

import logging
import math
from typing import Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

from .traits import Action, State

logger = logging.getLogger(__name__)

S = TypeVar("S")
A = TypeVar("A")


class PolicyStore(Generic[S, A]):
    """
    Two level mapping from state to action to value.

    Absent pairs read as 0.0 through ``value`` but never show up in
    ``actions``, ``best_value`` or ``best_action``: "no knowledge" and
    "best action is worth 0" are different answers.

    Not thread-safe. Callers running learners concurrently must
    serialize ``update`` and ``merge`` on a given store.

    Example:
        >>> store = PolicyStore()
        >>> store.update(State("s1"), Action("a1"), 0.5)
        >>> store.best_action(State("s1"))
        Action(trait='a1')
    """

    def __init__(self):
        self._policies: Dict[State[S], Dict[Action[A], float]] = {}

    def actions(self, state: State[S]) -> Dict[Action[A], float]:
        """
        Get the actions experienced in a state.

        Returns:
            Copy of the action -> value mapping (empty if unknown)
        """
        return dict(self._policies.get(state, {}))

    def update(self, state: State[S], action: Action[A], value: float) -> None:
        """Set the value of (state, action), creating the entry if needed."""
        self._policies.setdefault(state, {})[action] = value

    def value(self, state: State[S], action: Action[A]) -> float:
        """Get the value of (state, action), 0.0 if never recorded."""
        return self._policies.get(state, {}).get(action, 0.0)

    def best_value(self, state: State[S]) -> float:
        """Get the highest recorded value for a state, NaN if unknown."""
        return self.best(state)[1]

    def best_action(self, state: State[S]) -> Optional[Action[A]]:
        """Get the highest valued action for a state, None if unknown."""
        return self.best(state)[0]

    def best(self, state: State[S]) -> Tuple[Optional[Action[A]], float]:
        """
        Get the best action and its value in one pass.

        Returns:
            ``(action, value)``, or ``(None, nan)`` when nothing is
            recorded for the state
        """
        best_action: Optional[Action[A]] = None
        best_value = math.nan
        for action, value in self._policies.get(state, {}).items():
            # Strict comparison keeps the first inserted action on ties
            if best_action is None or value > best_value:
                best_action = action
                best_value = value
        return best_action, best_value

    def merge(self, other: "PolicyStore[S, A]") -> None:
        """
        Overlay another store onto this one.

        Values from ``other`` overwrite values stored here for the same
        (state, action). Pairs only present here are kept.
        """
        merged = 0
        for state, action, value in other.items():
            self.update(state, action, value)
            merged += 1
        logger.debug(f"Merged {merged} policies, store now holds {len(self)}")

    def __iadd__(self, other: "PolicyStore[S, A]") -> "PolicyStore[S, A]":
        self.merge(other)
        return self

    def states(self) -> List[State[S]]:
        """Get all states with at least one recorded action."""
        return [s for s, actions in self._policies.items() if actions]

    def items(self) -> Iterator[Tuple[State[S], Action[A], float]]:
        """Iterate over (state, action, value) triples in insertion order."""
        for state, actions in self._policies.items():
            for action, value in actions.items():
                yield state, action, value

    def clear(self) -> None:
        self._policies = {}

    def __len__(self) -> int:
        return sum(len(actions) for actions in self._policies.values())

    def __contains__(self, state: State[S]) -> bool:
        return bool(self._policies.get(state))

    def to_dict(self) -> Dict:
        """Serialize for debugging (descriptors are kept as-is)."""
        return {
            "states": len(self.states()),
            "entries": len(self),
            "policies": [
                {
                    "state": state.trait,
                    "action": action.trait,
                    "value": value,
                }
                for state, action, value in self.items()
            ],
        }

    def __repr__(self) -> str:
        return f"PolicyStore(states={len(self.states())}, entries={len(self)})"
