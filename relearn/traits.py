"""
State, action and episode containers.

States and actions wrap an application supplied descriptor (a grid
coordinate, a hand of cards, ...). Equality and hashing are forwarded to
the descriptor, so the descriptor type must be hashable and its
``__hash__`` must agree with its ``__eq__``. Two states built from equal
descriptors are the same dictionary key whatever their rewards are.

A descriptor whose hash disagrees with its equality silently fragments
the policy store. That is a caller error and is not detected here.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Iterator, List, Optional, TypeVar, Union, overload

S = TypeVar("S")
A = TypeVar("A")


@dataclass(frozen=True)
class State(Generic[S]):
    """
    A state described by ``trait``.

    The descriptor cannot be reassigned; ``set_reward`` is the only
    mutation.

    Attributes:
        trait: Descriptor of the state (must be hashable)
        reward: Reward received on entering this state (default 0.0)
    """
    trait: S
    reward: float = field(default=0.0, compare=False)

    def __post_init__(self):
        # Unhashable descriptors fail here rather than on first lookup
        hash(self.trait)

    def set_reward(self, reward: float) -> None:
        """Assign the reward late, e.g. for an episode's terminal state."""
        # The descriptor keys the policy store, only the reward may change
        object.__setattr__(self, "reward", reward)

    def __hash__(self) -> int:
        return hash(self.trait)

    def __lt__(self, other: "State[S]") -> bool:
        if not isinstance(other, State):
            return NotImplemented
        return self.trait < other.trait


@dataclass(frozen=True)
class Action(Generic[A]):
    """
    An action described by ``trait``.

    Attributes:
        trait: Descriptor of the action (must be hashable)
    """
    trait: A

    def __post_init__(self):
        hash(self.trait)

    def __hash__(self) -> int:
        return hash(self.trait)

    def __lt__(self, other: "Action[A]") -> bool:
        if not isinstance(other, Action):
            return NotImplemented
        return self.trait < other.trait


@dataclass(frozen=True)
class Link(Generic[S, A]):
    """One step of a trajectory: while in ``state`` the agent took ``action``."""
    state: State[S]
    action: Action[A]


class Episode(Generic[S, A]):
    """
    Ordered sequence of links from an initial state to a terminal state.

    The reward for leaving ``episode[i]`` is carried by the state of
    ``episode[i + 1]``. The last link's state holds the outcome reward.

    Example:
        >>> episode = Episode()
        >>> episode.append(State((0, 0)), Action("right"))
        >>> episode.append(State((1, 0), reward=1.0), Action("stay"))
        >>> len(episode)
        2
    """

    def __init__(self, links: Optional[List[Link[S, A]]] = None):
        self.links: List[Link[S, A]] = list(links or [])

    def append(self, state: State[S], action: Action[A]) -> Link[S, A]:
        """Append a step and return the new link."""
        link = Link(state=state, action=action)
        self.links.append(link)
        return link

    def add(self, link: Link[S, A]) -> None:
        self.links.append(link)

    @property
    def terminal(self) -> Optional[Link[S, A]]:
        """Last link of the episode, or None when empty."""
        return self.links[-1] if self.links else None

    @property
    def reward(self) -> float:
        """Outcome reward (the terminal state's reward, 0.0 when empty)."""
        return self.links[-1].state.reward if self.links else 0.0

    def set_terminal_reward(self, reward: float) -> None:
        """Assign the outcome reward after the episode has been played."""
        if not self.links:
            raise ValueError("cannot set the terminal reward of an empty episode")
        self.links[-1].state.set_reward(reward)

    def __len__(self) -> int:
        return len(self.links)

    def __iter__(self) -> Iterator[Link[S, A]]:
        return iter(self.links)

    @overload
    def __getitem__(self, index: int) -> Link[S, A]: ...

    @overload
    def __getitem__(self, index: slice) -> List[Link[S, A]]: ...

    def __getitem__(self, index: Union[int, slice]):
        return self.links[index]

    def __bool__(self) -> bool:
        return bool(self.links)

    def __repr__(self) -> str:
        return f"Episode(links={len(self.links)}, reward={self.reward})"
