"""
Grid world example environment.

The classic Sutton & Barto grid world: an agent walks between cells of
a grid, walls cannot be entered, hazard cells end the episode with
reward -1 and the goal cell ends it with reward +1.

States are described by ``(x, y)`` tuples and actions by a direction
number (0 up, 1 right, 2 down, 3 left). The world is deterministic, so
``QLearning`` is the natural learner, but ``QProbabilistic`` works too.

``train`` explores first and learns afterwards (offline), ``train_online``
learns after every episode and follows what it has learned so far.

Layouts are plain text, one row per line:
    ``#`` wall, ``.`` empty, ``X`` hazard, ``G`` goal, ``S`` start
"""
from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .config import LearningConfig
from .logging_config import get_logger
from .policy import PolicyStore
from .traits import Action, Episode, State

logger = get_logger(__name__)

UP, RIGHT, DOWN, LEFT = 0, 1, 2, 3
DIRECTIONS: Dict[int, Tuple[int, int]] = {
    UP: (0, -1),
    RIGHT: (1, 0),
    DOWN: (0, 1),
    LEFT: (-1, 0),
}

# Action recorded for the terminal link of an episode
STAY = Action(-1)

DEFAULT_LAYOUT = """
##########
#..X.....#
#......X.#
#.X......#
#....#...#
#....G.X.#
#.X..#...#
#......X.#
#S.......#
##########
"""

_REWARDS = {".": 0.0, "S": 0.0, "#": 0.0, "X": -1.0, "G": 1.0}


@dataclass(frozen=True)
class Cell:
    """A grid block at (x, y)."""
    x: int
    y: int
    reward: float = 0.0
    occupied: bool = False

    @property
    def coord(self) -> Tuple[int, int]:
        return (self.x, self.y)

    @property
    def terminal(self) -> bool:
        """Entering a rewarded cell ends the episode."""
        return self.reward != 0.0


class World:
    """
    A grid of cells with a start cell.

    Example:
        >>> world = World.parse("#S.G#")
        >>> [d for d, _ in world.moves(world.start)]
        [1]
    """

    def __init__(self, cells: Dict[Tuple[int, int], Cell], start: Cell):
        self.cells = cells
        self.start = start

    @classmethod
    def parse(cls, layout: str) -> "World":
        """Build a world from a text layout with exactly one ``S``."""
        cells: Dict[Tuple[int, int], Cell] = {}
        start: Optional[Cell] = None
        rows = [row for row in layout.splitlines() if row.strip()]
        for y, row in enumerate(rows):
            for x, char in enumerate(row.strip()):
                if char not in _REWARDS:
                    raise ValueError(f"unknown layout character {char!r} at ({x}, {y})")
                cell = Cell(x, y, reward=_REWARDS[char], occupied=(char == "#"))
                cells[(x, y)] = cell
                if char == "S":
                    if start is not None:
                        raise ValueError("layout has more than one start cell")
                    start = cell
        if start is None:
            raise ValueError("layout has no start cell")
        return cls(cells, start)

    @classmethod
    def default(cls) -> "World":
        """10x10 world: goal in the centre, hazards scattered, start at (1, 8)."""
        return cls.parse(DEFAULT_LAYOUT)

    @classmethod
    def load(cls, path: str) -> "World":
        with open(path, "r", encoding="utf-8") as f:
            return cls.parse(f.read())

    def state(self, cell: Cell) -> State[Tuple[int, int]]:
        return State(cell.coord, reward=cell.reward)

    def step(self, cell: Cell, direction: int) -> Optional[Cell]:
        """Get the cell reached by moving from ``cell``, None if blocked."""
        if direction not in DIRECTIONS:
            return None
        dx, dy = DIRECTIONS[direction]
        target = self.cells.get((cell.x + dx, cell.y + dy))
        if target is None or target.occupied:
            return None
        return target

    def moves(self, cell: Cell) -> List[Tuple[int, Cell]]:
        """List the legal (direction, next cell) pairs from ``cell``."""
        moves = []
        for direction in DIRECTIONS:
            target = self.step(cell, direction)
            if target is not None:
                moves.append((direction, target))
        return moves

    def __len__(self) -> int:
        return len(self.cells)


def _policy_move(
    world: World,
    store: PolicyStore,
    cell: Cell,
) -> Optional[Tuple[int, Cell]]:
    """Get the best known move from ``cell`` if its value is positive."""
    action, value = store.best(world.state(cell))
    if action is None or not value > 0 or action == STAY:
        return None
    target = world.step(cell, action.trait)
    if target is None:
        return None
    return action.trait, target


def explore(
    world: World,
    rng: random.Random,
    start: Optional[Cell] = None,
    max_steps: int = 10000,
    store: Optional[PolicyStore] = None,
) -> Episode[Tuple[int, int], int]:
    """
    Walk until a hazard or the goal is entered.

    Without a ``store`` the walk is uniformly random. With one, the agent
    stays on policy: it takes the best known action whenever that action
    has a positive value and moves randomly otherwise.

    Every step is recorded with the state it was taken from. The entered
    cell's reward travels with the next link's state, and the walk ends
    with a terminal ``STAY`` link on the last cell reached.
    """
    cell = start or world.start
    state = world.state(cell)
    episode: Episode[Tuple[int, int], int] = Episode()

    for _ in range(max_steps):
        move = _policy_move(world, store, cell) if store is not None else None
        if move is None:
            moves = world.moves(cell)
            if not moves:
                break
            move = rng.choice(moves)
        direction, cell = move
        episode.append(state, Action(direction))
        state = world.state(cell)
        if cell.terminal:
            break
    else:
        logger.debug(f"Exploration stopped after {max_steps} steps")

    episode.append(state, STAY)
    return episode


def follow_policy(
    world: World,
    store: PolicyStore,
    start: Optional[Cell] = None,
    max_steps: int = 100,
) -> List[Cell]:
    """
    Walk greedily using the best known action of each state.

    Stops on a terminal cell, on a state with no knowledge, on a blocked
    move, or after ``max_steps``.

    Returns:
        Cells visited, starting cell included
    """
    cell = start or world.start
    path = [cell]
    for _ in range(max_steps):
        if cell.terminal:
            break
        action = store.best_action(world.state(cell))
        if action is None or action == STAY:
            break
        target = world.step(cell, action.trait)
        if target is None:
            break
        cell = target
        path.append(cell)
    return path


def reached_goal(path: List[Cell]) -> bool:
    return bool(path) and path[-1].reward > 0


def train(
    world: World,
    learner,
    store: PolicyStore,
    config: LearningConfig,
    rng: Optional[random.Random] = None,
    max_steps: int = 10000,
) -> List[Episode]:
    """
    Explore, then learn offline.

    Collects random episodes until one reaches the goal or
    ``config.episodes`` have been played, then applies ``learner``
    ``config.passes`` times over every collected episode.

    Returns:
        The collected episodes
    """
    rng = rng or random.Random(config.prng_seed)
    started = time.perf_counter()

    episodes: List[Episode] = []
    for n in range(config.episodes):
        episode = explore(world, rng, max_steps=max_steps)
        episodes.append(episode)
        logger.event(
            "episode",
            f"Explored {len(episode)} links, outcome {episode.reward:+.1f}",
            episode=n,
            subsystem="gridworld",
        )
        if episode.reward > 0:
            break

    for _ in range(config.passes):
        for episode in episodes:
            learner(episode, store)

    logger.latency(
        "training",
        (time.perf_counter() - started) * 1000.0,
        subsystem="gridworld",
        episodes=len(episodes),
        policies=len(store),
    )
    return episodes


def train_online(
    world: World,
    learner,
    store: PolicyStore,
    config: LearningConfig,
    rng: Optional[random.Random] = None,
    max_steps: int = 10000,
) -> List[Episode]:
    """
    Learn on-policy, one episode at a time.

    Each episode follows the store's positive-valued actions where it has
    them and explores randomly elsewhere. The learner is applied
    ``config.passes`` times right after the episode, so the next episode
    already benefits from it. Stops at the first episode reaching the goal
    or after ``config.episodes``.

    The first route found is kept, which is not necessarily the shortest.

    Returns:
        The played episodes
    """
    rng = rng or random.Random(config.prng_seed)
    started = time.perf_counter()

    episodes: List[Episode] = []
    for n in range(config.episodes):
        episode = explore(world, rng, max_steps=max_steps, store=store)
        episodes.append(episode)
        for _ in range(config.passes):
            learner(episode, store)
        logger.event(
            "episode",
            f"Played {len(episode)} links on-policy, outcome {episode.reward:+.1f}",
            episode=n,
            subsystem="gridworld",
            policies=len(store),
        )
        if episode.reward > 0:
            break

    logger.latency(
        "online training",
        (time.perf_counter() - started) * 1000.0,
        subsystem="gridworld",
        episodes=len(episodes),
        policies=len(store),
    )
    return episodes
