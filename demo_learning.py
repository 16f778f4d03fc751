#!/usr/bin/env python3
"""
relearn Demo

Walks through the policy store, both learners, persistence, the grid
world driver and the blackjack driver.

Run with:
    python demo_learning.py
"""
import os
import random
import sys
import tempfile

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from relearn import (
    Action,
    Episode,
    LearningPresets,
    PolicyPersistence,
    PolicyStore,
    QLearning,
    QProbabilistic,
    State,
    build_learner,
)
from relearn import blackjack
from relearn.gridworld import World, follow_policy, reached_goal, train


def print_header(text: str):
    """Print styled header."""
    print(f"\n{'='*70}")
    print(f"  {text}")
    print(f"{'='*70}\n")


def show_store(store: PolicyStore):
    for state, action, value in store.items():
        print(f"  Q({state.trait}, {action.trait}) = {value:+.3f}")


def demo_policy_store():
    """Demonstrate lookups and the no-knowledge answer."""
    print_header("Demo 1: Policy Store")

    store = PolicyStore()
    store.update(State("hall"), Action("north"), 0.4)
    store.update(State("hall"), Action("south"), 0.9)

    print(f"Best in 'hall':    {store.best(State('hall'))}")
    print(f"Unknown pair:      {store.value(State('hall'), Action('east'))}")
    print(f"Unknown state:     {store.best(State('cellar'))}")
    print(f"Entries (no ghost entries after reads): {len(store)}")


def demo_q_learning():
    """Demonstrate deterministic Q-learning on a three step episode."""
    print_header("Demo 2: Deterministic Q-Learning")

    episode = Episode()
    episode.append(State("s1"), Action("a1"))
    episode.append(State("s2"), Action("a2"))
    episode.append(State("s3", reward=1.0), Action("a3"))

    store = PolicyStore()
    learner = QLearning(alpha=0.9, gamma=0.9)
    for i in range(10):
        learner(episode, store)
        if i in (0, 1, 9):
            print(f"After pass {i + 1}:")
            show_store(store)


def demo_q_probabilistic():
    """Demonstrate frequency weighting with diverging outcomes."""
    print_header("Demo 3: Probabilistic Q-Learning")

    store = PolicyStore()
    learner = QProbabilistic(gamma=0.9)
    rng = random.Random(5)

    for n in range(6):
        win = rng.random() < 0.5
        episode = Episode()
        episode.append(State("deal"), Action("hit"))
        episode.append(State("win" if win else "bust", reward=1.0 if win else -1.0),
                       Action("stand"))
        learner(episode, store)
        print(f"Hand {n + 1}: {'win ' if win else 'bust'} -> "
              f"Q(deal, hit) = {store.value(State('deal'), Action('hit')):+.3f}")

    print(f"\nObserved: {learner.observations(State('deal'), Action('hit'))}")


def demo_gridworld_and_persistence():
    """Train the default grid world, save it and replay it."""
    print_header("Demo 4: Grid World, Persistence")

    world = World.default()
    config = LearningPresets.deterministic_test(seed=42)
    store = PolicyStore()
    episodes = train(world, build_learner(config), store, config)
    print(f"Explored {len(episodes)} episodes, learned {len(store)} values")

    with tempfile.TemporaryDirectory() as tmpdir:
        persistence = PolicyPersistence(tmpdir)
        persistence.save("gridworld", store)
        restored = persistence.load("gridworld")

    path = follow_policy(world, restored)
    print("Greedy path: " + " -> ".join(f"({c.x},{c.y})" for c in path))
    print("Goal reached" if reached_goal(path) else "Goal not reached (train longer)")


def demo_blackjack():
    """Play blackjack generations with the probabilistic learner."""
    print_header("Demo 5: Blackjack")

    config = LearningPresets.probabilistic()
    store = PolicyStore()
    learner = QProbabilistic(gamma=config.gamma)
    history = blackjack.train(learner, store, config, rng=random.Random(42),
                              generations=5)

    for n, stats in enumerate(history):
        print(f"Generation {n}: won {stats.wins}/{stats.rounds}, "
              f"on-policy {stats.on_policy_ratio:.0%}")
    print(f"\nLearned {len(store)} values over {len(store.states())} hands")


def main(interactive: bool = True):
    demos = [
        demo_policy_store,
        demo_q_learning,
        demo_q_probabilistic,
        demo_gridworld_and_persistence,
        demo_blackjack,
    ]

    for demo in demos:
        demo()
        if interactive:
            input("\nPress Enter to continue...")


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description="relearn demo")
    parser.add_argument("--non-interactive", action="store_true",
                        help="Run without pausing between demos")
    args = parser.parse_args()

    try:
        main(interactive=not args.non_interactive)
    except KeyboardInterrupt:
        print("\n\nDemo interrupted. Goodbye!")
        sys.exit(0)
