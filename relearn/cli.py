from __future__ import annotations

import argparse
import logging
import os
import random
import sys
from typing import List, Optional

from . import blackjack, gridworld
from .algorithms import build_learner
from .config import LearningConfig
from .logging_config import configure_logging
from .persistence import PolicyPersistence
from .policy import PolicyStore

logger = logging.getLogger(__name__)


def _add_learning_args(ap: argparse.ArgumentParser, default_algorithm: str) -> None:
    ap.add_argument("--config", help="JSON/YAML learning config file")
    ap.add_argument("--algorithm", choices=["q_learning", "q_probabilistic"],
                    help=f"Update rule (default: {default_algorithm})")
    ap.add_argument("--alpha", type=float, help="Learning rate (0, 1]")
    ap.add_argument("--gamma", type=float, help="Discount rate [0, 1]")
    ap.add_argument("--passes", type=int, help="Learning passes over the episodes")
    ap.add_argument("--episodes", type=int, help="Maximum exploration episodes")
    ap.add_argument("--seed", type=int, help="Random seed for exploration")


def _add_logging_args(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    ap.add_argument("--log-dir", help="Also write rotating log files here")


def _build_config(args: argparse.Namespace, base: LearningConfig) -> LearningConfig:
    """Merge the config file (if any) with command-line overrides."""
    config = base
    if args.config:
        loaded = LearningConfig.load(args.config)
        if loaded is None:
            raise SystemExit(f"Could not load config file: {args.config}")
        config = loaded

    overrides = {
        "algorithm": args.algorithm,
        "alpha": args.alpha,
        "gamma": args.gamma,
        "passes": args.passes,
        "episodes": args.episodes,
        "prng_seed": args.seed,
    }
    data = config.to_dict()
    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return LearningConfig.from_dict(data)
    except ValueError as e:
        raise SystemExit(f"Invalid configuration: {e}")


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(
        description="relearn - train a Q-learning agent on a grid world"
    )

    # Learning configuration
    _add_learning_args(ap, "q_learning")
    ap.add_argument("--online", action="store_true",
                    help="Learn after every episode and follow the learned policy")

    # World
    ap.add_argument("--layout", help="Grid layout file (default: built-in 10x10)")
    ap.add_argument("--max-steps", type=int, default=100,
                    help="Step limit when following the learned policy")

    # Policy storage
    ap.add_argument("--store-dir", default=os.path.join(os.getcwd(), ".relearn"),
                    help="Directory for saved policies")
    ap.add_argument("--load", metavar="NAME", help="Load a saved policy instead of training")
    ap.add_argument("--save", metavar="NAME", help="Save the trained policy")

    # Logging
    _add_logging_args(ap)

    args = ap.parse_args(argv)

    configure_logging(level="DEBUG" if args.verbose else "WARNING", log_dir=args.log_dir)

    config = _build_config(args, LearningConfig())
    world = gridworld.World.load(args.layout) if args.layout else gridworld.World.default()
    persistence = PolicyPersistence(args.store_dir) if (args.load or args.save) else None

    store: Optional[PolicyStore] = None
    if args.load:
        store = persistence.load(args.load)
        if store is None:
            print(f"[No usable saved policy: {args.load}]")
            return 1
        print(f"[Loaded policy {args.load}: {len(store)} entries]")
    else:
        store = PolicyStore()
        learner = build_learner(config)
        run = gridworld.train_online if args.online else gridworld.train
        episodes = run(world, learner, store, config, random.Random(config.prng_seed))
        mode = "online" if args.online else "offline"
        print(f"[Trained {learner!r} {mode} on {len(episodes)} episodes: "
              f"{len(store)} entries]")

    if args.save:
        if persistence.save(args.save, store):
            print(f"[Saved policy {args.save}]")
        else:
            print(f"[Warning: could not save policy {args.save}]")

    path = gridworld.follow_policy(world, store, max_steps=args.max_steps)
    print("Path: " + " -> ".join(f"({c.x},{c.y})" for c in path))

    if gridworld.reached_goal(path):
        print(f"[Goal reached in {len(path) - 1} steps]")
        return 0

    last = path[-1]
    logger.info(f"Greedy walk stopped at ({last.x},{last.y})")
    print("[Goal not reached]")
    return 1


def blackjack_main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(
        description="relearn - teach a player blackjack by playing rounds"
    )

    # Learning configuration (--episodes is rounds per generation)
    _add_learning_args(ap, "q_probabilistic")
    ap.add_argument("--generations", type=int, default=5,
                    help="Play-then-learn cycles")

    # Logging
    _add_logging_args(ap)

    args = ap.parse_args(argv)

    configure_logging(level="DEBUG" if args.verbose else "WARNING", log_dir=args.log_dir)

    config = _build_config(args, LearningConfig(algorithm="q_probabilistic"))
    if args.generations < 1:
        raise SystemExit(f"Invalid generations: {args.generations}")

    store = PolicyStore()
    learner = build_learner(config)
    history = blackjack.train(
        learner,
        store,
        config,
        rng=random.Random(config.prng_seed),
        generations=args.generations,
    )

    for n, stats in enumerate(history):
        print(f"[Generation {n}] win ratio: {stats.win_ratio:.2f}, "
              f"on-policy ratio: {stats.on_policy_ratio:.2f}")
    print(f"[Trained {learner!r}: {len(store)} entries]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
