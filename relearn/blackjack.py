"""
Blackjack example environment.

Drawing a card is not deterministic: the same hand and the same action
lead to different hands depending on the shuffle. This is the setting
``QProbabilistic`` is meant for.

States are described by the player's ``Hand`` and actions by a bool
(True draws a card, False stays). A round is one episode. The outcome
(+1 win, -1 loss) is known only once the dealer has played, so it is
assigned to the episode afterwards with ``Episode.set_terminal_reward``.

The deck is plain data passed to the ``Dealer``; ``STANDARD_DECK`` holds
the usual 52 cards.
"""
from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .config import LearningConfig
from .logging_config import get_logger
from .policy import PolicyStore
from .traits import Action, Episode, State

logger = get_logger(__name__)

DRAW = Action(True)
STAY = Action(False)

WIN = 1.0
LOSS = -1.0


@dataclass(frozen=True)
class Card:
    """A playing card; ``values`` lists every value it may count as."""
    name: str
    suit: str
    values: Tuple[int, ...]

    def __str__(self) -> str:
        return f"{self.name}{self.suit}"


def standard_deck() -> Tuple[Card, ...]:
    """Build the 52 card deck, aces counting 1 or 11."""
    ranks = [("Ace", (1, 11))]
    ranks += [(name, (value,)) for name, value in (
        ("Two", 2), ("Three", 3), ("Four", 4), ("Five", 5), ("Six", 6),
        ("Seven", 7), ("Eight", 8), ("Nine", 9), ("Ten", 10),
        ("Jack", 10), ("Queen", 10), ("King", 10),
    )]
    return tuple(
        Card(name, suit, values)
        for name, values in ranks
        for suit in ("♠", "♥", "♦", "♣")
    )


STANDARD_DECK = standard_deck()


@dataclass(frozen=True)
class Hand:
    """
    Cards held by a player, in the order they were dealt.

    Hands are immutable and hashable so they can describe states.
    """
    cards: Tuple[Card, ...] = ()

    def add(self, card: Card) -> "Hand":
        return Hand(self.cards + (card,))

    @property
    def min_value(self) -> int:
        """Total counting every card at its lowest value."""
        return sum(min(card.values) for card in self.cards)

    @property
    def value(self) -> int:
        """Best total: the highest one not above 21, else the lowest."""
        totals = {0}
        for card in self.cards:
            totals = {total + v for total in totals for v in card.values}
        in_range = [total for total in totals if total <= 21]
        return max(in_range) if in_range else min(totals)

    @property
    def bust(self) -> bool:
        return self.min_value > 21

    @property
    def blackjack(self) -> bool:
        """Two cards worth 21."""
        return len(self.cards) == 2 and self.value == 21

    def __len__(self) -> int:
        return len(self.cards)

    def __str__(self) -> str:
        return " ".join(str(card) for card in self.cards)


def player_wins(player: Hand, house: Hand) -> bool:
    """
    Compare a finished round.

    A blackjack wins unless the house has one too, a bust hand loses,
    and otherwise the higher value wins. Ties go to the house.
    """
    if player.blackjack and not house.blackjack:
        return True
    if house.blackjack or player.bust:
        return False
    if house.bust:
        return True
    return player.value > house.value


class Dealer:
    """
    Deals from a shuffled copy of ``deck`` and plays the house hand.

    The house draws until its hand is worth 17 or more.
    """

    def __init__(self, deck: Sequence[Card] = STANDARD_DECK, rng: Optional[random.Random] = None):
        if not deck:
            raise ValueError("deck must hold at least one card")
        self.deck = tuple(deck)
        self.rng = rng or random.Random()
        self._shoe: List[Card] = []
        self.hand = Hand()

    def reset_deck(self) -> None:
        """Shuffle a fresh copy of the deck."""
        self._shoe = list(self.deck)
        self.rng.shuffle(self._shoe)

    def deal(self) -> Card:
        """Deal the next card, reshuffling when the shoe is empty."""
        if not self._shoe:
            self.reset_deck()
        return self._shoe.pop()

    def should_draw(self) -> bool:
        return self.hand.value < 17

    def play(self) -> Hand:
        """Draw to 17 and return the final house hand."""
        while self.should_draw():
            self.hand = self.hand.add(self.deal())
        return self.hand

    def __len__(self) -> int:
        return len(self._shoe)


@dataclass
class Player:
    """
    Learning player.

    Takes the best known action when its value is positive, otherwise
    draws or stays at random.

    Attributes:
        rng: Source of the random decisions
        policy_actions: Decisions taken from the policy store
        random_actions: Decisions taken at random
    """
    rng: random.Random = field(default_factory=random.Random)
    policy_actions: int = 0
    random_actions: int = 0

    def decide(self, store: PolicyStore, state: State[Hand]) -> Action[bool]:
        action, value = store.best(state)
        if action is not None and value > 0:
            self.policy_actions += 1
            return action
        self.random_actions += 1
        return DRAW if self.rng.random() > 0.5 else STAY

    def reset(self) -> None:
        self.policy_actions = 0
        self.random_actions = 0


@dataclass
class RoundResult:
    """One played round: the player's episode and both final hands."""
    episode: Episode[Hand, bool]
    player: Hand
    house: Hand

    @property
    def won(self) -> bool:
        return self.episode.reward > 0


def play_round(dealer: Dealer, player: Player, store: PolicyStore) -> RoundResult:
    """
    Play one round from a freshly shuffled deck.

    The house gets one card and the player two. The player decides until
    it stays or busts, then the house plays (unless the player is bust).
    The outcome is set as the reward of the last decision's state.
    """
    dealer.reset_deck()
    dealer.hand = Hand((dealer.deal(),))
    hand = Hand((dealer.deal(), dealer.deal()))

    episode: Episode[Hand, bool] = Episode()
    state = State(hand)
    while not hand.bust:
        action = player.decide(store, state)
        episode.append(state, action)
        if action == STAY:
            break
        hand = hand.add(dealer.deal())
        state = State(hand)

    house = dealer.hand if hand.bust else dealer.play()
    episode.set_terminal_reward(WIN if player_wins(hand, house) else LOSS)
    return RoundResult(episode=episode, player=hand, house=house)


@dataclass
class BlackjackStats:
    """Counters of one training generation."""
    rounds: int = 0
    wins: int = 0
    policy_actions: int = 0
    random_actions: int = 0

    @property
    def win_ratio(self) -> float:
        return self.wins / self.rounds if self.rounds else 0.0

    @property
    def on_policy_ratio(self) -> float:
        decisions = self.policy_actions + self.random_actions
        return self.policy_actions / decisions if decisions else 0.0

    def to_dict(self) -> dict:
        return {
            "rounds": self.rounds,
            "wins": self.wins,
            "win_ratio": self.win_ratio,
            "on_policy_ratio": self.on_policy_ratio,
        }


def train(
    learner,
    store: PolicyStore,
    config: LearningConfig,
    deck: Sequence[Card] = STANDARD_DECK,
    rng: Optional[random.Random] = None,
    generations: int = 1,
) -> List[BlackjackStats]:
    """
    Play and learn in generations.

    Each generation plays ``config.episodes`` rounds with the current
    store, then applies ``learner`` ``config.passes`` times to every
    round's episode. Reuse the same ``QProbabilistic`` instance across
    calls so its transition counts keep accumulating.

    Returns:
        Statistics for each generation
    """
    if generations < 1:
        raise ValueError(f"generations must be >= 1, got {generations}")
    rng = rng or random.Random(config.prng_seed)
    dealer = Dealer(deck, rng)
    player = Player(rng)

    history: List[BlackjackStats] = []
    for generation in range(generations):
        started = time.perf_counter()
        player.reset()
        stats = BlackjackStats()
        experience: List[Episode[Hand, bool]] = []

        for _ in range(config.episodes):
            result = play_round(dealer, player, store)
            experience.append(result.episode)
            stats.rounds += 1
            stats.wins += int(result.won)

        stats.policy_actions = player.policy_actions
        stats.random_actions = player.random_actions

        for episode in experience:
            for _ in range(config.passes):
                learner(episode, store)

        history.append(stats)
        logger.event(
            "generation",
            f"Won {stats.wins}/{stats.rounds} rounds, "
            f"on-policy ratio {stats.on_policy_ratio:.2f}",
            episode=generation,
            subsystem="blackjack",
            policies=len(store),
        )
        logger.latency(
            "generation",
            (time.perf_counter() - started) * 1000.0,
            subsystem="blackjack",
        )
    return history
