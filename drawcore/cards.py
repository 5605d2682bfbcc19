from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Optional

RANKS = ("2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K", "A")
SUITS = ("♠", "♥", "♦", "♣")

_SYSTEM_RANDOM = random.SystemRandom()


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    def __post_init__(self) -> None:
        if self.rank not in RANKS:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def label(self) -> str:
        return f"{self.rank}{self.suit}"

    def to_dict(self) -> Dict[str, str]:
        return {"rank": self.rank, "suit": self.suit}


class Deck:
    """Cards are consumed from the front; a drawn card never comes back within a hand."""

    def __init__(self, cards: Optional[List[Card]] = None) -> None:
        self.cards: List[Card] = list(cards) if cards is not None else []

    @classmethod
    def create(cls) -> "Deck":
        return cls([Card(rank, suit) for suit in SUITS for rank in RANKS])

    def shuffle(self, rng: Optional[random.Random] = None) -> None:
        # random.shuffle is Fisher-Yates; SystemRandom can reach every ordering.
        (rng or _SYSTEM_RANDOM).shuffle(self.cards)

    def draw(self, count: int) -> List[Card]:
        return deal(self.cards, count)

    def __len__(self) -> int:
        return len(self.cards)


def new_deck(seed: Optional[int] = None) -> Deck:
    deck = Deck.create()
    deck.shuffle(random.Random(seed) if seed is not None else None)
    return deck


def deal(cards: List[Card], count: int) -> List[Card]:
    if count < 0:
        raise ValueError("Cannot draw a negative number of cards")
    if len(cards) < count:
        raise ValueError("Not enough cards left in deck")
    drawn = cards[:count]
    del cards[:count]
    return drawn


def cards_to_labels(cards: List[Card]) -> List[str]:
    return [card.label for card in cards]


def parse_label(label: str) -> Card:
    if len(label) < 2:
        raise ValueError(f"Invalid card label: {label}")
    return Card(label[:-1], label[-1])
