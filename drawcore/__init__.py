"""Rules engine for five-card draw-and-reveal poker. No networking lives here."""

from .cards import Card, Deck, RANKS, SUITS, deal, new_deck
from .engine import RoundEngine
from .errors import (
    BettingViolation,
    CapacityError,
    GameError,
    ProtocolError,
    StateInconsistency,
    TurnViolation,
)
from .evaluator import HandEvaluator, describe_rank, evaluate_best, parse_cards
from .models import ActionType, Phase, Player, TableConfig
from .registry import Departure, RoomRegistry
from .room import Room

__all__ = [
    "Card",
    "Deck",
    "RANKS",
    "SUITS",
    "deal",
    "new_deck",
    "RoundEngine",
    "GameError",
    "ProtocolError",
    "TurnViolation",
    "BettingViolation",
    "CapacityError",
    "StateInconsistency",
    "HandEvaluator",
    "describe_rank",
    "evaluate_best",
    "parse_cards",
    "ActionType",
    "Phase",
    "Player",
    "TableConfig",
    "Departure",
    "RoomRegistry",
    "Room",
]
