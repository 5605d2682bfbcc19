from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .cards import Card


class Phase(str, Enum):
    WAITING = "waiting"
    BLIND_POST = "blind-post"
    PRE_FLOP_BETTING = "pre-flop-betting"
    FLOP_DEAL = "flop-deal"
    FLOP_DISCARD = "flop-discard"
    FLOP_BETTING = "flop-betting"
    TURN_DEAL = "turn-deal"
    TURN_DISCARD = "turn-discard"
    TURN_BETTING = "turn-betting"
    RIVER_DEAL = "river-deal"
    RIVER_DISCARD = "river-discard"
    RIVER_BETTING = "river-betting"
    SHOWDOWN = "showdown"
    HAND_OVER = "hand-over"

    @property
    def is_betting(self) -> bool:
        return self.value.endswith("-betting")

    @property
    def is_discard(self) -> bool:
        return self.value.endswith("-discard")

    @property
    def is_deal(self) -> bool:
        return self.value.endswith("-deal")

    @property
    def is_idle(self) -> bool:
        return self in (Phase.WAITING, Phase.HAND_OVER)


# One hand walks this list front to back; nothing ever moves backwards.
HAND_SEQUENCE = [
    Phase.BLIND_POST,
    Phase.PRE_FLOP_BETTING,
    Phase.FLOP_DEAL,
    Phase.FLOP_DISCARD,
    Phase.FLOP_BETTING,
    Phase.TURN_DEAL,
    Phase.TURN_DISCARD,
    Phase.TURN_BETTING,
    Phase.RIVER_DEAL,
    Phase.RIVER_DISCARD,
    Phase.RIVER_BETTING,
    Phase.SHOWDOWN,
]

COMMUNITY_DEALS = {
    Phase.FLOP_DEAL: 3,
    Phase.TURN_DEAL: 1,
    Phase.RIVER_DEAL: 1,
}


def next_phase(phase: Phase) -> Phase:
    idx = HAND_SEQUENCE.index(phase)
    if idx + 1 >= len(HAND_SEQUENCE):
        return Phase.HAND_OVER
    return HAND_SEQUENCE[idx + 1]


class ActionType(str, Enum):
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    RAISE = "raise"
    DISCARD = "discard"


@dataclass
class TableConfig:
    seats: int = 5
    starting_chips: int = 200
    sb: int = 1
    bb: int = 2
    hand_size: int = 5
    discards_per_phase: int = 1
    next_hand_delay_ms: int = 5_000
    default_room: str = "iowa-room"


@dataclass
class Player:
    id: str
    name: str
    chips: int
    hand: List[Card] = field(default_factory=list)
    folded: bool = False
    discarded: bool = False

    def reset_for_hand(self) -> None:
        self.hand.clear()
        self.folded = False
        self.discarded = False

    def sit_out(self) -> None:
        self.hand.clear()
        self.folded = True
        self.discarded = False

    def public_view(self, reveal: bool) -> Dict[str, object]:
        hand: List[Optional[Dict[str, str]]]
        if reveal:
            hand = [card.to_dict() for card in self.hand]
        else:
            hand = [None] * len(self.hand)
        return {
            "id": self.id,
            "name": self.name,
            "chips": self.chips,
            "folded": self.folded,
            "discarded": self.discarded,
            "hand": hand,
        }
