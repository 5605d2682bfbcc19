from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .cards import Card, Deck
from .models import Phase, Player, TableConfig

# Room is plain table state. Seats are tracked by player id; every index a
# client sees is derived from the ordered player list on demand.


@dataclass
class Room:
    room_id: str
    config: TableConfig
    players: List[Player] = field(default_factory=list)
    deck: Deck = field(default_factory=Deck)
    community: List[Card] = field(default_factory=list)
    pot: int = 0
    phase: Phase = Phase.WAITING
    current_bet: int = 0
    bets: Dict[str, int] = field(default_factory=dict)
    turn_id: Optional[str] = None
    anchor_id: Optional[str] = None
    dealer_id: Optional[str] = None
    small_blind_id: Optional[str] = None
    big_blind_id: Optional[str] = None
    hand_number: int = 0
    forfeited: int = 0

    # Seats -----------------------------------------------------------

    def find(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def seat_of(self, player_id: Optional[str]) -> Optional[int]:
        for idx, player in enumerate(self.players):
            if player.id == player_id:
                return idx
        return None

    @property
    def is_full(self) -> bool:
        return len(self.players) >= self.config.seats

    @property
    def is_empty(self) -> bool:
        return not self.players

    @property
    def turn_index(self) -> Optional[int]:
        return self.seat_of(self.turn_id)

    @property
    def dealer_index(self) -> Optional[int]:
        return self.seat_of(self.dealer_id)

    @property
    def current_player(self) -> Optional[Player]:
        return self.find(self.turn_id) if self.turn_id else None

    def active_players(self) -> List[Player]:
        return [player for player in self.players if not player.folded]

    def add_player(self, player: Player) -> None:
        self.players.append(player)

    def next_seat(
        self,
        start_id: Optional[str],
        accept: Callable[[Player], bool] = lambda player: not player.folded,
    ) -> Optional[Player]:
        """First accepted seat strictly after ``start_id``, wrapping around.

        With no start seat the scan begins at the top of the table.
        """
        if not self.players:
            return None
        start = self.seat_of(start_id)
        if start is None:
            start = -1
        count = len(self.players)
        for step in range(1, count + 1):
            player = self.players[(start + step) % count]
            if accept(player):
                return player
        return None

    def remove_player(self, player_id: str) -> Optional[Player]:
        position = self.seat_of(player_id)
        if position is None:
            return None
        player = self.players.pop(position)
        self.bets.pop(player_id, None)

        if not self.players:
            self.turn_id = self.anchor_id = self.dealer_id = None
            self.small_blind_id = self.big_blind_id = None
            return player

        # Dependent pointers are re-derived from the removed position.
        count = len(self.players)
        if self.turn_id == player_id:
            self.turn_id = None
            for step in range(count):
                candidate = self.players[(position + step) % count]
                if not candidate.folded:
                    self.turn_id = candidate.id
                    break
        if self.anchor_id == player_id:
            self.anchor_id = self.players[position % count].id
        if self.dealer_id == player_id:
            self.dealer_id = self.players[(position - 1) % count].id
        if self.small_blind_id == player_id:
            self.small_blind_id = None
        if self.big_blind_id == player_id:
            self.big_blind_id = None
        return player

    # Chips -----------------------------------------------------------

    def bet_of(self, player_id: str) -> int:
        return self.bets.get(player_id, 0)

    @property
    def total_pot(self) -> int:
        return self.pot + sum(self.bets.values())

    def table_chips(self) -> int:
        """Every chip the table accounts for; constant across a hand with fixed membership."""
        return self.total_pot + sum(player.chips for player in self.players) + self.forfeited

    # Views -----------------------------------------------------------

    def snapshot(self, viewer_id: Optional[str]) -> Dict[str, object]:
        players = []
        for player in self.players:
            view = player.public_view(reveal=player.id == viewer_id)
            view.update(
                {
                    "bet": self.bet_of(player.id),
                    "isDealer": player.id == self.dealer_id,
                    "isSmallBlind": player.id == self.small_blind_id,
                    "isBigBlind": player.id == self.big_blind_id,
                }
            )
            players.append(view)
        return {
            "roomId": self.room_id,
            "players": players,
            "community": [card.to_dict() for card in self.community],
            "pot": self.total_pot,
            "collected": self.pot,
            "phase": self.phase.value,
            "turnId": self.turn_id,
            "currentBet": self.current_bet,
            "handNumber": self.hand_number,
        }
