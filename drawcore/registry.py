from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .engine import Event, RoundEngine
from .errors import CapacityError, ProtocolError, StateInconsistency
from .models import Player, TableConfig
from .room import Room

LOGGER = logging.getLogger("draw_registry")

MAX_NAME_LENGTH = 32


@dataclass
class Departure:
    room: Room
    player: Player
    events: List[Event] = field(default_factory=list)
    destroyed: bool = False


class RoomRegistry:
    """Every live room in the process plus which room each connection sits in.

    The host owns one registry and hands it to whatever needs it; there is no
    module-level room table.
    """

    def __init__(self, config: TableConfig, engine: RoundEngine) -> None:
        self.config = config
        self.engine = engine
        self.rooms: Dict[str, Room] = {}
        self.memberships: Dict[str, str] = {}

    def get(self, room_id: str) -> Optional[Room]:
        return self.rooms.get(room_id)

    def room_of(self, conn_id: str) -> Optional[Room]:
        room_id = self.memberships.get(conn_id)
        return self.rooms.get(room_id) if room_id is not None else None

    def __contains__(self, room_id: object) -> bool:
        return room_id in self.rooms

    def __len__(self) -> int:
        return len(self.rooms)

    def join(self, room_id: str, name: Optional[str], conn_id: str) -> Tuple[Room, Player]:
        if not isinstance(room_id, str) or not room_id.strip():
            raise ProtocolError("roomId must be a non-empty string")
        room_id = room_id.strip()
        display = name.strip() if isinstance(name, str) else ""
        display = display[:MAX_NAME_LENGTH] or "Anon"

        current = self.memberships.get(conn_id)
        if current is not None and current != room_id:
            raise StateInconsistency(f"Already seated in room {current}")

        room = self.rooms.get(room_id)
        if room is None:
            room = Room(room_id=room_id, config=self.config)
            self.rooms[room_id] = room
            LOGGER.info("Room %s created", room_id)

        existing = room.find(conn_id)
        if existing is not None:
            return room, existing
        if room.is_full:
            raise CapacityError("Room is full")

        player = Player(id=conn_id, name=display, chips=self.config.starting_chips)
        if not room.phase.is_idle:
            # Late arrivals wait out the current hand.
            player.sit_out()
        room.add_player(player)
        self.memberships[conn_id] = room_id
        LOGGER.info("Player %s (%s) joined room %s (%s/%s seats)", display, conn_id, room_id, len(room.players), self.config.seats)
        return room, player

    def leave(self, conn_id: str) -> Optional[Departure]:
        room_id = self.memberships.pop(conn_id, None)
        if room_id is None:
            return None
        room = self.rooms.get(room_id)
        if room is None:
            return None
        player = room.find(conn_id)
        if player is None:
            return None

        events = self.engine.handle_departure(room, conn_id)
        departure = Departure(room=room, player=player, events=events)
        if room.is_empty:
            self.discard(room_id)
            departure.destroyed = True
        LOGGER.info("Player %s left room %s%s", player.name, room_id, " (room closed)" if departure.destroyed else "")
        return departure

    def discard(self, room_id: str) -> None:
        room = self.rooms.pop(room_id, None)
        if room is None:
            return
        for player in room.players:
            self.memberships.pop(player.id, None)
