from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from drawcore.engine import RoundEngine
from drawcore.models import ActionType, Player, TableConfig
from drawcore.room import Room


def create_room(
    players: int = 2,
    *,
    starting_chips: int = 200,
    sb: int = 1,
    bb: int = 2,
    seats: int = 5,
    engine_cls=RoundEngine,
    evaluator=None,
) -> Tuple[RoundEngine, Room]:
    """Build an engine plus a room seated with ``players`` players named p0, p1, ..."""
    config = TableConfig(seats=seats, starting_chips=starting_chips, sb=sb, bb=bb)
    engine = engine_cls(config, evaluator)
    room = Room(room_id="test-room", config=config)
    for idx in range(players):
        room.add_player(Player(id=f"p{idx}", name=f"Player{idx}", chips=starting_chips))
    return engine, room


def act(engine: RoundEngine, room: Room, action: ActionType, amount: Optional[int] = None) -> List[Dict[str, object]]:
    """Apply ``action`` for whoever holds the turn."""
    assert room.turn_id is not None
    return engine.apply_action(room, room.turn_id, action, amount)


def settle_betting(engine: RoundEngine, room: Room) -> List[Dict[str, object]]:
    """Check or call until the current betting round closes."""
    events: List[Dict[str, object]] = []
    phase = room.phase
    while room.phase == phase and room.phase.is_betting:
        actor = room.turn_id
        assert actor is not None
        legal, *_ = engine.legal_actions(room, actor)
        if ActionType.CHECK in legal:
            events.extend(engine.apply_action(room, actor, ActionType.CHECK))
        else:
            events.extend(engine.apply_action(room, actor, ActionType.CALL))
    return events


def discard_all(engine: RoundEngine, room: Room, slot: int = 0) -> List[Dict[str, object]]:
    events: List[Dict[str, object]] = []
    phase = room.phase
    for player in list(room.active_players()):
        if room.phase != phase:
            break
        if not player.discarded:
            events.extend(engine.apply_action(room, player.id, ActionType.DISCARD, discard_indices=[slot]))
    return events


def auto_complete_hand(engine: RoundEngine, room: Room) -> List[Dict[str, object]]:
    """Play passively (check/call, discard slot 0) until the hand is over."""
    events: List[Dict[str, object]] = []
    while not room.phase.is_idle:
        if room.phase.is_discard:
            events.extend(discard_all(engine, room))
        else:
            events.extend(settle_betting(engine, room))
    return events


def event_types(events: List[Dict[str, object]]) -> List[object]:
    return [event["ev"] for event in events]
