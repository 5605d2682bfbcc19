from drawcore.models import ActionType, Phase

from .helpers import act, create_room, discard_all, event_types, settle_betting


def test_leaving_on_own_turn_passes_the_turn():
    engine, room = create_room(3)
    engine.start_hand(room, seed=41)
    assert room.turn_id == "p0"

    events = engine.handle_departure(room, "p0")
    assert event_types(events) == ["FOLD", "LEAVE"]
    assert [p.id for p in room.players] == ["p1", "p2"]
    assert room.turn_id == "p1"
    # The departed dealer's seat resolves to the seat before it.
    assert room.dealer_id == "p2"
    assert room.phase == Phase.PRE_FLOP_BETTING


def test_departed_contribution_stays_in_pot_and_round_still_closes():
    engine, room = create_room(3)
    engine.start_hand(room, seed=42)
    leaver_chips = room.find("p2").chips
    total = room.table_chips()

    engine.handle_departure(room, "p2")
    assert room.pot == 2
    assert room.turn_id == "p0"
    assert room.table_chips() == total - leaver_chips

    act(engine, room, ActionType.CALL)
    act(engine, room, ActionType.CALL)
    assert room.phase == Phase.FLOP_DISCARD
    assert room.pot == 6


def test_departure_leaving_one_player_is_a_fold_out():
    engine, room = create_room(2)
    engine.start_hand(room, seed=43)

    events = engine.handle_departure(room, "p1")
    assert event_types(events) == ["FOLD", "FOLD_OUT", "HAND_END", "LEAVE"]
    assert room.phase == Phase.HAND_OVER
    assert room.find("p0").chips == 201


def test_departure_completes_pending_discard_phase():
    engine, room = create_room(3)
    engine.start_hand(room, seed=44)
    settle_betting(engine, room)
    engine.apply_action(room, "p0", ActionType.DISCARD, discard_indices=[0])
    engine.apply_action(room, "p1", ActionType.DISCARD, discard_indices=[0])

    engine.handle_departure(room, "p2")
    assert room.phase == Phase.FLOP_BETTING
    assert room.turn_id == "p1"


def test_departed_anchor_hands_closure_to_next_seat():
    engine, room = create_room(3)
    engine.start_hand(room, seed=45)
    settle_betting(engine, room)
    discard_all(engine, room)
    assert room.anchor_id == "p1"

    act(engine, room, ActionType.CHECK)
    engine.handle_departure(room, "p1")
    assert room.anchor_id == "p2"
    assert room.turn_id == "p2"

    act(engine, room, ActionType.CHECK)
    assert room.phase == Phase.FLOP_BETTING
    assert room.turn_id == "p0"
    act(engine, room, ActionType.CHECK)
    assert room.phase == Phase.TURN_DISCARD


def test_departure_between_hands_only_removes_the_seat():
    engine, room = create_room(3)
    events = engine.handle_departure(room, "p1")
    assert event_types(events) == ["LEAVE"]
    assert [p.id for p in room.players] == ["p0", "p2"]
    assert engine.handle_departure(room, "ghost") == []


def test_next_hand_after_dealer_leaves_rotates_to_successor():
    engine, room = create_room(3)
    engine.start_hand(room, seed=46)
    act(engine, room, ActionType.FOLD)
    act(engine, room, ActionType.FOLD)
    engine.handle_departure(room, "p0")

    assert room.dealer_id == "p2"

    engine.start_hand(room, seed=47)
    assert room.dealer_id == "p1"
    # Heads-up the dealer posts the big blind and the other seat acts first.
    assert room.big_blind_id == "p1"
    assert room.turn_id == "p2"
