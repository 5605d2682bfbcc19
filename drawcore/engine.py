from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

from .cards import cards_to_labels, new_deck
from .errors import BettingViolation, ProtocolError, StateInconsistency, TurnViolation
from .evaluator import HandEvaluator
from .models import COMMUNITY_DEALS, ActionType, Phase, Player, TableConfig, next_phase
from .room import Room

# RoundEngine owns the rules, not the tables: every call receives the Room it
# mutates. No networking lives here, only phases, chip accounting and turn
# order. Each mutating call returns the events it produced so the host can
# broadcast them.

Event = Dict[str, object]


class RoundEngine:
    """Betting, discard and showdown rules for the five-card draw-and-reveal game."""

    def __init__(self, config: TableConfig, evaluator: Optional[HandEvaluator] = None) -> None:
        self.config = config
        self.evaluator = evaluator or HandEvaluator()

    # Hand lifecycle --------------------------------------------------

    def can_start_hand(self, room: Room) -> bool:
        funded = [player for player in room.players if player.chips > 0]
        return room.phase.is_idle and len(funded) >= 2

    def start_hand(self, room: Room, seed: Optional[int] = None) -> List[Event]:
        if not room.phase.is_idle:
            raise StateInconsistency("Hand already in progress")
        if not self.can_start_hand(room):
            raise StateInconsistency("Not enough players with chips to start a hand")

        room.deck = new_deck(seed)
        room.community.clear()
        room.pot = 0
        room.bets.clear()
        room.current_bet = 0
        room.turn_id = room.anchor_id = None
        room.hand_number += 1

        for player in room.players:
            if player.chips > 0:
                player.reset_for_hand()
            else:
                player.sit_out()

        dealer = room.next_seat(room.dealer_id)
        assert dealer is not None
        room.dealer_id = dealer.id

        dealt = self._rotation_after(room, dealer.id)
        for player in dealt:
            player.hand.extend(room.deck.draw(self.config.hand_size))

        events: List[Event] = [
            {
                "ev": "HAND_START",
                "hand": room.hand_number,
                "dealer": dealer.id,
                "players": [player.id for player in dealt],
            }
        ]
        room.phase = Phase.BLIND_POST
        events.extend(self._post_blinds(room))
        room.phase = next_phase(room.phase)
        events.append({"ev": "BETTING_OPEN", "phase": room.phase.value, "turn": room.turn_id})
        return events

    def _post_blinds(self, room: Room) -> List[Event]:
        sb_player = room.next_seat(room.dealer_id)
        assert sb_player is not None
        bb_player = room.next_seat(sb_player.id)
        assert bb_player is not None

        self._commit(room, sb_player, min(sb_player.chips, self.config.sb))
        self._commit(room, bb_player, min(bb_player.chips, self.config.bb))
        room.small_blind_id = sb_player.id
        room.big_blind_id = bb_player.id
        room.current_bet = max(room.bet_of(sb_player.id), room.bet_of(bb_player.id))

        # Pre-flop the round closes when action returns to the seat after the big blind.
        first = room.next_seat(bb_player.id)
        assert first is not None
        room.turn_id = room.anchor_id = first.id
        return [
            {
                "ev": "POST_BLINDS",
                "small_blind": sb_player.id,
                "big_blind": bb_player.id,
                "sb": room.bet_of(sb_player.id),
                "bb": room.bet_of(bb_player.id),
            }
        ]

    def _rotation_after(self, room: Room, start_id: str) -> List[Player]:
        start = room.seat_of(start_id)
        assert start is not None
        count = len(room.players)
        ordered = [room.players[(start + step) % count] for step in range(1, count + 1)]
        return [player for player in ordered if not player.folded]

    def _commit(self, room: Room, player: Player, amount: int) -> None:
        player.chips -= amount
        room.bets[player.id] = room.bet_of(player.id) + amount

    # Action handling -------------------------------------------------

    def legal_actions(
        self, room: Room, player_id: str
    ) -> Tuple[List[ActionType], Optional[int], Optional[int], Optional[int]]:
        if not room.phase.is_betting:
            raise StateInconsistency("Betting is closed")
        player = room.find(player_id)
        if player is None or player.folded:
            raise StateInconsistency("Seat not active")

        legal: List[ActionType] = [ActionType.FOLD]
        to_call = room.current_bet - room.bet_of(player_id)
        if to_call <= 0:
            legal.append(ActionType.CHECK)
        elif player.chips >= to_call:
            legal.append(ActionType.CALL)

        min_raise_to: Optional[int] = room.current_bet + 1
        max_raise_to: Optional[int] = player.chips + room.bet_of(player_id)
        if max_raise_to >= min_raise_to:
            legal.append(ActionType.RAISE)
        else:
            min_raise_to = max_raise_to = None
        return legal, (to_call if to_call > 0 else None), min_raise_to, max_raise_to

    def prompt_payload(self, room: Room) -> Optional[Dict[str, object]]:
        if not room.phase.is_betting or room.turn_id is None:
            return None
        legal, call_amount, min_raise_to, max_raise_to = self.legal_actions(room, room.turn_id)
        return {
            "phase": room.phase.value,
            "currentBet": room.current_bet,
            "legal": [action.value for action in legal],
            "callAmount": call_amount,
            "minRaiseTo": min_raise_to,
            "maxRaiseTo": max_raise_to,
        }

    def apply_action(
        self,
        room: Room,
        player_id: str,
        action: ActionType,
        amount: Optional[int] = None,
        discard_indices: Optional[Sequence[int]] = None,
    ) -> List[Event]:
        player = room.find(player_id)
        if player is None:
            raise StateInconsistency("You are not seated in this room")
        try:
            action = ActionType(action)
        except ValueError:
            raise ProtocolError("Unknown action") from None

        if room.phase.is_discard:
            # Discards are simultaneous; there is no turn to check.
            if player.folded:
                raise StateInconsistency("You are folded")
            if action == ActionType.DISCARD:
                return self._discard(room, player, discard_indices)
            if action == ActionType.FOLD:
                return self._fold(room, player, advance=False)
            raise StateInconsistency("You must discard a card now")

        if not room.phase.is_betting:
            raise StateInconsistency("No betting round in progress")
        if action == ActionType.DISCARD:
            raise StateInconsistency("Discards are only allowed during a discard phase")
        if player.folded:
            raise StateInconsistency("You are folded")
        if room.turn_id != player.id:
            raise TurnViolation("Not your turn")

        bet = room.bet_of(player.id)
        if action == ActionType.FOLD:
            return self._fold(room, player, advance=True)

        events: List[Event] = []
        if action == ActionType.CHECK:
            if bet < room.current_bet:
                raise BettingViolation("Cannot check, you must call or raise")
            events.append({"ev": "CHECK", "player": player.id})
        elif action == ActionType.CALL:
            to_call = room.current_bet - bet
            if to_call <= 0:
                raise BettingViolation("Nothing to call")
            if player.chips < to_call:
                raise BettingViolation("Not enough chips to call")
            self._commit(room, player, to_call)
            events.append({"ev": "CALL", "player": player.id, "amount": to_call})
        elif action == ActionType.RAISE:
            if not isinstance(amount, int) or isinstance(amount, bool):
                raise ProtocolError("Raise requires an integer amount")
            if amount <= room.current_bet:
                raise BettingViolation("Raise must be higher than current bet")
            to_put = amount - bet
            if player.chips < to_put:
                raise BettingViolation("Not enough chips to raise")
            self._commit(room, player, to_put)
            room.current_bet = amount
            successor = room.next_seat(player.id)
            assert successor is not None
            room.anchor_id = successor.id
            events.append({"ev": "RAISE", "player": player.id, "amount": amount, "added": to_put})
        else:
            raise ProtocolError(f"Unsupported action {action.value}")

        events.extend(self._advance_turn(room, player))
        return events

    def handle_departure(self, room: Room, player_id: str) -> List[Event]:
        """Remove a seat; mid-hand this counts as a fold for chip accounting."""
        player = room.find(player_id)
        if player is None:
            return []
        events: List[Event] = []
        if not room.phase.is_idle and not player.folded:
            events.extend(self._fold(room, player, advance=room.turn_id == player.id))
        room.remove_player(player_id)
        events.append({"ev": "LEAVE", "player": player.id, "name": player.name})
        return events

    def _fold(self, room: Room, player: Player, advance: bool) -> List[Event]:
        player.folded = True
        # Popping the entry guarantees the contribution reaches the pot once.
        forfeited = room.bets.pop(player.id, 0)
        room.pot += forfeited
        events: List[Event] = [{"ev": "FOLD", "player": player.id, "forfeited": forfeited}]

        active = room.active_players()
        if len(active) == 1:
            events.extend(self._fold_out(room, active[0]))
        elif room.phase.is_discard:
            events.extend(self._check_discards_complete(room))
        elif advance:
            events.extend(self._advance_turn(room, player))
        return events

    # Turn order ------------------------------------------------------

    def _advance_turn(self, room: Room, actor: Player) -> List[Event]:
        active = room.active_players()
        if len(active) == 1:
            return self._fold_out(room, active[0])

        start = room.seat_of(actor.id)
        assert start is not None
        count = len(room.players)
        reached_anchor = False
        landing: Optional[Player] = None
        for step in range(1, count + 1):
            seat = room.players[(start + step) % count]
            # A folded anchor still counts once the scan passes over it.
            if seat.id == room.anchor_id:
                reached_anchor = True
            if not seat.folded:
                landing = seat
                break
        assert landing is not None
        room.turn_id = landing.id

        if reached_anchor and self._bets_settled(room):
            return self._close_round(room)
        return []

    def _bets_settled(self, room: Room) -> bool:
        return all(room.bet_of(player.id) == room.current_bet for player in room.active_players())

    def _close_round(self, room: Room) -> List[Event]:
        closed = room.phase
        room.pot += sum(room.bets.values())
        room.bets.clear()
        room.current_bet = 0
        room.turn_id = room.anchor_id = None
        events: List[Event] = [{"ev": "ROUND_CLOSED", "phase": closed.value, "pot": room.pot}]
        events.extend(self._advance_phase(room))
        return events

    # Phases ----------------------------------------------------------

    def _advance_phase(self, room: Room) -> List[Event]:
        events: List[Event] = []
        while True:
            room.phase = next_phase(room.phase)
            if room.phase.is_deal:
                # Deal phases wait for nobody; fall straight through to the discard.
                cards = room.deck.draw(COMMUNITY_DEALS[room.phase])
                room.community.extend(cards)
                events.append({"ev": "DEAL", "phase": room.phase.value, "cards": cards_to_labels(cards)})
                continue
            if room.phase.is_discard:
                for player in room.players:
                    player.discarded = False
                events.append({"ev": "DISCARD_OPEN", "phase": room.phase.value})
                return events
            if room.phase.is_betting:
                events.extend(self._open_betting(room))
                return events
            events.extend(self._showdown(room))
            return events

    def _open_betting(self, room: Room) -> List[Event]:
        room.bets.clear()
        room.current_bet = 0
        first = room.next_seat(room.dealer_id)
        assert first is not None
        room.turn_id = room.anchor_id = first.id
        return [{"ev": "BETTING_OPEN", "phase": room.phase.value, "turn": first.id}]

    def _discard(self, room: Room, player: Player, indices: Optional[Sequence[int]]) -> List[Event]:
        if player.discarded:
            raise StateInconsistency("You already discarded this round")
        slots = self._validate_discards(player, indices)
        for slot in slots:
            player.hand[slot] = room.deck.draw(1)[0]
        player.discarded = True
        events: List[Event] = [{"ev": "DISCARD", "player": player.id, "count": len(slots)}]
        events.extend(self._check_discards_complete(room))
        return events

    def _validate_discards(self, player: Player, indices: Optional[Sequence[int]]) -> List[int]:
        required = self.config.discards_per_phase
        if not isinstance(indices, (list, tuple)) or len(indices) != required:
            noun = "card" if required == 1 else "cards"
            raise ProtocolError(f"Must discard exactly {'one' if required == 1 else required} {noun}.")
        slots: List[int] = []
        for idx in indices:
            if not isinstance(idx, int) or isinstance(idx, bool):
                raise ProtocolError("Discard indices must be integers")
            if idx < 0 or idx >= len(player.hand):
                raise ProtocolError(f"Discard index {idx} is out of range")
            if idx in slots:
                raise ProtocolError("Discard indices must be distinct")
            slots.append(idx)
        return slots

    def _check_discards_complete(self, room: Room) -> List[Event]:
        if not all(player.discarded for player in room.active_players()):
            return []
        for player in room.players:
            player.discarded = False
        events: List[Event] = [{"ev": "DISCARDS_DONE", "phase": room.phase.value}]
        events.extend(self._advance_phase(room))
        return events

    # Hand resolution -------------------------------------------------

    def _showdown(self, room: Room) -> List[Event]:
        room.turn_id = room.anchor_id = None
        room.pot += sum(room.bets.values())
        room.bets.clear()

        contenders = room.active_players()
        scores = {player.id: self.evaluator.rank(player.hand + room.community) for player in contenders}
        winners = list(self.evaluator.winners(scores))
        share, remainder = divmod(room.pot, len(winners))
        for player in contenders:
            if player.id in winners:
                player.chips += share
        room.forfeited += remainder

        describe = getattr(self.evaluator, "describe", None)
        hands = []
        for player in contenders:
            entry: Dict[str, object] = {
                "player": player.id,
                "name": player.name,
                "hand": [card.to_dict() for card in player.hand],
            }
            if describe is not None:
                entry["rank"] = describe(scores[player.id])
            hands.append(entry)

        events: List[Event] = [
            {
                "ev": "SHOWDOWN",
                "pot": room.pot,
                "community": [card.to_dict() for card in room.community],
                "hands": hands,
                "winners": winners,
                "share": share,
                "forfeited": remainder,
            }
        ]
        room.pot = 0
        events.extend(self._finish_hand(room, reason="showdown", winners=winners))
        return events

    def _fold_out(self, room: Room, winner: Player) -> List[Event]:
        amount = room.total_pot
        winner.chips += amount
        room.pot = 0
        room.bets.clear()
        room.current_bet = 0
        events: List[Event] = [{"ev": "FOLD_OUT", "winner": winner.id, "name": winner.name, "amount": amount}]
        events.extend(self._finish_hand(room, reason="fold_out", winners=[winner.id]))
        return events

    def _finish_hand(self, room: Room, reason: str, winners: List[str]) -> List[Event]:
        room.phase = Phase.HAND_OVER
        room.turn_id = room.anchor_id = None
        for player in room.players:
            player.discarded = False
        return [
            {
                "ev": "HAND_END",
                "hand": room.hand_number,
                "reason": reason,
                "winners": winners,
                "next_hand_ms": self.config.next_hand_delay_ms,
            }
        ]
