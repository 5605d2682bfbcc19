from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import uuid
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, List, Optional

import websockets
from websockets.asyncio.server import ServerConnection, serve

from drawcore.engine import Event, RoundEngine
from drawcore.errors import CapacityError, GameError, ProtocolError, StateInconsistency
from drawcore.evaluator import HandEvaluator
from drawcore.models import ActionType, TableConfig
from drawcore.registry import RoomRegistry
from drawcore.room import Room

from .transport import Transport

LOGGER = logging.getLogger("draw_host")

# TableServer glues the rules engine to WebSocket clients. Every network
# concern lives here; RoundEngine and RoomRegistry stay pure.


@dataclass
class Outbound:
    event: str
    payload: Dict[str, object]
    conn_id: Optional[str] = None
    room_id: Optional[str] = None


@dataclass
class RoomChannel:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    next_hand: Optional[asyncio.Task] = None


class TableServer:
    def __init__(self, config: TableConfig, evaluator: Optional[HandEvaluator] = None) -> None:
        self.config = config
        self.engine = RoundEngine(config, evaluator)
        self.registry = RoomRegistry(config, self.engine)
        self.transport = Transport()
        self.channels: Dict[str, RoomChannel] = {}

    async def start(self, host: str = "0.0.0.0", port: int = 3000) -> None:
        async with serve(self._handle_connection, host, port):
            LOGGER.info("Table server listening on %s:%s", host, port)
            await asyncio.Future()

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        conn_id = uuid.uuid4().hex
        self.transport.register(conn_id, websocket)
        LOGGER.info("Player connected: %s", conn_id)
        try:
            async for raw in websocket:
                await self._on_message(conn_id, raw)
        except websockets.ConnectionClosed:
            pass
        finally:
            await self._on_disconnect(conn_id)
            self.transport.unregister(conn_id)
            LOGGER.info("Player disconnected: %s", conn_id)

    async def _on_message(self, conn_id: str, raw: object) -> None:
        message = self._decode(raw)
        msg_type = message.get("type")
        if msg_type == "joinRoom":
            await self._handle_join(conn_id, message)
        elif msg_type == "playerAction":
            await self._handle_action(conn_id, message)
        else:
            await self._send_error(conn_id, code="UNKNOWN_TYPE", msg="Unsupported message type")

    # Room locking ----------------------------------------------------

    @contextlib.asynccontextmanager
    async def _room_lock(self, room_id: str) -> AsyncIterator[RoomChannel]:
        # A channel may be torn down while we wait on it; retry on the live one.
        while True:
            channel = self.channels.setdefault(room_id, RoomChannel())
            await channel.lock.acquire()
            if self.channels.get(room_id) is channel:
                break
            channel.lock.release()
        try:
            yield channel
        finally:
            channel.lock.release()
            if room_id not in self.registry:
                self._close_channel(room_id, channel)

    def _close_channel(self, room_id: str, channel: RoomChannel) -> None:
        if self.channels.get(room_id) is not channel:
            return
        del self.channels[room_id]
        task = channel.next_hand
        channel.next_hand = None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            LOGGER.info("Room %s closed; pending hand cancelled", room_id)

    # Handlers --------------------------------------------------------

    async def _handle_join(self, conn_id: str, message: Dict[str, object]) -> None:
        room_id = message.get("roomId") or self.config.default_room
        if not isinstance(room_id, str) or not room_id.strip():
            await self._send_error(conn_id, code=ProtocolError.code, msg="roomId must be a string")
            return
        room_id = room_id.strip()
        name = message.get("name")

        async with self._room_lock(room_id) as channel:
            try:
                room, player = self.registry.join(room_id, name if isinstance(name, str) else None, conn_id)
            except CapacityError:
                LOGGER.info("Join rejected for %s: room %s is full", conn_id, room_id)
                outbox = [Outbound("roomFull", {"roomId": room_id}, conn_id=conn_id)]
            except GameError as exc:
                LOGGER.warning("Join rejected conn=%s room=%s reason=%s", conn_id, room_id, exc.msg)
                outbox = [self._error(conn_id, exc)]
            else:
                self.transport.join_channel(conn_id, room.room_id)
                outbox = [Outbound("status", {"msg": f"Welcome, {player.name}! Waiting for players..."}, conn_id=conn_id)]
                events = self._maybe_start_hand_locked(room, channel)
                outbox.extend(self._compose_locked(room, channel, events))

        await self._flush(outbox)

    async def _handle_action(self, conn_id: str, message: Dict[str, object]) -> None:
        room = self.registry.room_of(conn_id)
        if room is None:
            await self._send_error(conn_id, code=StateInconsistency.code, msg="Join a room first")
            return
        claimed = message.get("roomId")
        if claimed is not None and claimed != room.room_id:
            await self._send_error(conn_id, code=ProtocolError.code, msg=f"Not seated in room {claimed}")
            return

        async with self._room_lock(room.room_id) as channel:
            if self.registry.room_of(conn_id) is not room:
                return
            try:
                action = self._parse_action(message)
                events = self.engine.apply_action(
                    room,
                    conn_id,
                    action,
                    self._parse_amount(message.get("amount")),
                    message.get("discardIndices"),
                )
            except GameError as exc:
                LOGGER.warning(
                    "Rejected action room=%s conn=%s action=%s amount=%s reason=%s",
                    room.room_id,
                    conn_id,
                    message.get("action"),
                    message.get("amount"),
                    exc.msg,
                )
                outbox = [self._error(conn_id, exc)]
            else:
                LOGGER.debug(
                    "Applied action room=%s conn=%s action=%s phase=%s",
                    room.room_id,
                    conn_id,
                    action.value,
                    room.phase.value,
                )
                outbox = self._compose_locked(room, channel, events)

        await self._flush(outbox)

    async def _on_disconnect(self, conn_id: str) -> None:
        room = self.registry.room_of(conn_id)
        if room is None:
            return
        outbox: List[Outbound] = []
        async with self._room_lock(room.room_id) as channel:
            departure = self.registry.leave(conn_id)
            self.transport.leave_channel(conn_id)
            if departure is not None and not departure.destroyed:
                outbox = self._compose_locked(room, channel, departure.events)
        await self._flush(outbox)

    # Hand pacing -----------------------------------------------------

    def _maybe_start_hand_locked(self, room: Room, channel: RoomChannel) -> List[Event]:
        if channel.next_hand is not None or not self.engine.can_start_hand(room):
            return []
        events = self.engine.start_hand(room)
        LOGGER.info("Room %s: hand %s started with %s players", room.room_id, room.hand_number, len(room.active_players()))
        return events

    def _schedule_next_hand_locked(self, room: Room, channel: RoomChannel) -> None:
        if channel.next_hand is not None:
            return
        channel.next_hand = asyncio.create_task(self._next_hand_after_delay(room.room_id, room))

    async def _next_hand_after_delay(self, room_id: str, room: Room) -> None:
        await asyncio.sleep(self.config.next_hand_delay_ms / 1000)
        outbox: List[Outbound] = []
        async with self._room_lock(room_id) as channel:
            if channel.next_hand is asyncio.current_task():
                channel.next_hand = None
            if self.registry.get(room_id) is room:
                events = self._maybe_start_hand_locked(room, channel)
                if events:
                    outbox = self._compose_locked(room, channel, events)
                else:
                    outbox = [Outbound("status", {"msg": "Waiting for players..."}, room_id=room_id)]
        await self._flush(outbox)

    # Outbound --------------------------------------------------------

    def _compose_locked(self, room: Room, channel: RoomChannel, events: List[Event]) -> List[Outbound]:
        """Build every message for one mutation from the state as it stands now."""
        outbox: List[Outbound] = []
        for event in events:
            kind = event["ev"]
            if kind == "SHOWDOWN":
                payload = {key: value for key, value in event.items() if key != "ev"}
                outbox.append(Outbound("showdown", payload, room_id=room.room_id))
            elif kind == "FOLD_OUT":
                outbox.append(Outbound("status", {"msg": "You win! Others folded."}, conn_id=str(event["winner"])))
                outbox.append(
                    Outbound("status", {"msg": f"{event['name']} wins {event['amount']} chips."}, room_id=room.room_id)
                )
            elif kind == "DISCARD_OPEN":
                outbox.append(Outbound("status", {"msg": "Discard a card."}, room_id=room.room_id))
            elif kind == "DISCARD":
                outbox.append(
                    Outbound("status", {"msg": "Discard done. Waiting for others..."}, conn_id=str(event["player"]))
                )
            elif kind == "LEAVE":
                outbox.append(Outbound("status", {"msg": f"{event['name']} left the table."}, room_id=room.room_id))
            elif kind == "HAND_END":
                LOGGER.info("Room %s: hand %s finished (%s)", room.room_id, event["hand"], event["reason"])
                self._schedule_next_hand_locked(room, channel)

        for player in room.players:
            outbox.append(Outbound("gameState", room.snapshot(player.id), conn_id=player.id))

        prompt = self.engine.prompt_payload(room)
        actor = room.current_player
        if prompt is not None and actor is not None:
            outbox.append(Outbound("status", {"msg": f"Player {actor.name}, it's your turn."}, room_id=room.room_id))
            outbox.append(Outbound("yourTurn", prompt, conn_id=actor.id))
        return outbox

    async def _flush(self, outbox: List[Outbound]) -> None:
        for message in outbox:
            if message.conn_id is not None:
                await self.transport.send_to(message.conn_id, message.event, message.payload)
            elif message.room_id is not None:
                await self.transport.broadcast(message.room_id, message.event, message.payload)

    def _error(self, conn_id: str, exc: GameError) -> Outbound:
        return Outbound("errorMessage", {"code": exc.code, "msg": exc.msg}, conn_id=conn_id)

    async def _send_error(self, conn_id: str, code: str, msg: str) -> None:
        await self.transport.send_to(conn_id, "errorMessage", {"code": code, "msg": msg})

    # Parsing ---------------------------------------------------------

    def _parse_action(self, message: Dict[str, object]) -> ActionType:
        action_name = message.get("action")
        if not isinstance(action_name, str):
            raise ProtocolError("action required")
        try:
            return ActionType(action_name.strip().lower())
        except ValueError:
            raise ProtocolError("Unknown action.") from None

    def _parse_amount(self, amount: object) -> Optional[int]:
        if isinstance(amount, str) and amount.strip().isdigit():
            return int(amount.strip())
        return amount  # type: ignore[return-value]

    def _decode(self, raw: object) -> Dict[str, object]:
        try:
            message = json.loads(raw)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return {}
        return message if isinstance(message, dict) else {}
