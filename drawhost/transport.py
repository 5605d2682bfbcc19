from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Set

import websockets
from websockets.asyncio.server import ServerConnection

LOGGER = logging.getLogger("draw_transport")


class Transport:
    """Connection handles, room channels and the JSON envelope sent over them."""

    def __init__(self) -> None:
        self.connections: Dict[str, ServerConnection] = {}
        self.channels: Dict[str, Set[str]] = {}
        self.channel_of: Dict[str, str] = {}

    def register(self, conn_id: str, websocket: ServerConnection) -> None:
        self.connections[conn_id] = websocket

    def unregister(self, conn_id: str) -> None:
        self.leave_channel(conn_id)
        self.connections.pop(conn_id, None)

    def join_channel(self, conn_id: str, room_id: str) -> None:
        current = self.channel_of.get(conn_id)
        if current == room_id:
            return
        if current is not None:
            self.leave_channel(conn_id)
        self.channels.setdefault(room_id, set()).add(conn_id)
        self.channel_of[conn_id] = room_id

    def leave_channel(self, conn_id: str) -> None:
        room_id = self.channel_of.pop(conn_id, None)
        if room_id is None:
            return
        members = self.channels.get(room_id)
        if members is None:
            return
        members.discard(conn_id)
        if not members:
            del self.channels[room_id]

    def members(self, room_id: str) -> List[str]:
        return sorted(self.channels.get(room_id, ()))

    async def send_to(self, conn_id: str, event: str, payload: Dict[str, object]) -> None:
        websocket = self.connections.get(conn_id)
        if websocket is None:
            return
        try:
            await websocket.send(self.envelope(event, payload))
        except websockets.ConnectionClosed:
            LOGGER.debug("Dropped %s for closed connection %s", event, conn_id)

    async def broadcast(self, room_id: str, event: str, payload: Dict[str, object]) -> None:
        targets = [self.connections[conn_id] for conn_id in self.members(room_id) if conn_id in self.connections]
        if not targets:
            return
        message = self.envelope(event, payload)
        await asyncio.gather(*(socket.send(message) for socket in targets), return_exceptions=True)

    @staticmethod
    def envelope(event: str, payload: Optional[Dict[str, object]] = None) -> str:
        body: Dict[str, object] = {"type": event, "v": 1, "ts": datetime.now(timezone.utc).isoformat()}
        if payload:
            body.update(payload)
        return json.dumps(body)
