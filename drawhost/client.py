#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import websockets

LOGGER = logging.getLogger("draw_client")

# ManualClient plays one seat from the terminal. Server messages are printed
# as they arrive; typed commands become playerAction messages.

HELP = "Commands: fold | check | call | raise <amount> | discard <index> | help | quit"


def parse_command(line: str, room_id: str) -> Optional[Dict[str, Any]]:
    """Translate a typed command into a playerAction payload, or None if invalid."""
    parts = line.strip().lower().split()
    if not parts:
        return None
    verb, args = parts[0], parts[1:]
    payload: Dict[str, Any] = {"type": "playerAction", "roomId": room_id, "action": verb}
    if verb in ("fold", "check", "call") and not args:
        return payload
    if verb == "raise" and len(args) == 1 and args[0].isdigit():
        payload["amount"] = int(args[0])
        return payload
    if verb == "discard" and args and all(arg.isdigit() for arg in args):
        payload["discardIndices"] = [int(arg) for arg in args]
        return payload
    return None


def render_card(card: Optional[Dict[str, str]]) -> str:
    if card is None:
        return "??"
    return f"{card['rank']}{card['suit']}"


def render_state(state: Dict[str, Any], me: Optional[str]) -> List[str]:
    lines = [
        f"Phase {state.get('phase')}  pot={state.get('pot')}  bet={state.get('currentBet')}",
        "Board: " + (" ".join(render_card(card) for card in state.get("community", [])) or "-"),
    ]
    for player in state.get("players", []):
        marks = []
        if player.get("isDealer"):
            marks.append("D")
        if player.get("folded"):
            marks.append("folded")
        if player.get("id") == state.get("turnId"):
            marks.append("to act")
        hand = " ".join(render_card(card) for card in player.get("hand", []))
        who = "you" if player.get("id") == me else player.get("name")
        suffix = f" [{', '.join(marks)}]" if marks else ""
        lines.append(f"  {who}: chips={player.get('chips')} bet={player.get('bet')} {hand}{suffix}")
    return lines


class ManualClient:
    def __init__(self, name: str, room_id: str, url: str) -> None:
        self.name = name
        self.room_id = room_id
        self.url = url
        self.me: Optional[str] = None

    async def run(self) -> None:
        async with websockets.connect(self.url) as ws:
            await ws.send(json.dumps({"type": "joinRoom", "roomId": self.room_id, "name": self.name}))
            print(HELP)
            await asyncio.gather(self._read_loop(ws), self._input_loop(ws))

    async def _read_loop(self, ws) -> None:
        async for raw in ws:
            self._print_message(json.loads(raw))

    async def _input_loop(self, ws) -> None:
        while True:
            line = await asyncio.to_thread(input, "> ")
            if line.strip().lower() in ("quit", "exit"):
                await ws.close()
                return
            if line.strip().lower() in ("help", "h"):
                print(HELP)
                continue
            payload = parse_command(line, self.room_id)
            if payload is None:
                print("Unrecognised command. " + HELP)
                continue
            await ws.send(json.dumps(payload))

    def _print_message(self, msg: Dict[str, Any]) -> None:
        msg_type = msg.get("type")
        if msg_type == "gameState":
            for player in msg.get("players", []):
                if any(card is not None for card in player.get("hand", [])):
                    self.me = player.get("id")
            print("\n".join(render_state(msg, self.me)))
        elif msg_type == "yourTurn":
            print(f">>> Your turn: legal={msg.get('legal')} call={msg.get('callAmount')} raise={msg.get('minRaiseTo')}-{msg.get('maxRaiseTo')}")
        elif msg_type in ("status", "errorMessage"):
            print(f">>> {msg.get('msg')}")
        elif msg_type == "showdown":
            for entry in msg.get("hands", []):
                cards = " ".join(render_card(card) for card in entry.get("hand", []))
                print(f"Showdown {entry.get('name')}: {cards} ({entry.get('rank', '?')})")
            print(f"Winners: {msg.get('winners')} share={msg.get('share')}")
        elif msg_type == "roomFull":
            print(">>> Room is full")
        else:
            LOGGER.debug("Unhandled message %s", msg)


def main() -> None:
    parser = argparse.ArgumentParser(description="Manual draw poker client")
    parser.add_argument("--name", required=True)
    parser.add_argument("--room", default="iowa-room")
    parser.add_argument("--url", default="ws://localhost:3000")
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO)
    try:
        asyncio.run(ManualClient(args.name, args.room, args.url).run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
