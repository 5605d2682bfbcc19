from drawhost.client import parse_command, render_card, render_state


def test_betting_commands_become_player_actions():
    assert parse_command("fold", "iowa-room") == {"type": "playerAction", "roomId": "iowa-room", "action": "fold"}
    assert parse_command("  CHECK ", "r")["action"] == "check"
    assert parse_command("raise 25", "r")["amount"] == 25


def test_discard_command_collects_indices():
    payload = parse_command("discard 3", "r")
    assert payload["action"] == "discard"
    assert payload["discardIndices"] == [3]


def test_malformed_commands_are_rejected():
    for line in ("", "raise", "raise lots", "call 5", "discard", "discard x", "shove"):
        assert parse_command(line, "r") is None


def test_render_state_masks_hidden_cards():
    state = {
        "phase": "flop-betting",
        "pot": 6,
        "currentBet": 0,
        "turnId": "b",
        "community": [{"rank": "10", "suit": "♠"}],
        "players": [
            {"id": "a", "name": "A", "chips": 198, "bet": 0, "hand": [{"rank": "A", "suit": "♥"}], "isDealer": True},
            {"id": "b", "name": "B", "chips": 198, "bet": 0, "hand": [None]},
        ],
    }
    lines = render_state(state, me="a")
    assert lines[1] == "Board: 10♠"
    assert lines[2].startswith("  you: chips=198")
    assert "[D]" in lines[2]
    assert "??" in lines[3] and "[to act]" in lines[3]
    assert render_card(None) == "??"
