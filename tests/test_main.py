from drawhost.__main__ import build_parser, config_from_args


def test_defaults_match_table_config():
    config = config_from_args(build_parser().parse_args([]))
    assert config.seats == 5
    assert config.starting_chips == 200
    assert (config.sb, config.bb) == (1, 2)
    assert config.next_hand_delay_ms == 5_000
    assert config.default_room == "iowa-room"


def test_flags_override_config():
    args = build_parser().parse_args(
        ["--seats", "3", "--starting-chips", "50", "--sb", "5", "--bb", "10", "--next-hand-delay", "0", "--room", "lab"]
    )
    config = config_from_args(args)
    assert config.seats == 3
    assert config.starting_chips == 50
    assert (config.sb, config.bb) == (5, 10)
    assert config.next_hand_delay_ms == 0
    assert config.default_room == "lab"
