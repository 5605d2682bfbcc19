import pytest

from drawcore.cards import new_deck
from drawcore.evaluator import HandEvaluator, describe_rank, evaluate_best, parse_cards


def test_evaluate_best_identifies_all_hand_categories():
    cases = [
        (8, ["A♥", "K♥", "Q♥", "J♥", "10♥"]),  # straight flush
        (7, ["A♠", "A♥", "A♦", "A♣", "K♦"]),  # four of a kind
        (6, ["Q♣", "Q♦", "Q♠", "9♥", "9♠"]),  # full house
        (5, ["A♥", "J♥", "9♥", "6♥", "2♥"]),  # flush
        (4, ["9♥", "8♦", "7♣", "6♠", "5♥"]),  # straight
        (3, ["8♥", "8♦", "8♠", "Q♦", "J♠"]),  # three of a kind
        (2, ["7♥", "7♦", "4♠", "4♣", "A♠"]),  # two pair
        (1, ["6♥", "6♠", "Q♥", "8♦", "4♣"]),  # one pair
        (0, ["A♠", "K♦", "J♥", "9♣", "4♦"]),  # high card
    ]

    for expected_rank, labels in cases:
        rank, _ = evaluate_best(parse_cards(labels))
        assert rank == expected_rank, f"labels={labels}"


def test_evaluate_best_handles_wheel_straight():
    rank, detail = evaluate_best(parse_cards(["A♥", "2♦", "3♣", "4♠", "5♥", "9♦", "K♦"]))
    assert rank == 4
    assert detail[0] == 5


def test_ten_high_straight_uses_two_character_rank():
    rank, detail = evaluate_best(parse_cards(["10♥", "9♦", "8♣", "7♠", "6♥"]))
    assert rank == 4
    assert detail == [10]


def test_evaluate_best_picks_best_five_of_ten_cards():
    hole = ["2♣", "7♦", "9♠", "K♣", "3♥"]
    board = ["K♥", "K♦", "K♠", "4♣", "8♦"]
    rank, detail = evaluate_best(parse_cards(hole + board))
    assert rank == 7
    assert detail[0] == 13


def test_evaluate_best_requires_five_cards():
    with pytest.raises(ValueError, match="five cards"):
        evaluate_best(parse_cards(["A♥", "K♥"]))


def test_winners_returns_every_tied_key():
    evaluator = HandEvaluator()
    board = parse_cards(["A♠", "K♦", "8♣", "5♥", "2♠"])
    ranked = {
        "a": evaluator.rank(parse_cards(["A♥", "3♦"]) + board),
        "b": evaluator.rank(parse_cards(["A♦", "3♣"]) + board),
        "c": evaluator.rank(parse_cards(["K♥", "4♣"]) + board),
    }
    assert sorted(evaluator.winners(ranked)) == ["a", "b"]
    assert evaluator.winners({}) == []


def test_describe_rank_names_categories():
    assert describe_rank((6, [12, 9])) == "full_house"
    assert HandEvaluator().describe((0, [14])) == "high_card"


def test_dealt_ten_card_hands_always_rank():
    deck = new_deck(seed=777)
    for _ in range(5):
        rank, detail = evaluate_best(deck.draw(10))
        assert 0 <= rank <= 8
        assert isinstance(detail, list)
