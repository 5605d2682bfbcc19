import random

import pytest

from drawcore.cards import Card, Deck, RANKS, SUITS, deal, new_deck, parse_label


def test_create_builds_52_unique_cards_in_canonical_order():
    deck = Deck.create()
    assert len(deck) == 52
    assert len(set(deck.cards)) == 52
    assert deck.cards[0] == Card("2", "♠")
    assert deck.cards[12] == Card("A", "♠")
    assert deck.cards[-1] == Card("A", "♣")
    assert {card.suit for card in deck.cards} == set(SUITS)
    assert {card.rank for card in deck.cards} == set(RANKS)


def test_draw_removes_cards_from_the_front():
    deck = Deck.create()
    first_three = deck.cards[:3]
    drawn = deck.draw(3)
    assert drawn == first_three
    assert len(deck) == 49
    assert not set(drawn) & set(deck.cards)


def test_draw_raises_when_deck_exhausted():
    deck = Deck([Card("A", "♥"), Card("K", "♦")])
    deck.draw(2)
    with pytest.raises(ValueError, match="Not enough cards"):
        deck.draw(1)


def test_deal_rejects_negative_counts():
    with pytest.raises(ValueError, match="negative"):
        deal([Card("A", "♥")], -1)


def test_shuffle_is_a_permutation_and_seedable():
    deck_a = Deck.create()
    deck_b = Deck.create()
    deck_a.shuffle(random.Random(7))
    deck_b.shuffle(random.Random(7))
    assert deck_a.cards == deck_b.cards
    assert sorted(deck_a.cards, key=lambda c: (c.suit, c.rank)) == sorted(
        Deck.create().cards, key=lambda c: (c.suit, c.rank)
    )


def test_unseeded_shuffle_keeps_every_card():
    deck = Deck.create()
    deck.shuffle()
    assert set(deck.cards) == set(Deck.create().cards)


def test_new_deck_with_seed_is_reproducible():
    assert new_deck(11).cards == new_deck(11).cards
    assert new_deck(11).cards != new_deck(12).cards


def test_card_validation_rejects_invalid_values():
    with pytest.raises(ValueError, match="Invalid rank"):
        Card("1", "♥")
    with pytest.raises(ValueError, match="Invalid suit"):
        Card("A", "h")


def test_labels_round_trip_including_ten():
    card = parse_label("10♠")
    assert card == Card("10", "♠")
    assert card.label == "10♠"
    assert card.to_dict() == {"rank": "10", "suit": "♠"}
    with pytest.raises(ValueError, match="Invalid card label"):
        parse_label("A")
