from __future__ import annotations

import itertools
from typing import Dict, Hashable, Iterable, List, Mapping, Optional, Sequence, Tuple

from .cards import Card, parse_label

RANK_ORDER = ("2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K", "A")
RANK_VALUE = {rank: idx for idx, rank in enumerate(RANK_ORDER, start=2)}

CATEGORY_NAMES = (
    "high_card",
    "pair",
    "two_pair",
    "three_of_a_kind",
    "straight",
    "flush",
    "full_house",
    "four_of_a_kind",
    "straight_flush",
)

Score = Tuple[int, List[int]]


class HandEvaluator:
    """Best-five-card ranking over any number of cards (hole cards plus community)."""

    def rank(self, cards: Sequence[Card]) -> Score:
        return evaluate_best(cards)

    def winners(self, ranked: Mapping[Hashable, Score]) -> List[Hashable]:
        if not ranked:
            return []
        best = max(ranked.values())
        return [key for key, score in ranked.items() if score == best]

    def describe(self, score: Score) -> str:
        return describe_rank(score)


def describe_rank(score: Score) -> str:
    category, _ = score
    return CATEGORY_NAMES[category]


def evaluate_best(cards: Sequence[Card]) -> Score:
    """Return a strength tuple for the best 5 of the given cards. Higher is better."""
    if len(cards) < 5:
        raise ValueError("At least five cards are required")
    best: Optional[Score] = None
    for combo in itertools.combinations(cards, 5):
        rank = _evaluate_five(combo)
        if best is None or rank > best:
            best = rank
    assert best is not None
    return best


def _evaluate_five(cards: Sequence[Card]) -> Score:
    ranks = sorted((RANK_VALUE[card.rank] for card in cards), reverse=True)
    is_flush = len({card.suit for card in cards}) == 1
    straight_high = _straight_high(cards)

    counts: Dict[str, int] = {}
    for card in cards:
        counts[card.rank] = counts.get(card.rank, 0) + 1

    ordered_counts = sorted(counts.items(), key=lambda x: (x[1], RANK_VALUE[x[0]]), reverse=True)
    count_values = sorted(counts.values(), reverse=True)

    if straight_high and is_flush:
        return (8, [straight_high])
    if count_values[0] == 4:
        four_rank = RANK_VALUE[ordered_counts[0][0]]
        kicker = max(RANK_VALUE[r] for r, _ in ordered_counts if r != ordered_counts[0][0])
        return (7, [four_rank, kicker])
    if count_values[0] == 3 and count_values[1] == 2:
        return (6, [RANK_VALUE[ordered_counts[0][0]], RANK_VALUE[ordered_counts[1][0]]])
    if is_flush:
        return (5, ranks)
    if straight_high:
        return (4, [straight_high])
    if count_values[0] == 3:
        kickers = [RANK_VALUE[r] for r, _ in ordered_counts[1:]]
        return (3, [RANK_VALUE[ordered_counts[0][0]]] + kickers)
    if count_values[0] == 2 and count_values[1] == 2:
        pair_high = RANK_VALUE[ordered_counts[0][0]]
        pair_low = RANK_VALUE[ordered_counts[1][0]]
        kicker = max(RANK_VALUE[r] for r, c in ordered_counts if c == 1)
        return (2, [pair_high, pair_low, kicker])
    if count_values[0] == 2:
        kickers = [RANK_VALUE[r] for r, _ in ordered_counts[1:]]
        return (1, [RANK_VALUE[ordered_counts[0][0]]] + kickers)
    return (0, ranks)


def _straight_high(cards: Iterable[Card]) -> Optional[int]:
    values = {RANK_VALUE[card.rank] for card in cards}
    if len(values) != 5:
        return None
    ordered = sorted(values)
    if ordered[-1] - ordered[0] == 4:
        return ordered[-1]
    if ordered == [2, 3, 4, 5, 14]:  # wheel
        return 5
    return None


def parse_cards(labels: Sequence[str]) -> List[Card]:
    return [parse_label(label) for label in labels]
