from __future__ import annotations

import itertools
from collections import Counter
from typing import Iterable, List, Optional, Sequence, Tuple

from .cards import Card, RANKS, parse_label

# (category, t1, t2, t3, t4, t5); unused tiebreak slots are zero.
HandScore = Tuple[int, int, int, int, int, int]

STRAIGHT_FLUSH = 9
FOUR_OF_A_KIND = 8
FULL_HOUSE = 7
FLUSH = 6
STRAIGHT = 5
THREE_OF_A_KIND = 4
TWO_PAIR = 3
ONE_PAIR = 2
HIGH_CARD = 1

CATEGORY_NAMES = {
    STRAIGHT_FLUSH: "straight_flush",
    FOUR_OF_A_KIND: "four_of_a_kind",
    FULL_HOUSE: "full_house",
    FLUSH: "flush",
    STRAIGHT: "straight",
    THREE_OF_A_KIND: "three_of_a_kind",
    TWO_PAIR: "two_pair",
    ONE_PAIR: "pair",
    HIGH_CARD: "high_card",
}

_SCORE_WIDTH = 6
_WHEEL = {14, 5, 4, 3, 2}


def evaluate_best(cards: Sequence[Card]) -> HandScore:
    """Return the best score over every 5-card selection of 5 to 7 cards. Higher is better."""
    if not 5 <= len(cards) <= 7:
        raise ValueError(f"Expected 5 to 7 cards, got {len(cards)}")
    if len(set(cards)) != len(cards):
        raise ValueError("Duplicate cards in hand")
    best: Optional[HandScore] = None
    for combo in itertools.combinations(cards, 5):
        score = score_five(combo)
        if best is None or score > best:
            best = score
    assert best is not None
    return best


def score_five(cards: Sequence[Card]) -> HandScore:
    values = sorted((card.value for card in cards), reverse=True)
    is_flush = len({card.suit for card in cards}) == 1
    straight_high = _straight_high(values)

    # Ties on count resolve by value so the grouping never depends on input order.
    groups = sorted(Counter(values).items(), key=lambda item: (item[1], item[0]), reverse=True)
    counts = [count for _, count in groups]
    ranked = [value for value, _ in groups]

    if straight_high and is_flush:
        return _pad(STRAIGHT_FLUSH, [straight_high])
    if counts[0] == 4:
        return _pad(FOUR_OF_A_KIND, ranked[:2])
    if counts[0] == 3 and counts[1] == 2:
        return _pad(FULL_HOUSE, ranked[:2])
    if is_flush:
        return _pad(FLUSH, values)
    if straight_high:
        return _pad(STRAIGHT, [straight_high])
    if counts[0] == 3:
        return _pad(THREE_OF_A_KIND, ranked[:3])
    if counts[0] == 2 and counts[1] == 2:
        return _pad(TWO_PAIR, ranked[:3])
    if counts[0] == 2:
        return _pad(ONE_PAIR, ranked[:4])
    return _pad(HIGH_CARD, values)


def _straight_high(values: Iterable[int]) -> Optional[int]:
    unique = sorted(set(values), reverse=True)
    for idx in range(len(unique) - 4):
        window = unique[idx : idx + 5]
        if window[0] - window[4] == 4:
            return window[0]
    if _WHEEL.issubset(unique):
        return 5  # ace plays low
    return None


def _pad(category: int, tiebreaks: List[int]) -> HandScore:
    padded = [category] + list(tiebreaks) + [0] * (_SCORE_WIDTH - 1 - len(tiebreaks))
    return tuple(padded)  # type: ignore[return-value]


def compare_scores(a: HandScore, b: HandScore) -> int:
    return (a > b) - (a < b)


def category_name(score: HandScore) -> str:
    return CATEGORY_NAMES[score[0]]


def value_label(value: int) -> str:
    rank = RANKS[value - 2]
    return "10" if rank == "T" else rank


def describe_score(score: HandScore) -> str:
    category, first, second = score[0], score[1], score[2]
    if category == STRAIGHT_FLUSH:
        if first == 14:
            return "Royal Flush"
        return f"Straight Flush ({value_label(first)} high)"
    if category == FOUR_OF_A_KIND:
        return f"Four of a Kind ({value_label(first)}s)"
    if category == FULL_HOUSE:
        return f"Full House ({value_label(first)}s over {value_label(second)}s)"
    if category == FLUSH:
        return f"Flush ({value_label(first)} high)"
    if category == STRAIGHT:
        return f"Straight ({value_label(first)} high)"
    if category == THREE_OF_A_KIND:
        return f"Three of a Kind ({value_label(first)}s)"
    if category == TWO_PAIR:
        return f"Two Pair ({value_label(first)}s and {value_label(second)}s)"
    if category == ONE_PAIR:
        return f"One Pair ({value_label(first)}s)"
    return f"High Card ({value_label(first)})"


def parse_cards(labels: Sequence[str]) -> List[Card]:
    return [parse_label(label) for label in labels]
