from __future__ import annotations

from typing import Dict, Mapping, Optional, Sequence, Tuple

from .cards import Card
from .evaluator import compare_scores, describe_score, evaluate_best
from .models import HandResult, Seat


def return_uncalled(contributions: Mapping[Seat, int]) -> Optional[Tuple[Seat, int]]:
    """Return the seat and amount of chips the other seat never matched, if any."""
    player = contributions.get(Seat.PLAYER, 0)
    opponent = contributions.get(Seat.OPPONENT, 0)
    if player == opponent:
        return None
    if player > opponent:
        return Seat.PLAYER, player - opponent
    return Seat.OPPONENT, opponent - player


def resolve_showdown(
    holes: Mapping[Seat, Sequence[Card]],
    board: Sequence[Card],
    pot: int,
    odd_chip_seat: Seat,
) -> HandResult:
    """Score both seven-card pools and split ``pot`` between the seats.

    The higher score takes everything. On a tie the pot is halved with integer
    division and any odd chip goes to ``odd_chip_seat``.
    """
    if len(board) != 5:
        raise ValueError(f"Showdown needs a full board, got {len(board)} cards")

    scores = {seat: evaluate_best(list(holes[seat]) + list(board)) for seat in Seat}
    outcome = compare_scores(scores[Seat.PLAYER], scores[Seat.OPPONENT])

    payouts: Dict[Seat, int] = {seat: 0 for seat in Seat}
    winner: Optional[Seat] = None
    if outcome > 0:
        winner = Seat.PLAYER
        payouts[winner] = pot
    elif outcome < 0:
        winner = Seat.OPPONENT
        payouts[winner] = pot
    else:
        share, remainder = divmod(pot, 2)
        payouts[Seat.PLAYER] = share
        payouts[Seat.OPPONENT] = share
        payouts[odd_chip_seat] += remainder

    return HandResult(
        reason="showdown",
        winner=winner,
        payouts=payouts,
        scores=dict(scores),
        descriptions={seat: describe_score(score) for seat, score in scores.items()},
    )
