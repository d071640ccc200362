from __future__ import annotations

from typing import Callable, List, Sequence

from headsup.cards import Card, RANKS, SUITS
from headsup.engine import GameEngine
from headsup.evaluator import parse_cards
from headsup.models import Action, Seat, TableConfig


def create_engine(
    *,
    starting_stack: int = 1_000,
    sb: int = 5,
    bb: int = 10,
    max_raises_per_street: int = 3,
    first_button: Seat = Seat.OPPONENT,
    odd_chip_seat: Seat = Seat.OPPONENT,
) -> GameEngine:
    """Instantiate an engine with the default 5/10 heads-up table."""
    return GameEngine(
        TableConfig(
            sb=sb,
            bb=bb,
            starting_stack=starting_stack,
            max_raises_per_street=max_raises_per_street,
            first_button=first_button,
            odd_chip_seat=odd_chip_seat,
        )
    )


def stacked_deck(
    player: Sequence[str],
    opponent: Sequence[str],
    board: Sequence[str],
    button: Seat = Seat.OPPONENT,
) -> List[Card]:
    """Order a deck so the given hole cards and board come out of a normal deal.

    Deal order: non-button, button, non-button, button, burn, flop x3, burn,
    turn, burn, river.
    """
    holes = {Seat.PLAYER: parse_cards(player), Seat.OPPONENT: parse_cards(opponent)}
    board_cards = parse_cards(board)
    first, second = holes[button.other], holes[button]
    used = set(first + second + board_cards)
    filler = [Card(rank, suit) for suit in SUITS for rank in RANKS if Card(rank, suit) not in used]
    ordered = [first[0], second[0], first[1], second[1]]
    ordered += [filler.pop()] + board_cards[:3]
    ordered += [filler.pop(), board_cards[3]]
    ordered += [filler.pop(), board_cards[4]]
    return ordered + filler


def rig_deck(monkeypatch, deck: List[Card]) -> None:
    monkeypatch.setattr("headsup.engine.build_deck", lambda seed=None: list(deck))


def total_chips(engine: GameEngine) -> int:
    pot = engine.hand.pot if engine.hand else 0
    return sum(state.stack for state in engine.seats.values()) + pot


def play_out(engine: GameEngine, policy: Callable[..., Action], check: Callable[[], None] = lambda: None) -> None:
    """Drive the current hand with ``policy`` for both seats until it is over."""
    while not engine.is_hand_complete():
        seat = engine.to_act
        assert seat is not None
        engine.apply_action(seat, policy(engine.observation(seat)))
        check()
