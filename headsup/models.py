from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Tuple, Union

from .cards import Card, cards_to_labels
from .errors import ConfigError, InvalidAmount


class Seat(str, Enum):
    PLAYER = "player"
    OPPONENT = "opponent"

    @property
    def other(self) -> "Seat":
        return Seat.OPPONENT if self is Seat.PLAYER else Seat.PLAYER


class Street(str, Enum):
    PRE_FLOP = "PRE_FLOP"
    FLOP = "FLOP"
    TURN = "TURN"
    RIVER = "RIVER"
    SHOWDOWN = "SHOWDOWN"


class ActionType(str, Enum):
    FOLD = "FOLD"
    CHECK = "CHECK"
    CALL = "CALL"
    BET = "BET"
    RAISE = "RAISE"


# Actions are a closed set of shapes; only bets and raises carry an amount,
# always the seat's desired total contribution for the street.


@dataclass(frozen=True)
class Fold:
    kind: ClassVar[ActionType] = ActionType.FOLD


@dataclass(frozen=True)
class Check:
    kind: ClassVar[ActionType] = ActionType.CHECK


@dataclass(frozen=True)
class Call:
    kind: ClassVar[ActionType] = ActionType.CALL


def _check_total(kind: ActionType, total: object) -> None:
    # bool is an int subclass but never a chip count.
    if not isinstance(total, int) or isinstance(total, bool):
        raise InvalidAmount(f"{kind.value} total must be a whole number of chips, got {total!r}")


@dataclass(frozen=True)
class Bet:
    total: int
    kind: ClassVar[ActionType] = ActionType.BET

    def __post_init__(self) -> None:
        _check_total(self.kind, self.total)


@dataclass(frozen=True)
class Raise:
    total: int
    kind: ClassVar[ActionType] = ActionType.RAISE

    def __post_init__(self) -> None:
        _check_total(self.kind, self.total)


Action = Union[Fold, Check, Call, Bet, Raise]


def make_action(kind: ActionType, amount: Optional[int] = None) -> Action:
    if kind in (ActionType.BET, ActionType.RAISE):
        if amount is None:
            raise ValueError(f"{kind.value} requires amount")
        return Bet(amount) if kind == ActionType.BET else Raise(amount)
    if kind == ActionType.FOLD:
        return Fold()
    if kind == ActionType.CHECK:
        return Check()
    if kind == ActionType.CALL:
        return Call()
    raise ValueError(f"Unsupported action {kind}")


@dataclass
class TableConfig:
    sb: int = 5
    bb: int = 10
    starting_stack: int = 1_000
    max_raises_per_street: int = 3
    first_button: Seat = Seat.OPPONENT
    odd_chip_seat: Seat = Seat.OPPONENT

    def __post_init__(self) -> None:
        for name in ("sb", "bb", "starting_stack", "max_raises_per_street"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigError(f"{name} must be an integer, got {value!r}")
        if self.sb <= 0 or self.bb <= 0:
            raise ConfigError("Blinds must be positive")
        if self.sb > self.bb:
            raise ConfigError("Small blind cannot exceed big blind")
        if self.starting_stack <= 0:
            raise ConfigError("Starting stack must be positive")
        if self.max_raises_per_street < 0:
            raise ConfigError("Raise cap cannot be negative")
        if not isinstance(self.first_button, Seat) or not isinstance(self.odd_chip_seat, Seat):
            raise ConfigError("Seat settings must be Seat members")


@dataclass
class SeatState:
    seat: Seat
    stack: int
    committed: int = 0
    total_in_pot: int = 0
    acted: bool = False
    hole_cards: List[Card] = field(default_factory=list)

    def reset_for_hand(self) -> None:
        self.committed = 0
        self.total_in_pot = 0
        self.acted = False
        self.hole_cards.clear()

    def reset_for_round(self) -> None:
        self.committed = 0
        self.acted = False


@dataclass
class HandResult:
    reason: str
    winner: Optional[Seat]
    payouts: Dict[Seat, int]
    scores: Dict[Seat, Tuple[int, ...]] = field(default_factory=dict)
    descriptions: Dict[Seat, str] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, object]:
        return {
            "reason": self.reason,
            "winner": self.winner.value if self.winner else None,
            "payouts": {seat.value: amount for seat, amount in self.payouts.items()},
            "descriptions": {seat.value: text for seat, text in self.descriptions.items()},
        }


@dataclass
class ActionWindow:
    legal: List[ActionType]
    call_amount: Optional[int]
    min_raise_to: Optional[int]
    max_raise_to: Optional[int]


@dataclass(frozen=True)
class Observation:
    """Everything the acting seat is allowed to see when choosing an action."""

    hand_id: str
    seat: Seat
    street: Street
    hole_cards: Tuple[Card, ...]
    community: Tuple[Card, ...]
    pot: int
    stack: int
    committed: int
    opponent_stack: int
    opponent_committed: int
    to_call: int
    bet_to_match: int
    last_bet_size: int
    raises_this_street: int
    max_raises_per_street: int
    bb: int
    button: Seat
    window: ActionWindow


@dataclass(frozen=True)
class Snapshot:
    hand_id: Optional[str]
    street: Street
    button: Optional[Seat]
    to_act: Optional[Seat]
    hand_over: bool
    pot: int
    bet_to_match: int
    community: Tuple[Card, ...]
    stacks: Dict[Seat, int]
    street_bets: Dict[Seat, int]
    hole_cards: Dict[Seat, Tuple[Card, ...]]
    result: Optional[HandResult] = None

    def to_payload(self) -> Dict[str, object]:
        return {
            "hand_id": self.hand_id,
            "street": self.street.value,
            "button": self.button.value if self.button else None,
            "to_act": self.to_act.value if self.to_act else None,
            "hand_over": self.hand_over,
            "pot": self.pot,
            "bet_to_match": self.bet_to_match,
            "community": cards_to_labels(self.community),
            "stacks": {seat.value: stack for seat, stack in self.stacks.items()},
            "street_bets": {seat.value: amount for seat, amount in self.street_bets.items()},
            "hole_cards": {seat.value: cards_to_labels(cards) for seat, cards in self.hole_cards.items()},
            "result": self.result.to_payload() if self.result else None,
        }
