from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .cards import Card, build_deck, burn, cards_to_labels, deal, new_seed
from .errors import (
    BelowMinimumBet,
    BelowMinimumRaise,
    HandAlreadyOver,
    IllegalBet,
    IllegalCall,
    IllegalCheck,
    IllegalRaise,
    NoHandInProgress,
    NotYourTurn,
    RaiseCapReached,
    StaleAction,
)
from .models import (
    Action,
    ActionType,
    ActionWindow,
    Bet,
    Call,
    Check,
    Fold,
    HandResult,
    Observation,
    Raise,
    Seat,
    SeatState,
    Snapshot,
    Street,
    TableConfig,
)
from .showdown import resolve_showdown, return_uncalled

LOGGER = logging.getLogger("headsup_engine")

# GameEngine owns the whole session: both stacks, the button and the current
# hand. Scheduling and presentation live with the callers.

_BOARD_STREETS = {
    Street.PRE_FLOP: (Street.FLOP, 3),
    Street.FLOP: (Street.TURN, 1),
    Street.TURN: (Street.RIVER, 1),
}


@dataclass
class HandContext:
    # All mutable info about the current hand (deck, pot, betting round, etc.).
    hand_id: str
    seed: int
    button: Seat
    deck: List[Card]
    community: List[Card] = field(default_factory=list)
    street: Street = Street.PRE_FLOP
    pot: int = 0
    bet_to_match: int = 0
    last_bet_size: int = 0
    raises_this_street: int = 0
    to_act: Optional[Seat] = None
    hand_over: bool = False
    result: Optional[HandResult] = None
    events: List[Dict[str, object]] = field(default_factory=list)


class GameEngine:
    """Heads-up No-Limit Texas Hold'em engine for one player against one opponent."""

    def __init__(self, config: Optional[TableConfig] = None) -> None:
        self.config = config or TableConfig()
        self.seats: Dict[Seat, SeatState] = {
            seat: SeatState(seat=seat, stack=self.config.starting_stack) for seat in Seat
        }
        self.button: Optional[Seat] = None
        self.forced_button: Optional[Seat] = self.config.first_button
        self.hand_counter = 0
        self.hand: Optional[HandContext] = None

    # Session lifecycle -----------------------------------------------

    def reset_session(self) -> None:
        for state in self.seats.values():
            state.reset_for_hand()
            state.stack = self.config.starting_stack
        self.hand = None
        self.forced_button = self.config.first_button
        LOGGER.info(
            "Session reset (stacks=%s, next button=%s)",
            self.config.starting_stack,
            self.forced_button.value,
        )

    def can_start_hand(self) -> bool:
        return all(state.stack > 0 for state in self.seats.values())

    def is_hand_complete(self) -> bool:
        return bool(self.hand and self.hand.hand_over)

    def is_match_over(self) -> bool:
        if self.hand is not None and not self.hand.hand_over:
            return False
        return not self.can_start_hand()

    def match_winner(self) -> Optional[Seat]:
        if not self.is_match_over():
            return None
        for seat, state in self.seats.items():
            if state.stack > 0:
                return seat
        return None

    # Hand lifecycle --------------------------------------------------

    def start_hand(self, seed: Optional[int] = None) -> Optional[Seat]:
        """Deal a new hand and return the seat to act first.

        Returns ``None`` when the blinds already put a seat all-in and the
        board was run out straight to showdown.
        """
        if self.hand is not None and not self.hand.hand_over:
            raise RuntimeError("Hand already in progress")
        if not self.can_start_hand():
            raise RuntimeError("Not enough chips to start a hand")

        for state in self.seats.values():
            state.reset_for_hand()

        if seed is None:
            seed = new_seed()
        deck = build_deck(seed)

        # A forced button (new or reset session) wins over rotation.
        if self.forced_button is not None:
            self.button = self.forced_button
            self.forced_button = None
        elif self.button is None:
            self.button = self.config.first_button
        else:
            self.button = self.button.other

        hand_id = f"H-{time.strftime('%Y%m%d')}-{self.hand_counter:05d}"
        self.hand_counter += 1

        ctx = HandContext(
            hand_id=hand_id,
            seed=seed,
            button=self.button,
            deck=deck,
            last_bet_size=self.config.bb,
        )
        self.hand = ctx

        self._deal_hole_cards(ctx)
        self._post_blinds(ctx)
        # Heads-up: the button posts the small blind and acts first preflop.
        ctx.to_act = ctx.button
        LOGGER.info("Hand %s started (button=%s, seed=%s)", hand_id, ctx.button.value, seed)

        self._resolve_all_in(ctx)
        return ctx.to_act

    def _deal_hole_cards(self, ctx: HandContext) -> None:
        order = [ctx.button.other, ctx.button]
        for _ in range(2):
            for seat in order:
                self.seats[seat].hole_cards.extend(deal(ctx.deck, 1))

    def _post_blinds(self, ctx: HandContext) -> None:
        sb_seat = ctx.button
        bb_seat = ctx.button.other
        sb_paid = self._commit_chips(ctx, self.seats[sb_seat], self.config.sb)
        bb_paid = self._commit_chips(ctx, self.seats[bb_seat], self.config.bb)

        ctx.bet_to_match = max(sb_paid, bb_paid)
        ctx.last_bet_size = self.config.bb
        ctx.raises_this_street = 0
        ctx.events.append(
            {
                "ev": "POST_BLINDS",
                "sb_seat": sb_seat.value,
                "bb_seat": bb_seat.value,
                "sb": sb_paid,
                "bb": bb_paid,
            }
        )

    def _commit_chips(self, ctx: HandContext, state: SeatState, amount: int) -> int:
        amount = min(amount, state.stack)
        state.stack -= amount
        state.committed += amount
        state.total_in_pot += amount
        ctx.pot += amount
        return amount

    # Queries -----------------------------------------------------------

    @property
    def to_act(self) -> Optional[Seat]:
        if self.hand is None or self.hand.hand_over:
            return None
        return self.hand.to_act

    def amount_to_call(self, seat: Seat) -> int:
        if self.hand is None:
            return 0
        return self._amount_to_call(self.hand, Seat(seat))

    def _amount_to_call(self, ctx: HandContext, seat: Seat) -> int:
        return max(0, ctx.bet_to_match - self.seats[seat].committed)

    def _min_raise_to(self, ctx: HandContext) -> int:
        return ctx.bet_to_match + max(self.config.bb, ctx.last_bet_size)

    def _can_raise(self, ctx: HandContext, state: SeatState) -> bool:
        return (
            ctx.raises_this_street < self.config.max_raises_per_street
            and self.seats[state.seat.other].stack > 0
            and state.committed + state.stack > ctx.bet_to_match
        )

    def legal_actions(self, seat: Seat) -> ActionWindow:
        """Legal action kinds plus helper numbers; empty when the seat may not act."""
        seat = Seat(seat)
        ctx = self.hand
        if ctx is None or ctx.hand_over or ctx.to_act != seat:
            return ActionWindow(legal=[], call_amount=None, min_raise_to=None, max_raise_to=None)

        state = self.seats[seat]
        to_call = self._amount_to_call(ctx, seat)
        legal: List[ActionType] = [ActionType.FOLD]
        legal.append(ActionType.CALL if to_call > 0 else ActionType.CHECK)

        min_raise_to = None
        max_raise_to = None
        if self._can_raise(ctx, state):
            max_raise_to = state.committed + state.stack
            min_raise_to = min(self._min_raise_to(ctx), max_raise_to)
            legal.append(ActionType.BET if ctx.bet_to_match == 0 else ActionType.RAISE)

        return ActionWindow(
            legal=legal,
            call_amount=min(to_call, state.stack) if to_call > 0 else None,
            min_raise_to=min_raise_to,
            max_raise_to=max_raise_to,
        )

    def observation(self, seat: Seat) -> Observation:
        seat = Seat(seat)
        ctx = self._require_hand()
        state = self.seats[seat]
        other = self.seats[seat.other]
        return Observation(
            hand_id=ctx.hand_id,
            seat=seat,
            street=ctx.street,
            hole_cards=tuple(state.hole_cards),
            community=tuple(ctx.community),
            pot=ctx.pot,
            stack=state.stack,
            committed=state.committed,
            opponent_stack=other.stack,
            opponent_committed=other.committed,
            to_call=self._amount_to_call(ctx, seat),
            bet_to_match=ctx.bet_to_match,
            last_bet_size=ctx.last_bet_size,
            raises_this_street=ctx.raises_this_street,
            max_raises_per_street=self.config.max_raises_per_street,
            bb=self.config.bb,
            button=ctx.button,
            window=self.legal_actions(seat),
        )

    def snapshot(self, viewer: Optional[Seat] = None) -> Snapshot:
        """Read-only view. Hole cards of the other seat only show once the hand is over."""
        stacks = {seat: state.stack for seat, state in self.seats.items()}
        ctx = self.hand
        if ctx is None:
            return Snapshot(
                hand_id=None,
                street=Street.PRE_FLOP,
                button=self.button,
                to_act=None,
                hand_over=True,
                pot=0,
                bet_to_match=0,
                community=(),
                stacks=stacks,
                street_bets={seat: 0 for seat in Seat},
                hole_cards={},
            )

        if ctx.hand_over:
            visible = list(Seat)
        elif viewer is not None:
            visible = [Seat(viewer)]
        else:
            visible = []

        return Snapshot(
            hand_id=ctx.hand_id,
            street=ctx.street,
            button=ctx.button,
            to_act=None if ctx.hand_over else ctx.to_act,
            hand_over=ctx.hand_over,
            pot=ctx.pot,
            bet_to_match=ctx.bet_to_match,
            community=tuple(ctx.community),
            stacks=stacks,
            street_bets={seat: state.committed for seat, state in self.seats.items()},
            hole_cards={seat: tuple(self.seats[seat].hole_cards) for seat in visible},
            result=ctx.result,
        )

    def consume_events(self) -> List[Dict[str, object]]:
        if not self.hand:
            return []
        events = list(self.hand.events)
        self.hand.events.clear()
        return events

    # Action handling -------------------------------------------------

    def apply_action(self, seat: Seat, action: Action, hand_id: Optional[str] = None) -> Snapshot:
        """Validate and apply one action, returning the acting seat's view afterwards.

        Raises an ``ActionError`` subclass, with the hand untouched, when the
        action is not legal right now. ``hand_id`` pins the action to the hand
        it was decided in so decisions from an earlier deal are rejected.
        """
        seat = Seat(seat)
        ctx = self._require_turn(seat, hand_id)
        state = self.seats[seat]

        # Each branch validates completely before touching any state.
        if isinstance(action, Fold):
            ctx.events.append({"ev": "FOLD", "seat": seat.value})
            LOGGER.debug("%s: %s folds", ctx.hand_id, seat.value)
            self._award_fold(ctx, winner=seat.other)
            return self.snapshot(seat)

        if isinstance(action, Check):
            to_call = self._amount_to_call(ctx, seat)
            if to_call > 0:
                raise IllegalCheck(f"Cannot check when facing a bet ({to_call} to call)")
            state.acted = True
            ctx.events.append({"ev": "CHECK", "seat": seat.value})
            LOGGER.debug("%s: %s checks", ctx.hand_id, seat.value)
        elif isinstance(action, Call):
            to_call = self._amount_to_call(ctx, seat)
            if to_call <= 0:
                raise IllegalCall("Nothing to call")
            paid = self._commit_chips(ctx, state, to_call)
            state.acted = True
            ctx.events.append({"ev": "CALL", "seat": seat.value, "amount": paid})
            LOGGER.debug("%s: %s calls %s", ctx.hand_id, seat.value, paid)
        elif isinstance(action, (Bet, Raise)):
            total = self._validate_aggression(ctx, state, action)
            previous_bet = ctx.bet_to_match
            paid = self._commit_chips(ctx, state, total - state.committed)
            ctx.bet_to_match = state.committed
            ctx.last_bet_size = max(self.config.bb, ctx.bet_to_match - previous_bet)
            ctx.raises_this_street += 1
            state.acted = True
            self.seats[seat.other].acted = False
            ctx.events.append(
                {"ev": action.kind.value, "seat": seat.value, "amount": paid, "total": state.committed}
            )
            LOGGER.debug("%s: %s %s to %s", ctx.hand_id, seat.value, action.kind.value.lower(), state.committed)
        else:
            raise ValueError(f"Unsupported action {action!r}")

        self._advance_after_action(ctx, seat)
        return self.snapshot(seat)

    def _require_hand(self) -> HandContext:
        if self.hand is None:
            raise NoHandInProgress("No hand in progress")
        return self.hand

    def _require_turn(self, seat: Seat, hand_id: Optional[str]) -> HandContext:
        ctx = self._require_hand()
        if hand_id is not None and hand_id != ctx.hand_id:
            raise StaleAction(f"Action for hand {hand_id} arrived during hand {ctx.hand_id}")
        if ctx.hand_over:
            raise HandAlreadyOver("Hand is already over")
        if ctx.to_act != seat:
            raise NotYourTurn(f"It is not {seat.value}'s turn")
        return ctx

    def _validate_aggression(self, ctx: HandContext, state: SeatState, action: Action) -> int:
        """Return the accepted street total for a bet or raise, or raise an ActionError."""
        opening = ctx.bet_to_match == 0
        if isinstance(action, Bet) and not opening:
            raise IllegalBet(f"Facing a bet of {ctx.bet_to_match}; raise instead")
        if isinstance(action, Raise) and opening:
            raise IllegalRaise("Nothing to raise; bet instead")
        if ctx.raises_this_street >= self.config.max_raises_per_street:
            raise RaiseCapReached(f"Raise cap of {self.config.max_raises_per_street} reached this street")
        if self.seats[state.seat.other].stack == 0:
            raise IllegalRaise("Opponent is all-in")

        all_in_total = state.committed + state.stack
        if all_in_total <= ctx.bet_to_match:
            raise IllegalRaise("Stack does not cover a raise; call instead")

        total = min(action.total, all_in_total)
        floor = self._min_raise_to(ctx)
        # Anything under the floor is only allowed as an all-in.
        if total < floor and total != all_in_total:
            if opening:
                raise BelowMinimumBet(f"Minimum bet is {floor}")
            raise BelowMinimumRaise(f"Minimum raise to {floor}")
        return total

    def _advance_after_action(self, ctx: HandContext, actor: Seat) -> None:
        if ctx.hand_over:
            return
        if self._resolve_all_in(ctx):
            return

        both_acted = all(state.acted for state in self.seats.values())
        outstanding = sum(self._amount_to_call(ctx, seat) for seat in Seat)
        if both_acted and outstanding == 0:
            self._close_street(ctx)
            return

        ctx.to_act = actor.other

    def _resolve_all_in(self, ctx: HandContext) -> bool:
        """Handle an empty stack: let the covered seat answer, else run the board out."""
        if all(state.stack > 0 for state in self.seats.values()):
            return False
        for seat, state in self.seats.items():
            if state.stack > 0 and self._amount_to_call(ctx, seat) > 0:
                ctx.to_act = seat
                return True
        self._run_out(ctx)
        return True

    def _close_street(self, ctx: HandContext) -> None:
        for state in self.seats.values():
            state.reset_for_round()
        ctx.bet_to_match = 0
        ctx.last_bet_size = self.config.bb
        ctx.raises_this_street = 0

        if ctx.street == Street.RIVER:
            self._showdown(ctx)
            return

        self._deal_next_street(ctx)
        # Postflop the non-button seat acts first.
        ctx.to_act = ctx.button.other

    def _deal_next_street(self, ctx: HandContext) -> None:
        next_street, count = _BOARD_STREETS[ctx.street]
        burn(ctx.deck)
        cards = deal(ctx.deck, count)
        ctx.community.extend(cards)
        ctx.street = next_street
        ctx.events.append({"ev": next_street.value, "cards": cards_to_labels(cards)})
        LOGGER.debug("%s: %s %s", ctx.hand_id, next_street.value, cards_to_labels(cards))

    def _run_out(self, ctx: HandContext) -> None:
        # No more betting is possible; deal every remaining street.
        ctx.to_act = None
        while ctx.street in _BOARD_STREETS:
            self._deal_next_street(ctx)
        self._showdown(ctx)

    # Payouts ---------------------------------------------------------

    def _award_fold(self, ctx: HandContext, winner: Seat) -> None:
        result = HandResult(
            reason="fold",
            winner=winner,
            payouts={winner: ctx.pot, winner.other: 0},
        )
        self._finish_hand(ctx, result)

    def _showdown(self, ctx: HandContext) -> None:
        ctx.street = Street.SHOWDOWN
        uncalled = return_uncalled({seat: state.total_in_pot for seat, state in self.seats.items()})
        if uncalled is not None:
            seat, amount = uncalled
            self.seats[seat].stack += amount
            self.seats[seat].total_in_pot -= amount
            ctx.pot -= amount
            ctx.events.append({"ev": "RETURN_UNCALLED", "seat": seat.value, "amount": amount})

        result = resolve_showdown(
            {seat: state.hole_cards for seat, state in self.seats.items()},
            ctx.community,
            ctx.pot,
            self.config.odd_chip_seat,
        )
        for seat, state in self.seats.items():
            ctx.events.append(
                {
                    "ev": "SHOWDOWN",
                    "seat": seat.value,
                    "hand": cards_to_labels(state.hole_cards),
                    "board": cards_to_labels(ctx.community),
                    "rank": result.descriptions[seat],
                }
            )
        self._finish_hand(ctx, result)

    def _finish_hand(self, ctx: HandContext, result: HandResult) -> None:
        for seat, amount in result.payouts.items():
            if amount > 0:
                self.seats[seat].stack += amount
                ctx.events.append({"ev": "POT_AWARD", "seat": seat.value, "amount": amount})
        ctx.pot = 0
        ctx.street = Street.SHOWDOWN
        ctx.to_act = None
        ctx.hand_over = True
        ctx.result = result
        for state in self.seats.values():
            state.committed = 0
            state.total_in_pot = 0
        LOGGER.info(
            "Hand %s over by %s: winner=%s payouts=%s",
            ctx.hand_id,
            result.reason,
            result.winner.value if result.winner else "split",
            {seat.value: amount for seat, amount in result.payouts.items()},
        )
