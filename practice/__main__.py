from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Dict, List, Optional

from headsup.engine import GameEngine
from headsup.errors import ConfigError
from headsup.models import Action, ActionType, Observation, Seat, Snapshot, TableConfig, make_action

from .bots import DIFFICULTIES, HeuristicPolicy
from .session import PracticeSession, policy_prompt

LOGGER = logging.getLogger("practice_cli")

COMMANDS = {
    "F": ActionType.FOLD,
    "FOLD": ActionType.FOLD,
    "K": ActionType.CHECK,
    "CHECK": ActionType.CHECK,
    "C": ActionType.CALL,
    "CALL": ActionType.CALL,
    "B": ActionType.BET,
    "BET": ActionType.BET,
    "R": ActionType.RAISE,
    "RAISE": ActionType.RAISE,
}


def parse_command(text: str, obs: Observation) -> Optional[Action]:
    """Turn a typed command (``c``, ``k``, ``f``, ``b 40``, ``r 120``, ``allin``) into an action."""
    parts = text.strip().upper().split()
    if not parts:
        return None
    window = obs.window
    if parts[0] in ("A", "ALLIN", "ALL-IN"):
        if window.max_raise_to is None:
            return None
        kind = ActionType.BET if ActionType.BET in window.legal else ActionType.RAISE
        return make_action(kind, window.max_raise_to)

    kind = COMMANDS.get(parts[0])
    if kind is None:
        return None
    if kind == ActionType.CALL and ActionType.CHECK in window.legal:
        kind = ActionType.CHECK  # "c" doubles as check when nothing is owed
    if kind in (ActionType.BET, ActionType.RAISE):
        if len(parts) < 2:
            return make_action(kind, window.min_raise_to or 0)
        try:
            amount = int(parts[1])
        except ValueError:
            return None
        return make_action(kind, amount)
    return make_action(kind)


def render_snapshot(snapshot: Snapshot, events: List[Dict[str, object]], human: Seat) -> None:
    for event in events:
        summary = {key: value for key, value in event.items() if key != "ev"}
        print(f"  {event['ev']}: {summary}")
    board = " ".join(card.pretty for card in snapshot.community) or "-"
    hole = " ".join(card.pretty for card in snapshot.hole_cards.get(human, ()))
    print(
        f"[{snapshot.street.value}] board {board} | pot {snapshot.pot} | "
        f"you {snapshot.stacks[human]} ({hole}) | dealer {snapshot.stacks[human.other]}"
    )
    if snapshot.result is not None:
        result = snapshot.result
        if result.descriptions:
            print(f"  You: {result.descriptions[human]} / Dealer: {result.descriptions[human.other]}")
        winner = "split pot" if result.winner is None else ("you win" if result.winner == human else "dealer wins")
        print(f"  Hand over ({result.reason}): {winner}")


async def console_prompt(obs: Observation) -> Action:
    window = obs.window
    hints = [kind.value for kind in window.legal]
    if window.call_amount:
        hints.append(f"to call {window.call_amount}")
    if window.min_raise_to is not None:
        hints.append(f"raise to {window.min_raise_to}-{window.max_raise_to}")
    while True:
        text = await asyncio.to_thread(input, "Action [" + " / ".join(hints) + "]: ")
        action = parse_command(text, obs)
        if action is not None:
            return action
        print("Commands: f=fold, k=check, c=call, b N=bet to N, r N=raise to N, a=all-in")


async def run(args: argparse.Namespace) -> None:
    config = TableConfig(
        sb=args.sb,
        bb=args.bb,
        starting_stack=args.starting_stack,
        max_raises_per_street=args.max_raises,
    )
    engine = GameEngine(config)
    policy = HeuristicPolicy(args.difficulty)

    if args.auto:
        session = PracticeSession(
            engine,
            policy,
            prompt=policy_prompt(HeuristicPolicy(args.difficulty)),
            think_delay=0,
            seed=args.seed,
        )
        results = await session.play_match(max_hands=args.hands)
        stacks = {seat.value: state.stack for seat, state in engine.seats.items()}
        LOGGER.info("Simulated %s hands, final stacks %s", len(results), stacks)
        return

    session = PracticeSession(
        engine,
        policy,
        prompt=console_prompt,
        think_delay=args.think_ms / 1000,
        listener=lambda snapshot, events: render_snapshot(snapshot, events, Seat.PLAYER),
        seed=args.seed,
    )
    await session.play_match(max_hands=args.hands)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Heads-up Hold'em against the practice dealer")
    parser.add_argument("--starting-stack", type=int, default=1_000)
    parser.add_argument("--sb", type=int, default=5)
    parser.add_argument("--bb", type=int, default=10)
    parser.add_argument("--max-raises", type=int, default=3, help="Bets and raises allowed per street")
    parser.add_argument("--difficulty", choices=sorted(DIFFICULTIES), default="normal")
    parser.add_argument("--think-ms", type=int, default=600, help="Dealer thinking delay in milliseconds")
    parser.add_argument("--hands", type=int, default=None, help="Stop after this many hands")
    parser.add_argument("--seed", type=int, default=None, help="Seed for replaying the same deals")
    parser.add_argument("--auto", action="store_true", help="Let the dealer policy play both seats")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))
    try:
        asyncio.run(run(args))
    except ConfigError as exc:
        parser.error(str(exc))
    except (KeyboardInterrupt, EOFError):
        print()


if __name__ == "__main__":
    main()
