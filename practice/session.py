from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, Dict, List, Optional

from headsup.engine import GameEngine
from headsup.errors import ActionError
from headsup.models import Action, ActionType, HandResult, Observation, Seat, Snapshot, make_action

from .bots import Policy

LOGGER = logging.getLogger("practice_session")

Prompt = Callable[[Observation], Awaitable[Action]]
Listener = Callable[[Snapshot, List[Dict[str, object]]], None]


def policy_prompt(policy: Policy) -> Prompt:
    """Adapt a synchronous policy to the awaited prompt used for the human seat."""

    async def prompt(obs: Observation) -> Action:
        return policy(obs)

    return prompt


def fallback_action(obs: Observation) -> Action:
    # Same preference as a timed-out seat: check, then call, then fold.
    for kind in (ActionType.CHECK, ActionType.CALL):
        if kind in obs.window.legal:
            return make_action(kind)
    return make_action(ActionType.FOLD)


# One session = one engine, one human seat, one policy seat.


class PracticeSession:
    """Drives hands between a prompted seat and a policy seat.

    The policy "thinks" inside an asyncio task. Starting a hand or resetting
    the session cancels that task, and every decision is applied with the
    hand id it was made for, so nothing decided for an earlier deal lands on
    the current one.
    """

    def __init__(
        self,
        engine: GameEngine,
        policy: Policy,
        prompt: Prompt,
        human_seat: Seat = Seat.PLAYER,
        think_delay: float = 0.6,
        listener: Optional[Listener] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.engine = engine
        self.policy = policy
        self.prompt = prompt
        self.human_seat = human_seat
        self.ai_seat = human_seat.other
        self.think_delay = think_delay
        self.listener = listener
        self.generation = 0
        self.pending: Optional[asyncio.Task] = None
        # Seeds every deal from one number so a whole match can be replayed.
        self.rng = random.Random(seed) if seed is not None else None

    def cancel_pending(self) -> None:
        self.generation += 1
        if self.pending is not None and not self.pending.done():
            self.pending.cancel()
            LOGGER.debug("Cancelled pending %s decision", self.ai_seat.value)
        self.pending = None

    def reset(self) -> None:
        self.cancel_pending()
        self.engine.reset_session()

    async def play_hand(self, seed: Optional[int] = None) -> Optional[HandResult]:
        """Play one hand to completion; ``None`` if a reset superseded it.

        Raises ``RuntimeError`` without touching the running hand or its
        pending decision when a new deal is not possible yet.
        """
        if self.engine.hand is not None and not self.engine.hand.hand_over:
            raise RuntimeError("Hand already in progress")
        if not self.engine.can_start_hand():
            raise RuntimeError("Not enough chips to start a hand")
        self.cancel_pending()
        generation = self.generation
        self.engine.start_hand(seed=seed)
        self._publish()

        while not self.engine.is_hand_complete():
            seat = self.engine.to_act
            assert seat is not None
            if seat == self.ai_seat:
                played = await self._play_ai_turn(generation)
            else:
                played = await self._play_prompted_turn(seat, generation)
            if not played:
                return None
            self._publish()

        assert self.engine.hand is not None
        return self.engine.hand.result

    async def play_match(self, max_hands: Optional[int] = None) -> List[HandResult]:
        # Repeated hands until one stack is empty or the hand budget runs out.
        results: List[HandResult] = []
        while not self.engine.is_match_over():
            if max_hands is not None and len(results) >= max_hands:
                break
            hand_seed = self.rng.getrandbits(32) if self.rng is not None else None
            result = await self.play_hand(seed=hand_seed)
            if result is None:
                break
            results.append(result)
        winner = self.engine.match_winner()
        if winner is not None:
            LOGGER.info("Match over after %s hands: %s wins", len(results), winner.value)
        return results

    async def _think(self, obs: Observation) -> Action:
        if self.think_delay > 0:
            await asyncio.sleep(self.think_delay)
        return self.policy(obs)

    async def _play_ai_turn(self, generation: int) -> bool:
        obs = self.engine.observation(self.ai_seat)
        task = asyncio.create_task(self._think(obs))
        self.pending = task
        try:
            action = await task
        except asyncio.CancelledError:
            if generation != self.generation:
                LOGGER.debug("Discarded %s decision for %s", self.ai_seat.value, obs.hand_id)
                return False
            raise
        finally:
            if self.pending is task:
                self.pending = None

        if generation != self.generation:
            return False
        try:
            self.engine.apply_action(self.ai_seat, action, hand_id=obs.hand_id)
        except ActionError as exc:
            LOGGER.warning("Policy proposed %r, rejected (%s: %s); using fallback", action, exc.code, exc.msg)
            self.engine.apply_action(self.ai_seat, fallback_action(obs), hand_id=obs.hand_id)
        return True

    async def _play_prompted_turn(self, seat: Seat, generation: int) -> bool:
        while True:
            obs = self.engine.observation(seat)
            action = await self.prompt(obs)
            if generation != self.generation:
                return False
            try:
                self.engine.apply_action(seat, action, hand_id=obs.hand_id)
                return True
            except ActionError as exc:
                LOGGER.warning("Rejected %r from %s (%s: %s)", action, seat.value, exc.code, exc.msg)

    def _publish(self) -> None:
        events = self.engine.consume_events()
        if self.listener is not None:
            self.listener(self.engine.snapshot(self.human_seat), events)
