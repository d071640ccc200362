from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Callable, Dict, Sequence

from headsup.cards import Card
from headsup.evaluator import evaluate_best
from headsup.models import (
    Action,
    ActionType,
    Bet,
    Call,
    Check,
    Fold,
    Observation,
    Raise,
    Street,
    make_action,
)

Policy = Callable[[Observation], Action]

# Rough equity stand-in per made-hand category once the board is out.
CATEGORY_STRENGTH = {9: 0.99, 8: 0.97, 7: 0.95, 6: 0.85, 5: 0.8, 4: 0.6, 3: 0.5, 2: 0.35, 1: 0.2}


@dataclass(frozen=True)
class DifficultyProfile:
    aggressive_threshold: float
    fold_threshold_facing_big_bet: float
    raise_multiplier: float
    open_multiplier: float


DIFFICULTIES: Dict[str, DifficultyProfile] = {
    "easy": DifficultyProfile(0.68, 0.28, 0.9, 0.9),
    "normal": DifficultyProfile(0.62, 0.22, 1.0, 1.0),
    "hard": DifficultyProfile(0.58, 0.20, 1.15, 1.1),
}


def preflop_strength(hole: Sequence[Card]) -> float:
    """Very rough preflop hand matrix mapped onto 0.1..0.9."""
    first, second = hole
    high = max(first.value, second.value)
    low = min(first.value, second.value)
    suited = first.suit == second.suit
    gap = high - low

    score = 0.25
    if gap == 0:
        score = 0.6 + (high - 6) * 0.04  # pairs scale up 22..AA
    elif high >= 13 and low >= 11:
        score = 0.55
    elif suited and gap <= 2 and high >= 10:
        score = 0.5
    elif suited and gap <= 3:
        score = 0.45
    elif high >= 13 and low >= 9:
        score = 0.45

    if suited:
        score += 0.03
    if high == 14:
        score += 0.02
    return max(0.1, min(0.9, score))


def estimate_strength(hole: Sequence[Card], community: Sequence[Card], street: Street) -> float:
    if street == Street.PRE_FLOP or len(community) < 3:
        return preflop_strength(hole)
    score = evaluate_best(list(hole) + list(community))
    return CATEGORY_STRENGTH.get(score[0], 0.5)


def pot_sized_total(strength: float, obs: Observation) -> int:
    """Street total sized between 0.5x and 1.2x the pot after calling."""
    pot_after_call = obs.pot + min(obs.to_call, obs.stack)
    factor = 0.5 + 0.7 * max(0.0, min(1.0, strength - 0.5))
    return math.floor(pot_after_call * factor) + obs.bet_to_match


def _clamp_to_window(total: int, obs: Observation) -> int:
    window = obs.window
    assert window.min_raise_to is not None and window.max_raise_to is not None
    return max(window.min_raise_to, min(total, window.max_raise_to))


class HeuristicPolicy:
    """Strength-threshold opponent: bets strong hands, folds weak ones to big bets."""

    def __init__(self, difficulty: str = "normal") -> None:
        if difficulty not in DIFFICULTIES:
            raise ValueError(f"Unknown difficulty: {difficulty}")
        self.difficulty = difficulty
        self.profile = DIFFICULTIES[difficulty]

    def __call__(self, obs: Observation) -> Action:
        legal = obs.window.legal
        if not legal:
            raise ValueError(f"No legal actions for {obs.seat.value}")

        profile = self.profile
        strength = estimate_strength(obs.hole_cards, obs.community, obs.street)
        aggressive = strength > profile.aggressive_threshold and (
            ActionType.BET in legal or ActionType.RAISE in legal
        )

        if obs.to_call > 0:
            if strength < profile.fold_threshold_facing_big_bet and obs.to_call > obs.bb * 6:
                return Fold()
            if aggressive:
                target = math.floor(pot_sized_total(strength, obs) * profile.raise_multiplier)
                return Raise(_clamp_to_window(target, obs))
            return Call()

        if aggressive:
            target = math.floor(pot_sized_total(strength, obs) * profile.open_multiplier)
            total = _clamp_to_window(target, obs)
            return Bet(total) if ActionType.BET in legal else Raise(total)
        return Check()


def passive_policy(obs: Observation) -> Action:
    """Check when free, otherwise call."""
    if ActionType.CHECK in obs.window.legal:
        return Check()
    if ActionType.CALL in obs.window.legal:
        return Call()
    return Fold()


def random_policy(rng: random.Random) -> Policy:
    """Pick any legal action; sizes are drawn uniformly from the raise window."""

    def choose(obs: Observation) -> Action:
        choice = rng.choice(obs.window.legal)
        if choice in (ActionType.BET, ActionType.RAISE):
            window = obs.window
            assert window.min_raise_to is not None and window.max_raise_to is not None
            total = window.max_raise_to if rng.random() < 0.1 else rng.randint(window.min_raise_to, window.max_raise_to)
            return make_action(choice, total)
        return make_action(choice)

    return choose
