"""Heads-up Texas Hold'em primitives: cards, hand evaluation and the betting engine."""

from .cards import Card, RANKS, SUITS, build_deck, deal
from .engine import GameEngine, HandContext
from .errors import ActionError, ConfigError
from .evaluator import HandScore, compare_scores, describe_score, evaluate_best, parse_cards
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
    Snapshot,
    Street,
    TableConfig,
)

__all__ = [
    "Card",
    "RANKS",
    "SUITS",
    "build_deck",
    "deal",
    "GameEngine",
    "HandContext",
    "ActionError",
    "ConfigError",
    "HandScore",
    "compare_scores",
    "describe_score",
    "evaluate_best",
    "parse_cards",
    "Action",
    "ActionType",
    "ActionWindow",
    "Bet",
    "Call",
    "Check",
    "Fold",
    "HandResult",
    "Observation",
    "Raise",
    "Seat",
    "Snapshot",
    "Street",
    "TableConfig",
]
