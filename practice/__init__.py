"""Practice table: AI policies and the session driver that plays them against a human seat."""

from .bots import HeuristicPolicy, passive_policy, random_policy
from .session import PracticeSession

__all__ = ["HeuristicPolicy", "passive_policy", "random_policy", "PracticeSession"]
