"""Headless rules engine and AI for cardduel.

IMPORTANT: This package never performs I/O; services and transports call into it.
"""

from .actions import Decision, Submission
from .ai import AIBot
from .coordinator import TurnCoordinator
from .deadline import Deadline, Scheduler
from .match import Match, MatchResult, Seat, SubmitResult, TurnResult, new_match
from .types import CardKind, CharacterDefinition, DeckShape, Difficulty, Rules

__all__ = [
    "AIBot",
    "CardKind",
    "CharacterDefinition",
    "Deadline",
    "DeckShape",
    "Decision",
    "Difficulty",
    "Match",
    "MatchResult",
    "Rules",
    "Scheduler",
    "Seat",
    "SubmitResult",
    "Submission",
    "TurnCoordinator",
    "TurnResult",
    "new_match",
]
