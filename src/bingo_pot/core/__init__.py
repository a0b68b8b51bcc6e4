"""Core pattern-matching and waiting-number analysis engine."""

from .analyzer import GameAnalysis, WaitingNumberAnalysis, analyze_called_game, analyze_game
from .card import Card, Cell, apply_called_numbers, mark_number
from .matcher import WinningPath, check_pattern, missing_numbers, winning_paths
from .pattern import BUILT_IN_PATTERN_NAMES, Pattern, PatternKind, create_pattern
from .validation import ValidationResult

__all__ = [
    "BUILT_IN_PATTERN_NAMES",
    "Card",
    "Cell",
    "GameAnalysis",
    "Pattern",
    "PatternKind",
    "ValidationResult",
    "WaitingNumberAnalysis",
    "WinningPath",
    "analyze_called_game",
    "analyze_game",
    "apply_called_numbers",
    "check_pattern",
    "create_pattern",
    "mark_number",
    "missing_numbers",
    "winning_paths",
]
