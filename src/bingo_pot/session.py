from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Tuple

from .core.card import TOTAL_NUMBERS, number_column


@dataclass(frozen=True)
class GameSession:
    active_card_ids: Tuple[str, ...]
    active_pattern_ids: Tuple[str, ...]
    called_numbers: Tuple[int, ...] = ()
    started_at: float = field(default_factory=time.time)
    is_active: bool = True


@dataclass(frozen=True)
class CallHistoryEntry:
    number: int
    timestamp: float
    column: str


@dataclass(frozen=True)
class SessionStats:
    total_called: int
    remaining: int
    percent_complete: float
    last_called: Optional[int]


def is_valid_bingo_number(number: object) -> bool:
    return (
        isinstance(number, int)
        and not isinstance(number, bool)
        and 1 <= number <= TOTAL_NUMBERS
    )


def create_session(card_ids: Sequence[str], pattern_ids: Sequence[str]) -> GameSession:
    return GameSession(active_card_ids=tuple(card_ids), active_pattern_ids=tuple(pattern_ids))


def add_called_number(session: GameSession, number: int) -> GameSession:
    if not is_valid_bingo_number(number):
        raise ValueError(f"Invalid Bingo number: {number!r}")
    if number in session.called_numbers:
        raise ValueError(f"Number already called: {number}")
    return replace(session, called_numbers=session.called_numbers + (number,))


def remove_called_number(session: GameSession, number: int) -> GameSession:
    """Undo a call; removing a number that was never called is a no-op."""
    return replace(
        session, called_numbers=tuple(n for n in session.called_numbers if n != number)
    )


def has_been_called(session: GameSession, number: int) -> bool:
    return number in session.called_numbers


def uncalled_numbers(session: GameSession) -> List[int]:
    called = set(session.called_numbers)
    return [n for n in range(1, TOTAL_NUMBERS + 1) if n not in called]


def call_history(session: GameSession) -> List[CallHistoryEntry]:
    # Calls are not timestamped individually; one second apart is an approximation.
    return [
        CallHistoryEntry(
            number=number,
            timestamp=session.started_at + idx,
            column=number_column(number) or "",
        )
        for idx, number in enumerate(session.called_numbers)
    ]


def session_stats(session: GameSession) -> SessionStats:
    total = len(session.called_numbers)
    return SessionStats(
        total_called=total,
        remaining=TOTAL_NUMBERS - total,
        percent_complete=total / TOTAL_NUMBERS * 100,
        last_called=session.called_numbers[-1] if session.called_numbers else None,
    )
