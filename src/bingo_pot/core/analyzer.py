"""Waiting-number analysis across cards and patterns."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Set

from .card import TOTAL_NUMBERS, Card, apply_called_numbers
from .matcher import (
    best_marked_count,
    check_pattern,
    has_on_pot_path,
    missing_numbers,
    required_count,
    winning_paths,
)
from .pattern import Pattern

logger = logging.getLogger(__name__)


@dataclass
class WaitingNumberAnalysis:
    """Progress of one card toward one pattern (or one path of it)."""

    card_id: str
    pattern_id: str
    pattern_name: str
    is_winner: bool
    is_on_pot: bool
    missing_numbers: List[int]
    total_required: int
    total_marked: int
    path_index: Optional[int] = None


@dataclass
class GameAnalysis:
    card_analyses: List[WaitingNumberAnalysis] = field(default_factory=list)
    pot_cards: List[WaitingNumberAnalysis] = field(default_factory=list)
    winning_cards: List[WaitingNumberAnalysis] = field(default_factory=list)
    numbers_to_watch: List[int] = field(default_factory=list)


@dataclass
class WaitingMatch:
    card: Card
    pattern: Pattern
    analysis: WaitingNumberAnalysis


@dataclass
class ProbabilityInsight:
    numbers_remaining: int
    numbers_needed: int
    probability: float


def _winner_record(card: Card, pattern: Pattern) -> WaitingNumberAnalysis:
    total = required_count(pattern)
    return WaitingNumberAnalysis(
        card_id=card.id,
        pattern_id=pattern.id,
        pattern_name=pattern.name,
        is_winner=True,
        is_on_pot=False,
        missing_numbers=[],
        total_required=total,
        total_marked=total,
    )


def analyze_card_for_pattern(card: Card, pattern: Pattern) -> WaitingNumberAnalysis:
    """Card-level summary: the merged missing numbers of the best paths.

    ``is_on_pot`` follows the per-path rule used by ``analyze_game``: it is
    True when any single open path is one number away.
    """
    if check_pattern(card, pattern):
        return _winner_record(card, pattern)
    return WaitingNumberAnalysis(
        card_id=card.id,
        pattern_id=pattern.id,
        pattern_name=pattern.name,
        is_winner=False,
        is_on_pot=has_on_pot_path(card, pattern),
        missing_numbers=missing_numbers(card, pattern),
        total_required=required_count(pattern),
        total_marked=best_marked_count(card, pattern),
    )


def analyze_game(cards: Sequence[Card], patterns: Sequence[Pattern]) -> GameAnalysis:
    """Analyze every card against every pattern, one record per open path.

    Won (card, pattern) pairs produce a single winner record. Otherwise each
    open path with at least one marked cell becomes its own record;
    ``path_index`` is set only when the pattern has several paths.
    """
    result = GameAnalysis()
    watch: Set[int] = set()

    for card in cards:
        for pattern in patterns:
            if check_pattern(card, pattern):
                winner = _winner_record(card, pattern)
                result.card_analyses.append(winner)
                result.winning_cards.append(winner)
                continue

            paths = winning_paths(card, pattern)
            total = required_count(pattern)
            for idx, path in enumerate(paths):
                total_marked = total - len(path.missing)
                if total_marked <= 0:
                    continue
                on_pot = len(path.missing) == 1
                analysis = WaitingNumberAnalysis(
                    card_id=card.id,
                    pattern_id=pattern.id,
                    pattern_name=pattern.name,
                    is_winner=False,
                    is_on_pot=on_pot,
                    missing_numbers=list(path.missing),
                    total_required=total,
                    total_marked=total_marked,
                    path_index=idx if len(paths) > 1 else None,
                )
                result.card_analyses.append(analysis)
                if on_pot:
                    result.pot_cards.append(analysis)
                watch.update(path.missing)

    result.numbers_to_watch = sorted(watch)
    logger.debug(
        "Analyzed %d cards x %d patterns: %d records, %d on pot, %d winners",
        len(cards),
        len(patterns),
        len(result.card_analyses),
        len(result.pot_cards),
        len(result.winning_cards),
    )
    return result


def analyze_called_game(
    cards: Sequence[Card], patterns: Sequence[Pattern], called_numbers: Iterable[int]
) -> GameAnalysis:
    """Re-derive marks from the called numbers, then run ``analyze_game``."""
    return analyze_game(apply_called_numbers(cards, called_numbers), patterns)


def closest_patterns(
    card: Card, patterns: Sequence[Pattern], limit: int = 3
) -> List[WaitingNumberAnalysis]:
    """Unwon patterns, fewest missing numbers first."""
    analyses = [analyze_card_for_pattern(card, pattern) for pattern in patterns]
    # Dikit and Patong without progress have no paths, hence nothing missing
    candidates = [a for a in analyses if not a.is_winner and a.missing_numbers]
    candidates.sort(key=lambda a: len(a.missing_numbers))
    return candidates[: max(limit, 0)]


def is_number_important(number: int, cards: Sequence[Card], patterns: Sequence[Pattern]) -> bool:
    """Would ``number`` advance any card toward any pattern?"""
    return any(
        number in missing_numbers(card, pattern) for card in cards for pattern in patterns
    )


def cards_waiting_for_number(
    number: int, cards: Sequence[Card], patterns: Sequence[Pattern]
) -> List[WaitingMatch]:
    matches: List[WaitingMatch] = []
    for card in cards:
        for pattern in patterns:
            analysis = analyze_card_for_pattern(card, pattern)
            if not analysis.is_winner and number in analysis.missing_numbers:
                matches.append(WaitingMatch(card=card, pattern=pattern, analysis=analysis))
    return matches


def probability_insight(
    called_numbers: Sequence[int], missing: Sequence[int], total_numbers: int = TOTAL_NUMBERS
) -> ProbabilityInsight:
    """Linear estimate: numbers still needed over numbers not yet called."""
    called = set(called_numbers)
    remaining = total_numbers - len(called)
    needed = len([n for n in missing if n not in called])
    probability = needed / remaining if remaining > 0 else 0.0
    return ProbabilityInsight(numbers_remaining=remaining, numbers_needed=needed, probability=probability)


def analysis_summary(analysis: WaitingNumberAnalysis) -> str:
    if analysis.is_winner:
        return f"🎉 WINNER! Pattern: {analysis.pattern_name}"
    if analysis.is_on_pot:
        return f"🔥 ON POT! Need {analysis.missing_numbers[0]} to win {analysis.pattern_name}"
    count = len(analysis.missing_numbers)
    if count <= 3:
        needed = ", ".join(str(n) for n in analysis.missing_numbers)
        return f"Almost there! Need {needed} for {analysis.pattern_name}"
    return f"Need {count} numbers for {analysis.pattern_name}"


def sort_by_closeness(analyses: Iterable[WaitingNumberAnalysis]) -> List[WaitingNumberAnalysis]:
    """Winners first, then on-pot records, then ascending missing count."""
    return sorted(
        analyses,
        key=lambda a: (not a.is_winner, not a.is_on_pot, len(a.missing_numbers)),
    )
