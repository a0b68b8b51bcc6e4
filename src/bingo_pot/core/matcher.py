"""Pattern matching: win checks, winning paths and missing numbers.

Every pattern kind is reduced to a list of candidate segments (cell positions
that together complete one instance of the pattern):

- STANDARD: a single segment, the required cells of the grid.
- DIKIT / PATONG: every horizontally / vertically adjacent pair of cells,
  skipping pairs that touch the FREE space.
- HORIZONTAL_LINE / VERTICAL_LINE: the five rows / columns.
- DIAGONAL_LINE: the main and the anti diagonal.

For the special kinds, a pattern is won when any segment is fully marked.
Otherwise the open paths are the segments tied at the highest non-zero marked
count; segments without any marked cell are never reported.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import List, Tuple

from .card import GRID_SIZE, Card
from .pattern import Pattern, PatternKind

Position = Tuple[int, int]
Segment = Tuple[Position, ...]

PAIR_SIZE = 2
LINE_SIZE = GRID_SIZE

_PAIR_KINDS = (PatternKind.DIKIT, PatternKind.PATONG)
_LINE_KINDS = (
    PatternKind.HORIZONTAL_LINE,
    PatternKind.VERTICAL_LINE,
    PatternKind.DIAGONAL_LINE,
)


@dataclass(frozen=True)
class WinningPath:
    """One independently achievable way to complete a pattern on a card."""

    cells: Segment
    missing: Tuple[int, ...]
    marked_count: int
    total_required: int


@lru_cache(maxsize=None)
def _fixed_segments(kind: PatternKind) -> Tuple[Segment, ...]:
    n = GRID_SIZE
    if kind is PatternKind.DIKIT:
        return tuple(((r, c), (r, c + 1)) for r in range(n) for c in range(n - 1))
    if kind is PatternKind.PATONG:
        return tuple(((r, c), (r + 1, c)) for r in range(n - 1) for c in range(n))
    if kind is PatternKind.HORIZONTAL_LINE:
        return tuple(tuple((r, c) for c in range(n)) for r in range(n))
    if kind is PatternKind.VERTICAL_LINE:
        return tuple(tuple((r, c) for r in range(n)) for c in range(n))
    if kind is PatternKind.DIAGONAL_LINE:
        return (
            tuple((i, i) for i in range(n)),
            tuple((i, n - 1 - i) for i in range(n)),
        )
    raise ValueError(f"{kind} has no fixed segments")


def _standard_segment(pattern: Pattern) -> Segment:
    return tuple(
        (r, c) for r in range(GRID_SIZE) for c in range(GRID_SIZE) if pattern.grid[r][c]
    )


def _check_preconditions(pattern: Pattern) -> None:
    assert len(pattern.grid) == GRID_SIZE and all(
        len(row) == GRID_SIZE for row in pattern.grid
    ), f"pattern {pattern.id!r} does not have a 5x5 grid"


def required_count(pattern: Pattern) -> int:
    """Cells needed to complete one path of ``pattern``."""
    if pattern.kind in _PAIR_KINDS:
        return PAIR_SIZE
    if pattern.kind in _LINE_KINDS:
        return LINE_SIZE
    return len(_standard_segment(pattern))


def _evaluate(card: Card, segment: Segment, total_required: int) -> WinningPath:
    marked = 0
    missing: List[int] = []
    for r, c in segment:
        cell = card.cells[r][c]
        if cell.marked:
            marked += 1
        elif cell.number is not None:
            missing.append(cell.number)
    return WinningPath(
        cells=segment,
        missing=tuple(missing),
        marked_count=marked,
        total_required=total_required,
    )


def _candidates(card: Card, pattern: Pattern) -> List[WinningPath]:
    total = required_count(pattern)
    if pattern.kind is PatternKind.STANDARD:
        return [_evaluate(card, _standard_segment(pattern), total)]
    segments = _fixed_segments(pattern.kind)
    if pattern.kind in _PAIR_KINDS:
        segments = tuple(
            seg for seg in segments if not any(card.cells[r][c].is_free for r, c in seg)
        )
    return [_evaluate(card, seg, total) for seg in segments]


def _is_complete(card: Card, path: WinningPath) -> bool:
    return path.marked_count == len(path.cells) and len(path.cells) > 0


def check_pattern(card: Card, pattern: Pattern) -> bool:
    """True when the card already satisfies the pattern."""
    _check_preconditions(pattern)
    return any(_is_complete(card, path) for path in _candidates(card, pattern))


def _best_progress(paths: List[WinningPath]) -> List[WinningPath]:
    best = max((p.marked_count for p in paths), default=0)
    if best == 0:
        return []
    return [p for p in paths if p.marked_count == best]


def winning_paths(card: Card, pattern: Pattern) -> List[WinningPath]:
    """All open paths, in scan order.

    Standard patterns have at most one path. Paths with nothing missing are
    left out, so a won pattern usually yields no paths.
    """
    _check_preconditions(pattern)
    candidates = _candidates(card, pattern)
    if pattern.kind is PatternKind.STANDARD:
        ranked = candidates
    else:
        ranked = _best_progress(candidates)
    return [p for p in ranked if p.missing]


def missing_numbers(card: Card, pattern: Pattern) -> List[int]:
    """Union of the missing numbers of the best paths, in first-seen order."""
    seen: List[int] = []
    for path in winning_paths(card, pattern):
        for number in path.missing:
            if number not in seen:
                seen.append(number)
    return seen


def best_marked_count(card: Card, pattern: Pattern) -> int:
    """Marked cells on the most advanced candidate path (0 with no progress)."""
    _check_preconditions(pattern)
    return max((p.marked_count for p in _candidates(card, pattern)), default=0)


def is_on_pot(card: Card, pattern: Pattern) -> bool:
    """Aggregate check: the merged missing set of the best paths has one number.

    Tied paths waiting on different numbers merge into a larger set, so this
    can be False while ``has_on_pot_path`` is True.
    """
    return len(missing_numbers(card, pattern)) == 1


def has_on_pot_path(card: Card, pattern: Pattern) -> bool:
    """Per-path check: some single path is exactly one number away."""
    return any(len(path.missing) == 1 for path in winning_paths(card, pattern))
