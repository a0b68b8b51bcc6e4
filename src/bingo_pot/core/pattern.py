"""Winning-pattern descriptors and the built-in pattern catalogue."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import FrozenSet, List, Optional, Sequence, Tuple

from .card import GRID_SIZE
from .validation import validate_pattern_grid


class PatternKind(Enum):
    STANDARD = "standard"
    DIKIT = "dikit"
    PATONG = "patong"
    HORIZONTAL_LINE = "horizontal_line"
    VERTICAL_LINE = "vertical_line"
    DIAGONAL_LINE = "diagonal_line"


DIKIT = "Dikit"
PATONG = "Patong"
HORIZONTAL_LINE = "Horizontal Line"
VERTICAL_LINE = "Vertical Line"
DIAGONAL_LINE = "Diagonal Line"
FULL_HOUSE = "Full House"

_SPECIAL_KINDS = {
    DIKIT: PatternKind.DIKIT,
    PATONG: PatternKind.PATONG,
    HORIZONTAL_LINE: PatternKind.HORIZONTAL_LINE,
    VERTICAL_LINE: PatternKind.VERTICAL_LINE,
    DIAGONAL_LINE: PatternKind.DIAGONAL_LINE,
}

# Reserved, system-owned names: not editable, not deletable.
BUILT_IN_PATTERN_NAMES: FrozenSet[str] = frozenset(list(_SPECIAL_KINDS) + [FULL_HOUSE])

PatternGrid = Tuple[Tuple[bool, ...], ...]


def classify_pattern(name: str) -> PatternKind:
    """Behavioral category for a pattern name; Full House is STANDARD."""
    return _SPECIAL_KINDS.get(name, PatternKind.STANDARD)


def is_built_in_pattern(name: str) -> bool:
    return name in BUILT_IN_PATTERN_NAMES


def _freeze_grid(grid: Sequence[Sequence[bool]]) -> PatternGrid:
    if len(grid) != GRID_SIZE or any(len(row) != GRID_SIZE for row in grid):
        raise ValueError("Pattern grid must be 5x5")
    if any(not isinstance(flag, bool) for row in grid for flag in row):
        raise ValueError("Pattern grid must contain only booleans")
    return tuple(tuple(row) for row in grid)


@dataclass(frozen=True)
class Pattern:
    """A winning pattern. ``kind`` is derived from ``name`` once, at construction."""

    id: str
    name: str
    grid: PatternGrid
    created_at: float = field(default_factory=time.time)
    kind: PatternKind = field(init=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "grid", _freeze_grid(self.grid))
        object.__setattr__(self, "kind", classify_pattern(self.name))

    @property
    def is_built_in(self) -> bool:
        return is_built_in_pattern(self.name)


def can_delete_pattern(pattern: Pattern) -> bool:
    return not pattern.is_built_in


def empty_grid() -> List[List[bool]]:
    return [[False] * GRID_SIZE for _ in range(GRID_SIZE)]


def create_pattern(name: str, grid: Sequence[Sequence[bool]], pattern_id: Optional[str] = None) -> Pattern:
    """Create a new pattern, rejecting grids that require no squares."""
    result = validate_pattern_grid(grid)
    if not result.is_valid:
        raise ValueError(result.error)
    return Pattern(id=pattern_id or f"pattern_{uuid.uuid4().hex[:12]}", name=name, grid=grid)


def pattern_positions(pattern: Pattern) -> List[Tuple[int, int]]:
    return [
        (r, c)
        for r in range(GRID_SIZE)
        for c in range(GRID_SIZE)
        if pattern.grid[r][c]
    ]


def toggle_pattern_cell(pattern: Pattern, row: int, col: int) -> Pattern:
    """Flip one required flag. Built-in patterns are immutable."""
    if pattern.is_built_in:
        raise ValueError(f"Built-in pattern '{pattern.name}' cannot be edited")
    grid = [list(r) for r in pattern.grid]
    grid[row][col] = not grid[row][col]
    return replace(pattern, grid=tuple(tuple(r) for r in grid))


# Predefined grids


def line_grid(direction: str) -> List[List[bool]]:
    """Top row, left column, or main diagonal."""
    grid = empty_grid()
    for i in range(GRID_SIZE):
        if direction == "horizontal":
            grid[0][i] = True
        elif direction == "vertical":
            grid[i][0] = True
        elif direction == "diagonal":
            grid[i][i] = True
        else:
            raise ValueError("direction must be 'horizontal', 'vertical' or 'diagonal'")
    return grid


def four_corners_grid() -> List[List[bool]]:
    grid = empty_grid()
    for r, c in ((0, 0), (0, 4), (4, 0), (4, 4)):
        grid[r][c] = True
    return grid


_STAMP_ORIGINS = {
    "top-left": (0, 0),
    "top-right": (0, 3),
    "bottom-left": (3, 0),
    "bottom-right": (3, 3),
}


def postage_stamp_grid(corner: str) -> List[List[bool]]:
    """2x2 block in one corner of the card."""
    if corner not in _STAMP_ORIGINS:
        raise ValueError(f"Unknown corner: {corner}")
    r0, c0 = _STAMP_ORIGINS[corner]
    grid = empty_grid()
    for r in (r0, r0 + 1):
        for c in (c0, c0 + 1):
            grid[r][c] = True
    return grid


def x_grid() -> List[List[bool]]:
    grid = empty_grid()
    for i in range(GRID_SIZE):
        grid[i][i] = True
        grid[i][GRID_SIZE - 1 - i] = True
    return grid


def plus_grid() -> List[List[bool]]:
    grid = empty_grid()
    for i in range(GRID_SIZE):
        grid[2][i] = True
        grid[i][2] = True
    return grid


def full_house_grid() -> List[List[bool]]:
    return [[True] * GRID_SIZE for _ in range(GRID_SIZE)]


def dikit_grid() -> List[List[bool]]:
    # display example only; matching considers every horizontal pair
    grid = empty_grid()
    grid[0][0] = grid[0][1] = True
    return grid


def patong_grid() -> List[List[bool]]:
    grid = empty_grid()
    grid[0][0] = grid[1][0] = True
    return grid


def predefined_patterns() -> List[Pattern]:
    """Default pattern set a fresh install starts with."""
    return [
        create_pattern(DIKIT, dikit_grid()),
        create_pattern(PATONG, patong_grid()),
        create_pattern(HORIZONTAL_LINE, line_grid("horizontal")),
        create_pattern(VERTICAL_LINE, line_grid("vertical")),
        create_pattern(DIAGONAL_LINE, line_grid("diagonal")),
        create_pattern("Four Corners", four_corners_grid()),
        create_pattern("Horizontal Line (Top)", line_grid("horizontal")),
        create_pattern("Vertical Line (Left)", line_grid("vertical")),
        create_pattern("Diagonal (\\)", line_grid("diagonal")),
        create_pattern("X-Shape", x_grid()),
        create_pattern("Plus Sign", plus_grid()),
        create_pattern("Postage Stamp (Top-Left)", postage_stamp_grid("top-left")),
        create_pattern(FULL_HOUSE, full_house_grid()),
    ]
