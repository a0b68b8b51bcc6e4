"""Validation predicates for cards and pattern grids.

None of these raise: each returns a ValidationResult whose ``error`` is a
message the UI can show as-is.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Set

from .card import CENTER, COLUMNS, FREE, GRID_SIZE, Card, column_letter, column_range


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    error: Optional[str] = None


VALID = ValidationResult(is_valid=True)


def _invalid(message: str) -> ValidationResult:
    return ValidationResult(is_valid=False, error=message)


def validate_number_for_column(number: int, column_index: int) -> ValidationResult:
    """Check that ``number`` lies in the range reserved for the column."""
    bounds = column_range(column_index)
    if bounds is None:
        return _invalid("Invalid column")
    lo, hi = bounds
    if number < lo or number > hi:
        return _invalid(f"{column_letter(column_index)} column must be {lo}-{hi}")
    return VALID


def is_duplicate_number(card: Card, number: int) -> bool:
    return any(cell.number == number for row in card.cells for cell in row)


def validate_number_entry(card: Card, number: int, row: int, col: int) -> ValidationResult:
    """Real-time check for a value typed into cell (row, col)."""
    range_check = validate_number_for_column(number, col)
    if not range_check.is_valid:
        return range_check
    for r in range(GRID_SIZE):
        for c in range(GRID_SIZE):
            if (r, c) == (row, col):
                continue
            if card.cells[r][c].number == number:
                return _invalid(f"Number {number} already used")
    return VALID


def validate_complete_card(card: Card) -> ValidationResult:
    """Every cell filled, in range, and no value repeated."""
    seen: Set[int] = set()
    for row in card.cells:
        for col, cell in enumerate(row):
            if cell.is_free:
                continue
            number = cell.number
            if number is None:
                return _invalid("All cells must be filled")
            range_check = validate_number_for_column(number, col)
            if not range_check.is_valid:
                return range_check
            if number in seen:
                return _invalid(f"Duplicate number: {number}")
            seen.add(number)
    return VALID


def validate_card_shape(card: Card) -> ValidationResult:
    if len(card.cells) != GRID_SIZE or any(len(row) != GRID_SIZE for row in card.cells):
        return _invalid("Card must be 5x5")
    for col, letter in enumerate(COLUMNS):
        for row in range(GRID_SIZE):
            if card.cells[row][col].column != letter:
                return _invalid(f"Cell ({row},{col}) must be in column {letter}")
    center = card.cells[CENTER[0]][CENTER[1]]
    if center.value != FREE or not center.marked:
        return _invalid("Center cell must be a marked FREE space")
    return VALID


def _is_row(value: object) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, str)


def _is_square(grid: object) -> bool:
    return (
        _is_row(grid)
        and len(grid) == GRID_SIZE
        and all(_is_row(row) and len(row) == GRID_SIZE for row in grid)
    )


def validate_pattern_grid(grid: Sequence[Sequence[object]]) -> ValidationResult:
    """5x5 booleans with at least one required cell."""
    if not _is_square(grid):
        return _invalid("Pattern grid must be 5x5")
    if any(not isinstance(flag, bool) for row in grid for flag in row):
        return _invalid("Pattern grid must contain only true/false values")
    if not any(flag for row in grid for flag in row):
        return _invalid("Pattern must require at least one square")
    return VALID
