"""Card model: the 5x5 grid, column ranges and pure marking primitives."""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..rng import RandomSource, create_rng, derive_parallel_seed

logger = logging.getLogger(__name__)

GRID_SIZE = 5
CENTER = (2, 2)
FREE = "FREE"
TOTAL_NUMBERS = 75

COLUMNS: Tuple[str, ...] = ("B", "I", "N", "G", "O")
COLUMN_RANGES: Dict[str, Tuple[int, int]] = {
    "B": (1, 15),
    "I": (16, 30),
    "N": (31, 45),
    "G": (46, 60),
    "O": (61, 75),
}

CellValue = Union[int, str, None]


@dataclass(frozen=True)
class Cell:
    """One square of a card. ``value`` is an int, ``FREE`` or ``None`` (unset)."""

    column: str
    value: CellValue = None
    marked: bool = False

    @property
    def is_free(self) -> bool:
        return self.value == FREE

    @property
    def number(self) -> Optional[int]:
        """Integer value of the cell, or None for FREE and unset cells."""
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            return None
        return self.value


Grid = Tuple[Tuple[Cell, ...], ...]


@dataclass(frozen=True)
class Card:
    id: str
    cells: Grid
    name: Optional[str] = None
    created_at: float = field(default_factory=time.time)

    def cell(self, row: int, col: int) -> Cell:
        return self.cells[row][col]


def column_letter(index: int) -> str:
    return COLUMNS[index] if 0 <= index < GRID_SIZE else ""


def column_range(index: int) -> Optional[Tuple[int, int]]:
    letter = column_letter(index)
    return COLUMN_RANGES[letter] if letter else None


def number_column(number: int) -> Optional[str]:
    """Column letter a called number belongs to, or None when out of 1..75."""
    for letter in COLUMNS:
        lo, hi = COLUMN_RANGES[letter]
        if lo <= number <= hi:
            return letter
    return None


def _new_card_id() -> str:
    return f"card_{uuid.uuid4().hex[:12]}"


def _free_cell() -> Cell:
    return Cell(column=COLUMNS[CENTER[1]], value=FREE, marked=True)


def _build_cells(values: Sequence[Sequence[CellValue]]) -> Grid:
    rows: List[Tuple[Cell, ...]] = []
    for r in range(GRID_SIZE):
        row: List[Cell] = []
        for c in range(GRID_SIZE):
            if (r, c) == CENTER:
                row.append(_free_cell())
            else:
                row.append(Cell(column=COLUMNS[c], value=values[r][c], marked=False))
        rows.append(tuple(row))
    return tuple(rows)


def empty_card(card_id: Optional[str] = None, name: Optional[str] = None) -> Card:
    """Card with every non-center cell unset, ready for manual entry."""
    values = [[None] * GRID_SIZE for _ in range(GRID_SIZE)]
    return Card(id=card_id or _new_card_id(), cells=_build_cells(values), name=name)


def card_from_values(
    values: Sequence[Sequence[CellValue]],
    *,
    card_id: Optional[str] = None,
    name: Optional[str] = None,
    created_at: Optional[float] = None,
) -> Card:
    """Build an unmarked card from a 5x5 value matrix; the center is forced to FREE."""
    if len(values) != GRID_SIZE or any(len(row) != GRID_SIZE for row in values):
        raise ValueError("Card values must be a 5x5 matrix")
    card = Card(id=card_id or _new_card_id(), cells=_build_cells(values), name=name)
    if created_at is not None:
        card = replace(card, created_at=created_at)
    return card


def generate_card(
    rng: RandomSource, card_id: Optional[str] = None, name: Optional[str] = None
) -> Card:
    """Random card: distinct numbers per column drawn from that column's range."""
    values: List[List[CellValue]] = [[None] * GRID_SIZE for _ in range(GRID_SIZE)]
    for c, letter in enumerate(COLUMNS):
        lo, hi = COLUMN_RANGES[letter]
        drawn = rng.draw(lo, hi, GRID_SIZE)
        for r in range(GRID_SIZE):
            values[r][c] = drawn[r]
    return card_from_values(values, card_id=card_id, name=name)


def generate_cards(count: int, *, seed: int, rng_engine: str = "py_random") -> List[Card]:
    if count < 0:
        raise ValueError("count must be >= 0")
    cards: List[Card] = []
    for idx in range(count):
        rng = create_rng(rng_engine, derive_parallel_seed(seed, idx, "card"))
        cards.append(generate_card(rng, card_id=f"card_{idx + 1}", name=f"Card {idx + 1}"))
    logger.debug("Generated %d cards (seed=%s, engine=%s)", count, seed, rng_engine)
    return cards


def card_numbers(card: Card) -> List[int]:
    return [cell.number for row in card.cells for cell in row if cell.number is not None]


def _remark(card: Card, marked_for) -> Card:
    cells = tuple(
        tuple(replace(cell, marked=marked_for(cell)) for cell in row) for row in card.cells
    )
    return replace(card, cells=cells)


def mark_number(card: Card, number: int) -> Card:
    """Return a copy of ``card`` with every cell holding ``number`` marked."""
    return _remark(card, lambda cell: cell.marked or cell.number == number)


def reset_card(card: Card) -> Card:
    """Clear every mark except the FREE cell."""
    return _remark(card, lambda cell: cell.is_free)


def toggle_mark(card: Card, row: int, col: int) -> Card:
    target = card.cells[row][col]
    # FREE stays marked; an unset cell has no number to mark
    if target.is_free or target.number is None:
        return card
    rows = [list(r) for r in card.cells]
    rows[row][col] = replace(target, marked=not target.marked)
    return replace(card, cells=tuple(tuple(r) for r in rows))


def apply_called_numbers(cards: Iterable[Card], called_numbers: Iterable[int]) -> List[Card]:
    """Derive marks from the called numbers alone.

    A cell ends up marked iff it is FREE or its value was called; marks already
    present on the input cards are discarded.
    """
    called = set(called_numbers)
    return [
        _remark(card, lambda cell: cell.is_free or (cell.number is not None and cell.number in called))
        for card in cards
    ]


def set_cell_value(card: Card, row: int, col: int, value: int):
    """Validated single-cell edit.

    Returns ``(ValidationResult, Card)``; the card comes back unchanged when the
    value is rejected.
    """
    from .validation import ValidationResult, validate_number_entry

    if (row, col) == CENTER:
        return ValidationResult(is_valid=False, error="FREE space cannot be edited"), card
    result = validate_number_entry(card, value, row, col)
    if not result.is_valid:
        return result, card
    rows = [list(r) for r in card.cells]
    rows[row][col] = Cell(column=COLUMNS[col], value=value, marked=False)
    return result, replace(card, cells=tuple(tuple(r) for r in rows))
