from __future__ import annotations

from hypothesis import given, strategies as st

from bingo_pot.core.card import (
    COLUMN_RANGES,
    COLUMNS,
    FREE,
    apply_called_numbers,
    card_from_values,
    card_numbers,
    empty_card,
    generate_cards,
    mark_number,
    number_column,
    reset_card,
    set_cell_value,
    toggle_mark,
)
from bingo_pot.core.validation import validate_complete_card

SAMPLE = [
    [1, 16, 31, 46, 61],
    [2, 17, 32, 47, 62],
    [3, 18, FREE, 48, 63],
    [4, 19, 34, 49, 64],
    [5, 20, 35, 50, 65],
]
SAMPLE_NUMBERS = [v for row in SAMPLE for v in row if v != FREE]


def marks(card):
    return [[cell.marked for cell in row] for row in card.cells]


def test_center_is_marked_free_space(card):
    center = card.cells[2][2]
    assert center.value == FREE
    assert center.marked is True
    assert center.column == "N"


def test_mark_number_returns_new_card_and_leaves_input_alone(card):
    marked = mark_number(card, 17)
    assert marked.cells[1][1].marked is True
    assert card.cells[1][1].marked is False
    assert marked is not card


def test_mark_number_unknown_is_structural_copy(card):
    assert mark_number(card, 75) == card


def test_card_numbers_row_major(card):
    nums = card_numbers(card)
    assert len(nums) == 24
    assert nums[:5] == [1, 16, 31, 46, 61]


def test_apply_called_numbers_replaces_existing_marks(card):
    stale = mark_number(card, 2)
    (fresh,) = apply_called_numbers([stale], [1])
    assert fresh.cells[0][0].marked is True
    assert fresh.cells[1][0].marked is False
    assert fresh.cells[2][2].marked is True


def test_number_not_on_any_card_changes_nothing(card):
    before = apply_called_numbers([card], [1, 16])
    after = apply_called_numbers([card], [1, 16, 75])
    assert [marks(c) for c in before] == [marks(c) for c in after]


@given(called=st.lists(st.integers(min_value=1, max_value=75), unique=True, max_size=40))
def test_apply_called_numbers_idempotent(called):
    card = card_from_values(SAMPLE, card_id="x")
    once = apply_called_numbers([card], called)
    twice = apply_called_numbers(once, called)
    assert [marks(c) for c in once] == [marks(c) for c in twice]


@given(called=st.sets(st.sampled_from(SAMPLE_NUMBERS)))
def test_marked_iff_free_or_called(called):
    card = card_from_values(SAMPLE, card_id="x")
    (marked,) = apply_called_numbers([card], called)
    for row in marked.cells:
        for cell in row:
            assert cell.marked == (cell.is_free or cell.number in called)


def test_reset_keeps_free_space(card):
    full = apply_called_numbers([card], SAMPLE_NUMBERS)[0]
    cleared = reset_card(full)
    assert sum(cell.marked for row in cleared.cells for cell in row) == 1
    assert cleared.cells[2][2].marked is True


def test_toggle_mark_flips_one_cell_only(card):
    toggled = toggle_mark(card, 0, 0)
    assert toggled.cells[0][0].marked is True
    assert toggle_mark(toggled, 0, 0).cells[0][0].marked is False
    assert toggle_mark(card, 2, 2) is card


def test_set_cell_value_validates_entry():
    blank = empty_card(card_id="blank")
    result, edited = set_cell_value(blank, 0, 0, 7)
    assert result.is_valid
    assert edited.cells[0][0].value == 7
    assert blank.cells[0][0].value is None

    result, same = set_cell_value(edited, 1, 0, 7)
    assert not result.is_valid
    assert result.error == "Number 7 already used"
    assert same is edited

    result, _ = set_cell_value(edited, 0, 1, 7)
    assert result.error == "I column must be 16-30"

    result, _ = set_cell_value(edited, 2, 2, 40)
    assert not result.is_valid


def test_number_column():
    assert number_column(1) == "B"
    assert number_column(45) == "N"
    assert number_column(75) == "O"
    assert number_column(0) is None
    assert number_column(76) is None


@given(seed=st.integers(min_value=0, max_value=2**32), count=st.integers(min_value=1, max_value=4))
def test_generated_cards_are_valid(seed, count):
    cards = generate_cards(count, seed=seed)
    assert len(cards) == count
    for card in cards:
        assert validate_complete_card(card).is_valid
        for col, letter in enumerate(COLUMNS):
            lo, hi = COLUMN_RANGES[letter]
            for row in range(5):
                cell = card.cells[row][col]
                if not cell.is_free:
                    assert lo <= cell.number <= hi


def test_generation_is_deterministic_per_seed():
    a = generate_cards(3, seed=20250824)
    b = generate_cards(3, seed=20250824)
    assert [card_numbers(c) for c in a] == [card_numbers(c) for c in b]
    assert [c.id for c in a] == ["card_1", "card_2", "card_3"]


def test_toggle_mark_ignores_unset_cells():
    blank = empty_card(card_id="blank")
    assert toggle_mark(blank, 0, 0) is blank
