from __future__ import annotations

import pytest
from hypothesis import given, strategies as st

from bingo_pot.session import (
    add_called_number,
    call_history,
    create_session,
    has_been_called,
    is_valid_bingo_number,
    remove_called_number,
    session_stats,
    uncalled_numbers,
)


def test_bingo_number_range():
    assert is_valid_bingo_number(1)
    assert is_valid_bingo_number(75)
    assert not is_valid_bingo_number(0)
    assert not is_valid_bingo_number(76)
    assert not is_valid_bingo_number(True)
    assert not is_valid_bingo_number("12")


def test_calls_keep_order_and_reject_repeats():
    s = create_session(["c1"], ["p1"])
    s = add_called_number(s, 12)
    s = add_called_number(s, 3)
    assert s.called_numbers == (12, 3)
    assert has_been_called(s, 3)
    with pytest.raises(ValueError, match="already called"):
        add_called_number(s, 12)
    with pytest.raises(ValueError, match="Invalid Bingo number"):
        add_called_number(s, 80)


def test_remove_is_undo():
    s = add_called_number(add_called_number(create_session([], []), 5), 6)
    undone = remove_called_number(s, 5)
    assert undone.called_numbers == (6,)
    assert s.called_numbers == (5, 6)
    assert remove_called_number(undone, 40) == undone


def test_history_and_stats():
    s = create_session(["c1"], ["p1"])
    assert session_stats(s).last_called is None
    for n in (1, 20, 75):
        s = add_called_number(s, n)
    history = call_history(s)
    assert [(h.number, h.column) for h in history] == [(1, "B"), (20, "I"), (75, "O")]
    assert history[0].timestamp < history[-1].timestamp
    stats = session_stats(s)
    assert stats.total_called == 3
    assert stats.remaining == 72
    assert stats.percent_complete == pytest.approx(4.0)
    assert stats.last_called == 75


@given(numbers=st.lists(st.integers(min_value=1, max_value=75), unique=True, max_size=75))
def test_called_and_uncalled_partition_the_range(numbers):
    s = create_session([], [])
    for n in numbers:
        s = add_called_number(s, n)
    assert sorted(list(s.called_numbers) + uncalled_numbers(s)) == list(range(1, 76))
