from __future__ import annotations

from typing import Callable, Dict, Iterable

import pytest

from bingo_pot.core.card import Card, apply_called_numbers, card_from_values
from bingo_pot.core.pattern import Pattern, predefined_patterns

SAMPLE_VALUES = [
    [1, 16, 31, 46, 61],
    [2, 17, 32, 47, 62],
    [3, 18, "FREE", 48, 63],
    [4, 19, 34, 49, 64],
    [5, 20, 35, 50, 65],
]


@pytest.fixture(scope="session")
def card() -> Card:
    return card_from_values(SAMPLE_VALUES, card_id="c1", name="Sample", created_at=0.0)


@pytest.fixture(scope="session")
def called() -> Callable[[Card, Iterable[int]], Card]:
    def _called(card: Card, numbers: Iterable[int]) -> Card:
        return apply_called_numbers([card], numbers)[0]

    return _called


@pytest.fixture(scope="session")
def patterns() -> Dict[str, Pattern]:
    return {p.name: p for p in predefined_patterns()}
