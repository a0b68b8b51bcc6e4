from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest

from bingo_pot.core.analyzer import analyze_called_game
from bingo_pot.serialize import (
    card_from_dict,
    card_to_dict,
    emit_cards_json,
    emit_watch_csv,
    game_analysis_to_dict,
    pattern_from_dict,
    pattern_to_dict,
    watch_counts,
    write_json,
)


def test_card_dict_keeps_marks(card, called):
    marked = called(card, [1, 17])
    data = card_to_dict(marked)
    assert data["cells"][2][2] == {"column": "N", "value": "FREE", "marked": True}
    restored = card_from_dict(json.loads(json.dumps(data)))
    assert restored == marked


def test_card_from_values_entry():
    values = [[1, 16, 31, 46, 61], [2, 17, 32, 47, 62], [3, 18, 0, 48, 63], [4, 19, 34, 49, 64], [5, 20, 35, 50, 65]]
    card = card_from_dict({"id": "v1", "values": values})
    assert card.id == "v1"
    assert card.cells[2][2].is_free
    assert all(not c.marked for row in card.cells for c in row if not c.is_free)
    with pytest.raises(ValueError):
        card_from_dict({"id": "x"})


def test_pattern_dict_derives_kind_from_name(patterns):
    data = pattern_to_dict(patterns["Dikit"])
    assert data["kind"] == "dikit"
    assert data["built_in"] is True
    data["kind"] = "standard"
    assert pattern_from_dict(data).kind is patterns["Dikit"].kind


def test_write_json_refuses_overwrite(tmp_path: Path):
    target = tmp_path / "nested" / "out.json"
    write_json(target, {"a": 1}, mkdirs=True, overwrite=False)
    with pytest.raises(FileExistsError):
        write_json(target, {"a": 2}, mkdirs=True, overwrite=False)
    write_json(target, {"a": 2}, mkdirs=True, overwrite=True)
    assert json.loads(target.read_text(encoding="utf-8")) == {"a": 2}


def test_cards_json_layout(tmp_path: Path, card):
    target = tmp_path / "cards.json"
    emit_cards_json(target, cards=[card], run_meta={"command": "generate"}, mkdirs=True, overwrite=False)
    data = json.loads(target.read_text(encoding="utf-8"))
    assert data["run_meta"] == {"command": "generate"}
    assert [c["id"] for c in data["cards"]] == ["c1"]


def test_watch_csv(tmp_path: Path, card, patterns):
    game = analyze_called_game([card], [patterns["Dikit"]], [2, 34])
    counts = watch_counts(game)
    assert counts == {17: 1, 19: 1, 49: 1}
    report = game_analysis_to_dict(game)
    assert report["numbers_to_watch"] == [17, 19, 49]

    target = tmp_path / "watch.csv"
    emit_watch_csv(target, counts=counts, mkdirs=True, overwrite=False)
    with target.open(encoding="utf-8", newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["number", "column", "waiting_paths"]
    assert rows[1:] == [["17", "I", "1"], ["19", "I", "1"], ["49", "G", "1"]]


def test_card_cells_need_free_center(card):
    data = card_to_dict(card)
    data["cells"][2][2] = {"column": "N", "value": 33, "marked": False}
    with pytest.raises(ValueError, match="Center cell"):
        card_from_dict(data)
