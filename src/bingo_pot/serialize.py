from __future__ import annotations

import csv
import json
import platform
import sys
from collections import Counter
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from .core.analyzer import GameAnalysis, WaitingNumberAnalysis
from .core.card import Card, Cell, card_from_values, number_column
from .core.pattern import Pattern
from .core.validation import validate_card_shape


def ensure_parent(path: Path, *, mkdirs: bool) -> None:
    parent = path.parent
    if not parent.exists() and mkdirs:
        parent.mkdir(parents=True, exist_ok=True)


def write_json(path: Path, data: object, *, mkdirs: bool, overwrite: bool) -> None:
    if path.exists() and not overwrite:
        raise FileExistsError(
            f"Refusing to overwrite existing file without --force: {path}"
        )
    ensure_parent(path, mkdirs=mkdirs)
    text = json.dumps(data, ensure_ascii=False, sort_keys=True, indent=2)
    path.write_text(text + "\n", encoding="utf-8")


def read_json(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def build_run_meta(*, app_version: str, params_hash: str, command: str) -> Dict[str, object]:
    return {
        "app_version": app_version,
        "command": command,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "python_version": sys.version.split()[0],
        "platform": platform.system().lower(),
        "params_hash": params_hash,
    }


# Cards


def card_to_dict(card: Card) -> Dict[str, object]:
    return {
        "id": card.id,
        "name": card.name,
        "created_at": card.created_at,
        "cells": [
            [{"column": c.column, "value": c.value, "marked": c.marked} for c in row]
            for row in card.cells
        ],
    }


def card_from_dict(data: Mapping[str, Any]) -> Card:
    """Accept either a full ``cells`` matrix or a bare 5x5 ``values`` matrix."""
    if "cells" in data:
        cells = data["cells"]
        if len(cells) != 5 or any(len(row) != 5 for row in cells):
            raise ValueError(f"Card {data.get('id')!r}: cells must be 5x5")
        grid = tuple(
            tuple(
                Cell(column=str(c["column"]), value=c.get("value"), marked=bool(c.get("marked", False)))
                for c in row
            )
            for row in cells
        )
        card = Card(
            id=str(data["id"]),
            cells=grid,
            name=data.get("name"),
            created_at=float(data.get("created_at", 0.0)),
        )
        shape = validate_card_shape(card)
        if not shape.is_valid:
            raise ValueError(f"Card {card.id!r}: {shape.error}")
        return card
    if "values" in data:
        return card_from_values(
            data["values"],
            card_id=str(data["id"]) if "id" in data else None,
            name=data.get("name"),
            created_at=data.get("created_at"),
        )
    raise ValueError("Card entry needs either 'cells' or 'values'")


def emit_cards_json(
    path: Path,
    *,
    cards: Sequence[Card],
    run_meta: Dict[str, object],
    mkdirs: bool,
    overwrite: bool,
) -> None:
    data = {"run_meta": run_meta, "cards": [card_to_dict(c) for c in cards]}
    write_json(path, data, mkdirs=mkdirs, overwrite=overwrite)


# Patterns


def pattern_to_dict(pattern: Pattern) -> Dict[str, object]:
    return {
        "id": pattern.id,
        "name": pattern.name,
        "grid": [list(row) for row in pattern.grid],
        "created_at": pattern.created_at,
        "kind": pattern.kind.value,
        "built_in": pattern.is_built_in,
    }


def pattern_from_dict(data: Mapping[str, Any]) -> Pattern:
    # kind and built_in are derived from the name; stored values are ignored
    return Pattern(
        id=str(data["id"]),
        name=str(data["name"]),
        grid=data["grid"],
        created_at=float(data.get("created_at", 0.0)),
    )


# Analyses


def analysis_to_dict(analysis: WaitingNumberAnalysis) -> Dict[str, object]:
    return asdict(analysis)


def game_analysis_to_dict(game: GameAnalysis) -> Dict[str, object]:
    return {
        "card_analyses": [analysis_to_dict(a) for a in game.card_analyses],
        "pot_cards": [analysis_to_dict(a) for a in game.pot_cards],
        "winning_cards": [analysis_to_dict(a) for a in game.winning_cards],
        "numbers_to_watch": list(game.numbers_to_watch),
    }


def watch_counts(game: GameAnalysis) -> Dict[int, int]:
    """How many open-path records are waiting on each number."""
    counts: Counter[int] = Counter()
    for analysis in game.card_analyses:
        if not analysis.is_winner:
            counts.update(analysis.missing_numbers)
    return dict(counts)


def emit_report_json(
    path: Path, *, report: Dict[str, object], mkdirs: bool, overwrite: bool
) -> None:
    write_json(path, report, mkdirs=mkdirs, overwrite=overwrite)


def emit_watch_csv(
    path: Path,
    *,
    counts: Dict[int, int],
    mkdirs: bool,
    overwrite: bool,
) -> None:
    if path.exists() and not overwrite:
        raise FileExistsError(
            f"Refusing to overwrite existing file without --force: {path}"
        )
    ensure_parent(path, mkdirs=mkdirs)
    rows: List[List[object]] = [
        [num, number_column(num) or "", counts[num]] for num in sorted(counts)
    ]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["number", "column", "waiting_paths"])
        writer.writerows(rows)
