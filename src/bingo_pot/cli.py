from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

import typer

from .config import resolve_parameters
from .core.analyzer import (
    analysis_summary,
    analyze_called_game,
    closest_patterns,
    probability_insight,
    sort_by_closeness,
)
from .core.card import apply_called_numbers, generate_cards
from .core.pattern import predefined_patterns
from .core.validation import validate_complete_card
from .logging_setup import setup_logging
from .serialize import (
    analysis_to_dict,
    build_run_meta,
    card_from_dict,
    emit_cards_json,
    emit_report_json,
    emit_watch_csv,
    game_analysis_to_dict,
    pattern_from_dict,
    pattern_to_dict,
    read_json,
    watch_counts,
)
from .session import is_valid_bingo_number
from .version import __version__

app = typer.Typer(help="Bingo pattern matching and waiting-number analysis CLI")
logger = logging.getLogger("bingo_pot.cli")


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(0)


@app.callback()
def common_options(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show application version and exit",
        is_eager=True,
        callback=_show_version,
    ),
) -> None:
    pass


def _resolve(config: str | None, overrides: Dict[str, Any]):
    cli_overrides = {k: v for k, v in overrides.items() if v is not None}
    try:
        resolved, params_hash, _cfg_path = resolve_parameters(
            config_path_str=config, cli_overrides=cli_overrides
        )
    except (FileNotFoundError, ValueError, RuntimeError) as e:
        typer.echo(f"Config error: {e}", err=True)
        raise typer.Exit(code=2)
    setup_logging(
        level=str(resolved.get("log_level", "INFO")),
        log_file=resolved.get("log_file"),
        json_format=(str(resolved.get("log_format", "text")) == "json"),
    )
    return resolved, params_hash


@app.command()
def generate(
    config: str = typer.Option(None, "--config", help="Path to config file (YAML/JSON)"),
    count: int = typer.Option(None, "--count", help="Number of cards to generate"),
    seed: int = typer.Option(None, "--seed", help="Base seed"),
    rng_engine: str = typer.Option(None, "--rng-engine", help="py_random|numpy_pcg64"),
    out_cards: str = typer.Option(None, "--out-cards", help="cards.json output path"),
    log_file: str = typer.Option(None, "--log-file", help="Log file path"),
    log_level: str = typer.Option(None, "--log-level", help="DEBUG|INFO|WARN|ERROR"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Resolve params and exit"),
    force: bool = typer.Option(False, "--force", help="Overwrite outputs if they exist"),
    no_mkdirs: bool = typer.Option(False, "--no-mkdirs", help="Do not create parent directories"),
) -> None:
    """Generate random, valid cards."""
    resolved, params_hash = _resolve(
        config,
        {
            "card_count": count,
            "seed.value": seed,
            "seed.engine": rng_engine,
            "out_cards": out_cards,
            "log_file": log_file,
            "log_level": log_level,
        },
    )
    if dry_run:
        typer.echo(f"Params hash: {params_hash}")
        raise typer.Exit(0)

    card_count = int(resolved.get("card_count") or 0)
    seed_value = int(resolved.get("seed", {}).get("value", 0))
    engine = str(resolved.get("seed", {}).get("engine", "py_random"))
    try:
        cards = generate_cards(card_count, seed=seed_value, rng_engine=engine)
    except (ValueError, RuntimeError) as e:
        typer.echo(f"Generation failed: {e}", err=True)
        raise typer.Exit(code=1)

    out_path = Path(resolved.get("out_cards") or "cards.json")
    try:
        emit_cards_json(
            out_path,
            cards=cards,
            run_meta=build_run_meta(app_version=__version__, params_hash=params_hash, command="generate"),
            mkdirs=(not no_mkdirs),
            overwrite=force,
        )
    except FileExistsError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)
    typer.echo(f"✅ Generated {len(cards)} cards -> {out_path}")


@app.command()
def patterns() -> None:
    """List the predefined patterns and how each one is matched."""
    for pattern in predefined_patterns():
        flag = " (built-in)" if pattern.is_built_in else ""
        typer.echo(f"{pattern.name:<26} {pattern.kind.value}{flag}")


def _load_game(path: Path):
    data = read_json(path)
    if not isinstance(data, dict):
        raise ValueError("Game file must be a JSON object")
    cards = [card_from_dict(c) for c in data.get("cards", [])]
    if "patterns" in data:
        pats = [pattern_from_dict(p) for p in data["patterns"]]
    else:
        pats = predefined_patterns()
    called = list(data.get("called_numbers", []))
    bad = [n for n in called if not is_valid_bingo_number(n)]
    if bad:
        raise ValueError(f"Invalid called numbers: {bad}")
    return cards, pats, called


@app.command()
def analyze(
    game: str = typer.Option(..., "--game", help="JSON with cards, patterns and called_numbers"),
    config: str = typer.Option(None, "--config", help="Path to config file (YAML/JSON)"),
    out_report: str = typer.Option(None, "--out-report", help="report.json output path"),
    summary_csv: str = typer.Option(None, "--summary-csv", help="Per-number waiting counts CSV"),
    closest_limit: int = typer.Option(None, "--closest", help="Closest patterns listed per card"),
    log_file: str = typer.Option(None, "--log-file", help="Log file path"),
    log_level: str = typer.Option(None, "--log-level", help="DEBUG|INFO|WARN|ERROR"),
    force: bool = typer.Option(False, "--force", help="Overwrite outputs if they exist"),
    no_mkdirs: bool = typer.Option(False, "--no-mkdirs", help="Do not create parent directories"),
) -> None:
    """Analyze a game: winners, on-pot cards and numbers to watch."""
    resolved, params_hash = _resolve(
        config,
        {
            "out_report": out_report,
            "summary_csv": summary_csv,
            "closest_limit": closest_limit,
            "log_file": log_file,
            "log_level": log_level,
        },
    )

    try:
        cards, pats, called = _load_game(Path(game))
    except (FileNotFoundError, ValueError, KeyError, TypeError) as e:
        typer.echo(f"Cannot load game: {e}", err=True)
        raise typer.Exit(code=2)

    for card in cards:
        check = validate_complete_card(card)
        if not check.is_valid:
            logger.warning("Card %s is not a complete card: %s", card.id, check.error)

    result = analyze_called_game(cards, pats, called)
    for analysis in sort_by_closeness(result.card_analyses):
        typer.echo(f"[{analysis.card_id}] {analysis_summary(analysis)}")
    watch = ", ".join(str(n) for n in result.numbers_to_watch) or "-"
    typer.echo(f"Numbers to watch: {watch}")

    limit = int(resolved.get("closest_limit", 3))
    marked_cards = apply_called_numbers(cards, called)
    closest: Dict[str, List[Dict[str, object]]] = {}
    for card in marked_cards:
        entries = []
        for analysis in closest_patterns(card, pats, limit=limit):
            entry = analysis_to_dict(analysis)
            entry["probability"] = probability_insight(called, analysis.missing_numbers).probability
            entries.append(entry)
        closest[card.id] = entries

    report = {
        "run_meta": build_run_meta(app_version=__version__, params_hash=params_hash, command="analyze"),
        "called_numbers": called,
        "patterns": [pattern_to_dict(p) for p in pats],
        "analysis": game_analysis_to_dict(result),
        "closest_patterns": closest,
    }

    out_path = resolved.get("out_report")
    try:
        if out_path:
            emit_report_json(Path(out_path), report=report, mkdirs=(not no_mkdirs), overwrite=force)
            typer.echo(f"📁 Report: {out_path}")
        if resolved.get("summary_csv"):
            emit_watch_csv(
                Path(resolved["summary_csv"]),
                counts=watch_counts(result),
                mkdirs=(not no_mkdirs),
                overwrite=force,
            )
    except FileExistsError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)


def main(_argv: list[str] | None = None) -> int:
    try:
        app(standalone_mode=True)
        return 0
    except SystemExit as e:
        return int(e.code) if e.code is not None else 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
