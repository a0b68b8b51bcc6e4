"""Parameter resolution for the CLI.

Precedence is CLI > environment (``BINGO_POT_*``) > config file > defaults.
Output paths from the config file are taken relative to the config file;
paths given on the command line are taken relative to the working directory.
"""

from __future__ import annotations

import hashlib
import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

try:
    import yaml  # type: ignore
except ImportError:  # pragma: no cover - loader fallback
    yaml = None


ENV_PREFIX = "BINGO_POT_"

PATH_KEYS = ("out_cards", "out_report", "log_file", "summary_csv")

# keys whose value changes generated cards or analysis output
HASHED_KEYS = ("card_count", "closest_limit", "seed.engine", "seed.value")

DEFAULTS: Dict[str, Any] = {
    "log_level": "INFO",
    "log_format": "text",
    "closest_limit": 3,
    "card_count": 1,
    "seed": {"engine": "py_random", "value": 0},
}


def _int_or_raw(raw: str) -> Any:
    try:
        return int(raw)
    except ValueError:
        return raw


# env suffix -> (dotted config key, converter)
ENV_KEYS: Dict[str, Tuple[str, Callable[[str], Any]]] = {
    "LOG_LEVEL": ("log_level", str),
    "LOG_FORMAT": ("log_format", str),
    "LOG_FILE": ("log_file", str),
    "CLOSEST_LIMIT": ("closest_limit", _int_or_raw),
    "CARD_COUNT": ("card_count", _int_or_raw),
    "SEED_VALUE": ("seed.value", _int_or_raw),
    "SEED_ENGINE": ("seed.engine", str),
    "OUT_CARDS": ("out_cards", str),
    "OUT_REPORT": ("out_report", str),
    "SUMMARY_CSV": ("summary_csv", str),
}


def _load_yaml(text: str) -> Any:
    if yaml is None:
        raise RuntimeError("PyYAML is required to read YAML config files")
    return yaml.safe_load(text) or {}


_LOADERS: Dict[str, Callable[[str], Any]] = {
    ".yaml": _load_yaml,
    ".yml": _load_yaml,
    ".json": json.loads,
}


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    loader = _LOADERS.get(config_path.suffix.lower())
    if loader is None:
        raise ValueError(f"Unsupported config extension: {config_path.suffix}")
    data = loader(config_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Top-level config must be a mapping: {config_path}")
    return data


def _env_overrides(env: Mapping[str, str]) -> Dict[str, Any]:
    return {
        key: convert(env[ENV_PREFIX + suffix])
        for suffix, (key, convert) in ENV_KEYS.items()
        if ENV_PREFIX + suffix in env
    }


def _lookup(source: Mapping[str, Any], dotted: str) -> Any:
    cur: Any = source
    for part in dotted.split("."):
        if not isinstance(cur, Mapping) or part not in cur:
            return None
        cur = cur[part]
    return cur


def _merge(base: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursive merge; dotted keys address nested mappings."""
    merged = dict(base)
    for key, value in overrides.items():
        head, _, rest = key.partition(".")
        if rest:
            value = {rest: value}
        current = merged.get(head)
        if isinstance(value, Mapping) and isinstance(current, dict):
            merged[head] = _merge(current, value)
        else:
            merged[head] = value
    return merged


def canonical_json_dumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=True, sort_keys=True, separators=(",", ":"))


def compute_params_hash(resolved: Mapping[str, Any]) -> str:
    contract = {key: _lookup(resolved, key) for key in HASHED_KEYS}
    contract = {k: v for k, v in contract.items() if v is not None}
    digest = hashlib.sha256(canonical_json_dumps(contract).encode("utf-8")).hexdigest()
    return f"sha256:{digest}"


def resolve_paths(
    resolved: Dict[str, Any],
    config_file: Optional[Path],
    cli_overrides: Mapping[str, Any],
) -> Dict[str, Any]:
    cwd = Path.cwd()
    result = dict(resolved)
    for key in PATH_KEYS:
        value = resolved.get(key)
        if value in (None, ""):
            result.pop(key, None)
            continue
        path = Path(str(value))
        if not path.is_absolute():
            from_cli = key in cli_overrides or config_file is None
            path = ((cwd if from_cli else config_file.parent) / path).resolve()
        result[key] = str(path)
    return result


def _check(resolved: Mapping[str, Any]) -> None:
    for key, minimum in (("closest_limit", 0), ("card_count", 0)):
        value = resolved.get(key)
        if not isinstance(value, int) or isinstance(value, bool) or value < minimum:
            raise ValueError(f"{key} must be an integer >= {minimum}, got {value!r}")
    if not isinstance(_lookup(resolved, "seed.value"), int):
        raise ValueError(f"seed.value must be an integer, got {_lookup(resolved, 'seed.value')!r}")


def resolve_parameters(
    *,
    config_path_str: Optional[str],
    cli_overrides: Dict[str, Any],
    env: Optional[Mapping[str, str]] = None,
) -> Tuple[Dict[str, Any], str, Optional[Path]]:
    """Returns (resolved_params, params_hash, config_path)."""
    config_path = Path(config_path_str).resolve() if config_path_str else None
    merged = dict(DEFAULTS)
    for layer in (
        _read_config_file(config_path) if config_path else {},
        _env_overrides(os.environ if env is None else env),
        cli_overrides,
    ):
        merged = _merge(merged, layer)
    _check(merged)
    merged = resolve_paths(merged, config_path, cli_overrides)
    return merged, compute_params_hash(merged), config_path
