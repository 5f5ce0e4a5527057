"""YAML configuration for morphology-engine.

Example ``morphology.yaml``::

    db_path: lexicon.db          # relative to this file
    default_frequency: 1
    max_residue: 3
    affix_symbols: "الوفبكستنيهةمأ"
    clash_rules:
      - letter_class: weak
        slot: 1
        patterns: [افتعل]
        reason: initial weak letter assimilates to the infix ta
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from morphology_engine.alphabet import ARABIC_CONSONANTS, DEFAULT_AFFIX_SYMBOLS, HARAKAT
from morphology_engine.exceptions import ConfigError
from morphology_engine.resolver import DEFAULT_MAX_RESIDUE
from morphology_engine.substitution import ClashRule, ClashTable

_KNOWN_KEYS = frozenset({
    "db_path",
    "default_frequency",
    "max_residue",
    "affix_symbols",
    "clash_rules",
    "consonants",
})


@dataclass(frozen=True)
class EngineConfig:
    """Engine settings; every field has a working default."""

    db_path: str = ":memory:"
    default_frequency: int = 0
    max_residue: int = DEFAULT_MAX_RESIDUE
    affix_symbols: frozenset[str] = DEFAULT_AFFIX_SYMBOLS
    clash_rules: tuple[ClashRule, ...] = ()
    consonants: frozenset[str] = ARABIC_CONSONANTS
    clash_table: ClashTable = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.default_frequency not in (0, 1):
            raise ConfigError(
                f"default_frequency must be 0 or 1, got {self.default_frequency!r}"
            )
        if self.max_residue < 0:
            raise ConfigError(f"max_residue must be >= 0, got {self.max_residue!r}")
        object.__setattr__(self, "clash_table", ClashTable(self.clash_rules))

    def to_dict(self) -> dict[str, Any]:
        return {
            "db_path": self.db_path,
            "default_frequency": self.default_frequency,
            "max_residue": self.max_residue,
            "affix_symbols": "".join(sorted(self.affix_symbols - HARAKAT)),
            "clash_rules": [r.to_dict() for r in self.clash_rules],
        }


def load_config(source: str | Path | Mapping[str, Any]) -> EngineConfig:
    """Load an EngineConfig from a YAML file path or a parsed mapping.

    Raises:
        FileNotFoundError: If *source* is a path that does not exist
        ConfigError: If the YAML is invalid or has unknown keys or bad values
    """
    base_dir: Path | None = None
    if isinstance(source, Mapping):
        data: Mapping[str, Any] = source
    else:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Config not found: {path}")
        data = _load_yaml_file(path)
        base_dir = path.parent

    return _parse_config(data, base_dir)


def _load_yaml_file(path: Path) -> Mapping[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("YAML root must be a mapping (dictionary)")
    return data


def _parse_config(
    data: Mapping[str, Any],
    base_dir: Path | None = None,
) -> EngineConfig:
    unknown = set(data) - _KNOWN_KEYS
    if unknown:
        raise ConfigError(f"Unknown config key(s): {', '.join(sorted(unknown))}")

    kwargs: dict[str, Any] = {}

    db_path = data.get("db_path")
    if db_path is not None:
        db_path = str(db_path)
        if db_path != ":memory:" and base_dir is not None and not Path(db_path).is_absolute():
            db_path = str(base_dir / db_path)
        kwargs["db_path"] = db_path

    for key in ("default_frequency", "max_residue"):
        if key in data:
            value = data[key]
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"Field {key!r} must be an integer")
            kwargs[key] = value

    if "affix_symbols" in data:
        symbols = data["affix_symbols"]
        if not isinstance(symbols, str):
            raise ConfigError("Field 'affix_symbols' must be a string")
        kwargs["affix_symbols"] = frozenset(symbols) | HARAKAT

    if "consonants" in data:
        consonants = data["consonants"]
        if not isinstance(consonants, str) or not consonants:
            raise ConfigError("Field 'consonants' must be a non-empty string")
        kwargs["consonants"] = frozenset(consonants)

    rules = data.get("clash_rules") or []
    if not isinstance(rules, list):
        raise ConfigError("Field 'clash_rules' must be a list")
    for i, rule in enumerate(rules):
        if not isinstance(rule, Mapping):
            raise ConfigError(f"Clash rule #{i + 1} must be a mapping")
    kwargs["clash_rules"] = tuple(ClashRule.from_dict(r) for r in rules)

    return EngineConfig(**kwargs)
