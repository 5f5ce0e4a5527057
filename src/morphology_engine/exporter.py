"""Export pipeline for morphology-engine."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any

import yaml

if TYPE_CHECKING:
    from morphology_engine.engine import MorphologyEngine

logger = logging.getLogger(__name__)


def export_roots(engine: MorphologyEngine) -> str:
    """One root per line, in the store's listing order; re-importable."""
    roots = engine.snapshot.roots
    return "".join(f"{root}\n" for root in roots)


def export_patterns(engine: MorphologyEngine) -> str:
    """``name|rule`` lines in insertion order; re-importable."""
    patterns = engine.snapshot.patterns
    return "".join(f"{p.name}|{p.rule}\n" for p in patterns)


def build_derivatives_document(engine: MorphologyEngine) -> dict[str, Any]:
    """Every root with its derivative family, as plain data."""
    snapshot = engine.snapshot
    roots = []
    for root in snapshot.roots:
        family = engine.index.derivatives_of(snapshot, root)
        roots.append({
            "root": family.root,
            "root_type": family.root_type.value,
            "total_frequency": family.total_frequency,
            "derivatives": [
                {"pattern": d.pattern, "word": d.word, "frequency": d.frequency}
                for d in family.derivatives
            ],
        })
    return {
        "patterns": [{"name": p.name, "rule": p.rule} for p in snapshot.patterns],
        "roots": roots,
    }


def export_derivatives_yaml(
    engine: MorphologyEngine,
    destination: str | Path | IO[str],
) -> None:
    """Dump the whole derivation index as YAML."""
    document = build_derivatives_document(engine)
    if isinstance(destination, (str, Path)):
        with open(destination, "w", encoding="utf-8") as f:
            yaml.safe_dump(document, f, allow_unicode=True, sort_keys=False)
    else:
        yaml.safe_dump(document, destination, allow_unicode=True, sort_keys=False)
    logger.info(
        f"Exported {len(document['roots'])} roots and "
        f"{len(document['patterns'])} patterns"
    )
