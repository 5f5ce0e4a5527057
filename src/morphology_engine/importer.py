"""Line-delimited bulk import for morphology-engine.

Each non-blank, non-comment line is applied on its own. A bad line is
recorded as an :class:`ImportFailure` and the import moves on, so one
malformed line never costs the rest of the file. The whole file runs in
a single engine batch: readers see either none of it or all of the
lines that succeeded.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path
from typing import TYPE_CHECKING

from morphology_engine.exceptions import MalformedImportLineError, MorphologyEngineError
from morphology_engine.models import ImportFailure, ImportResult

if TYPE_CHECKING:
    from morphology_engine.engine import MorphologyEngine

logger = logging.getLogger(__name__)

ImportSource = str | Path | Iterable[str]


def iter_lines(source: ImportSource) -> Iterator[tuple[int, str]]:
    """Yield (1-based line number, stripped line), skipping blanks and comments.

    A ``str`` is the text itself; a ``Path`` is read as UTF-8.
    """
    if isinstance(source, Path):
        if not source.exists():
            raise FileNotFoundError(f"File not found: {source}")
        lines: Iterable[str] = source.read_text(encoding="utf-8-sig").splitlines()
    elif isinstance(source, str):
        lines = source.splitlines()
    else:
        lines = source

    for number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        yield number, line


def parse_pattern_line(line: str) -> tuple[str, str]:
    """Split a ``name|rule`` line."""
    parts = line.split("|")
    if len(parts) != 2:
        raise MalformedImportLineError(
            f"Expected 'name|rule', got {len(parts)} field(s)"
        )
    name, rule = parts[0].strip(), parts[1].strip()
    if not name or not rule:
        raise MalformedImportLineError("Pattern name and rule must both be present")
    return name, rule


def parse_frequency_line(line: str) -> tuple[str, str, int]:
    """Split a ``root|pattern|count`` line."""
    parts = [p.strip() for p in line.split("|")]
    if len(parts) != 3:
        raise MalformedImportLineError(
            f"Expected 'root|pattern|count', got {len(parts)} field(s)"
        )
    root, pattern, raw_count = parts
    try:
        count = int(raw_count)
    except ValueError as e:
        raise MalformedImportLineError(f"Count is not an integer: {raw_count!r}") from e
    return root, pattern, count


def _apply_lines(
    engine: MorphologyEngine,
    source: ImportSource,
    apply: Callable[[str], object],
    kind: str,
) -> ImportResult:
    successes = 0
    failures: list[ImportFailure] = []

    with engine.batch():
        for number, line in iter_lines(source):
            try:
                apply(line)
            except MorphologyEngineError as e:
                logger.warning(f"Line {number} skipped ({line!r}): {e}")
                failures.append(ImportFailure(
                    line_number=number,
                    line=line,
                    reason=str(e),
                    error=type(e).__name__,
                ))
            else:
                successes += 1

    logger.info(f"Imported {successes} {kind}, {len(failures)} failed")
    return ImportResult(success_count=successes, failures=tuple(failures))


def import_roots(engine: MorphologyEngine, source: ImportSource) -> ImportResult:
    """One root per line."""
    return _apply_lines(engine, source, engine.add_root, "roots")


def import_patterns(engine: MorphologyEngine, source: ImportSource) -> ImportResult:
    """One ``name|rule`` pair per line."""

    def apply(line: str) -> None:
        name, rule = parse_pattern_line(line)
        engine.add_pattern(name, rule)

    return _apply_lines(engine, source, apply, "patterns")


def import_frequencies(engine: MorphologyEngine, source: ImportSource) -> ImportResult:
    """One ``root|pattern|count`` triple per line; counts replace earlier ones."""

    def apply(line: str) -> None:
        root, pattern, count = parse_frequency_line(line)
        engine.set_frequency(root, pattern, count)

    return _apply_lines(engine, source, apply, "frequencies")
