"""
Command-line interface for the morphology engine.
"""
from __future__ import annotations

import argparse
import dataclasses
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from morphology_engine import __version__
from morphology_engine.config import EngineConfig, load_config
from morphology_engine.engine import MorphologyEngine
from morphology_engine.exceptions import MorphologyEngineError
from morphology_engine.models import ImportResult

DEFAULT_DB = "morphology.db"


def main(argv: Optional[list] = None) -> int:
    """Main entry point for the morpho CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose > 1
        else logging.INFO if args.verbose == 1
        else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except FileNotFoundError as e:
        print(f"[ERROR] {e}")
        return 1
    except MorphologyEngineError as e:
        print(f"[{type(e).__name__}] {e}")
        return 1


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="morpho",
        description="Root-and-pattern morphology engine",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--db",
        type=str,
        help=f"Database file (default: {DEFAULT_DB}, or db_path from --config)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML configuration file",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Log more (-v info, -vv debug)",
    )

    subparsers = parser.add_subparsers(title="commands", dest="command")

    # roots
    p = subparsers.add_parser("add-root", help="Add a root")
    p.add_argument("root")
    p.set_defaults(func=cmd_add_root)

    p = subparsers.add_parser("delete-root", help="Delete a root")
    p.add_argument("root")
    p.set_defaults(func=cmd_delete_root)

    p = subparsers.add_parser("roots", help="List roots")
    p.add_argument("--search", type=str, help="Only roots starting with this prefix")
    p.add_argument("--page", type=int, default=1, help="Page number (default: 1)")
    p.add_argument("--page-size", type=int, default=10, help="Roots per page (default: 10)")
    p.set_defaults(func=cmd_roots)

    p = subparsers.add_parser("import-roots", help="Import roots, one per line")
    p.add_argument("file", type=Path)
    p.set_defaults(func=cmd_import_roots)

    # patterns
    p = subparsers.add_parser("add-pattern", help="Add a pattern")
    p.add_argument("name")
    p.add_argument("rule", help="Template using markers 1, 2, 3")
    p.set_defaults(func=cmd_add_pattern)

    p = subparsers.add_parser("update-pattern", help="Change the rule of a pattern")
    p.add_argument("name")
    p.add_argument("rule", help="Template using markers 1, 2, 3")
    p.set_defaults(func=cmd_update_pattern)

    p = subparsers.add_parser("delete-pattern", help="Delete a pattern")
    p.add_argument("name")
    p.set_defaults(func=cmd_delete_pattern)

    p = subparsers.add_parser("patterns", help="List patterns")
    p.set_defaults(func=cmd_patterns)

    p = subparsers.add_parser("import-patterns", help="Import name|rule lines")
    p.add_argument("file", type=Path)
    p.set_defaults(func=cmd_import_patterns)

    # generation and analysis
    p = subparsers.add_parser("generate", help="Generate one word")
    p.add_argument("root")
    p.add_argument("pattern")
    p.set_defaults(func=cmd_generate)

    p = subparsers.add_parser("by-pattern", help="List the word each root forms with a pattern")
    p.add_argument("name")
    p.set_defaults(func=cmd_by_pattern)

    p = subparsers.add_parser("analyze", help="Classify a root by its weak letters and hamza")
    p.add_argument("root")
    p.set_defaults(func=cmd_analyze)

    p = subparsers.add_parser("derivatives", help="Show the derivative family of a root")
    p.add_argument("root")
    p.set_defaults(func=cmd_derivatives)

    p = subparsers.add_parser("decompose", help="Find the root and pattern of a word")
    p.add_argument("word")
    p.add_argument("--all", action="store_true", help="Show every candidate")
    p.set_defaults(func=cmd_decompose)

    p = subparsers.add_parser("validate", help="Check that a word derives from a root")
    p.add_argument("word")
    p.add_argument("root")
    p.set_defaults(func=cmd_validate)

    p = subparsers.add_parser("stats", help="Show lexicon statistics")
    p.add_argument("--top", type=int, default=10, help="Top roots to list (default: 10)")
    p.set_defaults(func=cmd_stats)

    p = subparsers.add_parser("check", help="Run integrity checks on the store")
    p.set_defaults(func=cmd_check)

    return parser


@contextmanager
def _open_engine(args: argparse.Namespace) -> Iterator[MorphologyEngine]:
    config = load_config(args.config) if args.config else EngineConfig()
    if config.db_path == ":memory:":
        config = dataclasses.replace(config, db_path=DEFAULT_DB)
    with MorphologyEngine(args.db, config=config) as engine:
        yield engine


def cmd_add_root(args: argparse.Namespace) -> int:
    with _open_engine(args) as engine:
        root = engine.add_root(args.root)
    print(f"Added root {root.root} ({root.root_type.value})")
    return 0


def cmd_delete_root(args: argparse.Namespace) -> int:
    with _open_engine(args) as engine:
        engine.delete_root(args.root)
    print(f"Deleted root {args.root}")
    return 0


def cmd_roots(args: argparse.Namespace) -> int:
    with _open_engine(args) as engine:
        roots = engine.list_roots(args.search, args.page, args.page_size)
        total = engine.count_roots(args.search)
    for root in roots:
        print(root)
    print(f"\n{len(roots)} of {total} root(s), page {max(args.page, 1)}")
    return 0


def cmd_add_pattern(args: argparse.Namespace) -> int:
    with _open_engine(args) as engine:
        pattern = engine.add_pattern(args.name, args.rule)
    print(f"Added pattern {pattern.name}|{pattern.rule}")
    return 0


def cmd_update_pattern(args: argparse.Namespace) -> int:
    with _open_engine(args) as engine:
        pattern = engine.update_pattern(args.name, args.rule)
    print(f"Updated pattern {pattern.name}|{pattern.rule}")
    return 0


def cmd_delete_pattern(args: argparse.Namespace) -> int:
    with _open_engine(args) as engine:
        engine.delete_pattern(args.name)
    print(f"Deleted pattern {args.name.strip()}")
    return 0


def cmd_patterns(args: argparse.Namespace) -> int:
    with _open_engine(args) as engine:
        patterns = engine.list_patterns()
    for pattern in patterns:
        print(f"{pattern.name}|{pattern.rule}")
    print(f"\n{len(patterns)} pattern(s)")
    return 0


def cmd_import_roots(args: argparse.Namespace) -> int:
    with _open_engine(args) as engine:
        result = engine.import_roots(args.file)
    return _print_import_result(result, "root")


def cmd_import_patterns(args: argparse.Namespace) -> int:
    with _open_engine(args) as engine:
        result = engine.import_patterns(args.file)
    return _print_import_result(result, "pattern")


def cmd_generate(args: argparse.Namespace) -> int:
    with _open_engine(args) as engine:
        generated = engine.generate(args.root, args.pattern)
    print(generated.word)
    return 0


def cmd_by_pattern(args: argparse.Namespace) -> int:
    with _open_engine(args) as engine:
        words = engine.words_for_pattern(args.name)
    for d in words:
        print(f"  {d.root:<8} {d.word:<12} {d.frequency}")
    print(f"\n{len(words)} word(s)")
    return 0


def cmd_analyze(args: argparse.Namespace) -> int:
    with _open_engine(args) as engine:
        analysis = engine.analyze_root(args.root)
    print(f"{analysis.root} ({analysis.root_type.value})")
    print(f"  letters: {' '.join(analysis.letters)}")
    print(f"  hamza:   {'yes' if analysis.contains_hamza else 'no'}")
    print(f"  {analysis.explanation}")
    return 0


def cmd_derivatives(args: argparse.Namespace) -> int:
    with _open_engine(args) as engine:
        family = engine.derivatives_of(args.root)
    print(f"{family.root} ({family.root_type.value})")
    for d in family.derivatives:
        print(f"  {d.word:<12} {d.pattern:<12} {d.frequency}")
    print(
        f"\n{family.total_derivatives} derivative(s), "
        f"total frequency {family.total_frequency}"
    )
    return 0


def cmd_decompose(args: argparse.Namespace) -> int:
    with _open_engine(args) as engine:
        if args.all:
            candidates = engine.find_all_roots(args.word)
        else:
            best = engine.decompose(args.word)
            candidates = [best] if best is not None else []

    if not candidates:
        print(f"No decomposition found for {args.word}")
        return 1
    for c in candidates:
        residue = "".join(c.residue)
        suffix = f"  residue: {residue}" if residue else ""
        print(f"{c.root}  {c.pattern}  [{c.kind.value}]{suffix}")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    with _open_engine(args) as engine:
        result = engine.validate(args.word, args.root)
    print(f"[{'VALID' if result.valid else 'INVALID'}] {result.message}")
    return 0 if result.valid else 1


def cmd_stats(args: argparse.Namespace) -> int:
    with _open_engine(args) as engine:
        stats = engine.statistics(top_n=args.top)
    print(f"Roots:        {stats.total_roots}")
    print(f"Patterns:     {stats.total_patterns}")
    print(f"Derivatives:  {stats.total_derivatives}")
    print(f"Frequency:    {stats.total_frequency}")
    print(f"Avg/root:     {stats.avg_derivatives:.2f}")
    if stats.top_roots:
        print("\nTop roots:")
        for i, r in enumerate(stats.top_roots, 1):
            print(f"  {i:>3}. {r.root}  {r.total_frequency}")
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    with _open_engine(args) as engine:
        results = engine.check_integrity()
    if not results:
        print("No integrity problems found")
        return 0
    for r in results:
        print(f"  [{r.severity}] {r.rule_id} {r.entity_type} {r.entity_id}: {r.message}")
    errors = sum(1 for r in results if r.severity == "ERROR")
    print(f"\nFound {errors} error(s), {len(results) - errors} warning(s)")
    return 1 if errors else 0


def _print_import_result(result: ImportResult, kind: str) -> int:
    print(f"Imported {result.success_count} {kind}(s), {result.failure_count} failed")
    for failure in result.failures:
        print(f"  Line {failure.line_number}: {failure.line}  [{failure.error}] {failure.reason}")
    return 0 if result.failure_count == 0 else 1
