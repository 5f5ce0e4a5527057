"""Store integrity checks for morphology-engine."""

from __future__ import annotations

import sqlite3

from morphology_engine.alphabet import ARABIC_CONSONANTS, normalize_root
from morphology_engine.exceptions import InvalidPatternError, InvalidRootError, PhonologicalClashError
from morphology_engine.history import frequency_entity_id
from morphology_engine.models import ValidationResult, ValidationSeverity
from morphology_engine.substitution import EMPTY_CLASH_TABLE, ClashTable, check_clash, validate_rule


def check_integrity(
    conn: sqlite3.Connection,
    *,
    consonants: frozenset[str] = ARABIC_CONSONANTS,
    clash_table: ClashTable = EMPTY_CLASH_TABLE,
) -> list[ValidationResult]:
    """Run all integrity rules against the raw store."""
    results: list[ValidationResult] = []
    results.extend(_val_root_001(conn, consonants))
    results.extend(_val_pat_001(conn))
    results.extend(_val_frq_001(conn))
    results.extend(_val_pat_002(conn))
    results.extend(_val_idx_001(conn, consonants, clash_table))
    return results


def _val_root_001(
    conn: sqlite3.Connection, consonants: frozenset[str]
) -> list[ValidationResult]:
    """Stored root that is not three consonants in normal form."""
    results = []
    for row in conn.execute("SELECT root FROM roots ORDER BY root").fetchall():
        root = row["root"]
        try:
            letters = normalize_root(root, consonants)
        except InvalidRootError as e:
            message = str(e)
        else:
            if "".join(letters) == root:
                continue
            message = f"Root is not stored in normal form ({''.join(letters)!r})"
        results.append(ValidationResult(
            rule_id="VAL-ROOT-001",
            severity=ValidationSeverity.ERROR.value,
            entity_type="root",
            entity_id=root,
            message=message,
            details=None,
        ))
    return results


def _val_pat_001(conn: sqlite3.Connection) -> list[ValidationResult]:
    """Stored rule without a valid 1, 2, 3 marker sequence."""
    results = []
    for row in conn.execute(
        "SELECT name, rule FROM patterns ORDER BY rowid"
    ).fetchall():
        try:
            validate_rule(row["rule"])
        except InvalidPatternError as e:
            results.append(ValidationResult(
                rule_id="VAL-PAT-001",
                severity=ValidationSeverity.ERROR.value,
                entity_type="pattern",
                entity_id=row["name"],
                message=str(e),
                details={"rule": row["rule"]},
            ))
    return results


def _val_frq_001(conn: sqlite3.Connection) -> list[ValidationResult]:
    """Negative recorded frequency."""
    results = []
    sql = (
        "SELECT r.root, p.name, f.count FROM frequencies f "
        "JOIN roots r ON f.root_rowid = r.rowid "
        "JOIN patterns p ON f.pattern_rowid = p.rowid "
        "WHERE f.count < 0"
    )
    for row in conn.execute(sql).fetchall():
        results.append(ValidationResult(
            rule_id="VAL-FRQ-001",
            severity=ValidationSeverity.ERROR.value,
            entity_type="frequency",
            entity_id=frequency_entity_id(row["root"], row["name"]),
            message=f"Negative frequency: {row['count']}",
            details={"count": row["count"]},
        ))
    return results


def _val_pat_002(conn: sqlite3.Connection) -> list[ValidationResult]:
    """Two or more patterns with an identical rule."""
    results = []
    sql = (
        "SELECT rule, GROUP_CONCAT(name, '|') as names, COUNT(*) as cnt "
        "FROM patterns GROUP BY rule HAVING cnt > 1"
    )
    for row in conn.execute(sql).fetchall():
        names = row["names"].split("|")
        results.append(ValidationResult(
            rule_id="VAL-PAT-002",
            severity=ValidationSeverity.WARNING.value,
            entity_type="pattern",
            entity_id=names[0],
            message=(
                f"Rule {row['rule']!r} is shared by {row['cnt']} patterns: "
                f"{', '.join(names)}"
            ),
            details={"rule": row["rule"], "patterns": names},
        ))
    return results


def _val_idx_001(
    conn: sqlite3.Connection,
    consonants: frozenset[str],
    clash_table: ClashTable,
) -> list[ValidationResult]:
    """Pattern that the clash table blocks for every stored root."""
    results: list[ValidationResult] = []
    letters_list = []
    for row in conn.execute("SELECT root FROM roots").fetchall():
        try:
            letters_list.append(normalize_root(row["root"], consonants))
        except InvalidRootError:
            continue  # reported by VAL-ROOT-001
    if not letters_list or not clash_table:
        return results

    for row in conn.execute("SELECT name FROM patterns ORDER BY rowid").fetchall():
        name = row["name"]
        if not any(_generates(letters, name, clash_table) for letters in letters_list):
            results.append(ValidationResult(
                rule_id="VAL-IDX-001",
                severity=ValidationSeverity.WARNING.value,
                entity_type="pattern",
                entity_id=name,
                message="Pattern generates no word for any stored root",
                details={"roots_checked": len(letters_list)},
            ))
    return results


def _generates(
    letters: tuple[str, str, str], pattern_name: str, clash_table: ClashTable
) -> bool:
    try:
        check_clash(letters, pattern_name, clash_table)
    except PhonologicalClashError:
        return False
    return True
