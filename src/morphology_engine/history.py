"""Edit history of the lexicon: one entry per root, pattern or count change.

Values are stored as JSON text. A frequency entry is identified by
``"root|pattern"``, the same key the importer reads.
"""

from __future__ import annotations

import json
import sqlite3
from typing import Any

from morphology_engine.models import EditOperation, EditRecord, EntityKind


def frequency_entity_id(root: str, pattern_name: str) -> str:
    return f"{root}|{pattern_name}"


def _encode(value: Any) -> str | None:
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False)


def _insert(
    conn: sqlite3.Connection,
    kind: EntityKind,
    entity_id: str,
    operation: EditOperation,
    *,
    field_name: str | None = None,
    old_value: Any = None,
    new_value: Any = None,
) -> None:
    conn.execute(
        "INSERT INTO edit_history "
        "(entity_type, entity_id, field_name, operation, old_value, new_value) "
        "VALUES (?, ?, ?, ?, ?, ?)",
        (
            kind.value,
            entity_id,
            field_name,
            operation.value,
            _encode(old_value),
            _encode(new_value),
        ),
    )


def record_root(
    conn: sqlite3.Connection, operation: EditOperation, root: str
) -> None:
    """Roots are only created or deleted, never updated in place."""
    if operation is EditOperation.UPDATE:
        raise ValueError("Roots have no updatable fields")
    value = {"root": root}
    _insert(
        conn, EntityKind.ROOT, root, operation,
        old_value=value if operation is EditOperation.DELETE else None,
        new_value=value if operation is EditOperation.CREATE else None,
    )


def record_pattern(
    conn: sqlite3.Connection,
    operation: EditOperation,
    name: str,
    rule: str,
    *,
    old_rule: str | None = None,
) -> None:
    """Record a pattern change; an UPDATE stores the rule before and after."""
    if operation is EditOperation.UPDATE:
        _insert(
            conn, EntityKind.PATTERN, name, operation,
            field_name="rule", old_value=old_rule, new_value=rule,
        )
        return
    value = {"name": name, "rule": rule}
    _insert(
        conn, EntityKind.PATTERN, name, operation,
        old_value=value if operation is EditOperation.DELETE else None,
        new_value=value if operation is EditOperation.CREATE else None,
    )


def record_frequency(
    conn: sqlite3.Connection,
    root: str,
    pattern_name: str,
    old_count: int | None,
    new_count: int,
) -> None:
    """First count for a derivative is a CREATE, later ones UPDATE ``count``."""
    entity_id = frequency_entity_id(root, pattern_name)
    if old_count is None:
        _insert(
            conn, EntityKind.FREQUENCY, entity_id, EditOperation.CREATE,
            new_value={"root": root, "pattern": pattern_name, "count": new_count},
        )
    else:
        _insert(
            conn, EntityKind.FREQUENCY, entity_id, EditOperation.UPDATE,
            field_name="count", old_value=old_count, new_value=new_count,
        )


def query_history(
    conn: sqlite3.Connection,
    *,
    entity_type: str | EntityKind | None = None,
    entity_id: str | None = None,
    since: str | None = None,
    operation: str | EditOperation | None = None,
) -> list[EditRecord]:
    """Entries matching every given filter, oldest first.

    Raises:
        ValueError: If *entity_type* or *operation* is not a known value
    """
    filters: list[tuple[str, str]] = []
    if entity_type is not None:
        filters.append(("entity_type = ?", EntityKind(entity_type).value))
    if entity_id is not None:
        filters.append(("entity_id = ?", entity_id))
    if since is not None:
        filters.append(("timestamp > ?", since))
    if operation is not None:
        filters.append(("operation = ?", EditOperation(operation).value))

    where = " AND ".join(clause for clause, _ in filters) or "1=1"
    rows = conn.execute(
        f"SELECT rowid, * FROM edit_history WHERE {where} "
        "ORDER BY timestamp ASC, rowid ASC",
        [param for _, param in filters],
    ).fetchall()
    return [
        EditRecord(
            id=row["rowid"],
            entity_type=row["entity_type"],
            entity_id=row["entity_id"],
            field_name=row["field_name"],
            operation=row["operation"],
            old_value=row["old_value"],
            new_value=row["new_value"],
            timestamp=row["timestamp"],
        )
        for row in rows
    ]
