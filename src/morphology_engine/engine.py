"""MorphologyEngine: main entry point for the morphology-engine library."""

from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Callable, Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TypeVar

from morphology_engine import db as _db
from morphology_engine import history as _hist
from morphology_engine import importer as _importer
from morphology_engine import resolver as _resolver
from morphology_engine import substitution as _subst
from morphology_engine import validator as _validator
from morphology_engine.alphabet import HAMZA_VARIANTS, analyze_root, detect_root_type, normalize_root
from morphology_engine.config import EngineConfig, load_config
from morphology_engine.exceptions import (
    DuplicatePatternError,
    DuplicateRootError,
    EntityNotFoundError,
    ValidationError,
)
from morphology_engine.importer import ImportSource
from morphology_engine.index import EMPTY_SNAPSHOT, DerivationIndex, LexiconSnapshot
from morphology_engine.models import (
    DecompositionCandidate,
    DerivativeModel,
    EditOperation,
    EditRecord,
    EntityKind,
    GeneratedWord,
    ImportResult,
    PatternModel,
    RootAnalysis,
    RootDerivatives,
    RootModel,
    StatisticsModel,
    ValidationResult,
    WordValidation,
)
from morphology_engine.statistics import compute_statistics

_F = TypeVar("_F", bound=Callable[..., Any])

logger = logging.getLogger(__name__)


def _modifies_db(method: _F) -> _F:
    """Decorator: serialises a mutation and publishes a new snapshot.

    Inside ``batch()`` the mutation joins the open transaction and the
    snapshot is published once, when the batch commits.
    """

    @functools.wraps(method)
    def wrapper(self: MorphologyEngine, *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            if self._in_batch:
                return method(self, *args, **kwargs)
            try:
                with self._conn:
                    result = method(self, *args, **kwargs)
            except BaseException:
                self._discard_pending()
                raise
            self._publish()
            return result

    return wrapper  # type: ignore[return-value]


class MorphologyEngine:
    """An owned root-and-pattern lexicon with its derivation index.

    Mutations are serialised by a single writer lock. Every committed
    mutation publishes an immutable :class:`LexiconSnapshot`; read
    operations capture the current snapshot once and work from it, so
    they run in parallel with each other and never observe a half-applied
    change.
    """

    def __init__(
        self,
        db_path: str | Path | None = None,
        *,
        config: EngineConfig | None = None,
    ) -> None:
        self._config = config if config is not None else EngineConfig()
        self._db_path = str(db_path if db_path is not None else self._config.db_path)
        self._conn = _db.connect(self._db_path)
        _db.check_schema_version(self._conn)
        _db.init_db(self._conn)

        self._lock = threading.RLock()
        self._in_batch = False
        self._batch_depth = 0
        self._pending_roots: set[str] = set()
        self._pending_evictions: set[str] = set()
        self._pending_all = False

        self._index = DerivationIndex(
            clash_table=self._config.clash_table,
            default_frequency=self._config.default_frequency,
            consonants=self._config.consonants,
        )
        self._snapshot = self._load_snapshot(EMPTY_SNAPSHOT.version + 1)

    @classmethod
    def from_config(cls, path: str | Path) -> MorphologyEngine:
        """Build an engine from a YAML configuration file."""
        return cls(config=load_config(path))

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.close()

    def __enter__(self) -> MorphologyEngine:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Snapshot publication
    # ------------------------------------------------------------------

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def snapshot(self) -> LexiconSnapshot:
        """The most recently committed state of the store."""
        return self._snapshot

    @property
    def index(self) -> DerivationIndex:
        return self._index

    def _load_snapshot(self, version: int) -> LexiconSnapshot:
        return LexiconSnapshot(
            version=version,
            roots=tuple(_db.all_roots(self._conn)),
            patterns=tuple(
                PatternModel(name=name, rule=rule)
                for name, rule in _db.all_patterns(self._conn)
            ),
            frequencies=_db.all_frequencies(self._conn),
        )

    def _publish(self) -> None:
        if not (self._pending_roots or self._pending_evictions or self._pending_all):
            return
        version = self._snapshot.version + 1
        # Stamp the index before the new snapshot becomes visible.
        for root in self._pending_roots:
            self._index.invalidate_root(root, version)
        for root in self._pending_evictions:
            self._index.evict_root(root, version)
        if self._pending_all:
            self._index.invalidate_all(version)
        self._snapshot = self._load_snapshot(version)
        self._discard_pending()

    def _discard_pending(self) -> None:
        self._pending_roots.clear()
        self._pending_evictions.clear()
        self._pending_all = False

    # ------------------------------------------------------------------
    # Batch context manager
    # ------------------------------------------------------------------

    @contextmanager
    def batch(self) -> Generator[None, None, None]:
        """Group multiple mutations into a single transaction and snapshot."""
        with self._lock:
            self._batch_depth += 1
            if self._batch_depth == 1:
                self._in_batch = True
                self._conn.execute("BEGIN")
            try:
                yield
            except BaseException:
                if self._batch_depth == 1:
                    self._conn.rollback()
                    self._in_batch = False
                    self._discard_pending()
                self._batch_depth -= 1
                raise
            else:
                self._batch_depth -= 1
                if self._batch_depth == 0:
                    self._conn.commit()
                    self._in_batch = False
                    self._publish()

    # ------------------------------------------------------------------
    # Roots
    # ------------------------------------------------------------------

    def _normalize(self, root: str) -> tuple[str, str, str]:
        return normalize_root(root, self._config.consonants)

    @staticmethod
    def _root_model(letters: tuple[str, str, str]) -> RootModel:
        return RootModel(
            root="".join(letters),
            letters=letters,
            root_type=detect_root_type(letters),
            contains_hamza=any(c in HAMZA_VARIANTS for c in letters),
        )

    @_modifies_db
    def add_root(self, root: str) -> RootModel:
        letters = self._normalize(root)
        text = "".join(letters)
        if _db.get_root_rowid(self._conn, text) is not None:
            raise DuplicateRootError(f"Root already exists: {text!r}")

        _db.insert_root(self._conn, text)
        _hist.record_root(self._conn, EditOperation.CREATE, text)
        self._pending_roots.add(text)
        logger.info(f"Added root {text!r}")
        return self._root_model(letters)

    @_modifies_db
    def delete_root(self, root: str) -> None:
        text = "".join(self._normalize(root))
        rowid = _db.get_root_rowid(self._conn, text)
        if rowid is None:
            raise EntityNotFoundError(f"Root not found: {text!r}")

        _hist.record_root(self._conn, EditOperation.DELETE, text)
        _db.delete_root(self._conn, rowid)
        self._pending_evictions.add(text)
        logger.info(f"Deleted root {text!r}")

    def get_root(self, root: str) -> RootModel:
        letters = self._normalize(root)
        if not self._snapshot.has_root("".join(letters)):
            raise EntityNotFoundError(f"Root not found: {''.join(letters)!r}")
        return self._root_model(letters)

    def list_roots(
        self,
        search: str | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> list[str]:
        """Roots in lexicographic order, optionally filtered by prefix.

        Pages are 1-based; a page past the end is empty.
        """
        if page < 1:
            page = 1
        if page_size < 1:
            page_size = 10
        roots = self._filter_roots(search)
        start = (page - 1) * page_size
        return list(roots[start:start + page_size])

    def count_roots(self, search: str | None = None) -> int:
        return len(self._filter_roots(search))

    def _filter_roots(self, search: str | None) -> tuple[str, ...]:
        roots = self._snapshot.roots
        if search:
            roots = tuple(r for r in roots if r.startswith(search))
        return roots

    def analyze_root(self, root: str) -> RootAnalysis:
        """Typology of a root; the root need not be in the store."""
        return analyze_root(root, self._config.consonants)

    # ------------------------------------------------------------------
    # Patterns
    # ------------------------------------------------------------------

    @staticmethod
    def _pattern_name(name: str) -> str:
        return (name or "").strip()

    @_modifies_db
    def add_pattern(self, name: str, rule: str) -> PatternModel:
        name, rule = self._pattern_name(name), (rule or "").strip()
        _subst.validate_pattern_name(name)
        _subst.validate_rule(rule)
        if _db.get_pattern_row(self._conn, name) is not None:
            raise DuplicatePatternError(f"Pattern already exists: {name!r}")

        _db.insert_pattern(self._conn, name, rule)
        _hist.record_pattern(self._conn, EditOperation.CREATE, name, rule)
        self._pending_all = True
        logger.info(f"Added pattern {name!r} ({rule})")
        return PatternModel(name=name, rule=rule)

    @_modifies_db
    def update_pattern(self, name: str, rule: str) -> PatternModel:
        name = self._pattern_name(name)
        rule = (rule or "").strip()
        _subst.validate_rule(rule)
        row = _db.get_pattern_row(self._conn, name)
        if row is None:
            raise EntityNotFoundError(f"Pattern not found: {name!r}")
        if row["rule"] == rule:
            return PatternModel(name=name, rule=rule)

        _hist.record_pattern(
            self._conn, EditOperation.UPDATE, name, rule, old_rule=row["rule"]
        )
        _db.update_pattern_rule(self._conn, row["rowid"], rule)
        self._pending_all = True
        logger.info(f"Updated pattern {name!r}: {row['rule']} -> {rule}")
        return PatternModel(name=name, rule=rule)

    @_modifies_db
    def delete_pattern(self, name: str) -> None:
        name = self._pattern_name(name)
        row = _db.get_pattern_row(self._conn, name)
        if row is None:
            raise EntityNotFoundError(f"Pattern not found: {name!r}")

        _hist.record_pattern(self._conn, EditOperation.DELETE, name, row["rule"])
        _db.delete_pattern(self._conn, row["rowid"])
        self._pending_all = True
        logger.info(f"Deleted pattern {name!r}")

    def get_pattern(self, name: str) -> PatternModel:
        name = self._pattern_name(name)
        pattern = self._snapshot.get_pattern(name)
        if pattern is None:
            raise EntityNotFoundError(f"Pattern not found: {name!r}")
        return pattern

    def list_patterns(self) -> list[PatternModel]:
        """All patterns in insertion order."""
        return list(self._snapshot.patterns)

    # ------------------------------------------------------------------
    # Frequencies
    # ------------------------------------------------------------------

    def _frequency_keys(self, root: str, pattern_name: str) -> tuple[str, int, int]:
        text = "".join(self._normalize(root))
        root_rowid = _db.get_root_rowid(self._conn, text)
        if root_rowid is None:
            raise EntityNotFoundError(f"Root not found: {text!r}")
        row = _db.get_pattern_row(self._conn, pattern_name)
        if row is None:
            raise EntityNotFoundError(f"Pattern not found: {pattern_name!r}")
        return text, root_rowid, row["rowid"]

    def _write_frequency(
        self, text: str, pattern_name: str, root_rowid: int, pattern_rowid: int,
        old: int | None, count: int,
    ) -> None:
        _hist.record_frequency(self._conn, text, pattern_name, old, count)
        _db.set_frequency(self._conn, root_rowid, pattern_rowid, count)
        self._pending_roots.add(text)

    @_modifies_db
    def set_frequency(self, root: str, pattern_name: str, count: int) -> int:
        """Store a corpus count for a derivative, replacing any earlier one."""
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValidationError(f"Frequency must be a non-negative integer: {count!r}")
        pattern_name = self._pattern_name(pattern_name)
        text, root_rowid, pattern_rowid = self._frequency_keys(root, pattern_name)
        old = _db.get_frequency(self._conn, root_rowid, pattern_rowid)
        if old != count:
            self._write_frequency(text, pattern_name, root_rowid, pattern_rowid, old, count)
        return count

    @_modifies_db
    def record_occurrence(self, root: str, pattern_name: str, increment: int = 1) -> int:
        """Add *increment* observations to a derivative's recorded count."""
        if isinstance(increment, bool) or not isinstance(increment, int) or increment < 1:
            raise ValidationError(f"Increment must be a positive integer: {increment!r}")
        pattern_name = self._pattern_name(pattern_name)
        text, root_rowid, pattern_rowid = self._frequency_keys(root, pattern_name)
        old = _db.get_frequency(self._conn, root_rowid, pattern_rowid)
        count = (old or 0) + increment
        self._write_frequency(text, pattern_name, root_rowid, pattern_rowid, old, count)
        return count

    # ------------------------------------------------------------------
    # Bulk import
    # ------------------------------------------------------------------

    def import_roots(self, source: ImportSource) -> ImportResult:
        return _importer.import_roots(self, source)

    def import_patterns(self, source: ImportSource) -> ImportResult:
        return _importer.import_patterns(self, source)

    def import_frequencies(self, source: ImportSource) -> ImportResult:
        return _importer.import_frequencies(self, source)

    # ------------------------------------------------------------------
    # Generation and search
    # ------------------------------------------------------------------

    def generate(self, root: str, pattern_name: str) -> GeneratedWord:
        """Apply one pattern to a well-formed root, stored or not."""
        letters = self._normalize(root)
        pattern = self.get_pattern(pattern_name)
        word = _subst.generate(
            letters, pattern.name, pattern.rule, self._config.clash_table
        )
        return GeneratedWord(root="".join(letters), pattern=pattern.name, word=word)

    def derivatives_of(self, root: str) -> RootDerivatives:
        text = "".join(self._normalize(root))
        return self._index.derivatives_of(self._snapshot, text)

    def generate_family(self, root: str) -> RootDerivatives:
        """Every word the current patterns generate for *root*."""
        return self.derivatives_of(root)

    def words_for_pattern(self, pattern_name: str) -> list[DerivativeModel]:
        return self._index.words_for_pattern(self._snapshot, self._pattern_name(pattern_name))

    # ------------------------------------------------------------------
    # Decomposition and validation
    # ------------------------------------------------------------------

    def find_all_roots(self, word: str) -> list[DecompositionCandidate]:
        return _resolver.find_all_roots(
            self._snapshot, self._index, word,
            affix_symbols=self._config.affix_symbols,
            max_residue=self._config.max_residue,
        )

    def decompose(self, word: str) -> DecompositionCandidate | None:
        return _resolver.decompose(
            self._snapshot, self._index, word,
            affix_symbols=self._config.affix_symbols,
            max_residue=self._config.max_residue,
        )

    def validate(self, word: str, root: str) -> WordValidation:
        """Check that *word* is an exact derivative of *root*.

        Raises:
            InvalidRootError: If *root* is malformed
        """
        text = "".join(self._normalize(root))
        return _resolver.validate_word(self._snapshot, self._index, word, text)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def statistics(self, top_n: int = 10) -> StatisticsModel:
        return compute_statistics(self._snapshot, self._index, top_n=top_n)

    # ------------------------------------------------------------------
    # History and integrity
    # ------------------------------------------------------------------

    def get_history(
        self,
        *,
        entity_type: str | EntityKind | None = None,
        entity_id: str | None = None,
        operation: str | EditOperation | None = None,
    ) -> list[EditRecord]:
        with self._lock:
            return _hist.query_history(
                self._conn,
                entity_type=entity_type,
                entity_id=entity_id,
                operation=operation,
            )

    def get_changes_since(self, timestamp: str) -> list[EditRecord]:
        with self._lock:
            return _hist.query_history(self._conn, since=timestamp)

    def check_integrity(self) -> list[ValidationResult]:
        with self._lock:
            return _validator.check_integrity(
                self._conn,
                consonants=self._config.consonants,
                clash_table=self._config.clash_table,
            )
