"""Derivation index: per-root cache of generated derivatives.

The index never recomputes eagerly. Store mutations only *stamp* roots
(or the whole index, for pattern changes) with the version of the
lexicon snapshot that made them stale; the next read that touches a
stale root rebuilds it from the snapshot the reader holds and caches
the result.

A rebuild runs outside the store's writer lock. A reader that still
holds an older snapshot may finish its rebuild after a newer mutation
was published; its entry carries the older version and is refused by
the stamp check, so it can never shadow fresher state.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field

from morphology_engine.alphabet import ARABIC_CONSONANTS, detect_root_type, normalize_root
from morphology_engine.exceptions import (
    EntityNotFoundError,
    IndexCorruptionError,
    InvalidRootError,
    PhonologicalClashError,
)
from morphology_engine.models import DerivativeModel, PatternModel, RootDerivatives, RootType
from morphology_engine.substitution import EMPTY_CLASH_TABLE, ClashTable, generate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LexiconSnapshot:
    """Immutable view of the store published after each committed mutation."""

    version: int
    roots: tuple[str, ...]
    patterns: tuple[PatternModel, ...]
    frequencies: Mapping[tuple[str, str], int] = field(default_factory=dict)
    _root_set: frozenset[str] = field(init=False, repr=False, compare=False)
    _pattern_map: Mapping[str, PatternModel] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_root_set", frozenset(self.roots))
        object.__setattr__(self, "_pattern_map", {p.name: p for p in self.patterns})

    def has_root(self, root: str) -> bool:
        return root in self._root_set

    def get_pattern(self, name: str) -> PatternModel | None:
        return self._pattern_map.get(name)


EMPTY_SNAPSHOT = LexiconSnapshot(version=0, roots=(), patterns=())


@dataclass(frozen=True, slots=True)
class _Entry:
    version: int
    root_type: RootType
    derivatives: tuple[DerivativeModel, ...]


class DerivationIndex:
    """Root-keyed derivative cache with lazy, versioned invalidation.

    Per-root stamps outlive the roots they name, so a reader holding an
    older snapshot cannot cache a deleted root. A pattern change raises
    the global stamp above every root stamp, which are then dropped; the
    stamp table only holds roots mutated since the last pattern change.
    """

    def __init__(
        self,
        *,
        clash_table: ClashTable = EMPTY_CLASH_TABLE,
        default_frequency: int = 0,
        consonants: frozenset[str] = ARABIC_CONSONANTS,
    ) -> None:
        self._clash_table = clash_table
        self._default_frequency = default_frequency
        self._consonants = consonants
        self._lock = threading.Lock()
        self._entries: dict[str, _Entry] = {}
        self._root_stamps: dict[str, int] = {}
        self._global_stamp = 0
        self.rebuild_count = 0

    # ------------------------------------------------------------------
    # Invalidation (called by the store under its writer lock)
    # ------------------------------------------------------------------

    def invalidate_root(self, root: str, version: int) -> None:
        with self._lock:
            self._root_stamps[root] = version

    def evict_root(self, root: str, version: int) -> None:
        with self._lock:
            self._entries.pop(root, None)
            self._root_stamps[root] = version

    def invalidate_all(self, version: int) -> None:
        with self._lock:
            self._global_stamp = version
            self._root_stamps = {
                root: stamp
                for root, stamp in self._root_stamps.items()
                if stamp > version
            }

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def _is_fresh(self, root: str, entry: _Entry) -> bool:
        stamp = max(self._root_stamps.get(root, 0), self._global_stamp)
        return entry.version >= stamp

    def is_dirty(self, root: str) -> bool:
        """True if the next read of *root* will rebuild it."""
        with self._lock:
            entry = self._entries.get(root)
            return entry is None or not self._is_fresh(root, entry)

    def stamped_roots(self) -> frozenset[str]:
        """Roots whose own stamp is newer than the global one."""
        with self._lock:
            return frozenset(self._root_stamps)

    def cached(self) -> dict[str, tuple[DerivativeModel, ...]]:
        """Fresh cache entries, keyed by root."""
        with self._lock:
            return {
                root: entry.derivatives
                for root, entry in self._entries.items()
                if self._is_fresh(root, entry)
            }

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _build(self, snapshot: LexiconSnapshot, root: str) -> _Entry:
        try:
            letters = normalize_root(root, self._consonants)
        except InvalidRootError as e:
            raise IndexCorruptionError(
                f"Stored root {root!r} cannot be indexed: {e}"
            ) from e

        derivatives = []
        for pattern in snapshot.patterns:
            try:
                word = generate(letters, pattern.name, pattern.rule, self._clash_table)
            except PhonologicalClashError as e:
                logger.debug(f"Skipping {pattern.name!r} for {root!r}: {e}")
                continue
            frequency = snapshot.frequencies.get(
                (root, pattern.name), self._default_frequency
            )
            derivatives.append(DerivativeModel(root, pattern.name, word, frequency))

        logger.debug(
            f"Rebuilt index entry for {root!r} at version {snapshot.version}: "
            f"{len(derivatives)} derivative(s)"
        )
        return _Entry(snapshot.version, detect_root_type(letters), tuple(derivatives))

    def _entry(self, snapshot: LexiconSnapshot, root: str) -> _Entry:
        with self._lock:
            entry = self._entries.get(root)
            if (
                entry is not None
                and entry.version <= snapshot.version
                and self._is_fresh(root, entry)
            ):
                return entry

        entry = self._build(snapshot, root)

        with self._lock:
            self.rebuild_count += 1
            current = self._entries.get(root)
            if self._is_fresh(root, entry) and (
                current is None or current.version <= entry.version
            ):
                self._entries[root] = entry
        return entry

    def derivatives(
        self, snapshot: LexiconSnapshot, root: str
    ) -> tuple[DerivativeModel, ...]:
        return self._entry(snapshot, root).derivatives

    def derivatives_of(self, snapshot: LexiconSnapshot, root: str) -> RootDerivatives:
        if not snapshot.has_root(root):
            raise EntityNotFoundError(f"Root not found: {root!r}")
        entry = self._entry(snapshot, root)
        return RootDerivatives(
            root=root,
            root_type=entry.root_type,
            derivatives=entry.derivatives,
        )

    def words_for_pattern(
        self, snapshot: LexiconSnapshot, pattern_name: str
    ) -> list[DerivativeModel]:
        if snapshot.get_pattern(pattern_name) is None:
            raise EntityNotFoundError(f"Pattern not found: {pattern_name!r}")
        words = []
        for root in snapshot.roots:
            for derivative in self.derivatives(snapshot, root):
                if derivative.pattern == pattern_name:
                    words.append(derivative)
                    break
        return words
