"""Domain model dataclasses and enums for morphology-engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class LetterClass(str, Enum):
    """Phonological class of a root consonant."""

    SOUND = "sound"
    WEAK = "weak"
    HAMZA = "hamza"


class RootType(str, Enum):
    """Morphological type of a triliteral root."""

    SALIM = "salim"
    MAHMOUZ = "mahmouz"
    MOUDAAF = "moudaaf"
    MITHAL = "mithal"
    AJWAF = "ajwaf"
    NAQIS = "naqis"
    LAFEEF = "lafeef"


class CandidateKind(str, Enum):
    """Whether a decomposition explains every symbol of the word."""

    EXACT = "exact"
    WITH_RESIDUE = "with_residue"


class EntityKind(str, Enum):
    """Kind of lexicon entity an edit-history entry refers to."""

    ROOT = "root"
    PATTERN = "pattern"
    FREQUENCY = "frequency"


class EditOperation(str, Enum):
    """Type of mutation recorded in the edit history."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class ValidationSeverity(str, Enum):
    """Severity level for integrity findings."""

    ERROR = "ERROR"
    WARNING = "WARNING"


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class RootModel:
    """A stored triliteral root."""

    root: str
    letters: tuple[str, str, str]
    root_type: RootType
    contains_hamza: bool


@dataclass(frozen=True, slots=True)
class RootAnalysis:
    """Typology of a root with a human-readable explanation."""

    root: str
    letters: tuple[str, str, str]
    root_type: RootType
    contains_hamza: bool
    explanation: str


@dataclass(frozen=True, slots=True)
class PatternModel:
    """A named template with ordinal markers 1, 2, 3 and fixed affixes."""

    name: str
    rule: str

    @property
    def affixes(self) -> tuple[str, ...]:
        """Fixed symbols of the rule, in template order."""
        return tuple(c for c in self.rule if c not in "123")


@dataclass(frozen=True, slots=True)
class GeneratedWord:
    """Result of substituting a root into a pattern."""

    root: str
    pattern: str
    word: str


@dataclass(frozen=True, slots=True)
class DerivativeModel:
    """A materialized (root, pattern) -> word fact with its usage count."""

    root: str
    pattern: str
    word: str
    frequency: int


@dataclass(frozen=True, slots=True)
class RootDerivatives:
    """The derivative family of one root."""

    root: str
    root_type: RootType
    derivatives: tuple[DerivativeModel, ...]

    @property
    def total_derivatives(self) -> int:
        return len(self.derivatives)

    @property
    def total_frequency(self) -> int:
        return sum(d.frequency for d in self.derivatives)


@dataclass(frozen=True, slots=True)
class DecompositionCandidate:
    """One (root, pattern) explanation of a surface word.

    ``residue`` holds the symbols of the word that neither the pattern's
    fixed affixes nor the root substitution account for, in word order.
    """

    word: str
    root: str
    pattern: str
    generated: str
    residue: tuple[str, ...]
    affixes: tuple[str, ...]

    @property
    def kind(self) -> CandidateKind:
        if self.residue:
            return CandidateKind.WITH_RESIDUE
        return CandidateKind.EXACT

    @property
    def is_exact(self) -> bool:
        return not self.residue

    def sort_key(self) -> tuple[int, int, str, str]:
        return (0 if self.is_exact else 1, len(self.residue), self.root, self.pattern)


@dataclass(frozen=True, slots=True)
class WordValidation:
    """Outcome of checking a claimed (word, root) relationship."""

    word: str
    root: str
    valid: bool
    pattern: str | None
    message: str


@dataclass(frozen=True, slots=True)
class ImportFailure:
    """A bulk-import line that was rejected."""

    line_number: int
    line: str
    reason: str
    error: str


@dataclass(frozen=True, slots=True)
class ImportResult:
    """Outcome of a bulk import: partial success is the norm."""

    success_count: int
    failures: tuple[ImportFailure, ...]

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def total_count(self) -> int:
        return self.success_count + self.failure_count


@dataclass(frozen=True, slots=True)
class RootFrequency:
    """A root ranked by the summed frequency of its derivatives."""

    root: str
    total_frequency: int
    total_derivatives: int


@dataclass(frozen=True, slots=True)
class StatisticsModel:
    """Corpus-level rollup over the derivation index."""

    total_roots: int
    total_patterns: int
    total_derivatives: int
    total_frequency: int
    avg_derivatives: float
    top_roots: tuple[RootFrequency, ...]


@dataclass(frozen=True, slots=True)
class EditRecord:
    """A single edit-history entry recording one change."""

    id: int
    entity_type: str
    entity_id: str
    field_name: str | None
    operation: str
    old_value: str | None
    new_value: str | None
    timestamp: str


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """A single integrity finding (error or warning)."""

    rule_id: str
    severity: str
    entity_type: str
    entity_id: str
    message: str
    details: dict[str, Any] | None
