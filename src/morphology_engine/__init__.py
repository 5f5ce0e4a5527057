__version__ = "0.1.0"

from .engine import (
    MorphologyEngine as MorphologyEngine,
)

from .config import (
    EngineConfig as EngineConfig,
    load_config as load_config,
)

from .exceptions import (
    MorphologyEngineError as MorphologyEngineError,
    ValidationError as ValidationError,
    InvalidRootError as InvalidRootError,
    InvalidPatternError as InvalidPatternError,
    MalformedImportLineError as MalformedImportLineError,
    EntityNotFoundError as EntityNotFoundError,
    DuplicateEntityError as DuplicateEntityError,
    DuplicateRootError as DuplicateRootError,
    DuplicatePatternError as DuplicatePatternError,
    GenerationError as GenerationError,
    PhonologicalClashError as PhonologicalClashError,
    ConfigError as ConfigError,
    DatabaseError as DatabaseError,
    IndexCorruptionError as IndexCorruptionError,
)

from .models import (
    LetterClass as LetterClass,
    RootType as RootType,
    CandidateKind as CandidateKind,
    RootModel as RootModel,
    RootAnalysis as RootAnalysis,
    PatternModel as PatternModel,
    GeneratedWord as GeneratedWord,
    DerivativeModel as DerivativeModel,
    RootDerivatives as RootDerivatives,
    DecompositionCandidate as DecompositionCandidate,
    WordValidation as WordValidation,
    ImportFailure as ImportFailure,
    ImportResult as ImportResult,
    RootFrequency as RootFrequency,
    StatisticsModel as StatisticsModel,
    EditRecord as EditRecord,
    EditOperation as EditOperation,
    EntityKind as EntityKind,
    ValidationResult as ValidationResult,
)

from .substitution import (
    ClashRule as ClashRule,
    ClashTable as ClashTable,
)

from .exporter import (
    export_roots as export_roots,
    export_patterns as export_patterns,
    export_derivatives_yaml as export_derivatives_yaml,
)

__all__ = [
    "__version__",
    # Engine
    "MorphologyEngine",
    "EngineConfig",
    "load_config",
    # Exceptions
    "MorphologyEngineError",
    "ValidationError",
    "InvalidRootError",
    "InvalidPatternError",
    "MalformedImportLineError",
    "EntityNotFoundError",
    "DuplicateEntityError",
    "DuplicateRootError",
    "DuplicatePatternError",
    "GenerationError",
    "PhonologicalClashError",
    "ConfigError",
    "DatabaseError",
    "IndexCorruptionError",
    # Models
    "LetterClass",
    "RootType",
    "CandidateKind",
    "RootModel",
    "RootAnalysis",
    "PatternModel",
    "GeneratedWord",
    "DerivativeModel",
    "RootDerivatives",
    "DecompositionCandidate",
    "WordValidation",
    "ImportFailure",
    "ImportResult",
    "RootFrequency",
    "StatisticsModel",
    "EditRecord",
    "EditOperation",
    "EntityKind",
    "ValidationResult",
    # Clash table
    "ClashRule",
    "ClashTable",
    # Export
    "export_roots",
    "export_patterns",
    "export_derivatives_yaml",
]
