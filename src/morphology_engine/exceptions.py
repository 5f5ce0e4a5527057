"""Custom exception hierarchy for morphology-engine."""


class MorphologyEngineError(Exception):
    """Base exception for all morphology-engine errors."""


class ValidationError(MorphologyEngineError):
    """Invalid input data (malformed root, malformed pattern rule)."""


class InvalidRootError(ValidationError):
    """Root is not exactly three consonants of the alphabet."""


class InvalidPatternError(ValidationError):
    """Pattern rule or name is malformed."""


class EntityNotFoundError(MorphologyEngineError):
    """Root, pattern or word doesn't exist in the store."""


class DuplicateEntityError(MorphologyEngineError):
    """Entity with the same key already exists."""


class DuplicateRootError(DuplicateEntityError):
    """Root is already in the store."""


class DuplicatePatternError(DuplicateEntityError):
    """Pattern name is already in use."""


class GenerationError(MorphologyEngineError):
    """Substitution of a root into a pattern was rejected."""


class PhonologicalClashError(GenerationError):
    """A root letter class is forbidden in a pattern slot."""

    def __init__(self, message: str, *, slot: int, letter: str) -> None:
        super().__init__(message)
        self.slot = slot
        self.letter = letter


class MalformedImportLineError(ValidationError):
    """A bulk-import line could not be parsed."""


class ConfigError(MorphologyEngineError):
    """Configuration file is missing, unreadable or has bad values."""


class DatabaseError(MorphologyEngineError):
    """Schema version mismatch, connection failure."""


class IndexCorruptionError(MorphologyEngineError):
    """Derivation index found a stored row it cannot rebuild from."""
