"""Template substitution: (root, pattern) -> surface word.

A pattern rule is a string in which the ordinal markers ``1``, ``2`` and
``3`` stand for the first, second and third root consonant. Every other
symbol is a fixed affix copied verbatim::

    >>> substitute(("ك", "ت", "ب"), "م12و3")
    'مكتوب'

Phonological incompatibilities are not coded into the algorithm. They
live in a :class:`ClashTable`, a lookup keyed by ``(letter class, slot)``
that :func:`generate` consults before substituting.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from morphology_engine.alphabet import classify_letter
from morphology_engine.exceptions import (
    ConfigError,
    InvalidPatternError,
    PhonologicalClashError,
)
from morphology_engine.models import LetterClass

MARKERS = ("1", "2", "3")
MAX_PATTERN_NAME_LENGTH = 50


def validate_rule(rule: str) -> None:
    """Raise InvalidPatternError unless 1, 2, 3 each occur once, in order."""
    if not rule:
        raise InvalidPatternError("Pattern rule cannot be empty")
    found = [c for c in rule if c in MARKERS]
    for marker in MARKERS:
        count = found.count(marker)
        if count == 0:
            raise InvalidPatternError(
                f"Pattern rule {rule!r} is missing marker {marker!r}"
            )
        if count > 1:
            raise InvalidPatternError(
                f"Pattern rule {rule!r} repeats marker {marker!r}"
            )
    if found != list(MARKERS):
        raise InvalidPatternError(
            f"Pattern rule {rule!r} must place markers in the order 1, 2, 3"
        )


def validate_pattern_name(name: str) -> None:
    if name is None or not name.strip():
        raise InvalidPatternError("Pattern name cannot be empty")
    if len(name) > MAX_PATTERN_NAME_LENGTH:
        raise InvalidPatternError(
            f"Pattern name longer than {MAX_PATTERN_NAME_LENGTH} characters"
        )
    if "|" in name:
        raise InvalidPatternError("Pattern name cannot contain '|'")


def substitute(letters: tuple[str, str, str], rule: str) -> str:
    """Walk the rule left to right, replacing markers by root letters."""
    out = []
    for symbol in rule:
        if symbol == "1":
            out.append(letters[0])
        elif symbol == "2":
            out.append(letters[1])
        elif symbol == "3":
            out.append(letters[2])
        else:
            out.append(symbol)
    return "".join(out)


# ---------------------------------------------------------------------------
# Clash table
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ClashRule:
    """Forbid a letter class in a slot, for all patterns or only some."""

    letter_class: LetterClass
    slot: int
    patterns: frozenset[str] | None = None
    reason: str | None = None

    def applies_to(self, pattern_name: str) -> bool:
        return self.patterns is None or pattern_name in self.patterns

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ClashRule:
        try:
            letter_class = LetterClass(data["letter_class"])
            slot = int(data["slot"])
        except KeyError as e:
            raise ConfigError(f"Clash rule missing field {e.args[0]!r}") from e
        except ValueError as e:
            raise ConfigError(f"Invalid clash rule {dict(data)!r}: {e}") from e
        if slot not in (1, 2, 3):
            raise ConfigError(f"Clash rule slot must be 1, 2 or 3, got {slot}")
        patterns = data.get("patterns")
        if isinstance(patterns, str):
            patterns = [patterns]
        return cls(
            letter_class=letter_class,
            slot=slot,
            patterns=frozenset(patterns) if patterns else None,
            reason=data.get("reason"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "letter_class": self.letter_class.value,
            "slot": self.slot,
        }
        if self.patterns is not None:
            data["patterns"] = sorted(self.patterns)
        if self.reason:
            data["reason"] = self.reason
        return data


class ClashTable:
    """Incompatibility rules indexed by (letter class, slot)."""

    def __init__(self, rules: Iterable[ClashRule] = ()) -> None:
        self._rules: dict[tuple[LetterClass, int], list[ClashRule]] = {}
        for rule in rules:
            self.add(rule)

    def add(self, rule: ClashRule) -> None:
        self._rules.setdefault((rule.letter_class, rule.slot), []).append(rule)

    def find(
        self,
        letter_class: LetterClass,
        slot: int,
        pattern_name: str,
    ) -> ClashRule | None:
        for rule in self._rules.get((letter_class, slot), ()):
            if rule.applies_to(pattern_name):
                return rule
        return None

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._rules.values())

    def __bool__(self) -> bool:
        return bool(self._rules)


EMPTY_CLASH_TABLE = ClashTable()


def check_clash(
    letters: tuple[str, str, str],
    pattern_name: str,
    table: ClashTable,
) -> None:
    if not table:
        return
    for slot, letter in enumerate(letters, start=1):
        rule = table.find(classify_letter(letter), slot, pattern_name)
        if rule is not None:
            reason = rule.reason or (
                f"{rule.letter_class.value} letter not allowed in slot {slot}"
            )
            raise PhonologicalClashError(
                f"Cannot apply pattern {pattern_name!r} to "
                f"{''.join(letters)!r}: {reason}",
                slot=slot,
                letter=letter,
            )


def generate(
    letters: tuple[str, str, str],
    pattern_name: str,
    rule: str,
    table: ClashTable = EMPTY_CLASH_TABLE,
) -> str:
    """Generate the surface word, raising PhonologicalClashError on a clash.

    Pure function of its arguments; safe to call from any thread.
    """
    check_clash(letters, pattern_name, table)
    return substitute(letters, rule)
