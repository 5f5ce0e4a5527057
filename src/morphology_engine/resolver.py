"""Decomposition of surface words back into (root, pattern) pairs."""

from __future__ import annotations

import logging
from collections.abc import Collection

from morphology_engine.alphabet import DEFAULT_AFFIX_SYMBOLS, normalize_word
from morphology_engine.index import DerivationIndex, LexiconSnapshot
from morphology_engine.models import DecompositionCandidate, WordValidation

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESIDUE = 3


def match_residue(
    word: str,
    generated: str,
    affix_symbols: Collection[str] = DEFAULT_AFFIX_SYMBOLS,
    max_residue: int = DEFAULT_MAX_RESIDUE,
) -> tuple[str, ...] | None:
    """Return the residue if *word* is *generated* extended by affixes only.

    The generated form must occur contiguously inside the word; whatever
    precedes and follows it is the residue, and every residue symbol must
    be a known affix symbol. The leftmost valid occurrence wins. ``None``
    means no match, ``()`` an exact match.
    """
    extra = len(word) - len(generated)
    if extra < 0 or extra > max_residue:
        return None
    if extra == 0:
        return () if word == generated else None

    start = word.find(generated)
    while start != -1:
        residue = word[:start] + word[start + len(generated):]
        if all(symbol in affix_symbols for symbol in residue):
            return tuple(residue)
        start = word.find(generated, start + 1)
    return None


def find_all_roots(
    snapshot: LexiconSnapshot,
    index: DerivationIndex,
    word: str,
    *,
    affix_symbols: Collection[str] = DEFAULT_AFFIX_SYMBOLS,
    max_residue: int = DEFAULT_MAX_RESIDUE,
    only_root: str | None = None,
) -> list[DecompositionCandidate]:
    """Every (root, pattern) pair that accounts for *word*, best first.

    Ranking: exact matches, then shorter residue, then root and pattern
    name in lexicographic order.
    """
    word = word.strip()
    surface = normalize_word(word)
    if not surface:
        return []

    roots = snapshot.roots if only_root is None else (only_root,)
    candidates = []
    for root in roots:
        if not snapshot.has_root(root):
            continue
        for derivative in index.derivatives(snapshot, root):
            generated = normalize_word(derivative.word)
            if len(generated) > len(surface):
                continue
            residue = match_residue(surface, generated, affix_symbols, max_residue)
            if residue is None:
                continue
            pattern = snapshot.get_pattern(derivative.pattern)
            candidates.append(
                DecompositionCandidate(
                    word=word,
                    root=root,
                    pattern=derivative.pattern,
                    generated=derivative.word,
                    residue=residue,
                    affixes=pattern.affixes if pattern is not None else (),
                )
            )

    candidates.sort(key=DecompositionCandidate.sort_key)
    logger.debug(f"Found {len(candidates)} candidate(s) for {word!r}")
    return candidates


def decompose(
    snapshot: LexiconSnapshot,
    index: DerivationIndex,
    word: str,
    *,
    affix_symbols: Collection[str] = DEFAULT_AFFIX_SYMBOLS,
    max_residue: int = DEFAULT_MAX_RESIDUE,
) -> DecompositionCandidate | None:
    """The top-ranked candidate, or None when nothing explains the word."""
    candidates = find_all_roots(
        snapshot, index, word,
        affix_symbols=affix_symbols, max_residue=max_residue,
    )
    return candidates[0] if candidates else None


def validate_word(
    snapshot: LexiconSnapshot,
    index: DerivationIndex,
    word: str,
    root: str,
) -> WordValidation:
    """Confirm that *word* derives from *root* by an exact pattern match."""
    word = word.strip()
    surface = normalize_word(word)
    if not snapshot.has_root(root):
        return WordValidation(
            word=word, root=root, valid=False, pattern=None,
            message=f"Root {root!r} is not in the lexicon",
        )

    for derivative in index.derivatives(snapshot, root):
        if normalize_word(derivative.word) == surface:
            return WordValidation(
                word=word, root=root, valid=True, pattern=derivative.pattern,
                message=(
                    f"{word!r} derives from {root!r} "
                    f"with pattern {derivative.pattern!r}"
                ),
            )

    return WordValidation(
        word=word, root=root, valid=False, pattern=None,
        message=f"{word!r} does not derive from {root!r} by any known pattern",
    )
