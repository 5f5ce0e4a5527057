"""Consonant alphabet, letter classes and root typology."""

from __future__ import annotations

from morphology_engine.exceptions import InvalidRootError
from morphology_engine.models import LetterClass, RootAnalysis, RootType

# Arabic letters from hamza (U+0621) to yaa (U+064A). Bare alef is a long
# vowel, never a root consonant; tatweel is a typographic filler.
ALEF = "ا"
TATWEEL = "ـ"
ALEF_MAQSURA = "ى"
YAA = "ي"

ARABIC_CONSONANTS: frozenset[str] = frozenset(
    chr(cp) for cp in range(0x0621, 0x064B) if chr(cp) not in (ALEF, TATWEEL)
)

WEAK_LETTERS: frozenset[str] = frozenset({"و", "ي"})  # و ي

HAMZA_VARIANTS: frozenset[str] = frozenset(
    {"أ", "إ", "آ", "ء", "ؤ", "ئ"}  # أ إ آ ء ؤ ئ
)

# Harakat, tanween, shadda, sukun and the minor marks up to U+065F.
HARAKAT: frozenset[str] = frozenset(chr(cp) for cp in range(0x064B, 0x0660))

# Clitics and inflectional affixes that may surround a derived form.
DEFAULT_AFFIX_LETTERS = "الوفبكستنيهةمأ"
DEFAULT_AFFIX_SYMBOLS: frozenset[str] = frozenset(DEFAULT_AFFIX_LETTERS) | HARAKAT

ROOT_TYPE_LABELS: dict[RootType, tuple[str, str]] = {
    RootType.SALIM: ("سالم", "sound: no weak letter, regular substitution"),
    RootType.MAHMOUZ: ("مهموز", "hamzated: contains a hamza"),
    RootType.MOUDAAF: ("مضعف", "doubled: second and third letters identical"),
    RootType.MITHAL: ("مثال", "assimilated: starts with a weak letter"),
    RootType.AJWAF: ("أجوف", "hollow: weak middle letter"),
    RootType.NAQIS: ("ناقص", "defective: ends with a weak letter"),
    RootType.LAFEEF: ("لفيف", "doubly weak: two or more weak letters"),
}


def strip_harakat(text: str) -> str:
    """Remove short-vowel and gemination marks."""
    return "".join(c for c in text if c not in HARAKAT)


def normalize_word(text: str) -> str:
    """Spelling normalisation shared by surface words and generated forms."""
    return (text or "").strip().replace(ALEF_MAQSURA, YAA)


def normalize_root(
    text: str,
    consonants: frozenset[str] = ARABIC_CONSONANTS,
) -> tuple[str, str, str]:
    """Return the three consonants of *text* or raise InvalidRootError."""
    if text is None or not text.strip():
        raise InvalidRootError("Root cannot be empty")

    cleaned = strip_harakat(text.strip()).replace(ALEF_MAQSURA, YAA)
    if ALEF in cleaned and ALEF not in consonants:
        raise InvalidRootError(
            f"Root {text!r} contains a bare alef in consonant position; "
            "a hamza (أ / إ) is probably intended"
        )
    if len(cleaned) != 3:
        raise InvalidRootError(
            f"Root must contain exactly 3 consonants, found {len(cleaned)} "
            f"in {text!r}"
        )
    for letter in cleaned:
        if letter not in consonants:
            raise InvalidRootError(
                f"Non-consonant symbol {letter!r} (U+{ord(letter):04X}) "
                f"in root {text!r}"
            )
    return cleaned[0], cleaned[1], cleaned[2]


def classify_letter(letter: str) -> LetterClass:
    if letter in WEAK_LETTERS:
        return LetterClass.WEAK
    if letter in HAMZA_VARIANTS:
        return LetterClass.HAMZA
    return LetterClass.SOUND


def detect_root_type(letters: tuple[str, str, str]) -> RootType:
    """Classify a root; the check order matters (doubling before weakness)."""
    l1, l2, l3 = letters
    weak = [classify_letter(c) is LetterClass.WEAK for c in letters]

    if l2 == l3:
        return RootType.MOUDAAF
    if sum(weak) >= 2:
        return RootType.LAFEEF
    if weak[0]:
        return RootType.MITHAL
    if weak[1]:
        return RootType.AJWAF
    if weak[2]:
        return RootType.NAQIS
    if any(c in HAMZA_VARIANTS for c in letters):
        return RootType.MAHMOUZ
    return RootType.SALIM


def explain_root(letters: tuple[str, str, str], root_type: RootType) -> str:
    l1, l2, l3 = letters
    arabic, summary = ROOT_TYPE_LABELS[root_type]
    detail = {
        RootType.SALIM: "direct substitution",
        RootType.MAHMOUZ: "hamza spelling varies with the pattern",
        RootType.MOUDAAF: f"{l2!r} = {l3!r}, usually written with shadda",
        RootType.MITHAL: f"initial {l1!r} drops in some forms",
        RootType.AJWAF: f"middle {l2!r} becomes alef or hamza in some forms",
        RootType.NAQIS: f"final {l3!r} becomes alef maqsura or drops",
        RootType.LAFEEF: "combined weak-letter changes",
    }[root_type]
    return f"{arabic} ({summary}); {detail}"


def analyze_root(
    text: str,
    consonants: frozenset[str] = ARABIC_CONSONANTS,
) -> RootAnalysis:
    letters = normalize_root(text, consonants)
    root_type = detect_root_type(letters)
    return RootAnalysis(
        root="".join(letters),
        letters=letters,
        root_type=root_type,
        contains_hamza=any(c in HAMZA_VARIANTS for c in letters),
        explanation=explain_root(letters, root_type),
    )
