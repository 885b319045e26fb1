"""Phonetic encoding and similarity for fuzzy term matching.

Implements Soundex and Metaphone, and wraps the ``metaphone`` package's
Double Metaphone, producing one ``PhoneticCode`` per word or phrase.
Phrases are encoded word by word and joined with single spaces, so
"neck runs" and "Necrons" get codes with different word counts.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache

from metaphone import doublemetaphone

from term_resolver.text import fold_diacritics

_NON_LETTERS = re.compile(r"[^a-z]")

# Channel weights for phonetic_similarity
DM_PRIMARY_EXACT = 1.0
DM_PRIMARY_PREFIX = 0.7
DM_SECONDARY_EXACT = 0.8
DM_SECONDARY_PREFIX = 0.5
DM_CROSS_EXACT = 0.6
METAPHONE_EXACT = 0.7
SOUNDEX_EXACT = 0.4


@dataclass(frozen=True)
class PhoneticCode:
    """Phonetic fingerprints of a word or phrase.

    All four fields are strings, never None. An empty string means the
    input had no letters to encode.
    """

    metaphone: str = ""
    soundex: str = ""
    double_metaphone_primary: str = ""
    double_metaphone_secondary: str = ""

    @property
    def is_empty(self) -> bool:
        """True when no fingerprint could be computed."""
        return not (
            self.metaphone
            or self.soundex
            or self.double_metaphone_primary
            or self.double_metaphone_secondary
        )

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {
            "metaphone": self.metaphone,
            "soundex": self.soundex,
            "double_metaphone_primary": self.double_metaphone_primary,
            "double_metaphone_secondary": self.double_metaphone_secondary,
        }


EMPTY_CODE = PhoneticCode()


def clean_word(word: str) -> str:
    """Lower-case a word and strip everything but ASCII letters."""
    return _NON_LETTERS.sub("", fold_diacritics(word).lower())


def soundex(word: str) -> str:
    """Generate the classic four-character Soundex code for a word.

    H and W do not separate letters with the same code ("Ashcraft" ->
    "A261"); vowels do.

    Args:
        word: Word to encode

    Returns:
        Soundex code such as "N265", or "" if the word has no letters
    """
    word = clean_word(word).upper()
    if not word:
        return ""

    encoding_map = {
        "B": "1", "F": "1", "P": "1", "V": "1",
        "C": "2", "G": "2", "J": "2", "K": "2", "Q": "2", "S": "2", "X": "2", "Z": "2",
        "D": "3", "T": "3",
        "L": "4",
        "M": "5", "N": "5",
        "R": "6",
    }

    result = word[0]
    prev_code = encoding_map.get(word[0], "")

    for char in word[1:]:
        if char in "HW":
            continue
        code = encoding_map.get(char, "")
        if code and code != prev_code:
            result += code
        prev_code = code

    return (result + "000")[:4]


def metaphone(word: str) -> str:
    """Generate the Metaphone code for a word.

    A simplified English pronunciation key; more precise than Soundex.

    Args:
        word: Word to encode

    Returns:
        Metaphone code string, or "" if the word has no letters
    """
    word = clean_word(word).upper()
    if not word:
        return ""

    vowels = "AEIOU"

    # Silent or merged leading letters
    if word.startswith(("KN", "GN", "PN", "AE", "WR")):
        word = word[1:]
    elif word.startswith("WH"):
        word = "W" + word[2:]
    elif word.startswith("X"):
        word = "S" + word[1:]

    result = []
    length = len(word)
    i = 0

    while i < length:
        char = word[i]
        prev_char = word[i - 1] if i > 0 else ""
        next_char = word[i + 1] if i + 1 < length else ""
        next_next = word[i + 2] if i + 2 < length else ""

        # Collapse doubled letters, except C
        if char == next_char and char != "C":
            i += 1
            continue

        if char in vowels:
            if i == 0:
                result.append(char)
            i += 1

        elif char == "B":
            # Silent in a trailing "MB"
            if not (i == length - 1 and prev_char == "M"):
                result.append("B")
            i += 1

        elif char == "C":
            if next_char == "H":
                result.append("X")
                i += 2
            elif next_char and next_char in "IEY":
                result.append("S")
                i += 1
            else:
                result.append("K")
                i += 1

        elif char == "D":
            if next_char == "G" and next_next and next_next in "IEY":
                result.append("J")
                i += 2
            else:
                result.append("T")
                i += 1

        elif char == "G":
            if next_char == "H":
                if next_next and next_next not in vowels:
                    i += 2
                    continue
                result.append("F")
                i += 2
            elif next_char == "N":
                i += 1
            elif next_char and next_char in "IEY":
                result.append("J")
                i += 1
            else:
                result.append("K")
                i += 1

        elif char == "H":
            # Silent after a consonant or before a consonant
            if prev_char and prev_char not in vowels:
                i += 1
                continue
            if next_char and next_char in vowels:
                result.append("H")
            i += 1

        elif char == "K":
            if prev_char != "C":
                result.append("K")
            i += 1

        elif char == "P":
            if next_char == "H":
                result.append("F")
                i += 2
            else:
                result.append("P")
                i += 1

        elif char == "Q":
            result.append("K")
            i += 1

        elif char == "S":
            if next_char == "H":
                result.append("X")
                i += 2
            elif next_char == "I" and next_next and next_next in "OA":
                result.append("X")
                i += 1
            else:
                result.append("S")
                i += 1

        elif char == "T":
            if next_char == "H":
                result.append("0")  # TH
                i += 2
            elif next_char == "I" and next_next and next_next in "OA":
                result.append("X")
                i += 1
            else:
                result.append("T")
                i += 1

        elif char == "V":
            result.append("F")
            i += 1

        elif char in "WY":
            if next_char and next_char in vowels:
                result.append(char)
            i += 1

        elif char == "X":
            result.append("KS")
            i += 1

        elif char == "Z":
            result.append("S")
            i += 1

        else:
            # F, J, L, M, N, R encode as themselves
            result.append(char)
            i += 1

    return "".join(result)


def double_metaphone(word: str) -> tuple[str, str]:
    """Generate Double Metaphone (primary, secondary) codes for a word.

    The secondary code equals the primary when the word has no
    alternate pronunciation.

    Args:
        word: Word to encode

    Returns:
        Tuple of (primary, secondary); ("", "") if the word has no letters
    """
    cleaned = clean_word(word)
    if not cleaned:
        return ("", "")

    primary, secondary = doublemetaphone(cleaned)
    primary = primary or ""
    return (primary, secondary or primary)


@lru_cache(maxsize=4096)
def _encode_word(word: str) -> PhoneticCode:
    cleaned = clean_word(word)
    if not cleaned:
        return EMPTY_CODE

    primary, secondary = double_metaphone(cleaned)
    return PhoneticCode(
        metaphone=metaphone(cleaned),
        soundex=soundex(cleaned),
        double_metaphone_primary=primary,
        double_metaphone_secondary=secondary,
    )


def _join_segments(segments: list[str]) -> str:
    # Keep empty segments so word count survives, unless nothing encoded
    if not any(segments):
        return ""
    return " ".join(segments)


def get_phonetic_code(term: str) -> PhoneticCode:
    """Compute phonetic fingerprints for a word or phrase.

    Each whitespace-separated word is encoded separately and the per-word
    codes are joined with a single space in the original order. A word
    with no letters contributes an empty segment.

    Args:
        term: Word or phrase to encode

    Returns:
        PhoneticCode; all fields empty for empty input
    """
    if not term:
        return EMPTY_CODE

    words = term.split()
    if not words:
        return EMPTY_CODE

    codes = [_encode_word(word) for word in words]
    return PhoneticCode(
        metaphone=_join_segments([c.metaphone for c in codes]),
        soundex=_join_segments([c.soundex for c in codes]),
        double_metaphone_primary=_join_segments([c.double_metaphone_primary for c in codes]),
        double_metaphone_secondary=_join_segments([c.double_metaphone_secondary for c in codes]),
    )


def _is_partial_prefix(a: str, b: str) -> bool:
    return a != b and (a.startswith(b) or b.startswith(a))


def phonetic_similarity(a: str, b: str) -> float:
    """Score how alike two words or phrases sound.

    Averages the channels for which both sides have a code:

    - Double Metaphone primary vs primary: exact 1.0, prefix 0.7
    - secondary vs secondary: exact 0.8, prefix 0.5
    - primary vs secondary, secondary vs primary: exact 0.6 each
    - Metaphone: exact 0.7
    - Soundex: exact 0.4

    A channel missing a code on either side is left out of the average
    rather than scored zero.

    Args:
        a: First word or phrase
        b: Second word or phrase

    Returns:
        Similarity from 0.0 to 1.0
    """
    code_a = get_phonetic_code(a)
    code_b = get_phonetic_code(b)

    score = 0.0
    checks = 0

    primary_a, primary_b = code_a.double_metaphone_primary, code_b.double_metaphone_primary
    secondary_a, secondary_b = code_a.double_metaphone_secondary, code_b.double_metaphone_secondary

    if primary_a and primary_b:
        checks += 1
        if primary_a == primary_b:
            score += DM_PRIMARY_EXACT
        elif _is_partial_prefix(primary_a, primary_b):
            score += DM_PRIMARY_PREFIX

    if secondary_a and secondary_b:
        checks += 1
        if secondary_a == secondary_b:
            score += DM_SECONDARY_EXACT
        elif _is_partial_prefix(secondary_a, secondary_b):
            score += DM_SECONDARY_PREFIX

    if primary_a and secondary_b:
        checks += 1
        if primary_a == secondary_b:
            score += DM_CROSS_EXACT

    if secondary_a and primary_b:
        checks += 1
        if secondary_a == primary_b:
            score += DM_CROSS_EXACT

    if code_a.metaphone and code_b.metaphone:
        checks += 1
        if code_a.metaphone == code_b.metaphone:
            score += METAPHONE_EXACT

    if code_a.soundex and code_b.soundex:
        checks += 1
        if code_a.soundex == code_b.soundex:
            score += SOUNDEX_EXACT

    if checks == 0:
        return 0.0
    return min(1.0, score / checks)


def are_phonetically_similar(a: str, b: str, threshold: float = 0.5) -> bool:
    """Check whether two terms sound alike.

    Args:
        a: First term
        b: Second term
        threshold: Minimum similarity, clamped into [0, 1]

    Returns:
        True if phonetic_similarity(a, b) >= threshold
    """
    threshold = min(1.0, max(0.0, threshold))
    return phonetic_similarity(a, b) >= threshold
