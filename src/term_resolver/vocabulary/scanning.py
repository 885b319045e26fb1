"""Phonetic scanning of free caption text.

Slides one- to three-word windows over a caption and looks each window up
in a phonetic index, catching mishearings such as "neck runs" that span
several words.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from term_resolver.logging import get_logger
from term_resolver.vocabulary.index import PhoneticIndex, find_phonetic_matches
from term_resolver.vocabulary.overrides import OverrideDictionary, get_default_overrides

logger = get_logger(__name__)

_WORD = re.compile(r"\w[\w'’-]*")
_NON_LETTER_SPACE = re.compile(r"[^a-z\s]")

MAX_NGRAM = 3
MIN_PHRASE_CHARS = 4
MIN_SINGLE_WORD_CHARS = 5

# Everyday words whose codes collide with catalog names ("will" and "Aleya")
PHONETIC_EXCLUSIONS = frozenset({
    "will", "well", "would", "could", "should", "have", "been", "being", "were",
    "what", "with", "that", "this", "they", "them", "then", "than", "when",
    "where", "here", "there", "their", "your", "more", "most", "some", "come",
    "came", "make", "made", "take", "took", "give", "gave", "just", "only",
    "also", "like", "want", "need", "know", "knew", "think", "very", "much",
    "such", "each", "both", "into", "over", "from", "back", "down", "still",
    "really", "actually", "going", "doing", "getting", "putting", "looking",
    "turn", "roll", "dice", "move", "shot", "hits", "wound", "save", "fail",
    "pass", "dead", "kill", "left", "right", "side", "front", "rear", "half",
    "full", "free", "fast", "slow", "good", "best", "next", "last", "first",
    "unit", "units", "army", "game", "play", "round", "phase", "point",
    "studio", "studios", "channel", "video", "sponsor",
    "today", "hello", "guys", "welcome", "thanks", "check", "link", "below",
    "wall", "all", "call", "fall", "hall", "tall", "ball", "small",
    "able", "table", "label", "allow", "ally", "alley", "always",
})


@dataclass(frozen=True)
class Ngram:
    """A run of one to three words and its character span in the text."""

    phrase: str
    start: int
    end: int

    @property
    def word_count(self) -> int:
        return len(self.phrase.split())


@dataclass
class ScanMatch:
    """A phrase in the text that sounds like a known term."""

    original: str
    matched_term: str
    confidence: float
    start: int
    end: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "original": self.original,
            "matched_term": self.matched_term,
            "confidence": round(self.confidence, 4),
            "start": self.start,
            "end": self.end,
        }


def extract_ngrams(text: str, max_words: int = MAX_NGRAM) -> list[Ngram]:
    """Extract every one- to max_words-word window from text.

    Punctuation around words is not part of a window, so "runs," yields
    the phrase "runs".

    Args:
        text: Text to split
        max_words: Longest window in words

    Returns:
        N-grams ordered by size, then position
    """
    words = [(m.group(), m.start(), m.end()) for m in _WORD.finditer(text)]
    ngrams = []
    for n in range(1, max_words + 1):
        for i in range(len(words) - n + 1):
            window = words[i:i + n]
            ngrams.append(
                Ngram(
                    phrase=" ".join(w[0] for w in window),
                    start=window[0][1],
                    end=window[-1][2],
                )
            )
    return ngrams


class PhoneticScanner:
    """Finds phonetic mishearings of indexed terms in caption text.

    Example:
        scanner = PhoneticScanner(build_phonetic_index(["Necrons"]))
        matches = scanner.scan("the neck runs advance")
        scanner.apply("the neck runs advance", matches)  # "the Necrons advance"
    """

    def __init__(
        self,
        index: PhoneticIndex,
        min_confidence: float = 0.5,
        overrides: OverrideDictionary | None = None,
        exclusions: frozenset[str] = PHONETIC_EXCLUSIONS,
    ):
        """Initialize the scanner.

        Args:
            index: Index of the terms to look for
            min_confidence: Minimum match confidence
            overrides: Override table (the curated defaults if omitted)
            exclusions: Lower-case phrases never matched
        """
        self.index = index
        self.min_confidence = min_confidence
        self.overrides = overrides if overrides is not None else get_default_overrides()
        self.exclusions = exclusions

    def _should_skip(self, ngram: Ngram) -> bool:
        if len(ngram.phrase) < MIN_PHRASE_CHARS:
            return True

        normalized = _NON_LETTER_SPACE.sub("", ngram.phrase.lower()).strip()
        if normalized in self.exclusions:
            return True

        # Four-letter everyday words collide with too many unit names
        return ngram.word_count == 1 and len(normalized) < MIN_SINGLE_WORD_CHARS

    def scan(self, text: str) -> list[ScanMatch]:
        """Scan text for phrases that sound like indexed terms.

        Longer phrases are tried first and a phrase overlapping an earlier
        match is skipped. A phrase that already is the term is not reported.

        Args:
            text: Caption text

        Returns:
            Matches in text order
        """
        if not text or not self.index.terms:
            return []

        ngrams = sorted(extract_ngrams(text), key=lambda g: -len(g.phrase))
        taken: list[tuple[int, int]] = []
        matches: list[ScanMatch] = []

        for ngram in ngrams:
            if any(not (ngram.end <= start or ngram.start >= end) for start, end in taken):
                continue
            if self._should_skip(ngram):
                continue

            found = find_phonetic_matches(
                ngram.phrase,
                self.index,
                max_results=1,
                min_confidence=self.min_confidence,
                overrides=self.overrides,
            )
            if not found:
                continue

            best = found[0]
            if best.term.lower() == ngram.phrase.lower():
                continue

            matches.append(
                ScanMatch(
                    original=ngram.phrase,
                    matched_term=best.term,
                    confidence=best.confidence,
                    start=ngram.start,
                    end=ngram.end,
                )
            )
            taken.append((ngram.start, ngram.end))

        matches.sort(key=lambda m: m.start)
        if matches:
            logger.debug(f"Phonetic scan found {len(matches)} matches")
        return matches

    @staticmethod
    def apply(text: str, matches: list[ScanMatch]) -> str:
        """Replace matched phrases with their canonical terms.

        Replacements run from the end of the text backwards so earlier
        offsets stay valid.

        Args:
            text: Text that was scanned
            matches: Matches from ``scan`` on the same text

        Returns:
            Text with every match replaced
        """
        result = text
        for match in sorted(matches, key=lambda m: m.start, reverse=True):
            result = result[:match.start] + match.matched_term + result[match.end:]
        return result
