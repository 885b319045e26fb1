"""Text normalization helpers shared by matchers and the resolver."""

from __future__ import annotations

import re
import unicodedata

_NON_ALNUM_SPACE = re.compile(r"[^a-z0-9\s]")
_NON_ALNUM = re.compile(r"[^a-z0-9]")
_WHITESPACE = re.compile(r"\s+")

# Curly quotes and backticks that catalogs and captions use interchangeably
_APOSTROPHES = str.maketrans({"’": "'", "‘": "'", "`": "'", "´": "'"})


def fold_diacritics(text: str) -> str:
    """Strip combining marks ("T'àu" -> "T'au")."""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def normalize_apostrophes(text: str) -> str:
    """Replace typographic apostrophes with a plain one."""
    return text.translate(_APOSTROPHES)


def normalize_text(text: str) -> str:
    """Normalize a name for comparison.

    Lower-cases, folds diacritics, drops punctuation and collapses
    whitespace: "  T'au   Empire!" -> "tau empire".
    """
    if not text:
        return ""
    folded = fold_diacritics(text).lower()
    return _WHITESPACE.sub(" ", _NON_ALNUM_SPACE.sub("", folded)).strip()


def compact_text(text: str) -> str:
    """Normalize and remove all separators: "Deep-Strike" -> "deepstrike"."""
    if not text:
        return ""
    return _NON_ALNUM.sub("", fold_diacritics(text).lower())


def collapse_whitespace(text: str) -> str:
    """Lower-case and collapse runs of whitespace, keeping punctuation."""
    return _WHITESPACE.sub(" ", text).strip().lower()


def overlaps(a: str, b: str) -> bool:
    """True when either normalized string contains the other."""
    na, nb = normalize_text(a), normalize_text(b)
    if not na or not nb:
        return False
    return na in nb or nb in na
