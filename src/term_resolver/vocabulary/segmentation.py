"""Splitting keywords that markup-to-text conversion glued together.

Converted datasheets lose the separators between adjacent keyword
elements, giving names such as "Splinter rifleRapidfire1" and keyword
runs such as "HERETICASTARTESCULTISTMOB".
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

WEAPON_ABILITY_KEYWORDS: tuple[str, ...] = (
    "ANTI-CHARACTER",
    "ANTI-FLY",
    "ANTI-INFANTRY",
    "ANTI-MONSTER",
    "ANTI-TANK",
    "ANTI-VEHICLE",
    "ASSAULT",
    "BLAST",
    "DEVASTATING WOUNDS",
    "EXTRA ATTACKS",
    "HAZARDOUS",
    "HEAVY",
    "IGNORES COVER",
    "INDIRECT FIRE",
    "LANCE",
    "LETHAL HITS",
    "MELTA",
    "ONE SHOT",
    "PISTOL",
    "PRECISION",
    "PSYCHIC",
    "RAPID FIRE",
    "SUSTAINED HITS",
    "TORRENT",
    "TWIN-LINKED",
)

KNOWN_KEYWORDS: tuple[str, ...] = (
    "ADEPTUS ASTARTES",
    "ADEPTUS CUSTODES",
    "ADEPTUS MECHANICUS",
    "AIRCRAFT",
    "ASTRA MILITARUM",
    "BATTLE-SHOCK",
    "BATTLELINE",
    "BEAST",
    "BLACK TEMPLARS",
    "BLOOD ANGELS",
    "CHAOS",
    "CHAOS KNIGHT",
    "CHARACTER",
    "CULTIST MOB",
    "DAMNED CHARACTER",
    "DARK ANGELS",
    "DEATH GUARD",
    "DEATHWING",
    "DEEP STRIKE",
    "EPIC HERO",
    "FEEL NO PAIN",
    "FIGHTS FIRST",
    "FLY",
    "GENESTEALER CULTS",
    "GRENADES",
    "GREY KNIGHTS",
    "HERETIC ASTARTES",
    "IMPERIAL AGENTS",
    "IMPERIAL FISTS",
    "IMPERIAL KNIGHT",
    "IMPERIUM",
    "INFANTRY",
    "IRON HANDS",
    "LEAGUES OF VOTANN",
    "LONE OPERATIVE",
    "MONSTER",
    "MOUNTED",
    "PSYKER",
    "RAVENWING",
    "SMOKE",
    "SPACE WOLVES",
    "SWARM",
    "THOUSAND SONS",
    "TITANIC",
    "TOWERING",
    "TRANSPORT",
    "VEHICLE",
    "WALKER",
    "WHITE SCARS",
    "WORLD EATERS",
)

# Parameter that follows a weapon keyword: "1", "D3", "4+"
_KEYWORD_PARAMETER = re.compile(r"\s*(d?\d+\+?)", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class PeeledName:
    """A name with the keywords that were glued onto it removed."""

    name: str
    keywords: tuple[str, ...] = field(default_factory=tuple)


def _spellings(keyword: str) -> list[str]:
    lowered = keyword.lower()
    forms = [lowered, lowered.replace(" ", ""), lowered.replace(" ", "").replace("-", "")]
    return list(dict.fromkeys(forms))


def _is_glued(text: str, idx: int, allow_start: bool) -> bool:
    if idx == 0:
        return allow_start
    # "rifleRapidfire" is glued; "Plasma pistol" and "Multi-melta" are not
    return not text[idx - 1].isspace() and text[idx - 1] != "-" and text[idx].isupper()


def _find_first_keyword(
    text: str,
    keywords: tuple[str, ...],
    allow_start: bool,
) -> tuple[int, int, str] | None:
    """Earliest glued keyword occurrence, longest on ties."""
    lowered = text.lower()
    best: tuple[int, int, str] | None = None
    for keyword in keywords:
        for form in _spellings(keyword):
            idx = lowered.find(form)
            while idx >= 0 and not _is_glued(text, idx, allow_start):
                idx = lowered.find(form, idx + 1)
            if idx < 0:
                continue
            if best is None or idx < best[0] or (idx == best[0] and len(form) > best[1]):
                best = (idx, len(form), keyword)
    return best


def peel_keywords(
    raw_name: str,
    keywords: tuple[str, ...] = WEAPON_ABILITY_KEYWORDS,
) -> PeeledName:
    """Strip keywords concatenated onto a name.

    The leading text is always the name. A keyword is peeled only where it
    is glued on: it starts upper-case right after a non-space character,
    or it directly follows an earlier keyword, so "Plasma pistol" keeps
    its name intact. Text left between or after keywords is kept as
    part of the name unless it starts lower-case, which marks a broken
    keyword fragment. A numeric parameter right after a keyword ("1",
    "D3", "4+") belongs to the keyword.

    Args:
        raw_name: Name as extracted, e.g. "Splinter rifleRapidfire1"
        keywords: Keywords to peel, in canonical spelling

    Returns:
        PeeledName such as ("Splinter rifle", ("RAPID FIRE 1",))
    """
    name_parts: list[str] = []
    found: list[str] = []
    remaining = raw_name.strip()
    first_pass = True

    while remaining:
        hit = _find_first_keyword(remaining, keywords, allow_start=not first_pass)
        if hit is None:
            if first_pass or not remaining[0].islower():
                name_parts.append(remaining.strip())
            break

        idx, length, keyword = hit
        segment = remaining[:idx].strip()
        if segment and (first_pass or not segment[0].islower()):
            name_parts.append(segment)

        remaining = remaining[idx + length:]
        parameter = _KEYWORD_PARAMETER.match(remaining)
        if parameter:
            keyword = f"{keyword} {parameter.group(1).upper()}"
            remaining = remaining[parameter.end():]

        found.append(keyword)
        remaining = remaining.strip()
        first_pass = False

    name = _WHITESPACE.sub(" ", " ".join(p for p in name_parts if p)).strip()
    return PeeledName(name=name, keywords=tuple(found))


def split_concatenated(
    blob: str,
    keywords: tuple[str, ...] = KNOWN_KEYWORDS,
) -> list[str]:
    """Split a separator-less keyword run into known keywords.

    Scans left to right taking the longest known keyword at each position.
    Characters no keyword covers are returned together as one piece.

    Args:
        blob: Text such as "HERETICASTARTESCULTISTMOB"
        keywords: Known keywords in canonical spelling

    Returns:
        Pieces in order, e.g. ["HERETIC ASTARTES", "CULTIST MOB"]
    """
    text = _WHITESPACE.sub("", blob)
    if not text:
        return []

    table: dict[str, str] = {}
    for keyword in keywords:
        table.setdefault(keyword.lower().replace(" ", ""), keyword)
    lengths = sorted({len(k) for k in table}, reverse=True)

    lowered = text.lower()
    pieces: list[str] = []
    unknown: list[str] = []
    i = 0

    while i < len(text):
        for length in lengths:
            known = table.get(lowered[i:i + length])
            if known is not None:
                if unknown:
                    pieces.append("".join(unknown))
                    unknown = []
                pieces.append(known)
                i += length
                break
        else:
            unknown.append(text[i])
            i += 1

    if unknown:
        pieces.append("".join(unknown))
    return pieces
