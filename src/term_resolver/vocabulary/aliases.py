"""Built-in aliases for colloquial names.

Players rarely say the full catalog name: "crons" for Necrons, "termies"
for Terminator Squad. Aliases map a normalized colloquial spelling to the
canonical term, and an alias hit is as certain as an exact match.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from term_resolver.text import normalize_text

BUILTIN_ALIASES: Mapping[str, str] = MappingProxyType({
    # Space Marine units
    "termies": "Terminator Squad",
    "terminators": "Terminator Squad",
    "intercessors": "Intercessor Squad",
    "assault intercessors": "Assault Intercessor Squad",
    "assault terminators": "Assault Terminator Squad",
    "scouts": "Scout Squad",
    "hellblasters": "Hellblaster Squad",
    "devastators": "Devastator Squad",
    "tacticals": "Tactical Squad",
    "assault marines": "Assault Squad",
    "vanguard vets": "Vanguard Veteran Squad",
    "sternguard": "Sternguard Veteran Squad",
    "aggressors": "Aggressor Squad",
    "eradicators": "Eradicator Squad",
    "eliminators": "Eliminator Squad",
    "incursors": "Incursor Squad",
    "infiltrators": "Infiltrator Squad",
    "reivers": "Reiver Squad",
    "suppressors": "Suppressor Squad",
    "inceptors": "Inceptor Squad",
    "bladeguard": "Bladeguard Veteran Squad",
    "las preds": "Predator Destructor",
    "las pred": "Predator Destructor",

    # Drukhari units
    "cabalite warriors": "Kabalite Warriors",
    "cabalite": "Kabalite Warriors",
    "cabalites": "Kabalite Warriors",
    "drazar": "Drazhar",
    "mandrekes": "Mandrakes",
    "kronos": "Cronos",
    "lady malice": "Lady Malys",
    "reaver jet bikes": "Reavers",
    "reaver jetbikes": "Reavers",
    "reaver jetbike": "Reavers",
    "reaver jet bike": "Reavers",
    "lilith hesperax": "Lelith Hesperax",
    "lilith": "Lelith Hesperax",
    "lelith": "Lelith Hesperax",
    "wych": "Wyches",
    "wytches": "Wyches",
    "witches": "Wyches",

    # Genestealer Cults units
    "genestealers": "Purestrain Genestealers",
    "genesteelers": "Purestrain Genestealers",
    "ridgerunners": "Achilles Ridgerunners",
    "ridge runners": "Achilles Ridgerunners",
    "rockgrinder": "Goliath Rockgrinder",
    "rock grinder": "Goliath Rockgrinder",
    "kellerorph": "Kelermorph",
    "calamorph": "Kelermorph",
    "saboteur": "Reductus Saboteur",

    # Factions
    "eldar": "Aeldari",
    "craftworlds": "Aeldari",
    "craftworld": "Aeldari",
    "dark eldar": "Drukhari",
    "sisters of battle": "Adepta Sororitas",
    "sisters": "Adepta Sororitas",
    "admech": "Adeptus Mechanicus",
    "ad mech": "Adeptus Mechanicus",
    "custodes": "Adeptus Custodes",
    "imperial guard": "Astra Militarum",
    "tau": "T'au Empire",
    "tau empire": "T'au Empire",
    "gsc": "Genestealer Cults",
    "genestealer cult": "Genestealer Cults",
    "csm": "Chaos Space Marines",
    "dg": "Death Guard",
    "tsons": "Thousand Sons",
    "nids": "Tyranids",
    "crons": "Necrons",
    "votann": "Leagues of Votann",

    # Stratagems
    "overwatch": "Fire Overwatch",
    "reroll": "Command Re-roll",
    "cp reroll": "Command Re-roll",

    # Detachments
    "cartel": "Kabalite Cartel",
    "cabalite cartel": "Kabalite Cartel",
    "gladius": "Gladius Task Force",
    "montka": "Mont'ka",

    # Agents of the Imperium
    "kalidus": "Callidus Assassin",
    "calidus": "Callidus Assassin",
    "callidus": "Callidus Assassin",
    "vindicare": "Vindicare Assassin",
    "culexus": "Culexus Assassin",
    "eversor": "Eversor Assassin",
    "castellan crow": "Castellan Crowe",
    "crowe": "Castellan Crowe",
})


def get_builtin_aliases() -> dict[str, str]:
    """Get a mutable copy of the built-in alias table."""
    return dict(BUILTIN_ALIASES)


def resolve_alias(term: str, aliases: Mapping[str, str] | None = None) -> str | None:
    """Resolve a colloquial name to its canonical term.

    Args:
        term: Name as written or spoken
        aliases: Alias table keyed by normalized spelling (built-ins if omitted)

    Returns:
        Canonical term, or None if the name is not an alias
    """
    table = BUILTIN_ALIASES if aliases is None else aliases
    key = normalize_text(term)
    if not key:
        return None
    return table.get(key)
