"""Curated phonetic overrides.

Speech-to-text engines mis-hear the same specialized terms in the same
ways ("neck runs" for "Necrons"). These hand-authored mappings outrank
every computed matcher: a variant maps straight to its canonical term.
"""

from __future__ import annotations

import json
from pathlib import Path

from term_resolver.errors import ResourceError, ValidationError
from term_resolver.text import collapse_whitespace


class OverrideDictionary:
    """Maps known mis-transcriptions to canonical terms.

    Lookup is exact and case-insensitive only; there is no fuzziness.
    Canonical terms keep their catalog spelling.

    Example:
        overrides = OverrideDictionary()
        overrides.add_term("Necrons", ["neck runs", "neck rons"])
        overrides.lookup("Neck Runs")  # Returns "Necrons"
    """

    def __init__(self, overrides: dict[str, list[str]] | None = None):
        """Initialize the override dictionary.

        Args:
            overrides: Initial mapping of canonical -> variants
        """
        # Canonical term -> list of variant spellings (normalized)
        self._overrides: dict[str, list[str]] = {}

        # Reverse lookup: variant (normalized) -> canonical
        self._variant_lookup: dict[str, str] = {}

        if overrides:
            for canonical, variants in overrides.items():
                self.add_term(canonical, variants)

    @staticmethod
    def _key(text: str) -> str:
        return collapse_whitespace(text)

    def _find_canonical(self, canonical: str) -> str | None:
        key = self._key(canonical)
        for existing in self._overrides:
            if self._key(existing) == key:
                return existing
        return None

    def add_term(self, canonical: str, variants: list[str]) -> None:
        """Add a canonical term with its known variants.

        Replaces the variants of an existing term with the same name.

        Args:
            canonical: Canonical spelling
            variants: Known mis-transcriptions
        """
        canonical = canonical.strip()
        if not canonical:
            raise ValidationError("Override canonical term must not be empty")

        existing = self._find_canonical(canonical)
        if existing is not None:
            self.remove_term(existing)

        normalized: list[str] = []
        for variant in variants:
            key = self._key(variant)
            if key and key not in normalized:
                normalized.append(key)
                self._variant_lookup[key] = canonical

        self._overrides[canonical] = normalized

    def remove_term(self, canonical: str) -> bool:
        """Remove a term and its variants.

        Args:
            canonical: Canonical term to remove

        Returns:
            True if the term was found and removed
        """
        existing = self._find_canonical(canonical)
        if existing is None:
            return False

        for variant in self._overrides[existing]:
            if self._variant_lookup.get(variant) == existing:
                del self._variant_lookup[variant]

        del self._overrides[existing]
        return True

    def add_variant(self, canonical: str, variant: str) -> bool:
        """Add a variant to an existing term.

        Args:
            canonical: Canonical term
            variant: New variant

        Returns:
            True if added, False if the term doesn't exist
        """
        existing = self._find_canonical(canonical)
        key = self._key(variant)
        if existing is None or not key:
            return False

        if key not in self._overrides[existing]:
            self._overrides[existing].append(key)
        self._variant_lookup[key] = existing
        return True

    def remove_variant(self, canonical: str, variant: str) -> bool:
        """Remove a variant from a term.

        Args:
            canonical: Canonical term
            variant: Variant to remove

        Returns:
            True if the variant was found and removed
        """
        existing = self._find_canonical(canonical)
        key = self._key(variant)
        if existing is None or key not in self._overrides[existing]:
            return False

        self._overrides[existing].remove(key)
        if self._variant_lookup.get(key) == existing:
            del self._variant_lookup[key]
        return True

    def lookup(self, text: str) -> str | None:
        """Get the canonical term for a known mis-transcription.

        The hit is returned whether or not the canonical term is part of
        any particular vocabulary; callers check membership.

        Args:
            text: Text to look up

        Returns:
            Canonical term, or None if the text is not a known variant
        """
        if not text:
            return None
        return self._variant_lookup.get(self._key(text))

    def get_variants(self, canonical: str) -> list[str]:
        """Get all variants of a canonical term (empty if unknown)."""
        existing = self._find_canonical(canonical)
        if existing is None:
            return []
        return self._overrides[existing].copy()

    def get_all_terms(self) -> list[str]:
        """Get all canonical terms."""
        return list(self._overrides.keys())

    def to_dict(self) -> dict[str, list[str]]:
        """Export overrides as a canonical -> variants dictionary."""
        return {k: v.copy() for k, v in self._overrides.items()}

    def __len__(self) -> int:
        """Return number of canonical terms."""
        return len(self._overrides)

    def __contains__(self, text: str) -> bool:
        """Check if text is a known variant."""
        return self.lookup(text) is not None

    @classmethod
    def from_json_file(cls, path: Path | str) -> "OverrideDictionary":
        """Load overrides from a JSON file of canonical -> variants.

        Args:
            path: Path to JSON file

        Returns:
            OverrideDictionary instance

        Raises:
            ResourceError: If the file doesn't exist
            ValidationError: If the file is not a canonical -> variants mapping
        """
        path = Path(path)
        if not path.exists():
            raise ResourceError(f"Override file not found: {path}")

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(
                f"Override file is not valid JSON: {path}",
                context={"line": e.lineno},
            ) from e

        if not isinstance(data, dict) or not all(
            isinstance(v, list) and all(isinstance(s, str) for s in v) for v in data.values()
        ):
            raise ValidationError(
                f"Override file must map terms to lists of variants: {path}"
            )

        return cls(data)

    def to_json_file(self, path: Path | str) -> None:
        """Save overrides to a JSON file.

        Args:
            path: Path to save to
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)


DEFAULT_OVERRIDES: dict[str, list[str]] = {
    # Imperium characters
    "Guilliman": [
        "gilman", "gillman", "gillein", "gilaman", "gullan", "gullman",
        "guilleman", "gillaman", "gully man", "gully men",
    ],
    "Roboute Guilliman": [
        "row booty guilliman", "row boot guilliman", "roboute gilman", "roboute gillman",
    ],
    "Tigurius": ["tigerius", "toarius", "tigarius", "tie garius", "tie gurius", "tig urius"],
    "Sicarius": [
        "sakarius", "ko sakarius", "coe sakarius", "si carius", "sic arius",
        "korsakarius", "kosakarius",
    ],
    "Helbrecht": ["hellbreck", "hellbreick", "hell breck", "hell brecht", "hel brecht", "hell brick"],
    "Chaplain Grimaldus": ["grimaldis", "grim aldus", "grim all dis", "grim oldus"],

    # Space Marine units
    "Redemptor Dreadnought": [
        "redemptor dreadnot", "redemptor dread not", "redemption dreadnought",
        "red emptor dreadnought",
    ],
    "Brutalis Dreadnought": [
        "brutalis dreadnot", "brutalis dread not", "brutal is dreadnought",
        "brew talus dreadnought",
    ],
    "Ballistus Dreadnought": ["ballistus dreadnot", "ballistas dreadnought", "ball istus dreadnought"],
    "Sternguard Veterans": ["stern guard veterans", "stern guard vets", "sternguard vets", "stern guard"],
    "Vanguard Veterans": ["vanguard vets", "van guard veterans", "van guard vets"],
    "Victrix Honour Guard": [
        "victrix honor guard", "victor's honor guard", "victrix guard",
        "vic tricks honor guard", "vic trix honour guard",
    ],
    "Repulsor Executioner": ["repulser executioner", "repulsor executor", "repulse or executioner"],
    "Bladeguard Veterans": ["blade guard veterans", "blade guard vets"],
    "Intercessors": ["inter cessors", "inter sessors"],

    # Factions
    "Necrons": [
        "neck runs", "necro arms", "neck rons", "necro ns", "neck ron", "necro on", "necro ons",
    ],
    "Drukhari": [
        "drew car ee", "drug harry", "dru kari", "drew kari", "drew carry",
        "drug carry", "drook ari", "droo kari", "droo carry",
    ],
    "Aeldari": [
        "el dari", "elder eye", "all dary", "el dary", "all dari", "elder i", "al dari", "ale dari",
    ],
    "T'au Empire": ["tau empire", "tao empire", "towel empire", "tow empire"],
    "Adeptus Custodes": ["a depth us custodies", "adept us custodies", "adept us cuss toad es"],
    "Adeptus Mechanicus": ["a depth us mechanicus", "adept us mechanicus", "adept us mech anicus"],
    "Adepta Sororitas": ["a depth a sororitas", "adept a sore or itas", "a depth a sor or itas"],
    "Tyranids": ["tie ran ids", "tier anids", "tyrann ids", "tie rannids"],
    "Genestealer Cults": ["jean steeler cults", "gene steeler cults", "jeans teeler cults"],
    "Leagues of Votann": ["leagues of vote ann", "leagues of vo tan", "leagues of vo tann"],

    # Aeldari and Drukhari characters
    "Lelith Hesperax": ["lilith hesperax", "lil lith hesperax", "lay lith hesperax", "le lith hes per ax"],
    "Drazhar": ["drazar", "draz har", "drash ar", "drash har"],
    "Urien Rakarth": ["urine rakarth", "urine rack arth", "you ren rakarth"],
    "Haemonculus": ["hemo uncle us", "hemo on cue lus", "hee mon cue lus", "he monk you lus"],
    "Archon": ["arc on", "are con", "arc con"],
    "Succubus": ["suck you bus", "suck a bus", "sue cubus"],
    "Farseer": ["far seer", "far see er", "far sear"],
    "Autarch": ["auto arc", "aw tark", "aw tarch", "auto arch"],
    "Warlock": ["war lock", "wore lock"],
    "Avatar of Khaine": ["avatar of cane", "avatar of kane", "avatar of chain"],
    "Yncarne": ["in car nay", "in carne", "ink arne", "yin carne"],
    "Yvraine": ["ee vrain", "eve rain", "e vrain"],

    # Necron characters
    "Cryptek": ["crypt ek", "crypt tech", "crip tech"],
    "Overlord": ["over lord"],
    "C'tan": ["sea tan", "see tan", "kuh tan"],
    "Szarekh": ["zara eck", "sah reck", "zah wreck"],
    "Imotekh": ["im oh tech", "ee mo tech", "i moe tech"],

    # Units
    "Kabalite Warriors": ["cabal ite warriors", "cab elite warriors", "cable ite warriors"],
    "Wyches": ["which is", "why chez"],
    "Incubi": ["in cube eye", "ink you bye", "in cue by"],
    "Mandrakes": ["man drakes", "manned rakes"],
    "Grotesques": ["grow tesks", "grow tests", "gro tesks"],
    "Wracks": ["rax", "wrax", "wrecks", "wrac"],
    "Talos": ["tail os", "tall os", "tay los"],
    "Cronos": ["crow nos", "crone os"],
    "Voidraven": ["void raven", "void ray ven"],
    "Razorwing": ["razor wing", "razer wing"],
    "Hellions": ["helly ons", "hell ions", "helli ons"],
    "Wraithguard": ["wraith guard", "rave guard", "ray guard"],
    "Wraithblades": ["wraith blades", "rave blades", "ray blades"],
    "Wraithknight": ["wraith knight", "rave knight", "ray knight"],
    "Dire Avengers": ["dyer avengers"],
    "Howling Banshees": ["howling ban shees"],
    "Fire Dragons": ["firedragons"],
    "Windriders": ["wind riders", "win drivers"],
    "Lychguard": ["lick guard", "litch guard", "lych guard", "like guard"],
    "Deathmarks": ["death marks", "deaf marks"],
    "Flayed Ones": ["played ones", "frayed ones"],
    "Ophydian Destroyers": ["oh fidian destroyers", "offidian destroyers", "o phidian destroyers"],
    "Skorpekh Destroyers": ["score peck destroyers", "scor peck destroyers", "score pec destroyers"],
    "Lokhust Destroyers": ["low cust destroyers", "lo cust destroyers", "locust destroyers"],
    "Canoptek Wraiths": ["cane op tech wraiths", "can op tek wraiths", "canop tech wraiths"],
    "Canoptek Scarabs": ["cane op tech scarabs", "can op tek scarabs", "canop tech scarabs"],
    "Tesseract Vault": ["tesser act vault", "test erect vault", "tess eract vault"],
    "Monolith": ["mono lith", "mano lith"],
    "Doomsday Ark": ["dooms day arc", "doom stay ark"],
    "Ghost Ark": ["ghost arc"],
    "Dreadnought": ["dreadnot", "dread not", "dread naught", "dred nought", "dread naut"],
    "Primarch": ["prime ark", "pry mark", "prim ark"],

    # Detachments
    "Realspace Raiders": ["real space raiders", "reel space raiders"],
    "Skysplinter Assault": ["sky splinter assault", "sky splinter a salt"],
    "Kabalite Cartel": ["cab elite cartel", "cable ite cartel"],
    "Hypercrypt Legion": ["hyper crypt legion", "hyper cripted legion"],
    "Awakened Dynasty": ["a wakened dynasty", "awaken dynasty"],
    "Canoptek Court": ["cane op tech court", "can op tek court"],

    # Stratagems
    "Fire Overwatch": ["fire over watch", "fire over wach"],
    "Heroic Intervention": ["heroic inter vention"],
    "Insane Bravery": ["in sane bravery", "insane brave ry"],
    "Rapid Ingress": ["rapid in gress"],
    "Lightning-Fast Reactions": ["lightning fast reactions", "light ning fast reactions"],
    "Forewarned": ["for warned", "four warned"],
    "Battle Focus": ["battle focas"],
}


def get_default_overrides() -> OverrideDictionary:
    """Get the curated default override table.

    Returns a fresh instance each call so callers can extend it freely.
    """
    return OverrideDictionary(DEFAULT_OVERRIDES)
