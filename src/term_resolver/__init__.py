"""Term Resolver - Noisy Wargame Terminology Matching.

Resolves mis-heard caption text and concatenated keywords to canonical
catalog entries:
1. Phonetic matching: Metaphone, Soundex and Double Metaphone fingerprints
2. Matcher chain: alias, exact, fuzzy and phonetic strategies with ranked output
3. Disambiguation: faction- and context-aware re-ranking of close candidates
"""

__version__ = "0.1.0"
