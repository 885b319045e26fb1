"""Tests for phonetic encoding and similarity."""

import pytest

from term_resolver.vocabulary.phonetic import (
    EMPTY_CODE,
    PhoneticCode,
    are_phonetically_similar,
    clean_word,
    double_metaphone,
    get_phonetic_code,
    metaphone,
    phonetic_similarity,
    soundex,
)

SAMPLE_PAIRS = [
    ("Necrons", "neck runs"),
    ("Drukhari", "drew car ee"),
    ("Farseer", "far seer"),
    ("Farseer", "farsear"),
    ("Kabalite Warriors", "cabalite warriors"),
    ("Guilliman", "gilliman"),
    ("Wraithguard", "wraith guard"),
    ("Talos", "tallos"),
    ("Necrons", ""),
    ("", ""),
    ("Knight", "night"),
]


class TestCleanWord:
    """Tests for clean_word."""

    def test_strips_non_letters(self):
        """Digits, punctuation and accents are dropped."""
        assert clean_word("T'àu") == "tau"
        assert clean_word("Mk.2") == "mk"
        assert clean_word("123") == ""


class TestSoundex:
    """Tests for the Soundex encoder."""

    @pytest.mark.parametrize(
        "word,expected",
        [
            ("Robert", "R163"),
            ("Ashcraft", "A261"),
            ("Tymczak", "T522"),
            ("Pfister", "P236"),
            ("Necrons", "N265"),
            ("Lee", "L000"),
        ],
    )
    def test_known_codes(self, word, expected):
        """Test classic reference codes."""
        assert soundex(word) == expected

    def test_empty(self):
        """Input without letters has no code."""
        assert soundex("") == ""
        assert soundex("42") == ""

    def test_case_insensitive(self):
        """Case does not change the code."""
        assert soundex("necrons") == soundex("NECRONS")


class TestMetaphone:
    """Tests for the Metaphone encoder."""

    def test_silent_leading_letters(self):
        """KN drops the K and a GH before a consonant is silent."""
        assert metaphone("Knight") == "NT"

    def test_ph_is_f(self):
        """PH encodes as F."""
        assert metaphone("Phone") == "FN"

    def test_empty(self):
        """Input without letters has no code."""
        assert metaphone("") == ""
        assert metaphone("--") == ""


class TestDoubleMetaphone:
    """Tests for the Double Metaphone wrapper."""

    def test_secondary_never_empty(self):
        """A word with a primary code always has a secondary code."""
        for word in ["Necrons", "Drukhari", "Farseer", "Guilliman", "Smith", "Xavier"]:
            primary, secondary = double_metaphone(word)
            assert primary
            assert secondary

    def test_empty(self):
        """Input without letters gives empty codes."""
        assert double_metaphone("") == ("", "")
        assert double_metaphone("!!") == ("", "")


class TestGetPhoneticCode:
    """Tests for get_phonetic_code."""

    def test_empty_input(self):
        """Empty and blank input give the empty code."""
        assert get_phonetic_code("") == EMPTY_CODE
        assert get_phonetic_code("   ") == EMPTY_CODE
        assert get_phonetic_code("").is_empty

    def test_all_fields_are_strings(self):
        """No field is ever None."""
        code = get_phonetic_code("Necrons")

        assert isinstance(code, PhoneticCode)
        for value in code.to_dict().values():
            assert isinstance(value, str)
            assert value

    def test_phrase_is_segmented_per_word(self):
        """Each word is encoded separately and joined with a space."""
        code = get_phonetic_code("neck runs")

        assert code.soundex == f"{soundex('neck')} {soundex('runs')}"
        assert code.metaphone == f"{metaphone('neck')} {metaphone('runs')}"
        assert code.double_metaphone_primary.count(" ") == 1

    def test_extra_whitespace_ignored(self):
        """Runs of whitespace separate words like a single space."""
        assert get_phonetic_code("  neck   runs ") == get_phonetic_code("neck runs")

    def test_deterministic(self):
        """Same input, same code."""
        assert get_phonetic_code("Kabalite Warriors") == get_phonetic_code("Kabalite Warriors")

    def test_word_without_letters_keeps_position(self):
        """A numeric word contributes an empty segment."""
        code = get_phonetic_code("Squad 2")

        assert code.soundex == f"{soundex('Squad')} "


class TestPhoneticSimilarity:
    """Tests for phonetic_similarity and are_phonetically_similar."""

    @pytest.mark.parametrize("a,b", SAMPLE_PAIRS)
    def test_symmetric(self, a, b):
        """Similarity does not depend on argument order."""
        assert phonetic_similarity(a, b) == phonetic_similarity(b, a)

    @pytest.mark.parametrize("a,b", SAMPLE_PAIRS)
    def test_bounded(self, a, b):
        """Similarity lies in [0, 1]."""
        assert 0.0 <= phonetic_similarity(a, b) <= 1.0

    def test_empty_is_zero(self):
        """Nothing to compare gives zero."""
        assert phonetic_similarity("", "Necrons") == 0.0
        assert phonetic_similarity("", "") == 0.0

    def test_identical_words_score_high(self):
        """Identical single-code words agree on every channel."""
        # Primary 1.0, secondary 0.8, both cross 0.6, Metaphone 0.7, Soundex 0.4
        assert phonetic_similarity("Talos", "Talos") == pytest.approx(4.1 / 6)

    def test_sound_alike_beats_unrelated(self):
        """A sound-alike scores above an unrelated word."""
        assert phonetic_similarity("Farseer", "farsear") > phonetic_similarity("Farseer", "Talos")

    def test_are_phonetically_similar(self):
        """Threshold comparison uses the similarity score."""
        assert are_phonetically_similar("Farseer", "farsear")
        assert not are_phonetically_similar("Farseer", "Wraithguard")

    def test_threshold_clamped(self):
        """Thresholds outside [0, 1] are clamped."""
        assert are_phonetically_similar("Farseer", "Talos", threshold=-5)
        assert not are_phonetically_similar("Farseer", "farsear", threshold=5)
