"""Tests for musical key normalization and Camelot lookup."""

import pytest

from chunes.utils.musical_key import (
    ENHARMONIC_EQUIVALENTS,
    KEY_TO_CAMELOT,
    camelot_for_key,
    normalize_key,
)

ALL_KEYS = sorted(set(KEY_TO_CAMELOT) | set(ENHARMONIC_EQUIVALENTS))


def _long_form(key: str, separator: str) -> str:
    if key.endswith("m"):
        return key[:-1] + separator + "Minor"
    return key + separator + "Major"


class TestNormalizeKey:
    """Tests for normalize_key."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("Gb Minor", "Gbm"),
            ("Gb-Minor", "Gbm"),
            ("gb minor", "Gbm"),
            ("F#-Major", "F#"),
            ("A Minor", "Am"),
            ("A_Minor", "Am"),
            ("C Major", "C"),
            ("Gbm", "Gbm"),
            ("f#m", "F#m"),
            ("Bb", "Bb"),
            ("B", "B"),
            ("Bm", "Bm"),
            ("  Eb Major  ", "Eb"),
        ],
    )
    def test_recognized_forms(self, raw: str, expected: str) -> None:
        assert normalize_key(raw) == expected

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("G♭ minor", "Gbm"),
            ("F♯m", "F#m"),
            ("D♭ Major", "Db"),
        ],
    )
    def test_unicode_accidentals(self, raw: str, expected: str) -> None:
        assert normalize_key(raw) == expected

    @pytest.mark.parametrize("key", ALL_KEYS)
    @pytest.mark.parametrize("separator", [" ", "-", ""])
    def test_long_forms_round_trip(self, key: str, separator: str) -> None:
        assert normalize_key(_long_form(key, separator)) == key

    @pytest.mark.parametrize("key", ALL_KEYS)
    def test_canonical_form_is_stable(self, key: str) -> None:
        assert normalize_key(key) == key

    @pytest.mark.parametrize("key", ALL_KEYS)
    @pytest.mark.parametrize("separator", [None, " ", "-"])
    def test_unicode_accidental_forms_round_trip(self, key: str, separator) -> None:
        """G♭m, G♭ Minor and G♭-Minor all come back as Gbm."""
        unicode_key = key.replace("b", "♭").replace("#", "♯")
        raw = unicode_key if separator is None else _long_form(unicode_key, separator)
        assert normalize_key(raw) == key

    def test_unrecognized_is_trimmed_passthrough(self) -> None:
        assert normalize_key("  Unknown-Key ") == "Unknown-Key"
        assert normalize_key("H Minor") == "H Minor"

    @pytest.mark.parametrize("raw", [None, ""])
    def test_empty(self, raw) -> None:
        assert normalize_key(raw) is None


class TestCamelotForKey:
    """Tests for camelot_for_key."""

    @pytest.mark.parametrize(
        "key,expected",
        [("Am", "8A"), ("C", "8B"), ("F#m", "11A"), ("Abm", "1A"), ("E", "12B")],
    )
    def test_direct(self, key: str, expected: str) -> None:
        assert camelot_for_key(key) == expected

    @pytest.mark.parametrize(
        "key,expected",
        [("Gbm", "11A"), ("E#", "7B"), ("A#", "6B"), ("Gb", "2B"), ("B#m", "5A")],
    )
    def test_enharmonic_fallback(self, key: str, expected: str) -> None:
        assert camelot_for_key(key) == expected

    @pytest.mark.parametrize("key", ALL_KEYS)
    def test_every_spelling_is_on_the_wheel(self, key: str) -> None:
        assert camelot_for_key(key) is not None

    def test_minor_keys_on_a_side(self) -> None:
        for key, code in KEY_TO_CAMELOT.items():
            assert code.endswith("A") == key.endswith("m")

    @pytest.mark.parametrize("key", [None, "", "Unknown-Key", "H"])
    def test_unknown(self, key) -> None:
        assert camelot_for_key(key) is None
