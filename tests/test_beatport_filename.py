"""Tests for Beatport filename decoding."""

import logging
import math

import pytest

from chunes.data.models import ParseError, ParsedTrackMetadata
from chunes.utils.beatport_filename import (
    parse_beatport_filename,
    parse_bpm,
    parse_track_id,
    split_name,
)


def _name(
    track_id: str = "123",
    title: str = "Title",
    artists: str = "Artist",
    mix: str = "Original-Mix",
    bpm: str = "124",
    key: str = "A-Minor",
    released: str = "2024-01-05",
    label: str = "Label",
    purchased: str = "2025-02-03",
    ext: str = "mp3",
) -> str:
    return "--".join([track_id, title, artists, mix, bpm, key, released, label, purchased]) + "." + ext


class TestSplitName:
    """Tests for stem/extension splitting."""

    def test_basic(self) -> None:
        assert split_name("a--b.AIFF") == ("a--b", "aiff")

    def test_uses_base_name(self) -> None:
        assert split_name("incoming/2025/a--b.mp3") == ("a--b", "mp3")

    def test_no_extension(self) -> None:
        assert split_name("a--b") == ("a--b", "")

    def test_last_dot_wins(self) -> None:
        assert split_name("Mr.-Oizo--x.flac") == ("Mr.-Oizo--x", "flac")


class TestParseBeatportFilename:
    """Tests for the full decoder."""

    def test_reference_filename(
        self, sample_filename: str, sample_track: ParsedTrackMetadata
    ) -> None:
        """The documented example decodes field by field."""
        result = parse_beatport_filename(sample_filename)

        assert isinstance(result, ParsedTrackMetadata)
        assert result == sample_track

    def test_reference_filename_uses_enharmonic_camelot(self, sample_filename: str) -> None:
        """Gbm is not on the wheel directly; it resolves through F#m."""
        result = parse_beatport_filename(sample_filename)
        assert result.musical_key == "Gbm"
        assert result.camelot_key == "11A"

    def test_object_path_prefix_ignored(self, sample_filename: str) -> None:
        result = parse_beatport_filename("beatport/2025/" + sample_filename)
        assert isinstance(result, ParsedTrackMetadata)
        assert result.track_id == 17696158

    def test_too_few_fields(self) -> None:
        """A stem with 7 tokens is a structural error citing the count."""
        result = parse_beatport_filename("1--a--b--c--d--e--f.mp3")

        assert isinstance(result, ParseError)
        assert result.error == "Expected ≥9 fields, got 7"
        assert "7" in result.error
        assert result.stem == "1--a--b--c--d--e--f"
        assert result.ext == "mp3"

    def test_no_delimiters(self) -> None:
        result = parse_beatport_filename("Some Song.mp3")
        assert isinstance(result, ParseError)
        assert result.error == "Expected ≥9 fields, got 1"

    def test_bad_bpm_is_not_fatal(self, caplog: pytest.LogCaptureFixture) -> None:
        """A non-numeric BPM is dropped with a warning; the rest decodes."""
        with caplog.at_level(logging.WARNING, logger="chunes"):
            result = parse_beatport_filename(_name(bpm="12a"))

        assert isinstance(result, ParsedTrackMetadata)
        assert result.bpm is None
        assert result.track_name == "Title"
        assert result.musical_key == "Am"
        assert result.camelot_key == "8A"
        assert result.release_date == "2024-01-05T00:00:00.000Z"
        assert result.purchase_date == "2025-02-03T00:00:00.000Z"
        assert any("bpm" in r.getMessage() and "12a" in r.getMessage() for r in caplog.records)

    def test_trailing_underscore_title_becomes_apostrophe(self) -> None:
        result = parse_beatport_filename(_name(title="Nothin_"))
        assert result.track_name == "Nothin'"

    def test_trailing_underscore_question_title(self) -> None:
        result = parse_beatport_filename(_name(title="Was-I-Loved_"))
        assert result.track_name == "Was I Loved'"
        result = parse_beatport_filename(_name(title="Where-Are-You-Now_"))
        assert result.track_name == "Where Are You Now?"

    def test_mix_name_never_gets_question_mark(self) -> None:
        result = parse_beatport_filename(_name(mix="Who-Knows_"))
        assert result.mix_name == "Who Knows'"

    def test_word_final_underscore_in_title(self) -> None:
        result = parse_beatport_filename(_name(title="Let-Em_-Know"))
        assert result.track_name == "Let Em' Know"

    def test_label_noise_before_purchase_date(self) -> None:
        """Extra dashes between label and purchase date are tolerated."""
        name = _name(label="Steel-City-Dance-Discs-", purchased="2025-10-02")
        result = parse_beatport_filename(name)

        assert isinstance(result, ParsedTrackMetadata)
        assert result.label == "Steel City Dance Discs"
        assert result.purchase_date == "2025-10-02T00:00:00.000Z"

    def test_extra_delimiters_in_mix_name(self) -> None:
        """Free-text fields can carry their own delimiter runs."""
        result = parse_beatport_filename(_name(mix="Extended--Mix--Remastered"))

        assert isinstance(result, ParsedTrackMetadata)
        assert result.artists == "Artist"
        assert result.mix_name == "Extended Mix Remastered"
        assert result.bpm == 124

    def test_empty_mix_name(self) -> None:
        result = parse_beatport_filename(_name(mix=""))
        assert result.mix_name == ""

    def test_unrecognized_key_is_kept(self) -> None:
        result = parse_beatport_filename(_name(key="Unknown-Key"))
        assert result.musical_key == "Unknown-Key"
        assert result.camelot_key is None

    def test_invalid_release_date(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="chunes"):
            result = parse_beatport_filename(_name(released="2024-13-01"))

        assert result.release_date is None
        assert result.purchase_date == "2025-02-03T00:00:00.000Z"
        assert any("release_date" in r.getMessage() for r in caplog.records)

    def test_non_numeric_track_id(self) -> None:
        result = parse_beatport_filename(_name(track_id="abc"))

        assert isinstance(result, ParsedTrackMetadata)
        assert math.isnan(result.track_id)
        assert result.has_valid_track_id is False
        assert result.to_dict()["track_id"] is None

    @pytest.mark.parametrize("track_id", ["+-5", "-+5", "++5", "9" * 5000])
    def test_malformed_track_id_does_not_raise(self, track_id: str) -> None:
        result = parse_beatport_filename(_name(track_id=track_id))

        assert isinstance(result, ParsedTrackMetadata)
        assert math.isnan(result.track_id)
        assert result.track_name == "Title"
        assert result.camelot_key == "8A"

    def test_uppercase_extension_lowered(self) -> None:
        result = parse_beatport_filename(_name(ext="WAV"))
        assert result.file_ext == "wav"

    def test_accented_text_is_composed(self) -> None:
        result = parse_beatport_filename(_name(artists="Ro\u0308yksopp"))
        assert result.artists == "R\u00f6yksopp"

    @pytest.mark.parametrize(
        "stem",
        [
            "--------",
            "------------------",
            "a--b--c--d--e--f--g--h--i",
            "_--_--_--_--_--_--_--_--_",
            "x--(--)--_--1_--♭--9999-99-99--__--0000-00-00",
            "--".join(["---"] * 12),
        ],
    )
    def test_never_raises_with_nine_or_more_fields(self, stem: str) -> None:
        """Any stem with at least nine tokens decodes to one of the two records."""
        result = parse_beatport_filename(stem + ".mp3")
        assert isinstance(result, (ParsedTrackMetadata, ParseError))


class TestFieldParsers:
    """Tests for the numeric field helpers."""

    @pytest.mark.parametrize("raw,expected", [("128", 128), ("0", 0), ("0174", 174)])
    def test_bpm_digits(self, raw: str, expected: int) -> None:
        assert parse_bpm(raw) == expected

    @pytest.mark.parametrize("raw", ["12a", "", "128.5", " 128", "-1", "１２８"])
    def test_bpm_rejected(self, raw: str) -> None:
        assert parse_bpm(raw) is None

    def test_track_id_numeric(self) -> None:
        assert parse_track_id("17696158") == 17696158

    def test_track_id_garbage(self) -> None:
        assert math.isnan(parse_track_id("17696158x"))
