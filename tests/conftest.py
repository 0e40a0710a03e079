"""Pytest fixtures for chunes tests."""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from chunes.data import clear_cache
from chunes.data.models import ParsedTrackMetadata, TrackRow

SAMPLE_FILENAME = (
    "17696158--Ain_t-No-Other-Man--Murphy_s-Law-(UK)--Rework---Extended-Mix"
    "--128--Gb-Minor--2023-05-19--RCA_Legacy--2025-10-18.aiff"
)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_filename() -> str:
    """A well-formed Beatport download filename."""
    return SAMPLE_FILENAME


@pytest.fixture
def sample_track() -> ParsedTrackMetadata:
    """The decoded form of SAMPLE_FILENAME."""
    return ParsedTrackMetadata(
        track_id=17696158,
        track_name="Ain't No Other Man",
        artists="Murphy's Law (UK)",
        mix_name="Rework Extended Mix",
        bpm=128,
        musical_key="Gbm",
        camelot_key="11A",
        label="RCA Legacy",
        release_date="2023-05-19T00:00:00.000Z",
        purchase_date="2025-10-18T00:00:00.000Z",
        file_ext="aiff",
    )


@pytest.fixture
def sample_row(sample_track: ParsedTrackMetadata) -> TrackRow:
    """A stored row for the sample track."""
    return TrackRow.from_parsed(
        sample_track,
        insert_id="music/" + SAMPLE_FILENAME,
        source="music",
        object_name=SAMPLE_FILENAME,
        ingested_at="2025-10-19T08:00:00.000Z",
        size_bytes=52428800,
        content_type="audio/x-aiff",
        generation="1760860800000000000",
    )


@pytest.fixture
def config_dir(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Create a temporary config directory and patch the config module."""
    config_path = temp_dir / "config"
    config_path.mkdir()

    import chunes.utils.config as config_module

    monkeypatch.setattr(config_module, "get_or_create_config_dir", lambda: config_path)
    for name in ("CHUNES_TRACKS_FILE", "CHUNES_EXPORT_PREFIX", "CHUNES_PUBLIC_URL"):
        monkeypatch.delenv(name, raising=False)
    clear_cache()

    yield config_path

    clear_cache()
