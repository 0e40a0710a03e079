"""Writing decoded track metadata into audio file tags using mutagen."""

from typing import Callable, Optional

from mutagen import MutagenError
from mutagen.aiff import AIFF
from mutagen.flac import FLAC
from mutagen.id3 import COMM, ID3, TBPM, TDRC, TIT2, TKEY, TPE1, TPUB, ID3NoHeaderError
from mutagen.mp4 import MP4, MP4FreeForm, MP4Tags
from mutagen.oggopus import OggOpus
from mutagen.oggvorbis import OggVorbis
from mutagen.wave import WAVE

from chunes.data.models import ParsedTrackMetadata
from chunes.utils.constants import TAG_COMMENT_DESC
from chunes.utils.logging import get_logger

_ITUNES_FREEFORM = "----:com.apple.iTunes:"


def display_title(meta: ParsedTrackMetadata) -> str:
    """Title as DJ software shows it, with the mix in parentheses."""
    if meta.mix_name:
        return f"{meta.track_name} ({meta.mix_name})"
    return meta.track_name


def _release_day(meta: ParsedTrackMetadata) -> Optional[str]:
    return meta.release_date[:10] if meta.release_date else None


def _comment(meta: ParsedTrackMetadata) -> Optional[str]:
    return f"Camelot {meta.camelot_key}" if meta.camelot_key else None


def _id3_frames(meta: ParsedTrackMetadata) -> list:
    """Build the ID3v2.4 frames for a track."""
    frames = [
        TIT2(encoding=3, text=display_title(meta)),
        TPE1(encoding=3, text=meta.artists),
        TPUB(encoding=3, text=meta.label),
    ]
    if meta.bpm is not None:
        frames.append(TBPM(encoding=3, text=str(meta.bpm)))
    if meta.musical_key:
        frames.append(TKEY(encoding=3, text=meta.musical_key))
    if _release_day(meta):
        frames.append(TDRC(encoding=3, text=_release_day(meta)))
    if _comment(meta):
        frames.append(COMM(encoding=3, lang="eng", desc=TAG_COMMENT_DESC, text=_comment(meta)))
    return frames


def _apply_id3(tags: ID3, meta: ParsedTrackMetadata) -> None:
    # add() replaces any frame with the same hash key
    for frame in _id3_frames(meta):
        tags.add(frame)


def _vorbis_fields(meta: ParsedTrackMetadata) -> dict[str, str]:
    """Vorbis comment fields for FLAC and Ogg files."""
    values = {
        "title": display_title(meta),
        "artist": meta.artists,
        "organization": meta.label,
        "bpm": str(meta.bpm) if meta.bpm is not None else None,
        "initialkey": meta.musical_key,
        "date": _release_day(meta),
        "comment": _comment(meta),
    }
    return {key: value for key, value in values.items() if value}


def _write_mp3(path: str, meta: ParsedTrackMetadata) -> None:
    """Write metadata to MP3 file."""
    try:
        tags = ID3(path)
    except ID3NoHeaderError:
        tags = ID3()
    _apply_id3(tags, meta)
    tags.save(path)


def _write_id3_container(audio_cls: Callable) -> Callable[[str, ParsedTrackMetadata], None]:
    """Writer for formats that carry an ID3 chunk (AIFF, WAVE)."""

    def write(path: str, meta: ParsedTrackMetadata) -> None:
        audio = audio_cls(path)
        if audio.tags is None:
            audio.add_tags()
        _apply_id3(audio.tags, meta)
        audio.save()

    return write


def _write_flac(path: str, meta: ParsedTrackMetadata) -> None:
    """Write metadata to FLAC file."""
    audio = FLAC(path)
    for key, value in _vorbis_fields(meta).items():
        audio[key] = value
    audio.save()


def _write_ogg(audio_cls: Callable) -> Callable[[str, ParsedTrackMetadata], None]:
    def write(path: str, meta: ParsedTrackMetadata) -> None:
        audio = audio_cls(path)
        for key, value in _vorbis_fields(meta).items():
            audio.tags[key] = value
        audio.save()

    return write


def _write_mp4(path: str, meta: ParsedTrackMetadata) -> None:
    """Write metadata to MP4/M4A file."""
    audio = MP4(path)
    tags = audio.tags or MP4Tags()
    tags["\xa9nam"] = display_title(meta)
    tags["\xa9ART"] = meta.artists
    tags[_ITUNES_FREEFORM + "LABEL"] = [MP4FreeForm(meta.label.encode("utf-8"))]
    if meta.bpm is not None:
        tags["tmpo"] = [meta.bpm]
    if meta.musical_key:
        tags[_ITUNES_FREEFORM + "initialkey"] = [MP4FreeForm(meta.musical_key.encode("utf-8"))]
    if _release_day(meta):
        tags["\xa9day"] = _release_day(meta)
    if _comment(meta):
        tags["\xa9cmt"] = _comment(meta)
    audio.tags = tags
    audio.save()


_WRITERS: dict[str, Callable[[str, ParsedTrackMetadata], None]] = {
    "mp3": _write_mp3,
    "aiff": _write_id3_container(AIFF),
    "aif": _write_id3_container(AIFF),
    "wav": _write_id3_container(WAVE),
    "flac": _write_flac,
    "m4a": _write_mp4,
    "mp4": _write_mp4,
    "opus": _write_ogg(OggOpus),
    "ogg": _write_ogg(OggVorbis),
}


def supports_tags(file_ext: str) -> bool:
    return file_ext.lower() in _WRITERS


def write_file_metadata(path: str, meta: ParsedTrackMetadata) -> bool:
    """Write decoded metadata to an audio file.

    Supports MP3, AIFF, WAV, FLAC, MP4/M4A, Opus and Ogg Vorbis. Writes title
    (with mix), artists, label, BPM, key, release date and a Camelot comment.

    Args:
        path: Path to the audio file.
        meta: Decoded metadata to write.

    Returns:
        True if tags were written, False if the format is not supported.

    Raises:
        MutagenError: If writing fails.
    """
    logger = get_logger()
    writer = _WRITERS.get(meta.file_ext.lower())
    if writer is None:
        logger.debug(f"No tag writer for .{meta.file_ext}: {path}")
        return False

    try:
        writer(path, meta)
    except MutagenError as e:
        logger.error(f"Failed to write metadata to {path}: {e}")
        raise
    return True
