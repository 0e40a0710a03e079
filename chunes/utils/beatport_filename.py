"""Decoding of Beatport download filenames.

Beatport names purchased downloads after the track::

    {track_id}--{track_name}--{artists}--{mix_name}--{bpm}--{key}--{release_date}--{label}--{purchase_date}.{ext}

e.g. ``17696158--Ain_t-No-Other-Man--Murphy_s-Law-(UK)--Rework---Extended-Mix--128--Gb-Minor--2023-05-19--RCA_Legacy--2025-10-18.aiff``
decodes to track "Ain't No Other Man" by "Murphy's Law (UK)", mix
"Rework Extended Mix", 128 BPM, key Gbm (Camelot 11A), label "RCA Legacy".

Free-text fields may contain extra ``--`` runs of their own, so the five
fixed fields on the right and the id on the left are taken off the ends
first and whatever is left in the middle is the title, artists and mix.

Decoding never raises for a malformed name: it returns a ParseError when the
fields cannot be located and logs a warning for any single field that does
not decode (that field is then None).
"""

import math
import posixpath
import re
from typing import Optional, Union

from chunes.data.models import ParseError, ParsedTrackMetadata, ParseResult, coerce_number
from chunes.utils.constants import FIELD_DELIMITER, MIN_FIELD_COUNT
from chunes.utils.dates import to_iso_date_loose
from chunes.utils.logging import format_fields, get_logger
from chunes.utils.musical_key import camelot_for_key, normalize_key
from chunes.utils.text import (
    clean_extra_dashes,
    normalize_artists,
    normalize_label,
    normalize_mix_name,
    normalize_title,
)

_BPM = re.compile(r"[0-9]+")


def split_name(object_name: str) -> tuple[str, str]:
    """Split an object path into (stem, extension).

    The extension is lower-cased and has no leading dot; it is empty when the
    base name has no extension.
    """
    base = posixpath.basename(object_name)
    ext = posixpath.splitext(base)[1][1:].lower()
    stem = base[: len(base) - (len(ext) + 1)] if ext else base
    return stem, ext


def parse_bpm(raw: str) -> Optional[int]:
    """Return the BPM if the token is all ASCII digits, otherwise None."""
    if _BPM.fullmatch(raw):
        return int(raw)
    get_logger().warning("bpm: not a whole number" + format_fields(field="bpm", raw=repr(raw)))
    return None


def parse_track_id(raw: str) -> Union[int, float]:
    track_id = coerce_number(raw)
    if isinstance(track_id, float) and math.isnan(track_id):
        get_logger().warning(
            "track_id: not numeric" + format_fields(field="track_id", raw=repr(raw))
        )
    return track_id


def parse_beatport_filename(object_name: str) -> ParseResult:
    """Decode a Beatport download filename into track metadata.

    Args:
        object_name: File name or object path; only the base name is used.

    Returns:
        ParsedTrackMetadata on success, ParseError if the name does not have
        the expected fields.
    """
    stem, ext = split_name(object_name)

    parts = stem.split(FIELD_DELIMITER)
    if len(parts) < MIN_FIELD_COUNT:
        return ParseError(
            error=f"Expected ≥{MIN_FIELD_COUNT} fields, got {len(parts)}",
            stem=stem,
            ext=ext,
        )

    # Fixed fields come off the right end first, then the id off the left
    purchase_date_raw = parts.pop()
    label_raw = parts.pop()
    release_date_raw = parts.pop()
    key_raw = parts.pop()
    bpm_raw = parts.pop()
    track_id_raw = parts.pop(0)

    middle = FIELD_DELIMITER.join(parts).split(FIELD_DELIMITER)
    if len(middle) < 3:
        return ParseError(error="Unable to reconstruct middle fields", stem=stem, ext=ext)

    track_name_raw = clean_extra_dashes("track_name", middle[0])
    artists_raw = middle[1]
    mix_name_raw = clean_extra_dashes("mix_name", FIELD_DELIMITER.join(middle[2:]))
    label_raw = clean_extra_dashes("label", label_raw)

    musical_key = normalize_key(key_raw)

    return ParsedTrackMetadata(
        track_id=parse_track_id(track_id_raw),
        track_name=normalize_title(track_name_raw),
        artists=normalize_artists(artists_raw),
        mix_name=normalize_mix_name(mix_name_raw),
        bpm=parse_bpm(bpm_raw),
        musical_key=musical_key,
        camelot_key=camelot_for_key(musical_key),
        label=normalize_label(label_raw),
        release_date=to_iso_date_loose(release_date_raw, "release_date"),
        purchase_date=to_iso_date_loose(purchase_date_raw, "purchase_date"),
        file_ext=ext,
    )
