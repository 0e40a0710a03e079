"""Musical key normalization and Camelot wheel lookup."""

import re
from types import MappingProxyType
from typing import Mapping, Optional

# Camelot wheel by canonical key: A side is minor, B side is major
KEY_TO_CAMELOT: Mapping[str, str] = MappingProxyType({
    # Minor
    "Abm": "1A",
    "Ebm": "2A",
    "Bbm": "3A",
    "Fm": "4A",
    "Cm": "5A",
    "Gm": "6A",
    "Dm": "7A",
    "Am": "8A",
    "Em": "9A",
    "Bm": "10A",
    "F#m": "11A",
    "C#m": "12A",
    # Major
    "B": "1B",
    "F#": "2B",
    "Db": "3B",
    "Ab": "4B",
    "Eb": "5B",
    "Bb": "6B",
    "F": "7B",
    "C": "8B",
    "G": "9B",
    "D": "10B",
    "A": "11B",
    "E": "12B",
})

# Alternate spelling -> spelling used by KEY_TO_CAMELOT
ENHARMONIC_EQUIVALENTS: Mapping[str, str] = MappingProxyType({
    # Major
    "A#": "Bb",
    "D#": "Eb",
    "G#": "Ab",
    "C#": "Db",
    "Db": "C#",
    "Gb": "F#",
    "Cb": "B",
    "Fb": "E",
    "E#": "F",
    "B#": "C",
    # Minor
    "A#m": "Bbm",
    "D#m": "Ebm",
    "G#m": "Abm",
    "Dbm": "C#m",
    "Gbm": "F#m",
    "Cbm": "Bm",
    "Fbm": "Em",
    "E#m": "Fm",
    "B#m": "Cm",
})

_UNICODE_ACCIDENTALS = str.maketrans({"♭": "b", "♯": "#"})

# "Gb Minor", "g#-major", "F minor"
_LONG_FORM = re.compile(
    r"^([A-G])\s*(#|b)?\s*[-_'\s]*\s*(major|minor)$", re.IGNORECASE
)
# "Gbm", "F#", "A"
_COMPACT_FORM = re.compile(r"^([A-Ga-g])\s*(#|b)?\s*(m)?$")


def _canonical(letter: str, accidental: Optional[str], minor: bool) -> str:
    return f"{letter.upper()}{(accidental or '').lower()}{'m' if minor else ''}"


def normalize_key(raw: Optional[str]) -> Optional[str]:
    """Canonicalize a musical key token.

    Accepts ``Gb Minor``, ``Gb-Minor``, ``G♭ minor`` and ``Gbm`` alike and
    returns ``Gbm``. Text that is not recognized is returned trimmed but
    otherwise unchanged, so the original value stays visible downstream.

    Args:
        raw: Key token from the filename.

    Returns:
        Canonical key, the trimmed input if unrecognized, or None if empty.
    """
    if not raw:
        return None
    text = raw.replace("_", "'").strip().translate(_UNICODE_ACCIDENTALS)

    match = _LONG_FORM.match(text)
    if match:
        letter, accidental, mode = match.groups()
        return _canonical(letter, accidental, mode.lower() == "minor")

    match = _COMPACT_FORM.match(text)
    if match:
        letter, accidental, minor = match.groups()
        return _canonical(letter, accidental, bool(minor))

    return text


def camelot_for_key(key: Optional[str]) -> Optional[str]:
    """Look up the Camelot code for a canonical key.

    Falls back to the enharmonic spelling once (``Gbm`` -> ``F#m`` -> ``11A``).
    Returns None when neither spelling is on the wheel.
    """
    if not key:
        return None
    if key in KEY_TO_CAMELOT:
        return KEY_TO_CAMELOT[key]
    alternate = ENHARMONIC_EQUIVALENTS.get(key)
    if alternate is None:
        return None
    return KEY_TO_CAMELOT.get(alternate)
