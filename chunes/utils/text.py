"""Free-text cleanup for fields decoded from Beatport filenames.

Beatport slugs a title by turning spaces into dashes and apostrophes (and,
for some titles, question marks) into underscores. Undoing that is a staged
pipeline where the order of the stages matters:

1. Restore in-word apostrophes (``Can_t`` -> ``Can't``). This has to happen
   while dashes are still dashes, otherwise ``_`` next to a former space
   looks the same as ``_`` inside a word.
2. Unslug: dashes to spaces, whitespace and parenthesis cleanup, NFC.
3. Titles only: a trailing underscore run becomes ``?`` for titles that read
   as questions, ``'`` for everything else.
4. Word-final underscores (``Em_ Know``) become apostrophes.
"""

import re
import unicodedata

from chunes.utils.constants import QUESTION_LEAD_WORDS
from chunes.utils.logging import format_fields, get_logger

_IN_WORD_UNDERSCORE = re.compile(r"(?<=[A-Za-z0-9])_(?=[A-Za-z0-9])")
_LABEL_SEPARATOR_UNDERSCORE = re.compile(r"(?<=[A-Za-z0-9])_(?=[A-Z])")
_WORD_FINAL_UNDERSCORE = re.compile(r"_(?=\s|\Z|[)\],.;:!?])")
_TRAILING_UNDERSCORES = re.compile(r"_+\Z")
_MULTI_DASH = re.compile(r"-{2,}")
_EDGE_DASHES = re.compile(r"\A-+|-+\Z")
_MULTI_SPACE = re.compile(r"\s{2,}")
_SPACE_BEFORE_CLOSE = re.compile(r"\s+\)")
_SPACE_AFTER_OPEN = re.compile(r"\(\s+")
_QUESTION_LEAD = re.compile(
    r"\A(?:" + "|".join(QUESTION_LEAD_WORDS) + r")\b", re.IGNORECASE
)


def clean_extra_dashes(field_name: str, value: str) -> str:
    """Collapse dash runs left behind by doubled delimiters.

    ``Rework---Extended-Mix`` becomes ``Rework-Extended-Mix`` so the later
    dash-to-space step yields single spaces. Logs a warning when the value
    was changed.

    Args:
        field_name: Field name used in the warning.
        value: Raw field text.

    Returns:
        The sanitized text.
    """
    cleaned = _MULTI_DASH.sub("-", value)
    cleaned = _EDGE_DASHES.sub("", cleaned)
    cleaned = _MULTI_SPACE.sub(" ", cleaned).strip()

    if cleaned != value:
        get_logger().warning(
            f"Sanitized {field_name}"
            + format_fields(field=field_name, before=repr(value), after=repr(cleaned))
        )
    return cleaned


def restore_apostrophes(text: str) -> str:
    """Turn an underscore between two letters or digits into an apostrophe."""
    return _IN_WORD_UNDERSCORE.sub("'", text)


def restore_word_final_underscores(text: str) -> str:
    """Turn an underscore that ends a word into an apostrophe.

    Covers contractions in the middle of a phrase, e.g. ``Let Em_ Know`` and
    ``California Dreamin_, Pt. 2``.
    """
    return _WORD_FINAL_UNDERSCORE.sub("'", text)


def unslug(text: str) -> str:
    """Rebuild readable text from a slugged filename field."""
    result = restore_apostrophes(text)
    result = result.replace("-", " ")
    result = _MULTI_SPACE.sub(" ", result)
    result = _SPACE_BEFORE_CLOSE.sub(")", result)
    result = _SPACE_AFTER_OPEN.sub("(", result)
    return unicodedata.normalize("NFC", result.strip())


def looks_like_a_question(text: str) -> bool:
    return _QUESTION_LEAD.match(text.strip()) is not None


def fix_trailing_question_mark_or_apostrophe(text: str) -> str:
    """Resolve a trailing underscore run to ``?`` or ``'``."""
    trimmed = text.strip()
    if not _TRAILING_UNDERSCORES.search(trimmed):
        return trimmed
    replacement = "?" if looks_like_a_question(trimmed) else "'"
    return _TRAILING_UNDERSCORES.sub(replacement, trimmed)


def normalize_title(raw: str) -> str:
    """Normalize a track title (all four stages)."""
    title = fix_trailing_question_mark_or_apostrophe(unslug(raw))
    return restore_word_final_underscores(title)


def normalize_mix_name(raw: str) -> str:
    # No question heuristic for mix names, only word-final apostrophes
    return restore_word_final_underscores(unslug(raw))


def normalize_artists(raw: str) -> str:
    """Normalize artists text (apostrophes and unslugging only)."""
    return unslug(raw)


def normalize_label(raw: str) -> str:
    """Normalize a label name.

    Labels use an underscore in place of a separator as well as for an
    apostrophe: before a capital it is a space (``RCA_Legacy`` -> ``RCA Legacy``),
    otherwise an apostrophe as in titles (``Murphy_s`` -> ``Murphy's``).
    """
    return unslug(_LABEL_SEPARATOR_UNDERSCORE.sub(" ", raw))
