"""Date extraction and ISO-8601 rendering."""

import re
from datetime import datetime, timezone
from typing import Optional

from chunes.utils.logging import format_fields, get_logger

_DATE = re.compile(r"([0-9]{4})-([0-9]{2})-([0-9]{2})")


def to_iso_instant(moment: datetime) -> str:
    """Render a datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    return to_iso_instant(datetime.now(timezone.utc))


def _from_parts(year: str, month: str, day: str) -> Optional[str]:
    try:
        moment = datetime(int(year), int(month), int(day), tzinfo=timezone.utc)
    except ValueError:
        return None
    return to_iso_instant(moment)


def to_iso_date(value: str) -> Optional[str]:
    """Convert an exact ``YYYY-MM-DD`` string to a UTC-midnight instant.

    Returns None if the string has anything else in it or is not a real
    calendar date.
    """
    match = _DATE.fullmatch(value)
    if not match:
        return None
    return _from_parts(*match.groups())


def to_iso_date_loose(value: Optional[str], field_name: str) -> Optional[str]:
    """Find the first ``YYYY-MM-DD`` in a field and convert it.

    Tolerates stray characters around the date, which happens when a
    neighbouring field ends in a dash and the delimiter split leaves it
    attached (``-2025-10-02``, ``Steel-City-Dance-Discs---2025-10-02``).

    Args:
        value: Raw field text.
        field_name: Field name used in the warning.

    Returns:
        ISO-8601 instant, or None (with a warning) if no valid date is found.
    """
    logger = get_logger()
    match = _DATE.search(value or "")
    if not match:
        logger.warning(
            f"{field_name}: could not find YYYY-MM-DD"
            + format_fields(field=field_name, raw=repr(value))
        )
        return None

    iso = _from_parts(*match.groups())
    if iso is None:
        logger.warning(
            f"{field_name}: invalid date found"
            + format_fields(field=field_name, raw=repr(value))
        )
    return iso
