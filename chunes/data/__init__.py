"""Data layer for the ingested track store.

Rows live in a single CSV file keyed by insert_id. Writes are serialized with
a file lock so two ingesters delivering the same object write it once.
"""

import csv
import os
from typing import Optional

from filelock import FileLock

from chunes.data.models import TRACK_FIELDS, TrackRow
from chunes.utils.config import get_or_create_tracks_file_path

# CSV field names
TRANSPORT_FIELDNAMES = [
    "insert_id",
    "source",
    "object_name",
    "size_bytes",
    "content_type",
    "generation",
]
TRACK_FIELDNAMES = TRANSPORT_FIELDNAMES + TRACK_FIELDS + ["ingested_at"]

LOCK_TIMEOUT = 30

# In-memory cache
CACHE: dict[str, list[TrackRow]] = {}


def _read_csv_rows(file_path: str) -> list[dict[str, str]]:
    """Read raw CSV rows from file."""
    if not os.path.exists(file_path):
        return []
    with open(file_path, mode="r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        return list(reader)


def _fill_missing_columns(row: dict[str, str]) -> dict[str, str]:
    """Default columns added after a store file was first written."""
    return {name: row.get(name) or "" for name in TRACK_FIELDNAMES}


def _read_track_rows(file_path: str, use_cache: bool = False) -> list[TrackRow]:
    """Read track rows from CSV file."""
    if use_cache and file_path in CACHE:
        return CACHE[file_path]

    rows = [_fill_missing_columns(row) for row in _read_csv_rows(file_path)]
    tracks = [TrackRow.from_csv_row(row) for row in rows]

    if use_cache:
        CACHE[file_path] = tracks

    return tracks


def _ensure_parent_dir(path: str) -> None:
    """Create parent directory if it doesn't exist."""
    parent = os.path.dirname(path)
    if parent and not os.path.exists(parent):
        os.makedirs(parent, exist_ok=True)


def _get_store_lock(file_path: str) -> FileLock:
    """Get file lock guarding read-modify-write of the store."""
    return FileLock(f"{file_path}.lock", timeout=LOCK_TIMEOUT)


def _write_csv(file_path: str, rows: list[dict[str, str]], fieldnames: list[str]) -> None:
    """Write rows to CSV file."""
    _ensure_parent_dir(file_path)
    with open(file_path, mode="w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
    # Invalidate cache - use del to properly remove the entry
    if file_path in CACHE:
        del CACHE[file_path]


def get_track_row(insert_id: str) -> Optional[TrackRow]:
    """Get a stored row by insert id.

    Served from the in-memory cache, so a scan reads the store once rather
    than once per object. Writes through insert_track_row invalidate it.
    """
    file_path = str(get_or_create_tracks_file_path())
    rows = _read_track_rows(file_path, use_cache=True)
    return next((r for r in rows if r.insert_id == insert_id), None)


def get_track_rows() -> list[TrackRow]:
    """Get all stored rows, oldest ingestion first."""
    file_path = str(get_or_create_tracks_file_path())
    rows = _read_track_rows(file_path)
    return sorted(rows, key=lambda r: r.ingested_at)


def insert_track_row(row: TrackRow) -> bool:
    """Append a row unless its insert id is already stored.

    Re-delivery of the same object event is a no-op, so the first write for
    an insert id wins.

    Returns:
        True if the row was written, False if the insert id already existed.

    Raises:
        OSError: If the store cannot be read or written.
        filelock.Timeout: If another writer holds the lock for too long.
    """
    file_path = str(get_or_create_tracks_file_path())
    _ensure_parent_dir(file_path)

    with _get_store_lock(file_path):
        existing = _read_track_rows(file_path)
        if any(r.insert_id == row.insert_id for r in existing):
            return False
        rows = [r.to_csv_row() for r in existing]
        rows.append(row.to_csv_row())
        _write_csv(file_path, rows, fieldnames=TRACK_FIELDNAMES)
    return True


def clear_cache() -> None:
    """Clear the in-memory cache. Useful for testing."""
    CACHE.clear()
