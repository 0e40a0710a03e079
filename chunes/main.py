"""Core ingestion orchestration for chunes."""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from mutagen import MutagenError

from chunes.data import get_track_row, insert_track_row
from chunes.data.models import ParseError, TrackRow
from chunes.utils.beatport_filename import parse_beatport_filename
from chunes.utils.dates import utc_now_iso
from chunes.utils.file_metadata import supports_tags, write_file_metadata
from chunes.utils.file_transport import LocalTransport, WebdavTransport, is_audio_file
from chunes.utils.logging import format_fields, get_logger


class IngestStatus(Enum):
    """Outcome of ingesting one object."""

    INSERTED = "inserted"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class IngestResult:
    status: IngestStatus
    object_name: str
    reason: Optional[str] = None
    row: Optional[TrackRow] = None


def make_insert_id(source: str, object_name: str) -> str:
    """Stable id for an object: re-ingesting the same path is a no-op.

    The generation is stored but not part of the id, since writing tags
    back to a file gives it a new generation.
    """
    return f"{source.rstrip('/')}/{object_name}"


def _cleanup(file_transport: Union[LocalTransport, WebdavTransport], local_path: str) -> None:
    if file_transport.cleanup_local_files:
        try:
            os.remove(local_path)
        except OSError as e:
            get_logger().debug(f"Could not remove {local_path}: {e}")


def _write_tags(
    row: TrackRow,
    base_path: str,
    file_transport: Union[LocalTransport, WebdavTransport],
) -> None:
    """Write the decoded tags into the audio file and put it back."""
    logger = get_logger()
    if not supports_tags(row.track.file_ext):
        logger.debug(f"  No tag writer for .{row.track.file_ext}, leaving file untouched")
        return

    logger.debug("  Loading file locally")
    local_path = file_transport.load_file(row.object_name, base_path)
    try:
        logger.debug("  Writing file metadata")
        if write_file_metadata(local_path, row.track):
            logger.debug("  Saving file")
            file_transport.save_file(local_path, base_path, row.object_name)
    finally:
        _cleanup(file_transport, local_path)


def ingest_object(
    object_name: str,
    source: str,
    size: Optional[int] = None,
    content_type: Optional[str] = None,
    generation: Optional[str] = None,
    insert_id: Optional[str] = None,
    skip_ingested: bool = True,
    dry_run: bool = False,
    write_tags: bool = False,
    base_path: Optional[str] = None,
    file_transport: Optional[Union[LocalTransport, WebdavTransport]] = None,
) -> IngestResult:
    """Decode one object's filename and store it with its transport metadata.

    Args:
        object_name: Path of the object relative to its source.
        source: Container the object lives in (directory or WebDAV host).
        size: Object size in bytes, if known.
        content_type: Object MIME type, if known.
        generation: Version token of the object, if known.
        insert_id: Row id; derived from source and name if omitted.
        skip_ingested: Skip objects whose insert id is already stored.
        dry_run: Decode and report without writing anything.
        write_tags: Also write the decoded metadata into the file's tags.
        base_path: Base path the object name is relative to (for tagging).
        file_transport: Transport used to load and save the file (for tagging).

    Returns:
        IngestResult describing what happened.
    """
    logger = get_logger()

    if not object_name:
        logger.warning("Ignoring object without a name")
        return IngestResult(IngestStatus.SKIPPED, object_name, reason="missing-name")

    if not is_audio_file(object_name):
        logger.info("Skipping non-audio object" + format_fields(object_name=object_name))
        return IngestResult(IngestStatus.SKIPPED, object_name, reason="non-audio")

    logger.info(f"Processing: {object_name}")
    parsed = parse_beatport_filename(object_name)
    if isinstance(parsed, ParseError):
        logger.warning(
            "Filename parse error" + format_fields(object_name=object_name, error=parsed.error)
        )
        return IngestResult(IngestStatus.SKIPPED, object_name, reason=parsed.error)

    insert_id = insert_id or make_insert_id(source, object_name)
    if skip_ingested and get_track_row(insert_id) is not None:
        logger.info("  Skipping: already ingested")
        return IngestResult(IngestStatus.SKIPPED, object_name, reason="already-ingested")

    row = TrackRow.from_parsed(
        parsed,
        insert_id=insert_id,
        source=source,
        object_name=object_name,
        ingested_at=utc_now_iso(),
        size_bytes=size,
        content_type=content_type,
        generation=generation,
    )

    if dry_run:
        logger.info(f"  Would insert: {parsed.track_name} by {parsed.artists}")
        logger.info(f"    Mix: {parsed.mix_name}, Label: {parsed.label}")
        logger.info(
            f"    BPM: {parsed.bpm}, Key: {parsed.musical_key} ({parsed.camelot_key})"
        )
        return IngestResult(IngestStatus.SKIPPED, object_name, reason="dry-run", row=row)

    if write_tags:
        if base_path is None or file_transport is None:
            raise ValueError("write_tags needs base_path and file_transport")
        try:
            _write_tags(row, base_path, file_transport)
        except MutagenError as e:
            logger.error("Tag write failed" + format_fields(object_name=object_name, error=e))
            return IngestResult(IngestStatus.FAILED, object_name, reason="tag-write-failed")

    try:
        logger.debug("  Saving to track store")
        inserted = insert_track_row(row)
    except OSError as e:
        logger.error("Store write failed" + format_fields(object_name=object_name, error=e))
        return IngestResult(IngestStatus.FAILED, object_name, reason="store-write-failed")

    if not inserted:
        logger.info("  Skipping: already ingested")
        return IngestResult(IngestStatus.SKIPPED, object_name, reason="already-ingested")

    logger.info(f"  Done: {parsed.track_name} by {parsed.artists}")
    return IngestResult(IngestStatus.INSERTED, object_name, row=row)
