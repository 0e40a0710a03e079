"""Snapshot export of the track store.

A snapshot is the whole store, oldest ingestion first, as one gzip-compressed
JSON array. Next to it a small manifest at ``manifest/latest.json`` tells
readers which snapshot is current and how to verify it.
"""

import base64
import gzip
import hashlib
import json
import os
from datetime import datetime, timezone
from typing import Any, Optional, Union

from chunes.data import get_track_rows
from chunes.utils.constants import MANIFEST_PATH, SNAPSHOT_BASENAME, SNAPSHOT_SCHEMA_VERSION
from chunes.utils.dates import to_iso_instant
from chunes.utils.file_transport import LocalTransport, WebdavTransport
from chunes.utils.logging import format_fields, get_logger


def snapshot_name(prefix: str, now: datetime) -> str:
    """Object name for a snapshot, e.g. ``snapshots/chunes-20251018-093000.json.gz``."""
    return f"{prefix}{SNAPSHOT_BASENAME}-{now.strftime('%Y%m%d-%H%M%S')}.json.gz"


def _write_snapshot(path: str, records: list[dict[str, Any]]) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with gzip.open(path, "wt", encoding="utf-8") as f:
        f.write("[")
        for i, record in enumerate(records):
            if i:
                f.write(",")
            f.write(json.dumps(record, ensure_ascii=False, allow_nan=False))
        f.write("]")


def _md5_base64(path: str) -> str:
    digest = hashlib.md5()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1 << 16), b""):
            digest.update(chunk)
    return base64.b64encode(digest.digest()).decode("ascii")


def build_manifest(
    file_name: str,
    row_count: int,
    size_bytes: int,
    md5_hash: str,
    public_url: Optional[str],
    now: datetime,
) -> dict[str, Any]:
    """Manifest describing the current snapshot."""
    url = f"{public_url.rstrip('/')}/{file_name}" if public_url else file_name
    stamp = to_iso_instant(now)
    return {
        "version": stamp,
        "schemaVersion": SNAPSHOT_SCHEMA_VERSION,
        "file": file_name,
        "url": url,
        "rowCount": row_count,
        "sizeCompressedBytes": size_bytes,
        "md5Hash": md5_hash,
        "updated": stamp,
    }


def export_snapshot(
    output_dir: str,
    prefix: str,
    public_url: Optional[str] = None,
    file_transport: Optional[Union[LocalTransport, WebdavTransport]] = None,
    remote_base_path: str = "/",
    now: Optional[datetime] = None,
) -> dict[str, Any]:
    """Export the track store as a compressed snapshot plus manifest.

    Both files are written under ``output_dir`` and then handed to the
    transport, which uploads them for WebDAV and leaves them in place locally.

    Args:
        output_dir: Local directory the snapshot and manifest are written to.
        prefix: Object name prefix for the snapshot (e.g. ``snapshots/``).
        public_url: Base URL readers fetch objects from, if any.
        file_transport: Transport to publish through; local if omitted.
        remote_base_path: Remote directory for WebDAV uploads.
        now: Export time, defaults to the current UTC time.

    Returns:
        The manifest that was written.

    Raises:
        OSError: If the snapshot or manifest cannot be written.
    """
    logger = get_logger()
    now = now or datetime.now(timezone.utc)
    file_transport = file_transport or LocalTransport()

    records = [row.to_record() for row in get_track_rows()]
    name = snapshot_name(prefix, now)
    snapshot_path = os.path.join(output_dir, *name.split("/"))

    logger.info("Writing snapshot" + format_fields(file=name, rows=len(records)))
    _write_snapshot(snapshot_path, records)

    manifest = build_manifest(
        file_name=name,
        row_count=len(records),
        size_bytes=os.path.getsize(snapshot_path),
        md5_hash=_md5_base64(snapshot_path),
        public_url=public_url,
        now=now,
    )

    manifest_path = os.path.join(output_dir, *MANIFEST_PATH.split("/"))
    os.makedirs(os.path.dirname(manifest_path), exist_ok=True)
    with open(manifest_path, "w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2)

    # Snapshot before manifest, so the manifest never points at a missing file
    file_transport.save_file(snapshot_path, remote_base_path, name)
    file_transport.save_file(manifest_path, remote_base_path, MANIFEST_PATH)

    logger.info(f"Export complete: {name} ({len(records)} rows)")
    return manifest
