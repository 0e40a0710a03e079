"""CLI entry point for chunes."""

import argparse
import json
import os
import sys
from typing import Optional, Union

from chunes.main import IngestStatus, ingest_object
from chunes.utils.beatport_filename import parse_beatport_filename
from chunes.utils.config import (
    get_export_settings,
    get_or_create_config_dir,
    get_or_create_snapshot_dir,
    get_or_create_tracks_file_path,
    get_webdav_credentials,
    set_webdav_credentials,
)
from chunes.utils.exporter import export_snapshot
from chunes.utils.file_transport import FileTransport, LocalTransport, TransportType, WebdavTransport
from chunes.utils.logging import get_logger, setup_logging

__version__ = "0.1.0"


def validate_path(path: str) -> str:
    """Validate and normalize a directory path.

    Args:
        path: Path to validate.

    Returns:
        Absolute, normalized path.

    Raises:
        ValueError: If path is invalid.
    """
    path = os.path.abspath(path)
    if not os.path.exists(path):
        raise ValueError(f"Path does not exist: {path}")
    if not os.path.isdir(path):
        raise ValueError(f"Path is not a directory: {path}")
    # Resolve symlinks and check for path traversal
    real_path = os.path.realpath(path)
    return real_path


def _make_transport(args: argparse.Namespace) -> Union[LocalTransport, WebdavTransport]:
    transport_type = TransportType.WEBDAV if args.webdav else TransportType.LOCAL
    return FileTransport(
        transport_type,
        webdav_host=args.webdav,
        webdav_username=args.webdav_user,
        webdav_password=args.webdav_password,
    )


def process_objects(
    path: str,
    source: str,
    file_transport: Union[LocalTransport, WebdavTransport],
    skip_ingested: bool,
    dry_run: bool,
    write_tags: bool,
) -> dict[IngestStatus, int]:
    """Ingest every audio object under a path.

    Args:
        path: Directory (local or remote) to scan.
        source: Source name recorded with each row.
        file_transport: Transport for listing and file operations.
        skip_ingested: Skip objects already in the store.
        dry_run: Show what would be done without making changes.
        write_tags: Write decoded metadata into the audio files.

    Returns:
        Count of objects per ingest status.
    """
    logger = get_logger()
    counts = {status: 0 for status in IngestStatus}

    logger.info(f"Scanning {path}...")
    objects = list(file_transport.list_objects(path))
    logger.info(f"Found {len(objects)} audio files")

    for i, obj in enumerate(objects, 1):
        logger.info(f"[{i}/{len(objects)}] {obj.name}")
        result = ingest_object(
            obj.name,
            source,
            size=obj.size,
            content_type=obj.content_type,
            generation=obj.generation,
            skip_ingested=skip_ingested,
            dry_run=dry_run,
            write_tags=write_tags,
            base_path=path,
            file_transport=file_transport,
        )
        counts[result.status] += 1

    return counts


def cmd_parse(args: argparse.Namespace) -> None:
    """Handle the 'parse' subcommand."""
    setup_logging(verbose=args.verbose, quiet=not args.verbose)
    results = [parse_beatport_filename(name).to_dict() for name in args.names]
    output = results[0] if len(results) == 1 else results
    print(json.dumps(output, indent=2, ensure_ascii=False))


def cmd_ingest(args: argparse.Namespace) -> None:
    """Handle the 'ingest' subcommand."""
    logger = setup_logging(verbose=args.verbose)

    try:
        if args.webdav:
            path = args.path or "/"
            file_transport = _make_transport(args)
        else:
            path = validate_path(args.path or ".")
            file_transport = LocalTransport()
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)

    source = args.source or args.webdav or path

    try:
        counts = process_objects(
            path,
            source,
            file_transport,
            skip_ingested=not args.no_skip_ingested,
            dry_run=args.dry_run,
            write_tags=args.write_tags,
        )
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        sys.exit(130)

    logger.info(
        f"Inserted {counts[IngestStatus.INSERTED]}, "
        f"skipped {counts[IngestStatus.SKIPPED]}, "
        f"failed {counts[IngestStatus.FAILED]}"
    )
    if counts[IngestStatus.FAILED]:
        sys.exit(1)


def cmd_backfill(args: argparse.Namespace) -> None:
    """Handle the 'backfill' subcommand (manual single-object ingest)."""
    setup_logging(verbose=args.verbose)
    result = ingest_object(
        args.name,
        args.source,
        size=args.size,
        content_type=args.content_type,
        generation=args.generation,
        insert_id=args.insert_id,
    )
    output = {"status": result.status.value, "object_name": result.object_name}
    if result.reason:
        output["reason"] = result.reason
    if result.row is not None:
        output["row"] = result.row.to_record()
    print(json.dumps(output, indent=2, ensure_ascii=False))
    if result.status is IngestStatus.FAILED:
        sys.exit(1)


def cmd_export(args: argparse.Namespace) -> None:
    """Handle the 'export' subcommand."""
    logger = setup_logging(verbose=args.verbose)
    prefix, public_url = get_export_settings()
    output_dir = args.out or str(get_or_create_snapshot_dir())

    try:
        file_transport = _make_transport(args)
        manifest = export_snapshot(
            output_dir,
            prefix,
            public_url=args.public_url or public_url,
            file_transport=file_transport,
            remote_base_path=args.remote_path,
        )
    except (ValueError, OSError) as e:
        logger.error(f"Export failed: {e}")
        sys.exit(1)

    print(json.dumps(manifest, indent=2))


def cmd_config_show(args: argparse.Namespace) -> None:
    """Handle the 'config show' subcommand."""
    setup_logging(verbose=False)
    prefix, public_url = get_export_settings()
    print(f"Config directory: {get_or_create_config_dir()}")
    print(f"Track store: {get_or_create_tracks_file_path()}")
    print(f"Snapshot prefix: {prefix or '(none)'}")
    print(f"Public URL: {public_url or '(not configured)'}")
    webdav_user, webdav_pass = get_webdav_credentials()
    print(f"WebDAV username: {webdav_user or '(not configured)'}")
    print(f"WebDAV password: {'***' if webdav_pass else '(not configured)'}")


def cmd_config_set_webdav(args: argparse.Namespace) -> None:
    """Handle the 'config set-webdav' subcommand."""
    logger = setup_logging(verbose=False)
    set_webdav_credentials(args.user, args.password)
    logger.info("WebDAV credentials saved")


def _add_webdav_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--webdav",
        metavar="HOST",
        help="WebDAV host URL to use instead of local filesystem",
    )
    parser.add_argument(
        "--webdav-user",
        metavar="USER",
        help="WebDAV username (or set WEBDAV_USERNAME env var)",
    )
    parser.add_argument(
        "--webdav-password",
        metavar="PASS",
        help="WebDAV password (or set WEBDAV_PASSWORD env var)",
    )


def _add_verbose_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-V", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chunes",
        description="Decode Beatport download filenames into a track catalogue",
    )
    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # parse
    parse_parser = subparsers.add_parser(
        "parse",
        help="Decode filenames and print the result as JSON",
    )
    parse_parser.add_argument("names", nargs="+", metavar="NAME", help="Filename or object path")
    _add_verbose_argument(parse_parser)
    parse_parser.set_defaults(func=cmd_parse)

    # ingest
    ingest_parser = subparsers.add_parser(
        "ingest",
        help="Scan a directory and store decoded tracks",
    )
    ingest_parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Directory to scan (default: current directory, or / for WebDAV)",
    )
    _add_webdav_arguments(ingest_parser)
    ingest_parser.add_argument(
        "--source",
        metavar="NAME",
        help="Source name stored with each row (default: the scanned path or host)",
    )
    ingest_parser.add_argument(
        "--write-tags",
        action="store_true",
        help="Write decoded metadata into the audio files",
    )
    ingest_parser.add_argument(
        "--no-skip-ingested",
        action="store_true",
        help="Decode files even if already in the store",
    )
    ingest_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without making changes",
    )
    _add_verbose_argument(ingest_parser)
    ingest_parser.set_defaults(func=cmd_ingest)

    # backfill
    backfill_parser = subparsers.add_parser(
        "backfill",
        help="Ingest a single object by name",
    )
    backfill_parser.add_argument("name", help="Object name or path")
    backfill_parser.add_argument("--source", default="manual", help="Source name (default: manual)")
    backfill_parser.add_argument("--size", type=int, help="Object size in bytes")
    backfill_parser.add_argument("--content-type", help="Object MIME type")
    backfill_parser.add_argument("--generation", help="Object version token")
    backfill_parser.add_argument("--insert-id", help="Row id (default: source/name)")
    _add_verbose_argument(backfill_parser)
    backfill_parser.set_defaults(func=cmd_backfill)

    # export
    export_parser = subparsers.add_parser(
        "export",
        help="Write a compressed snapshot of the store and its manifest",
    )
    export_parser.add_argument(
        "--out",
        metavar="DIR",
        help="Local output directory (default: snapshots/ in the config directory)",
    )
    export_parser.add_argument(
        "--public-url",
        metavar="URL",
        help="Base URL the snapshot is served from (or set CHUNES_PUBLIC_URL)",
    )
    export_parser.add_argument(
        "--remote-path",
        default="/",
        metavar="PATH",
        help="Remote directory to publish to when using WebDAV",
    )
    _add_webdav_arguments(export_parser)
    _add_verbose_argument(export_parser)
    export_parser.set_defaults(func=cmd_export)

    # Config command group
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_parser.set_defaults(func=cmd_config_show)
    config_subparsers = config_parser.add_subparsers(dest="config_command", help="Config commands")

    # config show
    config_show_parser = config_subparsers.add_parser("show", help="Show current configuration")
    config_show_parser.set_defaults(func=cmd_config_show)

    # config set-webdav
    config_webdav_parser = config_subparsers.add_parser(
        "set-webdav",
        help="Configure WebDAV credentials",
    )
    config_webdav_parser.add_argument("--user", help="WebDAV username")
    config_webdav_parser.add_argument("--password", help="WebDAV password")
    config_webdav_parser.set_defaults(func=cmd_config_set_webdav)

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Execute the command
    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
