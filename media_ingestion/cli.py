"""CLI entrypoint."""

from __future__ import annotations

import argparse
from dataclasses import replace
import uuid

from media_ingestion.config import AppConfig, load_config
from media_ingestion.heads.base import AttachmentRef
from media_ingestion.pipeline.orchestrator import build_manager
from media_ingestion.util.json import json_dumps_safe
from media_ingestion.util.logging import configure_logging


def _build_config(base: AppConfig, args: argparse.Namespace) -> AppConfig:
    return replace(
        base,
        db_url=args.db_url or base.db_url,
        storage_root=args.storage_root or base.storage_root,
        log_level=args.log_level or base.log_level,
    )


def main() -> None:
    parser = argparse.ArgumentParser(prog="media-ingest")
    subparsers = parser.add_subparsers(dest="command", required=True)

    process_parser = subparsers.add_parser("process", help="Process one attachment")
    process_parser.add_argument("url", help="Attachment URL or local path")
    process_parser.add_argument("--id", help="Attachment id (random when omitted)")
    process_parser.add_argument("--content-type", help="Declared content type, e.g. application/pdf")
    process_parser.add_argument("--name", help="Attachment file name")
    process_parser.add_argument("--size", type=int, help="Attachment size in bytes")

    video_parser = subparsers.add_parser("video", help="Process a hosted video URL")
    video_parser.add_argument("url", help="YouTube, Vimeo or direct MP4 URL")

    for sub in (process_parser, video_parser):
        sub.add_argument("--db-url", help="Database URL override")
        sub.add_argument("--storage-root", help="Storage root override")
        sub.add_argument("--log-level", help="Log level override")

    args = parser.parse_args()
    config = _build_config(load_config(), args)
    configure_logging(config.log_level, config.log_file)

    manager = build_manager(config)
    try:
        if args.command == "process":
            attachment = AttachmentRef(
                id=args.id or uuid.uuid4().hex,
                url=args.url,
                content_type=args.content_type,
                name=args.name,
                size_bytes=args.size,
            )
            record = manager.process(attachment)
        else:
            record = manager.process_video(args.url)
    finally:
        manager.close()
    print(json_dumps_safe(record, indent=2))


if __name__ == "__main__":
    main()
