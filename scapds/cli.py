#!/usr/bin/env python3
"""
scapds command line interface

Usage:
    scapds split ssg-rhel8-ds.xml --output-dir split/
    scapds split ssg-rhel8-ds.xml --datastream-id scap_org.open-scap_datastream_from_xccdf_ssg-rhel8-xccdf.xml
    scapds compose split/ssg-rhel8-xccdf.xml rebuilt-ds.xml
    scapds list ssg-rhel8-ds.xml

Exit status:
    0  success
    1  fatal error, nothing (or only part of the output) was produced
    2  split finished but some component-refs were skipped
"""

import argparse
import logging
import sys
from typing import List, Optional

from .composer import compose
from .config import get_settings
from .decomposer import decompose
from .exceptions import DatastreamError
from .locators import list_datastream_ids
from .utils.xml_utils import parse_document

logger = logging.getLogger("scapds")

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_PARTIAL = 2


def _split(args: argparse.Namespace) -> int:
    result = decompose(args.input, datastream_id=args.datastream_id, target_dir=args.output_dir)

    print(f"Datastream: {result.datastream_id or '(no id)'}")
    print(f"Files written: {result.file_count}")
    for path in result.written_files:
        print(f"  {path}")

    if result.errors:
        print(f"Skipped with errors: {result.error_count}")
        for error in result.errors:
            print(f"  [{error['error_code']}] {error['message']}")
        return EXIT_PARTIAL

    return EXIT_OK


def _compose(args: argparse.Namespace) -> int:
    result = compose(args.xccdf, args.output, datastream_id=args.datastream_id)

    print(f"Wrote {result.output_file}")
    print(f"Components embedded: {len(result.components)}")
    for component_id in result.components:
        print(f"  {component_id}")
    for warning in result.warnings:
        print(f"Warning: {warning}")

    return EXIT_OK


def _list(args: argparse.Namespace) -> int:
    document = parse_document(args.input)
    for datastream_id in list_datastream_ids(document):
        print(datastream_id if datastream_id is not None else "(no id)")
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scapds",
        description="Split SCAP source data-streams into component files and compose them back",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    split_parser = subparsers.add_parser("split", help="Dump the components of a data-stream into files")
    split_parser.add_argument("input", help="Data-stream collection to split")
    split_parser.add_argument("--datastream-id", default=None, help="Data-stream to split (default: the first one)")
    split_parser.add_argument("--output-dir", default=".", help="Directory to write components to")
    split_parser.set_defaults(handler=_split)

    compose_parser = subparsers.add_parser("compose", help="Compose a data-stream from an XCCDF benchmark")
    compose_parser.add_argument("xccdf", help="XCCDF benchmark file")
    compose_parser.add_argument("output", help="Data-stream collection to write")
    compose_parser.add_argument("--datastream-id", default=None, help="Id for the composed data-stream")
    compose_parser.set_defaults(handler=_compose)

    list_parser = subparsers.add_parser("list", help="List the data-streams of a collection")
    list_parser.add_argument("input", help="Data-stream collection")
    list_parser.set_defaults(handler=_list)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format=settings.log_format,
    )

    try:
        return args.handler(args)
    except DatastreamError as e:
        logger.error("[%s] %s", e.error_code, e.message)
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
