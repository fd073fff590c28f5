"""Command line entry point: ``python -m markupguard [FILE]``."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .errors import MarkupParseError
from .policy import DEFAULT_POLICY, IMAGE_DATA_MEDIA_TYPES
from .sanitize import sanitize, strip_tags


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="markupguard", description="Sanitize untrusted HTML markup")
    parser.add_argument("file", nargs="?", help="Input file (default: read from stdin)")
    parser.add_argument("--strip-tags", action="store_true", help="Output plain text instead of markup")
    parser.add_argument(
        "--allow-data-images",
        action="store_true",
        help="Keep data: image URLs in src attributes",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every removal to stderr")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    policy = DEFAULT_POLICY
    if args.allow_data_images:
        policy = policy.with_overrides(allowed_data_media_types=IMAGE_DATA_MEDIA_TYPES)

    raw = Path(args.file).read_bytes() if args.file else sys.stdin.buffer.read()

    try:
        if args.strip_tags:
            out = strip_tags(raw, policy=policy)
        else:
            out = sanitize(raw, policy=policy)
    except MarkupParseError as exc:
        print(f"markupguard: {exc}", file=sys.stderr)
        return 1

    sys.stdout.write(out)
    if out and not out.endswith("\n"):
        sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
