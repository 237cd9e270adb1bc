# SPDX-License-Identifier: GPL-3.0-or-later OR LicenseRef-Commercial

from __future__ import annotations

import argparse
import logging
import sys
from concurrent.futures import Future

from rexamine.cursor import DEFAULT_BUFFER_SIZE, StreamRegexError
from rexamine.engine import DEFAULT_PATTERN
from rexamine.reader import RegexReader
from rexamine.source import FileSource, StreamSource, resolve_path
from rexamine.writer import RegexWriter


def scan_reader(args: argparse.Namespace, deliver) -> None:
    if args.uri == "-":
        RegexReader(StreamSource(sys.stdin.buffer), args.regex, args.buffer_size).find_all_matches_func(deliver)
        return
    with FileSource(args.uri) as source:
        RegexReader(source, args.regex, args.buffer_size).find_all_matches_func(deliver)


def scan_writer(args: argparse.Namespace, deliver) -> None:
    writer = RegexWriter(args.regex, args.buffer_size)
    if args.uri == "-":
        _scan_while_copying(writer, writer.copy_from(sys.stdin.buffer), deliver)
        return
    with open(resolve_path(args.uri), "rb") as stream:
        _scan_while_copying(writer, writer.copy_from(stream), deliver)


def _scan_while_copying(writer: RegexWriter, copied: Future, deliver) -> None:
    try:
        writer.find_all_matches_func(deliver)
    except BaseException:
        # The copy task ends with BrokenPipeError once the scan stops reading.
        copied.exception()
        raise
    copied.result()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Print every regex match in a file without loading it into memory."
    )
    parser.add_argument("uri", help="Path or file:// URI to scan, or '-' for stdin.")
    parser.add_argument("--regex", default=DEFAULT_PATTERN, help="Regex to use for matching.")
    parser.add_argument(
        "--buffer-size",
        type=int,
        default=DEFAULT_BUFFER_SIZE,
        help=f"Size of each of the two window buffers (default: {DEFAULT_BUFFER_SIZE}).",
    )
    parser.add_argument(
        "--writer", action="store_true", help="Push the input through a pipe from a background task."
    )
    parser.add_argument("--count", action="store_true", help="Only print the number of matches.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    count = 0

    def deliver(match: str) -> None:
        nonlocal count
        count += 1
        if not args.count:
            print(match)

    scan = scan_writer if args.writer else scan_reader
    try:
        scan(args, deliver)
    except StreamRegexError as error:
        print(f"[error] {error}", file=sys.stderr)
        return 1
    except FileNotFoundError as error:
        print(f"[error] {error}", file=sys.stderr)
        return 1

    if args.count:
        print(count)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
