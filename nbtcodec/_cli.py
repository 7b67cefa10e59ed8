"""nbtcodec command-line interface.

Usage:
    python3 -m nbtcodec dump level.dat --compression gzip
    python3 -m nbtcodec dump level.dat --endian little --indent 2
    python3 -m nbtcodec convert in.dat out.dat --from-endian big --to-endian little \\
        --from-compression gzip --to-compression none
    python3 -m nbtcodec version
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from . import (
    Compression,
    Endian,
    NbtError,
    Policy,
    __version__,
    read_file,
    to_snbt,
    write_file,
)


def _endian(text: str) -> Endian:
    try:
        return Endian.parse(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _compression(text: str) -> Compression:
    try:
        return Compression.parse(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nbtcodec",
        description="nbtcodec — read, print and convert NBT files",
    )
    sub = parser.add_subparsers(dest="command")

    # ── dump ──
    dump_p = sub.add_parser("dump", help="Print a file as SNBT text")
    dump_p.add_argument("file", metavar="FILE")
    dump_p.add_argument("--endian", "-e", type=_endian, default=Endian.BIG,
                        help="big (Java, default) or little (Bedrock)")
    dump_p.add_argument("--compression", "-c", type=_compression,
                        default=Compression.NONE, help="none, gzip or zlib")
    dump_p.add_argument("--indent", type=int, default=None, metavar="N",
                        help="Pretty-print with N spaces per level")
    dump_p.add_argument("--max-depth", type=int, default=None, metavar="N",
                        help="Maximum List/Compound nesting to accept")

    # ── convert ──
    conv_p = sub.add_parser("convert", help="Re-encode a file")
    conv_p.add_argument("input", metavar="IN")
    conv_p.add_argument("output", metavar="OUT")
    conv_p.add_argument("--from-endian", type=_endian, default=Endian.BIG)
    conv_p.add_argument("--to-endian", type=_endian, default=None,
                        help="Defaults to --from-endian")
    conv_p.add_argument("--from-compression", type=_compression, default=Compression.NONE)
    conv_p.add_argument("--to-compression", type=_compression, default=None,
                        help="Defaults to --from-compression")
    conv_p.add_argument("--name", default=None,
                        help="Replace the root name")

    # ── version ──
    sub.add_parser("version", help="Print version and exit")

    return parser


def _policy(endian: Endian, max_depth: Optional[int] = None) -> Policy:
    if max_depth is None:
        return Policy(endian)
    return Policy(endian, max_depth=max_depth)


def _cmd_dump(args: argparse.Namespace) -> None:
    name, value = read_file(args.file, args.compression, _policy(args.endian, args.max_depth))
    print("{}: {}".format(name or '""', to_snbt(value, indent=args.indent)))


def _cmd_convert(args: argparse.Namespace) -> None:
    name, value = read_file(args.input, args.from_compression, _policy(args.from_endian))
    to_endian = args.to_endian or args.from_endian
    to_compression = args.to_compression or args.from_compression
    if args.name is not None:
        name = args.name
    write_file(args.output, name, value, to_compression, _policy(to_endian))


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "version":
        print(f"nbtcodec {__version__}")
        return

    try:
        if args.command == "dump":
            _cmd_dump(args)
        elif args.command == "convert":
            _cmd_convert(args)
    except NbtError as e:
        print(f"nbtcodec: error [{e.code}]: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
