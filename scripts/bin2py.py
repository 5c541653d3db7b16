"""Build-time tool: turn a binary file into Python source holding its bytes.

Typical use, embedding the OAuth client secret into the package::

    python scripts/bin2py.py --init-only \
        --package gmail_downloader.core.credentials --var EMBEDDED_CREDENTIALS \
        -o src/gmail_downloader/_embedded_credentials.py credentials.json
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from gmail_downloader.codegen.embed import (
    ByteFormat,
    GeneratorOptions,
    generate,
    write_output,
)
from gmail_downloader.core.exceptions import GeneratorError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate Python source declaring the bytes of FILENAME"
    )
    parser.add_argument("filename", type=Path, help="Input binary file")
    parser.add_argument("--package", default="__main__", help="Target module name")
    parser.add_argument("--var", default="_", help="Variable name")
    parser.add_argument("--step", type=int, default=16, help="Number of bytes per line")
    parser.add_argument(
        "--format",
        type=ByteFormat,
        default=ByteFormat.HEXX,
        choices=list(ByteFormat),
        metavar="{" + ",".join(f.value for f in ByteFormat) + "}",
        help="Type of byte representation",
    )
    parser.add_argument(
        "--init-only",
        action="store_true",
        dest="init_only",
        help="No declaration of variable, initialization of an existing one only",
    )
    parser.add_argument("-o", "--output", type=Path, default=None, help="Output file name")
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    options = GeneratorOptions(
        package=args.package,
        var=args.var,
        step=args.step,
        format=args.format,
        init_only=args.init_only,
        output=args.output,
    )
    try:
        write_output(generate(args.filename, options), options.output)
    except GeneratorError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
