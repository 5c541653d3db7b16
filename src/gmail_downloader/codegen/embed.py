"""Render a binary file as Python source holding its bytes as a literal.

Used at build time to compile the OAuth client-secret document into the
package. Two layouts are supported:

* declaration: ``VAR = bytes([...])``, a standalone module;
* init-only: assigns into a variable that another module already declares::

      import gmail_downloader.core.credentials as _target

      _target.EMBEDDED_CREDENTIALS = bytes([
          0x7b, 0x22, ...
      ])
"""

from __future__ import annotations

import enum
import keyword
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from gmail_downloader.core.exceptions import GeneratorError

logger = logging.getLogger(__name__)

HEADER = "# Code generated by bin2py.py DO NOT EDIT."
INDENT = "    "


class ByteFormat(str, enum.Enum):
    """Representation of each byte in the generated literal."""

    HEXX = "hexx"  # 0x00, 0x01, 0x6b
    HEX = "hex"  # 0x0, 0x1, 0x6b
    DEC = "dec"  # 0, 1, 107
    SHEXX = "shexx"  # b"\x00\x01\x6b"
    SHEX = "shex"  # b'\x00\x01k'

    @property
    def is_string(self) -> bool:
        return self in (ByteFormat.SHEXX, ByteFormat.SHEX)


@dataclass(frozen=True)
class GeneratorOptions:
    """How to render the generated source."""

    package: str = "__main__"
    var: str = "_"
    step: int = 16
    format: ByteFormat = ByteFormat.HEXX
    init_only: bool = False
    output: Path | None = None


def _numbers(render: Callable[[int], str]) -> Callable[[bytes], str]:
    def line(chunk: bytes) -> str:
        return INDENT + ", ".join(render(b) for b in chunk) + ","

    return line


def _escaped_hex(chunk: bytes) -> str:
    return INDENT + 'b"' + "".join(f"\\x{b:02x}" for b in chunk) + '"'


def _native(chunk: bytes) -> str:
    return INDENT + repr(chunk)


_LINE_RENDERERS: dict[ByteFormat, Callable[[bytes], str]] = {
    ByteFormat.HEXX: _numbers(lambda b: f"0x{b:02x}"),
    ByteFormat.HEX: _numbers(lambda b: f"{b:#x}"),
    ByteFormat.DEC: _numbers(str),
    ByteFormat.SHEXX: _escaped_hex,
    ByteFormat.SHEX: _native,
}


def _validate(options: GeneratorOptions) -> None:
    if options.step <= 0:
        raise GeneratorError(f"Bytes per line must be positive, got {options.step}")
    if not _is_name(options.var):
        raise GeneratorError(f"Invalid variable name: {options.var!r}")
    if not all(_is_name(part) for part in options.package.split(".")):
        raise GeneratorError(f"Invalid module name: {options.package!r}")


def _is_name(value: str) -> bool:
    return value.isidentifier() and not keyword.iskeyword(value)


def generate_source(data: bytes, options: GeneratorOptions) -> str:
    """Render ``data`` as Python source according to ``options``.

    Executing the returned source binds ``options.var`` (or assigns it on
    the target module in init-only mode) to exactly ``data``.

    Raises:
        GeneratorError: If the options cannot produce valid source.
    """
    _validate(options)
    fmt = ByteFormat(options.format)
    render = _LINE_RENDERERS[fmt]
    # adjacent bytes literals concatenate; bytes() of nothing is b""
    opening, closing = ("bytes(", ")") if fmt.is_string else ("bytes([", "])")

    lines = [HEADER]
    if options.init_only:
        lines.append(f"import {options.package} as _target")
        lines.append("")
        target = f"_target.{options.var}"
    else:
        lines.append(f"# Module: {options.package}")
        lines.append("")
        target = options.var

    lines.append(f"{target} = {opening}")
    for start in range(0, len(data), options.step):
        lines.append(render(data[start : start + options.step]))
    lines.append(closing)
    return "\n".join(lines) + "\n"


def read_input(input_path: Path) -> bytes:
    """Read the whole input file.

    Raises:
        GeneratorError: If the file cannot be read.
    """
    try:
        return Path(input_path).read_bytes()
    except OSError as e:
        raise GeneratorError(f"Could not read input file: {e}") from e


def generate(input_path: Path, options: GeneratorOptions) -> str:
    """Read ``input_path`` and return the generated source."""
    data = read_input(input_path)
    logger.debug("Read %d bytes from %s", len(data), input_path)
    return generate_source(data, options)


def write_output(source: str, output: Path | None) -> None:
    """Write generated source to ``output``, or to stdout when unset.

    Raises:
        GeneratorError: If the output file cannot be created.
    """
    if output is None:
        sys.stdout.write(source)
        sys.stdout.flush()
        return
    try:
        Path(output).write_text(source, encoding="utf-8")
    except OSError as e:
        raise GeneratorError(f"Could not open output file: {e}") from e
    logger.info("Wrote %s", output)
