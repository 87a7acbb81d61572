"""Command line front end that prints discovered hardware information."""

from __future__ import annotations

import argparse
import math
import platform
import sys
from typing import Any, Callable, Optional, Sequence

from hwscan import baseboard, bios, block, chassis, cpu
from hwscan.marshal import safe_json, safe_yaml

OUTPUT_FORMAT_HUMAN = "human"
OUTPUT_FORMAT_JSON = "json"
OUTPUT_FORMAT_YAML = "yaml"
OUTPUT_FORMATS = (OUTPUT_FORMAT_HUMAN, OUTPUT_FORMAT_JSON, OUTPUT_FORMAT_YAML)

VERSION = "(Unknown Version)"
BUILD_HASH = "No Git-hash Provided."
BUILD_DATE = "No Build Date Provided."

_DEBUG_HEADER = """
Date: %s
Build: %s
Version: %s
Git Hash: %s
"""

_BANNER = r"""
 .-----. |  |--. .--.--.--.
 |  _  | |     | |  |  |  |
 |___  | |__|__| |________|
 |_____|

Discover hardware information.
"""

_CAPABILITIES_PER_ROW = 6


class CommandError(Exception):
    """Raised when a command cannot gather or show its information."""


def _discover(what: str, factory: Callable[[], Any]) -> Any:
    try:
        return factory()
    except (OSError, RuntimeError, ValueError) as err:
        raise CommandError(f"error getting {what} info: {err}") from err


class _Printer:
    """Prints information in the chosen output format."""

    def __init__(self, output_format: str, pretty: bool) -> None:
        self.output_format = output_format
        self.pretty = pretty

    def info(self, info: Any, details: Callable[[], None] = lambda: None) -> None:
        if self.output_format == OUTPUT_FORMAT_HUMAN:
            print(info)
            details()
        elif self.output_format == OUTPUT_FORMAT_JSON:
            print(info.json_string(self.pretty))
        elif self.output_format == OUTPUT_FORMAT_YAML:
            print(info.yaml_string(), end="")


def _capability_lines(capabilities: Sequence[str]) -> list[str]:
    """Lay the capability strings out in rows, the way the human output does."""
    count = len(capabilities)
    rows = math.ceil(count / _CAPABILITIES_PER_ROW)
    lines = []
    for row in range(1, rows):
        start = row * _CAPABILITIES_PER_ROW - 1
        end = min(start + _CAPABILITIES_PER_ROW, count)
        text = " ".join(capabilities[start:end])
        if row == 1:
            lines.append(f"  capabilities: [{text}")
        elif end < count:
            lines.append(f"                 {text}")
        else:
            lines.append(f"                 {text}]")
    return lines


def _show_baseboard(printer: _Printer) -> None:
    printer.info(_discover("baseboard", baseboard.new))


def _show_bios(printer: _Printer) -> None:
    printer.info(_discover("BIOS", bios.new))


def _show_chassis(printer: _Printer) -> None:
    printer.info(_discover("chassis", chassis.new))


def _show_block(printer: _Printer) -> None:
    info = _discover("block device", block.new)

    def details() -> None:
        for disk in info.disks:
            print(f" {disk}")
            for part in disk.partitions:
                print(f"  {part}")

    printer.info(info, details)


def _show_cpu(printer: _Printer) -> None:
    info = _discover("CPU", cpu.new)

    def details() -> None:
        for proc in info.processors:
            print(f" {proc}")
            for core in proc.cores:
                print(f"  {core}")
            for line in _capability_lines(proc.capabilities):
                print(line)

    printer.info(info, details)


def _show_version(printer: _Printer) -> None:
    build = (
        f"{platform.python_implementation()} {platform.python_version()} "
        f"{sys.platform}/{platform.machine()}"
    )
    print(_DEBUG_HEADER % (BUILD_DATE, build, VERSION, BUILD_HASH), end="")


def _show_all(printer: _Printer) -> None:
    if printer.output_format == OUTPUT_FORMAT_HUMAN:
        for show in (_show_block, _show_cpu, _show_chassis, _show_bios, _show_baseboard):
            show(printer)
        return
    host = {
        "block": _discover("host", block.new).to_dict(),
        "cpu": _discover("host", cpu.new).to_dict(),
        "chassis": _discover("host", chassis.new).to_dict(),
        "bios": _discover("host", bios.new).to_dict(),
        "baseboard": _discover("host", baseboard.new).to_dict(),
    }
    if printer.output_format == OUTPUT_FORMAT_JSON:
        print(safe_json(None, host, printer.pretty))
    else:
        print(safe_yaml(None, host), end="")


_COMMANDS: dict[str, tuple[str, Callable[[_Printer], None]]] = {
    "baseboard": ("Show baseboard information for the host system", _show_baseboard),
    "bios": ("Show BIOS information for the host system", _show_bios),
    "block": ("Show block storage information for the host system", _show_block),
    "chassis": ("Show chassis information for the host system", _show_chassis),
    "cpu": ("Show CPU information for the host system", _show_cpu),
    "version": ("Display the version of the program", _show_version),
}


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--debug",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Enable or disable debug mode",
    )
    common.add_argument(
        "-f",
        "--format",
        dest="output_format",
        default=argparse.SUPPRESS,
        help="Output format. Choices are 'json','yaml', and 'human'.",
    )
    common.add_argument(
        "--pretty",
        action="store_true",
        default=argparse.SUPPRESS,
        help="When outputting JSON, use indentation",
    )
    parser = argparse.ArgumentParser(
        prog="hwscan",
        description=_BANNER,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        parents=[common],
    )
    subparsers = parser.add_subparsers(dest="command")
    for name, (help_text, _) in _COMMANDS.items():
        subparsers.add_parser(name, help=help_text, parents=[common])
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line tool and return its exit status."""
    args = _build_parser().parse_args(argv)
    output_format = getattr(args, "output_format", OUTPUT_FORMAT_HUMAN)
    pretty = getattr(args, "pretty", False)
    try:
        if output_format not in OUTPUT_FORMATS:
            raise CommandError(f'invalid output format "{output_format}"')
        printer = _Printer(output_format, pretty)
        if args.command is None:
            _show_all(printer)
        else:
            _COMMANDS[args.command][1](printer)
    except CommandError as err:
        print(err)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())