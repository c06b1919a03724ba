#!/usr/bin/env python3
"""
armemu — ARM subset emulator CLI

Usage:
    armemu <image.bin> [--verbose] [--quiet] [--trace] [--log-file PATH]

Loads a flat binary image at address 0, runs it until an all-zero word
is fetched, then prints the register and non-zero memory dump.

Exit status:
    0   clean halt
    1   fatal error (load, decode, operand or opcode); dump still printed
    2   usage error (from argparse, nothing is run)

Examples:
    armemu add01.bin
    armemu gpio_0.bin --trace --log-file logs/gpio_0.log
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .emu import ARMEmulator, StopReason
from .errors import LoadError
from .log import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="armemu",
        description="Emulator for a subset of the ARM instruction set",
    )
    parser.add_argument("image", help="Flat binary image loaded at address 0")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Show debug messages on the console")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Only show warnings and errors on the console")
    parser.add_argument("--trace", action="store_true",
                        help="Log every executed instruction (implies --verbose)")
    parser.add_argument("--log-file", default=None,
                        help="Also write the full debug log to this file")
    parser.add_argument("--version", action="version",
                        version=f"armemu {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose or args.trace:
        console_level = logging.DEBUG
    elif args.quiet:
        console_level = logging.WARNING
    else:
        console_level = logging.INFO
    setup_logging(console_level=console_level, log_file=args.log_file)

    emu = ARMEmulator()
    emu.enable_trace(args.trace)

    try:
        emu.load_binary(args.image)
    except LoadError as e:
        print(e)
        print(emu.dump_state())
        return 1

    reason = emu.run()
    if reason is StopReason.FATAL:
        print(emu.error)
        print(emu.dump_state())
        return 1

    print(emu.dump_state())
    return 0


if __name__ == "__main__":
    sys.exit(main())
