# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Authors: Artem Bityutskiy <artem.bityutskiy@linux.intel.com>
#          Niklas Neronin <niklas.neronin@intel.com>

"""
rapl-powertool - measure CPU package power or energy using RAPL energy status MSRs.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import sys
import typing
import argparse
from pathlib import Path
import argcomplete
from rapllibs import EnergySampler, PackageInfo
from rapllibs.msr import MSRDevice, RaplLayouts
from rapllibs.helperlibs import ArgParse, Logging, Trivial
from rapllibs.helperlibs.Exceptions import Error, ErrorIO, ErrorBadFormat
from rapllibs.helperlibs.Exceptions import ErrorCPUNotFound, ErrorMSRNotSupported
from rapltool import _RaplPrinter

if typing.TYPE_CHECKING:
    from rapllibs.helperlibs.ArgParse import ArgTypedDict

if sys.version_info < (3, 8):
    raise SystemExit("this tool requires python version 3.8 or higher")

_VERSION = "0.1.0"
TOOLNAME = "rapl-powertool"

# The default sampling interval in milliseconds.
DEFAULT_INTERVAL = 1000

# Process exit codes for the errors the tool distinguishes. Other errors exit with code 1.
EXITCODES: tuple[tuple[type[Error], int], ...] = (
    (ErrorCPUNotFound, 2),
    (ErrorMSRNotSupported, 3),
    (ErrorIO, 127),
    (ErrorBadFormat, 127),
)

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.rapl-powertool").configure(prefix=TOOLNAME)

_OPTIONS: list[ArgTypedDict] = [
    {
        "short": "-i",
        "long": "--interval",
        "argcomplete": None,
        "kwargs": {
            "dest": "interval",
            "metavar": "MS",
            "default": str(DEFAULT_INTERVAL),
            "help": f"""Print average power of every CPU package every MS milliseconds, in Watts.
                        Default is {DEFAULT_INTERVAL} milliseconds.""",
        },
    },
    {
        "short": "-d",
        "long": "--duration",
        "argcomplete": None,
        "kwargs": {
            "dest": "duration",
            "metavar": "MS",
            "default": "0",
            "help": """Measure over MS milliseconds and print the energy consumed by every CPU
                       package, in Joules. Takes precedence over '--interval'.""",
        },
    },
    {
        "short": None,
        "long": "--info",
        "argcomplete": None,
        "kwargs": {
            "dest": "info",
            "action": "store_true",
            "help": """Print the discovered CPU packages and their RAPL time, energy, and power
                       units, then exit.""",
        },
    },
    {
        "short": None,
        "long": "--yaml",
        "argcomplete": None,
        "kwargs": {
            "dest": "yaml",
            "action": "store_true",
            "help": """Print '--info' output in YAML format.""",
        },
    },
    {
        "short": None,
        "long": "--root",
        "argcomplete": "DirectoriesCompleter",
        "kwargs": {
            "dest": "root",
            "metavar": "PATH",
            "help": f"""This option is for debugging and testing. Read the sysfs CPU topology
                        and MSR device files relative to PATH instead of '/'. For example,
                        '{PackageInfo.SYSFS_CPU_PATH}' becomes
                        'PATH{PackageInfo.SYSFS_CPU_PATH}'.""",
        },
    },
]

def build_arguments_parser() -> ArgParse.ArgsParser:
    """Build and return the the command-line arguments parser object."""

    text = f"""{TOOLNAME} - measure average CPU package power every interval, in Watts, or total
               CPU package energy consumption over a duration, in Joules. Uses the RAPL energy
               status MSRs. Prints one line per measurement, with comma-separated values for every
               CPU package."""
    parser = ArgParse.ArgsParser(description=text, prog=TOOLNAME, ver=_VERSION)

    text = """The CPU vendor, selects the RAPL MSRs layout."""
    parser.add_argument("vendor", choices=list(RaplLayouts.LAYOUTS), help=text)

    ArgParse.add_options(parser, _OPTIONS)

    argcomplete.autocomplete(parser)

    return parser

def parse_arguments() -> argparse.Namespace:
    """Parse command-line arguments."""

    parser = build_arguments_parser()
    args = parser.parse_args()

    return args

def _get_mode(args: argparse.Namespace) -> EnergySampler.ModeType:
    """
    Validate the '--interval' and '--duration' options and return the sampling mode.

    Args:
        args: Parsed command-line arguments.

    Returns:
        'TotalMode' if a positive duration was specified, 'RateMode' otherwise.
    """

    try:
        interval = Trivial.str_to_uint(args.interval, what="'--interval' option value")
        duration = Trivial.str_to_uint(args.duration, what="'--duration' option value")
    except ErrorBadFormat as err:
        raise Error(f"{err}\nUse -h for help.") from err

    if duration > 0:
        return EnergySampler.TotalMode(duration_ms=duration)

    if interval == 0:
        raise Error("Bad '--interval' option value '0': should be a positive integer\n"
                    "Use -h for help.")

    return EnergySampler.RateMode(interval_ms=interval)

def _get_paths(args: argparse.Namespace) -> tuple[Path, Path]:
    """Return the sysfs CPU directory and MSR device directory paths, accounting for '--root'."""

    if not args.root:
        return PackageInfo.SYSFS_CPU_PATH, MSRDevice.DEV_CPU_PATH

    root = Path(args.root)
    if not root.is_dir():
        raise Error(f"Bad '--root' option value '{root}': not a directory")

    sysfs_base = root / PackageInfo.SYSFS_CPU_PATH.relative_to("/")
    devpath = root / MSRDevice.DEV_CPU_PATH.relative_to("/")
    _LOG.debug("using sysfs path '%s' and MSR devices path '%s'", sysfs_base, devpath)
    return sysfs_base, devpath

def _info_command(args: argparse.Namespace):
    """Implement the '--info' option."""

    sysfs_base, devpath = _get_paths(args)
    layout = RaplLayouts.get_layout(args.vendor)
    packages = PackageInfo.discover_packages(sysfs_base=sysfs_base)

    fmt: _RaplPrinter.PrintFormatType = "yaml" if args.yaml else "human"

    with EnergySampler.EnergySampler(packages, layout, devpath=devpath) as sampler, \
         _RaplPrinter.UnitsPrinter(layout, fobj=sys.stdout, fmt=fmt) as printer:
        printer.print_units(sampler.get_units())

def _measure_command(args: argparse.Namespace):
    """Measure package power or energy."""

    if args.yaml:
        raise Error("The '--yaml' option requires the '--info' option")

    mode = _get_mode(args)
    sysfs_base, devpath = _get_paths(args)
    layout = RaplLayouts.get_layout(args.vendor)
    packages = PackageInfo.discover_packages(sysfs_base=sysfs_base)

    with EnergySampler.EnergySampler(packages, layout, devpath=devpath,
                                     stream=sys.stdout) as sampler:
        sampler.run(mode)

def get_exitcode(err: Error) -> int:
    """
    Return the process exit code for an error.

    Args:
        err: The exception object.

    Returns:
        The exit code.
    """

    for exc_type, exitcode in EXITCODES:
        if isinstance(err, exc_type):
            return exitcode
    return 1

def main() -> int:
    """Script entry point."""

    try:
        args = parse_arguments()

        if args.info:
            _info_command(args)
        else:
            _measure_command(args)
    except KeyboardInterrupt:
        _LOG.notice("interrupted, exiting")
        return -1
    except Error as err:
        _LOG.error_out(err, exitcode=get_exitcode(err))

    return 0

if __name__ == "__main__":
    sys.exit(main())
