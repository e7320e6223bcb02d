# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Author: Artem Bityutskiy <artem.bityutskiy@linux.intel.com>

"""
Helpful classes extending 'argparse.ArgumentParser' class functionality.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import typing
import argparse
import argcomplete
from rapllibs.helperlibs import DamerauLevenshtein
from rapllibs.helperlibs.Exceptions import Error

if typing.TYPE_CHECKING:
    from typing import TypedDict, Iterable, Any

    class ArgKwargsTypedDict(TypedDict, total=False):
        """
        The type of the "kwargs" sub-dictionary of the 'ArgTypedDict' dictionary type. It defines
        the supported keyword arguments that are ultimately passed to the 'argparse.add_argument()'
        method.

        Attributes:
            dest: The 'argparse' attribute name where the command line argument will be stored.
            default: The default value for the argument.
            metavar: The name of the argument in the help text.
            action: The 'argparse' action to use for the argument. For example, 'store_true'.
            help: A brief description of the argument.
        """

        dest: str
        default: str | int
        metavar: str
        action: str
        help: str

    class ArgTypedDict(TypedDict, total=False):
        """
        A dictionary type for the options definitions dictionary.

        Attributes:
            short: The short option name.
            long: The long option name.
            argcomplete: The 'argcomplete' class name to use for tab completion of the option.
            kwargs: Additional keyword arguments for 'argparse.add_argument()'.
        """

        short: str | None
        long: str
        argcomplete: str | None
        kwargs: ArgKwargsTypedDict

def add_options(parser: argparse.ArgumentParser, options: Iterable[ArgTypedDict]):
    """
    Add command line options to the given parser.

    Args:
        parser: The argument parser object to which options will be added.
        options: An iterable collection of option definition dictionaries.
    """

    for opt in options:
        args: tuple[str, ...]

        if opt["short"] is None:
            args = (opt["long"], )
        else:
            args = (opt["short"], opt["long"])

        arg = parser.add_argument(*args, **opt["kwargs"])
        if opt["argcomplete"]:
            setattr(arg, "completer", getattr(argcomplete.completers, opt["argcomplete"]))

class ArgsParser(argparse.ArgumentParser):
    """
    Enhance 'argparse.ArgumentParser' with standard options and improved usability.
      - Add and validate standard options, such  as '-h' and '-q'.
      - Override 'error()' to always suggest using '-h' for help and provide typo suggestions.
    """

    def __init__(self, *args: Any, **kwargs: Any):
        """
        We assume all tools using this module support the '-q' and '--debug' options. This helper
        adds them to the 'parser' argument parser object. The 'ver' keyword argument adds the
        '--version' option.
        """

        if "ver" in kwargs:
            version = kwargs["ver"]
            del kwargs["ver"]
        else:
            version = None

        kwargs["add_help"] = False
        super().__init__(*args, **kwargs)

        text = "Show this help message and exit."
        self.add_argument("-h", "--help", dest="help", action="help", help=text)

        text = "Be quiet (print only important messages like warnings)."
        self.add_argument("-q", "--quiet", dest="quiet", action="store_true", help=text)

        text = """Force colorized output even if the output stream is not a terminal (adds ANSI
                  escape codes)."""
        self.add_argument("--force-color", action="store_true", help=text)

        text = "Print debugging information."
        self.add_argument("--debug", dest="debug", action="store_true", help=text)

        if version:
            text = "Print the version number and exit."
            self.add_argument("--version", action="version", help=text,
                              version=f"{self.prog} {version}")

    def parse_args(self, *args: Any, **kwargs: Any) -> argparse.Namespace: # type: ignore[override]
        """
        Parse command line arguments and verify the common options.

        Args:
            *args: Positional arguments for 'ArgumentParser.parse_args()'.
            **kwargs: Keyword arguments for 'ArgumentParser.parse_args()'.
        """

        _args = super().parse_args(*args, **kwargs)

        if getattr(_args, "quiet", False) and getattr(_args, "debug", False):
            raise Error("The '-q' and '--debug' options cannot be used together")

        return _args

    def error(self, message: str):
        """
        Improve error messages from 'argparse.ArgumentParser'.

        Args:
            message: The original error message.
        """

        if "invalid choice: " not in message:
            message += "\nUse -h for help."
        else:
            offending, opts = message.split(" (choose from ")
            offending = offending.split("invalid choice: ")[1].strip("'")
            options = [opt.strip(")'") for opt in opts.split(", ")]
            suggestion = DamerauLevenshtein.closest_match(offending, options)
            if suggestion:
                message = f"bad argument '{offending}', use '{self.prog} -h'.\n\nThe most " \
                          f"similar argument is\n  {suggestion}"
            else:
                message += "\nUse -h for help."

        # Raise an error instead of calling the superclass method, because it exits the program.
        raise Error(message)
