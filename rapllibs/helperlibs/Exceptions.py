# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Author: Artem Bityutskiy <artem.bityutskiy@linux.intel.com>

"""
Exception types used in this project.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

from pathlib import Path
from typing import Any, Match
import re

class Error(Exception):
    """The base class for all exceptions raised by this project."""

    def __init__(self, msg: str, *args: Any, **kwargs: Any):
        """
        Initialize the exception object.

        Args:
            msg: The exception message.
            *args: Positional arguments for the message.
            **kwargs: Additional keyword arguments, stored as exception object attributes.
        """

        msg = str(msg)
        super().__init__(msg)

        for key, val in kwargs.items():
            setattr(self, key, val)

        if args:
            self.msg = msg % tuple(args)
        else:
            self.msg = msg

    def indent(self, indent: int | str, capitalize: bool = True) -> str:
        """
        Indent/prefix each line in the error message.

        Args:
            indent: Can be an integer or a string. If an integer, each line of the error message is
                    prefixed with the specified number of white spaces. If a string, each line is
                    prefixed with the specified string.
            capitalize: If True, ensures the message starts with a capital letter.

        Returns:
            str: The modified error message.
        """

        def capitalize_mobj(mobj: Match[str]):
            """Capitalize the first non-white-space character of the message."""
            return mobj.group(1) + mobj.group(2).capitalize()

        if isinstance(indent, int):
            pfx = " " * indent
        else:
            pfx = indent

        msg = pfx + self.msg.replace("\n", f"\n{pfx}")
        if capitalize:
            msg = re.sub(r"^(\s*)(\S)", capitalize_mobj, msg)

        return msg

    def __str__(self):
        """The string representation of the exception."""
        return self.msg

class ErrorNotFound(Error):
    """Something was not found."""

class ErrorNotSupported(Error):
    """Feature/option/etc is not supported."""

class ErrorBadFormat(Error):
    """Bad format of something, e.g., file contents."""

class ErrorBadConfig(Error):
    """The configuration is bad or exceeds a built-in limit."""

class ErrorIO(Error):
    """An I/O operation failed."""

    def __init__(self, msg: str, *args: Any, path: Path | None = None, **kwargs: Any):
        """
        Initialize the exception object.

        Args:
            msg: The exception message.
            *args: Positional arguments for the message.
            path: The path of the file the failed I/O operation was performed on.
            **kwargs: Additional keyword arguments.
        """

        self.path = path

        super().__init__(msg, *args, **kwargs)

class ErrorCPUNotFound(ErrorNotFound):
    """The CPU does not exist."""

    def __init__(self, msg: str, *args: Any, cpu: int | None = None, **kwargs: Any):
        """
        Initialize the exception object.

        Args:
            msg: The exception message.
            *args: Positional arguments for the message.
            cpu: The number of the CPU that does not exist.
            **kwargs: Additional keyword arguments.
        """

        self.cpu = cpu

        super().__init__(msg, *args, **kwargs)

class ErrorMSRNotSupported(ErrorNotSupported):
    """The CPU does not support reading Model Specific Registers."""

    def __init__(self, msg: str, *args: Any, cpu: int | None = None, **kwargs: Any):
        """
        Initialize the exception object.

        Args:
            msg: The exception message.
            *args: Positional arguments for the message.
            cpu: The number of the CPU that does not support MSRs.
            **kwargs: Additional keyword arguments.
        """

        self.cpu = cpu

        super().__init__(msg, *args, **kwargs)
