# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Author: Artem Bityutskiy <artem.bityutskiy@linux.intel.com>

"""
Common trivial helpers.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

from rapllibs.helperlibs.Exceptions import ErrorBadFormat

def str_to_int(snum: str | int, base: int = 0, what: str = "") -> int:
    """
    Convert a string to an integer value.

    Args:
        snum: The value to convert to 'int'.
        base: Base of 'snum'. Defaults to auto-detect based on the prefix.
        what: A string describing the value to convert, for the possible error message.

    Returns:
        int: The converted integer value.

    Raises:
        ErrorBadFormat: If 'snum' cannot be converted to an integer.
    """

    try:
        return int(str(snum).strip(), base)
    except (ValueError, TypeError):
        if not what:
            what = "value"
        raise ErrorBadFormat(f"Bad {what} '{snum}': should be an integer") from None

def str_to_uint(snum: str | int, what: str = "") -> int:
    """
    Convert a string of decimal digits to a non-negative integer value.

    Args:
        snum: The value to convert. Only decimal digits are accepted, no sign and no base prefix.
        what: A string describing the value to convert, for the possible error message.

    Returns:
        int: The converted integer value.

    Raises:
        ErrorBadFormat: If 'snum' is not a non-negative decimal integer.
    """

    if not what:
        what = "value"

    snum = str(snum)
    if not snum.isdigit() or not snum.isascii():
        raise ErrorBadFormat(f"Bad {what} '{snum}': should be a non-negative decimal integer")

    return int(snum, 10)
