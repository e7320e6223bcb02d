# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Author: Artem Bityutskiy <artem.bityutskiy@linux.intel.com>

"""
Provide YAML output capabilities.
"""

from  __future__ import annotations # Remove when switching to Python 3.10+.

from typing import Any, IO
import yaml
from rapllibs.helperlibs import Logging
from rapllibs.helperlibs.Exceptions import Error

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.rapl-powertool.{__name__}")

def dump(data: dict[str, Any], fobj: IO[str]):
    """
    Dump a dictionary in YAML format.

    Args:
        data: The dictionary to dump.
        fobj: The file object to write the YAML data to.
    """

    try:
        yaml.dump(data, fobj, Dumper=yaml.SafeDumper, default_flow_style=False, sort_keys=False)
    except OSError as err:
        msg = Error(str(err)).indent(2)
        raise Error(f"failed to write YAML data to '{getattr(fobj, 'name', fobj)}':\n{msg}") \
              from err

    _LOG.debug("wrote YAML data to '%s'", getattr(fobj, "name", fobj))
