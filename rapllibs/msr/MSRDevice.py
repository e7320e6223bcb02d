# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Author: Artem Bityutskiy <artem.bityutskiy@linux.intel.com>

"""
Provide a capability to read CPU Model Specific Registers via the '/dev/cpu/<cpu>/msr' device
files.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import errno
import typing
from pathlib import Path
from rapllibs.helperlibs import ClassHelpers, Logging
from rapllibs.helperlibs.Exceptions import Error, ErrorIO, ErrorCPUNotFound, ErrorMSRNotSupported

if typing.TYPE_CHECKING:
    from typing import Literal, IO

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.rapl-powertool.{__name__}")

# The directory containing per-CPU MSR device files.
DEV_CPU_PATH = Path("/dev/cpu")

_CPU_BYTEORDER: Literal["little", "big"] = "little"

class MSRDevice(ClassHelpers.SimpleCloseContext):
    """
    Provide a capability to read Model Specific Registers of a single CPU. The MSR device file is
    opened once, when the object is created, and stays open until 'close()' is called.
    """

    def __init__(self, cpu: int, devpath: Path = DEV_CPU_PATH):
        """
        Initialize a class instance.

        Args:
            cpu: The CPU number to read MSRs of.
            devpath: The directory containing per-CPU MSR device files.

        Raises:
            ErrorCPUNotFound: If CPU 'cpu' does not exist.
            ErrorMSRNotSupported: If CPU 'cpu' does not support MSRs.
            ErrorIO: If the MSR device file could not be opened for any other reason.
        """

        self.cpu = cpu
        self.path = devpath / str(cpu) / "msr"

        # MSR size in bits and bytes.
        self.regbits = 64
        self.regbytes = self.regbits // 8

        self._fobj: IO[bytes] | None = self._open(devpath)

    def close(self):
        """Uninitialize the class object."""

        if self._fobj:
            _LOG.debug("CPU%d: closing '%s'", self.cpu, self.path)
            self._fobj.close()
            self._fobj = None

    def _open(self, devpath: Path) -> IO[bytes]:
        """
        Open the MSR device file for reading.

        Args:
            devpath: The directory containing per-CPU MSR device files.

        Returns:
            The opened unbuffered binary file object.
        """

        try:
            # pylint: disable-next=consider-using-with
            fobj = open(self.path, "rb", buffering=0)
        except OSError as err:
            errmsg = Error(str(err)).indent(2)
            if err.errno == errno.ENXIO or \
               (err.errno == errno.ENOENT and not (devpath / str(self.cpu)).exists()):
                raise ErrorCPUNotFound(f"No CPU {self.cpu}", cpu=self.cpu) from err
            if err.errno == errno.EIO:
                raise ErrorMSRNotSupported(f"CPU {self.cpu} doesn't support MSRs",
                                           cpu=self.cpu) from err
            if err.errno == errno.ENOENT:
                errmsg += "\nMake sure your kernel has the 'msr' driver enabled (CONFIG_X86_MSR) " \
                          "and loaded."
            raise ErrorIO(f"Failed to open MSR device file '{self.path}':\n{errmsg}",
                          path=self.path) from err

        _LOG.debug("CPU%d: opened '%s'", self.cpu, self.path)
        return fobj

    def read(self, regaddr: int, regname: str = "") -> int:
        """
        Read an MSR.

        Args:
            regaddr: The address of the MSR to read.
            regname: Name of the MSR, for messages.

        Returns:
            The value of the MSR as an integer.

        Raises:
            ErrorIO: If the MSR could not be read.
        """

        if regname:
            what = f"MSR {regaddr:#x} ({regname})"
        else:
            what = f"MSR {regaddr:#x}"

        if not self._fobj:
            raise Error(f"BUG: CPU{self.cpu}: reading {what} after closing '{self.path}'")

        try:
            self._fobj.seek(regaddr)
            regval_bytes = self._fobj.read(self.regbytes)
        except OSError as err:
            errmsg = Error(str(err)).indent(2)
            raise ErrorIO(f"Failed to read {what} from file '{self.path}':\n{errmsg}",
                          path=self.path) from err

        if regval_bytes is None or len(regval_bytes) != self.regbytes:
            cnt = 0 if regval_bytes is None else len(regval_bytes)
            raise ErrorIO(f"Failed to read {what} from file '{self.path}': read {cnt} bytes "
                          f"instead of {self.regbytes}", path=self.path)

        regval = int.from_bytes(regval_bytes, byteorder=_CPU_BYTEORDER)
        _LOG.debug("CPU%d: MSR 0x%x: read 0x%x", self.cpu, regaddr, regval)

        return regval
