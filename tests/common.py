#!/usr/bin/env python3
#
# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""Common functions for rapl-powertool tests."""

from  __future__ import annotations # Remove when switching to Python 3.10+.

from pathlib import Path
from typing import IO
from rapllibs import PackageInfo
from rapllibs.msr import MSRDevice
from rapllibs.msr.RaplLayouts import RegisterLayoutTypedDict

# RAPL power unit MSR values of real systems.
INTEL_UNITS_REGVAL = 0x000A0E03
AMD_UNITS_REGVAL = 0x000A1003

class EmulMSRFile:
    """
    An emulated '/dev/cpu/<cpu>/msr' file object. The MSR device file offset is the MSR address,
    but the emulated file is a sparse regular file where MSR address N occupies bytes N*8 to N*8+7.
    """

    def __init__(self, fobj: IO[bytes]):
        """Initialize a class instance for the opened emulated MSR device file 'fobj'."""
        self._fobj = fobj

    def seek(self, offset: int, whence: int = 0) -> int:
        """Mimic '/dev/cpu/<cpu>/msr' files' 'seek()' behavior."""
        return self._fobj.seek(offset * 8, whence)

    def read(self, size: int = -1) -> bytes:
        """Read from the emulated MSR device file."""
        return self._fobj.read(size)

    def close(self):
        """Close the emulated MSR device file."""
        self._fobj.close()

def open_msr_file(path: Path, mode: str, buffering: int = -1) -> EmulMSRFile:
    """Open emulated MSR device file 'path', used in place of 'open()' in the 'MSRDevice' module."""

    # pylint: disable-next=consider-using-with
    return EmulMSRFile(open(path, mode, buffering=buffering))

class EmulSystem:
    """
    An emulated system: a sysfs CPU topology tree and '/dev/cpu/<cpu>/msr' device files under a
    base directory. The MSR device files are sparse regular files, an MSR value is stored as 8
    little-endian bytes at offset 'regaddr * 8'. Use 'open_msr_file()' for reading them.
    """

    def __init__(self, basepath: Path):
        """
        Initialize a class instance.

        Args:
            basepath: The directory to create the emulated system in. Used as the '--root' option
                      value in command-line tests.
        """

        self.basepath = basepath
        self.sysfs_base = basepath / PackageInfo.SYSFS_CPU_PATH.relative_to("/")
        self.devpath = basepath / MSRDevice.DEV_CPU_PATH.relative_to("/")

        self.sysfs_base.mkdir(parents=True, exist_ok=True)
        self.devpath.mkdir(parents=True, exist_ok=True)

    def set_package_id(self, cpu: int, package_id: int | str):
        """Create or overwrite the physical package ID sysfs file of CPU 'cpu'."""

        path = self.sysfs_base / f"cpu{cpu}" / "topology"
        path.mkdir(parents=True, exist_ok=True)
        (path / "physical_package_id").write_text(f"{package_id}\n", encoding="utf-8")

    def add_msr_file(self, cpu: int) -> Path:
        """Create an empty MSR device file for CPU 'cpu' and return its path."""

        path = self.devpath / str(cpu) / "msr"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch()
        return path

    def write_msr(self, cpu: int, regaddr: int, regval: int):
        """Write 'regval' to MSR 'regaddr' of CPU 'cpu'."""

        path = self.devpath / str(cpu) / "msr"
        if not path.exists():
            self.add_msr_file(cpu)

        with open(path, "r+b") as fobj:
            fobj.seek(regaddr * 8)
            fobj.write(regval.to_bytes(8, byteorder="little"))

    def add_cpus(self, package_ids: list[int], layout: RegisterLayoutTypedDict,
                 units_regval: int, energy: int = 0):
        """
        Add CPUs to the emulated system.

        Args:
            package_ids: Physical package IDs of CPUs 0, 1, and so on.
            layout: The RAPL registers layout to emulate the MSRs for.
            units_regval: The RAPL power unit MSR value of every CPU.
            energy: The initial energy status MSR value of every CPU.
        """

        for cpu, package_id in enumerate(package_ids):
            self.set_package_id(cpu, package_id)
            self.write_msr(cpu, layout["units_regaddr"], units_regval)
            self.write_msr(cpu, layout["energy_regaddr"], energy)
