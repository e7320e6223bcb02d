# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""
Sample RAPL package energy status MSRs and report package power or energy.

The energy status MSR is a 32-bit wrapping counter of energy consumed by the package, in the energy
units of the RAPL power unit MSR. Two reporting modes are supported:
  * Rate mode: every interval, print average power of every package over the interval, in Watts.
  * Total mode: once, after a delay, print energy consumed by every package over the delay, in
    Joules.

Every report is one line of comma-separated values, one value per package, in package discovery
order.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import sys
import time
import typing
from pathlib import Path
from typing import NamedTuple, Union
from rapllibs.helperlibs import ClassHelpers, Logging
from rapllibs.helperlibs.Exceptions import Error
from rapllibs.msr import MSRDevice, RaplLayouts

if typing.TYPE_CHECKING:
    from typing import IO, Sequence, TypedDict
    from rapllibs.PackageInfo import Package
    from rapllibs.msr.RaplLayouts import RegisterLayoutTypedDict, UnitsNameType

    class UnitsTypedDict(TypedDict):
        """
        The decoded RAPL power unit MSR of a package.

        Attributes:
            time_units: Seconds per RAPL time unit.
            energy_units: Joules per RAPL energy unit.
            power_units: Watts per RAPL power unit.
        """

        time_units: float
        energy_units: float
        power_units: float

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.rapl-powertool.{__name__}")

# The energy status counter wraps around at this value.
ENERGY_COUNTER_MAX = 0xFFFFFFFF

class RateMode(NamedTuple):
    """
    Report average package power every 'interval_ms' milliseconds.

    Attributes:
        interval_ms: The sampling interval in milliseconds.
    """

    interval_ms: int

class TotalMode(NamedTuple):
    """
    Report energy consumed by packages over 'duration_ms' milliseconds.

    Attributes:
        duration_ms: The measurement duration in milliseconds.
    """

    duration_ms: int

ModeType = Union[RateMode, TotalMode]

def decode_units(regval: int, bits: tuple[int, int]) -> float:
    """
    Decode a bit field of the RAPL power unit MSR into a scaling factor.

    Args:
        regval: The RAPL power unit MSR value.
        bits: The '(msb, lsb)' bit field to decode.

    Returns:
        The scaling factor, '0.5' to the power of the bit field value.
    """

    mask, shift = RaplLayouts.bits_to_mask(bits)
    return pow(0.5, (regval & mask) >> shift)

def energy_delta(prev: int, cur: int) -> int:
    """
    Calculate the raw energy status counter difference between two readings.

    Args:
        prev: The previous energy status MSR value.
        cur: The current energy status MSR value.

    Returns:
        The count of energy units consumed between the readings.

    Notes:
        If 'cur' is less than 'prev', the counter is assumed to have wrapped around once, and the
        difference is calculated as '0xFFFFFFFF - (cur - prev)' in 32-bit unsigned arithmetic. More
        than one wrap-around within a single interval is not detected.
    """

    if cur >= prev:
        return cur - prev

    return ENERGY_COUNTER_MAX - ((cur - prev) & ENERGY_COUNTER_MAX)

def format_line(values: Sequence[float]) -> str:
    """
    Format per-package values as an output line.

    Args:
        values: The per-package values.

    Returns:
        The comma-separated values line, including the trailing newline.
    """

    return ",".join("%g" % val for val in values) + "\n" # pylint: disable=consider-using-f-string

class _PackageState:
    """The sampling state of a package."""

    def __init__(self, package: Package, msr: MSRDevice.MSRDevice, units: UnitsTypedDict,
                 prev_energy: int):
        """
        Initialize a class instance.

        Args:
            package: The package the state belongs to.
            msr: The MSR device object of the package representative CPU.
            units: The decoded RAPL power unit MSR.
            prev_energy: The last read energy status MSR value.
        """

        self.package = package
        self.msr = msr
        self.units = units
        self.prev_energy = prev_energy

    def close(self):
        """Uninitialize the class object."""
        self.msr.close()

class EnergySampler(ClassHelpers.SimpleCloseContext):
    """
    Sample RAPL package energy status MSRs and report package power or energy.

    Public methods overview.
        - 'run()' - run the sampler in rate or total mode.
        - 'run_rate()' - report average package power periodically.
        - 'run_total()' - report energy consumed by packages over a period of time.
        - 'sample()' - read the energy status MSRs and return the energy consumed since last sample.
        - 'get_units()' - return the decoded RAPL power unit MSR of every package.
    """

    def __init__(self,
                 packages: Sequence[Package],
                 layout: RegisterLayoutTypedDict,
                 devpath: Path = MSRDevice.DEV_CPU_PATH,
                 stream: IO[str] | None = None):
        """
        Initialize a class instance. Open MSR device files of the package representative CPUs,
        decode the RAPL power units, and read the initial energy status MSR values.

        Args:
            packages: The packages to sample, in output order.
            layout: The RAPL registers layout of the CPU vendor.
            devpath: The directory containing per-CPU MSR device files.
            stream: The stream to print the results to. Defaults to 'sys.stdout'.

        Raises:
            ErrorCPUNotFound: If a package representative CPU does not exist.
            ErrorMSRNotSupported: If a package representative CPU does not support MSRs.
            ErrorIO: If an MSR device file could not be opened or read.
        """

        if not packages:
            raise Error("BUG: no packages to sample")

        self._layout = layout
        self._stream = stream if stream else sys.stdout
        self._pstates: list[_PackageState] = []

        try:
            for package in packages:
                self._pstates.append(self._init_package(package, devpath))
        except Error:
            self.close()
            raise

    def close(self):
        """Uninitialize the class object."""

        close_attrs = ("_pstates",)
        unref_attrs = ("_stream", "_layout")
        ClassHelpers.close(self, close_attrs=close_attrs, unref_attrs=unref_attrs)

    def _init_package(self, package: Package, devpath: Path) -> _PackageState:
        """
        Initialize the sampling state of a package.

        Args:
            package: The package to initialize the sampling state for.
            devpath: The directory containing per-CPU MSR device files.

        Returns:
            The package sampling state.
        """

        msr = MSRDevice.MSRDevice(package.cpu, devpath=devpath)

        try:
            regval = msr.read(self._layout["units_regaddr"], self._layout["units_regname"])

            units: UnitsTypedDict = {"time_units": 0.0, "energy_units": 0.0, "power_units": 0.0}
            uname: UnitsNameType
            for uname, bits in self._layout["units"].items():
                units[uname] = decode_units(regval, bits)

            _LOG.debug("package %d: time units %g s, energy units %g J, power units %g W",
                       package.index, units["time_units"], units["energy_units"],
                       units["power_units"])

            prev_energy = msr.read(self._layout["energy_regaddr"], self._layout["energy_regname"])
        except Error:
            msr.close()
            raise

        return _PackageState(package, msr, units, prev_energy)

    def get_units(self) -> list[tuple[Package, UnitsTypedDict]]:
        """
        Return the decoded RAPL power unit MSR of every package.

        Returns:
            List of '(package, units)' tuples, in package order.
        """

        return [(pstate.package, pstate.units) for pstate in self._pstates]

    def sample(self) -> list[float]:
        """
        Read the energy status MSR of every package and return the energy consumed since the
        previous reading.

        Returns:
            List of energy values in Joules, one per package, in package order.
        """

        joules = []
        for pstate in self._pstates:
            cur = pstate.msr.read(self._layout["energy_regaddr"], self._layout["energy_regname"])
            delta = energy_delta(pstate.prev_energy, cur)
            pstate.prev_energy = cur
            joules.append(delta * pstate.units["energy_units"])

        return joules

    def _print(self, values: Sequence[float]):
        """Print a line of per-package values."""

        self._stream.write(format_line(values))
        self._stream.flush()

    def run_rate(self, interval_ms: int, count: int | None = None):
        """
        Print average power of every package every 'interval_ms' milliseconds.

        Args:
            interval_ms: The sampling interval in milliseconds, must be positive.
            count: Stop after printing 'count' lines. Run until interrupted by default.
        """

        if interval_ms <= 0:
            raise Error(f"BUG: bad sampling interval {interval_ms} ms")

        _LOG.debug("reporting power of %d packages every %d ms", len(self._pstates), interval_ms)

        printed = 0
        while count is None or printed < count:
            time.sleep(interval_ms / 1000)
            watts = [joules * 1000 / interval_ms for joules in self.sample()]
            self._print(watts)
            printed += 1

    def run_total(self, duration_ms: int):
        """
        Print energy consumed by every package over 'duration_ms' milliseconds.

        Args:
            duration_ms: The measurement duration in milliseconds.
        """

        _LOG.debug("reporting energy of %d packages over %d ms", len(self._pstates), duration_ms)

        time.sleep(duration_ms / 1000)
        self._print(self.sample())

    def run(self, mode: ModeType):
        """
        Run the sampler.

        Args:
            mode: 'RateMode' to report package power periodically (runs until interrupted), or
                  'TotalMode' to report package energy once.
        """

        if isinstance(mode, TotalMode):
            self.run_total(mode.duration_ms)
        elif isinstance(mode, RateMode):
            self.run_rate(mode.interval_ms)
        else:
            raise Error(f"BUG: bad sampling mode '{mode}'")
