# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""
Print CPU packages and their RAPL power units.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

import typing
from typing import Literal
from rapllibs.helperlibs import ClassHelpers, YAML
from rapllibs.helperlibs.Exceptions import Error
from rapllibs.msr import RaplLayouts

if typing.TYPE_CHECKING:
    from typing import IO, Any, Sequence
    from rapllibs.PackageInfo import Package
    from rapllibs.EnergySampler import UnitsTypedDict
    from rapllibs.msr.RaplLayouts import RegisterLayoutTypedDict

PrintFormatType = Literal["human", "yaml"]

class UnitsPrinter(ClassHelpers.SimpleCloseContext):
    """Print CPU packages and their RAPL power units in human-readable or YAML format."""

    def __init__(self,
                 layout: RegisterLayoutTypedDict,
                 fobj: IO[str],
                 fmt: PrintFormatType = "human"):
        """
        Initialize a class instance.

        Args:
            layout: The RAPL registers layout the units were read with.
            fobj: The file object to print the output to.
            fmt: The output format, "human" or "yaml".
        """

        if fmt not in ("human", "yaml"):
            formats = ", ".join(typing.get_args(PrintFormatType))
            raise Error(f"Unsupported format '{fmt}', supported formats are: {formats}")

        self._layout = layout
        self._fobj = fobj
        self._fmt = fmt

    def close(self):
        """Uninitialize the class object."""
        ClassHelpers.close(self, unref_attrs=("_fobj", "_layout"))

    def _print(self, msg: str):
        """Print message 'msg'."""

        self._fobj.write(msg + "\n")

    def _print_human(self, units_info: Sequence[tuple[Package, UnitsTypedDict]]):
        """Print packages and units in human-readable format."""

        self._print(f"Vendor: {self._layout['name']}")
        self._print(f"Power unit MSR: {self._layout['units_regaddr']:#x} "
                    f"({self._layout['units_regname']})")
        self._print(f"Energy status MSR: {self._layout['energy_regaddr']:#x} "
                    f"({self._layout['energy_regname']})")

        for package, units in units_info:
            self._print(f"Package {package.index}: CPU {package.cpu}, physical package ID "
                        f"{package.package_id}")
            for uname, uinfo in RaplLayouts.UNITS_INFO.items():
                self._print(f"  {uinfo['name']}: {units[uname]:g} {uinfo['unit']}")

    def _print_yaml(self, units_info: Sequence[tuple[Package, UnitsTypedDict]]):
        """Print packages and units in YAML format."""

        packages: list[dict[str, Any]] = []
        for package, units in units_info:
            pinfo: dict[str, Any] = {"package": package.index,
                                     "cpu": package.cpu,
                                     "package_id": package.package_id}
            for uname in RaplLayouts.UNITS_INFO:
                pinfo[uname] = units[uname]
            packages.append(pinfo)

        info = {"vendor": self._layout["vendor"],
                "units_regaddr": self._layout["units_regaddr"],
                "energy_regaddr": self._layout["energy_regaddr"],
                "packages": packages}

        YAML.dump(info, self._fobj)

    def print_units(self, units_info: Sequence[tuple[Package, UnitsTypedDict]]):
        """
        Print packages and their RAPL power units.

        Args:
            units_info: List of '(package, units)' tuples, as returned by
                        'EnergySampler.get_units()'.
        """

        if self._fmt == "yaml":
            self._print_yaml(units_info)
        else:
            self._print_human(units_info)
