# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""
Discover CPU packages and pick a representative CPU for each of them.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

from pathlib import Path
from typing import NamedTuple
from rapllibs.helperlibs import Logging, Trivial
from rapllibs.helperlibs.Exceptions import Error, ErrorCPUNotFound, ErrorBadConfig

_LOG = Logging.getLogger(f"{Logging.MAIN_LOGGER_NAME}.rapl-powertool.{__name__}")

# The sysfs directory containing per-CPU sub-directories.
SYSFS_CPU_PATH = Path("/sys/devices/system/cpu")

# The largest count of CPUs to scan.
MAX_CPUS = 1024
# The largest count of packages supported.
MAX_PACKAGES = 16

class Package(NamedTuple):
    """
    A CPU package (socket).

    Attributes:
        index: The package index, in the order the packages were discovered, starting from 0.
        cpu: The representative CPU, the lowest-numbered CPU of the package.
        package_id: The physical package ID, as reported by the kernel.
    """

    index: int
    cpu: int
    package_id: int

def _read_package_id(cpu: int, sysfs_base: Path) -> int | None:
    """
    Read the physical package ID of a CPU.

    Args:
        cpu: The CPU number.
        sysfs_base: The sysfs directory containing per-CPU sub-directories.

    Returns:
        The physical package ID or None if the topology file cannot be read.
    """

    path = sysfs_base / f"cpu{cpu}" / "topology" / "physical_package_id"
    try:
        with open(path, "r", encoding="utf-8") as fobj:
            contents = fobj.read()
    except OSError as err:
        _LOG.debug("CPU%d: cannot read '%s': %s", cpu, path, err)
        return None

    try:
        return Trivial.str_to_int(contents, base=10, what=f"CPU{cpu} physical package ID")
    except Error as err:
        raise type(err)(f"Bad contents of file '{path}':\n{err.indent(2)}") from err

def discover_packages(max_cpus: int = MAX_CPUS,
                      max_packages: int = MAX_PACKAGES,
                      sysfs_base: Path = SYSFS_CPU_PATH) -> list[Package]:
    """
    Discover CPU packages. Scan CPUs starting from CPU 0 and stop at the first CPU the physical
    package ID of which cannot be read. The first CPU seen in a package becomes its representative.

    Args:
        max_cpus: The largest count of CPUs to scan.
        max_packages: The largest count of packages allowed.
        sysfs_base: The sysfs directory containing per-CPU sub-directories.

    Returns:
        List of discovered packages, in the order their first CPU was found.

    Raises:
        ErrorBadConfig: If there are more than 'max_packages' packages.
        ErrorCPUNotFound: If no CPUs were found.
        ErrorBadFormat: If a physical package ID file contains garbage.
    """

    packages: list[Package] = []
    seen: set[int] = set()

    cpu = 0
    for cpu in range(max_cpus):
        package_id = _read_package_id(cpu, sysfs_base)
        if package_id is None:
            break

        if package_id in seen:
            continue

        if len(packages) >= max_packages:
            raise ErrorBadConfig(f"Too many CPU packages: CPU{cpu} belongs to package "
                                 f"{package_id}, but only up to {max_packages} packages are "
                                 f"supported")

        seen.add(package_id)
        package = Package(index=len(packages), cpu=cpu, package_id=package_id)
        packages.append(package)
        _LOG.debug("package %d: physical package ID %d, representative CPU%d",
                   package.index, package_id, cpu)
    else:
        cpu = max_cpus

    if not packages:
        raise ErrorCPUNotFound(f"No CPUs found in '{sysfs_base}'", cpu=0)

    _LOG.debug("scanned %d CPUs, found %d packages", cpu, len(packages))
    return packages
