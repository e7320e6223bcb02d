# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2023 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# Author: Tero Kristo <tero.kristo@linux.intel.com>

"""
Describe the RAPL power unit and package energy status MSRs of the supported CPU vendors.
"""

from __future__ import annotations # Remove when switching to Python 3.10+.

from typing import TypedDict, Literal
from rapllibs.helperlibs.Exceptions import Error

VendorType = Literal["INTEL", "AMD"]
UnitsNameType = Literal["time_units", "energy_units", "power_units"]

class RegisterLayoutTypedDict(TypedDict):
    """
    The RAPL registers layout of a CPU vendor.

    Attributes:
        vendor: The vendor name, as used on the command line.
        name: Human-readable name of the vendor.
        units_regaddr: Address of the RAPL power unit MSR.
        units_regname: Name of the RAPL power unit MSR.
        energy_regaddr: Address of the package energy status MSR.
        energy_regname: Name of the package energy status MSR.
        units: The power unit MSR bit fields, indexed by the unit name. Each bit field is a
               '(msb, lsb)' tuple.
    """

    vendor: VendorType
    name: str
    units_regaddr: int
    units_regname: str
    energy_regaddr: int
    energy_regname: str
    units: dict[UnitsNameType, tuple[int, int]]

# The RAPL power unit MSR bit fields. Both vendors use the same layout.
_UNITS_BITS: dict[UnitsNameType, tuple[int, int]] = {
    "time_units": (19, 16),
    "energy_units": (12, 8),
    "power_units": (3, 0),
}

INTEL_LAYOUT: RegisterLayoutTypedDict = {
    "vendor": "INTEL",
    "name": "Intel",
    "units_regaddr": 0x606,
    "units_regname": "MSR_RAPL_POWER_UNIT",
    "energy_regaddr": 0x611,
    "energy_regname": "MSR_PKG_ENERGY_STATUS",
    "units": _UNITS_BITS,
}

AMD_LAYOUT: RegisterLayoutTypedDict = {
    "vendor": "AMD",
    "name": "AMD",
    "units_regaddr": 0xC0010299,
    "units_regname": "MSR_AMD_RAPL_POWER_UNIT",
    "energy_regaddr": 0xC001029B,
    "energy_regname": "MSR_AMD_PKG_ENERGY_STATUS",
    "units": _UNITS_BITS,
}

LAYOUTS: dict[str, RegisterLayoutTypedDict] = {
    "INTEL": INTEL_LAYOUT,
    "AMD": AMD_LAYOUT,
}

# Description of the RAPL power unit MSR bit fields.
UNITS_INFO: dict[UnitsNameType, dict[str, str]] = {
    "time_units": {
        "name": "Time units",
        "unit": "s",
        "help": """Scaling factor for translating RAPL time units to seconds.""",
    },
    "energy_units": {
        "name": "Energy units",
        "unit": "J",
        "help": """Scaling factor for translating RAPL energy units to Joules.""",
    },
    "power_units": {
        "name": "Power units",
        "unit": "W",
        "help": """Scaling factor for translating RAPL power units to Watts.""",
    },
}

def get_layout(vendor: str) -> RegisterLayoutTypedDict:
    """
    Return the RAPL registers layout for a CPU vendor.

    Args:
        vendor: The vendor name ("INTEL" or "AMD").

    Returns:
        The registers layout dictionary.
    """

    try:
        return LAYOUTS[vendor]
    except KeyError:
        vendors = ", ".join(LAYOUTS)
        raise Error(f"Unsupported CPU vendor '{vendor}', supported vendors are: {vendors}") \
              from None

def bits_to_mask(bits: tuple[int, int]) -> tuple[int, int]:
    """
    Convert a '(msb, lsb)' bit field into a mask and a shift.

    Args:
        bits: The bit field.

    Returns:
        A '(mask, shift)' tuple, where 'mask' selects the bit field in the register value and
        'shift' is the number of bits to shift the masked value right by.
    """

    bits_cnt = (bits[0] - bits[1]) + 1
    return ((1 << bits_cnt) - 1) << bits[1], bits[1]
