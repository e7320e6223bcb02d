#!/usr/bin/env python3
#
# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si
#
# Copyright (C) 2020-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause

"""Test the 'rapl-powertool' command-line tool."""

from  __future__ import annotations # Remove when switching to Python 3.10+.

import sys
import errno
import pytest
import yaml
import common
from common import EmulSystem
from rapllibs.msr import MSRDevice, RaplLayouts
from rapllibs.helperlibs.Exceptions import Error
from rapltool import _RaplPowertool

_INTEL = RaplLayouts.INTEL_LAYOUT
_AMD = RaplLayouts.AMD_LAYOUT

def _run(monkeypatch, arguments: str) -> int:
    """
    Run the tool with 'arguments' and return its exit code.

    Args:
        monkeypatch: The pytest 'monkeypatch' fixture, used for setting 'sys.argv'.
        arguments: The tool command-line arguments.

    Returns:
        The tool exit code.
    """

    monkeypatch.setattr(sys, "argv", [_RaplPowertool.TOOLNAME] + arguments.split())
    try:
        return _RaplPowertool.main()
    except SystemExit as err:
        return 0 if err.code is None else int(err.code)

def test_version(monkeypatch, capsys):
    """Verify the '--version' option."""

    assert _run(monkeypatch, "--version") == 0
    assert capsys.readouterr().out.strip() == f"rapl-powertool {_RaplPowertool._VERSION}"

def test_help(monkeypatch, capsys):
    """Verify the '-h' option."""

    assert _run(monkeypatch, "-h") == 0

    out = capsys.readouterr().out
    assert "--interval" in out
    assert "--duration" in out

@pytest.mark.parametrize("arguments", ["",
                                       "ARM",
                                       "INTEL -i abc",
                                       "INTEL -i -5",
                                       "INTEL -i 0",
                                       "INTEL -d 1.5",
                                       "INTEL --yaml",
                                       "INTEL -q --debug",
                                       "INTEL --bad-option"])
def test_usage_errors(monkeypatch, capsys, emul: EmulSystem, arguments: str):
    """Verify that command-line usage errors exit with code 1 and print nothing to stdout."""

    emul.add_cpus([0], _INTEL, common.INTEL_UNITS_REGVAL)

    assert _run(monkeypatch, f"{arguments} --root {emul.basepath}") == 1
    assert capsys.readouterr().out == ""

def test_bad_root(monkeypatch, tmp_path):
    """Verify that a bad '--root' option value is rejected."""

    assert _run(monkeypatch, f"INTEL -d 10 --root {tmp_path / 'nonexistent'}") == 1

def test_vendor_typo():
    """Verify that a mistyped vendor name results in a suggestion."""

    parser = _RaplPowertool.build_arguments_parser()

    with pytest.raises(Error) as excinfo:
        parser.parse_args(["INTLE"])

    assert "INTEL" in str(excinfo.value)

def test_get_mode():
    """Verify the '--interval' and '--duration' options precedence."""

    parser = _RaplPowertool.build_arguments_parser()

    mode = _RaplPowertool._get_mode(parser.parse_args(["AMD"]))
    assert mode == _RaplPowertool.EnergySampler.RateMode(interval_ms=1000)

    mode = _RaplPowertool._get_mode(parser.parse_args(["AMD", "-i", "200"]))
    assert mode == _RaplPowertool.EnergySampler.RateMode(interval_ms=200)

    mode = _RaplPowertool._get_mode(parser.parse_args(["AMD", "-i", "200", "-d", "300"]))
    assert mode == _RaplPowertool.EnergySampler.TotalMode(duration_ms=300)

    mode = _RaplPowertool._get_mode(parser.parse_args(["AMD", "-d", "0"]))
    assert mode == _RaplPowertool.EnergySampler.RateMode(interval_ms=1000)

def test_duration(monkeypatch, capsys, sleeper, emul: EmulSystem):
    """Verify energy measurement over a duration."""

    emul.add_cpus([0, 0, 1, 1], _AMD, common.AMD_UNITS_REGVAL)

    regaddr = _AMD["energy_regaddr"]
    sleeper.callbacks.append(lambda: emul.write_msr(2, regaddr, 3 * 65536))

    assert _run(monkeypatch, f"AMD --duration 500 --root {emul.basepath}") == 0
    assert sleeper.delays == [0.5]
    assert capsys.readouterr().out == "0,3\n"

def test_interval_interrupted(monkeypatch, capsys, sleeper, emul: EmulSystem):
    """Verify that power measurement runs until interrupted."""

    emul.add_cpus([0, 1], _INTEL, common.INTEL_UNITS_REGVAL)

    def _interrupt():
        """Emulate Ctrl-C."""
        raise KeyboardInterrupt()

    regaddr = _INTEL["energy_regaddr"]
    sleeper.callbacks.append(lambda: emul.write_msr(0, regaddr, 16384))
    sleeper.callbacks.append(lambda: None)
    sleeper.callbacks.append(_interrupt)

    assert _run(monkeypatch, f"INTEL -i 2000 --root {emul.basepath}") == -1
    assert sleeper.delays == [2.0] * 3
    assert capsys.readouterr().out == "0.5,0\n0,0\n"

def test_info(monkeypatch, capsys, emul: EmulSystem):
    """Verify the '--info' option."""

    emul.add_cpus([0, 1, 0, 1], _INTEL, common.INTEL_UNITS_REGVAL)

    assert _run(monkeypatch, f"INTEL --info --root {emul.basepath}") == 0

    out = capsys.readouterr().out
    assert "Package 0: CPU 0, physical package ID 0" in out
    assert "Package 1: CPU 1, physical package ID 1" in out
    assert f"Energy units: {0.5 ** 14:g} J" in out

def test_info_yaml(monkeypatch, capsys, emul: EmulSystem):
    """Verify the '--info --yaml' options."""

    emul.add_cpus([1, 1, 0], _AMD, common.AMD_UNITS_REGVAL)

    assert _run(monkeypatch, f"AMD --info --yaml --root {emul.basepath}") == 0

    info = yaml.safe_load(capsys.readouterr().out)
    assert info["vendor"] == "AMD"
    assert info["energy_regaddr"] == _AMD["energy_regaddr"]
    assert [(pinfo["cpu"], pinfo["package_id"]) for pinfo in info["packages"]] == [(0, 1), (2, 0)]
    for pinfo in info["packages"]:
        assert pinfo["energy_units"] == 0.5 ** 16

def test_cpu_not_found(monkeypatch, capsys, emul: EmulSystem):
    """Verify that a missing CPU results in exit code 2 and no measurement output."""

    emul.add_cpus([0], _INTEL, common.INTEL_UNITS_REGVAL)
    emul.set_package_id(1, 1)

    assert _run(monkeypatch, f"INTEL -d 10 --root {emul.basepath}") == 2
    assert capsys.readouterr().out == ""

def test_no_cpus(monkeypatch, emul: EmulSystem):
    """Verify that a system without CPU topology information results in exit code 2."""
    assert _run(monkeypatch, f"INTEL -d 10 --root {emul.basepath}") == 2

def test_msr_not_supported(monkeypatch, capsys, emul: EmulSystem):
    """Verify that a CPU without MSR support results in exit code 3."""

    emul.add_cpus([0], _INTEL, common.INTEL_UNITS_REGVAL)

    def _open(path, *_args, **_kwargs):
        """Fail opening the file the way the MSR driver does for CPUs without MSRs."""
        raise OSError(errno.EIO, "Input/output error", str(path))

    monkeypatch.setattr(MSRDevice, "open", _open, raising=False)

    assert _run(monkeypatch, f"INTEL -d 10 --root {emul.basepath}") == 3
    assert capsys.readouterr().out == ""

def test_io_errors(monkeypatch, capsys, emul: EmulSystem):
    """Verify that I/O failures result in exit code 127."""

    # The emulated MSR device file has no energy status MSR.
    emul.set_package_id(0, 0)
    emul.write_msr(0, _INTEL["units_regaddr"], common.INTEL_UNITS_REGVAL)

    assert _run(monkeypatch, f"INTEL -d 10 --root {emul.basepath}") == 127

    # The topology file contains garbage.
    emul.set_package_id(0, "garbage")

    assert _run(monkeypatch, f"INTEL -d 10 --root {emul.basepath}") == 127
    assert capsys.readouterr().out == ""

def test_too_many_packages(monkeypatch, emul: EmulSystem):
    """Verify that exceeding the packages count capacity exits with code 1."""

    package_ids = list(range(_RaplPowertool.PackageInfo.MAX_PACKAGES + 1))
    for cpu, package_id in enumerate(package_ids):
        emul.set_package_id(cpu, package_id)

    assert _run(monkeypatch, f"INTEL -d 10 --root {emul.basepath}") == 1
