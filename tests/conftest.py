#!/usr/bin/env python
#
# Copyright (C) 2022-2025 Intel Corporation
# SPDX-License-Identifier: BSD-3-Clause
#
# -*- coding: utf-8 -*-
# vim: ts=4 sw=4 tw=100 et ai si

"""This configuration file provides fixtures for emulated systems and for time control."""

from  __future__ import annotations # Remove when switching to Python 3.10+.

import time
from typing import Callable
import pytest
import common
from rapllibs.msr import MSRDevice

@pytest.fixture(name="emul")
def fixture_emul(tmp_path, monkeypatch) -> common.EmulSystem:
    """Return an empty emulated system and make 'MSRDevice' open its emulated MSR device files."""

    monkeypatch.setattr(MSRDevice, "open", common.open_msr_file, raising=False)
    return common.EmulSystem(tmp_path)

class SleepRecorder:
    """
    A 'time.sleep()' replacement. Record the requested delays and run the registered callbacks
    instead of sleeping. The callbacks emulate the energy consumed while sleeping.
    """

    def __init__(self):
        """Initialize a class instance."""

        self.delays: list[float] = []
        self.callbacks: list[Callable[[], None]] = []

    def __call__(self, secs: float):
        """Record the delay and run the next callback, if any."""

        self.delays.append(secs)
        if self.callbacks:
            self.callbacks.pop(0)()

@pytest.fixture(name="sleeper")
def fixture_sleeper(monkeypatch) -> SleepRecorder:
    """Replace 'time.sleep()' with a 'SleepRecorder' object and return it."""

    sleeper = SleepRecorder()
    monkeypatch.setattr(time, "sleep", sleeper)
    return sleeper
