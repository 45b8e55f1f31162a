# -*- coding: utf-8 -*-
########################
# timing_model.py
########################
# Purpose:
# - Single source of truth for engine time in milliseconds.
# - Owns the timing window formula shared by the judge, the lifecycle sweep and the overlay.
#
# Design notes:
# - No Qt usage. Keep this module pure and deterministic.
# - Wall mode reads a monotonic clock. Manual mode is driven by the host or by tests.
# - Manual time never moves backwards.
#
########################
# Interfaces:
# Public dataclasses:
# - TimingSnapshot(now_ms: float, is_manual: bool)
#
# Public classes:
# - class TimingModel
#   - wall() -> TimingModel
#   - manual(start_ms: float = 0.0) -> TimingModel
#   - now_ms() -> float
#   - is_manual() -> bool
#   - set_now_ms(now_ms: float) -> None
#   - advance_ms(delta_ms: float) -> float
#   - snapshot() -> TimingSnapshot
#
# Public functions:
# - timing_window_ms(tuning_fork_level: int, timing_config: Optional[config.TimingConfig] = None) -> float
#
# Inputs:
# - Host loop frame deltas (manual mode) or the process monotonic clock (wall mode).
#
# Outputs:
# - now_ms used by RhythmScheduler, HitJudge, LifecycleManager and HarmonicOverlay.
#
########################

from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Callable, Optional

import config


def timing_window_ms(tuning_fork_level: int, timing_config: Optional[config.TimingConfig] = None) -> float:
    timing = timing_config or config.TimingConfig()
    bonus = min(float(tuning_fork_level) * float(timing.window_step_ms), float(timing.max_window_bonus_ms))
    return float(timing.base_window_ms) + bonus


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass(frozen=True)
class TimingSnapshot:
    now_ms: float
    is_manual: bool


class TimingModel:
    def __init__(self, time_source: Optional[Callable[[], float]] = None, *, start_ms: float = 0.0) -> None:
        self._time_source = time_source
        self._manual_now_ms = float(start_ms)

    @classmethod
    def wall(cls) -> "TimingModel":
        return cls(time_source=_monotonic_ms)

    @classmethod
    def manual(cls, start_ms: float = 0.0) -> "TimingModel":
        return cls(time_source=None, start_ms=start_ms)

    def is_manual(self) -> bool:
        return self._time_source is None

    def now_ms(self) -> float:
        if self._time_source is not None:
            return float(self._time_source())
        return float(self._manual_now_ms)

    def set_now_ms(self, now_ms: float) -> None:
        if not self.is_manual():
            raise RuntimeError("set_now_ms() requires a manual TimingModel")
        value = float(now_ms)
        if value < self._manual_now_ms:
            value = self._manual_now_ms
        self._manual_now_ms = value

    def advance_ms(self, delta_ms: float) -> float:
        self.set_now_ms(self._manual_now_ms + max(0.0, float(delta_ms)))
        return self.now_ms()

    def snapshot(self) -> TimingSnapshot:
        return TimingSnapshot(now_ms=self.now_ms(), is_manual=self.is_manual())


def _run_unit_tests() -> None:
    assert timing_window_ms(0) == 110.0
    assert timing_window_ms(3) == 140.0
    assert timing_window_ms(6) == 170.0
    assert timing_window_ms(7) == 170.0

    model = TimingModel.manual(1000.0)
    assert model.now_ms() == 1000.0
    model.advance_ms(16.0)
    assert abs(model.now_ms() - 1016.0) < 1e-9
    model.set_now_ms(10.0)
    assert abs(model.now_ms() - 1016.0) < 1e-9

    wall = TimingModel.wall()
    first = wall.now_ms()
    assert wall.now_ms() >= first
    assert not wall.snapshot().is_manual


if __name__ == "__main__":
    _run_unit_tests()
    print("timing_model.py: ok")
