# -*- coding: utf-8 -*-
########################
# lifecycle.py
########################
# Purpose:
# - Periodic sweep that retires finished or abandoned rhythm rings.
# - Soft reset and prestige carryover of PlayerProgress.
# - Metronome ticks for beats crossed since the previous sweep.
#
# Design notes:
# - No Qt usage. Pure gameplay logic.
# - A ring retires when its last beat is hit, or when now is more than grace_windows timing windows
#   past the last beat. Retiring a ring clears the single-active-ring gate.
# - Resets mutate PlayerProgress in place so every component keeps a valid reference.
#
########################
# Interfaces:
# Public classes:
# - class LifecycleManager
#   - __init__(scheduler, judge, progress_provider, timing_config=None, audio=None)
#   - tick(*, elapsed_ms: float, now_ms: float) -> list[int]   # retired ring ids
#   - soft_reset() -> None
#   - prestige_carryover(*, tuning_fork_keep: int = 2) -> None
#
# Inputs:
# - Host loop ticks (elapsed_ms, now_ms).
#
# Outputs:
# - Ring retirement in RhythmScheduler, metronome cues on the AudioCueSink,
#   PlayerProgress resets.
#
########################

from __future__ import annotations

import logging
from typing import Callable, List, Optional

import config
import harmonic_models
import hit_judge
import presentation
import rhythm_scheduler

logger = logging.getLogger(__name__)


class LifecycleManager:
    def __init__(
        self,
        scheduler: rhythm_scheduler.RhythmScheduler,
        judge: hit_judge.HitJudge,
        progress_provider: Callable[[], harmonic_models.PlayerProgress],
        timing_config: Optional[config.TimingConfig] = None,
        audio: Optional[presentation.AudioCueSink] = None,
    ) -> None:
        self._scheduler = scheduler
        self._judge = judge
        self._progress_provider = progress_provider
        self._timing_config = timing_config or config.TimingConfig()
        self._audio: presentation.AudioCueSink = audio or presentation.NullAudioCueSink()
        self._last_tick_ms: Optional[float] = None

    def tick(self, *, elapsed_ms: float, now_ms: float) -> List[int]:
        now = float(now_ms)
        previous = self._last_tick_ms if self._last_tick_ms is not None else now - max(0.0, float(elapsed_ms))
        self._last_tick_ms = now

        if self._progress_provider().metronome_purchased:
            # Ticks follow the schedule, hit or not.
            for rhythm_ring in self._scheduler.rings():
                for beat in rhythm_ring.beats:
                    if previous < float(beat.time_ms) <= now:
                        presentation.play_cue(self._audio, presentation.CUE_METRONOME_TICK)

        grace_ms = self._judge.timing_window_ms() * float(self._timing_config.grace_windows)
        retired: List[int] = []
        for rhythm_ring in self._scheduler.rings():
            last_beat = rhythm_ring.last_beat()
            if last_beat.is_hit or now > float(last_beat.time_ms) + grace_ms:
                self._scheduler.retire_ring(rhythm_ring.ring_id)
                retired.append(rhythm_ring.ring_id)

        self._judge.expire_feedback(now_ms=now)
        return retired

    def soft_reset(self) -> None:
        self._progress_provider().streak = 0
        self._scheduler.clear()
        self._judge.clear_feedback()
        self._last_tick_ms = None
        logger.info("Soft reset: streak cleared, rings dropped")

    def prestige_carryover(self, *, tuning_fork_keep: int = 2) -> None:
        progress = self._progress_provider()
        progress.streak = 0
        progress.tuning_fork_level = min(int(progress.tuning_fork_level), int(tuning_fork_keep))
        progress.chorus_level = 0
        progress.quantized_ripples_level = 0
        progress.echo_accumulator = 0.0
        # harmonic_cores, metronome_purchased and sigils carry over untouched.

        self._scheduler.clear()
        self._judge.clear_feedback()
        self._last_tick_ms = None
        logger.info("Prestige carryover: tuning fork kept at level %d", progress.tuning_fork_level)
