# -*- coding: utf-8 -*-
########################
# hit_judge.py
########################
# Purpose:
# - Hit judgement for player taps.
# - Matches a tap time to the globally nearest pending beat inside the timing window.
# - Applies the outcome to the streak/economy model and records transient feedback.
#
# Design notes:
# - No Qt usage. Pure gameplay logic.
# - Scheduler owns the rings; HitJudge marks beats through RhythmScheduler.mark_hit.
# - Game logic only sees PERFECT or MISS. The finer feedback label is cosmetic.
# - A miss with streak 0 is a silent no-op and leaves feedback untouched.
#
########################
# Interfaces:
# Public functions:
# - feedback_label(distance_ms: float, window_ms: float) -> str
#
# Public classes:
# - class HitJudge
#   - __init__(scheduler, progression, progress_provider, timing_config: Optional[config.TimingConfig] = None)
#   - timing_window_ms() -> float
#   - resolve_input(*, now_ms: float, x: float = 0.0, y: float = 0.0) -> HitResult
#   - last_feedback() -> Optional[HitFeedback]
#   - active_feedback(*, now_ms: float) -> Optional[HitFeedback]
#   - clear_feedback() -> None
#   - expire_feedback(*, now_ms: float) -> None
#
# Inputs:
# - Tap time (engine clock ms) and tap coordinates for feedback placement.
#
# Outputs:
# - HitResult for game logic and audio cue selection.
# - Mutates Beat.is_hit and PlayerProgress via ProgressionEngine.
#
########################

from __future__ import annotations

from typing import Callable, Optional

import config
import harmonic_models
import progression
import rhythm_scheduler
import timing_model

FEEDBACK_PERFECT_STRONG = "PERFECT!!"
FEEDBACK_PERFECT = "PERFECT!"
FEEDBACK_GOOD = "GOOD"
FEEDBACK_MISS = "MISS"

_STRONG_FRACTION = 0.3
_WEAK_FRACTION = 0.7


def feedback_label(distance_ms: float, window_ms: float) -> str:
    distance = abs(float(distance_ms))
    window = float(window_ms)
    if distance > window * _WEAK_FRACTION:
        return FEEDBACK_GOOD
    if distance < window * _STRONG_FRACTION:
        return FEEDBACK_PERFECT_STRONG
    return FEEDBACK_PERFECT


class HitJudge:
    def __init__(
        self,
        scheduler: rhythm_scheduler.RhythmScheduler,
        progression_engine: progression.ProgressionEngine,
        progress_provider: Callable[[], harmonic_models.PlayerProgress],
        timing_config: Optional[config.TimingConfig] = None,
    ) -> None:
        self._scheduler = scheduler
        self._progression = progression_engine
        self._progress_provider = progress_provider
        self._timing_config = timing_config or config.TimingConfig()
        self._last_feedback: Optional[harmonic_models.HitFeedback] = None

    def timing_window_ms(self) -> float:
        return timing_model.timing_window_ms(self._progress_provider().tuning_fork_level, self._timing_config)

    def last_feedback(self) -> Optional[harmonic_models.HitFeedback]:
        return self._last_feedback

    def active_feedback(self, *, now_ms: float) -> Optional[harmonic_models.HitFeedback]:
        feedback = self._last_feedback
        if feedback is None:
            return None
        if float(now_ms) - float(feedback.time_ms) >= float(self._timing_config.feedback_duration_ms):
            return None
        return feedback

    def clear_feedback(self) -> None:
        self._last_feedback = None

    def expire_feedback(self, *, now_ms: float) -> None:
        if self.active_feedback(now_ms=now_ms) is None:
            self._last_feedback = None

    def resolve_input(self, *, now_ms: float, x: float = 0.0, y: float = 0.0) -> harmonic_models.HitResult:
        now = float(now_ms)
        window = self.timing_window_ms()

        found = self._scheduler.find_nearest_pending_beat(target_time_ms=now, max_window_ms=window)
        if found is not None:
            _ring, beat = found
            distance = abs(float(beat.time_ms) - now)
            self._scheduler.mark_hit(beat)
            reward_units, cores_gained = self._progression.register_hit()

            label = feedback_label(distance, window)
            self._last_feedback = harmonic_models.HitFeedback(text=label, time_ms=now, x=float(x), y=float(y))
            return harmonic_models.HitResult(
                timing=harmonic_models.HitTiming.PERFECT,
                streak_delta=1,
                reward_units=reward_units,
                currency_gained=cores_gained,
                feedback_text=label,
            )

        if self._progression.streak() <= 0:
            return harmonic_models.HitResult(
                timing=harmonic_models.HitTiming.MISS,
                streak_delta=0,
                reward_units=0,
                currency_gained=0,
            )

        streak_delta = self._progression.register_miss()
        self._last_feedback = harmonic_models.HitFeedback(text=FEEDBACK_MISS, time_ms=now, x=float(x), y=float(y))
        return harmonic_models.HitResult(
            timing=harmonic_models.HitTiming.MISS,
            streak_delta=streak_delta,
            reward_units=0,
            currency_gained=0,
            feedback_text=FEEDBACK_MISS,
        )


def _run_unit_tests() -> None:
    import random

    progress = harmonic_models.PlayerProgress()
    scheduler = rhythm_scheduler.RhythmScheduler(rng=random.Random(3))
    progression_engine = progression.ProgressionEngine(progress)
    judge = HitJudge(scheduler, progression_engine, lambda: progress)

    stray = judge.resolve_input(now_ms=0.0)
    assert stray.timing == harmonic_models.HitTiming.MISS
    assert stray.streak_delta == 0
    assert judge.last_feedback() is None

    ring_id = scheduler.request_ripple_spawn(now_ms=0.0)
    assert ring_id is not None
    ring = scheduler.ring(ring_id)
    assert ring is not None

    hit = judge.resolve_input(now_ms=ring.beats[0].time_ms)
    assert hit.is_hit
    assert hit.feedback_text == FEEDBACK_PERFECT_STRONG
    assert progress.streak == 1

    repeat = judge.resolve_input(now_ms=ring.beats[0].time_ms)
    assert repeat.timing == harmonic_models.HitTiming.MISS
    assert progress.streak == 0

    assert feedback_label(100.0, 110.0) == FEEDBACK_GOOD
    assert feedback_label(50.0, 110.0) == FEEDBACK_PERFECT


if __name__ == "__main__":
    _run_unit_tests()
    print("hit_judge.py: ok")
