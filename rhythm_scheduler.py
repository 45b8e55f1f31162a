# -*- coding: utf-8 -*-
########################
# rhythm_scheduler.py
########################
# Purpose:
# - Creates rhythm rings for spawned ripples and owns their beat schedules.
# - Enforces the single-active-ring gate.
# - Provides queries for nearest pending beat, next beat, and ring retirement.
#
# Design notes:
# - No Qt usage. Pure gameplay logic.
# - Leaf module: depends on nothing else in the engine besides models and config.
# - One drift draw per ring, applied to every beat of that ring.
# - Iteration order is deterministic: ring insertion order, then beat order.
# - The random source is injected so ring generation is reproducible under test.
#
########################
# Interfaces:
# Public classes:
# - class RhythmScheduler
#   - __init__(rhythm_config: Optional[config.RhythmConfig] = None, rng: Optional[random.Random] = None)
#   - has_active_ring() -> bool
#   - rings() -> list[RhythmRing]
#   - ring(ring_id: int) -> Optional[RhythmRing]
#   - max_drift_fraction(quantized_ripples_level: int) -> float
#   - request_ripple_spawn(*, now_ms: float, quantized_ripples_level: int = 0) -> Optional[int]
#   - pending_beats() -> list[tuple[RhythmRing, Beat]]
#   - find_nearest_pending_beat(*, target_time_ms: float, max_window_ms: float) -> Optional[tuple[RhythmRing, Beat]]
#   - mark_hit(beat: Beat) -> None
#   - next_beat(*, now_ms: float) -> Optional[NextBeat]
#   - retire_ring(ring_id: int) -> None
#   - clear() -> None
#
# Inputs:
# - Spawn requests and time parameters from HarmonicEngine.
#
# Outputs:
# - RhythmRing views for HitJudge, LifecycleManager and HarmonicOverlay.
#
########################

from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Tuple

import config
import harmonic_models

logger = logging.getLogger(__name__)


class RhythmScheduler:
    def __init__(
        self,
        rhythm_config: Optional[config.RhythmConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._config = rhythm_config or config.RhythmConfig()
        self._rng = rng or random.Random()
        self._rings: Dict[int, harmonic_models.RhythmRing] = {}
        self._next_ring_id = 0
        self._has_active_ring = False

    def has_active_ring(self) -> bool:
        return bool(self._has_active_ring)

    def rings(self) -> List[harmonic_models.RhythmRing]:
        return list(self._rings.values())

    def ring(self, ring_id: int) -> Optional[harmonic_models.RhythmRing]:
        return self._rings.get(int(ring_id))

    def beat_interval_ms(self) -> float:
        return 60000.0 / float(self._config.base_bpm)

    def max_drift_fraction(self, quantized_ripples_level: int) -> float:
        reduction = float(quantized_ripples_level) * float(self._config.drift_reduction_per_level)
        reduction = min(reduction, float(self._config.max_drift_reduction))
        return float(self._config.base_drift_fraction) * (1.0 - reduction)

    def request_ripple_spawn(self, *, now_ms: float, quantized_ripples_level: int = 0) -> Optional[int]:
        if self._has_active_ring:
            return None

        ring_id = self._next_ring_id
        self._next_ring_id += 1

        interval_ms = self.beat_interval_ms()
        max_drift = self.max_drift_fraction(quantized_ripples_level)
        drift = 1.0 + (self._rng.random() * 2.0 - 1.0) * max_drift

        spawn_time_ms = float(now_ms)
        # First beat lands one interval after the spawn.
        beats = [
            harmonic_models.Beat(time_ms=spawn_time_ms + interval_ms * beat_index * drift)
            for beat_index in range(1, int(self._config.beats_per_ring) + 1)
        ]

        self._rings[ring_id] = harmonic_models.RhythmRing(
            ring_id=ring_id,
            beats=beats,
            spawn_time_ms=spawn_time_ms,
            bpm=float(self._config.base_bpm) * drift,
            drift=drift,
        )
        self._has_active_ring = True
        logger.debug("Spawned ring %d at %.1fms with drift %.4f", ring_id, spawn_time_ms, drift)
        return ring_id

    def pending_beats(self) -> List[Tuple[harmonic_models.RhythmRing, harmonic_models.Beat]]:
        pending: List[Tuple[harmonic_models.RhythmRing, harmonic_models.Beat]] = []
        for rhythm_ring in self._rings.values():
            for beat in rhythm_ring.beats:
                if not beat.is_hit:
                    pending.append((rhythm_ring, beat))
        return pending

    def find_nearest_pending_beat(
        self,
        *,
        target_time_ms: float,
        max_window_ms: float,
    ) -> Optional[Tuple[harmonic_models.RhythmRing, harmonic_models.Beat]]:
        target = float(target_time_ms)
        window = float(max_window_ms)

        best: Optional[Tuple[harmonic_models.RhythmRing, harmonic_models.Beat]] = None
        best_distance = 0.0

        for rhythm_ring, beat in self.pending_beats():
            distance = abs(float(beat.time_ms) - target)
            if not distance <= window:
                continue
            # Strict comparison: on an exact tie the first beat found wins.
            if best is None or distance < best_distance:
                best = (rhythm_ring, beat)
                best_distance = distance

        return best

    def mark_hit(self, beat: harmonic_models.Beat) -> None:
        if beat.is_hit:
            return
        beat.is_hit = True

    def next_beat(self, *, now_ms: float) -> Optional[harmonic_models.NextBeat]:
        earliest: Optional[Tuple[harmonic_models.RhythmRing, harmonic_models.Beat]] = None
        for rhythm_ring, beat in self.pending_beats():
            if earliest is None or beat.time_ms < earliest[1].time_ms:
                earliest = (rhythm_ring, beat)

        if earliest is None:
            return None

        rhythm_ring, beat = earliest
        interval_ms = 60000.0 / float(rhythm_ring.bpm)
        time_since_spawn = float(now_ms) - float(rhythm_ring.spawn_time_ms)
        progress = (time_since_spawn % interval_ms) / interval_ms
        return harmonic_models.NextBeat(time_ms=float(beat.time_ms), progress=progress)

    def retire_ring(self, ring_id: int) -> None:
        if self._rings.pop(int(ring_id), None) is None:
            return
        self._has_active_ring = False
        logger.debug("Retired ring %d", ring_id)

    def clear(self) -> None:
        self._rings.clear()
        self._has_active_ring = False


def _run_unit_tests() -> None:
    scheduler = RhythmScheduler(rng=random.Random(7))

    first = scheduler.request_ripple_spawn(now_ms=1000.0)
    assert first == 0
    assert scheduler.has_active_ring()
    assert scheduler.request_ripple_spawn(now_ms=1100.0) is None

    ring = scheduler.ring(first)
    assert ring is not None
    assert len(ring.beats) == 12
    assert abs(ring.drift - 1.0) <= 0.03 + 1e-12
    assert abs(ring.beats[0].time_ms - (1000.0 + 400.0 * ring.drift)) < 1e-9

    found = scheduler.find_nearest_pending_beat(target_time_ms=ring.beats[2].time_ms + 5.0, max_window_ms=110.0)
    assert found is not None and found[1] is ring.beats[2]

    scheduler.mark_hit(ring.beats[2])
    assert len(scheduler.pending_beats()) == 11

    scheduler.retire_ring(first)
    assert not scheduler.has_active_ring()
    assert scheduler.request_ripple_spawn(now_ms=9000.0) == 1


if __name__ == "__main__":
    _run_unit_tests()
    print("rhythm_scheduler.py: ok")
