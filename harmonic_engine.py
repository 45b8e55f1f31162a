# -*- coding: utf-8 -*-
########################
# harmonic_engine.py
########################
# Purpose:
# - Facade over the harmonic rhythm pipeline.
# - Owns PlayerProgress and wires RhythmScheduler + HitJudge + ProgressionEngine + LifecycleManager
#   + HarmonicOverlay behind one object the host loop talks to.
#
# Design notes:
# - No Qt usage. Pure gameplay logic.
# - TimingModel is the single source of time. Every time-taking call also accepts an explicit now_ms.
# - In manual timing mode tick(elapsed_ms) advances the clock before sweeping.
# - Audio cues are fire-and-forget through presentation.play_cue.
# - Getters return values or copies, never live references into PlayerProgress or rings.
#
########################
# Interfaces:
# Public classes:
# - class HarmonicEngine
#   - __init__(*, harmonic_config=None, timing=None, audio=None, rng=None, initial_progress=None)
#   - request_ripple_spawn(now_ms: Optional[float] = None) -> Optional[int]
#   - resolve_input(now_ms: Optional[float] = None, *, x: float = 0.0, y: float = 0.0) -> HitResult
#   - tick(elapsed_ms: float, now_ms: Optional[float] = None) -> list[int]
#   - draw(sink, *, ball_x, ball_y, ball_radius, now_ms: Optional[float] = None) -> None
#   - streak() / harmonic_cores() / timing_window_ms() / streak_multiplier() / has_active_ring() / ring_count()
#   - next_beat(now_ms: Optional[float] = None) -> Optional[NextBeat]
#   - tuning_fork_cost() / chorus_cost() / quantized_ripples_cost() / metronome_cost() / sigil_cost(kind)
#   - buy_tuning_fork(wallet) / buy_metronome(wallet) / buy_chorus(wallet) / buy_quantized_ripples(wallet) -> bool
#   - buy_sigil(kind) -> bool
#   - soft_reset() / prestige_carryover()
#   - progress_snapshot() -> PlayerProgress
#   - export_state() -> dict
#   - import_state(payload: Mapping[str, Any]) -> None
#
# Inputs:
# - Host loop calls: spawn requests, taps, frame ticks, draw requests, shop purchases.
#
# Outputs:
# - HitResult values, audio cues, draw primitives, progress snapshots.
#
########################

from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Mapping, Optional

import config
import harmonic_models
import hit_judge
import lifecycle
import presentation
import progress_snapshot
import progression
import rhythm_scheduler
import timing_model

logger = logging.getLogger(__name__)


class HarmonicEngine:
    def __init__(
        self,
        *,
        harmonic_config: Optional[config.HarmonicConfig] = None,
        timing: Optional[timing_model.TimingModel] = None,
        audio: Optional[presentation.AudioCueSink] = None,
        rng: Optional[random.Random] = None,
        initial_progress: Optional[harmonic_models.PlayerProgress] = None,
    ) -> None:
        self._config = harmonic_config or config.HarmonicConfig()
        self._timing = timing or timing_model.TimingModel.wall()
        self._audio: presentation.AudioCueSink = audio or presentation.NullAudioCueSink()
        self._progress = (
            harmonic_models.copy_progress(initial_progress)
            if initial_progress is not None
            else harmonic_models.PlayerProgress()
        )

        self._scheduler = rhythm_scheduler.RhythmScheduler(self._config.rhythm, rng=rng)
        self._progression = progression.ProgressionEngine(self._progress, self._config.economy)
        self._judge = hit_judge.HitJudge(
            self._scheduler,
            self._progression,
            self._current_progress,
            self._config.timing,
        )
        self._lifecycle = lifecycle.LifecycleManager(
            self._scheduler,
            self._judge,
            self._current_progress,
            self._config.timing,
            audio=self._audio,
        )
        self._overlay = presentation.HarmonicOverlay(self._config.timing)

    def _current_progress(self) -> harmonic_models.PlayerProgress:
        return self._progress

    def _now(self, now_ms: Optional[float]) -> float:
        if now_ms is not None:
            return float(now_ms)
        return self._timing.now_ms()

    @property
    def timing_model(self) -> timing_model.TimingModel:
        return self._timing

    # -----------------
    # Gameplay
    # -----------------

    def request_ripple_spawn(self, now_ms: Optional[float] = None) -> Optional[int]:
        return self._scheduler.request_ripple_spawn(
            now_ms=self._now(now_ms),
            quantized_ripples_level=self._progress.quantized_ripples_level,
        )

    def resolve_input(self, now_ms: Optional[float] = None, *, x: float = 0.0, y: float = 0.0) -> harmonic_models.HitResult:
        result = self._judge.resolve_input(now_ms=self._now(now_ms), x=x, y=y)
        if result.is_hit:
            presentation.play_cue(self._audio, presentation.CUE_PERFECT_HIT)
        elif result.streak_delta < 0:
            presentation.play_cue(self._audio, presentation.CUE_MISS)
        return result

    def tick(self, elapsed_ms: float, now_ms: Optional[float] = None) -> List[int]:
        if now_ms is None and self._timing.is_manual():
            now = self._timing.advance_ms(elapsed_ms)
        else:
            now = self._now(now_ms)
        return self._lifecycle.tick(elapsed_ms=elapsed_ms, now_ms=now)

    def draw(
        self,
        sink: presentation.DrawSink,
        *,
        ball_x: float,
        ball_y: float,
        ball_radius: float,
        now_ms: Optional[float] = None,
    ) -> None:
        now = self._now(now_ms)
        self._overlay.draw(
            sink,
            ball_x=ball_x,
            ball_y=ball_y,
            ball_radius=ball_radius,
            now_ms=now,
            window_ms=self.timing_window_ms(),
            next_beat=self._scheduler.next_beat(now_ms=now),
            metronome_purchased=self._progress.metronome_purchased,
            feedback=self._judge.active_feedback(now_ms=now),
        )

    # -----------------
    # Getters
    # -----------------

    def streak(self) -> int:
        return self._progression.streak()

    def harmonic_cores(self) -> int:
        return self._progression.harmonic_cores()

    def timing_window_ms(self) -> float:
        return self._judge.timing_window_ms()

    def streak_multiplier(self) -> float:
        return self._progression.streak_multiplier()

    def has_active_ring(self) -> bool:
        return self._scheduler.has_active_ring()

    def ring_count(self) -> int:
        return len(self._scheduler.rings())

    def next_beat(self, now_ms: Optional[float] = None) -> Optional[harmonic_models.NextBeat]:
        return self._scheduler.next_beat(now_ms=self._now(now_ms))

    def last_feedback(self) -> Optional[harmonic_models.HitFeedback]:
        return self._judge.last_feedback()

    def tuning_fork_cost(self) -> int:
        return self._progression.tuning_fork_cost()

    def chorus_cost(self) -> int:
        return self._progression.chorus_cost()

    def quantized_ripples_cost(self) -> int:
        return self._progression.quantized_ripples_cost()

    def metronome_cost(self) -> int:
        return self._progression.metronome_cost()

    def sigil_cost(self, kind: harmonic_models.SigilKind) -> int:
        return self._progression.sigil_cost(kind)

    def can_afford(self, wallet: progression.PointsWallet, cost: float) -> bool:
        return self._progression.can_afford(wallet, cost)

    def can_afford_sigil(self, kind: harmonic_models.SigilKind) -> bool:
        return self._progression.can_afford_sigil(kind)

    # -----------------
    # Purchases
    # -----------------

    def _after_purchase(self, success: bool) -> bool:
        if success:
            presentation.play_cue(self._audio, presentation.CUE_PURCHASE)
        return success

    def buy_tuning_fork(self, wallet: progression.PointsWallet) -> bool:
        return self._after_purchase(self._progression.buy_tuning_fork(wallet))

    def buy_metronome(self, wallet: progression.PointsWallet) -> bool:
        return self._after_purchase(self._progression.buy_metronome(wallet))

    def buy_chorus(self, wallet: progression.PointsWallet) -> bool:
        return self._after_purchase(self._progression.buy_chorus(wallet))

    def buy_quantized_ripples(self, wallet: progression.PointsWallet) -> bool:
        return self._after_purchase(self._progression.buy_quantized_ripples(wallet))

    def buy_sigil(self, kind: harmonic_models.SigilKind) -> bool:
        return self._after_purchase(self._progression.buy_sigil(kind))

    # -----------------
    # Resets and state
    # -----------------

    def soft_reset(self) -> None:
        self._lifecycle.soft_reset()

    def prestige_carryover(self) -> None:
        self._lifecycle.prestige_carryover(tuning_fork_keep=int(self._config.economy.prestige_tuning_fork_keep))

    def progress_snapshot(self) -> harmonic_models.PlayerProgress:
        return harmonic_models.copy_progress(self._progress)

    def export_state(self) -> Dict[str, Any]:
        return progress_snapshot.export_progress(self._progress)

    def import_state(self, payload: Mapping[str, Any]) -> None:
        self._progress = progress_snapshot.import_progress(payload)
        self._progression.attach_progress(self._progress)
        logger.info("Imported progress snapshot (streak=%d, cores=%d)", self._progress.streak, self._progress.harmonic_cores)


def _run_unit_tests() -> None:
    timing = timing_model.TimingModel.manual(0.0)
    engine = HarmonicEngine(timing=timing, rng=random.Random(11))

    ring_id = engine.request_ripple_spawn()
    assert ring_id == 0
    assert engine.request_ripple_spawn() is None

    first_beat = engine.next_beat()
    assert first_beat is not None
    timing.set_now_ms(first_beat.time_ms)
    result = engine.resolve_input()
    assert result.is_hit
    assert engine.streak() == 1

    engine.tick(20000.0)
    assert not engine.has_active_ring()
    assert engine.request_ripple_spawn() == 1

    saved = engine.export_state()
    engine.prestige_carryover()
    assert engine.streak() == 0
    engine.import_state(saved)
    assert engine.streak() == 1


if __name__ == "__main__":
    _run_unit_tests()
    print("harmonic_engine.py: ok")
