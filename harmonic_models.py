# -*- coding: utf-8 -*-
########################
# harmonic_models.py
########################
# Purpose:
# - Core data models for the harmonic rhythm pipeline.
# - Defines player progress, rhythm rings and their beats, and the hit result/feedback values.
#
# Design notes:
# - No Qt usage. Plain dataclasses and enums.
# - Beat times are absolute milliseconds on the engine clock.
# - PlayerProgress is owned by the engine. Callers receive copies via copy_progress().
#
########################
# Interfaces:
# Public enums:
# - class SigilKind(enum.Enum): TEMPO | ECHO | FOCUS
# - class HitTiming(enum.Enum): PERFECT | MISS
#
# Public dataclasses:
# - PlayerProgress(streak, harmonic_cores, tuning_fork_level, metronome_purchased, chorus_level,
#                  quantized_ripples_level, sigils, echo_accumulator)
# - Beat(time_ms: float, is_hit: bool = False)
# - RhythmRing(ring_id: int, beats: list[Beat], spawn_time_ms: float, bpm: float, drift: float)
#   - last_beat() -> Beat
# - HitFeedback(text: str, time_ms: float, x: float, y: float)
# - HitResult(timing: HitTiming, streak_delta: int, reward_units: int, currency_gained: int, feedback_text: Optional[str])
# - NextBeat(time_ms: float, progress: float)
#
# Public functions:
# - copy_progress(progress: PlayerProgress) -> PlayerProgress
#
########################

from __future__ import annotations

from dataclasses import dataclass, field
import enum
from typing import Dict, List, Optional


class SigilKind(enum.Enum):
    TEMPO = "tempo"
    ECHO = "echo"
    FOCUS = "focus"


class HitTiming(enum.Enum):
    PERFECT = "perfect"
    MISS = "miss"


def _default_sigils() -> Dict[SigilKind, int]:
    return {kind: 0 for kind in SigilKind}


@dataclass
class PlayerProgress:
    streak: int = 0
    harmonic_cores: int = 0
    tuning_fork_level: int = 0
    metronome_purchased: bool = False
    chorus_level: int = 0
    quantized_ripples_level: int = 0
    sigils: Dict[SigilKind, int] = field(default_factory=_default_sigils)
    # Fractional echo carryover, kept in [0, 1) between extractions.
    echo_accumulator: float = 0.0

    def sigil_level(self, kind: SigilKind) -> int:
        return int(self.sigils.get(kind, 0))


def copy_progress(progress: PlayerProgress) -> PlayerProgress:
    return PlayerProgress(
        streak=int(progress.streak),
        harmonic_cores=int(progress.harmonic_cores),
        tuning_fork_level=int(progress.tuning_fork_level),
        metronome_purchased=bool(progress.metronome_purchased),
        chorus_level=int(progress.chorus_level),
        quantized_ripples_level=int(progress.quantized_ripples_level),
        sigils={kind: progress.sigil_level(kind) for kind in SigilKind},
        echo_accumulator=float(progress.echo_accumulator),
    )


@dataclass
class Beat:
    time_ms: float
    is_hit: bool = False


@dataclass
class RhythmRing:
    ring_id: int
    beats: List[Beat]
    spawn_time_ms: float
    bpm: float
    drift: float

    def last_beat(self) -> Beat:
        return self.beats[-1]


@dataclass(frozen=True)
class HitFeedback:
    text: str
    time_ms: float
    x: float
    y: float


@dataclass(frozen=True)
class HitResult:
    timing: HitTiming
    streak_delta: int
    reward_units: int
    currency_gained: int
    feedback_text: Optional[str] = None

    @property
    def is_hit(self) -> bool:
        return self.timing == HitTiming.PERFECT


@dataclass(frozen=True)
class NextBeat:
    time_ms: float
    progress: float
