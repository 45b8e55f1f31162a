# -*- coding: utf-8 -*-
########################
# presentation.py
########################
# Purpose:
# - Capability interfaces the engine uses for audio and drawing side effects.
# - HarmonicOverlay decides what to draw (metronome ring, beat pulse, countdown, feedback text)
#   and when, and emits it as primitive calls on a DrawSink.
#
########################
# Key Logic:
# - Metronome overlay only when the metronome is owned and a pending beat exists.
#   - ring at 2.5x the ball radius while the beat is within two timing windows
#   - green/yellow inside the window, grey outside
#   - white pulse within 150ms of the beat
#   - countdown label during the last 500ms before the beat
# - Feedback text drifts 40px upward and fades over the feedback lifetime.
# - Strict boundaries:
#   - No engine state is read back from the sink.
#   - Audio failures are logged and swallowed by play_cue.
#
########################
# Interfaces:
# Public constants:
# - CUE_PERFECT_HIT, CUE_MISS, CUE_PURCHASE, CUE_METRONOME_TICK
#
# Public protocols:
# - AudioCueSink: play(cue_name: str) -> None
# - DrawSink: set_stroke(color, width), set_alpha(alpha), reset_alpha(), circle(x, y, radius, fill),
#             text(text, x, y, color, font, align)
#
# Public classes:
# - class NullAudioCueSink
# - class HarmonicOverlay
#   - __init__(timing_config: Optional[config.TimingConfig] = None)
#   - draw(sink, *, ball_x, ball_y, ball_radius, now_ms, window_ms, next_beat, metronome_purchased, feedback) -> None
#
# Public functions:
# - play_cue(audio: AudioCueSink, cue_name: str) -> None
#
########################

from __future__ import annotations

import logging
import math
from typing import Optional, Protocol, runtime_checkable

import config
import harmonic_models

logger = logging.getLogger(__name__)

CUE_PERFECT_HIT = "perfect_hit"
CUE_MISS = "miss"
CUE_PURCHASE = "purchase"
CUE_METRONOME_TICK = "metronome_tick"

COLOR_IN_WINDOW_STRONG = "#00ff00"
COLOR_IN_WINDOW = "#ffff00"
COLOR_IDLE_RING = "#666666"
COLOR_PULSE = "#ffffff"
COLOR_MISS = "#ff0000"

_RING_RADIUS_FACTOR = 2.5
_PULSE_RANGE_MS = 150.0
_PULSE_GROWTH_PIXELS = 15.0
_COUNTDOWN_RANGE_MS = 500.0
_FEEDBACK_RISE_PIXELS = 40.0
_FEEDBACK_OFFSET_PIXELS = 60.0


@runtime_checkable
class AudioCueSink(Protocol):
    def play(self, cue_name: str) -> None:
        ...


@runtime_checkable
class DrawSink(Protocol):
    def set_stroke(self, color: str, width: float = 1.0) -> None:
        ...

    def set_alpha(self, alpha: float) -> None:
        ...

    def reset_alpha(self) -> None:
        ...

    def circle(self, x: float, y: float, radius: float, fill: bool = True) -> None:
        ...

    def text(
        self,
        text: str,
        x: float,
        y: float,
        color: str = "#fff",
        font: str = "16px monospace",
        align: str = "left",
    ) -> None:
        ...


class NullAudioCueSink:
    def play(self, cue_name: str) -> None:
        return None


def play_cue(audio: AudioCueSink, cue_name: str) -> None:
    try:
        audio.play(cue_name)
    except Exception:
        logger.exception("Audio cue %r failed", cue_name)


class HarmonicOverlay:
    def __init__(self, timing_config: Optional[config.TimingConfig] = None) -> None:
        self._timing_config = timing_config or config.TimingConfig()

    def draw(
        self,
        sink: DrawSink,
        *,
        ball_x: float,
        ball_y: float,
        ball_radius: float,
        now_ms: float,
        window_ms: float,
        next_beat: Optional[harmonic_models.NextBeat],
        metronome_purchased: bool,
        feedback: Optional[harmonic_models.HitFeedback],
    ) -> None:
        if metronome_purchased and next_beat is not None:
            self._draw_metronome(
                sink,
                ball_x=float(ball_x),
                ball_y=float(ball_y),
                ball_radius=float(ball_radius),
                time_to_beat_ms=float(next_beat.time_ms) - float(now_ms),
                window_ms=float(window_ms),
            )

        if feedback is not None:
            self._draw_feedback(sink, feedback=feedback, now_ms=float(now_ms))

    def _draw_metronome(
        self,
        sink: DrawSink,
        *,
        ball_x: float,
        ball_y: float,
        ball_radius: float,
        time_to_beat_ms: float,
        window_ms: float,
    ) -> None:
        distance = abs(time_to_beat_ms)
        ring_radius = ball_radius * _RING_RADIUS_FACTOR
        window_progress = max(0.0, 1.0 - distance / window_ms)

        if distance < window_ms * 2.0:
            ring_color = COLOR_IDLE_RING
            ring_width = 2.0
            ring_alpha = 0.3
            if distance < window_ms:
                ring_color = COLOR_IN_WINDOW_STRONG if window_progress > 0.7 else COLOR_IN_WINDOW
                ring_width = 3.0
                ring_alpha = 0.5 + window_progress * 0.5

            sink.set_stroke(ring_color, ring_width)
            sink.set_alpha(ring_alpha)
            sink.circle(ball_x, ball_y, ring_radius, False)
            sink.reset_alpha()

        if distance < _PULSE_RANGE_MS:
            pulse_progress = 1.0 - distance / _PULSE_RANGE_MS
            sink.set_stroke(COLOR_PULSE, 5.0)
            sink.set_alpha(pulse_progress * 0.8)
            sink.circle(ball_x, ball_y, ring_radius + pulse_progress * _PULSE_GROWTH_PIXELS, False)
            sink.reset_alpha()

        if 0.0 < time_to_beat_ms < _COUNTDOWN_RANGE_MS:
            sink.set_alpha(0.7)
            sink.text(
                f"{int(math.ceil(time_to_beat_ms))}ms",
                ball_x,
                ball_y + ball_radius + 40.0,
                "#ffffff",
                "14px monospace",
                "center",
            )
            sink.reset_alpha()

    def _draw_feedback(self, sink: DrawSink, *, feedback: harmonic_models.HitFeedback, now_ms: float) -> None:
        duration = float(self._timing_config.feedback_duration_ms)
        age = now_ms - float(feedback.time_ms)
        if age < 0.0 or age >= duration:
            return

        alpha = 1.0 - age / duration
        y_offset = (age / duration) * _FEEDBACK_RISE_PIXELS

        color = COLOR_MISS
        font_size = "20px"
        if "PERFECT" in feedback.text:
            color = COLOR_IN_WINDOW_STRONG
            font_size = "24px"
        elif feedback.text == "GOOD":
            color = COLOR_IN_WINDOW

        sink.set_alpha(alpha)
        sink.text(
            feedback.text,
            float(feedback.x),
            float(feedback.y) - _FEEDBACK_OFFSET_PIXELS - y_offset,
            color,
            f"bold {font_size} monospace",
            "center",
        )
        sink.reset_alpha()
