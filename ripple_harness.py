# -*- coding: utf-8 -*-
########################
# ripple_harness.py
########################
# Purpose:
# - Play-test window for the harmonic rhythm engine.
# - Integrates TimingModel + HarmonicEngine + HarmonicOverlay (via QPainterDrawSink) in a small Qt widget.
#
# Design notes:
# - Local testing only. The host game owns the real loop, shop UI and audio.
# - A 16ms timer drives HarmonicEngine.tick and repaints.
# - Space or left click taps at the ball; a tap also requests a ripple spawn, which the engine
#   rejects while a ring is active.
# - Points are a harness-side wallet: each hit pays reward_units x 10 x streak multiplier.
#
########################
# Interfaces:
# Public classes:
# - class LoggingAudioCueSink
# - class RippleHarnessWidget(PyQt6.QtWidgets.QWidget)
#
# Public functions:
# - run_self_tests() -> None
# - main() -> int
#
# Keys:
# - Space / click: tap
# - 1: tuning fork, 2: metronome, 3: chorus, 4: quantized ripples
# - Q/W/E: tempo/echo/focus sigil
# - R: soft reset, P: prestige carryover
#
########################

from __future__ import annotations

import argparse
import logging
import random
from pathlib import Path
from typing import Optional

import config
import harmonic_engine
import harmonic_models
import progression
import timing_model

logger = logging.getLogger(__name__)

_POINTS_PER_ECHO = 10.0
_BALL_COLOR = "#46b4f0"


class LoggingAudioCueSink:
    def play(self, cue_name: str) -> None:
        logger.info("cue: %s", cue_name)


def run_self_tests() -> None:
    import hit_judge
    import rhythm_scheduler

    timing_model._run_unit_tests()
    rhythm_scheduler._run_unit_tests()
    progression._run_unit_tests()
    hit_judge._run_unit_tests()
    harmonic_engine._run_unit_tests()


def _create_widget_class():
    from PyQt6.QtCore import QPointF, QRectF, Qt, QTimer
    from PyQt6.QtGui import QBrush, QColor, QFont, QKeyEvent, QMouseEvent, QPainter, QPen
    from PyQt6.QtWidgets import QWidget

    import qt_draw_sink

    class _RippleHarnessWidget(QWidget):
        def __init__(self, engine: harmonic_engine.HarmonicEngine, parent: Optional[QWidget] = None) -> None:
            super().__init__(parent)
            self._engine = engine
            self._wallet = progression.SimpleWallet(points=0.0)
            self._status_text = "space: tap"
            self._ball_radius = 28.0
            self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

            self._frame_timer = QTimer(self)
            self._frame_timer.setInterval(16)
            self._frame_timer.timeout.connect(self._on_frame)
            self._frame_timer.start()

        def _ball_center(self) -> QPointF:
            return QPointF(float(self.width()) / 2.0, float(self.height()) / 2.0)

        def _on_frame(self) -> None:
            self._engine.tick(16.0)
            self.update()

        def _tap(self) -> None:
            center = self._ball_center()
            result = self._engine.resolve_input(x=float(center.x()), y=float(center.y()))
            if result.is_hit:
                self._wallet.points += result.reward_units * _POINTS_PER_ECHO * self._engine.streak_multiplier()
            self._engine.request_ripple_spawn()

        def _buy(self, key: int) -> None:
            purchases = {
                int(Qt.Key.Key_1): ("tuning fork", lambda: self._engine.buy_tuning_fork(self._wallet)),
                int(Qt.Key.Key_2): ("metronome", lambda: self._engine.buy_metronome(self._wallet)),
                int(Qt.Key.Key_3): ("chorus", lambda: self._engine.buy_chorus(self._wallet)),
                int(Qt.Key.Key_4): ("quantized ripples", lambda: self._engine.buy_quantized_ripples(self._wallet)),
                int(Qt.Key.Key_Q): ("tempo sigil", lambda: self._engine.buy_sigil(harmonic_models.SigilKind.TEMPO)),
                int(Qt.Key.Key_W): ("echo sigil", lambda: self._engine.buy_sigil(harmonic_models.SigilKind.ECHO)),
                int(Qt.Key.Key_E): ("focus sigil", lambda: self._engine.buy_sigil(harmonic_models.SigilKind.FOCUS)),
            }
            entry = purchases.get(int(key))
            if entry is None:
                return
            name, buy = entry
            self._status_text = f"bought {name}" if buy() else f"cannot afford {name}"

        def keyPressEvent(self, event: QKeyEvent) -> None:  # noqa: N802
            if event.isAutoRepeat():
                return
            key = int(event.key())
            if key == int(Qt.Key.Key_Space):
                self._tap()
            elif key == int(Qt.Key.Key_R):
                self._engine.soft_reset()
                self._status_text = "soft reset"
            elif key == int(Qt.Key.Key_P):
                self._engine.prestige_carryover()
                self._status_text = "prestige carryover"
            else:
                self._buy(key)

        def mousePressEvent(self, event: QMouseEvent) -> None:  # noqa: N802
            if event.button() == Qt.MouseButton.LeftButton:
                self._tap()

        def paintEvent(self, event) -> None:  # type: ignore[override]
            painter = QPainter(self)
            painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
            painter.fillRect(self.rect(), QBrush(QColor(10, 10, 12)))

            center = self._ball_center()
            sink = qt_draw_sink.QPainterDrawSink(painter)
            sink.set_fill(_BALL_COLOR)
            sink.circle(float(center.x()), float(center.y()), self._ball_radius, True)

            self._engine.draw(
                sink,
                ball_x=float(center.x()),
                ball_y=float(center.y()),
                ball_radius=self._ball_radius,
            )

            snapshot = self._engine.progress_snapshot()
            hud_text = (
                f"points {self._wallet.points:.0f}  streak {snapshot.streak}  "
                f"x{self._engine.streak_multiplier():.2f}  cores {snapshot.harmonic_cores}  "
                f"window ±{self._engine.timing_window_ms():.0f}ms"
            )
            painter.save()
            painter.setPen(QPen(QColor(240, 240, 240)))
            painter.setFont(QFont("Arial", 12))
            painter.drawText(QRectF(10.0, 10.0, float(self.width()) - 20.0, 22.0), int(Qt.AlignmentFlag.AlignLeft), hud_text)
            painter.drawText(
                QRectF(0.0, float(self.height()) - 28.0, float(self.width()), 20.0),
                int(Qt.AlignmentFlag.AlignHCenter),
                self._status_text,
            )
            painter.restore()
            painter.end()

    return _RippleHarnessWidget


def _run_gui(*, config_path: Optional[Path], seed: Optional[int]) -> int:
    import sys

    from PyQt6.QtWidgets import QApplication

    harmonic_config, _resolved_path = config.load_config(config_path)
    engine = harmonic_engine.HarmonicEngine(
        harmonic_config=harmonic_config,
        timing=timing_model.TimingModel.wall(),
        audio=LoggingAudioCueSink(),
        rng=random.Random(seed) if seed is not None else None,
    )

    app = QApplication(sys.argv)
    widget_class = _create_widget_class()
    window = widget_class(engine)
    window.setWindowTitle("Harmonic ripple harness")
    window.resize(720, 540)
    window.show()
    return int(app.exec())


def build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Harmonic rhythm engine harness")
    parser.add_argument("--config", type=Path, default=None, help="Path to a harmonic_config.json file.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for ring drift sampling.")
    parser.add_argument("--run-tests", action="store_true", help="Run pure logic tests (no Qt).")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser


def main() -> int:
    args = build_argument_parser().parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.run_tests:
        run_self_tests()
        print("Self tests passed.")
        return 0
    return _run_gui(config_path=args.config, seed=args.seed)


if __name__ == "__main__":
    raise SystemExit(main())
