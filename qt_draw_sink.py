# -*- coding: utf-8 -*-
########################
# qt_draw_sink.py
########################
# Purpose:
# - QPainter implementation of presentation.DrawSink.
# - Lets HarmonicOverlay render onto any Qt paint device.
#
# Design notes:
# - Stateless apart from the current pen width, pen colour and opacity, like a canvas context.
# - CSS-like font strings ("bold 24px monospace") are parsed into QFont.
# - Text align "center" and "right" are measured with QFontMetricsF.
#
########################
# Interfaces:
# Public functions:
# - parse_css_font(font_text: str) -> QFont
#
# Public classes:
# - class QPainterDrawSink
#   - __init__(painter: QPainter)
#   - set_stroke(color: str, width: float = 1.0) -> None
#   - set_fill(color: str) -> None
#   - set_alpha(alpha: float) -> None
#   - reset_alpha() -> None
#   - circle(x: float, y: float, radius: float, fill: bool = True) -> None
#   - text(text: str, x: float, y: float, color: str = "#fff", font: str = "16px monospace", align: str = "left") -> None
#
########################

from __future__ import annotations

from PyQt6.QtCore import QPointF, Qt
from PyQt6.QtGui import QBrush, QColor, QFont, QFontMetricsF, QPainter, QPen


def parse_css_font(font_text: str) -> QFont:
    tokens = str(font_text or "").split()
    is_bold = False
    pixel_size = 16
    family_tokens = []

    for token in tokens:
        lowered = token.lower()
        if lowered == "bold":
            is_bold = True
        elif lowered.endswith("px") and lowered[:-2].isdigit():
            pixel_size = int(lowered[:-2])
        else:
            family_tokens.append(token)

    font = QFont()
    family = " ".join(family_tokens).strip()
    if family.lower() == "monospace":
        font.setStyleHint(QFont.StyleHint.Monospace)
        font.setFamily("Monospace")
    elif family:
        font.setFamily(family)
    font.setPixelSize(max(1, pixel_size))
    font.setBold(is_bold)
    return font


class QPainterDrawSink:
    def __init__(self, painter: QPainter) -> None:
        self._painter = painter
        self._stroke_color = QColor("#ffffff")
        self._stroke_width = 1.0
        self._fill_color = QColor("#ffffff")

    def set_stroke(self, color: str, width: float = 1.0) -> None:
        self._stroke_color = QColor(str(color))
        self._stroke_width = float(width)

    def set_fill(self, color: str) -> None:
        self._fill_color = QColor(str(color))

    def set_alpha(self, alpha: float) -> None:
        self._painter.setOpacity(max(0.0, min(1.0, float(alpha))))

    def reset_alpha(self) -> None:
        self._painter.setOpacity(1.0)

    def circle(self, x: float, y: float, radius: float, fill: bool = True) -> None:
        painter = self._painter
        painter.save()
        center = QPointF(float(x), float(y))
        if fill:
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(QBrush(self._fill_color))
        else:
            pen = QPen(self._stroke_color)
            pen.setWidthF(self._stroke_width)
            painter.setPen(pen)
            painter.setBrush(Qt.BrushStyle.NoBrush)
        painter.drawEllipse(center, float(radius), float(radius))
        painter.restore()

    def text(
        self,
        text: str,
        x: float,
        y: float,
        color: str = "#fff",
        font: str = "16px monospace",
        align: str = "left",
    ) -> None:
        painter = self._painter
        painter.save()
        qt_font = parse_css_font(font)
        painter.setFont(qt_font)
        painter.setPen(QPen(QColor(str(color))))

        text_value = str(text)
        draw_x = float(x)
        width = QFontMetricsF(qt_font).horizontalAdvance(text_value)
        if align == "center":
            draw_x -= width / 2.0
        elif align in ("right", "end"):
            draw_x -= width

        # y is the text baseline, as on a canvas.
        painter.drawText(QPointF(draw_x, float(y)), text_value)
        painter.restore()
