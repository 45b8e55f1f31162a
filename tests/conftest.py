import os
import random
import sys
from typing import Any, List, Tuple

import pytest

# The engine modules live at the repository root.
CURRENT_DIR = os.path.dirname(__file__)
REPO_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

import harmonic_engine  # noqa: E402
import timing_model  # noqa: E402


class FixedRandom(random.Random):
    """Random source whose random() always returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self._value = float(value)

    def random(self) -> float:
        return self._value


class RecordingAudioCueSink:
    def __init__(self) -> None:
        self.cues: List[str] = []

    def play(self, cue_name: str) -> None:
        self.cues.append(cue_name)


class RecordingDrawSink:
    def __init__(self) -> None:
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []

    def set_stroke(self, color, width=1.0):
        self.calls.append(('set_stroke', (color, width)))

    def set_alpha(self, alpha):
        self.calls.append(('set_alpha', (alpha,)))

    def reset_alpha(self):
        self.calls.append(('reset_alpha', ()))

    def circle(self, x, y, radius, fill=True):
        self.calls.append(('circle', (x, y, radius, fill)))

    def text(self, text, x, y, color='#fff', font='16px monospace', align='left'):
        self.calls.append(('text', (text, x, y, color, font, align)))

    def named(self, name):
        return [args for call_name, args in self.calls if call_name == name]


@pytest.fixture()
def no_drift_rng():
    # random() == 0.5 maps to a drift of exactly 1.0
    return FixedRandom(0.5)


@pytest.fixture()
def manual_timing():
    return timing_model.TimingModel.manual(0.0)


@pytest.fixture()
def audio():
    return RecordingAudioCueSink()


@pytest.fixture()
def draw_sink():
    return RecordingDrawSink()


@pytest.fixture()
def engine(manual_timing, no_drift_rng, audio):
    return harmonic_engine.HarmonicEngine(timing=manual_timing, rng=no_drift_rng, audio=audio)
