# -*- coding: utf-8 -*-
########################
# progression.py
########################
# Purpose:
# - Streak and economy model.
# - Streak multiplier curve, echo reward accumulation, harmonic core drops,
#   miss penalty, upgrade cost curves and purchases.
#
# Design notes:
# - No Qt usage. Pure gameplay logic.
# - Mutates the PlayerProgress it was built with. HarmonicEngine owns that record.
# - Point-priced purchases never hold the wallet. The wallet is passed per call and debited
#   through PointsWallet.try_spend, which either debits the exact cost or does nothing.
# - Sigils are priced in harmonic cores, which live in PlayerProgress.
#
########################
# Interfaces:
# Public protocols / dataclasses:
# - PointsWallet(Protocol): balance() -> float, try_spend(cost: float) -> bool
# - SimpleWallet(points: float)
#
# Public functions:
# - upgrade_cost(curve: config.CostCurve, level: int) -> int
# - streak_multiplier_for(streak: int) -> float
#
# Public classes:
# - class ProgressionEngine
#   - __init__(progress: PlayerProgress, economy_config: Optional[config.EconomyConfig] = None)
#   - streak() -> int
#   - harmonic_cores() -> int
#   - streak_multiplier() -> float
#   - cores_for_streak(streak: int) -> int
#   - register_hit() -> tuple[int, int]        # (reward_units, cores_gained)
#   - miss_penalty_divisor() -> float
#   - register_miss() -> int                    # streak delta (<= 0)
#   - tuning_fork_cost() / chorus_cost() / quantized_ripples_cost() / metronome_cost() / sigil_cost(kind) -> int
#   - can_afford(wallet: PointsWallet, cost: float) -> bool
#   - can_afford_sigil(kind: SigilKind) -> bool
#   - buy_tuning_fork(wallet) / buy_metronome(wallet) / buy_chorus(wallet) / buy_quantized_ripples(wallet) -> bool
#   - buy_sigil(kind: SigilKind) -> bool
#
########################

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Optional, Protocol, Tuple, runtime_checkable

import config
import harmonic_models

logger = logging.getLogger(__name__)

# Streak multiplier curve: steep up to the knee, shallow up to the cap, flat after.
_MULTIPLIER_KNEE_STREAK = 50
_MULTIPLIER_CAP_STREAK = 200
_MULTIPLIER_SLOPE_LOW = 0.06
_MULTIPLIER_SLOPE_HIGH = 0.02


@runtime_checkable
class PointsWallet(Protocol):
    def balance(self) -> float:
        ...

    def try_spend(self, cost: float) -> bool:
        ...


@dataclass
class SimpleWallet:
    points: float = 0.0

    def balance(self) -> float:
        return float(self.points)

    def try_spend(self, cost: float) -> bool:
        price = float(cost)
        if self.points < price:
            return False
        self.points -= price
        return True


def upgrade_cost(curve: config.CostCurve, level: int) -> int:
    return int(math.ceil(float(curve.base) * math.pow(float(curve.growth), int(level))))


def streak_multiplier_for(streak: int) -> float:
    capped = min(max(int(streak), 0), _MULTIPLIER_CAP_STREAK)
    low_part = min(capped, _MULTIPLIER_KNEE_STREAK)
    high_part = max(0, capped - _MULTIPLIER_KNEE_STREAK)
    return 1.0 + low_part * _MULTIPLIER_SLOPE_LOW + high_part * _MULTIPLIER_SLOPE_HIGH


class ProgressionEngine:
    def __init__(
        self,
        progress: harmonic_models.PlayerProgress,
        economy_config: Optional[config.EconomyConfig] = None,
    ) -> None:
        self._progress = progress
        self._economy = economy_config or config.EconomyConfig()

    def attach_progress(self, progress: harmonic_models.PlayerProgress) -> None:
        self._progress = progress

    def streak(self) -> int:
        return int(self._progress.streak)

    def harmonic_cores(self) -> int:
        return int(self._progress.harmonic_cores)

    def streak_multiplier(self) -> float:
        return streak_multiplier_for(self._progress.streak)

    # -----------------
    # Hits and misses
    # -----------------

    def cores_for_streak(self, streak: int) -> int:
        value = int(streak)
        if value <= 0 or value % int(self._economy.core_drop_interval) != 0:
            return 0
        cores = 1
        for threshold in self._economy.core_bonus_thresholds:
            if value >= threshold:
                cores += 1
        return cores

    def register_hit(self) -> Tuple[int, int]:
        progress = self._progress
        progress.streak += 1

        progress.echo_accumulator += progress.chorus_level * float(self._economy.chorus_bonus_per_level)
        whole_echoes = int(math.floor(progress.echo_accumulator))
        progress.echo_accumulator -= whole_echoes
        reward_units = 1 + whole_echoes

        cores_gained = self.cores_for_streak(progress.streak)
        progress.harmonic_cores += cores_gained
        return reward_units, cores_gained

    def miss_penalty_divisor(self) -> float:
        focus_level = self._progress.sigil_level(harmonic_models.SigilKind.FOCUS)
        focus_penalty = 1.0 - focus_level * float(self._economy.focus_reduction_per_level)
        return max(float(self._economy.miss_divisor_base) * focus_penalty, float(self._economy.miss_divisor_floor))

    def register_miss(self) -> int:
        old_streak = int(self._progress.streak)
        if old_streak <= 0:
            return 0
        self._progress.streak = int(math.floor(old_streak / self.miss_penalty_divisor()))
        return self._progress.streak - old_streak

    # -----------------
    # Costs
    # -----------------

    def tuning_fork_cost(self) -> int:
        return upgrade_cost(self._economy.tuning_fork, self._progress.tuning_fork_level)

    def chorus_cost(self) -> int:
        return upgrade_cost(self._economy.chorus, self._progress.chorus_level)

    def quantized_ripples_cost(self) -> int:
        return upgrade_cost(self._economy.quantized_ripples, self._progress.quantized_ripples_level)

    def metronome_cost(self) -> int:
        return int(self._economy.metronome_cost)

    def sigil_cost(self, kind: harmonic_models.SigilKind) -> int:
        return upgrade_cost(self._economy.sigil, self._progress.sigil_level(kind))

    def can_afford(self, wallet: PointsWallet, cost: float) -> bool:
        return float(wallet.balance()) >= float(cost)

    def can_afford_sigil(self, kind: harmonic_models.SigilKind) -> bool:
        return self._progress.harmonic_cores >= self.sigil_cost(kind)

    # -----------------
    # Purchases
    # -----------------

    def buy_tuning_fork(self, wallet: PointsWallet) -> bool:
        if not wallet.try_spend(self.tuning_fork_cost()):
            return False
        self._progress.tuning_fork_level += 1
        logger.debug("Bought tuning fork level %d", self._progress.tuning_fork_level)
        return True

    def buy_metronome(self, wallet: PointsWallet) -> bool:
        if self._progress.metronome_purchased:
            return False
        if not wallet.try_spend(self.metronome_cost()):
            return False
        self._progress.metronome_purchased = True
        logger.debug("Bought metronome")
        return True

    def buy_chorus(self, wallet: PointsWallet) -> bool:
        if not wallet.try_spend(self.chorus_cost()):
            return False
        self._progress.chorus_level += 1
        logger.debug("Bought chorus level %d", self._progress.chorus_level)
        return True

    def buy_quantized_ripples(self, wallet: PointsWallet) -> bool:
        if not wallet.try_spend(self.quantized_ripples_cost()):
            return False
        self._progress.quantized_ripples_level += 1
        logger.debug("Bought quantized ripples level %d", self._progress.quantized_ripples_level)
        return True

    def buy_sigil(self, kind: harmonic_models.SigilKind) -> bool:
        cost = self.sigil_cost(kind)
        if self._progress.harmonic_cores < cost:
            return False
        self._progress.harmonic_cores -= cost
        self._progress.sigils[kind] = self._progress.sigil_level(kind) + 1
        logger.debug("Bought %s sigil level %d", kind.value, self._progress.sigils[kind])
        return True


def _run_unit_tests() -> None:
    progress = harmonic_models.PlayerProgress()
    engine = ProgressionEngine(progress)

    assert engine.streak_multiplier() == 1.0
    assert abs(streak_multiplier_for(50) - 4.0) < 1e-9
    assert abs(streak_multiplier_for(200) - 7.0) < 1e-9
    assert streak_multiplier_for(500) == streak_multiplier_for(200)

    assert engine.cores_for_streak(10) == 1
    assert engine.cores_for_streak(50) == 2
    assert engine.cores_for_streak(100) == 3
    assert engine.cores_for_streak(49) == 0

    progress.streak = 30
    assert engine.register_miss() == -20
    assert progress.streak == 10

    wallet = SimpleWallet(points=199.0)
    assert not engine.buy_tuning_fork(wallet)
    assert wallet.points == 199.0
    wallet.points = 200.0
    assert engine.buy_tuning_fork(wallet)
    assert wallet.points == 0.0
    assert progress.tuning_fork_level == 1


if __name__ == "__main__":
    _run_unit_tests()
    print("progression.py: ok")
