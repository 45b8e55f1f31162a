import math

import pytest

import config
import harmonic_models
import progression


CURVES = [
    ("tuning_fork_level", "tuning_fork_cost", 200.0, 1.35),
    ("chorus_level", "chorus_cost", 500.0, 1.45),
    ("quantized_ripples_level", "quantized_ripples_cost", 350.0, 1.4),
]


@pytest.mark.parametrize("field_name, cost_name, base, growth", CURVES)
def test_point_upgrade_costs_follow_exponential_curve(field_name, cost_name, base, growth):
    progress = harmonic_models.PlayerProgress()
    engine = progression.ProgressionEngine(progress)

    previous = 0
    for level in range(0, 11):
        setattr(progress, field_name, level)
        cost = getattr(engine, cost_name)()
        assert cost == math.ceil(base * growth ** level)
        assert cost >= previous
        previous = cost


@pytest.mark.parametrize("kind", list(harmonic_models.SigilKind))
def test_sigil_costs_follow_exponential_curve(kind):
    progress = harmonic_models.PlayerProgress()
    engine = progression.ProgressionEngine(progress)

    previous = 0
    for level in range(0, 11):
        progress.sigils[kind] = level
        cost = engine.sigil_cost(kind)
        assert cost == math.ceil(5.0 * 1.5 ** level)
        assert cost >= previous
        previous = cost


def test_representative_first_costs():
    engine = progression.ProgressionEngine(harmonic_models.PlayerProgress())
    assert engine.tuning_fork_cost() == 200
    assert engine.chorus_cost() == 500
    assert engine.quantized_ripples_cost() == 350
    assert engine.metronome_cost() == 300
    assert engine.sigil_cost(harmonic_models.SigilKind.TEMPO) == 5


@pytest.mark.parametrize(
    "streak, expected",
    [(0, 1.0), (1, 1.06), (10, 1.6), (50, 4.0), (51, 4.02), (100, 5.0), (200, 7.0), (201, 7.0), (10000, 7.0)],
)
def test_streak_multiplier_curve(streak, expected):
    progress = harmonic_models.PlayerProgress(streak=streak)
    assert progression.ProgressionEngine(progress).streak_multiplier() == pytest.approx(expected)


def test_streak_multiplier_is_monotonic():
    values = [progression.streak_multiplier_for(streak) for streak in range(0, 300)]
    assert values == sorted(values)


def test_point_purchase_is_atomic():
    progress = harmonic_models.PlayerProgress()
    engine = progression.ProgressionEngine(progress)
    wallet = progression.SimpleWallet(points=499.0)

    assert not engine.buy_chorus(wallet)
    assert wallet.points == 499.0
    assert progress.chorus_level == 0

    wallet.points = 1000.0
    assert engine.buy_chorus(wallet)
    assert wallet.points == 500.0
    assert progress.chorus_level == 1
    assert engine.chorus_cost() == math.ceil(500.0 * 1.45)


def test_each_point_upgrade_debits_its_own_cost():
    progress = harmonic_models.PlayerProgress()
    engine = progression.ProgressionEngine(progress)
    wallet = progression.SimpleWallet(points=10000.0)

    assert engine.buy_tuning_fork(wallet)
    assert engine.buy_quantized_ripples(wallet)
    assert wallet.points == 10000.0 - 200.0 - 350.0
    assert progress.tuning_fork_level == 1
    assert progress.quantized_ripples_level == 1


def test_metronome_is_a_one_time_unlock():
    progress = harmonic_models.PlayerProgress()
    engine = progression.ProgressionEngine(progress)
    wallet = progression.SimpleWallet(points=299.0)

    assert not engine.buy_metronome(wallet)
    wallet.points = 1000.0
    assert engine.buy_metronome(wallet)
    assert progress.metronome_purchased
    assert wallet.points == 700.0

    assert not engine.buy_metronome(wallet)
    assert wallet.points == 700.0


def test_sigils_are_bought_with_cores():
    progress = harmonic_models.PlayerProgress(harmonic_cores=12)
    engine = progression.ProgressionEngine(progress)

    assert engine.buy_sigil(harmonic_models.SigilKind.FOCUS)
    assert progress.harmonic_cores == 7
    assert progress.sigil_level(harmonic_models.SigilKind.FOCUS) == 1
    assert engine.sigil_cost(harmonic_models.SigilKind.FOCUS) == 8

    assert not engine.buy_sigil(harmonic_models.SigilKind.FOCUS)
    assert progress.harmonic_cores == 7
    assert engine.can_afford_sigil(harmonic_models.SigilKind.ECHO)
    assert progress.sigil_level(harmonic_models.SigilKind.TEMPO) == 0


def test_can_afford_reads_wallet_without_spending():
    engine = progression.ProgressionEngine(harmonic_models.PlayerProgress())
    wallet = progression.SimpleWallet(points=250.0)

    assert engine.can_afford(wallet, engine.tuning_fork_cost())
    assert not engine.can_afford(wallet, engine.metronome_cost())
    assert wallet.points == 250.0


def test_custom_wallet_protocol_is_honoured():
    class LedgerWallet:
        def __init__(self):
            self.debits = []
            self.points = 1000.0

        def balance(self):
            return self.points

        def try_spend(self, cost):
            if cost > self.points:
                return False
            self.points -= cost
            self.debits.append(cost)
            return True

    wallet = LedgerWallet()
    assert isinstance(wallet, progression.PointsWallet)
    engine = progression.ProgressionEngine(harmonic_models.PlayerProgress())

    assert engine.buy_tuning_fork(wallet)
    assert engine.buy_tuning_fork(wallet)
    assert wallet.debits == [200, 270]


@pytest.mark.parametrize("chorus_level", [0, 1, 2, 3, 7])
def test_echo_accumulator_converges_to_chorus_rate(chorus_level):
    progress = harmonic_models.PlayerProgress(chorus_level=chorus_level)
    engine = progression.ProgressionEngine(progress)

    hits = 1000
    extra_total = 0
    for _ in range(hits):
        reward_units, _cores = engine.register_hit()
        assert reward_units >= 1
        extra_total += reward_units - 1
        assert 0.0 <= progress.echo_accumulator < 1.0

    assert abs(extra_total - chorus_level * 0.2 * hits) <= 1.0


@pytest.mark.parametrize("streak", range(0, 260))
def test_cores_per_hit_is_pure_function_of_streak(streak):
    engine = progression.ProgressionEngine(harmonic_models.PlayerProgress())
    cores = engine.cores_for_streak(streak)

    assert cores in (0, 1, 2, 3)
    if streak == 0 or streak % 10 != 0:
        assert cores == 0
    elif streak >= 100:
        assert cores == 3
    elif streak >= 50:
        assert cores == 2
    else:
        assert cores == 1


@pytest.mark.parametrize("focus", range(0, 40))
def test_miss_divisor_stays_between_two_and_three(focus):
    progress = harmonic_models.PlayerProgress()
    progress.sigils[harmonic_models.SigilKind.FOCUS] = focus
    divisor = progression.ProgressionEngine(progress).miss_penalty_divisor()
    assert 2.0 <= divisor <= 3.0


def test_miss_never_makes_streak_negative():
    progress = harmonic_models.PlayerProgress(streak=1)
    engine = progression.ProgressionEngine(progress)

    assert engine.register_miss() == -1
    assert progress.streak == 0
    assert engine.register_miss() == 0
    assert progress.streak == 0


def test_economy_config_overrides_curves():
    economy = config.EconomyConfig(tuning_fork=config.CostCurve(base=10.0, growth=2.0), metronome_cost=1)
    progress = harmonic_models.PlayerProgress(tuning_fork_level=3)
    engine = progression.ProgressionEngine(progress, economy)

    assert engine.tuning_fork_cost() == 80
    assert engine.metronome_cost() == 1


def test_module_smoke_tests():
    progression._run_unit_tests()
