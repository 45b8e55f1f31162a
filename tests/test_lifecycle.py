import harmonic_models
import hit_judge
import lifecycle
import progression
import rhythm_scheduler
from conftest import FixedRandom, RecordingAudioCueSink


def _build(progress=None):
    progress = progress or harmonic_models.PlayerProgress()
    scheduler = rhythm_scheduler.RhythmScheduler(rng=FixedRandom(0.5))
    progression_engine = progression.ProgressionEngine(progress)
    judge = hit_judge.HitJudge(scheduler, progression_engine, lambda: progress)
    audio = RecordingAudioCueSink()
    manager = lifecycle.LifecycleManager(scheduler, judge, lambda: progress, audio=audio)
    return progress, scheduler, judge, manager, audio


def test_ring_retires_once_last_beat_is_hit():
    _progress, scheduler, judge, manager, _audio = _build()
    ring_id = scheduler.request_ripple_spawn(now_ms=0.0)

    assert judge.resolve_input(now_ms=4800.0).is_hit
    assert manager.tick(elapsed_ms=16.0, now_ms=4800.0) == [ring_id]
    assert not scheduler.has_active_ring()
    assert scheduler.rings() == []


def test_unfinished_ring_expires_after_grace_period():
    _progress, scheduler, _judge, manager, _audio = _build()
    ring_id = scheduler.request_ripple_spawn(now_ms=0.0)

    # Last beat at 4800ms, grace = 3 x 110ms.
    assert manager.tick(elapsed_ms=16.0, now_ms=5130.0) == []
    assert scheduler.has_active_ring()
    assert scheduler.request_ripple_spawn(now_ms=5130.0) is None

    assert manager.tick(elapsed_ms=16.0, now_ms=5131.0) == [ring_id]
    assert not scheduler.has_active_ring()
    assert scheduler.request_ripple_spawn(now_ms=5131.0) == ring_id + 1


def test_grace_period_scales_with_timing_window():
    _progress, scheduler, _judge, manager, _audio = _build(harmonic_models.PlayerProgress(tuning_fork_level=6))
    scheduler.request_ripple_spawn(now_ms=0.0)

    assert manager.tick(elapsed_ms=16.0, now_ms=4800.0 + 510.0) == []
    assert manager.tick(elapsed_ms=16.0, now_ms=4800.0 + 511.0) == [0]


def test_partially_hit_ring_stays_until_last_beat():
    _progress, scheduler, judge, manager, _audio = _build()
    scheduler.request_ripple_spawn(now_ms=0.0)

    judge.resolve_input(now_ms=400.0)
    assert manager.tick(elapsed_ms=16.0, now_ms=420.0) == []
    assert scheduler.has_active_ring()


def test_metronome_ticks_once_per_crossed_beat():
    progress, scheduler, _judge, manager, audio = _build(harmonic_models.PlayerProgress(metronome_purchased=True))
    scheduler.request_ripple_spawn(now_ms=0.0)

    manager.tick(elapsed_ms=0.0, now_ms=0.0)
    manager.tick(elapsed_ms=399.0, now_ms=399.0)
    assert audio.cues == []
    manager.tick(elapsed_ms=1.0, now_ms=400.0)
    assert audio.cues == ["metronome_tick"]
    manager.tick(elapsed_ms=16.0, now_ms=416.0)
    assert audio.cues == ["metronome_tick"]
    manager.tick(elapsed_ms=800.0, now_ms=1216.0)
    assert audio.cues == ["metronome_tick"] * 3


def test_no_metronome_ticks_without_metronome():
    _progress, scheduler, _judge, manager, audio = _build()
    scheduler.request_ripple_spawn(now_ms=0.0)

    manager.tick(elapsed_ms=0.0, now_ms=0.0)
    manager.tick(elapsed_ms=2000.0, now_ms=2000.0)
    assert audio.cues == []


def test_soft_reset_clears_streak_rings_and_feedback_only():
    progress = harmonic_models.PlayerProgress(streak=0, harmonic_cores=9, tuning_fork_level=4, chorus_level=2)
    progress, scheduler, judge, manager, _audio = _build(progress)
    scheduler.request_ripple_spawn(now_ms=0.0)
    judge.resolve_input(now_ms=400.0)
    assert progress.streak == 1

    manager.soft_reset()

    assert progress.streak == 0
    assert progress.harmonic_cores == 9
    assert progress.tuning_fork_level == 4
    assert progress.chorus_level == 2
    assert scheduler.rings() == []
    assert not scheduler.has_active_ring()
    assert judge.last_feedback() is None


def test_prestige_carryover_keeps_curated_subset():
    progress = harmonic_models.PlayerProgress(
        streak=77,
        harmonic_cores=31,
        tuning_fork_level=5,
        metronome_purchased=True,
        chorus_level=4,
        quantized_ripples_level=3,
        echo_accumulator=0.6,
    )
    progress.sigils[harmonic_models.SigilKind.TEMPO] = 2
    progress.sigils[harmonic_models.SigilKind.FOCUS] = 1
    progress, scheduler, _judge, manager, _audio = _build(progress)
    scheduler.request_ripple_spawn(now_ms=0.0)

    manager.prestige_carryover(tuning_fork_keep=2)

    assert progress.streak == 0
    assert progress.chorus_level == 0
    assert progress.quantized_ripples_level == 0
    assert progress.echo_accumulator == 0.0
    assert progress.tuning_fork_level == 2
    assert progress.harmonic_cores == 31
    assert progress.metronome_purchased
    assert progress.sigil_level(harmonic_models.SigilKind.TEMPO) == 2
    assert progress.sigil_level(harmonic_models.SigilKind.FOCUS) == 1
    assert not scheduler.has_active_ring()


def test_prestige_keeps_lower_tuning_fork_levels():
    progress, _scheduler, _judge, manager, _audio = _build(harmonic_models.PlayerProgress(tuning_fork_level=1))
    manager.prestige_carryover(tuning_fork_keep=2)
    assert progress.tuning_fork_level == 1


def test_metronome_ticks_for_beats_hit_early():
    progress, scheduler, judge, manager, audio = _build(harmonic_models.PlayerProgress(metronome_purchased=True))
    scheduler.request_ripple_spawn(now_ms=0.0)

    manager.tick(elapsed_ms=350.0, now_ms=350.0)
    assert judge.resolve_input(now_ms=360.0).is_hit
    manager.tick(elapsed_ms=100.0, now_ms=450.0)

    assert audio.cues == ["metronome_tick"]
