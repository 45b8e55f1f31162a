import json

import pytest

import config


def test_defaults_match_engine_constants():
    harmonic_config = config.HarmonicConfig()

    assert harmonic_config.rhythm.base_bpm == 150.0
    assert harmonic_config.rhythm.beats_per_ring == 12
    assert harmonic_config.rhythm.base_drift_fraction == 0.03
    assert harmonic_config.timing.base_window_ms == 110.0
    assert harmonic_config.timing.grace_windows == 3.0
    assert harmonic_config.economy.tuning_fork.base == 200.0
    assert harmonic_config.economy.sigil.growth == 1.5
    assert harmonic_config.economy.core_bonus_thresholds == [50, 100]


def test_load_config_reads_json_file(tmp_path, monkeypatch):
    monkeypatch.delenv("HARMONIC_BASE_BPM", raising=False)
    config_path = tmp_path / "harmonic_config.json"
    config_path.write_text(
        json.dumps({"rhythm": {"base_bpm": 120}, "economy": {"chorus": {"base": 50, "growth": 2.0}}}),
        encoding="utf-8",
    )

    harmonic_config, resolved_path = config.load_config(config_path)

    assert resolved_path == config_path
    assert harmonic_config.rhythm.base_bpm == 120.0
    assert harmonic_config.economy.chorus.base == 50.0
    assert harmonic_config.timing.base_window_ms == 110.0


def test_missing_config_file_falls_back_to_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("HARMONIC_CONFIG_PATH", raising=False)
    monkeypatch.setattr(config, "_default_config_candidates", lambda: [tmp_path / "absent.json"])

    harmonic_config, resolved_path = config.load_config()

    assert resolved_path is None
    assert harmonic_config == config.HarmonicConfig()


def test_config_path_environment_variable(tmp_path, monkeypatch):
    config_path = tmp_path / "custom.json"
    config_path.write_text(json.dumps({"timing": {"feedback_duration_ms": 750}}), encoding="utf-8")
    monkeypatch.setenv("HARMONIC_CONFIG_PATH", str(config_path))

    harmonic_config, resolved_path = config.load_config()

    assert resolved_path == config_path
    assert harmonic_config.timing.feedback_duration_ms == 750.0


def test_environment_overrides(tmp_path, monkeypatch):
    config_path = tmp_path / "harmonic_config.json"
    config_path.write_text(json.dumps({"rhythm": {"base_bpm": 100}}), encoding="utf-8")
    monkeypatch.setenv("HARMONIC_BASE_BPM", "180")
    monkeypatch.setenv("HARMONIC_BEATS_PER_RING", "8")
    monkeypatch.setenv("HARMONIC_BASE_WINDOW_MS", "95.5")
    monkeypatch.setenv("HARMONIC_METRONOME_COST", "not-a-number")

    harmonic_config, _resolved_path = config.load_config(config_path)

    assert harmonic_config.rhythm.base_bpm == 180.0
    assert harmonic_config.rhythm.beats_per_ring == 8
    assert harmonic_config.timing.base_window_ms == 95.5
    assert harmonic_config.economy.metronome_cost == 300


def test_invalid_json_raises_value_error(tmp_path):
    config_path = tmp_path / "broken.json"
    config_path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ValueError):
        config.load_config(config_path)


def test_non_object_root_raises_value_error(tmp_path):
    config_path = tmp_path / "list.json"
    config_path.write_text("[1, 2]", encoding="utf-8")

    with pytest.raises(ValueError):
        config.load_config(config_path)


def test_validation_failure_raises_value_error(tmp_path, monkeypatch):
    monkeypatch.delenv("HARMONIC_BASE_BPM", raising=False)
    config_path = tmp_path / "invalid.json"
    config_path.write_text(json.dumps({"rhythm": {"base_bpm": -5}}), encoding="utf-8")

    with pytest.raises(ValueError) as excinfo:
        config.load_config(config_path)
    assert "base_bpm" in str(excinfo.value)


def test_bonus_thresholds_are_sorted():
    economy = config.EconomyConfig(core_bonus_thresholds=[100, 50])
    assert economy.core_bonus_thresholds == [50, 100]
