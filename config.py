"""
config.py

Typed configuration loading and validation for the harmonic rhythm engine.

Design goals
- Load at most one UTF-8 JSON config file
- Validate with pydantic (defaults included, so a missing file means defaults)
- Support environment variable overrides
- No other I/O beyond reading the config file (no directory creation)

Config file location
- If HARMONIC_CONFIG_PATH is set, that file is used.
- Otherwise these paths are searched in order and the first one that exists is used:
  1) ./harmonic_config.json (current working directory)
  2) <user config dir>/Harmonic/Harmonic/harmonic_config.json
- If none exists the built-in defaults are used.

Example config file (harmonic_config.json)
{
  "rhythm": {
    "base_bpm": 150,
    "beats_per_ring": 12,
    "base_drift_fraction": 0.03
  },
  "timing": {
    "base_window_ms": 110,
    "grace_windows": 3
  },
  "economy": {
    "tuning_fork": {"base": 200, "growth": 1.35},
    "metronome_cost": 300
  }
}
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from platformdirs import user_config_dir
from pydantic import BaseModel, Field, ValidationError, field_validator


class RhythmConfig(BaseModel):
    base_bpm: float = Field(default=150.0, gt=0.0, description="Nominal tempo of a ring before drift.")
    beats_per_ring: int = Field(default=12, ge=1, description="Beats scheduled per ripple.")
    base_drift_fraction: float = Field(default=0.03, ge=0.0, lt=1.0, description="Max drift before upgrades (0.03 = 3%).")
    drift_reduction_per_level: float = Field(default=0.1, ge=0.0, description="Drift reduction per quantized ripples level.")
    max_drift_reduction: float = Field(default=0.9, ge=0.0, le=1.0, description="Upper bound on the drift reduction.")


class TimingConfig(BaseModel):
    base_window_ms: float = Field(default=110.0, gt=0.0, description="Timing window with no tuning fork levels.")
    window_step_ms: float = Field(default=10.0, ge=0.0, description="Window bonus per tuning fork level.")
    max_window_bonus_ms: float = Field(default=60.0, ge=0.0, description="Cap on the tuning fork window bonus.")
    grace_windows: float = Field(default=3.0, ge=0.0, description="Windows past the last beat before a ring expires.")
    feedback_duration_ms: float = Field(default=500.0, gt=0.0, description="Lifetime of hit feedback text.")


class CostCurve(BaseModel):
    base: float = Field(gt=0.0)
    growth: float = Field(ge=1.0)


class EconomyConfig(BaseModel):
    tuning_fork: CostCurve = Field(default_factory=lambda: CostCurve(base=200.0, growth=1.35))
    chorus: CostCurve = Field(default_factory=lambda: CostCurve(base=500.0, growth=1.45))
    quantized_ripples: CostCurve = Field(default_factory=lambda: CostCurve(base=350.0, growth=1.4))
    sigil: CostCurve = Field(default_factory=lambda: CostCurve(base=5.0, growth=1.5))
    metronome_cost: int = Field(default=300, ge=0, description="Flat one-time metronome price in points.")
    chorus_bonus_per_level: float = Field(default=0.2, ge=0.0, description="Extra echo units per hit per chorus level.")
    core_drop_interval: int = Field(default=10, ge=1, description="Streak interval that drops harmonic cores.")
    core_bonus_thresholds: List[int] = Field(default_factory=lambda: [50, 100])
    prestige_tuning_fork_keep: int = Field(default=2, ge=0, description="Tuning fork levels kept on ascension.")
    focus_reduction_per_level: float = Field(default=0.05, ge=0.0)
    miss_divisor_base: float = Field(default=3.0, ge=1.0)
    miss_divisor_floor: float = Field(default=2.0, ge=1.0)

    @field_validator("core_bonus_thresholds")
    @classmethod
    def sort_thresholds(cls, value: List[int]) -> List[int]:
        return sorted(int(item) for item in value)


class HarmonicConfig(BaseModel):
    rhythm: RhythmConfig = Field(default_factory=RhythmConfig)
    timing: TimingConfig = Field(default_factory=TimingConfig)
    economy: EconomyConfig = Field(default_factory=EconomyConfig)


def _default_config_candidates() -> List[Path]:
    config_directory = Path(user_config_dir("Harmonic", "Harmonic"))
    return [
        Path.cwd() / "harmonic_config.json",
        config_directory / "harmonic_config.json",
    ]


def _resolve_config_path() -> Optional[Path]:
    explicit_path_text = os.environ.get("HARMONIC_CONFIG_PATH", "").strip()
    if explicit_path_text:
        return Path(explicit_path_text)

    for candidate_path in _default_config_candidates():
        if candidate_path.exists():
            return candidate_path

    return None


def _read_json_file_utf8(config_path: Path) -> Dict[str, Any]:
    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise
    except OSError as exception:
        raise OSError(f"Failed to read config file: {config_path}. Error: {exception}") from exception

    try:
        parsed = json.loads(raw_text)
    except json.JSONDecodeError as exception:
        raise ValueError(f"Config file is not valid JSON: {config_path}. Error: {exception}") from exception

    if not isinstance(parsed, dict):
        raise ValueError(f"Config file root must be a JSON object: {config_path}")

    return parsed


def _apply_environment_overrides(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """
    Environment overrides are optional. The config file is the primary source of truth.

    Override variables:
    - HARMONIC_BASE_BPM
    - HARMONIC_BEATS_PER_RING
    - HARMONIC_BASE_WINDOW_MS
    - HARMONIC_METRONOME_COST
    """
    def ensure_nested(config_root: Dict[str, Any], section_name: str) -> Dict[str, Any]:
        section = config_root.get(section_name)
        if isinstance(section, dict):
            section = dict(section)
        else:
            section = {}
        config_root[section_name] = section
        return section

    updated_config = dict(config_dict)

    rhythm_section = ensure_nested(updated_config, "rhythm")
    timing_section = ensure_nested(updated_config, "timing")
    economy_section = ensure_nested(updated_config, "economy")

    def override_int(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "").strip()
        if not value_text:
            return
        try:
            target_dict[key_name] = int(value_text)
        except ValueError:
            return

    def override_float(env_name: str, target_dict: Dict[str, Any], key_name: str) -> None:
        value_text = os.environ.get(env_name, "").strip()
        if not value_text:
            return
        try:
            target_dict[key_name] = float(value_text)
        except ValueError:
            return

    override_float("HARMONIC_BASE_BPM", rhythm_section, "base_bpm")
    override_int("HARMONIC_BEATS_PER_RING", rhythm_section, "beats_per_ring")
    override_float("HARMONIC_BASE_WINDOW_MS", timing_section, "base_window_ms")
    override_int("HARMONIC_METRONOME_COST", economy_section, "metronome_cost")

    return updated_config


def load_config(config_path: Optional[Path] = None) -> Tuple[HarmonicConfig, Optional[Path]]:
    resolved_path = config_path if config_path is not None else _resolve_config_path()
    json_dict: Dict[str, Any] = {}
    if resolved_path is not None:
        json_dict = _read_json_file_utf8(resolved_path)
    json_dict = _apply_environment_overrides(json_dict)

    try:
        config = HarmonicConfig.model_validate(json_dict)
    except ValidationError as exception:
        source_text = str(resolved_path) if resolved_path is not None else "(defaults)"
        raise ValueError(f"Config validation failed for {source_text}:\n{exception}") from exception

    return config, resolved_path


@lru_cache(maxsize=1)
def get_config() -> Tuple[HarmonicConfig, Optional[Path]]:
    return load_config()


def main() -> int:
    try:
        config, resolved_path = load_config()
    except Exception as exception:
        error_payload = {"ok": False, "error": str(exception)}
        print(json.dumps(error_payload, ensure_ascii=False, indent=2))
        return 2

    output_payload = {
        "ok": True,
        "config_path": str(resolved_path) if resolved_path is not None else None,
        "config": config.model_dump(),
    }
    print(json.dumps(output_payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
