# -*- coding: utf-8 -*-
########################
# progress_snapshot.py
########################
# Purpose:
# - Plain-dict import/export of PlayerProgress for host-side persistence.
#
# Design notes:
# - Validate with pydantic, the same way config.py validates config files.
# - Keys match the host save format: camelCase, sigils as a nested object.
# - Export always produces a fresh dict. No live references leak out.
# - Writing the dict anywhere is the host's job.
#
########################
# Interfaces:
# Public classes:
# - class SigilLevels(pydantic.BaseModel)
# - class ProgressSnapshot(pydantic.BaseModel)
#
# Public functions:
# - export_progress(progress: PlayerProgress) -> dict[str, Any]
# - import_progress(payload: Mapping[str, Any]) -> PlayerProgress   # raises ValueError on invalid payloads
#
########################

from __future__ import annotations

from typing import Any, Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

import harmonic_models


class SigilLevels(BaseModel):
    tempo: int = Field(default=0, ge=0)
    echo: int = Field(default=0, ge=0)
    focus: int = Field(default=0, ge=0)


class ProgressSnapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    streak: int = Field(default=0, ge=0)
    harmonic_cores: int = Field(default=0, ge=0, alias="harmonicCores")
    tuning_fork_level: int = Field(default=0, ge=0, alias="tuningForkLevel")
    metronome_purchased: bool = Field(default=False, alias="metronomePurchased")
    chorus_level: int = Field(default=0, ge=0, alias="chorusLevel")
    quantized_ripples_level: int = Field(default=0, ge=0, alias="quantizedRipplesLevel")
    sigils: SigilLevels = Field(default_factory=SigilLevels)
    echo_accumulator: float = Field(default=0.0, ge=0.0, lt=1.0, alias="echoAccumulator")


def export_progress(progress: harmonic_models.PlayerProgress) -> Dict[str, Any]:
    snapshot = ProgressSnapshot(
        streak=progress.streak,
        harmonic_cores=progress.harmonic_cores,
        tuning_fork_level=progress.tuning_fork_level,
        metronome_purchased=progress.metronome_purchased,
        chorus_level=progress.chorus_level,
        quantized_ripples_level=progress.quantized_ripples_level,
        sigils=SigilLevels(**{kind.value: progress.sigil_level(kind) for kind in harmonic_models.SigilKind}),
        echo_accumulator=progress.echo_accumulator,
    )
    return snapshot.model_dump(by_alias=True)


def import_progress(payload: Mapping[str, Any]) -> harmonic_models.PlayerProgress:
    try:
        snapshot = ProgressSnapshot.model_validate(dict(payload))
    except ValidationError as exception:
        raise ValueError(f"Progress snapshot validation failed:\n{exception}") from exception

    sigils = snapshot.sigils.model_dump()
    return harmonic_models.PlayerProgress(
        streak=snapshot.streak,
        harmonic_cores=snapshot.harmonic_cores,
        tuning_fork_level=snapshot.tuning_fork_level,
        metronome_purchased=snapshot.metronome_purchased,
        chorus_level=snapshot.chorus_level,
        quantized_ripples_level=snapshot.quantized_ripples_level,
        sigils={kind: int(sigils[kind.value]) for kind in harmonic_models.SigilKind},
        echo_accumulator=snapshot.echo_accumulator,
    )
