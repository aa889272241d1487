"""Telemetry hooks for round lifecycle instrumentation."""

from .events import (
    record_round_completed,
    record_round_reset,
    record_round_started,
    record_shot_cycled,
    set_round_telemetry_emitter,
)

__all__ = [
    "set_round_telemetry_emitter",
    "record_round_started",
    "record_shot_cycled",
    "record_round_completed",
    "record_round_reset",
]
