"""Telemetry helpers for round lifecycle instrumentation."""

from __future__ import annotations

import logging
from typing import Callable, Dict, Mapping, MutableMapping, Optional

RoundTelemetryEmitter = Callable[[str, Mapping[str, object]], None]

_emitter: Optional[RoundTelemetryEmitter] = None
_logger = logging.getLogger("dtl.telemetry.events")


def set_round_telemetry_emitter(candidate: RoundTelemetryEmitter | None) -> None:
    """Register a telemetry emitter used for round instrumentation."""

    global _emitter
    _emitter = candidate if callable(candidate) else None


def _safe_emit(event: str, payload: MutableMapping[str, object]) -> None:
    if not _emitter:
        _logger.debug("telemetry emitter not configured for event %s", event)
        return
    try:
        _emitter(event, dict(payload))
    except Exception:
        _logger.exception("failed to emit telemetry event %s", event)


def record_round_started(
    round_id: str, user_id: str, *, venue: str | None = None, quick: bool = False
) -> None:
    payload: Dict[str, object] = {"roundId": round_id, "userId": user_id}
    if venue:
        payload["venue"] = venue
    if quick:
        payload["quick"] = True
    payload["ts"] = _now_ms()
    _safe_emit("rounds.start", payload)


def record_shot_cycled(
    round_id: str, shot_index: int, score: int | None, *, total_score: int
) -> None:
    payload: Dict[str, object] = {
        "roundId": round_id,
        "shotIndex": int(shot_index),
        "score": score,
        "totalScore": int(total_score),
        "ts": _now_ms(),
    }
    _safe_emit("rounds.shot.cycle", payload)


def record_round_completed(
    round_id: str, *, total_score: int, hit_count: int
) -> None:
    payload: Dict[str, object] = {
        "roundId": round_id,
        "totalScore": int(total_score),
        "hitCount": int(hit_count),
        "ts": _now_ms(),
    }
    _safe_emit("rounds.complete", payload)


def record_round_reset(round_id: str, *, resolved_shots: int = 0) -> None:
    payload: Dict[str, object] = {"roundId": round_id}
    if resolved_shots:
        payload["resolvedShots"] = int(resolved_shots)
    payload["ts"] = _now_ms()
    _safe_emit("rounds.reset", payload)


def _now_ms() -> int:
    from time import time

    return int(time() * 1000)


__all__ = [
    "set_round_telemetry_emitter",
    "record_round_started",
    "record_shot_cycled",
    "record_round_completed",
    "record_round_reset",
]
