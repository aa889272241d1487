"""Round state machine.

Rounds move ``setup -> in-progress -> completed``. ``create_round`` skips the
setup state by building the shot grid straight from :class:`SetupParameters`;
``completed`` is terminal. Every operation returns a new :class:`Round` and
leaves its argument untouched, so callers decide when (and whether) to
persist.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Iterable, Optional

from .errors import InvalidRoundInput, RoundNotComplete
from .models import Round, RoundStatus, SetupParameters
from .shots import (
    MAX_SCORE,
    SHOTS_PER_ROUND,
    SHOTS_PER_STATION,
    STATIONS,
    Shot,
    blank_shot,
)

logger = logging.getLogger(__name__)


def compute_totals(shots: Iterable[Shot]) -> tuple[int, int]:
    """Return ``(total_score, hit_count)`` for a shot sequence.

    Unresolved shots count as zero points; a shot is a hit when either barrel
    broke the target.
    """

    total = 0
    hits = 0
    for shot in shots:
        total += shot.score or 0
        if shot.is_hit:
            hits += 1
    return total, hits


def create_round(
    setup: SetupParameters | None = None,
    *,
    user_id: str,
    round_id: str | None = None,
    now: datetime | None = None,
) -> Round:
    setup = setup or SetupParameters()
    shots = tuple(
        blank_shot(station, shot_number)
        for station in range(1, STATIONS + 1)
        for shot_number in range(1, SHOTS_PER_STATION + 1)
    )
    round_ = Round(
        id=round_id or str(uuid.uuid4()),
        user_id=user_id,
        timestamp=now or datetime.now(timezone.utc),
        gun_id=setup.gun_id,
        over_choke_id=setup.over_choke_id,
        under_choke_id=setup.under_choke_id,
        ammunition_id=setup.ammunition_id,
        venue=setup.venue,
        conditions=setup.conditions,
        shots=shots,
        total_score=0,
        hit_count=0,
        status=RoundStatus.IN_PROGRESS,
    )
    logger.debug("created round %s for user %s", round_.id, user_id)
    return round_


def _require_in_progress(round_: Optional[Round]) -> Round:
    if round_ is None:
        raise InvalidRoundInput("no round to update")
    if round_.status is not RoundStatus.IN_PROGRESS:
        raise InvalidRoundInput(
            f"round {round_.id} is {round_.status.value}, not in-progress"
        )
    return round_


def _check_index(shot_index: object) -> int:
    if isinstance(shot_index, bool) or not isinstance(shot_index, int):
        raise InvalidRoundInput(f"shot index must be an integer, got {shot_index!r}")
    if not 0 <= shot_index < SHOTS_PER_ROUND:
        raise InvalidRoundInput(
            f"shot index {shot_index} outside [0, {SHOTS_PER_ROUND})"
        )
    return shot_index


def _with_shots(round_: Round, shots: tuple[Shot, ...]) -> Round:
    total, hits = compute_totals(shots)
    return round_.model_copy(
        update={"shots": shots, "total_score": total, "hit_count": hits}
    )


def cycle_shot(round_: Optional[Round], shot_index: int) -> Round:
    """Advance one target through ``unset -> 3 -> 2 -> 0 -> unset``."""

    current = _require_in_progress(round_)
    index = _check_index(shot_index)

    shots = list(current.shots)
    shots[index] = shots[index].cycle()
    updated = _with_shots(current, tuple(shots))
    logger.debug(
        "round %s shot %d -> %s (total=%d hits=%d)",
        updated.id,
        index,
        shots[index].score,
        updated.total_score,
        updated.hit_count,
    )
    return updated


def _require_round(round_: Optional[Round]) -> Round:
    if round_ is None:
        raise InvalidRoundInput("no round to inspect")
    return round_


def unresolved_shots(round_: Optional[Round]) -> list[int]:
    shots = _require_round(round_).shots
    return [index for index, shot in enumerate(shots) if not shot.is_complete]


def is_complete(round_: Optional[Round]) -> bool:
    round_ = _require_round(round_)
    if len(round_.shots) != SHOTS_PER_ROUND:
        return False
    return not unresolved_shots(round_)


def complete_round(round_: Optional[Round]) -> Round:
    current = _require_in_progress(round_)
    missing = unresolved_shots(current)
    if missing:
        raise RoundNotComplete(current.id, missing)

    completed = current.model_copy(update={"status": RoundStatus.COMPLETED})
    logger.info(
        "completed round %s: %d/%d, %d/%d targets",
        completed.id,
        completed.total_score,
        MAX_SCORE,
        completed.hit_count,
        SHOTS_PER_ROUND,
    )
    return completed


def reset_round(round_: Optional[Round]) -> None:
    """Discard an in-progress round; nothing of it is kept."""

    current = _require_in_progress(round_)
    logger.debug("discarded round %s", current.id)


__all__ = [
    "compute_totals",
    "create_round",
    "cycle_shot",
    "is_complete",
    "unresolved_shots",
    "complete_round",
    "reset_round",
]
