from __future__ import annotations

import logging
from functools import lru_cache
from typing import List, Optional

from dtl.equipment.directory import (
    EquipmentDirectory,
    EquipmentKind,
    get_directory,
)
from dtl.telemetry import events as telemetry

from . import engine
from .errors import InvalidRoundInput, RoundNotFound
from .models import Round, SetupParameters
from .repository import RoundRepository, get_round_repository
from .stats import RoundFilter, SortKey, SortOrder, filter_rounds, sort_rounds

logger = logging.getLogger(__name__)


class RoundService:
    """Drives one user's current round against a repository.

    The state machine is pure; this class decides when its results are
    written. The in-memory round returned by each call is authoritative.
    """

    def __init__(
        self,
        repository: RoundRepository,
        directory: EquipmentDirectory | None = None,
    ) -> None:
        self._repository = repository
        self._directory = directory

    @property
    def repository(self) -> RoundRepository:
        return self._repository

    # Round lifecycle
    def start_round(
        self, user_id: str, setup: SetupParameters | None = None, *, quick: bool = False
    ) -> Round:
        existing = self.current_round(user_id)
        if existing is not None:
            raise InvalidRoundInput(
                f"round {existing.id} is still in progress; complete or reset it first"
            )

        round_ = engine.create_round(setup, user_id=user_id)
        self._repository.save_in_progress_round(user_id, round_)
        logger.debug("user %s started round %s", user_id, round_.id)
        telemetry.record_round_started(
            round_.id, user_id, venue=round_.venue, quick=quick
        )
        return round_

    def quick_start(self, user_id: str) -> Round:
        return self.start_round(user_id, self.default_setup(), quick=True)

    def default_setup(self) -> SetupParameters:
        """Pre-select each choice only when the directory offers exactly one."""

        if self._directory is None:
            return SetupParameters()

        def _only(ids: List[str]) -> str:
            return ids[0] if len(ids) == 1 else ""

        guns = [item.id for item in self._directory.items(EquipmentKind.GUN)]
        chokes = [item.id for item in self._directory.items(EquipmentKind.CHOKE)]
        ammunition = [
            item.id for item in self._directory.items(EquipmentKind.AMMUNITION)
        ]
        venues = [venue.name for venue in self._directory.venues()]
        return SetupParameters(
            gun_id=_only(guns),
            over_choke_id=_only(chokes),
            under_choke_id=_only(chokes),
            ammunition_id=_only(ammunition),
            venue=_only(venues),
        )

    def current_round(self, user_id: str) -> Optional[Round]:
        return self._repository.load_in_progress_round(user_id)

    def _require_current(self, user_id: str) -> Round:
        round_ = self.current_round(user_id)
        if round_ is None:
            raise RoundNotFound(f"no round in progress for {user_id}")
        return round_

    def cycle(self, user_id: str, shot_index: int) -> Round:
        updated = engine.cycle_shot(self._require_current(user_id), shot_index)
        self._repository.save_in_progress_round(user_id, updated)
        telemetry.record_shot_cycled(
            updated.id,
            shot_index,
            updated.shots[shot_index].score,
            total_score=updated.total_score,
        )
        return updated

    def complete(self, user_id: str) -> Round:
        completed = engine.complete_round(self._require_current(user_id))
        self._repository.append_completed_round(user_id, completed)
        self._repository.clear_in_progress_round(user_id)
        logger.debug("round %s appended to history of %s", completed.id, user_id)
        telemetry.record_round_completed(
            completed.id,
            total_score=completed.total_score,
            hit_count=completed.hit_count,
        )
        return completed

    def reset(self, user_id: str) -> None:
        current = self._require_current(user_id)
        engine.reset_round(current)
        self._repository.clear_in_progress_round(user_id)
        telemetry.record_round_reset(
            current.id,
            resolved_shots=sum(1 for shot in current.shots if shot.is_complete),
        )

    # Queries
    def history(
        self,
        user_id: str,
        filters: RoundFilter | None = None,
        *,
        sort_key: SortKey = SortKey.DATE,
        order: SortOrder = SortOrder.DESC,
    ) -> List[Round]:
        rounds = self._repository.load_completed_rounds(user_id)
        return sort_rounds(filter_rounds(rounds, filters), sort_key, order)


@lru_cache(maxsize=1)
def get_round_service() -> RoundService:
    return RoundService(get_round_repository(), get_directory())


__all__ = [
    "RoundService",
    "get_round_service",
]
