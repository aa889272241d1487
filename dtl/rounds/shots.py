"""Shot model and DTL scoring rules.

A DTL target may be engaged with up to two barrels. A first-barrel kill is
worth 3 points, a second-barrel kill 2 points and a lost target 0. The score
of a shot is always derived from its two barrel outcomes via
:func:`resolve_score`; it is never edited on its own.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

STATIONS = 5
SHOTS_PER_STATION = 5
SHOTS_PER_ROUND = STATIONS * SHOTS_PER_STATION

FIRST_BARREL_SCORE = 3
SECOND_BARREL_SCORE = 2
MISS_SCORE = 0
MAX_SCORE = SHOTS_PER_ROUND * FIRST_BARREL_SCORE


class BarrelOutcome(str, Enum):
    HIT = "hit"
    MISS = "miss"


def resolve_score(
    first: Optional[BarrelOutcome], second: Optional[BarrelOutcome]
) -> Optional[int]:
    """Return the points for a barrel pair, or ``None`` while unresolved.

    A first-barrel hit scores regardless of the second barrel.
    """

    if first is BarrelOutcome.HIT:
        return FIRST_BARREL_SCORE
    if first is None or second is None:
        return None
    if second is BarrelOutcome.HIT:
        return SECOND_BARREL_SCORE
    return MISS_SCORE


class ShotState(str, Enum):
    """The four positions of the per-target input cycle."""

    UNSET = "unset"
    FIRST_BARREL = "first_barrel"
    SECOND_BARREL = "second_barrel"
    LOST = "lost"


Outcomes = tuple[Optional[BarrelOutcome], Optional[BarrelOutcome]]

# state -> (first barrel, second barrel)
_STATE_OUTCOMES: dict[ShotState, Outcomes] = {
    ShotState.UNSET: (None, None),
    ShotState.FIRST_BARREL: (BarrelOutcome.HIT, None),
    ShotState.SECOND_BARREL: (BarrelOutcome.MISS, BarrelOutcome.HIT),
    ShotState.LOST: (BarrelOutcome.MISS, BarrelOutcome.MISS),
}

_TRANSITIONS: dict[ShotState, ShotState] = {
    ShotState.UNSET: ShotState.FIRST_BARREL,
    ShotState.FIRST_BARREL: ShotState.SECOND_BARREL,
    ShotState.SECOND_BARREL: ShotState.LOST,
    ShotState.LOST: ShotState.UNSET,
}


def next_state(state: ShotState) -> ShotState:
    return _TRANSITIONS[state]


class Shot(BaseModel):
    """One of the 25 firing positions of a round."""

    station: int = Field(ge=1, le=STATIONS)
    shot_number: int = Field(
        ge=1,
        le=SHOTS_PER_STATION,
        validation_alias=AliasChoices("shot_number", "shotNumber"),
        serialization_alias="shotNumber",
    )
    first_barrel: Optional[BarrelOutcome] = Field(
        default=None,
        validation_alias=AliasChoices(
            "first_barrel", "firstBarrelOutcome", "first_barrel_outcome"
        ),
        serialization_alias="firstBarrelOutcome",
    )
    second_barrel: Optional[BarrelOutcome] = Field(
        default=None,
        validation_alias=AliasChoices(
            "second_barrel", "secondBarrelOutcome", "second_barrel_outcome"
        ),
        serialization_alias="secondBarrelOutcome",
    )
    score: Optional[int] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @model_validator(mode="after")
    def _score_matches_outcomes(self) -> "Shot":
        expected = resolve_score(self.first_barrel, self.second_barrel)
        if self.score != expected:
            raise ValueError(
                f"score {self.score!r} does not match barrel outcomes "
                f"({self._label(self.first_barrel)}, {self._label(self.second_barrel)})"
            )
        return self

    @staticmethod
    def _label(outcome: Optional[BarrelOutcome]) -> str:
        return outcome.value if outcome is not None else "unset"

    @property
    def is_complete(self) -> bool:
        return self.score is not None

    @property
    def is_hit(self) -> bool:
        return BarrelOutcome.HIT in (self.first_barrel, self.second_barrel)

    @property
    def state(self) -> ShotState:
        for state, outcomes in _STATE_OUTCOMES.items():
            if outcomes == (self.first_barrel, self.second_barrel):
                return state
        # (hit, hit) and (hit, miss) score like a first-barrel kill.
        if self.first_barrel is BarrelOutcome.HIT:
            return ShotState.FIRST_BARREL
        return ShotState.UNSET

    def with_state(self, state: ShotState) -> "Shot":
        first, second = _STATE_OUTCOMES[state]
        return Shot(
            station=self.station,
            shot_number=self.shot_number,
            first_barrel=first,
            second_barrel=second,
            score=resolve_score(first, second),
        )

    def cycle(self) -> "Shot":
        return self.with_state(next_state(self.state))


def blank_shot(station: int, shot_number: int) -> Shot:
    return Shot(
        station=station,
        shot_number=shot_number,
        first_barrel=None,
        second_barrel=None,
        score=None,
    )


__all__ = [
    "BarrelOutcome",
    "ShotState",
    "Shot",
    "resolve_score",
    "next_state",
    "blank_shot",
    "STATIONS",
    "SHOTS_PER_STATION",
    "SHOTS_PER_ROUND",
    "FIRST_BARREL_SCORE",
    "SECOND_BARREL_SCORE",
    "MISS_SCORE",
    "MAX_SCORE",
]
