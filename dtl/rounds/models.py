from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Tuple

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .errors import InvalidRoundRecord
from .shots import SHOTS_PER_ROUND, SHOTS_PER_STATION, Shot


class RoundStatus(str, Enum):
    SETUP = "setup"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class SetupParameters(BaseModel):
    """Choices made before the first target is called.

    Equipment ids are opaque references into the equipment directory and are
    carried through as given; an empty string means "not selected".
    """

    gun_id: str = Field(
        default="",
        validation_alias=AliasChoices("gun_id", "gunId"),
        serialization_alias="gunId",
    )
    over_choke_id: str = Field(
        default="",
        validation_alias=AliasChoices("over_choke_id", "overChokeId"),
        serialization_alias="overChokeId",
    )
    under_choke_id: str = Field(
        default="",
        validation_alias=AliasChoices("under_choke_id", "underChokeId"),
        serialization_alias="underChokeId",
    )
    ammunition_id: str = Field(
        default="",
        validation_alias=AliasChoices("ammunition_id", "ammunitionId"),
        serialization_alias="ammunitionId",
    )
    venue: str = Field(default="", validation_alias=AliasChoices("venue", "club"))
    conditions: str = Field(
        default="", validation_alias=AliasChoices("conditions", "weather")
    )

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Round(BaseModel):
    id: str
    user_id: str = Field(
        validation_alias=AliasChoices("user_id", "userId"),
        serialization_alias="userId",
    )
    timestamp: datetime = Field(validation_alias=AliasChoices("timestamp", "date"))
    gun_id: str = Field(
        default="",
        validation_alias=AliasChoices("gun_id", "gunId"),
        serialization_alias="gunId",
    )
    over_choke_id: str = Field(
        default="",
        validation_alias=AliasChoices("over_choke_id", "overChokeId"),
        serialization_alias="overChokeId",
    )
    under_choke_id: str = Field(
        default="",
        validation_alias=AliasChoices("under_choke_id", "underChokeId"),
        serialization_alias="underChokeId",
    )
    ammunition_id: str = Field(
        default="",
        validation_alias=AliasChoices("ammunition_id", "ammunitionId"),
        serialization_alias="ammunitionId",
    )
    venue: str = Field(default="", validation_alias=AliasChoices("venue", "club"))
    conditions: str = Field(
        default="", validation_alias=AliasChoices("conditions", "weather")
    )
    shots: Tuple[Shot, ...] = ()
    total_score: int = Field(
        default=0,
        validation_alias=AliasChoices("total_score", "totalScore"),
        serialization_alias="totalScore",
    )
    hit_count: int = Field(
        default=0,
        validation_alias=AliasChoices("hit_count", "hitCount"),
        serialization_alias="hitCount",
    )
    status: RoundStatus = RoundStatus.IN_PROGRESS

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("timestamp")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _check_grid(self) -> "Round":
        if self.status is RoundStatus.SETUP:
            if self.shots:
                raise ValueError("a round in setup has no shot grid yet")
            if (self.total_score, self.hit_count) != (0, 0):
                raise ValueError("a round in setup has no score yet")
            return self

        if len(self.shots) != SHOTS_PER_ROUND:
            raise ValueError(
                f"expected {SHOTS_PER_ROUND} shots, got {len(self.shots)}"
            )
        for index, shot in enumerate(self.shots):
            station, shot_number = divmod(index, SHOTS_PER_STATION)
            if (shot.station, shot.shot_number) != (station + 1, shot_number + 1):
                raise ValueError(
                    f"shot {index} is station {shot.station} shot "
                    f"{shot.shot_number}; grid must be station-major"
                )

        total = sum(shot.score or 0 for shot in self.shots)
        hits = sum(1 for shot in self.shots if shot.is_hit)
        if (self.total_score, self.hit_count) != (total, hits):
            raise ValueError(
                f"totals ({self.total_score}, {self.hit_count}) disagree with "
                f"shots ({total}, {hits})"
            )
        if self.status is RoundStatus.COMPLETED and not all(
            shot.is_complete for shot in self.shots
        ):
            raise ValueError("a completed round cannot contain unresolved shots")
        return self

    @property
    def hit_rate(self) -> float:
        return self.hit_count / SHOTS_PER_ROUND * 100

    @property
    def setup(self) -> SetupParameters:
        return SetupParameters(
            gun_id=self.gun_id,
            over_choke_id=self.over_choke_id,
            under_choke_id=self.under_choke_id,
            ammunition_id=self.ammunition_id,
            venue=self.venue,
            conditions=self.conditions,
        )

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Round":
        if not isinstance(data, Mapping):
            raise InvalidRoundRecord(
                f"round record must be an object, got {type(data).__name__}"
            )
        try:
            return Round.model_validate(dict(data))
        except ValidationError as exc:
            raise InvalidRoundRecord(str(exc)) from exc


__all__ = [
    "Round",
    "RoundStatus",
    "SetupParameters",
]
