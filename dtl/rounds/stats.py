"""Aggregates over completed rounds.

All functions here are pure: they read the rounds they are given, never
mutate them and never touch storage. Zero rounds is an ordinary input and
yields :data:`NO_DATA` (or ``None`` / an empty mapping) rather than an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

from dtl.equipment.directory import EquipmentDirectory, display_name

from .models import Round
from .shots import (
    SHOTS_PER_ROUND,
    STATIONS,
    BarrelOutcome,
)

DEFAULT_RECENT_WINDOW = 5
DEFAULT_TREND_LIMIT = 20


def _hit_rate(hits: int, rounds: int) -> float:
    return hits / (rounds * SHOTS_PER_ROUND) * 100


def _by_date(rounds: Iterable[Round]) -> List[Round]:
    return sorted(rounds, key=lambda r: r.timestamp)


# Summary


class Summary(BaseModel):
    count: int = 0
    average_score: Optional[float] = Field(
        default=None, serialization_alias="averageScore"
    )
    best_score: Optional[int] = Field(default=None, serialization_alias="bestScore")
    worst_score: Optional[int] = Field(default=None, serialization_alias="worstScore")
    hit_rate: Optional[float] = Field(default=None, serialization_alias="hitRate")
    recent_average: Optional[float] = Field(
        default=None, serialization_alias="recentAverage"
    )
    improvement: Optional[float] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def has_data(self) -> bool:
        return self.count > 0


NO_DATA = Summary()


def summarize(
    rounds: Sequence[Round], *, recent_window: int = DEFAULT_RECENT_WINDOW
) -> Summary:
    if not rounds:
        return NO_DATA

    count = len(rounds)
    scores = [r.total_score for r in rounds]
    average = sum(scores) / count

    ordered = _by_date(rounds)
    recent = ordered[-min(recent_window, count) :]
    recent_average = sum(r.total_score for r in recent) / len(recent)

    return Summary(
        count=count,
        average_score=average,
        best_score=max(scores),
        worst_score=min(scores),
        hit_rate=_hit_rate(sum(r.hit_count for r in rounds), count),
        recent_average=recent_average,
        improvement=recent_average - average if count >= recent_window else None,
    )


# Filtering


DateBound = Union[datetime, date]


@dataclass(frozen=True)
class RoundFilter:
    """Predicates applied together; ``None`` or ``""`` leaves a field open.

    Date bounds are inclusive. A plain ``date`` covers the whole (UTC) day.
    ``choke_id`` matches either barrel's choke.
    """

    date_from: Optional[DateBound] = None
    date_to: Optional[DateBound] = None
    gun_id: Optional[str] = None
    choke_id: Optional[str] = None
    ammunition_id: Optional[str] = None
    venue: Optional[str] = None
    min_score: Optional[int] = None
    max_score: Optional[int] = None

    def matches(self, round_: Round) -> bool:
        if self.date_from is not None and not _on_or_after(
            round_.timestamp, self.date_from
        ):
            return False
        if self.date_to is not None and not _on_or_before(
            round_.timestamp, self.date_to
        ):
            return False
        if self.gun_id and round_.gun_id != self.gun_id:
            return False
        if self.choke_id and self.choke_id not in (
            round_.over_choke_id,
            round_.under_choke_id,
        ):
            return False
        if self.ammunition_id and round_.ammunition_id != self.ammunition_id:
            return False
        if self.venue and self.venue.casefold() not in round_.venue.casefold():
            return False
        if self.min_score is not None and round_.total_score < self.min_score:
            return False
        if self.max_score is not None and round_.total_score > self.max_score:
            return False
        return True


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _on_or_after(timestamp: datetime, bound: DateBound) -> bool:
    if isinstance(bound, datetime):
        return _as_utc(timestamp) >= _as_utc(bound)
    return _as_utc(timestamp).astimezone(timezone.utc).date() >= bound


def _on_or_before(timestamp: datetime, bound: DateBound) -> bool:
    if isinstance(bound, datetime):
        return _as_utc(timestamp) <= _as_utc(bound)
    return _as_utc(timestamp).astimezone(timezone.utc).date() <= bound


def filter_rounds(
    rounds: Iterable[Round], filters: RoundFilter | None = None
) -> List[Round]:
    if filters is None:
        return list(rounds)
    return [r for r in rounds if filters.matches(r)]


# Sorting


class SortKey(str, Enum):
    DATE = "date"
    SCORE = "score"
    HIT_RATE = "hitRate"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


_SORT_KEYS: Dict[SortKey, Callable[[Round], object]] = {
    SortKey.DATE: lambda r: _as_utc(r.timestamp),
    SortKey.SCORE: lambda r: r.total_score,
    SortKey.HIT_RATE: lambda r: r.hit_count / SHOTS_PER_ROUND,
}


def sort_rounds(
    rounds: Iterable[Round],
    key: SortKey = SortKey.DATE,
    order: SortOrder = SortOrder.DESC,
) -> List[Round]:
    """Stable sort; rounds with equal keys keep their input order either way."""

    return sorted(
        rounds,
        key=_SORT_KEYS[SortKey(key)],
        reverse=SortOrder(order) is SortOrder.DESC,
    )


# Equipment comparison


class EquipmentSlot(str, Enum):
    GUN = "gun"
    CHOKE = "choke"
    UNDER_CHOKE = "under-choke"
    AMMUNITION = "ammunition"

    def select(self, round_: Round) -> str:
        return _SLOT_SELECTORS[self](round_)


_SLOT_SELECTORS: Dict[EquipmentSlot, Callable[[Round], str]] = {
    EquipmentSlot.GUN: lambda r: r.gun_id,
    EquipmentSlot.CHOKE: lambda r: r.over_choke_id,
    EquipmentSlot.UNDER_CHOKE: lambda r: r.under_choke_id,
    EquipmentSlot.AMMUNITION: lambda r: r.ammunition_id,
}

EquipmentSelector = Union[EquipmentSlot, Callable[[Round], str]]


class EquipmentAggregate(BaseModel):
    game_count: int = Field(serialization_alias="gameCount")
    total_score: int = Field(serialization_alias="totalScore")
    total_hits: int = Field(serialization_alias="totalHits")
    average_score: float = Field(serialization_alias="averageScore")
    average_hit_rate: float = Field(serialization_alias="averageHitRate")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


def aggregate_by_equipment(
    rounds: Iterable[Round], selector: EquipmentSelector
) -> Dict[str, EquipmentAggregate]:
    """Group rounds by the equipment id ``selector`` picks out.

    Rounds without an id are grouped under ``""`` rather than dropped. Groups
    appear in order of first use.
    """

    pick = selector.select if isinstance(selector, EquipmentSlot) else selector
    totals: Dict[str, List[int]] = {}
    for round_ in rounds:
        bucket = totals.setdefault(pick(round_), [0, 0, 0])
        bucket[0] += 1
        bucket[1] += round_.total_score
        bucket[2] += round_.hit_count

    return {
        equipment_id: EquipmentAggregate(
            game_count=games,
            total_score=score,
            total_hits=hits,
            average_score=score / games,
            average_hit_rate=_hit_rate(hits, games),
        )
        for equipment_id, (games, score, hits) in totals.items()
    }


class EquipmentComparisonRow(BaseModel):
    equipment_id: str = Field(serialization_alias="equipmentId")
    name: str
    stats: EquipmentAggregate

    model_config = ConfigDict(populate_by_name=True, frozen=True)


def equipment_comparison(
    rounds: Iterable[Round],
    slot: EquipmentSlot,
    directory: EquipmentDirectory | None = None,
) -> List[EquipmentComparisonRow]:
    """Per-equipment rows, best average score first."""

    rows = [
        EquipmentComparisonRow(
            equipment_id=equipment_id,
            name=display_name(directory, equipment_id),
            stats=aggregate,
        )
        for equipment_id, aggregate in aggregate_by_equipment(rounds, slot).items()
    ]
    return sorted(rows, key=lambda row: row.stats.average_score, reverse=True)


# Single-round and history breakdowns


class StationStats(BaseModel):
    station: int
    score: int
    hits: int

    model_config = ConfigDict(frozen=True)


def station_breakdown(round_: Round) -> List[StationStats]:
    scores = [0] * STATIONS
    hits = [0] * STATIONS
    for shot in round_.shots:
        scores[shot.station - 1] += shot.score or 0
        if shot.is_hit:
            hits[shot.station - 1] += 1
    return [
        StationStats(station=index + 1, score=scores[index], hits=hits[index])
        for index in range(STATIONS)
    ]


class RoundProgress(BaseModel):
    complete: int
    total: int
    percent: int

    model_config = ConfigDict(frozen=True)


def progress(round_: Round) -> RoundProgress:
    total = len(round_.shots)
    complete = sum(1 for shot in round_.shots if shot.is_complete)
    percent = round(complete / total * 100) if total else 0
    return RoundProgress(complete=complete, total=total, percent=percent)


class BarrelBreakdown(BaseModel):
    total_games: int = Field(serialization_alias="totalGames")
    first_barrel_hits: int = Field(serialization_alias="firstBarrelHits")
    second_barrel_hits: int = Field(serialization_alias="secondBarrelHits")
    misses: int
    first_barrel_pct: float = Field(serialization_alias="firstBarrelPercentage")
    second_barrel_pct: float = Field(serialization_alias="secondBarrelPercentage")
    hit_pct: float = Field(serialization_alias="hitPercentage")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


def barrel_breakdown(rounds: Sequence[Round]) -> BarrelBreakdown | None:
    if not rounds:
        return None

    first = second = misses = 0
    for round_ in rounds:
        for shot in round_.shots:
            if shot.first_barrel is BarrelOutcome.HIT:
                first += 1
            elif shot.second_barrel is BarrelOutcome.HIT:
                second += 1
            elif shot.is_complete:
                misses += 1

    targets = len(rounds) * SHOTS_PER_ROUND
    return BarrelBreakdown(
        total_games=len(rounds),
        first_barrel_hits=first,
        second_barrel_hits=second,
        misses=misses,
        first_barrel_pct=first / targets * 100,
        second_barrel_pct=second / targets * 100,
        hit_pct=(first + second) / targets * 100,
    )


class TrendPoint(BaseModel):
    index: int
    date: datetime
    score: int
    hit_rate: float = Field(serialization_alias="hitRate")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


def performance_trend(
    rounds: Iterable[Round], *, limit: int = DEFAULT_TREND_LIMIT
) -> List[TrendPoint]:
    """The last ``limit`` rounds in date order, numbered from 1."""

    if limit <= 0:
        return []
    window = _by_date(rounds)[-limit:]
    return [
        TrendPoint(
            index=position,
            date=r.timestamp,
            score=r.total_score,
            hit_rate=r.hit_rate,
        )
        for position, r in enumerate(window, start=1)
    ]


__all__ = [
    "Summary",
    "NO_DATA",
    "summarize",
    "RoundFilter",
    "filter_rounds",
    "SortKey",
    "SortOrder",
    "sort_rounds",
    "EquipmentSlot",
    "EquipmentAggregate",
    "aggregate_by_equipment",
    "EquipmentComparisonRow",
    "equipment_comparison",
    "StationStats",
    "station_breakdown",
    "RoundProgress",
    "progress",
    "BarrelBreakdown",
    "barrel_breakdown",
    "TrendPoint",
    "performance_trend",
]
