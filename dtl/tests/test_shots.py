from __future__ import annotations

import pytest
from pydantic import ValidationError

from dtl.rounds.shots import (
    BarrelOutcome,
    Shot,
    ShotState,
    blank_shot,
    next_state,
    resolve_score,
)

HIT = BarrelOutcome.HIT
MISS = BarrelOutcome.MISS


@pytest.mark.parametrize(
    ("first", "second", "expected"),
    [
        (HIT, None, 3),
        (HIT, HIT, 3),
        (HIT, MISS, 3),
        (MISS, HIT, 2),
        (MISS, MISS, 0),
        (MISS, None, None),
        (None, None, None),
        (None, HIT, None),
        (None, MISS, None),
    ],
)
def test_resolve_score_covers_every_outcome_pair(first, second, expected) -> None:
    assert resolve_score(first, second) == expected


def test_unresolved_score_is_not_zero() -> None:
    assert resolve_score(None, None) is None
    assert resolve_score(MISS, None) is None


def test_cycle_visits_three_two_zero_then_blank() -> None:
    shot = blank_shot(1, 1)
    seen = []
    for _ in range(4):
        shot = shot.cycle()
        seen.append((shot.first_barrel, shot.second_barrel, shot.score))

    assert seen == [
        (HIT, None, 3),
        (MISS, HIT, 2),
        (MISS, MISS, 0),
        (None, None, None),
    ]


def test_four_cycles_return_to_start() -> None:
    start = blank_shot(3, 4)
    shot = start
    for _ in range(4):
        shot = shot.cycle()
    assert shot == start


def test_transition_table_is_a_single_four_cycle() -> None:
    state = ShotState.UNSET
    visited = []
    for _ in range(4):
        state = next_state(state)
        visited.append(state)
    assert visited[-1] is ShotState.UNSET
    assert set(visited) == set(ShotState)


def test_cycle_keeps_position() -> None:
    shot = blank_shot(4, 2).cycle().cycle()
    assert (shot.station, shot.shot_number) == (4, 2)


def test_shot_rejects_score_that_disagrees_with_outcomes() -> None:
    with pytest.raises(ValidationError):
        Shot(station=1, shot_number=1, first_barrel=MISS, second_barrel=MISS, score=3)
    with pytest.raises(ValidationError):
        Shot(station=1, shot_number=1, score=0)


@pytest.mark.parametrize(("station", "shot_number"), [(0, 1), (6, 1), (1, 0), (1, 6)])
def test_shot_position_bounds(station: int, shot_number: int) -> None:
    with pytest.raises(ValidationError):
        blank_shot(station, shot_number)


def test_completeness_and_hit_flags() -> None:
    first = Shot(station=1, shot_number=1, first_barrel=HIT, score=3)
    second = Shot(
        station=1, shot_number=2, first_barrel=MISS, second_barrel=HIT, score=2
    )
    lost = Shot(
        station=1, shot_number=3, first_barrel=MISS, second_barrel=MISS, score=0
    )
    half = Shot(station=1, shot_number=4, first_barrel=MISS)

    assert first.is_complete and first.is_hit
    assert second.is_complete and second.is_hit
    assert lost.is_complete and not lost.is_hit
    assert not half.is_complete and not half.is_hit


def test_serialises_with_record_field_names() -> None:
    shot = blank_shot(2, 5).cycle().cycle()
    payload = shot.model_dump(mode="json", by_alias=True)
    assert payload == {
        "station": 2,
        "shotNumber": 5,
        "firstBarrelOutcome": "miss",
        "secondBarrelOutcome": "hit",
        "score": 2,
    }
    assert Shot.model_validate(payload) == shot


def test_shot_is_frozen() -> None:
    shot = blank_shot(1, 1)
    with pytest.raises(ValidationError):
        shot.score = 3  # type: ignore[misc]
