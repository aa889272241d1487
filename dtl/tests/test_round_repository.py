from __future__ import annotations

import json

import pytest

from dtl.rounds.engine import create_round, cycle_shot
from dtl.rounds.errors import InvalidRoundInput
from dtl.rounds.repository import JsonRoundRepository

from .factories import round_with_total


@pytest.fixture(params=["memory", "json"])
def repo(request, memory_repo, json_repo):
    return memory_repo if request.param == "memory" else json_repo


def test_history_starts_empty(repo) -> None:
    assert repo.load_completed_rounds("shooter-1") == []


def test_append_and_load_completed_rounds(repo) -> None:
    first = round_with_total(60, day=0)
    second = round_with_total(45, day=1)

    repo.append_completed_round("shooter-1", first)
    repo.append_completed_round("shooter-1", second)

    loaded = repo.load_completed_rounds("shooter-1")
    assert sorted(r.id for r in loaded) == sorted([first.id, second.id])
    assert {r.total_score for r in loaded} == {60, 45}
    assert repo.load_completed_rounds("someone-else") == []


def test_append_rejects_unfinished_round(repo) -> None:
    with pytest.raises(InvalidRoundInput):
        repo.append_completed_round("shooter-1", create_round(user_id="shooter-1"))
    assert repo.load_completed_rounds("shooter-1") == []


def test_in_progress_round_save_load_clear(repo) -> None:
    assert repo.load_in_progress_round("shooter-1") is None

    round_ = cycle_shot(create_round(user_id="shooter-1"), 0)
    repo.save_in_progress_round("shooter-1", round_)
    assert repo.load_in_progress_round("shooter-1") == round_

    updated = cycle_shot(round_, 1)
    repo.save_in_progress_round("shooter-1", updated)
    assert repo.load_in_progress_round("shooter-1").total_score == 6

    repo.clear_in_progress_round("shooter-1")
    assert repo.load_in_progress_round("shooter-1") is None
    repo.clear_in_progress_round("shooter-1")


def test_completed_round_cannot_be_saved_as_current(repo) -> None:
    with pytest.raises(InvalidRoundInput):
        repo.save_in_progress_round("shooter-1", round_with_total(30))


def test_json_history_is_append_only(json_repo: JsonRoundRepository) -> None:
    json_repo.append_completed_round("shooter-1", round_with_total(60))
    path = json_repo.base_dir / "shooter-1" / JsonRoundRepository.HISTORY_FILE
    before = path.read_text(encoding="utf-8")

    json_repo.append_completed_round("shooter-1", round_with_total(70, day=1))
    after = path.read_text(encoding="utf-8")

    assert after.startswith(before)
    assert len(after.splitlines()) == 2


def test_json_history_skips_corrupt_lines(json_repo: JsonRoundRepository) -> None:
    good = round_with_total(66)
    json_repo.append_completed_round("shooter-1", good)
    path = json_repo.base_dir / "shooter-1" / JsonRoundRepository.HISTORY_FILE
    with path.open("a", encoding="utf-8") as f:
        f.write("{not json\n")
        broken = good.to_dict()
        broken["totalScore"] = 1
        f.write(json.dumps(broken) + "\n")
        f.write("\n")

    loaded = json_repo.load_completed_rounds("shooter-1")
    assert [r.id for r in loaded] == [good.id]


def test_json_ignores_unreadable_current_round(json_repo: JsonRoundRepository) -> None:
    user_dir = json_repo.base_dir / "shooter-1"
    user_dir.mkdir(parents=True)
    (user_dir / JsonRoundRepository.CURRENT_FILE).write_text("[]", encoding="utf-8")

    assert json_repo.load_in_progress_round("shooter-1") is None


@pytest.mark.parametrize("user_id", ["../escape", "a/b", "", "name with space"])
def test_json_rejects_unsafe_user_ids(json_repo: JsonRoundRepository, user_id) -> None:
    with pytest.raises(InvalidRoundInput):
        json_repo.load_completed_rounds(user_id)


def test_json_files_are_plain_round_records(json_repo: JsonRoundRepository) -> None:
    round_ = cycle_shot(create_round(user_id="shooter-1"), 4)
    json_repo.save_in_progress_round("shooter-1", round_)

    path = json_repo.base_dir / "shooter-1" / JsonRoundRepository.CURRENT_FILE
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == round_.to_dict()


@pytest.mark.parametrize(
    "bad_line", [b"42\n", b"null\n", b'"text"\n', b"[1, 2]\n", b"\xff\xfe{}\n"]
)
def test_json_history_skips_records_that_are_not_rounds(
    json_repo: JsonRoundRepository, bad_line: bytes
) -> None:
    good = round_with_total(51)
    json_repo.append_completed_round("shooter-1", good)
    path = json_repo.base_dir / "shooter-1" / JsonRoundRepository.HISTORY_FILE
    with path.open("ab") as f:
        f.write(bad_line)

    assert [r.id for r in json_repo.load_completed_rounds("shooter-1")] == [good.id]


@pytest.mark.parametrize("content", [b"null", b"42", b'"text"', b"\xff\xfe"])
def test_json_current_round_must_be_an_object(
    json_repo: JsonRoundRepository, content: bytes
) -> None:
    user_dir = json_repo.base_dir / "shooter-1"
    user_dir.mkdir(parents=True)
    (user_dir / JsonRoundRepository.CURRENT_FILE).write_bytes(content)

    assert json_repo.load_in_progress_round("shooter-1") is None
