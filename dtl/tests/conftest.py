"""Shared pytest fixtures for tracker tests."""

from __future__ import annotations

import pytest

from dtl.config import reset_settings_cache
from dtl.equipment.directory import (
    EquipmentItem,
    EquipmentKind,
    StaticDirectory,
    Venue,
    get_directory,
)
from dtl.rounds.repository import (
    InMemoryRoundRepository,
    JsonRoundRepository,
    get_round_repository,
)
from dtl.rounds.service import RoundService, get_round_service
from dtl.telemetry import events as telemetry_events


def _clear_caches() -> None:
    reset_settings_cache()
    get_round_repository.cache_clear()
    get_directory.cache_clear()
    get_round_service.cache_clear()


@pytest.fixture(autouse=True)
def _isolated_state():
    _clear_caches()
    telemetry_events.set_round_telemetry_emitter(None)
    yield
    telemetry_events.set_round_telemetry_emitter(None)
    _clear_caches()


@pytest.fixture
def memory_repo() -> InMemoryRoundRepository:
    return InMemoryRoundRepository()


@pytest.fixture
def json_repo(tmp_path) -> JsonRoundRepository:
    return JsonRoundRepository(tmp_path / "rounds")


@pytest.fixture
def directory() -> StaticDirectory:
    return StaticDirectory(
        items=[
            EquipmentItem(id="gun-686", name="Beretta 686", kind=EquipmentKind.GUN),
            EquipmentItem(id="choke-im", name="Improved Modified", kind=EquipmentKind.CHOKE),
            EquipmentItem(id="ammo-24", name="Hull 24g #7.5", kind=EquipmentKind.AMMUNITION),
            EquipmentItem(id="ammo-28", name="Eley 28g #8", kind=EquipmentKind.AMMUNITION),
        ],
        venues=[Venue(id="club-1", name="Bisley", location="Surrey")],
    )


@pytest.fixture
def service(memory_repo, directory) -> RoundService:
    return RoundService(memory_repo, directory)


@pytest.fixture
def rounds_dir(tmp_path, monkeypatch):
    path = tmp_path / "data"
    monkeypatch.setenv("DTL_ROUNDS_DIR", str(path))
    monkeypatch.delenv("DTL_DIRECTORY_FILE", raising=False)
    _clear_caches()
    return path
