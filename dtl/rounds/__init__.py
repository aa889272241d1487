from .engine import (
    complete_round,
    compute_totals,
    create_round,
    cycle_shot,
    is_complete,
    reset_round,
)
from .errors import (
    InvalidRoundInput,
    InvalidRoundRecord,
    RoundError,
    RoundNotComplete,
    RoundNotFound,
)
from .models import Round, RoundStatus, SetupParameters
from .repository import InMemoryRoundRepository, JsonRoundRepository, RoundRepository
from .service import RoundService, get_round_service
from .shots import BarrelOutcome, Shot, ShotState, resolve_score

__all__ = [
    "BarrelOutcome",
    "Shot",
    "ShotState",
    "resolve_score",
    "Round",
    "RoundStatus",
    "SetupParameters",
    "create_round",
    "cycle_shot",
    "is_complete",
    "complete_round",
    "reset_round",
    "compute_totals",
    "RoundError",
    "InvalidRoundInput",
    "InvalidRoundRecord",
    "RoundNotComplete",
    "RoundNotFound",
    "RoundRepository",
    "InMemoryRoundRepository",
    "JsonRoundRepository",
    "RoundService",
    "get_round_service",
]
