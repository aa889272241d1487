from __future__ import annotations

import json
import logging
import re
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Dict, List, Optional, Protocol

from dtl.config import get_settings

from .errors import InvalidRoundInput, InvalidRoundRecord
from .models import Round, RoundStatus

logger = logging.getLogger(__name__)


class RoundRepository(Protocol):
    """Storage contract for a user's rounds.

    ``append_completed_round`` is called once per finished round and must not
    touch rounds already stored. The order of ``load_completed_rounds`` is
    unspecified; sort with :func:`dtl.rounds.stats.sort_rounds`.
    """

    def load_completed_rounds(self, user_id: str) -> List[Round]: ...

    def append_completed_round(self, user_id: str, round_: Round) -> None: ...

    def load_in_progress_round(self, user_id: str) -> Optional[Round]: ...

    def save_in_progress_round(self, user_id: str, round_: Round) -> None: ...

    def clear_in_progress_round(self, user_id: str) -> None: ...


def _check_completed(round_: Round) -> None:
    if round_.status is not RoundStatus.COMPLETED:
        raise InvalidRoundInput(
            f"only completed rounds enter the history, got {round_.status.value}"
        )


def _check_in_progress(round_: Round) -> None:
    if round_.status is not RoundStatus.IN_PROGRESS:
        raise InvalidRoundInput(
            f"only in-progress rounds can be saved as current, got {round_.status.value}"
        )


class InMemoryRoundRepository:
    def __init__(self) -> None:
        self._history: Dict[str, List[Round]] = {}
        self._current: Dict[str, Round] = {}
        self._lock = Lock()

    def load_completed_rounds(self, user_id: str) -> List[Round]:
        with self._lock:
            return list(self._history.get(user_id, []))

    def append_completed_round(self, user_id: str, round_: Round) -> None:
        _check_completed(round_)
        with self._lock:
            self._history.setdefault(user_id, []).append(round_)

    def load_in_progress_round(self, user_id: str) -> Optional[Round]:
        with self._lock:
            return self._current.get(user_id)

    def save_in_progress_round(self, user_id: str, round_: Round) -> None:
        _check_in_progress(round_)
        with self._lock:
            self._current[user_id] = round_

    def clear_in_progress_round(self, user_id: str) -> None:
        with self._lock:
            self._current.pop(user_id, None)


SAFE_USER_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def _sanitize_user_id(user_id: str) -> str:
    """Restrict user ids to filesystem-safe characters."""

    if not SAFE_USER_ID_RE.match(user_id):
        raise InvalidRoundInput(f"Invalid user_id for filesystem usage: {user_id!r}")
    return user_id


class JsonRoundRepository:
    """File store: ``<base>/<user>/history.jsonl`` and ``current.json``.

    History is append-only, one round per line.
    """

    HISTORY_FILE = "history.jsonl"
    CURRENT_FILE = "current.json"

    def __init__(self, base_dir: Path | str):
        self._base_dir = Path(base_dir).expanduser().resolve()

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _user_dir(self, user_id: str) -> Path:
        return self._base_dir / _sanitize_user_id(user_id)

    def load_completed_rounds(self, user_id: str) -> List[Round]:
        path = self._user_dir(user_id) / self.HISTORY_FILE
        if not path.exists():
            return []

        rounds: List[Round] = []
        with path.open("rb") as f:
            for line_no, raw in enumerate(f, start=1):
                if not raw.strip():
                    continue
                try:
                    line = raw.decode("utf-8")
                    rounds.append(Round.from_dict(json.loads(line)))
                except (
                    UnicodeDecodeError,
                    json.JSONDecodeError,
                    InvalidRoundRecord,
                ) as exc:
                    logger.warning(
                        "skipping unreadable round at %s:%d: %s", path, line_no, exc
                    )
        return rounds

    def append_completed_round(self, user_id: str, round_: Round) -> None:
        _check_completed(round_)
        user_dir = self._user_dir(user_id)
        user_dir.mkdir(parents=True, exist_ok=True)
        with (user_dir / self.HISTORY_FILE).open("a", encoding="utf-8") as f:
            f.write(json.dumps(round_.to_dict()))
            f.write("\n")

    def load_in_progress_round(self, user_id: str) -> Optional[Round]:
        path = self._user_dir(user_id) / self.CURRENT_FILE
        if not path.exists():
            return None
        try:
            return Round.from_dict(json.loads(path.read_bytes().decode("utf-8")))
        except (UnicodeDecodeError, json.JSONDecodeError, InvalidRoundRecord) as exc:
            logger.warning("ignoring unreadable in-progress round %s: %s", path, exc)
            return None

    def save_in_progress_round(self, user_id: str, round_: Round) -> None:
        _check_in_progress(round_)
        user_dir = self._user_dir(user_id)
        user_dir.mkdir(parents=True, exist_ok=True)
        path = user_dir / self.CURRENT_FILE
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(round_.to_dict(), indent=2), encoding="utf-8")
        tmp_path.replace(path)

    def clear_in_progress_round(self, user_id: str) -> None:
        path = self._user_dir(user_id) / self.CURRENT_FILE
        path.unlink(missing_ok=True)


@lru_cache(maxsize=1)
def get_round_repository() -> RoundRepository:
    return JsonRoundRepository(get_settings().rounds_dir)


__all__ = [
    "RoundRepository",
    "InMemoryRoundRepository",
    "JsonRoundRepository",
    "get_round_repository",
]
