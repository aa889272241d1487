"""Read-only lookup of equipment and venue names.

Rounds only carry equipment ids. Resolving them to names is a display concern,
and an id the directory no longer knows resolves to a fallback label rather
than an error.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from dtl.config import get_settings

logger = logging.getLogger(__name__)

UNKNOWN_LABEL = "Unknown"


class EquipmentKind(str, Enum):
    GUN = "gun"
    CHOKE = "choke"
    AMMUNITION = "ammunition"


class EquipmentItem(BaseModel):
    id: str
    name: str
    kind: EquipmentKind
    details: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class Venue(BaseModel):
    id: str
    name: str
    location: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class _DirectoryDocument(BaseModel):
    guns: List[dict] = Field(default_factory=list)
    chokes: List[dict] = Field(default_factory=list)
    ammunition: List[dict] = Field(
        default_factory=list,
        validation_alias=AliasChoices("ammunition", "cartridges"),
    )
    venues: List[Venue] = Field(
        default_factory=list, validation_alias=AliasChoices("venues", "clubs")
    )

    model_config = ConfigDict(extra="ignore")


class EquipmentDirectory(Protocol):
    def items(self, kind: EquipmentKind) -> List[EquipmentItem]: ...

    def venues(self) -> List[Venue]: ...

    def name_for(self, identifier: str) -> Optional[str]: ...


class StaticDirectory:
    def __init__(
        self,
        items: Iterable[EquipmentItem] = (),
        venues: Iterable[Venue] = (),
    ) -> None:
        self._items: Dict[EquipmentKind, List[EquipmentItem]] = {
            kind: [] for kind in EquipmentKind
        }
        self._names: Dict[str, str] = {}
        for item in items:
            self._items[item.kind].append(item)
            self._names.setdefault(item.id, item.name)
        self._venues = list(venues)
        for venue in self._venues:
            self._names.setdefault(venue.id, venue.name)

    @classmethod
    def from_file(cls, path: Path | str) -> "StaticDirectory":
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        document = _DirectoryDocument.model_validate(data)
        items: List[EquipmentItem] = []
        for kind, entries in (
            (EquipmentKind.GUN, document.guns),
            (EquipmentKind.CHOKE, document.chokes),
            (EquipmentKind.AMMUNITION, document.ammunition),
        ):
            for entry in entries:
                items.append(EquipmentItem.model_validate({**entry, "kind": kind}))
        return cls(items=items, venues=document.venues)

    def items(self, kind: EquipmentKind) -> List[EquipmentItem]:
        return list(self._items[kind])

    def venues(self) -> List[Venue]:
        return list(self._venues)

    def name_for(self, identifier: str) -> Optional[str]:
        return self._names.get(identifier)


def display_name(
    directory: EquipmentDirectory | None,
    identifier: str,
    fallback: str = UNKNOWN_LABEL,
) -> str:
    if directory is None or not identifier:
        return fallback
    return directory.name_for(identifier) or fallback


@lru_cache(maxsize=1)
def get_directory() -> StaticDirectory:
    path = get_settings().directory_file
    if path is None:
        return StaticDirectory()
    if not path.exists():
        logger.warning("equipment directory %s not found; names will be unknown", path)
        return StaticDirectory()
    return StaticDirectory.from_file(path)


__all__ = [
    "EquipmentKind",
    "EquipmentItem",
    "Venue",
    "EquipmentDirectory",
    "StaticDirectory",
    "display_name",
    "get_directory",
    "UNKNOWN_LABEL",
]
