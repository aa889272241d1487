from .directory import (
    EquipmentDirectory,
    EquipmentItem,
    EquipmentKind,
    StaticDirectory,
    Venue,
    display_name,
    get_directory,
)

__all__ = [
    "EquipmentDirectory",
    "EquipmentItem",
    "EquipmentKind",
    "StaticDirectory",
    "Venue",
    "display_name",
    "get_directory",
]
