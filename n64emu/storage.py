"""Save-game types per cartridge and their files on disk."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Any


class SaveType(Enum):
    """Kinds of save storage a cartridge may use."""

    EEPROM_4K = auto()
    EEPROM_16K = auto()
    SRAM = auto()
    FLASH = auto()
    MEMPAK = auto()
    ROMSAVE = auto()


_EEPROM_16K_GAMES = frozenset(
    {
        "NB7", "NGT", "NFU", "NCW", "NCZ", "ND6", "NDO", "ND2", "N3D", "NMX", "NGC", "NIM",
        "NNB", "NMV", "NM8", "NEV", "NPP", "NUB", "NPD", "NRZ", "NR7", "NEP", "NYS",
    }
)

_FLASH_GAMES = frozenset(
    {
        "NCC", "NDA", "NAF", "NJF", "NKJ", "NZS", "NM6", "NCK", "NMQ", "NPN", "NPF", "NPO",
        "CP2", "NP3", "NRH", "NSQ", "NT9", "NW4", "NDP",
    }
)

_NO_SAVE_GAMES = frozenset({"NPQ"})


def save_types_for(game_id: str) -> list[SaveType]:
    """Save storage used by the game with this three-letter id."""
    if game_id in _EEPROM_16K_GAMES:
        return [SaveType.EEPROM_16K]
    if game_id in _FLASH_GAMES:
        return [SaveType.FLASH]
    if game_id in _NO_SAVE_GAMES:
        return []
    return [SaveType.EEPROM_4K, SaveType.SRAM]


@dataclass(frozen=True)
class SavePaths:
    """Files holding each kind of save for one game."""

    eep: Path
    sra: Path
    fla: Path
    pak: Path
    romsave: Path

    @classmethod
    def for_game(cls, base: str | Path, game_id: str, game_hash: str) -> SavePaths:
        """Paths under ``base`` named after the game; the directory is created."""
        directory = Path(base)
        directory.mkdir(parents=True, exist_ok=True)
        stem = f"{game_id}-{game_hash}"
        return cls(
            eep=directory / f"{stem}.eep",
            sra=directory / f"{stem}.sra",
            fla=directory / f"{stem}.fla",
            pak=directory / f"{stem}.mpk",
            romsave=directory / f"{stem}.romsave",
        )


_BINARY = {
    SaveType.EEPROM_4K: ("eep", "eeprom"),
    SaveType.EEPROM_16K: ("eep", "eeprom"),
    SaveType.SRAM: ("sra", "sram"),
    SaveType.FLASH: ("fla", "flash"),
    SaveType.MEMPAK: ("pak", "mempak"),
}

_DIRTY_ORDER = (
    ("eeprom", SaveType.EEPROM_16K),
    ("sram", SaveType.SRAM),
    ("flash", SaveType.FLASH),
    ("mempak", SaveType.MEMPAK),
    ("romsave", SaveType.ROMSAVE),
)


@dataclass
class Saves:
    """Save data in memory; a dirty flag marks data to flush to disk."""

    eeprom: bytearray = field(default_factory=bytearray)
    sram: bytearray = field(default_factory=bytearray)
    flash: bytearray = field(default_factory=bytearray)
    mempak: bytearray = field(default_factory=bytearray)
    romsave: dict[str, Any] = field(default_factory=dict)
    eeprom_dirty: bool = False
    sram_dirty: bool = False
    flash_dirty: bool = False
    mempak_dirty: bool = False
    romsave_dirty: bool = False

    def load(self, paths: SavePaths) -> None:
        """Read whichever save files exist; unreadable ones are left empty."""
        for path_name, data_name in {v for v in _BINARY.values()}:
            try:
                content = getattr(paths, path_name).read_bytes()
            except OSError:
                continue
            setattr(self, data_name, bytearray(content))
        try:
            text = paths.romsave.read_text(encoding="utf-8")
        except OSError:
            return
        loaded = json.loads(text)
        if not isinstance(loaded, dict):
            raise ValueError("romsave file must hold a JSON object")
        self.romsave = loaded

    def write(self, paths: SavePaths) -> None:
        """Write every save that has been modified."""
        for name, save_type in _DIRTY_ORDER:
            if getattr(self, f"{name}_dirty"):
                self.write_save(paths, save_type)

    def write_save(self, paths: SavePaths, save_type: SaveType) -> None:
        """Write one kind of save to its file."""
        if save_type is SaveType.ROMSAVE:
            paths.romsave.write_text(
                json.dumps(self.romsave, separators=(",", ":")), encoding="utf-8"
            )
            return
        path_name, data_name = _BINARY[save_type]
        getattr(paths, path_name).write_bytes(bytes(getattr(self, data_name)))