"""Persistent emulator configuration: input profiles, port bindings and controller assignments."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import platformdirs

from .input import InputProfile, default_profile

APP_NAME = "n64emu"
CONFIG_FILE_NAME = "config.json"
DEFAULT_PROFILE = "default"
PORT_COUNT = 4


def _default_profiles() -> dict[str, InputProfile]:
    return {DEFAULT_PROFILE: default_profile()}


def _check_port(port: int) -> int:
    if not 1 <= port <= PORT_COUNT:
        raise ValueError(f"Port must be between 1 and {PORT_COUNT}")
    return port - 1


@dataclass
class InputConfig:
    """Input profiles by name and which profile and controller each port uses."""

    input_profiles: dict[str, InputProfile] = field(default_factory=_default_profiles)
    input_profile_binding: list[str] = field(
        default_factory=lambda: [DEFAULT_PROFILE] * PORT_COUNT
    )
    controller_assignment: list[str | None] = field(
        default_factory=lambda: [None] * PORT_COUNT
    )


@dataclass
class Config:
    """Top-level configuration document."""

    input: InputConfig = field(default_factory=InputConfig)

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-ready form."""
        return {
            "input": {
                "input_profiles": {
                    name: profile.to_dict()
                    for name, profile in self.input.input_profiles.items()
                },
                "input_profile_binding": list(self.input.input_profile_binding),
                "controller_assignment": list(self.input.controller_assignment),
            }
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Config:
        """Build a configuration from the form produced by :meth:`to_dict`."""
        try:
            section = data["input"]
            raw_profiles = section["input_profiles"]
            bindings: Sequence[Any] = section["input_profile_binding"]
            assignments: Sequence[Any] = section["controller_assignment"]
        except (KeyError, TypeError) as error:
            raise ValueError(f"malformed configuration: {error}") from error
        if not isinstance(raw_profiles, Mapping):
            raise ValueError("input_profiles must be a mapping")
        if len(bindings) != PORT_COUNT or len(assignments) != PORT_COUNT:
            raise ValueError(f"bindings and assignments need {PORT_COUNT} entries")
        profiles = {
            str(name): InputProfile.from_dict(profile) for name, profile in raw_profiles.items()
        }
        return cls(
            InputConfig(
                input_profiles=profiles,
                input_profile_binding=[str(name) for name in bindings],
                controller_assignment=[
                    None if guid is None else str(guid) for guid in assignments
                ],
            )
        )

    @classmethod
    def load(cls, path: str | Path) -> Config:
        """Read a configuration file, falling back to defaults if it is missing or invalid."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
            return cls.from_dict(data)
        except (OSError, ValueError, TypeError, KeyError):
            return cls()

    def save(self, path: str | Path) -> None:
        """Write the configuration as indented JSON."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")


def default_config_path() -> Path:
    """Location of the configuration file in the user's config directory."""
    return platformdirs.user_config_path(APP_NAME, appauthor=False) / CONFIG_FILE_NAME


def clear_bindings(config: Config) -> None:
    """Bind every port to the default profile and unassign all controllers."""
    config.input.controller_assignment = [None] * PORT_COUNT
    config.input.input_profile_binding = [DEFAULT_PROFILE] * PORT_COUNT


def bind_input_profile(config: Config, profile: str, port: int) -> None:
    """Bind an existing profile to a port numbered from 1."""
    slot = _check_port(port)
    if profile not in config.input.input_profiles:
        raise ValueError("Invalid profile name")
    config.input.input_profile_binding[slot] = profile


def assign_controller(config: Config, controller: int, port: int, guids: Sequence[str]) -> None:
    """Assign the controller at position ``controller`` in ``guids`` to a port numbered from 1."""
    slot = _check_port(port)
    if not 0 <= controller < len(guids):
        raise ValueError("Invalid controller number")
    config.input.controller_assignment[slot] = guids[controller]