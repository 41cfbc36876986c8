"""Command-line entry point: input profile and controller management."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

import platformdirs

from .config import (
    APP_NAME,
    DEFAULT_PROFILE,
    PORT_COUNT,
    Config,
    assign_controller,
    bind_input_profile,
    clear_bindings,
    default_config_path,
)

RUNNING_MARKER = "game_running"


def _non_negative(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError("must not be negative")
    return value


def build_parser() -> argparse.ArgumentParser:
    """The command-line parser."""
    parser = argparse.ArgumentParser(prog=APP_NAME, description="N64 emulator")
    parser.add_argument("game", nargs="?")
    parser.add_argument("-f", "--fullscreen", action="store_true")
    parser.add_argument(
        "-c",
        "--configure-input-profile",
        metavar="PROFILE_NAME",
        help="Create a new input profile (keyboard/gamepad mappings).",
    )
    parser.add_argument(
        "-b",
        "--bind-input-profile",
        metavar="PROFILE_NAME",
        help="Must also specify --port. Used to bind a previously created profile to a port",
    )
    parser.add_argument(
        "-l",
        "--list-controllers",
        action="store_true",
        help="Lists connected controllers which can be used in --assign-controller",
    )
    parser.add_argument(
        "-a",
        "--assign-controller",
        type=_non_negative,
        metavar="CONTROLLER_NUMBER",
        help="Must also specify --port. Used to assign a controller listed in "
        "--list-controllers to a port",
    )
    parser.add_argument(
        "-p",
        "--port",
        type=int,
        metavar="PORT",
        help="Valid values: 1-4. To be used alongside --bind-input-profile and "
        "--assign-controller",
    )
    parser.add_argument(
        "-z",
        "--clear-input-bindings",
        action="store_true",
        help="Clear all input profile bindings and controller assignments",
    )
    return parser


def _prepare_directories() -> None:
    config_dir = platformdirs.user_config_path(APP_NAME, appauthor=False)
    cache_dir = platformdirs.user_cache_path(APP_NAME, appauthor=False)
    config_dir.mkdir(parents=True, exist_ok=True)
    cache_dir.mkdir(parents=True, exist_ok=True)
    Path(cache_dir, RUNNING_MARKER).unlink(missing_ok=True)


def _connected_controllers() -> list[tuple[str, str]]:
    """(guid, name) of joysticks visible here; no joystick backend is bundled, so none."""
    return []


def _fail(message: str) -> int:
    print(message, file=sys.stderr)
    return 1


def _run(args: argparse.Namespace, config: Config) -> int:
    if args.clear_input_bindings:
        clear_bindings(config)
        return 0
    if args.port is not None and not 1 <= args.port <= PORT_COUNT:
        return _fail(f"Port must be between 1 and {PORT_COUNT}")

    controllers = _connected_controllers()
    if args.list_controllers:
        if not controllers:
            print("No controllers connected")
        for number, (_guid, name) in enumerate(controllers):
            print(f"{number}: {name}")
        return 0
    if args.assign_controller is not None:
        if args.port is None:
            return _fail("Must specify port number")
        try:
            assign_controller(
                config, args.assign_controller, args.port, [guid for guid, _ in controllers]
            )
        except ValueError as error:
            return _fail(str(error))
        return 0
    if args.bind_input_profile is not None:
        if args.port is None:
            return _fail("Must specify port number")
        try:
            bind_input_profile(config, args.bind_input_profile, args.port)
        except ValueError as error:
            return _fail(str(error))
        return 0
    if args.configure_input_profile is not None:
        name = args.configure_input_profile
        if name == DEFAULT_PROFILE:
            return _fail("Profile name cannot be default")
        if not name:
            return _fail("Profile name cannot be empty")
        return _fail("Interactive profile configuration needs a display, which is unavailable")
    if args.game is not None:
        return _fail(f"Cannot run {args.game}: no emulator core is available")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; return the exit status."""
    arguments = list(sys.argv[1:] if argv is None else argv)
    _prepare_directories()
    parser = build_parser()
    args = parser.parse_args(arguments)
    if not arguments:
        parser.print_help()
        return 0

    config_path = default_config_path()
    config = Config.load(config_path)
    try:
        return _run(args, config)
    finally:
        config.save(config_path)


if __name__ == "__main__":
    sys.exit(main())