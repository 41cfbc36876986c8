"""Controller input profiles and conversion of device state into N64 pad words."""

from __future__ import annotations

import math
from collections.abc import Container, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

R_DPAD = 0
L_DPAD = 1
D_DPAD = 2
U_DPAD = 3
START_BUTTON = 4
Z_TRIG = 5
B_BUTTON = 6
A_BUTTON = 7
R_CBUTTON = 8
L_CBUTTON = 9
D_CBUTTON = 10
U_CBUTTON = 11
R_TRIG = 12
L_TRIG = 13
X_AXIS = 16
Y_AXIS = 24

AXIS_LEFT = 14
AXIS_RIGHT = 15
AXIS_UP = 16
AXIS_DOWN = 17

BUTTON_COUNT = 14
BINDING_COUNT = 18

MAX_AXIS_VALUE = 85.0
AXIS_RADIUS = 95.0
I16_MAX = 32767

# Keyboard scancodes.
SCANCODE_A = 4
SCANCODE_C = 6
SCANCODE_D = 7
SCANCODE_I = 12
SCANCODE_J = 13
SCANCODE_K = 14
SCANCODE_L = 15
SCANCODE_S = 22
SCANCODE_W = 26
SCANCODE_X = 27
SCANCODE_Z = 29
SCANCODE_RETURN = 40
SCANCODE_RIGHT = 79
SCANCODE_LEFT = 80
SCANCODE_DOWN = 81
SCANCODE_UP = 82
SCANCODE_LCTRL = 224
SCANCODE_LSHIFT = 225

# Game controller buttons.
CONTROLLER_BUTTON_A = 0
CONTROLLER_BUTTON_X = 2
CONTROLLER_BUTTON_START = 6
CONTROLLER_BUTTON_LEFT_SHOULDER = 9
CONTROLLER_BUTTON_RIGHT_SHOULDER = 10
CONTROLLER_BUTTON_DPAD_UP = 11
CONTROLLER_BUTTON_DPAD_DOWN = 12
CONTROLLER_BUTTON_DPAD_LEFT = 13
CONTROLLER_BUTTON_DPAD_RIGHT = 14

# Game controller axes.
CONTROLLER_AXIS_LEFT_X = 0
CONTROLLER_AXIS_LEFT_Y = 1
CONTROLLER_AXIS_RIGHT_X = 2
CONTROLLER_AXIS_RIGHT_Y = 3
CONTROLLER_AXIS_TRIGGER_LEFT = 4

Binding = tuple[bool, int]
AxisBinding = tuple[bool, int, int]


class JoystickLike(Protocol):
    """A raw joystick: numbered buttons, hats and axes."""

    def axis(self, index: int) -> int: ...

    def button(self, index: int) -> bool: ...

    def hat(self, index: int) -> int: ...


class ControllerLike(Protocol):
    """A mapped game controller: named buttons and axes by number."""

    def axis(self, axis: int) -> int: ...

    def button(self, button: int) -> bool: ...


def _bindings(count: int) -> tuple[Binding, ...]:
    return ((False, 0),) * count


def _axis_bindings(count: int) -> tuple[AxisBinding, ...]:
    return ((False, 0, 0),) * count


_FIELDS: dict[str, tuple[int, int]] = {
    "keys": (BINDING_COUNT, 2),
    "controller_buttons": (BUTTON_COUNT, 2),
    "controller_axis": (BINDING_COUNT, 3),
    "joystick_buttons": (BUTTON_COUNT, 2),
    "joystick_hat": (BUTTON_COUNT, 3),
    "joystick_axis": (BINDING_COUNT, 3),
}


@dataclass(frozen=True)
class InputProfile:
    """Mappings from keyboard, controller and joystick inputs to N64 buttons."""

    keys: tuple[Binding, ...] = field(default_factory=lambda: _bindings(BINDING_COUNT))
    controller_buttons: tuple[Binding, ...] = field(
        default_factory=lambda: _bindings(BUTTON_COUNT)
    )
    controller_axis: tuple[AxisBinding, ...] = field(
        default_factory=lambda: _axis_bindings(BINDING_COUNT)
    )
    joystick_buttons: tuple[Binding, ...] = field(
        default_factory=lambda: _bindings(BUTTON_COUNT)
    )
    joystick_hat: tuple[AxisBinding, ...] = field(
        default_factory=lambda: _axis_bindings(BUTTON_COUNT)
    )
    joystick_axis: tuple[AxisBinding, ...] = field(
        default_factory=lambda: _axis_bindings(BINDING_COUNT)
    )

    def __post_init__(self) -> None:
        for name, (count, width) in _FIELDS.items():
            entries = getattr(self, name)
            if len(entries) != count:
                raise ValueError(f"{name} needs {count} entries, got {len(entries)}")
            for entry in entries:
                if len(entry) != width:
                    raise ValueError(f"{name} entries have {width} fields, got {len(entry)}")

    def to_dict(self) -> dict[str, list[list[Any]]]:
        """Plain JSON-ready form: each binding as a list."""
        return {name: [list(entry) for entry in getattr(self, name)] for name in _FIELDS}

    @classmethod
    def from_dict(cls, data: Mapping[str, Sequence[Sequence[Any]]]) -> InputProfile:
        """Build a profile from the form produced by :meth:`to_dict`."""
        values: dict[str, tuple[tuple[Any, ...], ...]] = {}
        for name, (count, width) in _FIELDS.items():
            if name not in data:
                raise ValueError(f"missing field {name}")
            entries = data[name]
            if len(entries) != count:
                raise ValueError(f"{name} needs {count} entries, got {len(entries)}")
            converted = []
            for entry in entries:
                if len(entry) != width:
                    raise ValueError(f"{name} entries have {width} fields, got {len(entry)}")
                enabled, *numbers = entry
                converted.append((bool(enabled), *(int(number) for number in numbers)))
            values[name] = tuple(converted)
        return cls(**values)


def bound_axis(x: float, y: float) -> tuple[float, float]:
    """Scale a stick position back onto the reachable circle if it lies outside."""
    distance = math.sqrt(x * x + y * y)
    if distance > AXIS_RADIUS:
        scale = AXIS_RADIUS / distance
        return x * scale, y * scale
    return x, y


def default_profile() -> InputProfile:
    """The built-in profile for keyboard and standard game controllers."""
    keys = list(_bindings(BINDING_COUNT))
    for slot, code in (
        (R_DPAD, SCANCODE_D),
        (L_DPAD, SCANCODE_A),
        (D_DPAD, SCANCODE_S),
        (U_DPAD, SCANCODE_W),
        (START_BUTTON, SCANCODE_RETURN),
        (Z_TRIG, SCANCODE_Z),
        (B_BUTTON, SCANCODE_LCTRL),
        (A_BUTTON, SCANCODE_LSHIFT),
        (R_CBUTTON, SCANCODE_L),
        (L_CBUTTON, SCANCODE_J),
        (D_CBUTTON, SCANCODE_K),
        (U_CBUTTON, SCANCODE_I),
        (R_TRIG, SCANCODE_C),
        (L_TRIG, SCANCODE_X),
        (AXIS_LEFT, SCANCODE_LEFT),
        (AXIS_RIGHT, SCANCODE_RIGHT),
        (AXIS_UP, SCANCODE_UP),
        (AXIS_DOWN, SCANCODE_DOWN),
    ):
        keys[slot] = (True, code)

    buttons = list(_bindings(BUTTON_COUNT))
    for slot, button in (
        (R_DPAD, CONTROLLER_BUTTON_DPAD_RIGHT),
        (L_DPAD, CONTROLLER_BUTTON_DPAD_LEFT),
        (D_DPAD, CONTROLLER_BUTTON_DPAD_DOWN),
        (U_DPAD, CONTROLLER_BUTTON_DPAD_UP),
        (START_BUTTON, CONTROLLER_BUTTON_START),
        (B_BUTTON, CONTROLLER_BUTTON_X),
        (A_BUTTON, CONTROLLER_BUTTON_A),
        (R_TRIG, CONTROLLER_BUTTON_RIGHT_SHOULDER),
        (L_TRIG, CONTROLLER_BUTTON_LEFT_SHOULDER),
    ):
        buttons[slot] = (True, button)

    axes = list(_axis_bindings(BINDING_COUNT))
    for slot, axis, direction in (
        (Z_TRIG, CONTROLLER_AXIS_TRIGGER_LEFT, 1),
        (R_CBUTTON, CONTROLLER_AXIS_RIGHT_X, 1),
        (L_CBUTTON, CONTROLLER_AXIS_RIGHT_X, -1),
        (D_CBUTTON, CONTROLLER_AXIS_RIGHT_Y, 1),
        (U_CBUTTON, CONTROLLER_AXIS_RIGHT_Y, -1),
        (AXIS_LEFT, CONTROLLER_AXIS_LEFT_X, -1),
        (AXIS_RIGHT, CONTROLLER_AXIS_LEFT_X, 1),
        (AXIS_UP, CONTROLLER_AXIS_LEFT_Y, -1),
        (AXIS_DOWN, CONTROLLER_AXIS_LEFT_Y, 1),
    ):
        axes[slot] = (True, axis, direction)

    return InputProfile(
        keys=tuple(keys),
        controller_buttons=tuple(buttons),
        controller_axis=tuple(axes),
    )


def _scaled(position: int) -> float:
    return position * MAX_AXIS_VALUE / I16_MAX


def _stick(bindings: Sequence[AxisBinding], read_axis: Any) -> tuple[float, float]:
    x = 0.0
    y = 0.0
    for slot in (AXIS_LEFT, AXIS_RIGHT):
        enabled, axis, direction = bindings[slot]
        if enabled:
            position = read_axis(axis)
            if position * direction > 0:
                x = _scaled(position)
    for slot in (AXIS_DOWN, AXIS_UP):
        enabled, axis, direction = bindings[slot]
        if enabled:
            position = read_axis(axis)
            if position * direction > 0:
                y = -_scaled(position)
    return x, y


def axis_from_joystick(profile: InputProfile, joystick: JoystickLike) -> tuple[float, float]:
    """Stick position read from a raw joystick."""
    return _stick(profile.joystick_axis, joystick.axis)


def axis_from_controller(
    profile: InputProfile, controller: ControllerLike
) -> tuple[float, float]:
    """Stick position read from a game controller."""
    return _stick(profile.controller_axis, controller.axis)


def axis_from_keys(profile: InputProfile, pressed: Container[int]) -> tuple[float, float]:
    """Stick position from pressed keyboard scancodes."""
    x = 0.0
    y = 0.0

    def held(slot: int) -> bool:
        enabled, code = profile.keys[slot]
        return enabled and code in pressed

    if held(AXIS_LEFT):
        x = -MAX_AXIS_VALUE
    if held(AXIS_RIGHT):
        x = MAX_AXIS_VALUE
    if held(AXIS_DOWN):
        y = -MAX_AXIS_VALUE
    if held(AXIS_UP):
        y = MAX_AXIS_VALUE
    return x, y


def _axis_pressed(position: int, direction: int) -> bool:
    magnitude = min(abs(position), I16_MAX)
    return position * direction > 0 and magnitude > I16_MAX // 2


def buttons_from_joystick(profile: InputProfile, i: int, joystick: JoystickLike) -> int:
    """Button bits contributed by a joystick for N64 button ``i``."""
    keys = 0
    enabled, button = profile.joystick_buttons[i]
    if enabled and joystick.button(button):
        keys |= 1 << i

    enabled, hat, state = profile.joystick_hat[i]
    if enabled and joystick.hat(hat) == state:
        keys |= 1 << i

    enabled, axis, direction = profile.joystick_axis[i]
    if enabled and _axis_pressed(joystick.axis(axis), direction):
        keys |= 1 << i
    return keys


def buttons_from_controller(profile: InputProfile, i: int, controller: ControllerLike) -> int:
    """Button bits contributed by a game controller for N64 button ``i``."""
    keys = 0
    enabled, button = profile.controller_buttons[i]
    if enabled and controller.button(button):
        keys |= 1 << i

    enabled, axis, direction = profile.controller_axis[i]
    if enabled and _axis_pressed(controller.axis(axis), direction):
        keys |= 1 << i
    return keys


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _to_byte(value: float) -> int:
    return max(-128, min(127, _round_half_away(value))) & 0xFF


def read_keys(
    profile: InputProfile,
    profile_name: str,
    channel: int,
    pressed: Container[int],
    joystick: JoystickLike | None = None,
    controller: ControllerLike | None = None,
) -> int:
    """Build the 32-bit pad word for one controller port.

    The keyboard only drives port 0 unless a non-default profile is bound.
    A joystick takes precedence over a game controller.
    """
    use_keyboard = profile_name != "default" or channel == 0
    keys = 0
    for i in range(BUTTON_COUNT):
        if use_keyboard:
            enabled, code = profile.keys[i]
            if enabled and code in pressed:
                keys |= 1 << i
        if joystick is not None:
            keys |= buttons_from_joystick(profile, i, joystick)
        elif controller is not None:
            keys |= buttons_from_controller(profile, i, controller)

    x, y = 0.0, 0.0
    if use_keyboard:
        x, y = axis_from_keys(profile, pressed)
    if joystick is not None:
        x, y = axis_from_joystick(profile, joystick)
    elif controller is not None:
        x, y = axis_from_controller(profile, controller)
    x, y = bound_axis(x, y)

    keys |= _to_byte(x) << X_AXIS
    keys |= _to_byte(y) << Y_AXIS
    return keys