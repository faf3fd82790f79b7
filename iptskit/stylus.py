"""Translation of stylus state into Linux input events."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, NamedTuple, Optional

# Linux input event codes.
EV_SYN = 0x00
EV_KEY = 0x01
EV_ABS = 0x03

SYN_REPORT = 0

BTN_TOOL_PEN = 0x140
BTN_TOOL_RUBBER = 0x141
BTN_TOUCH = 0x14A
BTN_STYLUS = 0x14B

ABS_X = 0x00
ABS_Y = 0x01
ABS_PRESSURE = 0x18
ABS_TILT_X = 0x1A
ABS_TILT_Y = 0x1B
ABS_MISC = 0x28

INPUT_PROP_POINTER = 0x00
INPUT_PROP_DIRECT = 0x01

USHRT_MAX = 0xFFFF

MAX_X = 9600
MAX_Y = 7200
MAX_P = 4096

DEVICE_NAME = "IPTS Stylus"


def _round(value: float) -> int:
    """Round half away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


class InputEvent(NamedTuple):
    type: int
    code: int
    value: int


class AbsInfo(NamedTuple):
    minimum: int
    maximum: int
    resolution: int


@dataclass
class StylusData:
    """State of the stylus with coordinates and pressure normalized to [0, 1]."""

    proximity: bool = False
    contact: bool = False
    button: bool = False
    rubber: bool = False
    timestamp: int = 0
    x: float = 0.0
    y: float = 0.0
    pressure: float = 0.0
    altitude: float = 0.0
    azimuth: float = 0.0


def calculate_tilt(altitude: float, azimuth: float) -> tuple[int, int]:
    """Tilt on the X and Y axis, in hundredths of a degree."""
    if altitude <= 0:
        return (0, 0)

    sin_alt = math.sin(altitude)
    cos_alt = math.cos(altitude)

    atan_x = math.atan2(cos_alt, sin_alt * math.cos(azimuth))
    atan_y = math.atan2(cos_alt, sin_alt * math.sin(azimuth))

    tx = 9000 - _round(atan_x * 4500 / (math.pi / 4))
    ty = _round(atan_y * 4500 / (math.pi / 4)) - 9000
    return (tx, ty)


class StylusDevice:
    """A virtual stylus that turns stylus data into input events.

    Events are passed to ``sink``; without one they are collected in ``events``.
    """

    def __init__(
        self,
        width: float,
        height: float,
        vendor: int = 0,
        product: int = 0,
        sink: Optional[Callable[[InputEvent], None]] = None,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("screen width and height must be positive")

        self.events: list[InputEvent] = []
        self._sink = sink if sink is not None else self.events.append

        self.name = DEVICE_NAME
        self.vendor = vendor
        self.product = product

        self.evbits = frozenset({EV_KEY, EV_ABS})
        self.propbits = frozenset({INPUT_PROP_DIRECT, INPUT_PROP_POINTER})
        self.keybits = frozenset({BTN_TOUCH, BTN_STYLUS, BTN_TOOL_PEN, BTN_TOOL_RUBBER})

        # Resolution for X / Y is in units per mm, for tilt in units per radian.
        res_x = _round(MAX_X / (width * 10))
        res_y = _round(MAX_Y / (height * 10))
        res_tilt = _round(18000.0 / math.pi)

        self.absinfo: dict[int, AbsInfo] = {
            ABS_X: AbsInfo(0, MAX_X, res_x),
            ABS_Y: AbsInfo(0, MAX_Y, res_y),
            ABS_PRESSURE: AbsInfo(0, MAX_P, 0),
            ABS_TILT_X: AbsInfo(-9000, 9000, res_tilt),
            ABS_TILT_Y: AbsInfo(-9000, 9000, res_tilt),
            ABS_MISC: AbsInfo(0, USHRT_MAX, 0),
        }

        self._enabled = True
        self._active = False
        self._last = StylusData()

    def _emit(self, event_type: int, code: int, value: int) -> None:
        self._sink(InputEvent(event_type, code, value))

    def update(self, data: StylusData) -> None:
        """Emit the events for the current stylus state."""
        self._active = data.proximity

        # Switching tools within one frame causes issues, lift for one frame.
        if self._last.rubber != data.rubber:
            self._active = False

        if self._active:
            tilt_x, tilt_y = calculate_tilt(data.altitude, data.azimuth)

            self._emit(EV_KEY, BTN_TOUCH, int(data.contact))
            self._emit(EV_KEY, BTN_TOOL_PEN, int(not data.rubber))
            self._emit(EV_KEY, BTN_TOOL_RUBBER, int(data.rubber))
            self._emit(EV_KEY, BTN_STYLUS, int(data.button))

            self._emit(EV_ABS, ABS_X, _round(data.x * MAX_X))
            self._emit(EV_ABS, ABS_Y, _round(data.y * MAX_Y))
            self._emit(EV_ABS, ABS_PRESSURE, _round(data.pressure * MAX_P))
            self._emit(EV_ABS, ABS_MISC, data.timestamp)

            self._emit(EV_ABS, ABS_TILT_X, tilt_x)
            self._emit(EV_ABS, ABS_TILT_Y, tilt_y)
        else:
            self._lift()

        self._last = data
        self._sync()

    def disable(self) -> None:
        """Disable the stylus and lift it."""
        self._enabled = False
        self._active = False
        self._lift()
        self._sync()

    def enable(self) -> None:
        self._enabled = True

    def enabled(self) -> bool:
        return self._enabled

    def active(self) -> bool:
        """Whether the stylus is in proximity and sending data."""
        return self._active

    def _lift(self) -> None:
        self._emit(EV_KEY, BTN_TOUCH, 0)
        self._emit(EV_KEY, BTN_TOOL_PEN, 0)
        self._emit(EV_KEY, BTN_TOOL_RUBBER, 0)
        self._emit(EV_KEY, BTN_STYLUS, 0)

    def _sync(self) -> None:
        self._emit(EV_SYN, SYN_REPORT, 0)