"""Wire structures and constants of the IPTS touch data protocol."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import ClassVar

HID_REPORT_USAGE_PAGE_DIGITIZER = 0x000D
HID_REPORT_USAGE_PAGE_VENDOR = 0xFF00

# A report containing both of these usages carries touch data.
HID_REPORT_USAGE_SCAN_TIME = 0x56
HID_REPORT_USAGE_GESTURE_DATA = 0x61

# A one byte feature report with only this usage switches modes.
HID_REPORT_USAGE_SET_MODE = 0xC8

# A feature report with only this usage holds touch/pen metadata.
HID_REPORT_USAGE_METADATA = 0x63

RAW_FRAME_TYPE_STYLUS = 0x6
RAW_FRAME_TYPE_HEATMAP = 0x8

HID_FRAME_TYPE_HID = 0x0
HID_FRAME_TYPE_HEATMAP = 0x1
HID_FRAME_TYPE_METADATA = 0x2
HID_FRAME_TYPE_RAW = 0xEE
HID_FRAME_TYPE_REPORTS = 0xFF

REPORT_TYPE_TIMESTAMP = 0x00
REPORT_TYPE_DIMENSIONS = 0x03
REPORT_TYPE_HEATMAP = 0x25
REPORT_TYPE_STYLUS_V1 = 0x10
REPORT_TYPE_STYLUS_V2 = 0x60
REPORT_TYPE_FREQUENCY_NOISE = 0x04
REPORT_TYPE_PEN_GENERAL = 0x57
REPORT_TYPE_PEN_JNR_OUTPUT = 0x58
REPORT_TYPE_PEN_NOISE_METRICS_OUTPUT = 0x59
REPORT_TYPE_PEN_DATA_SELECTION = 0x5A
REPORT_TYPE_PEN_MAGNITUDE = 0x5B
REPORT_TYPE_PEN_DFT_WINDOW = 0x5C
REPORT_TYPE_PEN_MULTIPLE_REGION = 0x5D
REPORT_TYPE_PEN_TOUCHED_ANTENNAS = 0x5E
REPORT_TYPE_PEN_METADATA = 0x5F
REPORT_TYPE_PEN_DETECTION = 0x62
REPORT_TYPE_PEN_LIFT = 0x63

STYLUS_REPORT_MODE_BIT_PROXIMITY = 0
STYLUS_REPORT_MODE_BIT_CONTACT = 1
STYLUS_REPORT_MODE_BIT_BUTTON = 2
STYLUS_REPORT_MODE_BIT_RUBBER = 3

DFT_NUM_COMPONENTS = 9
DFT_MAX_ROWS = 16
DFT_PRESSURE_ROWS = 6

DFT_ID_POSITION = 6
DFT_ID_BUTTON = 9
DFT_ID_PRESSURE = 11

MAX_X = 9600
MAX_Y = 7200
MAX_PRESSURE_V1 = 1024
MAX_PRESSURE_V2 = 4096


class _Packed:
    """Base for little-endian packed structures decoded with :mod:`struct`."""

    _STRUCT: ClassVar[struct.Struct]
    SIZE: ClassVar[int]

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if "_STRUCT" in cls.__dict__:
            cls.SIZE = cls._STRUCT.size

    @classmethod
    def _unpack(cls, data) -> tuple:
        view = memoryview(data).cast("B")
        if len(view) < cls.SIZE:
            raise ValueError(
                f"{cls.__name__} needs {cls.SIZE} bytes, got {len(view)}"
            )
        return cls._STRUCT.unpack_from(view)


class _StylusMode:
    """Decodes the mode bit field shared by both stylus data layouts."""

    mode: int

    def _bit(self, bit: int) -> bool:
        return bool(self.mode & (1 << bit))

    @property
    def proximity(self) -> bool:
        return self._bit(STYLUS_REPORT_MODE_BIT_PROXIMITY)

    @property
    def contact(self) -> bool:
        return self._bit(STYLUS_REPORT_MODE_BIT_CONTACT)

    @property
    def button(self) -> bool:
        return self._bit(STYLUS_REPORT_MODE_BIT_BUTTON)

    @property
    def rubber(self) -> bool:
        return self._bit(STYLUS_REPORT_MODE_BIT_RUBBER)


@dataclass(frozen=True)
class Header(_Packed):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<BH")

    report: int
    timestamp: int

    @classmethod
    def from_bytes(cls, data) -> "Header":
        """Decode the structure from the start of ``data``."""
        return cls(*cls._unpack(data))


@dataclass(frozen=True)
class RawHeader(_Packed):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<II4x")

    counter: int
    frames: int

    @classmethod
    def from_bytes(cls, data) -> "RawHeader":
        """Decode the structure from the start of ``data``."""
        return cls(*cls._unpack(data))


@dataclass(frozen=True)
class RawFrame(_Packed):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<HHI8x")

    index: int
    type: int
    size: int

    @classmethod
    def from_bytes(cls, data) -> "RawFrame":
        """Decode the structure from the start of ``data``."""
        return cls(*cls._unpack(data))


@dataclass(frozen=True)
class HidFrame(_Packed):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<IxBx")

    size: int
    type: int

    @classmethod
    def from_bytes(cls, data) -> "HidFrame":
        """Decode the structure from the start of ``data``."""
        return cls(*cls._unpack(data))


@dataclass(frozen=True)
class ReportHeader(_Packed):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<BBH")

    type: int
    flags: int
    size: int

    @classmethod
    def from_bytes(cls, data) -> "ReportHeader":
        """Decode the structure from the start of ``data``."""
        return cls(*cls._unpack(data))


@dataclass(frozen=True)
class StylusReport(_Packed):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<B3xI")

    elements: int
    serial: int

    @classmethod
    def from_bytes(cls, data) -> "StylusReport":
        """Decode the structure from the start of ``data``."""
        return cls(*cls._unpack(data))


@dataclass(frozen=True)
class StylusDataV2(_StylusMode, _Packed):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<7H2x")

    timestamp: int
    mode: int
    x: int
    y: int
    pressure: int
    altitude: int
    azimuth: int

    @classmethod
    def from_bytes(cls, data) -> "StylusDataV2":
        """Decode the structure from the start of ``data``."""
        return cls(*cls._unpack(data))


@dataclass(frozen=True)
class StylusDataV1(_StylusMode, _Packed):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<4xBHHHx")

    mode: int
    x: int
    y: int
    pressure: int

    @classmethod
    def from_bytes(cls, data) -> "StylusDataV1":
        """Decode the structure from the start of ``data``."""
        return cls(*cls._unpack(data))


@dataclass(frozen=True)
class Dimensions(_Packed):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<8B")

    height: int
    width: int
    y_min: int
    y_max: int
    x_min: int
    x_max: int
    z_min: int
    z_max: int

    @classmethod
    def from_bytes(cls, data) -> "Dimensions":
        """Decode the structure from the start of ``data``."""
        return cls(*cls._unpack(data))


@dataclass(frozen=True)
class Timestamp(_Packed):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<2xHI")

    count: int
    timestamp: int

    @classmethod
    def from_bytes(cls, data) -> "Timestamp":
        """Decode the structure from the start of ``data``."""
        return cls(*cls._unpack(data))


@dataclass(frozen=True)
class HeatmapHeader(_Packed):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<5xI")

    size: int

    @classmethod
    def from_bytes(cls, data) -> "HeatmapHeader":
        """Decode the structure from the start of ``data``."""
        return cls(*cls._unpack(data))


@dataclass(frozen=True)
class PenDftWindow(_Packed):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<IBB3xB2x")

    timestamp: int  # counting at approx. 8 MHz
    num_rows: int
    seq_num: int
    data_type: int

    @classmethod
    def from_bytes(cls, data) -> "PenDftWindow":
        """Decode the structure from the start of ``data``."""
        return cls(*cls._unpack(data))


@dataclass(frozen=True)
class PenDftWindowRow(_Packed):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct(
        f"<II{DFT_NUM_COMPONENTS}h{DFT_NUM_COMPONENTS}hbbbb"
    )

    frequency: int
    magnitude: int
    real: tuple[int, ...]
    imag: tuple[int, ...]
    first: int
    last: int
    mid: int
    zero: int

    @classmethod
    def from_bytes(cls, data) -> "PenDftWindowRow":
        """Decode a DFT window row from the start of ``data``."""
        fields = cls._unpack(data)
        n = DFT_NUM_COMPONENTS
        frequency, magnitude = fields[:2]
        real = tuple(fields[2 : 2 + n])
        imag = tuple(fields[2 + n : 2 + 2 * n])
        first, last, mid, zero = fields[2 + 2 * n :]
        return cls(frequency, magnitude, real, imag, first, last, mid, zero)


@dataclass(frozen=True)
class TouchMetadataSize(_Packed):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<4I")

    rows: int
    columns: int
    width: int
    height: int

    @classmethod
    def from_bytes(cls, data) -> "TouchMetadataSize":
        """Decode the structure from the start of ``data``."""
        return cls(*cls._unpack(data))


@dataclass(frozen=True)
class TouchMetadataTransform(_Packed):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<6f")

    xx: float
    yx: float
    tx: float
    xy: float
    yy: float
    ty: float

    @classmethod
    def from_bytes(cls, data) -> "TouchMetadataTransform":
        """Decode the structure from the start of ``data``."""
        return cls(*cls._unpack(data))


@dataclass(frozen=True)
class TouchMetadataUnknown(_Packed):
    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<16f")

    unknown: tuple[float, ...]

    @classmethod
    def from_bytes(cls, data) -> "TouchMetadataUnknown":
        """Decode the sixteen unknown floats from the start of ``data``."""
        return cls(tuple(cls._unpack(data)))