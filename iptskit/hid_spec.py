"""Constants and enumerations for HID report descriptor short items."""

from __future__ import annotations

from enum import IntEnum
from typing import NamedTuple

BITS_TAG = 0b11110000
BITS_TYPE = 0b00001100
BITS_SIZE = 0b00000011

SHIFT_TAG = 4
SHIFT_TYPE = 2
SHIFT_SIZE = 0

# The two size bits encode 0, 1, 2 or 4 bytes of item data.
_SIZE_BYTES = (0, 1, 2, 4)


class ItemType(IntEnum):
    """Type of a short item (HID 6.2.2.2)."""

    MAIN = 0
    GLOBAL = 1
    LOCAL = 2
    RESERVED = 3


class TagMain(IntEnum):
    """Tags of main items (HID 6.2.2.4)."""

    INPUT = 0b1000
    OUTPUT = 0b1001
    FEATURE = 0b1011
    COLLECTION = 0b1010
    END_COLLECTION = 0b1100


class TagGlobal(IntEnum):
    """Tags of the global items that are of interest."""

    USAGE_PAGE = 0b0000
    REPORT_SIZE = 0b0111
    REPORT_ID = 0b1000
    REPORT_COUNT = 0b1001


class TagLocal(IntEnum):
    """Tags of the local items that are of interest."""

    USAGE = 0b0000
    USAGE_MINIMUM = 0b0001
    USAGE_MAXIMUM = 0b0010


class ItemPrefix(NamedTuple):
    """The decoded prefix byte of a short item."""

    tag: int
    type: ItemType
    size: int


def decode_prefix(prefix: int) -> ItemPrefix:
    """Split a short item prefix byte into tag, type and data size in bytes."""
    if not 0 <= prefix <= 0xFF:
        raise ValueError(f"HID Descriptor: prefix {prefix} is not a byte")

    tag = (prefix & BITS_TAG) >> SHIFT_TAG
    item_type = ItemType((prefix & BITS_TYPE) >> SHIFT_TYPE)
    size = _SIZE_BYTES[(prefix & BITS_SIZE) >> SHIFT_SIZE]

    return ItemPrefix(tag, item_type, size)