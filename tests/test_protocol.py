import struct

import pytest

from iptskit.protocol import (
    DFT_NUM_COMPONENTS,
    STYLUS_REPORT_MODE_BIT_BUTTON,
    STYLUS_REPORT_MODE_BIT_CONTACT,
    STYLUS_REPORT_MODE_BIT_PROXIMITY,
    STYLUS_REPORT_MODE_BIT_RUBBER,
    Dimensions,
    Header,
    HeatmapHeader,
    HidFrame,
    PenDftWindow,
    PenDftWindowRow,
    RawFrame,
    RawHeader,
    ReportHeader,
    StylusDataV1,
    StylusDataV2,
    StylusReport,
    Timestamp,
    TouchMetadataSize,
    TouchMetadataTransform,
    TouchMetadataUnknown,
)

TRAILER = b"\xff" * 5


def test_packed_sizes():
    assert Header.from_bytes(bytes(3)) == Header(0, 0)
    assert HidFrame.from_bytes(bytes(7)) == HidFrame(0, 0)
    zeros = (0,) * DFT_NUM_COMPONENTS
    assert PenDftWindowRow.from_bytes(bytes(48)) == PenDftWindowRow(
        0, 0, zeros, zeros, 0, 0, 0, 0
    )
    assert (Header.SIZE, HidFrame.SIZE, PenDftWindowRow.SIZE) == (3, 7, 48)


def test_short_input_raises():
    with pytest.raises(ValueError):
        Header.from_bytes(bytes(2))
    with pytest.raises(ValueError):
        RawHeader.from_bytes(bytes(11))
    with pytest.raises(ValueError):
        RawFrame.from_bytes(bytes(15))
    with pytest.raises(ValueError):
        HidFrame.from_bytes(bytes(6))
    with pytest.raises(ValueError):
        ReportHeader.from_bytes(bytes(3))
    with pytest.raises(ValueError):
        StylusReport.from_bytes(bytes(7))
    with pytest.raises(ValueError):
        StylusDataV2.from_bytes(bytes(15))
    with pytest.raises(ValueError):
        StylusDataV1.from_bytes(bytes(11))
    with pytest.raises(ValueError):
        Dimensions.from_bytes(bytes(7))
    with pytest.raises(ValueError):
        Timestamp.from_bytes(bytes(7))
    with pytest.raises(ValueError):
        HeatmapHeader.from_bytes(bytes(8))
    with pytest.raises(ValueError):
        PenDftWindow.from_bytes(bytes(11))
    with pytest.raises(ValueError):
        PenDftWindowRow.from_bytes(bytes(47))
    with pytest.raises(ValueError):
        TouchMetadataSize.from_bytes(bytes(15))
    with pytest.raises(ValueError):
        TouchMetadataTransform.from_bytes(bytes(23))
    with pytest.raises(ValueError):
        TouchMetadataUnknown.from_bytes(bytes(63))


def test_trailing_data_ignored():
    d = bytes(range(64))
    assert Header.from_bytes(d[:3] + TRAILER) == Header.from_bytes(d[:3])
    assert RawHeader.from_bytes(d[:12] + TRAILER) == RawHeader.from_bytes(d[:12])
    assert RawFrame.from_bytes(d[:16] + TRAILER) == RawFrame.from_bytes(d[:16])
    assert HidFrame.from_bytes(d[:7] + TRAILER) == HidFrame.from_bytes(d[:7])
    assert ReportHeader.from_bytes(d[:4] + TRAILER) == ReportHeader.from_bytes(d[:4])
    assert StylusReport.from_bytes(d[:8] + TRAILER) == StylusReport.from_bytes(d[:8])
    assert StylusDataV2.from_bytes(d[:16] + TRAILER) == StylusDataV2.from_bytes(d[:16])
    assert StylusDataV1.from_bytes(d[:12] + TRAILER) == StylusDataV1.from_bytes(d[:12])
    assert Dimensions.from_bytes(d[:8] + TRAILER) == Dimensions.from_bytes(d[:8])
    assert Timestamp.from_bytes(d[:8] + TRAILER) == Timestamp.from_bytes(d[:8])
    assert HeatmapHeader.from_bytes(d[:9] + TRAILER) == HeatmapHeader.from_bytes(d[:9])
    assert PenDftWindow.from_bytes(d[:12] + TRAILER) == PenDftWindow.from_bytes(d[:12])
    assert PenDftWindowRow.from_bytes(d[:48] + TRAILER) == PenDftWindowRow.from_bytes(
        d[:48]
    )
    assert TouchMetadataSize.from_bytes(
        d[:16] + TRAILER
    ) == TouchMetadataSize.from_bytes(d[:16])
    assert TouchMetadataTransform.from_bytes(
        d[:24] + TRAILER
    ) == TouchMetadataTransform.from_bytes(d[:24])
    assert TouchMetadataUnknown.from_bytes(
        d[:64] + TRAILER
    ) == TouchMetadataUnknown.from_bytes(d[:64])


def test_header():
    h = Header.from_bytes(b"\x25\x34\x12")
    assert (h.report, h.timestamp) == (0x25, 0x1234)


def test_raw_header_skips_reserved():
    h = RawHeader.from_bytes(b"\x01\x00\x00\x00\x02\x00\x00\x00\xaa\xbb\xcc\xdd")
    assert (h.counter, h.frames) == (1, 2)


def test_raw_frame():
    f = RawFrame.from_bytes(b"\x01\x02\x06\x00\x10\x00\x00\x00" + b"\xee" * 8)
    assert (f.index, f.type, f.size) == (0x0201, 6, 0x10)


def test_hid_frame():
    f = HidFrame.from_bytes(b"\x20\x00\x00\x00\x99\xee\x99")
    assert (f.size, f.type) == (0x20, 0xEE)


def test_report_header():
    r = ReportHeader.from_bytes(b"\x60\x01\x40\x00")
    assert (r.type, r.flags, r.size) == (0x60, 1, 0x40)


def test_stylus_report():
    r = StylusReport.from_bytes(b"\x03\x00\x00\x00\x78\x56\x34\x12")
    assert (r.elements, r.serial) == (3, 0x12345678)


def test_stylus_v2_fields_and_mode():
    mode = (1 << STYLUS_REPORT_MODE_BIT_PROXIMITY) | (1 << STYLUS_REPORT_MODE_BIT_BUTTON)
    data = struct.pack("<7H2x", 11, mode, 100, 200, 300, 400, 500)
    s = StylusDataV2.from_bytes(data)
    assert (s.timestamp, s.x, s.y, s.pressure, s.altitude, s.azimuth) == (
        11, 100, 200, 300, 400, 500,
    )
    assert s.proximity and s.button
    assert not s.contact and not s.rubber


def test_stylus_v1_fields_and_mode():
    mode = (1 << STYLUS_REPORT_MODE_BIT_CONTACT) | (1 << STYLUS_REPORT_MODE_BIT_RUBBER)
    data = b"\x00" * 4 + struct.pack("<BHHHx", mode, 10, 20, 30)
    s = StylusDataV1.from_bytes(data)
    assert (s.x, s.y, s.pressure) == (10, 20, 30)
    assert s.contact and s.rubber
    assert not s.proximity and not s.button


def test_dimensions():
    d = Dimensions.from_bytes(bytes([44, 64, 0, 43, 0, 63, 0, 255]))
    assert (d.height, d.width, d.y_max, d.x_max, d.z_max) == (44, 64, 43, 63, 255)


def test_timestamp():
    t = Timestamp.from_bytes(b"\xff\xff\x05\x00\x01\x00\x00\x00")
    assert (t.count, t.timestamp) == (5, 1)


def test_heatmap_header():
    h = HeatmapHeader.from_bytes(b"\x00" * 5 + b"\x00\x0b\x00\x00")
    assert h.size == 0x0B00


def test_pen_dft_window():
    data = struct.pack("<I", 1000) + bytes([3, 7, 0, 0, 0, 6, 0, 0])
    w = PenDftWindow.from_bytes(data)
    assert (w.timestamp, w.num_rows, w.seq_num, w.data_type) == (1000, 3, 7, 6)


def test_pen_dft_window_row():
    real = tuple(range(-4, 5))
    imag = tuple(range(10, 19))
    data = struct.pack(
        f"<II{DFT_NUM_COMPONENTS}h{DFT_NUM_COMPONENTS}hbbbb",
        1234, 5678, *real, *imag, -1, 2, -3, 4,
    )
    row = PenDftWindowRow.from_bytes(data)
    assert row.real == real
    assert row.imag == imag
    assert (row.frequency, row.magnitude) == (1234, 5678)
    assert (row.first, row.last, row.mid, row.zero) == (-1, 2, -3, 4)


def test_touch_metadata_size():
    s = TouchMetadataSize.from_bytes(struct.pack("<4I", 44, 64, 25978, 17319))
    assert (s.rows, s.columns, s.width, s.height) == (44, 64, 25978, 17319)


def test_touch_metadata_transform():
    values = (-1.0, 0.0, 9600.0, 0.0, 1.0, 0.0)
    t = TouchMetadataTransform.from_bytes(struct.pack("<6f", *values))
    assert (t.xx, t.yx, t.tx, t.xy, t.yy, t.ty) == values


def test_touch_metadata_unknown():
    values = tuple(float(i) for i in range(16))
    u = TouchMetadataUnknown.from_bytes(struct.pack("<16f", *values))
    assert u.unknown == values


def test_accepts_bytearray_and_memoryview():
    raw = b"\x25\x34\x12"
    assert Header.from_bytes(bytearray(raw)) == Header.from_bytes(memoryview(raw))