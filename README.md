# iptskit

Python building blocks for working with data from Intel Precise Touch & Stylus
(IPTS) touchscreens. It is a library only; it installs no commands.

## Installation

```
pip install iptskit
```

To run the tests:

```
pip install "iptskit[test]"
pytest
```

## Modules

- `iptskit.hid_spec` – HID short-item constants (`BITS_TAG`, `SHIFT_TAG`, ...),
  the enumerations `ItemType`, `TagMain`, `TagGlobal` and `TagLocal`, and
  `decode_prefix(prefix)`, which splits an item prefix byte into an
  `ItemPrefix(tag, type, size)` with the size in bytes (0, 1, 2 or 4). A value
  outside 0–255 raises `ValueError`.
- `iptskit.parser_state` – `ParserState`, the global/local item state used
  while walking a HID report descriptor. `set_usage_min` / `set_usage_max`
  expand usage ranges once both bounds are known. `get_report(tag)` builds a
  frozen `Report` (a `ReportType`, report id, size, count and a frozenset of
  `Usage(page, usage)`) and resets the local items. A usage before a usage
  page, a tag that is not Input/Output/Feature, or a missing report size or
  count raises `HidDescriptorError` (a `ValueError`).
- `iptskit.protocol` – protocol constants (frame types, report types, stylus
  mode bits, DFT ids, coordinate limits) and frozen dataclasses for the packed
  little-endian wire structures: `Header`, `RawHeader`, `RawFrame`, `HidFrame`,
  `ReportHeader`, `StylusReport`, `StylusDataV1`, `StylusDataV2`, `Dimensions`,
  `Timestamp`, `HeatmapHeader`, `PenDftWindow`, `PenDftWindowRow`,
  `TouchMetadataSize`, `TouchMetadataTransform` and `TouchMetadataUnknown`.
  Each has a `SIZE` and a `from_bytes(data)` class method that decodes from the
  start of a bytes-like object and raises `ValueError` if it is too short.
  The stylus data classes expose `proximity`, `contact`, `button` and `rubber`
  decoded from their `mode` field.
- `iptskit.gaussian` – iterative Gaussian fitting of ellipses onto clusters of
  a heatmap, using numpy. `Box` is an inclusive pixel box, `Parameters` holds
  one Gaussian (`valid`, `scale`, `mean`, `prec`, `bounds`, `weights`).
  `fit(params, data, tmp, iterations)` updates the parameters in place and
  marks degenerate fits invalid. The helpers `gaussian_like`,
  `assemble_system`, `ge_solve` (Gaussian elimination with partial pivoting,
  returning `None` on a too small pivot), `extract_params` and
  `update_weight_maps` are public too.
- `iptskit.validation` – `Validator` and `ValidationConfig`.
  `Validator.validate(frame)` sets `valid` on each contact of a frame, judging
  by size limits, aspect-ratio limits and, with `track_validity`, whether the
  contact with the same index was invalid in the previous frame. Contacts are
  any objects with `index`, `size`, `stable` and `valid` attributes; unstable
  contacts are always valid. `find_in_frame(index, frame)` looks a contact up
  by index; `reset()` forgets the previous frame.
- `iptskit.config_loader` – `Config`, a dataclass of all tuning options, and
  `ConfigLoader(vendor, product, metadata=None, *, preset_dirs, config_file,
  config_dir, environ)`. It applies preset files whose `[Device]` `Vendor` and
  `Product` match, then either the file named by the `IPTSD_CONFIG_FILE`
  environment variable alone, or the system config file followed by every file
  in the config directory. The result is available as `loader.config`.
  Unreadable or unparsable files raise `ConfigError`.
- `iptskit.stylus` – `StylusData` (normalized stylus state),
  `calculate_tilt(altitude, azimuth)` (tilt in hundredths of a degree) and
  `StylusDevice(width, height, vendor=0, product=0, sink=None)`, which turns
  each `update(data)` into Linux input events (`InputEvent(type, code, value)`)
  for touch, tool, button, position, pressure, timestamp and tilt, ending with
  a sync event. It also describes its capabilities (`evbits`, `keybits`,
  `propbits`, `absinfo`) and supports `enable()`, `disable()`, `enabled()` and
  `active()`.

## Example

```python
from iptskit.hid_spec import TagMain
from iptskit.parser_state import ParserState

state = ParserState()
state.set_usage_page(0x000D)
state.set_usage(0x56)
state.set_usage(0x61)
state.set_report_size(8)
state.set_report_count(1)

report = state.get_report(TagMain.INPUT)
print(report.type, sorted(u.usage for u in report.usages))
```

```python
from iptskit.stylus import StylusData, StylusDevice

stylus = StylusDevice(width=0.26, height=0.17)
stylus.update(StylusData(proximity=True, contact=True, x=0.5, y=0.5, pressure=0.3))
for event in stylus.events:
    print(event)
```

## What it does not do

- It does not open hidraw devices or read touch data from them, and it does
  not walk whole HID descriptors; `ParserState` is the state a walker would
  use.
- It does not create a kernel input device. `StylusDevice` only produces
  `InputEvent` values, collected in `events` or passed to a `sink` callable.
- It has no full contact detection pipeline (neutral value estimation,
  blurring, cluster spanning) and no touch input handling; it provides the
  Gaussian fitting and the validation steps.
- It provides no daemon, calibration or visualization commands.