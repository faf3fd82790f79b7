"""IPTS touchscreen data tools: HID descriptor state, protocol structures, Gaussian contact fitting, contact validation, config loading and stylus events."""

__version__ = "0.1.0"