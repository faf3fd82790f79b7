"""Loading of daemon configuration from INI files."""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

PathLike = Union[str, "os.PathLike[str]"]

DEFAULT_PRESET_DIRS: tuple[str, ...] = ("/usr/share/iptsd", "./etc/presets")
DEFAULT_CONFIG_FILE = "/etc/iptsd.conf"
DEFAULT_CONFIG_DIR = "/etc/iptsd.d"

CONFIG_FILE_ENV = "IPTSD_CONFIG_FILE"

_TRUE = frozenset({"true", "yes", "on", "1"})
_FALSE = frozenset({"false", "no", "off", "0"})


class ConfigError(ValueError):
    """Raised when a configuration file cannot be read or parsed."""


@dataclass
class Config:
    """Options that tune how touch and stylus data is processed."""

    invert_x: bool = False
    invert_y: bool = False
    width: float = 0.0
    height: float = 0.0

    touch_disable: bool = False
    touch_disable_on_palm: bool = False
    touch_disable_on_stylus: bool = False
    touch_overshoot: float = 0.0

    contacts_neutral: str = "mode"
    contacts_neutral_value: float = 0.0
    contacts_activation_threshold: float = 0.0
    contacts_deactivation_threshold: float = 0.0
    contacts_size_thresh_min: float = 0.0
    contacts_size_thresh_max: float = 0.0
    contacts_position_thresh_min: float = 0.0
    contacts_position_thresh_max: float = 0.0
    contacts_orientation_thresh_min: float = 0.0
    contacts_orientation_thresh_max: float = 0.0
    contacts_size_min: float = 0.0
    contacts_size_max: float = 0.0
    contacts_aspect_min: float = 0.0
    contacts_aspect_max: float = 0.0

    stylus_disable: bool = False
    stylus_tip_distance: float = 0.0

    dft_position_min_amp: float = 0.0
    dft_position_min_mag: float = 0.0
    dft_position_exp: float = 0.0
    dft_button_min_mag: float = 0.0
    dft_freq_min_mag: float = 0.0
    dft_tilt_min_mag: float = 0.0
    dft_tilt_distance: float = 0.0


# (section, option, attribute) in the order they are applied.
_OPTIONS: tuple[tuple[str, str, str], ...] = (
    ("Config", "InvertX", "invert_x"),
    ("Config", "InvertY", "invert_y"),
    ("Config", "Width", "width"),
    ("Config", "Height", "height"),
    ("Touch", "Disable", "touch_disable"),
    ("Touch", "DisableOnPalm", "touch_disable_on_palm"),
    ("Touch", "DisableOnStylus", "touch_disable_on_stylus"),
    ("Touch", "Overshoot", "touch_overshoot"),
    ("Contacts", "Neutral", "contacts_neutral"),
    ("Contacts", "NeutralValue", "contacts_neutral_value"),
    ("Contacts", "ActivationThreshold", "contacts_activation_threshold"),
    ("Contacts", "DeactivationThreshold", "contacts_deactivation_threshold"),
    ("Contacts", "SizeThresholdMin", "contacts_size_thresh_min"),
    ("Contacts", "SizeThresholdMax", "contacts_size_thresh_max"),
    ("Contacts", "PositionThresholdMin", "contacts_position_thresh_min"),
    ("Contacts", "PositionThresholdMax", "contacts_position_thresh_max"),
    ("Contacts", "OrientationThresholdMin", "contacts_orientation_thresh_min"),
    ("Contacts", "OrientationThresholdMax", "contacts_orientation_thresh_max"),
    ("Contacts", "SizeMin", "contacts_size_min"),
    ("Contacts", "SizeMax", "contacts_size_max"),
    ("Contacts", "AspectMin", "contacts_aspect_max"),
    ("Contacts", "AspectMax", "contacts_aspect_max"),
    ("Stylus", "Disable", "stylus_disable"),
    ("Stylus", "TipDistance", "stylus_tip_distance"),
    ("DFT", "PositionMinAmp", "dft_position_min_amp"),
    ("DFT", "PositionMinMag", "dft_position_min_mag"),
    ("DFT", "PositionExp", "dft_position_exp"),
    ("DFT", "ButtonMinMag", "dft_button_min_mag"),
    ("DFT", "FreqMinMag", "dft_freq_min_mag"),
    ("DFT", "TiltMinMag", "dft_tilt_min_mag"),
    ("DFT", "TiltDistance", "dft_tilt_distance"),
    # Legacy options kept for compatibility.
    ("DFT", "TipDistance", "stylus_tip_distance"),
    ("Contacts", "SizeThreshold", "contacts_size_thresh_max"),
)


def _read_ini(path: PathLike) -> dict[str, dict[str, str]]:
    """Parse an INI file into a mapping with lower case section and option names."""
    parser = configparser.ConfigParser(
        interpolation=None,
        strict=False,
        inline_comment_prefixes=(";",),
    )
    try:
        with open(path, encoding="utf-8") as fp:
            parser.read_file(fp)
    except (OSError, UnicodeDecodeError, configparser.Error) as exc:
        raise ConfigError(f"Failed to parse {os.fspath(path)}") from exc

    sections: dict[str, dict[str, str]] = {}
    for name in parser.sections():
        target = sections.setdefault(name.lower(), {})
        for key, value in parser.items(name, raw=True):
            target[key.lower()] = value
    return sections


def _parse_int(text: str) -> Optional[int]:
    """Parse an integer with an optional sign and 0x / leading-zero octal prefix."""
    s = text.strip()
    sign = 1
    if s[:1] in "+-" and s:
        sign = -1 if s[0] == "-" else 1
        s = s[1:]
    if not s:
        return None
    try:
        if s[:2].lower() == "0x":
            value = int(s[2:], 16)
        elif len(s) > 1 and s[0] == "0":
            value = int(s[1:], 8)
        else:
            value = int(s, 10)
    except ValueError:
        return None
    return sign * value


def _parse_float(text: str) -> Optional[float]:
    try:
        return float(text.strip())
    except ValueError:
        return None


def _parse_bool(text: str) -> Optional[bool]:
    lowered = text.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    return None


def _get(ini: Mapping[str, Mapping[str, str]], section: str, name: str, default: Any) -> Any:
    """Read an option, converted to the type of ``default``; fall back to ``default``."""
    raw = ini.get(section.lower(), {}).get(name.lower())
    if raw is None:
        return default

    if isinstance(default, bool):
        parsed = _parse_bool(raw)
    elif isinstance(default, int):
        parsed = _parse_int(raw)
    elif isinstance(default, float):
        parsed = _parse_float(raw)
    elif isinstance(default, str):
        parsed = raw
    else:
        raise TypeError(f"Loading values of type {type(default).__name__} is not supported")

    return default if parsed is None else parsed


def _to_u16(value: int, what: str) -> int:
    if not 0 <= value <= 0xFFFF:
        raise ConfigError(f"{what} {value} is out of range")
    return value


class ConfigLoader:
    """Collects the configuration that applies to one device."""

    def __init__(
        self,
        vendor: int,
        product: int,
        metadata: Any = None,
        *,
        preset_dirs: Iterable[PathLike] = DEFAULT_PRESET_DIRS,
        config_file: PathLike = DEFAULT_CONFIG_FILE,
        config_dir: PathLike = DEFAULT_CONFIG_DIR,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.vendor = vendor
        self.product = product
        self._config = Config()

        if metadata is not None:
            self._config.width = float(metadata.size.width) / 1e3
            self._config.height = float(metadata.size.height) / 1e3
            self._config.invert_x = metadata.transform.xx < 0
            self._config.invert_y = metadata.transform.yy < 0

        for directory in preset_dirs:
            self.load_dir(directory, True)

        env = os.environ if environ is None else environ

        # A custom file replaces the system configuration entirely.
        custom = env.get(CONFIG_FILE_ENV)
        if custom:
            self.load_file(custom)
            return

        if Path(config_file).exists():
            self.load_file(config_file)

        self.load_dir(config_dir, False)

    @property
    def config(self) -> Config:
        """A copy of the configuration loaded for the device."""
        return replace(self._config)

    def load_dir(self, path: PathLike, check_device: bool) -> None:
        """Load every regular file of a directory, optionally only those for this device."""
        directory = Path(path)
        if not directory.exists():
            return

        for entry in sorted(directory.iterdir()):
            if not entry.is_file():
                continue

            if check_device:
                vendor, product = self.load_device(entry)
                if (vendor, product) != (self.vendor, self.product):
                    continue

            self.load_file(entry)

    def load_device(self, path: PathLike) -> tuple[int, int]:
        """Return the vendor and product IDs a config file is meant for."""
        ini = _read_ini(path)
        vendor = _to_u16(_get(ini, "Device", "Vendor", 0), "Vendor")
        product = _to_u16(_get(ini, "Device", "Product", 0), "Product")
        return vendor, product

    def load_file(self, path: PathLike) -> None:
        """Apply the options of a single config file."""
        ini = _read_ini(path)
        for section, name, attribute in _OPTIONS:
            current = getattr(self._config, attribute)
            setattr(self._config, attribute, _get(ini, section, name, current))