"""State machine used while walking a HID report descriptor."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .hid_spec import TagMain


class HidDescriptorError(ValueError):
    """Raised when a HID report descriptor is malformed."""


@dataclass(frozen=True)
class Usage:
    """A usage together with the page it belongs to."""

    page: int
    usage: int


class ReportType(Enum):
    """The direction / kind of a HID report."""

    INPUT = "input"
    OUTPUT = "output"
    FEATURE = "feature"


@dataclass(frozen=True)
class Report:
    """A single field of a HID report as described by the descriptor."""

    type: ReportType
    report_id: Optional[int]
    size: int
    count: int
    usages: frozenset[Usage] = field(default_factory=frozenset)


_REPORT_TYPES = {
    TagMain.INPUT: ReportType.INPUT,
    TagMain.OUTPUT: ReportType.OUTPUT,
    TagMain.FEATURE: ReportType.FEATURE,
}


class ParserState:
    """Global and local item state of a HID descriptor parser."""

    def __init__(self) -> None:
        self.report_id: Optional[int] = None
        self.report_size: Optional[int] = None
        self.report_count: Optional[int] = None

        self.usage: Optional[int] = None
        self.usage_page: Optional[int] = None
        self.usage_min: Optional[int] = None
        self.usage_max: Optional[int] = None

        self.usages: set[Usage] = set()

    def reset_local(self) -> None:
        """Reset all local items to their defaults."""
        self.usages.clear()
        self.usage = None
        self.usage_min = None
        self.usage_max = None

    def reset_global(self) -> None:
        """Reset all global items to their defaults."""
        self.report_id = None
        self.report_count = None
        self.report_size = None
        self.usage_page = None

    def reset(self) -> None:
        """Reset all items to their defaults."""
        self.reset_local()
        self.reset_global()

    def set_report_id(self, report_id: int) -> None:
        self.report_id = report_id

    def set_report_size(self, size: int) -> None:
        """Set the size of the current field, in bits."""
        self.report_size = size

    def set_report_count(self, count: int) -> None:
        """Set how many instances of the current field there are."""
        self.report_count = count

    def _require_page(self) -> int:
        if self.usage_page is None:
            raise HidDescriptorError("HID Descriptor: Usage before Usage Page")
        return self.usage_page

    def _add_range(self, page: int, first: int, last: int) -> None:
        self.usages.update(Usage(page, u) for u in range(first, last + 1))

    def set_usage(self, usage: int) -> None:
        """Add a usage on the current usage page."""
        page = self._require_page()
        self.usages.add(Usage(page, usage))

    def set_usage_page(self, usage_page: int) -> None:
        self.usage_page = usage_page

    def set_usage_min(self, usage_min: int) -> None:
        """Set the lower bound of a usage range, completing it if the upper bound is known."""
        page = self._require_page()

        if self.usage_max is not None:
            self._add_range(page, usage_min, self.usage_max)
            self.usage_max = None
        else:
            self.usage_min = usage_min

    def set_usage_max(self, usage_max: int) -> None:
        """Set the upper bound of a usage range, completing it if the lower bound is known."""
        page = self._require_page()

        if self.usage_min is not None:
            self._add_range(page, self.usage_min, usage_max)
            self.usage_min = None
        else:
            self.usage_max = usage_max

    def get_report(self, tag: TagMain) -> Report:
        """Build a report from the current state and reset the local items."""
        try:
            report_type = _REPORT_TYPES[TagMain(tag)]
        except (KeyError, ValueError):
            raise HidDescriptorError("HID Descriptor: Invalid descriptor type") from None

        if self.report_size is None:
            raise HidDescriptorError("HID Descriptor: Missing report size")

        if self.report_count is None:
            raise HidDescriptorError("HID Descriptor: Missing report count")

        report = Report(
            report_type,
            self.report_id,
            self.report_size,
            self.report_count,
            frozenset(self.usages),
        )

        self.reset_local()
        return report